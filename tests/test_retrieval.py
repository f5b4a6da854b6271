"""Unit tests for the archive retrieval pipeline, with a stub catalogue and downloader."""

import shutil
from pathlib import Path
from unittest.mock import Mock

import pytest
from conftest import SCENE_ID, SCENE_NAME, build_archive

from sentinel_explorer.downloaders import Downloader
from sentinel_explorer.errors import ErrorKind, NotFound, RemoteError
from sentinel_explorer.retrieval import archive_base_name, archive_url, retrieve_scene


class CopyDownloader(Downloader):
    """Downloader serving a local archive instead of the remote one."""

    def __init__(self, archive: Path, keep_name: bool = True):
        self.archive = archive
        self.keep_name = keep_name
        self.calls = []
        self.closed = False

    def init(self, **kwargs) -> None:
        pass

    def download(self, uri, destination, item_id, access_token, filename=None) -> Path:
        self.calls.append({"uri": uri, "item_id": item_id, "access_token": access_token, "filename": filename})
        destination.mkdir(parents=True, exist_ok=True)
        target = destination / (self.archive.name if self.keep_name else filename)
        shutil.copyfile(self.archive, target)
        return target

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def client():
    client = Mock()
    client.resolve_id.return_value = SCENE_ID
    return client


class TestArchiveNames:
    def test_archive_url(self):
        assert archive_url("https://zipper.example.com/odata/v1/Products", SCENE_ID) == (
            f"https://zipper.example.com/odata/v1/Products({SCENE_ID})/$value"
        )
        assert archive_url("https://zipper.example.com/odata/v1/Products/", "abc").endswith("Products(abc)/$value")

    @pytest.mark.parametrize(
        "name, expected",
        [
            (f"{SCENE_NAME}.SAFE.zip", f"{SCENE_NAME}.SAFE"),
            (f"{SCENE_NAME}.ZIP", SCENE_NAME),
            (f"{SCENE_NAME}.tar", SCENE_NAME),
        ],
    )
    def test_archive_base_name(self, name, expected):
        assert archive_base_name(Path(name)) == expected


class TestRetrieveScene:
    """Test download and unpacking of a scene archive."""

    def test_download_only(self, client, scene_archive, tmp_path):
        downloader = CopyDownloader(scene_archive)
        destination = tmp_path / "downloads"

        result = retrieve_scene(SCENE_NAME, "token", destination=destination, client=client, downloader=downloader)

        assert result == destination / f"{SCENE_NAME}.SAFE.zip"
        assert result.exists()
        client.resolve_id.assert_called_once_with(SCENE_NAME)
        call = downloader.calls[0]
        assert call["uri"].endswith(f"Products({SCENE_ID})/$value")
        assert call["access_token"] == "token"
        assert call["filename"] == f"{SCENE_NAME}.zip"

    def test_unpack(self, client, scene_archive, tmp_path):
        """Unpacking returns the top-level directory and deletes the archive."""
        destination = tmp_path / "downloads"

        result = retrieve_scene(
            SCENE_NAME,
            "token",
            destination=destination,
            unpack=True,
            client=client,
            downloader=CopyDownloader(scene_archive),
        )

        assert result == destination / f"{SCENE_NAME}.SAFE"
        assert result.is_dir()
        assert (result / "manifest.safe").read_bytes() == b"<manifest/>"
        assert (result / "GRANULE" / "L2A_T11UPT" / "IMG_DATA" / "R10m" / "B02.jp2").exists()
        assert not (destination / f"{SCENE_NAME}.SAFE.zip").exists()

    def test_unpack_with_fallback_name(self, client, scene_archive, tmp_path):
        """The base name of the fallback `<scene>.zip` also matches the SAFE directory."""
        result = retrieve_scene(
            SCENE_NAME,
            "token",
            destination=tmp_path,
            unpack=True,
            client=client,
            downloader=CopyDownloader(scene_archive, keep_name=False),
        )

        assert result == tmp_path / f"{SCENE_NAME}.SAFE"
        assert not (tmp_path / f"{SCENE_NAME}.zip").exists()

    def test_unpack_without_matching_entry(self, client, tmp_path):
        source = tmp_path / "source"
        source.mkdir()
        archive = build_archive(source / f"{SCENE_NAME}.SAFE.zip", {"other/readme.txt": b"hello"})
        destination = tmp_path / "downloads"

        with pytest.raises(NotFound) as error:
            retrieve_scene(
                SCENE_NAME,
                "token",
                destination=destination,
                unpack=True,
                client=client,
                downloader=CopyDownloader(archive),
            )

        assert error.value.kind == ErrorKind.NOT_FOUND
        assert (destination / "other" / "readme.txt").exists()
        assert not (destination / f"{SCENE_NAME}.SAFE.zip").exists()

    def test_download_failure_propagates(self, client, tmp_path):
        downloader = Mock(spec=Downloader)
        downloader.download.side_effect = RemoteError("Download failed", status_code=401, body="Unauthorized")

        with pytest.raises(RemoteError) as error:
            retrieve_scene(SCENE_NAME, "expired", destination=tmp_path, client=client, downloader=downloader)

        assert error.value.status_code == 401
        # caller-owned downloaders are left open
        downloader.close.assert_not_called()

    def test_default_destination_is_cwd(self, client, scene_archive, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        result = retrieve_scene(SCENE_NAME, "token", client=client, downloader=CopyDownloader(scene_archive))

        assert result == tmp_path / f"{SCENE_NAME}.SAFE.zip"

    def test_owned_downloader_is_closed(self, client, scene_archive, tmp_path, monkeypatch):
        downloader = CopyDownloader(scene_archive)
        monkeypatch.setattr("sentinel_explorer.retrieval.HTTPDownloader", lambda **kwargs: downloader)

        retrieve_scene(SCENE_NAME, "token", destination=tmp_path, client=client)

        assert downloader.closed is True
