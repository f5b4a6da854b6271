import logging
from pathlib import Path

from sentinel_explorer.catalogue import CatalogueClient
from sentinel_explorer.config import get_settings
from sentinel_explorer.downloaders import Downloader, HTTPDownloader
from sentinel_explorer.errors import NotFound
from sentinel_explorer.utils import extract_zip

log = logging.getLogger(__name__)


def archive_url(download_url: str, scene_id: str) -> str:
    return f"{download_url.rstrip('/')}({scene_id})/$value"


def archive_base_name(archive: Path) -> str:
    """File name without the trailing `.zip`, e.g. `S2B_...SAFE.zip` -> `S2B_...SAFE`."""
    name = archive.name
    return name[: -len(".zip")] if name.lower().endswith(".zip") else archive.stem


def retrieve_scene(
    scene_name: str,
    access_token: str,
    destination: Path | str | None = None,
    unpack: bool = False,
    client: CatalogueClient | None = None,
    downloader: Downloader | None = None,
) -> Path:
    """Download the requested Sentinel scene using the provided access token.

    Args:
        scene_name (str): name of the Sentinel scene to download.
        access_token (str): token returned by a previous call to `get_access_token`.
        destination (Path | str | None, optional): destination directory. Defaults to the working directory.
        unpack (bool, optional): extract the archive and delete it afterwards. Defaults to False.
        client (CatalogueClient | None, optional): catalogue client, built from settings when omitted.
        downloader (Downloader | None, optional): downloader, built from settings when omitted.

    Raises:
        InvalidArgument: when the scene name cannot be resolved.
        RemoteError: when the archive service answers with a non-success status.
        NotFound: when the extracted archive has no entry named after it.

    Returns:
        Path: the downloaded archive, or the extracted top-level directory when unpacking.

    Example:
        >>> token = get_access_token()
        >>> retrieve_scene("S2B_MSIL2A_20200804T183919_N0500_R070_T11UPT_20230321T050221", token, unpack=True)
        PosixPath('.../S2B_MSIL2A_20200804T183919_N0500_R070_T11UPT_20230321T050221.SAFE')
    """
    settings = get_settings()
    destination = Path(destination) if destination is not None else Path.cwd()
    client = client or CatalogueClient.from_settings()
    scene_id = client.resolve_id(scene_name)

    request = {
        "uri": archive_url(settings.download_url, scene_id),
        "destination": destination,
        "item_id": scene_name,
        "access_token": access_token,
        "filename": f"{scene_name}.zip",
    }
    if downloader is not None:
        archive = downloader.download(**request)
    else:
        with HTTPDownloader(chunk_size=settings.chunk_size, timeout=settings.timeout) as owned:
            archive = owned.download(**request)
    log.info("Downloaded %s to %s", scene_name, archive)

    if not unpack:
        return archive

    entries = extract_zip(archive, destination, item_id=scene_name)
    archive.unlink()
    base_name = archive_base_name(archive)
    for entry in entries:
        if base_name in entry:
            extracted = destination / entry
            log.info("Extracted %s to %s", scene_name, extracted)
            return extracted
    raise NotFound(f"Resource not found: no entry matching '{base_name}' in the extracted archive")


download_scene = retrieve_scene
