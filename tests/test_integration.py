"""End-to-end tests against the live Copernicus Data Space Ecosystem.

Searches hit the public catalogue; downloads need SENTINEL_EXPLORER_USER and
SENTINEL_EXPLORER_PASS in the environment or the .env file.
"""

from datetime import datetime

import pytest
from conftest import SCENE_ID, SCENE_NAME

from sentinel_explorer import BoundingBox, download_scene, get_access_token, get_scene_id, search
from sentinel_explorer.errors import InvalidArgument

DATES = (datetime(2020, 8, 4), datetime(2020, 8, 5))
ROI = BoundingBox((52.1, -114.4), (51.9, -114.1))


@pytest.mark.integration
@pytest.mark.slow
class TestLiveCatalogue:
    """Searches and lookups on the public catalogue."""

    def test_search_by_region(self):
        scenes = search("SENTINEL-2", product="L2A", dates=DATES, geometry=ROI)
        names = [s.name for s in scenes]
        assert any(name.startswith("S2B_MSIL2A_20200804T183919") and "_T11UPT_" in name for name in names)

    def test_search_by_tile(self):
        scenes = search("SENTINEL-2", product="L2A", dates=DATES, tile="11UPT")
        assert scenes, "The 11UPT tile should have an L2A scene on 2020-08-04"
        assert all("_T11UPT_" in s.name for s in scenes)
        assert all(s.cloud_cover is not None for s in scenes)

    def test_search_with_clouds(self):
        scenes = search("SENTINEL-2", product="L2A", dates=DATES, geometry=ROI, clouds=100)
        assert all(s.cloud_cover < 100 for s in scenes)

    def test_get_scene_id(self):
        assert get_scene_id(SCENE_NAME) == SCENE_ID

    def test_get_scene_id_unknown(self):
        with pytest.raises(InvalidArgument):
            get_scene_id("foo")


@pytest.mark.integration
@pytest.mark.requires_credentials
@pytest.mark.slow
class TestLiveDownload:
    """Full scene retrieval, roughly one gigabyte."""

    def test_download_and_unpack(self, copernicus_credentials, tmp_path):
        token = get_access_token(copernicus_credentials["username"], copernicus_credentials["password"])
        assert token is not None, "Authentication should succeed"

        path = download_scene(SCENE_NAME, token, destination=tmp_path, unpack=True)

        assert path.is_dir()
        assert path.name.startswith(SCENE_NAME)
        assert (path / "manifest.safe").exists()
        assert not list(tmp_path.glob("*.zip"))
