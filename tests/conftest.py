"""Pytest configuration and shared fixtures."""

import json
import logging
import os
import zipfile
from pathlib import Path
from unittest.mock import Mock

import pytest
from dotenv import load_dotenv

from sentinel_explorer.config import reset_settings
from sentinel_explorer.progress.events import EventBus, use_bus

log = logging.getLogger(__name__)

# credentials for the live tests may live in a local .env file
load_dotenv()

ASSETS_DIR = Path(__file__).parent / "assets"
SCENE_NAME = "S2B_MSIL2A_20200804T183919_N0500_R070_T11UPT_20230321T050221"
SCENE_ID = "29f0eaaf-0b15-412b-9597-16c16d4d79c6"


def pytest_addoption(parser):
    parser.addoption("--slow", action="store_true", default=False, help="Run slow tests")


def pytest_collection_modifyitems(config, items):
    if config.getoption("--slow"):
        # --slow given in cli: do not skip slow tests
        return
    skip_slow = pytest.mark.skip(reason="Marked as slow, skipping")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture(autouse=True)
def fresh_settings():
    """Make sure every test reads settings from a clean state."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def captured_events():
    """Route progress events to a private bus and collect them."""
    events = []
    bus = EventBus()
    bus.subscribe(events.append)
    with use_bus(bus):
        yield events


@pytest.fixture(scope="session")
def copernicus_credentials():
    """Provide Copernicus Data Space credentials from environment."""
    username = os.getenv("SENTINEL_EXPLORER_USER")
    password = os.getenv("SENTINEL_EXPLORER_PASS")

    if not username or not password:
        pytest.skip("SENTINEL_EXPLORER_USER and SENTINEL_EXPLORER_PASS must be set in .env")

    return {"username": username, "password": password}


@pytest.fixture(scope="session")
def roi_feature() -> dict:
    """Region of interest around the 11UPT tile, GeoJSON (lon, lat) coordinates."""
    collection = json.loads((ASSETS_DIR / "roi.geojson").read_text())
    return collection["features"][0]


@pytest.fixture
def catalogue_product() -> dict:
    """A single catalogue entry, as returned with `$expand=Attributes`."""
    return {
        "@odata.mediaContentType": "application/octet-stream",
        "Id": SCENE_ID,
        "Name": f"{SCENE_NAME}.SAFE",
        "ContentType": "application/octet-stream",
        "ContentLength": 1143365394,
        "OriginDate": "2023-03-21T07:11:47.153Z",
        "PublicationDate": "2023-03-21T07:34:39.893Z",
        "ModificationDate": "2023-03-21T07:36:05.036Z",
        "Online": True,
        "ContentDate": {"Start": "2020-08-04T18:39:19.024Z", "End": "2020-08-04T18:39:19.024Z"},
        "Attributes": [
            {
                "@odata.type": "#OData.CSC.StringAttribute",
                "Name": "tileId",
                "Value": "11UPT",
                "ValueType": "String",
            },
            {
                "@odata.type": "#OData.CSC.DoubleAttribute",
                "Name": "cloudCover",
                "Value": 12.345,
                "ValueType": "Double",
            },
        ],
    }


def make_response(status_code: int = 200, payload: dict | None = None, text: str = "") -> Mock:
    response = Mock()
    response.status_code = status_code
    response.json = Mock(return_value=payload if payload is not None else {})
    response.text = text or json.dumps(payload or {})
    return response


@pytest.fixture
def catalogue_session():
    """A mocked requests session, configure `session.get.return_value` per test."""
    session = Mock()
    session.get = Mock(return_value=make_response(payload={"value": []}))
    return session


def build_archive(path: Path, entries: dict[str, bytes | None]) -> Path:
    """Write a zip archive, `None` values become directory entries."""
    with zipfile.ZipFile(path, "w") as archive:
        for name, content in entries.items():
            if content is None:
                archive.writestr(zipfile.ZipInfo(name), b"")
            else:
                archive.writestr(name, content)
    return path


@pytest.fixture
def scene_archive(tmp_path) -> Path:
    """A small archive laid out like a SAFE product."""
    source_dir = tmp_path / "source"
    source_dir.mkdir()
    return build_archive(
        source_dir / f"{SCENE_NAME}.SAFE.zip",
        {
            f"{SCENE_NAME}.SAFE/": None,
            f"{SCENE_NAME}.SAFE/manifest.safe": b"<manifest/>",
            f"{SCENE_NAME}.SAFE/GRANULE/L2A_T11UPT/IMG_DATA/R10m/B02.jp2": b"\x00\x01\x02\x03",
            f"{SCENE_NAME}.SAFE/MTD_MSIL2A.xml": b"<metadata/>",
        },
    )
