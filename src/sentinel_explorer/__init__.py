"""sentinel-explorer: search and download Copernicus Sentinel scenes.

The library talks to the Copernicus Data Space Ecosystem: searches are translated
into OData filters for the product catalogue, scene names are resolved to catalogue
identifiers, and archives are streamed from the download service with a bearer token.

Example:
    >>> from datetime import datetime
    >>> from sentinel_explorer import BoundingBox, download_scene, get_access_token, search
    >>>
    >>> scenes = search(
    ...     "SENTINEL-2",
    ...     product="L2A",
    ...     geometry=BoundingBox((52.1, -114.4), (51.9, -114.1)),
    ...     dates=(datetime(2020, 8, 4), datetime(2020, 8, 5)),
    ... )
    >>> token = get_access_token()
    >>> download_scene(scenes[0].name, token, destination="data", unpack=True)
"""

from sentinel_explorer.auth import get_access_token
from sentinel_explorer.catalogue import CatalogueClient, get_scene_id, search
from sentinel_explorer.errors import (
    EmptyResult,
    ErrorKind,
    InvalidArgument,
    MalformedGeometry,
    NotFound,
    RemoteError,
    SentinelExplorerError,
    UnsupportedGeometry,
)
from sentinel_explorer.geometry import to_wkt
from sentinel_explorer.model import BoundingBox, Point, SceneRecord
from sentinel_explorer.query import SearchParams, build_filter
from sentinel_explorer.retrieval import download_scene, retrieve_scene

__all__ = [
    "BoundingBox",
    "CatalogueClient",
    "EmptyResult",
    "ErrorKind",
    "InvalidArgument",
    "MalformedGeometry",
    "NotFound",
    "Point",
    "RemoteError",
    "SceneRecord",
    "SearchParams",
    "SentinelExplorerError",
    "UnsupportedGeometry",
    "build_filter",
    "download_scene",
    "get_access_token",
    "get_scene_id",
    "retrieve_scene",
    "search",
    "to_wkt",
]
