import logging
import re
from datetime import datetime, timedelta
from typing import Any

import requests
from requests.adapters import HTTPAdapter

from sentinel_explorer.config import get_settings
from sentinel_explorer.errors import EmptyResult, InvalidArgument, RemoteError
from sentinel_explorer.geometry import AxisOrder
from sentinel_explorer.model import SceneRecord
from sentinel_explorer.query import SearchParams, date_range_filter, name_filter

log = logging.getLogger(__name__)

ORDER_BY_ACQUISITION = "ContentDate/Start asc"
SENSING_DATE_PATTERN = re.compile(r"(\d{8})T")


class CatalogueClient:
    """Client for the Copernicus Data Space OData product catalogue."""

    def __init__(
        self,
        catalogue_url: str,
        timeout: int | None = None,
        session: requests.Session | None = None,
    ):
        self.catalogue_url = catalogue_url
        self.timeout = timeout
        if not session:
            session = requests.Session()
            session.mount("https://", HTTPAdapter())
        self.session = session

    @classmethod
    def from_settings(cls, **kwargs: Any) -> "CatalogueClient":
        settings = get_settings()
        return cls(catalogue_url=settings.catalogue_url, timeout=settings.timeout, **kwargs)

    def query(self, params: dict[str, Any]) -> list[dict[str, Any]]:
        """Send a single catalogue request and return the raw `value` entries.

        Raises:
            RemoteError: on transport failures or non-success responses.
        """
        log.debug("Querying catalogue with: %s", params)
        try:
            response = self.session.get(self.catalogue_url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise RemoteError(f"Catalogue request failed: {e}") from e
        if response.status_code != 200:
            raise RemoteError(
                f"Search returned {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )
        try:
            return response.json().get("value", [])
        except ValueError as e:
            raise RemoteError(
                f"Catalogue returned an unreadable reply: {e}",
                status_code=response.status_code,
                body=response.text,
            ) from e

    def search(self, params: SearchParams, allow_empty: bool = False) -> list[SceneRecord]:
        """Search the catalogue for scenes matching the given constraints.

        Args:
            params (SearchParams): search constraints.
            allow_empty (bool, optional): return an empty list instead of raising when
                the catalogue has no match. Defaults to False.

        Raises:
            InvalidArgument: when the constraints are not valid for the satellite.
            RemoteError: on non-success responses.
            EmptyResult: when nothing matches and `allow_empty` is False.

        Returns:
            list[SceneRecord]: online scenes, oldest acquisition first.
        """
        products = self.query(
            {
                "$filter": params.to_filter(),
                "$expand": "Attributes",
                "$top": params.max_results,
                "$orderby": ORDER_BY_ACQUISITION,
            }
        )
        if not products:
            if allow_empty:
                return []
            raise EmptyResult("Search returned zero results")

        records = [SceneRecord.from_catalogue(p) for p in products if p.get("Online", False)]
        log.debug("Found %d products, %d online", len(products), len(records))
        return records

    def resolve_id(self, scene_name: str) -> str:
        """Look up the unique identifier of a scene from its name.

        When the name embeds a sensing date (`YYYYMMDDT...`), the lookup is narrowed to
        one day on either side of it.

        Raises:
            InvalidArgument: when no scene matches the name.
            RemoteError: on non-success responses.

        Returns:
            str: catalogue identifier used to download the scene.
        """
        filters = []
        match = SENSING_DATE_PATTERN.search(scene_name)
        try:
            sense_date = datetime.strptime(match.group(1), "%Y%m%d") if match else None
        except ValueError:
            log.debug("Ignoring invalid sensing date %s in %s", match.group(1), scene_name)
            sense_date = None
        if sense_date is not None:
            filters.append(date_range_filter(sense_date - timedelta(days=1), sense_date + timedelta(days=1)))
        filters.append(name_filter(scene_name))

        products = self.query({"$filter": " and ".join(filters), "$expand": "Attributes"})
        if not products:
            raise InvalidArgument(f"Could not locate any scene matching '{scene_name}'")
        scene_id = products[0]["Id"]
        log.debug("Resolved %s to %s", scene_name, scene_id)
        return scene_id

    def close(self) -> None:
        self.session.close()


def search(
    satellite: str,
    *,
    product: str | None = None,
    dates: tuple[datetime, datetime] | None = None,
    tile: str | None = None,
    clouds: float | None = None,
    geometry: Any = None,
    axis_order: AxisOrder = "latlon",
    max_results: int | None = None,
    allow_empty: bool = False,
    client: CatalogueClient | None = None,
) -> list[SceneRecord]:
    """Search for satellite scenes matching the provided filters.

    Args:
        satellite (str): one of "SENTINEL-1", "SENTINEL-2" or "SENTINEL-3".
        product (str | None, optional): product type to search for, such as "L2A", "L1C", "GRD".
        dates (tuple[datetime, datetime] | None, optional): acquisition window, oldest first.
        tile (str | None, optional): restrict results to a tile, Sentinel-2 only.
        clouds (float | None, optional): maximum cloud cover percentage, not available for Sentinel-1.
        geometry (Any, optional): region of interest: Point, BoundingBox or any other geometry.
        axis_order ("latlon" | "lonlat", optional): axis order of `geometry` when external.
        max_results (int | None, optional): maximum number of results, defaults to the configured limit (100).
        allow_empty (bool, optional): return [] instead of raising EmptyResult.
        client (CatalogueClient | None, optional): client to use, built from settings when omitted.

    Returns:
        list[SceneRecord]: matching scenes.

    Example:
        >>> dates = (datetime(2020, 8, 4), datetime(2020, 8, 5))
        >>> search("SENTINEL-2", product="L2A", tile="11UPT", dates=dates)[0].name
        'S2B_MSIL2A_20200804T183919_N0500_R070_T11UPT_20230321T050221'
    """
    params = SearchParams(
        satellite=satellite,
        product=product,
        dates=dates,
        tile=tile,
        clouds=clouds,
        geometry=geometry,
        axis_order=axis_order,
        max_results=max_results if max_results is not None else get_settings().search_limit,
    )
    client = client or CatalogueClient.from_settings()
    return client.search(params, allow_empty=allow_empty)


def get_scene_id(scene_name: str, client: CatalogueClient | None = None) -> str:
    """Look up the unique identifier for the provided scene.

    Example:
        >>> get_scene_id("S2B_MSIL2A_20200804T183919_N0500_R070_T11UPT_20230321T050221")
        '29f0eaaf-0b15-412b-9597-16c16d4d79c6'
    """
    client = client or CatalogueClient.from_settings()
    return client.resolve_id(scene_name)
