"""OData `$filter` construction for the Copernicus catalogue.

Each optional constraint maps to one predicate; predicates are joined with `and`
in a fixed order (collection, product, dates, tile, clouds, geometry) so the same
search always produces the same query string.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from sentinel_explorer.errors import InvalidArgument
from sentinel_explorer.geometry import AxisOrder, to_wkt

log = logging.getLogger(__name__)

SATELLITES = ("SENTINEL-1", "SENTINEL-2", "SENTINEL-3")
STRING_ATTRIBUTE = "OData.CSC.StringAttribute"
DOUBLE_ATTRIBUTE = "OData.CSC.DoubleAttribute"
GEOMETRY_SRID = 4326
DEFAULT_MAX_RESULTS = 100


def to_utc(value: datetime) -> datetime:
    """Convert aware datetimes to naive UTC, naive values are assumed to be UTC already."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def format_timestamp(value: datetime) -> str:
    """Format a datetime as `YYYY-MM-DDTHH:MM:SS.sssZ`."""
    value = to_utc(value)
    return f"{value:%Y-%m-%dT%H:%M:%S}.{value.microsecond // 1000:03d}Z"


def name_filter(text: str) -> str:
    return f"contains(Name,'{text}')"


def date_range_filter(start: datetime, end: datetime) -> str:
    return f"ContentDate/Start gt {format_timestamp(start)} and ContentDate/Start lt {format_timestamp(end)}"


def attribute_filter(attribute_type: str, name: str, operator: str, value: Any) -> str:
    return (
        f"Attributes/{attribute_type}/any(att:att/Name eq '{name}' "
        f"and att/{attribute_type}/Value {operator} {value})"
    )


def build_filter(
    satellite: str,
    product: str | None = None,
    dates: tuple[datetime, datetime] | None = None,
    tile: str | None = None,
    clouds: float | None = None,
    geometry: Any = None,
    axis_order: AxisOrder = "latlon",
) -> str:
    """Compose the catalogue filter for a search.

    Args:
        satellite (str): one of "SENTINEL-1", "SENTINEL-2" or "SENTINEL-3".
        product (str | None, optional): substring of the scene name, such as "L2A", "L1C" or "GRD".
        dates (tuple[datetime, datetime] | None, optional): acquisition window, oldest first.
        tile (str | None, optional): MGRS tile id, Sentinel-2 only.
        clouds (float | None, optional): maximum cloud cover percentage, not available for Sentinel-1.
        geometry (Any, optional): region of interest, see `sentinel_explorer.geometry.to_wkt`.
        axis_order ("latlon" | "lonlat", optional): axis order of external geometries.

    Raises:
        InvalidArgument: on unknown satellites, inverted date ranges or filters the
            satellite does not support.

    Returns:
        str: filter expression for the `$filter` query parameter.
    """
    if satellite not in SATELLITES:
        raise InvalidArgument(f"Invalid satellite: '{satellite}' (expected one of {list(SATELLITES)})")
    filters = [f"Collection/Name eq '{satellite}'"]

    if product is not None:
        filters.append(name_filter(product))

    if dates is not None:
        start, end = to_utc(dates[0]), to_utc(dates[1])
        if start > end:
            raise InvalidArgument(f"Invalid date range: start ({start}) must not be after end ({end})")
        filters.append(date_range_filter(start, end))

    if tile is not None:
        if satellite != "SENTINEL-2":
            raise InvalidArgument(f"Invalid filter: tile is only supported for SENTINEL-2, not {satellite}")
        filters.append(attribute_filter(STRING_ATTRIBUTE, "tileId", "eq", f"'{tile}'"))

    if clouds is not None:
        if satellite == "SENTINEL-1":
            raise InvalidArgument("Invalid filter: cloud cover is not supported for SENTINEL-1")
        filters.append(attribute_filter(DOUBLE_ATTRIBUTE, "cloudCover", "lt", clouds))

    if geometry is not None:
        wkt = to_wkt(geometry, axis_order=axis_order)
        filters.append(f"OData.CSC.Intersects(area=geography'SRID={GEOMETRY_SRID};{wkt}')")

    query = " and ".join(filters)
    log.debug("Built catalogue filter: %s", query)
    return query


class SearchParams(BaseModel):
    """Constraints of a catalogue search.

    Every field except `satellite` is optional and adds one predicate when set:

    - product: `contains(Name, product)`
    - dates: acquisition start strictly inside (start, end)
    - tile: string attribute `tileId` equal to the value (SENTINEL-2 only)
    - clouds: double attribute `cloudCover` lower than the value (not SENTINEL-1)
    - geometry: footprint intersecting the geometry, in EPSG:4326
    - axis_order: axis order of `geometry` when it is not a Point or BoundingBox
    - max_results: cap on returned rows (`$top`)
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    satellite: str
    product: str | None = None
    dates: tuple[datetime, datetime] | None = None
    tile: str | None = None
    clouds: int | float | None = None
    geometry: Any = None
    axis_order: AxisOrder = "latlon"
    max_results: int = Field(default=DEFAULT_MAX_RESULTS, ge=1)

    def to_filter(self) -> str:
        return build_filter(
            self.satellite,
            product=self.product,
            dates=self.dates,
            tile=self.tile,
            clouds=self.clouds,
            geometry=self.geometry,
            axis_order=self.axis_order,
        )
