import json
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Annotated, Any

from geojson_pydantic import Feature, FeatureCollection
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from shapely import GeometryCollection, from_geojson
from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union

Number = int | float


def convert_to_geojson(value: Any) -> Any:
    # shapely -> geojson before validating
    if isinstance(value, BaseGeometry):
        return value.__geo_interface__
    # otherwise validate as is. Hopefully it is already a geojson
    return value


class Point(BaseModel):
    """A location given as latitude and longitude.

    Example:
        >>> Point(52.0, -114.25)
    """

    model_config = ConfigDict(frozen=True)

    lat: Number
    lon: Number

    def __init__(self, lat: Number, lon: Number, **data: Any):
        super().__init__(lat=lat, lon=lon, **data)

    @model_validator(mode="before")
    @classmethod
    def same_numeric_type(cls, data: Any) -> Any:
        # mixed int/float input is promoted, so both fields always share a type
        if not isinstance(data, dict):
            return data
        lat, lon = data.get("lat"), data.get("lon")
        if isinstance(lat, (int, float)) and isinstance(lon, (int, float)) and type(lat) is not type(lon):
            data = {**data, "lat": float(lat), "lon": float(lon)}
        return data


class BoundingBox(BaseModel):
    """A box defined by its upper-left and lower-right corners, as (lat, lon) pairs.

    Corner ordering is not checked: swapped corners produce an inverted polygon.

    Example:
        >>> BoundingBox((52.1, -114.4), (51.9, -114.1))
    """

    model_config = ConfigDict(frozen=True)

    ul: tuple[Number, Number]
    lr: tuple[Number, Number]

    def __init__(self, ul: tuple[Number, Number], lr: tuple[Number, Number], **data: Any):
        super().__init__(ul=ul, lr=lr, **data)


class AreaParams(BaseModel):
    """Store the actual geometry, not the path to it."""

    area: Annotated[Feature | FeatureCollection | None, BeforeValidator(convert_to_geojson)] = None

    @classmethod
    def _load_geometry(cls, path: Path) -> dict:
        if path is None:
            raise ValueError("Invalid configuration: area file path is required for from_file()")
        if not path.exists() or not path.is_file():
            raise ValueError(f"Resource not found: area file '{path}' does not exist or is not a file")
        return json.loads(path.read_text())

    @classmethod
    def from_file(cls, path: Path) -> "AreaParams":
        return cls(area=cls._load_geometry(path))  # type:ignore

    @property
    def area_geometry(self) -> BaseGeometry | None:
        """Area as a single shapely geometry, in GeoJSON (lon, lat) axis order."""
        if self.area is None:
            return None
        geometry = from_geojson(self.area.model_dump_json())
        # feature collections are merged into a single shape
        if isinstance(geometry, GeometryCollection):
            geometry = unary_union(list(geometry.geoms))
        return geometry


class SceneRecord(BaseModel):
    """One catalogue entry, as returned by a search."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(alias="Name")
    acquisition_date: datetime = Field(alias="AcquisitionDate")
    publication_date: datetime = Field(alias="PublicationDate")
    cloud_cover: float | None = Field(default=None, alias="CloudCover")
    id: str = Field(alias="Id")

    @classmethod
    def from_catalogue(cls, product: dict[str, Any]) -> "SceneRecord":
        """Project a raw OData product entry (with expanded attributes) into a record."""
        cloud_cover = None
        for attribute in product.get("Attributes") or []:
            if attribute.get("Name") == "cloudCover":
                cloud_cover = attribute.get("Value")
                break
        return cls(
            name=product["Name"],
            acquisition_date=product["ContentDate"]["Start"],
            publication_date=product["PublicationDate"],
            cloud_cover=cloud_cover,
            id=product["Id"],
        )

    def __str__(self) -> str:
        return f"SceneRecord(name={self.name})"


class ProgressEventType(Enum):
    TASK_CREATED = "task_created"
    TASK_DURATION = "task_duration"
    TASK_PROGRESS = "task_progress"
    TASK_COMPLETED = "task_completed"


class ProgressEvent(BaseModel):
    type: ProgressEventType
    task_id: str
    data: dict[str, Any]
