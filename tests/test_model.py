"""Unit tests for the value types and catalogue records."""

from datetime import datetime, timezone

import pytest
from conftest import ASSETS_DIR, SCENE_ID, SCENE_NAME
from shapely.geometry import Polygon

from sentinel_explorer.model import AreaParams, BoundingBox, Point, SceneRecord


class TestValueTypes:
    def test_point_keyword_and_positional(self):
        assert Point(52.0, -114.25) == Point(lat=52.0, lon=-114.25)

    def test_points_are_hashable(self):
        assert len({Point(1.0, 2.0), Point(1.0, 2.0)}) == 1

    def test_bounding_box(self):
        box = BoundingBox((52.1, -114.4), (51.9, -114.1))
        assert box.ul == (52.1, -114.4)
        assert box.lr == (51.9, -114.1)
        with pytest.raises(Exception):
            box.ul = (0.0, 0.0)


class TestAreaParams:
    """Test loading areas of interest from GeoJSON files."""

    def test_from_file(self):
        area = AreaParams.from_file(ASSETS_DIR / "roi.geojson")

        geometry = area.area_geometry
        assert geometry.geom_type == "Polygon"
        assert geometry.bounds == pytest.approx((-114.4, 51.9, -114.1, 52.1))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValueError, match="does not exist"):
            AreaParams.from_file(tmp_path / "missing.geojson")

    def test_shapely_input(self):
        polygon = Polygon([(-114.4, 52.1), (-114.1, 52.1), (-114.1, 51.9), (-114.4, 51.9)])
        area = AreaParams(area={"type": "Feature", "geometry": polygon.__geo_interface__, "properties": {}})

        assert area.area_geometry.equals(polygon)

    def test_no_area(self):
        assert AreaParams().area_geometry is None


class TestSceneRecord:
    def test_from_catalogue(self, catalogue_product):
        record = SceneRecord.from_catalogue(catalogue_product)

        assert record.name == f"{SCENE_NAME}.SAFE"
        assert record.id == SCENE_ID
        assert record.acquisition_date == datetime(2020, 8, 4, 18, 39, 19, 24000, tzinfo=timezone.utc)
        assert record.cloud_cover == pytest.approx(12.345)

    def test_first_cloud_cover_attribute(self, catalogue_product):
        attributes = catalogue_product["Attributes"] + [{"Name": "cloudCover", "Value": 99.0}]
        record = SceneRecord.from_catalogue({**catalogue_product, "Attributes": attributes})

        assert record.cloud_cover == pytest.approx(12.345)

    def test_without_attributes(self, catalogue_product):
        product = {key: value for key, value in catalogue_product.items() if key != "Attributes"}

        assert SceneRecord.from_catalogue(product).cloud_cover is None

    def test_column_names(self, catalogue_product):
        """Records serialize with the catalogue column names."""
        row = SceneRecord.from_catalogue(catalogue_product).model_dump(by_alias=True)

        assert list(row) == ["Name", "AcquisitionDate", "PublicationDate", "CloudCover", "Id"]

    def test_read_only(self, catalogue_product):
        record = SceneRecord.from_catalogue(catalogue_product)
        with pytest.raises(Exception):
            record.name = "other"
