"""Well-Known-Text serialization of search geometries.

The catalogue expects WKT literals with coordinates in (longitude, latitude) order.
`Point` and `BoundingBox` are written directly from their fields, while any other
geometry (shapely objects, GeoJSON-like mappings or anything exposing
`__geo_interface__`) goes through its native WKT and, when its axes are in
(latitude, longitude) order, through `swap_axes`.

Example:
    >>> to_wkt(Point(52.0, -114.25))
    'POINT (-114.25 52.0)'
    >>> swap_axes("POLYGON ((52.1 -114.4, 51.9 -114.1, 52.1 -114.4))")
    'POLYGON ((-114.4 52.1,-114.1 51.9,-114.4 52.1))'
"""

import logging
import re
from collections.abc import Mapping
from typing import Any, Literal

from shapely.errors import GEOSException
from shapely.geometry import shape
from shapely.geometry.base import BaseGeometry

from sentinel_explorer.errors import InvalidArgument, MalformedGeometry, UnsupportedGeometry
from sentinel_explorer.model import BoundingBox, Point

log = logging.getLogger(__name__)

AxisOrder = Literal["latlon", "lonlat"]

_TOKEN_PATTERN = re.compile(
    r"\s*(?:(?P<number>[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)|(?P<word>[A-Za-z]+)|(?P<punct>[(),]))"
)
_DIMENSION_TAGS = {"Z", "M", "ZM"}


class _Coordinate(tuple):
    """Ordinates of a single position, kept as their original text."""


class _Tagged(tuple):
    """Nested geometry inside a collection: (keyword, body)."""


def _tokenize(wkt: str) -> list[tuple[str, str]]:
    tokens = []
    position = 0
    text = wkt.rstrip()
    while position < len(text):
        match = _TOKEN_PATTERN.match(text, position)
        if match is None or match.end() == position:
            raise MalformedGeometry(f"Invalid WKT: unexpected character at offset {position} in '{wkt}'")
        kind = match.lastgroup
        tokens.append((kind, match.group(kind)))
        position = match.end()
    return tokens


class _WKTParser:
    """Recursive-descent parser for the WKT coordinate list grammar.

    Produces a tree of nested lists whose leaves are `_Coordinate` tuples, so
    the shape keyword and the parenthesis nesting can be written back unchanged.
    """

    def __init__(self, wkt: str):
        self.wkt = wkt
        self.tokens = _tokenize(wkt)
        self.index = 0

    def _peek(self) -> tuple[str, str] | None:
        return self.tokens[self.index] if self.index < len(self.tokens) else None

    def _next(self) -> tuple[str, str]:
        token = self._peek()
        if token is None:
            raise MalformedGeometry(f"Invalid WKT: unexpected end of input in '{self.wkt}'")
        self.index += 1
        return token

    def _expect(self, value: str) -> None:
        kind, text = self._next()
        if kind != "punct" or text != value:
            raise MalformedGeometry(f"Invalid WKT: expected '{value}' but found '{text}' in '{self.wkt}'")

    def parse(self) -> tuple[str, list]:
        geometry = self._parse_geometry()
        if self._peek() is not None:
            raise MalformedGeometry(f"Invalid WKT: trailing content after geometry in '{self.wkt}'")
        return geometry

    def _parse_geometry(self) -> tuple[str, list]:
        kind, keyword = self._next()
        if kind != "word":
            raise MalformedGeometry(f"Invalid WKT: missing shape keyword in '{self.wkt}'")
        words = [keyword.upper()]
        token = self._peek()
        if token is not None and token[0] == "word" and token[1].upper() in _DIMENSION_TAGS:
            words.append(self._next()[1].upper())
        token = self._peek()
        if token is not None and token[0] == "word" and token[1].upper() == "EMPTY":
            self._next()
            return " ".join(words), []
        return " ".join(words), self._parse_list()

    def _parse_list(self) -> list:
        self._expect("(")
        items = [self._parse_item()]
        while True:
            kind, text = self._next()
            if kind == "punct" and text == ",":
                items.append(self._parse_item())
            elif kind == "punct" and text == ")":
                return items
            else:
                raise MalformedGeometry(f"Invalid WKT: unexpected '{text}' in '{self.wkt}'")

    def _parse_item(self) -> Any:
        token = self._peek()
        if token is None:
            raise MalformedGeometry(f"Invalid WKT: unexpected end of input in '{self.wkt}'")
        kind, text = token
        if kind == "punct" and text == "(":
            return self._parse_list()
        if kind == "word":
            return _Tagged(self._parse_geometry())
        ordinates = []
        while (token := self._peek()) is not None and token[0] == "number":
            ordinates.append(self._next()[1])
        if len(ordinates) < 2:
            raise MalformedGeometry(f"Invalid WKT: incomplete coordinate near '{text}' in '{self.wkt}'")
        return _Coordinate(ordinates)


def _count_coordinates(node: Any) -> int:
    if isinstance(node, _Coordinate):
        return 1
    if isinstance(node, _Tagged):
        return _count_coordinates(node[1])
    return sum(_count_coordinates(child) for child in node)


def _render(node: Any, swap: bool) -> str:
    if isinstance(node, _Coordinate):
        ordinates = list(node)
        if swap:
            ordinates[0], ordinates[1] = ordinates[1], ordinates[0]
        return " ".join(ordinates)
    if isinstance(node, _Tagged):
        return _render_geometry(node[0], node[1], swap)
    return "(" + ",".join(_render(child, swap) for child in node) + ")"


def _render_geometry(keyword: str, body: list, swap: bool) -> str:
    if not body:
        return f"{keyword} EMPTY"
    return f"{keyword} {_render(body, swap)}"


def rewrite_wkt(wkt: str, swap: bool) -> str:
    """Parse a WKT literal and write it back in the catalogue's compact form.

    Args:
        wkt (str): WKT text as produced by a geometry library.
        swap (bool): when True, the first two ordinates of every position are exchanged.

    Raises:
        MalformedGeometry: if the text cannot be parsed or holds no coordinates.

    Returns:
        str: normalized WKT, same keyword and nesting as the input.
    """
    keyword, body = _WKTParser(wkt).parse()
    if _count_coordinates(body) == 0:
        raise MalformedGeometry(f"Invalid WKT: no coordinates found in '{wkt}'")
    return _render_geometry(keyword, body, swap)


def swap_axes(wkt: str) -> str:
    """Turn a (lat, lon) WKT literal into (lon, lat) order, or vice versa."""
    return rewrite_wkt(wkt, swap=True)


def _native_wkt(geometry: Any) -> str:
    if isinstance(geometry, BaseGeometry):
        return geometry.wkt
    if isinstance(geometry, Mapping) or hasattr(geometry, "__geo_interface__"):
        context = getattr(geometry, "__geo_interface__", geometry)
        if isinstance(context, Mapping) and context.get("type") == "Feature":
            context = context.get("geometry")
        try:
            return shape(context).wkt
        except (GEOSException, AttributeError, IndexError, KeyError, TypeError, ValueError) as e:
            raise MalformedGeometry(f"Invalid geometry: cannot convert {type(geometry).__name__} to WKT ({e})") from e
    raise UnsupportedGeometry(
        f"Unsupported geometry type: {type(geometry).__name__} "
        "(expected Point, BoundingBox, a shapely geometry or a GeoJSON-like object)"
    )


def to_wkt(geometry: Any, axis_order: AxisOrder = "latlon") -> str:
    """Serialize a geometry into a WKT literal in (lon, lat) order.

    Args:
        geometry (Any): Point, BoundingBox, shapely geometry, GeoJSON mapping or any
            object exposing `__geo_interface__`.
        axis_order ("latlon" | "lonlat", optional): axis order of external geometries.
            Ignored for Point and BoundingBox, whose fields are named. Defaults to "latlon".

    Raises:
        UnsupportedGeometry: for objects that are not geometries.
        MalformedGeometry: for geometries without coordinates or with unparseable WKT.

    Returns:
        str: WKT literal.
    """
    if isinstance(geometry, Point):
        return f"POINT ({geometry.lon} {geometry.lat})"
    if isinstance(geometry, BoundingBox):
        lat_top, lon_left = geometry.ul
        lat_bottom, lon_right = geometry.lr
        ring = [
            (lat_top, lon_left),
            (lat_top, lon_right),
            (lat_bottom, lon_right),
            (lat_bottom, lon_left),
            (lat_top, lon_left),
        ]
        return "POLYGON ((" + ",".join(f"{lon} {lat}" for lat, lon in ring) + "))"
    if axis_order not in ("latlon", "lonlat"):
        raise InvalidArgument(f"Invalid axis order: '{axis_order}' (expected 'latlon' or 'lonlat')")
    wkt = _native_wkt(geometry)
    log.debug("Native geometry WKT: %s", wkt)
    return rewrite_wkt(wkt, swap=axis_order == "latlon")
