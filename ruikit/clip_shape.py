# ruikit/clip_shape.py

"""
Clip shapes for the ``clip`` and ``shape-outside`` properties.

Each shape is a small property container (`InsetClip`, `CircleClip`,
`EllipseClip`, `PolygonClip`) that renders to a CSS basic shape. A shape
that would have no visible area is reported invalid and not emitted.
"""

from typing import Any, Dict, List, Optional

from . import property_names as pn
from .data import DataNode, DataNodeType, DataObject, DataParseError, parse_data_text
from .log import error_log, error_log_f
from .properties import (DataProperty, PropertyList, is_constant_name, not_compatible_type,
                         property_value_to_string, resolve_text,
                         set_size_property, size_property)
from .radius import RADIUS_ELEMENTS, get_radius, set_radius_element, set_radius_property
from .size_unit import SizeUnit, string_to_size_unit

INSET_CLIP = "inset"
CIRCLE_CLIP = "circle"
ELLIPSE_CLIP = "ellipse"
POLYGON_CLIP = "polygon"

RADIUS_X = pn.RADIUS_X
RADIUS_Y = pn.RADIUS_Y


def _css(size: Optional[SizeUnit], text_for_auto: str, session) -> str:
    if size is None:
        return text_for_auto
    return size.css_string(text_for_auto, session)


class ClipShapeProperty(DataProperty):
    """Common base of the clip shapes."""

    shape = ""
    # Tags written by __str__, in order.
    string_tags: tuple = ()

    def _set(self, tag: str, value: Any) -> Optional[List[str]]:
        return set_size_property(self, tag, value)

    def css_style(self, session) -> str:
        raise NotImplementedError

    def valid(self, session) -> bool:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.write_string(self.shape)

    def write_string(self, object_tag: str = "_") -> str:
        parts = []
        for tag in self.string_tags:
            value = self.get_raw(tag)
            if value is not None:
                parts.append(f"{tag} = {property_value_to_string(value)}")
        return f"{object_tag} {{ {', '.join(parts)} }}"


class InsetClip(ClipShapeProperty):
    shape = INSET_CLIP
    supported_properties = (pn.TOP, pn.RIGHT, pn.BOTTOM, pn.LEFT, pn.RADIUS) + RADIUS_ELEMENTS
    string_tags = (pn.TOP, pn.RIGHT, pn.BOTTOM, pn.LEFT, pn.RADIUS)

    def _set(self, tag: str, value: Any) -> Optional[List[str]]:
        if tag in (pn.TOP, pn.RIGHT, pn.BOTTOM, pn.LEFT):
            return set_size_property(self, tag, value)
        if tag == pn.RADIUS:
            return set_radius_property(self, tag, value)
        if tag in RADIUS_ELEMENTS:
            return set_radius_element(self, tag, value)
        error_log_f('"%s" property is not supported by the inset clip shape', tag)
        return None

    def css_style(self, session) -> str:
        sides = " ".join(_css(size_property(self, tag, session), "0px", session)
                         for tag in (pn.TOP, pn.RIGHT, pn.BOTTOM, pn.LEFT))
        if self.get_raw(pn.RADIUS) is not None:
            radius = get_radius(self, session)
            if not radius.is_zero():
                return f"inset({sides} round {radius.css_string(session)})"
        return f"inset({sides})"

    def valid(self, session) -> bool:
        for tag in (pn.TOP, pn.RIGHT, pn.BOTTOM, pn.LEFT):
            size = size_property(self, tag, session)
            if size is not None and not size.is_auto() and not size.is_zero():
                return True
        return self.get_raw(pn.RADIUS) is not None and not get_radius(self, session).is_zero()


class CircleClip(ClipShapeProperty):
    shape = CIRCLE_CLIP
    supported_properties = (pn.X, pn.Y, pn.RADIUS)
    string_tags = (pn.RADIUS, pn.X, pn.Y)

    def _set(self, tag: str, value: Any) -> Optional[List[str]]:
        if tag in self.supported_properties:
            return set_size_property(self, tag, value)
        error_log_f('"%s" property is not supported by the circle clip shape', tag)
        return None

    def css_style(self, session) -> str:
        r = _css(size_property(self, pn.RADIUS, session), "50%", session)
        x = _css(size_property(self, pn.X, session), "50%", session)
        y = _css(size_property(self, pn.Y, session), "50%", session)
        return f"circle({r} at {x} {y})"

    def valid(self, session) -> bool:
        radius = size_property(self, pn.RADIUS, session)
        return radius is None or not radius.is_zero()


class EllipseClip(ClipShapeProperty):
    shape = ELLIPSE_CLIP
    supported_properties = (pn.X, pn.Y, pn.RADIUS, RADIUS_X, RADIUS_Y)
    string_tags = (RADIUS_X, RADIUS_Y, pn.X, pn.Y)

    def _set(self, tag: str, value: Any) -> Optional[List[str]]:
        if tag in (pn.X, pn.Y, RADIUS_X, RADIUS_Y):
            return set_size_property(self, tag, value)
        if tag == pn.RADIUS:
            result = set_size_property(self, RADIUS_X, value)
            if result is not None:
                self.set_raw(RADIUS_Y, self.get_raw(RADIUS_X))
                return result + [RADIUS_Y]
            return None
        error_log_f('"%s" property is not supported by the ellipse clip shape', tag)
        return None

    def css_style(self, session) -> str:
        rx = _css(size_property(self, RADIUS_X, session), "50%", session)
        ry = _css(size_property(self, RADIUS_Y, session), "50%", session)
        x = _css(size_property(self, pn.X, session), "50%", session)
        y = _css(size_property(self, pn.Y, session), "50%", session)
        return f"ellipse({rx} {ry} at {x} {y})"

    def valid(self, session) -> bool:
        for tag in (RADIUS_X, RADIUS_Y):
            radius = size_property(self, tag, session)
            if radius is not None and radius.is_zero():
                return False
        return True


def _polygon_point(tag: str, value: Any) -> Any:
    if isinstance(value, SizeUnit):
        return value
    if isinstance(value, str):
        text = value.strip()
        if is_constant_name(text):
            return text
        size = string_to_size_unit(text)
        if size is not None:
            return size
    not_compatible_type(tag, value)
    return None


class PolygonClip(ClipShapeProperty):
    """Points are stored flat: ``[x1, y1, x2, y2, ...]``."""

    shape = POLYGON_CLIP
    supported_properties = (pn.POINTS,)

    def _set(self, tag: str, value: Any) -> Optional[List[str]]:
        if tag != pn.POINTS:
            error_log_f('"%s" property is not supported by the polygon clip shape', tag)
            return None
        if isinstance(value, DataNode):
            value = value.array_elements() if value.type == DataNodeType.ARRAY else value.text()
        if isinstance(value, str):
            value = value.split(",")
        if not isinstance(value, (list, tuple)):
            not_compatible_type(tag, value)
            return None

        points = []
        for item in value:
            point = _polygon_point(tag, item)
            if point is None:
                return None
            points.append(point)
        self.set_raw(tag, points)
        return [tag]

    def points(self) -> List[Any]:
        return self.get_raw(pn.POINTS) or []

    def _point_css(self, value: Any, session) -> str:
        if isinstance(value, SizeUnit):
            return value.css_string("0px", session)
        text, ok = resolve_text(session, value)
        if ok:
            size = string_to_size_unit(text)
            if size is not None:
                return size.css_string("0px", session)
        return "0px"

    def css_style(self, session) -> str:
        points = self.points()
        if len(points) < 2:
            return ""
        pairs = []
        for i in range(1, len(points), 2):
            pairs.append(self._point_css(points[i - 1], session) + " " + self._point_css(points[i], session))
        return "polygon(" + ", ".join(pairs) + ")"

    def valid(self, session) -> bool:
        return len(self.points()) >= 2

    def write_string(self, object_tag: str = "_") -> str:
        points = ", ".join(str(point) for point in self.points())
        return f'{object_tag} {{ points = "{points}" }}'


_SHAPES = {cls.shape: cls for cls in (InsetClip, CircleClip, EllipseClip, PolygonClip)}


def new_clip_shape_property(shape: str, params: Dict[str, Any]) -> Optional[ClipShapeProperty]:
    if not params:
        error_log("No ClipShapeProperty params")
        return None
    cls = _SHAPES.get(shape)
    if cls is None:
        error_log("Unknown ClipShape: " + shape)
        return None
    clip = cls()
    for tag, value in params.items():
        if not clip.set(tag, value):
            return None
    return clip


def new_inset_clip(top, right, bottom, left, radius=None) -> InsetClip:
    clip = InsetClip()
    for tag, value in zip((pn.TOP, pn.RIGHT, pn.BOTTOM, pn.LEFT, pn.RADIUS), (top, right, bottom, left, radius)):
        if value is not None:
            clip.set(tag, value)
    return clip


def new_circle_clip(x, y, radius) -> CircleClip:
    clip = CircleClip()
    clip.set_params({pn.X: x, pn.Y: y, pn.RADIUS: radius})
    return clip


def new_ellipse_clip(x, y, rx, ry) -> EllipseClip:
    clip = EllipseClip()
    clip.set_params({pn.X: x, pn.Y: y, RADIUS_X: rx, RADIUS_Y: ry})
    return clip


def new_polygon_clip(points) -> Optional[PolygonClip]:
    clip = PolygonClip()
    if clip.set(pn.POINTS, list(points)):
        return clip
    return None


def parse_clip_shape_property(obj: DataObject) -> Optional[ClipShapeProperty]:
    cls = _SHAPES.get(obj.tag)
    if cls is None:
        error_log("Unknown clip shape: " + obj.tag)
        return None
    clip = cls()
    for node in obj:
        if node.type == DataNodeType.TEXT:
            clip.set(node.tag, node.text())
        elif node.type == DataNodeType.OBJECT:
            clip.set(node.tag, node.object())
        else:
            clip.set(node.tag, node)
    return clip


def set_clip_shape_property(properties: PropertyList, tag: str, value: Any) -> Optional[List[str]]:
    clip = None
    if isinstance(value, ClipShapeProperty):
        clip = value
    elif isinstance(value, str):
        if is_constant_name(value.strip()):
            properties.set_raw(tag, value.strip())
            return [tag]
        try:
            clip = parse_clip_shape_property(parse_data_text(value))
        except DataParseError as e:
            error_log(str(e))
    elif isinstance(value, DataObject):
        clip = parse_clip_shape_property(value)
    elif isinstance(value, DataNode) and value.type == DataNodeType.OBJECT:
        clip = parse_clip_shape_property(value.object())

    if clip is None:
        not_compatible_type(tag, value)
        return None
    properties.set_raw(tag, clip)
    return [tag]


def get_clip_shape(properties: PropertyList, tag: str, session) -> Optional[ClipShapeProperty]:
    value = properties.get_raw(tag)
    if isinstance(value, ClipShapeProperty):
        return value
    if isinstance(value, str):
        text, ok = resolve_text(session, value)
        if ok:
            try:
                return parse_clip_shape_property(parse_data_text(text))
            except DataParseError as e:
                error_log(str(e))
    return None
