# ruikit/background.py

"""
Background elements: linear, radial and conic gradients.

The ``background`` property holds a list of elements. Their CSS values are
joined with ``, `` into one ``background`` declaration.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from . import property_names as pn
from .angle_unit import AngleUnit, string_to_angle_unit
from .color import Color, string_to_color
from .data import DataNode, DataNodeType, DataObject, DataParseError, parse_data_text
from .log import error_log, error_log_f
from .properties import (DataProperty, PropertyList, angle_property, bool_property, enum_property,
                         enum_string_to_int, is_constant_name, is_int, not_compatible_type, properties_set,
                         property_value_to_string, resolve_text, set_angle_property, set_bool_property,
                         set_enum_property, set_simple_property, size_property, value_to_color)
from .property_values import CIRCLE_GRADIENT, ENUM_PROPERTIES, normalize_tag
from .size_unit import SizeUnit, string_to_size_unit

LINEAR_GRADIENT = "linear-gradient"
RADIAL_GRADIENT = "radial-gradient"
CONIC_GRADIENT = "conic-gradient"


# --- Gradient points ---

@dataclass
class GradientPoint:
    """A colour stop. `color` is a Color or ``@name``; `pos` a SizeUnit, ``@name`` or None."""
    color: Any
    pos: Any = None

    def resolved_color(self, session) -> Optional[Color]:
        if is_int(self.color):
            return Color(self.color)
        return value_to_color(self.color, session)

    def css_string(self, session) -> Optional[str]:
        color = self.resolved_color(session)
        if color is None:
            return None
        text = color.css_string()
        pos = self.pos
        if isinstance(pos, str):
            resolved, ok = resolve_text(session, pos)
            pos = string_to_size_unit(resolved) if ok else None
        if isinstance(pos, SizeUnit) and not pos.is_auto():
            text += " " + pos.css_string("", session)
        return text

    def __str__(self) -> str:
        result = str(self.color) if self.color is not None else "black"
        if isinstance(self.pos, str):
            result += " " + self.pos
        elif isinstance(self.pos, SizeUnit) and not self.pos.is_auto():
            result += " " + str(self.pos)
        return result


@dataclass
class GradientAngle:
    """A conic colour stop: colour plus an optional angle."""
    color: Any
    angle: Any = None

    def css_string(self, session) -> Optional[str]:
        color = Color(self.color) if is_int(self.color) else value_to_color(self.color, session)
        if color is None:
            return None
        text = color.css_string()
        angle = self.angle
        if isinstance(angle, str):
            resolved, ok = resolve_text(session, angle)
            angle = string_to_angle_unit(resolved) if ok else None
        if isinstance(angle, AngleUnit):
            text += " " + angle.css_string()
        return text

    def __str__(self) -> str:
        result = str(self.color) if self.color is not None else "black"
        if self.angle is not None:
            result += " " + str(self.angle)
        return result


def _split_point_text(text: str):
    text = text.strip()
    index = text.find(" ")
    if index > 0:
        return text[:index], text[index + 1:].strip()
    return text, ""


def _parse_color_text(text: str) -> Any:
    if is_constant_name(text):
        return text
    return string_to_color(text)


def parse_gradient_point(text: str) -> Optional[GradientPoint]:
    color_text, pos_text = _split_point_text(text)
    if not color_text:
        return None
    color = _parse_color_text(color_text)
    if color is None:
        return None
    if not pos_text:
        return GradientPoint(color)
    if is_constant_name(pos_text):
        return GradientPoint(color, pos_text)
    pos = string_to_size_unit(pos_text)
    return GradientPoint(color, pos) if pos is not None else None


def parse_gradient_angle(text: str) -> Optional[GradientAngle]:
    color_text, angle_text = _split_point_text(text)
    if not color_text:
        return None
    color = _parse_color_text(color_text)
    if color is None:
        return None
    if not angle_text:
        return GradientAngle(color)
    if is_constant_name(angle_text):
        return GradientAngle(color, angle_text)
    angle = string_to_angle_unit(angle_text)
    return GradientAngle(color, angle) if angle is not None else None


def parse_gradient_text(text: str, parse_point=parse_gradient_point) -> Optional[list]:
    elements = text.split(",")
    if len(elements) < 2:
        error_log("The gradient must contain at least 2 points")
        return None
    points = []
    for i, element in enumerate(elements):
        point = parse_point(element)
        if point is None:
            error_log_f('Invalid %d element of the gradient: "%s"', i, element)
            return None
        points.append(point)
    return points


def _dict_point(item: Dict[str, Any], point_cls, pos_key: str):
    lower = {key.lower(): value for key, value in item.items()}
    color = lower.get("color")
    if isinstance(color, str) and not is_constant_name(color.strip()):
        color = string_to_color(color)
    if color is None:
        return None
    return point_cls(color, lower.get(pos_key))


def _to_point(item: Any, point_cls, parse_point, pos_key: str):
    if isinstance(item, point_cls):
        return item
    if isinstance(item, Color):
        return point_cls(item)
    if isinstance(item, str):
        return parse_point(item)
    if isinstance(item, dict):
        return _dict_point(item, point_cls, pos_key)
    if isinstance(item, tuple) and len(item) == 2:
        return point_cls(*item)
    return None


# --- Elements ---

class BackgroundElement(DataProperty):
    """Base of the gradient elements."""

    tag = ""
    point_class = GradientPoint
    # Tags written by __str__, in order.
    string_tags: tuple = ()

    def _parse_point(self, text: str):
        return parse_gradient_point(text)

    def _set(self, tag: str, value: Any) -> Optional[List[str]]:
        if tag == pn.REPEATING:
            return set_bool_property(self, tag, value)
        if tag == pn.GRADIENT:
            return self._set_gradient(value)
        error_log_f("Property %s is not supported by a background gradient", tag)
        return None

    def _set_gradient(self, value: Any) -> Optional[List[str]]:
        pos_key = "pos" if self.point_class is GradientPoint else "angle"
        if isinstance(value, DataNode):
            value = value.array_elements() if value.type == DataNodeType.ARRAY else value.text()

        if isinstance(value, str):
            text = value.strip()
            if "," in text or " " in text:
                points = parse_gradient_text(text, self._parse_point)
                if points is not None:
                    self.set_raw(pn.GRADIENT, points)
                    return [pn.GRADIENT]
            elif is_constant_name(text):
                self.set_raw(pn.GRADIENT, text)
                return [pn.GRADIENT]
            error_log_f('Invalid gradient: "%s"', value)
            return None

        if isinstance(value, (list, tuple)):
            if len(value) < 2:
                error_log("The gradient must contain at least 2 points")
                return None
            points = []
            for i, item in enumerate(value):
                point = _to_point(item, self.point_class, self._parse_point, pos_key)
                if point is None:
                    error_log_f('Invalid %d element of the gradient: "%s"', i, item)
                    return None
                points.append(point)
            self.set_raw(pn.GRADIENT, points)
            return [pn.GRADIENT]

        not_compatible_type(pn.GRADIENT, value)
        return None

    def points(self, session) -> Optional[list]:
        value = self.get_raw(pn.GRADIENT)
        if isinstance(value, str):
            text, ok = resolve_text(session, value)
            if not ok or not text:
                error_log("Invalid gradient: " + value)
                return None
            return parse_gradient_text(text, self._parse_point)
        return value

    def _stops_css(self, session) -> Optional[str]:
        points = self.points(session)
        if points is None or len(points) < 2:
            error_log("The gradient must contain at least 2 points")
            return None
        stops = []
        for point in points:
            text = point.css_string(session)
            if text is None:
                return None
            stops.append(text)
        return ", ".join(stops)

    def _center_css(self, session) -> str:
        x = size_property(self, pn.CENTER_X, session)
        y = size_property(self, pn.CENTER_Y, session)
        if (x is None or x.is_auto()) and (y is None or y.is_auto()):
            return ""
        x_text = x.css_string("50%", session) if x is not None else "50%"
        y_text = y.css_string("50%", session) if y is not None else "50%"
        return f"at {x_text} {y_text}"

    def _function(self, session) -> str:
        if bool_property(self, pn.REPEATING, session):
            return "repeating-" + self.tag
        return self.tag

    def css_style(self, session) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.write_string(self.tag)

    def write_string(self, object_tag: str = "_") -> str:
        parts = []
        for tag in self.string_tags:
            value = self.get_raw(tag)
            if value is None:
                continue
            if tag == pn.GRADIENT and isinstance(value, list):
                text = '"' + ", ".join(str(point) for point in value) + '"'
            else:
                text = property_value_to_string(value)
            parts.append(f"{tag} = {text}")
        return f"{object_tag} {{ {', '.join(parts)} }}"


class LinearGradient(BackgroundElement):
    tag = LINEAR_GRADIENT
    supported_properties = (pn.DIRECTION, pn.REPEATING, pn.GRADIENT)
    string_tags = (pn.GRADIENT, pn.REPEATING, pn.DIRECTION)

    def _set(self, tag: str, value: Any) -> Optional[List[str]]:
        if tag == pn.DIRECTION:
            if isinstance(value, AngleUnit):
                self.set_raw(tag, value)
                return [tag]
            if isinstance(value, str):
                if set_simple_property(self, tag, value):
                    return [tag]
                angle = string_to_angle_unit(value)
                if angle is not None:
                    self.set_raw(tag, angle)
                    return [tag]
            return set_enum_property(self, tag, value)
        return super()._set(tag, value)

    def _direction_css(self, session) -> str:
        value = self.get_raw(pn.DIRECTION)
        info = ENUM_PROPERTIES[pn.DIRECTION]
        if isinstance(value, AngleUnit):
            return value.css_string()
        if is_int(value):
            if 0 <= value < len(info.css_values):
                return info.css_values[value]
            error_log_f("Invalid linear gradient direction: %d", value)
        elif isinstance(value, str):
            text, ok = resolve_text(session, value)
            if ok:
                n = enum_string_to_int(text, info.values, False)
                if n is not None:
                    return info.css_values[n]
                angle = string_to_angle_unit(text)
                if angle is not None:
                    return angle.css_string()
            error_log("Invalid linear gradient direction: " + value)
        return ""

    def css_style(self, session) -> str:
        stops = self._stops_css(session)
        if stops is None:
            return ""
        direction = self._direction_css(session)
        if direction:
            return f"{self._function(session)}({direction}, {stops})"
        return f"{self._function(session)}({stops})"


class RadialGradient(BackgroundElement):
    tag = RADIAL_GRADIENT
    supported_properties = (pn.RADIAL_GRADIENT_RADIUS, pn.RADIAL_GRADIENT_SHAPE, pn.CENTER_X, pn.CENTER_Y,
                            pn.GRADIENT, pn.REPEATING)
    string_tags = (pn.GRADIENT, pn.CENTER_X, pn.CENTER_Y, pn.REPEATING, pn.RADIAL_GRADIENT_SHAPE,
                   pn.RADIAL_GRADIENT_RADIUS)

    _aliases = {pn.RADIUS: pn.RADIAL_GRADIENT_RADIUS, pn.SHAPE: pn.RADIAL_GRADIENT_SHAPE,
                "x-center": pn.CENTER_X, "y-center": pn.CENTER_Y}

    def normalize(self, tag: str) -> str:
        tag = normalize_tag(tag)
        return self._aliases.get(tag, tag)

    def _set(self, tag: str, value: Any) -> Optional[List[str]]:
        if tag == pn.RADIAL_GRADIENT_RADIUS:
            return self._set_radius(tag, value)
        if tag in (pn.RADIAL_GRADIENT_SHAPE, pn.CENTER_X, pn.CENTER_Y):
            return properties_set(self, tag, value)
        return super()._set(tag, value)

    def _set_radius(self, tag: str, value: Any) -> Optional[List[str]]:
        if isinstance(value, (list, tuple)):
            if len(value) == 0:
                self.set_raw(tag, None)
                return [tag]
            if len(value) == 1:
                return self._set_radius(tag, value[0])
            self.set_raw(tag, list(value[:2]))
            return [tag]
        if isinstance(value, SizeUnit):
            self.set_raw(tag, None if value.is_auto() else value)
            return [tag]
        if isinstance(value, str):
            if set_simple_property(self, tag, value):
                return [tag]
            size = string_to_size_unit(value)
            if size is not None:
                self.set_raw(tag, None if size.is_auto() else size)
                return [tag]
            return set_enum_property(self, tag, value)
        if is_int(value):
            return set_enum_property(self, tag, value)
        error_log_f('Invalid value of "%s" property: %s', tag, value)
        return None

    def _size_css(self, value: Any, session) -> str:
        if isinstance(value, str):
            text, ok = resolve_text(session, value)
            value = string_to_size_unit(text) if ok else None
        if isinstance(value, SizeUnit):
            return value.css_string("50%", session)
        return "50%"

    def _shape_css(self, session) -> str:
        circle = enum_property(self, pn.RADIAL_GRADIENT_SHAPE, session, 0) == CIRCLE_GRADIENT
        shape = "circle" if circle else "ellipse"
        value = self.get_raw(pn.RADIAL_GRADIENT_RADIUS)
        if value is None:
            return "circle" if circle else ""

        info = ENUM_PROPERTIES[pn.RADIAL_GRADIENT_RADIUS]
        if isinstance(value, list):
            return "ellipse " + " ".join(self._size_css(item, session) for item in value)
        if is_int(value):
            if 0 <= value < len(info.css_values):
                return f"{shape} {info.css_values[value]}"
            error_log_f("Invalid radial gradient radius: %d", value)
            return ""
        if isinstance(value, str):
            text, ok = resolve_text(session, value)
            if not ok:
                error_log("Invalid radial gradient radius: " + value)
                return ""
            n = enum_string_to_int(text, info.values, False)
            if n is not None:
                return f"{shape} {info.css_values[n]}"
            value = string_to_size_unit(text)
            if value is None or value.is_auto():
                error_log("Invalid radial gradient radius: " + text)
                return ""
        size = value.css_string("", session)
        return f"circle {size}" if circle else f"ellipse {size} {size}"

    def css_style(self, session) -> str:
        stops = self._stops_css(session)
        if stops is None:
            return ""
        prefix = " ".join(part for part in (self._shape_css(session), self._center_css(session)) if part)
        if prefix:
            return f"{self._function(session)}({prefix}, {stops})"
        return f"{self._function(session)}({stops})"


class ConicGradient(BackgroundElement):
    tag = CONIC_GRADIENT
    point_class = GradientAngle
    supported_properties = (pn.CENTER_X, pn.CENTER_Y, pn.REPEATING, pn.FROM, pn.GRADIENT)
    string_tags = (pn.GRADIENT, pn.CENTER_X, pn.CENTER_Y, pn.FROM, pn.REPEATING)

    _aliases = {"x-center": pn.CENTER_X, "y-center": pn.CENTER_Y}

    def normalize(self, tag: str) -> str:
        tag = normalize_tag(tag)
        return self._aliases.get(tag, tag)

    def _parse_point(self, text: str):
        return parse_gradient_angle(text)

    def _set(self, tag: str, value: Any) -> Optional[List[str]]:
        if tag == pn.FROM:
            return set_angle_property(self, tag, value)
        if tag in (pn.CENTER_X, pn.CENTER_Y):
            return properties_set(self, tag, value)
        return super()._set(tag, value)

    def css_style(self, session) -> str:
        stops = self._stops_css(session)
        if stops is None:
            return ""
        parts = []
        angle = angle_property(self, pn.FROM, session)
        if angle is not None:
            parts.append("from " + angle.css_string())
        center = self._center_css(session)
        if center:
            parts.append(center)
        if parts:
            return f"{self._function(session)}({' '.join(parts)}, {stops})"
        return f"{self._function(session)}({stops})"


_ELEMENTS = {cls.tag: cls for cls in (LinearGradient, RadialGradient, ConicGradient)}


def _new_element(cls, params: Optional[Dict[str, Any]]) -> BackgroundElement:
    element = cls()
    if params:
        for tag, value in params.items():
            element.set(tag, value)
    return element


def new_background_linear_gradient(params: Optional[Dict[str, Any]] = None) -> LinearGradient:
    return _new_element(LinearGradient, params)


def new_background_radial_gradient(params: Optional[Dict[str, Any]] = None) -> RadialGradient:
    return _new_element(RadialGradient, params)


def new_background_conic_gradient(params: Optional[Dict[str, Any]] = None) -> ConicGradient:
    return _new_element(ConicGradient, params)


def parse_background_element(obj: DataObject) -> Optional[BackgroundElement]:
    cls = _ELEMENTS.get(obj.tag)
    if cls is None:
        error_log(f'Unknown background element "{obj.tag}"')
        return None
    element = cls()
    for node in obj:
        if node.type == DataNodeType.TEXT:
            if node.text() != "":
                element.set(node.tag, node.text())
        else:
            element.set(node.tag, node)
    return element


def _to_element(value: Any) -> Optional[BackgroundElement]:
    if isinstance(value, BackgroundElement):
        return value
    if isinstance(value, DataObject):
        return parse_background_element(value)
    if isinstance(value, DataNode) and value.type == DataNodeType.OBJECT:
        return parse_background_element(value.object())
    if isinstance(value, str):
        try:
            return parse_background_element(parse_data_text(value))
        except DataParseError as e:
            error_log(str(e))
    return None


def set_background_property(properties: PropertyList, tag: str, value: Any) -> Optional[List[str]]:
    """Stores a list of background elements."""
    if isinstance(value, DataNode) and value.type == DataNodeType.ARRAY:
        value = value.array_elements()

    items = value if isinstance(value, (list, tuple)) else [value]
    elements = []
    for item in items:
        element = _to_element(item)
        if element is None:
            not_compatible_type(tag, item)
            return None
        elements.append(element)
    properties.set_raw(tag, elements or None)
    return [tag]


def get_background(properties: PropertyList, tag: str = pn.BACKGROUND) -> List[BackgroundElement]:
    value = properties.get_raw(tag)
    if isinstance(value, BackgroundElement):
        return [value]
    if isinstance(value, list):
        return value
    return []


def background_css(properties: PropertyList, session, tag: str = pn.BACKGROUND) -> str:
    parts = [element.css_style(session) for element in get_background(properties, tag)]
    return ", ".join(part for part in parts if part)
