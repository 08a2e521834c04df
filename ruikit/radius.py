# ruikit/radius.py

"""
Corner radii.

`RadiusProperty` keeps up to fourteen knobs (``x``, ``y``, the four corners and
their ``-x``/``-y`` halves) in a canonical form: symmetric corners are stored as
``top-left``, asymmetric ones as ``top-left-x`` plus ``top-left-y``.
`BoxRadius` is the resolved eight-value record used for CSS.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

from . import property_names as pn
from .css_builder import CSSBuilder, CSSValueBuilder
from .data import DataObject
from .log import error_log_f
from .properties import (DataProperty, PropertyList, not_compatible_type, set_size_property, size_property,
                         value_to_size_unit)
from .size_unit import SizeUnit, auto_size, px

CORNERS = (pn.TOP_LEFT, pn.TOP_RIGHT, pn.BOTTOM_LEFT, pn.BOTTOM_RIGHT)
CORNER_AXES = tuple(f"{corner}-{axis}" for corner in CORNERS for axis in ("x", "y"))
RADIUS_TAGS = (pn.X, pn.Y) + CORNERS + CORNER_AXES

# view-level names: radius-x, radius-top-left, ...
RADIUS_ELEMENTS = tuple("radius-" + tag for tag in RADIUS_TAGS)


def _equal_value(value1: Any, value2: Any) -> bool:
    if isinstance(value1, str) and isinstance(value2, str):
        return value1 == value2
    if isinstance(value1, SizeUnit) and isinstance(value2, SizeUnit):
        return value1 == value2
    return False


class RadiusProperty(DataProperty):

    supported_properties = RADIUS_TAGS

    def normalize(self, tag: str) -> str:
        tag = tag.strip().lower()
        return tag[len("radius-"):] if tag.startswith("radius-") else tag

    # --- Get ---

    def _get(self, tag: str) -> Any:
        value = self.get_raw(tag)
        if value is not None or tag not in CORNERS:
            return value
        # a symmetric corner reads through to x/y when both halves agree
        value_x = self.get_raw(tag + "-x") or self.get_raw(pn.X)
        value_y = self.get_raw(tag + "-y") or self.get_raw(pn.Y)
        if value_x is not None and _equal_value(value_x, value_y):
            return value_x
        return None

    # --- Set ---

    def _delete_tags(self, tags, result: List[str]) -> None:
        for tag in tags:
            if self.get_raw(tag) is not None:
                self.set_raw(tag, None)
                result.append(tag)

    def _set(self, tag: str, value: Any) -> Optional[List[str]]:
        if tag in (pn.X, pn.Y):
            result = set_size_property(self, tag, value)
            if result is not None:
                other = "y" if tag == pn.X else "x"
                self._delete_tags([f"{corner}-{tag}" for corner in CORNERS], result)
                for corner in CORNERS:
                    value = self.get_raw(corner)
                    if value is not None:
                        # the corner keeps its value on the other axis
                        self.set_raw(f"{corner}-{other}", value)
                        result.append(f"{corner}-{other}")
                        self.set_raw(corner, None)
                        result.append(corner)
                self._delete_unused_tags(result)
            return result

        if tag in CORNER_AXES:
            result = set_size_property(self, tag, value)
            if result is not None:
                self._delete_unused_tags(result)
            return result

        if tag in CORNERS:
            if isinstance(value, str) and "/" in value:
                values = value.split("/")
                if len(values) != 2:
                    not_compatible_type(tag, value)
                    return None
                result = self._set(tag + "-x", values[0])
                if result is not None:
                    result_y = self._set(tag + "-y", values[1])
                    if result_y is not None:
                        result.extend(result_y)
                return result

            result = set_size_property(self, tag, value)
            if result is not None:
                self._delete_tags([tag + "-x", tag + "-y"], result)
                self._delete_unused_tags(result)
            return result

        error_log_f('"%s" property is not compatible with the RadiusProperty', tag)
        return None

    def _delete_unused_tags(self, result: List[str]) -> None:
        for axis in (pn.X, pn.Y):
            if self.get_raw(axis) is not None:
                if all(self.get_raw(f"{c}-{axis}") is not None or self.get_raw(c) is not None for c in CORNERS):
                    self.set_raw(axis, None)
                    result.append(axis)

        for corner in CORNERS:
            tag_x, tag_y = corner + "-x", corner + "-y"
            value = self.get_raw(corner)
            value_x = self.get_raw(tag_x)
            value_y = self.get_raw(tag_y)
            if value is not None:
                if value_x is not None and value_y is not None:
                    self.set_raw(corner, None)
                    result.append(corner)
                elif value_x is not None:
                    if _equal_value(value, value_x):
                        self.set_raw(tag_x, None)
                        result.append(tag_x)
                    else:
                        self.set_raw(tag_y, value)
                        self.set_raw(corner, None)
                        result.extend((tag_y, corner))
                elif value_y is not None:
                    if _equal_value(value, value_y):
                        self.set_raw(tag_y, None)
                        result.append(tag_y)
                    else:
                        self.set_raw(tag_x, value)
                        self.set_raw(corner, None)
                        result.extend((tag_x, corner))
            elif value_x is not None and value_y is not None and _equal_value(value_x, value_y):
                self.set_raw(corner, value_x)
                self.set_raw(tag_x, None)
                self.set_raw(tag_y, None)
                result.extend((corner, tag_x, tag_y))

    # --- Remove ---

    def _remove(self, tag: str) -> List[str]:
        result: List[str] = []
        if tag in (pn.X, pn.Y):
            if self.get_raw(tag) is None:
                self._delete_tags([f"{corner}-{tag}" for corner in CORNERS], result)
            else:
                self._delete_tags([tag], result)
        elif tag in CORNER_AXES:
            self._delete_tags([tag], result)
        elif tag in CORNERS:
            self._delete_tags([tag, tag + "-x", tag + "-y"], result)
        else:
            error_log_f('"%s" property is not compatible with the RadiusProperty', tag)
        return result

    # --- Resolution ---

    def box_radius(self, session) -> "BoxRadius":
        x = size_property(self, pn.X, session) or auto_size()
        y = size_property(self, pn.Y, session) or auto_size()
        result = BoxRadius()
        for corner in CORNERS:
            rx, ry = x, y
            both = size_property(self, corner, session)
            if both is not None:
                rx = ry = both
            rx = size_property(self, corner + "-x", session) or rx
            ry = size_property(self, corner + "-y", session) or ry
            attr = corner.replace("-", "_")
            setattr(result, attr + "_x", rx)
            setattr(result, attr + "_y", ry)
        return result

    def __str__(self) -> str:
        parts = [f"{tag} = {self.get_raw(tag)}" for tag in RADIUS_TAGS if self.get_raw(tag) is not None]
        return "_{ " + ", ".join(parts) + " }"


@dataclass
class BoxRadius:
    top_left_x: SizeUnit = field(default_factory=auto_size)
    top_left_y: SizeUnit = field(default_factory=auto_size)
    top_right_x: SizeUnit = field(default_factory=auto_size)
    top_right_y: SizeUnit = field(default_factory=auto_size)
    bottom_left_x: SizeUnit = field(default_factory=auto_size)
    bottom_left_y: SizeUnit = field(default_factory=auto_size)
    bottom_right_x: SizeUnit = field(default_factory=auto_size)
    bottom_right_y: SizeUnit = field(default_factory=auto_size)

    @classmethod
    def uniform(cls, size: SizeUnit) -> "BoxRadius":
        return cls(*([size] * 8))

    def all_angles_is_equal(self) -> bool:
        return (self.top_left_x == self.top_right_x == self.bottom_left_x == self.bottom_right_x and
                self.top_left_y == self.top_right_y == self.bottom_left_y == self.bottom_right_y)

    def is_zero(self) -> bool:
        return all(size.is_auto() or size.is_zero() for size in (getattr(self, f.name) for f in fields(self)))

    def __str__(self) -> str:
        if self.all_angles_is_equal():
            if self.top_left_x == self.top_left_y:
                return str(self.top_left_x)
            return f"_{{ x = {self.top_left_x}, y = {self.top_left_y} }}"

        parts = []
        for corner in CORNERS:
            attr = corner.replace("-", "_")
            rx, ry = getattr(self, attr + "_x"), getattr(self, attr + "_y")
            if rx == ry:
                parts.append(f"{corner} = {rx}")
            else:
                parts.append(f"{corner}-x = {rx}, {corner}-y = {ry}")
        return "_{ " + ", ".join(parts) + " }"

    def css_value(self, builder: CSSBuilder, session) -> None:
        if self.is_zero():
            return

        def css(size: SizeUnit) -> str:
            return size.css_string("0", session)

        text = css(self.top_left_x)
        if self.all_angles_is_equal():
            if self.top_left_x != self.top_left_y:
                text += " / " + css(self.top_left_y)
        else:
            text += " " + " ".join((css(self.top_right_x), css(self.bottom_right_x), css(self.bottom_left_x)))
            if (self.top_left_x != self.top_left_y or self.top_right_x != self.top_right_y or
                    self.bottom_left_x != self.bottom_left_y or self.bottom_right_x != self.bottom_right_y):
                text += " / " + " ".join((css(self.top_left_y), css(self.top_right_y),
                                          css(self.bottom_right_y), css(self.bottom_left_y)))

        builder.add("border-radius", text)

    def css_string(self, session) -> str:
        builder = CSSValueBuilder()
        self.css_value(builder, session)
        return builder.finish()

    def to_radius_property(self) -> RadiusProperty:
        radius = RadiusProperty()
        if self.all_angles_is_equal():
            radius.set(pn.X, self.top_left_x)
            radius.set(pn.Y, self.top_left_y)
            return radius
        for corner in CORNERS:
            attr = corner.replace("-", "_")
            rx, ry = getattr(self, attr + "_x"), getattr(self, attr + "_y")
            if rx == ry:
                radius.set(corner, rx)
            else:
                radius.set(corner + "-x", rx)
                radius.set(corner + "-y", ry)
        return radius


def new_radius_property(params: Optional[Dict[str, Any]] = None) -> RadiusProperty:
    radius = RadiusProperty()
    if params:
        for tag in RADIUS_TAGS:
            if tag in params:
                radius.set(tag, params[tag])
    return radius


def new_elliptic_radius(x, y) -> RadiusProperty:
    return new_radius_property({pn.X: x, pn.Y: y})


def new_radii(top_right, bottom_right, bottom_left, top_left) -> RadiusProperty:
    return new_radius_property({pn.TOP_RIGHT: top_right, pn.BOTTOM_RIGHT: bottom_right,
                                pn.BOTTOM_LEFT: bottom_left, pn.TOP_LEFT: top_left})


# --- View-level helpers ---

def get_radius_property(properties: PropertyList) -> RadiusProperty:
    value = properties.get_raw(pn.RADIUS)
    if isinstance(value, RadiusProperty):
        return value
    if isinstance(value, BoxRadius):
        return value.to_radius_property()
    if isinstance(value, (SizeUnit, str)):
        return new_radius_property({pn.X: value, pn.Y: value})
    return RadiusProperty()


def set_radius_property(properties: PropertyList, tag: str, value: Any) -> Optional[List[str]]:
    if value is None:
        return properties._remove(pn.RADIUS)

    if isinstance(value, RadiusProperty):
        properties.set_raw(pn.RADIUS, value)
    elif isinstance(value, BoxRadius):
        properties.set_raw(pn.RADIUS, value.to_radius_property())
    elif isinstance(value, SizeUnit):
        properties.set_raw(pn.RADIUS, value)
    elif isinstance(value, str):
        if "/" not in value:
            return set_size_property(properties, pn.RADIUS, value)
        values = value.split("/")
        if len(values) == 2 and set_radius_element(properties, pn.RADIUS_X, values[0]) is not None:
            result = [pn.RADIUS, pn.RADIUS_X]
            if set_radius_element(properties, pn.RADIUS_Y, values[1]) is not None:
                result.append(pn.RADIUS_Y)
            return result
        not_compatible_type(pn.RADIUS, value)
        return None
    elif isinstance(value, DataObject):
        radius = RadiusProperty()
        for radius_tag in RADIUS_TAGS:
            text = value.property_value(radius_tag)
            if text is not None:
                radius.set(radius_tag, text)
        properties.set_raw(pn.RADIUS, radius)
    elif isinstance(value, dict):
        properties.set_raw(pn.RADIUS, new_radius_property(value))
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        properties.set_raw(pn.RADIUS, px(value))
    else:
        not_compatible_type(pn.RADIUS, value)
        return None
    return [pn.RADIUS]


def set_radius_element(properties: PropertyList, tag: str, value: Any) -> Optional[List[str]]:
    if value is None:
        return remove_radius_element(properties, tag)
    radius = get_radius_property(properties)
    if radius.set(tag, value):
        properties.set_raw(pn.RADIUS, radius)
        return [pn.RADIUS, tag]
    return None


def remove_radius_element(properties: PropertyList, tag: str) -> List[str]:
    if properties.get_raw(pn.RADIUS) is None:
        return []
    radius = get_radius_property(properties)
    radius.remove(tag)
    properties.set_raw(pn.RADIUS, None if radius.is_empty() else radius)
    return [pn.RADIUS, tag]


def get_radius_element(properties: PropertyList, tag: str) -> Any:
    value = properties.get_raw(pn.RADIUS)
    if value is None:
        return None
    if isinstance(value, (str, SizeUnit)):
        return value
    return get_radius_property(properties).get(tag)


def get_radius(properties: PropertyList, session) -> BoxRadius:
    value = properties.get_raw(pn.RADIUS)
    if isinstance(value, BoxRadius):
        return value
    if isinstance(value, RadiusProperty):
        return value.box_radius(session)
    if value is not None:
        size = value_to_size_unit(value, session)
        if size is not None:
            return BoxRadius.uniform(size)
    return BoxRadius()
