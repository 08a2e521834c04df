# ruikit/bounds.py

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from . import property_names as pn
from .css_builder import CSSBuilder, CSSValueBuilder
from .data import DataObject
from .properties import (DataProperty, PropertyList, not_compatible_type, set_simple_property,
                         set_size_property, size_property, value_to_size_unit)
from .property_values import normalize_tag
from .size_unit import SizeUnit, auto_size, px

SIDES = (pn.TOP, pn.RIGHT, pn.BOTTOM, pn.LEFT)

_SIDE_ALIASES = {}
for _side in SIDES:
    for _prefix in ("margin", "padding", "cell-padding"):
        _SIDE_ALIASES[f"{_prefix}-{_side}"] = _side
        _SIDE_ALIASES[f"{_side}-{_prefix}"] = _side


def split4_values(text: str) -> List[str]:
    """Splits ``"a, b, c, d"``. Returns [] unless the text has one or four values."""
    values = text.split(",")
    count = len(values)
    if count in (1, 4):
        return values
    if count == 2 and values[1].strip() == "":
        return values[:1]
    if count == 5 and values[4].strip() == "":
        return values[:4]
    return []


@dataclass
class Bounds:
    """Resolved per-side sizes. Auto sides render as ``0``."""
    top: SizeUnit = field(default_factory=auto_size)
    right: SizeUnit = field(default_factory=auto_size)
    bottom: SizeUnit = field(default_factory=auto_size)
    left: SizeUnit = field(default_factory=auto_size)

    def set_all(self, value: SizeUnit) -> None:
        self.top = self.right = self.bottom = self.left = value

    def set_from_properties(self, tag: str, top_tag: str, right_tag: str, bottom_tag: str, left_tag: str,
                            properties: PropertyList, session) -> None:
        self.set_all(size_property(properties, tag, session) or auto_size())
        for side, side_tag in zip(SIDES, (top_tag, right_tag, bottom_tag, left_tag)):
            size = size_property(properties, side_tag, session)
            if size is not None:
                setattr(self, side, size)

    def all_fields_equal(self) -> bool:
        return self.top == self.right == self.bottom == self.left

    def __str__(self) -> str:
        if self.all_fields_equal():
            return str(self.top)
        return ",".join(str(getattr(self, side)) for side in SIDES)

    def css_value(self, tag: str, builder: CSSBuilder, session) -> None:
        if self.all_fields_equal():
            builder.add(tag, self.top.css_string("0", session))
        else:
            builder.add_values(tag, " ", *(getattr(self, side).css_string("0", session) for side in SIDES))

    def css_string(self, session) -> str:
        builder = CSSValueBuilder()
        self.css_value("", builder, session)
        return builder.finish()


class BoundsProperty(DataProperty):
    """Per-side sizes (``top``, ``right``, ``bottom``, ``left``) kept unresolved."""

    supported_properties = SIDES

    def normalize(self, tag: str) -> str:
        tag = normalize_tag(tag)
        return _SIDE_ALIASES.get(tag, tag)

    def _set(self, tag: str, value: Any) -> Optional[List[str]]:
        return set_size_property(self, tag, value)

    def bounds(self, session) -> Bounds:
        result = Bounds()
        for side in SIDES:
            size = size_property(self, side, session)
            if size is not None:
                setattr(result, side, size)
        return result

    def __str__(self) -> str:
        parts = [f"{side} = {self.get_raw(side)}" for side in SIDES if self.get_raw(side) is not None]
        return "_{ " + ", ".join(parts) + " }"


def new_bounds_property(params: Optional[Dict[str, Any]] = None) -> BoundsProperty:
    bounds = BoundsProperty()
    if params:
        for tag in SIDES:
            value = params.get(tag)
            if value is not None:
                bounds.set(tag, value)
    return bounds


def new_bounds(top, right, bottom, left) -> BoundsProperty:
    return new_bounds_property({pn.TOP: top, pn.RIGHT: right, pn.BOTTOM: bottom, pn.LEFT: left})


def set_bounds_property(properties: PropertyList, tag: str, value: Any) -> Optional[List[str]]:
    if set_simple_property(properties, tag, value):
        return [tag]

    if isinstance(value, str):
        if "," in value:
            values = split4_values(value)
            if len(values) == 4:
                bounds = BoundsProperty()
                for side, text in zip(SIDES, values):
                    if not bounds.set(side, text):
                        return None
                properties.set_raw(tag, bounds)
                return [tag]
            if len(values) != 1:
                not_compatible_type(tag, value)
                return None
            value = values[0]
        return set_size_property(properties, tag, value)

    if isinstance(value, BoundsProperty):
        properties.set_raw(tag, value)
    elif isinstance(value, Bounds):
        bounds = BoundsProperty()
        for side in SIDES:
            size = getattr(value, side)
            if not size.is_auto():
                bounds.set_raw(side, size)
        properties.set_raw(tag, bounds)
    elif isinstance(value, DataObject):
        bounds = BoundsProperty()
        for side in SIDES:
            text = value.property_value(side)
            if text is not None and not bounds.set(side, text):
                not_compatible_type(side, value)
                return None
        properties.set_raw(tag, bounds)
    elif isinstance(value, dict):
        properties.set_raw(tag, new_bounds_property(value))
    elif isinstance(value, SizeUnit):
        properties.set_raw(tag, value)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        properties.set_raw(tag, px(value))
    else:
        not_compatible_type(tag, value)
        return None
    return [tag]


def get_bounds_property(properties: PropertyList, tag: str) -> Optional[BoundsProperty]:
    value = properties.get_raw(tag)
    if isinstance(value, BoundsProperty):
        return value
    if isinstance(value, (str, SizeUnit)):
        bounds = BoundsProperty()
        for side in SIDES:
            bounds.set(side, value)
        return bounds
    if isinstance(value, Bounds):
        return new_bounds_property({side: getattr(value, side) for side in SIDES})
    return None


def set_bounds_side(properties: PropertyList, main_tag: str, side_tag: str, value: Any) -> Optional[List[str]]:
    if value is None:
        return remove_bounds_side(properties, main_tag, side_tag)

    bounds = get_bounds_property(properties, main_tag) or BoundsProperty()
    if bounds.set(side_tag, value):
        properties.set_raw(main_tag, bounds)
        return [main_tag, f"{main_tag}-{side_tag}"]
    return None


def remove_bounds_side(properties: PropertyList, main_tag: str, side_tag: str) -> List[str]:
    bounds = get_bounds_property(properties, main_tag)
    if bounds is not None and bounds.get_raw(side_tag) is not None:
        bounds.remove(side_tag)
        properties.set_raw(main_tag, None if bounds.is_empty() else bounds)
        return [main_tag, f"{main_tag}-{side_tag}"]
    return []


def get_bounds(properties: PropertyList, tag: str, session) -> Optional[Bounds]:
    """Resolves a bounds-valued property. None when unset."""
    value = properties.get_raw(tag)
    if value is None:
        return None
    if isinstance(value, BoundsProperty):
        return value.bounds(session)
    if isinstance(value, Bounds):
        return value
    size = value_to_size_unit(value, session)
    if size is None:
        not_compatible_type(tag, value)
        return None
    result = Bounds()
    result.set_all(size)
    return result
