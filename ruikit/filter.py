# ruikit/filter.py

from typing import Any, Dict, List, Optional

from . import property_names as pn
from .data import DataNode, DataNodeType, DataObject, DataParseError, parse_data_text
from .log import error_log, error_log_f
from .properties import (DataProperty, PropertyList, angle_property, float_text_property, not_compatible_type,
                         set_angle_property, set_float_property)
from .shadow import get_shadows, set_shadow_property

FILTER_TAGS = (pn.BLUR, pn.BRIGHTNESS, pn.CONTRAST, pn.SATURATE, pn.GRAYSCALE, pn.INVERT, pn.OPACITY,
               pn.SEPIA, pn.HUE_ROTATE, pn.DROP_SHADOW)

# Percent-valued functions in output order.
_PERCENT_TAGS = (pn.BRIGHTNESS, pn.CONTRAST, pn.SATURATE, pn.GRAYSCALE, pn.INVERT, pn.OPACITY, pn.SEPIA)

_LIMITS = {
    pn.BLUR: (0.0, 10000.0),
    pn.BRIGHTNESS: (0.0, 10000.0),
    pn.CONTRAST: (0.0, 10000.0),
    pn.SATURATE: (0.0, 10000.0),
    pn.GRAYSCALE: (0.0, 100.0),
    pn.INVERT: (0.0, 100.0),
    pn.OPACITY: (0.0, 100.0),
    pn.SEPIA: (0.0, 100.0),
}


class FilterProperty(DataProperty):
    """Value of the ``filter`` and ``backdrop-filter`` properties."""

    supported_properties = FILTER_TAGS

    def _set(self, tag: str, value: Any) -> Optional[List[str]]:
        if tag in _LIMITS:
            return set_float_property(self, tag, value, _LIMITS[tag])
        if tag == pn.HUE_ROTATE:
            return set_angle_property(self, tag, value)
        if tag == pn.DROP_SHADOW:
            return set_shadow_property(self, tag, value)
        error_log_f('"%s" property is not supported by the view filter', tag)
        return None

    def css_style(self, session) -> str:
        """Filter functions in a fixed order, each only when its property is set."""
        parts = []
        value, ok = float_text_property(self, pn.BLUR, session, 0)
        if ok:
            parts.append(f"blur({value}px)")

        for tag in _PERCENT_TAGS:
            value, ok = float_text_property(self, tag, session, 0)
            if ok:
                parts.append(f"{tag}({value}%)")

        angle = angle_property(self, pn.HUE_ROTATE, session)
        if angle is not None:
            parts.append(f"hue-rotate({angle.css_string()})")

        for shadow in get_shadows(self, pn.DROP_SHADOW):
            text = shadow.css_text_style(session)
            if text:
                parts.append(f"drop-shadow({text})")

        return " ".join(parts)

    def __str__(self) -> str:
        return self.write_string("filter")


def new_filter_property(params: Dict[str, Any]) -> Optional[FilterProperty]:
    """Returns None when params is empty or any value is rejected."""
    if not params:
        return None
    result = FilterProperty()
    for tag, value in params.items():
        if not result.set(tag, value):
            return None
    return result


def parse_filter_property(obj: DataObject) -> Optional[FilterProperty]:
    result = FilterProperty()
    for node in obj:
        if node.type == DataNodeType.TEXT:
            result.set(node.tag, node.text())
        elif node.tag == pn.DROP_SHADOW:
            result.set(node.tag, node)
        else:
            error_log(f'Invalid value of "{node.tag}"')

    if result.is_empty():
        error_log("Empty view filter")
        return None
    return result


def set_filter_property(properties: PropertyList, tag: str, value: Any) -> Optional[List[str]]:
    result = None
    if isinstance(value, FilterProperty):
        result = value
    elif isinstance(value, dict):
        result = new_filter_property(value)
    elif isinstance(value, str):
        try:
            result = parse_filter_property(parse_data_text(value))
        except DataParseError as e:
            error_log(str(e))
    elif isinstance(value, DataObject):
        result = parse_filter_property(value)
    elif isinstance(value, DataNode) and value.type == DataNodeType.OBJECT:
        result = parse_filter_property(value.object())

    if result is None:
        not_compatible_type(tag, value)
        return None
    properties.set_raw(tag, result)
    return [tag]


def get_filter(properties: PropertyList, tag: str = pn.FILTER) -> Optional[FilterProperty]:
    value = properties.get_raw(tag)
    return value if isinstance(value, FilterProperty) else None
