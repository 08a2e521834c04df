# ruikit/shadow.py

from typing import Any, Dict, List, Optional

from . import property_names as pn
from .color import Color
from .data import DataNode, DataNodeType, DataObject, DataParseError, parse_data_text
from .log import error_log
from .properties import (DataProperty, PropertyList, bool_property, color_property, not_compatible_type,
                         parse_properties, size_property)
from .size_unit import SizeUnit, auto_size

SHADOW_TAGS = (pn.COLOR, pn.INSET, pn.X_OFFSET, pn.Y_OFFSET, pn.BLUR_RADIUS, pn.SPREAD_RADIUS)


def _is_empty(size: SizeUnit) -> bool:
    return size.is_auto() or size.is_zero()


class ShadowProperty(DataProperty):
    """One box or text shadow: colour, offsets, blur, spread and the inset flag."""

    supported_properties = SHADOW_TAGS

    def _resolve(self, session):
        color = color_property(self, pn.COLOR, session) or Color(0)
        sizes = [size_property(self, tag, session) or auto_size()
                 for tag in (pn.X_OFFSET, pn.Y_OFFSET, pn.BLUR_RADIUS, pn.SPREAD_RADIUS)]
        return color, sizes

    def visible(self, session) -> bool:
        """A shadow shows when its colour is not transparent and some offset, blur or spread is non-zero."""
        color, sizes = self._resolve(session)
        return color.alpha != 0 and not all(_is_empty(size) for size in sizes)

    def css_style(self, session) -> str:
        """``[inset ]x y blur spread color`` or "" when invisible."""
        color, sizes = self._resolve(session)
        if color.alpha == 0 or all(_is_empty(size) for size in sizes):
            return ""
        lead = "inset " if bool_property(self, pn.INSET, session) else ""
        return lead + " ".join(size.css_string("0", session) for size in sizes) + " " + color.css_string()

    def css_text_style(self, session) -> str:
        """``x y blur color``: text shadows have no inset or spread."""
        color, sizes = self._resolve(session)
        sizes = sizes[:3]
        if color.alpha == 0 or all(_is_empty(size) for size in sizes):
            return ""
        return " ".join(size.css_string("0", session) for size in sizes) + " " + color.css_string()

    def __str__(self) -> str:
        parts = [f"{tag} = {self.get_raw(tag)}" for tag in SHADOW_TAGS if self.get_raw(tag) is not None]
        return "_{ " + ", ".join(parts) + " }"


def new_shadow_property(params: Optional[Dict[str, Any]] = None) -> ShadowProperty:
    shadow = ShadowProperty()
    if params:
        for tag in SHADOW_TAGS:
            if params.get(tag) is not None:
                shadow.set(tag, params[tag])
    return shadow


def new_shadow(x_offset, y_offset, blur_radius, spread_radius, color) -> ShadowProperty:
    return new_shadow_property({pn.X_OFFSET: x_offset, pn.Y_OFFSET: y_offset, pn.BLUR_RADIUS: blur_radius,
                                pn.SPREAD_RADIUS: spread_radius, pn.COLOR: color})


def new_inset_shadow(x_offset, y_offset, blur_radius, spread_radius, color) -> ShadowProperty:
    shadow = new_shadow(x_offset, y_offset, blur_radius, spread_radius, color)
    shadow.set(pn.INSET, True)
    return shadow


def new_text_shadow(x_offset, y_offset, blur_radius, color) -> ShadowProperty:
    return new_shadow_property({pn.X_OFFSET: x_offset, pn.Y_OFFSET: y_offset,
                                pn.BLUR_RADIUS: blur_radius, pn.COLOR: color})


def parse_shadow_property(obj: DataObject) -> ShadowProperty:
    shadow = ShadowProperty()
    parse_properties(shadow, obj)
    return shadow


def _to_shadow(value: Any) -> Optional[ShadowProperty]:
    if isinstance(value, ShadowProperty):
        return value
    if isinstance(value, DataObject):
        return parse_shadow_property(value)
    if isinstance(value, dict):
        return new_shadow_property(value)
    if isinstance(value, str):
        try:
            return parse_shadow_property(parse_data_text(value))
        except DataParseError as e:
            error_log(str(e))
    return None


def set_shadow_property(properties: PropertyList, tag: str, value: Any) -> Optional[List[str]]:
    """Stores a list of shadows. Accepts a shadow, an object, text or a list of them."""
    if isinstance(value, DataNode):
        if value.type == DataNodeType.ARRAY:
            value = value.array_elements()
        elif value.type == DataNodeType.OBJECT:
            value = value.object()
        else:
            value = value.text()

    if isinstance(value, (list, tuple)):
        shadows = []
        for item in value:
            shadow = _to_shadow(item)
            if shadow is None:
                not_compatible_type(tag, item)
                return None
            shadows.append(shadow)
        properties.set_raw(tag, shadows or None)
        return [tag]

    shadow = _to_shadow(value)
    if shadow is None:
        not_compatible_type(tag, value)
        return None
    properties.set_raw(tag, [shadow])
    return [tag]


def get_shadows(properties: PropertyList, tag: str) -> List[ShadowProperty]:
    value = properties.get_raw(tag)
    if isinstance(value, ShadowProperty):
        return [value]
    if isinstance(value, list):
        return value
    return []


def shadow_css(properties: PropertyList, tag: str, session) -> str:
    """Joins the visible shadows of `tag` (``shadow`` or ``text-shadow``) with ``, ``."""
    shadows = get_shadows(properties, tag)
    if tag == pn.SHADOW:
        parts = [shadow.css_style(session) for shadow in shadows]
    else:
        parts = [shadow.css_text_style(session) for shadow in shadows]
    return ", ".join(part for part in parts if part)
