# ruikit/column_separator.py

from typing import Any, Dict, List, Optional

from . import property_names as pn
from .border import COLOR, STYLE, WIDTH, ViewBorder, line_string, parse_border_text
from .color import Color
from .data import DataNode, DataNodeType, DataObject
from .log import error_log_f
from .properties import (DataProperty, PropertyList, color_property, not_compatible_type, set_color_property,
                         set_enum_property, set_size_property, size_property, value_to_enum)
from .property_values import ENUM_PROPERTIES, NONE_LINE, normalize_tag
from .size_unit import SizeType, auto_size

SEPARATOR_TAGS = (STYLE, WIDTH, COLOR)
SEPARATOR_ELEMENTS = (pn.COLUMN_SEPARATOR_STYLE, pn.COLUMN_SEPARATOR_WIDTH, pn.COLUMN_SEPARATOR_COLOR)


class ColumnSeparatorProperty(DataProperty):
    """The rule drawn between columns: ``column-rule`` in CSS."""

    supported_properties = SEPARATOR_TAGS

    def normalize(self, tag: str) -> str:
        tag = normalize_tag(tag)
        for prefix in ("column-separator-", "separator-"):
            if tag.startswith(prefix):
                return tag[len(prefix):]
        return tag

    def _set(self, tag: str, value: Any) -> Optional[List[str]]:
        if tag == STYLE:
            return set_enum_property(self, tag, value, pn.BORDER_STYLE)
        if tag == WIDTH:
            return set_size_property(self, tag, value)
        if tag == COLOR:
            return set_color_property(self, tag, value)
        error_log_f('"%s" property is not supported by the column separator', tag)
        return None

    def view_border(self, session) -> ViewBorder:
        return ViewBorder(value_to_enum(self.get_raw(STYLE), pn.BORDER_STYLE, session, NONE_LINE),
                          size_property(self, WIDTH, session) or auto_size(),
                          color_property(self, COLOR, session) or Color(0))

    def css_value(self, session) -> str:
        """``<width> <style> <color>``, or "" when the style is none."""
        border = self.view_border(session)
        if border.style == NONE_LINE:
            return ""
        parts = []
        width = border.width
        if width.type not in (SizeType.AUTO, SizeType.FRACTION) and (width.value > 0 or width.type == SizeType.FUNCTION):
            parts.append(width.css_string("", session))
        parts.append(ENUM_PROPERTIES[pn.BORDER_STYLE].css_values[border.style])
        if border.color != 0:
            parts.append(border.color.css_string())
        return " ".join(parts)

    def __str__(self) -> str:
        return line_string(self, SEPARATOR_TAGS)


def new_column_separator(params: Optional[Dict[str, Any]] = None) -> ColumnSeparatorProperty:
    separator = ColumnSeparatorProperty()
    if params:
        for tag in SEPARATOR_TAGS:
            if params.get(tag) is not None:
                separator.set(tag, params[tag])
    return separator


def get_column_separator(properties: PropertyList) -> Optional[ColumnSeparatorProperty]:
    value = properties.get_raw(pn.COLUMN_SEPARATOR)
    return value if isinstance(value, ColumnSeparatorProperty) else None


def set_column_separator_property(properties: PropertyList, tag: str, value: Any) -> Optional[List[str]]:
    """Setter for ``column-separator`` and its ``-style``, ``-width`` and ``-color`` elements."""
    if tag != pn.COLUMN_SEPARATOR:
        separator = get_column_separator(properties) or ColumnSeparatorProperty()
        if separator.set(tag, value):
            properties.set_raw(pn.COLUMN_SEPARATOR, None if separator.is_empty() else separator)
            return [pn.COLUMN_SEPARATOR, tag]
        return None

    if isinstance(value, DataNode) and value.type == DataNodeType.OBJECT:
        value = value.object()
    if isinstance(value, ColumnSeparatorProperty):
        separator = value
    elif isinstance(value, ViewBorder):
        separator = new_column_separator({STYLE: value.style, WIDTH: value.width, COLOR: value.color})
    elif isinstance(value, DataObject):
        separator = ColumnSeparatorProperty()
        for part in SEPARATOR_TAGS:
            text = value.property_value(part)
            if text:
                separator.set(part, text)
    elif isinstance(value, dict):
        separator = new_column_separator(value)
    elif isinstance(value, str) and parse_border_text(value) is not None:
        separator = new_column_separator(parse_border_text(value))
    else:
        not_compatible_type(tag, value)
        return None
    properties.set_raw(pn.COLUMN_SEPARATOR, separator)
    return [pn.COLUMN_SEPARATOR]


def remove_column_separator_element(properties: PropertyList, tag: str) -> List[str]:
    separator = get_column_separator(properties)
    if separator is None:
        return []
    if tag == pn.COLUMN_SEPARATOR:
        properties.set_raw(pn.COLUMN_SEPARATOR, None)
        return [pn.COLUMN_SEPARATOR]
    separator.remove(tag)
    properties.set_raw(pn.COLUMN_SEPARATOR, None if separator.is_empty() else separator)
    return [pn.COLUMN_SEPARATOR, tag]
