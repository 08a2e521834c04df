# ruikit/border.py

"""
Borders and outlines.

`BorderProperty` keeps a shared ``style``/``width``/``color`` plus optional
per-side overrides (``left-style``, ``top-width``, ...). The view-level tags
``border-left``, ``border-top-color`` and so on are folded into the single
``border`` entry of the view.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from . import property_names as pn
from .bounds import split4_values
from .color import Color, string_to_color
from .css_builder import CSSBuilder, CSSValueBuilder
from .data import DataNode, DataNodeType, DataObject, DataParseError, parse_data_text
from .log import error_log, error_log_f
from .properties import (DataProperty, PropertyList, color_property, enum_string_to_int, invalid_property_value,
                         is_int, not_compatible_type, property_value_to_string, set_color_property,
                         set_enum_property, set_size_property, size_property, value_to_enum)
from .property_values import ENUM_PROPERTIES, NONE_LINE, normalize_tag
from .size_unit import SizeType, SizeUnit, auto_size, string_to_size_unit

SIDES = (pn.TOP, pn.RIGHT, pn.BOTTOM, pn.LEFT)
STYLE = "style"
WIDTH = "width"
COLOR = pn.COLOR

SIDE_STYLES = tuple(f"{side}-style" for side in SIDES)
SIDE_WIDTHS = tuple(f"{side}-width" for side in SIDES)
SIDE_COLORS = tuple(f"{side}-color" for side in SIDES)

BORDER_TAGS = (STYLE, WIDTH, COLOR) + SIDES + SIDE_STYLES + SIDE_WIDTHS + SIDE_COLORS

# view-level tags stored inside the "border" composite
BORDER_ELEMENTS = (
    (pn.BORDER_LEFT, pn.BORDER_RIGHT, pn.BORDER_TOP, pn.BORDER_BOTTOM,
     pn.BORDER_STYLE, pn.BORDER_WIDTH, pn.BORDER_COLOR) +
    tuple(f"border-{side}-{kind}" for side in SIDES for kind in (STYLE, WIDTH, COLOR))
)

_LINE_CSS = ENUM_PROPERTIES[pn.BORDER_STYLE].css_values


def _normalize_border_tag(tag: str) -> str:
    tag = normalize_tag(tag)
    for prefix in ("border-", "cell-border-"):
        if tag.startswith(prefix):
            tag = tag[len(prefix):]
            break
    # "style-left" spells the same thing as "left-style"
    parts = tag.split("-")
    if len(parts) == 2 and parts[0] in (STYLE, WIDTH, COLOR) and parts[1] in SIDES:
        tag = f"{parts[1]}-{parts[0]}"
    return tag


def line_string(properties: PropertyList, tags) -> str:
    parts = []
    for tag in tags:
        value = properties.get_raw(tag)
        if value is None:
            continue
        if tag.endswith(STYLE) and is_int(value):
            value = ENUM_PROPERTIES[pn.BORDER_STYLE].values[value]
        parts.append(f"{tag} = {property_value_to_string(value)}")
    return "_{ " + ", ".join(parts) + " }"


@dataclass
class ViewBorder:
    """One resolved border side."""
    style: int = NONE_LINE
    width: SizeUnit = field(default_factory=auto_size)
    color: Color = field(default_factory=Color)


@dataclass
class ViewBorders:
    top: ViewBorder = field(default_factory=ViewBorder)
    right: ViewBorder = field(default_factory=ViewBorder)
    bottom: ViewBorder = field(default_factory=ViewBorder)
    left: ViewBorder = field(default_factory=ViewBorder)

    def sides(self) -> List[ViewBorder]:
        return [self.top, self.right, self.bottom, self.left]

    def all_the_same(self) -> bool:
        return self.top == self.right == self.bottom == self.left


def parse_border_text(text: str) -> Optional[Dict[str, Any]]:
    """Splits ``"solid 1px #FF000000"`` into style, width and color. Order is free."""
    result: Dict[str, Any] = {}
    for token in text.split():
        n = enum_string_to_int(token, ENUM_PROPERTIES[pn.BORDER_STYLE].values, False)
        if n is not None and STYLE not in result:
            result[STYLE] = n
            continue
        if token.startswith("@"):
            return None
        size = string_to_size_unit(token)
        if size is not None and WIDTH not in result:
            result[WIDTH] = size
            continue
        color = string_to_color(token)
        if color is not None and COLOR not in result:
            result[COLOR] = color
            continue
        return None
    return result


class BorderProperty(DataProperty):

    supported_properties = BORDER_TAGS

    def normalize(self, tag: str) -> str:
        return _normalize_border_tag(tag)

    # --- Set ---

    def _set(self, tag: str, value: Any) -> Optional[List[str]]:
        if tag in (STYLE, WIDTH, COLOR):
            result = self._set_part(tag, value)
            if result is not None:
                # a shared value replaces the per-side overrides
                for side in SIDES:
                    self.set_raw(f"{side}-{tag}", None)
            return result

        if tag in SIDE_STYLES or tag in SIDE_WIDTHS or tag in SIDE_COLORS:
            return self._set_part(tag, value)

        if tag in SIDES:
            return self._set_side(tag, value)

        error_log_f('"%s" property is not compatible with the BorderProperty', tag)
        return None

    def _set_part(self, tag: str, value: Any) -> Optional[List[str]]:
        if tag.endswith(STYLE):
            return set_enum_property(self, tag, value, pn.BORDER_STYLE)
        if tag.endswith(WIDTH):
            return set_size_property(self, tag, value)
        return set_color_property(self, tag, value)

    def _set_side(self, side: str, value: Any) -> Optional[List[str]]:
        if isinstance(value, ViewBorder):
            self.set_raw(f"{side}-style", value.style)
            self.set_raw(f"{side}-width", value.width)
            self.set_raw(f"{side}-color", value.color)
            return [side]

        if isinstance(value, BorderProperty):
            for kind in (STYLE, WIDTH, COLOR):
                self.set_raw(f"{side}-{kind}", value.get(f"{side}-{kind}"))
            return [side]

        if isinstance(value, DataNode) and value.type == DataNodeType.OBJECT:
            value = value.object()
        if isinstance(value, str):
            parts = parse_border_text(value)
            if parts is None:
                try:
                    value = parse_data_text(value)
                except DataParseError as e:
                    error_log(str(e))
                    invalid_property_value(side, value)
                    return None
            else:
                value = parts

        if isinstance(value, DataObject):
            value = {kind: value.property_value(kind) for kind in (STYLE, WIDTH, COLOR)
                     if value.property_value(kind) is not None}

        if isinstance(value, dict):
            for kind, part in value.items():
                kind = normalize_tag(kind)
                if kind not in (STYLE, WIDTH, COLOR) or self._set_part(f"{side}-{kind}", part) is None:
                    not_compatible_type(side, value)
                    return None
            return [side]

        not_compatible_type(side, value)
        return None

    def set_border_object(self, obj: DataObject) -> bool:
        """Loads ``_{ style = ..., width = ..., color = ..., left = _{...} }``. Shared values may list four sides."""
        result = True
        for side in SIDES:
            node = obj.property_by_tag(side)
            if node is not None:
                if node.type == DataNodeType.OBJECT:
                    result = self._set_side(side, node.object()) is not None and result
                else:
                    not_compatible_type(side, node)
                    result = False

        for kind, side_tags in ((STYLE, SIDE_STYLES), (COLOR, SIDE_COLORS), (WIDTH, SIDE_WIDTHS)):
            text = obj.property_value(kind)
            if text is None:
                continue
            values = split4_values(text)
            if len(values) == 1:
                result = self._set(kind, values[0].strip()) is not None and result
            elif len(values) == 4:
                for side_tag, part in zip(side_tags, values):
                    result = self._set_part(side_tag, part.strip()) is not None and result
            else:
                not_compatible_type(kind, text)
                result = False
        return result

    # --- Get ---

    def _get(self, tag: str) -> Any:
        value = self.get_raw(tag)
        if value is not None:
            return value
        if tag in SIDES:
            side = BorderProperty()
            for kind in (STYLE, WIDTH, COLOR):
                part = self._get(f"{tag}-{kind}")
                if part is not None:
                    side.set_raw(kind, part)
            return side
        for kind in (STYLE, WIDTH, COLOR):
            if tag.endswith("-" + kind):
                return self.get_raw(kind)
        return None

    def _remove(self, tag: str) -> List[str]:
        removed = []
        if tag in (STYLE, WIDTH, COLOR):
            names = (tag,) + tuple(f"{side}-{tag}" for side in SIDES)
        elif tag in SIDES:
            names = tuple(f"{tag}-{kind}" for kind in (STYLE, WIDTH, COLOR))
        else:
            names = (tag,)
        for name in names:
            if self.get_raw(name) is not None:
                self.set_raw(name, None)
                removed.append(name)
        return [tag] if removed else []

    # --- Resolve ---

    def view_borders(self, session) -> ViewBorders:
        default_style = value_to_enum(self.get_raw(STYLE), pn.BORDER_STYLE, session, NONE_LINE)
        default_width = size_property(self, WIDTH, session) or auto_size()
        default_color = color_property(self, COLOR, session) or Color(0)

        def side_border(side: str) -> ViewBorder:
            style = value_to_enum(self.get_raw(f"{side}-style"), pn.BORDER_STYLE, session)
            width = size_property(self, f"{side}-width", session)
            color = color_property(self, f"{side}-color", session)
            return ViewBorder(default_style if style is None else style,
                              default_width if width is None else width,
                              default_color if color is None else color)

        return ViewBorders(*(side_border(side) for side in SIDES))

    def css_style(self, builder: CSSBuilder, session) -> None:
        sides = self.view_borders(session).sides()
        if all(side.style == sides[0].style for side in sides):
            builder.add("border-style", _LINE_CSS[sides[0].style])
        else:
            builder.add_values("border-style", " ", *(_LINE_CSS[side.style] for side in sides))

    def css_width(self, builder: CSSBuilder, session) -> None:
        sides = self.view_borders(session).sides()
        if all(side.width == sides[0].width for side in sides):
            if not sides[0].width.is_auto():
                builder.add("border-width", sides[0].width.css_string("0", session))
        else:
            builder.add_values("border-width", " ", *(side.width.css_string("0", session) for side in sides))

    def css_color(self, builder: CSSBuilder, session) -> None:
        sides = self.view_borders(session).sides()
        if all(side.color == sides[0].color for side in sides):
            if sides[0].color != 0:
                builder.add("border-color", sides[0].color.css_string())
        else:
            builder.add_values("border-color", " ", *(side.color.css_string() for side in sides))

    def css_style_value(self, session) -> str:
        builder = CSSValueBuilder()
        self.css_style(builder, session)
        return builder.finish()

    def css_width_value(self, session) -> str:
        builder = CSSValueBuilder()
        self.css_width(builder, session)
        return builder.finish()

    def css_color_value(self, session) -> str:
        builder = CSSValueBuilder()
        self.css_color(builder, session)
        return builder.finish()

    def __str__(self) -> str:
        return line_string(self, BORDER_TAGS)


def new_border(params: Optional[Dict[str, Any]] = None) -> BorderProperty:
    border = BorderProperty()
    if params:
        for tag in BORDER_TAGS:
            value = params.get(tag)
            if value is not None:
                border.set(tag, value)
    return border


def _to_border(value: Any) -> Optional[BorderProperty]:
    if isinstance(value, BorderProperty):
        return value
    if isinstance(value, DataNode) and value.type == DataNodeType.OBJECT:
        value = value.object()
    if isinstance(value, DataObject):
        border = BorderProperty()
        border.set_border_object(value)
        return border
    if isinstance(value, ViewBorder):
        border = BorderProperty()
        border.set_raw(STYLE, value.style)
        border.set_raw(WIDTH, value.width)
        border.set_raw(COLOR, value.color)
        return border
    if isinstance(value, ViewBorders):
        border = BorderProperty()
        for side, side_border in zip(SIDES, value.sides()):
            border._set_side(side, side_border)
        return border
    if isinstance(value, dict):
        return new_border(value)
    if isinstance(value, str):
        parts = parse_border_text(value)
        if parts is not None:
            return new_border(parts)
        try:
            border = BorderProperty()
            border.set_border_object(parse_data_text(value))
            return border
        except DataParseError as e:
            error_log(str(e))
    return None


def get_border_property(properties: PropertyList) -> Optional[BorderProperty]:
    value = properties.get_raw(pn.BORDER)
    return value if isinstance(value, BorderProperty) else None


def set_border_property(properties: PropertyList, tag: str, value: Any) -> Optional[List[str]]:
    """Setter for ``border`` and every ``border-*`` element tag."""
    if tag == pn.BORDER:
        border = _to_border(value)
        if border is None:
            invalid_property_value(tag, value)
            return None
        properties.set_raw(pn.BORDER, border)
        return [pn.BORDER]

    border = get_border_property(properties) or BorderProperty()
    if border.set(tag, value):
        properties.set_raw(pn.BORDER, None if border.is_empty() else border)
        return [pn.BORDER, tag]
    return None


def remove_border_element(properties: PropertyList, tag: str) -> List[str]:
    if tag == pn.BORDER:
        if properties.get_raw(pn.BORDER) is None:
            return []
        properties.set_raw(pn.BORDER, None)
        return [pn.BORDER]
    border = get_border_property(properties)
    if border is None:
        return []
    border.remove(tag)
    properties.set_raw(pn.BORDER, None if border.is_empty() else border)
    return [pn.BORDER, tag]


# --- Outline ---

OUTLINE_TAGS = (STYLE, WIDTH, COLOR)
OUTLINE_ELEMENTS = (pn.OUTLINE_STYLE, pn.OUTLINE_WIDTH, pn.OUTLINE_COLOR)


class OutlineProperty(DataProperty):

    supported_properties = OUTLINE_TAGS

    def normalize(self, tag: str) -> str:
        tag = normalize_tag(tag)
        return tag[len("outline-"):] if tag.startswith("outline-") else tag

    def _set(self, tag: str, value: Any) -> Optional[List[str]]:
        if tag == STYLE:
            return set_enum_property(self, tag, value, pn.BORDER_STYLE)
        if tag == WIDTH:
            if isinstance(value, SizeUnit) and value.type in (SizeType.FRACTION, SizeType.PERCENT):
                not_compatible_type(tag, value)
                return None
            return set_size_property(self, tag, value)
        if tag == COLOR:
            return set_color_property(self, tag, value)
        error_log_f('"%s" property is not compatible with the OutlineProperty', tag)
        return None

    def view_outline(self, session) -> ViewBorder:
        return ViewBorder(value_to_enum(self.get_raw(STYLE), pn.BORDER_STYLE, session, NONE_LINE),
                          size_property(self, WIDTH, session) or auto_size(),
                          color_property(self, COLOR, session) or Color(0))

    def css_value(self, builder: CSSBuilder, session) -> None:
        outline = self.view_outline(session)
        width = outline.width
        if (0 < outline.style < len(_LINE_CSS) and outline.color.alpha > 0 and
                width.type not in (SizeType.AUTO, SizeType.FRACTION, SizeType.PERCENT) and
                (width.value > 0 or width.type == SizeType.FUNCTION)):
            builder.add_values("outline", " ", width.css_string("0", session), _LINE_CSS[outline.style],
                               outline.color.css_string())

    def css_string(self, session) -> str:
        builder = CSSValueBuilder()
        self.css_value(builder, session)
        return builder.finish()

    def __str__(self) -> str:
        return line_string(self, OUTLINE_TAGS)


def new_outline(params: Optional[Dict[str, Any]] = None) -> OutlineProperty:
    outline = OutlineProperty()
    if params:
        for tag in OUTLINE_TAGS:
            if params.get(tag) is not None:
                outline.set(tag, params[tag])
    return outline


def set_outline_property(properties: PropertyList, tag: str, value: Any) -> Optional[List[str]]:
    """Setter for ``outline`` and the ``outline-style|width|color`` elements."""
    if tag != pn.OUTLINE:
        outline = properties.get_raw(pn.OUTLINE)
        if not isinstance(outline, OutlineProperty):
            outline = OutlineProperty()
        if outline.set(tag, value):
            properties.set_raw(pn.OUTLINE, None if outline.is_empty() else outline)
            return [pn.OUTLINE, tag]
        return None

    if isinstance(value, DataNode) and value.type == DataNodeType.OBJECT:
        value = value.object()
    if isinstance(value, OutlineProperty):
        outline = value
    elif isinstance(value, ViewBorder):
        outline = new_outline({STYLE: value.style, WIDTH: value.width, COLOR: value.color})
    elif isinstance(value, DataObject):
        outline = OutlineProperty()
        for part in OUTLINE_TAGS:
            text = value.property_value(part)
            if text:
                outline.set(part, text)
    elif isinstance(value, dict):
        outline = new_outline(value)
    elif isinstance(value, str) and parse_border_text(value) is not None:
        outline = new_outline(parse_border_text(value))
    else:
        not_compatible_type(pn.OUTLINE, value)
        return None
    properties.set_raw(pn.OUTLINE, outline)
    return [pn.OUTLINE]


def remove_outline_element(properties: PropertyList, tag: str) -> List[str]:
    outline = properties.get_raw(pn.OUTLINE)
    if outline is None:
        return []
    if tag == pn.OUTLINE or not isinstance(outline, OutlineProperty):
        properties.set_raw(pn.OUTLINE, None)
        return [pn.OUTLINE]
    outline.remove(tag)
    properties.set_raw(pn.OUTLINE, None if outline.is_empty() else outline)
    return [pn.OUTLINE, tag]
