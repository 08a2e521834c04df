# ruikit/view_style.py

"""
ViewStyle is the property container used by views and by theme styles.

`css_view_style` is the only place where properties become CSS declarations:
inline view styles, theme stylesheets and media styles all go through it.
Importing this module also wires every composite property (bounds, radius,
border, outline, shadows, filters, clip shapes, background, column separator,
transform, transitions and animations) into the shared setter table.
"""

from typing import Any, Dict, List, Optional

from . import property_names as pn
from .animation import (AnimationProperty, animation_css, get_transitions, set_animation_property,
                        set_transition_property, set_transitions, transition_css)
from .background import background_css, set_background_property
from .border import (BORDER_ELEMENTS, OUTLINE_ELEMENTS, OutlineProperty, get_border_property,
                     remove_border_element, remove_outline_element, set_border_property,
                     set_outline_property)
from .bounds import SIDES, get_bounds, get_bounds_property, remove_bounds_side, set_bounds_property, set_bounds_side
from .clip_shape import get_clip_shape, set_clip_shape_property
from .column_separator import (SEPARATOR_ELEMENTS, get_column_separator, remove_column_separator_element,
                               set_column_separator_property)
from .css_builder import CSSBuilder, ViewCSSBuilder
from .data import DataNode, DataNodeType
from .filter import get_filter, set_filter_property
from .properties import (PROPERTY_SETTERS, PropertyList, bool_property, color_property, enum_property, float_property,
                         int_property, invalid_property_value, not_compatible_type, property_value_to_string,
                         properties_set, range_property, register_setter, resolve_text, size_property,
                         string_property, value_to_orientation)
from .property_values import (CENTER_ALIGN, END_TO_START_ORIENTATION, ENUM_PROPERTIES, GONE, INVISIBLE,
                              LEFT_ALIGN, LIST_WRAP_ON, LIST_WRAP_REVERSE, RIGHT_ALIGN, SIZE_PROPERTIES,
                              START_TO_END_ORIENTATION, BOTTOM_UP_ORIENTATION, STRETCH_ALIGN,
                              TOP_DOWN_ORIENTATION, VERTICAL_LEFT_TO_RIGHT, VERTICAL_RIGHT_TO_LEFT)
from .radius import RADIUS_ELEMENTS, get_radius, get_radius_element, remove_radius_element, set_radius_element, \
    set_radius_property
from .shadow import set_shadow_property, shadow_css
from .size_unit import SizeUnit, auto_size, px, string_to_size_unit
from .transform import TRANSFORM_TAGS, get_transform_property, remove_transform_element, set_transform_property, \
    write_view_transform_css

_MARGIN_SIDES = {f"{pn.MARGIN}-{side}": side for side in SIDES}
_PADDING_SIDES = {f"{pn.PADDING}-{side}": side for side in SIDES}

# Plain size tags written by css_view_style, in output order.
_VIEW_SIZE_TAGS = (
    pn.WIDTH, pn.HEIGHT, pn.MIN_WIDTH, pn.MIN_HEIGHT, pn.MAX_WIDTH, pn.MAX_HEIGHT,
    pn.LEFT, pn.RIGHT, pn.TOP, pn.BOTTOM, pn.TEXT_SIZE, pn.TEXT_INDENT, pn.LETTER_SPACING,
    pn.WORD_SPACING, pn.LINE_HEIGHT, pn.TEXT_LINE_THICKNESS, pn.LIST_ROW_GAP, pn.LIST_COLUMN_GAP,
    pn.GRID_ROW_GAP, pn.GRID_COLUMN_GAP, pn.COLUMN_GAP, pn.COLUMN_WIDTH, pn.OUTLINE_OFFSET,
)

_VIEW_COLOR_TAGS = (
    (pn.TEXT_COLOR, "color"),
    (pn.TEXT_LINE_COLOR, "text-decoration-color"),
    (pn.CARET_COLOR, pn.CARET_COLOR),
    (pn.ACCENT_COLOR, pn.ACCENT_COLOR),
)

_VIEW_ENUM_TAGS = (
    pn.OVERFLOW, pn.TEXT_ALIGN, pn.TEXT_TRANSFORM, pn.TEXT_WEIGHT, pn.TEXT_LINE_STYLE, pn.WRITING_MODE,
    pn.TEXT_DIRECTION, pn.VERTICAL_TEXT_ORIENTATION, pn.CELL_VERTICAL_ALIGN, pn.CELL_HORIZONTAL_ALIGN,
    pn.GRID_AUTO_FLOW, pn.CURSOR, pn.WHITE_SPACE, pn.WORD_BREAK, pn.TEXT_OVERFLOW, pn.TEXT_WRAP, pn.FLOAT,
    pn.TABLE_VERTICAL_ALIGN, pn.RESIZE, pn.MIX_BLEND_MODE, pn.BACKGROUND_BLEND_MODE,
)

# (tag, css property, css value when false, css value when true)
_VIEW_BOOL_TAGS = (
    (pn.ITALIC, "font-style", "normal", "italic"),
    (pn.SMALL_CAPS, "font-variant", "normal", "small-caps"),
)

EVENT_SUFFIX = "-event"


# --- Setters ---

def _side_setter(main_tag: str, sides: Dict[str, str]):
    def setter(properties: PropertyList, tag: str, value: Any) -> Optional[List[str]]:
        return set_bounds_side(properties, main_tag, sides[tag], value)
    return setter


def _size_list_item(tag: str, value: Any) -> Any:
    if isinstance(value, SizeUnit):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return px(value)
    if isinstance(value, str):
        text = value.strip()
        if text.startswith("@"):
            return text
        size = string_to_size_unit(text)
        if size is None:
            invalid_property_value(tag, value)
        return size
    not_compatible_type(tag, value)
    return None


def set_cell_sizes_property(properties: PropertyList, tag: str, value: Any) -> Optional[List[str]]:
    """Setter for ``cell-width`` and ``cell-height``: a size, a list of sizes or ``"a, b, c"``."""
    if isinstance(value, DataNode):
        if value.type == DataNodeType.ARRAY:
            value = [item for item in value.array_elements() if isinstance(item, str)]
        elif value.type == DataNodeType.TEXT:
            value = value.text()
        else:
            not_compatible_type(tag, value)
            return None

    if isinstance(value, str):
        text = value.strip()
        if text.startswith("@") and "," not in text:
            properties.set_raw(tag, text)
            return [tag]
        if text.startswith("[") and text.endswith("]"):
            text = text[1:-1]
        value = [item for item in text.split(",") if item.strip() != ""]

    if not isinstance(value, (list, tuple)):
        value = [value]

    sizes = []
    for item in value:
        size = _size_list_item(tag, item)
        if size is None:
            return None
        sizes.append(size)

    if len(sizes) == 1:
        properties.set_raw(tag, sizes[0])
    else:
        properties.set_raw(tag, sizes)
    return [tag]


def set_listener_property(properties: PropertyList, tag: str, value: Any) -> Optional[List[str]]:
    """Setter for ``<event>-event`` tags: one callable or a list of them."""
    if callable(value):
        listeners = [value]
    elif isinstance(value, (list, tuple)) and all(callable(item) for item in value):
        listeners = list(value)
    else:
        not_compatible_type(tag, value)
        return None
    properties.set_raw(tag, listeners if listeners else None)
    return [tag]


def _register_composite_setters() -> None:
    register_setter((pn.MARGIN, pn.PADDING), set_bounds_property)
    register_setter(_MARGIN_SIDES, _side_setter(pn.MARGIN, _MARGIN_SIDES))
    register_setter(_PADDING_SIDES, _side_setter(pn.PADDING, _PADDING_SIDES))
    register_setter((pn.RADIUS,), set_radius_property)
    register_setter(RADIUS_ELEMENTS, set_radius_element)
    register_setter((pn.BORDER,) + BORDER_ELEMENTS, set_border_property)
    register_setter((pn.OUTLINE,) + OUTLINE_ELEMENTS, set_outline_property)
    register_setter((pn.SHADOW, pn.TEXT_SHADOW), set_shadow_property)
    register_setter((pn.FILTER, pn.BACKDROP_FILTER), set_filter_property)
    register_setter((pn.CLIP, pn.SHAPE_OUTSIDE), set_clip_shape_property)
    register_setter((pn.BACKGROUND,), set_background_property)
    register_setter((pn.COLUMN_SEPARATOR,) + SEPARATOR_ELEMENTS, set_column_separator_property)
    register_setter((pn.TRANSFORM,) + TRANSFORM_TAGS, set_transform_property)
    register_setter((pn.TRANSITION,), set_transition_property)
    register_setter((pn.ANIMATION,), set_animation_property)
    register_setter((pn.CELL_WIDTH, pn.CELL_HEIGHT), set_cell_sizes_property)


_register_composite_setters()


# --- Container ---

class ViewStyle(PropertyList):
    """
    The properties of a view or of a theme style.

    Element tags of composite properties (``border-left-width``, ``radius-x``,
    ``margin-top``...) read and write inside their composite.
    Tags with no registered setter are kept as given.
    """

    def _get(self, tag: str) -> Any:
        if tag in BORDER_ELEMENTS:
            border = get_border_property(self)
            return border.get(tag) if border is not None else None
        if tag in RADIUS_ELEMENTS:
            return get_radius_element(self, tag)
        if tag in OUTLINE_ELEMENTS:
            outline = self.get_raw(pn.OUTLINE)
            return outline.get(tag) if isinstance(outline, OutlineProperty) else None
        if tag in SEPARATOR_ELEMENTS:
            separator = get_column_separator(self)
            return separator.get(tag) if separator is not None else None
        if tag in TRANSFORM_TAGS:
            transform = get_transform_property(self)
            return transform.get(tag) if transform is not None else None
        for main_tag, sides in ((pn.MARGIN, _MARGIN_SIDES), (pn.PADDING, _PADDING_SIDES)):
            if tag in sides:
                bounds = get_bounds_property(self, main_tag)
                return bounds.get(sides[tag]) if bounds is not None else None
        return self.get_raw(tag)

    def _set(self, tag: str, value: Any) -> Optional[List[str]]:
        if tag.endswith(EVENT_SUFFIX):
            return set_listener_property(self, tag, value)
        if tag in _UNTYPED_TAGS or tag in PROPERTY_SETTERS:
            return properties_set(self, tag, value)
        self.set_raw(tag, value)
        return [tag]

    def _remove(self, tag: str) -> List[str]:
        if tag in (pn.BORDER,) + BORDER_ELEMENTS:
            return remove_border_element(self, tag)
        if tag in (pn.OUTLINE,) + OUTLINE_ELEMENTS:
            return remove_outline_element(self, tag)
        if tag in RADIUS_ELEMENTS:
            return remove_radius_element(self, tag)
        if tag in (pn.COLUMN_SEPARATOR,) + SEPARATOR_ELEMENTS:
            return remove_column_separator_element(self, tag)
        if tag in (pn.TRANSFORM,) + TRANSFORM_TAGS:
            return remove_transform_element(self, tag)
        if tag in _MARGIN_SIDES:
            return remove_bounds_side(self, pn.MARGIN, _MARGIN_SIDES[tag])
        if tag in _PADDING_SIDES:
            return remove_bounds_side(self, pn.PADDING, _PADDING_SIDES[tag])
        return super()._remove(tag)

    # --- Transitions ---

    def transition(self, tag: str) -> Optional[AnimationProperty]:
        return get_transitions(self).get(self.normalize(tag))

    def transitions(self) -> Dict[str, AnimationProperty]:
        return dict(get_transitions(self))

    def set_transition(self, tag: str, animation: Optional[AnimationProperty]) -> None:
        transitions = dict(get_transitions(self))
        tag = self.normalize(tag)
        if animation is None:
            transitions.pop(tag, None)
        else:
            transitions[tag] = animation
        set_transitions(self, transitions)
        self._notify([pn.TRANSITION])

    # --- Output ---

    def css_view_style(self, builder: CSSBuilder, session) -> None:
        css_view_style(self, builder, session)

    def write_string(self, object_tag: str = "_") -> str:
        parts = []
        for tag in self.all_tags():
            value = self.get_raw(tag)
            if tag.endswith(EVENT_SUFFIX):
                continue
            if tag == pn.TRANSITION and isinstance(value, dict):
                text = "[" + ", ".join(animation.write_string(name) for name, animation in value.items()) + "]"
            else:
                text = property_value_to_string(value)
            if text != "":
                parts.append(f"{tag} = {text}")
        return f"{object_tag} {{ {', '.join(parts)} }}" if parts else f"{object_tag} {{ }}"


# Tags handled by the default rule of properties_set (strings only).
_UNTYPED_TAGS = frozenset((pn.ID, pn.STYLE, pn.STYLE_DISABLED, pn.FONT_NAME, pn.CONTENT, pn.TEXT))


def new_view_style(params: Optional[Dict[str, Any]] = None) -> ViewStyle:
    return ViewStyle(params)


# --- CSS helpers ---

def text_decoration_css(properties: PropertyList, session) -> str:
    """
    Joins the enabled line decorations.

    Returns ``none`` when a decoration flag was set but none is enabled, so the
    value overrides a decoration inherited from a theme style.
    """
    decorations = []
    explicit = False
    for tag, css in ((pn.STRIKETHROUGH, "line-through"), (pn.OVERLINE, "overline"), (pn.UNDERLINE, "underline")):
        flag = bool_property(properties, tag, session)
        if flag is not None:
            explicit = True
            if flag:
                decorations.append(css)
    if not decorations and explicit:
        return "none"
    return " ".join(decorations)


def grid_cell_sizes(properties: PropertyList, tag: str, session) -> List[SizeUnit]:
    value = properties.get_raw(tag)
    if value is None:
        return []
    if isinstance(value, SizeUnit):
        return [value]
    if isinstance(value, str):
        text, ok = resolve_text(session, value)
        if not ok:
            return []
        value = text.split(",")
    result = []
    for item in value:
        size = None
        if isinstance(item, SizeUnit):
            size = item
        elif isinstance(item, str):
            text, ok = resolve_text(session, item)
            if ok:
                size = string_to_size_unit(text.strip())
        result.append(size or auto_size())
    return result


def grid_cell_sizes_css(properties: PropertyList, tag: str, session) -> str:
    sizes = grid_cell_sizes(properties, tag, session)
    if not sizes:
        return ""
    if len(sizes) == 1:
        if sizes[0].is_auto():
            return ""
        return f"repeat(auto-fill, {sizes[0].css_string('auto', session)})"
    if all(size.is_auto() for size in sizes):
        return ""
    if all(size == sizes[0] for size in sizes):
        return f"repeat({len(sizes)}, {sizes[0].css_string('auto', session)})"
    return " ".join(size.css_string("auto", session) for size in sizes)


def _flex_css(properties: PropertyList, builder: CSSBuilder, session) -> None:
    wrap = enum_property(properties, pn.LIST_WRAP, session, 0)
    orientation = value_to_orientation(properties.get_raw(pn.ORIENTATION), session)
    if orientation is not None or wrap > 0:
        css = ENUM_PROPERTIES[pn.ORIENTATION].css_values[orientation or TOP_DOWN_ORIENTATION]
        if wrap == LIST_WRAP_ON:
            css += " wrap"
        elif wrap == LIST_WRAP_REVERSE:
            css += " wrap-reverse"
        builder.add("flex-flow", css)
    if orientation is None:
        orientation = TOP_DOWN_ORIENTATION

    rows = orientation in (START_TO_END_ORIENTATION, END_TO_START_ORIENTATION)
    h_tag, v_tag = ("justify-content", "align-items") if rows else ("align-items", "justify-content")

    align = enum_property(properties, pn.HORIZONTAL_ALIGN, session)
    if align is not None:
        reverse = (not rows and wrap == LIST_WRAP_REVERSE) or orientation == END_TO_START_ORIENTATION
        if align == LEFT_ALIGN:
            builder.add(h_tag, "flex-end" if reverse else "flex-start")
        elif align == RIGHT_ALIGN:
            builder.add(h_tag, "flex-start" if reverse else "flex-end")
        elif align == CENTER_ALIGN:
            builder.add(h_tag, "center")
        elif align == STRETCH_ALIGN:
            builder.add(h_tag, "space-between" if rows else "stretch")

    align = enum_property(properties, pn.VERTICAL_ALIGN, session)
    if align is not None:
        reverse = (rows and wrap == LIST_WRAP_REVERSE) or orientation == BOTTOM_UP_ORIENTATION
        # top and left share index 0, bottom and right share index 1
        if align == LEFT_ALIGN:
            builder.add(v_tag, "flex-end" if reverse else "flex-start")
        elif align == RIGHT_ALIGN:
            builder.add(v_tag, "flex-start" if reverse else "flex-end")
        elif align == CENTER_ALIGN:
            builder.add(v_tag, "center")
        elif align == STRETCH_ALIGN:
            builder.add(v_tag, "stretch" if rows else "space-between")


def _bool_css(properties: PropertyList, builder: CSSBuilder, session, tag: str, css_tag: str,
              off: str, on: str, prefixed: bool = False) -> None:
    flag = bool_property(properties, tag, session)
    if flag is None:
        return
    if prefixed:
        builder.add("-webkit-" + css_tag, on if flag else off)
    builder.add(css_tag, on if flag else off)


# --- The property -> CSS mapping ---

def css_view_style(properties: PropertyList, builder: CSSBuilder, session) -> None:
    visibility = enum_property(properties, pn.VISIBILITY, session)
    if visibility == INVISIBLE:
        builder.add("visibility", "hidden")
    elif visibility == GONE:
        builder.add("display", "none")

    for tag in (pn.MARGIN, pn.PADDING):
        bounds = get_bounds(properties, tag, session)
        if bounds is not None:
            bounds.css_value(tag, builder, session)

    border = get_border_property(properties)
    if border is not None:
        border.css_style(builder, session)
        border.css_width(builder, session)
        border.css_color(builder, session)

    get_radius(properties, session).css_value(builder, session)

    outline = properties.get_raw(pn.OUTLINE)
    if isinstance(outline, OutlineProperty):
        outline.css_value(builder, session)

    for tag in (pn.Z_INDEX, pn.ORDER):
        value = int_property(properties, tag, session)
        if value is not None:
            builder.add(tag, str(value))

    opacity = float_property(properties, pn.OPACITY, session)
    if opacity is not None and 0 <= opacity <= 1:
        builder.add(pn.OPACITY, f"{opacity:g}")

    for tag in (pn.COLUMN_COUNT, pn.TAB_SIZE):
        value = int_property(properties, tag, session)
        if value is not None and value > 0:
            builder.add(tag, str(value))

    for tag in _VIEW_SIZE_TAGS:
        size = size_property(properties, tag, session)
        if size is not None and not size.is_auto():
            builder.add(SIZE_PROPERTIES.get(tag, tag), size.css_string("", session))

    for tag, css_tag in _VIEW_COLOR_TAGS:
        color = color_property(properties, tag, session)
        if color is not None and color.alpha > 0:
            builder.add(css_tag, color.css_string())

    clip = enum_property(properties, pn.BACKGROUND_CLIP, session)
    if clip is not None:
        info = ENUM_PROPERTIES[pn.BACKGROUND_CLIP]
        builder.add(info.css_tag, info.css_values[clip])

    background = background_css(properties, session)
    if background:
        builder.add(pn.BACKGROUND, background)
    else:
        color = color_property(properties, pn.BACKGROUND_COLOR, session)
        if color is not None and color.alpha > 0:
            builder.add(pn.BACKGROUND_COLOR, color.css_string())

    font = string_property(properties, pn.FONT_NAME, session)
    if font:
        builder.add("font-family", font)

    writing_mode = 0
    for tag in _VIEW_ENUM_TAGS:
        if tag == pn.VERTICAL_TEXT_ORIENTATION and writing_mode in (VERTICAL_LEFT_TO_RIGHT, VERTICAL_RIGHT_TO_LEFT):
            continue
        value = enum_property(properties, tag, session)
        if value is None:
            continue
        info = ENUM_PROPERTIES[tag]
        if info.css_values[value] != "":
            builder.add(info.css_tag, info.css_values[value])
        if tag == pn.WRITING_MODE:
            writing_mode = value

    for tag, css_tag, off, on in _VIEW_BOOL_TAGS:
        _bool_css(properties, builder, session, tag, css_tag, off, on)

    decoration = text_decoration_css(properties, session)
    if decoration:
        builder.add("text-decoration", decoration)

    _bool_css(properties, builder, session, pn.USER_SELECT, "user-select", "none", "auto", prefixed=True)

    for tag, css_tag in ((pn.SHADOW, "box-shadow"), (pn.TEXT_SHADOW, "text-shadow")):
        css = shadow_css(properties, tag, session)
        if css:
            builder.add(css_tag, css)

    separator = get_column_separator(properties)
    if separator is not None:
        css = separator.css_value(session)
        if css:
            builder.add("column-rule", css)

    _bool_css(properties, builder, session, pn.AVOID_BREAK, "break-inside", "auto", "avoid")

    _flex_css(properties, builder, session)

    for tag in (pn.ROW, pn.COLUMN):
        cells = range_property(properties, tag, session)
        if cells is not None:
            builder.add(f"grid-{tag}-start", str(cells.first + 1))
            builder.add(f"grid-{tag}-end", str(cells.last + 2))

    for tag, css_tag in ((pn.CELL_WIDTH, "grid-template-columns"), (pn.CELL_HEIGHT, "grid-template-rows")):
        css = grid_cell_sizes_css(properties, tag, session)
        if css:
            builder.add(css_tag, css)

    write_view_transform_css(properties, builder, session)

    for tag, css_tag in ((pn.CLIP, "clip-path"), (pn.SHAPE_OUTSIDE, "shape-outside")):
        shape = get_clip_shape(properties, tag, session)
        if shape is not None and shape.valid(session):
            builder.add(css_tag, shape.css_style(session))

    view_filter = get_filter(properties, pn.FILTER)
    if view_filter is not None:
        css = view_filter.css_style(session)
        if css:
            builder.add(pn.FILTER, css)

    backdrop = get_filter(properties, pn.BACKDROP_FILTER)
    if backdrop is not None:
        css = backdrop.css_style(session)
        if css:
            builder.add("-webkit-backdrop-filter", css)
            builder.add(pn.BACKDROP_FILTER, css)

    css = transition_css(properties, session)
    if css:
        builder.add(pn.TRANSITION, css)

    css = animation_css(properties, session)
    if css:
        builder.add(pn.ANIMATION, css)

    _bool_css(properties, builder, session, pn.ANIMATION_PAUSED, "animation-play-state", "running", "paused")
    _bool_css(properties, builder, session, pn.COLUMN_SPAN_ALL, "column-span", "none", "all")


def view_style_css(properties: PropertyList, session) -> str:
    """The inline ``style`` attribute text of a view."""
    builder = ViewCSSBuilder()
    css_view_style(properties, builder, session)
    return builder.finish()
