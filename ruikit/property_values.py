# ruikit/property_values.py

"""
Per-tag value tables: which tags hold sizes, colors, booleans and so on, the
enum tables (accepted names plus the CSS property and values they map to) and
the tag alias table.
"""

from typing import Dict, NamedTuple, Tuple

from . import property_names as pn


class EnumInfo(NamedTuple):
    values: Tuple[str, ...]
    css_tag: str
    css_values: Tuple[str, ...]


def _enum(values: str, css_tag: str = "", css_values: str = "") -> EnumInfo:
    names = tuple(values.split())
    css = tuple(css_values.split("|")) if css_values else names
    return EnumInfo(names, css_tag, css)


# --- Enum constants ---

VISIBLE, INVISIBLE, GONE = 0, 1, 2

TOP_DOWN_ORIENTATION, START_TO_END_ORIENTATION, BOTTOM_UP_ORIENTATION, END_TO_START_ORIENTATION = 0, 1, 2, 3

LIST_WRAP_OFF, LIST_WRAP_ON, LIST_WRAP_REVERSE = 0, 1, 2

TOP_ALIGN, BOTTOM_ALIGN, LEFT_ALIGN, RIGHT_ALIGN = 0, 1, 0, 1
CENTER_ALIGN, STRETCH_ALIGN = 2, 3

NONE_LINE, SOLID_LINE, DASHED_LINE, DOTTED_LINE, DOUBLE_LINE = 0, 1, 2, 3, 4

HORIZONTAL_TOP_TO_BOTTOM, HORIZONTAL_BOTTOM_TO_TOP, VERTICAL_RIGHT_TO_LEFT, VERTICAL_LEFT_TO_RIGHT = 0, 1, 2, 3

SYSTEM_DIRECTION, LEFT_TO_RIGHT_DIRECTION, RIGHT_TO_LEFT_DIRECTION = 0, 1, 2

(TO_TOP_GRADIENT, TO_RIGHT_TOP_GRADIENT, TO_RIGHT_GRADIENT, TO_RIGHT_BOTTOM_GRADIENT,
 TO_BOTTOM_GRADIENT, TO_LEFT_BOTTOM_GRADIENT, TO_LEFT_GRADIENT, TO_LEFT_TOP_GRADIENT) = range(8)

ELLIPSE_GRADIENT, CIRCLE_GRADIENT = 0, 1
CLOSEST_SIDE_GRADIENT, CLOSEST_CORNER_GRADIENT, FARTHEST_SIDE_GRADIENT, FARTHEST_CORNER_GRADIENT = 0, 1, 2, 3

NORMAL_ANIMATION, REVERSE_ANIMATION, ALTERNATE_ANIMATION, ALTERNATE_REVERSE_ANIMATION = 0, 1, 2, 3

_LINE_STYLES = "none solid dashed dotted double"
_BLEND_MODES = ("normal multiply screen overlay darken lighten color-dodge color-burn hard-light "
                "soft-light difference exclusion hue saturation color luminosity")
_CURSORS = ("auto default none context-menu help pointer progress wait cell crosshair text "
            "vertical-text alias copy move no-drop not-allowed e-resize n-resize ne-resize "
            "nw-resize s-resize se-resize sw-resize w-resize ew-resize ns-resize nesw-resize "
            "nwse-resize col-resize row-resize all-scroll zoom-in zoom-out grab grabbing")

ENUM_PROPERTIES: Dict[str, EnumInfo] = {
    pn.SEMANTICS: _enum(
        "default article section aside header main footer navigation figure figure-caption "
        "button p h1 h2 h3 h4 h5 h6 blockquote code",
        "",
        "div|article|section|aside|header|main|footer|nav|figure|figcaption|button|p|h1|h2|h3|h4|h5|h6|blockquote|code"),
    pn.VISIBILITY: _enum("visible invisible gone"),
    pn.OVERFLOW: _enum("hidden visible scroll auto", pn.OVERFLOW),
    pn.TEXT_ALIGN: _enum("left right center justify", pn.TEXT_ALIGN),
    pn.TEXT_TRANSFORM: _enum("none capitalize lowercase uppercase", pn.TEXT_TRANSFORM),
    pn.TEXT_WEIGHT: _enum(
        "inherit thin extra-light light normal medium semi-bold bold extra-bold black",
        "font-weight", "inherit|100|200|300|normal|500|600|bold|800|900"),
    pn.WHITE_SPACE: _enum("normal nowrap pre pre-wrap pre-line break-spaces", pn.WHITE_SPACE),
    pn.WORD_BREAK: _enum("normal break-all keep-all break-word", pn.WORD_BREAK),
    pn.TEXT_OVERFLOW: _enum("clip ellipsis", pn.TEXT_OVERFLOW),
    pn.TEXT_WRAP: _enum("wrap nowrap balance", pn.TEXT_WRAP),
    pn.WRITING_MODE: _enum(
        "horizontal-top-to-bottom horizontal-bottom-to-top vertical-right-to-left vertical-left-to-right",
        pn.WRITING_MODE, "horizontal-tb|horizontal-bt|vertical-rl|vertical-lr"),
    pn.TEXT_DIRECTION: _enum("system left-to-right right-to-left", "direction", "|ltr|rtl"),
    pn.VERTICAL_TEXT_ORIENTATION: _enum("mixed upright", "text-orientation"),
    pn.TEXT_LINE_STYLE: _enum("inherit solid dashed dotted double wavy", "text-decoration-style"),
    pn.BORDER_STYLE: _enum(_LINE_STYLES, pn.BORDER_STYLE),
    pn.TOP_STYLE: _enum(_LINE_STYLES),
    pn.RIGHT_STYLE: _enum(_LINE_STYLES),
    pn.BOTTOM_STYLE: _enum(_LINE_STYLES),
    pn.LEFT_STYLE: _enum(_LINE_STYLES),
    pn.OUTLINE_STYLE: _enum(_LINE_STYLES, pn.OUTLINE_STYLE),
    pn.COLUMN_SEPARATOR_STYLE: _enum(_LINE_STYLES),
    pn.ORIENTATION: _enum("up-down start-to-end bottom-up end-to-start", "",
                          "column|row|column-reverse|row-reverse"),
    pn.LIST_WRAP: _enum("off on reverse", "", "nowrap|wrap|wrap-reverse"),
    pn.VERTICAL_ALIGN: _enum("top bottom center stretch"),
    pn.HORIZONTAL_ALIGN: _enum("left right center stretch"),
    pn.CELL_VERTICAL_ALIGN: _enum("top bottom center stretch", "align-items", "start|end|center|stretch"),
    pn.CELL_HORIZONTAL_ALIGN: _enum("left right center stretch", "justify-items", "start|end|center|stretch"),
    pn.CELL_VERTICAL_SELF_ALIGN: _enum("top bottom center stretch", "align-self", "start|end|center|stretch"),
    pn.CELL_HORIZONTAL_SELF_ALIGN: _enum("left right center stretch", "justify-self", "start|end|center|stretch"),
    pn.GRID_AUTO_FLOW: _enum("row column row-dense column-dense", pn.GRID_AUTO_FLOW,
                             "row|column|row dense|column dense"),
    pn.TABLE_VERTICAL_ALIGN: _enum("top bottom center stretch baseline", "vertical-align",
                                   "top|bottom|middle|baseline|baseline"),
    pn.CURSOR: _enum(_CURSORS, pn.CURSOR),
    pn.BACKGROUND_CLIP: _enum("border-box padding-box content-box", pn.BACKGROUND_CLIP),
    pn.DIRECTION: _enum(
        "to-top to-right-top to-right to-right-bottom to-bottom to-left-bottom to-left to-left-top", "",
        "to top|to right top|to right|to right bottom|to bottom|to left bottom|to left|to left top"),
    pn.ANIMATION_DIRECTION: _enum("normal reverse alternate alternate-reverse"),
    pn.RADIAL_GRADIENT_SHAPE: _enum("ellipse circle"),
    pn.RADIAL_GRADIENT_RADIUS: _enum("closest-side closest-corner farthest-side farthest-corner"),
    pn.FLOAT: _enum("none left right", pn.FLOAT),
    pn.RESIZE: _enum("none both horizontal vertical", pn.RESIZE),
    pn.MIX_BLEND_MODE: _enum(_BLEND_MODES, pn.MIX_BLEND_MODE),
    pn.BACKGROUND_BLEND_MODE: _enum(_BLEND_MODES, pn.BACKGROUND_BLEND_MODE),
    pn.COLUMN_FILL: _enum("balance auto", pn.COLUMN_FILL),
}

# Size-valued tags and the CSS property each one maps to.
SIZE_PROPERTIES: Dict[str, str] = {tag: tag for tag in (
    pn.WIDTH, pn.HEIGHT, pn.MIN_WIDTH, pn.MIN_HEIGHT, pn.MAX_WIDTH, pn.MAX_HEIGHT,
    pn.LEFT, pn.RIGHT, pn.TOP, pn.BOTTOM, pn.TEXT_INDENT, pn.LETTER_SPACING, pn.WORD_SPACING,
    pn.LINE_HEIGHT, pn.GRID_ROW_GAP, pn.GRID_COLUMN_GAP, pn.COLUMN_WIDTH, pn.COLUMN_GAP, pn.GAP,
    pn.MARGIN_LEFT, pn.MARGIN_RIGHT, pn.MARGIN_TOP, pn.MARGIN_BOTTOM,
    pn.PADDING_LEFT, pn.PADDING_RIGHT, pn.PADDING_TOP, pn.PADDING_BOTTOM,
    pn.BORDER_WIDTH, pn.BORDER_LEFT_WIDTH, pn.BORDER_RIGHT_WIDTH, pn.BORDER_TOP_WIDTH, pn.BORDER_BOTTOM_WIDTH,
    pn.OUTLINE_WIDTH, pn.OUTLINE_OFFSET, pn.X_OFFSET, pn.Y_OFFSET, pn.BLUR_RADIUS, pn.SPREAD_RADIUS,
    pn.PERSPECTIVE, pn.PERSPECTIVE_ORIGIN_X, pn.PERSPECTIVE_ORIGIN_Y,
    pn.TRANSFORM_ORIGIN_X, pn.TRANSFORM_ORIGIN_Y, pn.TRANSFORM_ORIGIN_Z,
    pn.TRANSLATE_X, pn.TRANSLATE_Y, pn.TRANSLATE_Z,
    pn.CENTER_X, pn.CENTER_Y,
    pn.X, pn.Y, pn.TOP_LEFT, pn.TOP_LEFT_X, pn.TOP_LEFT_Y, pn.TOP_RIGHT, pn.TOP_RIGHT_X, pn.TOP_RIGHT_Y,
    pn.BOTTOM_LEFT, pn.BOTTOM_LEFT_X, pn.BOTTOM_LEFT_Y, pn.BOTTOM_RIGHT, pn.BOTTOM_RIGHT_X, pn.BOTTOM_RIGHT_Y,
    pn.LEFT_WIDTH, pn.RIGHT_WIDTH, pn.TOP_WIDTH, pn.BOTTOM_WIDTH,
)}
SIZE_PROPERTIES.update({
    pn.TEXT_SIZE: "font-size",
    pn.TEXT_LINE_THICKNESS: "text-decoration-thickness",
    pn.LIST_ROW_GAP: "row-gap",
    pn.LIST_COLUMN_GAP: "column-gap",
})

COLOR_PROPERTIES = frozenset((
    pn.COLOR, pn.BACKGROUND_COLOR, pn.TEXT_COLOR, pn.CARET_COLOR, pn.BORDER_COLOR,
    pn.BORDER_LEFT_COLOR, pn.BORDER_RIGHT_COLOR, pn.BORDER_TOP_COLOR, pn.BORDER_BOTTOM_COLOR,
    pn.OUTLINE_COLOR, pn.TEXT_LINE_COLOR, pn.ACCENT_COLOR, pn.COLUMN_SEPARATOR_COLOR,
    pn.LEFT_COLOR, pn.RIGHT_COLOR, pn.TOP_COLOR, pn.BOTTOM_COLOR,
))

ANGLE_PROPERTIES = frozenset((pn.FROM, pn.ROTATE, pn.ROTATE_X, pn.ROTATE_Y, pn.ROTATE_Z,
                              pn.SKEW_X, pn.SKEW_Y, pn.HUE_ROTATE, pn.ANGLE))

BOOL_PROPERTIES = frozenset((
    pn.DISABLED, pn.FOCUSABLE, pn.INSET, pn.BACKFACE_VISIBLE, pn.ITALIC, pn.SMALL_CAPS,
    pn.STRIKETHROUGH, pn.OVERLINE, pn.UNDERLINE, pn.AVOID_BREAK, pn.NOT_TRANSLATE,
    pn.ANIMATION_PAUSED, pn.REPEATING, pn.USER_SELECT, pn.COLUMN_SPAN_ALL,
))

INT_PROPERTIES = frozenset((pn.Z_INDEX, pn.TAB_SIZE, pn.COLUMN_COUNT, pn.ORDER, pn.TAB_INDEX))

FLOAT_PROPERTIES: Dict[str, Tuple[float, float]] = {
    pn.OPACITY: (0.0, 1.0),
    pn.SCALE_X: (-1e308, 1e308),
    pn.SCALE_Y: (-1e308, 1e308),
    pn.SCALE_Z: (-1e308, 1e308),
}

RANGE_PROPERTIES = frozenset((pn.ROW, pn.COLUMN))

# Alternative spellings folded into canonical names before storage.
PROPERTY_ALIASES: Dict[str, str] = {
    "top-margin": pn.MARGIN_TOP,
    "right-margin": pn.MARGIN_RIGHT,
    "bottom-margin": pn.MARGIN_BOTTOM,
    "left-margin": pn.MARGIN_LEFT,
    "top-padding": pn.PADDING_TOP,
    "right-padding": pn.PADDING_RIGHT,
    "bottom-padding": pn.PADDING_BOTTOM,
    "left-padding": pn.PADDING_LEFT,
    "origin-x": pn.TRANSFORM_ORIGIN_X,
    "origin-y": pn.TRANSFORM_ORIGIN_Y,
    "origin-z": pn.TRANSFORM_ORIGIN_Z,
    "row-gap": pn.GRID_ROW_GAP,
    "wrap": pn.LIST_WRAP,
    "font": pn.FONT_NAME,
    "font-family": pn.FONT_NAME,
}


def normalize_tag(tag: str) -> str:
    """Lowercases, trims and resolves aliases."""
    tag = tag.strip().lower()
    return PROPERTY_ALIASES.get(tag, tag)
