# ruikit/property_names.py

"""
Canonical property names. Every tag stored in a property container is one of
these strings (or a custom tag chosen by application code).
"""

# --- View ---
ID = "id"
STYLE = "style"
STYLE_DISABLED = "style-disabled"
DISABLED = "disabled"
FOCUSABLE = "focusable"
SEMANTICS = "semantics"
VISIBILITY = "visibility"
Z_INDEX = "z-index"
OPACITY = "opacity"
OVERFLOW = "overflow"
ORDER = "order"
TAB_INDEX = "tabindex"
TOOLTIP = "tooltip"
USER_DATA = "user-data"
CONTENT = "content"
TEXT = "text"
DATA_LIST = "data-list"
NOT_TRANSLATE = "not-translate"

# --- Position and size ---
ROW = "row"
COLUMN = "column"
LEFT = "left"
RIGHT = "right"
TOP = "top"
BOTTOM = "bottom"
WIDTH = "width"
HEIGHT = "height"
MIN_WIDTH = "min-width"
MIN_HEIGHT = "min-height"
MAX_WIDTH = "max-width"
MAX_HEIGHT = "max-height"

MARGIN = "margin"
MARGIN_LEFT = "margin-left"
MARGIN_RIGHT = "margin-right"
MARGIN_TOP = "margin-top"
MARGIN_BOTTOM = "margin-bottom"
PADDING = "padding"
PADDING_LEFT = "padding-left"
PADDING_RIGHT = "padding-right"
PADDING_TOP = "padding-top"
PADDING_BOTTOM = "padding-bottom"

# --- Colors and background ---
ACCENT_COLOR = "accent-color"
BACKGROUND_COLOR = "background-color"
BACKGROUND = "background"
BACKGROUND_CLIP = "background-clip"
BACKGROUND_BLEND_MODE = "background-blend-mode"
MIX_BLEND_MODE = "mix-blend-mode"
CARET_COLOR = "caret-color"
COLOR = "color"

# --- Border, outline, radius ---
BORDER = "border"
BORDER_LEFT = "border-left"
BORDER_RIGHT = "border-right"
BORDER_TOP = "border-top"
BORDER_BOTTOM = "border-bottom"
BORDER_STYLE = "border-style"
BORDER_LEFT_STYLE = "border-left-style"
BORDER_RIGHT_STYLE = "border-right-style"
BORDER_TOP_STYLE = "border-top-style"
BORDER_BOTTOM_STYLE = "border-bottom-style"
BORDER_WIDTH = "border-width"
BORDER_LEFT_WIDTH = "border-left-width"
BORDER_RIGHT_WIDTH = "border-right-width"
BORDER_TOP_WIDTH = "border-top-width"
BORDER_BOTTOM_WIDTH = "border-bottom-width"
BORDER_COLOR = "border-color"
BORDER_LEFT_COLOR = "border-left-color"
BORDER_RIGHT_COLOR = "border-right-color"
BORDER_TOP_COLOR = "border-top-color"
BORDER_BOTTOM_COLOR = "border-bottom-color"

LEFT_STYLE = "left-style"
RIGHT_STYLE = "right-style"
TOP_STYLE = "top-style"
BOTTOM_STYLE = "bottom-style"
LEFT_WIDTH = "left-width"
RIGHT_WIDTH = "right-width"
TOP_WIDTH = "top-width"
BOTTOM_WIDTH = "bottom-width"
LEFT_COLOR = "left-color"
RIGHT_COLOR = "right-color"
TOP_COLOR = "top-color"
BOTTOM_COLOR = "bottom-color"

OUTLINE = "outline"
OUTLINE_STYLE = "outline-style"
OUTLINE_COLOR = "outline-color"
OUTLINE_WIDTH = "outline-width"
OUTLINE_OFFSET = "outline-offset"

RADIUS = "radius"
RADIUS_X = "radius-x"
RADIUS_Y = "radius-y"
RADIUS_TOP_LEFT = "radius-top-left"
RADIUS_TOP_LEFT_X = "radius-top-left-x"
RADIUS_TOP_LEFT_Y = "radius-top-left-y"
RADIUS_TOP_RIGHT = "radius-top-right"
RADIUS_TOP_RIGHT_X = "radius-top-right-x"
RADIUS_TOP_RIGHT_Y = "radius-top-right-y"
RADIUS_BOTTOM_LEFT = "radius-bottom-left"
RADIUS_BOTTOM_LEFT_X = "radius-bottom-left-x"
RADIUS_BOTTOM_LEFT_Y = "radius-bottom-left-y"
RADIUS_BOTTOM_RIGHT = "radius-bottom-right"
RADIUS_BOTTOM_RIGHT_X = "radius-bottom-right-x"
RADIUS_BOTTOM_RIGHT_Y = "radius-bottom-right-y"

# radius sub-property names
X = "x"
Y = "y"
TOP_LEFT = "top-left"
TOP_LEFT_X = "top-left-x"
TOP_LEFT_Y = "top-left-y"
TOP_RIGHT = "top-right"
TOP_RIGHT_X = "top-right-x"
TOP_RIGHT_Y = "top-right-y"
BOTTOM_LEFT = "bottom-left"
BOTTOM_LEFT_X = "bottom-left-x"
BOTTOM_LEFT_Y = "bottom-left-y"
BOTTOM_RIGHT = "bottom-right"
BOTTOM_RIGHT_X = "bottom-right-x"
BOTTOM_RIGHT_Y = "bottom-right-y"

# --- Shadow ---
SHADOW = "shadow"
TEXT_SHADOW = "text-shadow"
INSET = "inset"
X_OFFSET = "x-offset"
Y_OFFSET = "y-offset"
BLUR_RADIUS = "blur"
SPREAD_RADIUS = "spread-radius"

# --- Text ---
FONT_NAME = "font-name"
TEXT_COLOR = "text-color"
TEXT_SIZE = "text-size"
ITALIC = "italic"
SMALL_CAPS = "small-caps"
STRIKETHROUGH = "strikethrough"
OVERLINE = "overline"
UNDERLINE = "underline"
TEXT_LINE_THICKNESS = "text-line-thickness"
TEXT_LINE_STYLE = "text-line-style"
TEXT_LINE_COLOR = "text-line-color"
TEXT_WEIGHT = "text-weight"
TEXT_ALIGN = "text-align"
TEXT_INDENT = "text-indent"
TEXT_WRAP = "text-wrap"
TAB_SIZE = "tab-size"
LETTER_SPACING = "letter-spacing"
WORD_SPACING = "word-spacing"
LINE_HEIGHT = "line-height"
WHITE_SPACE = "white-space"
WORD_BREAK = "word-break"
TEXT_TRANSFORM = "text-transform"
TEXT_DIRECTION = "text-direction"
WRITING_MODE = "writing-mode"
VERTICAL_TEXT_ORIENTATION = "vertical-text-orientation"
TEXT_OVERFLOW = "text-overflow"
USER_SELECT = "user-select"

# --- Layout ---
ORIENTATION = "orientation"
LIST_WRAP = "list-wrap"
VERTICAL_ALIGN = "vertical-align"
HORIZONTAL_ALIGN = "horizontal-align"
GAP = "gap"
LIST_ROW_GAP = "list-row-gap"
LIST_COLUMN_GAP = "list-column-gap"
GRID_ROW_GAP = "grid-row-gap"
GRID_COLUMN_GAP = "grid-column-gap"
GRID_AUTO_FLOW = "grid-auto-flow"
CELL_WIDTH = "cell-width"
CELL_HEIGHT = "cell-height"
CELL_VERTICAL_ALIGN = "cell-vertical-align"
CELL_HORIZONTAL_ALIGN = "cell-horizontal-align"
CELL_VERTICAL_SELF_ALIGN = "cell-vertical-self-align"
CELL_HORIZONTAL_SELF_ALIGN = "cell-horizontal-self-align"
TABLE_VERTICAL_ALIGN = "table-vertical-align"
FLOAT = "float"
RESIZE = "resize"
CURSOR = "cursor"

COLUMN_COUNT = "column-count"
COLUMN_WIDTH = "column-width"
COLUMN_GAP = "column-gap"
COLUMN_FILL = "column-fill"
COLUMN_SPAN_ALL = "column-span-all"
AVOID_BREAK = "avoid-break"
COLUMN_SEPARATOR = "column-separator"
COLUMN_SEPARATOR_STYLE = "column-separator-style"
COLUMN_SEPARATOR_WIDTH = "column-separator-width"
COLUMN_SEPARATOR_COLOR = "column-separator-color"

# --- Background elements ---
GRADIENT = "gradient"
DIRECTION = "direction"
REPEATING = "repeating"
FROM = "from"
RADIAL_GRADIENT_RADIUS = "radial-gradient-radius"
RADIAL_GRADIENT_SHAPE = "radial-gradient-shape"
CENTER_X = "center-x"
CENTER_Y = "center-y"
ANGLE = "angle"

# --- Clip ---
CLIP = "clip"
SHAPE_OUTSIDE = "shape-outside"
SHAPE = "shape"
POINTS = "points"

# --- Filter ---
FILTER = "filter"
BACKDROP_FILTER = "backdrop-filter"
BLUR = "blur"
BRIGHTNESS = "brightness"
CONTRAST = "contrast"
DROP_SHADOW = "drop-shadow"
GRAYSCALE = "grayscale"
HUE_ROTATE = "hue-rotate"
INVERT = "invert"
SATURATE = "saturate"
SEPIA = "sepia"

# --- Transform ---
TRANSFORM = "transform"
PERSPECTIVE = "perspective"
PERSPECTIVE_ORIGIN_X = "perspective-origin-x"
PERSPECTIVE_ORIGIN_Y = "perspective-origin-y"
BACKFACE_VISIBLE = "backface-visibility"
TRANSFORM_ORIGIN_X = "transform-origin-x"
TRANSFORM_ORIGIN_Y = "transform-origin-y"
TRANSFORM_ORIGIN_Z = "transform-origin-z"
TRANSLATE_X = "translate-x"
TRANSLATE_Y = "translate-y"
TRANSLATE_Z = "translate-z"
SCALE_X = "scale-x"
SCALE_Y = "scale-y"
SCALE_Z = "scale-z"
ROTATE = "rotate"
ROTATE_X = "rotate-x"
ROTATE_Y = "rotate-y"
ROTATE_Z = "rotate-z"
SKEW_X = "skew-x"
SKEW_Y = "skew-y"

# --- Animation ---
TRANSITION = "transition"
ANIMATION = "animation"
ANIMATION_PAUSED = "animation-paused"
DURATION = "duration"
DELAY = "delay"
TIMING_FUNCTION = "timing-function"
ITERATION_COUNT = "iteration-count"
ANIMATION_DIRECTION = "animation-direction"
PROPERTY = "property"
