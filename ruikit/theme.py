# ruikit/theme.py

"""
Themes: named constants, colors and images (each with a touch or dark
variant) plus view styles, optionally bound to media rules.

A theme is written in the data text format::

    theme {
        colors = _{ ruiTextColor = #FF000000 },
        colors:dark = _{ ruiTextColor = #FFE0E0E0 },
        constants = _{ ruiButtonRadius = 4px },
        styles = [ ruiButton { radius = @ruiButtonRadius } ],
        styles:landscape:width640 = [ ruiButton { padding = 8px } ],
    }
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .css_builder import CSSStyleBuilder
from .data import DataNodeType, DataObject, DataParseError, parse_data_text, quote_data_text
from .log import error_log, error_log_f
from .properties import parse_properties
from .view_style import ViewStyle, css_view_style

DEFAULT_MEDIA = 0
PORTRAIT_MEDIA = 1
LANDSCAPE_MEDIA = 2


@dataclass(frozen=True)
class MediaStyleParams:
    """When a media style applies. Zero means "no limit"."""
    orientation: int = DEFAULT_MEDIA
    min_width: int = 0
    max_width: int = 0
    min_height: int = 0
    max_height: int = 0

    def is_default(self) -> bool:
        return self == MediaStyleParams()

    def sort_key(self) -> Tuple[int, int, int, int, int]:
        return self.orientation, self.min_width, self.min_height, self.max_width, self.max_height

    def css_text(self) -> str:
        """The part of an ``@media screen`` rule after ``screen``."""
        parts = []
        if self.orientation == PORTRAIT_MEDIA:
            parts.append(" and (orientation: portrait)")
        elif self.orientation == LANDSCAPE_MEDIA:
            parts.append(" and (orientation: landscape)")

        for tag, min_size, max_size in (("width", self.min_width, self.max_width),
                                        ("height", self.min_height, self.max_height)):
            if min_size != max_size:
                if min_size > 0:
                    parts.append(f" and (min-{tag}: {min_size}.001px)")
                if max_size > 0:
                    parts.append(f" and (max-{tag}: {max_size}px)")
            elif min_size > 0:
                parts.append(f" and ({tag}: {min_size}px)")
        return "".join(parts)

    def section_suffix(self) -> str:
        """The ``:portrait:width100-200`` suffix of a ``styles`` section name."""
        text = ""
        if self.orientation == PORTRAIT_MEDIA:
            text += ":portrait"
        elif self.orientation == LANDSCAPE_MEDIA:
            text += ":landscape"
        for tag, min_size, max_size in (("width", self.min_width, self.max_width),
                                        ("height", self.min_height, self.max_height)):
            if min_size > 0:
                text += f":{tag}{min_size}-" + (str(max_size) if max_size > 0 else "")
            elif max_size > 0:
                text += f":{tag}{max_size}"
        return text


class MediaStyle:
    def __init__(self, params: MediaStyleParams, styles: Optional[Dict[str, ViewStyle]] = None):
        self.params = params
        self.styles: Dict[str, ViewStyle] = styles if styles is not None else {}

    def __eq__(self, other: object) -> bool:
        return isinstance(other, MediaStyle) and self.params == other.params and self.styles == other.styles

    __hash__ = None


def _size_range(element: str, name: str, text: str) -> Tuple[int, int]:
    """Parses ``N``, ``A-B`` and ``A-`` after a ``width``/``height`` prefix. Raises ValueError."""
    data = element[len(name):]
    min_size = max_size = 0
    if "-" in data:
        low, high = data.split("-", 1)
        if low:
            min_size = int(low)
        if high:
            max_size = int(high)
    else:
        max_size = int(data)
    if min_size == 0 and max_size == 0:
        raise ValueError(f'Invalid arguments of "{name}" tag in the style section "{text}"')
    return min_size, max_size


def parse_media_rule(text: str) -> Optional[MediaStyleParams]:
    """
    Parses a ``styles:portrait:width320-640:height480`` section name.

    Returns None, after logging, for unknown or duplicate elements.
    """
    orientation = DEFAULT_MEDIA
    width: Optional[Tuple[int, int]] = None
    height: Optional[Tuple[int, int]] = None

    for element in text.split(":")[1:]:
        if element in ("portrait", "landscape"):
            if orientation != DEFAULT_MEDIA:
                error_log(f'Duplicate orientation tag in the style section "{text}"')
                return None
            orientation = PORTRAIT_MEDIA if element == "portrait" else LANDSCAPE_MEDIA
            continue

        for name in ("width", "height"):
            if element.startswith(name):
                if (width if name == "width" else height) is not None:
                    error_log(f'Duplicate "{name}" tag in the style section "{text}"')
                    return None
                try:
                    sizes = _size_range(element, name, text)
                except ValueError as e:
                    error_log_f('Invalid style section name "%s": %s', text, e)
                    return None
                if name == "width":
                    width = sizes
                else:
                    height = sizes
                break
        else:
            error_log_f('Unknown element "%s" in the style section name "%s"', element, text)
            return None

    width = width or (0, 0)
    height = height or (0, 0)
    return MediaStyleParams(orientation, width[0], width[1], height[0], height[1])


def _object_to_style(obj: DataObject) -> ViewStyle:
    style = ViewStyle()
    parse_properties(style, obj)
    return style


def _sorted_style_names(styles: Dict[str, ViewStyle]) -> List[str]:
    rui = sorted(tag for tag in styles if tag.startswith("rui"))
    custom = sorted(tag for tag in styles if not tag.startswith("rui"))
    return rui + custom


class Theme:
    """A named set of constants, colors, images and styles."""

    def __init__(self, name: str = ""):
        self.name = name
        self.constants: Dict[str, str] = {}
        self.touch_constants: Dict[str, str] = {}
        self.colors: Dict[str, str] = {}
        self.dark_colors: Dict[str, str] = {}
        self.images: Dict[str, str] = {}
        self.dark_images: Dict[str, str] = {}
        self.styles: Dict[str, ViewStyle] = {}
        self.media_styles: List[MediaStyle] = []

    # --- Constants, colors, images ---

    @staticmethod
    def _set_pair(table: Dict[str, str], alt_table: Dict[str, str], tag: str, value: str, alt_value: str) -> None:
        value = value.strip(" \t")
        if value == "":
            table.pop(tag, None)
            alt_table.pop(tag, None)
            return
        table[tag] = value
        alt_value = alt_value.strip(" \t")
        if alt_value == "":
            alt_table.pop(tag, None)
        else:
            alt_table[tag] = alt_value

    @staticmethod
    def _lookup(table: Dict[str, str], alt_table: Dict[str, str], tag: str, alt: bool) -> str:
        if alt and alt_table.get(tag):
            return alt_table[tag]
        return table.get(tag, "")

    def constant(self, tag: str, touch: bool = False) -> str:
        return self._lookup(self.constants, self.touch_constants, tag, touch)

    def set_constant(self, tag: str, value: str, touch_value: str = "") -> None:
        self._set_pair(self.constants, self.touch_constants, tag, value, touch_value)

    def color(self, tag: str, dark: bool = False) -> str:
        return self._lookup(self.colors, self.dark_colors, tag, dark)

    def set_color(self, tag: str, color: str, dark_color: str = "") -> None:
        self._set_pair(self.colors, self.dark_colors, tag, color, dark_color)

    def image(self, tag: str, dark: bool = False) -> str:
        return self._lookup(self.images, self.dark_images, tag, dark)

    def set_image(self, tag: str, image: str, dark_image: str = "") -> None:
        self._set_pair(self.images, self.dark_images, tag, image, dark_image)

    def constant_tags(self) -> List[str]:
        return sorted(set(self.constants) | set(self.touch_constants))

    def color_tags(self) -> List[str]:
        return sorted(set(self.colors) | set(self.dark_colors))

    def image_constant_tags(self) -> List[str]:
        return sorted(set(self.images) | set(self.dark_images))

    # --- Styles ---

    def style(self, tag: str) -> Optional[ViewStyle]:
        return self.styles.get(tag)

    def set_style(self, tag: str, style: Optional[ViewStyle]) -> None:
        if style is None:
            self.styles.pop(tag, None)
        else:
            self.styles[tag] = style

    def remove_style(self, tag: str) -> None:
        """Removes the style, its ``tag:state`` variants and its media styles."""
        prefix = tag + ":"

        def remove(styles: Dict[str, ViewStyle]) -> None:
            for name in [name for name in styles if name == tag or name.startswith(prefix)]:
                del styles[name]

        remove(self.styles)
        for media in self.media_styles:
            remove(media.styles)

    def media_style(self, tag: str, params: MediaStyleParams) -> Optional[ViewStyle]:
        for media in self.media_styles:
            if media.params == params and tag in media.styles:
                return media.styles[tag]
        if params.is_default():
            return self.style(tag)
        return None

    def set_media_style(self, tag: str, params: MediaStyleParams, style: Optional[ViewStyle]) -> None:
        params = MediaStyleParams(params.orientation, max(params.min_width, 0), max(params.max_width, 0),
                                  max(params.min_height, 0), max(params.max_height, 0))
        if params.is_default():
            self.set_style(tag, style)
            return

        for media in self.media_styles:
            if media.params == params:
                if style is None:
                    media.styles.pop(tag, None)
                else:
                    media.styles[tag] = style
                return

        if style is not None:
            self.media_styles.append(MediaStyle(params, {tag: style}))
            self.sort_media_styles()

    def style_tags(self) -> List[str]:
        """Base style names (without ``:state`` suffixes) defined anywhere in the theme."""
        tags = {name.split(":", 1)[0] for name in self.styles}
        for media in self.media_styles:
            tags.update(name.split(":", 1)[0] for name in media.styles)
        tags.discard("")
        return sorted(tags)

    def media_styles_of(self, tag: str) -> List[Tuple[str, MediaStyleParams]]:
        """(selectors, params) pairs of every state and media variant of a style."""
        prefix = tag + ":"
        result = [(name[len(prefix):], MediaStyleParams()) for name in self.styles if name.startswith(prefix)]
        for media in self.media_styles:
            if tag in media.styles:
                result.append(("", media.params))
            result.extend((name[len(prefix):], media.params) for name in media.styles if name.startswith(prefix))
        return result

    def sort_media_styles(self) -> None:
        self.media_styles.sort(key=lambda media: media.params.sort_key())

    # --- Composition ---

    def append(self, other: "Theme") -> None:
        """Copies every entry of another theme over this one."""
        self.constants.update(other.constants)
        self.touch_constants.update(other.touch_constants)
        self.colors.update(other.colors)
        self.dark_colors.update(other.dark_colors)
        self.images.update(other.images)
        self.dark_images.update(other.dark_images)
        self.styles.update(other.styles)

        for other_media in other.media_styles:
            for media in self.media_styles:
                if media.params == other_media.params:
                    media.styles.update(other_media.styles)
                    break
            else:
                self.media_styles.append(MediaStyle(other_media.params, dict(other_media.styles)))
        self.sort_media_styles()

    # --- Text form ---

    def add_text(self, text: str) -> bool:
        try:
            data = parse_data_text(text)
        except DataParseError as e:
            error_log(str(e))
            return False
        if data.tag != "theme":
            error_log_f('Invalid theme object tag "%s"', data.tag)
            return False

        tables = {
            "constants": self.constants,
            "constants:touch": self.touch_constants,
            "colors": self.colors,
            "colors:dark": self.dark_colors,
            "images": self.images,
            "images:dark": self.dark_images,
        }

        for node in data:
            tag = node.tag
            if tag == "name":
                if node.type == DataNodeType.TEXT:
                    self.name = node.text()
            elif tag in tables:
                if node.type == DataNodeType.OBJECT:
                    table = tables[tag]
                    for prop in node.object():
                        if prop.type == DataNodeType.TEXT:
                            table[prop.tag] = prop.text()
            elif tag == "styles":
                if node.type == DataNodeType.ARRAY:
                    for element in node.array_elements():
                        if isinstance(element, DataObject):
                            self.styles[element.tag] = _object_to_style(element)
            elif tag.startswith("styles:"):
                if node.type != DataNodeType.ARRAY:
                    continue
                params = parse_media_rule(tag)
                if params is None:
                    continue
                styles = {element.tag: _object_to_style(element)
                          for element in node.array_elements() if isinstance(element, DataObject)}
                if params.is_default():
                    self.styles.update(styles)
                else:
                    self.media_styles.append(MediaStyle(params, styles))
            else:
                error_log_f('Unknown theme section "%s"', tag)

        self.sort_media_styles()
        return True

    def __str__(self) -> str:
        lines = ["theme {\n"]
        if self.name:
            lines.append(f"\tname = {quote_data_text(self.name)},\n")

        for section, table in (("colors", self.colors), ("colors:dark", self.dark_colors),
                               ("images", self.images), ("images:dark", self.dark_images),
                               ("constants", self.constants), ("constants:touch", self.touch_constants)):
            entries = [(name, table[name]) for name in sorted(table) if table[name] != ""]
            if not entries:
                continue
            lines.append(f"\t{section} = _{{\n")
            for name, value in entries:
                lines.append(f"\t\t{quote_data_text(name)} = {quote_data_text(value)},\n")
            lines.append("\t},\n")

        def write_styles(suffix: str, styles: Dict[str, ViewStyle]) -> None:
            names = [name for name in sorted(styles) if not styles[name].is_empty()]
            if not names:
                return
            lines.append(f"\tstyles{suffix} = [\n")
            for name in names:
                lines.append(f"\t\t{styles[name].write_string(name)},\n")
            lines.append("\t],\n")

        write_styles("", self.styles)
        for media in self.media_styles:
            write_styles(media.params.section_suffix(), media.styles)

        lines.append("}\n")
        return "".join(lines)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Theme):
            return NotImplemented
        return (self.constants == other.constants and self.touch_constants == other.touch_constants and
                self.colors == other.colors and self.dark_colors == other.dark_colors and
                self.images == other.images and self.dark_images == other.dark_images and
                self.styles == other.styles and self.media_styles == other.media_styles)

    __hash__ = None

    # --- CSS ---

    def css_text(self, session) -> str:
        """The stylesheet of every style and media style, resolved through the session."""
        builder = CSSStyleBuilder()

        def write_styles(styles: Dict[str, ViewStyle]) -> None:
            for name in _sorted_style_names(styles):
                style = styles[name]
                if style is not None and builder.start_style(name):
                    css_view_style(style, builder, session)
                    builder.end_style()

        write_styles(self.styles)
        for media in self.media_styles:
            builder.start_media(media.params.css_text())
            write_styles(media.styles)
            builder.end_media()

        return builder.finish()


def create_theme_from_text(text: str, name: str = "") -> Optional[Theme]:
    """Parses theme text. Returns None, after logging, when the text is not a valid theme."""
    theme = Theme(name)
    if theme.add_text(text):
        return theme
    return None


def concat(*themes: Optional[Theme]) -> Theme:
    """A new theme with the entries of every given theme, later ones winning."""
    result = Theme()
    for theme in themes:
        if theme is not None:
            result.append(theme)
    return result
