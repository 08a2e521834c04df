# ruikit/resolver.py

"""
Per-session resolution of ``@name`` references.

A `ThemeResolver` sees the default theme overlaid with the session's custom
theme. The touch and dark flags select the variant tables, falling back to the
regular tables on a miss. Every typed getter in `ruikit.properties` takes the
resolver (or a session delegating to it) as its ``session`` argument.
"""

import logging
from typing import List, Optional, Tuple

from .color import Color, string_to_color
from .log import error_log_f
from .theme import Theme, concat

logger = logging.getLogger(__name__)

# Separators that split a composite value such as ``@gap 4px`` or ``@w/@h``.
CONSTANT_SEPARATORS = (",", " ", ":", ";", "|", "/")


class ThemeResolver:

    def __init__(self, default_theme: Optional[Theme] = None, custom_theme: Optional[Theme] = None,
                 dark: bool = False, touch: bool = False):
        if default_theme is None:
            from .resources import default_theme as load_default_theme
            default_theme = load_default_theme()
        self._default_theme = default_theme
        self._custom_theme = custom_theme
        self._current_theme: Optional[Theme] = None
        self.dark_theme = dark
        self.touch_screen = touch

    # --- Themes ---

    @property
    def default_theme(self) -> Theme:
        return self._default_theme

    @property
    def custom_theme(self) -> Optional[Theme]:
        return self._custom_theme

    def set_custom_theme(self, theme: Optional[Theme]) -> None:
        self._custom_theme = theme
        self._current_theme = None
        logger.debug("custom theme set to %r", theme.name if theme is not None else None)

    def current_theme(self) -> Theme:
        """The default theme overlaid with the custom one. Memoized until the custom theme changes."""
        if self._custom_theme is None:
            return self._default_theme
        if self._current_theme is None:
            self._current_theme = concat(self._default_theme, self._custom_theme)
        return self._current_theme

    # --- Constants ---

    def _constant(self, tag: str, prev_tags: List[str]) -> Tuple[str, bool]:
        if tag in prev_tags:
            error_log_f('"%s" constant is cyclic', tag)
            return "", False
        tags = prev_tags + [tag]
        theme = self.current_theme()
        while True:
            result = None
            if self.touch_screen:
                result = theme.touch_constants.get(tag)
            if result is None:
                result = theme.constants.get(tag)
            if result is None:
                error_log_f('"%s" constant not found', tag)
                return "", False

            if len(result) < 2 or "@" not in result:
                return result, True

            if any(separator in result for separator in CONSTANT_SEPARATORS):
                return self._resolve_next(result, tags)

            if result[0] != "@":
                return result, True

            tag = result[1:]
            if tag in tags:
                error_log_f('"%s" constant is cyclic', tag)
                return "", False
            tags.append(tag)

    def constant(self, tag: str) -> Optional[str]:
        text, ok = self._constant(tag, [])
        return text if ok else None

    def resolve_constants(self, value: str) -> Tuple[str, bool]:
        """Replaces every ``@name`` token in the value. The flag is False when any token fails."""
        return self._resolve_next(value, [])

    def _resolve_next(self, value: str, prev_tags: List[str]) -> Tuple[str, bool]:
        if "@" not in value:
            return value, True

        index, separator = -1, ""
        for sep in CONSTANT_SEPARATORS:
            i = value.find(sep)
            if i >= 0 and (index < 0 or i < index):
                index, separator = i, sep

        if index < 0:
            if len(value) > 1 and value[0] == "@":
                text, ok = self._constant(value[1:], prev_tags)
                if ok:
                    return self._resolve_next(text, prev_tags)
            return value, False

        left = value[:index].strip(" \t\r\n")
        right = value[index + 1:].strip(" \t\r\n")
        if len(left) > 1 and left[0] == "@":
            text, ok = self._constant(left[1:], prev_tags)
            if not ok:
                return value, False
            left, ok = self._resolve_next(text, prev_tags)
            if not ok:
                return left + separator + right, False

        right, ok = self._resolve_next(right, prev_tags)
        return left + separator + right, ok

    # --- Colors and images ---

    def _chain(self, kind: str, table, dark_table, tag: str) -> Optional[str]:
        tags = [tag]
        while True:
            result = None
            if self.dark_theme:
                result = dark_table.get(tag)
            if result is None:
                result = table.get(tag)
            if result is None:
                error_log_f('"%s" %s not found', tag, kind)
                return None
            if result == "" or result[0] != "@":
                return result
            tag = result[1:]
            if tag in tags:
                error_log_f('"%s" %s is cyclic', tag, kind)
                return None
            tags.append(tag)

    def color(self, tag: str) -> Optional[Color]:
        theme = self.current_theme()
        text = self._chain("color", theme.colors, theme.dark_colors, tag)
        if text is None:
            return None
        color = string_to_color(text)
        if color is None:
            error_log_f('invalid value "%s" of "%s" color constant', text, tag)
        return color

    def image_constant(self, tag: str) -> Optional[str]:
        theme = self.current_theme()
        return self._chain("image", theme.images, theme.dark_images, tag)

    # --- Listing ---

    def constant_tags(self) -> List[str]:
        return self.current_theme().constant_tags()

    def color_tags(self) -> List[str]:
        return self.current_theme().color_tags()

    def image_constant_tags(self) -> List[str]:
        return self.current_theme().image_constant_tags()

    def css_text(self) -> str:
        """The stylesheet of the current theme, resolved with this resolver's flags."""
        return self.current_theme().css_text(self)
