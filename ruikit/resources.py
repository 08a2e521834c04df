# ruikit/resources.py

"""
Application resources: the built-in default theme, the registry of named
themes, and the files served next to the start page.

Layout of a resource directory::

    resources/
        themes/   *.rui theme files, scanned recursively
        images/   image files, served by file name
        raw/      any other files, served by file name
"""

import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional

from .log import error_log, error_log_f
from .theme import Theme, create_theme_from_text

logger = logging.getLogger(__name__)

THEME_EXTENSION = ".rui"
THEMES_DIR = "themes"
IMAGES_DIR = "images"
RAW_DIR = "raw"

STATIC_DIR = Path(__file__).resolve().parent / "static"

DEFAULT_THEME_TEXT = """
theme {
    colors = _{
        ruiBackgroundColor = #FFFFFFFF,
        ruiTextColor = #FF000000,
        ruiDisabledTextColor = #FF202020,
        ruiHighlightColor = #FF1A74E8,
        ruiHighlightTextColor = #FFFFFFFF,
        ruiButtonColor = #FFE0E0E0,
        ruiButtonActiveColor = @ruiHighlightColor,
        ruiButtonTextColor = #FF000000,
        ruiButtonDisabledColor = #FFE0E0E0,
        ruiButtonDisabledTextColor = @ruiDisabledTextColor,
        ruiPopupBackgroundColor = #FFFFFFFF,
        ruiPopupTextColor = #FF000000,
        ruiPopupTitleColor = @ruiHighlightColor,
        ruiPopupTitleTextColor = #FFFFFFFF,
        ruiTooltipBackground = #FFFFFFFF,
        ruiTooltipTextColor = #FF000000,
        ruiTooltipShadowColor = #80000000,
        ruiSelectedColor = #FFE0E0E0,
        ruiSelectedTextColor = #FF000000,
        ruiTabBackgroundColor = #FFEEEEEE,
        ruiTabTextColor = #FF404040,
        ruiCurrentTabColor = #FFFFFFFF,
        ruiCurrentTabTextColor = #FF000000,
    },
    colors:dark = _{
        ruiBackgroundColor = #FF080808,
        ruiTextColor = #FFF0F0F0,
        ruiDisabledTextColor = #FFA0A0A0,
        ruiHighlightColor = #FF1A74E8,
        ruiButtonColor = #FF404040,
        ruiButtonTextColor = #FFF0F0F0,
        ruiButtonDisabledColor = #FF404040,
        ruiPopupBackgroundColor = #FF202020,
        ruiPopupTextColor = #FFF0F0F0,
        ruiTooltipBackground = #FF303030,
        ruiTooltipTextColor = #FFDDDDDD,
        ruiTooltipShadowColor = #80808080,
        ruiSelectedColor = #FF404040,
        ruiSelectedTextColor = #FFF0F0F0,
        ruiTabBackgroundColor = #FF181818,
        ruiTabTextColor = #FFA0A0A0,
        ruiCurrentTabColor = #FF404040,
        ruiCurrentTabTextColor = #FFF0F0F0,
    },
    constants = _{
        ruiButtonHorizontalPadding = 16px,
        ruiButtonVerticalPadding = 8px,
        ruiButtonMargin = 4px,
        ruiButtonRadius = 4px,
        ruiButtonTextSize = 1em,
        ruiCheckboxGap = 4px,
        ruiListItemHorizontalPadding = 12px,
        ruiListItemVerticalPadding = 4px,
        ruiPopupRadius = 4px,
        ruiPopupTitleHeight = 24px,
        ruiTabRadius = 2px,
        ruiTextSize = 10pt,
        ruiTooltipRadius = 4px,
    },
    constants:touch = _{
        ruiButtonHorizontalPadding = 20px,
        ruiButtonVerticalPadding = 16px,
        ruiListItemVerticalPadding = 12px,
    },
    styles = [
        ruiApp {
            text-size = @ruiTextSize,
            text-color = @ruiTextColor,
            background-color = @ruiBackgroundColor,
        },
        ruiButton {
            text-align = center,
            padding = "@ruiButtonVerticalPadding, @ruiButtonHorizontalPadding, @ruiButtonVerticalPadding, @ruiButtonHorizontalPadding",
            margin = @ruiButtonMargin,
            radius = @ruiButtonRadius,
            background-color = @ruiButtonColor,
            text-color = @ruiButtonTextColor,
            text-size = @ruiButtonTextSize,
        },
        ruiDisabledButton {
            padding = "@ruiButtonVerticalPadding, @ruiButtonHorizontalPadding, @ruiButtonVerticalPadding, @ruiButtonHorizontalPadding",
            margin = @ruiButtonMargin,
            radius = @ruiButtonRadius,
            background-color = @ruiButtonDisabledColor,
            text-color = @ruiButtonDisabledTextColor,
        },
        ruiListItem {
            padding = "@ruiListItemVerticalPadding, @ruiListItemHorizontalPadding, @ruiListItemVerticalPadding, @ruiListItemHorizontalPadding",
        },
        ruiListItemSelected {
            padding = "@ruiListItemVerticalPadding, @ruiListItemHorizontalPadding, @ruiListItemVerticalPadding, @ruiListItemHorizontalPadding",
            background-color = @ruiSelectedColor,
            text-color = @ruiSelectedTextColor,
        },
        ruiPopup {
            background-color = @ruiPopupBackgroundColor,
            text-color = @ruiPopupTextColor,
            radius = @ruiPopupRadius,
        },
        ruiPopupTitle {
            background-color = @ruiPopupTitleColor,
            text-color = @ruiPopupTitleTextColor,
            min-height = @ruiPopupTitleHeight,
        },
        ruiTab {
            background-color = @ruiTabBackgroundColor,
            text-color = @ruiTabTextColor,
            radius = @ruiTabRadius,
        },
        ruiCurrentTab {
            background-color = @ruiCurrentTabColor,
            text-color = @ruiCurrentTabTextColor,
            radius = @ruiTabRadius,
        },
        ruiTooltip {
            background-color = @ruiTooltipBackground,
            text-color = @ruiTooltipTextColor,
            radius = @ruiTooltipRadius,
        },
    ],
    styles:portrait:width640 = [
        ruiApp {
            text-size = 9pt,
        },
    ],
}
"""

_lock = threading.Lock()
_default_theme: Optional[Theme] = None
_themes: Dict[str, Theme] = {}
_resource_path: Optional[Path] = None


# --- Themes ---

def default_theme() -> Theme:
    """The built-in theme plus every unnamed theme registered since."""
    global _default_theme
    with _lock:
        if _default_theme is None:
            theme = create_theme_from_text(DEFAULT_THEME_TEXT)
            if theme is None:
                # the built-in text is parsed once and is never expected to fail
                error_log("default theme text is invalid")
                theme = Theme()
            _default_theme = theme
        return _default_theme


def add_theme(theme: Optional[Theme]) -> None:
    """
    Registers a theme. An unnamed theme is merged into the default theme.
    A named one is stored under its name, or merged into the theme already
    registered under that name.
    """
    if theme is None:
        return
    if theme.name == "":
        default_theme().append(theme)
        return
    with _lock:
        existing = _themes.get(theme.name)
        if existing is None:
            _themes[theme.name] = theme
        else:
            existing.append(theme)
    logger.debug("theme %r registered", theme.name)


def register_theme_text(text: str) -> bool:
    theme = create_theme_from_text(text)
    if theme is None:
        return False
    add_theme(theme)
    return True


def get_theme(name: str) -> Optional[Theme]:
    with _lock:
        return _themes.get(name)


def theme_names() -> List[str]:
    with _lock:
        return sorted(_themes)


def clear_themes() -> None:
    """Forgets every registered theme and rebuilds the default one on next use."""
    global _default_theme
    with _lock:
        _themes.clear()
        _default_theme = None


def scan_themes_dir(path: Path) -> int:
    """Registers every ``.rui`` file under the directory. Returns the number of themes loaded."""
    path = Path(path)
    try:
        entries = sorted(path.iterdir())
    except OSError as e:
        error_log(str(e))
        return 0

    count = 0
    for entry in entries:
        if entry.name.startswith("."):
            continue
        if entry.is_dir():
            count += scan_themes_dir(entry)
        elif entry.suffix.lower() == THEME_EXTENSION:
            try:
                text = entry.read_text(encoding="utf-8")
            except OSError as e:
                error_log(str(e))
                continue
            if register_theme_text(text):
                count += 1
            else:
                error_log_f('invalid theme file "%s"', entry)
    return count


# --- Resource files ---

def set_resource_path(path) -> None:
    """Sets the resource directory and loads the themes it holds."""
    global _resource_path
    _resource_path = Path(path).resolve()
    themes = _resource_path / THEMES_DIR
    if themes.is_dir():
        count = scan_themes_dir(themes)
        logger.info("%d theme file(s) loaded from %s", count, themes)


def resource_path() -> Optional[Path]:
    return _resource_path


def _inside(base: Path, filename: str) -> Optional[Path]:
    candidate = (base / filename).resolve()
    try:
        candidate.relative_to(base)
    except ValueError:
        return None
    return candidate if candidate.is_file() else None


def find_resource_file(filename: str) -> Optional[Path]:
    """
    Looks up a file served by name: the resource directory, then its
    ``images`` and ``raw`` folders, then the bundled static files.
    Paths leaving those folders are never returned.
    """
    filename = filename.lstrip("/")
    if filename == "":
        return None
    bases: List[Path] = []
    if _resource_path is not None:
        bases += [_resource_path, _resource_path / IMAGES_DIR, _resource_path / RAW_DIR]
    bases.append(STATIC_DIR)
    for base in bases:
        found = _inside(base, filename)
        if found is not None:
            return found
    return None


def static_text(filename: str) -> str:
    """Text of a bundled static file (``app.js``, ``app.css``)."""
    return (STATIC_DIR / filename).read_text(encoding="utf-8")
