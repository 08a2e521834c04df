# ruikit/color.py

import re
from typing import List, Optional, Tuple

from .color_constants import COLOR_CONSTANTS

_HEX_RE = re.compile(r"^[0-9a-fA-F]+$")


class Color(int):
    """
    A 32-bit ARGB colour. Equality is numeric, so ``Color(0xFFFF0000) == 0xFFFF0000``.
    """

    def __new__(cls, value: int = 0):
        return super().__new__(cls, int(value) & 0xFFFFFFFF)

    @classmethod
    def from_argb(cls, alpha: int, red: int, green: int, blue: int) -> "Color":
        return cls(((alpha & 0xFF) << 24) | ((red & 0xFF) << 16) | ((green & 0xFF) << 8) | (blue & 0xFF))

    def argb(self) -> Tuple[int, int, int, int]:
        return self.alpha, self.red, self.green, self.blue

    @property
    def alpha(self) -> int:
        return (self >> 24) & 0xFF

    @property
    def red(self) -> int:
        return (self >> 16) & 0xFF

    @property
    def green(self) -> int:
        return (self >> 8) & 0xFF

    @property
    def blue(self) -> int:
        return int(self) & 0xFF

    def __str__(self) -> str:
        return "#%08X" % int(self)

    def __repr__(self) -> str:
        return f"Color({self})"

    def rgb_string(self) -> str:
        return "#%06X" % (int(self) & 0xFFFFFF)

    def css_string(self) -> str:
        if self.alpha < 255:
            alpha_text = "%.2f" % (self.alpha / 255.0)
            if alpha_text.startswith("0"):
                alpha_text = alpha_text[1:]
            return f"rgba({self.red},{self.green},{self.blue},{alpha_text})"
        return f"rgb({self.red},{self.green},{self.blue})"


def _parse_channel(text: str, alpha: bool = False) -> Optional[int]:
    text = text.strip()
    if not text:
        return None
    if text.endswith("%"):
        try:
            n = int(text[:-1])
        except ValueError:
            return None
        return n * 255 // 100 if 0 <= n <= 100 else None
    if "." in text:
        if text.startswith("."):
            text = "0" + text
        try:
            f = float(text)
        except ValueError:
            return None
        return int(f * 255) if 0 <= f <= 1 else None
    try:
        n = int(text)
    except ValueError:
        return None
    if alpha and n in (0, 1):
        # "rgba(r,g,b,1)" means opaque, not alpha 1/255
        return n * 255
    return n if 0 <= n <= 255 else None


def _parse_rgb_args(args: str, count: int) -> List[int]:
    args = args.strip()
    if len(args) < 3 or args[0] != "(" or args[-1] != ")":
        return []
    parts = args[1:-1].split(",")
    if len(parts) != count:
        return []
    result = []
    for i, part in enumerate(parts):
        channel = _parse_channel(part, alpha=(i == 3))
        if channel is None:
            return []
        result.append(channel)
    return result


def parse_color(text: str) -> Tuple[Optional[Color], str]:
    """
    Parses ``#RGB``, ``#ARGB``, ``#RRGGBB``, ``#AARRGGBB``, ``rgb(...)``, ``rgba(...)``
    and CSS colour names.

    :returns: ``(color, "")`` or ``(None, error_message)``
    """
    text = text.strip()
    if not text:
        return None, 'invalid color value: ""'

    if text[0] == "#":
        digits = text[1:]
        if not _HEX_RE.match(digits) or len(digits) not in (3, 4, 6, 8):
            return None, f'Invalid color format: "{text}". Valid formats: #AARRGGBB, #RRGGBB, #ARGB, #RGB'
        c = int(digits, 16)
        if len(digits) == 8:
            return Color(c), ""
        if len(digits) == 6:
            return Color(c | 0xFF000000), ""
        if len(digits) == 4:
            a, r, g, b = (c >> 12) & 0xF, (c >> 8) & 0xF, (c >> 4) & 0xF, c & 0xF
        else:
            a, r, g, b = 0xF, (c >> 8) & 0xF, (c >> 4) & 0xF, c & 0xF
        return Color.from_argb(a * 17, r * 17, g * 17, b * 17), ""

    lower = text.lower()
    if lower.startswith("rgba"):
        args = _parse_rgb_args(lower[4:], 4)
        if args:
            return Color.from_argb(args[3], args[0], args[1], args[2]), ""
    elif lower.startswith("rgb"):
        args = _parse_rgb_args(lower[3:], 3)
        if args:
            return Color.from_argb(255, args[0], args[1], args[2]), ""

    if lower in COLOR_CONSTANTS:
        return Color(COLOR_CONSTANTS[lower]), ""
    return None, f'Invalid color format: "{text}"'


def string_to_color(text: str) -> Optional[Color]:
    color, _ = parse_color(text)
    return color


# --- Frequently used colours ---
BLACK = Color(COLOR_CONSTANTS["black"])
WHITE = Color(COLOR_CONSTANTS["white"])
RED = Color(COLOR_CONSTANTS["red"])
GREEN = Color(COLOR_CONSTANTS["green"])
BLUE = Color(COLOR_CONSTANTS["blue"])
GRAY = Color(COLOR_CONSTANTS["gray"])
TRANSPARENT = Color(0)
