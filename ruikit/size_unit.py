# ruikit/size_unit.py

"""
Lengths with a unit: `SizeUnit` and its text parser.
"""

import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Optional, Tuple

_NUMBER_RE = re.compile(r"^[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?$")


def format_number(value: Any) -> str:
    """Formats a number the short way: ``2.0`` -> ``"2"``, ``0.5`` -> ``"0.5"``."""
    if isinstance(value, bool):
        return "1" if value else "0"
    f = float(value)
    if f.is_integer() and abs(f) < 1e21:
        return str(int(f))
    return repr(f)


def parse_number(text: str) -> Optional[float]:
    """Parses a plain decimal literal. Returns None for anything else (including 'inf'/'nan')."""
    text = text.strip()
    if _NUMBER_RE.match(text):
        return float(text)
    return None


class SizeType(IntEnum):
    AUTO = 0
    PIXEL = 1
    EM = 2
    EX = 3
    PERCENT = 4
    PT = 5
    PC = 6
    INCH = 7
    MM = 8
    CM = 9
    FRACTION = 10
    FUNCTION = 11


SIZE_SUFFIXES = {
    SizeType.PIXEL: "px",
    SizeType.EM: "em",
    SizeType.EX: "ex",
    SizeType.PERCENT: "%",
    SizeType.PT: "pt",
    SizeType.PC: "pc",
    SizeType.INCH: "in",
    SizeType.MM: "mm",
    SizeType.CM: "cm",
    SizeType.FRACTION: "fr",
}


@dataclass(frozen=True, eq=False)
class SizeUnit:
    """
    A length: a `SizeType` plus a numeric value.

    For ``SizeType.FUNCTION`` the value is unused and `function` holds a `SizeFunc`.
    """
    type: SizeType = SizeType.AUTO
    value: float = 0.0
    function: Any = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SizeUnit) or self.type != other.type:
            return False
        if self.type == SizeType.AUTO:
            return True
        if self.type == SizeType.FUNCTION:
            return str(self.function) == str(other.function)
        return self.value == other.value

    def __hash__(self) -> int:
        if self.type == SizeType.AUTO:
            return hash(SizeType.AUTO)
        if self.type == SizeType.FUNCTION:
            return hash((self.type, str(self.function)))
        return hash((self.type, self.value))

    def is_auto(self) -> bool:
        return self.type == SizeType.AUTO

    def is_zero(self) -> bool:
        """True for concrete zero lengths. Auto and functions are never zero."""
        return self.type not in (SizeType.AUTO, SizeType.FUNCTION) and self.value == 0

    def __str__(self) -> str:
        if self.type == SizeType.AUTO:
            return "auto"
        if self.type == SizeType.FUNCTION:
            return str(self.function) if self.function is not None else "auto"
        return format_number(self.value) + SIZE_SUFFIXES[self.type]

    def __repr__(self) -> str:
        return f"SizeUnit({self})"

    def css_string(self, text_for_auto: str = "", session=None) -> str:
        if self.type == SizeType.AUTO:
            return text_for_auto
        if self.type == SizeType.EM:
            return format_number(self.value) + "rem"
        if self.type == SizeType.FUNCTION:
            if self.function is None:
                return text_for_auto
            return self.function.css_string(session)
        if self.value == 0:
            return "0"
        return str(self)


# --- Constructors ---

def auto_size() -> SizeUnit:
    return SizeUnit(SizeType.AUTO, 0)


def px(value: float) -> SizeUnit:
    return SizeUnit(SizeType.PIXEL, float(value))


def em(value: float) -> SizeUnit:
    return SizeUnit(SizeType.EM, float(value))


def ex(value: float) -> SizeUnit:
    return SizeUnit(SizeType.EX, float(value))


def percent(value: float) -> SizeUnit:
    return SizeUnit(SizeType.PERCENT, float(value))


def pt(value: float) -> SizeUnit:
    return SizeUnit(SizeType.PT, float(value))


def pc(value: float) -> SizeUnit:
    return SizeUnit(SizeType.PC, float(value))


def inch(value: float) -> SizeUnit:
    return SizeUnit(SizeType.INCH, float(value))


def mm(value: float) -> SizeUnit:
    return SizeUnit(SizeType.MM, float(value))


def cm(value: float) -> SizeUnit:
    return SizeUnit(SizeType.CM, float(value))


def fr(value: float) -> SizeUnit:
    return SizeUnit(SizeType.FRACTION, float(value))


def size_function(func) -> SizeUnit:
    return SizeUnit(SizeType.FUNCTION, 0, func)


# --- Parsing ---

def parse_size_unit(text: str) -> Tuple[Optional[SizeUnit], str]:
    """
    Parses a length literal.

    :returns: ``(size, "")`` on success or ``(None, error_message)``.
    """
    text = text.strip().lower()
    if text in ("auto", "none", ""):
        return auto_size(), ""
    if text == "0":
        return px(0), ""

    for size_type, suffix in sorted(SIZE_SUFFIXES.items(), key=lambda item: -len(item[1])):
        if text.endswith(suffix):
            number = parse_number(text[:-len(suffix)])
            if number is None:
                return None, f'Invalid SizeUnit value: "{text}"'
            return SizeUnit(size_type, number), ""

    number = parse_number(text)
    if number is not None:
        return px(number), ""
    return None, f'Invalid SizeUnit value: "{text}"'


def string_to_size_unit(text: str) -> Optional[SizeUnit]:
    """Returns the parsed length or None. Does not log."""
    size, _ = parse_size_unit(text)
    return size
