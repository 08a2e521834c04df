# ruikit/ranges.py

from dataclasses import dataclass
from typing import Optional

from .log import error_log


@dataclass(frozen=True)
class Range:
    """An inclusive integer interval. Both `first` and `last` belong to the range."""
    first: int = 0
    last: int = 0

    def __str__(self) -> str:
        if self.first == self.last:
            return str(self.first)
        return f"{self.first}:{self.last}"


def string_to_range(text: str) -> Optional[Range]:
    """Parses ``"n"`` or ``"a:b"``. Logs and returns None on malformed input."""
    text = text.strip()
    if ":" in text:
        values = text.split(":")
        if len(values) != 2:
            error_log("Invalid range value: " + text)
            return None
        try:
            first = int(values[0].strip())
        except ValueError as e:
            error_log(f'Invalid first range value "{text}" ({e})')
            return None
        try:
            last = int(values[1].strip())
        except ValueError as e:
            error_log(f'Invalid last range value "{text}" ({e})')
            return None
        return Range(first, last)

    try:
        n = int(text)
    except ValueError as e:
        error_log(f'Invalid range value "{text}" ({e})')
        return None
    return Range(n, n)
