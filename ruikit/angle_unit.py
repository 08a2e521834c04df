# ruikit/angle_unit.py

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Tuple

from .size_unit import format_number, parse_number


class AngleType(IntEnum):
    RADIAN = 0
    PI_RADIAN = 1
    DEGREE = 2
    GRADIAN = 3
    TURN = 4


ANGLE_SUFFIXES = {
    AngleType.DEGREE: "deg",
    AngleType.RADIAN: "rad",
    AngleType.PI_RADIAN: "pi",
    AngleType.GRADIAN: "grad",
    AngleType.TURN: "turn",
}

# One full turn expressed in each unit.
_FULL_TURN = {
    AngleType.RADIAN: 2 * math.pi,
    AngleType.PI_RADIAN: 2.0,
    AngleType.DEGREE: 360.0,
    AngleType.GRADIAN: 400.0,
    AngleType.TURN: 1.0,
}


@dataclass(frozen=True)
class AngleUnit:
    type: AngleType = AngleType.RADIAN
    value: float = 0.0

    def __str__(self) -> str:
        return format_number(self.value) + ANGLE_SUFFIXES[self.type]

    def __repr__(self) -> str:
        return f"AngleUnit({self})"

    def css_string(self) -> str:
        if self.type == AngleType.PI_RADIAN:
            return format_number(self.value * math.pi) + "rad"
        return str(self)

    def convert(self, target: AngleType) -> "AngleUnit":
        if self.type == target:
            return self
        if target == AngleType.RADIAN and self.type == AngleType.PI_RADIAN:
            return AngleUnit(target, self.value * math.pi)
        if target == AngleType.RADIAN and self.type == AngleType.DEGREE:
            return AngleUnit(target, self.value * math.pi / 180)
        return AngleUnit(target, self.value * _FULL_TURN[target] / _FULL_TURN[self.type])

    def to_radian(self) -> "AngleUnit":
        return self.convert(AngleType.RADIAN)

    def to_pi_radian(self) -> "AngleUnit":
        return self.convert(AngleType.PI_RADIAN)

    def to_degree(self) -> "AngleUnit":
        return self.convert(AngleType.DEGREE)

    def to_gradian(self) -> "AngleUnit":
        return self.convert(AngleType.GRADIAN)

    def to_turn(self) -> "AngleUnit":
        return self.convert(AngleType.TURN)

    def is_zero(self) -> bool:
        return self.value == 0


def rad(value: float) -> AngleUnit:
    return AngleUnit(AngleType.RADIAN, float(value))


def pi_rad(value: float) -> AngleUnit:
    return AngleUnit(AngleType.PI_RADIAN, float(value))


def deg(value: float) -> AngleUnit:
    return AngleUnit(AngleType.DEGREE, float(value))


def grad(value: float) -> AngleUnit:
    return AngleUnit(AngleType.GRADIAN, float(value))


def turn(value: float) -> AngleUnit:
    return AngleUnit(AngleType.TURN, float(value))


def parse_angle_unit(text: str) -> Tuple[Optional[AngleUnit], str]:
    """Parses ``"45deg"``, ``"0.5turn"``, ``"π"``, ``"90°"``... Unsuffixed numbers are radians."""
    text = text.strip().lower()
    error = f'Invalid AngleUnit value: "{text}"'

    def make(number_text: str, angle_type: AngleType):
        number = parse_number(number_text)
        if number is None:
            return None, error
        return AngleUnit(angle_type, number), ""

    if text == "π":
        return pi_rad(1), ""
    if text.endswith("π"):
        return make(text[:-1], AngleType.PI_RADIAN)
    if text.endswith("°"):
        return make(text[:-1], AngleType.DEGREE)

    # "grad" must be tried before "rad"
    for angle_type, suffix in sorted(ANGLE_SUFFIXES.items(), key=lambda item: -len(item[1])):
        if text.endswith(suffix):
            return make(text[:-len(suffix)], angle_type)

    return make(text, AngleType.RADIAN)


def string_to_angle_unit(text: str) -> Optional[AngleUnit]:
    angle, _ = parse_angle_unit(text)
    return angle
