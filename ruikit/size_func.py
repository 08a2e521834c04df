# ruikit/size_func.py

"""
Symbolic length expressions rendered as CSS math functions.

A `SizeFunc` is a small expression tree, e.g. ``sub(100%, @header)``. Nothing is
evaluated on the server: `css_string` writes ``calc(100% - 48px)`` and the browser
does the arithmetic. ``@name`` leaves are resolved through the session when the
CSS is produced.
"""

from typing import Any, List, Optional

from .log import error_log, error_log_f
from .size_unit import SizeType, SizeUnit, format_number, parse_number, string_to_size_unit

# Prefix order matters: "round-up" must be tried before "round".
SIZE_FUNC_TAGS = (
    "min", "max", "sum", "sub", "mul", "div", "mod", "rem", "clamp",
    "round-up", "round-down", "round-to-zero", "round",
)

_BINARY = ("sub", "mul", "div", "mod", "rem", "round", "round-up", "round-down", "round-to-zero")
_NUMBER_SECOND = ("mul", "div", "mod", "rem", "round", "round-up", "round-down", "round-to-zero")
_ROUNDING = ("round", "round-up", "round-down", "round-to-zero")
# Functions whose arguments are already a math context, so nested sum/sub/mul/div need no brackets.
_MATH_CONTEXT = ("min", "max", "clamp", "mod", "rem") + _ROUNDING

_ROUND_MODES = {
    "round": "nearest",
    "round-up": "up",
    "round-down": "down",
    "round-to-zero": "to-zero",
}

_OPERATORS = {"sum": " + ", "sub": " - ", "mul": " * ", "div": " / "}


class SizeFunc:
    """An immutable ``tag(args...)`` node. Build instances with the module-level factories."""

    __slots__ = ("tag", "_args")

    def __init__(self, tag: str, args: List[Any]):
        self.tag = tag
        self._args = tuple(args)

    @property
    def args(self) -> List[Any]:
        return list(self._args)

    def name(self) -> str:
        return self.tag

    def __eq__(self, other: object) -> bool:
        return isinstance(other, SizeFunc) and str(self) == str(other)

    def __hash__(self) -> int:
        return hash(str(self))

    def __repr__(self) -> str:
        return f"SizeFunc({self})"

    def __str__(self) -> str:
        parts = []
        for arg in self._args:
            if isinstance(arg, float):
                parts.append(format_number(arg))
            else:
                parts.append(str(arg))
        return f"{self.tag}({', '.join(parts)})"

    def css_string(self, session=None) -> str:
        buffer: List[str] = []
        self.write_css("", buffer, session)
        return "".join(buffer)

    def write_css(self, top_func: str, buffer: List[str], session) -> None:
        bracket = True
        sep = ", "

        if self.tag in ("min", "max", "clamp", "mod", "rem"):
            buffer.append(self.tag + "(")
        elif self.tag in _ROUND_MODES:
            buffer.append(f"round({_ROUND_MODES[self.tag]}, ")
        elif self.tag in _OPERATORS:
            sep = _OPERATORS[self.tag]
            if top_func == "":
                buffer.append("calc(")
            elif top_func in _MATH_CONTEXT:
                bracket = False
            else:
                buffer.append("(")
        else:
            return

        for i, arg in enumerate(self._args):
            if i > 0:
                buffer.append(sep)
            if isinstance(arg, str):
                buffer.append(_resolved_arg_css(self.tag, arg, buffer, session))
            elif isinstance(arg, SizeFunc):
                arg.write_css(self.tag, buffer, session)
            elif isinstance(arg, SizeUnit):
                buffer.append(arg.css_string("0", session))
            elif isinstance(arg, float):
                buffer.append(format_number(arg))
            else:
                buffer.append(str(arg))

        if bracket:
            buffer.append(")")


def _resolved_arg_css(tag: str, arg: str, buffer: List[str], session) -> str:
    if session is None:
        return "0"
    text, ok = session.resolve_constants(arg)
    if not ok:
        return "0"
    fn = parse_size_func(text)
    if fn is not None:
        # the nested function writes itself; nothing extra to append
        fn.write_css(tag, buffer, session)
        return ""
    size = string_to_size_unit(text)
    if size is not None:
        return size.css_string("0", session)
    return "0"


def _split_args(text: str) -> Optional[List[str]]:
    args = []
    depth = 0
    start = 0
    for i, ch in enumerate(text):
        if ch == "," and depth == 0:
            args.append(text[start:i])
            start = i + 1
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
    if depth != 0:
        return None
    args.append(text[start:])
    return args


def _number_arg(tag: str, index: int, value: float, args: List[Any]) -> bool:
    if tag not in _NUMBER_SECOND:
        error_log_f("The %s function argument can't be a number", tag)
        return False
    if index != 1:
        error_log_f("Only the second %s function argument can be a number", tag)
        return False
    if value == 0:
        if tag in ("div", "mod"):
            error_log_f('Division by 0 in "%s" function', tag)
            return False
        if tag in _ROUNDING:
            error_log_f('The rounding interval is 0 in "%s" function', tag)
            return False
    args.append(float(value))
    return True


def _convert_args(tag: str, raw_args) -> Optional[List[Any]]:
    args: List[Any] = []
    for i, arg in enumerate(raw_args):
        if isinstance(arg, str):
            arg = arg.strip()
            if arg == "":
                error_log_f('Unsupported %s function argument #%d: ""', tag, i)
                return None
            if arg[0] == "@":
                args.append(arg)
                continue
            number = parse_number(arg)
            if number is not None:
                if not _number_arg(tag, i, number, args):
                    return None
                continue
            fn = parse_size_func(arg)
            if fn is not None:
                args.append(fn)
                continue
            size = string_to_size_unit(arg)
            if size is None:
                error_log_f('Unsupported %s function argument #%d: "%s"', tag, i, arg)
                return None
            args.append(size)
        elif isinstance(arg, SizeFunc):
            args.append(arg)
        elif isinstance(arg, SizeUnit):
            if arg.type == SizeType.AUTO:
                error_log_f('Unsupported %s function argument #%d: "auto"', tag, i)
                return None
            if arg.type == SizeType.FUNCTION and arg.function is not None:
                args.append(arg.function)
            else:
                args.append(arg)
        elif isinstance(arg, (int, float)) and not isinstance(arg, bool):
            if not _number_arg(tag, i, float(arg), args):
                return None
        else:
            error_log_f("Unsupported %s function argument #%d: %r", tag, i, arg)
            return None
    return args


def new_size_func(tag: str, *args) -> Optional[SizeFunc]:
    """Checks arity and arguments of ``tag(args...)``. Logs and returns None when invalid."""
    if tag not in SIZE_FUNC_TAGS:
        error_log_f('Unknown size function "%s"', tag)
        return None
    if tag in _BINARY and len(args) != 2:
        error_log_f('"%s" function needs 2 arguments', tag)
        return None
    if tag == "clamp" and len(args) != 3:
        error_log('"clamp" function needs 3 arguments')
        return None
    if not args:
        error_log_f('"%s" function needs at least 1 argument', tag)
        return None
    converted = _convert_args(tag, args)
    if converted is None:
        return None
    return SizeFunc(tag, converted)


def parse_size_func(text: str) -> Optional[SizeFunc]:
    """
    Parses ``tag(arg, ...)``. Returns None without logging when the text is not a
    function call at all, and logs when it looks like one but is malformed.
    """
    text = text.strip()
    for tag in SIZE_FUNC_TAGS:
        if not text.startswith(tag):
            continue
        rest = text[len(tag):].strip()
        if not rest.startswith("("):
            # e.g. "maxwidth": not a function call
            return None
        if rest.endswith(")"):
            args = _split_args(rest[1:-1])
            if args is not None:
                return new_size_func(tag, *args)
        error_log_f('Invalid "%s" function', tag)
        return None
    return None


# --- Factories ---

def min_size(*args) -> Optional[SizeFunc]:
    return new_size_func("min", *args)


def max_size(*args) -> Optional[SizeFunc]:
    return new_size_func("max", *args)


def sum_size(*args) -> Optional[SizeFunc]:
    return new_size_func("sum", *args)


def sub_size(arg0, arg1) -> Optional[SizeFunc]:
    return new_size_func("sub", arg0, arg1)


def mul_size(arg0, arg1) -> Optional[SizeFunc]:
    return new_size_func("mul", arg0, arg1)


def div_size(arg0, arg1) -> Optional[SizeFunc]:
    return new_size_func("div", arg0, arg1)


def mod_size(arg0, arg1) -> Optional[SizeFunc]:
    return new_size_func("mod", arg0, arg1)


def rem_size(arg0, arg1) -> Optional[SizeFunc]:
    return new_size_func("rem", arg0, arg1)


def clamp_size(minimum, value, maximum) -> Optional[SizeFunc]:
    return new_size_func("clamp", minimum, value, maximum)


def round_size(value, interval) -> Optional[SizeFunc]:
    return new_size_func("round", value, interval)


def round_up_size(value, interval) -> Optional[SizeFunc]:
    return new_size_func("round-up", value, interval)


def round_down_size(value, interval) -> Optional[SizeFunc]:
    return new_size_func("round-down", value, interval)


def round_to_zero_size(value, interval) -> Optional[SizeFunc]:
    return new_size_func("round-to-zero", value, interval)
