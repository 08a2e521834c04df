# ruikit/properties.py

"""
The property container and its per-tag coercion.

`PropertyList.set` never raises on bad input. It logs through `ruikit.log`,
returns False and leaves the container unchanged. Successful mutations are
reported to the registered change listeners, one call per affected tag.
"""

import datetime
import re
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from . import property_names as pn
from .angle_unit import AngleUnit, rad, string_to_angle_unit
from .color import Color, string_to_color
from .data import DataNode, DataNodeType, DataObject, quote_data_text
from .log import error_log, error_log_f
from .property_values import (ANGLE_PROPERTIES, BOOL_PROPERTIES, COLOR_PROPERTIES, ENUM_PROPERTIES,
                              FLOAT_PROPERTIES, INT_PROPERTIES, RANGE_PROPERTIES, SIZE_PROPERTIES,
                              TOP_DOWN_ORIENTATION, START_TO_END_ORIENTATION, normalize_tag)
from .ranges import Range, string_to_range
from .size_func import SizeFunc, parse_size_func
from .size_unit import SizeUnit, format_number, px, size_function, string_to_size_unit

# A setter stores the value and returns the list of changed tags, or None when rejected.
Setter = Callable[["PropertyList", str, Any], Optional[List[str]]]
ChangeListener = Callable[["PropertyList", str], None]

_CONSTANT_FORBIDDEN = re.compile(r"[,;|\"'`+(){}\[\]<>/\\*&%!\s]")


# --- Error messages ---

def _type_name(value: Any) -> str:
    return type(value).__name__


def not_compatible_type(tag: str, value: Any) -> None:
    error_log_f('"%s" type not compatible with "%s" property', _type_name(value), tag)


def invalid_property_value(tag: str, value: Any) -> None:
    error_log_f('Invalid value "%s" of "%s" property', value, tag)


def is_constant_name(text: str) -> bool:
    """True for ``@name`` references, including quoted forms like ``@"my name"``."""
    if len(text) <= 1 or text[0] != "@":
        return False
    if len(text) > 2 and text[1] in "`\"'" and text[-1] == text[1]:
        return True
    return _CONSTANT_FORBIDDEN.search(text) is None


def is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, (bool, Color))


# --- Container ---

class PropertyList:
    """
    An order-preserving tag -> value map.

    Subclasses narrow what is accepted by overriding `_set`, `_get` and `_remove`.
    """

    def __init__(self, params: Optional[Dict[str, Any]] = None):
        self._properties: Dict[str, Any] = {}
        self._listeners: List[ChangeListener] = []
        if params:
            self.set_params(params)

    def normalize(self, tag: str) -> str:
        return normalize_tag(tag)

    # --- Raw access ---

    def get_raw(self, tag: str) -> Any:
        return self._properties.get(tag)

    def set_raw(self, tag: str, value: Any) -> None:
        if value is None:
            self._properties.pop(tag, None)
        else:
            self._properties[tag] = value

    # --- Public API ---

    def get(self, tag: str) -> Any:
        return self._get(self.normalize(tag))

    def set(self, tag: str, value: Any) -> bool:
        tag = self.normalize(tag)
        if value is None or (isinstance(value, str) and value.strip() == ""):
            self.remove(tag)
            return True
        changed = self._set(tag, value)
        if changed is None:
            return False
        self._notify(changed)
        return True

    def remove(self, tag: str) -> None:
        self._notify(self._remove(self.normalize(tag)))

    def set_params(self, params: Dict[str, Any]) -> bool:
        result = True
        for tag, value in params.items():
            result = self.set(tag, value) and result
        return result

    def clear(self) -> None:
        tags = list(self._properties)
        self._properties.clear()
        self._notify(tags)

    def is_empty(self) -> bool:
        return not self._properties

    def all_tags(self) -> List[str]:
        return sorted(self._properties)

    def __contains__(self, tag: str) -> bool:
        return self.normalize(tag) in self._properties

    def __len__(self) -> int:
        return len(self._properties)

    def on_change(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def _notify(self, tags: Iterable[str]) -> None:
        for tag in tags:
            for listener in self._listeners:
                listener(self, tag)

    # --- Overridable behaviour ---

    def _get(self, tag: str) -> Any:
        return self.get_raw(tag)

    def _set(self, tag: str, value: Any) -> Optional[List[str]]:
        return properties_set(self, tag, value)

    def _remove(self, tag: str) -> List[str]:
        if self.get_raw(tag) is None:
            return []
        self.set_raw(tag, None)
        return [tag]

    # --- Text form ---

    def write_string(self, object_tag: str = "_") -> str:
        parts = []
        for tag in self.all_tags():
            text = property_value_to_string(self._properties[tag])
            if text != "":
                parts.append(f"{tag} = {text}")
        return f"{object_tag} {{ {', '.join(parts)} }}" if parts else f"{object_tag} {{ }}"

    def __str__(self) -> str:
        return self.write_string()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.write_string()})"

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self._properties == other._properties

    __hash__ = None


class DataProperty(PropertyList):
    """A composite property: a `PropertyList` restricted to a fixed set of tags."""

    supported_properties: Tuple[str, ...] = ()

    def set(self, tag: str, value: Any) -> bool:
        normalized = self.normalize(tag)
        if value is not None and normalized not in self.supported_properties:
            error_log_f('"%s" property is not supported', normalized)
            return False
        return super().set(normalized, value)


def parse_properties(properties: PropertyList, obj: DataObject) -> None:
    """Copies every node of a data object into a container."""
    for node in obj:
        node_type = node.type
        if node_type == DataNodeType.TEXT:
            properties.set(node.tag, node.text())
        elif node_type == DataNodeType.OBJECT:
            properties.set(node.tag, node.object())
        else:
            properties.set(node.tag, node)


def property_value_to_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Color):
        return str(value)
    if isinstance(value, float):
        return format_number(value)
    if isinstance(value, (list, tuple)):
        items = [property_value_to_string(item) for item in value]
        return "[" + ", ".join(items) + "]"
    if isinstance(value, PropertyList):
        return value.write_string()
    return quote_data_text(str(value))


# --- Setters ---

def set_simple_property(properties: PropertyList, tag: str, value: Any) -> bool:
    """Handles removal and ``@constant`` storage shared by every setter."""
    if value is None:
        properties.set_raw(tag, None)
        return True
    if isinstance(value, str):
        text = value.strip()
        if text == "":
            properties.set_raw(tag, None)
            return True
        if is_constant_name(text):
            properties.set_raw(tag, text)
            return True
    return False


def set_string_property(properties: PropertyList, tag: str, value: Any) -> Optional[List[str]]:
    if isinstance(value, str):
        properties.set_raw(tag, value)
        return [tag]
    not_compatible_type(tag, value)
    return None


def set_size_property(properties: PropertyList, tag: str, value: Any) -> Optional[List[str]]:
    if set_simple_property(properties, tag, value):
        return [tag]

    if isinstance(value, str):
        fn = parse_size_func(value)
        if fn is not None:
            size = size_function(fn)
        else:
            size = string_to_size_unit(value)
            if size is None:
                invalid_property_value(tag, value)
                return None
    elif isinstance(value, SizeUnit):
        size = value
    elif isinstance(value, SizeFunc):
        size = size_function(value)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        size = px(value)
    else:
        not_compatible_type(tag, value)
        return None

    properties.set_raw(tag, None if size.is_auto() else size)
    return [tag]


def set_angle_property(properties: PropertyList, tag: str, value: Any) -> Optional[List[str]]:
    if set_simple_property(properties, tag, value):
        return [tag]

    if isinstance(value, str):
        angle = string_to_angle_unit(value)
        if angle is None:
            invalid_property_value(tag, value)
            return None
    elif isinstance(value, AngleUnit):
        angle = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        angle = rad(value)
    else:
        not_compatible_type(tag, value)
        return None

    properties.set_raw(tag, angle)
    return [tag]


def set_color_property(properties: PropertyList, tag: str, value: Any) -> Optional[List[str]]:
    if set_simple_property(properties, tag, value):
        return [tag]

    if isinstance(value, Color):
        color = value
    elif isinstance(value, str):
        color = string_to_color(value)
        if color is None:
            invalid_property_value(tag, value)
            return None
    elif is_int(value):
        color = Color(value & 0xFFFFFFFF)
    else:
        not_compatible_type(tag, value)
        return None

    properties.set_raw(tag, color)
    return [tag]


def enum_string_to_int(text: str, values, log_error: bool) -> Optional[int]:
    text = text.strip()
    if text in values:
        return values.index(text)

    try:
        n = int(text)
    except ValueError:
        n = None
    if n is not None:
        if 0 <= n < len(values):
            return n
        if log_error:
            error_log_f("Out of bounds: value index = %d, valid values = [%s]", n, " ".join(values))
        return None

    lower = text.lower()
    if lower in values:
        return values.index(lower)
    if log_error:
        error_log_f('Unknown "%s" value. Valid values = [%s]', lower, " ".join(values))
    return None


def set_enum_property(properties: PropertyList, tag: str, value: Any,
                      enum_tag: Optional[str] = None) -> Optional[List[str]]:
    """Stores an enum index. `enum_tag` names the value table when it differs from `tag`."""
    if set_simple_property(properties, tag, value):
        return [tag]

    values = ENUM_PROPERTIES[enum_tag or tag].values
    if isinstance(value, str):
        if tag == pn.ORIENTATION and value.strip().lower() in ("vertical", "horizontal"):
            n = TOP_DOWN_ORIENTATION if value.strip().lower() == "vertical" else START_TO_END_ORIENTATION
        else:
            n = enum_string_to_int(value, values, False)
            if n is None and tag == pn.TEXT_WEIGHT:
                n = _text_weight_number(value)
        if n is None:
            invalid_property_value(tag, value)
            return None
    elif is_int(value):
        n = int(value)
        if tag == pn.TEXT_WEIGHT and n >= 100 and n % 100 == 0 and n <= 900:
            n //= 100
        if not 0 <= n < len(values):
            invalid_property_value(tag, value)
            return None
    else:
        not_compatible_type(tag, value)
        return None

    properties.set_raw(tag, n)
    return [tag]


def _text_weight_number(text: str) -> Optional[int]:
    # "100".."900" are accepted as well as the names
    try:
        n = int(text.strip())
    except ValueError:
        return None
    if 100 <= n <= 900 and n % 100 == 0:
        return n // 100
    return None


def set_bool_property(properties: PropertyList, tag: str, value: Any) -> Optional[List[str]]:
    if set_simple_property(properties, tag, value):
        return [tag]

    if isinstance(value, bool):
        result = value
    elif isinstance(value, str):
        text = value.strip().lower()
        if text in ("true", "yes", "on", "1"):
            result = True
        elif text in ("false", "no", "off", "0"):
            result = False
        else:
            invalid_property_value(tag, value)
            return None
    elif is_int(value):
        if value not in (0, 1):
            invalid_property_value(tag, value)
            return None
        result = value == 1
    else:
        not_compatible_type(tag, value)
        return None

    properties.set_raw(tag, result)
    return [tag]


def set_int_property(properties: PropertyList, tag: str, value: Any) -> Optional[List[str]]:
    if set_simple_property(properties, tag, value):
        return [tag]

    if isinstance(value, str):
        try:
            n = int(value.strip())
        except ValueError as e:
            invalid_property_value(tag, value)
            error_log(str(e))
            return None
    elif is_int(value):
        n = int(value)
    else:
        not_compatible_type(tag, value)
        return None

    properties.set_raw(tag, n)
    return [tag]


def set_float_property(properties: PropertyList, tag: str, value: Any,
                       limits: Optional[Tuple[float, float]] = None) -> Optional[List[str]]:
    if set_simple_property(properties, tag, value):
        return [tag]

    minimum, maximum = limits or FLOAT_PROPERTIES.get(tag, (float("-inf"), float("inf")))
    if isinstance(value, str):
        try:
            f = float(value.strip())
        except ValueError as e:
            invalid_property_value(tag, value)
            error_log(str(e))
            return None
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        f = float(value)
    else:
        not_compatible_type(tag, value)
        return None

    if not minimum <= f <= maximum:
        error_log_f('"%s" out of range of "%s" property', value, tag)
        return None
    properties.set_raw(tag, f)
    return [tag]


def set_range_property(properties: PropertyList, tag: str, value: Any) -> Optional[List[str]]:
    if set_simple_property(properties, tag, value):
        return [tag]

    if isinstance(value, Range):
        result = value
    elif isinstance(value, str):
        result = string_to_range(value)
        if result is None:
            invalid_property_value(tag, value)
            return None
    elif is_int(value):
        result = Range(value, value)
    else:
        not_compatible_type(tag, value)
        return None

    properties.set_raw(tag, result)
    return [tag]


def _data_list_item(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Color):
        return str(value)
    if isinstance(value, (int, float)):
        return format_number(value)
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, (SizeUnit, AngleUnit)) or type(value).__str__ is not object.__str__:
        return str(value)
    return None


def set_data_list_property(properties: PropertyList, tag: str, value: Any) -> Optional[List[str]]:
    if set_simple_property(properties, tag, value):
        return [tag]

    if isinstance(value, str):
        items = [value]
    elif isinstance(value, DataNode):
        if value.type == DataNodeType.TEXT:
            items = [value.text()]
        elif value.type == DataNodeType.ARRAY:
            items = [item for item in value.array if isinstance(item, str)]
        else:
            not_compatible_type(tag, value)
            return None
    elif isinstance(value, (list, tuple)):
        items = []
        for item in value:
            text = _data_list_item(item)
            if text is None:
                not_compatible_type(tag, item)
                return None
            items.append(text)
    else:
        not_compatible_type(tag, value)
        return None

    if not items:
        if properties.get_raw(tag) is None:
            return []
        properties.set_raw(tag, None)
        return [tag]
    properties.set_raw(tag, items)
    return [tag]


def _build_setters() -> Dict[str, Setter]:
    setters: Dict[str, Setter] = {}
    setters.update({tag: set_size_property for tag in SIZE_PROPERTIES})
    setters.update({tag: set_enum_property for tag in ENUM_PROPERTIES})
    setters.update({tag: set_float_property for tag in FLOAT_PROPERTIES})
    setters.update({tag: set_color_property for tag in COLOR_PROPERTIES})
    setters.update({tag: set_angle_property for tag in ANGLE_PROPERTIES})
    setters.update({tag: set_bool_property for tag in BOOL_PROPERTIES})
    setters.update({tag: set_int_property for tag in INT_PROPERTIES})
    setters.update({tag: set_range_property for tag in RANGE_PROPERTIES})
    setters[pn.DATA_LIST] = set_data_list_property
    return setters


# Tag -> setter. Composite modules and the view style add their own entries.
PROPERTY_SETTERS: Dict[str, Setter] = _build_setters()


def register_setter(tags: Iterable[str], setter: Setter) -> None:
    for tag in tags:
        PROPERTY_SETTERS[tag] = setter


def properties_set(properties: PropertyList, tag: str, value: Any) -> Optional[List[str]]:
    setter = PROPERTY_SETTERS.get(tag)
    if setter is not None:
        return setter(properties, tag, value)
    if isinstance(value, str):
        properties.set_raw(tag, value)
        return [tag]
    not_compatible_type(tag, value)
    return None


# --- Typed getters ---
#
# Each getter resolves @constants through the session and returns None when the
# property is unset or cannot be resolved.

def resolve_text(session, text: str) -> Tuple[str, bool]:
    if session is None:
        return text, "@" not in text
    return session.resolve_constants(text)


def value_to_size_unit(value: Any, session) -> Optional[SizeUnit]:
    if isinstance(value, SizeUnit):
        return value
    if isinstance(value, SizeFunc):
        return size_function(value)
    if isinstance(value, str):
        text, ok = resolve_text(session, value)
        if ok:
            fn = parse_size_func(text)
            if fn is not None:
                return size_function(fn)
            return string_to_size_unit(text)
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return px(value)
    return None


def size_property(properties: PropertyList, tag: str, session) -> Optional[SizeUnit]:
    return value_to_size_unit(properties.get_raw(tag), session)


def value_to_angle(value: Any, session) -> Optional[AngleUnit]:
    if isinstance(value, AngleUnit):
        return value
    if isinstance(value, str):
        text, ok = resolve_text(session, value)
        if ok:
            return string_to_angle_unit(text)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        return rad(value)
    return None


def angle_property(properties: PropertyList, tag: str, session) -> Optional[AngleUnit]:
    return value_to_angle(properties.get_raw(tag), session)


def value_to_color(value: Any, session) -> Optional[Color]:
    if isinstance(value, Color):
        return value
    if isinstance(value, str):
        if len(value) > 1 and value[0] == "@":
            if session is None:
                return None
            return session.color(value[1:])
        return string_to_color(value)
    return None


def color_property(properties: PropertyList, tag: str, session) -> Optional[Color]:
    return value_to_color(properties.get_raw(tag), session)


def value_to_enum(value: Any, tag: str, session, default: Optional[int] = None) -> Optional[int]:
    info = ENUM_PROPERTIES.get(tag)
    if info is None or value is None:
        return default
    if is_int(value):
        return value if 0 <= value < len(info.values) else default
    if isinstance(value, str):
        text, ok = resolve_text(session, value)
        if ok:
            if tag == pn.ORIENTATION:
                lower = text.strip().lower()
                if lower == "vertical":
                    return TOP_DOWN_ORIENTATION
                if lower == "horizontal":
                    return START_TO_END_ORIENTATION
            n = enum_string_to_int(text, info.values, True)
            if n is not None:
                return n
    return default


def enum_property(properties: PropertyList, tag: str, session, default: Optional[int] = None) -> Optional[int]:
    return value_to_enum(properties.get_raw(tag), tag, session, default)


def value_to_orientation(value: Any, session) -> Optional[int]:
    return value_to_enum(value, pn.ORIENTATION, session)


def value_to_bool(value: Any, session) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text, ok = resolve_text(session, value)
        if ok:
            lower = text.strip().lower()
            if lower in ("true", "yes", "on", "1"):
                return True
            if lower in ("false", "no", "off", "0"):
                return False
            error_log(f'The error of converting of "{text}" to bool')
    return None


def bool_property(properties: PropertyList, tag: str, session) -> Optional[bool]:
    return value_to_bool(properties.get_raw(tag), session)


def value_to_int(value: Any, session, default: Optional[int] = None) -> Optional[int]:
    if is_int(value):
        return int(value)
    if isinstance(value, str):
        text, ok = resolve_text(session, value)
        try:
            return int((text if ok else value).strip())
        except ValueError as e:
            error_log(str(e))
    return default


def int_property(properties: PropertyList, tag: str, session, default: Optional[int] = None) -> Optional[int]:
    return value_to_int(properties.get_raw(tag), session, default)


def value_to_float(value: Any, session, default: Optional[float] = None) -> Optional[float]:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        text, ok = resolve_text(session, value)
        if ok:
            try:
                return float(text)
            except ValueError as e:
                error_log(str(e))
    return default


def float_property(properties: PropertyList, tag: str, session, default: Optional[float] = None) -> Optional[float]:
    return value_to_float(properties.get_raw(tag), session, default)


def float_text_property(properties: PropertyList, tag: str, session, default: float) -> Tuple[str, bool]:
    """Returns the number as written (``"1.5"``) plus whether the property was set."""
    value = properties.get_raw(tag)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return format_number(value), True
    if isinstance(value, str):
        text, ok = resolve_text(session, value)
        if ok:
            try:
                float(text)
            except ValueError as e:
                error_log(str(e))
                return format_number(default), False
            return text.strip(), True
    return format_number(default), False


def string_property(properties: PropertyList, tag: str, session) -> Optional[str]:
    value = properties.get_raw(tag)
    if isinstance(value, str):
        text, ok = resolve_text(session, value)
        if ok:
            return text
    return None


def value_to_range(value: Any, session) -> Optional[Range]:
    if isinstance(value, Range):
        return value
    if is_int(value):
        return Range(value, value)
    if isinstance(value, str):
        text, ok = resolve_text(session, value)
        if ok:
            return string_to_range(text)
    return None


def range_property(properties: PropertyList, tag: str, session) -> Optional[Range]:
    return value_to_range(properties.get_raw(tag), session)
