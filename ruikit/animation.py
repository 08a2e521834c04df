# ruikit/animation.py

"""
Transitions and keyframe animations.

One `AnimationProperty` type serves both uses. As a transition it is stored
in the view's ``transition`` map under the name of the property it animates
and only its duration, delay and timing function matter. As an animation it
is stored in the ``animation`` list and carries the animated properties that
are written into an ``@keyframes`` rule.
"""

import itertools
import re
import threading
from typing import Any, Dict, List, Optional, Tuple

from . import property_names as pn
from .css_builder import CSSStyleBuilder
from .data import DataNode, DataNodeType, DataObject, DataParseError, parse_data_text
from .log import error_log, error_log_f
from .properties import (DataProperty, PropertyList, enum_property, float_text_property, int_property,
                         not_compatible_type, property_value_to_string, resolve_text, set_enum_property,
                         set_float_property, set_int_property, set_simple_property, set_string_property,
                         string_property, value_to_angle, value_to_color, value_to_float, value_to_size_unit)
from .property_values import (ANGLE_PROPERTIES, COLOR_PROPERTIES, ENUM_PROPERTIES, FLOAT_PROPERTIES,
                              NORMAL_ANIMATION, SIZE_PROPERTIES, normalize_tag)
from .size_unit import format_number

EASE_TIMING = "ease"
EASE_IN_TIMING = "ease-in"
EASE_OUT_TIMING = "ease-out"
EASE_IN_OUT_TIMING = "ease-in-out"
LINEAR_TIMING = "linear"
STEP_START_TIMING = "step-start"
STEP_END_TIMING = "step-end"

_TIMING_KEYWORDS = frozenset((EASE_TIMING, EASE_IN_TIMING, EASE_OUT_TIMING, EASE_IN_OUT_TIMING,
                              LINEAR_TIMING, STEP_START_TIMING, STEP_END_TIMING))

_STEPS_RE = re.compile(r"^steps\(\s*([0-9]+)\s*(?:,\s*(start|end)\s*)?\)$")

ANIMATION_TAGS = (pn.ID, pn.DURATION, pn.DELAY, pn.TIMING_FUNCTION, pn.ITERATION_COUNT,
                  pn.ANIMATION_DIRECTION, pn.PROPERTY)

_name_lock = threading.Lock()
_name_counter = itertools.count(1)


def _new_animation_name() -> str:
    with _name_lock:
        return "ruiAnimation%08d" % next(_name_counter)


# --- Timing functions ---

def steps_timing(step_count: int, position: str = "") -> str:
    """``steps(n)`` or ``steps(n, start|end)``."""
    if position:
        return f"steps({step_count}, {position})"
    return f"steps({step_count})"


def cubic_bezier_timing(x1: float, y1: float, x2: float, y2: float) -> str:
    """A cubic-Bezier timing function. x1 and x2 are clamped to [0, 1]."""
    x1 = min(max(x1, 0.0), 1.0)
    x2 = min(max(x2, 0.0), 1.0)
    return "cubic-bezier(%s, %s, %s, %s)" % tuple(format_number(v) for v in (x1, y1, x2, y2))


def validate_timing_function(text: str) -> bool:
    text = text.strip()
    if text in _TIMING_KEYWORDS:
        return True

    match = _STEPS_RE.match(text)
    if match:
        return int(match.group(1)) > 0

    if text.startswith("cubic-bezier(") and text.endswith(")"):
        params = text[len("cubic-bezier("):-1].split(",")
        if len(params) != 4:
            return False
        try:
            x1, _, x2, _ = (float(param.strip()) for param in params)
        except ValueError:
            return False
        return 0 <= x1 <= 1 and 0 <= x2 <= 1

    return False


# --- Animated values ---

def css_property_name(tag: str) -> str:
    """The CSS property a view property is written to."""
    if tag == pn.TEXT_COLOR:
        return "color"
    if tag in SIZE_PROPERTIES:
        return SIZE_PROPERTIES[tag]
    info = ENUM_PROPERTIES.get(tag)
    if info is not None and info.css_tag:
        return info.css_tag
    return tag


def value_to_css(tag: str, value: Any, session) -> str:
    """CSS text of one animated value, or "" when it cannot be converted."""
    if value is None:
        return ""
    if tag in SIZE_PROPERTIES:
        size = value_to_size_unit(value, session)
        return size.css_string("auto", session) if size is not None else ""
    if tag in COLOR_PROPERTIES:
        color = value_to_color(value, session)
        return color.css_string() if color is not None else ""
    if tag in ANGLE_PROPERTIES:
        angle = value_to_angle(value, session)
        return angle.css_string() if angle is not None else ""
    if tag in FLOAT_PROPERTIES:
        f = value_to_float(value, session)
        return format_number(f) if f is not None else ""
    if tag in ENUM_PROPERTIES:
        css_values = ENUM_PROPERTIES[tag].css_values
        if isinstance(value, int) and not isinstance(value, bool):
            return css_values[value] if 0 <= value < len(css_values) else ""
        holder = PropertyList()
        if set_enum_property(holder, tag, value) is None:
            return ""
        n = enum_property(holder, tag, session)
        return css_values[n] if n is not None else ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return format_number(value)
    if isinstance(value, str):
        text, ok = resolve_text(session, value)
        return text if ok else ""
    return str(value)


class AnimatedProperty:
    """
    One property animated from `from_value` to `to_value`.

    `key_frames` maps a percentage (1..99) to the intermediate value.
    """

    def __init__(self, tag: str, from_value: Any, to_value: Any, key_frames: Optional[Dict[int, Any]] = None):
        self.tag = normalize_tag(tag)
        self.from_value = from_value
        self.to_value = to_value
        self.key_frames: Dict[int, Any] = dict(key_frames or {})

    def __eq__(self, other: object) -> bool:
        return (isinstance(other, AnimatedProperty) and self.tag == other.tag
                and self.from_value == other.from_value and self.to_value == other.to_value
                and self.key_frames == other.key_frames)

    __hash__ = None

    def __repr__(self) -> str:
        return f"AnimatedProperty({self.tag!r}, {self.from_value!r}, {self.to_value!r}, {self.key_frames!r})"

    def __str__(self) -> str:
        parts = [f"property = {self.tag}",
                 f"from = {property_value_to_string(self.from_value)}",
                 f"to = {property_value_to_string(self.to_value)}"]
        if self.key_frames:
            frames = ", ".join(f"{frame}:{value}" for frame, value in sorted(self.key_frames.items()))
            parts.append(f"key-frames = {property_value_to_string(frames)}")
        return "_{ " + ", ".join(parts) + " }"


def _parse_key_frames(text: str) -> Optional[Dict[int, Any]]:
    # "25:10px, 50:20px"
    frames: Dict[int, Any] = {}
    for item in text.split(","):
        item = item.strip()
        if not item:
            continue
        frame, sep, value = item.partition(":")
        try:
            n = int(frame.strip().rstrip("%"))
        except ValueError:
            return None
        if not sep or not 0 < n < 100:
            return None
        frames[n] = value.strip()
    return frames


def parse_animated_property(obj: DataObject) -> Optional[AnimatedProperty]:
    tag = obj.property_value(pn.PROPERTY) or obj.property_value("tag")
    if not tag:
        error_log('"property" key of an animated property is missing')
        return None
    from_value = obj.property_value("from")
    to_value = obj.property_value("to")
    if from_value is None or to_value is None:
        error_log_f('"from" and "to" keys are required for the "%s" animated property', tag)
        return None

    key_frames: Dict[int, Any] = {}
    text = obj.property_value("key-frames")
    if text:
        frames = _parse_key_frames(text)
        if frames is None:
            error_log_f('Invalid key frames "%s"', text)
            return None
        key_frames.update(frames)
    for node in obj:
        if node.tag.endswith("%") and node.type == DataNodeType.TEXT:
            frames = _parse_key_frames(f"{node.tag}:{node.text()}")
            if frames is None:
                error_log_f('Invalid key frame "%s"', node.tag)
                return None
            key_frames.update(frames)
    return AnimatedProperty(tag, from_value, to_value, key_frames)


def _to_animated_property(value: Any) -> Optional[AnimatedProperty]:
    if isinstance(value, AnimatedProperty):
        return value
    if isinstance(value, DataNode) and value.type == DataNodeType.OBJECT:
        value = value.object()
    if isinstance(value, DataObject):
        return parse_animated_property(value)
    if isinstance(value, dict):
        tag = value.get(pn.PROPERTY) or value.get("tag")
        if tag and "from" in value and "to" in value:
            return AnimatedProperty(tag, value["from"], value["to"], value.get("key-frames"))
    if isinstance(value, tuple) and len(value) in (3, 4):
        return AnimatedProperty(*value)
    return None


# --- AnimationProperty ---

class AnimationProperty(DataProperty):

    supported_properties = ANIMATION_TAGS

    def __init__(self, params: Optional[Dict[str, Any]] = None):
        self._name = ""
        super().__init__(params)

    def _set(self, tag: str, value: Any) -> Optional[List[str]]:
        if tag == pn.ID:
            return set_string_property(self, tag, value)
        if tag in (pn.DURATION, pn.DELAY):
            limits = (0.0, float("inf")) if tag == pn.DURATION else (float("-inf"), float("inf"))
            return set_float_property(self, tag, value, limits)
        if tag == pn.TIMING_FUNCTION:
            return self._set_timing_function(value)
        if tag == pn.ITERATION_COUNT:
            return set_int_property(self, tag, value)
        if tag == pn.ANIMATION_DIRECTION:
            return set_enum_property(self, tag, value)
        if tag == pn.PROPERTY:
            return self._set_animated_properties(value)
        error_log_f('"%s" property is not supported by the animation', tag)
        return None

    def _set_timing_function(self, value: Any) -> Optional[List[str]]:
        if set_simple_property(self, pn.TIMING_FUNCTION, value):
            return [pn.TIMING_FUNCTION]
        if not isinstance(value, str):
            not_compatible_type(pn.TIMING_FUNCTION, value)
            return None
        text = value.strip()
        if not validate_timing_function(text):
            error_log_f('Invalid timing function "%s"', text)
            return None
        self.set_raw(pn.TIMING_FUNCTION, text)
        return [pn.TIMING_FUNCTION]

    def _set_animated_properties(self, value: Any) -> Optional[List[str]]:
        if isinstance(value, DataNode) and value.type == DataNodeType.ARRAY:
            value = value.array_elements()
        items = list(value) if isinstance(value, list) else [value]
        result = []
        for item in items:
            animated = _to_animated_property(item)
            if animated is None:
                not_compatible_type(pn.PROPERTY, item)
                return None
            result.append(animated)
        self.set_raw(pn.PROPERTY, result or None)
        return [pn.PROPERTY]

    # --- Accessors ---

    def animated_properties(self) -> List[AnimatedProperty]:
        return list(self.get_raw(pn.PROPERTY) or [])

    def has_animated_property(self) -> bool:
        return bool(self.get_raw(pn.PROPERTY))

    def name(self) -> str:
        """The ``@keyframes`` name: the id when set, otherwise a generated one."""
        value = self.get_raw(pn.ID)
        if value:
            return value
        if not self._name:
            self._name = _new_animation_name()
        return self._name

    def duration(self, session) -> str:
        return float_text_property(self, pn.DURATION, session, 1)[0]

    def delay(self, session) -> Tuple[str, bool]:
        text, ok = float_text_property(self, pn.DELAY, session, 0)
        return text, ok and float(text) != 0

    def timing_function(self, session) -> str:
        """The resolved timing function, or "" when unset or invalid."""
        text = string_property(self, pn.TIMING_FUNCTION, session)
        if text is None:
            return ""
        if not validate_timing_function(text):
            error_log_f('Invalid timing function "%s"', text)
            return ""
        return text.strip()

    # --- CSS ---

    def transition_css(self, tag: str, session) -> str:
        """``<tag> <d>s[ <timing>][ <delay>s]``."""
        text = f"{css_property_name(tag)} {self.duration(session)}s"
        timing = self.timing_function(session)
        if timing:
            text += " " + timing
        delay, ok = self.delay(session)
        if ok:
            if not timing:
                text += " " + EASE_TIMING
            text += f" {delay}s"
        return text

    def animation_css(self, session) -> str:
        """``<name> <d>s <timing> <delay>s <count|infinite> <direction>``."""
        count = int_property(self, pn.ITERATION_COUNT, session, 1)
        count_text = str(count) if count > 0 else "infinite"
        direction = enum_property(self, pn.ANIMATION_DIRECTION, session, NORMAL_ANIMATION)
        delay, _ = self.delay(session)
        return " ".join((self.name(), self.duration(session) + "s", self.timing_function(session) or EASE_TIMING,
                         delay + "s", count_text, ENUM_PROPERTIES[pn.ANIMATION_DIRECTION].css_values[direction]))

    def keyframes_css(self, session, builder: Optional[CSSStyleBuilder] = None) -> str:
        """Writes the ``@keyframes`` rule. Returns the text when no builder is passed."""
        own_builder = builder is None
        if own_builder:
            builder = CSSStyleBuilder()

        animated = self.animated_properties()
        builder.start_animation(self.name())

        def write_frame(name: str, values) -> None:
            builder.start_animation_frame(name)
            for tag, value in values:
                builder.add(css_property_name(tag), value_to_css(tag, value, session))
            builder.end_animation_frame()

        write_frame("from", [(prop.tag, prop.from_value) for prop in animated])
        frames = sorted({frame for prop in animated for frame in prop.key_frames})
        for frame in frames:
            write_frame(f"{frame}%", [(prop.tag, prop.key_frames[frame])
                                      for prop in animated if frame in prop.key_frames])
        write_frame("to", [(prop.tag, prop.to_value) for prop in animated])
        builder.end_animation()

        return builder.finish() if own_builder else ""

    def write_string(self, object_tag: str = "animation") -> str:
        parts = []
        for tag in self.all_tags():
            if tag == pn.PROPERTY:
                items = self.animated_properties()
                text = str(items[0]) if len(items) == 1 else "[" + ", ".join(str(item) for item in items) + "]"
            else:
                text = property_value_to_string(self.get_raw(tag))
            parts.append(f"{tag} = {text}")
        return f"{object_tag} {{ {', '.join(parts)} }}"

    def __str__(self) -> str:
        return self.write_string()


def new_animation(params: Optional[Dict[str, Any]] = None) -> AnimationProperty:
    return AnimationProperty(params)


def new_transition_animation(duration: float, timing_function: str = "", delay: float = 0) -> AnimationProperty:
    params: Dict[str, Any] = {pn.DURATION: duration}
    if timing_function:
        params[pn.TIMING_FUNCTION] = timing_function
    if delay:
        params[pn.DELAY] = delay
    return AnimationProperty(params)


def parse_animation(obj: DataObject) -> AnimationProperty:
    animation = AnimationProperty()
    for node in obj:
        if node.tag == pn.PROPERTY:
            animation.set(pn.PROPERTY, node)
        elif node.type == DataNodeType.TEXT:
            animation.set(node.tag, node.text())
        else:
            error_log_f('Invalid value of "%s" animation property', node.tag)
    return animation


def _to_animation(value: Any) -> Optional[AnimationProperty]:
    if isinstance(value, AnimationProperty):
        return value
    if isinstance(value, DataNode) and value.type == DataNodeType.OBJECT:
        value = value.object()
    if isinstance(value, DataObject):
        return parse_animation(value)
    if isinstance(value, dict):
        return AnimationProperty(value)
    if isinstance(value, str):
        try:
            return parse_animation(parse_data_text(value))
        except DataParseError as e:
            error_log(str(e))
    return None


# --- View properties ---

def get_transitions(properties: PropertyList) -> Dict[str, AnimationProperty]:
    value = properties.get_raw(pn.TRANSITION)
    return dict(value) if isinstance(value, dict) else {}


def set_transitions(properties: PropertyList, transitions: Dict[str, AnimationProperty]) -> None:
    properties.set_raw(pn.TRANSITION, transitions or None)


def set_transition_property(properties: PropertyList, tag: str, value: Any) -> Optional[List[str]]:
    """
    Updates the transition map.

    Accepts a ``{property: animation}`` dict (None removes an entry), a data
    object whose tag names the property, or an array of such objects.
    """
    transitions = get_transitions(properties)

    def add_object(obj: DataObject) -> bool:
        name = normalize_tag(obj.tag)
        if name in ("", "_"):
            error_log("Invalid transition property name")
            return False
        transitions[name] = parse_animation(obj)
        return True

    if isinstance(value, dict):
        for name, item in value.items():
            name = normalize_tag(name)
            if name == "":
                error_log("Invalid transition property name")
                return None
            if item is None:
                transitions.pop(name, None)
                continue
            animation = _to_animation(item)
            if animation is None:
                not_compatible_type(tag, item)
                return None
            transitions[name] = animation
    elif isinstance(value, DataObject):
        if not add_object(value):
            return None
    elif isinstance(value, DataNode) and value.type == DataNodeType.OBJECT:
        if not add_object(value.object()):
            return None
    elif isinstance(value, DataNode) and value.type == DataNodeType.ARRAY:
        for item in value.array_elements():
            if not isinstance(item, DataObject):
                not_compatible_type(tag, item)
                return None
            if not add_object(item):
                return None
    else:
        not_compatible_type(tag, value)
        return None

    set_transitions(properties, transitions)
    return [pn.TRANSITION]


def transition_css(properties: PropertyList, session) -> str:
    return ", ".join(animation.transition_css(tag, session)
                     for tag, animation in get_transitions(properties).items())


def get_animations(properties: PropertyList) -> List[AnimationProperty]:
    value = properties.get_raw(pn.ANIMATION)
    return list(value) if isinstance(value, list) else []


def set_animation_property(properties: PropertyList, tag: str, value: Any) -> Optional[List[str]]:
    """Stores a list of animations. Each one must animate at least one property."""
    if isinstance(value, DataNode) and value.type == DataNodeType.ARRAY:
        value = value.array_elements()
    items = value if isinstance(value, list) else [value]

    animations = []
    for item in items:
        animation = _to_animation(item)
        if animation is None:
            not_compatible_type(tag, item)
            return None
        if not animation.has_animated_property():
            error_log_f('The animation "%s" has no animated property', animation.name())
            return None
        animations.append(animation)

    properties.set_raw(pn.ANIMATION, animations or None)
    return [pn.ANIMATION]


def animation_css(properties: PropertyList, session) -> str:
    return ", ".join(animation.animation_css(session) for animation in get_animations(properties))
