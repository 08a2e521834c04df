# ruikit/transform.py

"""
2D/3D transforms.

The per-view knobs (``rotate``, ``scale-x``, ``translate-y``, ...) are kept in
one `TransformProperty` under the ``transform`` tag. The CSS is always written
in the order ``skew translate scale rotate`` so a partial update never changes
the meaning of the other components. The 3D variants are used only while the
view has a non-zero ``perspective``.
"""

from typing import Any, Dict, List, Optional

from . import property_names as pn
from .css_builder import CSSBuilder
from .data import DataNode, DataNodeType, DataObject, DataParseError, parse_data_text
from .log import error_log, error_log_f
from .properties import (DataProperty, PropertyList, angle_property, bool_property, float_property,
                         float_text_property, not_compatible_type, set_angle_property,
                         set_float_property, set_size_property, size_property)
from .size_unit import SizeType, SizeUnit, auto_size

TRANSFORM_TAGS = (pn.ROTATE, pn.ROTATE_X, pn.ROTATE_Y, pn.ROTATE_Z, pn.SKEW_X, pn.SKEW_Y,
                  pn.SCALE_X, pn.SCALE_Y, pn.SCALE_Z, pn.TRANSLATE_X, pn.TRANSLATE_Y, pn.TRANSLATE_Z)

_UNBOUNDED = (float("-inf"), float("inf"))


def _non_zero(size: Optional[SizeUnit]) -> bool:
    return size is not None and not size.is_auto() and not size.is_zero()


class TransformProperty(DataProperty):

    supported_properties = TRANSFORM_TAGS

    def _set(self, tag: str, value: Any) -> Optional[List[str]]:
        if tag in (pn.ROTATE, pn.SKEW_X, pn.SKEW_Y):
            return set_angle_property(self, tag, value)
        if tag in (pn.ROTATE_X, pn.ROTATE_Y, pn.ROTATE_Z, pn.SCALE_X, pn.SCALE_Y, pn.SCALE_Z):
            return set_float_property(self, tag, value, _UNBOUNDED)
        if tag in (pn.TRANSLATE_X, pn.TRANSLATE_Y, pn.TRANSLATE_Z):
            return set_size_property(self, tag, value)
        error_log_f('"%s" property is not supported by the transform', tag)
        return None

    # --- CSS parts ---

    def _skew_css(self, session) -> str:
        x = angle_property(self, pn.SKEW_X, session)
        y = angle_property(self, pn.SKEW_Y, session)
        if (x is None or x.is_zero()) and (y is None or y.is_zero()):
            return ""
        x_text = x.css_string() if x is not None else "0deg"
        y_text = y.css_string() if y is not None else "0deg"
        return f"skew({x_text},{y_text})"

    def _translate_css(self, session, is_3d: bool) -> str:
        x = size_property(self, pn.TRANSLATE_X, session)
        y = size_property(self, pn.TRANSLATE_Y, session)
        z = size_property(self, pn.TRANSLATE_Z, session)

        def css(size: Optional[SizeUnit]) -> str:
            return size.css_string("0px", session) if size is not None else "0px"

        if is_3d:
            if _non_zero(x) or _non_zero(y) or _non_zero(z):
                return f"translate3d({css(x)},{css(y)},{css(z)})"
        elif _non_zero(x) or _non_zero(y):
            return f"translate({css(x)},{css(y)})"
        return ""

    def _scale_css(self, session, is_3d: bool) -> str:
        tags = (pn.SCALE_X, pn.SCALE_Y, pn.SCALE_Z) if is_3d else (pn.SCALE_X, pn.SCALE_Y)
        if all(float_property(self, tag, session, 1.0) == 1.0 for tag in tags):
            return ""
        values = ",".join(float_text_property(self, tag, session, 1)[0] for tag in tags)
        return f"scale3d({values})" if is_3d else f"scale({values})"

    def _rotate_css(self, session, is_3d: bool) -> str:
        angle = angle_property(self, pn.ROTATE, session)
        if angle is None or angle.is_zero():
            return ""
        if is_3d and any(self.get_raw(tag) is not None for tag in (pn.ROTATE_X, pn.ROTATE_Y, pn.ROTATE_Z)):
            axes = [float_property(self, tag, session, 0.0) for tag in (pn.ROTATE_X, pn.ROTATE_Y, pn.ROTATE_Z)]
            if all(value == 0 for value in axes):
                return ""
            values = ",".join(float_text_property(self, tag, session, 0)[0]
                              for tag in (pn.ROTATE_X, pn.ROTATE_Y, pn.ROTATE_Z))
            return f"rotate3d({values},{angle.css_string()})"
        return f"rotate({angle.css_string()})"

    def transform_css(self, session, is_3d: bool = False) -> str:
        parts = (self._skew_css(session), self._translate_css(session, is_3d),
                 self._scale_css(session, is_3d), self._rotate_css(session, is_3d))
        return " ".join(part for part in parts if part)

    def __str__(self) -> str:
        return self.write_string("_")


def new_transform_property(params: Optional[Dict[str, Any]] = None) -> TransformProperty:
    transform = TransformProperty()
    if params:
        for tag, value in params.items():
            transform.set(tag, value)
    return transform


def _parse_transform_object(obj: DataObject) -> Optional[TransformProperty]:
    transform = TransformProperty()
    ok = True
    for node in obj:
        if node.type == DataNodeType.TEXT:
            ok = transform.set(node.tag, node.text()) and ok
        else:
            ok = False
    if not ok and transform.is_empty():
        return None
    return transform


def value_to_transform_property(value: Any) -> Optional[TransformProperty]:
    if isinstance(value, TransformProperty):
        return value
    if isinstance(value, DataObject):
        return _parse_transform_object(value)
    if isinstance(value, DataNode) and value.type == DataNodeType.OBJECT:
        return _parse_transform_object(value.object())
    if isinstance(value, dict):
        return new_transform_property(value)
    if isinstance(value, str):
        try:
            return _parse_transform_object(parse_data_text(value))
        except DataParseError as e:
            error_log(str(e))
    return None


def get_transform_property(properties: PropertyList) -> Optional[TransformProperty]:
    value = properties.get_raw(pn.TRANSFORM)
    return value if isinstance(value, TransformProperty) else None


def set_transform_property(properties: PropertyList, tag: str, value: Any) -> Optional[List[str]]:
    """Setter for ``transform`` and the per-view transform knobs stored inside it."""
    if tag == pn.TRANSFORM:
        transform = value_to_transform_property(value)
        if transform is None:
            not_compatible_type(tag, value)
            return None
        properties.set_raw(pn.TRANSFORM, transform)
        return [pn.TRANSFORM]

    transform = get_transform_property(properties) or TransformProperty()
    if transform.set(tag, value):
        properties.set_raw(pn.TRANSFORM, None if transform.is_empty() else transform)
        return [tag, pn.TRANSFORM]
    return None


def remove_transform_element(properties: PropertyList, tag: str) -> List[str]:
    transform = get_transform_property(properties)
    if transform is None:
        return []
    if tag == pn.TRANSFORM:
        properties.set_raw(pn.TRANSFORM, None)
        return [pn.TRANSFORM]
    if transform.get_raw(tag) is None:
        return []
    transform.remove(tag)
    properties.set_raw(pn.TRANSFORM, None if transform.is_empty() else transform)
    return [tag, pn.TRANSFORM]


# --- View-level CSS ---

def transform_origin_css(x: SizeUnit, y: SizeUnit, z: SizeUnit, session) -> str:
    """``left|center|right top|center|bottom[ z]``. Empty when x, y and z are all Auto."""
    if x.is_auto() and y.is_auto() and z.is_auto():
        return ""

    def axis(size: SizeUnit, keywords) -> str:
        if size.type == SizeType.PERCENT and size.value in keywords:
            return keywords[size.value]
        return size.css_string("center", session)

    text = axis(x, {0: "left", 50: "center", 100: "right"}) + " " + axis(y, {0: "top", 50: "center", 100: "bottom"})
    if _non_zero(z):
        text += " " + z.css_string("0", session)
    return text


def is_3d(properties: PropertyList, session) -> bool:
    return _non_zero(size_property(properties, pn.PERSPECTIVE, session))


def write_view_transform_css(properties: PropertyList, builder: CSSBuilder, session) -> None:
    """Writes perspective, origins, backface visibility and the composed transform."""
    three_d = is_3d(properties, session)
    if three_d:
        builder.add("perspective", size_property(properties, pn.PERSPECTIVE, session).css_string("0", session))

    def size(tag: str) -> SizeUnit:
        return size_property(properties, tag, session) or auto_size()

    css = transform_origin_css(size(pn.PERSPECTIVE_ORIGIN_X), size(pn.PERSPECTIVE_ORIGIN_Y), auto_size(), session)
    if css:
        builder.add("perspective-origin", css)

    backface = bool_property(properties, pn.BACKFACE_VISIBLE, session)
    if backface is not None:
        builder.add("backface-visibility", "visible" if backface else "hidden")

    x, y = size(pn.TRANSFORM_ORIGIN_X), size(pn.TRANSFORM_ORIGIN_Y)
    if not x.is_auto() or not y.is_auto():
        z = size(pn.TRANSFORM_ORIGIN_Z) if three_d else auto_size()
        builder.add("transform-origin", transform_origin_css(x, y, z, session))

    transform = get_transform_property(properties)
    if transform is not None:
        css = transform.transform_css(session, three_d)
        if css:
            builder.add("transform", css)
