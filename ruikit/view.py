# ruikit/view.py

"""
Views are the nodes of a session's UI tree.

A view owns a `ViewStyle`, renders itself to HTML and, once rendered, turns
every property change into DOM patches sent through its session. CSS
changes are diffed against the declarations last sent, so a change only
touches the CSS properties whose value actually moved.
"""

import html as html_text
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional

from . import property_names as pn
from .animation import get_animations
from .css_builder import CSSDeclarations
from .data import DataObject
from .log import error_log, error_log_f
from .properties import PropertyList, bool_property, enum_property, int_property, string_property
from .property_values import ENUM_PROPERTIES, GONE, INVISIBLE
from .view_style import EVENT_SUFFIX, ViewStyle

logger = logging.getLogger(__name__)

Listener = Callable[["View", DataObject], Any]

CLICK_EVENT = "click-event"
DOUBLE_CLICK_EVENT = "double-click-event"
FOCUS_EVENT = "focus-event"
LOST_FOCUS_EVENT = "lost-focus-event"
KEY_DOWN_EVENT = "key-down-event"
KEY_UP_EVENT = "key-up-event"
RESIZE_EVENT = "resize-event"
SCROLL_EVENT = "scroll-event"

# Event tag -> (html attribute, client handler) written only while a listener is set.
EVENT_ATTRIBUTES = {
    CLICK_EVENT: ("onclick", "clickEvent(this, event)"),
    DOUBLE_CLICK_EVENT: ("ondblclick", "doubleClickEvent(this, event)"),
    FOCUS_EVENT: ("onfocus", "focusEvent(this, event)"),
    LOST_FOCUS_EVENT: ("onblur", "blurEvent(this, event)"),
    KEY_DOWN_EVENT: ("onkeydown", "keyDownEvent(this, event)"),
    KEY_UP_EVENT: ("onkeyup", "keyUpEvent(this, event)"),
}

# Events ignored while the view is disabled.
_DISABLED_EVENTS = frozenset((CLICK_EVENT, DOUBLE_CLICK_EVENT, KEY_DOWN_EVENT, KEY_UP_EVENT))

# Tags with no effect on the rendered element.
_SILENT_TAGS = frozenset((pn.ID, pn.USER_DATA))


@dataclass
class Frame:
    left: float = 0.0
    top: float = 0.0
    width: float = 0.0
    height: float = 0.0


def _float_value(data: DataObject, tag: str) -> float:
    text = data.property_value(tag)
    if text is None:
        return 0.0
    try:
        return float(text)
    except ValueError:
        error_log_f('Invalid "%s" value: %s', tag, text)
        return 0.0


class View:
    """
    A plain ``div`` (or the element named by the ``semantics`` property).

    Listeners are stored as ``<event>-event`` properties and are called with
    ``(view, event_data)``::

        view.set("click-event", lambda view, event: print("clicked", view.id))
    """

    system_class = ""

    def __init__(self, session, params: Optional[Dict[str, Any]] = None):
        self.session = session
        self.parent: Optional["View"] = None
        self.created = False
        self.frame = Frame()
        self.scroll = Frame()
        self._html_id = ""
        self._css: Dict[str, str] = {}
        self.properties = ViewStyle()
        if params:
            self.properties.set_params(params)
        self.properties.on_change(self._property_changed)

    # --- Properties ---

    @property
    def id(self) -> str:
        return string_property(self.properties, pn.ID, None) or ""

    def get(self, tag: str) -> Any:
        return self.properties.get(tag)

    def set(self, tag: str, value: Any) -> bool:
        return self.properties.set(tag, value)

    def remove(self, tag: str) -> None:
        self.properties.remove(tag)

    def set_params(self, params: Dict[str, Any]) -> bool:
        return self.properties.set_params(params)

    def listeners(self, event: str) -> List[Listener]:
        return list(self.properties.get_raw(event) or [])

    def subviews(self) -> List["View"]:
        return []

    def walk(self) -> Iterator["View"]:
        """This view and every view below it, depth first."""
        yield self
        for view in self.subviews():
            yield from view.walk()

    def is_disabled(self) -> bool:
        view: Optional[View] = self
        while view is not None:
            if bool_property(view.properties, pn.DISABLED, self.session):
                return True
            view = view.parent
        return False

    def tab_index(self) -> int:
        value = int_property(self.properties, pn.TAB_INDEX, self.session)
        if value is not None:
            return value
        return 0 if bool_property(self.properties, pn.FOCUSABLE, self.session) else -1

    # --- HTML ---

    def html_id(self) -> str:
        if not self._html_id:
            self._html_id = self.session.next_view_id()
        return self._html_id

    def html_tag(self) -> str:
        semantics = enum_property(self.properties, pn.SEMANTICS, self.session, 0)
        values = ENUM_PROPERTIES[pn.SEMANTICS].css_values
        if 0 < semantics < len(values):
            return values[semantics]
        return "div"

    def html_class(self, disabled: bool) -> str:
        cls = "ruiView"
        style = None
        if disabled:
            style = string_property(self.properties, pn.STYLE_DISABLED, self.session)
        if not style:
            style = string_property(self.properties, pn.STYLE, self.session)
        if style:
            cls += " " + style
        if self.system_class:
            cls = self.system_class + " " + cls
        return cls

    def css_declarations(self) -> Dict[str, str]:
        builder = CSSDeclarations()
        self.properties.css_view_style(builder, self.session)
        return builder.declarations

    def html_properties(self) -> str:
        text = ' data-disabled="1"' if self.is_disabled() else ' data-disabled="0"'
        frame = self.frame
        if frame.left or frame.top or frame.width or frame.height:
            text += ' data-left="%g" data-top="%g" data-width="%g" data-height="%g"' % (
                frame.left, frame.top, frame.width, frame.height)
        return text

    def html_subviews(self) -> str:
        return ""

    def html(self) -> str:
        self.created = True
        tag = self.html_tag()
        disabled = self.is_disabled()
        parts = [f'<{tag} id="{self.html_id()}"']

        cls = self.html_class(disabled)
        if cls:
            parts.append(f' class="{html_text.escape(cls)}"')

        self._css = self.css_declarations()
        if self._css:
            style = " ".join(f"{key}: {value};" for key, value in self._css.items())
            parts.append(f' style="{html_text.escape(style)}"')
        self._register_animations()

        parts.append(self.html_properties())

        if not disabled:
            tab_index = self.tab_index()
            if tab_index >= 0:
                parts.append(f' tabindex="{tab_index}"')

        tooltip = string_property(self.properties, pn.TOOLTIP, self.session)
        if tooltip:
            parts.append(f' data-tooltip="{html_text.escape(tooltip)}"'
                         ' onmouseenter="mouseEnterEvent(this, event)" onmouseleave="mouseLeaveEvent(this, event)"')

        parts.append(' onscroll="scrollEvent(this, event)"')
        for event, (attribute, handler) in EVENT_ATTRIBUTES.items():
            if self.properties.get_raw(event):
                parts.append(f' {attribute}="{handler}"')

        parts.append(">")
        parts.append(self.html_subviews())
        parts.append(f"</{tag}>")
        return "".join(parts)

    def _register_animations(self) -> None:
        for animation in get_animations(self.properties):
            if animation.has_animated_property():
                self.session.register_animation(animation)

    # --- Change reaction ---

    def _property_changed(self, properties: PropertyList, tag: str) -> None:
        session = self.session
        if not self.created or session is None or session.ignore_view_updates:
            return
        html_id = self.html_id()

        if tag in _SILENT_TAGS:
            return
        if tag in (pn.STYLE, pn.STYLE_DISABLED):
            session.update_property(html_id, "class", self.html_class(self.is_disabled()))
        elif tag == pn.DISABLED:
            self._disabled_changed(html_id)
        elif tag in (pn.TAB_INDEX, pn.FOCUSABLE):
            if not self.is_disabled():
                session.update_property(html_id, "tabindex", self.tab_index())
        elif tag == pn.TOOLTIP:
            self._tooltip_changed(html_id)
        elif tag == pn.SEMANTICS:
            session.rebuild_view(self)
        elif tag in EVENT_ATTRIBUTES:
            attribute, handler = EVENT_ATTRIBUTES[tag]
            if properties.get_raw(tag):
                session.update_property(html_id, attribute, handler)
            else:
                session.remove_property(html_id, attribute)
        elif tag.endswith(EVENT_SUFFIX):
            return
        elif not self.content_changed(tag):
            self.update_css()
            if tag == pn.VISIBILITY and enum_property(properties, pn.VISIBILITY, session) in (INVISIBLE, GONE):
                session.call_func("hideTooltip")
            elif tag == pn.ANIMATION:
                self._register_animations()

    def content_changed(self, tag: str) -> bool:
        """Hook for subclasses: reacts to a content tag and returns True, or returns False for CSS tags."""
        return False

    def update_css(self) -> None:
        """Sends the CSS properties that differ from the last rendered declarations."""
        html_id = self.html_id()
        css = self.css_declarations()
        for key, value in css.items():
            if self._css.get(key) != value:
                self.session.update_css_property(html_id, key, value)
        for key in self._css:
            if key not in css:
                self.session.update_css_property(html_id, key, "")
        self._css = css

    def _disabled_changed(self, html_id: str) -> None:
        session = self.session
        disabled = self.is_disabled()
        session.update_property(html_id, "data-disabled", "1" if disabled else "0")
        session.update_property(html_id, "class", self.html_class(disabled))
        tab_index = self.tab_index()
        if tab_index >= 0:
            session.update_property(html_id, "tabindex", -1 if disabled else tab_index)

    def _tooltip_changed(self, html_id: str) -> None:
        session = self.session
        tooltip = string_property(self.properties, pn.TOOLTIP, session)
        if tooltip:
            session.update_property(html_id, "data-tooltip", tooltip)
            session.update_property(html_id, "onmouseenter", "mouseEnterEvent(this, event)")
            session.update_property(html_id, "onmouseleave", "mouseLeaveEvent(this, event)")
        else:
            session.remove_property(html_id, "data-tooltip")
            session.remove_property(html_id, "onmouseenter")
            session.remove_property(html_id, "onmouseleave")

    # --- Events ---

    def handle_command(self, command: str, data: DataObject) -> bool:
        """Handles a client event addressed to this view. Returns False for unknown commands."""
        if command == SCROLL_EVENT:
            self.scroll = Frame(_float_value(data, "x"), _float_value(data, "y"),
                                _float_value(data, "width"), _float_value(data, "height"))
        elif command in _DISABLED_EVENTS and self.is_disabled():
            return True
        elif not command.endswith(EVENT_SUFFIX):
            return False

        for listener in self.listeners(command):
            listener(self, data)
        return True

    def on_resize(self, frame: Frame) -> None:
        if frame == self.frame:
            return
        self.frame = frame
        data = DataObject(RESIZE_EVENT)
        for listener in self.listeners(RESIZE_EVENT):
            listener(self, data)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._html_id or '?'} id={self.id!r}>"


class TextView(View):
    """Shows the ``text`` property as escaped HTML."""

    def __init__(self, session, params: Optional[Dict[str, Any]] = None):
        if isinstance(params, str):
            params = {pn.TEXT: params}
        super().__init__(session, params)

    @property
    def text(self) -> str:
        return string_property(self.properties, pn.TEXT, self.session) or ""

    def html_subviews(self) -> str:
        return html_text.escape(self.text, quote=False)

    def content_changed(self, tag: str) -> bool:
        if tag != pn.TEXT:
            return False
        self.session.rebuild_inner(self)
        return True


class ViewsContainer(View):
    """A view holding an ordered list of child views."""

    def __init__(self, session, params: Optional[Dict[str, Any]] = None, views: Optional[List[View]] = None):
        self._views: List[View] = []
        super().__init__(session, params)
        for view in views or []:
            self._attach(view)
            self._views.append(view)

    @property
    def views(self) -> List[View]:
        return list(self._views)

    def subviews(self) -> List[View]:
        return list(self._views)

    def views_count(self) -> int:
        return len(self._views)

    def _attach(self, view: View) -> None:
        if view.parent is not None and view.parent is not self and isinstance(view.parent, ViewsContainer):
            view.parent.remove_view(view)
        view.parent = self

    def _changed(self) -> None:
        if self.created and not self.session.ignore_view_updates:
            self.session.rebuild_inner(self)

    def append(self, view: View) -> None:
        if view is None:
            error_log("cannot append a None view")
            return
        self._attach(view)
        self._views.append(view)
        self._changed()

    def insert(self, view: View, index: int) -> None:
        if view is None:
            error_log("cannot insert a None view")
            return
        self._attach(view)
        index = max(0, min(index, len(self._views)))
        self._views.insert(index, view)
        self._changed()

    def remove_at(self, index: int) -> Optional[View]:
        if index < 0 or index >= len(self._views):
            error_log_f("view index %d out of range", index)
            return None
        view = self._views.pop(index)
        view.parent = None
        for item in view.walk():
            item.created = False
        self._changed()
        return view

    def remove_view(self, view: View) -> Optional[View]:
        for index, item in enumerate(self._views):
            if item is view:
                return self.remove_at(index)
        return None

    def clear(self) -> None:
        for view in self._views:
            view.parent = None
            for item in view.walk():
                item.created = False
        self._views = []
        self._changed()

    def html_subviews(self) -> str:
        return "".join(view.html() for view in self._views)


def view_by_id(root: Optional[View], view_id: str) -> Optional[View]:
    """The first view under root (inclusive) whose ``id`` property equals view_id."""
    if root is None:
        return None
    for view in root.walk():
        if view.id == view_id:
            return view
    return None


def find_view_by_html_id(root: Optional[View], html_id: str) -> Optional[View]:
    if root is None:
        return None
    for view in root.walk():
        if view._html_id == html_id:
            return view
    return None
