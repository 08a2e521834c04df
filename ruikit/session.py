# ruikit/session.py

"""
The session reactor: one client, one view tree, one bridge.

Every change a view reports goes through the session. Inside an update scope
(`Session.updates`, opened around each event by the application) patches are
collected per element and sent when the outermost scope closes: one batch
script per element, preceded by any innerHTML rebuilds. Patches for elements
inside a rebuilt subtree are dropped because the rebuild already carries them.
Outside a scope each patch is sent at once.
"""

import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Set, Tuple

from .animation import AnimationProperty
from .bridge import Bridge, quote_js_string
from .color import Color
from .data import DataNodeType, DataObject
from .log import debug_log, debug_log_f, error_log, error_log_f
from .resolver import ThemeResolver
from .resources import static_text
from .theme import Theme
from .view import Frame, View, find_view_by_html_id

logger = logging.getLogger(__name__)

ROOT_HTML_ID = "ruiRootView"

LEFT_TO_RIGHT_DIRECTION = "ltr"
RIGHT_TO_LEFT_DIRECTION = "rtl"

# Content hooks forwarded when the content object defines them.
SESSION_HOOKS = ("on_start", "on_finish", "on_pause", "on_resume", "on_disconnect", "on_reconnect")

# (operation, css or attribute name, value)
_Patch = Tuple[str, str, Any]


def _bool_text(text: str) -> bool:
    return text in ("1", "true")


class Session:
    """
    Per-client state. Theme lookups (``resolve_constants``, ``color``,
    ``constant``, ``image_constant``) are delegated to the session's
    `ThemeResolver`, so a session can be passed to every typed getter.
    """

    def __init__(self, session_id: int, content: Any = None, bridge: Optional[Bridge] = None,
                 resolver: Optional[ThemeResolver] = None, app: Any = None):
        self.id = session_id
        self.content = content
        self.bridge = bridge
        self.app = app
        self.resolver = resolver if resolver is not None else ThemeResolver()
        self.root_view: Optional[View] = None
        self.ignore_view_updates = False
        self.paused = False
        self.started = False

        self.user_agent = ""
        self.language = ""
        self.languages: List[str] = []
        self.text_direction = LEFT_TO_RIGHT_DIRECTION
        self.pixel_ratio = 1.0
        self.screen_width = 0
        self.screen_height = 0
        self.client_storage: Dict[str, str] = {}

        self._view_counter = 0
        self._scope_depth = 0
        self._patches: Dict[str, List[_Patch]] = {}
        self._rebuilds: Dict[str, Optional[View]] = {}
        self._animations: Set[str] = set()
        self._animation_css: List[str] = []
        self._timers: Dict[int, Callable[["Session"], Any]] = {}
        self._next_timer_id = 1

    def __repr__(self) -> str:
        return f"<Session #{self.id}>"

    # --- Theme resolution ---

    @property
    def dark_theme(self) -> bool:
        return self.resolver.dark_theme

    @property
    def touch_screen(self) -> bool:
        return self.resolver.touch_screen

    def resolve_constants(self, text: str) -> Tuple[str, bool]:
        return self.resolver.resolve_constants(text)

    def constant(self, tag: str) -> Optional[str]:
        return self.resolver.constant(tag)

    def color(self, tag: str) -> Optional[Color]:
        return self.resolver.color(tag)

    def image_constant(self, tag: str) -> Optional[str]:
        return self.resolver.image_constant(tag)

    def current_theme(self) -> Theme:
        return self.resolver.current_theme()

    def set_custom_theme(self, theme: Optional[Theme]) -> None:
        self.resolver.set_custom_theme(theme)
        if self.started:
            self.reload()

    def set_dark_theme(self, dark: bool) -> None:
        if dark != self.resolver.dark_theme:
            self.resolver.dark_theme = dark
            if self.started:
                self.reload()

    # --- Content ---

    def next_view_id(self) -> str:
        self._view_counter += 1
        return "id%06d" % self._view_counter

    def set_content(self, content: Any) -> bool:
        """Builds the root view of the content. Once started, the whole page body is replaced."""
        if content is None:
            error_log("session content is None")
            return False
        root = content.create_root_view(self)
        if root is None:
            error_log("the root view is not created")
            return False
        self.content = content
        self.root_view = root
        if self.started:
            self.rebuild_inner(None)
            self._flush_if_idle()
        return True

    def view_by_html_id(self, html_id: str) -> Optional[View]:
        return find_view_by_html_id(self.root_view, html_id)

    def init_script(self) -> str:
        """Injects the theme stylesheet and the root view into the start page."""
        parts = []
        css = self.resolver.css_text()
        if css:
            parts.append(f"document.querySelector('style').textContent += {quote_js_string(css)};\n")
        if self.root_view is not None:
            html = self.root_view.html()
            parts.append(f"document.getElementById('{ROOT_HTML_ID}').innerHTML = {quote_js_string(html)};\n")
            parts.append("scanElementsSize();")
        for css in self._animation_css:
            parts.append(f"\nappendAnimationCSS({quote_js_string(css)});")
        self._animation_css = []
        return "".join(parts)

    def start_script(self) -> str:
        return f"sessionID = '{self.id}';\n" + self.init_script()

    def reload(self) -> None:
        """Resends the stylesheet and the whole view tree."""
        if self.bridge is None:
            return
        css = static_text("app.css") + self.resolver.css_text()
        self.bridge.call_func("setStyles", css)
        if self.root_view is not None:
            self.bridge.update_inner_html(ROOT_HTML_ID, self.root_view.html())
            self._send_animation_css()

    def register_animation(self, animation: AnimationProperty) -> None:
        """Sends the ``@keyframes`` rule of an animation once per session."""
        name = animation.name()
        if name in self._animations:
            return
        self._animations.add(name)
        self._animation_css.append(animation.keyframes_css(self))
        if self.started:
            self._send_animation_css()

    def _send_animation_css(self) -> None:
        if self.bridge is None:
            return
        for css in self._animation_css:
            self.bridge.append_animation_css(css)
        self._animation_css = []

    # --- Update batching ---

    @contextmanager
    def updates(self) -> Iterator["Session"]:
        """Collects view patches until the outermost scope exits, then sends them."""
        self._scope_depth += 1
        try:
            yield self
        finally:
            self._scope_depth -= 1
            if self._scope_depth == 0:
                self.flush_updates()

    @contextmanager
    def ignoring_view_updates(self) -> Iterator["Session"]:
        previous = self.ignore_view_updates
        self.ignore_view_updates = True
        try:
            yield self
        finally:
            self.ignore_view_updates = previous

    def _patch(self, html_id: str, patch: _Patch) -> None:
        if self.bridge is None:
            return
        if self._scope_depth > 0:
            self._patches.setdefault(html_id, []).append(patch)
        else:
            self._apply(html_id, patch)

    def _apply(self, html_id: str, patch: _Patch) -> None:
        operation, name, value = patch
        if operation == "css":
            self.bridge.update_css_property(html_id, name, value)
        elif operation == "set":
            self.bridge.update_property(html_id, name, value)
        else:
            self.bridge.remove_property(html_id, name)

    def update_css_property(self, html_id: str, name: str, value: str) -> None:
        self._patch(html_id, ("css", name, value))

    def update_property(self, html_id: str, name: str, value: Any) -> None:
        self._patch(html_id, ("set", name, value))

    def remove_property(self, html_id: str, name: str) -> None:
        self._patch(html_id, ("remove", name, None))

    def rebuild_inner(self, view: Optional[View]) -> None:
        """Queues an innerHTML rebuild of the view's element, or of the page body for None."""
        if self.bridge is None or self.ignore_view_updates:
            return
        html_id = ROOT_HTML_ID if view is None else view.html_id()
        self._rebuilds[html_id] = view
        self._flush_if_idle()

    def rebuild_view(self, view: View) -> None:
        """Queues a rebuild of the element that holds the view."""
        self.rebuild_inner(view.parent)

    def _flush_if_idle(self) -> None:
        if self._scope_depth == 0:
            self.flush_updates()

    def flush_updates(self) -> None:
        rebuilds, self._rebuilds = self._rebuilds, {}
        patches, self._patches = self._patches, {}
        if self.bridge is None:
            return

        replaced: Set[str] = set()
        for html_id, view in rebuilds.items():
            if html_id in replaced:
                continue
            if view is None:
                if self.root_view is None:
                    continue
                self.bridge.update_inner_html(html_id, self.root_view.html())
                replaced.update(v.html_id() for v in self.root_view.walk())
            else:
                self.bridge.update_inner_html(html_id, view.html_subviews())
                for sub in view.subviews():
                    replaced.update(v.html_id() for v in sub.walk())
        if rebuilds:
            self._send_animation_css()

        for html_id, items in patches.items():
            if html_id in replaced:
                continue
            self.bridge.start_update_script(html_id)
            for patch in items:
                self._apply(html_id, patch)
            self.bridge.finish_update_script(html_id)

    # --- Client calls ---

    def call_func(self, func: str, *args: Any) -> None:
        if self.bridge is not None:
            self.bridge.call_func(func, *args)

    def set_title(self, title: str) -> None:
        text, _ = self.resolve_constants(title)
        self.call_func("setTitle", text)

    def set_title_color(self, color: Color) -> None:
        self.call_func("setTitleColor", color.css_string())

    def open_url(self, url: str) -> None:
        if "://" not in url:
            error_log_f('invalid URL "%s"', url)
            return
        self.call_func("openURL", url)

    def remote_addr(self) -> str:
        return self.bridge.remote_addr() if self.bridge is not None else ""

    def html_property_value(self, html_id: str, name: str) -> str:
        """Reads a DOM property of an element; blocks until the client answers."""
        if self.bridge is None:
            return ""
        return self.bridge.html_property_value(html_id, name)

    def client_item(self, key: str) -> Optional[str]:
        return self.client_storage.get(key)

    def set_client_item(self, key: str, value: str) -> None:
        self.client_storage[key] = value
        self.call_func("localStorageSet", key, value)

    def remove_client_item(self, key: str) -> None:
        self.client_storage.pop(key, None)
        self.call_func("localStorageRemove", key)

    def start_timer(self, ms: int, func: Callable[["Session"], Any]) -> int:
        if self.bridge is None:
            return 0
        timer_id = self._next_timer_id
        self._next_timer_id += 1
        self._timers[timer_id] = func
        self.bridge.call_func("startTimer", ms, timer_id)
        return timer_id

    def stop_timer(self, timer_id: int) -> None:
        if self._timers.pop(timer_id, None) is not None and self.bridge is not None:
            self.bridge.call_func("stopTimer", timer_id)

    def start_download(self, data: bytes, filename: str) -> None:
        if self.app is None:
            error_log("downloads need an application")
            return
        download_id = self.app.start_download(data, filename)
        self.call_func("startDownload", download_id, filename)

    # --- Content hooks ---

    def _hook(self, name: str) -> None:
        func = getattr(self.content, name, None)
        if callable(func):
            func(self)

    def on_start(self) -> None:
        self.started = True
        self._hook("on_start")

    def on_finish(self) -> None:
        self._hook("on_finish")

    def on_pause(self) -> None:
        self.paused = True
        self._hook("on_pause")

    def on_resume(self) -> None:
        self.paused = False
        self._hook("on_resume")

    def on_disconnect(self) -> None:
        self._hook("on_disconnect")

    def on_reconnect(self) -> None:
        self._hook("on_reconnect")

    # --- Events ---

    def handle_answer(self, command: str, data: DataObject) -> bool:
        """Handles messages answered on the reader side. Returns False for other commands."""
        if command == "answer":
            if self.bridge is not None:
                self.bridge.answer_received(data)
        else:
            return False
        return True

    def handle_session_info(self, params: DataObject) -> None:
        value = params.property_value("touch")
        if value is not None:
            self.resolver.touch_screen = _bool_text(value)

        value = params.property_value("user-agent")
        if value is not None:
            self.user_agent = value

        if params.property_value("direction") == RIGHT_TO_LEFT_DIRECTION:
            self.text_direction = RIGHT_TO_LEFT_DIRECTION

        value = params.property_value("language")
        if value is not None:
            self.language = value

        value = params.property_value("languages")
        if value is not None:
            self.languages = [lang for lang in value.split(",") if lang]

        value = params.property_value("dark")
        if value is not None:
            self.resolver.dark_theme = _bool_text(value)

        value = params.property_value("pixel-ratio")
        if value is not None:
            try:
                self.pixel_ratio = float(value)
            except ValueError:
                error_log_f('Invalid "pixel-ratio" value: %s', value)

        node = params.property_by_tag("storage")
        if node is not None and node.type == DataNodeType.OBJECT:
            for element in node.object():
                if element.type == DataNodeType.TEXT:
                    self.client_storage[element.tag] = element.text()

    def _handle_root_size(self, data: DataObject) -> None:
        for tag in ("width", "height"):
            text = data.property_value(tag)
            if text is None:
                error_log_f('Resize event error: the property "%s" not found', tag)
                continue
            try:
                size = int(float(text))
            except ValueError:
                error_log_f("Resize event error: invalid %s %s", tag, text)
                continue
            if size > 0:
                if tag == "width":
                    self.screen_width = size
                else:
                    self.screen_height = size

    def _handle_resize(self, data: DataObject) -> None:
        node = data.property_by_tag("views")
        if node is None or node.type != DataNodeType.ARRAY:
            error_log('Resize event error: invalid "views" property')
            return
        for element in node.array_elements():
            if not isinstance(element, DataObject):
                error_log("Resize event error: views element is not object")
                continue
            view_id = element.property_value("id")
            if view_id is None:
                error_log('"id" property not found')
                continue
            view = self.view_by_html_id(view_id)
            if view is None:
                debug_log_f("View with id == %s not found", view_id)
                continue

            def number(tag: str) -> float:
                text = element.property_value(tag)
                try:
                    return float(text) if text is not None else 0.0
                except ValueError:
                    error_log_f("Resize event error: invalid %s %s", tag, text)
                    return 0.0

            view.scroll = Frame(number("scroll-x"), number("scroll-y"),
                                number("scroll-width"), number("scroll-height"))
            view.on_resize(Frame(number("x"), number("y"), number("width"), number("height")))

    def _handle_timer(self, data: DataObject) -> None:
        text = data.property_value("timerID")
        if text is None:
            error_log('"timerID" property not found')
            return
        try:
            timer_id = int(text)
        except ValueError:
            error_log_f("Invalid timerID = %s", text)
            return
        func = self._timers.get(timer_id)
        if func is None:
            error_log_f("Timer (id = %d) not exists", timer_id)
            return
        func(self)

    def handle_event(self, command: str, data: DataObject) -> None:
        """Dispatches a client event inside an update scope."""
        with self.updates():
            if command == "session-pause":
                self.on_pause()
            elif command == "session-resume":
                self.on_resume()
            elif command == "root-size":
                self._handle_root_size(data)
            elif command == "resize":
                self._handle_resize(data)
            elif command == "sessionInfo":
                self.handle_session_info(data)
            elif command == "storageError":
                text = data.property_value("error")
                if text is not None:
                    error_log(text)
            elif command == "timer":
                self._handle_timer(data)
            elif command == "clickOutsidePopup":
                debug_log("click outside of a popup")
            else:
                view_id = data.property_value("id")
                if view_id is None:
                    error_log(f'"id" property not found. Event: {command}')
                elif view_id != "body":
                    view = self.view_by_html_id(view_id)
                    if view is None:
                        debug_log_f("View with id == %s not found", view_id)
                    elif not view.handle_command(command, data):
                        debug_log_f('Unknown "%s" event of %s', command, view_id)
