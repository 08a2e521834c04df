# ruikit/application.py

"""
The application owns every session of a host.

Each connection's reader calls `Application.dispatch` with the raw messages
of its bridge. Session starts, reconnects and getter answers are handled
right there; everything else goes to the session's bounded event queue,
which one consumer thread per session drains through `process_event`.
"""

import html
import logging
import queue
import random
import threading
import uuid
from typing import Any, Callable, Dict, List, Optional, Tuple

from .bridge import Bridge
from .config import AppParams
from .data import DataObject, DataParseError, parse_data_text
from .log import debug_log_f, error_log, error_log_f
from .resolver import ThemeResolver
from .resources import default_theme, get_theme, static_text
from .session import Session
from .theme import Theme

logger = logging.getLogger(__name__)

EVENTS_QUEUE_SIZE = 1024
SHUTDOWN_TIMEOUT = 5.0

# Internal events put on a session queue by the application itself.
SESSION_START = "session-start"
SESSION_RECONNECT = "session-reconnect"
THEME_CHANGED = "theme-changed"


class Application:
    """
    Runs sessions built from ``create_content``: a callable returning an object
    with ``create_root_view(session)`` and, optionally, the session hooks
    (``on_start``, ``on_finish``, ``on_pause``, ``on_resume``,
    ``on_disconnect``, ``on_reconnect``).
    """

    def __init__(self, create_content: Callable[[], Any], params: Optional[AppParams] = None):
        self.create_content = create_content
        self.params = params or AppParams()
        self.sessions: Dict[int, Session] = {}
        self.server: Any = None
        self._lock = threading.Lock()
        self._queues: Dict[int, "queue.Queue[DataObject]"] = {}
        self._threads: Dict[int, threading.Thread] = {}
        self._downloads: Dict[str, Tuple[bytes, str]] = {}
        self._custom_theme: Optional[Theme] = None
        self._close_timers: Dict[int, threading.Timer] = {}

    # --- Sessions ---

    def _new_session_id(self) -> int:
        while True:
            session_id = random.randint(1, 0x7FFFFFFF)
            if session_id not in self.sessions:
                return session_id

    def session(self, session_id: int) -> Optional[Session]:
        with self._lock:
            return self.sessions.get(session_id)

    def _session_of(self, bridge: Bridge) -> Optional[Session]:
        if bridge.session_id is None:
            return None
        return self.session(bridge.session_id)

    def post_event(self, session: Session, data: DataObject) -> None:
        """Queues an event for the session's consumer thread. Blocks while the queue is full."""
        events = self._queues.get(session.id)
        if events is None:
            error_log_f("Session #%d has no event queue", session.id)
            return
        events.put(data)

    def _start_consumer(self, session: Session) -> None:
        events: "queue.Queue[DataObject]" = queue.Queue(maxsize=EVENTS_QUEUE_SIZE)
        self._queues[session.id] = events
        thread = threading.Thread(target=self._consume, args=(session, events),
                                  name=f"ruikit-session-{session.id}", daemon=True)
        self._threads[session.id] = thread
        thread.start()

    def _consume(self, session: Session, events: "queue.Queue[DataObject]") -> None:
        while True:
            data = events.get()
            try:
                running = self.process_event(session, data)
            except Exception:
                logger.exception("session #%d: %s event failed", session.id, data.tag)
                running = True
            if not running:
                break
        logger.debug("session #%d: event loop finished", session.id)

    def start_session(self, bridge: Bridge, data: DataObject) -> Optional[Session]:
        content = self.create_content()
        if content is None:
            error_log("the session content is not created")
            return None

        resolver = ThemeResolver(default_theme(), self._custom_theme)
        with self._lock:
            session = Session(self._new_session_id(), content, bridge, resolver, app=self)
            self.sessions[session.id] = session
        session.handle_session_info(data)
        if not session.set_content(content):
            with self._lock:
                self.sessions.pop(session.id, None)
            return None

        bridge.session_id = session.id
        bridge.write_message(session.start_script())
        self._start_consumer(session)
        self.post_event(session, DataObject(SESSION_START))
        logger.info("session #%d started (%s)", session.id, bridge.remote_addr())
        return session

    def reconnect(self, bridge: Bridge, data: DataObject) -> Optional[Session]:
        text = data.property_value("session")
        if text is None:
            error_log('"session" key not found')
            bridge.write_message("restartSession();")
            return None
        try:
            session_id = int(text)
        except ValueError:
            error_log_f('Invalid "session" value: %s', text)
            bridge.write_message("restartSession();")
            return None

        session = self.session(session_id)
        if session is None:
            debug_log_f("Session #%d not exists", session_id)
            bridge.write_message("restartSession();")
            return None

        with self._lock:
            timer = self._close_timers.pop(session_id, None)
        if timer is not None:
            timer.cancel()

        old_bridge = session.bridge
        if old_bridge is not None and old_bridge is not bridge:
            old_bridge.session_id = None
            # getters waiting on the old connection will never be answered
            old_bridge.cancel_answers()
        session.bridge = bridge
        bridge.session_id = session_id
        self.post_event(session, DataObject(SESSION_RECONNECT))
        logger.info("session #%d reconnected (%s)", session_id, bridge.remote_addr())
        return session

    def dispatch(self, bridge: Bridge, text: str) -> Optional[Session]:
        """Reader side: handles one raw client message. Returns the session bound to the bridge."""
        try:
            data = parse_data_text(text)
        except DataParseError as e:
            error_log(str(e))
            return self._session_of(bridge)

        command = data.tag
        if command == "startSession":
            return self.start_session(bridge, data)
        if command == "reconnect":
            return self.reconnect(bridge, data)

        session = self._session_of(bridge)
        if session is None:
            error_log_f("Session #%s not exists. Event: %s", data.property_value("session") or "?", command)
            return None
        if not session.handle_answer(command, data):
            self.post_event(session, data)
        return session

    def serve(self, bridge: Bridge) -> None:
        """Reader loop of one connection; returns when the bridge closes."""
        while True:
            message, ok = bridge.read_message()
            if not ok:
                break
            try:
                self.dispatch(bridge, message)
            except Exception:
                logger.exception("%s: message dispatch failed", bridge.remote_addr())
        self.connection_lost(bridge)

    def connection_lost(self, bridge: Bridge) -> None:
        """Reader side: the bridge stopped delivering messages."""
        session = self._session_of(bridge)
        if session is None or session.bridge is not bridge:
            return
        bridge.cancel_answers()
        self.post_event(session, DataObject("disconnect"))
        if self.params.socket_auto_close > 0:
            timer = threading.Timer(self.params.socket_auto_close, self._auto_close, args=(session, bridge))
            timer.daemon = True
            with self._lock:
                self._close_timers[session.id] = timer
            timer.start()

    def _auto_close(self, session: Session, bridge: Bridge) -> None:
        with self._lock:
            self._close_timers.pop(session.id, None)
        if session.bridge is bridge:
            logger.info("session #%d closed after %ds without a connection", session.id,
                        self.params.socket_auto_close)
            self.post_event(session, DataObject("session-close"))

    def process_event(self, session: Session, data: DataObject) -> bool:
        """Consumer side: handles one queued event. Returns False once the session is finished."""
        command = data.tag
        if command == "disconnect":
            session.on_disconnect()
        elif command == "session-close":
            session.on_finish()
            with self._lock:
                self.sessions.pop(session.id, None)
            self._queues.pop(session.id, None)
            self._threads.pop(session.id, None)
            if session.bridge is not None:
                session.bridge.close()
            logger.info("session #%d finished", session.id)
            return False
        elif command == SESSION_START:
            with session.updates():
                session.on_start()
        elif command == SESSION_RECONNECT:
            session.reload()
            with session.updates():
                session.on_reconnect()
        elif command == THEME_CHANGED:
            session.set_custom_theme(self._custom_theme)
        else:
            session.handle_event(command, data)
        return True

    def close_session(self, session: Session) -> None:
        self.post_event(session, DataObject("session-close"))

    def finish(self) -> None:
        """Closes every session, then stops the host."""
        with self._lock:
            sessions = list(self.sessions.values())
        threads = [self._threads.get(session.id) for session in sessions]
        for session in sessions:
            self.close_session(session)
        for thread in threads:
            if thread is not None and thread is not threading.current_thread():
                thread.join(SHUTDOWN_TIMEOUT)
        with self._lock:
            timers = list(self._close_timers.values())
            self._close_timers.clear()
        for timer in timers:
            timer.cancel()
        if self.server is not None:
            self.server.should_exit = True

    # --- Themes ---

    def reload_theme(self, name: str) -> bool:
        """Makes the named registered theme the custom theme of every session."""
        theme = get_theme(name)
        if theme is None:
            error_log_f('Theme "%s" not found', name)
            return False
        self.set_custom_theme(theme)
        return True

    def set_custom_theme(self, theme: Optional[Theme]) -> None:
        self._custom_theme = theme
        with self._lock:
            sessions = list(self.sessions.values())
        for session in sessions:
            self.post_event(session, DataObject(THEME_CHANGED))

    # --- Downloads ---

    def start_download(self, data: bytes, filename: str) -> str:
        """Registers a one-shot download. Returns the id the client requests it by."""
        download_id = uuid.uuid4().hex
        with self._lock:
            self._downloads[download_id] = (data, filename)
        return download_id

    def take_download(self, download_id: str) -> Optional[Tuple[bytes, str]]:
        with self._lock:
            return self._downloads.pop(download_id, None)

    # --- Start page ---

    def start_page(self) -> str:
        params = self.params
        parts: List[str] = [
            "<!DOCTYPE html>\n<html>\n<head>\n",
            '<meta charset="utf-8">\n',
            f"<title>{html.escape(params.title)}</title>\n",
        ]
        if params.icon:
            parts.append(f'<link rel="icon" href="{html.escape(params.icon)}">\n')
        if params.title_color is not None:
            parts.append(f'<meta name="theme-color" content="{params.title_color.css_string()}">\n')
        parts += [
            '<base target="_blank" rel="noopener">\n',
            '<meta name="viewport" content="width=device-width">\n',
            f"<style>\n{static_text('app.css')}</style>\n",
            '<style id="ruiAnimations"></style>\n',
            '<script src="app.js"></script>\n',
            "</head>\n<body>\n",
            '<div class="ruiRoot" id="ruiRootView"></div>\n',
            '<div class="ruiPopupLayer" id="ruiPopupLayer" style="visibility: hidden;" '
            'onclick="clickOutsidePopup(event)"></div>\n',
            '<div class="ruiTooltipLayer" id="ruiTooltipLayer" style="visibility: hidden; opacity: 0;">'
            '<div class="ruiTooltipArrow" id="ruiTooltipArrow"></div>'
            '<div class="ruiTooltipText" id="ruiTooltipText"></div></div>\n',
            '<a id="ruiDownloader" download style="display: none;"></a>\n',
            "</body>\n</html>\n",
        ]
        return "".join(parts)
