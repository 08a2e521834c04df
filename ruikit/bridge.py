# ruikit/bridge.py

"""
Bridges carry JavaScript snippets to one browser client and its messages back.

`Bridge` composes the scripts: function calls with quoted arguments, per-element
update batches and getter scripts whose answers are matched by ``answerID``.
Subclasses supply the transport (`read_message`, `write_message`, `close`).
`LocalBridge` keeps both directions in process, which is what the tests and
embedded hosts use.
"""

import logging
import queue
import threading
from typing import Any, Dict, List, Optional, Tuple

from . import log
from .data import DataObject
from .log import debug_log, error_log

logger = logging.getLogger(__name__)

_JS_ESCAPES = (
    ("\\", "\\\\"),
    ("'", "\\'"),
    ("\n", "\\n"),
    ("\r", "\\r"),
    ("\t", "\\t"),
    ("\b", "\\b"),
    ("\f", "\\f"),
    ("\v", "\\v"),
)

UPDATE_SCRIPT_FOOTER = "scanElementsSize();}"


def update_script_header(html_id: str) -> str:
    return f"var element = document.getElementById('{html_id}'); if (element) {{\n"


def quote_js_string(text: str) -> str:
    for char, escaped in _JS_ESCAPES:
        text = text.replace(char, escaped)
    return f"'{text}'"


def arg_to_string(arg: Any) -> Optional[str]:
    """JavaScript literal of a script argument, or None (after logging) for unsupported types."""
    if isinstance(arg, bool):
        return "true" if arg else "false"
    if isinstance(arg, str):
        return quote_js_string(arg)
    if isinstance(arg, int):
        return "%d" % arg
    if isinstance(arg, float):
        return "%g" % arg
    if isinstance(arg, (list, tuple)) and all(isinstance(x, (int, float)) and not isinstance(x, bool) for x in arg):
        return "[" + ",".join("%g" % x for x in arg) + "]"
    error_log("Unsupported argument type")
    return None


def call_func_script(func: str, *args: Any) -> Optional[str]:
    texts = []
    for arg in args:
        text = arg_to_string(arg)
        if text is None:
            return None
        texts.append(text)
    return f"{func}({', '.join(texts)});"


class Bridge:
    """Script composition shared by every transport."""

    def __init__(self):
        self._update_scripts: Dict[str, List[str]] = {}
        self._answer_lock = threading.Lock()
        self._answer_id = 1
        self._answers: Dict[int, "queue.Queue[Optional[DataObject]]"] = {}
        self.closed = False
        # id of the session currently bound to this bridge
        self.session_id: Optional[int] = None

    # --- Transport ---

    def read_message(self) -> Tuple[str, bool]:
        """Blocks until a client message arrives. The flag is False once the bridge is closed."""
        raise NotImplementedError

    def write_message(self, script: str) -> bool:
        raise NotImplementedError

    def close(self) -> None:
        self.closed = True
        self.cancel_answers()

    def remote_addr(self) -> str:
        return ""

    def _log_out(self, script: str) -> None:
        if log.protocol_in_debug_log:
            debug_log("<- " + script)

    # --- Calls ---

    def call_func(self, func: str, *args: Any) -> bool:
        script = call_func_script(func, *args)
        if script is None:
            return False
        return self.write_message(script)

    def update_inner_html(self, html_id: str, html: str) -> None:
        self.call_func("updateInnerHTML", html_id, html)

    def append_to_inner_html(self, html_id: str, html: str) -> None:
        self.call_func("appendToInnerHTML", html_id, html)

    def append_animation_css(self, css: str) -> None:
        self.call_func("appendAnimationCSS", css)

    # --- Update batches ---

    def start_update_script(self, html_id: str) -> bool:
        """Opens a batch for the element. Returns False when one is already open."""
        if html_id in self._update_scripts:
            return False
        self._update_scripts[html_id] = [update_script_header(html_id)]
        return True

    def finish_update_script(self, html_id: str) -> None:
        """Closes the element's batch and sends it as one script."""
        buffer = self._update_scripts.pop(html_id, None)
        if buffer is not None:
            buffer.append(UPDATE_SCRIPT_FOOTER)
            self.write_message("".join(buffer))

    def has_update_script(self, html_id: str) -> bool:
        return html_id in self._update_scripts

    def update_css_property(self, html_id: str, name: str, value: str) -> None:
        buffer = self._update_scripts.get(html_id)
        if buffer is None:
            self.call_func("updateCSSProperty", html_id, name, value)
        else:
            buffer.append(f"element.style[{quote_js_string(name)}] = {quote_js_string(value)};\n")

    def update_property(self, html_id: str, name: str, value: Any) -> None:
        buffer = self._update_scripts.get(html_id)
        if buffer is None:
            self.call_func("updateProperty", html_id, name, value)
            return
        text = arg_to_string(value)
        if text is not None:
            buffer.append(f"element.setAttribute({quote_js_string(name)}, {text});\n")

    def remove_property(self, html_id: str, name: str) -> None:
        buffer = self._update_scripts.get(html_id)
        if buffer is None:
            self.call_func("removeProperty", html_id, name)
        else:
            name = quote_js_string(name)
            buffer.append(f"if (element.hasAttribute({name})) {{ element.removeAttribute({name});}}\n")

    # --- Answers ---

    def _new_answer(self) -> Tuple[int, "queue.Queue[Optional[DataObject]]"]:
        waiter: "queue.Queue[Optional[DataObject]]" = queue.Queue(maxsize=1)
        with self._answer_lock:
            answer_id = self._answer_id
            self._answer_id += 1
            self._answers[answer_id] = waiter
        return answer_id, waiter

    def _wait_answer(self, answer_id: int, waiter, sent: bool) -> Optional[DataObject]:
        try:
            return waiter.get() if sent else None
        finally:
            with self._answer_lock:
                self._answers.pop(answer_id, None)

    def run_getter_script(self, script: str) -> Optional[DataObject]:
        """
        Sends ``var answerID = N;`` followed by the script and blocks until the
        client answers with the same id. Returns None when the bridge closes
        or reconnects first.
        """
        answer_id, waiter = self._new_answer()
        sent = self.write_message(f"var answerID = {answer_id};\n{script}")
        return self._wait_answer(answer_id, waiter, sent)

    def remote_value(self, func: str, *args: Any) -> Optional[DataObject]:
        """Calls a client getter whose first argument is the answer id."""
        answer_id, waiter = self._new_answer()
        sent = self.call_func(func, answer_id, *args)
        return self._wait_answer(answer_id, waiter, sent)

    def html_property_value(self, html_id: str, name: str) -> str:
        answer = self.remote_value("getPropertyValue", html_id, name)
        if answer is None:
            return ""
        return answer.property_value("value") or ""

    def answer_received(self, answer: DataObject) -> None:
        text = answer.property_value("answerID")
        if text is None:
            error_log("answerID not found")
            return
        try:
            answer_id = int(text)
        except ValueError:
            error_log("Invalid answerID = " + text)
            return
        with self._answer_lock:
            waiter = self._answers.pop(answer_id, None)
        if waiter is None:
            error_log("Bad answerID = " + text + " (chan not found)")
            return
        waiter.put(answer)

    def cancel_answers(self) -> None:
        """Releases every pending getter with None. Their ids are forgotten."""
        with self._answer_lock:
            waiters = list(self._answers.values())
            self._answers.clear()
        for waiter in waiters:
            waiter.put(None)


class LocalBridge(Bridge):
    """
    In-process bridge. The client side pushes messages with `send` and reads
    scripts from `scripts` (or `take_scripts`).
    """

    def __init__(self, remote_addr: str = "local"):
        super().__init__()
        self._incoming: "queue.Queue[Optional[str]]" = queue.Queue()
        self.scripts: "queue.Queue[str]" = queue.Queue()
        self._remote_addr = remote_addr

    def send(self, message: str) -> None:
        """Client side: queues a message for `read_message`."""
        self._incoming.put(message)

    def take_scripts(self) -> List[str]:
        """Client side: every script written so far."""
        result = []
        while True:
            try:
                result.append(self.scripts.get_nowait())
            except queue.Empty:
                return result

    def read_message(self) -> Tuple[str, bool]:
        if self.closed:
            return "", False
        message = self._incoming.get()
        if message is None:
            return "", False
        if log.protocol_in_debug_log:
            debug_log("-> " + message)
        return message, True

    def write_message(self, script: str) -> bool:
        if self.closed:
            error_log("No connection")
            return False
        self._log_out(script)
        self.scripts.put(script)
        return True

    def close(self) -> None:
        if not self.closed:
            super().close()
            self._incoming.put(None)

    def remote_addr(self) -> str:
        return self._remote_addr
