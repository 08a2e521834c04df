import threading
import time

from ruikit import property_names as pn
from ruikit.application import Application
from ruikit.bridge import LocalBridge
from ruikit.config import AppParams
from ruikit.color import Color
from ruikit.size_unit import px
from ruikit.tests.helpers import ErrorLogTestCase
from ruikit.theme import create_theme_from_text
from ruikit.view import View, ViewsContainer

WAIT = 5.0


def wait_for(predicate, timeout=WAIT):
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            return False
        time.sleep(0.01)
    return True


class CounterContent:
    """A button that grows on every click."""

    def __init__(self):
        self.hooks = []
        self.finished = threading.Event()
        self.clicks = 0

    def create_root_view(self, session):
        button = View(session, {"id": "button"})
        button.set("click-event", self.clicked)
        return ViewsContainer(session, {"id": "root"}, [button])

    def clicked(self, view, event):
        self.clicks += 1
        view.set(pn.WIDTH, px(10 * self.clicks))

    def on_start(self, session):
        self.hooks.append("start")

    def on_disconnect(self, session):
        self.hooks.append("disconnect")

    def on_reconnect(self, session):
        self.hooks.append("reconnect")

    def on_finish(self, session):
        self.hooks.append("finish")
        self.finished.set()


class RecordingContainer(ViewsContainer):
    """Notes the thread that renders its children."""

    def __init__(self, session, params, views, renders):
        self.renders = renders
        super().__init__(session, params, views)

    def html_subviews(self):
        self.renders.append(threading.current_thread().name)
        return super().html_subviews()


class SlowContent(CounterContent):
    """Its click listener is still running when a reconnect comes in."""

    def __init__(self):
        super().__init__()
        self.renders = []
        self.clicking = threading.Event()

    def create_root_view(self, session):
        button = View(session, {"id": "button"})
        button.set("click-event", self.clicked)
        return RecordingContainer(session, {"id": "root"}, [button], self.renders)

    def clicked(self, view, event):
        self.clicking.set()
        time.sleep(0.3)
        super().clicked(view, event)


class ApplicationTestCase(ErrorLogTestCase):

    params = AppParams(title="Counter")
    content_class = CounterContent

    def setUp(self):
        super().setUp()
        self.contents = []
        self.app = Application(self.new_content, self.params)
        self.addCleanup(self.app.finish)

    def new_content(self):
        content = self.content_class()
        self.contents.append(content)
        return content

    def connect(self, message="startSession { touch = 0 }"):
        bridge = LocalBridge()
        thread = threading.Thread(target=self.app.serve, args=(bridge,), daemon=True)
        thread.start()
        self.addCleanup(bridge.close)
        if message:
            bridge.send(message)
        return bridge, thread

    def start(self):
        bridge, thread = self.connect()
        script = bridge.scripts.get(timeout=WAIT)
        self.assertTrue(script.startswith("sessionID = '"))
        session_id = int(script.split("'")[1])
        session = self.app.session(session_id)
        self.assertIsNotNone(session)
        self.assertTrue(wait_for(lambda: "start" in self.contents[-1].hooks))
        return bridge, thread, session


class TestSessionLifecycle(ApplicationTestCase):

    def test_start(self):
        bridge, _, session = self.start()
        self.assertIs(session.bridge, bridge)
        self.assertEqual(bridge.session_id, session.id)
        self.assertEqual(list(self.app.sessions), [session.id])
        self.assertFalse(session.touch_screen)

    def test_session_ids_are_unique(self):
        first = self.start()[2]
        second = self.start()[2]
        self.assertNotEqual(first.id, second.id)
        self.assertEqual(len(self.app.sessions), 2)

    def test_events_are_processed_in_order(self):
        bridge, _, session = self.start()
        for _ in range(3):
            bridge.send(f"click-event {{ session = {session.id}, id = id000002 }}")
        scripts = [bridge.scripts.get(timeout=WAIT) for _ in range(3)]
        self.assertEqual(self.contents[0].clicks, 3)
        self.assertEqual([script.split("element.style['width'] = ")[1][:6] for script in scripts],
                         ["'10px'", "'20px'", "'30px'"])

    def test_close_removes_the_session(self):
        bridge, thread, session = self.start()
        bridge.send(f"session-close {{ session = {session.id} }}")
        self.assertTrue(self.contents[0].finished.wait(WAIT))
        thread.join(WAIT)
        self.assertFalse(thread.is_alive())
        self.assertIsNone(self.app.session(session.id))
        self.assertTrue(bridge.closed)

        other = LocalBridge()
        other.session_id = session.id
        self.assertIsNone(self.app.dispatch(other, f"click-event {{ session = {session.id}, id = id000002 }}"))
        self.assertEqual(self.errors, [f"Session #{session.id} not exists. Event: click-event"])

    def test_message_without_session(self):
        bridge = LocalBridge()
        self.assertIsNone(self.app.dispatch(bridge, "click-event { id = id000002 }"))
        self.assertEqual(self.errors, ["Session #? not exists. Event: click-event"])

    def test_malformed_message(self):
        bridge = LocalBridge()
        self.assertIsNone(self.app.dispatch(bridge, "click-event { id = "))
        self.assertEqual(len(self.errors), 1)

    def test_failing_listener_keeps_the_session_running(self):
        bridge, _, session = self.start()
        button = session.root_view.subviews()[0]
        button.set("double-click-event", lambda view, event: 1 / 0)
        bridge.take_scripts()
        with self.assertLogs("ruikit.application", "ERROR"):
            bridge.send(f"double-click-event {{ session = {session.id}, id = id000002 }}")
            bridge.send(f"click-event {{ session = {session.id}, id = id000002 }}")
            bridge.scripts.get(timeout=WAIT)
        self.assertEqual(self.contents[0].clicks, 1)

    def test_finish_closes_every_session(self):
        self.start()
        self.start()
        self.app.finish()
        self.assertEqual(self.app.sessions, {})
        self.assertTrue(all(content.finished.is_set() for content in self.contents))


class TestReconnect(ApplicationTestCase):

    def test_reconnect_rebinds_the_bridge(self):
        old, thread, session = self.start()
        old.close()
        thread.join(WAIT)
        self.assertTrue(wait_for(lambda: "disconnect" in self.contents[0].hooks))

        new, _ = self.connect(f"reconnect {{ session = {session.id} }}")
        self.assertTrue(new.scripts.get(timeout=WAIT).startswith("setStyles("))
        self.assertTrue(new.scripts.get(timeout=WAIT).startswith("updateInnerHTML('ruiRootView', "))
        self.assertTrue(wait_for(lambda: "reconnect" in self.contents[0].hooks))
        self.assertIs(session.bridge, new)
        self.assertEqual(len(self.app.sessions), 1)

    def test_reconnect_unknown_session(self):
        bridge = LocalBridge()
        self.assertIsNone(self.app.dispatch(bridge, "reconnect { session = 12345 }"))
        self.assertEqual(bridge.take_scripts(), ["restartSession();"])
        self.assertEqual(self.app.sessions, {})
        self.assertEqual(self.errors, [])

    def test_reconnect_without_id(self):
        bridge = LocalBridge()
        self.app.dispatch(bridge, "reconnect { }")
        self.app.dispatch(bridge, "reconnect { session = abc }")
        self.assertEqual(bridge.take_scripts(), ["restartSession();", "restartSession();"])
        self.assertEqual(len(self.errors), 2)

    def test_reconnect_cancels_pending_getters(self):
        old, _, session = self.start()
        result = {}
        getter = threading.Thread(target=lambda: result.setdefault("value", old.run_getter_script("x();")))
        getter.start()
        self.assertEqual(old.scripts.get(timeout=WAIT), "var answerID = 1;\nx();")
        new = LocalBridge()
        self.app.dispatch(new, f"reconnect {{ session = {session.id} }}")
        getter.join(WAIT)
        self.assertIsNone(result["value"])
        self.assertIsNone(old.session_id)


class TestReconnectDuringEvent(ApplicationTestCase):

    content_class = SlowContent

    def test_tree_is_rendered_on_the_session_thread(self):
        old, _, session = self.start()
        content = self.contents[0]
        content.renders.clear()
        old.send(f"click-event {{ session = {session.id}, id = id000002 }}")
        self.assertTrue(content.clicking.wait(WAIT))

        new, _ = self.connect(f"reconnect {{ session = {session.id} }}")
        self.assertTrue(wait_for(lambda: "reconnect" in content.hooks))
        self.assertEqual(content.clicks, 1)
        self.assertEqual(content.renders, [f"ruikit-session-{session.id}"])

        scripts = [new.scripts.get(timeout=WAIT) for _ in range(3)]
        self.assertIn("'width'] = '10px'", scripts[0])
        self.assertTrue(scripts[1].startswith("setStyles("))
        self.assertTrue(scripts[2].startswith("updateInnerHTML('ruiRootView', "))


class TestAutoClose(ApplicationTestCase):

    params = AppParams(socket_auto_close=1)

    def test_session_closes_without_a_connection(self):
        bridge, thread, session = self.start()
        bridge.close()
        thread.join(WAIT)
        self.assertTrue(self.contents[0].finished.wait(WAIT))
        self.assertIsNone(self.app.session(session.id))

    def test_reconnect_cancels_the_close_timer(self):
        bridge, thread, session = self.start()
        bridge.close()
        thread.join(WAIT)
        self.assertTrue(wait_for(lambda: session.id in self.app._close_timers))
        self.connect(f"reconnect {{ session = {session.id} }}")
        self.assertTrue(wait_for(lambda: "reconnect" in self.contents[0].hooks))
        self.assertEqual(self.app._close_timers, {})
        time.sleep(1.2)
        self.assertIsNotNone(self.app.session(session.id))
        self.assertFalse(self.contents[0].finished.is_set())


class TestThemes(ApplicationTestCase):

    def test_custom_theme_reaches_every_session(self):
        bridge, _, session = self.start()
        bridge.take_scripts()
        theme = create_theme_from_text("theme { name = red, colors = _{ ruiTextColor = #FFFF0000 } }")
        self.app.set_custom_theme(theme)
        script = bridge.scripts.get(timeout=WAIT)
        self.assertTrue(script.startswith("setStyles("))
        self.assertIn("rgb(255,0,0)", script)
        self.assertIs(session.resolver.custom_theme, theme)

    def test_unknown_theme(self):
        self.assertFalse(self.app.reload_theme("missing"))
        self.assertEqual(self.errors, ['Theme "missing" not found'])


class TestDownloads(ApplicationTestCase):

    def test_one_shot(self):
        download_id = self.app.start_download(b"data", "report.txt")
        self.assertEqual(len(download_id), 32)
        self.assertEqual(self.app.take_download(download_id), (b"data", "report.txt"))
        self.assertIsNone(self.app.take_download(download_id))

    def test_session_download(self):
        bridge, _, session = self.start()
        bridge.take_scripts()
        session.start_download(b"abc", "a.txt")
        script = bridge.take_scripts()[0]
        download_id = script.split("'")[1]
        self.assertEqual(script, f"startDownload('{download_id}', 'a.txt');")
        self.assertEqual(self.app.take_download(download_id), (b"abc", "a.txt"))


class TestStartPage(ApplicationTestCase):

    params = AppParams(title="Counter <1>", icon="icon.svg", title_color=Color(0xFF2196F3))

    def test_page(self):
        page = self.app.start_page()
        self.assertTrue(page.startswith("<!DOCTYPE html>"))
        self.assertIn("<title>Counter &lt;1&gt;</title>", page)
        self.assertIn('<link rel="icon" href="icon.svg">', page)
        self.assertIn('<meta name="theme-color" content="rgb(33,150,243)">', page)
        self.assertIn('<script src="app.js"></script>', page)
        self.assertIn('id="ruiRootView"', page)
