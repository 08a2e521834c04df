import threading

from ruikit import property_names as pn
from ruikit.bridge import LocalBridge, arg_to_string, call_func_script, quote_js_string
from ruikit.color import RED
from ruikit.data import parse_data_text
from ruikit.session import Session
from ruikit.size_unit import px
from ruikit.tests.helpers import ErrorLogTestCase
from ruikit.view import TextView, View, ViewsContainer, view_by_id

WAIT = 5.0


def batch(html_id, *lines):
    return f"var element = document.getElementById('{html_id}'); if (element) {{\n" + "".join(lines) + \
        "scanElementsSize();}"


class SampleContent:
    """Root container with a title and a button."""

    def __init__(self):
        self.calls = []

    def create_root_view(self, session):
        return ViewsContainer(session, {"id": "root"}, [
            TextView(session, {"id": "title", "text": "Hello <world>"}),
            View(session, {"id": "button"}),
        ])

    def on_start(self, session):
        self.calls.append("start")

    def on_pause(self, session):
        self.calls.append("pause")


class TestBridgeScripts(ErrorLogTestCase):

    def test_arguments(self):
        self.assertEqual(quote_js_string("it's\n"), "'it\\'s\\n'")
        self.assertEqual(arg_to_string(True), "true")
        self.assertEqual(arg_to_string(3), "3")
        self.assertEqual(arg_to_string(0.5), "0.5")
        self.assertEqual(arg_to_string([1, 2.5]), "[1,2.5]")
        self.assertEqual(call_func_script("setTitle", "a b"), "setTitle('a b');")

    def test_unsupported_argument(self):
        bridge = LocalBridge()
        self.assertFalse(bridge.call_func("f", object()))
        self.assertEqual(bridge.take_scripts(), [])
        self.assertEqual(self.errors, ["Unsupported argument type"])

    def test_update_batch(self):
        bridge = LocalBridge()
        self.assertTrue(bridge.start_update_script("id1"))
        self.assertFalse(bridge.start_update_script("id1"))
        bridge.update_css_property("id1", "width", "10px")
        bridge.update_property("id1", "tabindex", 0)
        bridge.remove_property("id1", "title")
        self.assertEqual(bridge.take_scripts(), [])
        bridge.finish_update_script("id1")
        self.assertEqual(bridge.take_scripts(), [batch(
            "id1",
            "element.style['width'] = '10px';\n",
            "element.setAttribute('tabindex', 0);\n",
            "if (element.hasAttribute('title')) { element.removeAttribute('title');}\n",
        )])

    def test_patches_outside_a_batch(self):
        bridge = LocalBridge()
        bridge.update_css_property("id1", "width", "10px")
        bridge.remove_property("id1", "title")
        self.assertEqual(bridge.take_scripts(), [
            "updateCSSProperty('id1', 'width', '10px');",
            "removeProperty('id1', 'title');",
        ])

    def test_closed_bridge(self):
        bridge = LocalBridge()
        bridge.close()
        self.assertFalse(bridge.write_message("x();"))
        self.assertEqual(bridge.read_message(), ("", False))
        self.assertEqual(self.errors, ["No connection"])


class TestAnswers(ErrorLogTestCase):

    def _run(self, func):
        result = {}
        thread = threading.Thread(target=lambda: result.setdefault("value", func()))
        thread.start()
        return thread, result

    def test_remote_value(self):
        bridge = LocalBridge()
        thread, result = self._run(lambda: bridge.html_property_value("id5", "value"))
        self.assertEqual(bridge.scripts.get(timeout=WAIT), "getPropertyValue(1, 'id5', 'value');")
        bridge.answer_received(parse_data_text("answer { answerID = 1, value = abc }"))
        thread.join(WAIT)
        self.assertEqual(result["value"], "abc")

    def test_getter_script(self):
        bridge = LocalBridge()
        thread, result = self._run(lambda: bridge.run_getter_script("sendAnswer();"))
        self.assertEqual(bridge.scripts.get(timeout=WAIT), "var answerID = 1;\nsendAnswer();")
        bridge.answer_received(parse_data_text("answer { answerID = 1, x = 2 }"))
        thread.join(WAIT)
        self.assertEqual(result["value"].property_value("x"), "2")

    def test_cancel_releases_waiters(self):
        bridge = LocalBridge()
        thread, result = self._run(lambda: bridge.run_getter_script("sendAnswer();"))
        bridge.scripts.get(timeout=WAIT)
        bridge.cancel_answers()
        thread.join(WAIT)
        self.assertIsNone(result["value"])

        bridge.answer_received(parse_data_text("answer { answerID = 1 }"))
        self.assertEqual(self.errors, ["Bad answerID = 1 (chan not found)"])

    def test_malformed_answers(self):
        bridge = LocalBridge()
        bridge.answer_received(parse_data_text("answer { }"))
        bridge.answer_received(parse_data_text("answer { answerID = x }"))
        self.assertEqual(self.errors, ["answerID not found", "Invalid answerID = x"])


class SessionTestCase(ErrorLogTestCase):

    def setUp(self):
        super().setUp()
        self.bridge = LocalBridge()
        self.content = SampleContent()
        self.session = Session(7, bridge=self.bridge)
        self.assertTrue(self.session.set_content(self.content))
        self.start_script = self.session.start_script()
        self.session.on_start()
        self.root = self.session.root_view
        self.title = view_by_id(self.root, "title")
        self.button = view_by_id(self.root, "button")


class TestSessionStart(SessionTestCase):

    def test_start_script(self):
        self.assertTrue(self.start_script.startswith("sessionID = '7';\n"))
        self.assertIn("ruiRootView", self.start_script)
        self.assertIn('id="id000001"', self.start_script)
        self.assertIn("Hello &lt;world&gt;", self.start_script)
        self.assertTrue(self.start_script.rstrip().endswith("scanElementsSize();"))
        self.assertEqual(self.content.calls, ["start"])
        self.assertEqual(self.bridge.take_scripts(), [])

    def test_html_ids(self):
        self.assertEqual([view.html_id() for view in self.root.walk()], ["id000001", "id000002", "id000003"])
        self.assertIs(self.session.view_by_html_id("id000003"), self.button)

    def test_set_content_requires_root(self):
        class Empty:
            def create_root_view(self, session):
                return None

        self.assertFalse(self.session.set_content(Empty()))
        self.assertFalse(self.session.set_content(None))
        self.assertIs(self.session.root_view, self.root)
        self.assertEqual(len(self.errors), 2)

    def test_replacing_content_rebuilds_body(self):
        self.session.set_content(SampleContent())
        scripts = self.bridge.take_scripts()
        self.assertEqual(len(scripts), 1)
        self.assertTrue(scripts[0].startswith("updateInnerHTML('ruiRootView', "))


class TestSessionUpdates(SessionTestCase):

    def test_patch_sent_at_once_outside_a_scope(self):
        self.button.set(pn.WIDTH, px(100))
        self.assertEqual(self.bridge.take_scripts(), ["updateCSSProperty('id000003', 'width', '100px');"])

    def test_one_batch_per_element(self):
        with self.session.updates():
            self.button.set(pn.WIDTH, px(100))
            self.button.set(pn.TEXT_COLOR, RED)
            self.title.set(pn.HEIGHT, px(20))
            self.assertEqual(self.bridge.take_scripts(), [])
        self.assertEqual(self.bridge.take_scripts(), [
            batch("id000003", "element.style['width'] = '100px';\n", "element.style['color'] = 'rgb(255,0,0)';\n"),
            batch("id000002", "element.style['height'] = '20px';\n"),
        ])

    def test_nested_scopes_flush_once(self):
        with self.session.updates():
            with self.session.updates():
                self.button.set(pn.WIDTH, px(1))
            self.assertEqual(self.bridge.take_scripts(), [])
        self.assertEqual(len(self.bridge.take_scripts()), 1)

    def test_rebuild_drops_patches_inside_the_subtree(self):
        with self.session.updates():
            self.button.set(pn.WIDTH, px(100))
            self.root.set(pn.HEIGHT, px(50))
            self.root.append(View(self.session, {"id": "extra"}))
        scripts = self.bridge.take_scripts()
        self.assertEqual(len(scripts), 2)
        self.assertTrue(scripts[0].startswith("updateInnerHTML('id000001', "))
        self.assertIn('id="id000004"', scripts[0])
        self.assertIn("width: 100px;", scripts[0])
        self.assertEqual(scripts[1], batch("id000001", "element.style['height'] = '50px';\n"))

    def test_text_change_rebuilds_inner_html(self):
        self.title.set(pn.TEXT, "Bye")
        self.assertEqual(self.bridge.take_scripts(), ["updateInnerHTML('id000002', 'Bye');"])

    def test_only_changed_css_is_sent(self):
        self.button.set(pn.WIDTH, px(100))
        self.bridge.take_scripts()
        self.button.set(pn.WIDTH, "100px")
        self.assertEqual(self.bridge.take_scripts(), [])
        self.button.remove(pn.WIDTH)
        self.assertEqual(self.bridge.take_scripts(), ["updateCSSProperty('id000003', 'width', '');"])

    def test_attribute_patches(self):
        with self.session.updates():
            self.button.set(pn.STYLE, "primary")
            self.button.set(pn.DISABLED, True)
        script = self.bridge.take_scripts()[0]
        self.assertIn("element.setAttribute('class', 'ruiView primary');\n", script)
        self.assertIn("element.setAttribute('data-disabled', '1');\n", script)

    def test_ignoring_view_updates(self):
        with self.session.ignoring_view_updates():
            self.button.set(pn.WIDTH, px(3))
            self.root.append(View(self.session))
        self.assertEqual(self.bridge.take_scripts(), [])

    def test_unrendered_views_send_nothing(self):
        view = View(self.session)
        view.set(pn.WIDTH, px(3))
        self.assertEqual(self.bridge.take_scripts(), [])

    def test_removed_subtree_sends_nothing(self):
        leaf = View(self.session, {"id": "leaf"})
        group = ViewsContainer(self.session, {"id": "group"}, [leaf])
        self.root.append(group)
        self.assertTrue(leaf.created)
        self.root.remove_view(group)
        self.bridge.take_scripts()
        self.assertFalse(leaf.created)
        leaf.set(pn.WIDTH, px(5))
        self.assertEqual(self.bridge.take_scripts(), [])

    def test_cleared_subtree_sends_nothing(self):
        leaf = View(self.session, {"id": "leaf"})
        self.root.append(ViewsContainer(self.session, {"id": "group"}, [leaf]))
        self.root.clear()
        self.bridge.take_scripts()
        leaf.set(pn.WIDTH, px(5))
        self.assertEqual(self.bridge.take_scripts(), [])


class TestSessionEvents(SessionTestCase):

    def event(self, text):
        data = parse_data_text(text)
        self.session.handle_event(data.tag, data)

    def test_click_listener(self):
        clicks = []
        self.button.set("click-event", lambda view, event: clicks.append((view.id, event.property_value("x"))))
        self.bridge.take_scripts()
        self.event("click-event { session = 7, id = id000003, x = 12 }")
        self.assertEqual(clicks, [("button", "12")])

    def test_disabled_view_ignores_clicks(self):
        clicks = []
        self.button.set("click-event", lambda view, event: clicks.append(view))
        self.root.set(pn.DISABLED, True)
        self.event("click-event { session = 7, id = id000003 }")
        self.assertEqual(clicks, [])

    def test_listener_changes_are_batched(self):
        def grow(view, event):
            view.set(pn.WIDTH, px(10))
            view.set(pn.HEIGHT, px(10))

        self.button.set("click-event", grow)
        self.bridge.take_scripts()
        self.event("click-event { session = 7, id = id000003 }")
        self.assertEqual(self.bridge.take_scripts(), [batch(
            "id000003", "element.style['width'] = '10px';\n", "element.style['height'] = '10px';\n")])

    def test_pause_hook(self):
        self.event("session-pause { session = 7 }")
        self.assertTrue(self.session.paused)
        self.assertEqual(self.content.calls, ["start", "pause"])

    def test_session_info(self):
        self.event('sessionInfo { session = 7, touch = 1, dark = true, "user-agent" = "Test/1.0", '
                   'language = en, languages = "en,fr", "pixel-ratio" = 2, storage = _{ key = value } }')
        self.assertTrue(self.session.touch_screen)
        self.assertTrue(self.session.dark_theme)
        self.assertEqual(self.session.user_agent, "Test/1.0")
        self.assertEqual(self.session.languages, ["en", "fr"])
        self.assertEqual(self.session.pixel_ratio, 2.0)
        self.assertEqual(self.session.client_item("key"), "value")

    def test_resize(self):
        frames = []
        self.button.set("resize-event", lambda view, event: frames.append(view.frame))
        self.event("resize { session = 7, views = [ _{ id = id000003, x = 1, y = 2, width = 30, height = 40 } ] }")
        self.assertEqual(len(frames), 1)
        self.assertEqual((frames[0].width, frames[0].height), (30.0, 40.0))
        self.event("root-size { session = 7, width = 800, height = 600 }")
        self.assertEqual((self.session.screen_width, self.session.screen_height), (800, 600))

    def test_timers(self):
        ticks = []
        timer_id = self.session.start_timer(100, ticks.append)
        self.assertEqual(self.bridge.take_scripts(), [f"startTimer(100, {timer_id});"])
        self.event(f"timer {{ session = 7, timerID = {timer_id} }}")
        self.assertEqual(ticks, [self.session])
        self.session.stop_timer(timer_id)
        self.assertEqual(self.bridge.take_scripts(), [f"stopTimer({timer_id});"])
        self.event(f"timer {{ session = 7, timerID = {timer_id} }}")
        self.assertEqual(self.errors, [f"Timer (id = {timer_id}) not exists"])

    def test_unknown_view_is_not_an_error(self):
        self.event("click-event { session = 7, id = id999999 }")
        self.event("click-event { session = 7, id = body }")
        self.assertEqual(self.errors, [])

    def test_event_without_id(self):
        self.event("click-event { session = 7 }")
        self.assertEqual(self.errors, ['"id" property not found. Event: click-event'])

    def test_image_events_go_to_the_event_queue(self):
        data = parse_data_text("imageLoaded { session = 7, id = id000003 }")
        self.assertFalse(self.session.handle_answer("imageLoaded", data))
        self.assertFalse(self.session.handle_answer("imageError", data))
        self.assertTrue(self.session.handle_answer("answer", parse_data_text("answer { answerID = 9 }")))
        self.assertEqual(self.errors, ["Bad answerID = 9 (chan not found)"])


class TestSessionCalls(SessionTestCase):

    def test_title_and_storage(self):
        self.session.set_title("App")
        self.session.set_client_item("k", "v")
        self.session.remove_client_item("k")
        self.assertEqual(self.bridge.take_scripts(), [
            "setTitle('App');",
            "localStorageSet('k', 'v');",
            "localStorageRemove('k');",
        ])
        self.assertIsNone(self.session.client_item("k"))

    def test_open_url(self):
        self.session.open_url("https://example.com/")
        self.session.open_url("example.com")
        self.assertEqual(self.bridge.take_scripts(), ["openURL('https://example.com/');"])
        self.assertEqual(len(self.errors), 1)

    def test_dark_theme_reloads_styles(self):
        self.session.set_dark_theme(True)
        scripts = self.bridge.take_scripts()
        self.assertTrue(scripts[0].startswith("setStyles("))
        self.assertTrue(scripts[1].startswith("updateInnerHTML('ruiRootView', "))
