from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from ruikit import property_names as pn
from ruikit.application import Application
from ruikit.config import AppParams
from ruikit.server import create_redirect_server, create_server
from ruikit.size_unit import px
from ruikit.tests.helpers import ErrorLogTestCase
from ruikit.view import View


class ButtonContent:

    def create_root_view(self, session):
        button = View(session, {"id": "button"})
        button.set("click-event", lambda view, event: view.set(pn.WIDTH, px(42)))
        return button


class ServerTestCase(ErrorLogTestCase):

    params = AppParams(title="Host test")

    def setUp(self):
        super().setUp()
        self.application = Application(ButtonContent, self.params)
        self.client = TestClient(create_server(self.application))


class TestHTTP(ServerTestCase):

    def test_start_page(self):
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertIn("text/html", response.headers["content-type"])
        self.assertIn("<title>Host test</title>", response.text)

    def test_static_script(self):
        response = self.client.get("/app.js")
        self.assertEqual(response.status_code, 200)
        self.assertIn("function updateInnerHTML", response.text)

    def test_missing_resource(self):
        self.assertEqual(self.client.get("/missing.png").status_code, 404)

    def test_download_is_served_once(self):
        download_id = self.application.start_download(b"1,2,3", "data.csv")
        response = self.client.get(f"/{download_id}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.content, b"1,2,3")
        self.assertEqual(response.headers["content-disposition"], 'attachment; filename="data.csv"')
        self.assertEqual(self.client.get(f"/{download_id}").status_code, 404)


class TestWebSocket(ServerTestCase):

    def test_session_over_socket(self):
        with self.client.websocket_connect("/ws") as ws:
            ws.send_text("startSession { touch = 1 }")
            script = ws.receive_text()
            self.assertTrue(script.startswith("sessionID = '"))
            self.assertIn('id="id000001"', script)
            session_id = int(script.split("'")[1])
            self.assertTrue(self.application.session(session_id).touch_screen)

            ws.send_text(f"click-event {{ session = {session_id}, id = id000001 }}")
            self.assertEqual(ws.receive_text(),
                             "var element = document.getElementById('id000001'); if (element) {\n"
                             "element.style['width'] = '42px';\n"
                             "scanElementsSize();}")

    def test_session_is_closed_on_shutdown(self):
        with self.client:
            with self.client.websocket_connect("/ws") as ws:
                ws.send_text("startSession { }")
                ws.receive_text()
            self.assertEqual(len(self.application.sessions), 1)
        self.assertEqual(self.application.sessions, {})


class TestNoSocket(ServerTestCase):

    params = AppParams(no_socket=True)

    def test_socket_is_refused(self):
        with self.assertRaises(WebSocketDisconnect):
            with self.client.websocket_connect("/ws"):
                pass


class TestRedirect(ErrorLogTestCase):

    def test_redirects_to_https(self):
        client = TestClient(create_redirect_server())
        response = client.get("/page?x=1", follow_redirects=False)
        self.assertEqual(response.status_code, 301)
        self.assertEqual(response.headers["location"], "https://testserver/page?x=1")
