# ruikit/server.py

"""
HTTP host of an `Application`.

``GET /`` serves the start page, ``/ws`` carries the session protocol and
every other path is a pending download or a resource file. Each socket gets
a `WebSocketBridge` and a reader thread running `Application.serve`, so the
session code stays synchronous while FastAPI owns the event loop.
"""

import asyncio
import logging
import platform
import queue
import shutil
import subprocess
import threading
from contextlib import asynccontextmanager
from typing import Optional, Tuple

import uvicorn
from fastapi import APIRouter, FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import FileResponse, HTMLResponse, RedirectResponse, Response

from . import log
from .application import Application
from .bridge import Bridge
from .log import debug_log, error_log
from .resources import find_resource_file

logger = logging.getLogger(__name__)

WRITE_TIMEOUT = 10.0


# --- Socket bridge ---

class WebSocketBridge(Bridge):
    """
    Bridge over a FastAPI WebSocket. The endpoint coroutine feeds incoming
    text with `feed`; writes are scheduled on the endpoint's event loop from
    whatever thread produces them.
    """

    def __init__(self, websocket: WebSocket, loop: asyncio.AbstractEventLoop):
        super().__init__()
        self.websocket = websocket
        self.loop = loop
        self._incoming: "queue.Queue[Optional[str]]" = queue.Queue()
        self._write_lock = threading.Lock()
        self._disconnected = False

    def feed(self, message: str) -> None:
        self._incoming.put(message)

    def disconnected(self) -> None:
        """Called by the endpoint once the client has gone."""
        self._disconnected = True
        self.closed = True
        self._incoming.put(None)

    def read_message(self) -> Tuple[str, bool]:
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
        with self._write_lock:
            future = asyncio.run_coroutine_threadsafe(self.websocket.send_text(script), self.loop)
            try:
                future.result(WRITE_TIMEOUT)
            except Exception as e:
                error_log(f"WebSocket write error: {e}")
                return False
        return True

    def close(self) -> None:
        if self.closed:
            return
        super().close()
        if not self._disconnected:
            asyncio.run_coroutine_threadsafe(self.websocket.close(), self.loop)

    def remote_addr(self) -> str:
        client = self.websocket.client
        return f"{client.host}:{client.port}" if client is not None else ""


# --- Routes ---

def create_router(application: Application) -> APIRouter:
    router = APIRouter()

    @router.get("/", response_class=HTMLResponse)
    async def start_page() -> HTMLResponse:
        return HTMLResponse(application.start_page())

    @router.websocket("/ws")
    async def session_socket(websocket: WebSocket) -> None:
        if application.params.no_socket:
            await websocket.close()
            return
        await websocket.accept()
        bridge = WebSocketBridge(websocket, asyncio.get_running_loop())
        logger.info("WebSocket accepted: %s", bridge.remote_addr())
        reader = threading.Thread(target=application.serve, args=(bridge,),
                                  name="ruikit-reader", daemon=True)
        reader.start()
        try:
            while True:
                bridge.feed(await websocket.receive_text())
        except WebSocketDisconnect as e:
            logger.info("WebSocket closed: %s (code %s)", bridge.remote_addr(), e.code)
        finally:
            bridge.disconnected()

    @router.get("/{path:path}")
    async def resource(path: str) -> Response:
        download = application.take_download(path)
        if download is not None:
            data, filename = download
            return Response(content=data, media_type="application/octet-stream",
                            headers={"Content-Disposition": f'attachment; filename="{filename}"'})
        filepath = find_resource_file(path)
        if filepath is None:
            logger.info('resource "%s" not found', path)
            return Response(status_code=404)
        return FileResponse(filepath)

    return router


def create_server(application: Application) -> FastAPI:
    """FastAPI app serving one application."""

    @asynccontextmanager
    async def lifespan(server: FastAPI):
        yield
        # session hooks may still write to sockets served by this loop
        await asyncio.to_thread(application.finish)

    server = FastAPI(title=application.params.title or "ruikit", docs_url=None, redoc_url=None,
                     openapi_url=None, lifespan=lifespan)
    server.include_router(create_router(application))
    return server


def create_redirect_server() -> FastAPI:
    """Answers every plain HTTP request with a redirect to the HTTPS address."""
    server = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)

    @server.get("/{path:path}")
    async def redirect(request: Request, path: str) -> RedirectResponse:
        url = request.url.replace(scheme="https", port=None)
        return RedirectResponse(str(url), status_code=301)

    return server


# --- Running ---

def run_app(application: Application, host: str = "127.0.0.1", port: int = 8000,
            log_level: str = "info") -> None:
    """Serves the application until the process is interrupted or `Application.finish` is called."""
    params = application.params
    config = uvicorn.Config(create_server(application), host=host, port=port, log_level=log_level,
                            ssl_certfile=params.cert_file if params.tls else None,
                            ssl_keyfile=params.key_file if params.tls else None)
    server = uvicorn.Server(config)
    application.server = server

    if params.tls and params.redirect80:
        redirect = uvicorn.Server(uvicorn.Config(create_redirect_server(), host=host, port=80,
                                                 log_level=log_level))
        threading.Thread(target=redirect.run, name="ruikit-redirect80", daemon=True).start()
        logger.info("redirecting http://%s:80 to https", host)

    scheme = "https" if params.tls else "http"
    logger.info("serving %s://%s:%d", scheme, host, port)
    server.run()


def open_browser(url: str) -> bool:
    """Opens the url in the system browser. Returns True when a launcher was started."""
    system = platform.system()
    if system == "Windows":
        commands = [["rundll32", "url.dll,FileProtocolHandler", url]]
    elif system == "Darwin":
        commands = [["open", url]]
    else:
        commands = [[name, url] for name in ("xdg-open", "x-www-browser", "www-browser")]

    for command in commands:
        if shutil.which(command[0]) is None:
            continue
        try:
            subprocess.Popen(command, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
        except OSError as e:
            logger.warning("%s failed: %s", command[0], e)
            continue
        return True
    error_log(f"no browser launcher found for {url}")
    return False
