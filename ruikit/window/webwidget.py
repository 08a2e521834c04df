# ruikit/window/webwidget.py

"""
Desktop shell: a PySide6 window whose web view shows a running ruikit host.

PySide6 is the ``desktop`` extra; this module is only imported when a
window is requested.
"""

import logging
import sys
from typing import Optional

from PySide6.QtCore import QSize, Qt, QUrl
from PySide6.QtGui import QKeySequence, QShortcut
from PySide6.QtWebEngineCore import QWebEngineSettings
from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import QApplication, QVBoxLayout, QWidget

logger = logging.getLogger(__name__)


class DebugWindow(QWebEngineView):
    """A separate window for inspecting HTML elements."""

    def __init__(self):
        super().__init__()
        self.setWindowTitle("Debug Window")
        self.resize(800, 600)


class WebWindow(QWidget):
    def __init__(self, title: str, url: str, width: int = 800, height: int = 600,
                 maximized: bool = False, fixed_size: bool = False, on_top: bool = False):
        super().__init__()
        self.setWindowTitle(title)
        self.fixed_size = fixed_size
        if not maximized and not fixed_size:
            self.setGeometry(100, 100, width, height)
        if fixed_size and not maximized:
            self.setFixedSize(QSize(width, height))
        if on_top:
            self.setWindowFlags(self.windowFlags() | Qt.WindowStaysOnTopHint)

        self.layout = QVBoxLayout(self)
        self.layout.setContentsMargins(0, 0, 0, 0)

        self.webview = QWebEngineView(self)
        self.webview.settings().setAttribute(QWebEngineSettings.JavascriptCanOpenWindows, True)
        self.webview.setUrl(QUrl(url))
        self.layout.addWidget(self.webview)
        logger.info("window %r shows %s", title, url)

        # Developer tools, toggled with F12
        self.debug_window = DebugWindow()
        self.webview.page().setDevToolsPage(self.debug_window.page())
        self.debug_window.hide()
        shortcut = QShortcut(QKeySequence("F12"), self)
        shortcut.activated.connect(self.toggle_debug_window)

    def toggle_debug_window(self):
        if self.debug_window.isVisible():
            self.debug_window.hide()
        else:
            self.debug_window.show()

    def show_max_window(self):
        self.showMaximized()
        if self.fixed_size:
            self.setFixedSize(QApplication.primaryScreen().availableGeometry().size())

    def closeEvent(self, event):
        self.debug_window.close()
        super().closeEvent(event)


def run_window(url: str, title: str = "ruikit", width: int = 800, height: int = 600,
               maximized: bool = False, debug: bool = False) -> int:
    """Shows the url in a desktop window and runs the Qt event loop until it closes."""
    qt_app: Optional[QApplication] = QApplication.instance() or QApplication(sys.argv)
    window = WebWindow(title, url, width=width, height=height, maximized=maximized)
    if maximized:
        window.show_max_window()
    else:
        window.show()
    if debug:
        window.toggle_debug_window()
    return qt_app.exec()
