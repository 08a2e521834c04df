import importlib
import logging
import sys
import threading
import time
from pathlib import Path
from typing import Any, Callable, Optional

import typer

from ruikit.application import Application
from ruikit.config import AppParams, Config
from ruikit.data import DataParseError, DataWriter, parse_data_text
from ruikit.log import set_protocol_in_debug_log
from ruikit.resolver import ThemeResolver
from ruikit.resources import set_resource_path
from ruikit.theme import create_theme_from_text

logger = logging.getLogger("ruikit_cli")

# Create the main Typer application object
app = typer.Typer(
    name="ruikit",
    help="Serve ruikit applications and inspect their theme and data files.",
    add_completion=False,
)


def load_factory(target: str, app_dir: str = ".") -> Callable[[], Any]:
    """Imports ``module:attribute`` the way ASGI servers locate an app."""
    module_name, sep, attribute = target.partition(":")
    if not sep or not module_name or not attribute:
        raise typer.BadParameter(f'"{target}" is not in MODULE:FACTORY form')
    app_path = str(Path(app_dir).resolve())
    if app_path not in sys.path:
        sys.path.insert(0, app_path)
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise typer.BadParameter(f'module "{module_name}" could not be imported: {e}')
    factory = getattr(module, attribute, None)
    if not callable(factory):
        raise typer.BadParameter(f'"{attribute}" in "{module_name}" is not callable')
    return factory


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


# --- CLI Commands ---

@app.command()
def serve(
    target: str = typer.Argument(..., help="Content factory as MODULE:FACTORY."),
    host: Optional[str] = typer.Option(None, help="Interface to bind (server.host in the config)."),
    port: Optional[int] = typer.Option(None, help="Port to bind (server.port in the config)."),
    config: str = typer.Option("config.yaml", help="YAML configuration file."),
    theme: Optional[Path] = typer.Option(None, help="Theme file used as the custom theme."),
    window: bool = typer.Option(False, help="Show the app in a desktop window instead of the browser."),
    browser: bool = typer.Option(True, help="Open the system browser once the server runs."),
    app_dir: str = typer.Option(".", help="Directory the factory module is imported from."),
    debug: bool = typer.Option(False, help="Log every protocol message."),
):
    """
    Serves the content returned by a factory, one instance per browser session.
    """
    from ruikit.server import open_browser, run_app

    logging.basicConfig(level=logging.DEBUG if debug else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    set_protocol_in_debug_log(debug)

    Config.reset()
    cfg = Config(config_file=config)
    params = AppParams.from_config(cfg)
    host = host or cfg.get_nested("server.host", "127.0.0.1")
    port = port or int(cfg.get_nested("server.port", 8000))
    theme = theme or (Path(cfg.get_nested("server.theme")) if cfg.get_nested("server.theme") else None)

    if Path(params.resources_dir).is_dir():
        set_resource_path(params.resources_dir)

    application = Application(load_factory(target, app_dir), params)
    if theme is not None:
        custom = create_theme_from_text(_read_text(theme), theme.stem)
        if custom is None:
            typer.echo(f"Error: invalid theme file {theme}", err=True)
            raise typer.Exit(code=1)
        application.set_custom_theme(custom)

    url = f"{'https' if params.tls else 'http'}://{host}:{port}/"

    def serve_forever():
        try:
            run_app(application, host, port, log_level="debug" if debug else "info")
        except (OSError, SystemExit) as e:
            # uvicorn exits when the socket cannot be bound
            logger.error("server on %s:%d failed: %s", host, port, e)
            return False
        return True

    if window:
        from ruikit.window.webwidget import run_window

        server_thread = threading.Thread(target=serve_forever, name="ruikit-server", daemon=True)
        server_thread.start()
        while application.server is None or not application.server.started:
            if not server_thread.is_alive():
                raise typer.Exit(code=1)
            time.sleep(0.05)
        run_window(url, title=params.title or "ruikit", debug=debug)
        application.finish()
        server_thread.join(5.0)
        return

    if browser:
        threading.Timer(1.0, open_browser, args=(url,)).start()
    if not serve_forever():
        raise typer.Exit(code=1)


@app.command(name="theme-css")
def theme_css(
    theme_file: Path = typer.Argument(..., help="Theme text file."),
    dark: bool = typer.Option(False, help="Resolve the dark variants."),
    touch: bool = typer.Option(False, help="Resolve the touch-screen variants."),
    with_default: bool = typer.Option(True, help="Overlay the file on the built-in default theme."),
):
    """
    Prints the stylesheet a theme file produces.
    """
    theme = create_theme_from_text(_read_text(theme_file), theme_file.stem)
    if theme is None:
        typer.echo(f"Error: invalid theme file {theme_file}", err=True)
        raise typer.Exit(code=1)
    if with_default:
        resolver = ThemeResolver(custom_theme=theme, dark=dark, touch=touch)
    else:
        resolver = ThemeResolver(theme, dark=dark, touch=touch)
    typer.echo(resolver.css_text(), nl=False)


@app.command()
def parse(
    file: Path = typer.Argument(..., help="Data text file."),
):
    """
    Parses a data text file and prints it back in normalised form.
    """
    try:
        obj = parse_data_text(_read_text(file))
    except DataParseError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    writer = DataWriter()
    writer.write_object(obj)
    typer.echo(writer.finish())


if __name__ == "__main__":
    app()
