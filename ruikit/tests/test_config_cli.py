import tempfile
import unittest
from pathlib import Path

import typer
from typer.testing import CliRunner

from ruikit.color import Color
from ruikit.config import AppParams, Config
from ruikit_cli.main import app, load_factory

CONFIG_TEXT = """
server:
  host: 0.0.0.0
  port: 8088
app:
  title: Demo
  title-color: "#FF2196F3"
  socket-auto-close: 30
  cert_file: cert.pem
  key_file: key.pem
  colour: red
"""


def sample_factory():
    return object()


not_callable = 42


class TempDirTestCase(unittest.TestCase):

    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.dir = Path(tmp.name)

    def write(self, name, text):
        path = self.dir / name
        path.write_text(text, encoding="utf-8")
        return path


class TestConfig(TempDirTestCase):

    def setUp(self):
        super().setUp()
        Config.reset()
        self.addCleanup(Config.reset)

    def test_yaml_file(self):
        path = self.write("config.yaml", CONFIG_TEXT)
        cfg = Config(config_file=str(path), prefer_embedded=False)
        self.assertEqual(cfg.source, "file")
        self.assertEqual(cfg.get_nested("server.port"), 8088)
        self.assertEqual(cfg.get_nested("server.missing", "x"), "x")
        self.assertIs(Config(), cfg)

    def test_app_params(self):
        path = self.write("config.yaml", CONFIG_TEXT)
        cfg = Config(config_file=str(path), prefer_embedded=False)
        with self.assertLogs("ruikit.config", "WARNING") as logs:
            params = AppParams.from_config(cfg)
        self.assertEqual(params.title, "Demo")
        self.assertEqual(params.title_color, Color(0xFF2196F3))
        self.assertEqual(params.socket_auto_close, 30)
        self.assertTrue(params.tls)
        self.assertTrue(any('"app.colour"' in line for line in logs.output))

    def test_invalid_title_color(self):
        path = self.write("config.yaml", "app:\n  title_color: nonsense\n")
        with self.assertLogs("ruikit.config", "ERROR"):
            params = AppParams.from_config(Config(config_file=str(path), prefer_embedded=False))
        self.assertIsNone(params.title_color)

    def test_missing_file(self):
        cfg = Config(config_file=str(self.dir / "absent.yaml"), prefer_embedded=False)
        self.assertIsNone(cfg.source)
        self.assertEqual(cfg.as_dict(), {})
        self.assertEqual(AppParams.from_config(cfg), AppParams())


class TestCommands(TempDirTestCase):

    def setUp(self):
        super().setUp()
        self.runner = CliRunner()

    def test_parse_normalises(self):
        path = self.write("event.txt", "click-event{session=1,id=`id 2`}")
        result = self.runner.invoke(app, ["parse", str(path)])
        self.assertEqual(result.exit_code, 0)
        self.assertEqual(result.stdout, 'click-event {\n\tsession = 1,\n\tid = "id 2",\n}\n')

    def test_parse_error(self):
        path = self.write("broken.txt", "click-event {")
        result = self.runner.invoke(app, ["parse", str(path)])
        self.assertEqual(result.exit_code, 1)

    def test_parse_missing_file(self):
        result = self.runner.invoke(app, ["parse", str(self.dir / "absent.txt")])
        self.assertEqual(result.exit_code, 1)

    def test_theme_css(self):
        path = self.write("card.rui", "theme { styles = [ myCard { width = 100px } ] }")
        result = self.runner.invoke(app, ["theme-css", str(path), "--no-with-default"])
        self.assertEqual(result.exit_code, 0)
        self.assertEqual(result.stdout, ".myCard {\n\twidth: 100px;\n}\n")

    def test_theme_css_with_default(self):
        path = self.write("card.rui", "theme { styles = [ myCard { width = 100px } ] }")
        result = self.runner.invoke(app, ["theme-css", str(path)])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("body {", result.stdout)
        self.assertIn(".myCard {", result.stdout)

    def test_invalid_theme(self):
        path = self.write("broken.rui", "style { }")
        result = self.runner.invoke(app, ["theme-css", str(path)])
        self.assertEqual(result.exit_code, 1)


class TestLoadFactory(unittest.TestCase):

    def test_load(self):
        self.assertIs(load_factory(f"{__name__}:sample_factory"), sample_factory)

    def test_errors(self):
        for target in ("no_colon", f"{__name__}:", f"{__name__}:not_callable", "ruikit_missing_module:x"):
            with self.subTest(target=target):
                with self.assertRaises(typer.BadParameter):
                    load_factory(target)
