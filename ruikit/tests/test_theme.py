import tempfile
from pathlib import Path

from ruikit import resources
from ruikit.color import Color
from ruikit.resolver import ThemeResolver
from ruikit.resources import (add_theme, clear_themes, default_theme, find_resource_file, get_theme,
                              register_theme_text, scan_themes_dir, set_resource_path, theme_names)
from ruikit.theme import (LANDSCAPE_MEDIA, PORTRAIT_MEDIA, MediaStyleParams, Theme, concat,
                          create_theme_from_text, parse_media_rule)
from ruikit.tests.helpers import ErrorLogTestCase, resolver_for
from ruikit.view_style import ViewStyle

THEME_TEXT = """
theme {
    name = sample,
    colors = _{
        accent = #FF2196F3,
        link = @accent,
    },
    colors:dark = _{ accent = #FF90CAF9 },
    constants = _{
        gap = 4px,
        wide = 120px,
        sum = "@gap @wide",
    },
    constants:touch = _{ gap = 12px },
    styles = [
        myCard { width = 100px, padding = @gap },
        ruiButton { text-color = @accent },
    ],
    styles:portrait:width640 = [
        ruiButton { text-color = #FFFF0000 },
    ],
}
"""


class TestThemeText(ErrorLogTestCase):

    def setUp(self):
        super().setUp()
        self.theme = create_theme_from_text(THEME_TEXT)

    def test_parse(self):
        self.assertIsNotNone(self.theme)
        self.assertEqual(self.theme.name, "sample")
        self.assertEqual(self.theme.color("accent"), "#FF2196F3")
        self.assertEqual(self.theme.color("accent", dark=True), "#FF90CAF9")
        self.assertEqual(self.theme.constant("gap", touch=True), "12px")
        self.assertEqual(self.theme.constant("wide", touch=True), "120px")
        self.assertEqual(self.theme.style_tags(), ["myCard", "ruiButton"])
        self.assertEqual(self.errors, [])

    def test_media_rule(self):
        params = self.theme.media_styles[0].params
        self.assertEqual(params, MediaStyleParams(PORTRAIT_MEDIA, 0, 640, 0, 0))
        self.assertIsNotNone(self.theme.media_style("ruiButton", params))

    def test_text_round_trip(self):
        again = create_theme_from_text(str(self.theme))
        self.assertEqual(again, self.theme)
        self.assertEqual(again.name, "sample")

    def test_not_a_theme(self):
        self.assertIsNone(create_theme_from_text("style { a = 1 }"))
        self.assertIsNone(create_theme_from_text("theme { a = "))
        self.assertEqual(len(self.errors), 2)

    def test_unknown_section_is_logged(self):
        theme = create_theme_from_text("theme { fonts = _{} }")
        self.assertIsNotNone(theme)
        self.assertEqual(self.errors, ['Unknown theme section "fonts"'])


class TestMediaRules(ErrorLogTestCase):

    def test_parse(self):
        self.assertEqual(parse_media_rule("styles:landscape:width320-640:height480-"),
                         MediaStyleParams(LANDSCAPE_MEDIA, 320, 640, 480, 0))
        self.assertTrue(parse_media_rule("styles").is_default())

    def test_invalid(self):
        self.assertIsNone(parse_media_rule("styles:portrait:portrait"))
        self.assertIsNone(parse_media_rule("styles:width0"))
        self.assertIsNone(parse_media_rule("styles:depth100"))
        self.assertEqual(len(self.errors), 3)

    def test_css_text(self):
        self.assertEqual(MediaStyleParams(PORTRAIT_MEDIA, 0, 640).css_text(),
                         " and (orientation: portrait) and (max-width: 640px)")
        self.assertEqual(MediaStyleParams(min_width=320, max_width=640).css_text(),
                         " and (min-width: 320.001px) and (max-width: 640px)")
        self.assertEqual(MediaStyleParams(min_height=100, max_height=100).css_text(), " and (height: 100px)")

    def test_media_styles_are_sorted(self):
        theme = Theme()
        style = ViewStyle({"width": "1px"})
        theme.set_media_style("a", MediaStyleParams(LANDSCAPE_MEDIA), style)
        theme.set_media_style("a", MediaStyleParams(max_width=800), style)
        theme.set_media_style("a", MediaStyleParams(PORTRAIT_MEDIA), style)
        self.assertEqual([media.params.orientation for media in theme.media_styles],
                         [0, PORTRAIT_MEDIA, LANDSCAPE_MEDIA])

    def test_set_media_style_updates_existing_rule(self):
        theme = Theme()
        params = MediaStyleParams(max_width=800)
        theme.set_media_style("a", params, ViewStyle({"width": "1px"}))
        theme.set_media_style("b", params, ViewStyle({"width": "2px"}))
        self.assertEqual(len(theme.media_styles), 1)
        theme.set_media_style("a", params, None)
        self.assertIsNone(theme.media_style("a", params))
        self.assertIsNotNone(theme.media_style("b", params))


class TestThemeCSS(ErrorLogTestCase):

    def test_stylesheet(self):
        session = resolver_for(THEME_TEXT)
        css = session.css_text()
        self.assertIn("button {\n\tcolor: rgb(33,150,243);\n}\n", css)
        self.assertIn(".myCard {\n\tpadding: 4px;\n\twidth: 100px;\n}\n", css)
        self.assertIn("@media screen and (orientation: portrait) and (max-width: 640px) {\n"
                      "\tbutton {\n\t\tcolor: rgb(255,0,0);\n\t}\n}\n", css)
        self.assertLess(css.index("button {"), css.index(".myCard {"))

    def test_touch_and_dark_variants(self):
        session = resolver_for(THEME_TEXT, dark=True, touch=True)
        css = session.css_text()
        self.assertIn("padding: 12px;", css)
        self.assertIn("color: rgb(144,202,249);", css)

    def test_disabled_styles_are_skipped(self):
        session = resolver_for("theme { styles = [ ruiRoot { width = 1px } ] }")
        self.assertEqual(session.css_text(), "")


class TestResolver(ErrorLogTestCase):

    def setUp(self):
        super().setUp()
        self.session = resolver_for(THEME_TEXT)

    def test_constants(self):
        self.assertEqual(self.session.constant("gap"), "4px")
        self.assertEqual(self.session.constant("sum"), "4px 120px")
        self.assertEqual(self.session.resolve_constants("@gap,@wide"), ("4px,120px", True))

    def test_touch_falls_back_to_regular(self):
        session = resolver_for(THEME_TEXT, touch=True)
        self.assertEqual(session.constant("gap"), "12px")
        self.assertEqual(session.constant("wide"), "120px")

    def test_colors_follow_references(self):
        self.assertEqual(self.session.color("link"), Color(0xFF2196F3))
        dark = resolver_for(THEME_TEXT, dark=True)
        self.assertEqual(dark.color("link"), Color(0xFF90CAF9))

    def test_missing_constant(self):
        self.assertIsNone(self.session.constant("nothing"))
        self.assertEqual(self.errors, ['"nothing" constant not found'])
        self.assertEqual(self.session.resolve_constants("@nothing"), ("@nothing", False))

    def test_cycle_is_logged_once(self):
        session = resolver_for("theme { constants = _{ b = @b } }")
        self.assertIsNone(session.constant("b"))
        self.assertEqual(self.errors, ['"b" constant is cyclic'])

    def test_longer_cycle(self):
        session = resolver_for("theme { constants = _{ a = @b, b = @c, c = @a } }")
        self.assertIsNone(session.constant("a"))
        self.assertEqual(self.errors, ['"a" constant is cyclic'])

    def test_custom_theme_overrides_default(self):
        default = create_theme_from_text("theme { constants = _{ gap = 1px, other = 2px } }")
        custom = create_theme_from_text("theme { constants = _{ gap = 9px } }")
        session = ThemeResolver(default)
        self.assertEqual(session.constant("gap"), "1px")
        session.set_custom_theme(custom)
        self.assertEqual(session.constant("gap"), "9px")
        self.assertEqual(session.constant("other"), "2px")
        self.assertEqual(session.constant_tags(), ["gap", "other"])

    def test_concat(self):
        first = create_theme_from_text("theme { colors = _{ a = #FF000000, b = #FF111111 } }")
        second = create_theme_from_text("theme { colors = _{ a = #FFFFFFFF } }")
        merged = concat(first, None, second)
        self.assertEqual(merged.color("a"), "#FFFFFFFF")
        self.assertEqual(merged.color("b"), "#FF111111")


class TestResources(ErrorLogTestCase):

    def setUp(self):
        super().setUp()
        clear_themes()
        self.addCleanup(clear_themes)
        self.addCleanup(setattr, resources, "_resource_path", None)

    def test_default_theme(self):
        theme = default_theme()
        self.assertIn("ruiBackgroundColor", theme.color_tags())
        self.assertIs(default_theme(), theme)
        self.assertEqual(self.errors, [])

    def test_default_theme_css(self):
        css = ThemeResolver().css_text()
        self.assertIn("body {", css)
        self.assertEqual(self.errors, [])

    def test_named_and_unnamed_themes(self):
        self.assertTrue(register_theme_text("theme { name = night, colors = _{ x = #FF000000 } }"))
        self.assertTrue(register_theme_text("theme { colors = _{ extraColor = #FF00FF00 } }"))
        self.assertEqual(theme_names(), ["night"])
        self.assertEqual(get_theme("night").color("x"), "#FF000000")
        self.assertEqual(default_theme().color("extraColor"), "#FF00FF00")

        add_theme(create_theme_from_text("theme { name = night, colors = _{ y = #FFFFFFFF } }"))
        self.assertEqual(get_theme("night").color_tags(), ["x", "y"])

    def test_scan_themes_dir(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "nested").mkdir()
            (root / "a.rui").write_text("theme { name = a }", encoding="utf-8")
            (root / "nested" / "b.rui").write_text("theme { name = b }", encoding="utf-8")
            (root / "broken.rui").write_text("theme {", encoding="utf-8")
            (root / "notes.txt").write_text("theme { name = c }", encoding="utf-8")
            self.assertEqual(scan_themes_dir(root), 2)
        self.assertEqual(theme_names(), ["a", "b"])
        self.assertTrue(any("broken.rui" in error for error in self.errors))

    def test_find_resource_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "images").mkdir()
            (root / "images" / "logo.svg").write_text("<svg/>", encoding="utf-8")
            (root / "themes").mkdir()
            (root / "themes" / "app.rui").write_text("theme { name = fromDir }", encoding="utf-8")

            set_resource_path(root)
            self.assertEqual(find_resource_file("logo.svg"), (root / "images" / "logo.svg").resolve())
            self.assertIn("fromDir", theme_names())
            self.assertIsNone(find_resource_file("../" + root.name + "/images/../../etc/passwd"))
            self.assertIsNone(find_resource_file("missing.png"))

        self.assertEqual(find_resource_file("app.js").name, "app.js")
        self.assertIsNone(find_resource_file("../resources.py"))
        self.assertIsNone(find_resource_file(""))
