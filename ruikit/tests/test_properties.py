from ruikit import property_names as pn
from ruikit.angle_unit import deg
from ruikit.background import new_background_linear_gradient, new_background_radial_gradient
from ruikit.bounds import new_bounds, new_bounds_property
from ruikit.clip_shape import new_circle_clip, new_ellipse_clip, new_inset_clip, new_polygon_clip
from ruikit.color import BLUE, GREEN, RED, Color
from ruikit.filter import new_filter_property
from ruikit.properties import PropertyList, bool_property, size_property
from ruikit.radius import new_radius_property
from ruikit.shadow import new_shadow, new_text_shadow
from ruikit.size_unit import auto_size, percent, px
from ruikit.tests.helpers import ErrorLogTestCase, resolver_for
from ruikit.view_style import ViewStyle, view_style_css


class TestPropertyList(ErrorLogTestCase):

    def test_set_get_remove(self):
        props = ViewStyle()
        self.assertTrue(props.set("width", "100px"))
        self.assertEqual(props.get("width"), px(100))
        props.set("width", None)
        self.assertIsNone(props.get("width"))

    def test_numbers_become_pixels(self):
        props = ViewStyle()
        props.set(pn.HEIGHT, 24)
        self.assertEqual(props.get(pn.HEIGHT), px(24))

    def test_constants_are_kept_unresolved(self):
        props = ViewStyle()
        self.assertTrue(props.set(pn.WIDTH, "@sizeWide"))
        self.assertEqual(props.get(pn.WIDTH), "@sizeWide")
        session = resolver_for("theme { constants = _{ sizeWide = 40em } }")
        self.assertEqual(size_property(props, pn.WIDTH, session).css_string("", session), "40rem")

    def test_rejected_value_keeps_prior_state(self):
        props = ViewStyle({pn.WIDTH: px(10)})
        self.assertFalse(props.set(pn.WIDTH, object()))
        self.assertEqual(props.get(pn.WIDTH), px(10))
        self.assertEqual(self.errors, ['"object" type not compatible with "width" property'])

    def test_invalid_enum_value(self):
        props = ViewStyle()
        self.assertFalse(props.set(pn.TEXT_ALIGN, "diagonal"))
        self.assertIsNone(props.get(pn.TEXT_ALIGN))
        self.assertTrue(self.errors)

    def test_bool_values(self):
        props = ViewStyle()
        props.set(pn.ITALIC, "yes")
        self.assertTrue(bool_property(props, pn.ITALIC, None))
        self.assertFalse(props.set(pn.ITALIC, 3))

    def test_change_listener(self):
        props = ViewStyle()
        changes = []
        props.on_change(lambda _props, tag: changes.append(tag))
        props.set(pn.WIDTH, px(1))
        props.set(pn.MARGIN_TOP, px(2))
        props.remove(pn.WIDTH)
        self.assertEqual(changes[0], pn.WIDTH)
        self.assertIn(pn.MARGIN, changes)
        self.assertEqual(changes[-1], pn.WIDTH)

    def test_all_tags_sorted(self):
        props = PropertyList()
        props.set("width", px(1))
        props.set("height", px(2))
        self.assertEqual(props.all_tags(), ["height", "width"])


class TestBounds(ErrorLogTestCase):

    def test_equal_sides_collapse(self):
        session = resolver_for()
        self.assertEqual(str(new_bounds(px(4), px(4), px(4), px(4)).bounds(session)), "4px")
        self.assertEqual(str(new_bounds(px(4), px(8), px(4), px(8)).bounds(session)), "4px,8px,4px,8px")

    def test_margin_css(self):
        session = resolver_for()
        props = ViewStyle()
        props.set(pn.MARGIN, new_bounds_property({"top": px(4), "right": px(8), "bottom": px(4), "left": px(8)}))
        self.assertIn("margin: 4px 8px 4px 8px;", view_style_css(props, session))

    def test_side_tags(self):
        props = ViewStyle()
        props.set(pn.PADDING_LEFT, px(3))
        self.assertEqual(props.get(pn.PADDING_LEFT), px(3))
        self.assertIn("padding: 0 0 0 3px;", view_style_css(props, resolver_for()))

    def test_unsupported_side(self):
        bounds = new_bounds_property()
        self.assertFalse(bounds.set("middle", px(1)))
        self.assertEqual(self.errors, ['"middle" property is not supported'])


class TestRadius(ErrorLogTestCase):

    def test_equal_halves_canonicalise(self):
        radius = new_radius_property()
        radius.set(pn.X, px(5))
        radius.set(pn.Y, px(5))
        self.assertEqual(radius.get("top-left"), px(5))
        self.assertIsNone(radius.get("top-left-x"))

    def test_elliptic_css(self):
        props = ViewStyle()
        props.set(pn.RADIUS_X, px(10))
        props.set(pn.RADIUS_Y, px(20))
        self.assertIn("border-radius: 10px / 20px;", view_style_css(props, resolver_for()))

    def test_uniform_css(self):
        props = ViewStyle({pn.RADIUS: px(6)})
        self.assertIn("border-radius: 6px;", view_style_css(props, resolver_for()))


class TestViewStyleCSS(ErrorLogTestCase):

    def test_text_color_constant(self):
        session = resolver_for("theme { colors = _{ accent = #FF2196F3 } }")
        props = ViewStyle({pn.TEXT_COLOR: "@accent"})
        self.assertIn("color: rgb(33,150,243);", view_style_css(props, session))

    def test_flex_flow(self):
        props = ViewStyle({
            pn.ORIENTATION: "start-to-end",
            pn.LIST_WRAP: "off",
            pn.HORIZONTAL_ALIGN: "right",
            pn.VERTICAL_ALIGN: "center",
        })
        css = view_style_css(props, resolver_for())
        self.assertIn("flex-flow: row;", css)
        self.assertIn("justify-content: flex-end;", css)
        self.assertIn("align-items: center;", css)

    def test_transform_2d(self):
        props = ViewStyle({pn.ROTATE: deg(30), pn.SCALE_X: 1.5})
        css = view_style_css(props, resolver_for())
        self.assertIn("transform: scale(1.5,1) rotate(30deg);", css)
        self.assertNotIn("transform-origin", css)
        self.assertNotIn("perspective", css)

    def test_transform_origin(self):
        props = ViewStyle({pn.ROTATE: deg(30), pn.TRANSFORM_ORIGIN_X: percent(0)})
        self.assertIn("transform-origin: left center;", view_style_css(props, resolver_for()))

    def test_transparent_shadow_is_omitted(self):
        props = ViewStyle({pn.SHADOW: new_shadow(px(2), px(2), px(4), px(0), Color(0x00FF0000))})
        self.assertNotIn("box-shadow", view_style_css(props, resolver_for()))

    def test_shadows(self):
        props = ViewStyle({
            pn.SHADOW: [new_shadow(px(1), px(2), px(3), px(0), RED)],
            pn.TEXT_SHADOW: new_text_shadow(px(1), px(1), px(2), BLUE),
        })
        css = view_style_css(props, resolver_for())
        self.assertIn("box-shadow: 1px 2px 3px 0 rgb(255,0,0);", css)
        self.assertIn("text-shadow: 1px 1px 2px rgb(0,0,255);", css)

    def test_opacity(self):
        css = view_style_css(ViewStyle({pn.OPACITY: 0.5}), resolver_for())
        self.assertIn("opacity: 0.5;", css)

    def test_visibility(self):
        self.assertIn("display: none;", view_style_css(ViewStyle({pn.VISIBILITY: "gone"}), resolver_for()))
        self.assertIn("visibility: hidden;",
                      view_style_css(ViewStyle({pn.VISIBILITY: "invisible"}), resolver_for()))

    def test_filter(self):
        props = ViewStyle({pn.FILTER: new_filter_property({pn.BLUR: 5, pn.GRAYSCALE: 50})})
        self.assertIn("filter: blur(5px) grayscale(50%);", view_style_css(props, resolver_for()))


class TestClipShape(ErrorLogTestCase):

    def test_polygon_needs_two_points(self):
        session = resolver_for()
        self.assertFalse(new_polygon_clip([px(10)]).valid(session))
        self.assertEqual(new_polygon_clip([px(10)]).css_style(session), "")
        polygon = new_polygon_clip([px(10), px(20), percent(100), px(20), px(50), percent(100)])
        self.assertTrue(polygon.valid(session))
        self.assertEqual(polygon.css_style(session), "polygon(10px 20px, 100% 20px, 50px 100%)")

    def test_empty_inset(self):
        session = resolver_for()
        inset = new_inset_clip(auto_size(), auto_size(), auto_size(), auto_size())
        self.assertFalse(inset.valid(session))
        props = ViewStyle({pn.CLIP: inset})
        self.assertNotIn("clip-path", view_style_css(props, session))

    def test_circle_and_ellipse(self):
        session = resolver_for()
        self.assertFalse(new_circle_clip(percent(50), percent(50), px(0)).valid(session))
        self.assertTrue(new_circle_clip(percent(50), percent(50), px(10)).valid(session))
        self.assertFalse(new_ellipse_clip(percent(50), percent(50), px(10), px(0)).valid(session))


class TestBackground(ErrorLogTestCase):

    def test_linear_gradient(self):
        gradient = new_background_linear_gradient({
            pn.DIRECTION: deg(45),
            pn.GRADIENT: [RED, {"color": BLUE, "pos": percent(50)}, GREEN],
        })
        self.assertEqual(gradient.css_style(resolver_for()),
                         "linear-gradient(45deg, rgb(255,0,0), rgb(0,0,255) 50%, rgb(0,128,0))")

    def test_gradient_needs_two_points(self):
        gradient = new_background_linear_gradient({pn.GRADIENT: [RED]})
        self.assertIsNone(gradient.get(pn.GRADIENT))
        self.assertTrue(self.errors)

    def test_gradient_text(self):
        gradient = new_background_radial_gradient({pn.GRADIENT: "red, blue"})
        self.assertIn("radial-gradient(", gradient.css_style(resolver_for()))

    def test_background_property(self):
        props = ViewStyle({pn.BACKGROUND: new_background_linear_gradient({pn.GRADIENT: [RED, BLUE]})})
        self.assertIn("background: linear-gradient(rgb(255,0,0), rgb(0,0,255));",
                      view_style_css(props, resolver_for()))
