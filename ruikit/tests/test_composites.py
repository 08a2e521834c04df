from ruikit import property_names as pn
from ruikit.animation import (AnimatedProperty, cubic_bezier_timing, new_animation, new_transition_animation,
                              steps_timing, validate_timing_function)
from ruikit.border import new_border
from ruikit.color import BLUE, RED
from ruikit.size_unit import px
from ruikit.tests.helpers import ErrorLogTestCase, resolver_for
from ruikit.view_style import ViewStyle, view_style_css


class TestBorder(ErrorLogTestCase):

    def test_uniform_border(self):
        css = view_style_css(ViewStyle({pn.BORDER: "solid 1px #FFFF0000"}), resolver_for())
        self.assertIn("border-style: solid;", css)
        self.assertIn("border-width: 1px;", css)
        self.assertIn("border-color: rgb(255,0,0);", css)

    def test_side_overrides(self):
        props = ViewStyle({pn.BORDER: new_border({"style": "solid", "width": px(1), "color": RED})})
        props.set(pn.BORDER_LEFT_STYLE, "dashed")
        css = view_style_css(props, resolver_for())
        self.assertIn("border-style: solid solid solid dashed;", css)
        self.assertIn("border-width: 1px;", css)

    def test_shared_value_replaces_overrides(self):
        border = new_border({"left-style": "dashed"})
        border.set("style", "dotted")
        self.assertIsNone(border.get_raw("left-style"))
        self.assertEqual(border.css_style_value(resolver_for()), "dotted")

    def test_remove_element(self):
        props = ViewStyle({pn.BORDER_TOP_WIDTH: px(2)})
        self.assertIsNotNone(props.get(pn.BORDER))
        props.remove(pn.BORDER_TOP_WIDTH)
        self.assertIsNone(props.get(pn.BORDER))

    def test_invalid_border_text(self):
        props = ViewStyle()
        self.assertFalse(props.set(pn.BORDER, "solid solid {"))
        self.assertIsNone(props.get(pn.BORDER))
        self.assertTrue(self.errors)


class TestOutlineAndSeparator(ErrorLogTestCase):

    def test_outline(self):
        css = view_style_css(ViewStyle({pn.OUTLINE: "2px solid #FFFF0000"}), resolver_for())
        self.assertIn("outline: 2px solid rgb(255,0,0);", css)

    def test_transparent_outline_is_omitted(self):
        css = view_style_css(ViewStyle({pn.OUTLINE: "2px solid #00FF0000"}), resolver_for())
        self.assertNotIn("outline", css)

    def test_column_separator(self):
        props = ViewStyle({pn.COLUMN_SEPARATOR: {"style": "dashed", "width": px(2), "color": BLUE}})
        self.assertIn("column-rule: 2px dashed rgb(0,0,255);", view_style_css(props, resolver_for()))

    def test_column_separator_elements(self):
        props = ViewStyle()
        props.set(pn.COLUMN_SEPARATOR_STYLE, "dotted")
        self.assertIn("column-rule: dotted;", view_style_css(props, resolver_for()))
        props.set(pn.COLUMN_SEPARATOR_STYLE, "none")
        self.assertNotIn("column-rule", view_style_css(props, resolver_for()))


class TestTimingFunctions(ErrorLogTestCase):

    def test_validation(self):
        for text in ("ease", "linear", "steps(3)", "steps(4, end)", "cubic-bezier(0.1, 2, 0.3, 1)"):
            with self.subTest(text=text):
                self.assertTrue(validate_timing_function(text))
        for text in ("bounce", "steps(0)", "cubic-bezier(2, 0, 0, 1)", "cubic-bezier(0, 0, 1)"):
            with self.subTest(text=text):
                self.assertFalse(validate_timing_function(text))

    def test_builders(self):
        self.assertEqual(steps_timing(3), "steps(3)")
        self.assertEqual(steps_timing(3, "start"), "steps(3, start)")
        self.assertEqual(cubic_bezier_timing(1.5, 0, -1, 1), "cubic-bezier(1, 0, 0, 1)")

    def test_invalid_timing_is_rejected(self):
        animation = new_animation()
        self.assertFalse(animation.set(pn.TIMING_FUNCTION, "bounce"))
        self.assertEqual(self.errors, ['Invalid timing function "bounce"'])


class TestTransitions(ErrorLogTestCase):

    def test_transition_css(self):
        props = ViewStyle({pn.TRANSITION: {pn.WIDTH: new_transition_animation(0.3, "linear")}})
        self.assertIn("transition: width 0.3s linear;", view_style_css(props, resolver_for()))

    def test_delay_adds_default_timing(self):
        animation = new_transition_animation(0.3, delay=1)
        self.assertEqual(animation.transition_css(pn.TEXT_COLOR, resolver_for()), "color 0.3s ease 1s")

    def test_set_and_remove_transition(self):
        props = ViewStyle()
        props.set_transition(pn.HEIGHT, new_transition_animation(1))
        self.assertIsNotNone(props.transition(pn.HEIGHT))
        props.set(pn.TRANSITION, {pn.HEIGHT: None})
        self.assertEqual(props.transitions(), {})


class TestAnimations(ErrorLogTestCase):

    def setUp(self):
        super().setUp()
        self.animation = new_animation({
            pn.ID: "pulse",
            pn.DURATION: 0.5,
            pn.PROPERTY: AnimatedProperty(pn.WIDTH, px(10), px(20), {50: px(30)}),
        })

    def test_keyframes(self):
        self.assertEqual(self.animation.keyframes_css(resolver_for()),
                         "\n@keyframes pulse {\n"
                         "\tfrom {\n\t\twidth: 10px;\n\t}\n"
                         "\t50% {\n\t\twidth: 30px;\n\t}\n"
                         "\tto {\n\t\twidth: 20px;\n\t}\n"
                         "}\n")

    def test_animation_css(self):
        self.assertEqual(self.animation.animation_css(resolver_for()), "pulse 0.5s ease 0s 1 normal")
        self.animation.set(pn.ITERATION_COUNT, 0)
        self.animation.set(pn.ANIMATION_DIRECTION, "alternate")
        self.assertEqual(self.animation.animation_css(resolver_for()), "pulse 0.5s ease 0s infinite alternate")

    def test_view_animation(self):
        props = ViewStyle({pn.ANIMATION: self.animation})
        self.assertIn("animation: pulse 0.5s ease 0s 1 normal;", view_style_css(props, resolver_for()))

    def test_animation_needs_a_property(self):
        props = ViewStyle()
        self.assertFalse(props.set(pn.ANIMATION, new_animation({pn.ID: "empty", pn.DURATION: 1})))
        self.assertEqual(self.errors, ['The animation "empty" has no animated property'])

    def test_generated_names_are_unique(self):
        first = new_animation({pn.PROPERTY: AnimatedProperty(pn.OPACITY, 0, 1)})
        second = new_animation({pn.PROPERTY: AnimatedProperty(pn.OPACITY, 0, 1)})
        self.assertTrue(first.name().startswith("ruiAnimation"))
        self.assertNotEqual(first.name(), second.name())
