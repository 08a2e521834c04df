import math
import unittest

from ruikit.angle_unit import AngleType, AngleUnit, deg, grad, pi_rad, rad, string_to_angle_unit, turn
from ruikit.color import Color, string_to_color
from ruikit.ranges import Range, string_to_range
from ruikit.size_func import (clamp_size, div_size, min_size, mul_size, new_size_func, parse_size_func,
                              round_size, round_up_size, sub_size, sum_size)
from ruikit.size_unit import (SizeType, SizeUnit, auto_size, cm, em, ex, fr, inch, mm, pc, percent, pt, px,
                              string_to_size_unit)
from ruikit.tests.helpers import ErrorLogTestCase, resolver_for


class TestSizeUnit(ErrorLogTestCase):

    def test_string_round_trip(self):
        for size in (px(10), px(-2.5), em(1.25), ex(3), percent(50), pt(12.5), pc(2), inch(1),
                     mm(20), cm(0.5), fr(1), px(0)):
            with self.subTest(size=str(size)):
                self.assertEqual(string_to_size_unit(str(size)), size)

    def test_auto(self):
        self.assertEqual(str(auto_size()), "auto")
        self.assertEqual(string_to_size_unit("auto"), auto_size())
        self.assertTrue(string_to_size_unit("AUTO").is_auto())

    def test_points(self):
        size = string_to_size_unit("12.5pt")
        self.assertEqual(size, SizeUnit(SizeType.PT, 12.5))
        self.assertEqual(str(size), "12.5pt")
        self.assertEqual(size.css_string(""), "12.5pt")

    def test_css_special_cases(self):
        self.assertEqual(auto_size().css_string("0"), "0")
        self.assertEqual(em(2).css_string(""), "2rem")
        self.assertEqual(px(0).css_string(""), "0")
        self.assertEqual(percent(100).css_string(""), "100%")

    def test_integral_values_drop_fraction(self):
        self.assertEqual(str(px(4.0)), "4px")
        self.assertEqual(str(mm(0.25)), "0.25mm")

    def test_invalid(self):
        self.assertIsNone(string_to_size_unit("12qq"))
        self.assertIsNone(string_to_size_unit("px"))


class TestAngleUnit(unittest.TestCase):

    def test_degree_to_radian(self):
        self.assertAlmostEqual(deg(180).to_radian().value, math.pi)

    def test_conversions_agree(self):
        angles = (rad(1.2), pi_rad(0.5), deg(45), grad(100), turn(0.25))
        targets = (AngleType.RADIAN, AngleType.PI_RADIAN, AngleType.DEGREE, AngleType.GRADIAN, AngleType.TURN)
        for angle in angles:
            direct = angle.to_radian().value
            for target in targets:
                with self.subTest(angle=str(angle), target=target):
                    self.assertAlmostEqual(angle.convert(target).to_radian().value, direct)

    def test_parse(self):
        self.assertEqual(string_to_angle_unit("30deg"), deg(30))
        self.assertEqual(string_to_angle_unit("0.5turn"), turn(0.5))
        self.assertEqual(string_to_angle_unit("2"), rad(2))
        self.assertEqual(string_to_angle_unit("90°"), deg(90))
        self.assertEqual(string_to_angle_unit("1π"), pi_rad(1))

    def test_pi_radian_css(self):
        self.assertEqual(pi_rad(1).css_string(), "%srad" % repr(math.pi))
        self.assertEqual(str(pi_rad(1)), "1pi")
        self.assertEqual(AngleUnit(AngleType.DEGREE, 30).css_string(), "30deg")


class TestColor(ErrorLogTestCase):

    def test_hex_forms(self):
        self.assertEqual(string_to_color("#FF0000").alpha, 0xFF)
        self.assertEqual(string_to_color("#80FF0000").alpha, 0x80)
        self.assertEqual(string_to_color("#80FF0000").red, 0xFF)
        self.assertEqual(str(Color(0xFF2196F3)), "#FF2196F3")

    def test_rgba_alpha_has_two_digits(self):
        self.assertEqual(string_to_color("rgba(255,0,0,.5)").css_string(), "rgba(255,0,0,.50)")
        self.assertEqual(string_to_color("rgba(0,128,0,1)").css_string(), "rgb(0,128,0)")

    def test_named_colors_ignore_case(self):
        self.assertEqual(string_to_color("Red"), Color(0xFFFF0000))
        self.assertEqual(string_to_color("green").css_string(), "rgb(0,128,0)")

    def test_out_of_range_channel(self):
        self.assertIsNone(string_to_color("rgb(300,0,0)"))
        self.assertIsNone(string_to_color("#12345"))

    def test_rgb_string(self):
        self.assertEqual(Color(0x802196F3).rgb_string(), "#2196F3")


class TestSizeFunc(ErrorLogTestCase):

    def setUp(self):
        super().setUp()
        self.session = resolver_for('theme { constants = _{ a1 = 120px } }')

    def test_min(self):
        self.assertEqual(min_size("100%", px(10)).css_string(self.session), "min(100%, 10px)")

    def test_sub_resolves_constants(self):
        self.assertEqual(sub_size("100%", "@a1").css_string(self.session), "calc(100% - 120px)")

    def test_nested_brackets(self):
        fn = mul_size(sub_size("100%", "@a1"), div_size(mul_size("@a1", 3), 2))
        self.assertEqual(fn.css_string(self.session), "calc((100% - 120px) * ((120px * 3) / 2))")

    def test_no_brackets_inside_math_context(self):
        fn = clamp_size(px(10), sum_size(percent(50), px(4)), px(100))
        self.assertEqual(fn.css_string(self.session), "clamp(10px, 50% + 4px, 100px)")

    def test_rounding(self):
        self.assertEqual(round_size(percent(33), px(8)).css_string(self.session), "round(nearest, 33%, 8px)")
        self.assertEqual(round_up_size(percent(33), 2).css_string(self.session), "round(up, 33%, 2)")

    def test_text_form(self):
        fn = parse_size_func("sub(100%, @a1)")
        self.assertEqual(str(fn), "sub(100%, @a1)")
        self.assertEqual(fn.css_string(self.session), "calc(100% - 120px)")

    def test_construction_errors(self):
        self.assertIsNone(div_size(px(10), 0))
        self.assertIsNone(round_size(px(10), 0))
        self.assertIsNone(new_size_func("sub", px(10)))
        self.assertIsNone(new_size_func("clamp", px(1), px(2)))
        self.assertEqual(len(self.errors), 4)
        self.assertEqual(self.errors[2:], ['"sub" function needs 2 arguments', '"clamp" function needs 3 arguments'])

    def test_unknown_function(self):
        self.assertIsNone(new_size_func("avg", px(1), px(2)))
        self.assertEqual(self.errors, ['Unknown size function "avg"'])

    def test_unresolved_constant_renders_zero(self):
        self.assertEqual(sub_size("100%", "@missing").css_string(self.session), "calc(100% - 0)")


class TestRange(ErrorLogTestCase):

    def test_parse(self):
        self.assertEqual(string_to_range("3"), Range(3, 3))
        self.assertEqual(string_to_range("1:4"), Range(1, 4))
        self.assertEqual(str(Range(1, 4)), "1:4")

    def test_invalid(self):
        self.assertIsNone(string_to_range("1:x"))
        self.assertTrue(self.errors)
