import unittest

from ruikit.data import (DataNodeType, DataObject, DataParseError, data_object_from_params, parse_data_text,
                         quote_data_text)


class TestParseDataText(unittest.TestCase):

    def test_flat_object(self):
        obj = parse_data_text('click-event{session=12, id=id000003, clientX=10}')
        self.assertEqual(obj.tag, "click-event")
        self.assertEqual(obj.property_value("session"), "12")
        self.assertEqual(obj.property_value("id"), "id000003")
        self.assertEqual(len(obj), 3)
        self.assertIsNone(obj.property_value("missing"))

    def test_nested_values(self):
        obj = parse_data_text("""
            resize {
                session = 7,
                views = [
                    view{id=id000001, width=100.5},
                    view{id=id000002, width=20},
                ],
                storage = _{ "key one" = "value, with comma" },
            }
        """)
        views = obj.property_by_tag("views")
        self.assertEqual(views.type, DataNodeType.ARRAY)
        elements = views.array_elements()
        self.assertEqual(len(elements), 2)
        self.assertIsInstance(elements[0], DataObject)
        self.assertEqual(elements[1].property_value("width"), "20")

        storage = obj.property_object("storage")
        self.assertEqual(storage.property_value("key one"), "value, with comma")

    def test_text_array(self):
        obj = parse_data_text("_{ points = [1px, 2px, 50%] }")
        self.assertEqual(obj.property_by_tag("points").array_elements(), ["1px", "2px", "50%"])

    def test_quoting_and_escapes(self):
        obj = parse_data_text(r'''answer{answerID=3, value="a \"b\"\n", raw=`c:\path`}''')
        self.assertEqual(obj.property_value("value"), 'a "b"\n')
        self.assertEqual(obj.property_value("raw"), "c:\\path")

    def test_comments(self):
        obj = parse_data_text("""
            theme {
                // line comment
                name = test, /* block
                comment */ other = 1
            }
        """)
        self.assertEqual(obj.property_value("name"), "test")
        self.assertEqual(obj.property_value("other"), "1")

    def test_errors_carry_position(self):
        with self.assertRaises(DataParseError) as ctx:
            parse_data_text("obj {\n a = 1,\n b }")
        self.assertEqual(ctx.exception.line, 3)
        self.assertIsInstance(ctx.exception, ValueError)

        with self.assertRaises(DataParseError):
            parse_data_text("obj { a = ")
        with self.assertRaises(DataParseError):
            parse_data_text('obj { a = "unterminated }')


class TestDataWriter(unittest.TestCase):

    def test_written_text_parses_back(self):
        obj = data_object_from_params("obj", {
            "text": "two words",
            "child": {"x": "1"},
            "list": ["a", {"y": "2"}],
        })
        again = parse_data_text(str(obj))
        self.assertEqual(again, obj)
        self.assertEqual(again.property_object("child").property_value("x"), "1")

    def test_quote(self):
        self.assertEqual(quote_data_text("plain"), "plain")
        self.assertEqual(quote_data_text(""), '""')
        self.assertEqual(quote_data_text("a b"), '"a b"')
        self.assertEqual(quote_data_text('say "hi"\n'), '`say "hi"\n`')

    def test_to_params_drops_empty_values(self):
        obj = parse_data_text('_{ a = "", b = 1, c = [] }')
        self.assertEqual(obj.to_params(), {"b": "1"})
