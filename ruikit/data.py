# ruikit/data.py

"""
The text data format shared by the wire protocol and theme files.

    theme {
        constants = _{ gap = 8px, accent = "@ruiHighlightColor" },
        styles = [ ruiButton { padding = 4px } ],
    }

An object is ``tag { node, node, ... }`` and a node is ``tag = value``. A value is
text, a nested object (``tag{...}`` or ``{...}``) or an array ``[...]`` of texts and
objects. Nodes are separated by commas or new lines. ``//`` and ``/* */`` comments
are allowed anywhere whitespace is.
"""

from enum import IntEnum
from typing import Any, Dict, Iterator, List, Optional, Union


class DataParseError(ValueError):
    """Raised by `parse_data_text`. `line` and `position` are 1-based line, 0-based column."""

    def __init__(self, message: str, line: int = 0, position: int = 0):
        super().__init__(message)
        self.line = line
        self.position = position


class DataNodeType(IntEnum):
    TEXT = 0
    OBJECT = 1
    ARRAY = 2


DataValue = Union[str, "DataObject"]


class DataNode:
    """A ``tag = value`` pair inside a `DataObject`."""

    def __init__(self, tag: str, value: Optional[DataValue] = None, array: Optional[List[DataValue]] = None):
        self.tag = tag
        self.value = value
        self.array = array

    @property
    def type(self) -> DataNodeType:
        if self.array is not None:
            return DataNodeType.ARRAY
        if isinstance(self.value, DataObject):
            return DataNodeType.OBJECT
        return DataNodeType.TEXT

    def text(self) -> str:
        return self.value if isinstance(self.value, str) else ""

    def object(self) -> Optional["DataObject"]:
        return self.value if isinstance(self.value, DataObject) else None

    def array_size(self) -> int:
        return len(self.array) if self.array is not None else 0

    def array_element(self, index: int) -> Optional[DataValue]:
        if self.array is not None and 0 <= index < len(self.array):
            return self.array[index]
        return None

    def array_elements(self) -> List[DataValue]:
        return list(self.array) if self.array is not None else []

    def array_as_params(self) -> List[Dict[str, Any]]:
        result = []
        for item in self.array or []:
            if isinstance(item, DataObject):
                params = item.to_params()
                if params:
                    result.append(params)
        return result

    def __repr__(self) -> str:
        return f"DataNode({self.tag!r}, {self.type.name})"


class DataObject:
    """A tagged, ordered list of `DataNode`s."""

    def __init__(self, tag: str = "_", properties: Optional[List[DataNode]] = None):
        self.tag = tag
        self._properties: List[DataNode] = list(properties) if properties else []

    # --- Access ---

    def property_count(self) -> int:
        return len(self._properties)

    def property(self, index: int) -> Optional[DataNode]:
        if 0 <= index < len(self._properties):
            return self._properties[index]
        return None

    def __iter__(self) -> Iterator[DataNode]:
        return iter(self._properties)

    def __len__(self) -> int:
        return len(self._properties)

    def property_by_tag(self, tag: str) -> Optional[DataNode]:
        for node in self._properties:
            if node.tag == tag:
                return node
        return None

    def property_value(self, tag: str) -> Optional[str]:
        """Returns the text of a text node, None when the tag is missing or not text."""
        node = self.property_by_tag(tag)
        if node is not None and node.type == DataNodeType.TEXT:
            return node.text()
        return None

    def property_object(self, tag: str) -> Optional["DataObject"]:
        node = self.property_by_tag(tag)
        if node is not None and node.type == DataNodeType.OBJECT:
            return node.object()
        return None

    # --- Mutation ---

    def _set_node(self, node: DataNode) -> None:
        for i, p in enumerate(self._properties):
            if p.tag == node.tag:
                self._properties[i] = node
                return
        self._properties.append(node)

    def set_property_value(self, tag: str, value: str) -> None:
        self._set_node(DataNode(tag, value))

    def set_property_object(self, tag: str, obj: "DataObject") -> None:
        self._set_node(DataNode(tag, obj))

    def set_property_array(self, tag: str, array: List[DataValue]) -> None:
        self._set_node(DataNode(tag, None, list(array)))

    def remove_property_by_tag(self, tag: str) -> Optional[DataNode]:
        for i, node in enumerate(self._properties):
            if node.tag == tag:
                return self._properties.pop(i)
        return None

    def to_params(self) -> Dict[str, Any]:
        """Flattens the object into a dict. Empty texts and empty arrays are dropped."""
        params: Dict[str, Any] = {}
        for node in self._properties:
            node_type = node.type
            if node_type == DataNodeType.TEXT:
                if node.text() != "":
                    params[node.tag] = node.text()
            elif node_type == DataNodeType.OBJECT:
                params[node.tag] = node.object()
            else:
                array = [item for item in node.array if isinstance(item, DataObject) or item != ""]
                if array:
                    params[node.tag] = array
        return params

    # --- Output ---

    def __str__(self) -> str:
        writer = DataWriter()
        writer.write_object(self)
        return writer.finish()

    def __repr__(self) -> str:
        return f"DataObject({self.tag!r}, {len(self._properties)} properties)"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, DataObject) and str(self) == str(other)

    __hash__ = None


# --- Writer ---

_QUOTE_REPLACEMENTS = (("\\", "\\\\"), ("\t", "\\t"), ("\r", "\\r"), ("\n", "\\n"), ('"', '\\"'))


def quote_data_text(text: str) -> str:
    """Quotes text so that `parse_data_text` reads it back unchanged."""
    if text == "":
        return '""'
    has_escapes = any(ch in text for ch in "\t\"\r\n")
    if not has_escapes and not any(ch in text for ch in " ,;'`[]{}()=/\\"):
        return text
    if "`" not in text and (has_escapes or "\\" in text):
        return "`" + text + "`"
    for old, new in _QUOTE_REPLACEMENTS:
        text = text.replace(old, new)
    return '"' + text + '"'


class DataWriter:
    """Writes data objects with one node per line and tab indentation."""

    def __init__(self):
        self._parts: List[str] = []
        self._indent = ""

    def write_object(self, obj: DataObject) -> None:
        self._parts.append(quote_data_text(obj.tag) + " {\n")
        self._indent += "\t"
        for node in obj:
            self._write_node(node)
        self._indent = self._indent[:-1]
        self._parts.append(self._indent + "}")

    def _write_node(self, node: DataNode) -> None:
        self._parts.append(self._indent + quote_data_text(node.tag) + " = ")
        if node.type == DataNodeType.ARRAY:
            self._parts.append("[\n")
            self._indent += "\t"
            for item in node.array:
                self._parts.append(self._indent)
                if isinstance(item, DataObject):
                    self.write_object(item)
                else:
                    self._parts.append(quote_data_text(item))
                self._parts.append(",\n")
            self._indent = self._indent[:-1]
            self._parts.append(self._indent + "]")
        elif node.type == DataNodeType.OBJECT:
            self.write_object(node.object())
        else:
            self._parts.append(quote_data_text(node.text()))
        self._parts.append(",\n")

    def finish(self) -> str:
        return "".join(self._parts)


# --- Parser ---

_STOP_SYMBOLS = frozenset("={}[],'\"`/")
_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", '"': '"', "'": "'", "\\": "\\"}


class _DataParser:
    def __init__(self, text: str):
        # a trailing NUL lets the scanner peek one character past the end
        self.data = text + "\0"
        self.size = len(text)
        self.pos = 0
        self.line = 1
        self.line_start = 0

    def error(self, message: str) -> DataParseError:
        position = self.pos - self.line_start
        return DataParseError(f"{message} (line: {self.line}, position: {position})", self.line, position)

    def current(self) -> str:
        return self.data[self.pos]

    def skip_spaces(self, skip_new_line: bool) -> None:
        data = self.data
        while self.pos < self.size:
            ch = data[self.pos]
            if ch == "\n":
                if not skip_new_line:
                    return
                self.line += 1
                self.line_start = self.pos + 1
            elif ch == "/":
                nxt = data[self.pos + 1]
                if nxt == "/":
                    end = data.find("\n", self.pos)
                    self.pos = (end if end >= 0 else self.size) - 1
                elif nxt == "*":
                    end = data.find("*/", self.pos + 2)
                    if end < 0 or end >= self.size:
                        raise self.error("unexpected end of comment")
                    self.line += data.count("\n", self.pos, end)
                    last_nl = data.rfind("\n", self.pos, end)
                    if last_nl >= 0:
                        self.line_start = last_nl + 1
                    self.pos = end + 1
                else:
                    return
            elif not ch.isspace():
                return
            self.pos += 1

    def parse_tag(self) -> str:
        self.skip_spaces(True)
        ch = self.current()

        if ch == "`":
            start = self.pos + 1
            end = self.data.find("`", start, self.size)
            if end < 0:
                raise self.error("unexpected end of text")
            self.line += self.data.count("\n", start, end)
            self.pos = end + 1
            return self.data[start:end]

        if ch in "'\"":
            return self._parse_quoted(ch)

        start = self.pos
        while self.pos < self.size:
            ch = self.data[self.pos]
            if ch.isspace() or ch in _STOP_SYMBOLS:
                break
            self.pos += 1
        end = self.pos
        self.skip_spaces(False)
        return self.data[start:end]

    def _parse_quoted(self, quote: str) -> str:
        self.pos += 1
        result: List[str] = []
        data = self.data
        while True:
            if self.pos >= self.size:
                raise self.error("unexpected end of text")
            ch = data[self.pos]
            if ch == quote:
                break
            if ch != "\\":
                result.append(ch)
                self.pos += 1
                continue

            code = data[self.pos + 1]
            self.pos += 2
            if code in _ESCAPES:
                result.append(_ESCAPES[code])
            elif code in "xXuU":
                digits = 2 if code in "xX" else 4
                hex_text = data[self.pos:self.pos + digits]
                if self.pos + digits > self.size or not all(c in "0123456789abcdefABCDEF" for c in hex_text):
                    raise self.error("invalid escape sequence")
                result.append(chr(int(hex_text, 16)))
                self.pos += digits
            else:
                raise self.error("invalid escape sequence")

        self.pos += 1
        self.skip_spaces(False)
        return "".join(result)

    def parse_node(self) -> DataNode:
        tag = self.parse_tag()
        self.skip_spaces(True)
        if self.current() != "=":
            raise self.error("expected '=' after a tag name")

        self.pos += 1
        self.skip_spaces(True)
        ch = self.current()
        if ch == "[":
            return DataNode(tag, None, self.parse_array())
        if ch == "{":
            return DataNode(tag, self.parse_object("_"))
        if ch in "}]=" or self.pos >= self.size:
            raise self.error("expected '[', '{' or a tag name after '='")

        text = self.parse_tag()
        if self.current() == "{":
            return DataNode(tag, self.parse_object(text))
        return DataNode(tag, text)

    def parse_object(self, tag: str) -> DataObject:
        if self.current() != "{":
            raise self.error("expected '{'")
        self.pos += 1

        obj = DataObject(tag)
        while self.pos < self.size:
            self.skip_spaces(True)
            if self.current() == "}":
                self.pos += 1
                self.skip_spaces(False)
                return obj

            obj._properties.append(self.parse_node())
            ch = self.current()
            if ch == "}":
                self.pos += 1
                self.skip_spaces(True)
                return obj
            if ch not in ",\n":
                raise self.error("expected '}', '\\n' or ','")
            if ch != "\n":
                self.pos += 1

            self.skip_spaces(True)
            while self.current() == ",":
                self.pos += 1
                self.skip_spaces(True)

        raise self.error("unexpected end of text")

    def parse_array(self) -> List[DataValue]:
        self.pos += 1
        array: List[DataValue] = []
        while self.pos < self.size:
            self.skip_spaces(True)
            while self.pos < self.size and self.current() == ",":
                self.pos += 1
                self.skip_spaces(True)
            if self.pos >= self.size:
                break

            if self.current() == "]":
                self.pos += 1
                self.skip_spaces(True)
                return array

            text = self.parse_tag()
            if self.current() == "{":
                array.append(self.parse_object(text))
            else:
                array.append(text)

            if self.current() not in "],\n":
                raise self.error("expected ']' or ','")

        raise self.error("unexpected end of text")


def parse_data_text(text: str) -> DataObject:
    """
    Parses a data object.

    :raises DataParseError: on malformed text.
    """
    if "\r" in text:
        text = text.replace("\r\n", "\n").replace("\r", "\n")
    parser = _DataParser(text)
    tag = parser.parse_tag()
    return parser.parse_object(tag)


def data_object_from_params(tag: str, params: Dict[str, Any]) -> DataObject:
    """Builds a `DataObject` from a dict of texts, objects, dicts and lists."""
    obj = DataObject(tag)
    for key, value in params.items():
        if isinstance(value, DataObject):
            obj.set_property_object(key, value)
        elif isinstance(value, dict):
            obj.set_property_object(key, data_object_from_params("_", value))
        elif isinstance(value, (list, tuple)):
            items: List[DataValue] = []
            for item in value:
                if isinstance(item, DataObject):
                    items.append(item)
                elif isinstance(item, dict):
                    items.append(data_object_from_params("_", item))
                else:
                    items.append(str(item))
            obj.set_property_array(key, items)
        else:
            obj.set_property_value(key, str(value))
    return obj
