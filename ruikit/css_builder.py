# ruikit/css_builder.py

"""
Builders that collect CSS declarations.

All three share ``add(key, value)`` and ``add_values(key, separator, *values)``
so the property-to-CSS mapping in `view_style` can write to any of them:

* `ViewCSSBuilder` - ``key: value;`` pairs for an inline ``style`` attribute.
* `CSSValueBuilder` - values only, for composing a single CSS value.
* `CSSStyleBuilder` - a stylesheet with ``@media`` and ``@keyframes`` blocks.
"""

from typing import Dict, List

# Theme style names written as element selectors instead of classes.
SYSTEM_STYLES = {
    "ruiApp": "body",
    "ruiDefault": "div",
    "ruiArticle": "article",
    "ruiSection": "section",
    "ruiAside": "aside",
    "ruiHeader": "header",
    "ruiMain": "main",
    "ruiFooter": "footer",
    "ruiNavigation": "nav",
    "ruiFigure": "figure",
    "ruiFigureCaption": "figcaption",
    "ruiButton": "button",
    "ruiP": "p",
    "ruiParagraph": "p",
    "ruiH1": "h1",
    "ruiH2": "h2",
    "ruiH3": "h3",
    "ruiH4": "h4",
    "ruiH5": "h5",
    "ruiH6": "h6",
    "ruiBlockquote": "blockquote",
    "ruiCode": "code",
    "ruiTable": "table",
    "ruiTableHead": "thead",
    "ruiTableFoot": "tfoot",
    "ruiTableRow": "tr",
    "ruiTableColumn": "col",
    "ruiTableCell": "td",
    "ruiDropDownList": "select",
    "ruiDropDownListItem": "option",
}

# Style names that are never written to the stylesheet.
DISABLED_STYLES = frozenset((
    "ruiRoot",
    "ruiPopupLayer",
    "ruiAbsoluteLayout",
    "ruiGridLayout",
    "ruiListLayout",
    "ruiStackLayout",
    "ruiStackPageLayout",
    "ruiTabsLayout",
    "ruiImageView",
    "ruiListView",
))


class CSSBuilder:
    """Common interface of the builders."""

    def __init__(self):
        self._parts: List[str] = []

    def add(self, key: str, value: str) -> None:
        raise NotImplementedError

    def add_values(self, key: str, separator: str, *values: str) -> None:
        raise NotImplementedError

    def finish(self) -> str:
        result = "".join(self._parts)
        self._parts = []
        return result


class ViewCSSBuilder(CSSBuilder):

    def add(self, key: str, value: str) -> None:
        if value:
            if self._parts:
                self._parts.append(" ")
            self._parts.append(f"{key}: {value};")

    def add_values(self, key: str, separator: str, *values: str) -> None:
        if values:
            if self._parts:
                self._parts.append(" ")
            self._parts.append(f"{key}: {separator.join(values)};")


class CSSDeclarations(CSSBuilder):
    """Collects declarations into an ordered dict; later writes of a key win."""

    def __init__(self):
        super().__init__()
        self.declarations: Dict[str, str] = {}

    def add(self, key: str, value: str) -> None:
        if value:
            self.declarations[key] = value

    def add_values(self, key: str, separator: str, *values: str) -> None:
        if values:
            self.declarations[key] = separator.join(values)

    def finish(self) -> str:
        return " ".join(f"{key}: {value};" for key, value in self.declarations.items())


class CSSValueBuilder(CSSBuilder):

    def add(self, key: str, value: str) -> None:
        if value:
            self._parts.append(value)

    def add_values(self, key: str, separator: str, *values: str) -> None:
        if values:
            self._parts.append(separator.join(values))


class CSSStyleBuilder(CSSBuilder):

    def __init__(self):
        super().__init__()
        self.media = False

    def _indent(self) -> str:
        return "\t" if self.media else ""

    def start_media(self, rule: str) -> None:
        self._parts.append(f"@media screen{rule} {{\n")
        self.media = True

    def end_media(self) -> None:
        self._parts.append("}\n")
        self.media = False

    def start_style(self, name: str) -> bool:
        """Opens a rule. Returns False (and writes nothing) for disabled style names."""
        if name in DISABLED_STYLES:
            return False
        selector = SYSTEM_STYLES.get(name, "." + name)
        self._parts.append(f"{self._indent()}{selector} {{\n")
        return True

    def end_style(self) -> None:
        self._parts.append(f"{self._indent()}}}\n")

    def start_animation(self, name: str) -> None:
        self.media = True
        self._parts.append(f"\n@keyframes {name} {{\n")

    def end_animation(self) -> None:
        self._parts.append("}\n")
        self.media = False

    def start_animation_frame(self, name: str) -> None:
        self._parts.append(f"\t{name} {{\n")

    def end_animation_frame(self) -> None:
        self._parts.append("\t}\n")

    def add(self, key: str, value: str) -> None:
        if value:
            self._parts.append(f"{self._indent()}\t{key}: {value};\n")

    def add_values(self, key: str, separator: str, *values: str) -> None:
        if values:
            self._parts.append(f"{self._indent()}\t{key}: {separator.join(values)};\n")
