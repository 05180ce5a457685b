"""
Tokenizer for the placeholder template grammar.

The grammar understood by :class:`TemplateTokenizer`::

    template    := (text | placeholder)*
    placeholder := "%%"                                   literal percent sign
                 | "%" identifier "%"                     plain placeholder
                 | "%" identifier "->" string "%"         inline conditional
                 | "%~" identifier "->" string "~%"       whole-line conditional
    string      := '"' (character | escape)* '"'
    escape      := "\\n" | "\\t" | '\\"' | "\\\\"

Whitespace is allowed around ``->``. A ``%`` that does not start a valid
placeholder is kept as literal text, so generated code may contain ``%``
freely. ``%~`` always opens a whole-line conditional and is an error otherwise.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, NoReturn, Union

from oas_client_generator.errors import TemplateSyntaxError

_ESCAPES: Final = {"n": "\n", "t": "\t", '"': '"', "\\": "\\"}
_ARROW: Final = "->"


@dataclass(frozen=True)
class TextNode:
    """Literal template text."""

    text: str


@dataclass(frozen=True)
class PlaceholderNode:
    """A ``%name%`` placeholder."""

    name: str
    line: int
    column: int


@dataclass(frozen=True)
class ConditionalNode:
    """A conditional placeholder and the raw (unescaped) text of its branch."""

    name: str
    body: str
    whole_line: bool
    line: int
    column: int


Node = Union[TextNode, PlaceholderNode, ConditionalNode]


def _is_identifier_start(char: str) -> bool:
    return char.isascii() and (char.isalpha() or char == "_")


def _is_identifier_char(char: str) -> bool:
    return char.isascii() and (char.isalnum() or char == "_")


class TemplateTokenizer:
    """Recursive-descent reader that turns template text into nodes."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.pos = 0
        self._nodes: list[Node] = []
        self._text: list[str] = []

    def tokenize(self) -> list[Node]:
        """Read the whole source and return its nodes in order."""
        while self.pos < len(self.source):
            next_percent = self.source.find("%", self.pos)
            if next_percent == -1:
                self._text.append(self.source[self.pos :])
                break
            self._text.append(self.source[self.pos : next_percent])
            self.pos = next_percent
            self._read_percent()
        self._flush_text()
        return self._nodes

    def location(self, pos: int) -> tuple[int, int]:
        """Return the 1-based line and 0-based column of ``pos``."""
        line = self.source.count("\n", 0, pos) + 1
        column = pos - (self.source.rfind("\n", 0, pos) + 1)
        return line, column

    def _read_percent(self) -> None:
        start = self.pos
        following = self._peek(1)

        if following == "%":
            self._text.append("%")
            self.pos += 2
            return

        if following == "~":
            self._push(self._read_whole_line_conditional(start))
            return

        node = self._try_read_placeholder(start)
        if node is None:
            self._text.append("%")
            self.pos = start + 1
            return
        self._push(node)

    def _read_whole_line_conditional(self, start: int) -> ConditionalNode:
        self.pos = start + 2
        name = self._read_identifier()
        if not name:
            self._fail("Expected an identifier after '%~'", self.pos)
        self._skip_spaces()
        self._expect(_ARROW, "Expected '->' after the condition name")
        self._skip_spaces()
        body = self._read_string()
        self._skip_spaces()
        self._expect("~%", "Expected '~%' to close the whole-line conditional")
        line, column = self.location(start)
        return ConditionalNode(name=name, body=body, whole_line=True, line=line, column=column)

    def _try_read_placeholder(self, start: int) -> Node | None:
        self.pos = start + 1
        name = self._read_identifier()
        if not name:
            return None

        line, column = self.location(start)
        if self._peek() == "%":
            self.pos += 1
            return PlaceholderNode(name=name, line=line, column=column)

        self._skip_spaces()
        if not self.source.startswith(_ARROW, self.pos):
            return None
        self.pos += len(_ARROW)
        self._skip_spaces()
        body = self._read_string()
        self._skip_spaces()
        self._expect("%", "Expected '%' to close the conditional")
        return ConditionalNode(name=name, body=body, whole_line=False, line=line, column=column)

    def _read_identifier(self) -> str:
        start = self.pos
        if self.pos >= len(self.source) or not _is_identifier_start(self.source[self.pos]):
            return ""
        self.pos += 1
        while self.pos < len(self.source) and _is_identifier_char(self.source[self.pos]):
            self.pos += 1
        return self.source[start : self.pos]

    def _read_string(self) -> str:
        start = self.pos
        self._expect('"', "Expected a quoted string")
        chars: list[str] = []
        while self.pos < len(self.source):
            char = self.source[self.pos]
            if char == '"':
                self.pos += 1
                return "".join(chars)
            if char == "\n":
                break
            if char == "\\":
                escaped = self._peek(1)
                if not escaped:
                    break
                chars.append(_ESCAPES.get(escaped, "\\" + escaped))
                self.pos += 2
                continue
            chars.append(char)
            self.pos += 1
        self._fail("Unterminated string", start)

    def _skip_spaces(self) -> None:
        while self._peek() in (" ", "\t"):
            self.pos += 1

    def _expect(self, token: str, message: str) -> None:
        if not self.source.startswith(token, self.pos):
            self._fail(message, self.pos)
        self.pos += len(token)

    def _peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.source[index] if index < len(self.source) else ""

    def _push(self, node: Node) -> None:
        self._flush_text()
        self._nodes.append(node)

    def _flush_text(self) -> None:
        if self._text:
            text = "".join(self._text)
            self._text.clear()
            if text:
                self._nodes.append(TextNode(text))

    def _fail(self, message: str, pos: int) -> NoReturn:
        line, column = self.location(pos)
        raise TemplateSyntaxError(message, line=line, column=column)


def tokenize(source: str) -> list[Node]:
    """Split template text into text, placeholder and conditional nodes."""
    return TemplateTokenizer(source).tokenize()
