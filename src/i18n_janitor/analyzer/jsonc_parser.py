"""Tolerant JSON-with-comments parser for locale documents.

Accepts standard JSON plus `//` line comments, `/* */` block comments and
trailing commas in objects and arrays. Produces a tree of JsonNode objects
that remember their exact character offsets so callers can map key paths
back to text positions.

Anything else (missing values, unterminated strings, stray tokens) is a real
syntax error: parse_tree() returns None instead of raising.
"""
import json
import re
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple


# Token kinds
STRING = 'string'
NUMBER = 'number'
LITERAL = 'literal'
PUNCT = 'punct'

_NUMBER_RE = re.compile(r'-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?')
_WORD_RE = re.compile(r'[A-Za-z_]+')
_LITERALS = {'true': True, 'false': False, 'null': None}
_WHITESPACE = ' \t\r\n\ufeff'

# Deeper nesting is rejected as malformed; each level costs two stack frames
MAX_NESTING_DEPTH = 256


class JsoncSyntaxError(ValueError):
    """Raised internally when the document is not valid JSONC."""

    def __init__(self, message: str, offset: int):
        super().__init__(f"{message} at offset {offset}")
        self.offset = offset


@dataclass
class Token:
    """A lexical token with its raw text span."""
    kind: str
    text: str
    offset: int

    @property
    def end(self) -> int:
        return self.offset + len(self.text)


@dataclass
class JsonNode:
    """One node of the parsed document.

    type is one of 'object', 'array', 'property', 'string', 'number',
    'boolean', 'null'. For 'property' nodes, children holds exactly
    [key_node, value_node]. offset/length cover the raw text including quotes.
    """
    type: str
    offset: int
    length: int
    value: Any = None
    children: List['JsonNode'] = field(default_factory=list)

    @property
    def end(self) -> int:
        return self.offset + self.length

    @property
    def is_container(self) -> bool:
        return self.type in ('object', 'array')


def tokenize(text: str) -> List[Token]:
    """Split JSONC text into tokens, dropping whitespace and comments.

    Args:
        text: Raw document text

    Returns:
        List of tokens in document order

    Raises:
        JsoncSyntaxError: On unterminated strings/comments or unknown characters
    """
    tokens = []
    pos = 0
    length = len(text)

    while pos < length:
        char = text[pos]

        if char in _WHITESPACE:
            pos += 1
            continue

        # Comments
        if char == '/' and text.startswith('//', pos):
            newline = text.find('\n', pos)
            pos = length if newline == -1 else newline + 1
            continue
        if char == '/' and text.startswith('/*', pos):
            close = text.find('*/', pos + 2)
            if close == -1:
                raise JsoncSyntaxError("Unterminated block comment", pos)
            pos = close + 2
            continue

        if char in '{}[]:,':
            tokens.append(Token(PUNCT, char, pos))
            pos += 1
            continue

        if char == '"':
            end = _scan_string_end(text, pos)
            tokens.append(Token(STRING, text[pos:end], pos))
            pos = end
            continue

        number = _NUMBER_RE.match(text, pos)
        if number and number.group(0):
            tokens.append(Token(NUMBER, number.group(0), pos))
            pos = number.end()
            continue

        word = _WORD_RE.match(text, pos)
        if word and word.group(0) in _LITERALS:
            tokens.append(Token(LITERAL, word.group(0), pos))
            pos += len(word.group(0))
            continue

        raise JsoncSyntaxError(f"Unexpected character {char!r}", pos)

    return tokens


def _scan_string_end(text: str, start: int) -> int:
    """Return the offset just past the closing quote of the string at start."""
    pos = start + 1
    while pos < len(text):
        char = text[pos]
        if char == '\\':
            pos += 2
            continue
        if char == '"':
            return pos + 1
        if char == '\n':
            break
        pos += 1
    raise JsoncSyntaxError("Unterminated string", start)


class JsoncParser:
    """Recursive-descent parser over the token stream."""

    def __init__(self, text: str):
        self.text = text
        self.tokens = tokenize(text)
        self.index = 0
        self.depth = 0

    def parse(self) -> Optional[JsonNode]:
        """Parse the whole document.

        Returns:
            Root node, or None for an empty document

        Raises:
            JsoncSyntaxError: If the document is malformed
        """
        if not self.tokens:
            return None

        root = self._parse_value()
        if self.index < len(self.tokens):
            extra = self.tokens[self.index]
            raise JsoncSyntaxError(f"Unexpected token {extra.text!r}", extra.offset)
        return root

    def _peek(self) -> Optional[Token]:
        if self.index < len(self.tokens):
            return self.tokens[self.index]
        return None

    def _next(self) -> Token:
        token = self._peek()
        if token is None:
            raise JsoncSyntaxError("Unexpected end of document", len(self.text))
        self.index += 1
        return token

    def _expect(self, punct: str) -> Token:
        token = self._next()
        if token.kind != PUNCT or token.text != punct:
            raise JsoncSyntaxError(f"Expected {punct!r}, found {token.text!r}", token.offset)
        return token

    def _at_punct(self, punct: str) -> bool:
        token = self._peek()
        return token is not None and token.kind == PUNCT and token.text == punct

    def _descend(self, open_token: Token) -> None:
        self.depth += 1
        if self.depth > MAX_NESTING_DEPTH:
            raise JsoncSyntaxError("Nesting too deep", open_token.offset)

    def _parse_value(self) -> JsonNode:
        token = self._next()

        if token.kind == PUNCT and token.text == '{':
            return self._parse_object(token)
        if token.kind == PUNCT and token.text == '[':
            return self._parse_array(token)
        if token.kind == STRING:
            return self._string_node(token)
        if token.kind == NUMBER:
            value = float(token.text) if any(c in token.text for c in '.eE') else int(token.text)
            return JsonNode('number', token.offset, len(token.text), value)
        if token.kind == LITERAL:
            value = _LITERALS[token.text]
            node_type = 'null' if value is None else 'boolean'
            return JsonNode(node_type, token.offset, len(token.text), value)

        raise JsoncSyntaxError(f"Value expected, found {token.text!r}", token.offset)

    def _string_node(self, token: Token) -> JsonNode:
        try:
            value = json.loads(token.text, strict=False)
        except ValueError:
            raise JsoncSyntaxError("Invalid string escape", token.offset)
        return JsonNode('string', token.offset, len(token.text), value)

    def _parse_object(self, open_token: Token) -> JsonNode:
        node = JsonNode('object', open_token.offset, 0)
        self._descend(open_token)

        while not self._at_punct('}'):
            key_token = self._next()
            if key_token.kind != STRING:
                raise JsoncSyntaxError("Property name expected", key_token.offset)
            key_node = self._string_node(key_token)
            self._expect(':')
            value_node = self._parse_value()

            prop = JsonNode(
                'property',
                key_node.offset,
                value_node.end - key_node.offset,
                key_node.value,
                [key_node, value_node],
            )
            node.children.append(prop)

            # Separator, or the end of the object (trailing comma allowed)
            if self._at_punct(','):
                self._next()
                continue
            if not self._at_punct('}'):
                token = self._next()
                raise JsoncSyntaxError(f"Expected ',' or '}}', found {token.text!r}", token.offset)

        close = self._expect('}')
        node.length = close.end - node.offset
        self.depth -= 1
        return node

    def _parse_array(self, open_token: Token) -> JsonNode:
        node = JsonNode('array', open_token.offset, 0)
        self._descend(open_token)

        while not self._at_punct(']'):
            node.children.append(self._parse_value())
            if self._at_punct(','):
                self._next()
                continue
            if not self._at_punct(']'):
                token = self._next()
                raise JsoncSyntaxError(f"Expected ',' or ']', found {token.text!r}", token.offset)

        close = self._expect(']')
        node.length = close.end - node.offset
        self.depth -= 1
        return node


def parse_tree(text: str) -> Optional[JsonNode]:
    """Parse JSONC text into a node tree, failing soft.

    Args:
        text: Document text

    Returns:
        Root JsonNode, or None if the text is empty or malformed
    """
    try:
        return JsoncParser(text).parse()
    except JsoncSyntaxError:
        return None


def node_to_python(node: JsonNode) -> Any:
    """Convert a parsed node back into plain dicts/lists/scalars.

    Duplicate property names keep the first occurrence.
    """
    if node.type == 'object':
        result = {}
        for prop in node.children:
            key_node, value_node = prop.children
            if key_node.value not in result:
                result[key_node.value] = node_to_python(value_node)
        return result
    if node.type == 'array':
        return [node_to_python(child) for child in node.children]
    return node.value


def offset_to_line_character(text: str, offset: int) -> Tuple[int, int]:
    """Convert a character offset into a 0-based (line, character) pair."""
    line = text.count('\n', 0, offset)
    line_start = text.rfind('\n', 0, offset) + 1
    return line, offset - line_start
