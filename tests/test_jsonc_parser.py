"""Tests for the tolerant JSON-with-comments parser."""

import pytest

from i18n_janitor.analyzer.jsonc_parser import (
    JsoncParser,
    JsoncSyntaxError,
    MAX_NESTING_DEPTH,
    node_to_python,
    offset_to_line_character,
    parse_tree,
    tokenize,
)


class TestTokenizer:
    """Comments and whitespace never reach the parser."""

    def test_comments_are_dropped(self):
        tokens = tokenize('// header\n{ /* inline */ "a": 1 }')
        assert [token.text for token in tokens] == ['{', '"a"', ':', '1', '}']

    def test_token_offsets(self):
        tokens = tokenize('{"key": true}')
        assert tokens[1].offset == 1
        assert tokens[1].end == 6
        assert tokens[3].text == 'true'

    def test_unterminated_block_comment(self):
        with pytest.raises(JsoncSyntaxError):
            tokenize('{ /* never closed ')

    def test_unterminated_string(self):
        with pytest.raises(JsoncSyntaxError):
            tokenize('{"a": "open}')

    def test_newline_inside_string(self):
        with pytest.raises(JsoncSyntaxError):
            tokenize('{"a": "line\nbreak"}')

    def test_unknown_character(self):
        with pytest.raises(JsoncSyntaxError) as exc_info:
            tokenize('{"a": @}')
        assert exc_info.value.offset == 6


class TestParseTree:
    """parse_tree() builds offset-aware nodes and fails soft."""

    def test_plain_json(self):
        root = parse_tree('{"a": {"b": [1, 2.5, null, false]}}')
        assert root.type == 'object'
        assert node_to_python(root) == {'a': {'b': [1, 2.5, None, False]}}

    def test_trailing_commas(self):
        root = parse_tree('{"a": [1, 2,], "b": "x",}')
        assert node_to_python(root) == {'a': [1, 2], 'b': 'x'}

    def test_comments_between_members(self):
        text = '{\n  // first\n  "a": 1, /* second */\n  "b": 2\n}'
        assert node_to_python(parse_tree(text)) == {'a': 1, 'b': 2}

    def test_property_node_shape(self):
        root = parse_tree('{"a": 1}')
        prop = root.children[0]
        key_node, value_node = prop.children
        assert prop.type == 'property'
        assert prop.value == 'a'
        assert (key_node.offset, key_node.length) == (1, 3)
        assert value_node.offset == 6
        assert root.length == 8

    def test_escaped_key(self):
        root = parse_tree(r'{"say \"hi\"": "x"}')
        assert root.children[0].value == 'say "hi"'

    def test_missing_value_is_malformed(self):
        assert parse_tree('{"x": }') is None

    def test_missing_colon_is_malformed(self):
        assert parse_tree('{"x" 1}') is None

    def test_trailing_garbage_is_malformed(self):
        assert parse_tree('{} {}') is None

    def test_empty_document(self):
        assert parse_tree('') is None
        assert parse_tree('  // only a comment\n') is None

    def test_parser_raises_directly(self):
        with pytest.raises(JsoncSyntaxError):
            JsoncParser('[1 2]').parse()

    def test_byte_order_mark(self):
        assert node_to_python(parse_tree('\ufeff{"a": 1}')) == {'a': 1}

    def test_nesting_limit(self):
        assert parse_tree('[' * 5000) is None
        assert parse_tree('{"a":' * 3000) is None
        deep = '{"a":' * MAX_NESTING_DEPTH + '1' + '}' * MAX_NESTING_DEPTH
        assert parse_tree(deep) is not None
        assert parse_tree('[' + deep + ']') is None


class TestHelpers:
    """Conversion helpers."""

    def test_duplicate_keys_keep_first(self):
        root = parse_tree('{"a": 1, "a": 2}')
        assert node_to_python(root) == {'a': 1}

    def test_offset_to_line_character(self):
        text = 'ab\ncd\nef'
        assert offset_to_line_character(text, 0) == (0, 0)
        assert offset_to_line_character(text, 4) == (1, 1)
        assert offset_to_line_character(text, 6) == (2, 0)
