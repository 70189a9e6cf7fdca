"""Map dotted key paths to text positions in a locale document, and back."""
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from .jsonc_parser import JsonNode, offset_to_line_character, parse_tree
from .locale_index import iter_properties, key_name_range
from ..utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Position:
    """A 0-based text position; offset is the absolute character offset."""
    line: int
    character: int
    offset: int

    @classmethod
    def from_offset(cls, text: str, offset: int) -> 'Position':
        line, character = offset_to_line_character(text, offset)
        return cls(line, character, offset)


def _find_child(obj: JsonNode, name: str) -> Optional[Tuple[JsonNode, JsonNode]]:
    """First property of obj named name (duplicate keys: first one wins)."""
    for key_node, value_node in iter_properties(obj):
        if key_node.value == name:
            return key_node, value_node
    return None


def locate_by_path(text: str, dotted_key: str) -> Optional[Position]:
    """Find where a dotted key is defined.

    Walks the parsed document one segment at a time. Every intermediate
    segment must resolve to an object.

    Args:
        text: Locale document text
        dotted_key: Key path such as 'dashboard.sidebar.title'

    Returns:
        Position of the first character of the final key name (just after
        its opening quote), or None if the key is not defined
    """
    root = parse_tree(text)
    if root is None or not dotted_key:
        return None

    current = root
    key_node = None
    for segment in dotted_key.split('.'):
        if current.type != 'object':
            return None
        child = _find_child(current, segment)
        if child is None:
            return None
        key_node, current = child

    start, _ = key_name_range(key_node)
    return Position.from_offset(text, start)


def locate_by_offset(text: str, offset: int) -> Optional[str]:
    """Return the dotted path of the key token under a character offset.

    Only key names are addressable: whitespace, punctuation, quotes and
    value positions give None. Array indices are dropped from the path.

    Args:
        text: Locale document text
        offset: Absolute character offset

    Returns:
        Dotted key path, or None
    """
    root = parse_tree(text)
    if root is None or offset < 0 or offset > len(text):
        return None

    path = _path_at(root, offset, [])
    return '.'.join(path) if path else None


def _path_at(node: JsonNode, offset: int, parent: List[str]) -> Optional[List[str]]:
    if node.type == 'array':
        for element in node.children:
            if element.offset <= offset < element.end:
                return _path_at(element, offset, parent)
        return None

    for key_node, value_node in iter_properties(node):
        start, end = key_name_range(key_node)
        if start <= offset < end:
            return parent + [key_node.value]
        if value_node.is_container and value_node.offset <= offset < value_node.end:
            return _path_at(value_node, offset, parent + [key_node.value])
    return None


def find_key_in_file(key: str, file_path: Path) -> Optional[Position]:
    """Locate a key inside a locale file on disk.

    Args:
        key: Dotted key path
        file_path: Locale JSON file

    Returns:
        Position of the key, or None if missing or the file is unreadable
    """
    try:
        text = Path(file_path).read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Cannot read locale file {file_path}: {e}")
        return None
    return locate_by_path(text, key)
