"""Locale document indexing - flatten a JSONC tree into addressable key nodes."""
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from .jsonc_parser import JsonNode, parse_tree


class NodeKind(str, Enum):
    """What a property's value is."""
    OBJECT = 'object'
    ARRAY = 'array'
    LEAF = 'leaf'


@dataclass(frozen=True)
class IndexedNode:
    """One property of a locale document.

    key_range is the half-open offset interval of the key name, quotes
    excluded. Array indices never appear in path_segments.
    """
    path_segments: Tuple[str, ...]
    kind: NodeKind
    key_range: Tuple[int, int]

    @property
    def key_path(self) -> str:
        """Canonical dotted key path (e.g. 'user.profile.name')."""
        return '.'.join(self.path_segments)

    @property
    def is_leaf_property(self) -> bool:
        return self.kind is NodeKind.LEAF

    @property
    def name(self) -> str:
        return self.path_segments[-1]


def iter_properties(node: JsonNode) -> Iterator[Tuple[JsonNode, JsonNode]]:
    """Yield (key_node, value_node) pairs of an object node in source order."""
    if node.type != 'object':
        return
    for prop in node.children:
        if len(prop.children) == 2:
            yield prop.children[0], prop.children[1]


def key_name_range(key_node: JsonNode) -> Tuple[int, int]:
    """Offsets of a key token with its surrounding quotes stripped."""
    return key_node.offset + 1, key_node.end - 1


def _kind_of(value_node: JsonNode) -> NodeKind:
    if value_node.type == 'object':
        return NodeKind.OBJECT
    if value_node.type == 'array':
        return NodeKind.ARRAY
    return NodeKind.LEAF


def index_tree(root: Optional[JsonNode]) -> List[IndexedNode]:
    """Index an already parsed tree.

    Args:
        root: Parsed document root (None is treated as an empty document)

    Returns:
        IndexedNode list in document order
    """
    nodes: List[IndexedNode] = []
    if root is None or root.type != 'object':
        return nodes

    # Arrays stop the descent: their elements never contribute path segments
    def walk(obj: JsonNode, parent: Tuple[str, ...]) -> None:
        for key_node, value_node in iter_properties(obj):
            path = parent + (key_node.value,)
            nodes.append(IndexedNode(path, _kind_of(value_node), key_name_range(key_node)))
            if value_node.type == 'object':
                walk(value_node, path)

    walk(root, ())
    return nodes


def index_document(text: str) -> List[IndexedNode]:
    """Parse locale text and return every object property at every depth.

    Comments and trailing commas are accepted. Any real syntax error yields
    an empty list; callers treat that exactly like "nothing found".

    Args:
        text: Locale document text

    Returns:
        IndexedNode list in document order, or [] on parse failure
    """
    return index_tree(parse_tree(text))


def leaf_key_paths(nodes: List[IndexedNode]) -> List[str]:
    """Dotted paths of the leaf properties, in document order."""
    return [node.key_path for node in nodes if node.is_leaf_property]
