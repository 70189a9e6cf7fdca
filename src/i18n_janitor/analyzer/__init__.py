"""Key resolution and usage reconciliation engine."""
from .call_sites import CallSiteMatch, extract_key_at_cursor, extract_key_segment_at_cursor
from .locale_index import IndexedNode, NodeKind, index_document
from .locator import Position, locate_by_offset, locate_by_path
from .scope import apply_scope_prefix, resolve_scope_prefix
from .usage import recompute_used_keys, unused_leaf_keys

__all__ = [
    "CallSiteMatch",
    "IndexedNode",
    "NodeKind",
    "Position",
    "apply_scope_prefix",
    "extract_key_at_cursor",
    "extract_key_segment_at_cursor",
    "index_document",
    "locate_by_offset",
    "locate_by_path",
    "recompute_used_keys",
    "resolve_scope_prefix",
    "unused_leaf_keys",
]
