"""Used-key collection and unused-key reconciliation.

A reconciliation pass re-reads the whole corpus, collects every call-site
key, and expands each one with every scope literal declared in the same
file. Expansion is an over-approximation: a file declaring two scopes marks
'key' as used under both of them, because call sites are not tied to the
declaration lexically governing them.
"""
import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, FrozenSet, Iterable, List, Optional, Sequence, Set

from .call_sites import CallSiteExtractor
from .cache import ScanCache
from .locale_index import IndexedNode, index_document
from .scope import DEFAULT_SCOPE_FUNCTION_NAMES, find_scope_declarations
from ..utils.logger import get_logger

logger = get_logger(__name__)

Reader = Callable[[Path], Awaitable[str]]


@dataclass
class FileScan:
    """Raw keys and scope literals found in one source file."""
    raw_keys: List[str] = field(default_factory=list)
    scope_prefixes: List[str] = field(default_factory=list)

    def used_keys(self) -> Set[str]:
        """Expand raw keys with every scope prefix of the file."""
        used = set()
        for raw in self.raw_keys:
            used.add(raw)
            for prefix in self.scope_prefixes:
                if not raw.startswith(prefix + '.'):
                    used.add(f"{prefix}.{raw}")
        return used


def scan_source(text: str, function_names: Sequence[str],
                scope_names: Sequence[str] = DEFAULT_SCOPE_FUNCTION_NAMES) -> FileScan:
    """Extract call-site keys and scope declarations from a whole file.

    Args:
        text: Source file contents
        function_names: Recognized translation function names
        scope_names: Scope-establishing function names

    Returns:
        FileScan for the file
    """
    calls = CallSiteExtractor(function_names).find_call_sites(text)
    scopes = list(dict.fromkeys(find_scope_declarations(text, scope_names)))
    return FileScan([call.raw_key for call in calls], scopes)


async def read_source_file(path: Path) -> str:
    """Default reader: read a file as UTF-8, then yield to the event loop."""
    text = Path(path).read_text(encoding='utf-8', errors='replace')
    await asyncio.sleep(0)
    return text


async def _scan_file(path: Path, function_names: Sequence[str], scope_names: Sequence[str],
                     reader: Reader, cache: Optional[ScanCache]) -> Optional[FileScan]:
    cache_key_data = None
    if cache is not None:
        # Stat before reading: the scan is stored under the key of the content it saw
        cache_key_data = cache.get_cache_key(path)
        cached = cache.get_file_scan(path, function_names, scope_names, cache_key_data)
        if cached is not None:
            return FileScan(cached.get('keys', []), cached.get('scopes', []))

    try:
        text = await reader(path)
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Skipping unreadable file {path}: {e}")
        return None

    scan = scan_source(text, function_names, scope_names)
    if cache_key_data is not None:
        cache.set_file_scan(path, function_names, scan.raw_keys, scan.scope_prefixes,
                            scope_names, cache_key_data)
    return scan


async def recompute_used_keys(corpus_files: Iterable[Path], function_names: Sequence[str],
                              reader: Optional[Reader] = None,
                              scope_names: Sequence[str] = DEFAULT_SCOPE_FUNCTION_NAMES,
                              cache: Optional[ScanCache] = None) -> FrozenSet[str]:
    """Run one reconciliation pass over a corpus.

    Files are processed in the given order but the result does not depend
    on it. Unreadable files are skipped; the rest of the pass continues.

    Args:
        corpus_files: Source files to scan
        function_names: Recognized translation function names
        reader: Async file reader (defaults to read_source_file)
        scope_names: Scope-establishing function names
        cache: Optional per-file scan cache

    Returns:
        Fresh set of used key paths (raw and scope-expanded)
    """
    reader = reader or read_source_file
    used: Set[str] = set()

    for path in corpus_files:
        scan = await _scan_file(Path(path), function_names, scope_names, reader, cache)
        if scan is not None:
            used |= scan.used_keys()

    return frozenset(used)


def unused_leaf_nodes(nodes: Iterable[IndexedNode], used_keys: Iterable[str]) -> List[IndexedNode]:
    """Leaf nodes whose key path is not in the used set, in document order."""
    used = used_keys if isinstance(used_keys, (set, frozenset)) else set(used_keys)
    return [node for node in nodes if node.is_leaf_property and node.key_path not in used]


def unused_leaf_keys(locale_text: str, used_keys: Iterable[str]) -> List[str]:
    """Leaf key paths defined in a locale document but never used.

    Container paths are never reported, even when nothing beneath them is
    used. Malformed documents yield [].

    Args:
        locale_text: Locale document text
        used_keys: Used key paths from recompute_used_keys()

    Returns:
        Unused leaf key paths in document order
    """
    return [node.key_path for node in unused_leaf_nodes(index_document(locale_text), used_keys)]
