"""Debounced, self-suppressing recomputation of the used-key set.

All work runs on one asyncio event loop. Shared state is exactly the used-key
snapshot and the per-document index map; both are replaced wholesale, never
mutated in place, so a reader never observes a half-built pass.
"""
import asyncio
import inspect
from pathlib import Path
from typing import Awaitable, Callable, Dict, FrozenSet, List, Optional, Sequence, Tuple, Union

from .cache import ScanCache
from .locale_index import IndexedNode, index_document
from .scope import DEFAULT_SCOPE_FUNCTION_NAMES
from .usage import Reader, recompute_used_keys, unused_leaf_nodes
from ..utils.logger import get_logger

logger = get_logger(__name__)

CorpusProvider = Callable[[], Union[Sequence[Path], Awaitable[Sequence[Path]]]]

# Delays in seconds
DEFAULT_DEBOUNCE_DELAY = 0.8
INITIAL_DEBOUNCE_DELAY = 0.3


class UsageReconciler:
    """Keeps the unused-key verdict current while the corpus changes.

    trigger_recompute() is the only entry point for change events: a burst
    of triggers collapses into one pass after a quiet period (the latest
    trigger replaces a pending one), and a trigger that fires while a pass
    is in flight is dropped, not queued.
    """

    def __init__(self, corpus: CorpusProvider, function_names: Sequence[str],
                 scope_names: Sequence[str] = DEFAULT_SCOPE_FUNCTION_NAMES,
                 reader: Optional[Reader] = None,
                 cache: Optional[ScanCache] = None,
                 delay: float = DEFAULT_DEBOUNCE_DELAY,
                 on_updated: Optional[Callable[[FrozenSet[str]], None]] = None):
        """Initialize the reconciler.

        Args:
            corpus: Callable (sync or async) returning the source files to scan
            function_names: Recognized translation function names
            scope_names: Scope-establishing function names
            reader: Async file reader passed through to recompute_used_keys
            cache: Optional per-file scan cache
            delay: Debounce quiet period in seconds
            on_updated: Called with the new snapshot after each completed pass
        """
        self.corpus = corpus
        self.function_names = tuple(function_names)
        self.scope_names = tuple(scope_names)
        self.reader = reader
        self.cache = cache
        self.delay = delay
        self.on_updated = on_updated

        self._used_keys: FrozenSet[str] = frozenset()
        self._documents: Dict[str, Tuple[IndexedNode, ...]] = {}
        self._timer: Optional[asyncio.TimerHandle] = None
        self._task: Optional[asyncio.Task] = None
        self._computing = False

        self.completed_passes = 0
        self.dropped_triggers = 0
        self.failed_passes = 0

    @property
    def used_keys(self) -> FrozenSet[str]:
        """Snapshot of the latest completed pass."""
        return self._used_keys

    @property
    def is_computing(self) -> bool:
        return self._computing

    @property
    def has_pending_trigger(self) -> bool:
        return self._timer is not None

    def trigger_recompute(self, delay: Optional[float] = None) -> None:
        """Schedule a pass after the debounce delay, replacing any pending one.

        Must be called from the event loop thread.
        """
        if self._timer is not None:
            self._timer.cancel()

        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.delay if delay is None else delay, self._fire)

    def _fire(self) -> None:
        self._timer = None
        if self._computing:
            self.dropped_triggers += 1
            logger.debug("Reconciliation already running; trigger dropped")
            return
        self._task = asyncio.ensure_future(self.recompute())
        self._task.add_done_callback(self._on_pass_done)

    def _on_pass_done(self, task: asyncio.Task) -> None:
        # Nothing else awaits a triggered pass; surface its failure here
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self.failed_passes += 1
            logger.error(f"Reconciliation pass failed: {error!r}", exc_info=error)

    async def recompute(self) -> bool:
        """Run one reconciliation pass now.

        Returns:
            True if a pass ran, False if one was already in flight
        """
        if self._computing:
            self.dropped_triggers += 1
            return False

        self._computing = True
        try:
            try:
                files = self.corpus()
                if inspect.isawaitable(files):
                    files = await files
                files = list(files)
            except OSError as e:
                # Keep the previous snapshot; the next trigger retries
                logger.warning(f"Corpus enumeration failed: {e}")
                return False

            used = await recompute_used_keys(
                files, self.function_names,
                reader=self.reader, scope_names=self.scope_names, cache=self.cache,
            )
            self._used_keys = used
            self.completed_passes += 1
            logger.debug(f"Reconciled {len(files)} files, {len(used)} used keys")
        finally:
            self._computing = False

        if self.on_updated is not None:
            self.on_updated(self._used_keys)
        return True

    async def wait_idle(self) -> None:
        """Wait until no pass is pending or running."""
        while self._timer is not None or (self._task is not None and not self._task.done()):
            if self._task is not None and not self._task.done():
                await self._task
            else:
                await asyncio.sleep(0.01)

    def cancel(self) -> None:
        """Cancel a pending trigger (a running pass is left to finish)."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def refresh_document(self, document_id: Union[str, Path], text: str) -> List[IndexedNode]:
        """Re-index a locale document and return its unused leaf nodes.

        The document's previous index is discarded.
        """
        nodes = tuple(index_document(text))
        documents = dict(self._documents)
        documents[str(document_id)] = nodes
        self._documents = documents
        return unused_leaf_nodes(nodes, self._used_keys)

    def forget_document(self, document_id: Union[str, Path]) -> None:
        documents = dict(self._documents)
        documents.pop(str(document_id), None)
        self._documents = documents

    def unused_for(self, document_id: Union[str, Path]) -> List[IndexedNode]:
        """Unused leaf nodes of a previously refreshed document."""
        nodes = self._documents.get(str(document_id), ())
        return unused_leaf_nodes(nodes, self._used_keys)

    @property
    def documents(self) -> Dict[str, Tuple[IndexedNode, ...]]:
        return self._documents
