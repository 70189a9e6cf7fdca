"""File system watching for live reconciliation.

watchdog delivers events on its own observer thread; every event is handed
over to the asyncio loop with call_soon_threadsafe, so the reconciler itself
only ever runs on the loop thread.
"""
import asyncio
from pathlib import Path
from typing import Callable, Iterable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .analyzer.corpus import SOURCE_EXTENSIONS, is_excluded
from .analyzer.reconciler import UsageReconciler


class SourceChangeHandler(FileSystemEventHandler):
    """Routes file events to the reconciler or to a locale refresh callback."""

    def __init__(self, loop: asyncio.AbstractEventLoop, reconciler: UsageReconciler,
                 project_root: Path, locale_files: Iterable[Path] = (),
                 on_locale_changed: Optional[Callable[[Path], None]] = None,
                 extensions: Iterable[str] = SOURCE_EXTENSIONS):
        """Initialize the handler.

        Args:
            loop: Event loop the reconciler runs on
            reconciler: Reconciler to trigger on source changes
            project_root: Root of the watched tree
            locale_files: Locale documents to refresh when they change
            on_locale_changed: Called (on the loop) with the changed locale file
            extensions: Source file suffixes that trigger a recompute
        """
        super().__init__()
        self.loop = loop
        self.reconciler = reconciler
        self.project_root = Path(project_root).resolve()
        self.locale_files = {Path(path).resolve() for path in locale_files}
        self.on_locale_changed = on_locale_changed
        self.extensions = {ext.lower() for ext in extensions}

    def _is_source(self, path: Path) -> bool:
        return path.suffix.lower() in self.extensions and not is_excluded(path, self.project_root)

    def _dispatch_path(self, raw_path) -> None:
        if isinstance(raw_path, bytes):
            raw_path = raw_path.decode()
        path = Path(raw_path).resolve()

        if path in self.locale_files and self.on_locale_changed is not None:
            self.loop.call_soon_threadsafe(self.on_locale_changed, path)
        elif self._is_source(path):
            self.loop.call_soon_threadsafe(self.reconciler.trigger_recompute)

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in ('created', 'modified', 'deleted', 'moved'):
            return
        self._dispatch_path(event.src_path)
        dest_path = getattr(event, 'dest_path', None)
        if dest_path:
            self._dispatch_path(dest_path)


def start_observer(handler: SourceChangeHandler) -> Observer:
    """Start a recursive observer on the handler's project root."""
    observer = Observer()
    observer.schedule(handler, str(handler.project_root), recursive=True)
    observer.start()
    return observer
