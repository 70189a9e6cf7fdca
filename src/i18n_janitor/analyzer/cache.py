"""Per-file scan cache for repeat reconciliation passes.

Cache Strategy:
- Store the raw call-site keys and scope literals found in each source file
- Use file mtime + size as cache key
- If a file is unchanged, skip reading and re-scanning it

The used-key set itself is never cached: every pass rebuilds it from the
per-file scans, so deleted or renamed call sites cannot survive.

Cache Format: SQLite database
Location: .i18n_janitor_cache/ in project root
"""
import json
import sqlite3
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from .scope import DEFAULT_SCOPE_FUNCTION_NAMES

CACHE_DIR_NAME = '.i18n_janitor_cache'

# Bumped whenever the table layout changes; older databases are rebuilt
SCHEMA_VERSION = 2


class ScanCache:
    """SQLite cache of per-file call-site scans."""

    def __init__(self, project_root: Path):
        """Open (or create) the cache database.

        Args:
            project_root: Root directory of the project being scanned
        """
        self.project_root = Path(project_root)
        self.cache_dir = self.project_root / CACHE_DIR_NAME
        self.cache_file = self.cache_dir / 'scan.db'

        self.cache_dir.mkdir(exist_ok=True)

        self.conn = sqlite3.connect(str(self.cache_file))
        self._init_database()

    def _init_database(self):
        """Create cache tables if they don't exist."""
        cursor = self.conn.cursor()

        cursor.execute('PRAGMA user_version')
        if cursor.fetchone()[0] != SCHEMA_VERSION:
            cursor.execute('DROP TABLE IF EXISTS file_scans')
            cursor.execute('DROP TABLE IF EXISTS file_metadata')
            cursor.execute(f'PRAGMA user_version = {SCHEMA_VERSION}')

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS file_metadata (
                file_path TEXT PRIMARY KEY,
                mtime REAL NOT NULL,
                size INTEGER NOT NULL,
                cache_key TEXT NOT NULL
            )
        ''')

        # Scan payload: {"keys": [...], "scopes": [...]}
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS file_scans (
                file_path TEXT PRIMARY KEY,
                scan_data TEXT NOT NULL,
                function_names TEXT NOT NULL,
                scope_names TEXT NOT NULL,
                cache_key TEXT NOT NULL,
                FOREIGN KEY (file_path) REFERENCES file_metadata(file_path)
            )
        ''')

        self.conn.commit()

    def get_cache_key(self, file_path: Path) -> Optional[Tuple[float, int, str]]:
        """Build the mtime:size cache key, or None if the file is gone."""
        try:
            stat = Path(file_path).stat()
        except OSError:
            return None
        return stat.st_mtime, stat.st_size, f"{stat.st_mtime}:{stat.st_size}"

    def get_file_scan(self, file_path: Path, function_names: Sequence[str],
                      scope_names: Sequence[str] = DEFAULT_SCOPE_FUNCTION_NAMES,
                      cache_key_data: Optional[Tuple[float, int, str]] = None) -> Optional[Dict[str, List[str]]]:
        """Get a cached scan if the file is unchanged.

        A scan made with different function or scope names is a miss.

        Args:
            file_path: Source file
            function_names: Function names the caller is scanning for
            scope_names: Scope-establishing names the caller is scanning for
            cache_key_data: Key from get_cache_key() (taken now if omitted)

        Returns:
            Dict with 'keys' and 'scopes' lists, or None
        """
        cache_key_data = cache_key_data or self.get_cache_key(file_path)
        if not cache_key_data:
            return None
        _, _, cache_key = cache_key_data

        cursor = self.conn.cursor()
        cursor.execute('''
            SELECT scan_data, function_names, scope_names FROM file_scans
            WHERE file_path = ? AND cache_key = ?
        ''', (str(file_path), cache_key))

        result = cursor.fetchone()
        if not result:
            return None
        if result[1] != json.dumps(list(function_names)) or result[2] != json.dumps(list(scope_names)):
            return None

        try:
            return json.loads(result[0])
        except json.JSONDecodeError:
            return None

    def set_file_scan(self, file_path: Path, function_names: Sequence[str],
                      keys: List[str], scopes: List[str],
                      scope_names: Sequence[str] = DEFAULT_SCOPE_FUNCTION_NAMES,
                      cache_key_data: Optional[Tuple[float, int, str]] = None):
        """Store the scan of a file.

        Args:
            file_path: Source file
            function_names: Function names the scan was made with
            keys: Raw call-site keys found
            scopes: Scope literals found
            scope_names: Scope-establishing names the scan was made with
            cache_key_data: Key taken before the file was read (taken now if omitted)
        """
        cache_key_data = cache_key_data or self.get_cache_key(file_path)
        if not cache_key_data:
            return
        mtime, size, cache_key = cache_key_data

        cursor = self.conn.cursor()
        cursor.execute('''
            INSERT OR REPLACE INTO file_metadata (file_path, mtime, size, cache_key)
            VALUES (?, ?, ?, ?)
        ''', (str(file_path), mtime, size, cache_key))

        cursor.execute('''
            INSERT OR REPLACE INTO file_scans (file_path, scan_data, function_names, scope_names, cache_key)
            VALUES (?, ?, ?, ?, ?)
        ''', (
            str(file_path),
            json.dumps({'keys': keys, 'scopes': scopes}),
            json.dumps(list(function_names)),
            json.dumps(list(scope_names)),
            cache_key,
        ))

        self.conn.commit()

    def invalidate_file(self, file_path: Path):
        """Drop the cached scan of one file."""
        cursor = self.conn.cursor()
        cursor.execute('DELETE FROM file_scans WHERE file_path = ?', (str(file_path),))
        cursor.execute('DELETE FROM file_metadata WHERE file_path = ?', (str(file_path),))
        self.conn.commit()

    def clear_cache(self):
        """Clear all cached data."""
        cursor = self.conn.cursor()
        cursor.execute('DELETE FROM file_scans')
        cursor.execute('DELETE FROM file_metadata')
        self.conn.commit()

    def get_cache_stats(self) -> Dict[str, int]:
        """Counts of cached files and cached keys."""
        cursor = self.conn.cursor()
        cursor.execute('SELECT COUNT(*) FROM file_metadata')
        total_files = cursor.fetchone()[0]

        cursor.execute('SELECT scan_data FROM file_scans')
        total_keys = 0
        for (scan_data,) in cursor.fetchall():
            try:
                total_keys += len(json.loads(scan_data).get('keys', []))
            except json.JSONDecodeError:
                continue

        return {
            'total_files': total_files,
            'cached_call_sites': total_keys,
        }

    def close(self):
        """Close database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
