"""Go-to-definition for translation keys: call site -> locale file position."""
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from .call_sites import extract_key_at_cursor, extract_key_segment_at_cursor
from .locator import Position, find_key_in_file
from .scope import DEFAULT_SCOPE_FUNCTION_NAMES, apply_scope_prefix, resolve_scope_prefix


@dataclass(frozen=True)
class Definition:
    """Where a key is defined in one locale file."""
    key: str
    locale: str
    path: Path
    position: Position


def resolve_key_at(document_text: str, line: int, character: int,
                   function_names: Sequence[str],
                   scope_names: Sequence[str] = DEFAULT_SCOPE_FUNCTION_NAMES,
                   segment_only: bool = False) -> Optional[str]:
    """Fully qualified key of the call site under a cursor.

    Args:
        document_text: Source file text
        line: 0-based cursor line
        character: 0-based cursor column
        function_names: Recognized translation function names
        scope_names: Scope-establishing function names
        segment_only: Stop at the dot segment under the cursor

    Returns:
        Key with the scope prefix applied, or None if the cursor is not on a call site
    """
    lines = document_text.split('\n')
    if line < 0 or line >= len(lines):
        return None

    extract = extract_key_segment_at_cursor if segment_only else extract_key_at_cursor
    raw_key = extract(lines[line], character, function_names)
    if raw_key is None:
        return None

    prefix = resolve_scope_prefix(lines, line, scope_names)
    return apply_scope_prefix(prefix, raw_key)


def find_definition(config, key: str, locale: Optional[str] = None) -> Optional[Definition]:
    """Locate a key in one locale file (the default locale unless given).

    Args:
        config: Config providing locale file paths
        key: Fully qualified key path
        locale: Locale to look in

    Returns:
        Definition, or None if the file or the key is missing
    """
    locale = locale or config.default_locale
    path = config.locale_file_path(locale)
    if not path.is_file():
        return None

    position = find_key_in_file(key, path)
    if position is None:
        return None
    return Definition(key, locale, path, position)


def find_definitions(config, key: str) -> List[Definition]:
    """Locate a key in every existing supported locale file."""
    definitions = []
    for locale_file in config.available_locales():
        if not locale_file.exists:
            continue
        definition = find_definition(config, key, locale_file.locale)
        if definition is not None:
            definitions.append(definition)
    return definitions
