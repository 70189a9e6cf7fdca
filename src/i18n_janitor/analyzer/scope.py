"""Scope-prefix resolution for useTranslation("prefix") style declarations."""
import re
from functools import lru_cache
from typing import List, Optional, Pattern, Sequence, Tuple, Union

# Naming convention of the scope-establishing hooks (react-i18next, next-intl)
DEFAULT_SCOPE_FUNCTION_NAMES = ('useTranslation', 'useTranslations')


@lru_cache(maxsize=16)
def build_scope_pattern(scope_names: Tuple[str, ...] = DEFAULT_SCOPE_FUNCTION_NAMES) -> Pattern:
    """Pattern for a scope declaration; group 'prefix' is the declared literal."""
    alternatives = '|'.join(re.escape(name) for name in scope_names)
    return re.compile(
        r'(?:' + alternatives + r')\s*\(\s*["\'`](?P<prefix>[^"\'`]+)["\'`]',
        re.MULTILINE,
    )


def _as_lines(document: Union[str, Sequence[str]]) -> Sequence[str]:
    if isinstance(document, str):
        return document.split('\n')
    return document


def resolve_scope_prefix(document: Union[str, Sequence[str]], line: int,
                         scope_names: Sequence[str] = DEFAULT_SCOPE_FUNCTION_NAMES) -> Optional[str]:
    """Find the nearest scope declaration at or above a line.

    The current line is checked first, so a declaration on the same line as
    the usage counts.

    Args:
        document: Full document text, or its lines
        line: 0-based line number of the usage
        scope_names: Scope-establishing function names

    Returns:
        The declared prefix, or None if no declaration precedes the line
    """
    lines = _as_lines(document)
    if not lines:
        return None

    pattern = build_scope_pattern(tuple(scope_names))
    for line_number in range(min(line, len(lines) - 1), -1, -1):
        match = pattern.search(lines[line_number])
        if match:
            return match.group('prefix')
    return None


def apply_scope_prefix(prefix: Optional[str], raw_key: str) -> str:
    """Combine a scope prefix with a raw key.

    - no prefix: raw key unchanged
    - empty raw key: the prefix alone
    - raw key already starting with 'prefix.': unchanged
    - otherwise: 'prefix.raw_key'
    """
    if not prefix:
        return raw_key
    if not raw_key:
        return prefix
    if raw_key.startswith(prefix + '.'):
        return raw_key
    return f"{prefix}.{raw_key}"


def find_scope_declarations(text: str,
                            scope_names: Sequence[str] = DEFAULT_SCOPE_FUNCTION_NAMES) -> List[str]:
    """Every scope literal declared anywhere in a file, in order of appearance."""
    pattern = build_scope_pattern(tuple(scope_names))
    return [match.group('prefix') for match in pattern.finditer(text)]
