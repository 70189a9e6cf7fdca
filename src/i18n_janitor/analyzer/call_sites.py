"""Lexical detection of translation-function call sites.

Recognizes calls such as t("dashboard.title") or i18n.translate('x') with a
literal string argument, in any source dialect. This is deliberately a
pattern scanner, not a parser: JS, TS, Vue, Svelte and HTML templates all go
through the same code path.
"""
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional, Pattern, Sequence, Tuple


@dataclass(frozen=True)
class CallSiteMatch:
    """A call site found in a line or file.

    match_span is the (start, end) offset range of the captured key literal,
    quotes excluded.
    """
    raw_key: str
    match_span: Tuple[int, int]
    function_name: str

    def contains(self, offset: int) -> bool:
        """True if offset lies inside the literal, both boundaries included."""
        start, end = self.match_span
        return start <= offset <= end


@lru_cache(maxsize=128)
def build_call_pattern(function_name: str) -> Pattern:
    """Pattern for one recognized function name.

    word boundary, name, optional whitespace, '(', optional whitespace,
    then a quoted literal closed by the same kind of quote.
    Group 'key' captures the literal.
    """
    return re.compile(
        r'\b' + re.escape(function_name) + r'\s*\(\s*(?P<quote>["\'`])(?P<key>[^"\'`]+)(?P=quote)'
    )


@lru_cache(maxsize=32)
def build_file_pattern(function_names: Tuple[str, ...]) -> Pattern:
    """Single pattern matching a call to any of the names, anywhere in a file."""
    alternatives = '|'.join(re.escape(name) for name in function_names)
    return re.compile(
        r'(?<![A-Za-z0-9_])(?P<name>' + alternatives + r')'
        r'\s*\(\s*(?P<quote>["\'`])(?P<key>[^"\'`]+)(?P=quote)',
        re.MULTILINE,
    )


class CallSiteExtractor:
    """Finds call sites for a configured set of translation function names.

    Function names are tried in configuration order: when matches of two
    names overlap the cursor, the earlier name wins.
    """

    def __init__(self, function_names: Sequence[str]):
        self.function_names = tuple(function_names)

    def find_in_line(self, line: str) -> List[CallSiteMatch]:
        """All matches in one line, grouped by function name in config order."""
        matches = []
        for name in self.function_names:
            for match in build_call_pattern(name).finditer(line):
                matches.append(CallSiteMatch(match.group('key'), match.span('key'), name))
        return matches

    def match_at_cursor(self, line: str, cursor: int) -> Optional[CallSiteMatch]:
        """The first match whose key literal contains the cursor."""
        for call in self.find_in_line(line):
            if call.contains(cursor):
                return call
        return None

    def find_call_sites(self, text: str) -> List[CallSiteMatch]:
        """Every call site in a whole file, in text order."""
        if not self.function_names:
            return []

        pattern = build_file_pattern(self.function_names)
        return [
            CallSiteMatch(match.group('key'), match.span('key'), match.group('name'))
            for match in pattern.finditer(text)
        ]


def extract_key_at_cursor(line: str, cursor: int, function_names: Sequence[str]) -> Optional[str]:
    """Return the raw key of the call site under the cursor.

    Args:
        line: Text of the line holding the cursor
        cursor: Character offset of the cursor within the line
        function_names: Recognized translation function names, in priority order

    Returns:
        The literal key, or None when the cursor is not inside any call site
    """
    call = CallSiteExtractor(function_names).match_at_cursor(line, cursor)
    return call.raw_key if call else None


def key_segment_prefix(raw_key: str, relative: int) -> str:
    """Cut a dotted key after the segment holding a relative offset.

    'a.b.c' with the offset inside 'b' gives 'a.b'. At or before the first
    character, or past the last, the whole key is returned.
    """
    if relative <= 0 or relative >= len(raw_key):
        return raw_key

    segments = raw_key.split('.')
    segment_end = 0
    for index, segment in enumerate(segments):
        segment_end += len(segment)
        if relative <= segment_end:
            return '.'.join(segments[:index + 1])
        segment_end += 1  # the dot
    return raw_key


def extract_key_segment_at_cursor(line: str, cursor: int,
                                  function_names: Sequence[str]) -> Optional[str]:
    """Like extract_key_at_cursor, but only up to the clicked dot segment.

    Args:
        line: Text of the line holding the cursor
        cursor: Character offset of the cursor within the line
        function_names: Recognized translation function names

    Returns:
        Key prefix ending with the segment under the cursor, or None
    """
    call = CallSiteExtractor(function_names).match_at_cursor(line, cursor)
    if call is None:
        return None
    return key_segment_prefix(call.raw_key, cursor - call.match_span[0])
