"""Key completion: suggest the next key segment while a call is being typed."""
import re
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from .jsonc_parser import node_to_python, parse_tree
from .scope import apply_scope_prefix


@dataclass(frozen=True)
class KeySuggestion:
    """One completion candidate."""
    name: str
    is_container: bool
    value: Any = None

    @property
    def insert_text(self) -> str:
        # Containers keep the dot so the next segment can be completed
        return f"{self.name}." if self.is_container else self.name


def completion_context(line_prefix: str, function_names: Sequence[str]) -> Optional[str]:
    """The partially typed key when the text ends inside an open call.

    Args:
        line_prefix: Line text up to the cursor
        function_names: Recognized translation function names

    Returns:
        Typed key so far (possibly ''), or None outside a translation call
    """
    if not function_names:
        return None
    alternatives = '|'.join(re.escape(name) for name in function_names)
    match = re.search(r'(?:' + alternatives + r')\(["\'`]([^"\'`]*)$', line_prefix)
    return match.group(1) if match else None


def suggest_keys(locale_text: str, typed_key: str,
                 scope_prefix: Optional[str] = None) -> List[KeySuggestion]:
    """Children of the object addressed by the typed key.

    The last segment, unless followed by a dot, is a filter on child names.
    With a scope prefix and nothing typed yet, the scope's children are listed.

    Args:
        locale_text: Default-locale document text
        typed_key: Key typed so far inside the call
        scope_prefix: Prefix from the nearest scope declaration, if any

    Returns:
        Suggestions in document order, or [] for an invalid path or malformed document
    """
    root = parse_tree(locale_text)
    if root is None or root.type != 'object':
        return []
    current = node_to_python(root)

    if scope_prefix and not typed_key:
        key_path = scope_prefix + '.'
    else:
        key_path = apply_scope_prefix(scope_prefix, typed_key)

    parts = [part for part in key_path.split('.') if part]
    filter_text = ''
    for index, part in enumerate(parts):
        if index == len(parts) - 1 and not key_path.endswith('.'):
            filter_text = part if typed_key else ''
        elif isinstance(current, dict) and part in current:
            current = current[part]
        else:
            return []

    if not isinstance(current, dict):
        return []

    return [
        KeySuggestion(name, isinstance(value, dict), value)
        for name, value in current.items()
        if name.startswith(filter_text)
    ]
