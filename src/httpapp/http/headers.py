"""
=============================================================================
RESPONSE HEADER MAP
=============================================================================

An ordered, case-insensitive multi-map of header names to values.

Why not a plain dict?

    1. Header names are case-insensitive: "Vary" and "vary" are the
       same header and must never be emitted twice by accident.
    2. Some headers legitimately repeat (Vary, Cache-Control,
       Set-Cookie), so one name maps to a *list* of values.
    3. Order matters to humans reading raw responses and to a few
       fragile clients, so insertion order is kept.

    ┌────────────────────┬────────────────────────────────────────────┐
    │ key (lower-cased)  │ (display name, [values...])                │
    ├────────────────────┼────────────────────────────────────────────┤
    │ "content-type"     │ ("Content-Type", ["text/html; charset=…"]) │
    │ "vary"             │ ("Vary", ["Cookie", "Accept-Encoding"])    │
    └────────────────────┴────────────────────────────────────────────┘

The display name is the casing used on first insertion. Replacing a
header drops every previous value *and* the old casing, but the header
keeps its position.

=============================================================================
"""

from typing import Dict, Iterable, Iterator, List, Optional, Tuple


class Headers:
    """
    Ordered multi-map of response headers.

    Example:
        >>> headers = Headers()
        >>> headers.add("Vary", "Cookie")
        >>> headers.add("vary", "Accept-Encoding")
        >>> headers.get_all("VARY")
        ['Cookie', 'Accept-Encoding']
        >>> list(headers.items())
        [('Vary', 'Cookie'), ('Vary', 'Accept-Encoding')]
    """

    def __init__(self, initial: Optional[Iterable[Tuple[str, str]]] = None):
        self._entries: Dict[str, Tuple[str, List[str]]] = {}
        for name, value in initial or ():
            self.add(name, value)

    def add(self, name: str, value: str) -> None:
        """Append a value, keeping any existing values for the name."""
        key = name.lower()
        if key in self._entries:
            self._entries[key][1].append(value)
        else:
            self._entries[key] = (name, [value])

    def set(self, name: str, value: str) -> None:
        """Replace every value for the name with a single value, in place."""
        key = name.lower()
        if key in self._entries:
            self._entries[key] = (name, [value])
        else:
            self.add(name, value)

    def remove(self, name: str) -> None:
        self._entries.pop(name.lower(), None)

    def clear(self) -> None:
        self._entries.clear()

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """First value for the name, or default."""
        entry = self._entries.get(name.lower())
        if entry is None:
            return default
        return entry[1][0]

    def get_all(self, name: str) -> List[str]:
        entry = self._entries.get(name.lower())
        return list(entry[1]) if entry else []

    def names(self) -> List[str]:
        """Display names in insertion order."""
        return [display for display, _ in self._entries.values()]

    def items(self) -> Iterator[Tuple[str, str]]:
        """Flattened (name, value) pairs, one per value, in order."""
        for display, values in self._entries.values():
            for value in values:
                yield display, value

    def copy(self) -> "Headers":
        return Headers(self.items())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Headers):
            return NotImplemented
        return list(self.items()) == list(other.items())

    def __repr__(self) -> str:
        return f"Headers({list(self.items())!r})"
