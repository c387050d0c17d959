"""Dotted-name namespace merging.

References written inside a rule (its guard, its default, its
variations conditions) may be relative to the rule's own namespace.
merge() turns them into absolute dotted names.
"""

from __future__ import annotations

SEPARATOR = " . "


def split_dotted_name(name: str) -> list[str]:
    """Split a dotted name into its segments."""
    return name.split(SEPARATOR)


def merge(root: str, suffix: str) -> str:
    """Resolve suffix inside the namespace enclosing root.

    The last segment of root is dropped; the remaining segments and then
    the segments of suffix are joined, each segment kept only on its
    first occurrence.

    >>> merge("transport . voiture . km", "voiture . motorisation")
    'transport . voiture . motorisation'
    """
    segments: list[str] = []
    seen: set[str] = set()
    for segment in split_dotted_name(root)[:-1] + split_dotted_name(suffix):
        if segment in seen:
            continue
        seen.add(segment)
        segments.append(segment)
    return SEPARATOR.join(segments)
