"""Splitting strings on a separator the way the HTTP parsers expect."""

from __future__ import annotations


def split(text: str, separator: str) -> list[str]:
    """Split ``text`` at every occurrence of ``separator``.

    Occurrences are searched for one character after the previous match,
    so overlapping separators each count. A text without the separator
    comes back as a single token.
    """
    indices: list[int] = []
    position = text.find(separator)
    while position != -1:
        indices.append(position)
        position = text.find(separator, position + 1)

    if not indices:
        return [text]

    width = len(separator)
    tokens = [text[: indices[0]]]
    for start, end in zip(indices, indices[1:]):
        begin = start + width
        tokens.append(text[begin:end] if end >= begin else text[begin:])
    tokens.append(text[indices[-1] + width :])
    return tokens