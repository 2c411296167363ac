"""A single HTTP header line."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class HTTPHeader:
    """A header's name and value."""

    key: str
    value: str

    @classmethod
    def from_line(cls, line: str) -> HTTPHeader:
        """Parse ``Name: value``, dropping leading spaces from the value."""
        key, colon, rest = line.partition(":")
        if not colon:
            raise ValueError(f"HTTPHeader: buffer does not contain colon: {line!r}")
        stripped = rest.lstrip(" ")
        return cls(key, stripped if stripped else rest)

    def __str__(self) -> str:
        return f"{self.key}: {self.value}"