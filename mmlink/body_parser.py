"""Parsers for HTTP message bodies whose length is not known in advance.

A parser's ``read`` returns ``None`` when all of the data it was given
belongs to the body, or the number of leading characters of that data that
complete the body.
"""

from __future__ import annotations

import enum
import re
from abc import ABC, abstractmethod

_CRLF = "\r\n"
_HEX = re.compile(r"[0-9A-Fa-f]+")


class BodyParser(ABC):
    """Finds where a body ends in a stream of data."""

    @abstractmethod
    def read(self, data: str) -> int | None:
        """Consume ``data``; return how much of it ends the body, or None."""

    @abstractmethod
    def eof(self) -> bool:
        """Whether the message becomes complete when EOF arrives in the body."""


class Rule5BodyParser(BodyParser):
    """A body terminated only by the connection closing (RFC 2616 4.4 rule 5)."""

    def read(self, data: str) -> int | None:
        return None

    def eof(self) -> bool:
        return True


class _ChunkState(enum.Enum):
    CHUNK_HDR = enum.auto()
    CHUNK = enum.auto()
    TRAILER = enum.auto()


class ChunkedBodyParser(BodyParser):
    """A body in chunked transfer coding."""

    def __init__(self, trailers_enabled: bool) -> None:
        self._trailers_enabled = trailers_enabled
        self._buffer = ""
        self._chunk_size = 0
        self._acked = 0
        self._parsed = 0
        self._state = _ChunkState.CHUNK_HDR

    @staticmethod
    def _chunk_size_from(header: str) -> int:
        if not header.endswith(_CRLF):
            raise ValueError("chunk header must end with CRLF")
        end = header.find(";")
        if end == -1:
            end = header.find(_CRLF)
        hex_string = header[:end]
        space = hex_string.find(" ")
        if space != -1:
            hex_string = hex_string[:space]
        if not _HEX.fullmatch(hex_string):
            raise ValueError(f"invalid chunk size: {hex_string!r}")
        return int(hex_string, 16)

    def _ack(self, needle: str, input_size: int) -> int | None:
        location = self._buffer.find(needle)
        if location == -1:
            self._acked += input_size
            return None
        self._parsed += location + len(needle)
        return self._parsed - self._acked

    def read(self, data: str) -> int | None:
        self._buffer += data

        while self._buffer:
            if self._state is _ChunkState.CHUNK_HDR:
                end = self._buffer.find(_CRLF)
                if end == -1:
                    self._acked += len(data)
                    return None
                self._chunk_size = self._chunk_size_from(self._buffer[: end + 2])
                self._state = (
                    _ChunkState.TRAILER if self._chunk_size == 0 else _ChunkState.CHUNK
                )
                self._parsed += end + 2
                self._buffer = self._buffer[end + 2 :]
            elif self._state is _ChunkState.CHUNK:
                needed = self._chunk_size + 2
                if len(self._buffer) < needed:
                    self._acked += len(data)
                    return None
                if self._buffer[self._chunk_size : needed] != _CRLF:
                    raise ValueError("chunk data not followed by CRLF")
                self._state = _ChunkState.CHUNK_HDR
                self._parsed += needed
                self._buffer = self._buffer[needed:]
            else:
                needle = _CRLF * 2 if self._trailers_enabled else _CRLF
                return self._ack(needle, len(data))

        self._acked += len(data)
        return None

    def eof(self) -> bool:
        return True