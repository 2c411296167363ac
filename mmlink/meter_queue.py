"""A link that passes packets through unchanged while counting them."""

from __future__ import annotations

from collections import deque
from typing import Protocol

_IDLE_WAIT_MS = 65535


class _Writer(Protocol):
    def write(self, data: bytes) -> object: ...


class MeterQueue:
    """Forwards every packet at once and keeps a running byte count."""

    def __init__(self, name: str) -> None:
        self._name = name
        self._queue: deque[bytes] = deque()
        self._total_bytes = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def total_bytes(self) -> int:
        """Bytes seen since the queue was made."""
        return self._total_bytes

    def read_packet(self, contents: bytes) -> None:
        self._queue.append(contents)
        self._total_bytes += len(contents)

    def write_packets(self, out: _Writer) -> None:
        while self._queue:
            out.write(self._queue.popleft())

    def wait_time(self) -> int:
        return 0 if self._queue else _IDLE_WAIT_MS

    def pending_output(self) -> bool:
        return bool(self._queue)

    def finished(self) -> bool:
        return False