"""A link that holds every packet for a fixed time before releasing it."""

from __future__ import annotations

import time
from collections import deque
from typing import Callable, Protocol

_IDLE_WAIT_MS = 65535


class _Writer(Protocol):
    def write(self, data: bytes) -> object: ...


def _monotonic_ms() -> int:
    return time.monotonic_ns() // 1_000_000


class DelayQueue:
    """Releases each packet ``delay_ms`` milliseconds after it arrived."""

    def __init__(self, delay_ms: int, clock: Callable[[], int] | None = None) -> None:
        if delay_ms < 0:
            raise ValueError("delay must not be negative")
        self._delay_ms = delay_ms
        self._clock = clock if clock is not None else _monotonic_ms
        self._queue: deque[tuple[int, bytes]] = deque()

    @property
    def delay_ms(self) -> int:
        return self._delay_ms

    def read_packet(self, contents: bytes) -> None:
        """Queue a packet for release after the delay."""
        self._queue.append((self._clock() + self._delay_ms, contents))

    def write_packets(self, out: _Writer) -> None:
        """Write every packet whose release time has come."""
        now = self._clock()
        while self._queue and self._queue[0][0] <= now:
            out.write(self._queue.popleft()[1])

    def wait_time(self) -> int:
        """Milliseconds until the next packet is due."""
        if not self._queue:
            return _IDLE_WAIT_MS
        now = self._clock()
        release = self._queue[0][0]
        return 0 if release <= now else release - now

    def pending_output(self) -> bool:
        return self.wait_time() <= 0

    def finished(self) -> bool:
        return False