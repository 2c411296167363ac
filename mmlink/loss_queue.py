"""Links that drop packets, either at random or while switched off."""

from __future__ import annotations

import math
import random
import time
from abc import ABC, abstractmethod
from collections import deque
from typing import Callable, Protocol

_IDLE_WAIT_MS = 65535
_MS_PER_SECOND = 1000.0
_MAX_PERIOD_MS = 1 << 30


class _Writer(Protocol):
    def write(self, data: bytes) -> object: ...


def _monotonic_ms() -> int:
    return time.monotonic_ns() // 1_000_000


def _bound(x: float) -> int:
    if x > _MAX_PERIOD_MS:
        return _MAX_PERIOD_MS
    return int(x)


class LossQueue(ABC):
    """Passes packets straight through unless the subclass drops them."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng if rng is not None else random.Random()
        self._queue: deque[bytes] = deque()

    @abstractmethod
    def _drop_packet(self, contents: bytes) -> bool:
        """Whether this packet is lost."""

    def read_packet(self, contents: bytes) -> None:
        if not self._drop_packet(contents):
            self._queue.append(contents)

    def write_packets(self, out: _Writer) -> None:
        while self._queue:
            out.write(self._queue.popleft())

    def wait_time(self) -> int:
        return 0 if self._queue else _IDLE_WAIT_MS

    def pending_output(self) -> bool:
        return bool(self._queue)

    def finished(self) -> bool:
        return False


class IIDLoss(LossQueue):
    """Drops each packet independently with probability ``loss_rate``."""

    def __init__(self, loss_rate: float, rng: random.Random | None = None) -> None:
        if not 0.0 <= loss_rate <= 1.0:
            raise ValueError("loss rate must be between 0 and 1")
        super().__init__(rng)
        self._loss_rate = loss_rate

    @property
    def loss_rate(self) -> float:
        return self._loss_rate

    def _drop_packet(self, contents: bytes) -> bool:
        return self._rng.random() < self._loss_rate


class SwitchingLink(LossQueue):
    """A link that turns on and off for exponentially distributed periods.

    Mean times are in seconds. Packets arriving while the link is off are lost.
    """

    def __init__(
        self,
        mean_on_time: float,
        mean_off_time: float,
        clock: Callable[[], int] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        if mean_on_time < 0 or mean_off_time < 0:
            raise ValueError("mean on-time and off-time must not be negative")
        if mean_on_time == 0 and mean_off_time == 0:
            raise ValueError("mean on-time and off-time cannot both be 0 seconds")
        super().__init__(rng)
        self._clock = clock if clock is not None else _monotonic_ms
        self._mean_on_ms = _MS_PER_SECOND * mean_on_time
        self._mean_off_ms = _MS_PER_SECOND * mean_off_time
        self._link_is_on = False
        self._next_switch_time = self._clock()

    @property
    def link_is_on(self) -> bool:
        return self._link_is_on

    def _period(self, mean_ms: float) -> int:
        if mean_ms == 0:
            return 0
        if math.isinf(mean_ms):
            return _MAX_PERIOD_MS
        return _bound(self._rng.expovariate(1.0 / mean_ms))

    def wait_time(self) -> int:
        now = self._clock()
        while self._next_switch_time <= now:
            self._link_is_on = not self._link_is_on
            mean = self._mean_on_ms if self._link_is_on else self._mean_off_ms
            self._next_switch_time += self._period(mean)

        if super().wait_time() == 0:
            return 0
        return min(self._next_switch_time - now, _IDLE_WAIT_MS)

    def _drop_packet(self, contents: bytes) -> bool:
        return not self._link_is_on