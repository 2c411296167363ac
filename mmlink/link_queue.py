"""A link whose delivery opportunities follow a recorded trace."""

from __future__ import annotations

import os
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Protocol, TextIO

_NEVER = 2**64 - 1
_MAX_WAIT = 0xFFFFFFFF


class _Writer(Protocol):
    def write(self, data: bytes) -> object: ...


def _monotonic_ms() -> int:
    return time.monotonic_ns() // 1_000_000


@dataclass
class QueuedPacket:
    """A packet waiting for the link, with the time it arrived."""

    contents: bytes
    arrival_time: int


class PacketQueue(Protocol):
    """What the link needs of the queue in front of it."""

    def enqueue(self, packet: QueuedPacket) -> None: ...

    def dequeue(self) -> QueuedPacket: ...

    def empty(self) -> bool: ...

    def size_bytes(self) -> int: ...

    def size_packets(self) -> int: ...


class _UnboundedPacketQueue:
    """A FIFO that never drops."""

    def __init__(self) -> None:
        self._packets: deque[QueuedPacket] = deque()
        self._bytes = 0

    def enqueue(self, packet: QueuedPacket) -> None:
        self._packets.append(packet)
        self._bytes += len(packet.contents)

    def dequeue(self) -> QueuedPacket:
        packet = self._packets.popleft()
        self._bytes -= len(packet.contents)
        return packet

    def empty(self) -> bool:
        return not self._packets

    def size_bytes(self) -> int:
        return self._bytes

    def size_packets(self) -> int:
        return len(self._packets)

    def __str__(self) -> str:
        return "infinite"


def _parse_ms(filename: str, line: str) -> int:
    text = line.strip()
    if not (text.isascii() and text.isdigit()):
        raise ValueError(f"{filename}: invalid timestamp {line!r}")
    return int(text)


def load_schedule(filename: str) -> list[int]:
    """Read a trace of delivery times in milliseconds, one per line."""
    try:
        with open(filename, encoding="utf-8") as trace:
            text = trace.read()
    except OSError as exc:
        raise OSError(f"{filename}: error opening for reading") from exc

    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()

    schedule: list[int] = []
    for line in lines:
        if not line:
            raise ValueError(f"{filename}: invalid empty line")
        ms = _parse_ms(filename, line)
        if schedule and ms < schedule[-1]:
            raise ValueError(f"{filename}: timestamps must be monotonically nondecreasing")
        schedule.append(ms)

    if not schedule:
        raise ValueError(f"{filename}: no valid timestamps found")
    if schedule[-1] == 0:
        raise ValueError(f"{filename}: trace must last for a nonzero amount of time")
    return schedule


class LinkQueue:
    """Delivers up to PACKET_SIZE bytes at each time listed in a trace file."""

    PACKET_SIZE = 1504

    def __init__(
        self,
        link_name: str,
        filename: str,
        logfile: str | None = None,
        repeat: bool = True,
        packet_queue: PacketQueue | None = None,
        command_line: str = "",
        clock: Callable[[], int] | None = None,
    ) -> None:
        self._clock = clock if clock is not None else _monotonic_ms
        self._base_timestamp = self._clock()
        self._schedule = load_schedule(filename)
        self._next_delivery = 0
        self._packet_queue: PacketQueue = (
            packet_queue if packet_queue is not None else _UnboundedPacketQueue()
        )
        self._in_transit = QueuedPacket(b"", 0)
        self._in_transit_left = 0
        self._output: deque[bytes] = deque()
        self._repeat = repeat
        self._finished = False
        self._log: TextIO | None = None

        if logfile:
            try:
                self._log = open(logfile, "w", encoding="utf-8")
            except OSError as exc:
                raise OSError(f"{logfile}: error opening for writing") from exc
            init_timestamp = int(time.time() * 1000) - self._base_timestamp
            self._write_log(f"# mahimahi mm-link ({link_name}) [{filename}] > {logfile}")
            self._write_log(f"# command line: {command_line}")
            self._write_log(f"# queue: {self._packet_queue}")
            self._write_log(f"# init timestamp: {init_timestamp}")
            self._write_log(f"# base timestamp: {self._base_timestamp}")
            prefix = os.environ.get("MAHIMAHI_SHELL_PREFIX")
            if prefix is not None:
                self._write_log(f"# mahimahi config: {prefix}")

    def __enter__(self) -> LinkQueue:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the log file, if any."""
        if self._log is not None:
            self._log.close()
            self._log = None

    def _write_log(self, line: str) -> None:
        if self._log is not None:
            self._log.write(line + "\n")
            self._log.flush()

    def _next_delivery_time(self) -> int:
        if self._finished:
            return _NEVER
        return self._schedule[self._next_delivery] + self._base_timestamp

    def _use_a_delivery_opportunity(self) -> None:
        self._write_log(f"{self._next_delivery_time()} # {self.PACKET_SIZE}")
        self._next_delivery = (self._next_delivery + 1) % len(self._schedule)
        if self._next_delivery == 0:
            if self._repeat:
                self._base_timestamp += self._schedule[-1]
            else:
                self._finished = True

    def _rationalize(self, now: int) -> None:
        """Run the link forward to ``now``."""
        while self._next_delivery_time() <= now:
            this_delivery_time = self._next_delivery_time()
            bytes_left = self.PACKET_SIZE
            self._use_a_delivery_opportunity()

            while bytes_left > 0:
                if not self._in_transit_left:
                    if self._packet_queue.empty():
                        break
                    self._in_transit = self._packet_queue.dequeue()
                    self._in_transit_left = len(self._in_transit.contents)

                amount = min(bytes_left, self._in_transit_left)
                self._in_transit_left -= amount
                bytes_left -= amount

                if self._in_transit_left == 0:
                    packet = self._in_transit
                    self._write_log(
                        f"{this_delivery_time} - {len(packet.contents)} "
                        f"{this_delivery_time - packet.arrival_time}"
                    )
                    self._output.append(packet.contents)

    def read_packet(self, contents: bytes) -> None:
        now = self._clock()
        if len(contents) > self.PACKET_SIZE:
            raise ValueError("packet size is greater than maximum")

        self._rationalize(now)
        self._write_log(f"{now} + {len(contents)}")

        bytes_before = self._packet_queue.size_bytes()
        packets_before = self._packet_queue.size_packets()
        self._packet_queue.enqueue(QueuedPacket(contents, now))

        missing_packets = packets_before + 1 - self._packet_queue.size_packets()
        missing_bytes = bytes_before + len(contents) - self._packet_queue.size_bytes()
        if missing_packets > 0 or missing_bytes > 0:
            self._write_log(f"{now} d {missing_packets} {missing_bytes}")

    def write_packets(self, out: _Writer) -> None:
        while self._output:
            out.write(self._output.popleft())

    def wait_time(self) -> int:
        """Milliseconds until the next delivery opportunity."""
        now = self._clock()
        self._rationalize(now)
        next_time = self._next_delivery_time()
        if next_time <= now:
            return 0
        return min(next_time - now, _MAX_WAIT)

    def pending_output(self) -> bool:
        return bool(self._output)

    def finished(self) -> bool:
        return self._finished