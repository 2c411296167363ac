"""Command-line parsing for the link, delay, loss, on/off and meter shells."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Iterator, Sequence

QUEUE_TYPES = ("infinite", "droptail", "drophead", "codel", "pie")

_LINK_USAGE = """\
Usage: {program} UPLINK-TRACE DOWNLINK-TRACE [OPTION]... [COMMAND]

Options = --once
          --uplink-log=FILENAME --downlink-log=FILENAME
          --meter-uplink --meter-uplink-delay
          --meter-downlink --meter-downlink-delay
          --meter-all
          --uplink-queue=QUEUE_TYPE --downlink-queue=QUEUE_TYPE
          --uplink-queue-args=QUEUE_ARGS --downlink-queue-args=QUEUE_ARGS

          QUEUE_TYPE = infinite | droptail | drophead | codel | pie
          QUEUE_ARGS = "NAME=NUMBER[, NAME2=NUMBER2, ...]"
              (with NAME = bytes | packets | target | interval | qdelay_ref | max_burst)
                  target, interval, qdelay_ref, max_burst are in milli-second
"""

_LINK_LONG_OPTIONS = {
    "uplink-log": True,
    "downlink-log": True,
    "once": False,
    "meter-uplink": False,
    "meter-downlink": False,
    "meter-uplink-delay": False,
    "meter-downlink-delay": False,
    "meter-all": False,
    "uplink-queue": True,
    "downlink-queue": True,
    "uplink-queue-args": True,
    "downlink-queue-args": True,
}
_LINK_SHORT_OPTIONS = {"u": True, "d": True}
_LINK_SHORT_NAMES = {"u": "uplink-log", "d": "downlink-log"}

_METER_LONG_OPTIONS = {"meter-uplink": False, "meter-downlink": False}
_METER_SHORT_OPTIONS = {"u": False, "d": False}
_METER_SHORT_NAMES = {"u": "meter-uplink", "d": "meter-downlink"}


class UsageError(ValueError):
    """The command line could not be accepted.

    ``usage`` holds the full help text where the command has one, and
    ``reason`` says what in particular was wrong.
    """

    def __init__(self, message: str, *, usage: str = "", reason: str = "") -> None:
        super().__init__(message)
        self.usage = usage
        self.reason = reason


class _GetoptError(Exception):
    pass


@dataclass(frozen=True)
class LinkOptions:
    uplink_trace: str
    downlink_trace: str
    command: tuple[str, ...]
    command_line: str
    uplink_log: str = ""
    downlink_log: str = ""
    repeat: bool = True
    meter_uplink: bool = False
    meter_downlink: bool = False
    meter_uplink_delay: bool = False
    meter_downlink_delay: bool = False
    uplink_queue: str = "infinite"
    downlink_queue: str = "infinite"
    uplink_queue_args: str = ""
    downlink_queue_args: str = ""
    shell_prefix: str = "[link] "


@dataclass(frozen=True)
class DelayOptions:
    delay_ms: int
    command: tuple[str, ...]

    @property
    def shell_prefix(self) -> str:
        return f"[delay {self.delay_ms} ms] "


@dataclass(frozen=True)
class LossOptions:
    uplink_loss: float
    downlink_loss: float
    command: tuple[str, ...]
    shell_prefix: str


@dataclass(frozen=True)
class OnOffOptions:
    uplink_on_time: float
    uplink_off_time: float
    downlink_on_time: float
    downlink_off_time: float
    command: tuple[str, ...]
    shell_prefix: str


@dataclass(frozen=True)
class MeterOptions:
    meter_uplink: bool
    meter_downlink: bool
    command: tuple[str, ...]
    uplink_name: str = "Uplink"
    downlink_name: str = "Downlink"
    shell_prefix: str = "[meter] "


def shell_quote(arg: str) -> str:
    """Quote ``arg`` for a POSIX shell with single quotes."""
    return "'" + arg.replace("'", "'\\''") + "'"


def _resolve_long(name: str, long_opts: dict[str, bool]) -> str:
    if name in long_opts:
        return name
    candidates = [option for option in long_opts if option.startswith(name)]
    if not candidates:
        raise _GetoptError(f"unrecognized option '--{name}'")
    if len(candidates) > 1:
        raise _GetoptError(f"option '--{name}' is ambiguous")
    return candidates[0]


def _getopt_long(
    args: Sequence[str],
    short_opts: dict[str, bool],
    long_opts: dict[str, bool],
) -> tuple[list[tuple[str, str | None]], list[str]]:
    """Options and operands, with options allowed anywhere before ``--``."""
    options: list[tuple[str, str | None]] = []
    operands: list[str] = []
    it: Iterator[str] = iter(args)

    for arg in it:
        if arg == "--":
            operands.extend(it)
            break
        if arg.startswith("--"):
            name, has_value, value = arg[2:].partition("=")
            option = _resolve_long(name, long_opts)
            if long_opts[option]:
                if not has_value:
                    value_or_none = next(it, None)
                    if value_or_none is None:
                        raise _GetoptError(f"option '--{option}' requires an argument")
                    value = value_or_none
                options.append((option, value))
            else:
                if has_value:
                    raise _GetoptError(f"option '--{option}' doesn't allow an argument")
                options.append((option, None))
        elif arg.startswith("-") and len(arg) > 1:
            cluster = arg[1:]
            for pos, ch in enumerate(cluster):
                if ch not in short_opts:
                    raise _GetoptError(f"invalid option -- '{ch}'")
                if not short_opts[ch]:
                    options.append((ch, None))
                    continue
                rest = cluster[pos + 1 :]
                if not rest:
                    following = next(it, None)
                    if following is None:
                        raise _GetoptError(f"option requires an argument -- '{ch}'")
                    rest = following
                options.append((ch, rest))
                break
        else:
            operands.append(arg)

    return options, operands


def _program(argv: Sequence[str]) -> str:
    if not argv:
        raise UsageError("missing program name")
    return argv[0]


def _parse_uint(text: str) -> int:
    stripped = text.strip()
    if not (stripped.isascii() and stripped.isdigit()):
        raise ValueError(f"invalid integer: {text!r}")
    return int(stripped)


def _parse_float(text: str) -> float:
    try:
        return float(text)
    except ValueError:
        raise ValueError(f"invalid floating-point number: {text!r}") from None


def _command(rest: Sequence[str], default_shell: str) -> tuple[str, ...]:
    return tuple(rest) if rest else (default_shell,)


def parse_link_args(argv: Sequence[str], default_shell: str) -> LinkOptions:
    """Parse a link shell command line (``argv[0]`` is the program name)."""
    program = _program(argv)
    usage = _LINK_USAGE.format(program=program)

    def fail(reason: str = "") -> UsageError:
        return UsageError("invalid arguments", usage=usage, reason=reason)

    if len(argv) < 3:
        raise fail()

    command_line = " ".join(shell_quote(arg) for arg in argv)

    try:
        options, operands = _getopt_long(argv[1:], _LINK_SHORT_OPTIONS, _LINK_LONG_OPTIONS)
    except _GetoptError as exc:
        raise fail(str(exc)) from None

    settings: dict[str, object] = {}
    for key, value in options:
        name = _LINK_SHORT_NAMES.get(key, key)
        if name == "uplink-log":
            settings["uplink_log"] = value
        elif name == "downlink-log":
            settings["downlink_log"] = value
        elif name == "once":
            settings["repeat"] = False
        elif name == "meter-uplink":
            settings["meter_uplink"] = True
        elif name == "meter-downlink":
            settings["meter_downlink"] = True
        elif name == "meter-uplink-delay":
            settings["meter_uplink_delay"] = True
        elif name == "meter-downlink-delay":
            settings["meter_downlink_delay"] = True
        elif name == "meter-all":
            for flag in (
                "meter_uplink",
                "meter_downlink",
                "meter_uplink_delay",
                "meter_downlink_delay",
            ):
                settings[flag] = True
        elif name == "uplink-queue":
            settings["uplink_queue"] = value
        elif name == "downlink-queue":
            settings["downlink_queue"] = value
        elif name == "uplink-queue-args":
            settings["uplink_queue_args"] = value
        elif name == "downlink-queue-args":
            settings["downlink_queue_args"] = value

    if len(operands) < 2:
        raise fail()

    uplink_trace, downlink_trace, *rest = operands

    for direction in ("uplink_queue", "downlink_queue"):
        queue_type = settings.get(direction, "infinite")
        if queue_type not in QUEUE_TYPES:
            raise fail(f"Unknown queue type: {queue_type}")

    return LinkOptions(
        uplink_trace=uplink_trace,
        downlink_trace=downlink_trace,
        command=_command(rest, default_shell),
        command_line=command_line,
        **settings,  # type: ignore[arg-type]
    )


def parse_delay_args(argv: Sequence[str], default_shell: str) -> DelayOptions:
    """Parse ``PROGRAM delay-milliseconds [command...]``."""
    program = _program(argv)
    if len(argv) < 2:
        raise UsageError(f"Usage: {program} delay-milliseconds [command...]")
    return DelayOptions(
        delay_ms=_parse_uint(argv[1]),
        command=_command(argv[2:], default_shell),
    )


def parse_loss_args(argv: Sequence[str], default_shell: str) -> LossOptions:
    """Parse ``PROGRAM uplink|downlink RATE [COMMAND...]``."""
    program = _program(argv)
    usage = f"Usage: {program} uplink|downlink RATE [COMMAND...]"
    if len(argv) < 3:
        raise UsageError(usage)

    loss_rate = _parse_float(argv[2])
    if not 0 <= loss_rate <= 1:
        raise UsageError(usage, reason="Error: loss rate must be between 0 and 1.")

    link = argv[1]
    if link == "uplink":
        uplink_loss, downlink_loss, direction = loss_rate, 0.0, "up"
    elif link == "downlink":
        uplink_loss, downlink_loss, direction = 0.0, loss_rate, "down"
    else:
        raise UsageError(usage)

    return LossOptions(
        uplink_loss=uplink_loss,
        downlink_loss=downlink_loss,
        command=_command(argv[3:], default_shell),
        shell_prefix=f"[loss {direction}={argv[2]}] ",
    )


def parse_onoff_args(argv: Sequence[str], default_shell: str) -> OnOffOptions:
    """Parse ``PROGRAM uplink|downlink MEAN-ON-TIME MEAN-OFF-TIME [COMMAND...]``."""
    program = _program(argv)
    usage = f"Usage: {program} uplink|downlink MEAN-ON-TIME MEAN-OFF-TIME [COMMAND...]"
    if len(argv) < 4:
        raise UsageError(usage)

    on_time = _parse_float(argv[2])
    if not 0 <= on_time:
        raise UsageError(usage, reason="Error: mean on-time must be more than 0 seconds.")

    off_time = _parse_float(argv[3])
    if not 0 <= off_time:
        raise UsageError(usage, reason="Error: mean off-time must be more than 0 seconds.")

    if on_time == 0 and off_time == 0:
        raise UsageError(
            usage, reason="Error: mean on-time and off-time cannot both be 0 seconds."
        )

    always_on = sys.float_info.max
    link = argv[1]
    if link == "uplink":
        times = (on_time, off_time, always_on, 0.0)
        direction = "up"
    elif link == "downlink":
        times = (always_on, 0.0, on_time, off_time)
        direction = "down"
    else:
        raise UsageError(usage)

    return OnOffOptions(
        uplink_on_time=times[0],
        uplink_off_time=times[1],
        downlink_on_time=times[2],
        downlink_off_time=times[3],
        command=_command(argv[4:], default_shell),
        shell_prefix=f"[onoff ({direction}) on={argv[2]}s off={argv[3]}s] ",
    )


def parse_meter_args(argv: Sequence[str], default_shell: str) -> MeterOptions:
    """Parse ``PROGRAM [--meter-uplink] [--meter-downlink] [COMMAND...]``."""
    program = _program(argv)
    usage = f"Usage: {program} [--meter-uplink] [--meter-downlink] [COMMAND...]"
    try:
        options, operands = _getopt_long(
            argv[1:], _METER_SHORT_OPTIONS, _METER_LONG_OPTIONS
        )
    except _GetoptError as exc:
        raise UsageError(usage, reason=str(exc)) from None

    names = {_METER_SHORT_NAMES.get(key, key) for key, _ in options}
    return MeterOptions(
        meter_uplink="meter-uplink" in names,
        meter_downlink="meter-downlink" in names,
        command=_command(operands, default_shell),
    )