import shlex
import sys

import pytest

from mmlink.options import (
    QUEUE_TYPES,
    UsageError,
    parse_delay_args,
    parse_link_args,
    parse_loss_args,
    parse_meter_args,
    parse_onoff_args,
    shell_quote,
)

SHELL = "/bin/sh"


@pytest.mark.parametrize("text", ["plain", "it's", "''", "a b c", "", "$HOME;`x`"])
def test_shell_quote_round_trips(text):
    assert shlex.split(shell_quote(text)) == [text]


def test_shell_quote_wraps_in_single_quotes():
    quoted = shell_quote("abc")
    assert quoted == "'abc'"


def test_link_defaults():
    opts = parse_link_args(["mm-link", "up.trace", "down.trace"], SHELL)
    assert opts.uplink_trace == "up.trace"
    assert opts.downlink_trace == "down.trace"
    assert opts.command == (SHELL,)
    assert opts.repeat is True
    assert opts.uplink_queue == "infinite"
    assert opts.downlink_queue == "infinite"
    assert opts.uplink_log == ""
    assert opts.shell_prefix == "[link] "
    assert not (opts.meter_uplink or opts.meter_downlink)


def test_link_options_anywhere_before_double_dash():
    argv = ["mm-link", "--once", "up", "--uplink-log=log.txt", "down", "--", "ls", "-l"]
    opts = parse_link_args(argv, SHELL)
    assert opts.repeat is False
    assert opts.uplink_log == "log.txt"
    assert (opts.uplink_trace, opts.downlink_trace) == ("up", "down")
    assert opts.command == ("ls", "-l")


def test_link_command_line_is_quoted_argv():
    argv = ["mm-link", "up", "down", "echo", "it's"]
    opts = parse_link_args(argv, SHELL)
    assert shlex.split(opts.command_line) == argv


def test_link_short_option_separate_and_joined():
    opts = parse_link_args(["mm-link", "-u", "a.log", "-db.log", "up", "down"], SHELL)
    assert opts.uplink_log == "a.log"
    assert opts.downlink_log == "b.log"


def test_link_long_option_with_separate_value():
    opts = parse_link_args(
        ["mm-link", "--uplink-queue", "droptail", "--uplink-queue-args", "packets=100", "u", "d"],
        SHELL,
    )
    assert opts.uplink_queue == "droptail"
    assert opts.uplink_queue_args == "packets=100"
    assert opts.downlink_queue == "infinite"


def test_link_meter_all_sets_every_meter():
    opts = parse_link_args(["mm-link", "--meter-all", "u", "d"], SHELL)
    assert opts.meter_uplink and opts.meter_downlink
    assert opts.meter_uplink_delay and opts.meter_downlink_delay


def test_link_exact_name_beats_longer_option():
    opts = parse_link_args(["mm-link", "--meter-uplink", "u", "d"], SHELL)
    assert opts.meter_uplink is True
    assert opts.meter_uplink_delay is False


def test_link_unique_prefix_is_accepted():
    opts = parse_link_args(["mm-link", "--on", "u", "d"], SHELL)
    assert opts.repeat is False


@pytest.mark.parametrize("queue", QUEUE_TYPES)
def test_link_accepts_known_queue_types(queue):
    opts = parse_link_args(["mm-link", f"--downlink-queue={queue}", "u", "d"], SHELL)
    assert opts.downlink_queue == queue


def test_link_unknown_queue_type():
    with pytest.raises(UsageError) as info:
        parse_link_args(["mm-link", "--uplink-queue=fifo", "u", "d"], SHELL)
    assert "Unknown queue type: fifo" in info.value.reason


@pytest.mark.parametrize(
    "argv",
    [
        ["mm-link"],
        ["mm-link", "u"],
        ["mm-link", "--once", "u"],
        ["mm-link", "--meter", "u", "d"],
        ["mm-link", "--bogus", "u", "d"],
        ["mm-link", "--once=yes", "u", "d"],
        ["mm-link", "u", "d", "--uplink-queue"],
        ["mm-link", "u", "d", "-u"],
        ["mm-link", "-x", "u", "d"],
    ],
)
def test_link_invalid_arguments(argv):
    with pytest.raises(UsageError) as info:
        parse_link_args(argv, SHELL)
    assert str(info.value) == "invalid arguments"
    assert "QUEUE_TYPE = infinite | droptail | drophead | codel | pie" in info.value.usage


def test_link_dash_in_command_without_separator_is_rejected():
    with pytest.raises(UsageError):
        parse_link_args(["mm-link", "u", "d", "bash", "-c", "true"], SHELL)


def test_delay_parses_and_defaults_command():
    opts = parse_delay_args(["mm-delay", "50"], SHELL)
    assert opts.delay_ms == 50
    assert opts.command == (SHELL,)
    assert opts.shell_prefix == "[delay 50 ms] "


def test_delay_keeps_command_verbatim():
    opts = parse_delay_args(["mm-delay", "20", "ping", "-c", "1"], SHELL)
    assert opts.command == ("ping", "-c", "1")


def test_delay_usage():
    with pytest.raises(UsageError) as info:
        parse_delay_args(["mm-delay"], SHELL)
    assert str(info.value).startswith("Usage: mm-delay")


def test_delay_rejects_bad_number():
    with pytest.raises(ValueError):
        parse_delay_args(["mm-delay", "fast"], SHELL)


def test_loss_uplink():
    opts = parse_loss_args(["mm-loss", "uplink", "0.1"], SHELL)
    assert opts.uplink_loss == 0.1
    assert opts.downlink_loss == 0.0
    assert opts.shell_prefix == "[loss up=0.1] "
    assert opts.command == (SHELL,)


def test_loss_downlink_with_command():
    opts = parse_loss_args(["mm-loss", "downlink", "1", "curl", "x"], SHELL)
    assert opts.downlink_loss == 1.0
    assert opts.uplink_loss == 0.0
    assert opts.command == ("curl", "x")
    assert opts.shell_prefix.startswith("[loss down=")


@pytest.mark.parametrize(
    "argv",
    [["mm-loss", "uplink"], ["mm-loss", "uplink", "1.5"], ["mm-loss", "sideways", "0.2"]],
)
def test_loss_usage_errors(argv):
    with pytest.raises(UsageError) as info:
        parse_loss_args(argv, SHELL)
    assert str(info.value) == "Usage: mm-loss uplink|downlink RATE [COMMAND...]"


def test_loss_out_of_range_reason():
    with pytest.raises(UsageError) as info:
        parse_loss_args(["mm-loss", "uplink", "-0.5"], SHELL)
    assert info.value.reason == "Error: loss rate must be between 0 and 1."


def test_onoff_downlink():
    opts = parse_onoff_args(["mm-onoff", "downlink", "1", "2"], SHELL)
    assert (opts.downlink_on_time, opts.downlink_off_time) == (1.0, 2.0)
    assert opts.uplink_on_time == sys.float_info.max
    assert opts.uplink_off_time == 0.0
    assert opts.shell_prefix == "[onoff (down) on=1s off=2s] "


def test_onoff_uplink_allows_zero_off_time():
    opts = parse_onoff_args(["mm-onoff", "uplink", "3", "0", "sh"], SHELL)
    assert (opts.uplink_on_time, opts.uplink_off_time) == (3.0, 0.0)
    assert opts.downlink_on_time == sys.float_info.max
    assert opts.command == ("sh",)


@pytest.mark.parametrize(
    "argv, reason",
    [
        (["mm-onoff", "uplink", "0", "0"], "Error: mean on-time and off-time cannot both be 0 seconds."),
        (["mm-onoff", "uplink", "-1", "2"], "Error: mean on-time must be more than 0 seconds."),
        (["mm-onoff", "uplink", "1", "-2"], "Error: mean off-time must be more than 0 seconds."),
    ],
)
def test_onoff_rejects_bad_times(argv, reason):
    with pytest.raises(UsageError) as info:
        parse_onoff_args(argv, SHELL)
    assert info.value.reason == reason


def test_onoff_bad_link_and_too_few():
    with pytest.raises(UsageError):
        parse_onoff_args(["mm-onoff", "sideways", "1", "1"], SHELL)
    with pytest.raises(UsageError):
        parse_onoff_args(["mm-onoff", "uplink", "1"], SHELL)


def test_meter_defaults():
    opts = parse_meter_args(["mm-meter"], SHELL)
    assert opts.meter_uplink is False
    assert opts.meter_downlink is False
    assert opts.command == (SHELL,)
    assert (opts.uplink_name, opts.downlink_name) == ("Uplink", "Downlink")


def test_meter_short_cluster_and_command():
    opts = parse_meter_args(["mm-meter", "-ud", "wget", "--", "-q"], SHELL)
    assert opts.meter_uplink and opts.meter_downlink
    assert opts.command == ("wget", "-q")


def test_meter_long_prefix():
    opts = parse_meter_args(["mm-meter", "--meter-d"], SHELL)
    assert opts.meter_downlink is True
    assert opts.meter_uplink is False


def test_meter_unknown_option():
    with pytest.raises(UsageError) as info:
        parse_meter_args(["mm-meter", "-x"], SHELL)
    assert str(info.value) == "Usage: mm-meter [--meter-uplink] [--meter-downlink] [COMMAND...]"