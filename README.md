# mmlink

`mmlink` is a library of building blocks for emulating network links and
for replaying recorded web traffic. It uses only the standard library.

It contains:

- **Link queues** (`mmlink.delay_queue`, `mmlink.loss_queue`,
  `mmlink.meter_queue`, `mmlink.link_queue`) that decide when each packet
  crossing an emulated link is released.
- **An incremental HTTP/1.1 parser** (`mmlink.http_parser`, with the message
  classes in `mmlink.http_message`, `mmlink.http_request`,
  `mmlink.http_response` and the body parsers in `mmlink.body_parser`).
- **Replay matching** (`mmlink.replay`): scoring a stored request against an
  incoming one.
- **Command-line option parsing** for link, delay, loss, on/off and meter
  shells (`mmlink.options`).

## Link queues

Every queue has the same interface, so one event loop can drive any of them:

- `read_packet(contents)` accepts a packet (`bytes`) arriving at the link.
- `wait_time()` returns how many milliseconds the loop may sleep before the
  queue next needs attention. An idle `DelayQueue`, `LossQueue` or
  `MeterQueue` returns 65535.
- `pending_output()` says whether packets are ready to go on.
- `write_packets(out)` calls `out.write(packet)` for every released packet.
- `finished()` is true only for a `LinkQueue` set to run its trace once,
  after the trace has run out.

The queues:

- `DelayQueue(delay_ms, clock=None)` releases each packet `delay_ms`
  milliseconds after it arrived. A negative delay raises `ValueError`.
- `IIDLoss(loss_rate, rng=None)` drops each packet independently with
  probability `loss_rate` (which must lie between 0 and 1) and passes the
  rest on at once.
- `SwitchingLink(mean_on_time, mean_off_time, clock=None, rng=None)` turns
  the link on and off. The periods are exponentially distributed around the
  given means, in seconds; packets that arrive while the link is off are
  dropped. Both means must be non-negative and not both zero. `link_is_on`
  reports the current state; it is brought up to date by `wait_time()`.
- `MeterQueue(name)` passes packets on at once and keeps a running count in
  `total_bytes`.
- `LinkQueue(link_name, filename, logfile=None, repeat=True,
  packet_queue=None, command_line="", clock=None)` replays a trace of
  delivery opportunities; see below.

`IIDLoss` and `SwitchingLink` derive from the abstract `LossQueue`.

Time-dependent queues take `clock`, a callable returning the current time in
milliseconds; by default a monotonic clock is used. The random queues take
`rng`, a `random.Random`. Passing both makes a queue's behaviour
reproducible:

```python
from mmlink.delay_queue import DelayQueue

now = 0
queue = DelayQueue(50, clock=lambda: now)

queue.read_packet(b"payload")
queue.wait_time()        # 50
now = 50
queue.pending_output()   # True
```

### Trace-driven links

A trace file lists delivery times in milliseconds, one per line:

```
1
1
5
10
```

Timestamps must be whole numbers, must never decrease, and the last must be
greater than zero; empty lines are not allowed. `load_schedule(filename)`
reads and checks such a file, raising `OSError` if it cannot be opened and
`ValueError`, naming the file, if it breaks a rule.

At each listed time, measured from when the `LinkQueue` was made, up to
`LinkQueue.PACKET_SIZE` (1504) bytes leave the queue; a larger packet given
to `read_packet` raises `ValueError`. A packet may span several
opportunities. When the trace ends it starts over, offset by its last
timestamp, unless `repeat` is false, in which case the link finishes.

Packets wait in `packet_queue`, any object with `enqueue(packet)`,
`dequeue()`, `empty()`, `size_bytes()` and `size_packets()`, holding
`QueuedPacket(contents, arrival_time)` values. The default is an unbounded
FIFO that never drops. If the queue discards packets on enqueue, the drop is
logged.

With `logfile`, the link writes a header (link name, trace, command line,
queue, timestamps and `MAHIMAHI_SHELL_PREFIX` if set) and then one line per
event: `TIME + SIZE` for an arrival, `TIME d PACKETS BYTES` for a drop,
`TIME # 1504` for a delivery opportunity, and `TIME - SIZE DELAY` for a
departure. `LinkQueue` is a context manager; `close()` closes the log.

## Parsing HTTP

The parsers take text (`str`) as it arrives; an empty string means the
connection reached end of file. Complete messages are taken from the front:

```python
from mmlink.http_parser import HTTPRequestParser, HTTPResponseParser

requests = HTTPRequestParser()
responses = HTTPResponseParser()

requests.parse("GET /index.html HTTP/1.1\r\nHost: example.com\r\n\r\n")
while not requests.empty():
    responses.new_request_arrived(requests.pop())

responses.parse("HTTP/1.1 200 OK\r\nContent-Length: 5\r\n\r\nhello")
response = responses.pop()
response.status_code()                     # "200"
response.get_header_value("content-length") # "5"
response.body                              # "hello"
```

`front()` returns the oldest complete message without removing it, `pop()`
removes and returns it, and `len()` counts the complete messages.

A response parser must be given each request, through `new_request_arrived`,
before its response's status line arrives; otherwise `ValueError` is raised.
Response bodies are sized by RFC 2616 section 4.4: no body for 1xx, 204 and
304 responses or answers to `HEAD`; chunked transfer coding
(`ChunkedBodyParser`); `Content-Length`; otherwise the body runs to end of
file (`Rule5BodyParser`). `multipart/byteranges` without a length is
rejected. Requests may be `GET`, `HEAD` or `POST` (with `Content-Length`).

Header names are compared case-insensitively in ASCII, ignoring leading
spaces (`equivalent_strings`); `get_header_value` raises `KeyError` for a
missing header. A complete message can be built directly, e.g.
`HTTPRequest("GET / HTTP/1.1", ["Host: example.com"])`, and written out with
`serialize()`. `HTTPHeader.from_line` parses one header line.
`split` (in `mmlink.tokenize`) and `MIMEType` are the helpers the parsers use.

## Replay matching

`match_score(saved_request, saved_is_https, request_line, is_https,
environ=None)` returns 0 if a stored request cannot answer the incoming one,
and otherwise the length of the common prefix of the two request lines. A
match needs the same scheme, the same request line up to `?`
(`strip_query`), and `Host` and `User-Agent` headers that agree with
`HTTP_HOST` and `HTTP_USER_AGENT` in `environ` (default `os.environ`):
present in both and equal, or absent from both (`header_match`).

## Command-line options

```python
from mmlink.options import parse_link_args, UsageError

try:
    options = parse_link_args(
        ["mm-link", "--once", "--uplink-queue=droptail", "up.trace", "down.trace"],
        default_shell="/bin/sh",
    )
except UsageError as error:
    print(error.usage or error, error.reason)
```

`parse_link_args`, `parse_delay_args`, `parse_loss_args`,
`parse_onoff_args` and `parse_meter_args` each take the full argument list
(program name first) and return a frozen options object (`LinkOptions`,
`DelayOptions`, `LossOptions`, `OnOffOptions`, `MeterOptions`), including
the prompt prefix in `shell_prefix`. Without a command the command is
`(default_shell,)`. Invalid arguments raise `UsageError`, whose `usage`
holds the full help text where there is one and `reason` says what was
wrong. `shell_quote` quotes one argument for a POSIX shell;
`LinkOptions.command_line` is the whole command line quoted this way.

## What this package does not do

- It provides no commands. Nothing creates network namespaces or virtual
  interfaces, moves real packets, or starts a shell; the option parsers only
  describe what such a command would run.
- Of the queue types that `parse_link_args` accepts (`infinite`,
  `droptail`, `drophead`, `codel`, `pie`), only an unbounded FIFO is built
  in; other disciplines must be supplied as a `packet_queue`.
- There are no live throughput or delay graphs.
- There is no recording proxy, no stored-recording format and no replay web
  server; `match_score` only scores requests handed to it.