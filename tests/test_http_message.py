import pytest

from mmlink.http_header import HTTPHeader
from mmlink.http_message import (
    CRLF,
    HTTPMessage,
    HTTPMessageState,
    equivalent_strings,
)


class _Message(HTTPMessage):
    def _calculate_expected_body_size(self):
        if self.has_header("Content-Length"):
            self._set_expected_body_size(True, int(self.get_header_value("Content-Length")))
        else:
            self._set_expected_body_size(False)

    def _read_in_complex_body(self, data):
        self._body += data
        return len(data)

    def _eof_in_body(self):
        return True


def _with_headers(*headers):
    message = _Message()
    message.set_first_line("GET / HTTP/1.1")
    for header in headers:
        message.add_header(header)
    message.done_with_headers()
    return message


def test_states_advance():
    message = _Message()
    assert message.state == HTTPMessageState.FIRST_LINE_PENDING
    message.set_first_line("GET / HTTP/1.1")
    assert message.state == HTTPMessageState.HEADERS_PENDING
    message.add_header(str(HTTPHeader("Content-Length", "5")))
    message.done_with_headers()
    assert message.state == HTTPMessageState.BODY_PENDING
    assert message.body_size_is_known()
    assert message.expected_body_size() == 5
    assert message.read_in_body("hello") == 5
    assert message.state == HTTPMessageState.COMPLETE


def test_known_body_takes_only_what_it_needs():
    message = _with_headers(str(HTTPHeader("Content-Length", "3")))
    data = "abcdef"
    taken = message.read_in_body(data)
    assert data[:taken] == message.body
    assert len(message.body) == message.expected_body_size()
    assert message.state == HTTPMessageState.COMPLETE


def test_known_body_in_pieces():
    message = _with_headers(str(HTTPHeader("Content-Length", "4")))
    assert message.read_in_body("ab") == 2
    assert message.state == HTTPMessageState.BODY_PENDING
    assert message.read_in_body("cdXYZ") == 2
    assert message.body == "abcd"


def test_serialize():
    message = _with_headers(str(HTTPHeader("Content-Length", "5")))
    message.read_in_body("hello")
    assert message.serialize() == "GET / HTTP/1.1\r\nContent-Length: 5\r\n\r\nhello"


def test_complete_message_from_parts_round_trips():
    message = _Message("HTTP/1.1 200 OK", [HTTPHeader("Server", "x"), "Content-Length: 0"], "")
    assert message.state == HTTPMessageState.COMPLETE
    text = message.serialize()
    assert text.startswith(message.first_line + CRLF)
    assert text.endswith(CRLF + CRLF)
    assert message.get_header_value("server") == "x"


def test_headers_without_first_line_rejected():
    with pytest.raises(ValueError):
        _Message(headers=[HTTPHeader("Host", "example.com")])


def test_first_line_twice_raises():
    message = _Message()
    message.set_first_line("GET / HTTP/1.1")
    with pytest.raises(RuntimeError):
        message.set_first_line("GET / HTTP/1.1")
    assert equivalent_strings(message.first_line, "get / http/1.1")


def test_serialize_incomplete_raises():
    message = _with_headers(str(HTTPHeader("Content-Length", "2")))
    with pytest.raises(RuntimeError):
        message.serialize()


def test_body_size_before_headers_done_raises():
    message = _Message()
    message.set_first_line("GET / HTTP/1.1")
    message.add_header(str(HTTPHeader("Host", "example.com")))
    with pytest.raises(RuntimeError):
        message.body_size_is_known()


def test_eof_before_first_line_is_harmless():
    message = _Message()
    message.eof()
    assert message.state == HTTPMessageState.FIRST_LINE_PENDING
    message.set_first_line("GET / HTTP/1.1")
    message.add_header(str(HTTPHeader("Host", "example.com")))
    assert message.has_header("host")
    assert message.state == HTTPMessageState.HEADERS_PENDING


def test_eof_in_headers_raises():
    message = _Message()
    message.set_first_line("GET / HTTP/1.1")
    message.add_header(str(HTTPHeader("Host", "example.com")))
    with pytest.raises(ValueError):
        message.eof()


def test_eof_completes_unknown_body():
    message = _with_headers(str(HTTPHeader("Host", "example.com")))
    assert not message.body_size_is_known()
    assert message.read_in_body("some data") == len("some data")
    message.eof()
    assert message.state == HTTPMessageState.COMPLETE
    assert message.body == "some data"


def test_eof_on_complete_raises():
    message = _Message("GET / HTTP/1.1", [HTTPHeader("Host", "example.com")])
    assert message.state == HTTPMessageState.COMPLETE
    with pytest.raises(RuntimeError):
        message.eof()


def test_header_lookup_is_case_insensitive():
    message = _with_headers(
        str(HTTPHeader("Host", "example.com")),
        str(HTTPHeader("User-Agent", "test")),
    )
    assert message.has_header("HOST")
    assert message.get_header_value("user-agent") == "test"
    assert not message.has_header("Cookie")


def test_missing_header_raises_key_error():
    message = _with_headers(str(HTTPHeader("Host", "example.com")))
    with pytest.raises(KeyError):
        message.get_header_value("Cookie")


def test_first_matching_header_wins():
    message = _with_headers(
        str(HTTPHeader("X-Dup", "first")),
        str(HTTPHeader("x-dup", "second")),
    )
    assert message.get_header_value("X-DUP") == "first"


@pytest.mark.parametrize(
    "a, b, expected",
    [
        ("Content-Length", "content-length", True),
        ("  chunked", "CHUNKED", True),
        ("chunked ", "chunked", False),
        ("gzip", "chunked", False),
        ("", "   ", True),
    ],
)
def test_equivalent_strings(a, b, expected):
    assert equivalent_strings(a, b) is expected


def test_equivalent_strings_is_ascii_only():
    assert not equivalent_strings("\u00c9", "\u00e9")