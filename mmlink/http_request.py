"""HTTP requests."""

from __future__ import annotations

from .http_message import HTTPMessage, HTTPMessageState


def _parse_content_length(value: str) -> int:
    text = value.strip()
    if not (text.isascii() and text.isdigit()):
        raise ValueError(f"invalid Content-Length: {value!r}")
    return int(text)


class HTTPRequest(HTTPMessage):
    """A request; its body length is always known from the headers."""

    def _calculate_expected_body_size(self) -> None:
        line = self._first_line
        if line.startswith("GET ") or line.startswith("HEAD "):
            self._set_expected_body_size(True, 0)
        elif line.startswith("POST "):
            if not self.has_header("Content-Length"):
                raise ValueError("HTTPRequest: does not support chunked requests")
            self._set_expected_body_size(
                True, _parse_content_length(self.get_header_value("Content-Length"))
            )
        else:
            raise ValueError(f"Cannot handle HTTP method: {line}")

    def _read_in_complex_body(self, data: str) -> int:
        raise ValueError("HTTPRequest: does not support chunked requests")

    def _eof_in_body(self) -> bool:
        raise ValueError("HTTPRequest: got EOF in middle of body")

    def is_head(self) -> bool:
        """Whether this is a HEAD request; the method is case-sensitive."""
        self._require(self._state > HTTPMessageState.FIRST_LINE_PENDING, "no request line yet")
        return self._first_line.startswith("HEAD ")