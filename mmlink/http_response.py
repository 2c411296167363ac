"""HTTP responses and the rules that decide their body length."""

from __future__ import annotations

from typing import Iterable

from .body_parser import BodyParser, ChunkedBodyParser, Rule5BodyParser
from .http_header import HTTPHeader
from .http_message import HTTPMessage, HTTPMessageState, equivalent_strings
from .http_request import HTTPRequest, _parse_content_length
from .mime_type import MIMEType
from .tokenize import split


class HTTPResponse(HTTPMessage):
    """A response, paired with the request it answers."""

    def __init__(
        self,
        first_line: str | None = None,
        headers: Iterable[HTTPHeader | str] = (),
        body: str = "",
        request: HTTPRequest | None = None,
    ) -> None:
        super().__init__(first_line, headers, body)
        self._request = request if request is not None else HTTPRequest()
        self._body_parser: BodyParser | None = None

    @property
    def request(self) -> HTTPRequest:
        return self._request

    def set_request(self, request: HTTPRequest) -> None:
        self._require(
            self._state == HTTPMessageState.FIRST_LINE_PENDING,
            "request set after status line",
        )
        self._request = request

    def status_code(self) -> str:
        self._require(self._state > HTTPMessageState.FIRST_LINE_PENDING, "no status line yet")
        tokens = split(self._first_line, " ")
        if len(tokens) < 3:
            raise ValueError(f"HTTPResponse: Invalid status line: {self._first_line}")
        return tokens[1]

    def _calculate_expected_body_size(self) -> None:
        # RFC 2616 section 4.4, "Message Length"
        code = self.status_code()
        if not code:
            raise ValueError(f"HTTPResponse: Invalid status line: {self._first_line}")

        if code[0] == "1" or code in ("204", "304") or self._request.is_head():
            self._set_expected_body_size(True, 0)
        elif self.has_header("Transfer-Encoding") and equivalent_strings(
            split(self.get_header_value("Transfer-Encoding"), ",")[-1], "chunked"
        ):
            self._set_expected_body_size(False)
            self._body_parser = ChunkedBodyParser(self.has_header("Trailer"))
        elif not self.has_header("Transfer-Encoding") and self.has_header("Content-Length"):
            self._set_expected_body_size(
                True, _parse_content_length(self.get_header_value("Content-Length"))
            )
        elif self.has_header("Content-Type") and equivalent_strings(
            MIMEType(self.get_header_value("Content-Type")).type, "multipart/byteranges"
        ):
            self._set_expected_body_size(False)
            raise ValueError(
                "HTTPResponse: unsupported multipart/byteranges without Content-Length"
            )
        else:
            self._set_expected_body_size(False)
            self._body_parser = Rule5BodyParser()

    def _read_in_complex_body(self, data: str) -> int:
        self._require(self._state == HTTPMessageState.BODY_PENDING, "body not pending")
        if self._body_parser is None:
            raise RuntimeError("HTTPResponse: no body parser")
        amount = self._body_parser.read(data)
        if amount is None:
            self._body += data
            return len(data)
        self._body += data[:amount]
        self._state = HTTPMessageState.COMPLETE
        return amount

    def _eof_in_body(self) -> bool:
        if self._body_parser is not None:
            return self._body_parser.eof()
        raise ValueError("HTTPResponse: got EOF in middle of body")