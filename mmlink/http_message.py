"""The parts common to HTTP requests and responses."""

from __future__ import annotations

import enum
import string
from abc import ABC, abstractmethod
from typing import Iterable

from .http_header import HTTPHeader

CRLF = "\r\n"

_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


class HTTPMessageState(enum.IntEnum):
    FIRST_LINE_PENDING = 0
    HEADERS_PENDING = 1
    BODY_PENDING = 2
    COMPLETE = 3


def equivalent_strings(a: str, b: str) -> bool:
    """Compare two strings ASCII case-insensitively, ignoring leading spaces."""
    return a.lstrip(" ").translate(_ASCII_LOWER) == b.lstrip(" ").translate(_ASCII_LOWER)


class HTTPMessage(ABC):
    """A request or response, built up by a parser or given whole."""

    def __init__(
        self,
        first_line: str | None = None,
        headers: Iterable[HTTPHeader | str] = (),
        body: str = "",
    ) -> None:
        self._expected_body_size: tuple[bool, int | None] = (False, None)
        if first_line is None:
            if tuple(headers) or body:
                raise ValueError("HTTPMessage: headers or body given without a first line")
            self._first_line = ""
            self._headers: list[HTTPHeader] = []
            self._body = ""
            self._state = HTTPMessageState.FIRST_LINE_PENDING
        else:
            self._first_line = first_line
            self._headers = [
                h if isinstance(h, HTTPHeader) else HTTPHeader.from_line(h) for h in headers
            ]
            self._body = body
            self._state = HTTPMessageState.COMPLETE

    @abstractmethod
    def _calculate_expected_body_size(self) -> None:
        """Decide the body length once the headers are in."""

    @abstractmethod
    def _read_in_complex_body(self, data: str) -> int:
        """Take body data whose length was not known in advance."""

    @abstractmethod
    def _eof_in_body(self) -> bool:
        """Whether EOF in the body completes the message."""

    def _require(self, condition: bool, what: str) -> None:
        if not condition:
            raise RuntimeError(f"HTTPMessage: {what} (state {self._state.name})")

    def _set_expected_body_size(self, is_known: bool, value: int | None = None) -> None:
        self._require(self._state == HTTPMessageState.BODY_PENDING, "body size set outside body")
        self._expected_body_size = (is_known, value)

    @property
    def state(self) -> HTTPMessageState:
        return self._state

    @property
    def first_line(self) -> str:
        return self._first_line

    @property
    def headers(self) -> tuple[HTTPHeader, ...]:
        return tuple(self._headers)

    @property
    def body(self) -> str:
        return self._body

    def set_first_line(self, line: str) -> None:
        self._require(
            self._state == HTTPMessageState.FIRST_LINE_PENDING, "first line already set"
        )
        self._first_line = line
        self._state = HTTPMessageState.HEADERS_PENDING

    def add_header(self, line: str) -> None:
        self._require(self._state == HTTPMessageState.HEADERS_PENDING, "header out of place")
        self._headers.append(HTTPHeader.from_line(line))

    def done_with_headers(self) -> None:
        self._require(self._state == HTTPMessageState.HEADERS_PENDING, "headers not pending")
        self._state = HTTPMessageState.BODY_PENDING
        self._calculate_expected_body_size()

    def read_in_body(self, data: str) -> int:
        """Append body data; return how much of ``data`` was taken."""
        self._require(self._state == HTTPMessageState.BODY_PENDING, "body not pending")
        if not self.body_size_is_known():
            return self._read_in_complex_body(data)

        expected = self.expected_body_size()
        amount = min(expected - len(self._body), len(data))
        self._body += data[:amount]
        if len(self._body) == expected:
            self._state = HTTPMessageState.COMPLETE
        return amount

    def eof(self) -> None:
        if self._state == HTTPMessageState.FIRST_LINE_PENDING:
            return
        if self._state == HTTPMessageState.HEADERS_PENDING:
            raise ValueError("HTTPMessage: EOF received in middle of headers")
        if self._state == HTTPMessageState.BODY_PENDING:
            if self._eof_in_body():
                self._state = HTTPMessageState.COMPLETE
            return
        raise RuntimeError("HTTPMessage: EOF on a complete message")

    def body_size_is_known(self) -> bool:
        self._require(self._state > HTTPMessageState.HEADERS_PENDING, "headers not finished")
        return self._expected_body_size[0]

    def expected_body_size(self) -> int:
        self._require(self.body_size_is_known(), "body size not known")
        size = self._expected_body_size[1]
        assert size is not None
        return size

    def has_header(self, header_name: str) -> bool:
        return any(equivalent_strings(h.key, header_name) for h in self._headers)

    def get_header_value(self, header_name: str) -> str:
        for header in self._headers:
            if equivalent_strings(header.key, header_name):
                return header.value
        raise KeyError(f"HTTPMessage header not found: {header_name}")

    def serialize(self) -> str:
        """The whole message as it goes on the wire."""
        self._require(self._state == HTTPMessageState.COMPLETE, "message not complete")
        lines = [self._first_line, *(str(h) for h in self._headers)]
        return "".join(line + CRLF for line in lines) + CRLF + self._body