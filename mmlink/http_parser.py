"""Turning a stream of text into a sequence of HTTP messages."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from typing import Generic, TypeVar

from .http_message import CRLF, HTTPMessage, HTTPMessageState
from .http_request import HTTPRequest
from .http_response import HTTPResponse

M = TypeVar("M", bound=HTTPMessage)


class HTTPMessageSequence(ABC, Generic[M]):
    """Accumulates data and yields complete messages in arrival order."""

    def __init__(self) -> None:
        self._buffer = ""
        self._complete: deque[M] = deque()
        self._in_progress: M = self._new_message()

    @abstractmethod
    def _new_message(self) -> M:
        """A fresh, empty message."""

    @abstractmethod
    def _initialize_new_message(self) -> None:
        """Prepare the message in progress before its first line is set."""

    def _pop_line(self) -> str | None:
        line, sep, rest = self._buffer.partition(CRLF)
        if not sep:
            return None
        self._buffer = rest
        return line

    def _parsing_step(self) -> bool:
        message = self._in_progress
        state = message.state

        if state == HTTPMessageState.FIRST_LINE_PENDING:
            if CRLF not in self._buffer:
                return False
            self._initialize_new_message()
            line = self._pop_line()
            assert line is not None
            message.set_first_line(line)
            return True

        if state == HTTPMessageState.HEADERS_PENDING:
            line = self._pop_line()
            if line is None:
                return False
            if line:
                message.add_header(line)
            else:
                message.done_with_headers()
            return True

        if state == HTTPMessageState.BODY_PENDING:
            taken = message.read_in_body(self._buffer)
            self._buffer = self._buffer[taken:]
            return message.state == HTTPMessageState.COMPLETE

        self._complete.append(message)
        self._in_progress = self._new_message()
        return True

    def parse(self, data: str) -> None:
        """Take all of ``data``; an empty string signals EOF."""
        if not data:
            self._in_progress.eof()
        self._buffer += data
        while self._parsing_step():
            pass

    def empty(self) -> bool:
        return not self._complete

    def front(self) -> M:
        """The oldest complete message; IndexError if there is none."""
        return self._complete[0]

    def pop(self) -> M:
        """Remove and return the oldest complete message."""
        return self._complete.popleft()

    def __len__(self) -> int:
        return len(self._complete)


class HTTPRequestParser(HTTPMessageSequence[HTTPRequest]):
    """Parses a client's stream of requests."""

    def _new_message(self) -> HTTPRequest:
        return HTTPRequest()

    def _initialize_new_message(self) -> None:
        pass


class HTTPResponseParser(HTTPMessageSequence[HTTPResponse]):
    """Parses a server's responses, pairing each with its request."""

    def __init__(self) -> None:
        self._requests: deque[HTTPRequest] = deque()
        super().__init__()

    def _new_message(self) -> HTTPResponse:
        return HTTPResponse()

    def _initialize_new_message(self) -> None:
        if not self._requests:
            raise ValueError("HTTPResponseParser: response without matching request")
        self._in_progress.set_request(self._requests.popleft())

    def new_request_arrived(self, request: HTTPRequest) -> None:
        self._requests.append(request)