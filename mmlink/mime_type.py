"""Media types as given in a Content-Type header."""

from __future__ import annotations

from .tokenize import split


class MIMEType:
    """The media type of a Content-Type value; parameters are not parsed."""

    def __init__(self, content_type: str) -> None:
        type_and_parameters = split(content_type, ";")
        if not type_and_parameters or not type_and_parameters[0]:
            raise ValueError("MIMEType: invalid MIME media-type string")
        self._type = type_and_parameters[0]

    @property
    def type(self) -> str:
        return self._type

    def __repr__(self) -> str:
        return f"MIMEType({self._type!r})"