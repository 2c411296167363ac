"""Choosing the stored request that best matches an incoming one."""

from __future__ import annotations

import os
from typing import Mapping

from .http_request import HTTPRequest


def strip_query(request_line: str) -> str:
    """The request line up to, not including, the first ``?``."""
    return request_line.partition("?")[0]


def header_match(
    environ: Mapping[str, str],
    env_var_name: str,
    header_name: str,
    saved_request: HTTPRequest,
) -> bool:
    """Whether the incoming header (from ``environ``) agrees with the stored one."""
    env_value = environ.get(env_var_name)
    saved_has = saved_request.has_header(header_name)
    if env_value is None and not saved_has:
        return True
    if env_value is not None and saved_has:
        return saved_request.get_header_value(header_name) == env_value
    return False


def match_score(
    saved_request: HTTPRequest,
    saved_is_https: bool,
    request_line: str,
    is_https: bool,
    environ: Mapping[str, str] | None = None,
) -> int:
    """Length of the common prefix of the request lines, or 0 for no match."""
    if environ is None:
        environ = os.environ

    if is_https != saved_is_https:
        return 0
    if not header_match(environ, "HTTP_HOST", "Host", saved_request):
        return 0
    if not header_match(environ, "HTTP_USER_AGENT", "User-Agent", saved_request):
        return 0

    saved_line = saved_request.first_line
    if strip_query(request_line) != strip_query(saved_line):
        return 0

    score = 0
    for ours, theirs in zip(request_line, saved_line):
        if ours != theirs:
            break
        score += 1
    return score