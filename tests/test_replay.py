import pytest

from mmlink.http_request import HTTPRequest
from mmlink.replay import header_match, match_score, strip_query

LINE = "GET /page?x=1 HTTP/1.1"
SAVED = HTTPRequest(LINE, ["Host: example.com", "User-Agent: tester"])
ENV = {"HTTP_HOST": "example.com", "HTTP_USER_AGENT": "tester"}


def test_strip_query_cuts_at_question_mark():
    assert strip_query(LINE) == "GET /page"


def test_strip_query_without_query_is_identity():
    line = "GET /page HTTP/1.1"
    assert strip_query(line) == line


def test_header_match_both_missing():
    request = HTTPRequest("GET / HTTP/1.1")
    assert header_match({}, "HTTP_HOST", "Host", request) is True


def test_header_match_equal_values():
    assert header_match(ENV, "HTTP_HOST", "Host", SAVED) is True


def test_header_match_differing_values():
    assert header_match({"HTTP_HOST": "other.example.com"}, "HTTP_HOST", "Host", SAVED) is False


def test_header_match_only_one_present():
    assert header_match({}, "HTTP_HOST", "Host", SAVED) is False
    bare = HTTPRequest("GET / HTTP/1.1")
    assert header_match({"HTTP_HOST": ""}, "HTTP_HOST", "Host", bare) is False


def test_identical_request_scores_full_length():
    assert match_score(SAVED, False, LINE, False, ENV) == len(LINE)


def test_scheme_mismatch_scores_zero():
    assert match_score(SAVED, False, LINE, True, ENV) == 0
    assert match_score(SAVED, True, LINE, False, ENV) == 0


def test_other_path_scores_zero():
    assert match_score(SAVED, False, "GET /other HTTP/1.1", False, ENV) == 0


def test_other_query_scores_common_prefix():
    score = match_score(SAVED, False, "GET /page?y=2 HTTP/1.1", False, ENV)
    assert score == len("GET /page?")


def test_closer_query_scores_higher():
    near = match_score(SAVED, False, "GET /page?x=2 HTTP/1.1", False, ENV)
    far = match_score(SAVED, False, "GET /page?z=2 HTTP/1.1", False, ENV)
    assert near > far > 0


@pytest.mark.parametrize(
    "environ",
    [
        {"HTTP_USER_AGENT": "tester"},
        {"HTTP_HOST": "example.com"},
        {"HTTP_HOST": "example.com", "HTTP_USER_AGENT": "someone else"},
    ],
)
def test_header_mismatch_scores_zero(environ):
    assert match_score(SAVED, False, LINE, False, environ) == 0