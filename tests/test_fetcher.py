import pytest
import requests

from aoc_setup import FetchError, HttpError, PuzzleFetcher
from conftest import FakeResponse, FakeSession

DAY_URL = "https://adventofcode.com/2021/day/5"


def test_session_cookie_is_attached(make_fetcher):
    fetcher, session = make_fetcher({})
    assert session.cookies.get("session") == "abc123"


def test_no_cookie_without_credential():
    session = FakeSession({})
    PuzzleFetcher(None, 2021, session=session)
    assert session.cookies.get("session") is None


def test_fetch_input_returns_raw_bytes(make_fetcher):
    payload = b"1,2,3\n\xff"
    fetcher, session = make_fetcher({f"{DAY_URL}/input": FakeResponse(200, payload)})

    assert fetcher.fetch_input(5) == payload
    assert session.requested == [f"{DAY_URL}/input"]


def test_fetch_page_uses_year_and_day(make_fetcher):
    url = "https://adventofcode.com/2020/day/17"
    fetcher, session = make_fetcher({url: FakeResponse(200, b"<html></html>")}, year=2020)

    assert fetcher.fetch_page(17) == "<html></html>"
    assert session.requested == [url]


def test_custom_base_url():
    session = FakeSession({"http://localhost:8000/2021/day/1": FakeResponse(200, b"ok")})
    fetcher = PuzzleFetcher("abc", 2021, base_url="http://localhost:8000/", session=session)
    assert fetcher.fetch_page(1) == "ok"


@pytest.mark.parametrize("status", [400, 404, 500])
def test_error_status_raises_http_error(make_fetcher, status):
    fetcher, _ = make_fetcher({f"{DAY_URL}/input": FakeResponse(status)})

    with pytest.raises(HttpError) as excinfo:
        fetcher.fetch_input(5)
    assert excinfo.value.status == status
    assert excinfo.value.url == f"{DAY_URL}/input"


def test_transport_failure_raises_fetch_error(make_fetcher):
    fetcher, session = make_fetcher({DAY_URL: requests.ConnectionError("refused")})

    with pytest.raises(FetchError):
        fetcher.fetch_page(5)
    assert session.requested == [DAY_URL]
