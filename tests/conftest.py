import pathlib

import pytest
import requests

import aoc_setup

REPO_ROOT = pathlib.Path(__file__).resolve().parent.parent


class FakeResponse:
    def __init__(self, status_code: int = 200, content: bytes = b""):
        self.status_code = status_code
        self.content = content

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    @property
    def text(self) -> str:
        return self.content.decode("utf-8")


class FakeSession(requests.Session):
    """requests.Session answering from a url -> response table."""

    def __init__(self, routes):
        super().__init__()
        self.routes = routes
        self.requested = []

    def get(self, url, **kwargs):
        self.requested.append(url)
        answer = self.routes.get(url, FakeResponse(404))
        if isinstance(answer, Exception):
            raise answer
        return answer


def page(*blocks: str) -> bytes:
    articles = "".join(f'<article class="day-desc">{b}</article>' for b in blocks)
    return f"<html><body><main>{articles}<p>Your puzzle answer was...</p></main></body></html>".encode()


@pytest.fixture
def template(tmp_path):
    root = tmp_path / "challenges" / "day00"
    (root / "src").mkdir(parents=True)
    (root / "day00.py").write_text('class Day00:\n    NAME = "day00"\n')
    (root / "Cargo.toml").write_text('[package]\nname = "DAY00"\n')
    (root / "src" / "notes.txt").write_text("nothing to replace here\n")
    return root


@pytest.fixture
def make_fetcher():
    def make(routes, year=2021, session_id="abc123"):
        session = FakeSession(routes)
        return aoc_setup.PuzzleFetcher(session_id, year, session=session), session
    return make
