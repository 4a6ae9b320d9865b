"""
Shared test fixtures and configuration for bakashi-cli test suite.

This module provides:
- Workspace and thumbnail cache fixtures rooted in tmp_path
- A scripted stand-in for the fzf process (no real picker is spawned)
- A fake overlay and a fake scraper
- Registry cleanup fixtures for state management
"""

import io
from unittest.mock import Mock, patch

import pytest

from models import AnimePage, Episode, Workspace
from services.repository import Repository
from services.thumbnails import ThumbnailCache
from utils.exceptions import FetchError


# ========== Workspace Fixtures ==========


@pytest.fixture
def workspace(tmp_path):
    """Workspace under a temporary directory."""
    return Workspace(root=tmp_path / "bakashi").prepare()


@pytest.fixture
def thumbnails(workspace):
    return ThumbnailCache(workspace)


# ========== Registry Fixtures ==========


@pytest.fixture
def registry():
    """Empty Repository, restored after the test."""
    repo = Repository()
    saved = dict(repo.sources)
    repo.clear()
    yield repo
    repo.clear()
    repo.sources.update(saved)


# ========== Fake fzf ==========


class CapturingStdin(io.StringIO):
    """StringIO that keeps its content after close(), like a pipe already read."""

    captured = None

    def close(self):
        if not self.closed:
            self.captured = self.getvalue()
        super().close()

    @property
    def text(self):
        return self.captured if self.closed else self.getvalue()


class FakePickerProcess:
    """Mimics fzf: reads every line, then prints the chosen one and exits 0."""

    def __init__(self, command, choose):
        self.command = command
        self.stdin = CapturingStdin()
        self.stdout = io.StringIO()
        self.returncode = None
        self.killed = False
        self._choose = choose

    @property
    def lines(self):
        return self.stdin.text.splitlines()

    @property
    def labels(self):
        return [line.split("\t", 1)[1] for line in self.lines]

    def wait(self, timeout=None):
        if self.returncode is None:
            line = self._choose(self.lines)
            if line is None:
                self.returncode = 130
            else:
                self.stdout = io.StringIO(line + "\n")
                self.returncode = 0
        return self.returncode

    def poll(self):
        return self.returncode

    def kill(self):
        self.killed = True
        if self.returncode is None:
            self.returncode = -9


class FakeFzf:
    """Popen replacement; each spawned picker picks the next queued label."""

    def __init__(self):
        self.choices = []
        self.processes = []

    def __call__(self, command, **kwargs):
        process = FakePickerProcess(command, self._choose)
        self.processes.append(process)
        return process

    def _choose(self, lines):
        label = self.choices.pop(0) if self.choices else None
        if label is None:
            return None
        for line in lines:
            if line.split("\t", 1)[1] == label:
                return line
        return None


@pytest.fixture
def fzf():
    """Patch subprocess.Popen in the picker with a scripted fake fzf."""
    fake = FakeFzf()
    with patch("services.picker.subprocess.Popen", side_effect=fake):
        yield fake


# ========== Fake Overlay ==========


class FakeOverlay:
    command = "ueberzug"

    def __init__(self, pid="4242", fail=False):
        self.pid = pid
        self.fail = fail
        self.spawned = False
        self.exit_calls = 0

    def spawn(self):
        from utils.exceptions import ProcessLaunchError

        if self.fail:
            raise ProcessLaunchError("Overlay exited with code: 1")
        self.spawned = True

    def connection_id(self):
        return f"/tmp/ueberzugpp-{self.pid}.socket"

    def exit(self):
        self.exit_calls += 1


@pytest.fixture
def fake_overlay():
    return FakeOverlay()


@pytest.fixture
def no_overlay():
    """Pretend the overlay binary is missing."""
    with patch("services.selection.OverlaySession.is_available", return_value=False) as mock:
        yield mock


# ========== Fake Scraper ==========


class FakeScraper:
    """In-memory scraper with One Piece data."""

    name = "fake"
    languages = ["pt-br"]

    def __init__(self, pages=None, episodes=None, latest=None):
        self.pages = pages if pages is not None else {}
        self.episodes = episodes if episodes is not None else {}
        self.latest = latest if latest is not None else []
        self.resolved = []
        self.broken_urls = set()

    def referer(self):
        return "https://fake.example"

    def latest_episodes(self):
        return list(self.latest)

    def find_pages(self, query):
        return list(self.pages.get(query, []))

    def episodes_of_page(self, page):
        return list(self.episodes.get(page.title, []))

    def resolve_stream_url(self, episode_url):
        from utils.exceptions import ResolutionError

        if episode_url in self.broken_urls:
            raise ResolutionError(f"No player in {episode_url}")
        self.resolved.append(episode_url)
        return episode_url + "/stream.m3u8"


@pytest.fixture
def one_piece_page():
    return AnimePage(
        id="1",
        title="One Piece",
        slug="one-piece",
        synopsis="Piratas.",
        total_episodes=3,
        generic_path="https://fake.example/a/one-piece",
    )


@pytest.fixture
def one_piece_episodes():
    return [
        Episode(name=f"One Piece {n}", url=f"https://fake.example/e/{n}") for n in range(1, 4)
    ]


@pytest.fixture
def fake_scraper(one_piece_page, one_piece_episodes):
    return FakeScraper(
        pages={"one piece": [one_piece_page]},
        episodes={"One Piece": one_piece_episodes},
        latest=one_piece_episodes,
    )


@pytest.fixture
def failing_scraper():
    scraper = Mock(spec=FakeScraper)
    scraper.name = "failing"
    scraper.referer.return_value = "https://fake.example"
    scraper.latest_episodes.side_effect = FetchError("Timed out fetching https://fake.example")
    scraper.find_pages.side_effect = FetchError("Timed out fetching https://fake.example")
    return scraper
