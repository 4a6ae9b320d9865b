"""
End-to-end selection flow tests (services/selection.py)

Coverage:
- Latest episodes flow, single and repeated rounds
- Search flow: no results, page pick, episode pick, play all
- Cancellation and fetch failures end flows without errors
- Preview wiring and overlay fallback
- Playback loop and resolution failures
"""

from unittest.mock import patch

import pytest

from models import Episode
from services.picker import PickerSession
from services.selection import PLAY_ALL, PLAY_ALL_LABEL, SelectionOrchestrator
from utils.exceptions import VideoPlaybackError

from tests.conftest import FakeOverlay, FakeScraper


@pytest.fixture
def orchestrator(fake_scraper, workspace, fzf, no_overlay):
    with SelectionOrchestrator(fake_scraper, workspace) as orch:
        yield orch


class TestLatestFlow:
    def test_pick_one_latest_episode(self, orchestrator, fzf, one_piece_episodes):
        fzf.choices = ["One Piece 2"]

        selected = orchestrator.latest_flow()

        assert selected == [one_piece_episodes[1]]
        assert fzf.processes[0].labels == ["One Piece 1", "One Piece 2", "One Piece 3"]

    def test_repeated_rounds_respawn_picker(self, orchestrator, fzf, one_piece_episodes):
        fzf.choices = ["One Piece 3", "One Piece 1"]

        selected = orchestrator.latest_flow(rounds=2)

        assert selected == [one_piece_episodes[2], one_piece_episodes[0]]
        assert len(fzf.processes) == 2

    def test_cancel_ends_flow(self, orchestrator, fzf):
        fzf.choices = [None]

        assert orchestrator.latest_flow(rounds=3) == []
        assert len(fzf.processes) == 1

    def test_fetch_error_ends_flow_without_picker(self, failing_scraper, workspace, fzf, no_overlay):
        with SelectionOrchestrator(failing_scraper, workspace) as orch:
            assert orch.latest_flow() == []
        assert fzf.processes == []


class TestSearchFlow:
    def test_zero_pages_ends_without_picker_round(self, orchestrator, fzf):
        assert orchestrator.search_flow("naruto") == []
        assert fzf.processes == []

    def test_fetch_error_ends_flow(self, failing_scraper, workspace, fzf, no_overlay):
        with SelectionOrchestrator(failing_scraper, workspace) as orch:
            assert orch.search_flow("naruto") == []
        assert fzf.processes == []

    def test_play_all_is_appended_by_orchestrator(self, orchestrator, fzf):
        fzf.choices = ["One Piece", None]

        orchestrator.search_flow("one piece")

        pages_round, episodes_round = fzf.processes
        assert pages_round.labels == ["One Piece"]
        assert episodes_round.labels == [
            "One Piece 1",
            "One Piece 2",
            "One Piece 3",
            PLAY_ALL_LABEL,
        ]

    def test_picker_is_respawned_between_rounds(self, orchestrator, fzf):
        fzf.choices = ["One Piece", "One Piece 1"]

        orchestrator.search_flow("one piece")

        assert len(fzf.processes) == 2
        assert fzf.processes[0].stdin.closed
        assert orchestrator.picker.process is fzf.processes[1]

    def test_select_play_all_returns_scraper_episodes_in_order(
        self, orchestrator, fzf, one_piece_episodes
    ):
        fzf.choices = ["One Piece", PLAY_ALL_LABEL]

        selected = orchestrator.search_flow("one piece")

        assert selected == one_piece_episodes
        assert all(isinstance(episode, Episode) for episode in selected)

    def test_select_single_episode(self, orchestrator, fzf):
        fzf.choices = ["One Piece", "One Piece 1"]

        selected = orchestrator.search_flow("one piece")

        assert len(selected) == 1
        assert selected[0].name == "One Piece 1"

    def test_cancel_page_pick(self, orchestrator, fzf):
        fzf.choices = [None]

        assert orchestrator.search_flow("one piece") == []
        assert len(fzf.processes) == 1

    def test_cancel_episode_pick(self, orchestrator, fzf):
        fzf.choices = ["One Piece", None]

        assert orchestrator.search_flow("one piece") == []

    def test_episode_titled_like_play_all_is_not_confused(
        self, one_piece_page, workspace, fzf, no_overlay
    ):
        tricky = Episode(name=PLAY_ALL_LABEL, url="https://fake.example/e/x")
        other = Episode(name="One Piece 1", url="https://fake.example/e/1")
        scraper = FakeScraper(
            pages={"one piece": [one_piece_page]},
            episodes={"One Piece": [tricky, other]},
        )
        fzf.choices = ["One Piece", PLAY_ALL_LABEL]

        with SelectionOrchestrator(scraper, workspace) as orch:
            selected = orch.search_flow("one piece")

        assert selected == [tricky]
        assert f"{PLAY_ALL_LABEL} (2)" in fzf.processes[-1].labels

    def test_play_all_sentinel_is_not_a_string(self):
        assert not isinstance(PLAY_ALL, str)


class TestPreviewWiring:
    def test_overlay_absent_spawns_without_preview(self, fake_scraper, workspace, fzf, no_overlay):
        fzf.choices = ["One Piece 1"]
        factory_calls = []

        with SelectionOrchestrator(
            fake_scraper, workspace, overlay_factory=lambda: factory_calls.append(1)
        ) as orch:
            orch.latest_flow()

        assert factory_calls == []
        assert "--preview" not in fzf.processes[0].command

    def test_overlay_present_wires_preview(self, fake_scraper, workspace, fzf):
        fzf.choices = ["One Piece 1"]
        overlays = []

        def factory():
            overlays.append(FakeOverlay(pid=str(1000 + len(overlays))))
            return overlays[-1]

        with patch("services.selection.OverlaySession.is_available", return_value=True):
            with SelectionOrchestrator(fake_scraper, workspace, overlay_factory=factory) as orch:
                orch.latest_flow()

        assert "ueberzugpp-1000.socket" in fzf.processes[0].command
        assert overlays[0].exit_calls == 1

    def test_each_preview_round_gets_a_fresh_overlay(self, fake_scraper, workspace, fzf):
        fzf.choices = ["One Piece", "One Piece 2"]
        overlays = []

        def factory():
            overlays.append(FakeOverlay(pid=str(1000 + len(overlays))))
            return overlays[-1]

        with patch("services.selection.OverlaySession.is_available", return_value=True):
            with SelectionOrchestrator(fake_scraper, workspace, overlay_factory=factory) as orch:
                orch.search_flow("one piece")

        assert len(overlays) == 2
        assert "ueberzugpp-1001.socket" in fzf.processes[1].command
        assert all(overlay.exit_calls == 1 for overlay in overlays)

    def test_overlay_spawn_failure_falls_back_to_no_preview(self, fake_scraper, workspace, fzf):
        fzf.choices = ["One Piece 1"]

        with patch("services.selection.OverlaySession.is_available", return_value=True):
            with SelectionOrchestrator(
                fake_scraper, workspace, overlay_factory=lambda: FakeOverlay(fail=True)
            ) as orch:
                selected = orch.latest_flow()

        assert [episode.name for episode in selected] == ["One Piece 1"]
        assert "--preview" not in fzf.processes[0].command
        assert orch.preview is False

    def test_no_preview_flag_never_probes_overlay(self, fake_scraper, workspace, fzf):
        fzf.choices = ["One Piece 1"]
        with patch("services.selection.OverlaySession.is_available") as probe:
            with SelectionOrchestrator(fake_scraper, workspace, preview=False) as orch:
                orch.latest_flow()
        probe.assert_not_called()


class TestLifecycle:
    def test_exit_on_error_path(self, fake_scraper, workspace, fzf, no_overlay):
        fzf.choices = ["One Piece 1"]
        with pytest.raises(RuntimeError):
            with SelectionOrchestrator(fake_scraper, workspace) as orch:
                orch.picker.spawn()
                raise RuntimeError("boom")
        assert fzf.processes[-1].killed
        assert orch.picker.process is None

    def test_uses_given_picker(self, fake_scraper, workspace, thumbnails, no_overlay):
        picker = PickerSession(thumbnails)
        orch = SelectionOrchestrator(fake_scraper, workspace, picker=picker)
        assert orch.picker is picker


class TestPlay:
    @patch("services.selection.play_video", return_value=0)
    def test_plays_each_episode_with_referer_and_title(
        self, mock_play, orchestrator, one_piece_episodes
    ):
        played = orchestrator.play(one_piece_episodes)

        assert played == 3
        first_call = mock_play.call_args_list[0]
        assert first_call.args == (
            "https://fake.example/e/1/stream.m3u8",
            "https://fake.example",
            "One Piece 1",
            False,
        )

    @patch("services.selection.play_video", return_value=0)
    def test_resolution_failure_skips_to_next(
        self, mock_play, orchestrator, fake_scraper, one_piece_episodes
    ):
        fake_scraper.broken_urls.add(one_piece_episodes[0].url)

        played = orchestrator.play(one_piece_episodes)

        assert played == 2
        assert [call.args[2] for call in mock_play.call_args_list] == ["One Piece 2", "One Piece 3"]

    @patch("services.selection.play_video", side_effect=VideoPlaybackError("mpv missing"))
    def test_missing_player_stops(self, mock_play, orchestrator, one_piece_episodes):
        assert orchestrator.play(one_piece_episodes) == 0
        assert mock_play.call_count == 1
