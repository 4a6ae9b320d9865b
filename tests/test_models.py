"""
Tests for models/models.py

Coverage:
- Episode and AnimePage creation
- Whitespace normalization of labels
- Validation errors for blank or negative fields
- Immutability
"""

import pytest
from pydantic import ValidationError

from models import AnimePage, Episode


class TestEpisode:
    def test_minimal_episode(self):
        episode = Episode(name="One Piece 1", url="https://anroll.net/e/abc")
        assert episode.thumbnail_url is None

    def test_name_is_stripped(self):
        episode = Episode(name="  One Piece 1\n", url="https://anroll.net/e/abc")
        assert episode.name == "One Piece 1"

    @pytest.mark.parametrize("name", ["", "   "])
    def test_blank_name_rejected(self, name):
        with pytest.raises(ValidationError):
            Episode(name=name, url="https://anroll.net/e/abc")

    def test_url_required(self):
        with pytest.raises(ValidationError):
            Episode(name="One Piece 1", url="")

    def test_frozen(self):
        episode = Episode(name="One Piece 1", url="https://anroll.net/e/abc")
        with pytest.raises(ValidationError):
            episode.name = "Naruto 1"

    def test_equal_by_value(self):
        a = Episode(name="One Piece 1", url="https://anroll.net/e/abc")
        b = Episode(name="One Piece 1", url="https://anroll.net/e/abc")
        assert a == b


class TestAnimePage:
    def test_full_page(self):
        page = AnimePage(
            id="42",
            title="One Piece",
            slug="one-piece",
            synopsis="Piratas.",
            total_episodes=1100,
            generic_path="/a/one-piece",
            thumbnail="https://static.anroll.net/images/animes/capas/one-piece.jpg",
        )
        assert page.total_episodes == 1100

    def test_unknown_episode_count(self):
        page = AnimePage(title="Naruto")
        assert page.total_episodes is None

    def test_negative_episode_count_rejected(self):
        with pytest.raises(ValidationError):
            AnimePage(title="Naruto", total_episodes=-1)

    def test_title_is_stripped(self):
        assert AnimePage(title=" Naruto ").title == "Naruto"

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError):
            AnimePage(title="  ")
