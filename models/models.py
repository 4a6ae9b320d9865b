"""Pydantic data models for structured data transfer.

Defines DTOs (Data Transfer Objects) for:
- Episode: A playable episode from a scraper listing
- AnimePage: An anime series found by a text search
"""

from typing import TypeAlias

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Type aliases for common patterns
EpisodeName: TypeAlias = str
EpisodeURL: TypeAlias = str


class Episode(BaseModel):
    """Episode from a scraper listing.

    Attributes:
        name: Display name, also the label shown in the picker and the
            thumbnail cache key
        url: Site-specific episode URL, resolved lazily to a stream
        thumbnail_url: Optional thumbnail image URL
    """

    model_config = ConfigDict(frozen=True)

    name: EpisodeName = Field(..., min_length=1, description="Episode display name")
    url: EpisodeURL = Field(..., min_length=1, description="Episode page URL")
    thumbnail_url: str | None = Field(None, description="Thumbnail image URL")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        """Collapse surrounding whitespace so labels round-trip through the picker."""
        v = v.strip()
        if not v:
            raise ValueError("Episode name must not be blank")
        return v


class AnimePage(BaseModel):
    """Anime series returned by a text search.

    Attributes:
        id: Site-specific identifier (absent on sites without an API id)
        title: Series title (label shown in the picker)
        slug: URL slug, when the site has one
        synopsis: Short description
        total_episodes: Number of episodes, None when unknown
        generic_path: URL of the episode listing
        thumbnail: Cover image URL
    """

    model_config = ConfigDict(frozen=True)

    id: str | None = Field(None, description="Site-specific identifier")
    title: str = Field(..., min_length=1, description="Anime title")
    slug: str | None = Field(None, description="URL slug")
    synopsis: str | None = Field(None, description="Synopsis")
    total_episodes: int | None = Field(None, ge=0, description="Episode count (None = unknown)")
    generic_path: str | None = Field(None, description="Episode listing URL")
    thumbnail: str | None = Field(None, description="Cover image URL")

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Anime title must not be blank")
        return v
