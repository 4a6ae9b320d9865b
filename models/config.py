"""Application configuration using Pydantic v2.

Centralized settings for bakashi-cli including:
- HTTP timeouts and headers used by the scrapers
- Picker (fzf), overlay (ueberzug) and player (mpv) commands
- Temporary workspace for thumbnails and the overlay PID file
- Scraper origin selection

Configuration can be overridden via environment variables:
    BAKASHI__HTTP__TIMEOUT_SECONDS=30
    BAKASHI__OVERLAY__ENABLED=false
    BAKASHI__SCRAPERS__DEFAULT_ORIGIN=bakashi
"""

import os
import tempfile
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_data_path() -> Path:
    """Get OS-specific data directory for bakashi-cli.

    Returns:
        Path: ~/.local/state/bakashi-cli (Linux/macOS) or %LOCALAPPDATA%\\bakashi-cli (Windows)
    """
    if os.name == "nt":
        return Path(os.environ.get("LOCALAPPDATA", Path.home())) / "bakashi-cli"
    return Path.home() / ".local" / "state" / "bakashi-cli"


class HttpSettings(BaseModel):
    """HTTP client configuration shared by every scraper."""

    timeout_seconds: float = Field(
        60.0,
        gt=0,
        le=600,
        description="Timeout for every network call (connect + read)",
    )
    user_agent: str = Field(
        "Mozilla/5.0 (X11; Linux x86_64; rv:128.0) Gecko/20100101 Firefox/128.0",
        min_length=1,
        description="User-Agent header sent to the sites",
    )


class PathSettings(BaseModel):
    """Temporary filesystem layout."""

    temp_dir: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()) / "bakashi-cli",
        description="Workspace root holding the thumbnail cache and the overlay PID file",
    )
    thumbnail_extension: str = Field(
        ".jpg",
        pattern=r"^\.[A-Za-z0-9]+$",
        description="File extension used for cached thumbnails",
    )


class PickerSettings(BaseModel):
    """Fuzzy picker (fzf) configuration."""

    command: str = Field("fzf", min_length=1, description="Picker executable")
    args: list[str] = Field(
        default_factory=lambda: ["--reverse"],
        description="Extra arguments passed to the picker",
    )
    prefetch_thumbnails: bool = Field(
        True,
        description="Download missing thumbnails while writing the listing",
    )


class OverlaySettings(BaseModel):
    """Terminal image overlay (ueberzug/ueberzugpp) configuration."""

    enabled: bool = Field(True, description="Allow thumbnail previews when available")
    command: str = Field("ueberzug", min_length=1, description="Overlay executable")
    identifier: str = Field(
        "bakashi-cli",
        min_length=1,
        description="Image identifier used for preview add commands",
    )
    socket_dir: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()),
        description="Directory where the overlay creates its socket",
    )
    socket_prefix: str = Field(
        "ueberzugpp-",
        description="Socket file prefix, followed by the overlay PID",
    )


class PlayerSettings(BaseModel):
    """Media player (mpv) configuration."""

    command: str = Field("mpv", min_length=1, description="Player executable")
    args: list[str] = Field(
        default_factory=lambda: ["--fullscreen"],
        description="Extra arguments passed to the player",
    )


class ScraperSettings(BaseModel):
    """Scraper/origin selection."""

    default_origin: str = Field(
        "anroll",
        min_length=1,
        description="Origin used when none (or an unknown one) is requested",
    )
    languages: list[str] = Field(
        default_factory=lambda: ["pt-br"],
        description="Languages whose plugins get loaded",
    )
    disabled_plugins: list[str] = Field(
        default_factory=list,
        description="List of disabled plugin names (e.g., ['bakashi'])",
    )


class AppSettings(BaseSettings):
    """Root application settings with environment variable support.

    Environment variables use the prefix BAKASHI__ with nested delimiters:
    - BAKASHI__HTTP__TIMEOUT_SECONDS=30
    - BAKASHI__PICKER__COMMAND=/usr/local/bin/fzf
    - BAKASHI__SCRAPERS__DEFAULT_ORIGIN=bakashi

    Can also be configured via .env file in project root.
    """

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",  # BAKASHI__HTTP__TIMEOUT_SECONDS
        env_prefix="BAKASHI__",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )

    http: HttpSettings = Field(default_factory=HttpSettings)
    paths: PathSettings = Field(default_factory=PathSettings)
    picker: PickerSettings = Field(default_factory=PickerSettings)
    overlay: OverlaySettings = Field(default_factory=OverlaySettings)
    player: PlayerSettings = Field(default_factory=PlayerSettings)
    scrapers: ScraperSettings = Field(default_factory=ScraperSettings)


class Workspace(BaseModel):
    """Filesystem layout for one run.

    Passed explicitly to the thumbnail cache and the overlay session instead
    of living in module-level constants.
    """

    root: Path
    thumbnail_extension: str = ".jpg"

    @classmethod
    def from_settings(cls, app_settings: AppSettings | None = None) -> "Workspace":
        app_settings = app_settings or settings
        return cls(
            root=app_settings.paths.temp_dir,
            thumbnail_extension=app_settings.paths.thumbnail_extension,
        )

    @property
    def thumbnails_dir(self) -> Path:
        return self.root / "thumbnails"

    @property
    def overlay_pid_file(self) -> Path:
        return self.root / ".overlay.pid"

    def prepare(self) -> "Workspace":
        """Create the workspace directories (idempotent)."""
        self.thumbnails_dir.mkdir(parents=True, exist_ok=True)
        return self


# Singleton instance - import and use throughout the app
settings = AppSettings()
