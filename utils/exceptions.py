"""Custom exception hierarchy for bakashi-cli.

Provides specific exception types for different failure scenarios,
making error handling more precise and testable.
"""


class BakashiError(Exception):
    """Base exception for all bakashi-cli errors."""

    pass


class ScraperError(BakashiError):
    """Raised when a scraper plugin fails to execute."""

    pass


class FetchError(ScraperError):
    """Raised when a remote resource cannot be reached or read.

    Covers timeouts, transport failures, HTTP error statuses and
    unparseable responses.
    """

    pass


class ResolutionError(ScraperError):
    """Raised when a stream URL cannot be extracted from an episode page."""

    pass


class ScraperNotFoundError(ScraperError):
    """Raised when a requested scraper/plugin is not available."""

    pass


class ProcessLaunchError(BakashiError):
    """Raised when a required subprocess fails to start or exits unexpectedly."""

    pass


class SessionStateError(BakashiError, RuntimeError):
    """Raised when a session operation is called in the wrong state."""

    pass


class VideoPlaybackError(BakashiError):
    """Raised when video playback fails."""

    pass
