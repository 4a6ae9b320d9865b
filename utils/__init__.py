"""Utilities and helper functions.

Consolidated utilities:
- exceptions: Exception hierarchy
- logging: loguru setup
- video_player: mpv launch for playback
"""

from utils import exceptions, logging, video_player
from utils.video_player import play_video

__all__ = [
    "exceptions",
    "logging",
    "video_player",
    "play_video",
]
