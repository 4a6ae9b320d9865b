"""Command handlers for bakashi-cli.

Each module handles a specific user interaction flow:
- anime.py: Latest/search selection and playback
- sources.py: Origin listing
"""

from commands.anime import anime, interactive
from commands.sources import list_sources

__all__ = ["anime", "interactive", "list_sources"]
