"""Business logic services layer.

Core services for bakashi-cli:
- repository: Registry of scraper origins
- thumbnails: Disk cache of preview thumbnails
- overlay: Terminal image overlay (ueberzug) session
- picker: fzf picker session
- selection: Latest/search selection flows and playback
"""

from services import overlay, picker, repository, selection, thumbnails

__all__ = [
    "overlay",
    "picker",
    "repository",
    "selection",
    "thumbnails",
]
