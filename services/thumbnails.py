"""Disk cache of episode/anime thumbnails used by the picker preview.

Files live in the workspace's thumbnails directory and are named after a
digest of the entry label, so the preview command can locate them from
the picker line alone.
"""

import hashlib
import os
import tempfile
from pathlib import Path

import requests

from models.config import Workspace, settings
from utils.exceptions import FetchError
from utils.logging import get_logger

logger = get_logger(__name__)


class ThumbnailCache:
    def __init__(self, workspace: Workspace) -> None:
        self.workspace = workspace

    @property
    def directory(self) -> Path:
        return self.workspace.thumbnails_dir

    @property
    def extension(self) -> str:
        return self.workspace.thumbnail_extension

    @staticmethod
    def key_for(label: str) -> str:
        """Deterministic file stem for a label."""
        return hashlib.sha1(label.encode("utf-8")).hexdigest()

    def path_for(self, label: str) -> Path:
        return self.directory / f"{self.key_for(label)}{self.extension}"

    def exists(self, label: str) -> bool:
        return self.path_for(label).is_file()

    def fetch(self, url: str, label: str, referer: str | None = None) -> Path:
        """Download a thumbnail and store it under the label's path.

        The body is fully downloaded before anything is written, then saved
        through a temporary file and renamed, so a failed fetch never leaves
        a file that exists() would report.

        Raises:
            FetchError: On timeout, transport failure, HTTP error or write failure
        """
        headers = {"User-Agent": settings.http.user_agent}
        if referer:
            headers["Referer"] = referer
        try:
            response = requests.get(url, headers=headers, timeout=settings.http.timeout_seconds)
            response.raise_for_status()
            content = response.content
        except requests.RequestException as e:
            raise FetchError(f"Failed to download thumbnail {url}: {e}") from e

        target = self.path_for(label)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, partial = tempfile.mkstemp(dir=self.directory, suffix=".part")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(content)
                os.replace(partial, target)
            except BaseException:
                Path(partial).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise FetchError(f"Failed to store thumbnail for '{label}': {e}") from e

        logger.debug(f"Cached thumbnail for '{label}' at {target}")
        return target
