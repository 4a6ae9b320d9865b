"""Interactive selection through fzf.

A picker round is: spawn fzf, write one line per entry to its stdin and
close it, wait for fzf to exit, read back the chosen line. Each line is
``<thumbnail key>\\t<label>``; only the label is shown and searched, the key
lets the preview command find the cached thumbnail.
"""

import shlex
import subprocess
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Any, NamedTuple

from models.config import settings
from services.overlay import OverlaySession
from services.thumbnails import ThumbnailCache
from utils.exceptions import FetchError, ProcessLaunchError, SessionStateError
from utils.logging import get_logger

logger = get_logger(__name__)

FIELD_SEPARATOR = "\t"


class PickerEntry(NamedTuple):
    """One selectable line: the label shown, its thumbnail and the value it stands for."""

    label: str
    thumbnail_url: str | None
    value: Any


class SelectionRound(Mapping):
    """Immutable label -> value table of one picker round."""

    def __init__(self, table: Mapping[str, Any] | None = None) -> None:
        self._table = MappingProxyType(dict(table or {}))

    def __getitem__(self, label: str) -> Any:
        return self._table[label]

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def resolve(self, label: str | None) -> Any | None:
        if label is None:
            return None
        return self._table.get(label)


def clean_label(label: str) -> str:
    """Labels must stay on one line and must not contain the field separator."""
    return " ".join(label.replace(FIELD_SEPARATOR, " ").splitlines()).strip()


class PickerSession:
    """One fzf process at a time, re-spawned for every round."""

    def __init__(self, thumbnails: ThumbnailCache, referer: str | None = None) -> None:
        self.thumbnails = thumbnails
        self.referer = referer
        self.process: subprocess.Popen | None = None
        self.overlay: OverlaySession | None = None
        self.current_round = SelectionRound()

    @property
    def with_preview(self) -> bool:
        return self.overlay is not None

    def build_command(self, overlay: OverlaySession | None = None) -> str:
        """Shell command line for the picker, with preview wiring when an overlay is given."""
        args = [
            settings.picker.command,
            *settings.picker.args,
            "--delimiter",
            FIELD_SEPARATOR,
            "--with-nth",
            "2..",
        ]
        if overlay is not None:
            args.append(f"--preview={self.preview_command(overlay)}")
        return shlex.join(args)

    def preview_command(self, overlay: OverlaySession) -> str:
        # fzf substitutes {1} (already quoted) and expands $FZF_PREVIEW_* in its own shell
        thumbnail = (
            shlex.quote(str(self.thumbnails.directory.absolute()))
            + "/{1}"
            + shlex.quote(self.thumbnails.extension)
        )
        return " ".join(
            [
                shlex.quote(overlay.command),
                "cmd",
                "-s",
                shlex.quote(overlay.connection_id()),
                "-i",
                shlex.quote(settings.overlay.identifier),
                "-a",
                "add",
                "-x",
                '"$FZF_PREVIEW_LEFT"',
                "-y",
                '"$FZF_PREVIEW_TOP"',
                "--max-width",
                '"$FZF_PREVIEW_COLUMNS"',
                "--max-height",
                '"$FZF_PREVIEW_LINES"',
                "-f",
                thumbnail,
            ]
        )

    def spawn(self, overlay: OverlaySession | None = None) -> None:
        """Start a fresh picker, terminating the previous one first.

        Args:
            overlay: A spawned overlay to wire previews to, or None for no preview

        Raises:
            ProcessLaunchError: If the picker cannot be started
        """
        self.exit()
        command = self.build_command(overlay)
        logger.debug(f"Spawning picker: {command}")
        try:
            self.process = subprocess.Popen(
                command,
                shell=True,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                text=True,
                encoding="utf-8",
            )
        except (OSError, subprocess.SubprocessError) as e:
            if overlay is not None:
                overlay.exit()
            raise ProcessLaunchError(f"Failed to start picker: {e}") from e
        self.overlay = overlay
        self.current_round = SelectionRound()

    def write_entries(self, entries: Iterable[PickerEntry]) -> SelectionRound:
        """Write every label to the picker and close its input.

        Missing thumbnails are downloaded inline, best effort, before each
        label is written. Duplicate labels get a numeric suffix so that every
        line maps to exactly one value.

        Returns:
            The round's label table, also kept as the session's current round
        """
        process = self._require_process()
        table: dict[str, Any] = {}
        broken = False
        for entry in entries:
            label = self._unique_label(clean_label(entry.label), table)
            if not label:
                continue
            table[label] = entry.value
            if broken:
                continue
            self._prefetch(label, entry.thumbnail_url)
            try:
                process.stdin.write(f"{self.thumbnails.key_for(label)}{FIELD_SEPARATOR}{label}\n")
            except BrokenPipeError:
                logger.debug("Picker closed its input early")
                broken = True
        try:
            process.stdin.close()
        except BrokenPipeError:
            pass

        self.current_round = SelectionRound(table)
        return self.current_round

    def read_selection(self) -> str | None:
        """Wait for the picker and return the chosen label, or None if cancelled.

        Raises:
            ProcessLaunchError: If the picker's output cannot be read
        """
        process = self._require_process()
        try:
            exit_code = process.wait()
            if exit_code != 0:
                logger.debug(f"Picker exited with code {exit_code}, nothing selected")
                return None
            line = process.stdout.readline()
        except (OSError, ValueError) as e:
            raise ProcessLaunchError(f"Failed to read picker selection: {e}") from e

        line = line.rstrip("\r\n")
        if not line:
            return None
        _, _, label = line.partition(FIELD_SEPARATOR)
        return label or None

    def resolve(self, label: str | None) -> Any | None:
        """Map a label back to its value in the current round (None if absent)."""
        return self.current_round.resolve(label)

    def exit(self) -> None:
        """Tear down the overlay (if wired) and kill the picker. Idempotent, never raises."""
        overlay, self.overlay = self.overlay, None
        if overlay is not None:
            overlay.exit()

        process, self.process = self.process, None
        if process is None:
            return
        try:
            if process.poll() is None:
                process.kill()
            process.wait()
        except OSError as e:
            logger.warning(f"Failed to terminate picker: {e}")
        for stream in (process.stdin, process.stdout):
            if stream is None:
                continue
            try:
                stream.close()
            except OSError:
                pass

    def __enter__(self) -> "PickerSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.exit()

    def _require_process(self) -> subprocess.Popen:
        if self.process is None:
            raise SessionStateError("Picker is not running, call spawn() first")
        return self.process

    def _prefetch(self, label: str, thumbnail_url: str | None) -> None:
        if not settings.picker.prefetch_thumbnails or not thumbnail_url:
            return
        if self.thumbnails.exists(label):
            return
        try:
            self.thumbnails.fetch(thumbnail_url, label, self.referer)
        except FetchError as e:
            logger.debug(f"No thumbnail for '{label}': {e}")

    @staticmethod
    def _unique_label(label: str, taken: Mapping[str, Any]) -> str:
        if not label or label not in taken:
            return label
        n = 2
        while f"{label} ({n})" in taken:
            n += 1
        return f"{label} ({n})"
