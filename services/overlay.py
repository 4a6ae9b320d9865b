"""Lifecycle of the terminal image overlay (ueberzug/ueberzugpp).

The overlay daemon is started once per preview-enabled picker round. The
launch command forks the daemon, writes its PID to the workspace PID file
and exits; the picker's preview command then talks to the daemon through a
socket whose path is derived from that PID.
"""

import subprocess
from enum import Enum
from pathlib import Path

from models.config import Workspace, settings
from utils.exceptions import ProcessLaunchError, SessionStateError
from utils.logging import get_logger

logger = get_logger(__name__)


class OverlayState(str, Enum):
    UNSPAWNED = "unspawned"
    SPAWNED = "spawned"
    EXITED = "exited"


class OverlaySession:
    """One overlay daemon: Unspawned -> Spawned -> Exited, never re-spawned."""

    def __init__(self, workspace: Workspace, command: str | None = None) -> None:
        self.workspace = workspace
        self.command = command or settings.overlay.command
        self.state = OverlayState.UNSPAWNED
        self.pid: str | None = None

    @classmethod
    def is_available(cls, command: str | None = None) -> bool:
        """Check whether the overlay binary runs at all.

        Any failure (missing binary, non-zero exit) means "not available".
        """
        try:
            result = subprocess.run(
                [command or settings.overlay.command, "--version"],
                check=False,
                capture_output=True,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug(f"Overlay not available: {e}")
            return False
        return result.returncode == 0

    @property
    def pid_file(self) -> Path:
        return self.workspace.overlay_pid_file

    def spawn(self) -> None:
        """Launch the overlay daemon and record its PID.

        Raises:
            ProcessLaunchError: If the launcher fails or the PID cannot be read
            SessionStateError: If this session was already spawned or exited
        """
        if self.state is not OverlayState.UNSPAWNED:
            raise SessionStateError(f"Overlay session is {self.state.value}, cannot spawn")

        try:
            self.pid_file.parent.mkdir(parents=True, exist_ok=True)
            self.pid_file.unlink(missing_ok=True)
        except OSError as e:
            raise ProcessLaunchError(f"Cannot prepare PID file {self.pid_file}: {e}") from e
        exit_code = self._execute(
            "layer",
            "--no-stdin",
            "--silent",
            "--use-escape-codes",
            "--pid-file",
            str(self.pid_file.absolute()),
        )
        if exit_code != 0:
            raise ProcessLaunchError(f"Overlay exited with code: {exit_code}")

        try:
            pid = self.pid_file.read_text().strip()
        except OSError as e:
            raise ProcessLaunchError(f"Failed to read PID from file: {self.pid_file}") from e
        if not pid.isdigit():
            raise ProcessLaunchError(f"Invalid overlay PID {pid!r} in {self.pid_file}")

        self.pid = pid
        self.state = OverlayState.SPAWNED
        logger.debug(f"Overlay spawned with PID {pid}")

    def connection_id(self) -> str:
        """Socket path of the running overlay.

        Raises:
            SessionStateError: If spawn() has not completed
        """
        if self.pid is None:
            raise SessionStateError("Overlay process is not initialized.")
        return str(Path(settings.overlay.socket_dir) / f"{settings.overlay.socket_prefix}{self.pid}.socket")

    def exit(self) -> int | None:
        """Ask the overlay to close. Never raises; no-op unless spawned.

        Returns:
            The close command's exit code, or None if nothing was sent
        """
        if self.state is not OverlayState.SPAWNED:
            return None
        self.state = OverlayState.EXITED
        try:
            exit_code = self._execute("cmd", "-s", self.connection_id(), "-a", "exit")
        except ProcessLaunchError as e:
            logger.warning(f"Failed to send exit to overlay: {e}")
            return None
        if exit_code != 0:
            logger.warning(f"Overlay (send exit process) exited with code: {exit_code}")
        return exit_code

    def _execute(self, *args: str) -> int:
        try:
            return subprocess.run(
                [self.command, *args],
                check=False,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            ).returncode
        except (OSError, subprocess.SubprocessError) as e:
            raise ProcessLaunchError(f"Failed to execute {self.command}: {e}") from e
