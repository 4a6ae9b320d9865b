import subprocess

from models.config import settings
from utils.exceptions import VideoPlaybackError
from utils.logging import get_logger

logger = get_logger(__name__)


def build_player_command(url: str, referer: str, title: str) -> list[str]:
    return [
        settings.player.command,
        *settings.player.args,
        f"--force-media-title={title}",
        f"--http-header-fields=Referer: {referer}",
        url,
    ]


def play_video(url: str, referer: str, title: str, debug: bool = False) -> int:
    """Play a stream with mpv and wait for the player to close.

    Args:
        url: Stream URL (m3u8 or mp4)
        referer: Site origin, sent as Referer header (most CDNs require it)
        title: Media title shown by the player
        debug: Skip playback and return 0

    Returns:
        The player's exit code

    Raises:
        VideoPlaybackError: If mpv is not installed or cannot be started
    """
    if debug:
        logger.info(f"DEBUG MODE: Skipping playback of {url}")
        return 0

    command = build_player_command(url, referer, title)
    logger.debug(f"Starting player for '{title}'")
    try:
        result = subprocess.run(
            command,
            check=False,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except FileNotFoundError as e:
        # Handle the case where mpv is not installed or not in PATH
        msg = f"Error: '{settings.player.command}' is not installed or not found in the system PATH."
        raise VideoPlaybackError(msg) from e
    except OSError as e:
        raise VideoPlaybackError(f"Failed to start player: {e}") from e

    if result.returncode not in (0, 4):  # 4 = interrupted by a signal
        logger.warning(f"Player exited with code {result.returncode} for '{title}'")
    return result.returncode
