"""Selection flows tying a scraper, the fzf picker and the image overlay together.

Two flows are supported:
- latest: list the origin's latest releases and pick one episode per round
- search: search pages, pick one, then pick an episode (or all of them)

Both return the selected episodes; nothing selected is a normal outcome and
yields an empty list. Playback happens afterwards, once the picker is gone.
"""

from enum import Enum

from models.config import Workspace, settings
from models.models import AnimePage, Episode
from scrapers.loader import ScraperProtocol
from services.overlay import OverlaySession
from services.picker import PickerEntry, PickerSession
from services.thumbnails import ThumbnailCache
from ui.components import console, loading
from utils.exceptions import FetchError, ProcessLaunchError, ScraperError, VideoPlaybackError
from utils.logging import get_logger
from utils.video_player import play_video

logger = get_logger(__name__)


class Action(Enum):
    """Synthetic picker entries that do not stand for a scraped entity."""

    PLAY_ALL = "play-all"


PLAY_ALL = Action.PLAY_ALL
PLAY_ALL_LABEL = "▶ Assistir todos"


def episode_entries(episodes: list[Episode]) -> list[PickerEntry]:
    return [PickerEntry(episode.name, episode.thumbnail_url, episode) for episode in episodes]


def page_entries(pages: list[AnimePage]) -> list[PickerEntry]:
    return [PickerEntry(page.title, page.thumbnail, page) for page in pages]


class SelectionOrchestrator:
    """Runs picker rounds for one origin.

    Use as a context manager: leaving the block always terminates the picker
    and its overlay, whatever happened inside.
    """

    def __init__(
        self,
        scraper: ScraperProtocol,
        workspace: Workspace | None = None,
        *,
        preview: bool = True,
        picker: PickerSession | None = None,
        overlay_factory=None,
    ) -> None:
        self.scraper = scraper
        self.workspace = (workspace or Workspace.from_settings()).prepare()
        self.thumbnails = ThumbnailCache(self.workspace)
        self.picker = picker or PickerSession(self.thumbnails, scraper.referer())
        self.overlay_factory = overlay_factory or (lambda: OverlaySession(self.workspace))
        self.preview = preview and settings.overlay.enabled
        self._overlay_available: bool | None = None

    @property
    def overlay_available(self) -> bool:
        """Probe the overlay binary once per orchestrator."""
        if self._overlay_available is None:
            self._overlay_available = OverlaySession.is_available()
            if not self._overlay_available:
                logger.info("Overlay not available, previews disabled")
        return self._overlay_available

    def latest_flow(self, rounds: int = 1) -> list[Episode]:
        """Pick up to `rounds` episodes from the latest releases."""
        try:
            with loading("Buscando últimos episódios..."):
                episodes = self.scraper.latest_episodes()
        except FetchError as e:
            self._report_fetch_error(e)
            return []
        if not episodes:
            console.print("[warning]Nenhum episódio recente encontrado.[/warning]")
            return []

        selected = []
        for _ in range(max(rounds, 1)):
            episode = self._pick(episode_entries(episodes))
            if episode is None:
                break
            selected.append(episode)
        return selected

    def search_flow(self, query: str) -> list[Episode]:
        """Search pages, pick one and pick its episode(s)."""
        try:
            with loading(f"Buscando '{query}'..."):
                pages = self.scraper.find_pages(query)
        except FetchError as e:
            self._report_fetch_error(e)
            return []
        if not pages:
            console.print(f"[warning]Nenhum resultado para '{query}'.[/warning]")
            return []

        page = self._pick(page_entries(pages))
        if not isinstance(page, AnimePage):
            return []

        # The label set changes entirely, so the next round gets a new picker
        self.picker.exit()
        try:
            with loading(f"Carregando episódios de '{page.title}'..."):
                episodes = self.scraper.episodes_of_page(page)
        except FetchError as e:
            self._report_fetch_error(e)
            return []
        if not episodes:
            console.print(f"[warning]Nenhum episódio encontrado para '{page.title}'.[/warning]")
            return []

        entries = episode_entries(episodes)
        entries.append(PickerEntry(PLAY_ALL_LABEL, None, PLAY_ALL))
        choice = self._pick(entries)
        if choice is PLAY_ALL:
            return list(episodes)
        if isinstance(choice, Episode):
            return [choice]
        return []

    def play(self, episodes: list[Episode], debug: bool = False) -> int:
        """Resolve and play each episode in order.

        A failed resolution skips to the next episode; a missing player stops.

        Returns:
            Number of episodes handed to the player
        """
        played = 0
        referer = self.scraper.referer()
        for episode in episodes:
            try:
                with loading(f"Buscando vídeo de '{episode.name}'..."):
                    stream_url = self.scraper.resolve_stream_url(episode.url)
            except ScraperError as e:
                logger.error(f"Failed to resolve '{episode.name}': {e}")
                console.print(f"[error]Não foi possível reproduzir '{episode.name}': {e}[/error]")
                continue

            console.print(f"[success]▶ {episode.name}[/success]")
            try:
                play_video(stream_url, referer, episode.name, debug)
            except VideoPlaybackError as e:
                logger.error(str(e))
                console.print(f"[error]{e}[/error]")
                break
            played += 1
        return played

    def close(self) -> None:
        self.picker.exit()

    def __enter__(self) -> "SelectionOrchestrator":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _pick(self, entries: list[PickerEntry]):
        """Run one picker round and return the selected value (None if cancelled)."""
        try:
            self._spawn_picker()
            selection_round = self.picker.write_entries(entries)
            label = self.picker.read_selection()
        except ProcessLaunchError as e:
            logger.error(str(e))
            console.print(f"[error]Falha ao iniciar o seletor: {e}[/error]")
            return None
        return selection_round.resolve(label)

    def _spawn_picker(self) -> None:
        overlay = None
        if self.preview and self.overlay_available:
            candidate = self.overlay_factory()
            try:
                candidate.spawn()
                overlay = candidate
            except ProcessLaunchError as e:
                # No retry: the rest of this run goes without previews
                logger.warning(f"Overlay failed to start, previews disabled: {e}")
                self.preview = False
        self.picker.spawn(overlay)

    def _report_fetch_error(self, error: FetchError) -> None:
        logger.error(f"{self.scraper.name}: {error}")
        console.print(f"[error]Erro ao acessar {self.scraper.referer()}: {error}[/error]")
