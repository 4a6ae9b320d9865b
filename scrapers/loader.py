import importlib
from os import listdir
from os.path import abspath, dirname, isfile, join
from typing import Protocol, runtime_checkable

from models.models import AnimePage, Episode
from utils.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class ScraperProtocol(Protocol):
    """Protocol for anime site scrapers.

    Scrapers implementing this protocol turn a site's HTML/JSON into
    Episode and AnimePage models. Uses structural typing (duck typing) -
    no inheritance required.
    """

    name: str  # Registry key (e.g., "bakashi")
    languages: list[str]  # Supported languages (e.g., ["pt-br"])

    def referer(self) -> str:
        """Site origin, used as Referer header and as URL-join base."""
        ...

    def latest_episodes(self) -> list[Episode]:
        """Fetch the site's latest releases, in the order the site shows them.

        Raises:
            FetchError: On timeout, transport or parse failure
        """
        ...

    def find_pages(self, query: str) -> list[AnimePage]:
        """Search anime by title.

        Returns:
            Matching pages; an empty list means no results

        Raises:
            FetchError: On timeout, transport or parse failure
        """
        ...

    def episodes_of_page(self, page: AnimePage) -> list[Episode]:
        """Expand an anime page into its episode list.

        Raises:
            FetchError: On timeout, transport or parse failure
        """
        ...

    def resolve_stream_url(self, episode_url: str) -> str:
        """Extract a directly playable URL (m3u8 or mp4) from an episode URL.

        Raises:
            ResolutionError: When the page lacks the expected player structure
            FetchError: On timeout or transport failure
        """
        ...


def get_resource_path(relative_path):
    """Path of a resource shipped inside the scrapers package."""
    return join(dirname(abspath(__file__)), relative_path)


def available_plugins() -> list[str]:
    """Names of every plugin module shipped in scrapers/plugins/."""
    path = get_resource_path("plugins/")
    system = {"__init__.py", "utils.py"}
    return sorted(
        file[:-3]
        for file in listdir(path)
        if isfile(join(path, file)) and file.endswith(".py") and file not in system
    )


def load_plugins(languages, plugins=None) -> None:
    """Load plugins based on preferences and language filters.

    Args:
        languages: Iterable of supported languages (e.g., {"pt-br"})
        plugins: Optional list of specific plugins to load (overrides preferences)
                 If None, loads all plugins except disabled ones
    """
    from models.config import settings

    if plugins is None:
        disabled_plugins = {name.lower() for name in settings.scrapers.disabled_plugins}
        plugins = [p for p in available_plugins() if p not in disabled_plugins]

    # Load each enabled plugin
    for plugin in plugins:
        plugin_module = importlib.import_module("scrapers.plugins." + plugin)
        plugin_module.load(set(languages))
        logger.debug(f"Plugin '{plugin}' loaded")
