from models.config import settings
from scrapers.loader import ScraperProtocol
from utils.exceptions import ScraperNotFoundError
from utils.logging import get_logger

logger = get_logger(__name__)


class Repository:
    """SingletonRepository of scraper origins.

    register should be called by a plugin's load function.
    get for lookups by the command handlers; keys are case-insensitive.
    """

    _instance = None

    def __new__(cls):
        if not Repository._instance:
            Repository._instance = super().__new__(cls)
            Repository._instance.sources = {}
        return Repository._instance

    def register(self, plugin: ScraperProtocol, name: str | None = None) -> None:
        """Register (or replace) a scraper under its lowercase name key."""
        key = (name or plugin.name).lower()
        if key in self.sources:
            logger.debug(f"Replacing scraper registered as '{key}'")
        self.sources[key] = plugin

    def unregister(self, name: str) -> None:
        self.sources.pop(name.lower(), None)

    def clear(self) -> None:
        """Forget every registered scraper."""
        self.sources.clear()

    def get_active_sources(self) -> list[str]:
        """Get list of currently registered origin names.

        Returns:
            List of origin names (e.g., ["anroll", "bakashi"])
        """
        return sorted(self.sources.keys())

    def get_scraper(self, name: str) -> ScraperProtocol | None:
        return self.sources.get(name.lower())

    def get_scraper_or_default(self, name: str | None = None) -> ScraperProtocol:
        """Resolve an origin name, falling back to the default origin.

        Unknown or missing names never abort: they resolve to
        settings.scrapers.default_origin, or to the first registered origin
        when the default itself is not loaded.

        Raises:
            ScraperNotFoundError: If no scraper is registered at all
        """
        if name:
            scraper = self.get_scraper(name)
            if scraper is not None:
                return scraper
            logger.warning(f"Unknown origin '{name}', using default")

        scraper = self.get_scraper(settings.scrapers.default_origin)
        if scraper is not None:
            return scraper

        if not self.sources:
            raise ScraperNotFoundError("No scraper plugin is loaded")
        fallback = self.get_active_sources()[0]
        logger.warning(
            f"Default origin '{settings.scrapers.default_origin}' not loaded, using '{fallback}'"
        )
        return self.sources[fallback]


rep = Repository()
