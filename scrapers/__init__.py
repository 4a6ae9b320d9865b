"""Plugin/scraper system for anime sources.

Plugin architecture for multi-site anime scraping:
- loader: Scraper protocol and plugin discovery
- plugins: Actual scraper implementations (bakashi, anroll)
"""

from scrapers import loader

__all__ = ["loader"]
