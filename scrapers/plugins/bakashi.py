"""Scraper for bakashi.tv (server-rendered HTML, JWPlayer embeds)."""

import json
from urllib.parse import quote_plus, urljoin

from selectolax.parser import Node

from models.models import AnimePage, Episode
from services.repository import rep
from utils.exceptions import FetchError, ResolutionError

from .utils import build, fetch_html, require, require_attr


class Bakashi:
    languages = ["pt-br"]
    name = "bakashi"

    def referer(self) -> str:
        return "https://bakashi.tv"

    def latest_episodes(self) -> list[Episode]:
        tree = fetch_html(self.referer(), self.referer())
        container = require(tree, "#contenedor > div.module > div > div.animation-2.items.full")
        return [self._episode_from_article(article) for article in container.css("article")]

    def find_pages(self, query: str) -> list[AnimePage]:
        tree = fetch_html(f"{self.referer()}/?s={quote_plus(query)}", self.referer())
        pages = []
        for item in tree.css(".result-item"):
            link = require(item, ".title a")
            image = item.css_first("img")
            synopsis = item.css_first(".contenido")
            pages.append(
                build(
                    AnimePage,
                    title=link.text(strip=True),
                    synopsis=synopsis.text(strip=True) if synopsis else None,
                    generic_path=self._absolute(require_attr(link, "href")),
                    thumbnail=image.attributes.get("src") if image else None,
                )
            )
        return pages

    def episodes_of_page(self, page: AnimePage) -> list[Episode]:
        if not page.generic_path:
            raise FetchError(f"Page '{page.title}' has no episode listing path")
        tree = fetch_html(self._absolute(page.generic_path), self.referer())
        listing = require(tree, ".episodios")
        episodes = []
        for item in listing.css("li"):
            link = require(item, "a")
            image = item.css_first("img")
            episodes.append(
                build(
                    Episode,
                    name=link.text(strip=True),
                    url=self._absolute(require_attr(link, "href")),
                    thumbnail_url=image.attributes.get("src") if image else None,
                )
            )
        return episodes

    def resolve_stream_url(self, episode_url: str) -> str:
        iframe_src = self._player_iframe_src(episode_url)
        return self._content_url(self._player_script(iframe_src))

    def _absolute(self, url: str) -> str:
        return urljoin(self.referer() + "/", url)

    def _episode_from_article(self, article: Node) -> Episode:
        link = require(article, ".data a")
        image = require(article, ".poster picture img")
        return build(
            Episode,
            name=link.text(strip=True),
            url=self._absolute(require_attr(link, "href")),
            thumbnail_url=image.attributes.get("src"),
        )

    def _player_iframe_src(self, episode_url: str) -> str:
        tree = fetch_html(episode_url, self.referer())
        iframe = require(tree, "#source-player-1 > div > iframe", ResolutionError)
        # The embed URL carries a trailing image parameter starting at "img"
        src = require_attr(iframe, "src", ResolutionError).split("img")[0]
        if not src:
            raise ResolutionError(f"Empty player iframe source in {episode_url}")
        return self._absolute(src)

    def _player_script(self, iframe_src: str) -> str:
        tree = fetch_html(iframe_src, self.referer())
        head = require(tree, "head", ResolutionError)
        scripts = head.css("script")
        if not scripts:
            raise ResolutionError(f"No player script in {iframe_src}")
        return scripts[-1].text(deep=True).strip()

    @staticmethod
    def _content_url(script: str) -> str:
        try:
            data = json.loads(script)
        except ValueError as e:
            raise ResolutionError("Player script is not JSON") from e
        content_url = data.get("contentUrl") if isinstance(data, dict) else None
        if not isinstance(content_url, str) or not content_url.startswith(("http://", "https://")):
            raise ResolutionError(f"Player script has no usable contentUrl: {content_url!r}")
        return content_url


def load(languages_dict) -> None:
    can_load = False
    for language in Bakashi.languages:
        if language in languages_dict:
            can_load = True
            break
    if not can_load:
        return
    rep.register(Bakashi())
