"""Scraper for anroll.net (Next.js front-end backed by JSON APIs)."""

import json
from urllib.parse import quote, quote_plus

from selectolax.parser import Node

from models.models import AnimePage, Episode
from services.repository import rep
from utils.exceptions import FetchError, ResolutionError

from .utils import build, fetch_html, fetch_json, json_path, require, require_attr

SEARCH_API = "https://api-search.anroll.net/data"
EPISODES_API = "https://apiv3-prd.anroll.net/animes"
STATIC_URL = "https://static.anroll.net/images/animes"
CDN_URL = "https://cdn-zenitsu-2-gamabunta.b-cdn.net/cf/hls/animes"


class Anroll:
    languages = ["pt-br"]
    name = "anroll"

    def referer(self) -> str:
        return "https://anroll.net"

    def latest_episodes(self) -> list[Episode]:
        tree = fetch_html(self.referer(), self.referer())
        releases = require(tree, "#__next > main > div.sc-b2878e96-1.dburWc > ul")
        return [self._episode_from_release(item) for item in releases.css("li")]

    def find_pages(self, query: str) -> list[AnimePage]:
        payload = fetch_json(f"{SEARCH_API}?q={quote_plus(query)}", self.referer())
        pages = []
        for node in self._data_list(payload):
            try:
                slug = node["slug"]
                pages.append(
                    build(
                        AnimePage,
                        id=str(node["id"]),
                        title=node["title"],
                        slug=slug,
                        synopsis=node.get("synopsis"),
                        total_episodes=node.get("total_eps"),
                        generic_path=node.get("generic_path"),
                        thumbnail=f"{STATIC_URL}/capas/{slug}.jpg",
                    )
                )
            except (KeyError, TypeError) as e:
                raise FetchError(f"Unexpected search result shape: {node!r}") from e
        return pages

    def episodes_of_page(self, page: AnimePage) -> list[Episode]:
        if not page.id:
            raise FetchError(f"Page '{page.title}' has no id")
        payload = fetch_json(
            f"{EPISODES_API}/{page.id}/episodes?page=1&order=desc", self.referer()
        )
        episodes = []
        for node in self._data_list(payload):
            try:
                number = str(node["n_episodio"])
                link = f"{self.referer()}/e/{node['generate_id']}"
            except (KeyError, TypeError) as e:
                raise FetchError(f"Unexpected episode shape: {node!r}") from e
            episodes.append(
                build(
                    Episode,
                    name=f"{page.title} {number}",
                    url=link,
                    thumbnail_url=self._episode_thumbnail(page.slug, number),
                )
            )
        return episodes

    def resolve_stream_url(self, episode_url: str) -> str:
        tree = fetch_html(episode_url, self.referer())
        script = require(tree, "#__NEXT_DATA__", ResolutionError)
        try:
            next_data = json.loads(script.text(deep=True))
        except ValueError as e:
            raise ResolutionError("__NEXT_DATA__ is not JSON") from e
        data = json_path(next_data, "props", "pageProps", "data")
        slug_serie = json_path(data, "anime", "slug_serie")
        number = json_path(data, "n_episodio")
        return f"{CDN_URL}/{slug_serie}/{number}.mp4/media-1/stream.m3u8"

    def _episode_from_release(self, item: Node) -> Episode:
        link = require(item, "a")
        details = require(link, ".release-item-details")
        image = require(link, "img")
        return build(
            Episode,
            name=details.text(strip=True),
            url=self.referer() + require_attr(link, "href"),
            thumbnail_url=self.referer() + require_attr(image, "src"),
        )

    @staticmethod
    def _data_list(payload) -> list[dict]:
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, list):
            raise FetchError("Response has no 'data' list")
        return data

    @staticmethod
    def _episode_thumbnail(slug: str | None, number: str) -> str | None:
        if not slug:
            return None
        image = quote(f"{STATIC_URL}/screens/{slug}/{number}.jpg", safe="")
        return f"https://www.anroll.net/_next/image?url={image}&w=256&q=75"


def load(languages_dict) -> None:
    can_load = False
    for language in Anroll.languages:
        if language in languages_dict:
            can_load = True
            break
    if not can_load:
        return
    rep.register(Anroll())
