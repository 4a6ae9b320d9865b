"""HTTP and parsing helpers shared by the scraper plugins.

Every network failure is turned into FetchError here so plugins never leak
requests exceptions to their callers.
"""

import json
from typing import Any, TypeVar

import requests
from pydantic import BaseModel, ValidationError
from selectolax.parser import HTMLParser, Node

from models.config import settings
from utils.exceptions import FetchError, ResolutionError

ModelT = TypeVar("ModelT", bound=BaseModel)


def request_headers(referer: str | None = None) -> dict[str, str]:
    headers = {"User-Agent": settings.http.user_agent}
    if referer:
        headers["Referer"] = referer
    return headers


def fetch_text(url: str, referer: str | None = None) -> str:
    """GET a URL and return its body as text.

    Raises:
        FetchError: On timeout, connection failure or HTTP error status
    """
    try:
        response = requests.get(
            url,
            headers=request_headers(referer),
            timeout=settings.http.timeout_seconds,
        )
        response.raise_for_status()
    except requests.Timeout as e:
        raise FetchError(f"Timed out fetching {url}") from e
    except requests.RequestException as e:
        raise FetchError(f"Failed to fetch {url}: {e}") from e
    return response.text


def fetch_html(url: str, referer: str | None = None) -> HTMLParser:
    """GET a URL and parse it as HTML."""
    return HTMLParser(fetch_text(url, referer))


def fetch_json(url: str, referer: str | None = None) -> Any:
    """GET a URL and decode its JSON body.

    Raises:
        FetchError: On transport failure or invalid JSON
    """
    body = fetch_text(url, referer)
    try:
        return json.loads(body)
    except ValueError as e:
        raise FetchError(f"Invalid JSON from {url}") from e


def require(node: Node | HTMLParser | None, selector: str, error=FetchError) -> Node:
    """Return the first match of selector under node, or raise error.

    Site layouts change without notice; a missing element must fail loudly
    instead of yielding an empty value.
    """
    if node is None:
        raise error(f"Missing parent element for '{selector}'")
    found = node.css_first(selector)
    if found is None:
        raise error(f"Element '{selector}' not found")
    return found


def require_attr(node: Node, attribute: str, error=FetchError) -> str:
    value = (node.attributes.get(attribute) or "").strip()
    if not value:
        raise error(f"Element <{node.tag}> has no '{attribute}' attribute")
    return value


def json_path(data: Any, *keys: str, error=ResolutionError) -> Any:
    """Walk nested dicts, raising error when a key is missing."""
    current = data
    for key in keys:
        if not isinstance(current, dict) or current.get(key) is None:
            raise error(f"Missing '{key}' in {'.'.join(keys)}")
        current = current[key]
    return current


def build(model: type[ModelT], error=FetchError, **fields: Any) -> ModelT:
    """Build a model from scraped fields, raising error when they are invalid.

    Blank titles or links are layout changes, not programming errors.
    """
    try:
        return model(**fields)
    except ValidationError as e:
        raise error(f"Invalid {model.__name__} scraped: {e.errors()[0]['msg']}") from e
