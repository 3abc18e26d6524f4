"""
tools/web_scrape.py — Web Page Scraper Tool

Reads the pages behind web_search results: search finds links, web_scrape
fetches them and extracts their readable text (paragraphs and h1–h4).

Registered as:
  - web_scrape → "Title, WebpageContent" block, one entry per link
"""

from __future__ import annotations

from typing import Any

import httpx
from bs4 import BeautifulSoup

from exceptions import ToolError
from observability.logger import get_logger
from tools.base import BaseTool

log = get_logger(__name__)

_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}
_TIMEOUT = 20.0
_CONTENT_SELECTOR = "p, h1, h2, h3, h4"


class WebScrape(BaseTool):
    name = "web_scrape"
    description = (
        "Fetch the pages at the given links and return their text content. "
        "Pass the titles and links returned by web_search."
    )
    input_schema = {
        "type": "object",
        "properties": {
            "titles": {
                "type": "array",
                "description": "array of titles from the search",
                "items": {"type": "string"},
            },
            "links": {
                "type": "array",
                "description": "array of links from the search",
                "items": {"type": "string"},
            },
        },
        "required": ["titles", "links"],
    }

    def __init__(self, timeout_seconds: float = _TIMEOUT):
        self._timeout = timeout_seconds

    async def execute(self, input: dict[str, Any]) -> str:
        titles: list[str] = input["titles"]
        links: list[str] = input["links"]

        blob = ["Title, WebpageContent"]
        async with httpx.AsyncClient(
            headers=_HEADERS,
            timeout=self._timeout,
            follow_redirects=True,
        ) as client:
            # zip: a title without a link (or vice versa) is dropped
            for title, link in zip(titles, links):
                if not link.startswith(("http://", "https://")):
                    raise ToolError(f"Invalid URL (must start with http/https): {link}")
                log.debug("web_scrape.fetch", url=link)
                try:
                    response = await client.get(link)
                    response.raise_for_status()
                except httpx.TimeoutException as e:
                    raise ToolError(f"Request timed out: {link}") from e
                except httpx.HTTPStatusError as e:
                    raise ToolError(f"HTTP {e.response.status_code} fetching {link}") from e
                except httpx.HTTPError as e:
                    raise ToolError(f"Request failed for {link}: {e}") from e

                blob.append(f"{title}: {extract_text(response.text)}")

        return "\n".join(blob)


def extract_text(html: str) -> str:
    """Concatenate the text of every paragraph and h1–h4 element."""
    soup = BeautifulSoup(html, "html.parser")
    parts = [el.get_text(" ", strip=True) for el in soup.select(_CONTENT_SELECTOR)]
    return " ".join(p for p in parts if p)
