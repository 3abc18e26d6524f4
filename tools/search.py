"""
tools/search.py — Web Search Tool

Gives the agent web search via the Google Custom Search JSON API.
Needs SEARCH_API_KEY and CX_ENGINE (the programmable search engine id).

Registered as:
  - web_search → top results as "title, link, description_preview" lines
"""

from __future__ import annotations

import json
from typing import Any, Optional

import httpx

from exceptions import ToolError
from observability.logger import get_logger
from tools.base import BaseTool

log = get_logger(__name__)

_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"
_TIMEOUT = 15.0
_DEFAULT_MAX_RESULTS = 3
_HEADER = "title, link, description_preview"
_FIELDS = ("title", "link", "snippet")


class WebSearch(BaseTool):
    name = "web_search"
    description = (
        "Search the web with Google and return the top results. "
        "Returns page titles, links, and short snippets. "
        "Use web_scrape afterwards to read a page's content."
    )
    input_schema = {
        "type": "object",
        "properties": {
            "search_term": {
                "type": "string",
                "description": "query text",
            },
        },
        "required": ["search_term"],
    }

    def __init__(
        self,
        api_key: Optional[str] = None,
        engine_id: Optional[str] = None,
        max_results: int = _DEFAULT_MAX_RESULTS,
        timeout_seconds: float = _TIMEOUT,
    ):
        self._api_key = api_key
        self._engine_id = engine_id
        self._max_results = min(max(max_results, 1), 10)  # API caps num at 10
        self._timeout = timeout_seconds

    async def execute(self, input: dict[str, Any]) -> str:
        if not self._api_key or not self._engine_id:
            raise ToolError("web_search requires SEARCH_API_KEY and CX_ENGINE to be set")

        query = input["search_term"]
        log.debug("web_search.start", query=query, max_results=self._max_results)

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(
                    _SEARCH_URL,
                    params={
                        "key": self._api_key,
                        "cx": self._engine_id,
                        "q": query,
                        "num": str(self._max_results),
                    },
                )
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as e:
            raise ToolError(f"Search timed out: {query}") from e
        except httpx.HTTPStatusError as e:
            raise ToolError(f"Search failed with HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ToolError(f"Search request failed: {e}") from e
        except ValueError as e:
            raise ToolError("Search returned invalid JSON") from e

        output = format_search_results(data)
        log.debug("web_search.complete", query=query, result_lines=output.count("\n"))
        return output


def format_search_results(data: dict[str, Any]) -> str:
    """
    Render the API's items as lines of JSON-quoted fields under a header row.

    Quoting keeps a comma inside a title or snippet from splitting the row.
    Missing fields render as null.
    """
    items = data.get("items")
    if not isinstance(items, list):
        raise ToolError("Missing items in search response")

    lines = [_HEADER]
    for item in items:
        lines.append(",".join(
            json.dumps(item.get(field), ensure_ascii=False)
            for field in _FIELDS
        ))
    return "\n".join(lines)
