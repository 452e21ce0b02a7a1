"""
HTTP search backend for the search tool.

GETs {endpoint}?q=<query> and returns the response body as the tool result.
JSON bodies are rendered as text: a "results" list becomes one line per item
(title and snippet when present), anything else is returned as serialized
JSON.

Usage:
    backend = HttpSearchBackend("https://search.internal/api/search")
    registry.register(make_search_tool(backend))
"""

import json
import logging
from typing import Any

import httpx

from ..errors import ToolExecutionError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
MAX_RETRIES = 1
MAX_RESPONSE_BYTES = 512_000
MAX_RESULTS = 10


class HttpSearchBackend:
    """Async callable (query -> text) backed by an HTTP search endpoint."""

    def __init__(
        self,
        endpoint: str,
        timeout: float = DEFAULT_TIMEOUT,
        api_key: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._endpoint = endpoint
        self._timeout = timeout
        self._api_key = api_key
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json, text/plain"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def __call__(self, query: str) -> str:
        last_error: Exception | None = None

        for attempt in range(MAX_RETRIES + 1):
            try:
                async with httpx.AsyncClient(
                    timeout=self._timeout, transport=self._transport
                ) as client:
                    response = await client.get(
                        self._endpoint, params={"q": query}, headers=self._headers()
                    )
                    response.raise_for_status()

                    if len(response.content) > MAX_RESPONSE_BYTES:
                        raise ToolExecutionError(
                            "search", f"response exceeds {MAX_RESPONSE_BYTES} byte limit"
                        )
                    return _render(response)
            except httpx.TimeoutException as e:
                last_error = e
                logger.warning(
                    f"[Search] Timeout from {self._endpoint} "
                    f"(attempt {attempt + 1}/{MAX_RETRIES + 1})"
                )
            except httpx.HTTPStatusError as e:
                logger.error(f"[Search] HTTP {e.response.status_code} from {self._endpoint}")
                raise ToolExecutionError(
                    "search", f"search service returned HTTP {e.response.status_code}"
                ) from e
            except httpx.TransportError as e:
                logger.error(f"[Search] Connection failed to {self._endpoint}: {e}")
                raise ToolExecutionError("search", "search service unreachable") from e

        raise ToolExecutionError(
            "search", f"search service timed out after {MAX_RETRIES + 1} attempts"
        ) from last_error


def _render(response: httpx.Response) -> str:
    if "json" not in response.headers.get("content-type", ""):
        return response.text.strip()
    try:
        data = response.json()
    except json.JSONDecodeError:
        return response.text.strip()

    results = data.get("results") if isinstance(data, dict) else None
    if isinstance(results, list):
        if not results:
            return "No results found"
        return "\n".join(_render_item(item) for item in results[:MAX_RESULTS])
    return json.dumps(data, ensure_ascii=False)


def _render_item(item: Any) -> str:
    if not isinstance(item, dict):
        return f"- {item}"
    title = item.get("title", "")
    snippet = item.get("snippet") or item.get("content") or ""
    text = f"{title}: {snippet}" if title and snippet else title or snippet
    return f"- {text or json.dumps(item, ensure_ascii=False)}"
