"""
HTTP client for the agent explorer search API.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from .constants import AGENTS_PATH, SEARCH_PATH, STATS_PATH
from .models import AgentRecord, SearchParams, Transport
from .search_params import select_transport, to_query_string, to_search_body

logger = logging.getLogger(__name__)


@dataclass
class SearchResult:
    """One page of agents plus pagination metadata."""
    agents: List[AgentRecord] = field(default_factory=list)
    total: int = 0
    hasMore: bool = False
    nextCursor: Optional[str] = None


class SearchClient:
    """Routes searches to GET /api/agents or POST /api/search depending on the query."""

    def __init__(self, base_url: str, timeout: int = 10, session: Optional[requests.Session] = None):
        """
        Args:
            base_url: API origin, e.g. "https://explorer.example.org"
            timeout: Request timeout in seconds (default: 10)
            session: Optional requests session, mainly for connection reuse and testing
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            raise ConnectionError(f"{method} {url} failed: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if isinstance(payload, dict) and payload.get("success") is False:
            error = payload.get("error", "Unknown error")
            code = payload.get("code", "UNKNOWN")
            raise ValueError(f"Search API error ({code}): {error}")

        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise ConnectionError(f"{method} {url} failed: {e}") from e

        if not isinstance(payload, dict):
            raise ConnectionError(f"{method} {url} returned a non-JSON response")
        return payload

    def search(self, params: SearchParams) -> SearchResult:
        """
        Run a search.

        Raises:
            ConnectionError: transport failure or non-JSON/HTTP error response
            ValueError: the API answered with ``success: false``
        """
        transport = select_transport(params)
        if transport == Transport.POST:
            payload = self._request("POST", SEARCH_PATH, json=to_search_body(params))
        else:
            query_string = to_query_string(params)
            path = f"{AGENTS_PATH}?{query_string}" if query_string else AGENTS_PATH
            payload = self._request("GET", path)

        meta = payload.get("meta") or {}
        agents = [AgentRecord.from_dict(item) for item in payload.get("data") or []]
        result = SearchResult(
            agents=agents,
            total=meta.get("total", len(agents)),
            hasMore=bool(meta.get("hasMore", False)),
            nextCursor=meta.get("nextCursor"),
        )
        logger.info(f"Search via {transport.value} returned {len(agents)}/{result.total} agents")
        return result

    def get_agent(self, agent_id: str) -> AgentRecord:
        """Fetch one agent by "chainId:tokenId"."""
        payload = self._request("GET", f"{AGENTS_PATH}/{agent_id}")
        return AgentRecord.from_dict(payload["data"])

    def get_stats(self) -> Dict[str, Any]:
        return self._request("GET", STATS_PATH).get("data", {})
