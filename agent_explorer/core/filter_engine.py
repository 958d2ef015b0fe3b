"""
Reference filtering engine over the synthetic agent pool.

This is the executable statement of the search semantics: the real backend
is expected to return the same agents for the same filters. Any divergence
between the two is a contract bug, not a test flake.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import parse_qs, urlparse

from .agent_pool import generate_pool
from .constants import (
    AGENTS_PATH, DEFAULT_PAGE_SIZE, SCORE_MAX, SCORE_MIN, SEARCH_PATH, STATS_PATH,
    SUPPORTED_CHAINS,
)
from .models import AgentRecord, FilterMode, ParsedFilters, Protocol, SortField, SortOrder
from .search_params import create_cursor

logger = logging.getLogger(__name__)

_AGENT_DETAIL_RE = re.compile(r"^/api/agents/(\d+:\d+)$")


def _relevance_for(agent: AgentRecord) -> int:
    # Synthetic but stable: 55-94 spread over token ids
    return 55 + (int(agent.tokenId) * 7) % 40


def _match_query(agents: List[AgentRecord], query: str) -> List[AgentRecord]:
    """Case-sensitive substring match on name and description."""
    matched = []
    for agent in agents:
        reasons = []
        if query in agent.name:
            reasons.append("name match")
        if query in agent.description:
            reasons.append("description match")
        if reasons:
            matched.append(replace(
                agent,
                relevanceScore=_relevance_for(agent),
                matchReasons=tuple(reasons),
            ))
    return matched


def _protocol_flags(filters: ParsedFilters) -> List[Tuple[str, bool]]:
    flags = []
    for protocol in Protocol:
        value = getattr(filters, protocol.value)
        if value is not None:
            flags.append((protocol.value, value))
    return flags


def _match_protocols(agent: AgentRecord, flags: List[Tuple[str, bool]], mode: FilterMode) -> bool:
    if mode == FilterMode.OR:
        requested = [protocol for protocol, value in flags if value]
        # Nothing requested as true passes trivially
        return not requested or any(agent.supports(protocol) for protocol in requested)
    return all(agent.supports(protocol) == value for protocol, value in flags)


def filter_agents(agents: List[AgentRecord], filters: ParsedFilters) -> List[AgentRecord]:
    """Apply the text, protocol, status, chain and reputation filters."""
    result = list(agents)

    # Text query filter
    if filters.query is not None and filters.query.strip():
        result = _match_query(result, filters.query.strip())

    # Protocol filters
    flags = _protocol_flags(filters)
    if flags:
        mode = FilterMode.OR if filters.filterMode == FilterMode.OR.value else FilterMode.AND
        result = [a for a in result if _match_protocols(a, flags, mode)]

    # Status filter
    if filters.active is not None:
        result = [a for a in result if a.active == filters.active]

    # Chain filter
    if filters.chainIds:
        result = [a for a in result if a.chainId in filters.chainIds]

    # Reputation filters, inclusive; default bounds are no-ops
    if filters.minRep is not None and filters.minRep > SCORE_MIN:
        result = [a for a in result if a.reputationScore >= filters.minRep]
    if filters.maxRep is not None and filters.maxRep < SCORE_MAX:
        result = [a for a in result if a.reputationScore <= filters.maxRep]

    # Synthetic agents carry no OASF taxonomy, so skills/domains cannot narrow the pool
    if filters.skills or filters.domains:
        logger.debug("Skills/domains filters are not applied to the synthetic pool")

    return result


def _sort_key(field: str) -> Optional[Callable[[AgentRecord], Any]]:
    if field == SortField.NAME.value:
        return lambda a: a.name.lower()
    if field == SortField.REPUTATION.value:
        return lambda a: a.reputationScore
    if field == SortField.RELEVANCE.value:
        return lambda a: a.relevanceScore or 0
    if field == SortField.CREATED_AT.value:
        return lambda a: a.createdAt
    return None


def sort_agents(agents: List[AgentRecord], sort: Optional[str], order: Optional[str]) -> List[AgentRecord]:
    """
    Stable sort by ``sort`` field.

    Order defaults to descending. Ties keep their incoming (pool) order in both
    directions, so output is fully deterministic.
    """
    if not sort:
        return list(agents)

    key = _sort_key(sort)
    if key is None:
        logger.warning(f"Unknown sort field: {sort}, leaving order unchanged")
        return list(agents)

    return sorted(agents, key=key, reverse=(order != SortOrder.ASC.value))


def page_limit(filters: ParsedFilters) -> int:
    """Requested page size, default 20; negative values clamp to 0."""
    if filters.limit is None:
        return DEFAULT_PAGE_SIZE
    if filters.limit < 0:
        logger.warning(f"Negative limit {filters.limit}, clamping to 0")
        return 0
    return filters.limit


def apply_filters(agents: List[AgentRecord], filters: ParsedFilters) -> List[AgentRecord]:
    """Filter, sort and truncate to ``limit`` (default 20).

    The cursor is accepted but not honoured: the mock always serves the first page.
    """
    result = filter_agents(agents, filters)
    result = sort_agents(result, filters.sort, filters.order)
    return result[:page_limit(filters)]


def _parse_bool(value: str) -> bool:
    return value == "true"


def _parse_int(name: str, value: str) -> Optional[int]:
    try:
        return int(value, 10)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {name}: {value!r}")
        return None


def _split_list(value: str) -> List[str]:
    return [item for item in value.split(",") if item.strip()]


def parse_url_filters(query_string: str) -> ParsedFilters:
    """Parse filters from a GET /agents query string."""
    params = parse_qs(query_string.lstrip("?"), keep_blank_values=False)

    def get(name: str) -> Optional[str]:
        values = params.get(name)
        return values[0] if values else None

    filters = ParsedFilters()

    if get("q"):
        filters.query = get("q")
    for protocol in Protocol:
        raw = get(protocol.value)
        if raw:
            setattr(filters, protocol.value, _parse_bool(raw))
    if get("active"):
        filters.active = _parse_bool(get("active"))

    chains = get("chains")
    if chains:
        chain_ids = []
        for item in _split_list(chains):
            chain_id = _parse_int("chain id", item)
            if chain_id is not None:
                chain_ids.append(chain_id)
        filters.chainIds = chain_ids

    for name in ("minRep", "maxRep", "limit"):
        raw = get(name)
        if raw:
            setattr(filters, name, _parse_int(name, raw))

    if get("skills"):
        filters.skills = _split_list(get("skills"))
    if get("domains"):
        filters.domains = _split_list(get("domains"))
    if get("filterMode") == FilterMode.OR.value:
        filters.filterMode = FilterMode.OR.value
    if get("sort"):
        filters.sort = get("sort")
    if get("order") in (SortOrder.ASC.value, SortOrder.DESC.value):
        filters.order = get("order")
    if get("cursor"):
        filters.cursor = get("cursor")

    return filters


def parse_body_filters(body: Dict[str, Any]) -> ParsedFilters:
    """Parse filters from a POST /search JSON body."""
    filters = ParsedFilters()

    query = body.get("query")
    if isinstance(query, str) and query:
        filters.query = query
    elif query is not None and not isinstance(query, str):
        logger.warning(f"Ignoring non-string query: {query!r}")
    if body.get("limit") is not None:
        filters.limit = _body_int("limit", body["limit"])
    for key in ("sort", "cursor"):
        value = body.get(key)
        if isinstance(value, str) and value:
            setattr(filters, key, value)
    if body.get("order") in (SortOrder.ASC.value, SortOrder.DESC.value):
        filters.order = body["order"]

    body_filters = body.get("filters")
    if isinstance(body_filters, dict):
        for key in ("mcp", "a2a", "x402", "active"):
            if body_filters.get(key) is not None:
                setattr(filters, key, bool(body_filters[key]))
        chain_ids = body_filters.get("chainIds")
        if isinstance(chain_ids, list):
            parsed = [_body_int("chainId", c) for c in chain_ids]
            filters.chainIds = [c for c in parsed if c is not None] or None
        elif chain_ids is not None:
            logger.warning(f"Ignoring non-list chainIds: {chain_ids!r}")
        for key in ("minRep", "maxRep"):
            if body_filters.get(key) is not None:
                setattr(filters, key, _body_int(key, body_filters[key]))
        for key in ("skills", "domains"):
            values = body_filters.get(key)
            if isinstance(values, list):
                setattr(filters, key, [v for v in values if isinstance(v, str) and v] or None)
            elif values is not None:
                logger.warning(f"Ignoring non-list {key}: {values!r}")
        if body_filters.get("filterMode"):
            filters.filterMode = body_filters["filterMode"]

    return filters


def _body_int(name: str, value: Any) -> Optional[int]:
    """JSON integer, or None with a warning for anything else (bools included)."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    logger.warning(f"Ignoring non-numeric {name}: {value!r}")
    return None


class MockSearchBackend:
    """In-memory stand-in for the search API, backed by the synthetic pool."""

    def __init__(self, agent_pool: Optional[List[AgentRecord]] = None):
        self.agent_pool = agent_pool if agent_pool is not None else generate_pool()
        self.calls: List[Tuple[str, str]] = []  # (method, path) for assertions

    def _list_response(self, filters: ParsedFilters) -> Dict[str, Any]:
        matched = sort_agents(filter_agents(self.agent_pool, filters), filters.sort, filters.order)
        page = matched[:page_limit(filters)]
        meta: Dict[str, Any] = {
            "total": len(matched),
            "hasMore": len(matched) > len(page),
        }
        if meta["hasMore"]:
            meta["nextCursor"] = create_cursor(len(page))
        if filters.query:
            meta["query"] = filters.query
        return {
            "success": True,
            "data": [agent.to_dict() for agent in page],
            "meta": meta,
        }

    @staticmethod
    def _error(message: str, code: str) -> Dict[str, Any]:
        return {"success": False, "error": message, "code": code}

    def handle(self, method: str, url: str, body: Optional[Any] = None) -> Tuple[int, Dict[str, Any]]:
        """Route a request; returns (status code, JSON payload)."""
        parsed_url = urlparse(url)
        path = parsed_url.path
        method = method.upper()
        self.calls.append((method, path))

        if path == SEARCH_PATH and method == "POST":
            if isinstance(body, (str, bytes)):
                try:
                    body = json.loads(body)
                except json.JSONDecodeError:
                    logger.warning("Malformed search body, treating as empty")
                    body = {}
            filters = parse_body_filters(body if isinstance(body, dict) else {})
            return 200, self._list_response(filters)

        if path == AGENTS_PATH and method == "GET":
            return 200, self._list_response(parse_url_filters(parsed_url.query))

        if path == STATS_PATH and method == "GET":
            return 200, {
                "success": True,
                "data": {
                    "totalAgents": len(self.agent_pool),
                    "activeAgents": sum(1 for a in self.agent_pool if a.active),
                    "chainsSupported": len(SUPPORTED_CHAINS),
                },
            }

        match = _AGENT_DETAIL_RE.match(path)
        if match and method == "GET":
            agent_id = match.group(1)
            for agent in self.agent_pool:
                if agent.id == agent_id:
                    return 200, {"success": True, "data": agent.to_dict(), "meta": {}}
            return 404, self._error("Agent not found", "NOT_FOUND")

        return 404, self._error(f"No route for {method} {path}", "NOT_FOUND")

    def expected_count(self, filters: ParsedFilters) -> int:
        """Number of agents the given filters return (after limit)."""
        return len(apply_filters(self.agent_pool, filters))
