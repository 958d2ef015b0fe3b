"""
Mapping from UI filter state to the wire-level search contract.

A filter dimension only appears on the wire when it deviates from its
default. That sparse encoding is what keeps cache keys stable: the default
state and a state that was changed and changed back produce the same params.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlencode

from eth_utils import is_address, to_checksum_address

from .constants import DEFAULT_PAGE_SIZE, SCORE_MAX, SCORE_MIN
from .models import (
    FilterMode, FilterState, Protocol, SearchParams, SortField, SortOrder, Transport,
    STATUS_ACTIVE,
)

logger = logging.getLogger(__name__)

GLOBAL_OFFSET_KEY = "_global_offset"


def create_cursor(global_offset: int) -> str:
    """
    Create an opaque pagination cursor.

    Args:
        global_offset: Total items returned so far

    Returns:
        JSON string cursor
    """
    return json.dumps({GLOBAL_OFFSET_KEY: global_offset}, separators=(",", ":"))


def parse_cursor(cursor: Optional[str]) -> Dict[str, Any]:
    """
    Parse a pagination cursor.

    Cursor format (JSON):
    {
        "_global_offset": 100  # Total items returned so far
    }

    Returns an empty dict for a missing or malformed cursor.
    """
    if not cursor:
        return {}

    try:
        cursor_data = json.loads(cursor)
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse cursor: {e}, using empty")
        return {}

    if not isinstance(cursor_data, dict):
        logger.warning(f"Invalid cursor format: {cursor}, using empty")
        return {}

    return cursor_data


def cursor_offset(cursor: Optional[str]) -> int:
    """Global offset encoded in a cursor, 0 when absent."""
    offset = parse_cursor(cursor).get(GLOBAL_OFFSET_KEY, 0)
    if not isinstance(offset, int) or isinstance(offset, bool) or offset < 0:
        logger.warning(f"Invalid cursor offset: {offset!r}, using 0")
        return 0
    return offset


def _apply_status_filters(params: SearchParams, filters: FilterState) -> None:
    # Exactly one status selected is a constraint; none or both is not
    if len(filters.status) == 1:
        params.active = filters.status[0] == STATUS_ACTIVE
    if filters.showAllAgents:
        # Include agents without a registration file
        params.hasRegistrationFile = False


def _apply_protocol_filters(params: SearchParams, filters: FilterState) -> None:
    if Protocol.MCP.value in filters.protocols:
        params.mcp = True
    if Protocol.A2A.value in filters.protocols:
        params.a2a = True
    if Protocol.X402.value in filters.protocols:
        params.x402 = True


def _apply_range_filters(params: SearchParams, filters: FilterState) -> None:
    if filters.minReputation > SCORE_MIN:
        params.minRep = filters.minReputation
    if filters.maxReputation < SCORE_MAX:
        params.maxRep = filters.maxReputation
    if filters.minTrustScore > SCORE_MIN:
        params.minTrust = filters.minTrustScore
    if filters.maxTrustScore < SCORE_MAX:
        params.maxTrust = filters.maxTrustScore


def _normalize_curator(address: str) -> Optional[str]:
    address = address.strip()
    if not address:
        return None
    if not is_address(address):
        logger.warning(f"Ignoring curatedBy filter, not an address: {address}")
        return None
    return to_checksum_address(address)


def _apply_extended_filters(params: SearchParams, filters: FilterState) -> None:
    """Curation, version, endpoint and reachability filters."""
    if filters.isCurated:
        params.isCurated = True
    if filters.curatedBy:
        params.curatedBy = _normalize_curator(filters.curatedBy)
    if filters.erc8004Version:
        params.erc8004Version = filters.erc8004Version
    if filters.mcpVersion:
        params.mcpVersion = filters.mcpVersion
    if filters.a2aVersion:
        params.a2aVersion = filters.a2aVersion
    if filters.hasEmail:
        params.hasEmail = True
    if filters.hasOasfEndpoint:
        params.hasOasfEndpoint = True
    if filters.hasRecentReachability:
        params.hasRecentReachability = True


def to_search_params(
    query: str,
    filters: FilterState,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    sort_by: Optional[SortField] = None,
    sort_order: Optional[SortOrder] = None,
) -> SearchParams:
    """
    Convert UI filter state to SearchParams for the backend API.

    Only non-default dimensions are set. ``filterMode`` is sent only for OR,
    since AND is the backend default. A non-zero ``offset`` becomes an opaque
    cursor; offset 0 sends no cursor at all.
    """
    params = SearchParams()

    trimmed_query = query.strip()
    if trimmed_query:
        params.q = trimmed_query

    _apply_status_filters(params, filters)
    _apply_protocol_filters(params, filters)

    if filters.chains:
        params.chains = list(filters.chains)
    if filters.skills:
        params.skills = list(filters.skills)
    if filters.domains:
        params.domains = list(filters.domains)

    _apply_range_filters(params, filters)
    _apply_extended_filters(params, filters)

    if filters.filterMode == FilterMode.OR:
        params.filterMode = FilterMode.OR.value

    if sort_by is not None:
        params.sort = sort_by.value
    if sort_order is not None:
        params.order = sort_order.value

    params.limit = limit
    if offset:
        params.cursor = create_cursor(offset)

    return params


def select_transport(params: SearchParams) -> Transport:
    """POST /search for a text query, GET listing otherwise."""
    if params.q and params.q.strip():
        return Transport.POST
    return Transport.GET


def _wire_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


# GET query-string field order
_QUERY_FIELDS = (
    "q", "mcp", "a2a", "x402", "active", "hasRegistrationFile",
    "minRep", "maxRep", "minTrust", "maxTrust",
    "isCurated", "curatedBy", "erc8004Version", "mcpVersion", "a2aVersion",
    "hasEmail", "hasOasfEndpoint", "hasRecentReachability",
    "sort", "order", "limit", "cursor", "chains", "skills", "domains", "filterMode",
)


def to_query_pairs(params: SearchParams) -> List[Tuple[str, str]]:
    """Query-string pairs for the GET listing endpoint."""
    data = params.to_dict()
    pairs = []
    for key in _QUERY_FIELDS:
        value = data.get(key)
        if value is None:
            continue
        if isinstance(value, list) and not value:
            continue
        pairs.append((key, _wire_value(value)))
    return pairs


def to_query_string(params: SearchParams) -> str:
    return urlencode(to_query_pairs(params))


# Keys forwarded inside the POST body "filters" object
_BODY_FILTER_FIELDS = (
    "active", "hasRegistrationFile", "minRep", "maxRep", "minTrust", "maxTrust",
    "isCurated", "curatedBy", "erc8004Version", "mcpVersion", "a2aVersion",
    "hasEmail", "hasOasfEndpoint", "hasRecentReachability", "skills", "domains", "filterMode",
)


def to_search_body(params: SearchParams) -> Dict[str, Any]:
    """JSON body for POST /search."""
    data = params.to_dict()
    filters: Dict[str, Any] = {}

    for key in ("mcp", "a2a", "x402"):
        if data.get(key):
            filters[key] = True
    if data.get("chains"):
        filters["chainIds"] = list(data["chains"])
    for key in _BODY_FILTER_FIELDS:
        if key in data:
            filters[key] = data[key]

    body: Dict[str, Any] = {
        "query": data.get("q"),
        "limit": data.get("limit", DEFAULT_PAGE_SIZE),
    }
    if filters:
        body["filters"] = filters
    for key in ("cursor", "sort", "order"):
        if key in data:
            body[key] = data[key]
    return body
