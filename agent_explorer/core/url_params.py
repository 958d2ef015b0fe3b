"""
Shareable explore-page URL state.

``parse_url_params`` is lenient: unknown chains, out-of-range scores and
unsupported page sizes are repaired rather than rejected, since URLs come
from users. ``serialize_to_url`` is the sparse inverse and writes only
non-default values, so the default state serializes to an empty string.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
from urllib.parse import parse_qs, urlencode

from .constants import DEFAULT_PAGE_SIZE, PAGE_SIZE_OPTIONS, SCORE_MAX, SCORE_MIN, SUPPORTED_CHAINS
from .models import FilterMode, FilterState, Protocol, SortField, SortOrder, STATUS_ACTIVE, STATUS_INACTIVE

logger = logging.getLogger(__name__)


@dataclass
class UrlSearchState:
    """Everything the explore page keeps in its query string."""
    query: str = ""
    pageSize: int = DEFAULT_PAGE_SIZE
    filters: FilterState = field(default_factory=FilterState)
    sortBy: SortField = SortField.RELEVANCE
    sortOrder: SortOrder = SortOrder.DESC


def _parse_int(raw: Optional[str], default: int) -> int:
    if raw is None:
        return default
    try:
        return int(raw.strip(), 10)
    except ValueError:
        logger.warning(f"Invalid integer URL parameter: {raw!r}, using {default}")
        return default


def _clamped_range(raw_min: Optional[str], raw_max: Optional[str]) -> Tuple[int, int]:
    """Parse a score range, clamp both ends to 0-100 and swap them if inverted."""
    low = max(SCORE_MIN, min(SCORE_MAX, _parse_int(raw_min, SCORE_MIN)))
    high = max(SCORE_MIN, min(SCORE_MAX, _parse_int(raw_max, SCORE_MAX)))
    return min(low, high), max(low, high)


def _split_slugs(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [s for s in raw.split(",") if s.strip()]


def _parse_chains(raw: Optional[str]) -> List[int]:
    chains = []
    for item in _split_slugs(raw):
        try:
            chain_id = int(item.strip(), 10)
        except ValueError:
            logger.warning(f"Ignoring invalid chain id in URL: {item!r}")
            continue
        if chain_id in SUPPORTED_CHAINS:
            chains.append(chain_id)
        else:
            logger.debug(f"Dropping unsupported chain from URL: {chain_id}")
    return chains


def parse_url_params(query_string: str) -> UrlSearchState:
    """Decode explore-page state from a URL query string."""
    params = parse_qs(query_string.lstrip("?"), keep_blank_values=True)

    def get(name: str) -> Optional[str]:
        values = params.get(name)
        return values[0] if values else None

    page_size = _parse_int(get("limit"), DEFAULT_PAGE_SIZE)
    if page_size not in PAGE_SIZE_OPTIONS:
        page_size = DEFAULT_PAGE_SIZE

    status = []
    if get("active") == "true":
        status.append(STATUS_ACTIVE)
    elif get("active") == "false":
        status.append(STATUS_INACTIVE)

    protocols = [p.value for p in Protocol if get(p.value) == "true"]
    min_rep, max_rep = _clamped_range(get("minRep"), get("maxRep"))
    min_trust, max_trust = _clamped_range(get("minTrust"), get("maxTrust"))

    sort_values = [f.value for f in SortField]
    sort_by = SortField(get("sort")) if get("sort") in sort_values else SortField.RELEVANCE
    order_values = [o.value for o in SortOrder]
    sort_order = SortOrder(get("order")) if get("order") in order_values else SortOrder.DESC

    filters = FilterState(
        status=status,
        protocols=protocols,
        chains=_parse_chains(get("chains")),
        filterMode=FilterMode.OR if get("filterMode") == FilterMode.OR.value else FilterMode.AND,
        minReputation=min_rep,
        maxReputation=max_rep,
        skills=_split_slugs(get("skills")),
        domains=_split_slugs(get("domains")),
        showAllAgents=get("showAll") == "true",
        minTrustScore=min_trust,
        maxTrustScore=max_trust,
        isCurated=get("isCurated") == "true",
        curatedBy=get("curatedBy") or "",
        hasEmail=get("hasEmail") == "true",
        hasOasfEndpoint=get("hasOasfEndpoint") == "true",
        hasRecentReachability=get("hasRecentReachability") == "true",
    )

    return UrlSearchState(
        query=get("q") or "",
        pageSize=page_size,
        filters=filters,
        sortBy=sort_by,
        sortOrder=sort_order,
    )


def serialize_to_url(state: UrlSearchState) -> str:
    """Encode explore-page state as a query string, omitting defaults."""
    filters = state.filters
    pairs: List[Tuple[str, str]] = []

    query = state.query.strip()
    if query:
        pairs.append(("q", query))
    if state.pageSize != DEFAULT_PAGE_SIZE:
        pairs.append(("limit", str(state.pageSize)))

    # Both statuses selected is the same as none
    if filters.status == [STATUS_ACTIVE]:
        pairs.append(("active", "true"))
    elif filters.status == [STATUS_INACTIVE]:
        pairs.append(("active", "false"))

    for protocol in Protocol:
        if protocol.value in filters.protocols:
            pairs.append((protocol.value, "true"))

    if filters.chains:
        pairs.append(("chains", ",".join(str(c) for c in filters.chains)))
    if filters.minReputation > SCORE_MIN:
        pairs.append(("minRep", str(filters.minReputation)))
    if filters.maxReputation < SCORE_MAX:
        pairs.append(("maxRep", str(filters.maxReputation)))
    if filters.filterMode == FilterMode.OR:
        pairs.append(("filterMode", FilterMode.OR.value))
    if filters.skills:
        pairs.append(("skills", ",".join(filters.skills)))
    if filters.domains:
        pairs.append(("domains", ",".join(filters.domains)))
    if filters.showAllAgents:
        pairs.append(("showAll", "true"))

    if state.sortBy != SortField.RELEVANCE:
        pairs.append(("sort", state.sortBy.value))
    if state.sortOrder != SortOrder.DESC:
        pairs.append(("order", state.sortOrder.value))

    if filters.minTrustScore > SCORE_MIN:
        pairs.append(("minTrust", str(filters.minTrustScore)))
    if filters.maxTrustScore < SCORE_MAX:
        pairs.append(("maxTrust", str(filters.maxTrustScore)))
    if filters.isCurated:
        pairs.append(("isCurated", "true"))
    if filters.curatedBy:
        pairs.append(("curatedBy", filters.curatedBy))
    if filters.hasEmail:
        pairs.append(("hasEmail", "true"))
    if filters.hasOasfEndpoint:
        pairs.append(("hasOasfEndpoint", "true"))
    if filters.hasRecentReachability:
        pairs.append(("hasRecentReachability", "true"))

    return urlencode(pairs)
