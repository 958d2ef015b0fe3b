"""
Hand-written filter test cases: single filters, edge cases and sort orders.
"""

from __future__ import annotations

from dataclasses import replace
from typing import List

from .constants import CHAIN_NAMES, SUPPORTED_CHAINS
from .models import (
    CaseCategory, FilterMode, FilterTestCase, Protocol, SortField, SortOrder, Transport,
    STATUS_ACTIVE, STATUS_INACTIVE,
)
from .parameter_space import create_default_filters


def expected_transport(query: str) -> Transport:
    """Text queries go to POST /search; blank or whitespace-only ones to GET."""
    return Transport.POST if query.strip() else Transport.GET


def _case(case_id: str, name: str, category: CaseCategory, query: str = "", **overrides) -> FilterTestCase:
    sort_by = overrides.pop("sortBy", SortField.RELEVANCE)
    sort_order = overrides.pop("sortOrder", SortOrder.DESC)
    return FilterTestCase(
        id=case_id,
        name=name,
        query=query,
        filters=replace(create_default_filters(), **overrides),
        sortBy=sort_by,
        sortOrder=sort_order,
        expectedTransport=expected_transport(query),
        category=category,
    )


def generate_single_filter_cases() -> List[FilterTestCase]:
    """Each filter dimension exercised in isolation."""
    single = CaseCategory.SINGLE_FILTER
    cases = []

    for protocol in Protocol:
        cases.append(_case(
            f"single-protocol-{protocol.value}",
            f"Single {protocol.value.upper()} filter",
            single,
            protocols=[protocol.value],
        ))

    for chain_id in SUPPORTED_CHAINS:
        cases.append(_case(
            f"single-chain-{chain_id}",
            f"Single chain {CHAIN_NAMES[chain_id]} filter",
            single,
            chains=[chain_id],
        ))

    cases.extend([
        _case("single-status-active", "Active agents only", single, status=[STATUS_ACTIVE]),
        _case("single-status-inactive", "Inactive agents only", single, status=[STATUS_INACTIVE]),
        _case("single-query-trading", 'Search query "trading"', single, query="trading"),
        _case("single-query-agent", 'Search query "agent"', single, query="agent"),
        _case("single-rep-min-50", "Minimum reputation 50", single, minReputation=50, maxReputation=100),
        _case("single-rep-max-50", "Maximum reputation 50", single, minReputation=0, maxReputation=50),
        _case("single-show-all", "Show all agents toggle", single, showAllAgents=True),
    ])
    return cases


def generate_edge_cases() -> List[FilterTestCase]:
    """Boundary inputs: empty and saturated filters, odd queries, degenerate ranges."""
    edge = CaseCategory.EDGE_CASE
    all_protocols = [p.value for p in Protocol]

    return [
        _case("edge-no-filters", "No filters (defaults only)", edge),
        _case(
            "edge-all-filters", "All filters enabled", edge,
            query="agent",
            status=[STATUS_ACTIVE],
            protocols=all_protocols,
            chains=list(SUPPORTED_CHAINS),
            filterMode=FilterMode.AND,
            minReputation=25,
            maxReputation=75,
            sortBy=SortField.REPUTATION,
        ),
        _case(
            "edge-show-all-with-status", "Show all agents with status filter", edge,
            showAllAgents=True, status=[STATUS_INACTIVE],
        ),
        _case("edge-special-chars", "Special characters in query", edge,
              query="test <script>alert('xss')</script>"),
        _case("edge-unicode", "Unicode characters in query", edge, query="agent 交易代理"),
        _case(
            "edge-or-mode", "OR filter mode with multiple protocols", edge,
            protocols=[Protocol.MCP.value, Protocol.A2A.value], filterMode=FilterMode.OR,
        ),
        _case("edge-rep-equal", "Reputation min equals max", edge, minReputation=50, maxReputation=50),
        _case("edge-empty-query", "Empty query with whitespace", edge, query="   "),
        _case("edge-long-query", "Very long query string", edge, query="a" * 500),
        _case("edge-all-chains", "All chains selected", edge, chains=list(SUPPORTED_CHAINS)),
        _case(
            "edge-query-or-protocols", "Query with all protocols in OR mode", edge,
            query="trading", protocols=all_protocols, filterMode=FilterMode.OR,
        ),
        _case("edge-both-status", "Both active and inactive status", edge,
              status=[STATUS_ACTIVE, STATUS_INACTIVE]),
    ]


def generate_sorting_cases() -> List[FilterTestCase]:
    """Every sort field in both directions, default filters."""
    return [
        _case(
            f"sort-{field.value}-{order.value}",
            f"Sort by {field.value} {order.value}",
            CaseCategory.SORTING,
            sortBy=field,
            sortOrder=order,
        )
        for field in SortField
        for order in (SortOrder.ASC, SortOrder.DESC)
    ]


def generate_fixed_cases() -> List[FilterTestCase]:
    return generate_single_filter_cases() + generate_edge_cases() + generate_sorting_cases()
