"""
Tests for the filter state to search params mapping.
"""

import json
from urllib.parse import parse_qs

import pytest

from agent_explorer.core.constants import BASE_SEPOLIA, SEPOLIA
from agent_explorer.core.models import FilterMode, FilterState, SearchParams, SortField, SortOrder, Transport
from agent_explorer.core.search_params import (
    create_cursor,
    cursor_offset,
    parse_cursor,
    select_transport,
    to_query_string,
    to_search_body,
    to_search_params,
)


class TestToSearchParams:
    """Sparse wire encoding."""

    def test_trimmed_query_only(self):
        assert to_search_params("  agent  ", FilterState(), 20, 0).to_dict() == {"q": "agent", "limit": 20}

    def test_inactive_status(self):
        params = to_search_params("", FilterState(status=["inactive"]), 20, 0)
        assert params.to_dict() == {"active": False, "limit": 20}

    def test_show_all_agents(self):
        params = to_search_params("", FilterState(showAllAgents=True), 20, 0)
        assert params.to_dict() == {"hasRegistrationFile": False, "limit": 20}

    def test_reputation_range_and_cursor(self):
        params = to_search_params("", FilterState(minReputation=20, maxReputation=80), 10, 40)
        assert params.to_dict() == {
            "minRep": 20,
            "maxRep": 80,
            "limit": 10,
            "cursor": '{"_global_offset":40}',
        }

    def test_or_mode_protocols(self):
        filters = FilterState(protocols=["mcp", "a2a"], filterMode=FilterMode.OR)
        params = to_search_params("", filters, 20, 0)
        assert params.to_dict() == {"mcp": True, "a2a": True, "filterMode": "OR", "limit": 20}

    def test_default_state_is_limit_only(self):
        assert to_search_params("", FilterState()).to_dict() == {"limit": 20}

    def test_both_statuses_omit_active(self):
        params = to_search_params("", FilterState(status=["active", "inactive"]))
        assert params.active is None

    def test_show_all_with_explicit_status(self):
        params = to_search_params("", FilterState(showAllAgents=True, status=["active"]))
        assert params.active is True
        assert params.hasRegistrationFile is False

    def test_lists_copied(self):
        filters = FilterState(chains=[SEPOLIA], skills=["nlp"], domains=["finance"])
        params = to_search_params("", filters)
        assert (params.chains, params.skills, params.domains) == ([SEPOLIA], ["nlp"], ["finance"])
        filters.chains.append(BASE_SEPOLIA)
        assert params.chains == [SEPOLIA]

    def test_trust_bounds(self):
        params = to_search_params("", FilterState(minTrustScore=30, maxTrustScore=100))
        assert params.minTrust == 30
        assert params.maxTrust is None

    def test_extended_flags(self):
        filters = FilterState(
            isCurated=True,
            erc8004Version="v1",
            mcpVersion="2025-06-18",
            hasEmail=True,
            hasOasfEndpoint=True,
            hasRecentReachability=True,
        )
        data = to_search_params("", filters).to_dict()
        assert data["isCurated"] is True
        assert data["erc8004Version"] == "v1"
        assert data["mcpVersion"] == "2025-06-18"
        assert "a2aVersion" not in data
        assert data["hasEmail"] and data["hasOasfEndpoint"] and data["hasRecentReachability"]

    def test_curated_by_checksummed(self):
        address = "0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed"
        params = to_search_params("", FilterState(curatedBy=address))
        assert params.curatedBy == "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"

    def test_invalid_curator_dropped(self):
        params = to_search_params("", FilterState(curatedBy="not-an-address"))
        assert params.curatedBy is None

    def test_sort_only_when_given(self):
        assert to_search_params("", FilterState()).sort is None
        params = to_search_params("", FilterState(), sort_by=SortField.NAME, sort_order=SortOrder.ASC)
        assert (params.sort, params.order) == ("name", "asc")


class TestCursor:

    def test_create(self):
        assert create_cursor(40) == '{"_global_offset":40}'

    def test_parse(self):
        assert parse_cursor('{"_global_offset":40}') == {"_global_offset": 40}
        assert cursor_offset(create_cursor(100)) == 100

    @pytest.mark.parametrize("cursor", [None, "", "not json", "[1, 2]"])
    def test_invalid_cursor_is_empty(self, cursor):
        assert parse_cursor(cursor) == {}
        assert cursor_offset(cursor) == 0

    def test_negative_offset_rejected(self):
        assert cursor_offset('{"_global_offset":-5}') == 0


class TestTransport:

    def test_query_uses_post(self):
        assert select_transport(SearchParams(q="agent")) == Transport.POST

    @pytest.mark.parametrize("query", [None, "", "   "])
    def test_blank_query_uses_get(self, query):
        assert select_transport(SearchParams(q=query)) == Transport.GET


class TestWireFormats:
    """GET query strings and POST bodies."""

    def test_query_string(self):
        filters = FilterState(protocols=["mcp"], chains=[SEPOLIA, BASE_SEPOLIA], status=["active"])
        query = parse_qs(to_query_string(to_search_params("", filters)))
        assert query == {
            "mcp": ["true"],
            "active": ["true"],
            "limit": ["20"],
            "chains": [f"{SEPOLIA},{BASE_SEPOLIA}"],
        }

    def test_query_string_false_flag(self):
        query = to_query_string(to_search_params("", FilterState(showAllAgents=True)))
        assert query == "hasRegistrationFile=false&limit=20"

    def test_search_body(self):
        filters = FilterState(
            protocols=["a2a"], chains=[SEPOLIA], minReputation=50, filterMode=FilterMode.OR,
        )
        params = to_search_params(" trading ", filters, 10, 20, SortField.REPUTATION, SortOrder.DESC)
        assert to_search_body(params) == {
            "query": "trading",
            "limit": 10,
            "filters": {"a2a": True, "chainIds": [SEPOLIA], "minRep": 50, "filterMode": "OR"},
            "cursor": '{"_global_offset":20}',
            "sort": "reputation",
            "order": "desc",
        }

    def test_search_body_without_filters(self):
        body = to_search_body(to_search_params("agent", FilterState()))
        assert body == {"query": "agent", "limit": 20}
        json.dumps(body)
