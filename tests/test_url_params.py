"""
Tests for explore-page URL state parsing and serialization.
"""

import pytest

from agent_explorer.core.constants import BASE_SEPOLIA, POLYGON_AMOY, SEPOLIA
from agent_explorer.core.models import FilterMode, FilterState, SortField, SortOrder
from agent_explorer.core.url_params import UrlSearchState, parse_url_params, serialize_to_url


class TestParseUrlParams:
    """Lenient decoding."""

    def test_empty(self):
        assert parse_url_params("") == UrlSearchState()

    def test_full(self):
        state = parse_url_params(
            f"?q=trading&limit=50&active=false&mcp=true&x402=true&chains={SEPOLIA},{POLYGON_AMOY}"
            "&minRep=20&maxRep=80&filterMode=OR&skills=nlp,,vision&domains=finance"
            "&showAll=true&sort=reputation&order=asc"
        )
        assert state.query == "trading"
        assert state.pageSize == 50
        assert state.sortBy == SortField.REPUTATION
        assert state.sortOrder == SortOrder.ASC
        filters = state.filters
        assert filters.status == ["inactive"]
        assert filters.protocols == ["mcp", "x402"]
        assert filters.chains == [SEPOLIA, POLYGON_AMOY]
        assert (filters.minReputation, filters.maxReputation) == (20, 80)
        assert filters.filterMode == FilterMode.OR
        assert filters.skills == ["nlp", "vision"]
        assert filters.domains == ["finance"]
        assert filters.showAllAgents is True

    @pytest.mark.parametrize("limit", ["7", "abc", "1000"])
    def test_page_size_whitelist(self, limit):
        assert parse_url_params(f"limit={limit}").pageSize == 20

    def test_unknown_chains_dropped(self):
        assert parse_url_params(f"chains=1,{BASE_SEPOLIA},oops").filters.chains == [BASE_SEPOLIA]

    def test_ranges_clamped(self):
        filters = parse_url_params("minRep=-10&maxRep=250&minTrust=-1&maxTrust=101").filters
        assert (filters.minReputation, filters.maxReputation) == (0, 100)
        assert (filters.minTrustScore, filters.maxTrustScore) == (0, 100)

    def test_inverted_range_swapped(self):
        filters = parse_url_params("minRep=90&maxRep=10").filters
        assert (filters.minReputation, filters.maxReputation) == (10, 90)

    def test_zero_min_is_kept(self):
        assert parse_url_params("minRep=0&maxRep=0").filters.maxReputation == 0

    def test_invalid_numbers_use_defaults(self):
        filters = parse_url_params("minRep=abc&maxRep=xyz").filters
        assert (filters.minReputation, filters.maxReputation) == (0, 100)

    def test_unknown_sort_falls_back(self):
        state = parse_url_params("sort=popularity&order=up")
        assert (state.sortBy, state.sortOrder) == (SortField.RELEVANCE, SortOrder.DESC)

    def test_extended_flags(self):
        filters = parse_url_params(
            "isCurated=true&curatedBy=0xabc&hasEmail=true&hasOasfEndpoint=true&hasRecentReachability=true"
        ).filters
        assert filters.isCurated and filters.hasEmail and filters.hasOasfEndpoint
        assert filters.hasRecentReachability
        assert filters.curatedBy == "0xabc"


class TestSerializeToUrl:
    """Sparse encoding."""

    def test_default_state_is_empty(self):
        assert serialize_to_url(UrlSearchState()) == ""

    def test_query_trimmed(self):
        assert serialize_to_url(UrlSearchState(query="  test  ")) == "q=test"

    def test_defaults_omitted(self):
        state = UrlSearchState(
            pageSize=20,
            filters=FilterState(minReputation=0, maxReputation=100, filterMode=FilterMode.AND),
            sortBy=SortField.RELEVANCE,
            sortOrder=SortOrder.DESC,
        )
        assert serialize_to_url(state) == ""

    def test_non_defaults(self):
        state = UrlSearchState(
            pageSize=50,
            filters=FilterState(status=["active"], protocols=["a2a"], minReputation=20, showAllAgents=True),
            sortBy=SortField.NAME,
            sortOrder=SortOrder.ASC,
        )
        assert serialize_to_url(state) == (
            "limit=50&active=true&a2a=true&minRep=20&showAll=true&sort=name&order=asc"
        )

    def test_both_statuses_omitted(self):
        state = UrlSearchState(filters=FilterState(status=["active", "inactive"]))
        assert serialize_to_url(state) == ""

    def test_lists_comma_joined(self):
        state = UrlSearchState(filters=FilterState(skills=["nlp", "vision"], chains=[SEPOLIA, BASE_SEPOLIA]))
        assert serialize_to_url(state) == f"chains={SEPOLIA}%2C{BASE_SEPOLIA}&skills=nlp%2Cvision"


class TestRoundTrip:
    """serialize then parse reproduces the state."""

    @pytest.mark.parametrize("state", [
        UrlSearchState(),
        UrlSearchState(query="agent", pageSize=100),
        UrlSearchState(filters=FilterState(status=["inactive"], chains=[POLYGON_AMOY])),
        UrlSearchState(
            filters=FilterState(
                protocols=["mcp", "a2a", "x402"],
                filterMode=FilterMode.OR,
                minReputation=25,
                maxReputation=75,
                minTrustScore=10,
                skills=["nlp"],
                domains=["finance", "tech"],
                isCurated=True,
                hasEmail=True,
            ),
            sortBy=SortField.CREATED_AT,
            sortOrder=SortOrder.ASC,
        ),
    ])
    def test_round_trip(self, state):
        assert parse_url_params(serialize_to_url(state)) == state
