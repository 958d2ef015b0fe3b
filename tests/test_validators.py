"""
Tests for result-set validation.
"""

from dataclasses import replace

import pytest

from agent_explorer.core.agent_pool import generate_pool
from agent_explorer.core.constants import BASE_SEPOLIA, SEPOLIA
from agent_explorer.core.models import FilterMode, FilterState, SortField, SortOrder, Transport
from agent_explorer.core.case_matrix import generate_edge_cases
from agent_explorer.core.validators import (
    assert_correct_transport,
    format_validation_result,
    validate,
    validate_agent,
    validate_case,
    validate_sorting,
)


@pytest.fixture
def agent():
    """Sepolia agent with MCP only, active, reputation 50."""
    base = generate_pool()[0]
    return replace(base, hasMcp=True, hasA2a=False, x402Support=False, active=True, reputationScore=50)


class TestValidateAgent:
    """Per-agent constraint checks."""

    def test_default_filters_pass(self, agent):
        assert validate_agent(agent, FilterState()).valid

    def test_and_mode_missing_protocol(self, agent):
        result = validate_agent(agent, FilterState(protocols=["mcp", "a2a"]))
        assert not result.valid
        assert result.violations == ["Expected hasA2a=true for A2A filter"]

    def test_and_mode_reports_every_missing_protocol(self, agent):
        result = validate_agent(replace(agent, hasMcp=False), FilterState(protocols=["mcp", "x402"]))
        assert result.violations == [
            "Expected hasMcp=true for MCP filter",
            "Expected x402Support=true for x402 filter",
        ]

    def test_or_mode_any_protocol(self, agent):
        filters = FilterState(protocols=["mcp", "a2a"], filterMode=FilterMode.OR)
        assert validate_agent(agent, filters, FilterMode.OR).valid

    def test_or_mode_no_protocol(self, agent):
        filters = FilterState(protocols=["a2a", "x402"])
        result = validate_agent(agent, filters, FilterMode.OR)
        assert result.violations == ["Expected at least one of [a2a, x402] in OR mode"]

    def test_chain_violation(self, agent):
        result = validate_agent(agent, FilterState(chains=[BASE_SEPOLIA]))
        assert result.violations == [f"Expected chainId to be one of [{BASE_SEPOLIA}], got {SEPOLIA}"]

    def test_status_active(self, agent):
        result = validate_agent(replace(agent, active=False), FilterState(status=["active"]))
        assert result.violations == ["Expected active=true for 'active' status filter"]

    def test_status_inactive(self, agent):
        result = validate_agent(agent, FilterState(status=["inactive"]))
        assert result.violations == ["Expected active=false for 'inactive' status filter"]

    def test_both_statuses_unconstrained(self, agent):
        filters = FilterState(status=["active", "inactive"])
        assert validate_agent(agent, filters).valid
        assert validate_agent(replace(agent, active=False), filters).valid

    def test_reputation_bounds(self, agent):
        assert validate_agent(agent, FilterState(minReputation=75)).violations == [
            "Expected reputation >= 75, got 50"
        ]
        assert validate_agent(agent, FilterState(maxReputation=25)).violations == [
            "Expected reputation <= 25, got 50"
        ]
        assert validate_agent(agent, FilterState(minReputation=50, maxReputation=50)).valid


class TestValidate:
    """Result-set summaries."""

    def test_all_valid(self):
        pool = generate_pool()
        active = [a for a in pool if a.active]
        result = validate(active, FilterState(status=["active"]))
        assert result.valid
        assert result.totalAgents == result.validAgents == len(active)
        assert result.violations == []

    def test_counts_violations(self):
        pool = generate_pool()
        result = validate(pool, FilterState(status=["active"]))
        assert not result.valid
        assert result.totalAgents == 288
        assert result.validAgents == 144
        assert len(result.violations) == 144

    def test_mode_defaults_to_filter_state(self, agent):
        filters = FilterState(protocols=["mcp", "a2a"], filterMode=FilterMode.OR)
        assert validate([agent], filters).valid
        assert not validate([agent], filters, FilterMode.AND).valid

    def test_validate_case(self, agent):
        or_case = next(c for c in generate_edge_cases() if c.id == "edge-or-mode")
        assert validate_case([agent], or_case).valid

    def test_empty_result_is_valid(self):
        assert validate([], FilterState(chains=[SEPOLIA])).valid


class TestValidateSorting:

    @pytest.fixture
    def pool(self):
        return generate_pool()

    def test_trivial_lists(self, pool):
        assert validate_sorting([], SortField.NAME, SortOrder.ASC)
        assert validate_sorting(pool[:1], SortField.NAME, SortOrder.DESC)

    def test_detects_inversion(self, pool):
        ascending = sorted(pool[:6], key=lambda a: a.reputationScore)
        assert validate_sorting(ascending, SortField.REPUTATION, SortOrder.ASC)
        assert not validate_sorting(ascending, SortField.REPUTATION, SortOrder.DESC)

    def test_equal_values_pass_both_orders(self, pool):
        same = [a for a in pool if a.reputationScore == 75][:5]
        assert validate_sorting(same, SortField.REPUTATION, SortOrder.ASC)
        assert validate_sorting(same, SortField.REPUTATION, SortOrder.DESC)

    def test_created_at(self, pool):
        # Pool is generated newest first
        assert validate_sorting(pool, SortField.CREATED_AT, SortOrder.DESC)
        assert not validate_sorting(pool, SortField.CREATED_AT, SortOrder.ASC)

    def test_accepts_string_values(self, pool):
        assert validate_sorting(pool, "createdAt", "desc")

    def test_missing_relevance_counts_as_zero(self, pool):
        assert validate_sorting(pool[:3], SortField.RELEVANCE, SortOrder.DESC)


class TestFormatValidationResult:

    def test_success(self):
        result = validate(generate_pool()[:3], FilterState())
        assert format_validation_result(result) == "All 3 agents passed validation"

    def test_failure_is_capped(self):
        pool = generate_pool()
        result = validate(pool, FilterState(status=["inactive"]))
        report = format_validation_result(result, max_violations=2)
        lines = report.splitlines()
        assert lines[0] == "Validation failed: 144/288 agents have violations"
        assert lines[1] == f"  Agent {pool[0].id}:"
        assert lines[2] == "    - Expected active=false for 'inactive' status filter"
        assert lines[-1] == "  ... and 142 more violations"
        assert sum(1 for line in lines if line.startswith("  Agent ")) == 2


class TestAssertCorrectTransport:

    def test_get(self):
        assert_correct_transport("GET", "http://localhost/api/agents?limit=20", Transport.GET)

    def test_post(self):
        assert_correct_transport("post", "http://localhost/api/search", Transport.POST)

    def test_missing_method_means_get(self):
        assert_correct_transport(None, "/api/agents", Transport.GET)

    def test_wrong_endpoint(self):
        with pytest.raises(AssertionError, match="Expected POST to /api/search"):
            assert_correct_transport("GET", "/api/agents?q=agent", Transport.POST)
        with pytest.raises(AssertionError, match="Expected GET to /api/agents"):
            assert_correct_transport("POST", "/api/search", Transport.GET)
