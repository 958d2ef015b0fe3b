"""
Checks that search results honour the filters and sort order that produced them.

Violations are returned as data, never raised; only the transport assertion
raises, since a wrong endpoint means the request itself was malformed.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from .constants import AGENTS_PATH, SCORE_MAX, SCORE_MIN, SEARCH_PATH
from .models import (
    AgentRecord, AgentValidationResult, FilterMode, FilterState, FilterTestCase, Protocol,
    SortField, SortOrder, Transport, ValidationResult,
    STATUS_ACTIVE, STATUS_INACTIVE,
)

logger = logging.getLogger(__name__)

# Protocol -> (agent attribute, label used in messages)
_PROTOCOL_CHECKS = {
    Protocol.MCP.value: ("hasMcp", "MCP"),
    Protocol.A2A.value: ("hasA2a", "A2A"),
    Protocol.X402.value: ("x402Support", "x402"),
}


def _protocol_violations(record: AgentRecord, protocols: List[str], mode: FilterMode) -> List[str]:
    if not protocols:
        return []

    if mode == FilterMode.OR:
        if any(record.supports(protocol) for protocol in protocols):
            return []
        return [f"Expected at least one of [{', '.join(protocols)}] in OR mode"]

    violations = []
    for protocol in protocols:
        attribute, label = _PROTOCOL_CHECKS[protocol]
        if not record.supports(protocol):
            violations.append(f"Expected {attribute}=true for {label} filter")
    return violations


def validate_agent(
    record: AgentRecord,
    filters: FilterState,
    mode: FilterMode = FilterMode.AND,
) -> AgentValidationResult:
    """Check one agent against protocol, chain, status and reputation constraints."""
    violations = _protocol_violations(record, filters.protocols, FilterMode(mode))

    if filters.chains and record.chainId not in filters.chains:
        chains = ", ".join(str(c) for c in filters.chains)
        violations.append(f"Expected chainId to be one of [{chains}], got {record.chainId}")

    # Both or neither status selected means no constraint
    if filters.status == [STATUS_ACTIVE] and not record.active:
        violations.append(f"Expected active=true for '{STATUS_ACTIVE}' status filter")
    if filters.status == [STATUS_INACTIVE] and record.active:
        violations.append(f"Expected active=false for '{STATUS_INACTIVE}' status filter")

    reputation = record.reputationScore
    if filters.minReputation > SCORE_MIN and reputation < filters.minReputation:
        violations.append(f"Expected reputation >= {filters.minReputation}, got {reputation}")
    if filters.maxReputation < SCORE_MAX and reputation > filters.maxReputation:
        violations.append(f"Expected reputation <= {filters.maxReputation}, got {reputation}")

    return AgentValidationResult(valid=not violations, agent=record, violations=violations)


def validate(
    records: List[AgentRecord],
    filters: FilterState,
    mode: Optional[FilterMode] = None,
) -> ValidationResult:
    """
    Validate every record of a result set.

    Args:
        records: Agents returned by the search
        filters: Filter state the search was issued with
        mode: Protocol combination mode; defaults to ``filters.filterMode``

    Returns:
        ValidationResult listing only the agents with violations
    """
    mode = filters.filterMode if mode is None else mode
    violations = []
    for record in records:
        result = validate_agent(record, filters, mode)
        if not result.valid:
            violations.append(result)

    if violations:
        logger.debug(f"{len(violations)}/{len(records)} agents violate the applied filters")
    return ValidationResult(
        valid=not violations,
        totalAgents=len(records),
        validAgents=len(records) - len(violations),
        violations=violations,
    )


def validate_case(records: List[AgentRecord], case: FilterTestCase) -> ValidationResult:
    return validate(records, case.filters, case.filters.filterMode)


def _sort_value(field: SortField) -> Callable[[AgentRecord], Any]:
    if field == SortField.NAME:
        return lambda a: a.name.lower()
    if field == SortField.REPUTATION:
        return lambda a: a.reputationScore
    if field == SortField.CREATED_AT:
        return lambda a: a.createdAt
    return lambda a: a.relevanceScore or 0


def validate_sorting(records: List[AgentRecord], field: SortField, order: SortOrder) -> bool:
    """True iff consecutive records are non-decreasing (asc) or non-increasing (desc)."""
    if len(records) < 2:
        return True

    value = _sort_value(SortField(field))
    ascending = SortOrder(order) == SortOrder.ASC
    for prev, curr in zip(records, records[1:]):
        if ascending and value(prev) > value(curr):
            return False
        if not ascending and value(prev) < value(curr):
            return False
    return True


def format_validation_result(result: ValidationResult, max_violations: int = 5) -> str:
    """Multi-line report; at most ``max_violations`` agents are listed."""
    if result.valid:
        return f"All {result.totalAgents} agents passed validation"

    lines = [
        f"Validation failed: {len(result.violations)}/{result.totalAgents} agents have violations"
    ]
    for violation in result.violations[:max_violations]:
        lines.append(f"  Agent {violation.agent.id}:")
        for message in violation.violations:
            lines.append(f"    - {message}")

    remaining = len(result.violations) - max_violations
    if remaining > 0:
        lines.append(f"  ... and {remaining} more violations")

    return "\n".join(lines)


def assert_correct_transport(method: str, url: str, expected: Transport) -> None:
    """Raise AssertionError unless the request went to the expected endpoint."""
    method = (method or "GET").upper()
    expected = Transport(expected)

    if expected == Transport.POST:
        if method != "POST" or SEARCH_PATH not in url:
            raise AssertionError(
                f"Expected POST to {SEARCH_PATH}, got {method} to {url}. "
                f"Queries with text should use POST {SEARCH_PATH} endpoint."
            )
    elif method != "GET" or AGENTS_PATH not in url:
        raise AssertionError(
            f"Expected GET to {AGENTS_PATH}, got {method} to {url}. "
            f"Queries without text should use GET {AGENTS_PATH} endpoint."
        )
