"""
Filter dimensions, their defaults, and the reduced value sets used to
generate filter test combinations.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Tuple

from .constants import BASE_SEPOLIA, POLYGON_AMOY, SCORE_MAX, SCORE_MIN, SEPOLIA
from .models import (
    FilterMode, FilterState, SortField, SortOrder,
    STATUS_ACTIVE, STATUS_INACTIVE,
)


def create_default_filters() -> FilterState:
    """Fresh default (empty) filter state."""
    return FilterState()


# Reference value; compare against it, never mutate it
DEFAULT_FILTERS = create_default_filters()

# All protocol subsets
PROTOCOL_SUBSETS: List[Tuple[str, ...]] = [
    (),
    ("mcp",),
    ("a2a",),
    ("x402",),
    ("mcp", "a2a"),
    ("mcp", "x402"),
    ("a2a", "x402"),
    ("mcp", "a2a", "x402"),
]

# All subsets of the supported chains
CHAIN_SUBSETS: List[Tuple[int, ...]] = [
    (),
    (SEPOLIA,),
    (BASE_SEPOLIA,),
    (POLYGON_AMOY,),
    (SEPOLIA, BASE_SEPOLIA),
    (SEPOLIA, POLYGON_AMOY),
    (BASE_SEPOLIA, POLYGON_AMOY),
    (SEPOLIA, BASE_SEPOLIA, POLYGON_AMOY),
]

STATUS_OPTIONS: List[Tuple[str, ...]] = [
    (),
    (STATUS_ACTIVE,),
    (STATUS_INACTIVE,),
    (STATUS_ACTIVE, STATUS_INACTIVE),
]

DEFAULT_REPUTATION_RANGE: Tuple[int, int] = (SCORE_MIN, SCORE_MAX)

REPUTATION_RANGES: List[Tuple[int, int]] = [
    DEFAULT_REPUTATION_RANGE,
    (50, 100),
    (0, 50),
    (25, 75),
]


@dataclass
class ParameterSpace:
    """Representative values per filter dimension.

    Each dimension is a deliberately reduced subset of its full domain so the
    pairwise search stays tractable. Every dimension includes its default
    value, so "no filter applied" always takes part in the pairs.
    """
    query: List[str] = field(default_factory=lambda: ["", "trading", "agent"])
    protocols: List[Tuple[str, ...]] = field(default_factory=lambda: PROTOCOL_SUBSETS[:5])
    chains: List[Tuple[int, ...]] = field(default_factory=lambda: CHAIN_SUBSETS[:5])
    status: List[Tuple[str, ...]] = field(default_factory=lambda: list(STATUS_OPTIONS))
    filterMode: List[FilterMode] = field(default_factory=lambda: [FilterMode.AND, FilterMode.OR])
    reputation: List[Tuple[int, int]] = field(default_factory=lambda: list(REPUTATION_RANGES))
    showAllAgents: List[bool] = field(default_factory=lambda: [False, True])
    sortBy: List[SortField] = field(default_factory=lambda: list(SortField))
    sortOrder: List[SortOrder] = field(default_factory=lambda: [SortOrder.ASC, SortOrder.DESC])

    def dimensions(self) -> Dict[str, List[Any]]:
        """Dimension name to value list, in declaration order."""
        return {f.name: list(getattr(self, f.name)) for f in fields(self)}

    def validate(self) -> None:
        """Raise ValueError unless every dimension has >=2 values including its default."""
        defaults = DIMENSION_DEFAULTS
        for name, values in self.dimensions().items():
            if len(values) < 2:
                raise ValueError(f"Dimension '{name}' needs at least 2 values, got {len(values)}")
            if defaults[name] not in values:
                raise ValueError(f"Dimension '{name}' must include its default value {defaults[name]!r}")


DIMENSION_DEFAULTS: Dict[str, Any] = {
    "query": "",
    "protocols": (),
    "chains": (),
    "status": (),
    "filterMode": FilterMode.AND,
    "reputation": DEFAULT_REPUTATION_RANGE,
    "showAllAgents": False,
    "sortBy": SortField.RELEVANCE,
    "sortOrder": SortOrder.DESC,
}

DEFAULT_PARAMETER_SPACE = ParameterSpace()


def has_active_filters(filters: FilterState) -> bool:
    """True iff any filter dimension differs from its default.

    Drives the "clear all" control; always derive it from the current state.
    """
    return (
        len(filters.status) > 0
        or len(filters.protocols) > 0
        or len(filters.chains) > 0
        or filters.filterMode != DEFAULT_FILTERS.filterMode
        or filters.minReputation > SCORE_MIN
        or filters.maxReputation < SCORE_MAX
        or filters.minTrustScore > SCORE_MIN
        or filters.maxTrustScore < SCORE_MAX
        or len(filters.skills) > 0
        or len(filters.domains) > 0
        or filters.showAllAgents
        or filters.isCurated
        or bool(filters.curatedBy)
        or bool(filters.erc8004Version)
        or bool(filters.mcpVersion)
        or bool(filters.a2aVersion)
        or filters.hasEmail
        or filters.hasOasfEndpoint
        or filters.hasRecentReachability
    )


def filters_from_combination(combination: Dict[str, Any]) -> FilterState:
    """Build a FilterState from one value per dimension of a ParameterSpace."""
    min_rep, max_rep = combination.get("reputation", DEFAULT_REPUTATION_RANGE)
    return FilterState(
        status=list(combination.get("status", ())),
        protocols=list(combination.get("protocols", ())),
        chains=list(combination.get("chains", ())),
        filterMode=combination.get("filterMode", FilterMode.AND),
        minReputation=min_rep,
        maxReputation=max_rep,
        showAllAgents=combination.get("showAllAgents", False),
    )
