"""
Agent Explorer filter core.

Filter state modelling, search parameter mapping, cache-key canonicalization
and a pairwise filter test harness backed by a synthetic agent pool.
"""

from .core.agent_pool import generate_pool
from .core.canonical import QueryKeys, canonicalize
from .core.case_matrix import (
    generate_edge_cases,
    generate_single_filter_cases,
    generate_sorting_cases,
)
from .core.filter_engine import MockSearchBackend, apply_filters
from .core.models import (
    AgentRecord,
    FilterMode,
    FilterState,
    FilterTestCase,
    ParsedFilters,
    Protocol,
    SearchParams,
    SortField,
    SortOrder,
    Transport,
    ValidationResult,
)
from .core.pairwise import generate_pairwise_subset, generate_pairwise_test_cases
from .core.parameter_space import DEFAULT_PARAMETER_SPACE, ParameterSpace, has_active_filters
from .core.presets import FilterPreset, FilterPresetStore
from .core.search_client import SearchClient, SearchResult
from .core.search_params import select_transport, to_search_params
from .core.url_params import UrlSearchState, parse_url_params, serialize_to_url
from .core.validators import validate, validate_sorting

__version__ = "0.1.0"

__all__ = [
    "AgentRecord",
    "DEFAULT_PARAMETER_SPACE",
    "FilterMode",
    "FilterPreset",
    "FilterPresetStore",
    "FilterState",
    "FilterTestCase",
    "MockSearchBackend",
    "ParameterSpace",
    "ParsedFilters",
    "Protocol",
    "QueryKeys",
    "SearchClient",
    "SearchParams",
    "SearchResult",
    "SortField",
    "SortOrder",
    "Transport",
    "UrlSearchState",
    "ValidationResult",
    "apply_filters",
    "canonicalize",
    "generate_edge_cases",
    "generate_pairwise_subset",
    "generate_pairwise_test_cases",
    "generate_pool",
    "generate_single_filter_cases",
    "generate_sorting_cases",
    "has_active_filters",
    "parse_url_params",
    "select_transport",
    "serialize_to_url",
    "to_search_params",
    "validate",
    "validate_sorting",
]
