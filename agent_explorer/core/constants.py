"""
Static configuration for the agent explorer filter core.
"""

from __future__ import annotations

from typing import Dict, List

# Supported testnets
SEPOLIA = 11155111
BASE_SEPOLIA = 84532
POLYGON_AMOY = 80002

SUPPORTED_CHAINS: List[int] = [SEPOLIA, BASE_SEPOLIA, POLYGON_AMOY]

CHAIN_NAMES: Dict[int, str] = {
    SEPOLIA: "Sepolia",
    BASE_SEPOLIA: "Base",
    POLYGON_AMOY: "Polygon",
}

# Synthetic reputation score buckets (0-100)
REPUTATION_BUCKETS: List[int] = [0, 25, 50, 75, 90, 100]

# Full span of the range dimensions
SCORE_MIN = 0
SCORE_MAX = 100

# Pagination
DEFAULT_PAGE_SIZE = 20
PAGE_SIZE_OPTIONS: List[int] = [10, 20, 50, 100]

# Backend routes
AGENTS_PATH = "/api/agents"
SEARCH_PATH = "/api/search"
STATS_PATH = "/api/stats"

# Pairwise generator limits
MAX_PAIRWISE_CASES = 200
ATTEMPTS_PER_CASE = 100
DEFAULT_PAIRWISE_SEED = 12345

# Synthetic pool timestamps are derived from this instant (2025-01-01T00:00:00Z)
POOL_REFERENCE_EPOCH = 1735689600
