"""
Pairwise (2-wise) filter combination generator.

Covers every pair of parameter values at least once without enumerating the
full cross product. Greedy, in the spirit of IPO: each round samples random
candidate combinations, keeps the one covering the most still-uncovered
pairs, and stops once nothing new can be covered or the case cap is hit.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Set, Tuple

from .constants import ATTEMPTS_PER_CASE, DEFAULT_PAIRWISE_SEED, MAX_PAIRWISE_CASES, SCORE_MAX, SCORE_MIN
from .models import CaseCategory, FilterMode, FilterTestCase, SortField, SortOrder
from .parameter_space import DEFAULT_PARAMETER_SPACE, ParameterSpace, filters_from_combination
from .case_matrix import expected_transport

logger = logging.getLogger(__name__)

# (dimension index, value index, dimension index, value index), first dimension < second
Pair = Tuple[int, int, int, int]

_LCG_MULTIPLIER = 1103515245
_LCG_INCREMENT = 12345
_LCG_MASK = 0x7FFFFFFF


class SeededRandom:
    """Linear congruential generator with explicit state.

    ``state = (state * 1103515245 + 12345) & 0x7fffffff``; each draw returns
    ``state / 0x7fffffff``. Integer arithmetic is exact, so a given seed
    always yields the same sequence.
    """

    def __init__(self, seed: int):
        self.state = seed & _LCG_MASK

    def next(self) -> float:
        self.state = (self.state * _LCG_MULTIPLIER + _LCG_INCREMENT) & _LCG_MASK
        return self.state / _LCG_MASK

    def choice_index(self, size: int) -> int:
        """Random index in [0, size)."""
        # next() can return exactly 1.0
        return min(int(self.next() * size), size - 1)


@dataclass
class PairwiseResult:
    """Generated combinations plus coverage bookkeeping."""
    combinations: List[Dict[str, Any]] = field(default_factory=list)
    totalPairs: int = 0
    uncovered: Set[Pair] = field(default_factory=set)

    @property
    def coveredPairs(self) -> int:
        return self.totalPairs - len(self.uncovered)

    @property
    def coverage(self) -> float:
        """Covered share of all required pairs, in percent."""
        if self.totalPairs == 0:
            return 100.0
        return self.coveredPairs / self.totalPairs * 100


def enumerate_pairs(sizes: List[int]) -> Set[Pair]:
    """Every (dimA=value, dimB=value) pair that must be covered."""
    pairs: Set[Pair] = set()
    for i in range(len(sizes)):
        for j in range(i + 1, len(sizes)):
            for vi in range(sizes[i]):
                for vj in range(sizes[j]):
                    pairs.add((i, vi, j, vj))
    return pairs


def pairs_of(candidate: List[int]) -> List[Pair]:
    """All pairs a full combination (one value index per dimension) covers."""
    return [
        (i, candidate[i], j, candidate[j])
        for i in range(len(candidate))
        for j in range(i + 1, len(candidate))
    ]


def count_uncovered(candidate: List[int], uncovered: Set[Pair]) -> int:
    return sum(1 for pair in pairs_of(candidate) if pair in uncovered)


def _anchored_candidate(uncovered: Set[Pair], sizes: List[int], random: SeededRandom) -> List[int]:
    """Random combination forced to contain the smallest uncovered pair."""
    i, vi, j, vj = min(uncovered)
    candidate = [random.choice_index(size) for size in sizes]
    candidate[i] = vi
    candidate[j] = vj
    return candidate


def generate_pairwise_combinations(
    dimensions: Dict[str, List[Any]],
    seed: int = DEFAULT_PAIRWISE_SEED,
    max_cases: int = MAX_PAIRWISE_CASES,
    attempts_per_case: int = ATTEMPTS_PER_CASE,
) -> PairwiseResult:
    """
    Greedily pick combinations until every value pair is covered.

    Each round draws ``attempts_per_case`` candidates. The first is anchored on
    an uncovered pair so a round can only score zero once coverage is complete;
    the rest are fully random. At most ``max_cases`` combinations are emitted.

    Args:
        dimensions: dimension name -> representative values
        seed: PRNG seed; equal seeds give identical output
        max_cases: hard cap on emitted combinations
        attempts_per_case: candidates sampled per emitted combination

    Returns:
        PairwiseResult with the combinations (dimension name -> value) and coverage
    """
    names = list(dimensions.keys())
    sizes = [len(dimensions[name]) for name in names]
    for name, size in zip(names, sizes):
        if size == 0:
            raise ValueError(f"Dimension '{name}' has no values")

    random = SeededRandom(seed)
    uncovered = enumerate_pairs(sizes)
    result = PairwiseResult(totalPairs=len(uncovered))

    while uncovered and len(result.combinations) < max_cases:
        best_case: List[int] = []
        best_coverage = 0

        for attempt in range(attempts_per_case):
            if attempt == 0:
                candidate = _anchored_candidate(uncovered, sizes, random)
            else:
                candidate = [random.choice_index(size) for size in sizes]
            coverage = count_uncovered(candidate, uncovered)
            if coverage > best_coverage:
                best_case = candidate
                best_coverage = coverage

        if best_coverage == 0:
            break

        uncovered.difference_update(pairs_of(best_case))
        result.combinations.append({
            name: dimensions[name][index] for name, index in zip(names, best_case)
        })
        logger.debug(f"Pairwise case {len(result.combinations)} covers {best_coverage} new pairs")

    result.uncovered = uncovered
    logger.info(
        f"Pairwise: Generated {len(result.combinations)} combinations covering "
        f"{result.coveredPairs}/{result.totalPairs} pairs ({result.coverage:.1f}%)"
    )
    return result


def describe_combination(combination: Dict[str, Any]) -> str:
    """Human-readable summary listing only the non-default dimensions."""
    parts = []
    query = combination.get("query", "")
    protocols = combination.get("protocols", ())
    chains = combination.get("chains", ())
    status = combination.get("status", ())
    min_rep, max_rep = combination.get("reputation", (SCORE_MIN, SCORE_MAX))
    sort_by = combination.get("sortBy", SortField.RELEVANCE)
    sort_order = combination.get("sortOrder", SortOrder.DESC)

    if query:
        parts.append(f"q={json.dumps(query)}")
    if protocols:
        parts.append(f"protocols=[{','.join(protocols)}]")
    if chains:
        parts.append(f"chains=[{len(chains)}]")
    if status:
        parts.append(f"status=[{','.join(status)}]")
    if combination.get("filterMode") == FilterMode.OR:
        parts.append("OR mode")
    if min_rep > SCORE_MIN or max_rep < SCORE_MAX:
        parts.append(f"rep={min_rep}-{max_rep}")
    if combination.get("showAllAgents"):
        parts.append("showAll")
    if sort_by != SortField.RELEVANCE or sort_order != SortOrder.DESC:
        parts.append(f"sort={sort_by.value}:{sort_order.value}")

    return ", ".join(parts) if parts else "default filters"


def combination_to_test_case(combination: Dict[str, Any], index: int) -> FilterTestCase:
    query = combination.get("query", "")
    return FilterTestCase(
        id=f"pairwise-{index:03d}",
        name=f"Pairwise {index + 1}: {describe_combination(combination)}",
        query=query,
        filters=filters_from_combination(combination),
        sortBy=combination.get("sortBy", SortField.RELEVANCE),
        sortOrder=combination.get("sortOrder", SortOrder.DESC),
        expectedTransport=expected_transport(query),
        category=CaseCategory.COMBINATION,
    )


def generate_pairwise_test_cases(
    param_space: ParameterSpace = DEFAULT_PARAMETER_SPACE,
    seed: int = DEFAULT_PAIRWISE_SEED,
) -> List[FilterTestCase]:
    """Pairwise-covering filter test cases for a parameter space."""
    param_space.validate()
    result = generate_pairwise_combinations(param_space.dimensions(), seed)
    return [combination_to_test_case(c, i) for i, c in enumerate(result.combinations)]


def generate_pairwise_subset(count: int, seed: int = DEFAULT_PAIRWISE_SEED) -> List[FilterTestCase]:
    """Evenly spaced subset of the default pairwise cases, for faster runs."""
    all_cases = generate_pairwise_test_cases(DEFAULT_PARAMETER_SPACE, seed)
    step = max(1, len(all_cases) // max(count, 1))
    return all_cases[::step][:count]
