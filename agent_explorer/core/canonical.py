"""
Canonical encoding of filter and option objects for cache keys.

Two logically equal parameter objects must map to the same key, whatever the
insertion order of their keys or the order of values in primitive lists.
Otherwise identical requests fragment the query cache.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Tuple

logger = logging.getLogger(__name__)

_PRIMITIVES = (str, int, float, bool, type(None))


def _is_primitive(value: Any) -> bool:
    return isinstance(value, _PRIMITIVES)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _sort_primitive_list(values: List[Any]) -> List[Any]:
    """Sort a list of primitives; mixed-type lists keep their order."""
    if all(_is_number(v) for v in values) or all(isinstance(v, bool) for v in values):
        return sorted(values)
    if all(isinstance(v, str) for v in values):
        return sorted(values)
    logger.debug(f"Leaving mixed-type list unsorted: {values!r}")
    return list(values)


def _normalize(value: Any) -> Any:
    if hasattr(value, "to_dict") and callable(value.to_dict):
        value = value.to_dict()

    if isinstance(value, dict):
        return {str(k): _normalize(value[k]) for k in sorted(value, key=str)}

    if isinstance(value, (list, tuple)):
        items = [_normalize(item) for item in value]
        if all(_is_primitive(item) for item in items):
            return _sort_primitive_list(items)
        # Lists of objects are order-significant
        return items

    if hasattr(value, "value") and _is_primitive(getattr(value, "value")):
        # Enum members encode as their value
        return value.value

    return value


def canonicalize(obj: Any) -> str:
    """
    Render ``obj`` as JSON in canonical form.

    - dict keys are sorted lexicographically, at every depth
    - lists made only of primitives are sorted (numbers ascending, strings ascending)
    - lists containing dicts or lists keep their order
    - None values are kept as explicit ``null`` keys, never dropped
    """
    return json.dumps(_normalize(obj), separators=(",", ":"), ensure_ascii=False)


class QueryKeys:
    """Hierarchical cache keys for agent queries."""

    ROOT = "agents"

    @classmethod
    def all(cls) -> Tuple[str, ...]:
        return (cls.ROOT,)

    @classmethod
    def lists(cls) -> Tuple[str, ...]:
        return cls.all() + ("list",)

    @classmethod
    def list(cls, params: Any) -> Tuple[str, ...]:
        """Key for a list/search query; the trailing element is the canonical params."""
        return cls.lists() + (canonicalize(params),)

    @classmethod
    def details(cls) -> Tuple[str, ...]:
        return cls.all() + ("detail",)

    @classmethod
    def detail(cls, agent_id: str) -> Tuple[str, ...]:
        return cls.details() + (agent_id,)

    @classmethod
    def reputations(cls) -> Tuple[str, ...]:
        return cls.all() + ("reputation",)

    @classmethod
    def reputation(cls, agent_id: str) -> Tuple[str, ...]:
        return cls.reputations() + (agent_id,)

    @classmethod
    def feedbacks(cls) -> Tuple[str, ...]:
        return cls.all() + ("feedback",)

    @classmethod
    def feedback(cls, agent_id: str) -> Tuple[str, ...]:
        return cls.feedbacks() + (agent_id,)


def keys_equal(a: Dict[str, Any], b: Dict[str, Any]) -> bool:
    """True when two parameter objects share a cache key."""
    return canonicalize(a) == canonicalize(b)
