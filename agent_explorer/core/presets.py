"""
Named filter presets, kept in memory with JSON import and export.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional

from .constants import SCORE_MAX, SCORE_MIN
from .models import FilterMode, FilterState, ImportResult, STATUS_ACTIVE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterPreset:
    """A saved subset of the filter state."""
    id: str
    name: str
    chains: List[int] = field(default_factory=list)
    filterMode: str = FilterMode.AND.value
    minReputation: int = SCORE_MIN
    maxReputation: int = SCORE_MAX
    activeOnly: bool = False
    createdAt: int = 0  # epoch milliseconds; 0 for built-ins

    @classmethod
    def from_dict(cls, preset_id: str, data: Dict[str, Any], created_at: int) -> FilterPreset:
        """Validate an imported preset. Raises ValueError on malformed data."""
        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValueError("Preset name must be a non-empty string")

        chains = data.get("chains", [])
        if not isinstance(chains, list) or not all(_is_int(c) for c in chains):
            raise ValueError(f"Preset chains must be a list of integers, got {chains!r}")

        filter_mode = data.get("filterMode", FilterMode.AND.value)
        if filter_mode not in (FilterMode.AND.value, FilterMode.OR.value):
            raise ValueError(f"Unknown filter mode: {filter_mode!r}")

        min_rep = data.get("minReputation", SCORE_MIN)
        max_rep = data.get("maxReputation", SCORE_MAX)
        if not (_is_int(min_rep) and _is_int(max_rep)) or not SCORE_MIN <= min_rep <= max_rep <= SCORE_MAX:
            raise ValueError(f"Invalid reputation range: {min_rep!r}-{max_rep!r}")

        active_only = data.get("activeOnly", False)
        if not isinstance(active_only, bool):
            raise ValueError(f"activeOnly must be a boolean, got {active_only!r}")

        return cls(
            id=preset_id,
            name=name,
            chains=list(chains),
            filterMode=filter_mode,
            minReputation=min_rep,
            maxReputation=max_rep,
            activeOnly=active_only,
            createdAt=created_at,
        )


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


BUILT_IN_PRESETS: List[FilterPreset] = [
    FilterPreset(id="all", name="All"),
    FilterPreset(id="high-rep", name="High Rep", minReputation=70, activeOnly=True),
    FilterPreset(id="active", name="Active", activeOnly=True),
]

BUILT_IN_PRESET_IDS = frozenset(p.id for p in BUILT_IN_PRESETS)


def _now_ms() -> int:
    return int(time.time() * 1000)


class FilterPresetStore:
    """
    Built-in plus user-defined presets and the current selection.

    Built-ins are always listed first and can be neither deleted nor
    overwritten by an import.
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None):
        self._clock = clock or _now_ms
        self._custom: List[FilterPreset] = []
        self.selected_preset_id: Optional[str] = None

    @property
    def presets(self) -> List[FilterPreset]:
        # Built-ins are shared module state; hand out copies with their own chain lists
        built_ins = [replace(p, chains=list(p.chains)) for p in BUILT_IN_PRESETS]
        return built_ins + self._custom

    def _new_id(self) -> str:
        taken = {p.id for p in self.presets}
        stamp = self._clock()
        preset_id = f"custom-{stamp}"
        while preset_id in taken:
            stamp += 1
            preset_id = f"custom-{stamp}"
        return preset_id

    def save_preset(self, name: str, filters: FilterState) -> FilterPreset:
        """Store the current filters under ``name`` and select the new preset."""
        preset = FilterPreset(
            id=self._new_id(),
            name=name,
            chains=list(filters.chains),
            filterMode=filters.filterMode.value,
            minReputation=filters.minReputation,
            maxReputation=filters.maxReputation,
            activeOnly=filters.status == [STATUS_ACTIVE],
            createdAt=self._clock(),
        )
        self._custom.append(preset)
        self.selected_preset_id = preset.id
        logger.info(f"Saved filter preset {preset.id} ({name})")
        return preset

    def delete_preset(self, preset_id: str) -> bool:
        """Remove a custom preset. Built-ins are left untouched; returns whether anything was removed."""
        if preset_id in BUILT_IN_PRESET_IDS:
            logger.warning(f"Refusing to delete built-in preset: {preset_id}")
            return False

        before = len(self._custom)
        self._custom = [p for p in self._custom if p.id != preset_id]
        if self.selected_preset_id == preset_id:
            self.selected_preset_id = None
        return len(self._custom) < before

    def select_preset(self, preset_id: str) -> None:
        self.selected_preset_id = preset_id

    def clear_selection(self) -> None:
        self.selected_preset_id = None

    def get_preset(self, preset_id: str) -> Optional[FilterPreset]:
        for preset in self.presets:
            if preset.id == preset_id:
                return preset
        return None

    def has_unsaved_changes(self, filters: FilterState) -> bool:
        """True iff a preset is selected and ``filters`` no longer match it."""
        if not self.selected_preset_id:
            return False
        preset = self.get_preset(self.selected_preset_id)
        if preset is None:
            return False

        return (
            preset.filterMode != filters.filterMode.value
            or preset.minReputation != filters.minReputation
            or preset.maxReputation != filters.maxReputation
            or preset.activeOnly != (filters.status == [STATUS_ACTIVE])
            or sorted(preset.chains) != sorted(filters.chains)
        )

    def apply_preset(self, filters: FilterState, preset_id: Optional[str] = None) -> FilterState:
        """
        Overlay a preset on ``filters`` and return the result.

        Uses the selected preset when ``preset_id`` is omitted. Dimensions a
        preset does not cover keep their current values.
        """
        preset_id = preset_id or self.selected_preset_id
        preset = self.get_preset(preset_id) if preset_id else None
        if preset is None:
            raise ValueError(f"Unknown preset: {preset_id}")

        return replace(
            filters,
            chains=list(preset.chains),
            filterMode=FilterMode(preset.filterMode),
            minReputation=preset.minReputation,
            maxReputation=preset.maxReputation,
            status=[STATUS_ACTIVE] if preset.activeOnly else [],
        )

    def export_presets(self) -> str:
        """Custom presets as a JSON array."""
        return json.dumps([asdict(p) for p in self._custom], indent=2)

    def import_presets(self, data: str) -> ImportResult:
        """
        Add presets from a JSON array produced by ``export_presets``.

        Imported presets get fresh ids. Malformed entries are counted as
        errors and skipped; unparseable input counts as a single error.
        """
        result = ImportResult()
        try:
            items = json.loads(data)
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning(f"Failed to parse preset import: {e}")
            result.errors += 1
            return result

        if not isinstance(items, list):
            logger.warning("Preset import must be a JSON array")
            result.errors += 1
            return result

        for item in items:
            if not isinstance(item, dict):
                result.errors += 1
                continue
            try:
                preset = FilterPreset.from_dict(self._new_id(), item, self._clock())
            except ValueError as e:
                logger.warning(f"Skipping malformed preset: {e}")
                result.errors += 1
                continue
            self._custom.append(preset)
            result.imported += 1

        logger.info(f"Imported {result.imported} presets ({result.errors} errors)")
        return result
