"""Named filter values driving the render pipeline."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional

from PySide6.QtCore import QObject, Signal

_LOGGER = logging.getLogger(__name__)

# Same order as the render pipeline.
FILTER_KEYS = (
    "smoothing",
    "brightness",
    "contrast",
    "blur",
    "saturation",
    "backgroundBlur",
)

FilterSet = Mapping[str, float]


@dataclass(frozen=True)
class FilterSpec:
    """Domain and neutral value of a single named filter.

    ``kind`` is ``"gain"`` for filters expressed as a multiplicative factor
    around ``1 + value`` and ``"magnitude"`` for filters whose value measures
    an effect strength starting at zero.
    """

    name: str
    minimum: float
    maximum: float
    neutral: float = 0.0
    kind: str = "magnitude"


FILTER_SPECS: Mapping[str, FilterSpec] = MappingProxyType(
    {
        "smoothing": FilterSpec("smoothing", 0.0, 1.0),
        "brightness": FilterSpec("brightness", -0.5, 0.5, kind="gain"),
        "contrast": FilterSpec("contrast", -0.5, 0.5, kind="gain"),
        "blur": FilterSpec("blur", 0.0, 0.5),
        "saturation": FilterSpec("saturation", -1.0, 1.0, kind="gain"),
        "backgroundBlur": FilterSpec("backgroundBlur", 0.0, 1.0),
    }
)

NEUTRAL_FILTERS: FilterSet = MappingProxyType(
    {key: FILTER_SPECS[key].neutral for key in FILTER_KEYS}
)


def has_active_filters(filters: Mapping[str, Any]) -> bool:
    """Return ``True`` when any known filter differs from its neutral value."""

    for key in FILTER_KEYS:
        value = filters.get(key, FILTER_SPECS[key].neutral)
        if isinstance(value, (int, float)) and value != FILTER_SPECS[key].neutral:
            return True
    return False


def is_neutral(filters: Mapping[str, Any]) -> bool:
    return not has_active_filters(filters)


def coerce_filter_value(value: Any) -> Optional[float]:
    """Return *value* as a finite ``float`` or ``None`` if it is not numeric.

    ``None`` and blank strings map to ``0.0`` so cleared text inputs behave
    like a slider parked at its origin.
    """

    if value is None:
        return 0.0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0.0
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(numeric):
        return None
    return numeric


class FilterStateManager(QObject):
    """Own the current :data:`FilterSet` and announce actual changes.

    Every snapshot handed out is a read-only view over a dictionary that is
    never mutated again.  Updates build a fresh dictionary, so callers can use
    object identity to detect change.
    """

    filtersChanged = Signal(object)
    """Emitted with the new snapshot whenever at least one value changed."""

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._filters: FilterSet = NEUTRAL_FILTERS

    def current(self) -> FilterSet:
        """Return the current snapshot."""

        return self._filters

    def update(self, name: str, value: Any) -> FilterSet:
        """Set *name* to the numeric form of *value* and return the snapshot.

        Unknown names and values that cannot be coerced are ignored.  Ranges
        are not enforced here; the slider controls own that.
        """

        if name not in FILTER_SPECS:
            _LOGGER.warning("Ignoring update for unknown filter %r", name)
            return self._filters

        numeric = coerce_filter_value(value)
        if numeric is None:
            _LOGGER.warning("Ignoring non-numeric value %r for filter %r", value, name)
            return self._filters

        if self._filters[name] == numeric:
            return self._filters

        updated = dict(self._filters)
        updated[name] = numeric
        return self._publish(MappingProxyType(updated))

    def reset(self) -> FilterSet:
        """Restore every filter to its neutral value in a single change.

        A reset that changes nothing returns the current snapshot and emits no
        signal.
        """

        if is_neutral(self._filters):
            return self._filters
        return self._publish(NEUTRAL_FILTERS)

    # ------------------------------------------------------------------
    def _publish(self, snapshot: FilterSet) -> FilterSet:
        self._filters = snapshot
        self.filtersChanged.emit(snapshot)
        return snapshot


__all__ = [
    "FILTER_KEYS",
    "FILTER_SPECS",
    "FilterSet",
    "FilterSpec",
    "FilterStateManager",
    "NEUTRAL_FILTERS",
    "coerce_filter_value",
    "has_active_filters",
    "is_neutral",
]
