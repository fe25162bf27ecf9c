# slipstream/cfd/estimator.py
import logging
from numbers import Integral
from typing import Iterable, Optional, Sequence

from .record import Record
from .search import (
    NO_EFFECT_RATIO,
    break_ties,
    compatible_records,
    interpolate,
    partition,
    refine,
)
from .store import RecordStore
from ..config import SlipstreamSettings
from ..errors import QueryError
from ..utils import is_root_debug_logging

logger = logging.getLogger(__name__)


def _check_query(types: Sequence[str], gaps: Sequence[float], position: int):
    if len(types) != len(gaps):
        raise QueryError(f"Got {len(types)} vehicle types but {len(gaps)} gaps")
    if len(types) < 2:
        raise QueryError(f"A platoon needs at least 2 vehicles, got {len(types)}")
    if isinstance(position, bool) or not isinstance(position, Integral):
        raise QueryError(f"Position must be an integer, got {position!r}")
    if not 0 <= position < len(types):
        raise QueryError(f"Position {position} is outside of a platoon of {len(types)} vehicles")


def _dump(title: str, records: Iterable[Record]):
    logger.debug("%s:", title)
    for record in records:
        logger.debug("  %s", " ".join(f"[{d:g} m] {t} ({r:g})" for t, d, r in zip(record.types, record.gaps, record.ratios)))


def estimate_drag_ratio(
    store: Iterable[Record],
    types: Sequence[str],
    gaps: Sequence[float],
    position: int,
    tie_break: bool = False,
) -> float:
    """
    Drag coefficient ratio of the vehicle at `position` of the platoon
    described by `types` and `gaps` (head first, gaps[0] unused).

    Returns 1.0 when the reference records cannot say anything about the
    platoon.
    """
    _check_query(types, gaps, position)

    candidates = compatible_records(store, types)
    if not candidates:
        if is_root_debug_logging():
            logger.debug("No reference record for platoon %s", " ".join(types))
        return NO_EFFECT_RATIO

    shorter, longer = partition(candidates, gaps, position)
    if is_root_debug_logging():
        _dump("Compatible records with shorter gaps", shorter)
        _dump("Compatible records with longer gaps", longer)

    shorter = refine(shorter, gaps, position)
    longer = refine(longer, gaps, position)
    if tie_break:
        shorter = break_ties(shorter)
        longer = break_ties(longer)

    return interpolate(shorter, longer, gaps, position)


class Cfd:
    """Drag ratio lookup backed by a fully loaded `RecordStore`."""

    def __init__(self, store: RecordStore, settings: Optional[SlipstreamSettings] = None):
        self.store = store
        self.settings = settings if settings is not None else SlipstreamSettings()

    @classmethod
    def from_settings(cls, settings: SlipstreamSettings) -> "Cfd":
        return cls(RecordStore.from_file(settings.data_path), settings)

    def estimate_drag_ratio(self, types: Sequence[str], gaps: Sequence[float], position: int) -> float:
        return estimate_drag_ratio(self.store, types, gaps, position, tie_break=self.settings.tie_break)
