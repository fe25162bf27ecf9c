# slipstream/cfd/search.py
"""
Bracketing search over the reference records.

A query is a platoon (types and gaps, head first) and the position of the
vehicle whose drag ratio is wanted. The compatible records are split into a
"shorter" and a "longer" bracket, each bracket is narrowed down to its best
matching record and the two survivors are interpolated.
"""
import logging
from typing import Callable, Iterable, List, Sequence, Tuple

from .record import Record
from ..errors import InterpolationError
from ..utils import is_root_debug_logging

logger = logging.getLogger(__name__)

# ratio used whenever no slipstream effect can be modelled
NO_EFFECT_RATIO = 1.0


def compatible_records(records: Iterable[Record], types: Sequence[str]) -> List[Record]:
    return [record for record in records if record.compatible(types)]


def keep_best(candidates: Iterable[Record], score: Callable[[Record], float]) -> List[Record]:
    """
    Keep only the candidates with the minimal score. Ties are all kept; a
    strictly better score discards everything kept so far.
    """
    best_score = None
    best: List[Record] = []
    for record in candidates:
        s = score(record)
        if best_score is None or s < best_score:
            best_score = s
            best = [record]
        elif s == best_score:
            best.append(record)
    return best


def partition(candidates: Iterable[Record], gaps: Sequence[float], position: int) -> Tuple[List[Record], List[Record]]:
    """
    Split the candidates into records with shorter and with longer (or equal)
    gaps around `position`.

    The head vehicle looks at the gap to its follower, the tail vehicle at the
    gap to its leader and interior vehicles at both; an interior record whose
    two gaps fall on different sides of the query is dropped.
    """
    n = len(gaps)
    shorter: List[Record] = []
    longer: List[Record] = []

    for record in candidates:
        if position == 0:
            if record.gaps[1] < gaps[1]:
                shorter.append(record)
            else:
                longer.append(record)
        elif position == n - 1:
            if record.gaps[position] < gaps[position]:
                shorter.append(record)
            else:
                longer.append(record)
        else:
            ahead_shorter = record.gaps[position] < gaps[position]
            behind_shorter = record.gaps[position + 1] < gaps[position + 1]
            if ahead_shorter and behind_shorter:
                shorter.append(record)
            elif not ahead_shorter and not behind_shorter:
                longer.append(record)

    return shorter, longer


def resolve_tail(candidates: List[Record], gaps: Sequence[float], position: int) -> List[Record]:
    """Narrow the candidates by the absolute gap error, moving towards the tail."""
    n = len(gaps)
    k = position
    while len(candidates) > 1 and k < n - 1:
        candidates = keep_best(candidates, lambda r, i=k + 1: abs(r.gaps[i] - gaps[i]))
        k += 1
    return candidates


def resolve_head(candidates: List[Record], gaps: Sequence[float], position: int) -> List[Record]:
    """Narrow the candidates by the absolute gap error, moving towards the head."""
    k = position
    while len(candidates) > 1 and k >= 1:
        candidates = keep_best(candidates, lambda r, i=k: abs(r.gaps[i] - gaps[i]))
        k -= 1
    return candidates


def _window_error(record: Record, gaps: Sequence[float], position: int, k: int) -> float:
    eps_forward = record.gaps[position - k + 1] - gaps[position - k + 1]
    eps_backward = record.gaps[position + k] - gaps[position + k]
    return eps_forward ** 2 + eps_backward ** 2


def refine(candidates: List[Record], gaps: Sequence[float], position: int) -> List[Record]:
    """
    Narrow a bracket to its best matching record.

    A window around `position` widens one vehicle per step in both directions
    and keeps the records with the least squared gap error inside it. Once the
    window hits an end of the platoon the remaining ties are resolved one
    direction at a time by `resolve_tail` or `resolve_head`.
    """
    if not candidates:
        return candidates

    n = len(gaps)
    k = 1
    while len(candidates) > 1 and position - k >= 0 and position + k <= n - 1:
        candidates = keep_best(candidates, lambda r, w=k: _window_error(r, gaps, position, w))
        k += 1

    if len(candidates) <= 1:
        return candidates

    if n == 2:
        if position == 0:
            return resolve_tail(candidates, gaps, position)
        return resolve_head(candidates, gaps, position)

    if position - k <= 0:
        return resolve_tail(candidates, gaps, position)
    return resolve_head(candidates, gaps, position)


def interpolation_index(position: int) -> int:
    """Index of the gap used as x-value: the follower's gap for the head, the own gap otherwise."""
    return position + 1 if position == 0 else position


def interpolate(shorter: Sequence[Record], longer: Sequence[Record], gaps: Sequence[float], position: int) -> float:
    if len(shorter) == 1 and not longer:
        return NO_EFFECT_RATIO

    if not shorter and len(longer) == 1:
        return longer[0].ratios[position]

    if len(shorter) == 1 and len(longer) == 1:
        s, l = shorter[0], longer[0]
        i = interpolation_index(position)
        x1 = l.gaps[i]
        x2 = gaps[i]
        x3 = s.gaps[i]
        if x1 == x3:
            raise InterpolationError(
                f"Cannot interpolate position {position}: both brackets have gap {x1} at index {i}"
            )
        ratio = (s.ratios[position] * (x1 - x2) + l.ratios[position] * (x2 - x3)) / (x1 - x3)

        if is_root_debug_logging():
            logger.debug("%sm [%sm] %sm", x3, x2, x1)
            logger.debug("%s [%s] %s", s.ratios[position], ratio, l.ratios[position])
        return ratio

    logger.warning(
        "No unique bracket for position %d (%d shorter, %d longer candidates), using ratio %s",
        position, len(shorter), len(longer), NO_EFFECT_RATIO,
    )
    return NO_EFFECT_RATIO


def break_ties(candidates: List[Record]) -> List[Record]:
    """Reduce unresolved ties to the record with the smallest (gaps, ratios) signature."""
    if len(candidates) <= 1:
        return candidates
    return [min(candidates, key=lambda r: r.signature)]
