# slipstream/cfd/record.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple


@dataclass(frozen=True)
class Record:
    """
    One measured platoon configuration.

      types:  vehicle types from the head (index 0) to the tail
      gaps:   each vehicle's distance from its predecessor; gaps[0] is always 0
      ratios: each vehicle's drag coefficient ratio
    """
    types: Tuple[str, ...]
    gaps: Tuple[float, ...]
    ratios: Tuple[float, ...]

    def __post_init__(self):
        # normalise to tuples so records stay hashable and read-only
        object.__setattr__(self, "types", tuple(str(t) for t in self.types))
        object.__setattr__(self, "gaps", tuple(float(d) for d in self.gaps))
        object.__setattr__(self, "ratios", tuple(float(r) for r in self.ratios))

        n = len(self.types)
        if n < 2:
            raise ValueError(f"A record needs at least 2 vehicles, got {n}")
        if len(self.gaps) != n or len(self.ratios) != n:
            raise ValueError(
                f"Record field lengths differ: {n} types, {len(self.gaps)} gaps, {len(self.ratios)} ratios"
            )

    @property
    def n(self) -> int:
        return len(self.types)

    def compatible(self, types: Sequence[str]) -> bool:
        """Same number of vehicles with the same types in the same order."""
        return len(types) == self.n and all(a == b for a, b in zip(self.types, types))

    @property
    def signature(self) -> Tuple[Tuple[float, ...], Tuple[float, ...]]:
        return self.gaps, self.ratios

    def __str__(self) -> str:
        return "\n".join((
            "Types: " + " ".join(self.types),
            "Distances: " + " ".join(f"{d:g}" for d in self.gaps),
            "Ratios: " + " ".join(f"{r:g}" for r in self.ratios),
        ))
