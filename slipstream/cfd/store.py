# slipstream/cfd/store.py
import logging
import math
from collections import defaultdict
from pathlib import Path
from typing import Iterable, Iterator, List, Tuple, Union

import pandas as pd

from .record import Record
from ..errors import DatasetError
from ..utils import Timer, is_root_debug_logging

logger = logging.getLogger(__name__)

_TYPES, _GAPS, _RATIOS = range(3)


def _parse_floats(tokens: List[str], what: str, line_no: int) -> List[float]:
    try:
        values = [float(tok) for tok in tokens]
    except ValueError as e:
        raise DatasetError(f"Line {line_no}: invalid {what} value ({e})") from e
    for tok, value in zip(tokens, values):
        if not math.isfinite(value):
            raise DatasetError(f"Line {line_no}: {what} value '{tok}' is not a finite number")
    return values


def parse_records(lines: Iterable[str]) -> List[Record]:
    """
    Parse the reference dataset.

    Every record spans three significant lines (blank lines and lines starting
    with '#' are skipped):
      1. vehicle types, at least 2
      2. gaps of vehicles 2..N from their predecessor (N - 1 values)
      3. drag coefficient ratios of vehicles 1..N (N values)
    """
    records: List[Record] = []
    state = _TYPES
    types: List[str] = []
    gaps: List[float] = []
    line_no = 0

    for line_no, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        tokens = line.split()

        if state == _TYPES:
            types = tokens
            if len(types) < 2:
                raise DatasetError(f"Line {line_no}: the provided platoon has less than 2 vehicles")
            state = _GAPS
        elif state == _GAPS:
            values = _parse_floats(tokens, "gap", line_no)
            if len(values) != len(types) - 1:
                raise DatasetError(
                    f"Line {line_no}: expected {len(types) - 1} gaps for {len(types)} vehicles, got {len(values)}"
                )
            gaps = [0.0] + values
            state = _RATIOS
        else:
            ratios = _parse_floats(tokens, "ratio", line_no)
            if len(ratios) != len(types):
                raise DatasetError(
                    f"Line {line_no}: expected {len(types)} ratios for {len(types)} vehicles, got {len(ratios)}"
                )
            records.append(Record(types=tuple(types), gaps=tuple(gaps), ratios=tuple(ratios)))
            state = _TYPES

    if state != _TYPES:
        missing = "gaps and ratios" if state == _GAPS else "ratios"
        raise DatasetError(f"Line {line_no}: unexpected end of data, record {' '.join(types)} has no {missing}")

    return records


def load_records(path: Union[str, Path]) -> List[Record]:
    path = Path(path)
    logger.info("Loading reference records... %s", path)
    if not path.is_file():
        raise DatasetError(f"File '{path}' not found")

    try:
        with Timer("load") as timer, path.open(encoding="utf-8") as f:
            records = parse_records(f)
    except UnicodeDecodeError as e:
        raise DatasetError(f"File '{path}' is not valid UTF-8 ({e})") from e

    logger.info("Loaded %d reference records from %s in %.1f ms", len(records), path, timer.duration_ms)
    if is_root_debug_logging():
        for record in records:
            logger.debug("Parsed record:\n%s", record)
    return records


class RecordStore:
    """
    Immutable collection of reference records, built once and shared read-only
    by every lookup.
    """

    def __init__(self, records: Iterable[Record] = ()):
        self._records: Tuple[Record, ...] = tuple(records)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "RecordStore":
        return cls(load_records(path))

    def __iter__(self) -> Iterator[Record]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __getitem__(self, index: int) -> Record:
        return self._records[index]

    @property
    def records(self) -> Tuple[Record, ...]:
        return self._records

    def to_dataframe(self) -> pd.DataFrame:
        """One row per record and vehicle position."""
        data = defaultdict(list)
        for record_index, record in enumerate(self._records):
            for position in range(record.n):
                data["record"].append(record_index)
                data["platoon"].append(" ".join(record.types))
                data["position"].append(position)
                data["vehicle_type"].append(record.types[position])
                data["gap_m"].append(record.gaps[position])
                data["ratio"].append(record.ratios[position])

        return pd.DataFrame(data, columns=["record", "platoon", "position", "vehicle_type", "gap_m", "ratio"])
