from __future__ import annotations

import sys
from pathlib import Path
from textwrap import dedent
from typing import Sequence

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from slipstream.cfd.record import Record  # noqa: E402
from slipstream.cfd.store import RecordStore  # noqa: E402


def make_record(types: str, gaps: Sequence[float], ratios: Sequence[float]) -> Record:
    """Build a record from space separated types and the gaps *without* the leading 0."""

    return Record(types=tuple(types.split()), gaps=(0.0, *gaps), ratios=tuple(ratios))


def write_dataset(directory: Path, contents: str, name: str = "data.txt") -> Path:
    target = directory / name
    target.write_text(dedent(contents).lstrip(), encoding="utf8")
    return target


@pytest.fixture
def dataset_file(tmp_path: Path) -> Path:
    return write_dataset(
        tmp_path,
        """
        # two cars
        car car
        5
        1.0 0.95

        car car
        15
        1.0 0.85

        # car followed by a truck
        car truck
        10
        0.98 0.7
        """,
    )


@pytest.fixture
def two_car_store() -> RecordStore:
    return RecordStore([
        make_record("car car", [5.0], [1.0, 0.95]),
        make_record("car car", [15.0], [1.0, 0.85]),
    ])
