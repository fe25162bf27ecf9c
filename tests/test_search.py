"""Tests for the bracketing search in :mod:`slipstream.cfd.search`."""

from __future__ import annotations

import logging

import pytest

from slipstream.cfd.search import (
    NO_EFFECT_RATIO,
    break_ties,
    compatible_records,
    interpolate,
    interpolation_index,
    keep_best,
    partition,
    refine,
    resolve_head,
    resolve_tail,
)
from slipstream.errors import InterpolationError

from conftest import make_record


def test_compatible_records_filters_exact_type_sequences() -> None:
    records = [
        make_record("car car", [5.0], [1.0, 0.9]),
        make_record("car car car", [5.0, 5.0], [1.0, 0.9, 0.8]),
        make_record("car truck", [5.0], [1.0, 0.7]),
    ]

    assert compatible_records(records, ["car", "car"]) == [records[0]]
    assert compatible_records(records, ["car"]) == []
    assert compatible_records([], ["car", "car"]) == []


def test_keep_best_keeps_ties_and_resets_on_improvement() -> None:
    a = make_record("car car", [3.0], [1.0, 0.9])
    b = make_record("car car", [2.0], [1.0, 0.9])
    c = make_record("car car", [1.0], [1.0, 0.8])
    d = make_record("car car", [1.0], [1.0, 0.7])
    e = make_record("car car", [4.0], [1.0, 0.6])

    best = keep_best([a, b, c, d, e], lambda r: r.gaps[1])

    assert best == [c, d]
    assert keep_best([], lambda r: 0.0) == []


def test_partition_head_vehicle_uses_follower_gap() -> None:
    shorter_rec = make_record("car car car", [5.0, 50.0], [1.0, 0.9, 0.8])
    equal_rec = make_record("car car car", [10.0, 1.0], [1.0, 0.9, 0.8])
    longer_rec = make_record("car car car", [15.0, 1.0], [1.0, 0.9, 0.8])

    shorter, longer = partition([shorter_rec, equal_rec, longer_rec], [0.0, 10.0, 10.0], 0)

    assert shorter == [shorter_rec]
    assert longer == [equal_rec, longer_rec]


def test_partition_tail_vehicle_uses_own_gap() -> None:
    shorter_rec = make_record("car car car", [50.0, 5.0], [1.0, 0.9, 0.8])
    longer_rec = make_record("car car car", [1.0, 10.0], [1.0, 0.9, 0.8])

    shorter, longer = partition([shorter_rec, longer_rec], [0.0, 10.0, 10.0], 2)

    assert shorter == [shorter_rec]
    assert longer == [longer_rec]


def test_partition_interior_vehicle_drops_mixed_records() -> None:
    both_shorter = make_record("car car car", [5.0, 5.0], [1.0, 0.9, 0.8])
    both_longer = make_record("car car car", [15.0, 15.0], [1.0, 0.9, 0.8])
    both_equal = make_record("car car car", [10.0, 10.0], [1.0, 0.9, 0.8])
    mixed = make_record("car car car", [5.0, 15.0], [1.0, 0.9, 0.8])
    mixed_equal = make_record("car car car", [10.0, 5.0], [1.0, 0.9, 0.8])

    shorter, longer = partition(
        [both_shorter, both_longer, both_equal, mixed, mixed_equal], [0.0, 10.0, 10.0], 1
    )

    assert shorter == [both_shorter]
    assert longer == [both_longer, both_equal]


def test_refine_empty_and_singleton() -> None:
    record = make_record("car car car", [5.0, 5.0], [1.0, 0.9, 0.8])
    gaps = [0.0, 10.0, 10.0]

    assert refine([], gaps, 1) == []
    once = refine([record], gaps, 1)
    assert once == [record]
    assert refine(once, gaps, 1) == [record]


def test_refine_widens_symmetric_window() -> None:
    a = make_record("car car car car car", [5.0, 9.0, 9.0, 5.0], [1.0, 0.9, 0.8, 0.8, 0.8])
    b = make_record("car car car car car", [5.0, 8.0, 10.0, 5.0], [1.0, 0.9, 0.8, 0.8, 0.8])
    c = make_record("car car car car car", [20.0, 9.0, 9.0, 20.0], [1.0, 0.9, 0.8, 0.8, 0.8])

    # k=1 keeps a and c (error 2 against 4), k=2 prefers a (50 against 200)
    assert refine([b, c, a], [0.0, 10.0, 10.0, 10.0, 10.0], 2) == [a]


def test_refine_falls_back_towards_tail() -> None:
    a = make_record("car car car car", [9.0, 11.0, 12.0], [1.0, 0.9, 0.8, 0.7])
    b = make_record("car car car car", [11.0, 9.0, 13.0], [1.0, 0.9, 0.8, 0.7])

    # the window ties at k=1 and cannot grow past the head, the last gap decides
    assert refine([a, b], [0.0, 10.0, 10.0, 10.0], 1) == [a]


def test_refine_falls_back_towards_head() -> None:
    a = make_record("car car car car car", [7.0, 12.0, 9.0, 11.0], [1.0, 0.9, 0.8, 0.7, 0.6])
    b = make_record("car car car car car", [14.0, 8.0, 11.0, 9.0], [1.0, 0.9, 0.8, 0.7, 0.6])

    # the window ties at k=1 and cannot grow past the tail, the first gap decides
    assert refine([b, a], [0.0, 10.0, 10.0, 10.0, 10.0], 3) == [a]


def test_refine_two_vehicle_platoon() -> None:
    near = make_record("car car", [6.0], [1.0, 0.9])
    far = make_record("car car", [5.0], [1.0, 0.95])

    assert refine([far, near], [0.0, 10.0], 1) == [near]
    assert refine([far, near], [0.0, 10.0], 0) == [near]


def test_refine_keeps_unresolvable_ties() -> None:
    a = make_record("car car", [5.0], [1.0, 0.9])
    b = make_record("car car", [5.0], [1.0, 0.8])

    assert refine([a, b], [0.0, 10.0], 1) == [a, b]


def test_resolve_tail_starts_at_position() -> None:
    a = make_record("car car car", [1.0, 9.0], [1.0, 0.9, 0.8])
    b = make_record("car car car", [10.0, 8.0], [1.0, 0.9, 0.8])

    # gap 1 is ignored when starting at position 1
    assert resolve_tail([a, b], [0.0, 10.0, 10.0], 1) == [a]
    assert resolve_tail([a, b], [0.0, 10.0, 10.0], 0) == [b]


def test_resolve_head_starts_at_position() -> None:
    a = make_record("car car car", [1.0, 9.0], [1.0, 0.9, 0.8])
    b = make_record("car car car", [10.0, 9.0], [1.0, 0.9, 0.8])

    assert resolve_head([a, b], [0.0, 10.0, 10.0], 2) == [b]
    assert resolve_head([a, b], [0.0, 10.0, 10.0], 0) == [a, b]


def test_interpolation_index() -> None:
    assert interpolation_index(0) == 1
    assert interpolation_index(1) == 1
    assert interpolation_index(3) == 3


def test_interpolate_one_sided_brackets() -> None:
    s = make_record("car car", [5.0], [1.0, 0.95])
    l = make_record("car car", [15.0], [1.0, 0.85])

    assert interpolate([s], [], [0.0, 20.0], 1) == NO_EFFECT_RATIO
    assert interpolate([], [l], [0.0, 2.0], 1) == 0.85


@pytest.mark.parametrize(("x", "expected"), [(5.0, 0.95), (7.5, 0.925), (10.0, 0.9), (15.0, 0.85)])
def test_interpolate_is_linear_between_brackets(x: float, expected: float) -> None:
    s = make_record("car car", [5.0], [1.0, 0.95])
    l = make_record("car car", [15.0], [1.0, 0.85])

    assert interpolate([s], [l], [0.0, x], 1) == pytest.approx(expected)


def test_interpolate_head_vehicle_uses_follower_gap() -> None:
    s = make_record("car car", [5.0], [0.9, 1.0])
    l = make_record("car car", [15.0], [0.97, 1.0])

    assert interpolate([s], [l], [0.0, 10.0], 0) == pytest.approx(0.935)


def test_interpolate_degenerate_brackets_raise() -> None:
    s = make_record("car car", [10.0], [1.0, 0.95])
    l = make_record("car car", [10.0], [1.0, 0.85])

    with pytest.raises(InterpolationError, match="both brackets"):
        interpolate([s], [l], [0.0, 10.0], 1)


def test_interpolate_anomalies_warn_and_return_default(caplog: pytest.LogCaptureFixture) -> None:
    a = make_record("car car", [5.0], [1.0, 0.9])
    b = make_record("car car", [5.0], [1.0, 0.8])
    l = make_record("car car", [15.0], [1.0, 0.85])

    with caplog.at_level(logging.WARNING, logger="slipstream.cfd.search"):
        assert interpolate([], [], [0.0, 10.0], 1) == NO_EFFECT_RATIO
        assert interpolate([a, b], [l], [0.0, 10.0], 1) == NO_EFFECT_RATIO

    messages = [r.getMessage() for r in caplog.records]
    assert any("0 shorter, 0 longer" in m for m in messages)
    assert any("2 shorter, 1 longer" in m for m in messages)


def test_break_ties_picks_smallest_signature() -> None:
    a = make_record("car car", [5.0], [1.0, 0.9])
    b = make_record("car car", [5.0], [1.0, 0.8])

    assert break_ties([a, b]) == [b]
    assert break_ties([a]) == [a]
    assert break_ties([]) == []
