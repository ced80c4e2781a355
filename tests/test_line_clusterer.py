"""
Line clustering: anchor-based equation grouping vs chain-based reading order.

Run: python -m pytest tests/test_line_clusterer.py -v
"""

import os
import random
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from whiteboard.errors import InvalidTolerance
from whiteboard.line_clusterer import (
    group_equations,
    group_reading_lines,
    lines_in_order,
)
from whiteboard.ocr_types import Box, Token


def _tok(text, cx, cy, w=20, h=20):
    """Token centered at (cx, cy)."""
    return Token.from_box(text, Box(cx - w / 2, cy - h / 2, cx + w / 2, cy + h / 2))


def _texts(lines):
    return [[t.text for t in ln] for ln in lines]


def _random_board(seed, n=60):
    rng = random.Random(seed)
    return [_tok(f"t{i}", rng.uniform(0, 800), rng.uniform(0, 600)) for i in range(n)]


class TestEquationGrouping:

    def test_two_rows(self):
        tokens = [
            _tok("=", 60, 102),
            _tok("x", 20, 100),
            _tok("5", 100, 98),
            _tok("y", 20, 200),
            _tok("2", 60, 205),
        ]
        groups = group_equations(tokens)
        assert _texts(groups) == [["x", "=", "5"], ["y", "2"]]

    def test_default_tolerance_is_20(self):
        tokens = [_tok("a", 0, 100), _tok("b", 10, 120), _tok("c", 20, 121)]
        assert _texts(group_equations(tokens)) == [["a", "b"], ["c"]]

    def test_membership_is_anchor_based_not_transitive(self):
        """B and C both sit within tolerance of anchor A but 30px from each other."""
        a = _tok("A", 0, 100)
        b = _tok("B", 10, 85)
        c = _tok("C", 20, 115)
        groups = group_equations([a, b, c], tolerance=20)
        assert _texts(groups) == [["A", "B", "C"]]

    def test_chain_through_neighbour_is_not_followed(self):
        """C is close to B but not to anchor A, so it starts its own group."""
        tokens = [_tok("A", 0, 100), _tok("B", 10, 115), _tok("C", 20, 130)]
        assert _texts(group_equations(tokens, tolerance=20)) == [["A", "B"], ["C"]]

    def test_anchor_order_depends_on_input_order(self):
        """Same tokens, different anchor → different grouping."""
        a, b, c = _tok("A", 0, 100), _tok("B", 10, 115), _tok("C", 20, 130)
        assert _texts(group_equations([b, a, c], tolerance=20)) == [["A", "B", "C"]]

    def test_groups_sorted_left_to_right(self):
        tokens = [_tok("c", 300, 50), _tok("a", 10, 50), _tok("b", 150, 50)]
        assert _texts(group_equations(tokens)) == [["a", "b", "c"]]

    def test_groups_ordered_by_anchor_y(self):
        tokens = [_tok("low", 0, 400), _tok("high", 0, 10)]
        assert _texts(group_equations(tokens)) == [["high"], ["low"]]

    def test_partition_property(self):
        for seed in range(5):
            tokens = _random_board(seed)
            groups = group_equations(tokens, tolerance=25)
            flat = [t for g in groups for t in g]
            assert len(flat) == len(tokens)
            assert {id(t) for t in flat} == {id(t) for t in tokens}

    def test_zero_tolerance(self):
        tokens = [_tok("a", 0, 10), _tok("b", 5, 10), _tok("c", 0, 11)]
        assert _texts(group_equations(tokens, tolerance=0)) == [["a", "b"], ["c"]]

    def test_negative_tolerance_rejected(self):
        with pytest.raises(ValueError):
            group_equations([_tok("a", 0, 0)], tolerance=-1)

    def test_bad_tolerance_is_whiteboard_error(self):
        with pytest.raises(InvalidTolerance):
            group_equations([_tok("a", 0, 0)], tolerance=float("nan"))
        with pytest.raises(InvalidTolerance):
            group_equations([_tok("a", 0, 0)], tolerance="wide")

    def test_empty(self):
        assert group_equations([]) == []


class TestReadingLines:

    def test_reference_follows_last_token(self):
        """A slowly drifting baseline stays one line under chain clustering."""
        tokens = [_tok(str(i), i * 30, 100 + i * 20) for i in range(5)]
        lines = group_reading_lines(tokens, tolerance=25)
        assert _texts(lines) == [["0", "1", "2", "3", "4"]]

    def test_gap_starts_new_line(self):
        tokens = [_tok("x", 0, 100), _tok("=", 30, 105), _tok("2", 0, 160)]
        lines = group_reading_lines(tokens, tolerance=30)
        assert _texts(lines) == [["x", "="], ["2"]]

    def test_lines_sorted_left_to_right(self):
        tokens = [_tok("8", 200, 50), _tok("3x", 10, 52), _tok("=", 100, 49)]
        assert lines_in_order(tokens) == ["3x = 8"]

    def test_lines_in_order_top_to_bottom(self):
        tokens = [
            _tok("x", 0, 300), _tok("=", 40, 300), _tok("2", 80, 300),
            _tok("2x", 0, 100), _tok("=", 40, 100), _tok("4", 80, 100),
        ]
        assert lines_in_order(tokens) == ["2x = 4", "x = 2"]

    def test_mean_y_monotonic(self):
        for seed in range(5):
            tokens = _random_board(seed, n=80)
            lines = group_reading_lines(tokens, tolerance=30)
            means = [sum(t.center.y for t in ln) / len(ln) for ln in lines]
            assert means == sorted(means)
            assert sum(len(ln) for ln in lines) == len(tokens)

    def test_negative_tolerance_rejected(self):
        with pytest.raises(ValueError):
            group_reading_lines([_tok("a", 0, 0)], tolerance=-0.5)

    def test_non_numeric_tolerance_rejected(self):
        with pytest.raises(InvalidTolerance):
            group_reading_lines([_tok("a", 0, 0)], tolerance=None)

    def test_empty(self):
        assert group_reading_lines([]) == []
        assert lines_in_order([]) == []


class TestStrategiesDiffer:

    def test_drifting_row(self):
        """Anchor grouping splits a drifting row that chain grouping keeps whole."""
        tokens = [_tok(str(i), i * 30, 100 + i * 15) for i in range(4)]
        assert len(group_equations(tokens, tolerance=20)) == 2
        assert len(group_reading_lines(tokens, tolerance=20)) == 1


class TestDeterminism:

    def test_repeated_runs_identical(self):
        tokens = _random_board(7)
        first_eq = _texts(group_equations(tokens))
        first_ln = lines_in_order(tokens)
        for _ in range(5):
            assert _texts(group_equations(tokens)) == first_eq
            assert lines_in_order(tokens) == first_ln
