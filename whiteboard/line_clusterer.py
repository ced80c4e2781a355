"""
Line clusterer: groups tokens into horizontal lines.

Two strategies live here and are kept separate on purpose:

- group_equations (anchor clustering): each unassigned token in input order
  becomes an anchor and pulls in every remaining unassigned token whose
  center.y is within tolerance of the *anchor*. Membership is not
  transitive: two members may be further apart than the tolerance.
  Equation boundaries downstream (classification, highlighting) depend on
  exactly this rule.

- group_reading_lines (chain clustering): tokens sorted by center.y are cut
  into lines; the reference y moves to the most recently added token, so a
  line with a drifting baseline stays together while a gap larger than the
  tolerance always starts a new line. Used for the top→bottom transcript.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence, Tuple

from .config import DEFAULT_EQUATION_TOLERANCE_PX, DEFAULT_LINE_TOLERANCE_PX
from .errors import InvalidTolerance
from .ocr_types import Line, Token

log = logging.getLogger(__name__)


def _check_tolerance(tolerance: float) -> float:
    try:
        tol = float(tolerance)
    except (TypeError, ValueError) as e:
        raise InvalidTolerance(f"tolerance must be a number, got {tolerance!r}") from e
    if math.isnan(tol) or tol < 0:
        raise InvalidTolerance(f"tolerance must be >= 0, got {tolerance!r}")
    return tol


def _sort_left_to_right(tokens: Sequence[Token]) -> Line:
    # stable: equal x keeps input order
    return tuple(sorted(tokens, key=lambda t: t.center.x))


# -----------------------------
# (a) Equation grouping: anchor clustering
# -----------------------------

def group_equations(
    tokens: Sequence[Token],
    *,
    tolerance: float = DEFAULT_EQUATION_TOLERANCE_PX,
) -> List[Line]:
    """
    Partition tokens into equation candidates around anchor tokens.

    Groups are returned ordered by their anchor's center.y (ties keep anchor
    order); tokens inside a group are ordered by center.x.
    """
    tol = _check_tolerance(tolerance)
    assigned = [False] * len(tokens)
    groups: List[Tuple[float, int, Line]] = []

    for i, anchor in enumerate(tokens):
        if assigned[i]:
            continue
        assigned[i] = True
        members = [anchor]
        anchor_y = anchor.center.y
        for j in range(i + 1, len(tokens)):
            if assigned[j]:
                continue
            if abs(tokens[j].center.y - anchor_y) <= tol:
                assigned[j] = True
                members.append(tokens[j])
        groups.append((anchor_y, len(groups), _sort_left_to_right(members)))

    groups.sort(key=lambda g: (g[0], g[1]))
    log.debug("anchor clustering: %d tokens → %d equations (tol=%.1f)", len(tokens), len(groups), tol)
    return [g[2] for g in groups]


# -----------------------------
# (b) Reading-order lines: chain clustering
# -----------------------------

def group_reading_lines(
    tokens: Sequence[Token],
    *,
    tolerance: float = DEFAULT_LINE_TOLERANCE_PX,
) -> List[Line]:
    """
    Cut the y-sorted token list into top→bottom lines.

    Because each line is a contiguous run of the y-sorted list, the mean
    center.y of consecutive lines never decreases.
    """
    tol = _check_tolerance(tolerance)
    ordered = sorted(tokens, key=lambda t: (t.center.y, t.center.x))

    lines: List[Line] = []
    cur: List[Token] = []
    ref_y: Optional[float] = None

    for t in ordered:
        cy = t.center.y
        if ref_y is None or abs(cy - ref_y) <= tol:
            cur.append(t)
        else:
            lines.append(_sort_left_to_right(cur))
            cur = [t]
        ref_y = cy

    if cur:
        lines.append(_sort_left_to_right(cur))

    log.debug("chain clustering: %d tokens → %d lines (tol=%.1f)", len(tokens), len(lines), tol)
    return lines


def line_text(line: Sequence[Token]) -> str:
    return " ".join(t.text for t in line)


def lines_in_order(
    tokens: Sequence[Token],
    *,
    tolerance: float = DEFAULT_LINE_TOLERANCE_PX,
) -> List[str]:
    """Top→bottom transcript, one joined string per reading line."""
    return [line_text(ln) for ln in group_reading_lines(tokens, tolerance=tolerance)]


__all__ = [
    "group_equations",
    "group_reading_lines",
    "line_text",
    "lines_in_order",
]
