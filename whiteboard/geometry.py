"""
Whiteboard geometry helpers: box unions and vertex → box conversion.
"""

from __future__ import annotations

import math
from typing import Iterable, List, Mapping, Optional

from .errors import MalformedDetection
from .ocr_types import Box, Token


def _coord(vertex: Optional[Mapping[str, object]], key: str) -> float:
    """Missing or null vertex coordinates count as 0."""
    if not vertex:
        return 0.0
    if not isinstance(vertex, Mapping):
        raise MalformedDetection(f"vertex must be a mapping, got {type(vertex).__name__}")
    value = vertex.get(key)
    if value is None:
        return 0.0
    try:
        out = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as e:
        raise MalformedDetection(f"vertex {key}={value!r} is not a number") from e
    if not math.isfinite(out):
        raise MalformedDetection(f"vertex {key}={value!r} is not finite")
    return out


def box_from_vertices(vertices: Iterable[Optional[Mapping[str, object]]]) -> Box:
    """Axis-aligned box enclosing a (possibly rotated) polygon."""
    xs: List[float] = []
    ys: List[float] = []
    for v in vertices:
        xs.append(_coord(v, "x"))
        ys.append(_coord(v, "y"))
    if not xs:
        return Box(0.0, 0.0, 0.0, 0.0)
    return Box(min(xs), min(ys), max(xs), max(ys))


def box_expand(a: Box, b: Box) -> Box:
    return Box(min(a.x_min, b.x_min), min(a.y_min, b.y_min), max(a.x_max, b.x_max), max(a.y_max, b.y_max))


def union_boxes(boxes: Iterable[Box]) -> Optional[Box]:
    """Componentwise min/max over boxes; None when there are none."""
    out: Optional[Box] = None
    for b in boxes:
        out = b if out is None else box_expand(out, b)
    return out


def union_token_boxes(tokens: Iterable[Token]) -> Optional[Box]:
    return union_boxes(t.box for t in tokens)


__all__ = [
    "box_from_vertices",
    "box_expand",
    "union_boxes",
    "union_token_boxes",
]
