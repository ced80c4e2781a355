"""
Coordinate mapper: per-axis scale + translate between image pixels and a
canvas rectangle.

    canvas = target.origin + (image_point / image_size) * target.size

No rotation or skew. Boxes are mapped corner by corner so non-uniform
scales stay correct.
"""

from __future__ import annotations

import math
from typing import Optional

from .errors import InvalidMapping
from .ocr_types import Box, CoordinateMapping, Point


def validate_mapping(mapping: CoordinateMapping) -> CoordinateMapping:
    """Raise InvalidMapping unless the image size is finite and positive."""
    iw, ih = mapping.image_width, mapping.image_height
    if not (math.isfinite(iw) and math.isfinite(ih)):
        raise InvalidMapping(f"image size must be finite, got {iw}x{ih}")
    if iw <= 0 or ih <= 0:
        raise InvalidMapping(f"image size must be positive, got {iw}x{ih}")
    tb = mapping.target_bounds
    for name in ("x", "y", "width", "height"):
        if not math.isfinite(getattr(tb, name)):
            raise InvalidMapping(f"target_bounds.{name} must be finite")
    return mapping


def map_point(point: Point, mapping: CoordinateMapping) -> Point:
    validate_mapping(mapping)
    tb = mapping.target_bounds
    nx = point.x / mapping.image_width
    ny = point.y / mapping.image_height
    return Point(tb.x + nx * tb.width, tb.y + ny * tb.height)


def map_box(box: Box, mapping: CoordinateMapping) -> Box:
    a = map_point(Point(box.x_min, box.y_min), mapping)
    b = map_point(Point(box.x_max, box.y_max), mapping)
    # a negative target size flips the corners
    return Box(min(a.x, b.x), min(a.y, b.y), max(a.x, b.x), max(a.y, b.y))


def unmap_point(point: Point, mapping: CoordinateMapping) -> Point:
    """Canvas → image pixels."""
    validate_mapping(mapping)
    tb = mapping.target_bounds
    if tb.width == 0 or tb.height == 0:
        raise InvalidMapping(f"target size must be non-zero, got {tb.width}x{tb.height}")
    nx = (point.x - tb.x) / tb.width
    ny = (point.y - tb.y) / tb.height
    return Point(nx * mapping.image_width, ny * mapping.image_height)


def map_box_or_passthrough(box: Box, mapping: Optional[CoordinateMapping]) -> Box:
    """Without a mapping, pixel coordinates pass through unchanged."""
    if mapping is None:
        return box
    return map_box(box, mapping)


__all__ = [
    "validate_mapping",
    "map_point",
    "map_box",
    "unmap_point",
    "map_box_or_passthrough",
]
