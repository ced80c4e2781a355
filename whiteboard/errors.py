"""
Whiteboard error types.

Only defects that must stop a call are exceptions. Empty boards and
unmatched highlight queries are ordinary results (empty lists / None).
"""

from __future__ import annotations


class WhiteboardError(Exception):
    """Base class for failures raised by the spatial pipeline."""


class InvalidMapping(WhiteboardError, ValueError):
    """Coordinate mapping cannot be applied (zero or non-finite dimensions)."""


class MalformedBox(WhiteboardError, ValueError):
    """Box constructed with inverted edges (x_min > x_max or y_min > y_max)."""


class MalformedDetection(WhiteboardError, ValueError):
    """OCR detection whose polygon or vertex coordinates cannot be read."""


class InvalidTolerance(WhiteboardError, ValueError):
    """Clustering tolerance that is negative, NaN or not a number."""


__all__ = ["WhiteboardError", "InvalidMapping", "MalformedBox", "MalformedDetection", "InvalidTolerance"]
