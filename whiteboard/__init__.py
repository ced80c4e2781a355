"""
Whiteboard spatial analysis: OCR tokens → ordered lines, classified
equations, canvas-space boxes and phrase highlights.
"""

from .coord_mapper import map_box, map_point, unmap_point
from .equation_classifier import analyze_texts, classify_line, classify_token_type
from .errors import InvalidMapping, InvalidTolerance, MalformedBox, MalformedDetection, WhiteboardError
from .highlight_locator import line_region, locate_highlight, locate_on_board
from .line_clusterer import group_equations, group_reading_lines, lines_in_order
from .ocr_types import (
    BoardAnalysis,
    Box,
    ClassifiedLine,
    CoordinateMapping,
    HighlightRegion,
    Point,
    TargetBounds,
    Token,
)
from .pipeline import analyze_board, analyze_board_or_fallback, analyze_tokens, to_payload
from .token_normalizer import normalize_detections, split_transcript

__all__ = [
    "analyze_board",
    "analyze_board_or_fallback",
    "analyze_tokens",
    "to_payload",
    "normalize_detections",
    "split_transcript",
    "group_equations",
    "group_reading_lines",
    "lines_in_order",
    "analyze_texts",
    "classify_line",
    "classify_token_type",
    "map_point",
    "map_box",
    "unmap_point",
    "locate_highlight",
    "locate_on_board",
    "line_region",
    "BoardAnalysis",
    "Box",
    "ClassifiedLine",
    "CoordinateMapping",
    "HighlightRegion",
    "Point",
    "TargetBounds",
    "Token",
    "InvalidMapping",
    "MalformedBox",
    "MalformedDetection",
    "InvalidTolerance",
    "WhiteboardError",
]
