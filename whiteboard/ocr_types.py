"""
Whiteboard OCR Types
Defines the geometry-first dataclasses used inside the spatial pipeline
(points, boxes, tokens, classified lines, mapping, highlight regions) and the
TypedDicts for the wire payloads exchanged with the OCR provider, the canvas
and the advisor.

All dataclasses are frozen: every value is derived fresh from a single OCR
response and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, NotRequired, Optional, Tuple, TypedDict

from .errors import MalformedBox


# ────────────────────────────────────────────────
# 🧩 Base geometric units
# ────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class Box:
    """
    Axis-aligned box in (x_min, y_min, x_max, y_max) form.

    Zero width/height is allowed (degenerate OCR detections); inverted
    edges are not.
    """
    x_min: float
    y_min: float
    x_max: float
    y_max: float

    def __post_init__(self) -> None:
        if self.x_min > self.x_max or self.y_min > self.y_max:
            raise MalformedBox(
                f"inverted box ({self.x_min}, {self.y_min}, {self.x_max}, {self.y_max})"
            )

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min

    @property
    def center(self) -> Point:
        return Point((self.x_min + self.x_max) / 2.0, (self.y_min + self.y_max) / 2.0)

    def to_rect(self) -> "RectDict":
        """{x, y, width, height} form used by the canvas."""
        return {"x": self.x_min, "y": self.y_min, "width": self.width, "height": self.height}


# ────────────────────────────────────────────────
# 🔤 Tokens and lines
# ────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class Token:
    """One OCR-detected text fragment with its pixel-space box."""
    text: str
    box: Box
    center: Point
    confidence: float = 0.9

    @classmethod
    def from_box(cls, text: str, box: Box, confidence: float = 0.9) -> "Token":
        return cls(text=text, box=box, center=box.center, confidence=confidence)


# A line is an ordered (left→right) run of tokens.
Line = Tuple[Token, ...]


@dataclass(frozen=True, slots=True)
class LineComponents:
    numbers: Tuple[str, ...] = ()
    operators: Tuple[str, ...] = ()
    variables: Tuple[str, ...] = ()
    symbols: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "numbers": list(self.numbers),
            "operators": list(self.operators),
            "variables": list(self.variables),
            "symbols": list(self.symbols),
        }


@dataclass(frozen=True, slots=True)
class ClassifiedLine:
    tokens: Line
    reconstructed_text: str
    components: LineComponents
    line_type: str                     # "equation" | "expression" | "number_sequence" | "unknown"
    bounding_box: Box                  # pixel space


# ────────────────────────────────────────────────
# 🗺️ Coordinate mapping
# ────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class TargetBounds:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True, slots=True)
class CoordinateMapping:
    """
    Image-pixel space → canvas space.

    export_scale is informational only; it is already baked into
    image_width/image_height by the canvas when it rasterised the board.
    """
    image_width: float
    image_height: float
    target_bounds: TargetBounds
    export_scale: Optional[float] = None

    @classmethod
    def from_dict(cls, data: "MappingDict") -> "CoordinateMapping":
        tb = data["target_bounds"]
        return cls(
            image_width=float(data["image_width"]),
            image_height=float(data["image_height"]),
            target_bounds=TargetBounds(
                x=float(tb["x"]),
                y=float(tb["y"]),
                width=float(tb["width"]),
                height=float(tb["height"]),
            ),
            export_scale=data.get("export_scale"),
        )


# ────────────────────────────────────────────────
# 🎯 Highlight + analysis results
# ────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class HighlightRegion:
    bounding_box: Box                  # canvas space (pixel space if no mapping)
    matched_token_texts: Tuple[str, ...]
    padding: float
    match_mode: str = "exact"          # "exact" | "partial" | "line"
    line_index: Optional[int] = None
    pixel_box: Optional[Box] = None    # matched tokens in image pixels; not serialized

    def padded_box(self, *, pixel: bool = False) -> Optional[Box]:
        """Highlight box grown by `padding`; pixel=True pads the image-space box."""
        b = self.pixel_box if pixel else self.bounding_box
        if b is None:
            return None
        p = self.padding
        return Box(b.x_min - p, b.y_min - p, b.x_max + p, b.y_max + p)

    def to_payload(self) -> "HighlightPayload":
        return {
            "bounding_box": self.bounding_box.to_rect(),
            "matched_token_texts": list(self.matched_token_texts),
            "padding": self.padding,
            "match_mode": self.match_mode,
            "line_index": self.line_index,
        }


@dataclass(frozen=True, slots=True)
class BoardAnalysis:
    """Everything derived from one OCR response."""
    full_text: str
    tokens: Tuple[Token, ...]
    lines_in_order: Tuple[str, ...]
    equations: Tuple[ClassifiedLine, ...]
    highlight: Optional[HighlightRegion] = None
    mapping: Optional[CoordinateMapping] = None
    spatial_available: bool = True
    meta: Dict[str, object] = field(default_factory=dict)

    @property
    def latest_step(self) -> Optional[str]:
        return self.lines_in_order[-1] if self.lines_in_order else None


# ────────────────────────────────────────────────
# 📦 Wire payloads (TypedDicts)
# ────────────────────────────────────────────────

class RawVertex(TypedDict, total=False):
    x: float
    y: float


class RawPolygon(TypedDict):
    vertices: List[RawVertex]


class RawDetection(TypedDict):
    """OCR provider detection; vendors also spell these description/boundingPoly."""
    text: str
    boundingPolygon: RawPolygon
    confidence: NotRequired[float]


class RectDict(TypedDict):
    x: float
    y: float
    width: float
    height: float


class TargetBoundsDict(TypedDict):
    x: float
    y: float
    width: float
    height: float


class MappingDict(TypedDict):
    image_width: float
    image_height: float
    target_bounds: TargetBoundsDict
    export_scale: NotRequired[Optional[float]]


class EquationPayload(TypedDict):
    text: str
    type: str
    components: Dict[str, List[str]]
    token_texts: List[str]
    bounding_box: RectDict


class HighlightPayload(TypedDict):
    bounding_box: RectDict
    matched_token_texts: List[str]
    padding: float
    match_mode: str
    line_index: Optional[int]


class SpatialElement(TypedDict):
    text: str
    type: str
    position: RectDict
    confidence: float


class SpatialAnalysis(TypedDict):
    elements: List[SpatialElement]
    layout: str                        # "detected" | "empty"
    structure: str                     # "mathematical" | "none"


class AnalysisPayload(TypedDict):
    full_text: str
    lines_in_order: List[str]
    latest_step: Optional[str]
    equations: List[EquationPayload]
    highlight_region: Optional[HighlightPayload]
    spatial_analysis: SpatialAnalysis
    spatial_available: bool
    coordinate_space: str              # "canvas" | "pixel"


__all__ = [
    "Point",
    "Box",
    "Token",
    "Line",
    "LineComponents",
    "ClassifiedLine",
    "TargetBounds",
    "CoordinateMapping",
    "HighlightRegion",
    "BoardAnalysis",
    "RawVertex",
    "RawPolygon",
    "RawDetection",
    "RectDict",
    "TargetBoundsDict",
    "MappingDict",
    "EquationPayload",
    "HighlightPayload",
    "SpatialElement",
    "SpatialAnalysis",
    "AnalysisPayload",
]
