"""
Token normalizer: raw OCR detections → Tokens.

Detections arrive as {text, boundingPolygon: {vertices: [{x?, y?} x4]}}.
Google Vision spells the same fields description/boundingPoly, so both are
accepted. When the provider puts the full transcript first, that entry is
not spatial data and is split off before normalizing.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from .config import DEFAULT_CONFIDENCE
from .errors import MalformedDetection
from .geometry import box_from_vertices
from .ocr_types import Token

log = logging.getLogger(__name__)


def detection_text(det: Mapping[str, Any]) -> str:
    text = det.get("text")
    if text is None:
        text = det.get("description")
    return "" if text is None else str(text)


def detection_vertices(det: Mapping[str, Any]) -> List[Optional[Mapping[str, Any]]]:
    poly = det.get("boundingPolygon")
    if poly is None:
        poly = det.get("boundingPoly")
    if not poly:
        return []
    if not isinstance(poly, Mapping):
        raise MalformedDetection(f"bounding polygon must be a mapping, got {type(poly).__name__}")
    vertices = poly.get("vertices") or []
    if not isinstance(vertices, (list, tuple)):
        raise MalformedDetection(f"vertices must be a list, got {type(vertices).__name__}")
    return list(vertices)


def split_transcript(detections: Sequence[Mapping[str, Any]]) -> Tuple[str, List[Mapping[str, Any]]]:
    """Return (full_text, per-token detections) for a transcript-first list."""
    if not detections:
        return "", []
    return detection_text(detections[0]), list(detections[1:])


def normalize_detection(det: Mapping[str, Any], *, default_confidence: float = DEFAULT_CONFIDENCE) -> Token:
    box = box_from_vertices(detection_vertices(det))
    conf = det.get("confidence")
    try:
        confidence = float(conf) if conf is not None else default_confidence
    except (TypeError, ValueError):
        confidence = default_confidence
    return Token.from_box(detection_text(det), box, confidence)


def normalize_detections(
    detections: Sequence[Mapping[str, Any]],
    *,
    has_transcript: bool = True,
    default_confidence: float = DEFAULT_CONFIDENCE,
) -> List[Token]:
    """
    One Token per detection, in provider order.

    Degenerate (zero-area) boxes are kept; downstream code tolerates them.
    """
    items = split_transcript(detections)[1] if has_transcript else list(detections)
    tokens = [normalize_detection(d, default_confidence=default_confidence) for d in items]
    log.debug("normalized %d detections into %d tokens", len(detections), len(tokens))
    return tokens


__all__ = [
    "detection_text",
    "detection_vertices",
    "split_transcript",
    "normalize_detection",
    "normalize_detections",
]
