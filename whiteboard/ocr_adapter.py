"""
OCR adapters: provider output → RawDetection list (transcript first).

The OCR provider itself stays outside the pipeline. These helpers only
reshape what a provider returns:

- Google Vision `textAnnotations` (description + boundingPoly.vertices)
- pytesseract `image_to_data(..., output_type=Output.DICT)` column dicts
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import pytesseract
from PIL import Image

from .config import WhiteboardSettings, load_settings
from .ocr_types import RawDetection

log = logging.getLogger(__name__)


# -----------------------------
# Google Vision
# -----------------------------

def detections_from_vision(
    response: Union[Mapping[str, Any], Sequence[Mapping[str, Any]]],
) -> List[RawDetection]:
    """
    Accepts either the full annotate response ({"textAnnotations": [...]})
    or the annotation list itself.
    """
    if isinstance(response, Mapping):
        annotations = response.get("textAnnotations") or []
    else:
        annotations = response

    out: List[RawDetection] = []
    for ann in annotations:
        poly = ann.get("boundingPoly") or ann.get("boundingPolygon") or {}
        det: RawDetection = {
            "text": str(ann.get("description") or ann.get("text") or ""),
            "boundingPolygon": {"vertices": [dict(v or {}) for v in (poly.get("vertices") or [])]},
        }
        if ann.get("confidence") is not None:
            det["confidence"] = float(ann["confidence"])
        out.append(det)
    return out


# -----------------------------
# Tesseract
# -----------------------------

def _rect_polygon(x: int, y: int, w: int, h: int) -> Dict[str, List[Dict[str, float]]]:
    return {
        "vertices": [
            {"x": x, "y": y},
            {"x": x + w, "y": y},
            {"x": x + w, "y": y + h},
            {"x": x, "y": y + h},
        ]
    }


def _tesseract_word(i: int, data: Mapping[str, List[Any]], conf_floor: float) -> Optional[RawDetection]:
    raw = str(data["text"][i] or "").strip()
    if not raw:
        return None
    try:
        conf_raw = float(data["conf"][i])
    except (TypeError, ValueError):
        conf_raw = -1.0
    if conf_raw < conf_floor:
        return None

    try:
        x = int(data["left"][i])
        y = int(data["top"][i])
        w = max(0, int(data["width"][i]))
        h = max(0, int(data["height"][i]))
    except (KeyError, IndexError, TypeError, ValueError):
        return None

    return {
        "text": raw,
        "boundingPolygon": _rect_polygon(x, y, w, h),  # type: ignore[typeddict-item]
        "confidence": conf_raw / 100.0,
    }


def _tesseract_transcript(words: List[RawDetection], data: Mapping[str, List[Any]], kept: List[int]) -> str:
    """Join kept words, breaking lines on tesseract's (block, par, line) keys."""
    keys = ("block_num", "par_num", "line_num")
    if not all(k in data for k in keys):
        return " ".join(w["text"] for w in words)

    lines: List[List[str]] = []
    last = None
    for det, i in zip(words, kept):
        key = tuple(data[k][i] for k in keys)
        if key != last:
            lines.append([])
            last = key
        lines[-1].append(det["text"])
    return "\n".join(" ".join(ln) for ln in lines)


def detections_from_tesseract(
    data: Mapping[str, List[Any]],
    *,
    conf_floor: Optional[float] = None,
) -> List[RawDetection]:
    """
    pytesseract column dict → detections, with a synthesized transcript
    entry first so the result matches the Vision layout.
    """
    floor = load_settings().ocr_conf_floor if conf_floor is None else conf_floor
    words: List[RawDetection] = []
    kept: List[int] = []
    for i in range(len(data.get("text", []))):
        det = _tesseract_word(i, data, floor)
        if det is not None:
            words.append(det)
            kept.append(i)

    if not words:
        return []

    xs = [v["x"] for w in words for v in w["boundingPolygon"]["vertices"]]
    ys = [v["y"] for w in words for v in w["boundingPolygon"]["vertices"]]
    transcript: RawDetection = {
        "text": _tesseract_transcript(words, data, kept),
        "boundingPolygon": _rect_polygon(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys)),  # type: ignore[typeddict-item]
    }
    log.debug("tesseract: kept %d of %d words (floor=%.1f)", len(words), len(data.get("text", [])), floor)
    return [transcript] + words


def configure_tesseract(settings: Optional[WhiteboardSettings] = None) -> None:
    cfg = settings or load_settings()
    cmd = cfg.tesseract_cmd
    if cmd and os.path.isfile(cmd):
        pytesseract.pytesseract.tesseract_cmd = cmd


def run_tesseract(image: Image.Image, *, settings: Optional[WhiteboardSettings] = None) -> List[RawDetection]:
    """OCR a rendered board with Tesseract and return transcript-first detections."""
    cfg = settings or load_settings()
    configure_tesseract(cfg)
    data = pytesseract.image_to_data(
        image,
        output_type=pytesseract.Output.DICT,
        config=cfg.tesseract_config,
    )
    return detections_from_tesseract(data, conf_floor=cfg.ocr_conf_floor)


__all__ = [
    "detections_from_vision",
    "detections_from_tesseract",
    "configure_tesseract",
    "run_tesseract",
]
