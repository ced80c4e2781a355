"""
Whiteboard analysis pipeline.

    detections → tokens → (equations, reading lines) → classified equations
               → canvas-space payload (+ optional highlight)

Pure per call: no module state is read or written besides the settings
snapshot passed in (or loaded from the environment).
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Sequence

from .config import WhiteboardSettings, load_settings
from .coord_mapper import map_box_or_passthrough, validate_mapping
from .equation_classifier import classify_lines, classify_token_type
from .errors import WhiteboardError
from .highlight_locator import line_region, locate_highlight, locate_on_board
from .line_clusterer import group_equations, group_reading_lines, line_text
from .ocr_types import (
    AnalysisPayload,
    BoardAnalysis,
    ClassifiedLine,
    CoordinateMapping,
    EquationPayload,
    HighlightRegion,
    SpatialAnalysis,
    Token,
)
from .token_normalizer import normalize_detections, split_transcript

log = logging.getLogger(__name__)


def find_highlight(
    equations: Sequence[ClassifiedLine],
    query: str,
    mapping: Optional[CoordinateMapping],
    *,
    padding: float,
    equation_index: Optional[int] = None,
) -> Optional[HighlightRegion]:
    """
    Locate `query` on the board.

    With equation_index, only that equation is searched and an unmatched
    query falls back to the whole equation box. An out-of-range index yields
    None.
    """
    if equation_index is None:
        return locate_on_board(equations, query, mapping, padding=padding)
    if not 0 <= equation_index < len(equations):
        log.debug("highlight: equation index %d out of range (%d equations)", equation_index, len(equations))
        return None
    line = equations[equation_index]
    region = locate_highlight(line, query, mapping, padding=padding, line_index=equation_index)
    if region is None:
        region = line_region(line, mapping, padding=padding, line_index=equation_index)
    return region


def analyze_tokens(
    tokens: Sequence[Token],
    mapping: Optional[CoordinateMapping] = None,
    highlight_query: Optional[str] = None,
    *,
    full_text: str = "",
    equation_index: Optional[int] = None,
    equation_tolerance: Optional[float] = None,
    line_tolerance: Optional[float] = None,
    padding: Optional[float] = None,
    settings: Optional[WhiteboardSettings] = None,
) -> BoardAnalysis:
    cfg = settings or load_settings()
    eq_tol = cfg.equation_tolerance_px if equation_tolerance is None else equation_tolerance
    ln_tol = cfg.line_tolerance_px if line_tolerance is None else line_tolerance
    pad = cfg.highlight_padding_px if padding is None else padding

    if mapping is not None:
        validate_mapping(mapping)

    toks = tuple(tokens)
    if not toks:
        log.debug("empty board: no tokens")
        return BoardAnalysis(full_text=full_text, tokens=(), lines_in_order=(), equations=(), mapping=mapping)

    equations = tuple(classify_lines(group_equations(toks, tolerance=eq_tol)))
    reading = tuple(line_text(ln) for ln in group_reading_lines(toks, tolerance=ln_tol))

    highlight = None
    query = (highlight_query or "").strip()
    if query:
        highlight = find_highlight(
            equations, query, mapping, padding=pad, equation_index=equation_index
        )

    log.debug(
        "analyzed %d tokens: %d equations, %d reading lines, highlight=%s",
        len(toks),
        len(equations),
        len(reading),
        highlight.match_mode if highlight else None,
    )
    return BoardAnalysis(
        full_text=full_text,
        tokens=toks,
        lines_in_order=reading,
        equations=equations,
        highlight=highlight,
        mapping=mapping,
    )


def analyze_board(
    detections: Sequence[Mapping[str, Any]],
    mapping: Optional[CoordinateMapping] = None,
    highlight_query: Optional[str] = None,
    *,
    has_transcript: bool = True,
    equation_index: Optional[int] = None,
    equation_tolerance: Optional[float] = None,
    line_tolerance: Optional[float] = None,
    padding: Optional[float] = None,
    settings: Optional[WhiteboardSettings] = None,
) -> BoardAnalysis:
    """
    Full pipeline over a raw OCR detection list.

    Raises InvalidMapping for an unusable mapping; an empty detection list
    is a normal, empty result.
    """
    cfg = settings or load_settings()
    full_text = split_transcript(detections)[0] if has_transcript else ""
    tokens = normalize_detections(
        detections, has_transcript=has_transcript, default_confidence=cfg.default_confidence
    )
    return analyze_tokens(
        tokens,
        mapping,
        highlight_query,
        full_text=full_text,
        equation_index=equation_index,
        equation_tolerance=equation_tolerance,
        line_tolerance=line_tolerance,
        padding=padding,
        settings=cfg,
    )


def analyze_board_or_fallback(
    detections: Sequence[Mapping[str, Any]],
    mapping: Optional[CoordinateMapping] = None,
    highlight_query: Optional[str] = None,
    **kwargs: Any,
) -> BoardAnalysis:
    """
    analyze_board, but pipeline failures degrade to the flat transcript
    (spatial_available=False) instead of propagating.
    """
    try:
        return analyze_board(detections, mapping, highlight_query, **kwargs)
    except WhiteboardError as e:
        log.warning("spatial analysis unavailable, using flat transcript: %s", e)
        has_transcript = kwargs.get("has_transcript", True)
        full_text = split_transcript(detections)[0] if has_transcript else ""
        lines = tuple(ln.strip() for ln in full_text.splitlines() if ln.strip())
        return BoardAnalysis(
            full_text=full_text,
            tokens=(),
            lines_in_order=lines,
            equations=(),
            mapping=None,
            spatial_available=False,
            meta={"error": str(e), "error_type": type(e).__name__},
        )


# -----------------------------
# Payload
# -----------------------------

def equation_payload(line: ClassifiedLine, mapping: Optional[CoordinateMapping]) -> EquationPayload:
    return {
        "text": line.reconstructed_text,
        "type": line.line_type,
        "components": line.components.to_dict(),
        "token_texts": [t.text for t in line.tokens],
        "bounding_box": map_box_or_passthrough(line.bounding_box, mapping).to_rect(),
    }


def spatial_analysis(tokens: Sequence[Token], mapping: Optional[CoordinateMapping]) -> SpatialAnalysis:
    elements = [
        {
            "text": t.text,
            "type": classify_token_type(t.text),
            "position": map_box_or_passthrough(t.box, mapping).to_rect(),
            "confidence": t.confidence,
        }
        for t in tokens
    ]
    if not elements:
        return {"elements": [], "layout": "empty", "structure": "none"}
    return {"elements": elements, "layout": "detected", "structure": "mathematical"}  # type: ignore[typeddict-item]


def to_payload(analysis: BoardAnalysis) -> AnalysisPayload:
    """JSON-ready dict for the canvas/advisor; boxes are in canvas space when mapped."""
    mapping = analysis.mapping
    equations: List[EquationPayload] = [equation_payload(eq, mapping) for eq in analysis.equations]
    return {
        "full_text": analysis.full_text,
        "lines_in_order": list(analysis.lines_in_order),
        "latest_step": analysis.latest_step,
        "equations": equations,
        "highlight_region": analysis.highlight.to_payload() if analysis.highlight else None,
        "spatial_analysis": spatial_analysis(analysis.tokens, mapping),
        "spatial_available": analysis.spatial_available,
        "coordinate_space": "canvas" if mapping is not None else "pixel",
    }


__all__ = [
    "find_highlight",
    "analyze_tokens",
    "analyze_board",
    "analyze_board_or_fallback",
    "equation_payload",
    "spatial_analysis",
    "to_payload",
]
