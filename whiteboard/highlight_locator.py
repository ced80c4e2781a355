"""
Highlight locator: find the tokens of a line that produced a piece of text
and return their canvas-space box.

Matching is case-insensitive on whitespace-split words:
1. exact sequence: a contiguous run of tokens equal to the query words;
2. fallback: each query word independently matches its first equal token.
Nothing matched → None. The locator never raises for unmatched queries.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from .config import DEFAULT_HIGHLIGHT_PADDING_PX
from .coord_mapper import map_box_or_passthrough
from .geometry import union_token_boxes
from .ocr_types import ClassifiedLine, CoordinateMapping, HighlightRegion, Token

log = logging.getLogger(__name__)


def query_words(query: str) -> List[str]:
    return (query or "").strip().lower().split()


def _norm(text: str) -> str:
    return (text or "").strip().lower()


def exact_sequence_match(tokens: Sequence[Token], words: Sequence[str]) -> List[Token]:
    """Contiguous run of tokens spelling `words`; [] unless fully matched."""
    if not words:
        return []
    run: List[Token] = []
    i = 0
    for tok in tokens:
        text = _norm(tok.text)
        if text == words[i]:
            run.append(tok)
            i += 1
        elif text == words[0]:
            run = [tok]
            i = 1
        elif run:
            run = []
            i = 0
        if i == len(words):
            return run
    return []


def independent_word_match(tokens: Sequence[Token], words: Sequence[str]) -> List[Token]:
    """First token per query word; repeated words collapse; line order."""
    hits: List[int] = []
    for w in words:
        for idx, tok in enumerate(tokens):
            if _norm(tok.text) == w:
                if idx not in hits:
                    hits.append(idx)
                break
    return [tokens[idx] for idx in sorted(hits)]


def match_tokens(tokens: Sequence[Token], query: str) -> Tuple[List[Token], Optional[str]]:
    """Return (matched tokens, "exact" | "partial" | None)."""
    words = query_words(query)
    if not words:
        return [], None
    run = exact_sequence_match(tokens, words)
    if run:
        return run, "exact"
    partial = independent_word_match(tokens, words)
    if partial:
        return partial, "partial"
    return [], None


def _region(
    tokens: Sequence[Token],
    mapping: Optional[CoordinateMapping],
    padding: float,
    mode: str,
    line_index: Optional[int],
) -> Optional[HighlightRegion]:
    bbox = union_token_boxes(tokens)
    if bbox is None:
        return None
    return HighlightRegion(
        bounding_box=map_box_or_passthrough(bbox, mapping),
        matched_token_texts=tuple(t.text for t in tokens),
        padding=padding,
        match_mode=mode,
        line_index=line_index,
        pixel_box=bbox,
    )


def locate_highlight(
    line: ClassifiedLine,
    query: str,
    mapping: Optional[CoordinateMapping] = None,
    *,
    padding: float = DEFAULT_HIGHLIGHT_PADDING_PX,
    line_index: Optional[int] = None,
) -> Optional[HighlightRegion]:
    matched, mode = match_tokens(line.tokens, query)
    if not matched or mode is None:
        return None
    return _region(matched, mapping, padding, mode, line_index)


def line_region(
    line: ClassifiedLine,
    mapping: Optional[CoordinateMapping] = None,
    *,
    padding: float = DEFAULT_HIGHLIGHT_PADDING_PX,
    line_index: Optional[int] = None,
) -> Optional[HighlightRegion]:
    """Whole-equation highlight used when the query matched nothing."""
    return _region(line.tokens, mapping, padding, "line", line_index)


def locate_on_board(
    lines: Sequence[ClassifiedLine],
    query: str,
    mapping: Optional[CoordinateMapping] = None,
    *,
    padding: float = DEFAULT_HIGHLIGHT_PADDING_PX,
) -> Optional[HighlightRegion]:
    """
    Search every line: the first exact match wins, otherwise the line with the
    most fallback-matched tokens (earliest line on ties).
    """
    words = query_words(query)
    if not words:
        return None

    for idx, line in enumerate(lines):
        run = exact_sequence_match(line.tokens, words)
        if run:
            log.debug("highlight %r: exact match on line %d", query, idx)
            return _region(run, mapping, padding, "exact", idx)

    best_idx: Optional[int] = None
    best: List[Token] = []
    for idx, line in enumerate(lines):
        partial = independent_word_match(line.tokens, words)
        if len(partial) > len(best):
            best_idx, best = idx, partial

    if not best:
        log.debug("highlight %r: no match on %d lines", query, len(lines))
        return None
    log.debug("highlight %r: partial match on line %s (%d tokens)", query, best_idx, len(best))
    return _region(best, mapping, padding, "partial", best_idx)


__all__ = [
    "query_words",
    "exact_sequence_match",
    "independent_word_match",
    "match_tokens",
    "locate_highlight",
    "line_region",
    "locate_on_board",
]
