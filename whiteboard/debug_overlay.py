"""
Debug overlays: draw equation boxes and highlighted tokens onto the rendered
board image. Controlled by WB_DEBUG_DIR; when unset, saving is a no-op.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional

from PIL import Image, ImageDraw

from .config import WhiteboardSettings, load_settings
from .ocr_types import BoardAnalysis, Box

log = logging.getLogger(__name__)

TYPE_COLORS: Dict[str, str] = {
    "equation": "#2e7d32",
    "expression": "#1565c0",
    "number_sequence": "#6a1b9a",
    "unknown": "#9e9e9e",
}
HIGHLIGHT_COLOR = "#ff6f00"


def _xyxy(box: Box):
    return [box.x_min, box.y_min, box.x_max, box.y_max]


def draw_overlay(image: Image.Image, analysis: BoardAnalysis) -> Image.Image:
    """
    Copy of `image` with pixel-space boxes drawn on it.

    The highlight uses the region's pixel box, so the drawing stays in pixel
    space even when the analysis was mapped.
    """
    out = image.convert("RGB")
    draw = ImageDraw.Draw(out)

    for eq in analysis.equations:
        color = TYPE_COLORS.get(eq.line_type, TYPE_COLORS["unknown"])
        draw.rectangle(_xyxy(eq.bounding_box), outline=color, width=2)
        for tok in eq.tokens:
            draw.rectangle(_xyxy(tok.box), outline=color, width=1)

    hl = analysis.highlight
    padded = hl.padded_box(pixel=True) if hl is not None else None
    if padded is not None:
        draw.rectangle(_xyxy(padded), outline=HIGHLIGHT_COLOR, width=3)
    return out


def save_debug_overlay(
    image: Image.Image,
    analysis: BoardAnalysis,
    name: str = "board",
    *,
    settings: Optional[WhiteboardSettings] = None,
) -> Optional[Path]:
    """Write `<WB_DEBUG_DIR>/<name>_overlay.png`; returns the path or None."""
    cfg = settings or load_settings()
    if not cfg.debug_dir:
        return None
    try:
        root = Path(cfg.debug_dir)
        root.mkdir(parents=True, exist_ok=True)
        out_path = root / f"{name}_overlay.png"
        draw_overlay(image, analysis).save(out_path)
        return out_path
    except OSError as e:
        # debug hooks must never break analysis
        log.warning("could not write debug overlay to %s: %s", cfg.debug_dir, e)
        return None


__all__ = ["TYPE_COLORS", "HIGHLIGHT_COLOR", "draw_overlay", "save_debug_overlay"]
