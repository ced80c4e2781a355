"""
Whiteboard settings loaded from the environment.

Values are read once per `load_settings()` call, so tests can monkeypatch
the environment and reload. Each call also loads a `.env` found from the
working directory upward; variables already set in the environment win.
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import find_dotenv, load_dotenv

log = logging.getLogger(__name__)

# -----------------------------
# Defaults
# -----------------------------

DEFAULT_EQUATION_TOLERANCE_PX = 20.0
DEFAULT_LINE_TOLERANCE_PX = 30.0
DEFAULT_HIGHLIGHT_PADDING_PX = 10.0
DEFAULT_CONFIDENCE = 0.9
DEFAULT_OCR_CONF_FLOOR = 55.0
DEFAULT_TESSERACT_CONFIG = "--oem 3 --psm 6"


@dataclass(frozen=True, slots=True)
class WhiteboardSettings:
    equation_tolerance_px: float = DEFAULT_EQUATION_TOLERANCE_PX
    line_tolerance_px: float = DEFAULT_LINE_TOLERANCE_PX
    highlight_padding_px: float = DEFAULT_HIGHLIGHT_PADDING_PX
    default_confidence: float = DEFAULT_CONFIDENCE
    ocr_conf_floor: float = DEFAULT_OCR_CONF_FLOOR
    tesseract_cmd: Optional[str] = None
    tesseract_config: str = DEFAULT_TESSERACT_CONFIG
    debug_dir: str = ""


def _env_float(name: str, default: float, *, minimum: Optional[float] = 0.0) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        log.warning("Ignoring %s=%r (not a number); using %s", name, raw, default)
        return default
    if not math.isfinite(value):
        log.warning("Ignoring %s=%r (not finite); using %s", name, raw, default)
        return default
    if minimum is not None and value < minimum:
        log.warning("Ignoring %s=%r (below %s); using %s", name, raw, minimum, default)
        return default
    return value


def load_settings(*, use_dotenv: bool = True) -> WhiteboardSettings:
    """Snapshot the current environment into a WhiteboardSettings."""
    if use_dotenv:
        env_path = find_dotenv(usecwd=True)
        if env_path:
            load_dotenv(env_path, override=False)
    return WhiteboardSettings(
        equation_tolerance_px=_env_float("WB_EQUATION_TOLERANCE_PX", DEFAULT_EQUATION_TOLERANCE_PX),
        line_tolerance_px=_env_float("WB_LINE_TOLERANCE_PX", DEFAULT_LINE_TOLERANCE_PX),
        highlight_padding_px=_env_float("WB_HIGHLIGHT_PADDING_PX", DEFAULT_HIGHLIGHT_PADDING_PX),
        default_confidence=_env_float("WB_DEFAULT_CONFIDENCE", DEFAULT_CONFIDENCE),
        ocr_conf_floor=_env_float("WB_OCR_CONF_FLOOR", DEFAULT_OCR_CONF_FLOOR, minimum=None),
        tesseract_cmd=(os.getenv("WB_TESSERACT_CMD") or "").strip() or None,
        tesseract_config=os.getenv("WB_TESSERACT_CONFIG") or DEFAULT_TESSERACT_CONFIG,
        debug_dir=(os.getenv("WB_DEBUG_DIR") or "").strip(),
    )


__all__ = [
    "WhiteboardSettings",
    "load_settings",
    "DEFAULT_EQUATION_TOLERANCE_PX",
    "DEFAULT_LINE_TOLERANCE_PX",
    "DEFAULT_HIGHLIGHT_PADDING_PX",
    "DEFAULT_CONFIDENCE",
    "DEFAULT_OCR_CONF_FLOOR",
    "DEFAULT_TESSERACT_CONFIG",
]
