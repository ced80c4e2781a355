"""
Equation classifier: per-line text reconstruction, component extraction and
structural typing.

Two rule sets coexist and are applied in their own contexts:

- EQUATION_OPERATORS / EQUATION_VARIABLE_RX: narrow, ASCII operators {+ - * / = < >} and single-letter
  variables. Used to extract a line's components and decide its type.
- TOKEN_TYPE_RULES: broader, recognises × ÷ ≤ ≥ as operators and letters
  with a digit subscript (x1, x_1) as variables. Used to tag individual
  tokens for the spatial-analysis payload.
"""

from __future__ import annotations

import re
from typing import Callable, Dict, Iterable, List, Sequence, Tuple

from .geometry import union_token_boxes
from .ocr_types import Box, ClassifiedLine, LineComponents, Token

# -----------------------------
# Shared patterns
# -----------------------------

NUMBER_RX = re.compile(r"^-?\d+(\.\d+)?$")

GREEK_LETTERS = frozenset(
    "αβγδεζηθικλμνξοπρστυφχψω"
    "ΓΔΘΛΞΠΣΦΨΩ"
)
MATH_SYMBOLS = frozenset(GREEK_LETTERS | {"Σ", "√", "∫", "∑", "∞"})

# -----------------------------
# Narrow rule set (equation components)
# -----------------------------

EQUATION_OPERATORS = frozenset({"+", "-", "*", "/", "=", "<", ">"})
ARITHMETIC_OPERATORS = frozenset({"+", "-", "*", "/"})
EQUATION_VARIABLE_RX = re.compile(r"^[A-Za-z]$")

# -----------------------------
# Broad rule set (per-token type tag)
# -----------------------------

# Evaluated top to bottom; first hit wins, otherwise "word".
TOKEN_TYPE_RULES: Tuple[Tuple[re.Pattern[str], str], ...] = (
    (NUMBER_RX, "number"),
    (re.compile(r"^[+\-×÷=<>≤≥]$"), "operator"),
    (re.compile(r"^[A-Za-z](_?\d+)?$"), "variable"),
    (re.compile(r"="), "equation"),
)


def classify_token_type(text: str) -> str:
    t = (text or "").strip()
    for pattern, label in TOKEN_TYPE_RULES:
        if pattern.search(t):
            return label
    return "word"


# -----------------------------
# Component extraction
# -----------------------------

def _is_number(t: str) -> bool:
    return bool(NUMBER_RX.match(t))


def _is_operator(t: str) -> bool:
    return t in EQUATION_OPERATORS


def _is_variable(t: str) -> bool:
    return bool(EQUATION_VARIABLE_RX.match(t))


def _is_symbol(t: str) -> bool:
    return t in MATH_SYMBOLS


def extract_components(texts: Iterable[str]) -> LineComponents:
    """Independent passes over the token texts; order follows the line."""
    cleaned = [(t or "").strip() for t in texts]
    return LineComponents(
        numbers=tuple(t for t in cleaned if _is_number(t)),
        operators=tuple(t for t in cleaned if _is_operator(t)),
        variables=tuple(t for t in cleaned if _is_variable(t)),
        symbols=tuple(t for t in cleaned if _is_symbol(t)),
    )


# -----------------------------
# Line typing
# -----------------------------

LINE_TYPE_RULES: Tuple[Tuple[Callable[[LineComponents], bool], str], ...] = (
    (lambda c: "=" in c.operators, "equation"),
    (lambda c: any(op in ARITHMETIC_OPERATORS for op in c.operators), "expression"),
    (lambda c: bool(c.numbers) and not c.operators, "number_sequence"),
)


def line_type(components: LineComponents) -> str:
    for predicate, label in LINE_TYPE_RULES:
        if predicate(components):
            return label
    return "unknown"


def analyze_texts(texts: Sequence[str]) -> Dict[str, object]:
    """
    Classify a bare list of token texts (no geometry).

    Returns {"text", "type", "numbers", "operators", "variables", "symbols"}.
    """
    comps = extract_components(texts)
    out: Dict[str, object] = {"text": " ".join(texts), "type": line_type(comps)}
    for key, values in comps.to_dict().items():
        out[key] = values
    return out


def classify_line(line: Sequence[Token]) -> ClassifiedLine:
    """Line (tokens ordered left→right) → ClassifiedLine."""
    tokens = tuple(line)
    texts: List[str] = [t.text for t in tokens]
    comps = extract_components(texts)
    bbox = union_token_boxes(tokens) or Box(0.0, 0.0, 0.0, 0.0)
    return ClassifiedLine(
        tokens=tokens,
        reconstructed_text=" ".join(texts),
        components=comps,
        line_type=line_type(comps),
        bounding_box=bbox,
    )


def classify_lines(lines: Iterable[Sequence[Token]]) -> List[ClassifiedLine]:
    return [classify_line(ln) for ln in lines]


__all__ = [
    "NUMBER_RX",
    "GREEK_LETTERS",
    "MATH_SYMBOLS",
    "EQUATION_OPERATORS",
    "ARITHMETIC_OPERATORS",
    "TOKEN_TYPE_RULES",
    "LINE_TYPE_RULES",
    "classify_token_type",
    "extract_components",
    "line_type",
    "analyze_texts",
    "classify_line",
    "classify_lines",
]
