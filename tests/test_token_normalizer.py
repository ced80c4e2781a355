"""
Token normalizer: polygons → axis-aligned boxes, centers, transcript split.

Run: python -m pytest tests/test_token_normalizer.py -v
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from whiteboard.errors import MalformedBox, MalformedDetection, WhiteboardError
from whiteboard.ocr_types import Box
from whiteboard.token_normalizer import (
    normalize_detection,
    normalize_detections,
    split_transcript,
)


def _det(text, vertices, **extra):
    d = {"text": text, "boundingPolygon": {"vertices": vertices}}
    d.update(extra)
    return d


def _rect(x, y, w, h):
    return [{"x": x, "y": y}, {"x": x + w, "y": y}, {"x": x + w, "y": y + h}, {"x": x, "y": y + h}]


class TestBoxFromPolygon:

    def test_axis_aligned_rectangle(self):
        tok = normalize_detection(_det("3x", _rect(10, 20, 30, 40)))
        assert tok.box == Box(10, 20, 40, 60)
        assert tok.center.x == 25
        assert tok.center.y == 40

    def test_rotated_polygon_uses_extremes(self):
        verts = [{"x": 50, "y": 0}, {"x": 100, "y": 50}, {"x": 50, "y": 100}, {"x": 0, "y": 50}]
        tok = normalize_detection(_det("=", verts))
        assert tok.box == Box(0, 0, 100, 100)
        assert (tok.center.x, tok.center.y) == (50, 50)

    def test_missing_coordinates_default_to_zero(self):
        """Vision omits x/y when they are 0."""
        verts = [{"y": 10}, {"x": 30, "y": 10}, {"x": 30, "y": 25}, {"x": None, "y": 25}]
        tok = normalize_detection(_det("y", verts))
        assert tok.box == Box(0, 10, 30, 25)

    def test_degenerate_detection_is_kept(self):
        tok = normalize_detection(_det(".", [{}, {}, {}, {}]))
        assert tok.box.width == 0
        assert tok.box.height == 0

    def test_missing_polygon_yields_zero_box(self):
        tok = normalize_detection({"text": "?"})
        assert tok.box == Box(0, 0, 0, 0)

    def test_vision_field_spellings(self):
        tok = normalize_detection({"description": "7", "boundingPoly": {"vertices": _rect(0, 0, 4, 8)}})
        assert tok.text == "7"
        assert tok.box == Box(0, 0, 4, 8)


class TestConfidence:

    def test_default_confidence(self):
        tok = normalize_detection(_det("x", _rect(0, 0, 1, 1)))
        assert tok.confidence == pytest.approx(0.9)

    def test_provider_confidence_kept(self):
        tok = normalize_detection(_det("x", _rect(0, 0, 1, 1), confidence=0.42))
        assert tok.confidence == pytest.approx(0.42)

    def test_unparseable_confidence_falls_back(self):
        tok = normalize_detection(_det("x", _rect(0, 0, 1, 1), confidence="high"), default_confidence=0.5)
        assert tok.confidence == pytest.approx(0.5)


class TestTranscript:

    def test_first_detection_dropped(self):
        dets = [
            _det("3x = 8", _rect(0, 0, 100, 20)),
            _det("3x", _rect(0, 0, 20, 20)),
            _det("=", _rect(30, 0, 10, 20)),
            _det("8", _rect(50, 0, 10, 20)),
        ]
        tokens = normalize_detections(dets)
        assert [t.text for t in tokens] == ["3x", "=", "8"]

    def test_no_transcript_keeps_everything(self):
        dets = [_det("a", _rect(0, 0, 1, 1)), _det("b", _rect(2, 0, 1, 1))]
        tokens = normalize_detections(dets, has_transcript=False)
        assert [t.text for t in tokens] == ["a", "b"]

    def test_split_transcript(self):
        full, rest = split_transcript([_det("x = 1\ny = 2", []), _det("x", [])])
        assert full == "x = 1\ny = 2"
        assert len(rest) == 1

    def test_empty_input(self):
        assert split_transcript([]) == ("", [])
        assert normalize_detections([]) == []


class TestBoxInvariant:

    def test_inverted_box_rejected(self):
        with pytest.raises(MalformedBox):
            Box(10, 0, 5, 10)

    def test_malformed_box_is_value_error(self):
        with pytest.raises(ValueError):
            Box(0, 10, 10, 5)


class TestMalformedDetection:

    def test_non_numeric_coordinate(self):
        with pytest.raises(MalformedDetection):
            normalize_detection(_det("x", [{"x": "abc", "y": 1}]))

    def test_numeric_string_coordinate_accepted(self):
        tok = normalize_detection(_det("x", [{"x": "10", "y": "20"}, {"x": 40, "y": 60}]))
        assert tok.box == Box(10, 20, 40, 60)

    def test_non_finite_coordinate(self):
        with pytest.raises(MalformedDetection):
            normalize_detection(_det("x", [{"x": float("inf"), "y": 0}]))

    def test_vertex_not_a_mapping(self):
        with pytest.raises(MalformedDetection):
            normalize_detection(_det("x", [[1, 2]]))

    def test_polygon_not_a_mapping(self):
        with pytest.raises(MalformedDetection):
            normalize_detection({"text": "x", "boundingPolygon": [1, 2, 3]})

    def test_vertices_not_a_list(self):
        with pytest.raises(MalformedDetection):
            normalize_detection(_det("x", 7))

    def test_is_whiteboard_and_value_error(self):
        with pytest.raises(WhiteboardError):
            normalize_detections([_det("full", []), _det("x", [{"x": None, "y": object()}])])
        with pytest.raises(ValueError):
            normalize_detection(_det("x", [{"x": "", "y": 0}]))
