"""Tests for result rendering and error reports."""

import json

import pytest

from evaluator import Evaluator, Outcome, SemanticError, WorldState
from formatter import ErrorReport, format_json, format_outcome, format_result, format_trace
from lexer import InputSyntaxError, LexicalError
from parser import Orientation
from robots import run_source


def test_format_outcome() -> None:
    assert format_outcome(Outcome(1, 1, Orientation.EAST, lost=False)) == "1 1 E"
    assert format_outcome(Outcome(3, 3, Orientation.NORTH, lost=True)) == "3 3 N LOST"


def test_format_result_matches_documented_sample(sample_text: str) -> None:
    assert format_result(run_source(sample_text)) == "1 1 E\n3 3 N LOST\n2 3 S"


def test_no_robots_renders_empty() -> None:
    assert format_result(run_source("5 3\n")) == ""
    assert format_result(WorldState.initial()) == ""


def test_inconsistent_outcome_is_rejected() -> None:
    with pytest.raises(ValueError):
        format_outcome(Outcome(0, 0, "N", lost=False))


def test_format_json(sample_text: str) -> None:
    data = json.loads(format_json(run_source(sample_text)))
    assert data["robots"][1] == {"x": 3, "y": 3, "orientation": "N", "lost": True}
    assert data["scents"] == [[3, 4]]


def test_format_trace(sample_text: str) -> None:
    evaluator = Evaluator()
    run_source(sample_text, evaluator=evaluator)
    trace = json.loads(format_trace(evaluator.logger))
    assert len(trace) == 5
    assert trace[1]["source_location"]["statement"] == "5 3"


class TestErrorReport:
    def test_syntax_error_text(self) -> None:
        with pytest.raises(InputSyntaxError) as info:
            run_source("5 3\n1 1 Q\nF", "in.txt")
        text = ErrorReport(info.value).format_text()
        lines = text.splitlines()
        assert lines[1] == '  File "in.txt", line 2, column 5'
        assert lines[2] == "    1 1 Q"
        assert "Expected one of N, E, S, W, found WORD 'Q'" in text
        assert lines[-1] == "InputSyntaxError: Unknown orientation 'Q'"

    def test_lexical_error_json(self) -> None:
        with pytest.raises(LexicalError) as info:
            run_source("5 3\n1 1 E\nF*", "in.txt")
        data = json.loads(ErrorReport(info.value).to_json())["error"]
        assert data["type"] == "LexicalError"
        assert data["source_location"]["column"] == 2

    def test_semantic_error_includes_state(self, sample_text: str) -> None:
        evaluator = Evaluator()
        with pytest.raises(SemanticError) as info:
            run_source(sample_text.replace("1 1 E", "9 1 E"), evaluator=evaluator)
        report = ErrorReport(info.value, evaluator.logger)
        text = report.format_text()
        assert "Record index: 1" in text
        assert "State id: s_000001" in text
        data = json.loads(report.to_json())["error"]
        assert data["record_index"] == 1
        assert data["failing_step_index"] == 1
        assert data["state"]["state_id"] == "s_000001"
