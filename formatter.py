from __future__ import annotations
import json
from typing import Any, Dict, Optional

from evaluator import Outcome, SemanticError, StateEntry, StateLogger, WorldState
from lexer import InputSyntaxError, RobotsError
from parser import Orientation


def _orientation_code(outcome: Outcome) -> str:
    if not isinstance(outcome.orientation, Orientation):
        raise ValueError(f"Outcome has no valid orientation: {outcome.orientation!r}")
    return outcome.orientation.value


def format_outcome(outcome: Outcome) -> str:
    text = f"{outcome.x} {outcome.y} {_orientation_code(outcome)}"
    if outcome.lost:
        text += " LOST"
    return text


def format_result(state: WorldState) -> str:
    return "\n".join(format_outcome(outcome) for outcome in state.outcomes)


def format_json(state: WorldState) -> str:
    data = {
        "robots": [
            {
                "x": outcome.x,
                "y": outcome.y,
                "orientation": _orientation_code(outcome),
                "lost": outcome.lost,
            }
            for outcome in state.outcomes
        ],
        "scents": [list(cell) for cell in state.scent_cells()],
    }
    return json.dumps(data, indent=2)


def format_trace(logger: StateLogger) -> str:
    return json.dumps([entry.to_dict() for entry in logger.entries], indent=2)


class ErrorReport:
    """Renders a ``RobotsError`` for the terminal or as JSON."""

    def __init__(self, error: RobotsError, logger: Optional[StateLogger] = None) -> None:
        self.error = error
        self.logger = logger

    def _state_entry(self) -> Optional[StateEntry]:
        step_index = getattr(self.error, "step_index", None)
        if self.logger is None or step_index is None:
            return None
        for entry in self.logger.entries:
            if entry.step_index == step_index:
                return entry
        return None

    def format_text(self, verbose: bool = False) -> str:
        error = self.error
        lines = ["Error (first failing input unit):"]
        location = error.location
        if location:
            lines.append(f"  File \"{location.file}\", line {location.line}, column {location.column}")
            if location.statement:
                lines.append(f"    {location.statement}")
        else:
            lines.append("  <unknown location>")
        if isinstance(error, SemanticError):
            lines.append(f"    Record index: {error.record_index}")
            entry = self._state_entry()
            if entry:
                lines.append(f"    State log index: {entry.step_index}  State id: {entry.state_id}")
                if verbose and entry.snapshot is not None:
                    snapshot = ", ".join(f"{k}={v}" for k, v in entry.snapshot.items())
                    lines.append(f"    State snapshot: {snapshot}")
        if isinstance(error, InputSyntaxError) and error.expected:
            lines.append(f"    Expected {error.expected}, found {error.found}")
        lines.append(f"{error.__class__.__name__}: {error.message}")
        return "\n".join(lines)

    def to_json(self) -> str:
        error = self.error
        data: Dict[str, Any] = {"type": error.__class__.__name__, "message": error.message}
        if error.location:
            data["source_location"] = {
                "file": error.location.file,
                "line": error.location.line,
                "column": error.location.column,
                "statement": error.location.statement,
            }
        if isinstance(error, InputSyntaxError):
            data["expected"] = error.expected
            data["found"] = error.found
        if isinstance(error, SemanticError):
            data["record_index"] = error.record_index
            data["failing_step_index"] = error.step_index
            entry = self._state_entry()
            if entry is not None:
                data["state"] = entry.to_dict()
        return json.dumps({"error": data}, indent=2)

