from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from config import RobotsConfig
from instructions import InstructionSet, InstructionSetError, build_default_instructions
from lexer import RobotsError, SourceLocation
from parser import GridRecord, Orientation, Pose, Record, RobotRecord


class SemanticError(RobotsError):
    """Raised when a well-formed record cannot be applied to the current world."""

    def __init__(
        self,
        message: str,
        *,
        record_index: int,
        location: Optional[SourceLocation] = None,
    ) -> None:
        super().__init__(message, location=location)
        self.record_index = record_index
        self.step_index: Optional[int] = None


@dataclass(frozen=True)
class Outcome:
    x: int
    y: int
    orientation: Orientation
    lost: bool


def _frozen_grid(grid: NDArray[np.bool_]) -> NDArray[np.bool_]:
    grid.setflags(write=False)
    return grid


@dataclass(frozen=True)
class WorldState:
    """Immutable snapshot of the world after some prefix of the records.

    ``scents`` is padded by one cell on every side so that the off-grid cell
    a robot fell into can be marked; cell ``(x, y)`` lives at ``[x + 1, y + 1]``.
    """

    bounds: Optional[Tuple[int, int]]
    scents: NDArray[np.bool_] = field(compare=False, repr=False)
    outcomes: Tuple[Outcome, ...] = ()

    @classmethod
    def initial(cls) -> "WorldState":
        return cls(bounds=None, scents=_frozen_grid(np.zeros((0, 0), dtype=np.bool_)), outcomes=())

    def in_bounds(self, x: int, y: int) -> bool:
        if self.bounds is None:
            return False
        max_x, max_y = self.bounds
        return 0 <= x <= max_x and 0 <= y <= max_y

    def has_scent(self, x: int, y: int) -> bool:
        i, j = x + 1, y + 1
        rows, cols = self.scents.shape
        if not (0 <= i < rows and 0 <= j < cols):
            return False
        return bool(self.scents[i, j])

    def with_scent(self, x: int, y: int) -> NDArray[np.bool_]:
        grid = self.scents.copy()
        grid[x + 1, y + 1] = True
        return _frozen_grid(grid)

    def scent_cells(self) -> List[Tuple[int, int]]:
        return [(int(i) - 1, int(j) - 1) for i, j in np.argwhere(self.scents)]

    def snapshot(self) -> Dict[str, Any]:
        return {
            "bounds": list(self.bounds) if self.bounds is not None else None,
            "scents": [list(cell) for cell in self.scent_cells()],
            "robots": len(self.outcomes),
        }


def apply(
    state: WorldState,
    record: Record,
    *,
    index: int = 0,
    config: Optional[RobotsConfig] = None,
    instructions: Optional[InstructionSet] = None,
) -> WorldState:
    """Return the state that results from applying ``record`` to ``state``.

    ``state`` is never modified.  ``index`` is the record's position in the
    input and is only used for error reporting.
    """
    config = config or RobotsConfig()
    if isinstance(record, GridRecord):
        return _apply_grid(state, record, index, config)
    if isinstance(record, RobotRecord):
        return _apply_robot(state, record, index, config, instructions or build_default_instructions())
    raise SemanticError(
        f"Unsupported record type {record.__class__.__name__}",
        record_index=index,
        location=record.location,
    )


def _apply_grid(state: WorldState, record: GridRecord, index: int, config: RobotsConfig) -> WorldState:
    if state.bounds is not None:
        raise SemanticError("Grid may only be defined once", record_index=index, location=record.location)
    limit = config.max_coordinate
    for name, value in (("width", record.max_x), ("height", record.max_y)):
        if not 0 <= value <= limit:
            raise SemanticError(
                f"Grid {name} {value} is outside 0..{limit}",
                record_index=index,
                location=record.location,
            )
    scents = np.zeros((record.max_x + 3, record.max_y + 3), dtype=np.bool_)
    return WorldState(bounds=(record.max_x, record.max_y), scents=_frozen_grid(scents), outcomes=())


def _apply_robot(
    state: WorldState,
    record: RobotRecord,
    index: int,
    config: RobotsConfig,
    instructions: InstructionSet,
) -> WorldState:
    if state.bounds is None:
        raise SemanticError("Robot defined before the grid", record_index=index, location=record.location)
    start = record.start
    if not state.in_bounds(start.x, start.y):
        max_x, max_y = state.bounds
        raise SemanticError(
            f"Robot start position {start.x} {start.y} is outside the grid 0 0..{max_x} {max_y}",
            record_index=index,
            location=record.location,
        )
    if config.max_instructions is not None and len(record.instructions) > config.max_instructions:
        raise SemanticError(
            f"Robot has {len(record.instructions)} instructions, limit is {config.max_instructions}",
            record_index=index,
            location=record.location,
        )

    pose = start
    for code in record.instructions:
        candidate = _step(pose, code, record, index, instructions)
        if state.in_bounds(candidate.x, candidate.y):
            pose = candidate
            continue
        # A scent left by an earlier robot makes the fatal move a no-op.
        if state.has_scent(candidate.x, candidate.y):
            continue
        outcome = Outcome(pose.x, pose.y, pose.orientation, lost=True)
        return WorldState(
            bounds=state.bounds,
            scents=state.with_scent(candidate.x, candidate.y),
            outcomes=state.outcomes + (outcome,),
        )
    outcome = Outcome(pose.x, pose.y, pose.orientation, lost=False)
    return WorldState(bounds=state.bounds, scents=state.scents, outcomes=state.outcomes + (outcome,))


def _step(pose: Pose, code: str, record: RobotRecord, index: int, instructions: InstructionSet) -> Pose:
    try:
        spec = instructions.get(code)
    except InstructionSetError as exc:
        raise SemanticError(exc.message, record_index=index, location=record.location) from exc
    try:
        candidate = spec.handler(pose)
    except Exception as exc:
        raise SemanticError(
            f"Instruction {code!r} ({spec.name}) failed: {exc}",
            record_index=index,
            location=record.location,
        ) from exc
    if max(abs(candidate.x - pose.x), abs(candidate.y - pose.y)) > 1:
        raise SemanticError(
            f"Instruction {code!r} ({spec.name}) moved the robot more than one cell",
            record_index=index,
            location=record.location,
        )
    return candidate


@dataclass
class StateEntry:
    step_index: int
    state_id: str
    record_index: Optional[int]
    source_location: Optional[SourceLocation]
    statement: Optional[str]
    snapshot: Optional[Dict[str, Any]]
    rewrite_record: Optional[Dict[str, Any]]

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"step_index": self.step_index, "state_id": self.state_id}
        if self.record_index is not None:
            data["record_index"] = self.record_index
        if self.source_location is not None:
            data["source_location"] = {
                "file": self.source_location.file,
                "line": self.source_location.line,
                "column": self.source_location.column,
                "statement": self.source_location.statement,
            }
        if self.snapshot is not None:
            data["snapshot"] = self.snapshot
        if self.rewrite_record is not None:
            data["rewrite_record"] = self.rewrite_record
        return data


class StateLogger:
    def __init__(self, verbose: bool) -> None:
        self.verbose = verbose
        self.entries: List[StateEntry] = []
        self.next_state_index = 0
        self.last_state_id = "seed"

    def record(
        self,
        *,
        record_index: Optional[int],
        location: Optional[SourceLocation],
        rewrite_record: Optional[Dict[str, Any]] = None,
        snapshot: Optional[Dict[str, Any]] = None,
    ) -> StateEntry:
        rewrite = {} if rewrite_record is None else rewrite_record
        if "from_state_id" not in rewrite:
            rewrite["from_state_id"] = self.last_state_id
        step_index = self.next_state_index
        state_id = f"s_{step_index:06d}"
        rewrite["to_state_id"] = state_id
        entry = StateEntry(
            step_index=step_index,
            state_id=state_id,
            record_index=record_index,
            source_location=location,
            statement=location.statement if location else None,
            snapshot=snapshot,
            rewrite_record=rewrite,
        )
        self.entries.append(entry)
        self.last_state_id = state_id
        self.next_state_index += 1
        return entry

    def last_entry(self) -> Optional[StateEntry]:
        return self.entries[-1] if self.entries else None


class Evaluator:
    """Folds parsed records left-to-right into a ``WorldState``."""

    def __init__(
        self,
        *,
        config: Optional[RobotsConfig] = None,
        instructions: Optional[InstructionSet] = None,
    ) -> None:
        self.config = config or RobotsConfig()
        self.instructions = instructions or build_default_instructions()
        self.logger = self._start_log()

    def _start_log(self) -> StateLogger:
        logger = StateLogger(verbose=self.config.verbose)
        logger.record(
            record_index=None,
            location=None,
            rewrite_record={"rule": "SEED"},
            snapshot=WorldState.initial().snapshot() if self.config.verbose else None,
        )
        return logger

    def run(self, records: Iterable[Record]) -> WorldState:
        """Fold ``records`` from the initial state; each call starts a fresh step log."""
        self.logger = self._start_log()
        state = WorldState.initial()
        for index, record in enumerate(records):
            try:
                new_state = apply(state, record, index=index, config=self.config, instructions=self.instructions)
            except SemanticError as error:
                last = self.logger.last_entry()
                if last is not None:
                    error.step_index = last.step_index
                raise
            self._log_step(index, record, new_state)
            state = new_state
        return state

    def _log_step(self, index: int, record: Record, state: WorldState) -> None:
        rewrite: Dict[str, Any] = {"rule": "GRID" if isinstance(record, GridRecord) else "ROBOT"}
        if isinstance(record, RobotRecord) and state.outcomes:
            outcome = state.outcomes[-1]
            rewrite.update(
                {"x": outcome.x, "y": outcome.y, "orientation": outcome.orientation.value, "lost": outcome.lost}
            )
        self.logger.record(
            record_index=index,
            location=record.location,
            rewrite_record=rewrite,
            snapshot=state.snapshot() if self.logger.verbose else None,
        )
