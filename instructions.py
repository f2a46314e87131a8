from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List

from lexer import RobotsError
from parser import Pose


class InstructionSetError(RobotsError):
    pass


InstructionHandler = Callable[[Pose], Pose]


@dataclass(frozen=True)
class InstructionSpec:
    code: str
    name: str
    handler: InstructionHandler


@dataclass
class InstructionSet:
    """Maps single-letter instruction codes to pure pose transitions.

    A handler only proposes the next pose; the evaluator decides whether the
    robot may take it (grid bounds and scents).
    """

    _specs: Dict[str, InstructionSpec] = field(default_factory=dict)

    def register(self, code: str, name: str, handler: InstructionHandler) -> None:
        if not code or not isinstance(code, str):
            raise InstructionSetError("Instruction code must be a non-empty string")
        if len(code) != 1 or not (code.isascii() and code.isalpha()):
            raise InstructionSetError(f"Instruction code {code!r} must be a single ASCII letter")
        if code in self._specs:
            raise InstructionSetError(f"Instruction {code!r} is already defined")
        self._specs[code] = InstructionSpec(code=code, name=name, handler=handler)

    def has(self, code: str) -> bool:
        return code in self._specs

    def get(self, code: str) -> InstructionSpec:
        try:
            return self._specs[code]
        except KeyError:
            raise InstructionSetError(f"Unknown instruction {code!r}")

    def codes(self) -> set[str]:
        return set(self._specs.keys())

    def describe(self) -> List[str]:
        return [f"{spec.code}: {spec.name}" for spec in self._specs.values()]


def build_default_instructions() -> InstructionSet:
    instructions = InstructionSet()
    instructions.register("L", "turn left", Pose.turned_left)
    instructions.register("R", "turn right", Pose.turned_right)
    instructions.register("F", "forward", Pose.moved_forward)
    return instructions
