from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from lexer import InputSyntaxError, SourceLocation, Token


class Orientation(Enum):
    NORTH = "N"
    EAST = "E"
    SOUTH = "S"
    WEST = "W"

    def left(self) -> "Orientation":
        return _CLOCKWISE[(_CLOCKWISE.index(self) - 1) % 4]

    def right(self) -> "Orientation":
        return _CLOCKWISE[(_CLOCKWISE.index(self) + 1) % 4]

    def delta(self) -> Tuple[int, int]:
        return _DELTAS[self]


_CLOCKWISE: List[Orientation] = [Orientation.NORTH, Orientation.EAST, Orientation.SOUTH, Orientation.WEST]

_DELTAS: Dict[Orientation, Tuple[int, int]] = {
    Orientation.NORTH: (0, 1),
    Orientation.EAST: (1, 0),
    Orientation.SOUTH: (0, -1),
    Orientation.WEST: (-1, 0),
}


@dataclass(frozen=True)
class Pose:
    x: int
    y: int
    orientation: Orientation

    def turned_left(self) -> "Pose":
        return Pose(self.x, self.y, self.orientation.left())

    def turned_right(self) -> "Pose":
        return Pose(self.x, self.y, self.orientation.right())

    def moved_forward(self) -> "Pose":
        dx, dy = self.orientation.delta()
        return Pose(self.x + dx, self.y + dy, self.orientation)


@dataclass(frozen=True)
class Record:
    location: SourceLocation


@dataclass(frozen=True)
class GridRecord(Record):
    max_x: int
    max_y: int


@dataclass(frozen=True)
class RobotRecord(Record):
    start: Pose
    instructions: Tuple[str, ...]


@dataclass
class Program:
    location: SourceLocation
    records: List[Record]


DEFAULT_INSTRUCTION_CODES = frozenset({"L", "R", "F"})


class Parser:
    """Single-pass recursive-descent parser over a token stream.

    The first line is the grid's upper-right corner; every following robot
    is a start line (``x y orientation``) and an instruction line, with blank
    lines allowed between robots.  Tokens are pulled lazily with one token
    of lookahead, and the first malformed unit aborts the parse.
    """

    def __init__(
        self,
        tokens: Iterable[Token],
        filename: str,
        source_lines: List[str],
        *,
        instruction_codes: Optional[Iterable[str]] = None,
    ):
        self._tokens: Iterator[Token] = iter(tokens)
        self._lookahead: Optional[Token] = None
        self.filename = filename
        self.source_lines = source_lines
        self.instruction_codes = (
            frozenset(instruction_codes) if instruction_codes is not None else DEFAULT_INSTRUCTION_CODES
        )

    def parse(self) -> Program:
        first: Token = self._peek()
        records: List[Record] = [self._parse_grid()]
        while True:
            self._consume_newlines()
            if self._peek().type == "EOF":
                break
            records.append(self._parse_robot())
        self._consume("EOF", "end of input")
        return Program(location=self._location_from_token(first), records=records)

    def _parse_grid(self) -> GridRecord:
        token = self._peek()
        max_x = self._parse_number("grid width")
        max_y = self._parse_number("grid height")
        self._consume_line_end("end of grid line")
        return GridRecord(location=self._location_from_token(token), max_x=max_x, max_y=max_y)

    def _parse_robot(self) -> RobotRecord:
        token = self._peek()
        x = self._parse_number("robot x coordinate")
        y = self._parse_number("robot y coordinate")
        orientation = self._parse_orientation()
        self._consume("NEWLINE", "end of robot start line")
        if self._peek().type == "EOF":
            raise self._error("Missing instruction line for robot", "instruction line", self._peek())
        instructions: Tuple[str, ...] = ()
        if self._peek().type == "WORD":
            instructions = self._parse_instructions(self._consume("WORD", "instructions"))
        self._consume_line_end("end of instruction line")
        return RobotRecord(
            location=self._location_from_token(token),
            start=Pose(x, y, orientation),
            instructions=instructions,
        )

    def _parse_number(self, what: str) -> int:
        token = self._consume("NUMBER", what)
        text = token.value
        digits = text[1:] if text.startswith("-") else text
        if not digits or not digits.isdigit():
            raise self._error(f"Malformed numeric literal {text!r}", what, token)
        return int(text)

    def _parse_orientation(self) -> Orientation:
        token = self._consume("WORD", "robot orientation")
        try:
            return Orientation(token.value)
        except ValueError:
            raise self._error(f"Unknown orientation {token.value!r}", "one of N, E, S, W", token) from None

    def _parse_instructions(self, token: Token) -> Tuple[str, ...]:
        for offset, code in enumerate(token.value):
            if code not in self.instruction_codes:
                bad = Token("WORD", code, token.line, token.column + offset)
                expected = "one of " + ", ".join(sorted(self.instruction_codes))
                raise self._error(f"Unknown instruction {code!r}", expected, bad)
        return tuple(token.value)

    def _consume(self, token_type: str, what: str) -> Token:
        token = self._peek()
        if token.type != token_type:
            raise self._error(
                f"Expected {token_type} ({what}) but found {_describe(token)}",
                f"{token_type} ({what})",
                token,
            )
        self._lookahead = None
        return token

    def _consume_line_end(self, what: str) -> None:
        token = self._peek()
        if token.type == "EOF":
            return
        self._consume("NEWLINE", what)

    def _consume_newlines(self) -> None:
        while self._peek().type == "NEWLINE":
            self._lookahead = None

    def _peek(self) -> Token:
        if self._lookahead is None:
            token = next(self._tokens, None)
            if token is None:
                raise InputSyntaxError("Token stream ended without an EOF token", expected="EOF", found="nothing")
            self._lookahead = token
        return self._lookahead

    def _error(self, message: str, expected: str, token: Token) -> InputSyntaxError:
        return InputSyntaxError(
            message,
            location=self._location_from_token(token),
            expected=expected,
            found=_describe(token),
        )

    def _location_from_token(self, token: Token) -> SourceLocation:
        line_index = token.line - 1
        statement = ""
        if 0 <= line_index < len(self.source_lines):
            statement = self.source_lines[line_index].strip()
        return SourceLocation(file=self.filename, line=token.line, column=token.column, statement=statement)


def _describe(token: Token) -> str:
    if token.type == "EOF":
        return "end of input"
    if token.type == "NEWLINE":
        return "end of line"
    return f"{token.type} {token.value!r}"
