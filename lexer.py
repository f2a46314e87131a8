from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, List, Optional


@dataclass(frozen=True)
class SourceLocation:
    file: str
    line: int
    column: int
    statement: str

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


class RobotsError(Exception):
    """Base class for all robot program errors."""

    def __init__(self, message: str, *, location: Optional[SourceLocation] = None) -> None:
        super().__init__(f"{message} at {location}" if location else message)
        self.message = message
        self.location = location


class LexicalError(RobotsError):
    """Raised when the input contains a character no token can start with."""


class InputSyntaxError(RobotsError):
    """Raised when a token is present but does not fit the input grammar."""

    def __init__(
        self,
        message: str,
        *,
        location: Optional[SourceLocation] = None,
        expected: Optional[str] = None,
        found: Optional[str] = None,
    ) -> None:
        super().__init__(message, location=location)
        self.expected = expected
        self.found = found


@dataclass(frozen=True)
class Token:
    type: str
    value: str
    line: int
    column: int


WORD_CHARS = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-")


class Lexer:
    """Splits robot input text into NUMBER, WORD, NEWLINE and EOF tokens.

    Iterating a lexer yields tokens lazily; each new iteration starts over
    from the beginning of the text.
    """

    def __init__(self, text: str, filename: str) -> None:
        self.text = text
        self.filename = filename
        # Only "\n" advances the line counter, so split on it alone.
        self.source_lines = text.split("\n")
        self.index = 0
        self.line = 1
        self.column = 1

    def __iter__(self) -> Iterator[Token]:
        self.index = 0
        self.line = 1
        self.column = 1
        text = self.text
        n = len(text)
        _advance = self._advance

        while self.index < n:
            ch: str = text[self.index]
            if ch == " " or ch == "\t" or ch == "\r":
                _advance()
                continue
            if ch == "\n":
                yield Token("NEWLINE", "\n", self.line, self.column)
                _advance()
                continue
            if ch in WORD_CHARS:
                yield self._consume_lexeme("WORD" if ch.isalpha() else "NUMBER")
                continue
            raise LexicalError(
                f"Unexpected character {ch!r}",
                location=self.location(self.line, self.column),
            )
        yield Token("EOF", "", self.line, self.column)

    def tokenize(self) -> List[Token]:
        return list(self)

    def location(self, line: int, column: int) -> SourceLocation:
        line_index = line - 1
        statement = ""
        if 0 <= line_index < len(self.source_lines):
            statement = self.source_lines[line_index].strip()
        return SourceLocation(file=self.filename, line=line, column=column, statement=statement)

    def _consume_lexeme(self, token_type: str) -> Token:
        line, col = self.line, self.column
        start = self.index
        text = self.text
        n = len(text)
        while self.index < n and text[self.index] in WORD_CHARS:
            self._advance()
        return Token(token_type, text[start:self.index], line, col)

    def _advance(self) -> None:
        if self.text[self.index] == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.index += 1
