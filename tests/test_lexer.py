"""Tests for the robot input tokenizer."""

import pytest

from lexer import LexicalError, Lexer, Token


def _tokens(source: str) -> list[Token]:
    return Lexer(source, "test.txt").tokenize()


def _types(source: str) -> list[str]:
    return [tok.type for tok in _tokens(source)[:-1]]


def _values(source: str) -> list[str]:
    return [tok.value for tok in _tokens(source)[:-1]]


class TestEof:
    def test_empty_input_is_just_eof(self) -> None:
        tokens = _tokens("")
        assert tokens == [Token("EOF", "", 1, 1)]

    def test_whitespace_only_has_no_lexemes(self) -> None:
        assert _types("  \t \r") == []

    def test_eof_is_always_last_and_unique(self, sample_text: str) -> None:
        tokens = _tokens(sample_text)
        assert tokens[-1].type == "EOF"
        assert [tok.type for tok in tokens].count("EOF") == 1


class TestClassification:
    def test_grid_and_robot_lines(self) -> None:
        assert _tokens("5 3\n1 1 E") == [
            Token("NUMBER", "5", 1, 1),
            Token("NUMBER", "3", 1, 3),
            Token("NEWLINE", "\n", 1, 4),
            Token("NUMBER", "1", 2, 1),
            Token("NUMBER", "1", 2, 3),
            Token("WORD", "E", 2, 5),
            Token("EOF", "", 2, 6),
        ]

    def test_instruction_line_is_one_word(self) -> None:
        assert _values("RFRFRFRF") == ["RFRFRFRF"]
        assert _types("RFRFRFRF") == ["WORD"]

    def test_first_character_decides_type(self) -> None:
        assert _types("12ab FF3 -4") == ["NUMBER", "WORD", "NUMBER"]
        assert _values("12ab FF3 -4") == ["12ab", "FF3", "-4"]

    def test_blank_lines_emit_newlines(self) -> None:
        assert _types("1\n\n2") == ["NUMBER", "NEWLINE", "NEWLINE", "NUMBER"]

    def test_carriage_returns_are_skipped(self) -> None:
        tokens = _tokens("5 3\r\n1")
        assert [tok.type for tok in tokens] == ["NUMBER", "NUMBER", "NEWLINE", "NUMBER", "EOF"]
        assert tokens[3].line == 2
        assert tokens[3].column == 1


class TestErrors:
    def test_unknown_character_reports_position(self) -> None:
        with pytest.raises(LexicalError) as info:
            _tokens("5 3\n1 1 E?")
        assert info.value.location.line == 2
        assert info.value.location.column == 6
        assert info.value.location.statement == "1 1 E?"
        assert "test.txt:2:6" in str(info.value)

    def test_punctuation_is_rejected(self) -> None:
        with pytest.raises(LexicalError):
            _tokens("5,3")

    def test_non_ascii_digits_are_rejected(self) -> None:
        with pytest.raises(LexicalError):
            _tokens("5 ٣")

    def test_statement_keeps_form_feed_in_line(self) -> None:
        with pytest.raises(LexicalError) as info:
            _tokens("5 3\n1 1 ?\x0cE")
        assert (info.value.location.line, info.value.location.column) == (2, 5)
        assert info.value.location.statement == "1 1 ?\x0cE"

    def test_source_lines_split_on_newline_only(self) -> None:
        assert Lexer("5 3\x0c\n1 1 E\x1c", "test.txt").source_lines == ["5 3\x0c", "1 1 E\x1c"]


class TestLaziness:
    def test_tokens_are_produced_on_demand(self) -> None:
        stream = iter(Lexer("5 3 $", "test.txt"))
        assert next(stream) == Token("NUMBER", "5", 1, 1)
        assert next(stream) == Token("NUMBER", "3", 1, 3)
        with pytest.raises(LexicalError):
            next(stream)

    def test_iterating_again_restarts(self, sample_text: str) -> None:
        lexer = Lexer(sample_text, "test.txt")
        first = list(lexer)
        second = list(lexer)
        assert first == second
        assert first[0] == Token("NUMBER", "5", 1, 1)
