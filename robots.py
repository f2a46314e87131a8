"""Martian robots entry point and CLI wiring."""

from __future__ import annotations
import argparse
import os
import sys
from typing import Iterable, List, Optional

from config import DEFAULT_MAX_COORDINATE, RobotsConfig
from evaluator import Evaluator, WorldState
from formatter import ErrorReport, format_json, format_result, format_trace
from instructions import build_default_instructions
from lexer import Lexer, RobotsError
from parser import Parser, Record


def _parse_records_from_source(text: str, filename: str, instruction_codes: Iterable[str]) -> List[Record]:
    lexer = Lexer(text, filename)
    parser = Parser(lexer, filename, lexer.source_lines, instruction_codes=instruction_codes)
    program = parser.parse()
    return program.records


def run_source(
    text: str,
    filename: str = "<string>",
    config: Optional[RobotsConfig] = None,
    *,
    evaluator: Optional[Evaluator] = None,
) -> WorldState:
    """Tokenize, parse and evaluate ``text``, returning the final world state.

    Parsing completes before the first record is applied, so malformed input
    never produces a partial result.
    """
    evaluator = evaluator or Evaluator(config=config)
    records = _parse_records_from_source(text, filename, evaluator.instructions.codes())
    return evaluator.run(records)


SAMPLE_DATA_DIR = os.path.join("share", "martian-robots")


def _resolve_sample_path(path: str) -> str:
    """Find the sample in the working directory, the install prefix or beside this module."""
    if os.path.isabs(path) or os.path.exists(path):
        return path
    candidates = [
        os.path.join(sys.prefix, SAMPLE_DATA_DIR, path),
        os.path.join(os.path.dirname(os.path.abspath(__file__)), path),
    ]
    for candidate in candidates:
        if os.path.exists(candidate):
            return candidate
    return candidates[-1]


def _build_arg_parser() -> argparse.ArgumentParser:
    instruction_help = "; ".join(build_default_instructions().describe())
    parser = argparse.ArgumentParser(
        description="Run Martian robot instructions against a rectangular grid",
        epilog=f"Instructions: {instruction_help}",
    )
    parser.add_argument("program", nargs="?", help="Input file path, or literal input with -source (default: bundled sample)")
    parser.add_argument("-source", "--source", dest="source_mode", action="store_true", help="Treat program argument as literal input text")
    parser.add_argument("-verbose", "--verbose", dest="verbose", action="store_true", help="Include state snapshots in error reports and traces")
    parser.add_argument("--traceback-json", action="store_true", help="Also emit the error report as JSON")
    parser.add_argument("--trace", action="store_true", help="Emit the evaluation step log as JSON on stderr")
    parser.add_argument("--format", choices=("text", "json"), default="text", help="Output format")
    parser.add_argument(
        "--max-coordinate",
        type=int,
        default=None,
        help=f"Largest allowed grid coordinate (default: {DEFAULT_MAX_COORDINATE})",
    )
    parser.add_argument("--max-instructions", type=int, default=None, help="Longest allowed instruction line (default: unlimited)")
    return parser


def run_cli(argv: Optional[List[str]] = None, config: Optional[RobotsConfig] = None) -> int:
    args = _build_arg_parser().parse_args(argv)
    try:
        config = (config or RobotsConfig()).with_overrides(
            max_coordinate=args.max_coordinate,
            max_instructions=args.max_instructions,
            verbose=args.verbose or None,
        )
    except ValueError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 1

    if args.source_mode:
        if args.program is None:
            print("-source requires an input string", file=sys.stderr)
            return 1
        source_text = args.program
        filename = "<string>"
    else:
        filename = args.program if args.program is not None else _resolve_sample_path(config.sample_path)
        try:
            with open(filename, "r", encoding="utf-8") as handle:
                source_text = handle.read()
        except OSError as exc:
            print(f"Failed to read {filename}: {exc}", file=sys.stderr)
            return 1
        except UnicodeDecodeError as exc:
            print(f"Failed to decode {filename} as UTF-8: {exc}", file=sys.stderr)
            return 1

    evaluator = Evaluator(config=config)
    try:
        state = run_source(source_text, filename, config, evaluator=evaluator)
    except RobotsError as error:
        report = ErrorReport(error, evaluator.logger)
        print(report.format_text(verbose=config.verbose), file=sys.stderr)
        if args.traceback_json:
            print(report.to_json(), file=sys.stderr)
        if args.trace:
            print(format_trace(evaluator.logger), file=sys.stderr)
        return 1

    output = format_json(state) if args.format == "json" else format_result(state)
    if output:
        print(output)
    if args.trace:
        sys.stdout.flush()
        print(format_trace(evaluator.logger), file=sys.stderr)
    return 0


if __name__ == "__main__":
    raise SystemExit(run_cli())
