import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, List, Optional, TextIO

if __package__ in {None, ""}:
    sys.path.insert(0, str(Path(__file__).resolve().parents[1]))
    __package__ = "calculator"

from .expression_parser import ExpressionError, evaluate_expression, to_rpn, tokenize


def format_result(value: float) -> str:
    """Render integral results without a trailing ``.0``."""
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _app_version() -> str:
    from runtime_config import load_merged_config

    return load_merged_config().get("APP", "version", fallback="unknown")


def _evaluate_lines(lines: Iterable[str], out: TextIO, err: TextIO) -> int:
    failures = 0
    for expression in lines:
        try:
            result = evaluate_expression(expression)
        except ExpressionError as e:
            failures += 1
            print(f"{expression}: error: {e}", file=err)
            continue
        print(f"{expression} = {format_result(result)}", file=out)
    return failures


def evaluate(args: argparse.Namespace) -> None:
    """Evaluate one or more expressions given on the command line."""

    failures = _evaluate_lines(args.expressions, sys.stdout, sys.stderr)
    if failures:
        raise SystemExit(1)


def rpn(args: argparse.Namespace) -> None:
    """Print the RPN form of an expression."""

    try:
        tokens = to_rpn(tokenize(args.expression))
    except ExpressionError as e:
        raise SystemExit(f"error: {e}")
    print(" ".join(str(t) for t in tokens))


def repl(args: argparse.Namespace) -> None:
    """Read expressions from stdin, one per line, until EOF."""

    lines = (line.rstrip("\n") for line in sys.stdin)
    _evaluate_lines((line for line in lines if line.strip()), sys.stdout, sys.stderr)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Arithmetic expression calculator")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_app_version()}")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_eval = sub.add_parser("eval", help="evaluate expressions")
    p_eval.add_argument("expressions", nargs="+", metavar="EXPR")
    p_eval.set_defaults(func=evaluate)

    p_rpn = sub.add_parser("rpn", help="show reverse polish notation")
    p_rpn.add_argument("expression", metavar="EXPR")
    p_rpn.set_defaults(func=rpn)

    p_repl = sub.add_parser("repl", help="evaluate expressions read from stdin")
    p_repl.set_defaults(func=repl)

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    logging.debug("running %s", args.command)
    args.func(args)


if __name__ == "__main__":
    main()
