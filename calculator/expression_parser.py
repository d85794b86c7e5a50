"""Tokenizer, shunting-yard converter and RPN evaluator for arithmetic expressions.

The three stages form a straight pipeline::

    "2 + 3 * 4"  ->  tokenize  ->  to_rpn  ->  evaluate_rpn  ->  14.0

Every stage raises an :class:`ExpressionError` subclass on the first problem
it finds. Nothing here logs or keeps state between calls, so all functions are
safe to use from several threads at once.
"""

from __future__ import annotations

import operator
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .models import (
    LastTokenKind,
    LeftParen,
    Number,
    Operator,
    OperatorSymbol,
    RightParen,
    Token,
)

__all__ = [
    "ExpressionError",
    "EmptyExpressionError",
    "InvalidCharacterError",
    "InvalidNumberFormatError",
    "MismatchedParenthesesError",
    "InvalidTokenError",
    "InvalidExpressionError",
    "DivisionByZeroError",
    "tokenize",
    "to_rpn",
    "evaluate_rpn",
    "evaluate_expression",
]


class ExpressionError(ValueError):
    """Base class for every rejection of an input expression."""

    kind = "ExpressionError"
    default_message = "Invalid expression."

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class EmptyExpressionError(ExpressionError):
    kind = "EmptyExpression"
    default_message = "Expression is empty."


class InvalidCharacterError(ExpressionError):
    kind = "InvalidCharacter"

    def __init__(self, char: str) -> None:
        self.char = char
        super().__init__(f"Invalid character: {char}")


class InvalidNumberFormatError(ExpressionError):
    kind = "InvalidNumberFormat"
    default_message = "Invalid number format."


class MismatchedParenthesesError(ExpressionError):
    kind = "MismatchedParentheses"
    default_message = "Mismatched parentheses."


class InvalidTokenError(ExpressionError):
    kind = "InvalidToken"

    def __init__(self, token: object) -> None:
        self.token = token
        super().__init__(f"Invalid token: {token}")


class InvalidExpressionError(ExpressionError):
    kind = "InvalidExpression"
    default_message = "Invalid expression."


class DivisionByZeroError(ExpressionError):
    kind = "DivisionByZero"
    default_message = "Division by zero."


_DIGITS = "0123456789"

_OPERATOR_CHARS: Dict[str, OperatorSymbol] = {sym.value: sym for sym in OperatorSymbol}

_ARITHMETIC: Dict[OperatorSymbol, Callable[[float, float], float]] = {
    OperatorSymbol.ADD: operator.add,
    OperatorSymbol.SUB: operator.sub,
    OperatorSymbol.MUL: operator.mul,
    OperatorSymbol.DIV: operator.truediv,
}


def _is_unary_position(last: LastTokenKind) -> bool:
    """A minus is unary when no value immediately precedes it."""
    return last in (LastTokenKind.NONE, LastTokenKind.OPERATOR, LastTokenKind.LEFT_PAREN)


def _skip_whitespace(expression: str, index: int) -> int:
    while index < len(expression) and expression[index].isspace():
        index += 1
    return index


def _read_number(expression: str, start: int) -> Tuple[Number, int]:
    """Read a numeric literal beginning at ``start``.

    The literal may start with a single ``-`` (folded unary minus), followed by
    digits and at most one decimal point. Returns the token and the index just
    past the literal.
    """
    i = start
    if expression[i] == "-":
        i += 1
    has_dot = False
    has_digit = False
    while i < len(expression):
        ch = expression[i]
        if ch in _DIGITS:
            has_digit = True
        elif ch == ".":
            if has_dot:
                raise InvalidNumberFormatError()
            has_dot = True
        else:
            break
        i += 1

    # "-", "." and "-." carry no digits
    if not has_digit:
        raise InvalidNumberFormatError()
    return Number(float(expression[start:i])), i


def tokenize(expression: Optional[str]) -> List[Token]:
    """Split ``expression`` into number, operator and parenthesis tokens.

    Unary minus is resolved here: in front of a literal it is folded into the
    number, in front of ``(`` it is rewritten to ``0 -``.
    """
    if expression is None or not expression.strip():
        raise EmptyExpressionError()

    tokens: List[Token] = []
    last = LastTokenKind.NONE
    i = 0
    length = len(expression)

    while i < length:
        ch = expression[i]

        if ch.isspace():
            i += 1
            continue

        if ch in _OPERATOR_CHARS:
            if ch == "-" and _is_unary_position(last):
                next_index = _skip_whitespace(expression, i + 1)
                if next_index < length and expression[next_index] == "(":
                    tokens.append(Number(0.0))
                    tokens.append(Operator(OperatorSymbol.SUB))
                    last = LastTokenKind.OPERATOR
                    i += 1
                    continue

                number, i = _read_number(expression, i)
                tokens.append(number)
                last = LastTokenKind.NUMBER
                continue

            tokens.append(Operator(_OPERATOR_CHARS[ch]))
            last = LastTokenKind.OPERATOR
            i += 1
            continue

        if ch == "(":
            tokens.append(LeftParen())
            last = LastTokenKind.LEFT_PAREN
            i += 1
            continue

        if ch == ")":
            tokens.append(RightParen())
            last = LastTokenKind.RIGHT_PAREN
            i += 1
            continue

        if ch in _DIGITS or ch == ".":
            number, i = _read_number(expression, i)
            tokens.append(number)
            last = LastTokenKind.NUMBER
            continue

        raise InvalidCharacterError(ch)

    return tokens


def to_rpn(tokens: Sequence[Token]) -> List[Token]:
    """Convert infix tokens to Reverse Polish Notation (RPN).

    All operators are left-associative, so an operator on the stack is popped
    when its precedence is greater than *or equal to* the incoming one.
    """
    output_queue: List[Token] = []
    operator_stack: List[Token] = []

    for token in tokens:
        if isinstance(token, Number):
            output_queue.append(token)
        elif isinstance(token, LeftParen):
            operator_stack.append(token)
        elif isinstance(token, RightParen):
            while operator_stack and not isinstance(operator_stack[-1], LeftParen):
                output_queue.append(operator_stack.pop())
            if not operator_stack:
                raise MismatchedParenthesesError()
            operator_stack.pop()
        elif isinstance(token, Operator):
            while (
                operator_stack
                and isinstance(operator_stack[-1], Operator)
                and operator_stack[-1].symbol.precedence >= token.symbol.precedence
            ):
                output_queue.append(operator_stack.pop())
            operator_stack.append(token)
        else:
            raise InvalidTokenError(token)

    while operator_stack:
        token = operator_stack.pop()
        if isinstance(token, (LeftParen, RightParen)):
            raise MismatchedParenthesesError()
        output_queue.append(token)

    return output_queue



def _apply(symbol: OperatorSymbol, a: float, b: float) -> float:
    if symbol is OperatorSymbol.DIV and b == 0.0:
        raise DivisionByZeroError()
    return _ARITHMETIC[symbol](a, b)


def evaluate_rpn(rpn_queue: Sequence[Token]) -> float:
    """Evaluate an RPN token sequence against a value stack."""
    stack: List[float] = []

    for token in rpn_queue:
        if isinstance(token, Number):
            stack.append(token.value)
        elif isinstance(token, Operator):
            if len(stack) < 2:
                raise InvalidExpressionError()
            b = stack.pop()
            a = stack.pop()
            stack.append(_apply(token.symbol, a, b))
        else:
            raise InvalidTokenError(token)

    if len(stack) != 1:
        raise InvalidExpressionError()
    return stack[0]


def evaluate_expression(expression: Optional[str]) -> float:
    """Evaluate an infix arithmetic expression and return the result as float."""
    tokens = tokenize(expression)
    rpn_queue = to_rpn(tokens)
    return evaluate_rpn(rpn_queue)
