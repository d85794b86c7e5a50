"""Arithmetic expression calculator.

Das Paket bündelt Tokenizer, Shunting-Yard-Konverter und RPN-Auswertung sowie
den Flask-Blueprint und das Kommandozeilenwerkzeug, die darauf aufsetzen.
"""

from .expression_parser import (
    DivisionByZeroError,
    EmptyExpressionError,
    ExpressionError,
    InvalidCharacterError,
    InvalidExpressionError,
    InvalidNumberFormatError,
    InvalidTokenError,
    MismatchedParenthesesError,
    evaluate_expression,
    evaluate_rpn,
    to_rpn,
    tokenize,
)
from .models import LeftParen, Number, Operator, OperatorSymbol, RightParen, Token

__all__ = [
    "DivisionByZeroError",
    "EmptyExpressionError",
    "ExpressionError",
    "InvalidCharacterError",
    "InvalidExpressionError",
    "InvalidNumberFormatError",
    "InvalidTokenError",
    "MismatchedParenthesesError",
    "evaluate_expression",
    "evaluate_rpn",
    "to_rpn",
    "tokenize",
    "LeftParen",
    "Number",
    "Operator",
    "OperatorSymbol",
    "RightParen",
    "Token",
]
