"""Dataclasses representing calculator tokens and API payloads."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

# dot-separated atoms on both sides, top-level domain of at least two letters
_EMAIL_RE = re.compile(
    r"^[A-Za-z0-9_%+-]+(?:\.[A-Za-z0-9_%+-]+)*"
    r"@[A-Za-z0-9-]+(?:\.[A-Za-z0-9-]+)*\.[A-Za-z]{2,}$"
)


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL_RE.match(value))


class OperatorSymbol(Enum):
    """The four binary operators understood by the calculator."""

    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"

    @property
    def precedence(self) -> int:
        if self in (OperatorSymbol.MUL, OperatorSymbol.DIV):
            return 2
        return 1


class LastTokenKind(Enum):
    """Classification of the last token the tokenizer emitted."""

    NONE = "none"
    NUMBER = "number"
    OPERATOR = "operator"
    LEFT_PAREN = "left_paren"
    RIGHT_PAREN = "right_paren"


@dataclass(frozen=True)
class Number:
    """Parsed numeric literal. A unary minus may already be folded in."""

    value: float

    def __str__(self) -> str:
        return repr(self.value)


@dataclass(frozen=True)
class Operator:
    symbol: OperatorSymbol

    def __str__(self) -> str:
        return self.symbol.value


@dataclass(frozen=True)
class LeftParen:
    def __str__(self) -> str:
        return "("


@dataclass(frozen=True)
class RightParen:
    def __str__(self) -> str:
        return ")"


Token = Union[Number, Operator, LeftParen, RightParen]


@dataclass
class ExpressionRequest:
    """Request body of ``POST /api/calculator/evaluate``.

    Attributes:
        expression: Raw infix expression. ``None`` when the field is missing
            or not a string, which the core rejects as an empty expression.
    """

    expression: Optional[str] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "ExpressionRequest":
        value = data.get("expression")
        return cls(value if isinstance(value, str) else None)


@dataclass
class CalculationResponse:
    result: float

    def to_json(self) -> Dict[str, Any]:
        return {"result": self.result}


@dataclass
class ErrorResponse:
    message: str

    def to_json(self) -> Dict[str, Any]:
        return {"message": self.message}


@dataclass
class FeedbackEntry:
    """Feedback submitted from the calculator front end.

    Attributes:
        name: Sender name; must not be blank.
        email: Contact address; must look like ``user@example.com``.
        message: Free text; must not be blank.
        timestamp: ISO-8601 UTC timestamp, set when the entry is stored.
    """

    name: str = ""
    email: str = ""
    message: str = ""
    timestamp: str = ""

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "FeedbackEntry":
        return cls(
            name=str(data.get("name") or "").strip(),
            email=str(data.get("email") or "").strip(),
            message=str(data.get("message") or "").strip(),
        )

    def validate(self) -> None:
        """Raise ``ValueError`` with the first problem found, checked field by field."""
        if not self.name:
            raise ValueError("Name cannot be empty")
        if not self.email:
            raise ValueError("Email cannot be empty")
        if not is_valid_email(self.email):
            raise ValueError("Please enter a valid email address")
        if not self.message:
            raise ValueError("Message cannot be empty")

    def to_json(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "name": self.name,
            "email": self.email,
            "message": self.message,
        }
