"""Flask-Blueprint mit den Rechner-Endpunkten.

Der Blueprint ist die dünne Transportschicht um ``expression_parser``: er
liest ``{"expression": ...}``, ruft die Auswertung auf und bildet jede
``ExpressionError`` auf ``400 {"message": ...}`` ab. Protokolliert wird nur
hier, der Parser selbst bleibt frei von Seiteneffekten.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request

from .expression_parser import ExpressionError, evaluate_expression, to_rpn, tokenize
from .models import CalculationResponse, ErrorResponse, ExpressionRequest

logger = logging.getLogger(__name__)

bp = Blueprint("calculator", __name__, url_prefix="/api/calculator")


class RequestError(ValueError):
    """Ungültiger Request-Body (kein Parser-Fehler)."""


def _read_expression() -> ExpressionRequest:
    """Liest den Ausdruck aus dem JSON-Body und prüft die konfigurierte Maximallänge."""
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise RequestError("Request body must be a JSON object.")
    payload = ExpressionRequest.from_json(data)

    if current_app.config.get("LOG_EXPRESSIONS"):
        logger.info("Expression request: %s", payload.expression)

    max_length = current_app.config.get("MAX_EXPRESSION_LENGTH", 0)
    if max_length and payload.expression and len(payload.expression) > max_length:
        raise RequestError("Expression is too long.")
    return payload


@bp.errorhandler(ExpressionError)
def handle_expression_error(exc: ExpressionError) -> Any:
    logger.warning("Invalid expression: %s", exc)
    return jsonify(ErrorResponse(str(exc)).to_json()), 400


@bp.errorhandler(RequestError)
def handle_request_error(exc: RequestError) -> Any:
    logger.warning("Rejected calculator request: %s", exc)
    return jsonify(ErrorResponse(str(exc)).to_json()), 400


@bp.route("/evaluate", methods=["POST"])
def evaluate() -> Any:
    """Wertet den übergebenen Ausdruck aus."""
    payload = _read_expression()
    result = evaluate_expression(payload.expression)
    return jsonify(CalculationResponse(result).to_json())


@bp.route("/tokenize", methods=["POST"])
def tokenize_expression() -> Any:
    """Liefert Token- und RPN-Folge als Strings (Entwicklungshilfe)."""
    payload = _read_expression()
    tokens = tokenize(payload.expression)
    rpn = to_rpn(tokens)
    body: Dict[str, Any] = {
        "tokens": [str(t) for t in tokens],
        "rpn": [str(t) for t in rpn],
    }
    return jsonify(body)
