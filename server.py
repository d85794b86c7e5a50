"""Flask-Anwendung für den Ausdrucksrechner.

Der Server stellt die Rechner-API (``calculator.api``) bereit und ergänzt sie
um Feedback-, Versions- und Health-Endpunkte. Konfiguration kommt aus
``config.ini`` (ggf. mit ``config.runtime.ini`` überlagert) und ``.env``;
das Logging wird hier einmalig für den ganzen Prozess eingerichtet.
"""

import os
import sys
import json
import logging
import datetime as dt
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

import requests
from dotenv import load_dotenv
from flask import Flask, jsonify, request
from flask_compress import Compress

from calculator.api import bp as calculator_bp
from calculator.models import ErrorResponse, FeedbackEntry
from runtime_config import get_flag, get_int_option, get_str_option, load_merged_config


# Custom StreamHandler to handle encoding errors
class SafeEncodingStreamHandler(logging.StreamHandler):
    def emit(self, record):
        """Schreibt Logzeilen robust unter Erhalt nicht-ASCII-Zeichen."""
        try:
            msg = self.format(record)
            stream = self.stream
            # Encode to UTF-8 with replacement for unencodable characters
            stream.write(msg.encode('utf-8', errors='replace').decode('utf-8', errors='ignore') + self.terminator)
            self.flush()
        except Exception:
            self.handleError(record)


formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')

# Get the root logger
root_logger = logging.getLogger()

# Remove any existing handlers
for handler in root_logger.handlers[:]:
    root_logger.removeHandler(handler)
    handler.close()

# Handler for standard logs
safe_handler = SafeEncodingStreamHandler(sys.stdout)
safe_handler.setFormatter(formatter)
root_logger.addHandler(safe_handler)

logger = logging.getLogger(__name__)  # Module-level logger

# --- Konfiguration ---
load_dotenv()

config = load_merged_config()

APP_VERSION = config.get('APP', 'version', fallback='unknown')
MAX_EXPRESSION_LENGTH = max(0, get_int_option(config, 'CALCULATOR', 'max_expression_length', 1000))
LOG_EXPRESSIONS = get_flag(config, 'LOGGING', 'log_expressions')
FEEDBACK_LOCAL_FILE = get_str_option(config, 'FEEDBACK', 'local_file', 'feedback_local.json')

# Logging settings from config.ini
CONSOLE_LOG_LEVEL_NAME = config.get('LOGGING', 'console_level', fallback='INFO').upper()
CONSOLE_LOG_LEVEL = logging.getLevelName(CONSOLE_LOG_LEVEL_NAME)
if not isinstance(CONSOLE_LOG_LEVEL, int):
    CONSOLE_LOG_LEVEL = logging.INFO

safe_handler.setLevel(CONSOLE_LOG_LEVEL)
root_logger.setLevel(CONSOLE_LOG_LEVEL)

# Optional: Dateibasiertes Logging (RotatingFileHandler) per config.ini
LOG_FILE_ENABLED = get_flag(config, 'LOGGING', 'file_enabled')
LOG_FILE_PATH = get_str_option(config, 'LOGGING', 'file_path')
LOG_FILE_MAX_BYTES = max(0, get_int_option(config, 'LOGGING', 'file_max_bytes', 1048576))
LOG_FILE_BACKUP_COUNT = max(0, get_int_option(config, 'LOGGING', 'file_backup_count', 5))
LOG_FILE_LEVEL_NAME = config.get('LOGGING', 'file_level', fallback=CONSOLE_LOG_LEVEL_NAME).upper()
LOG_FILE_LEVEL = logging.getLevelName(LOG_FILE_LEVEL_NAME)
if not isinstance(LOG_FILE_LEVEL, int):
    LOG_FILE_LEVEL = CONSOLE_LOG_LEVEL

file_handler: Optional[RotatingFileHandler] = None

if LOG_FILE_ENABLED and LOG_FILE_PATH:
    try:
        log_path = Path(LOG_FILE_PATH)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            LOG_FILE_PATH,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUP_COUNT,
            encoding='utf-8',
            delay=True,
        )
    except OSError as exc:
        logger.warning("Dateilogs konnten nicht initialisiert werden: %s", exc)
    else:
        file_handler.setLevel(LOG_FILE_LEVEL)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def create_app() -> Flask:
    """
    Erstellt die Flask-Instanz.
    Gunicorn ruft diese Factory einmal pro Worker auf
    und bekommt das WSGI-Objekt zurück.
    """
    app = Flask(__name__)
    app.config.update(
        MAX_EXPRESSION_LENGTH=MAX_EXPRESSION_LENGTH,
        LOG_EXPRESSIONS=LOG_EXPRESSIONS,
        FEEDBACK_LOCAL_FILE=FEEDBACK_LOCAL_FILE,
    )
    app.json.ensure_ascii = False

    app.register_blueprint(calculator_bp)

    @app.after_request
    def _ensure_utf8_charset(response):
        """Stelle sicher, dass textbasierte Antworten explizit UTF-8 senden."""
        content_type = response.headers.get("Content-Type")
        if content_type:
            lowered = content_type.lower()
            needs_charset = "charset=" not in lowered and (
                lowered.startswith("text/")
                or lowered.startswith("application/json")
            )
            if needs_charset:
                response.headers["Content-Type"] = f"{content_type}; charset=utf-8"
        return response

    Compress(app)
    return app


app: Flask = create_app()


def _error(message: str, status: int) -> Any:
    return jsonify(ErrorResponse(message).to_json()), status


def _store_feedback_locally(entry: FeedbackEntry) -> None:
    """Hängt den Eintrag an die lokale JSON-Datei an."""
    feedback_file = Path(app.config["FEEDBACK_LOCAL_FILE"])
    if feedback_file.exists():
        existing = json.loads(feedback_file.read_text(encoding="utf-8"))
        if not isinstance(existing, list):
            raise ValueError(f"{feedback_file} does not contain a JSON list")
    else:
        existing = []
    existing.append(entry.to_json())
    # Erst vollständig schreiben, dann atomar ersetzen
    tmp_file = feedback_file.with_name(feedback_file.name + ".tmp")
    tmp_file.write_text(json.dumps(existing, ensure_ascii=False, indent=2), encoding="utf-8")
    tmp_file.replace(feedback_file)


def _create_github_issue(entry: FeedbackEntry, token: str, repo: str) -> requests.Response:
    title = f"Feedback - {entry.name}"
    body_lines = [
        f"**Name:** {entry.name}",
        f"**E-Mail:** {entry.email}",
    ]
    body_lines.append("")
    body_lines.append(entry.message)

    issue_url = f"https://api.github.com/repos/{repo}/issues"
    headers = {
        "Authorization": f"token {token}",
        "Accept": "application/vnd.github+json",
    }
    payload = {"title": title, "body": "\n".join(body_lines), "labels": ["feedback"]}
    return requests.post(issue_url, json=payload, headers=headers, timeout=10)


# --- Feedback via GitHub --------------------------------------------------
@app.route('/api/submit-feedback', methods=['POST'])
def submit_feedback() -> Any:
    """Create a GitHub issue from user feedback, or store it locally."""
    token = os.environ.get("GITHUB_TOKEN")
    repo = os.environ.get("GITHUB_REPO")

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    entry = FeedbackEntry.from_json(data)
    try:
        entry.validate()
    except ValueError as exc:
        logger.warning("Rejected feedback: %s", exc)
        return _error(str(exc), 400)
    entry.timestamp = dt.datetime.now(dt.timezone.utc).isoformat()

    if not token or not repo:
        # Fallback: store feedback locally if GitHub is not configured
        try:
            _store_feedback_locally(entry)
        except (OSError, ValueError) as exc:
            logger.error("Failed to store feedback locally: %s", exc)
            return _error("Could not save feedback", 500)
        logger.info("Stored feedback locally from %s", entry.email)
        return jsonify({"status": "saved"})

    try:
        resp = _create_github_issue(entry, token, repo)
    except requests.RequestException as exc:
        logger.error("GitHub request failed: %s", exc)
        return _error("Could not submit feedback", 500)
    if resp.status_code >= 300:
        logger.error("GitHub issue creation failed: %s - %s", resp.status_code, resp.text)
        return _error("GitHub issue creation failed", 500)

    return jsonify({"status": "ok"})


@app.route('/api/version')
def api_version() -> Any:
    """Return the configured application version."""
    return jsonify({"version": APP_VERSION})


@app.route('/api/health')
def api_health() -> Any:
    body: Dict[str, str] = {"status": "ok"}
    return jsonify(body)


def _run_local() -> None:
    """Lokaler Debug-Server."""
    port = int(os.environ.get("PORT", 8000))
    # WARNING, damit die Start-URL auch bei höherem Log-Level sichtbar ist
    logger.warning("Lokal verfügbar auf http://127.0.0.1:%s", port)
    app.run(host="0.0.0.0", port=port, debug=True)


if __name__ == "__main__":
    _run_local()
