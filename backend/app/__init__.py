"""
app/__init__.py — Flask application factory.

Pattern: create_app(config_name) creates and returns a configured Flask app.
         Nothing is initialised at import time — this enables:
           - Multiple isolated test app instances
           - Clean separation between app creation and app startup
           - Alembic to import the metadata without starting the server

Responsibilities:
  1. Load configuration from config_by_name[config_name]
  2. Initialise extensions (SQLAlchemy, Marshmallow) via init_app()
  3. Register all route blueprints under /api/v1
  4. Register global error handlers (AppError → JSON, Exception → 500)
  5. Register a custom JSON provider to serialise Decimal as string
"""

from __future__ import annotations

import traceback
from decimal import Decimal

from flask import Flask, jsonify, request
from flask.json.provider import DefaultJSONProvider
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException

from backend.config import config_by_name, validate_history_config, validate_production_config


# ── Custom JSON provider ───────────────────────────────────────────────────
# Flask's default JSON encoder does not handle Decimal.
# Monetary amounts are serialised as strings to preserve precision.

class DecimalJSONProvider(DefaultJSONProvider):
    """
    Extends Flask's default JSON provider to serialise Decimal as str.

    Example: Decimal("10.50") → "10.50" (not 10.5 or 10.500000001)
    """

    def default(self, o):
        if isinstance(o, Decimal):
            return str(o)
        return super().default(o)


# ── Application factory ────────────────────────────────────────────────────

def create_app(config_name: str = "development") -> Flask:
    """
    Creates and returns a configured Flask application instance.

    Args:
        config_name: One of "development", "testing", "production".
                     Resolved via config_by_name in config.py.
                     Defaults to "development".

    Returns:
        A fully configured Flask app ready to serve requests.
    """
    app = Flask(__name__)
    app.json_provider_class = DecimalJSONProvider
    app.json = DecimalJSONProvider(app)

    # ── Configuration ──────────────────────────────────────────────────────
    config_class = config_by_name.get(config_name, config_by_name["development"])
    app.config.from_object(config_class)

    if config_name == "production":
        validate_production_config(app)  # raises ValueError if misconfigured
    else:
        validate_history_config(app)

    # ── Extensions ─────────────────────────────────────────────────────────
    # Import here (not at module top) to avoid circular imports.
    from backend.app.extensions import db, ma
    db.init_app(app)
    ma.init_app(app)

    # ── Model registration ─────────────────────────────────────────────────
    # Import all models so that SQLAlchemy's MetaData is populated.
    # Alembic needs to see these to auto-generate migrations.
    with app.app_context():
        from backend.app.models import kv_entry  # noqa: F401

    # ── Blueprints ─────────────────────────────────────────────────────────
    _register_blueprints(app)

    # ── Error handlers ─────────────────────────────────────────────────────
    _register_error_handlers(app)
    _register_cors(app)

    return app


def _register_blueprints(app: Flask) -> None:
    """
    Registers all route blueprints under the /api/v1 prefix.

    The url_prefix is set here so individual route files only specify
    the path relative to their resource (e.g. "" and "/<entry_id>").
    """
    from backend.app.routes.history import history_bp
    from backend.app.routes.splits import splits_bp

    app.register_blueprint(splits_bp,  url_prefix="/api/v1/splits")
    app.register_blueprint(history_bp, url_prefix="/api/v1/history")


def _register_error_handlers(app: Flask) -> None:
    """
    Registers global error handlers.

    Handlers:
      AppError        → structured JSON error envelope with the correct HTTP
                        status. PersistenceError and LoadError are AppErrors.
      ValidationError → marshmallow schema errors formatted as MISSING_FIELD /
                        INVALID_FIELD / registered-code responses (400)
      Exception       → generic INTERNAL_ERROR (500); full traceback logged

    Stack traces never leave the server.
    """
    from backend.app.errors import AppError, ErrorCode

    @app.errorhandler(AppError)
    def handle_app_error(error: AppError):
        """
        Converts an AppError raised anywhere in the request lifecycle
        into the standard error envelope. Routes never catch AppError.
        """
        if error.http_status >= 500:
            app.logger.error("%r", error)
        return jsonify(error.to_dict()), error.http_status

    @app.errorhandler(ValidationError)
    def handle_validation_error(error: ValidationError):
        """
        Converts marshmallow ValidationError into the standard error envelope.

        Only the FIRST error is returned ("one error, not many"). Nested
        messages (e.g. {"items": {0: {"price": [...]}}}) are followed down to
        the first leaf; the reported field is the dotted path to it.
        """
        field, raw_message = _first_error(error.messages)

        if raw_message in vars(ErrorCode).values():
            code = raw_message
            message = _code_to_message(code)
        elif str(raw_message).startswith("Missing data for required field"):
            code = ErrorCode.MISSING_FIELD
            message = raw_message
        else:
            code = ErrorCode.INVALID_FIELD
            message = raw_message

        response_body = {"error": {"code": code, "message": message}}
        if field:
            response_body["error"]["field"] = field

        return jsonify(response_body), 400

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        """
        Catches all unhandled exceptions and returns a generic 500 response.
        HTTP errors raised by Flask itself (404, 405, malformed JSON) keep
        their own status.
        The full traceback is logged to the application logger.
        """
        if isinstance(error, HTTPException):
            return error

        app.logger.error(
            "Unhandled exception: %s\n%s",
            str(error),
            traceback.format_exc(),
        )
        return jsonify({
            "error": {
                "code": ErrorCode.INTERNAL_ERROR,
                "message": "An unexpected error occurred. Please try again later.",
            }
        }), 500


def _first_error(messages, path: tuple = ()) -> tuple[str | None, str]:
    """Walks a marshmallow messages structure to its first (field path, message)."""
    if isinstance(messages, dict):
        for key, value in messages.items():
            next_path = path if key == "_schema" else path + (str(key),)
            return _first_error(value, next_path)
        return (".".join(path) or None), "Invalid input."
    if isinstance(messages, list):
        if not messages:
            return (".".join(path) or None), "Invalid value."
        return _first_error(messages[0], path)
    return (".".join(path) or None), str(messages)


def _register_cors(app: Flask) -> None:
    """
    Adds CORS headers for browser-based local development.

    Enabled when DEBUG or TESTING is true so a frontend served from another
    local port can call the API.
    """

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        allow_all = bool(app.config.get("DEBUG") or app.config.get("TESTING"))

        if allow_all:
            response.headers["Access-Control-Allow-Origin"] = origin if origin else "*"
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, DELETE, OPTIONS"
            response.headers["Access-Control-Allow-Headers"] = "Content-Type"

        return response


def _code_to_message(code: str) -> str:
    """
    Returns a human-readable default message for a known error code.
    Used when a ValidationError message IS the error code constant itself
    (e.g. DUPLICATE_ASSIGNEE raised as ValidationError in schemas).
    """
    _messages = {
        "INVALID_TIP_TYPE": "tipType must be 'percent' or 'amount'.",
        "INVALID_SPLIT_MODE": "taxTipSplitMode must be 'equal' or 'proportional'.",
        "INVALID_PAYMENT_METHOD": "paymentInfo.method must be null, 'bank', 'venmo', 'paypal' or 'custom'.",
        "DUPLICATE_ASSIGNEE": "The same participant id appears more than once in assignedTo.",
        "DUPLICATE_PARTICIPANT": "The same participant id appears more than once in people.",
        "UNKNOWN_ASSIGNEE": "assignedTo references a participant that is not in people.",
    }
    return _messages.get(code, "Invalid input.")
