"""
kitty/__init__.py — Flask application factory.

create_app(config_name) builds a configured app. Nothing is initialised at
import time, so tests can create isolated instances and Alembic can import
the models without starting a server.

Responsibilities:
  1. Load configuration from config_by_name[config_name]
  2. Configure logging for the backend.kitty package
  3. Initialise extensions (SQLAlchemy, Marshmallow) via init_app()
  4. Register all route blueprints under /api/v1
  5. Register global error handlers (AppError → JSON, Exception → 500)
  6. Serialise Decimal as string in JSON responses
  7. Register the `seed-categories` CLI command
"""

from __future__ import annotations

import logging
import traceback
from decimal import Decimal

import click
from flask import Flask, jsonify, request
from flask.json.provider import DefaultJSONProvider
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException

from backend.config import config_by_name, validate_production_config


class DecimalJSONProvider(DefaultJSONProvider):
    """Serialises Decimal as str, so Decimal("10.50") → "10.50" (not 10.5)."""

    def default(self, o):
        if isinstance(o, Decimal):
            return str(o)
        return super().default(o)


def create_app(config_name: str = "development") -> Flask:
    """
    Creates and returns a configured Flask application instance.

    Args:
        config_name: One of "development", "testing", "production".
                     Unknown names fall back to "development".
    """
    app = Flask(__name__)
    app.json_provider_class = DecimalJSONProvider
    app.json = DecimalJSONProvider(app)

    config_class = config_by_name.get(config_name, config_by_name["development"])
    app.config.from_object(config_class)

    if config_name == "production":
        validate_production_config(app)  # raises ValueError if misconfigured

    _configure_logging(app)

    # Import here (not at module top) to avoid circular imports.
    from backend.kitty.extensions import db, ma
    db.init_app(app)
    ma.init_app(app)

    # Populate SQLAlchemy metadata for create_all() and Alembic.
    with app.app_context():
        from backend.kitty.models import (  # noqa: F401
            category,
            expense,
            group,
            invite,
            membership,
            user,
        )

    _register_blueprints(app)
    _register_error_handlers(app)
    _register_cli(app)

    return app


def _configure_logging(app: Flask) -> None:
    """Applies LOG_LEVEL to the app logger and to every backend.kitty.* logger."""
    level = logging.getLevelName(str(app.config.get("LOG_LEVEL", "INFO")).upper())
    if not isinstance(level, int):
        level = logging.INFO

    package_logger = logging.getLogger("backend.kitty")
    package_logger.setLevel(level)
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s [%(name)s] %(message)s"
        ))
        package_logger.addHandler(handler)

    app.logger.setLevel(level)


def _register_blueprints(app: Flask) -> None:
    """
    Registers all route blueprints under the /api/v1 prefix.

    invites_bp sits at /api/v1 because it owns both /groups/<id>/invites and
    /invites/<id>/...; the group-scoped read blueprints share /api/v1/groups.
    """
    from backend.kitty.routes.auth import auth_bp
    from backend.kitty.routes.categories import categories_bp
    from backend.kitty.routes.expenses import expenses_bp
    from backend.kitty.routes.groups import groups_bp
    from backend.kitty.routes.invites import invites_bp
    from backend.kitty.routes.summaries import summaries_bp

    app.register_blueprint(auth_bp,       url_prefix="/api/v1/auth")
    app.register_blueprint(groups_bp,     url_prefix="/api/v1/groups")
    app.register_blueprint(expenses_bp,   url_prefix="/api/v1/groups")
    app.register_blueprint(summaries_bp,  url_prefix="/api/v1/groups")
    app.register_blueprint(categories_bp, url_prefix="/api/v1/categories")
    app.register_blueprint(invites_bp,    url_prefix="/api/v1")


def _register_error_handlers(app: Flask) -> None:
    """
    Handlers:
      AppError        → {"error": {...}} with the error's own status
      ValidationError → first marshmallow field error, 400
      HTTPException   → werkzeug status (404 for unknown routes, 400 for bad JSON)
      Exception       → INTERNAL_ERROR 500; traceback logged, never returned
    """
    from backend.kitty.errors import AppError, ErrorCode

    @app.errorhandler(AppError)
    def handle_app_error(error: AppError):
        return jsonify(error.to_dict()), error.http_status

    @app.errorhandler(ValidationError)
    def handle_validation_error(error: ValidationError):
        field, raw_message = _first_validation_message(error.messages)

        known_codes = set(vars(ErrorCode).values())
        if raw_message in known_codes:
            code = raw_message
            message = _code_to_message(code)
        elif raw_message.startswith("Missing data for required field"):
            code = ErrorCode.MISSING_FIELD
            message = raw_message
        else:
            code = ErrorCode.INVALID_FIELD
            message = raw_message

        body = {"error": {"code": code, "message": message}}
        if field is not None:
            body["error"]["field"] = field
        return jsonify(body), 400

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException):
        code = ErrorCode.INVALID_FIELD if error.code == 400 else error.name.upper().replace(" ", "_")
        return jsonify({
            "error": {"code": code, "message": error.description},
        }), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        app.logger.error(
            "Unhandled exception on %s %s: %s\n%s",
            request.method,
            request.path,
            str(error),
            traceback.format_exc(),
        )
        return jsonify({
            "error": {
                "code": ErrorCode.INTERNAL_ERROR,
                "message": "An unexpected error occurred. Please try again later.",
            }
        }), 500


def _register_cli(app: Flask) -> None:

    @app.cli.command("seed-categories")
    def seed_categories():
        """Insert the default expense categories that are missing."""
        from backend.kitty.extensions import db
        from backend.kitty.services.category_service import ensure_default_categories

        added = ensure_default_categories(db.session)
        db.session.commit()
        click.echo(f"Added {added} categories.")


def _first_validation_message(messages) -> tuple[str | None, str]:
    """Returns (field, message) for the first error in a marshmallow messages tree."""
    if isinstance(messages, dict):
        for field_name, field_errors in messages.items():
            field = field_name if field_name != "_schema" else None
            if isinstance(field_errors, list) and field_errors:
                return field, str(field_errors[0])
            if isinstance(field_errors, dict):
                return field, str(next(iter(field_errors.values()), "Invalid value."))
            return field, str(field_errors)
    if isinstance(messages, list) and messages:
        return None, str(messages[0])
    return None, "Invalid input."


def _code_to_message(code: str) -> str:
    """Human-readable message for a ValidationError raised with a bare error code."""
    _messages = {
        "INVALID_AMOUNT_PRECISION": "Amount must have at most 2 decimal places.",
    }
    return _messages.get(code, "Invalid input.")
