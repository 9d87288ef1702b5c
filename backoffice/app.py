"""Flask application factory."""
import logging
import re
from typing import Any, Dict, Optional, Union

from flask import Flask, jsonify, make_response
from marshmallow import ValidationError as SchemaValidationError

from backoffice.exceptions import BackofficeError

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def create_app(config: Optional[Union[Dict[str, Any], type, object]] = None) -> Flask:
    """
    Create and configure Flask application.

    Args:
        config: Optional configuration. A dict is applied on top of the base
            configuration; a config class or object replaces it. Defaults to
            the class selected by FLASK_ENV.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__)

    # Load configuration
    from backoffice.config import Config, get_config
    if config is None:
        config = get_config()
    if isinstance(config, dict):
        app.config.from_object(Config)
        app.config.update(config)
    else:
        # Instantiate classes so ProductionConfig validates its secrets
        app.config.from_object(config() if isinstance(config, type) else config)

    logging.basicConfig(
        level=getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    # Initialize extensions
    from backoffice.extensions import db, limiter
    db.init_app(app)
    limiter.init_app(app)

    # Initialize DI container
    from backoffice.container import Container, container_settings
    container = Container()
    container.config.from_dict(container_settings(app.config))
    app.container = container

    @app.before_request
    def inject_db_session():
        """Inject db session into container for each request."""
        container.db_session.override(db.session)

    # Registered after the session hook so the filter sees a wired container
    from backoffice.middleware.auth import init_auth
    init_auth(app)

    # Register blueprints
    from backoffice.routes.auth import auth_bp
    from backoffice.routes.invoices import invoices_bp
    from backoffice.routes.admin import admin_users_bp
    app.register_blueprint(auth_bp)
    app.register_blueprint(invoices_bp)
    app.register_blueprint(admin_users_bp)

    # CLI commands
    from backoffice.cli import (
        cleanup_expired_tokens_command,
        mark_overdue_invoices_command,
        seed_reference_data_command,
    )
    app.cli.add_command(mark_overdue_invoices_command)
    app.cli.add_command(cleanup_expired_tokens_command)
    app.cli.add_command(seed_reference_data_command)

    # Health check endpoint
    @app.route("/api/v1/health")
    def health():
        """Health check endpoint."""
        return jsonify({
            "status": "ok",
            "service": "backoffice-api",
            "version": VERSION
        }), 200

    # Root endpoint
    @app.route("/")
    def root():
        """Root endpoint."""
        return jsonify({
            "message": "Maritime Back-Office API",
            "version": VERSION,
            "health": "/api/v1/health"
        }), 200

    register_error_handlers(app)

    return app


def register_error_handlers(app: Flask) -> None:
    """Convert domain, validation and HTTP errors into JSON responses."""

    @app.errorhandler(BackofficeError)
    def backoffice_error(error: BackofficeError):
        if error.status_code >= 500:
            logger.error(f"{error.code}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(SchemaValidationError)
    def schema_validation_error(error: SchemaValidationError):
        return jsonify({
            "success": False,
            "error": "Validation failed",
            "code": "VALIDATION_ERROR",
            "details": error.messages,
        }), 400

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 errors."""
        return jsonify({"error": "Not found", "code": "NOT_FOUND"}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({"error": "Method not allowed", "code": "METHOD_NOT_ALLOWED"}), 405

    @app.errorhandler(429)
    def ratelimit_handler(error):
        """Handle rate limit exceeded errors with JSON response."""
        response = make_response(jsonify({
            "error": "Rate limit exceeded",
            "code": "RATE_LIMIT_EXCEEDED",
            "message": str(error.description)
        }), 429)
        match = re.search(
            r"(\d+)\s*(second|minute|hour)", str(error.description).lower()
        )
        if match:
            value = int(match.group(1))
            unit = match.group(2)
            multiplier = {"second": 1, "minute": 60, "hour": 3600}[unit]
            response.headers["Retry-After"] = str(value * multiplier)
        else:
            # Default to 60 seconds
            response.headers["Retry-After"] = "60"
        return response

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        return jsonify({"error": "Internal server error", "code": "INTERNAL_ERROR"}), 500

    @app.errorhandler(Exception)
    def unhandled_exception(error: Exception):
        # HTTP errors keep their own status and handler
        from werkzeug.exceptions import HTTPException
        if isinstance(error, HTTPException):
            return error

        logger.exception(f"Unhandled error: {error}")
        return jsonify({"error": "Internal server error", "code": "INTERNAL_ERROR"}), 500
