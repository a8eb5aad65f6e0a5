import logging

import httpx
from flask import Flask
from flask_cors import CORS as FlaskCORS
from werkzeug.exceptions import HTTPException

from sections_api.core.logging import configure_logging
from sections_api.core.settings import Settings, settings as default_settings
from sections_api.routes import error_response
from sections_api.routes.proxy import bp as proxy_bp
from sections_api.routes.sections import bp as sections_bp

LOGGER = logging.getLogger(__name__)

_ERROR_CODES = {
    404: "not_found",
    405: "method_not_allowed",
    413: "payload_too_large",
}


def _error_code(exc: HTTPException) -> str:
    # Our own raises carry the error code as description.
    if exc.description and exc.description != type(exc).description:
        return exc.description
    if exc.code in _ERROR_CODES:
        return _ERROR_CODES[exc.code]
    return (exc.name or "error").lower().replace(" ", "_")


def create_app(
    settings: Settings | None = None,
    *,
    proxy_transport: httpx.BaseTransport | None = None,
) -> Flask:
    cfg = settings or default_settings
    configure_logging(cfg.LOG_LEVEL)

    app = Flask(__name__)
    app.config.update(
        SETTINGS=cfg,
        MAX_CONTENT_LENGTH=cfg.max_body_bytes,
        PROXY_TRANSPORT=proxy_transport,
    )

    # Requests without an Origin header are never blocked.
    FlaskCORS(
        app,
        origins="*" if cfg.allows_any_origin else cfg.allowed_origin_list(),
        allow_headers=["Content-Type", "Authorization"],
        methods=["GET", "POST", "OPTIONS"],
    )

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return error_response(_error_code(exc), exc.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        LOGGER.exception("Unhandled error")
        return error_response("internal_error", 500)

    app.register_blueprint(sections_bp)
    app.register_blueprint(proxy_bp)

    @app.route("/healthz", methods=["GET", "HEAD"])
    def healthz():
        return ("", 200)

    LOGGER.info(
        "sections-api configured",
        extra={
            "primary_dir": str(cfg.primary_dir),
            "fallback_dir": str(cfg.fallback_dir),
            "origins": cfg.allowed_origin_list(),
        },
    )
    return app
