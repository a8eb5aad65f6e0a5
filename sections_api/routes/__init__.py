from __future__ import annotations

import json

from flask import current_app, jsonify
from pydantic import ValidationError

from sections_api.core.settings import Settings


def format_validation_error(exc: ValidationError) -> list[dict]:
    """Return JSON-serializable validation errors."""
    return json.loads(exc.json(include_url=False))


def current_settings() -> Settings:
    return current_app.config["SETTINGS"]


def error_response(code: str, status: int):
    return jsonify({"ok": False, "error": code}), status
