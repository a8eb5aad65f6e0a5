from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request
from pydantic import BaseModel, ConfigDict, StrictStr, ValidationError
from werkzeug.exceptions import BadRequest

from sections_api.routes import current_settings, error_response, format_validation_error
from sections_api.services.sanitizer import sanitize_html
from sections_api.services.security import require_admin_token
from sections_api.services.storage import StorageResolver, StorageUnavailable

LOGGER = logging.getLogger(__name__)

bp = Blueprint("sections", __name__, url_prefix="/api/sections")


class ProjectsSectionIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    html: StrictStr


def _resolver() -> StorageResolver:
    return StorageResolver.from_settings(current_settings())


@bp.get("/projects")
def read_projects():
    try:
        artifact = _resolver().read_artifact()
    except Exception:
        LOGGER.exception("read_failed")
        return error_response("read_failed", 500)
    return jsonify({"ok": True, "html": artifact.content, "location": artifact.location})


@bp.post("/projects")
def save_projects():
    require_admin_token(current_settings().ADMIN_TOKEN)

    data = request.get_json(silent=True)
    try:
        payload = ProjectsSectionIn.model_validate(data if isinstance(data, dict) else {})
    except ValidationError as exc:
        LOGGER.info("Rejected projects payload", extra={"errors": format_validation_error(exc)})
        raise BadRequest(description="html_required")

    clean = sanitize_html(payload.html)

    try:
        artifact = _resolver().write_artifact(clean)
    except StorageUnavailable:
        LOGGER.exception("storage_unavailable")
        return error_response("storage_unavailable", 500)
    except Exception:
        LOGGER.exception("write_failed")
        return error_response("write_failed", 500)

    return jsonify({"ok": True, "savedBytes": artifact.size, "location": artifact.location})
