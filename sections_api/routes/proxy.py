from __future__ import annotations

import logging

import httpx
from flask import Blueprint, Response, current_app, request
from werkzeug.exceptions import BadRequest

from sections_api.routes import current_settings, error_response
from sections_api.services.proxy import (
    HostNotAllowed,
    ProxyError,
    UpstreamFailure,
    build_client,
    fetch_html,
)

LOGGER = logging.getLogger(__name__)

bp = Blueprint("proxy", __name__, url_prefix="/api/proxy")


def _client() -> httpx.Client:
    cfg = current_settings()
    return build_client(
        timeout=cfg.proxy_timeout_seconds,
        transport=current_app.config.get("PROXY_TRANSPORT"),
    )


@bp.get("/fetch")
def fetch():
    url = request.args.get("url", "")
    if not url:
        raise BadRequest(description="url_required")

    try:
        with _client() as client:
            html = fetch_html(url, current_settings().fetch_host_set, client)
    except HostNotAllowed as exc:
        return error_response(exc.code, 400)
    except UpstreamFailure as exc:
        return error_response(exc.code, 502)
    except (ProxyError, httpx.HTTPError):
        LOGGER.exception("fetch_failed", extra={"url": url})
        return error_response("fetch_failed", 500)

    return Response(html, status=200, content_type="text/html; charset=utf-8")
