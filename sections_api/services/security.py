import hmac
import re

from flask import request
from werkzeug.exceptions import Unauthorized

_BEARER_PREFIX = re.compile(r"^Bearer\s+", re.IGNORECASE)

UNAUTHORIZED = "unauthorized"


def extract_bearer_token(header_value: str | None) -> str:
    return _BEARER_PREFIX.sub("", header_value or "").strip()


def tokens_match(presented: str, expected: str) -> bool:
    # Exact, case-sensitive comparison; compare_digest only accepts ASCII str.
    return hmac.compare_digest(presented.encode("utf-8"), expected.encode("utf-8"))


def require_admin_token(expected: str, req=None) -> None:
    req = req or request
    token = extract_bearer_token(req.headers.get("Authorization"))
    if not token or not tokens_match(token, expected):
        raise Unauthorized(description=UNAUTHORIZED)
