"""Relay HTML from a short list of trusted hosts."""

from __future__ import annotations

import logging
from typing import Iterable

import httpx

LOGGER = logging.getLogger(__name__)


class ProxyError(Exception):
    code = "fetch_failed"


class InvalidTarget(ProxyError):
    """The ``url`` parameter is not an absolute http(s) URL."""


class HostNotAllowed(ProxyError):
    code = "host_not_allowed"


class UpstreamFailure(ProxyError):
    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(f"upstream responded with {status_code}")

    @property
    def code(self) -> str:  # type: ignore[override]
        return f"upstream_{self.status_code}"


def parse_target(url: str) -> httpx.URL:
    try:
        target = httpx.URL(url)
    except httpx.InvalidURL as exc:
        raise InvalidTarget(str(exc)) from exc
    if target.scheme not in {"http", "https"} or not target.host:
        raise InvalidTarget(f"not an absolute http(s) url: {url!r}")
    return target


def ensure_host_allowed(target: httpx.URL, allowed_hosts: Iterable[str]) -> None:
    if target.host.lower() not in set(allowed_hosts):
        raise HostNotAllowed(target.host)


def fetch_html(url: str, allowed_hosts: Iterable[str], client: httpx.Client) -> str:
    """Return the body of ``url`` once its host has passed the allow-list."""

    target = parse_target(url)
    ensure_host_allowed(target, allowed_hosts)

    response = client.get(target)
    if not response.is_success:
        LOGGER.info(
            "Upstream rejected proxy fetch",
            extra={"host": target.host, "status": response.status_code},
        )
        raise UpstreamFailure(response.status_code)
    return response.text


def build_client(timeout: float, transport: httpx.BaseTransport | None = None) -> httpx.Client:
    return httpx.Client(
        timeout=timeout,
        follow_redirects=True,
        transport=transport,
    )
