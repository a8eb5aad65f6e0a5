# tests/conftest.py
import os

os.environ.setdefault("ENV", "test")

import httpx
import pytest

from sections_api.core.settings import Settings
from sections_api.main import create_app


ADMIN_TOKEN = "test-admin-token-123"


def make_settings(tmp_path, **overrides) -> Settings:
    values = {
        "ADMIN_TOKEN": ADMIN_TOKEN,
        "SECTIONS_DIR": str(tmp_path / "primary" / "sections"),
        "RUNTIME_TMPDIR": str(tmp_path / "runtime"),
        "ALLOWED_ORIGIN": "https://editor.example",
        "ALLOWED_FETCH_HOSTS": "localhost,127.0.0.1,dong065vn.github.io",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture(scope="function")
def settings_factory(tmp_path):
    def factory(**overrides):
        return make_settings(tmp_path, **overrides)

    return factory


@pytest.fixture(scope="function")
def settings(settings_factory):
    return settings_factory()


@pytest.fixture(scope="function")
def upstream_calls():
    return []


@pytest.fixture(scope="function")
def upstream_routes():
    """Map of ``host+path`` to ``httpx.Response`` served by the fake upstream."""
    return {}


@pytest.fixture(scope="function")
def proxy_transport(upstream_calls, upstream_routes):
    def handler(request: httpx.Request) -> httpx.Response:
        upstream_calls.append(request)
        key = f"{request.url.host}{request.url.path}"
        if key in upstream_routes:
            return upstream_routes[key]
        return httpx.Response(404, text="not here")

    return httpx.MockTransport(handler)


@pytest.fixture(scope="function")
def app(settings, proxy_transport):
    flask_app = create_app(settings, proxy_transport=proxy_transport)
    flask_app.config.update({"TESTING": True})
    return flask_app


@pytest.fixture(scope="function")
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture(scope="function")
def auth_headers():
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}
