from pathlib import Path

import pytest

from sections_api.services import storage as storage_module
from sections_api.services.storage import (
    FALLBACK,
    PRIMARY,
    StorageResolver,
    StorageUnavailable,
    ensure_directory,
)


# ---------- helpers ----------


def make_resolver(tmp_path) -> StorageResolver:
    return StorageResolver(
        primary_dir=tmp_path / "install" / "sections",
        fallback_dir=tmp_path / "tmp" / "sections",
        filename="projects.html",
    )


def deny_directories(monkeypatch, *denied: Path):
    real_ensure = storage_module.ensure_directory

    def fake_ensure(path):
        if Path(path) in denied:
            raise PermissionError(f"read-only: {path}")
        return real_ensure(path)

    monkeypatch.setattr(storage_module, "ensure_directory", fake_ensure)


# ---------- tests ----------


def test_ensure_directory_creates_missing_parents(tmp_path):
    target = tmp_path / "a" / "b" / "sections"
    assert ensure_directory(target) == target
    assert target.is_dir()


def test_writable_path_prefers_primary(tmp_path):
    resolver = make_resolver(tmp_path)
    assert resolver.resolve_writable_path() == resolver.primary_file
    assert resolver.primary_dir.is_dir()
    assert not resolver.fallback_dir.exists()


def test_writable_path_falls_back_when_primary_denied(tmp_path, monkeypatch):
    resolver = make_resolver(tmp_path)
    deny_directories(monkeypatch, resolver.primary_dir)

    assert resolver.resolve_writable_path() == resolver.fallback_file
    assert resolver.fallback_dir.is_dir()


def test_writable_path_raises_when_both_denied(tmp_path, monkeypatch):
    resolver = make_resolver(tmp_path)
    deny_directories(monkeypatch, resolver.primary_dir, resolver.fallback_dir)

    with pytest.raises(StorageUnavailable):
        resolver.resolve_writable_path()


def test_writable_path_falls_back_when_primary_is_a_file(tmp_path):
    resolver = make_resolver(tmp_path)
    resolver.primary_dir.parent.mkdir(parents=True)
    resolver.primary_dir.write_text("not a directory")

    assert resolver.resolve_writable_path() == resolver.fallback_file


def test_readable_path_returns_fallback_even_if_missing(tmp_path):
    resolver = make_resolver(tmp_path)
    path = resolver.resolve_readable_path()
    assert path == resolver.fallback_file
    assert not path.exists()


def test_readable_path_prefers_existing_primary(tmp_path):
    resolver = make_resolver(tmp_path)
    resolver.fallback_dir.mkdir(parents=True)
    resolver.fallback_file.write_text("<p>old</p>", encoding="utf-8")
    resolver.primary_dir.mkdir(parents=True)
    resolver.primary_file.write_text("<p>new</p>", encoding="utf-8")

    assert resolver.resolve_readable_path() == resolver.primary_file


def test_read_before_write_is_empty(tmp_path):
    artifact = make_resolver(tmp_path).read_artifact()
    assert artifact.content == ""
    assert artifact.location == FALLBACK


def test_write_then_read_round_trip(tmp_path):
    resolver = make_resolver(tmp_path)
    saved = resolver.write_artifact("<p>Olá</p>")

    assert saved.location == PRIMARY
    assert saved.size == len("<p>Olá</p>".encode("utf-8"))
    assert resolver.primary_file.read_bytes() == "<p>Olá</p>".encode("utf-8")
    assert resolver.read_artifact().content == "<p>Olá</p>"


def test_write_overwrites_in_full(tmp_path):
    resolver = make_resolver(tmp_path)
    resolver.write_artifact("<p>a much longer first version</p>")
    resolver.write_artifact("<p>b</p>")
    assert resolver.read_artifact().content == "<p>b</p>"


def test_fallback_write_is_readable(tmp_path, monkeypatch):
    resolver = make_resolver(tmp_path)
    deny_directories(monkeypatch, resolver.primary_dir)

    saved = resolver.write_artifact("<p>fallback</p>")
    assert saved.location == FALLBACK

    artifact = resolver.read_artifact()
    assert artifact.content == "<p>fallback</p>"
    assert artifact.location == FALLBACK


def test_from_settings_uses_configured_roots(settings):
    resolver = StorageResolver.from_settings(settings)
    assert resolver.primary_file == settings.primary_dir / "projects.html"
    assert resolver.fallback_file == settings.runtime_tmpdir / "sections" / "projects.html"
