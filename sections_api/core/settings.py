from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Iterable, List

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


INSTALL_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_ADMIN_TOKEN = "changeme"
DEFAULT_FETCH_HOSTS = ("localhost", "127.0.0.1", "dong065vn.github.io")


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Process-wide configuration, built once at startup and passed around."""

    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=3000, ge=1, le=65535)
    ENV: str = Field(default="dev")
    LOG_LEVEL: str = Field(default="INFO")

    ADMIN_TOKEN: str = Field(default=DEFAULT_ADMIN_TOKEN)

    allowed_origin: list[str] | str = Field(
        default_factory=lambda: ["*"], validation_alias="ALLOWED_ORIGIN"
    )

    sections_dir: Path = Field(
        default_factory=lambda: INSTALL_ROOT / "sections",
        validation_alias="SECTIONS_DIR",
    )
    runtime_tmpdir: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()),
        validation_alias="RUNTIME_TMPDIR",
    )
    artifact_name: str = Field(default="projects.html")

    allowed_fetch_hosts: list[str] | str = Field(
        default_factory=lambda: list(DEFAULT_FETCH_HOSTS),
        validation_alias="ALLOWED_FETCH_HOSTS",
    )
    proxy_timeout_seconds: float = Field(
        default=15.0, gt=0, validation_alias="PROXY_TIMEOUT_SECONDS"
    )
    max_body_bytes: int = Field(
        default=2 * 1024 * 1024, ge=1024, validation_alias="MAX_BODY_BYTES"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    @field_validator("ADMIN_TOKEN", mode="before")
    @classmethod
    def _default_empty_token(cls, value: str | None) -> str:
        if value is None:
            return DEFAULT_ADMIN_TOKEN
        value = str(value).strip()
        return value or DEFAULT_ADMIN_TOKEN

    @field_validator("LOG_LEVEL")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        value = (value or "INFO").strip().upper()
        if value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown LOG_LEVEL {value!r}")
        return value

    @field_validator("runtime_tmpdir", mode="before")
    @classmethod
    def _default_empty_tmpdir(cls, value: str | Path | None) -> str | Path:
        if value is None or str(value).strip() == "":
            return Path(tempfile.gettempdir())
        return value

    @field_validator("sections_dir", mode="before")
    @classmethod
    def _default_empty_sections_dir(cls, value: str | Path | None) -> str | Path:
        if value is None or str(value).strip() == "":
            return INSTALL_ROOT / "sections"
        return value

    @field_validator("allowed_origin", mode="before")
    @classmethod
    def _coerce_origins(cls, value: Iterable[str] | str | None) -> list[str]:
        items = cls._coerce_csv(value)
        return items or ["*"]

    @field_validator("allowed_fetch_hosts", mode="before")
    @classmethod
    def _coerce_hosts(cls, value: Iterable[str] | str | None) -> list[str]:
        items = [item.lower() for item in cls._coerce_csv(value)]
        return items or list(DEFAULT_FETCH_HOSTS)

    @staticmethod
    def _coerce_csv(value: Iterable[str] | str | None) -> list[str]:
        if value is None or value == "":
            return []
        if isinstance(value, str):
            return _split_csv(value)
        return [str(item).strip() for item in value if str(item).strip()]

    @model_validator(mode="after")
    def _validate_production_token(self) -> "Settings":
        if self.is_production and self.ADMIN_TOKEN == DEFAULT_ADMIN_TOKEN:
            raise ValueError("ADMIN_TOKEN must be set in production")
        return self

    @property
    def is_production(self) -> bool:
        return (self.ENV or "").lower() in {"prod", "production"}

    @property
    def primary_dir(self) -> Path:
        return Path(self.sections_dir)

    @property
    def fallback_dir(self) -> Path:
        return Path(self.runtime_tmpdir) / "sections"

    @property
    def allows_any_origin(self) -> bool:
        return "*" in self.allowed_origin_list()

    @property
    def fetch_host_set(self) -> frozenset[str]:
        return frozenset(self.allowed_fetch_hosts_list())

    def allowed_origin_list(self) -> list[str]:
        if isinstance(self.allowed_origin, list):
            return self.allowed_origin
        return _split_csv(self.allowed_origin or "")

    def allowed_fetch_hosts_list(self) -> list[str]:
        if isinstance(self.allowed_fetch_hosts, list):
            return self.allowed_fetch_hosts
        return _split_csv(self.allowed_fetch_hosts or "")


settings = Settings()
