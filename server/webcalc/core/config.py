from functools import lru_cache
from typing import List

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    api_title: str = "Calculator Web API"
    api_version: str = "1.0.0"
    log_level: str = "INFO"

    db_backend: str = Field("sqlite", alias="DB_BACKEND")  # sqlite | postgres
    sqlite_url: str = Field(
        default="sqlite:///./data/sqlite/calculations.db",
        validation_alias=AliasChoices("CALCULATIONS_SQLITE_URL", "SQLITE_URL"),
    )
    postgres_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("CALCULATIONS_POSTGRES_URL", "POSTGRES_URL"),
    )
    auto_create_schema: bool = True
    expression_max_length: int = Field(100, ge=1)

    calculations_http_base_url: str | None = None
    calculations_http_timeout_sec: float = 5.0

    cors_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ]
    )
    frontend_origin: str | None = Field(default=None, alias="FRONTEND_ORIGIN")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def resolved_cors_origins(self) -> List[str]:
        """
        Returns the configured CORS origins plus the optional frontend origin, deduped.
        """
        normalized: list[str] = []

        def _append(origin: str | None) -> None:
            if not origin:
                return
            cleaned = origin.rstrip("/")
            if cleaned not in normalized:
                normalized.append(cleaned)

        for origin in self.cors_origins:
            _append(origin)

        _append(self.frontend_origin)
        return normalized

    @property
    def database_url(self) -> str:
        backend = (self.db_backend or "sqlite").strip().lower()
        if backend == "postgres":
            db_url = (self.postgres_url or "").strip()
            if not db_url:
                raise ValueError("POSTGRES_URL must be configured when DB_BACKEND=postgres.")
            return db_url
        if backend == "sqlite":
            db_url = (self.sqlite_url or "").strip()
            if not db_url:
                raise ValueError("SQLITE_URL must be configured when DB_BACKEND=sqlite.")
            return db_url
        raise ValueError(f"Unsupported DB_BACKEND: {self.db_backend}")


@lru_cache
def get_settings() -> AppSettings:
    return AppSettings()
