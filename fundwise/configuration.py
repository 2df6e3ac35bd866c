"""Mini README: Centralised configuration for the Fundwise service.

Structure:
    * FundwiseSettings - pydantic-settings model read from ``FUNDWISE_*``
      environment variables or a local ``.env`` file.
    * get_settings - cached accessor shared by the CLI and the web factory.

The bootstrap credentials below are only used when no credential file exists
yet. They are deliberately weak and every real deployment must rotate them
through the admin endpoints.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FundwiseSettings(BaseSettings):
    """Runtime configuration for the fund tracker."""

    model_config = SettingsConfigDict(
        env_prefix="FUNDWISE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = Field(
        "development",
        description="Environment label controlling reload and logging levels.",
    )
    data_directory: Path = Field(
        Path("data"),
        description="Directory holding ledger.json and credentials.json.",
        validate_default=True,
    )
    persist_ledger: bool = Field(
        True,
        description="Write years, entries and credential hashes to the data directory.",
    )
    interface_host: str = Field(
        "0.0.0.0",
        description="Network interface for the HTTP listener.",
    )
    interface_port: int = Field(
        3001,
        description="Port the HTTP listener binds to.",
        ge=1,
        le=65535,
    )
    default_admin_username: str = Field("admin", description="Seeded admin login name.")
    default_admin_password: str = Field("admin123", description="Seeded admin password.")
    default_collection_key: str = Field(
        "fund1234",
        description="Seeded passkey unlocking the public collection ledger.",
    )
    session_cookie_name: str = Field("fundwise_session")
    session_max_age_seconds: int = Field(
        60 * 60 * 24 * 30,
        description="Lifetime of the persistent admin session cookie.",
        ge=60,
    )

    @field_validator("data_directory", mode="before")
    @classmethod
    def _expand_path(cls, value: Optional[str | Path]) -> Path:
        """Expand user directories and make sure the folder exists."""

        path = Path(value or "data").expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def ledger_path(self) -> Path:
        return self.data_directory / "ledger.json"

    @property
    def credentials_path(self) -> Path:
        return self.data_directory / "credentials.json"


@lru_cache()
def get_settings() -> FundwiseSettings:
    """Return cached settings, ensuring consistent configuration across modules."""

    return FundwiseSettings()
