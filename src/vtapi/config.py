"""Client configuration via environment variables."""

from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """VirusTotal client configuration, loaded from the environment or .env."""

    model_config = SettingsConfigDict(
        env_prefix="VT_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    api_key: SecretStr = SecretStr("")
    use_tls: bool = False
    proxy: str | None = None
    timeout: float = Field(default=30.0, gt=0)
    retry: int = Field(default=3, ge=0, le=100)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @field_validator("proxy")
    @classmethod
    def validate_proxy(cls, v: str | None) -> str | None:
        """Treat an empty proxy as no proxy."""
        if v is not None and not v.strip():
            return None
        return v
