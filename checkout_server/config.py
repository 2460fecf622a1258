"""Runtime configuration."""

from typing import Annotated, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_BASE_URL = "http://localhost:8080"


class Settings(BaseSettings):
    """Settings loaded from the environment, injected into clients at construction."""

    model_config = SettingsConfigDict(frozen=True)

    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        validation_alias=AliasChoices("CHECKOUT_SERVER_BASE_URL", "base_url"),
        description="Backend origin",
    )
    allowed_redirect_hosts: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(),
        validation_alias=AliasChoices("CHECKOUT_ALLOWED_REDIRECT_HOSTS", "allowed_redirect_hosts"),
        description="Hosts a destination may point at; empty allows any",
    )
    timeout: float = Field(
        default=30.0,
        gt=0,
        validation_alias=AliasChoices("CHECKOUT_SERVER_TIMEOUT", "timeout"),
        description="HTTP timeout in seconds",
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("allowed_redirect_hosts", mode="before")
    @classmethod
    def split_hosts(cls, value):
        if isinstance(value, str):
            value = value.split(",")
        return tuple(host.strip().lower() for host in value if host and host.strip())

    @classmethod
    def from_env(cls, base_url: Optional[str] = None) -> "Settings":
        """
        Load settings from the environment.

        Args:
            base_url: Overrides CHECKOUT_SERVER_BASE_URL when given

        Returns:
            Settings instance
        """
        if base_url:
            return cls(base_url=base_url)
        return cls()
