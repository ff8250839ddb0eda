"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - Production gateway mode only when BOTH tbk_code and tbk_key are set

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Redirect URLs have empty defaults but are checked at startup
      (check_redirect_settings) so tests can build Settings freely
"""

from functools import lru_cache
from urllib.parse import urlsplit

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from oneclick.core.domain_types import GatewayMode
from oneclick.core.errors import ConfigurationError


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://oneclick:oneclick@db:5432/oneclick"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Public URLs
    base_url: str = ""
    tbk_success_url: str = ""
    tbk_failed_url: str = ""

    # Gateway (Transbank Oneclick Mall)
    tbk_code: str = ""
    tbk_key: str = ""
    tbk_default_child_commerce_code: str = "597055555542"
    tbk_timeout_seconds: float = 30.0

    # Identifier codec
    encryption_key: str = ""
    inscription_callback_ttl_seconds: int | None = None

    # API
    api_key: str = ""
    error_envelope_status_code: int = 418
    cors_origins: list[str] = ["*"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def gateway_mode(self) -> GatewayMode:
        if self.tbk_code and self.tbk_key:
            return GatewayMode.PRODUCTION
        return GatewayMode.INTEGRATION

    @property
    def base_path(self) -> str:
        """Path component of base_url, always ending with '/'."""
        path = urlsplit(self.base_url).path or "/"
        if not path.endswith("/"):
            path += "/"
        return path

    def callback_url(self, path: str = "") -> str:
        """Join base_url and path with single slashes and no trailing slash.

        The result must match a route path exactly: a trailing slash would be
        answered with a redirect built from the (possibly proxied) request.
        """
        url = self.base_url.rstrip("/")
        if path:
            url += "/" + path.strip("/")
        return url

    def check_redirect_settings(self) -> None:
        """Fail fast when any URL needed by the inscription flow is missing."""
        for name in ("base_url", "tbk_success_url", "tbk_failed_url"):
            if not getattr(self, name):
                raise ConfigurationError(name.upper())


@lru_cache
def get_settings() -> Settings:
    return Settings()
