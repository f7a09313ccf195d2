from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ENDPOINT = "https://api.smith.langchain.com"


class TracingSettings(BaseSettings):
    """
    Tracing client configuration.

    Read from LANGSMITH_* environment variables (and a local .env file).
    Construct explicitly and pass to HttpRunClient, or use get_settings()
    for the cached process default.
    """
    model_config = SettingsConfigDict(env_prefix="LANGSMITH_", env_file=".env", extra="ignore")

    # Switches
    tracing: bool = False
    log_level: str = "INFO"

    # Collector
    endpoint: str = DEFAULT_ENDPOINT
    timeout_ms: int = 5000

    # Identity
    api_key: Optional[str] = None
    tenant_id: Optional[str] = None
    project: Optional[str] = None

    @property
    def runs_url(self) -> str:
        return f"{self.endpoint.rstrip('/')}/runs"


@lru_cache(maxsize=1)
def get_settings() -> TracingSettings:
    """Load and cache the process-wide settings."""
    return TracingSettings()


def is_tracing_enabled() -> bool:
    return get_settings().tracing
