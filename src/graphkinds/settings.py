from __future__ import annotations

from pydantic import Field

try:
    from pydantic_settings import BaseSettings, SettingsConfigDict
except Exception as e:  # pragma: no cover
    raise RuntimeError(
        "pydantic-settings is required. Install with: pip install pydantic-settings"
    ) from e


class GraphKindsSettings(BaseSettings):
    """Unified configuration for graphkinds.

    Environment variables are prefixed with GRAPHKINDS_.
    """

    model_config = SettingsConfigDict(env_prefix="GRAPHKINDS_", extra="ignore")

    # --- Core ---
    log_level: str = Field(default="INFO", description="Python logging level")

    # --- ArangoDB ---
    arango_url: str = Field(default="http://localhost:8529")
    arango_database: str = Field(default="_system")
    arango_username: str = Field(default="root")
    arango_password: str = Field(default="")
    request_timeout: float = Field(
        default=60.0, description="Seconds before a request to the store is abandoned"
    )

    # --- Queries ---
    default_limit: int = Field(
        default=30, ge=1, description="Upper bound for unqualified `all()` fetches"
    )
    analyzer: str = Field(default="text_en", description="ArangoSearch text analyzer")


settings = GraphKindsSettings()
