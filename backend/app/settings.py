from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT_ALIASES = {
    "prod": "production",
    "production": "production",
    "stage": "staging",
    "staging": "staging",
    "dev": "development",
    "development": "development",
    "test": "test",
}

_STORE_ALIASES = {
    "memory": "memory",
    "inmemory": "memory",
    "in-memory": "memory",
    "dynamodb": "dynamodb",
    "ddb": "dynamodb",
}


class Settings(BaseSettings):
    """Process configuration, read from environment variables only."""

    model_config = SettingsConfigDict(env_file=None, extra="ignore")

    environment: str = Field(default="development", validation_alias="ENVIRONMENT")
    port: int = Field(default=8080, validation_alias="PORT")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # CORS
    frontend_base_url: str = Field(default="http://localhost:3000", validation_alias="FRONTEND_BASE_URL")
    frontend_urls: str | None = Field(default=None, validation_alias="FRONTEND_URLS")

    # Storage
    aws_region: str = Field(default="us-east-1", validation_alias="AWS_REGION")
    ddb_table_name: str | None = Field(default=None, validation_alias="DDB_TABLE_NAME")
    # DynamoDB Local, e.g. http://localhost:8000
    ddb_endpoint_url: str | None = Field(default=None, validation_alias="DDB_ENDPOINT_URL")
    catalog_store: str = Field(default="dynamodb", validation_alias="CATALOG_STORE")

    @property
    def normalized_environment(self) -> str:
        raw = (self.environment or "").strip().lower()
        return _ENVIRONMENT_ALIASES.get(raw, raw or "development")

    @property
    def is_production(self) -> bool:
        return self.normalized_environment == "production"

    @property
    def normalized_catalog_store(self) -> str:
        # Unknown values fall back to the durable backend.
        return _STORE_ALIASES.get((self.catalog_store or "").strip().lower(), "dynamodb")

    def require_in_production(self) -> None:
        """Fail fast when production would start without a table to write to."""
        if self.is_production and self.normalized_catalog_store == "dynamodb" and not self.ddb_table_name:
            raise RuntimeError("Missing required production environment variables: DDB_TABLE_NAME")

    def to_log_safe_dict(self) -> dict[str, object]:
        # Nothing here is secret; credentials come from the AWS default chain.
        return {
            "environment": self.normalized_environment,
            "port": self.port,
            "log_level": self.log_level,
            "frontend_base_url": self.frontend_base_url,
            "frontend_urls": self.frontend_urls,
            "aws_region": self.aws_region,
            "catalog_store": self.normalized_catalog_store,
            "ddb_table_name": self.ddb_table_name,
            "ddb_endpoint_url": self.ddb_endpoint_url,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    s = Settings()
    s.require_in_production()
    return s


settings = get_settings()
