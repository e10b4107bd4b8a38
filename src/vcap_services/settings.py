"""
Application settings using Pydantic.

Provides environment-based configuration loading with VCAP_CREDS_ prefix.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # Environment variable holding the service catalog
    catalog_env_var: str = "VCAP_SERVICES"

    # Request parameter holding bind credentials
    bind_key: str = "__bx_creds"

    # Local config keys look like <prefix>_<service>_<field>
    local_config_prefix: str = "watson"

    # Starter entries look like <prefix><service>
    starter_key_prefix: str = "service_watson_"

    # Loose-name matching
    max_suffix_tokens: int = 2

    # Logging
    log_level: str = "WARNING"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "VCAP_CREDS_"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
