"""Configuration management with Pydantic v2"""

from functools import cache

from pydantic import ConfigDict, Field, computed_field
from pydantic_settings import BaseSettings

from ..consts import PRODUCTION_BASE_URL, STAGING_BASE_URL


class Config(BaseSettings):
    """Process-wide configuration with a computed API host.

    ``use_staging`` may be flipped at runtime; every endpoint resolved after
    the change uses the new host.
    """

    model_config = ConfigDict(
        env_prefix="EMERGENCE_", case_sensitive=False, extra="ignore"
    )

    use_staging: bool = Field(
        default=False, description="Talk to the staging host instead of production"
    )
    client_id: str = Field(default="", description="Client ID for the XApp exchange")
    client_secret: str = Field(
        default="", description="Client secret for the XApp exchange"
    )
    token_file: str = Field(
        default="~/.emergence/xapp_token.json",
        description="Path to the JSON file persisting the XApp token",
    )
    log_level: str = Field(
        default="INFO",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR)$",
        description="Logging level",
    )
    timeout_seconds: int = Field(
        default=30, gt=0, le=300, description="HTTP request timeout in seconds"
    )

    @computed_field
    @property
    def base_url(self) -> str:
        """Host for every endpoint, selected by the staging flag."""
        return STAGING_BASE_URL if self.use_staging else PRODUCTION_BASE_URL

    def __repr__(self) -> str:
        """String representation of the configuration"""
        return f"Config(base_url='{self.base_url}', log_level='{self.log_level}')"


@cache
def get_config() -> Config:
    """Get a cached Config instance."""
    return Config()
