from functools import lru_cache
from typing import Literal

from pydantic import AnyHttpUrl, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    confluence_base_url: AnyHttpUrl
    confluence_api_token: SecretStr

    # Restricts the catalog to read operations plus adding comments
    confluence_read_only_mode: bool = False
    confluence_request_delay_ms: int = 200

    mcp_transport: Literal["stdio", "sse", "streamable-http"] = "stdio"
    mcp_host: str = "localhost"
    mcp_port: int = 3000
    mcp_json_response: bool = False
    mcp_stateless_http: bool = False

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
