from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

class Settings(BaseSettings):
    # App
    APP_NAME: str = "API Wrapper MCP"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # Catalog
    CATALOG_PATH: str = "config/tools.yaml"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # SSE transport
    SSE_QUEUE_SIZE: int = 10
    SSE_KEEPALIVE_SECONDS: float = 30.0
    MESSAGES_PATH: str = "/messages"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

@lru_cache()
def get_settings() -> Settings:
    return Settings()
