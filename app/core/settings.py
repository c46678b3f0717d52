from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

class Settings(BaseSettings):
    HOST: str = "0.0.0.0"
    PORT: int = 3001
    APP_ENV: str = "development"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: str = "*"
    MAX_BODY_BYTES: int = 50 * 1024 * 1024

    SFTP_DEFAULT_PORT: int = 22
    SFTP_CONNECT_TIMEOUT_SECONDS: float = 15.0
    SFTP_TEST_RETRIES: int = 1
    SFTP_RETRY_DELAY_SECONDS: float = 1.0

    ENABLE_OTEL: bool = False
    OTEL_EXPORTER_OTLP_ENDPOINT: str = "http://localhost:4317"
    OTEL_SERVICE_NAME: str = "sftp-proxy"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

@lru_cache
def get_settings() -> Settings:
    return Settings()
