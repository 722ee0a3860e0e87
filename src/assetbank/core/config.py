"""Configuration management for the assetbank upload client."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    ENV: str = "local"
    SERVICE_NAME: str = "assetbank-uploader"
    SERVICE_VERSION: str = "0.1.0"

    # Asset service API
    API_BASE_URL: str = ""  # e.g. https://portal.example.com/
    PERMANENT_TOKEN: str = ""
    REQUEST_TIMEOUT: int = 300  # seconds, applies to every request incl. chunks

    LOG_LEVEL: str = "INFO"

    @property
    def user_agent(self) -> str:
        """Client identification sent with every request."""
        return f"assetbank-python-sdk/{self.SERVICE_VERSION}"


# Singleton settings instance
settings = Settings()
