"""Service configuration, read from the environment and an optional .env file."""
from __future__ import annotations
from pathlib import Path
from urllib.parse import quote_plus
from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

MiB = 1 << 20


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_ignore_empty=True, extra="ignore", populate_by_name=True,
    )

    # Database parts; the legacy deployment exported them with a leading underscore.
    DB_USER: str = Field("", validation_alias=AliasChoices("DB_USER", "_DB_USER"))
    DB_PASS: SecretStr = Field(SecretStr(""), validation_alias=AliasChoices("DB_PASS", "_DB_PASS"))
    DB_HOST: str = Field("", validation_alias=AliasChoices("DB_HOST", "_DB_HOST"))
    DB_PORT: int = Field(3306, validation_alias=AliasChoices("DB_PORT", "_DB_PORT"))
    DB_NAME: str = Field("", validation_alias=AliasChoices("DB_NAME", "_DB_NAME"))
    DB_DRIVER: str = "mysql+pymysql"
    DATABASE_URL: str | None = None

    UPLOAD_DIR: Path = Path("uploads")
    HOST: str = "0.0.0.0"
    PORT: int = 8080
    LOG_LEVEL: str = "INFO"

    FORM_MAX_BODY_BYTES: int = 50 * MiB
    API_MAX_BODY_BYTES: int = 200 * MiB
    FORM_CONTINUE_ON_STORAGE_ERROR: bool = False

    @property
    def database_url(self) -> str | None:
        """Full SQLAlchemy URL, or None when the database is not configured."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        if not (self.DB_USER and self.DB_HOST and self.DB_NAME):
            return None
        password = quote_plus(self.DB_PASS.get_secret_value())
        return (
            f"{self.DB_DRIVER}://{quote_plus(self.DB_USER)}:{password}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )


settings = Settings()
