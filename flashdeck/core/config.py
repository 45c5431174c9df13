from typing import Optional
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    host: str = Field(default="localhost", alias="POSTGRES_HOST")
    port: int = Field(default=5432, alias="POSTGRES_DB_PORT")
    db_name: str = Field(default="flashdeck", alias="POSTGRES_DB_NAME")
    user: str = Field(default="flashdeck", alias="POSTGRES_DB_USER")
    password: str = Field(default="flashdeck", alias="POSTGRES_DB_PASSWORD")
    # Full SQLAlchemy URL; wins over the POSTGRES_* pieces when set
    url: Optional[str] = Field(default=None, alias="DATABASE_URL")
    auto_create: bool = Field(default=True, alias="DB_AUTO_CREATE")

    @computed_field
    def connection_string(self) -> str:
        if self.url:
            return self.url
        return (
            f"postgresql+asyncpg://{self.user}:{self.password}"
            f"@{self.host}:{self.port}/{self.db_name}"
        )


class StudySettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    queue_concurrency: int = Field(default=2, alias="STUDY_QUEUE_CONCURRENCY")
    session_idle_seconds: int = Field(default=1800, alias="STUDY_SESSION_IDLE_SECONDS")
    sweep_interval_seconds: int = Field(default=60, alias="STUDY_SWEEP_INTERVAL_SECONDS")


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    name: str = Field(default="flashdeck", alias="APP_NAME")
    version: str = Field(default="v1", alias="API_VERSION")
    port: int = Field(default=9000, alias="APP_PORT")
    mode: str = Field(default="prod", alias="MODE")
    jwt_secret: str = Field(default="change-me", alias="JWT_SECRET")
    token_lifetime_seconds: int = Field(default=3600, alias="JWT_TOKEN_LIFETIME_SECONDS")

    @computed_field
    def is_production(self) -> bool:
        return self.mode != "dev"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    app: AppSettings = Field(default_factory=lambda: AppSettings())
    database: DatabaseSettings = Field(default_factory=lambda: DatabaseSettings())
    study: StudySettings = Field(default_factory=lambda: StudySettings())

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")


settings = Settings()
