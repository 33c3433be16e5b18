from functools import lru_cache
from pathlib import Path
from typing import ClassVar
from pydantic import BaseModel
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

# Defaults bundled with the package; environment variables win over it.
DEFAULT_CONFIG_FILE = Path(__file__).with_name("config.yml")


class PostgresSettings(BaseModel):
    host: str = "localhost"
    port: int = 5432
    user: str = "postgres"
    password: str = "postgres"
    database: str = "postgres"
    sslmode: str = "disable"


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8080


class StartupSettings(BaseModel):
    """How long to wait for the database before giving up, in seconds."""
    timeout: float = 60.0
    interval: float = 1.0


class Settings(BaseSettings):
    project_name: str = "Authors API"
    log_level: str = "INFO"
    # Echo SQL statements (with bound values) through sqlalchemy.engine.
    log_sql: bool = False

    postgres: PostgresSettings = PostgresSettings()
    server: ServerSettings = ServerSettings()
    startup: StartupSettings = StartupSettings()

    # APP_POSTGRES_HOST -> postgres.host
    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_prefix="APP_",
        env_nested_delimiter="_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        yaml_file=DEFAULT_CONFIG_FILE,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
