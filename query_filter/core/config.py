from typing import List

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MODEL_NAMESPACE = "app.models"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    APP_ENV: str = "local"
    APP_NAME: str = "query-filter"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = "sqlite+pysqlite:///:memory:"

    # Dotted package paths searched for collections, in priority order.
    MODEL_NAMESPACES: str = DEFAULT_MODEL_NAMESPACE
    DEFAULT_PAGE_LIMIT: int | None = None

    @property
    def model_namespaces_list(self) -> List[str]:
        return [ns.strip() for ns in self.MODEL_NAMESPACES.split(",") if ns.strip()]


class ParserConfig(BaseModel):
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_namespaces: tuple[str, ...] = (DEFAULT_MODEL_NAMESPACE,)
    default_page_limit: int | None = None

    @field_validator("model_namespaces", mode="before")
    @classmethod
    def _default_namespaces(cls, value):
        if not value:
            return (DEFAULT_MODEL_NAMESPACE,)
        if isinstance(value, str):
            value = value.split(",")
        return tuple(str(ns).strip() for ns in value if str(ns).strip()) or (DEFAULT_MODEL_NAMESPACE,)

    @classmethod
    def from_settings(cls, source: Settings) -> "ParserConfig":
        return cls(
            model_namespaces=source.model_namespaces_list,
            default_page_limit=source.DEFAULT_PAGE_LIMIT,
        )


settings = Settings()
