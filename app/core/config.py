from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from pydantic import field_validator

class Settings(BaseSettings):
    APP_NAME: str = 'Financial Control API'
    APP_VERSION: str = '1.0.0'

    # Database settings
    # DATABASE_URL tiene prioridad sobre los parámetros POSTGRES_*
    DATABASE_URL: Optional[str] = None
    POSTGRES_USER: str = 'financial_user'
    POSTGRES_PASSWORD: str = 'financial_pass'
    POSTGRES_DB: str = 'financial_control'
    POSTGRES_HOST: str = 'postgres'
    POSTGRES_PORT: int = 5432

    # Currency used to format allocation ceilings
    CURRENCY_CODE: str = 'BRL'
    CURRENCY_SYMBOL: str = 'R$'

    # Pagination
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 1000

    # CORS
    CORS_ORIGINS: list = ["http://localhost:3000"]

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg2://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    model_config = SettingsConfigDict(
        extra="allow",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    @field_validator("DEBUG", mode="before")
    @classmethod
    def parse_debug(cls, v):
        if isinstance(v, str):
            return v.lower().strip('"').strip("'") in ("true", "1", "yes", "on")
        return bool(v)

settings = Settings()
