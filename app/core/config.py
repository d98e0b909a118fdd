from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    PROJECT_NAME: str = "Tavola Reservations API"
    API_V1_STR: str = "/api/v1"
    SECRET_KEY: str = "changeme"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 8

    # Required to create staff accounts via POST /auth/register
    ADMIN_SECRET_KEY: str = "change-this-admin-secret"

    BACKEND_CORS_ORIGINS: List[str] = ["*"]

    # Database
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "12345"
    POSTGRES_DB: str = "tavola_db"
    POSTGRES_PORT: int = 5432
    DATABASE_URL: str = ""

    # Digital queue
    QUEUE_CODE_MAX_ATTEMPTS: int = 10
    QUEUE_MINUTES_PER_PARTY: int = 10   # fixed heuristic for the wait estimate
    QUEUE_AUTO_EXPIRE_ENABLED: bool = True
    QUEUE_AUTO_EXPIRE_INTERVAL_SECONDS: int = 300

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    def assemble_db_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

settings = Settings()
settings.DATABASE_URL = settings.assemble_db_url()
