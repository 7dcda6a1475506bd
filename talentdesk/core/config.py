from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    # App
    app_name: str = "TalentDesk"
    debug: bool = False

    # CORS
    cors_origins: str = "http://localhost:5173"

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # Database
    database_url: str = "sqlite:///./talentdesk.db"

    # Security
    secret_key: str = "dev-secret-key-change-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30

    # Session bootstrap: fixed user id, or a signed token whose subject is the user
    current_user_id: str = "current-user-id"
    session_token: Optional[str] = None

    # Startup
    create_tables: bool = True
    seed_defaults: bool = True

    # Where the route guard sends users it turns away
    default_route: str = "/"

    # Seconds a client should wait while the session is still loading
    loading_retry_after: int = 1

    # Logging
    log_level: str = "INFO"
    log_dir: str = "./logs"
    log_to_file: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="TALENTDESK_",
        case_sensitive=False,
        extra="ignore"  # Allow extra env vars without raising validation errors
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
