# backend/app/core/config.py

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_env: str = "dev"
    log_level: str = "INFO"

    database_url: str = "sqlite:///./assets.db"

    # Put this on the host as JWT_SECRET_KEY
    jwt_secret_key: str = "dev-secret-change-me"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    refresh_token_expire_minutes: int = 10080

    # comma-separated allowlist, e.g. "https://assets.example.com,http://localhost:3000"
    cors_origins: str = ""
    frontend_url: str = "http://localhost:3000"

    # unset means the warranty service is unavailable
    warranty_service_url: Optional[str] = None
    warranty_service_timeout: float = 10.0

    # unset disables warranty centre login
    warranty_centre_username: Optional[str] = None
    warranty_centre_password: Optional[str] = None

    class Config:
        env_file = ".env"
        case_sensitive = False

    def allowed_origins(self) -> List[str]:
        cors_env = (self.cors_origins or "").strip()
        if cors_env:
            return [o.strip() for o in cors_env.split(",") if o.strip()]
        return list({self.frontend_url.strip(), "http://localhost:3000"})


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
