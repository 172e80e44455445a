from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    project_name: str = "Home Services API"
    api_version: str = "1.0.0"

    # Database
    mongodb_url: str = "mongodb://localhost:27017"
    database_name: str = "home_services"

    # Auth
    secret_key: str = "change_me"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # CORS
    allowed_origins: List[str] = ["*"]

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    recommendation_limit: int = 3
    # attempts for a compare-and-set status write before giving up
    transition_retries: int = 3


settings = Settings()
