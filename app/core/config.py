from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    DATABASE_URL: str
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    # Bearer tokens issued by the auth service
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str = "authenticated"

    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Currency
    BASE_CURRENCY: str = "VND"
    EXCHANGE_RATE_API_URL: str = "https://api.exchangerate-api.com/v4/latest/VND"
    EXCHANGE_RATE_CACHE_TTL_SECONDS: int = 24 * 60 * 60
    EXCHANGE_RATE_TIMEOUT_SECONDS: float = 10.0

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
