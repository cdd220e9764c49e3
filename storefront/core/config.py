import json

from pydantic_settings import BaseSettings

from storefront.core.constants import DEFAULT_CACHE_TTL_SECONDS, LOW_STOCK_THRESHOLD


class Settings(BaseSettings):
    DATABASE_URL: str

    REDIS_URL: str = "redis://redis:6379/0"

    SECRET_KEY: str
    ALGORITHM: str = "HS256"

    BACKEND_CORS_ORIGINS: str = '["http://localhost:5173","http://localhost:3000"]'

    API_V1_PREFIX: str = "/api/v1"
    PROJECT_NAME: str = "Storefront Dashboard API"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Dashboard statistics
    STATISTICS_CACHE_TTL_SECONDS: int = DEFAULT_CACHE_TTL_SECONDS
    STATISTICS_DEFAULT_PERIOD: str = "month"
    STATISTICS_TIMEZONE: str = "UTC"
    STATISTICS_WEEK_START: int = 0  # 0 = Monday, 6 = Sunday
    LOW_STOCK_THRESHOLD: int = LOW_STOCK_THRESHOLD
    FORECAST_CONFIDENCE: float = 0.85

    RATE_LIMIT_ENABLED: bool = True
    DASHBOARD_RATE_LIMIT: str = "60/minute"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    @property
    def cors_origins(self) -> list[str]:
        if isinstance(self.BACKEND_CORS_ORIGINS, str):
            try:
                parsed: list[str] = json.loads(self.BACKEND_CORS_ORIGINS)
                return parsed
            except json.JSONDecodeError:
                return ["http://localhost:5173", "http://localhost:3000"]
        return self.BACKEND_CORS_ORIGINS


settings = Settings()
