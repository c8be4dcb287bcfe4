"""
Centralized application settings
"""
import json
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings, read from the environment and .env"""

    # API Settings
    API_TITLE: str = "YourGrocer API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Online grocery ordering marketplace"
    API_PREFIX: str = "/api"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # CORS - Can be string (comma-separated) or JSON array
    # Example: "http://localhost:5173,https://yourdomain.com" or '["http://localhost:5173"]'
    ALLOWED_ORIGINS: Optional[str] = "http://localhost:5173,http://localhost:3000"

    # Auth
    AUTH_SECRET: str = "grocery-dukan-secret-key"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Order lifecycle
    CANCELLATION_WINDOW_MINUTES: int = 10
    DELIVERY_ESTIMATE_BASE_MINUTES: int = 30
    DELIVERY_ESTIMATE_SPREAD_MINUTES: int = 15

    # Sample data
    SEED_SAMPLE_DATA: bool = True
    DEMO_VENDOR_PASSWORD: str = "vendor123"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Rate limiting (requests per minute per client)
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 300

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into list"""
        if not self.ALLOWED_ORIGINS:
            return ["http://localhost:5173"]

        # Try JSON parse first (for array format)
        try:
            origins = json.loads(self.ALLOWED_ORIGINS)
            if isinstance(origins, list):
                return origins
        except (json.JSONDecodeError, ValueError):
            pass

        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]


settings = Settings()
