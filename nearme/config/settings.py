"""Application configuration with environment-based settings."""
import os
from typing import Optional
from dotenv import load_dotenv


class Config:
    """Base configuration class following Single Responsibility Principle."""

    # Load environment variables
    load_dotenv()

    # Data provider selection ("json", "d1", "supabase")
    DATA_PROVIDER: str = os.getenv("DATA_PROVIDER", "d1")
    FIXTURE_PATH: Optional[str] = os.getenv("FIXTURE_PATH")
    PROVIDER_TIMEOUT: float = float(os.getenv("PROVIDER_TIMEOUT", "10"))
    PROVIDER_RETRY_ATTEMPTS: int = int(os.getenv("PROVIDER_RETRY_ATTEMPTS", "2"))

    # Edge database (D1) query endpoint
    D1_API_BASE_URL: Optional[str] = os.getenv("D1_API_BASE_URL")
    D1_API_KEY: Optional[str] = os.getenv("D1_API_KEY")

    # Hosted Postgres (Supabase) REST endpoint
    SUPABASE_URL: Optional[str] = os.getenv("SUPABASE_URL")
    SUPABASE_KEY: Optional[str] = os.getenv("SUPABASE_KEY")

    # Subdomain handling
    ROOT_DOMAIN: str = os.getenv("ROOT_DOMAIN", "near-me.us")
    TRUST_FORWARDED_HOST: bool = os.getenv("TRUST_FORWARDED_HOST", "false").lower() == "true"

    # Redis Configuration
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    SETTINGS_CACHE_TTL: int = int(os.getenv("SETTINGS_CACHE_TTL", "300"))  # 5 minutes default

    # Celery Configuration
    CELERY_BROKER_URL: str = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/1")
    CELERY_RESULT_BACKEND: str = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/1")
    ENGAGEMENT_ASYNC: bool = os.getenv("ENGAGEMENT_ASYNC", "true").lower() == "true"

    # Rate Limiting
    RATELIMIT_STORAGE_URL: str = os.getenv("RATELIMIT_STORAGE_URL", "redis://localhost:6379/2")
    RATELIMIT_ENABLED: bool = os.getenv("RATELIMIT_ENABLED", "true").lower() == "true"

    # Monitoring
    SENTRY_DSN: Optional[str] = os.getenv("SENTRY_DSN")
    ENABLE_METRICS: bool = os.getenv("ENABLE_METRICS", "true").lower() == "true"

    # Application
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    TESTING: bool = False
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret-key-change-in-production")

    @classmethod
    def validate(cls) -> None:
        """Validate that the configured data provider has its credentials."""
        provider = (cls.DATA_PROVIDER or "").lower()
        required_by_provider = {
            "d1": [
                ("D1_API_BASE_URL", cls.D1_API_BASE_URL),
                ("D1_API_KEY", cls.D1_API_KEY),
            ],
            "supabase": [
                ("SUPABASE_URL", cls.SUPABASE_URL),
                ("SUPABASE_KEY", cls.SUPABASE_KEY),
            ],
        }

        missing = [name for name, value in required_by_provider.get(provider, []) if not value]
        if missing:
            raise ValueError(f"Missing required environment variables: {', '.join(missing)}")


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    DATA_PROVIDER = "json"
    RATELIMIT_ENABLED = False
    ENABLE_METRICS = False
    ENGAGEMENT_ASYNC = False
    REDIS_URL = "redis://localhost:6379/15"  # Use different DB for tests


def get_config() -> type[Config]:
    """Factory method to get configuration based on environment."""
    env = os.getenv("FLASK_ENV", "development").lower()

    config_map = {
        "development": DevelopmentConfig,
        "production": ProductionConfig,
        "testing": TestingConfig,
    }

    return config_map.get(env, DevelopmentConfig)
