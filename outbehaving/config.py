"""Configuration management using Pydantic Settings"""

from typing import Dict, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Backend-as-a-service
    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None

    # Service
    app_name: str = "Outbehaving"
    app_env: str = "development"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 10.0

    # File storage
    avatars_bucket: str = "avatars"
    documents_bucket: str = "documents"
    storage_cache_control: str = "3600"

    # Per-user in-memory state
    state_registry_max_users: int = 10_000

    # Chat-platform webhook handshake secret
    webhook_verify_token: Optional[str] = None

    # Loyalty
    membership_tier_thresholds: Dict[str, int] = {
        "bronze": 0,
        "silver": 1000,
        "gold": 5000,
        "platinum": 20000,
    }
    points_values: Dict[str, int] = {
        "article_read": 10,
        "goal_completed": 50,
        "referral": 100,
        "day_active": 5,
    }

    default_currency: str = "GBP"


settings = Settings()
