"""Application settings and configuration."""

import sys

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_INSECURE_JWT_DEFAULTS = {"change-me-in-production", "secret", "super-secret-jwt-key"}


class Settings(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "spinrewards"
    env: str = "development"
    log_level: str = "INFO"
    log_format: str = "console"  # console / json
    allowed_origins: str = "http://localhost:5173"

    # Database
    database_url: str = "sqlite:///./spinrewards.db"

    # Session cookie (JWT)
    jwt_secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    session_cookie_name: str = "token"
    session_expire_days: int = 7
    cookie_secure: bool | None = None  # None = secure only in production

    # Spin rules
    daily_spin_limit: int = 10
    first_spin_bonus: int = 50
    spin_reward_values: list[int] = Field(
        default_factory=lambda: [5, 8, 10, 12, 15, 20, 25, 30, 40]
    )
    day_timezone: str = "UTC"  # Midnight of this zone starts a new spin day
    recent_spins_limit: int = 10

    # Referrals
    referral_bonus: int = 200

    # Withdrawals
    min_withdrawal_points: int = 1000
    usd_per_thousand_points: float = 0.10  # Display only, payout happens off-platform

    @property
    def secure_cookies(self) -> bool:
        if self.cookie_secure is None:
            return self.env == "production"
        return self.cookie_secure


# Global settings instance
settings = Settings()

# ── Security validation ──────────────────────────────────────────────
if settings.env == "production":
    if settings.jwt_secret_key in _INSECURE_JWT_DEFAULTS or len(settings.jwt_secret_key) < 32:
        print(
            "\n❌  FATAL: JWT_SECRET_KEY is insecure or too short (min 32 chars).\n"
            "   Set a strong random value:  openssl rand -hex 32\n",
            file=sys.stderr,
        )
        sys.exit(1)
