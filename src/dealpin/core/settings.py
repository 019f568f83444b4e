"""PIN security settings and configuration.

This module defines the tunable parameters of the PIN security core.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """PIN security settings loaded from environment variables.

    Every value has a production default; override via environment variables
    or a `.env` file. Tests lower `PIN_BCRYPT_ROUNDS` to keep hashing fast.
    """

    debug: bool = Field(default=False, alias="DEBUG")

    # Static PIN hashing
    bcrypt_rounds: int = Field(default=12, alias="PIN_BCRYPT_ROUNDS")
    salt_bytes: int = Field(default=16, alias="PIN_SALT_BYTES")
    pin_expiry_days: int = Field(default=90, alias="PIN_EXPIRY_DAYS")
    hash_max_workers: int = Field(default=4, alias="PIN_HASH_MAX_WORKERS")

    # Rotating PIN derivation
    rotation_interval_minutes: int = Field(
        default=30,
        alias="PIN_ROTATION_INTERVAL_MINUTES",
    )
    rotation_max_offset: int = Field(default=10, alias="PIN_ROTATION_MAX_OFFSET")

    # Secure PIN generation
    secure_pin_max_attempts: int = Field(default=100, alias="PIN_SECURE_MAX_ATTEMPTS")

    # Attempt throttling
    max_failed_per_hour: int = Field(default=5, alias="PIN_MAX_FAILED_PER_HOUR")
    max_attempts_per_day: int = Field(default=10, alias="PIN_MAX_ATTEMPTS_PER_DAY")
    lockout_hours: int = Field(default=1, alias="PIN_LOCKOUT_HOURS")

    # Attempt log storage (unset keeps history in-process)
    redis_url: str | None = Field(default=None, alias="PIN_REDIS_URL")
    attempt_ttl_seconds: int = Field(default=86_400 * 2, alias="PIN_ATTEMPT_TTL_SECONDS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def rotation_window_ms(self) -> int:
        """Return the rotation window length in milliseconds."""
        return self.rotation_interval_minutes * 60 * 1000


settings = Settings()
