from enum import Enum
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class VerificationMode(str, Enum):
    ENFORCED = "enforced"
    BYPASSED = "bypassed"  # local development only


class Settings(BaseSettings):
    stripe_secret_api_key: str = Field(min_length=1)
    stripe_webhook_secret: str | None = None
    stripe_previous_webhook_secret: str | None = None
    webhook_verification_mode: VerificationMode = VerificationMode.ENFORCED
    webhook_tolerance_seconds: int = Field(default=300, ge=0)
    max_body_bytes: int = 1_048_576  # 1 MiB
    default_price_id: str | None = Field(
        default=None, validation_alias="STRIPE_DEFAULT_PRICE_ID"
    )
    redis_url: str = "redis://localhost:6379/0"
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env", extra="ignore", populate_by_name=True
    )

    @model_validator(mode="after")
    def _require_webhook_secret(self):
        if (
            self.webhook_verification_mode is VerificationMode.ENFORCED
            and not self.stripe_webhook_secret
        ):
            raise ValueError(
                "STRIPE_WEBHOOK_SECRET is required unless "
                "WEBHOOK_VERIFICATION_MODE=bypassed"
            )
        return self

    @property
    def webhook_secrets(self) -> tuple[str, ...]:
        """Secrets accepted for webhook signatures, current one first."""
        return tuple(
            s
            for s in (self.stripe_webhook_secret, self.stripe_previous_webhook_secret)
            if s
        )

    @property
    def masked_api_key(self) -> str:
        return f"{self.stripe_secret_api_key[:8]}..."


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
