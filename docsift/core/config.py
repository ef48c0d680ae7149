"""
Pydantic Settings — centralized configuration loaded from environment variables.

Every field can be overridden with a ``DOCSIFT_``-prefixed variable,
e.g. ``DOCSIFT_MAX_WORKERS=8``.
"""

from pydantic import Field
from pydantic_settings import BaseSettings

from docsift.core.constants import RecoveryStrategy


class Settings(BaseSettings):
    # ── Pipeline ──────────────────────────────
    MAX_WORKERS: int = Field(default=4, ge=1)
    SHUTDOWN_TIMEOUT_SECONDS: float = Field(default=60.0, ge=0)
    RECOVERY_STRATEGY: RecoveryStrategy = RecoveryStrategy.SKIP_AND_CONTINUE

    # ── Documents ─────────────────────────────
    MAX_DOCUMENT_SIZE_MB: int = Field(default=100, ge=1)

    # ── Logging ───────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # ── Application ───────────────────────────
    APP_ENV: str = "development"

    model_config = {"env_file": ".env", "env_prefix": "DOCSIFT_", "extra": "ignore"}


settings = Settings()
