"""
Application settings loaded from environment variables.

Uses pydantic-settings for type-safe configuration with .env file support.
"""

from decimal import Decimal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Global application settings."""

    # App
    APP_NAME: str = "OpenFX"
    APP_ENV: str = "development"
    DEBUG: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""  # empty = stdout only

    # FX quotes
    FX_QUOTE_TTL_SECONDS: int = 30
    FX_FEE_PERCENT: Decimal = Decimal("0.5")
    FX_MIN_FEE: Decimal = Decimal("1.50")
    FX_MAX_AMOUNT: Decimal = Decimal("1000000000000")  # per quote, in source units

    # Simulation (mock payment rail)
    PAY_FAILURE_RATE: float = 0.10
    PROCESSING_FAILURE_RATE: float = 0.05
    SIMULATION_SEED: int | None = None
    SIMULATED_LATENCY_MIN_MS: int = 0
    SIMULATED_LATENCY_MAX_MS: int = 0

    # Transaction ledger
    TXN_SENT_AFTER_SECONDS: float = 3.0
    TXN_SETTLED_AFTER_SECONDS: float = 6.0
    LEDGER_SWEEP_INTERVAL_SECONDS: float = 1.0  # 0 disables the sweeper

    # Client
    API_BASE_URL: str = "http://localhost:8000"
    POLL_INTERVAL_MS: int = 2000
    POLL_MAX_CONSECUTIVE_ERRORS: int = 3
    QUOTE_EXPIRY_CHECK_INTERVAL_MS: int = 1000

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:8000"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
