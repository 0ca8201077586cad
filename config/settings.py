from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Contract read gateway (defaults match a local RPC bridge)
    LEDGER_URL: str = "http://localhost:8545"
    LEDGER_TIMEOUT_SECONDS: float = 10.0

    # Pricing
    CASHOUT_FEE_BPS: int = 500  # 5% early-exit fee
    ODDS_CHANGE_EPSILON_MICROS: int = 1000  # 0.001 in display units

    # Live refresh loops
    LIVE_REFRESH_ENABLED: bool = False
    ODDS_POLL_SECONDS: float = 5.0
    STAKE_POLL_SECONDS: float = 5.0

    # App
    APP_NAME: str = "Prediction Market Quotes"
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False  # Safe default for production; set DEBUG=True in .env for local dev


settings = Settings()
