"""Configuration system using pydantic-settings with environment variable loading."""

from decimal import Decimal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class SentimentSettings(BaseSettings):
    """External sentiment classifier settings.

    An empty api_key disables the external call entirely; the scorer then
    runs on the rule-based technical score alone.
    """

    model_config = SettingsConfigDict(env_prefix="SENTIMENT_")

    api_key: SecretStr = SecretStr("")
    endpoint: str = "https://api-inference.huggingface.co/models/ProsusAI/finbert"
    timeout_seconds: float = 5.0
    external_weight: Decimal = Decimal("0.6")  # technical score gets the remainder


class IndicatorSettings(BaseSettings):
    """Indicator periods used by the forecast engine."""

    model_config = SettingsConfigDict(env_prefix="INDICATOR_")

    ema_fast: int = 9
    ema_slow: int = 21
    bollinger_period: int = 20
    bollinger_multiplier: Decimal = Decimal("2")
    fibonacci_lookback: int = 100


class ExchangeSettings(BaseSettings):
    """Public market data source (any ccxt exchange id)."""

    model_config = SettingsConfigDict(env_prefix="EXCHANGE_")

    exchange_id: str = "binance"
    default_interval: str = "1h"
    default_limit: int = 100


class ApiSettings(BaseSettings):
    """REST API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8080


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    log_format: str = "console"  # or "json"
    sentiment: SentimentSettings = SentimentSettings()
    indicators: IndicatorSettings = IndicatorSettings()
    exchange: ExchangeSettings = ExchangeSettings()
    api: ApiSettings = ApiSettings()
