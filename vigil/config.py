"""Configuration settings for Vigil."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from vigil.schemas import validate_timezone

class EngineSettings(BaseSettings):
    timezone: str = Field("UTC", validation_alias="VIGIL_TIMEZONE")
    max_workers: int = Field(8, ge=1, validation_alias="VIGIL_MAX_WORKERS")

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, v: str) -> str:
        return validate_timezone(v)

class SentimentSettings(BaseSettings):
    negative_threshold: float = Field(-0.3, validation_alias="VIGIL_SENTIMENT_NEGATIVE_THRESHOLD")
    keyword_weight: float = Field(0.2, validation_alias="VIGIL_SENTIMENT_KEYWORD_WEIGHT")

class AnomalySettings(BaseSettings):
    price_change_threshold: float = Field(15.0, validation_alias="VIGIL_ANOMALY_PRICE_CHANGE_THRESHOLD")
    volume_spike_multiplier: float = Field(5.0, validation_alias="VIGIL_ANOMALY_VOLUME_SPIKE_MULTIPLIER")
    statistical_sigma: float = Field(2.0, validation_alias="VIGIL_ANOMALY_STATISTICAL_SIGMA")
    requires_no_news: bool = Field(True, validation_alias="VIGIL_ANOMALY_REQUIRES_NO_NEWS")
    news_lookback_hours: int = Field(24, validation_alias="VIGIL_ANOMALY_NEWS_LOOKBACK_HOURS")

class HistorySettings(BaseSettings):
    max_events: int = Field(1000, validation_alias="VIGIL_HISTORY_MAX_EVENTS")

class Settings(BaseSettings):
    """Global Application Settings."""
    engine: EngineSettings = EngineSettings()
    sentiment: SentimentSettings = SentimentSettings()
    anomaly: AnomalySettings = AnomalySettings()
    history: HistorySettings = HistorySettings()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore"
    )

settings = Settings()
