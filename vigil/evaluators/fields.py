"""Field resolution from market and news data.

Each ``ConditionField`` maps to one extractor. Extractors return ``None`` when
the value cannot be derived for this observation; callers must treat that as
"unavailable", never as zero.
"""

from typing import Callable, Dict, Optional

from vigil.schemas import ConditionField, MarketObservation, NewsContext
from vigil.services.sentiment import SentimentAnalyzer

FieldExtractor = Callable[[MarketObservation, Optional[NewsContext]], Optional[float]]


def price_change_percent(observation: MarketObservation) -> Optional[float]:
    """Percent change vs previous close, ``None`` when previous close is zero."""
    if observation.previous_close == 0:
        return None
    return (observation.price - observation.previous_close) / observation.previous_close * 100


def _volume_ratio(observation: MarketObservation, news: Optional[NewsContext]) -> Optional[float]:
    if not observation.average_volume:
        return None
    return observation.volume / observation.average_volume


def news_sentiment(news: Optional[NewsContext]) -> Optional[float]:
    """Averaged sentiment, computed from the articles if not supplied."""
    if news is None:
        return None
    if news.average_sentiment is not None:
        return news.average_sentiment
    if news.articles:
        return SentimentAnalyzer().calculate_sentiment(news.articles)
    return None


FIELD_EXTRACTORS: Dict[ConditionField, FieldExtractor] = {
    ConditionField.PRICE: lambda obs, news: obs.price,
    ConditionField.PRICE_CHANGE: lambda obs, news: price_change_percent(obs),
    ConditionField.VOLUME: lambda obs, news: obs.volume,
    ConditionField.VOLUME_RATIO: _volume_ratio,
    ConditionField.PE_RATIO: lambda obs, news: obs.pe_ratio,
    ConditionField.RSI: lambda obs, news: obs.rsi,
    ConditionField.MOVING_AVG_50: lambda obs, news: obs.moving_avg_50,
    ConditionField.MOVING_AVG_200: lambda obs, news: obs.moving_avg_200,
    ConditionField.NEWS_SENTIMENT: lambda obs, news: news_sentiment(news),
    ConditionField.MARKET_CAP: lambda obs, news: obs.market_cap,
}


def get_field_value(
    field: ConditionField,
    observation: MarketObservation,
    news: Optional[NewsContext] = None,
) -> Optional[float]:
    """Resolve ``field``; ``None`` when unavailable."""
    return FIELD_EXTRACTORS[field](observation, news)
