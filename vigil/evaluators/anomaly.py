"""Anomaly detection: price shock, volume shock and z-score outliers.

The three signals are independent. An anomaly that coincides with recent news
is reported as explained by news and, when the config requires the absence of
news, does not trigger.
"""

from datetime import datetime, timedelta
from typing import List, Optional, Sequence, Tuple

import numpy as np
from loguru import logger

from vigil.schemas import (
    AnomalyConfig,
    AnomalyResult,
    MarketObservation,
    NewsContext,
    PriceHistoryPoint,
)
from vigil.utils import ensure_aware, utc_now

# Minimum history length for the statistical signal
MIN_HISTORY_POINTS = 20


def calculate_statistics(points: Sequence[PriceHistoryPoint]) -> Tuple[float, float]:
    """Population mean and standard deviation of historical prices."""
    if not points:
        raise ValueError("calculate_statistics requires at least one data point")

    prices = np.asarray([p.price for p in points], dtype=float)
    return float(prices.mean()), float(prices.std())


def has_recent_news(news: Optional[NewsContext], lookback_hours: float, now: datetime) -> bool:
    """Whether news exists inside the lookback window.

    Dated articles count only inside the window; an undated article always
    counts. Without articles the supplied count is trusted.
    """
    if news is None:
        return False
    if not news.articles:
        return news.news_count > 0

    cutoff = ensure_aware(now) - timedelta(hours=lookback_hours)
    return any(
        a.published_at is None or ensure_aware(a.published_at) >= cutoff
        for a in news.articles
    )


def evaluate_anomaly(
    config: AnomalyConfig,
    observation: MarketObservation,
    news: Optional[NewsContext] = None,
    history: Optional[Sequence[PriceHistoryPoint]] = None,
    now: Optional[datetime] = None,
) -> AnomalyResult:
    now = now or utc_now()
    conditions_met: List[str] = []

    # 1. Price shock
    if observation.previous_close == 0:
        price_change = 0.0
    else:
        price_change = (observation.price - observation.previous_close) / observation.previous_close * 100
    is_price_shock = abs(price_change) >= config.price_change_threshold
    if is_price_shock:
        conditions_met.append(
            f"Price change: {price_change:.2f}% (threshold: {config.price_change_threshold:g}%)"
        )

    # 2. Volume shock
    is_volume_shock = False
    if observation.average_volume:
        is_volume_shock = observation.volume >= observation.average_volume * config.volume_spike_multiplier
        if is_volume_shock:
            conditions_met.append(
                f"Volume spike: {observation.volume / observation.average_volume:.1f}x average"
            )

    # 3. Statistical outlier
    is_outlier = False
    if history is not None and len(history) >= MIN_HISTORY_POINTS:
        mean, std_dev = calculate_statistics(history)
        if std_dev > 0:
            z_score = abs(observation.price - mean) / std_dev
            is_outlier = z_score >= config.statistical_sigma
            if is_outlier:
                conditions_met.append(f"Statistical outlier: {z_score:.2f}σ from mean")
        else:
            logger.debug(f"{observation.ticker}: flat price history, z-score skipped")

    detected = is_price_shock or is_volume_shock or is_outlier

    if config.requires_no_news and has_recent_news(news, config.news_lookback_hours, now):
        return AnomalyResult(
            triggered=False,
            detected=detected,
            explained_by_news=detected,
            reason="Anomaly detected but explained by news" if detected else "No anomaly detected",
            conditions_met=conditions_met,
        )

    reason = f"Anomaly detected: {'; '.join(conditions_met)}" if detected else "No anomaly detected"
    return AnomalyResult(triggered=detected, detected=detected, reason=reason, conditions_met=conditions_met)
