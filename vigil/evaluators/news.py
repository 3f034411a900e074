"""News-triggered alert evaluation."""

from typing import Optional

from vigil.config import settings
from vigil.schemas import EvaluationResult, NewsContext
from .fields import news_sentiment


def evaluate_news_trigger(
    news: Optional[NewsContext],
    sentiment_threshold: Optional[float] = None,
) -> EvaluationResult:
    """Fire on negative averaged sentiment; no articles never fires."""
    threshold = settings.sentiment.negative_threshold if sentiment_threshold is None else sentiment_threshold

    if news is None or news.news_count == 0:
        return EvaluationResult(triggered=False, reason="No news data available")

    sentiment = news_sentiment(news)
    if sentiment is not None and sentiment < threshold:
        return EvaluationResult(
            triggered=True,
            reason=f"Negative news sentiment detected: {sentiment:.2f}",
            conditions_met=[f"{news.news_count} news articles with negative sentiment"],
        )

    return EvaluationResult(triggered=False, reason="No negative news sentiment")
