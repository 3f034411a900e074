"""Keyword-based news sentiment scoring."""

from typing import Iterable, Optional, Sequence

from vigil.config import settings
from vigil.schemas import NewsItem


# Matched as lowercase substrings of "title summary"; Russian stems cover the
# MOEX news feeds, English terms the wire services.
NEGATIVE_KEYWORDS = [
    "падение", "снижение", "убыток", "кризис", "банкротство", "риск",
    "потери", "долг", "падают", "снижаются", "обвал", "дефолт", "санкции",
    "decline", "loss", "crisis", "bankruptcy", "default", "downgrade",
    "lawsuit", "plunge", "selloff", "sanction",
]

POSITIVE_KEYWORDS = [
    "рост", "прибыль", "успех", "достижение", "увеличение", "дивиденд",
    "растут", "повышение", "расширение", "инновация", "лидер", "прорыв",
    "growth", "profit", "record", "dividend", "upgrade", "beat",
    "expansion", "breakthrough", "rally",
]


class SentimentAnalyzer:
    """Score news articles in [-1, 1] by counting polarity keywords."""

    def __init__(
        self,
        negative_keywords: Optional[Iterable[str]] = None,
        positive_keywords: Optional[Iterable[str]] = None,
        keyword_weight: Optional[float] = None,
    ):
        self.negative_keywords = [k.lower() for k in (negative_keywords or NEGATIVE_KEYWORDS)]
        self.positive_keywords = [k.lower() for k in (positive_keywords or POSITIVE_KEYWORDS)]
        self.keyword_weight = keyword_weight if keyword_weight is not None else settings.sentiment.keyword_weight

    def calculate_sentiment(self, articles: Sequence[NewsItem]) -> float:
        """Average of per-article scores; 0 when there are no articles."""
        if not articles:
            return 0.0
        scores = [self.analyze_article(a) for a in articles]
        return sum(scores) / len(scores)

    def analyze_article(self, article: NewsItem) -> float:
        """Score a single article, clamped to [-1, 1]."""
        text = f"{article.title} {article.summary or ''}".lower()
        score = 0.0

        for keyword in self.negative_keywords:
            if keyword in text:
                score -= self.keyword_weight

        for keyword in self.positive_keywords:
            if keyword in text:
                score += self.keyword_weight

        return max(-1.0, min(1.0, score))
