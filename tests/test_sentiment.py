"""Test keyword sentiment and news-triggered evaluation."""

import pytest

from vigil.evaluators import evaluate_news_trigger
from vigil.schemas import NewsContext, NewsItem
from vigil.services import SentimentAnalyzer


@pytest.fixture
def analyzer():
    return SentimentAnalyzer(keyword_weight=0.2)


def test_single_keyword_scores(analyzer):
    assert analyzer.analyze_article(NewsItem(title="Company reports loss")) == pytest.approx(-0.2)
    assert analyzer.analyze_article(NewsItem(title="Dividend announced")) == pytest.approx(0.2)


def test_average_across_articles(analyzer):
    articles = [NewsItem(title="Company reports loss"), NewsItem(title="Dividend announced")]
    assert analyzer.calculate_sentiment(articles) == pytest.approx(0.0)


def test_keywords_case_insensitive_and_include_summary(analyzer):
    article = NewsItem(title="Quarterly update", summary="Analysts warn of a DOWNGRADE")
    assert analyzer.analyze_article(article) == pytest.approx(-0.2)


def test_russian_keywords(analyzer):
    assert analyzer.analyze_article(NewsItem(title="Сбербанк объявил дивиденды")) == pytest.approx(0.2)
    assert analyzer.analyze_article(NewsItem(title="Обвал котировок")) == pytest.approx(-0.2)


def test_score_clamped_per_article(analyzer):
    article = NewsItem(title="crisis default bankruptcy loss plunge selloff lawsuit")
    assert analyzer.analyze_article(article) == -1.0


def test_no_articles_is_neutral(analyzer):
    assert analyzer.calculate_sentiment([]) == 0.0


def test_custom_keywords():
    analyzer = SentimentAnalyzer(negative_keywords=["recall"], positive_keywords=["approval"], keyword_weight=0.5)
    assert analyzer.analyze_article(NewsItem(title="Product RECALL issued")) == pytest.approx(-0.5)
    assert analyzer.analyze_article(NewsItem(title="Company reports loss")) == 0.0


def test_context_from_articles():
    news = NewsContext.from_articles("GAZP", [NewsItem(title="Sanctions widen"), NewsItem(title="Plant closes")])
    assert news.news_count == 2
    assert news.average_sentiment == pytest.approx(-0.1)


def test_news_trigger_fires_on_negative_sentiment():
    news = NewsContext(ticker="GAZP", news_count=3, average_sentiment=-0.4)
    result = evaluate_news_trigger(news)

    assert result.triggered is True
    assert result.reason == "Negative news sentiment detected: -0.40"
    assert result.conditions_met == ["3 news articles with negative sentiment"]


def test_news_trigger_threshold_is_strict():
    news = NewsContext(ticker="GAZP", news_count=1, average_sentiment=-0.3)
    assert evaluate_news_trigger(news).triggered is False
    assert evaluate_news_trigger(news, sentiment_threshold=-0.2).triggered is True


def test_news_trigger_computes_sentiment_from_articles():
    articles = [NewsItem(title="crisis and default fears, shares plunge")]
    news = NewsContext(ticker="GAZP", news_count=1, articles=articles)
    result = evaluate_news_trigger(news)
    assert result.triggered is True
    assert result.reason == "Negative news sentiment detected: -0.60"


def test_news_trigger_without_articles_never_fires():
    assert evaluate_news_trigger(None).reason == "No news data available"

    result = evaluate_news_trigger(NewsContext(ticker="GAZP", news_count=0, average_sentiment=-0.9))
    assert result.triggered is False
    assert result.reason == "No news data available"


def test_news_trigger_not_negative():
    result = evaluate_news_trigger(NewsContext(ticker="GAZP", news_count=2, average_sentiment=0.1))
    assert result.triggered is False
    assert result.reason == "No negative news sentiment"


def test_news_count_follows_articles():
    news = NewsContext(ticker="GAZP", articles=[NewsItem(title="a"), NewsItem(title="b")])
    assert news.news_count == 2

    # a larger supplied count is kept
    assert NewsContext(ticker="GAZP", news_count=5, articles=[NewsItem(title="a")]).news_count == 5


def test_news_trigger_with_articles_only():
    news = NewsContext(ticker="GAZP", articles=[NewsItem(title="crisis and default fears, shares plunge")])
    result = evaluate_news_trigger(news)

    assert result.triggered is True
    assert result.conditions_met == ["1 news articles with negative sentiment"]
