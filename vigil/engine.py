"""Main Orchestration Engine."""

import asyncio
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set

from loguru import logger

from vigil.config import Settings, settings
from vigil.evaluators import evaluate_anomaly, evaluate_condition_groups, evaluate_news_trigger
from vigil.evaluators.fields import news_sentiment
from vigil.filters import check_gates
from vigil.notifiers import BaseNotifier, LogNotifier
from vigil.schemas import (
    Alert,
    AlertEvaluation,
    AlertType,
    AnomalyConfig,
    EvaluationResult,
    MarketObservation,
    NewsContext,
    PriceHistoryPoint,
    TriggerEvent,
)
from vigil.services import DebounceBatcher, InMemoryTriggerHistory, SentimentAnalyzer, TriggerHistory
from vigil.services import lifecycle
from vigil.utils import ensure_aware, utc_now


class AlertEngine:
    """Evaluates alerts against per-tick observations and routes the results.

    Evaluation of individual alerts runs in worker threads; bookkeeping,
    batching and delivery stay on the event loop.
    """

    def __init__(
        self,
        history: Optional[TriggerHistory] = None,
        batcher: Optional[DebounceBatcher] = None,
        notifiers: Optional[List[BaseNotifier]] = None,
        config: Optional[Settings] = None,
    ):
        self.settings = config or settings
        self.history = history or InMemoryTriggerHistory(
            max_events=self.settings.history.max_events,
            timezone=self.settings.engine.timezone,
        )
        self.sentiment = SentimentAnalyzer(keyword_weight=self.settings.sentiment.keyword_weight)
        self.batcher = batcher or DebounceBatcher()
        self.notifiers: List[BaseNotifier] = notifiers if notifiers is not None else [LogNotifier()]

        self._deliveries: Set[asyncio.Task] = set()
        self._stats = {
            "ticks": 0,
            "evaluations": 0,
            "triggers": 0,
            "blocked": 0,
            "errors": 0,
            "deliveries": 0,
        }

    def default_anomaly_config(self) -> AnomalyConfig:
        return AnomalyConfig(**self.settings.anomaly.model_dump())

    def resolve_news(self, news: Optional[NewsContext]) -> Optional[NewsContext]:
        """Fill in average sentiment with the engine's analyzer when missing."""
        if news is None or news.average_sentiment is not None or not news.articles:
            return news
        return news.model_copy(update={"average_sentiment": self.sentiment.calculate_sentiment(news.articles)})

    # --- single alert ---

    def evaluate_alert(
        self,
        alert: Alert,
        observation: MarketObservation,
        news: Optional[NewsContext] = None,
        price_history: Optional[Sequence[PriceHistoryPoint]] = None,
        now: Optional[datetime] = None,
        triggers_today: Optional[int] = None,
    ) -> AlertEvaluation:
        """Gate and evaluate one alert; builds the trigger event on a hit.

        Does not mutate the alert. ``triggers_today`` defaults to the count
        held by the trigger history.
        """
        now = ensure_aware(now or utc_now())
        news = self.resolve_news(news)
        if triggers_today is None:
            triggers_today = self.history.count_today(alert.id, now)

        decision = check_gates(alert, now, triggers_today, self.settings.engine.timezone)
        if not decision.passed:
            return AlertEvaluation(
                alert_id=alert.id,
                ticker=alert.ticker,
                reason=decision.reason,
                blocked_by=decision.gate,
            )

        result = self._dispatch(alert, observation, news, price_history, now)
        if not result.triggered:
            return AlertEvaluation(
                alert_id=alert.id,
                ticker=alert.ticker,
                reason=result.reason,
                conditions_met=result.conditions_met,
            )

        event = TriggerEvent(
            alert_id=alert.id,
            ticker=alert.ticker,
            triggered_at=now,
            trigger_reason=result.reason,
            conditions_met=result.conditions_met,
            price_at_trigger=observation.price,
            volume_at_trigger=observation.volume,
            news_count=news.news_count if news else None,
            sentiment=news_sentiment(news),
        )
        return AlertEvaluation(
            alert_id=alert.id,
            ticker=alert.ticker,
            triggered=True,
            reason=result.reason,
            conditions_met=result.conditions_met,
            event=event,
        )

    def _dispatch(
        self,
        alert: Alert,
        observation: MarketObservation,
        news: Optional[NewsContext],
        price_history: Optional[Sequence[PriceHistoryPoint]],
        now: datetime,
    ) -> EvaluationResult:
        if alert.type in (AlertType.THRESHOLD, AlertType.MULTI_CONDITION):
            return evaluate_condition_groups(alert.condition_groups, observation, news)
        elif alert.type == AlertType.NEWS_TRIGGERED:
            return evaluate_news_trigger(news, self.settings.sentiment.negative_threshold)
        elif alert.type == AlertType.ANOMALY:
            config = alert.anomaly_config or self.default_anomaly_config()
            return evaluate_anomaly(config, observation, news, price_history, now)

        logger.warning(f"Unknown alert type for {alert.id}: {alert.type}")
        return EvaluationResult(triggered=False, reason=f"Unknown alert type: {alert.type}")

    # --- tick ---

    async def evaluate_tick(
        self,
        alerts: Iterable[Alert],
        observations: Mapping[str, MarketObservation],
        news: Optional[Mapping[str, NewsContext]] = None,
        price_history: Optional[Mapping[str, Sequence[PriceHistoryPoint]]] = None,
        now: Optional[datetime] = None,
    ) -> List[AlertEvaluation]:
        """Evaluate every alert for one tick.

        A failure in one alert is logged and reported in its
        ``AlertEvaluation.error``; it never aborts the others.
        """
        alerts = list(alerts)
        now = ensure_aware(now or utc_now())
        news = news or {}
        price_history = price_history or {}
        self._stats["ticks"] += 1

        for alert in alerts:
            lifecycle.resume_if_due(alert, now)

        semaphore = asyncio.Semaphore(self.settings.engine.max_workers)

        async def run_one(alert: Alert) -> AlertEvaluation:
            observation = observations.get(alert.ticker)
            if observation is None:
                logger.debug(f"No market data for {alert.ticker}, skipping alert {alert.id}")
                return AlertEvaluation(
                    alert_id=alert.id,
                    ticker=alert.ticker,
                    reason="No market data",
                    blocked_by="market_data",
                )

            async with semaphore:
                try:
                    return await asyncio.to_thread(
                        self.evaluate_alert,
                        alert,
                        observation,
                        news.get(alert.ticker),
                        price_history.get(alert.ticker),
                        now,
                    )
                except Exception as e:
                    logger.exception(f"Evaluation failed for alert {alert.id} ({alert.ticker})")
                    return AlertEvaluation(alert_id=alert.id, ticker=alert.ticker, error=str(e))

        results = await asyncio.gather(*(run_one(a) for a in alerts))

        for alert, evaluation in zip(alerts, results):
            self._stats["evaluations"] += 1
            if evaluation.error:
                self._stats["errors"] += 1
            elif evaluation.blocked_by:
                self._stats["blocked"] += 1
                if evaluation.blocked_by == "expiry":
                    lifecycle.expire(alert, now)
            elif evaluation.event is not None:
                self._handle_trigger(alert, evaluation.event)

        triggered = sum(1 for r in results if r.triggered)
        logger.info(f"Tick complete: {len(results)} evaluated, {triggered} triggered")
        return list(results)

    def _handle_trigger(self, alert: Alert, event: TriggerEvent) -> None:
        lifecycle.record_trigger(alert, event)
        self.history.record(event)
        self._stats["triggers"] += 1

        logger.success(f"[{alert.priority.value}] {alert.name} ({alert.ticker}): {event.trigger_reason}")

        if alert.frequency.batching_enabled:
            self.batcher.add_to_batch(
                alert.ticker,
                event,
                alert.frequency.batching_window_minutes,
                self.deliver,
            )
        else:
            task = asyncio.create_task(self.deliver(alert.ticker, [event]))
            self._deliveries.add(task)
            task.add_done_callback(self._deliveries.discard)

    # --- delivery ---

    async def deliver(self, ticker: str, events: List[TriggerEvent]) -> None:
        """Hand a batch to every notifier. Failures are logged, not retried."""
        self._stats["deliveries"] += 1
        for notifier in self.notifiers:
            try:
                template = notifier.create_template(ticker, events)
                await notifier.send(template)
            except Exception as e:
                logger.error(f"Notifier error {notifier}: {e}")

    async def shutdown(self) -> None:
        """Deliver everything still pending."""
        self.batcher.flush_all(self.deliver)
        await self.batcher.drain()
        if self._deliveries:
            await asyncio.gather(*list(self._deliveries), return_exceptions=True)
        logger.info("Alert engine stopped")

    def stats(self) -> Dict[str, Any]:
        return {
            **self._stats,
            "pending_batches": len(self.batcher),
            "history_size": len(self.history) if hasattr(self.history, "__len__") else None,
        }
