"""Services for sentiment scoring, batching and trigger bookkeeping."""

from .batcher import DebounceBatcher
from .history import TriggerHistory, InMemoryTriggerHistory
from .sentiment import SentimentAnalyzer

__all__ = ["DebounceBatcher", "TriggerHistory", "InMemoryTriggerHistory", "SentimentAnalyzer"]
