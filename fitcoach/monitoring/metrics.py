"""Prometheus metrics definitions and helpers"""
import logging

from prometheus_client import Counter

from fitcoach.config import ENABLE_PROMETHEUS

logger = logging.getLogger(__name__)


class ProgressionMetrics:
    """Container for progression metrics"""

    def __init__(self, enabled: bool = ENABLE_PROMETHEUS):
        self._enabled = enabled
        if not enabled:
            logger.info("Prometheus metrics disabled")
            return

        self.activity_completions_total = Counter(
            'progression_activity_completions_total',
            'Activity completions processed',
            ['outcome']
        )

        self.badges_unlocked_total = Counter(
            'progression_badges_unlocked_total',
            'Badges unlocked',
            ['badge']
        )

        self.rank_ups_total = Counter(
            'progression_rank_ups_total',
            'Rank changes caused by activity completions',
            ['rank']
        )

        self.persistence_conflicts_total = Counter(
            'progression_persistence_conflicts_total',
            'Saves rejected because the stored version changed'
        )

        logger.info("Prometheus metrics initialized")

    @property
    def enabled(self) -> bool:
        return self._enabled

    def record_completion(self, outcome: str) -> None:
        if self._enabled:
            self.activity_completions_total.labels(outcome=outcome).inc()

    def record_badge(self, badge: str) -> None:
        if self._enabled:
            self.badges_unlocked_total.labels(badge=badge).inc()

    def record_rank_up(self, rank: str) -> None:
        if self._enabled:
            self.rank_ups_total.labels(rank=rank).inc()

    def record_conflict(self) -> None:
        if self._enabled:
            self.persistence_conflicts_total.inc()


# Global metrics instance
metrics = ProgressionMetrics()
