"""Metrics collection for the ranking module."""

from dataclasses import dataclass, field
from typing import ClassVar


@dataclass
class RankingMetrics:
    """Metrics for ranking operations.

    Attributes:
        articles_in: Number of articles submitted for ranking.
        results_scored: Number of successful results.
        results_failed: Number of error results.
        errors_by_type: Error result count per error type.
        windows_processed: Concurrent windows processed.
        sequential_fallbacks: Windows re-run sequentially after a failure.
        llm_durations_ms: Duration of each LLM scoring call.
    """

    articles_in: int = 0
    results_scored: int = 0
    results_failed: int = 0
    errors_by_type: dict[str, int] = field(default_factory=dict)
    windows_processed: int = 0
    sequential_fallbacks: int = 0
    llm_durations_ms: list[float] = field(default_factory=list)

    _instance: ClassVar["RankingMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "RankingMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_articles_in(self, count: int) -> None:
        """Record submitted article count.

        Args:
            count: Number of articles in the batch.
        """
        self.articles_in += count

    def record_scored(self) -> None:
        """Record a successful result."""
        self.results_scored += 1

    def record_error(self, error_type: str) -> None:
        """Record an error result.

        Args:
            error_type: Value of the ranking error type.
        """
        self.results_failed += 1
        self.errors_by_type[error_type] = self.errors_by_type.get(error_type, 0) + 1

    def record_window(self) -> None:
        """Record a processed window."""
        self.windows_processed += 1

    def record_sequential_fallback(self) -> None:
        """Record a window that fell back to sequential scoring."""
        self.sequential_fallbacks += 1

    def record_llm_duration(self, duration_ms: float) -> None:
        """Record one LLM scoring call duration.

        Args:
            duration_ms: Duration in milliseconds.
        """
        self.llm_durations_ms.append(duration_ms)

    def get_average_llm_duration_ms(self) -> float:
        """Average LLM scoring duration, 0 when nothing was recorded."""
        if not self.llm_durations_ms:
            return 0.0
        return sum(self.llm_durations_ms) / len(self.llm_durations_ms)

    def to_dict(self) -> dict[str, object]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "articles_in": self.articles_in,
            "results_scored": self.results_scored,
            "results_failed": self.results_failed,
            "errors_by_type": self.errors_by_type,
            "windows_processed": self.windows_processed,
            "sequential_fallbacks": self.sequential_fallbacks,
            "llm_calls": len(self.llm_durations_ms),
            "avg_llm_duration_ms": round(self.get_average_llm_duration_ms(), 1),
        }
