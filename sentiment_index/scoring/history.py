"""Causal backfill of the composite sentiment series.

For every date carried by at least one index, each index is scored from its
own bars up to and including that date. Series are never sliced; the scorers
receive the full immutable series plus a cursor, and only read backwards from
the cursor. Appending a trailing bar therefore cannot change an earlier point.

Each day reads at most the trailing 20-bar window per index, so a run is
O(days x window) rather than quadratic in history length.
"""

from typing import Callable, Dict, List, Mapping, Optional, Tuple

from sentiment_index.core.logger import logger
from sentiment_index.models.datatypes import HistoricalPoint, IndexReading, IndexSeries
from sentiment_index.scoring.composite import CompositeAggregator
from sentiment_index.scoring.factors import pct_change
from sentiment_index.scoring.sentiment import SentimentScorer
from sentiment_index.scoring.summaries import SummaryFormatter

Formatter = Callable[[float, float, float, float, str], Tuple[str, str]]


class HistoricalReconstructor:
    """Recompute the composite score at every past trading day without lookahead.

    Args:
        aggregator: Cross-index aggregator; its weight order fixes the order of
            the per-index changes handed to ``formatter``.
        scorer: Single-index scorer.
        formatter: ``(score, change_a, change_b, change_c, date) -> (headline, summary)``.
    """

    def __init__(
        self,
        aggregator: Optional[CompositeAggregator] = None,
        scorer: Optional[SentimentScorer] = None,
        formatter: Optional[Formatter] = None,
    ) -> None:
        self.aggregator = aggregator or CompositeAggregator()
        self.scorer = scorer or SentimentScorer()
        self.formatter = formatter or SummaryFormatter()

    def reconstruct(self, series_by_symbol: Mapping[str, Optional[IndexSeries]]) -> List[HistoricalPoint]:
        """Return one HistoricalPoint per date in the union of the input series."""
        keys = list(self.aggregator.weights)
        available = {
            key: series for key, series in series_by_symbol.items()
            if key in self.aggregator.weights and series is not None and not series.empty
        }
        ignored = set(series_by_symbol) - set(self.aggregator.weights)
        if ignored:
            logger.debug(f"HistoricalReconstructor: ignoring untracked series {sorted(ignored)}")

        all_dates = sorted({day for series in available.values() for day in series.dates})
        points: List[HistoricalPoint] = []
        for day in all_dates:
            points.append(self._point_for(day, keys, available))
        return points

    def _point_for(self, day: str, keys: List[str], available: Mapping[str, IndexSeries]) -> HistoricalPoint:
        readings: Dict[str, Optional[IndexReading]] = {}
        closes: Dict[str, Optional[float]] = {}
        changes: Dict[str, float] = {}

        for key in keys:
            series = available.get(key)
            pos = series.index_of(day) if series is not None else None
            if pos is None:
                readings[key] = None
                closes[key] = None
                changes[key] = 0.0
                continue
            bar = series.bars[pos]
            readings[key] = IndexReading(
                sentiment=self.scorer.score_series(series, pos),
                current_price=bar.close,
            )
            closes[key] = bar.close
            changes[key] = pct_change(bar.close, series.bars[pos - 1].close) if pos > 0 else 0.0

        composite = self.aggregator.aggregate(readings)

        ordered = [changes[key] for key in keys][:3]
        ordered += [0.0] * (3 - len(ordered))
        headline, summary = self.formatter(composite.score, ordered[0], ordered[1], ordered[2], day)

        return HistoricalPoint(
            date=day,
            closes=closes,
            score=composite.score,
            label=composite.label,
            changes=changes,
            headline=headline,
            summary=summary,
        )
