"""Data structures for the market sentiment index engine.

Every scoring type is a frozen dataclass: a score is a pure function of the
series prefix it was computed from, so nothing here is mutated after creation.
Dates are ``YYYY-MM-DD`` strings throughout, which sort chronologically.
"""

import math
from bisect import bisect_right
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from sentiment_index.core.calendar import is_trading_day

VERY_BULLISH = "Very Bullish"
BULLISH = "Bullish"
NEUTRAL = "Neutral"
BEARISH = "Bearish"
VERY_BEARISH = "Very Bearish"

LABELS = (VERY_BEARISH, BEARISH, NEUTRAL, BULLISH, VERY_BULLISH)

# Fixed fields of a history row; per-index closes share the row under their own keys
HISTORY_FIELDS = ("date", "timestamp", "sentiment", "sentimentLabel", "changes", "headline", "summary")


class MalformedSeriesError(ValueError):
    """Raised when an IndexSeries would violate ordering or price invariants."""


@dataclass(frozen=True)
class PriceBar:
    """One daily OHLCV bar."""
    date: str
    open: float
    high: float
    low: float
    close: float
    volume: int = 0


@dataclass(frozen=True)
class IndexSeries:
    """Date-ordered bars for one tracked index.

    Attributes:
        symbol: Index key used throughout the outputs (e.g. ``"sp500"``).
        bars: Bars with strictly increasing trading-day dates.

    Raises:
        MalformedSeriesError: on unsorted or duplicate dates, weekend bars,
            non-numeric or non-positive closes, or negative volume.
    """
    symbol: str
    bars: Tuple[PriceBar, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "bars", tuple(self.bars))
        prev_date: Optional[str] = None
        for pos, bar in enumerate(self.bars):
            where = f"{self.symbol}[{pos}] ({bar.date})"
            try:
                close = float(bar.close)
                volume = float(bar.volume)
            except (TypeError, ValueError) as exc:
                raise MalformedSeriesError(f"{where}: non-numeric close/volume") from exc
            if not math.isfinite(close) or close <= 0:
                raise MalformedSeriesError(f"{where}: close must be positive, got {bar.close!r}")
            if not math.isfinite(volume) or volume < 0:
                raise MalformedSeriesError(f"{where}: volume must be non-negative, got {bar.volume!r}")
            try:
                trading = is_trading_day(bar.date)
            except (TypeError, ValueError) as exc:
                raise MalformedSeriesError(f"{where}: unparseable date") from exc
            if not trading:
                raise MalformedSeriesError(f"{where}: not a trading day")
            if prev_date is not None and bar.date <= prev_date:
                raise MalformedSeriesError(
                    f"{where}: dates must be strictly increasing (previous {prev_date})"
                )
            prev_date = bar.date
        object.__setattr__(self, "_dates", [bar.date for bar in self.bars])

    @classmethod
    def from_records(cls, symbol: str, records: Iterable[Mapping[str, Any]]) -> "IndexSeries":
        """Build a series from dicts with date/open/high/low/close/volume keys."""
        bars = []
        for rec in records:
            close = rec["close"]
            bars.append(PriceBar(
                date=str(rec["date"]),
                open=rec.get("open", close),
                high=rec.get("high", close),
                low=rec.get("low", close),
                close=close,
                volume=rec.get("volume", 0),
            ))
        return cls(symbol=symbol, bars=tuple(bars))

    def __len__(self) -> int:
        return len(self.bars)

    @property
    def empty(self) -> bool:
        return not self.bars

    @property
    def dates(self) -> List[str]:
        return list(self._dates)

    @property
    def last(self) -> Optional[PriceBar]:
        return self.bars[-1] if self.bars else None

    def index_of(self, day: str) -> Optional[int]:
        """Position of the bar dated ``day``, or None."""
        pos = bisect_right(self._dates, day) - 1
        if pos >= 0 and self._dates[pos] == day:
            return pos
        return None

    def appended(self, bar: PriceBar) -> "IndexSeries":
        """Return a new series with ``bar`` added at the end."""
        return IndexSeries(symbol=self.symbol, bars=self.bars + (bar,))


@dataclass(frozen=True)
class IndexSpec:
    """A tracked index as configured: output key, provider ticker, display name, weight."""
    key: str
    ticker: str
    name: str
    weight: float

    @classmethod
    def from_config(cls, entry: Mapping[str, Any]) -> "IndexSpec":
        return cls(
            key=str(entry["key"]),
            ticker=str(entry["ticker"]),
            name=str(entry.get("name") or entry["key"]),
            weight=float(entry["weight"]),
        )


@dataclass(frozen=True)
class FactorSet:
    """Raw factor readings for one index on one day.

    Attributes:
        daily_change: % change vs the previous bar.
        weekly_trend: % change vs the bar 5 trading days earlier.
        monthly_trend: % change vs the bar 20 trading days earlier.
        volume_ratio: Current volume over the trailing 20-bar mean volume.
        volatility: Mean absolute daily % change over the trailing 20 bars.
        observations: Number of daily moves behind ``volatility``.
    """
    daily_change: float = 0.0
    weekly_trend: float = 0.0
    monthly_trend: float = 0.0
    volume_ratio: float = 1.0
    volatility: float = 0.0
    observations: int = 0

    def to_dict(self) -> Dict[str, float]:
        return {
            "dailyChange": round(self.daily_change, 2),
            "weeklyTrend": round(self.weekly_trend, 2),
            "monthlyTrend": round(self.monthly_trend, 2),
            "volumeRatio": round(self.volume_ratio, 2),
            "volatility": round(self.volatility, 2),
        }


@dataclass(frozen=True)
class FactorSubScores:
    """The five clamped contributions blended into a SentimentScore."""
    daily: float = 0.0
    weekly: float = 0.0
    monthly: float = 0.0
    volume: float = 0.0
    volatility: float = 0.0


@dataclass(frozen=True)
class SentimentScore:
    """Single-index sentiment: score in [-100, 100] and its label."""
    score: float
    label: str
    factors: FactorSet = field(default_factory=FactorSet)
    sub_scores: FactorSubScores = field(default_factory=FactorSubScores)

    def to_dict(self) -> Dict[str, Any]:
        return {"score": self.score, "label": self.label, "factors": self.factors.to_dict()}


@dataclass(frozen=True)
class IndexReading:
    """Input to the aggregator for one index: its sentiment plus display values."""
    sentiment: SentimentScore
    current_price: float


@dataclass(frozen=True)
class IndexSentiment:
    """Per-index entry of a CompositeSentiment."""
    score: float
    label: str
    current: float
    change: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "label": self.label,
            "current": self.current,
            "change": round(self.change, 2),
        }


@dataclass(frozen=True)
class CompositeSentiment:
    """Weighted blend of the available per-index scores for one day."""
    score: float
    label: str
    per_index: Dict[str, IndexSentiment] = field(default_factory=dict)

    @property
    def has_signal(self) -> bool:
        return bool(self.per_index)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "label": self.label,
            "indices": {key: entry.to_dict() for key, entry in self.per_index.items()},
        }


@dataclass(frozen=True)
class HistoricalPoint:
    """One trading day of the causal backfill."""
    date: str
    closes: Dict[str, Optional[float]]
    score: float
    label: str
    changes: Dict[str, float]
    headline: str = ""
    summary: str = ""

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "date": self.date,
            "timestamp": f"{self.date}T00:00:00Z",
        }
        out.update(self.closes)
        out.update({
            "sentiment": round(self.score, 2),
            "sentimentLabel": self.label,
            "changes": {key: round(val, 2) for key, val in self.changes.items()},
            "headline": self.headline,
            "summary": self.summary,
        })
        return out
