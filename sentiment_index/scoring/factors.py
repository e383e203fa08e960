"""Per-index factor extraction.

``FactorScorer.score(series, as_of_index)`` reads only ``series.bars[:as_of_index + 1]``
and never slices past the evaluation day, so the same call serves both the live
snapshot (``as_of_index = len(series) - 1``) and every day of the backfill.

Factor            raw reading                          sub-score            range
---------------   ----------------------------------   ------------------   ----------
daily change      % vs previous bar                    x 10                 [-100, 100]
weekly trend      % vs bar 5 trading days back         x 5                  [-100, 100]
monthly trend     % vs bar 20 trading days back        x 3                  [-100, 100]
volume ratio      volume / trailing 20-bar mean        (r - 1) x 100        [-50, 50]
volatility        mean |daily %| over trailing 20      50 - v x 10          [-50, 50]

Lookbacks that reach before the first bar fall back to the earliest bar, and
trailing windows shrink to whatever is available.
"""

from sentiment_index.models.datatypes import FactorSet, FactorSubScores, IndexSeries

WEEK_BARS = 5
MONTH_BARS = 20
TRAILING_WINDOW = 20


def clamp(value: float, lo: float, hi: float) -> float:
    return lo if value < lo else hi if value > hi else value


def pct_change(current: float, previous: float) -> float:
    """Percent change from ``previous`` to ``current``; 0 when previous is falsy."""
    if not previous:
        return 0.0
    return (current - previous) / previous * 100.0


class FactorScorer:
    """Computes the five factor readings and their clamped sub-scores."""

    def __init__(
        self,
        week_bars: int = WEEK_BARS,
        month_bars: int = MONTH_BARS,
        window: int = TRAILING_WINDOW,
    ) -> None:
        self.week_bars = week_bars
        self.month_bars = month_bars
        self.window = window

    def score(self, series: IndexSeries, as_of_index: int) -> FactorSet:
        """Return raw factor readings for the bar at ``as_of_index``.

        An empty series yields the neutral FactorSet (all changes 0, ratio 1).
        """
        if series.empty:
            return FactorSet()
        if not 0 <= as_of_index < len(series):
            raise IndexError(f"as_of_index {as_of_index} outside {series.symbol} (len {len(series)})")

        bars = series.bars
        latest = bars[as_of_index]
        previous = bars[as_of_index - 1] if as_of_index > 0 else latest
        week_ago = bars[max(0, as_of_index - self.week_bars)]
        month_ago = bars[max(0, as_of_index - self.month_bars)]

        start = max(0, as_of_index - self.window + 1)

        volumes = [float(bars[i].volume) for i in range(start, as_of_index + 1)]
        avg_volume = sum(volumes) / len(volumes)
        volume_ratio = float(latest.volume) / avg_volume if avg_volume > 0 else 1.0

        # each bar's move is measured against its true predecessor, which may sit
        # just outside the window; the very first bar has none
        moves = [
            abs(pct_change(bars[i].close, bars[i - 1].close))
            for i in range(max(start, 1), as_of_index + 1)
        ]
        volatility = sum(moves) / len(moves) if moves else 0.0

        return FactorSet(
            daily_change=pct_change(latest.close, previous.close),
            weekly_trend=pct_change(latest.close, week_ago.close),
            monthly_trend=pct_change(latest.close, month_ago.close),
            volume_ratio=volume_ratio,
            volatility=volatility,
            observations=len(moves),
        )

    @staticmethod
    def sub_scores(factors: FactorSet) -> FactorSubScores:
        """Scale and clamp raw readings into the five bounded sub-scores."""
        if factors.observations:
            volatility = clamp(50.0 - factors.volatility * 10.0, -50.0, 50.0)
        else:
            # no observed move yet, so no stability bonus either
            volatility = 0.0
        return FactorSubScores(
            daily=clamp(factors.daily_change * 10.0, -100.0, 100.0),
            weekly=clamp(factors.weekly_trend * 5.0, -100.0, 100.0),
            monthly=clamp(factors.monthly_trend * 3.0, -100.0, 100.0),
            volume=clamp((factors.volume_ratio - 1.0) * 100.0, -50.0, 50.0),
            volatility=volatility,
        )
