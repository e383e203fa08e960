"""Single-index sentiment: blend the five sub-scores into one labelled score."""

from typing import Optional

from sentiment_index.models.datatypes import (
    BEARISH,
    BULLISH,
    NEUTRAL,
    VERY_BEARISH,
    VERY_BULLISH,
    FactorSet,
    FactorSubScores,
    IndexSeries,
    SentimentScore,
)
from sentiment_index.scoring.factors import FactorScorer, clamp

FACTOR_WEIGHTS = {
    "daily": 0.30,
    "weekly": 0.25,
    "monthly": 0.20,
    "volume": 0.15,
    "volatility": 0.10,
}

SCORE_MIN = -100.0
SCORE_MAX = 100.0


def label_for(score: float) -> str:
    """Map a score to its label. Comparisons are strict on every boundary."""
    if score > 50:
        return VERY_BULLISH
    if score > 20:
        return BULLISH
    if score > -20:
        return NEUTRAL
    if score > -50:
        return BEARISH
    return VERY_BEARISH


def bounded_score(value: float) -> float:
    """Clamp to [-100, 100] and round to 2 decimals."""
    return round(clamp(value, SCORE_MIN, SCORE_MAX), 2)


NEUTRAL_SENTIMENT = SentimentScore(score=0.0, label=NEUTRAL)


class SentimentScorer:
    """Weights: daily 0.30, weekly 0.25, monthly 0.20, volume 0.15, volatility 0.10."""

    def __init__(self, factor_scorer: Optional[FactorScorer] = None) -> None:
        self.factor_scorer = factor_scorer or FactorScorer()

    def score(self, sub_scores: FactorSubScores, factors: Optional[FactorSet] = None) -> SentimentScore:
        blended = (
            sub_scores.daily * FACTOR_WEIGHTS["daily"]
            + sub_scores.weekly * FACTOR_WEIGHTS["weekly"]
            + sub_scores.monthly * FACTOR_WEIGHTS["monthly"]
            + sub_scores.volume * FACTOR_WEIGHTS["volume"]
            + sub_scores.volatility * FACTOR_WEIGHTS["volatility"]
        )
        score = bounded_score(blended)
        return SentimentScore(
            score=score,
            label=label_for(score),
            factors=factors or FactorSet(),
            sub_scores=sub_scores,
        )

    def score_series(self, series: IndexSeries, as_of_index: Optional[int] = None) -> SentimentScore:
        """Score ``series`` as of ``as_of_index`` (default: its last bar)."""
        if series.empty:
            return NEUTRAL_SENTIMENT
        if as_of_index is None:
            as_of_index = len(series) - 1
        factors = self.factor_scorer.score(series, as_of_index)
        return self.score(FactorScorer.sub_scores(factors), factors)
