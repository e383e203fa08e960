"""Cross-index aggregation with renormalisation over whichever indices reported."""

from typing import Dict, Mapping, Optional

from sentiment_index.core.logger import logger
from sentiment_index.models.datatypes import (
    NEUTRAL,
    CompositeSentiment,
    IndexReading,
    IndexSentiment,
)
from sentiment_index.scoring.sentiment import bounded_score, label_for

DEFAULT_WEIGHTS: Dict[str, float] = {
    "sp500": 0.40,
    "nasdaq": 0.35,
    "dow": 0.25,
}


class CompositeAggregator:
    """Blend per-index SentimentScores into one CompositeSentiment.

    Args:
        weights: Nominal weight per index key, in display order. A missing
            index has its weight dropped and the rest rescaled to sum to 1;
            it is never counted as a zero score.
    """

    def __init__(self, weights: Optional[Mapping[str, float]] = None) -> None:
        self.weights = dict(weights if weights is not None else DEFAULT_WEIGHTS)
        for key, weight in self.weights.items():
            if weight <= 0:
                raise ValueError(f"Weight for '{key}' must be positive, got {weight}")

    def effective_weights(self, present: Mapping[str, object]) -> Dict[str, float]:
        """Renormalised weights for the keys of ``present`` that are tracked."""
        available = [key for key in self.weights if present.get(key) is not None]
        total = sum(self.weights[key] for key in available)
        if total <= 0:
            return {}
        return {key: self.weights[key] / total for key in available}

    def aggregate(self, readings: Mapping[str, Optional[IndexReading]]) -> CompositeSentiment:
        """Combine the available readings; an absent or None entry is a missing index."""
        weights = self.effective_weights(readings)
        if not weights:
            logger.debug("CompositeAggregator: no index available, returning neutral composite")
            return CompositeSentiment(score=0.0, label=NEUTRAL, per_index={})

        if len(weights) < len(self.weights):
            missing = [key for key in self.weights if key not in weights]
            logger.debug(f"CompositeAggregator: renormalising without {missing}")

        blended = 0.0
        per_index: Dict[str, IndexSentiment] = {}
        for key, weight in weights.items():
            reading = readings[key]
            blended += reading.sentiment.score * weight
            per_index[key] = IndexSentiment(
                score=reading.sentiment.score,
                label=reading.sentiment.label,
                current=reading.current_price,
                change=reading.sentiment.factors.daily_change,
            )

        score = bounded_score(blended)
        return CompositeSentiment(score=score, label=label_for(score), per_index=per_index)
