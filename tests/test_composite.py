import unittest
from itertools import combinations

from sentiment_index.models.datatypes import FactorSet, IndexReading, SentimentScore
from sentiment_index.scoring.composite import DEFAULT_WEIGHTS, CompositeAggregator
from sentiment_index.scoring.sentiment import label_for


def _reading(score: float, price: float = 100.0, daily_change: float = 0.0) -> IndexReading:
    sentiment = SentimentScore(
        score=score,
        label=label_for(score),
        factors=FactorSet(daily_change=daily_change),
    )
    return IndexReading(sentiment=sentiment, current_price=price)


class TestCompositeAggregator(unittest.TestCase):
    def setUp(self) -> None:
        self.aggregator = CompositeAggregator()

    def test_equal_scores_blend_to_same_score(self) -> None:
        result = self.aggregator.aggregate(
            {"sp500": _reading(50.0), "nasdaq": _reading(50.0), "dow": _reading(50.0)}
        )
        self.assertAlmostEqual(result.score, 50.0)
        self.assertEqual(result.label, "Bullish")

    def test_only_tertiary_index_present(self) -> None:
        result = self.aggregator.aggregate({"sp500": None, "nasdaq": None, "dow": _reading(80.0)})
        self.assertAlmostEqual(result.score, 80.0)
        self.assertEqual(result.label, "Very Bullish")
        self.assertEqual(list(result.per_index), ["dow"])

    def test_missing_index_is_not_a_zero_score(self) -> None:
        result = self.aggregator.aggregate({"sp500": _reading(40.0), "nasdaq": _reading(10.0)})
        # (40 * 0.40 + 10 * 0.35) / 0.75
        self.assertAlmostEqual(result.score, 26.0)
        self.assertEqual(result.label, "Bullish")

    def test_all_missing_is_neutral_and_empty(self) -> None:
        for readings in ({}, {"sp500": None, "nasdaq": None, "dow": None}):
            result = self.aggregator.aggregate(readings)
            self.assertEqual(result.score, 0.0)
            self.assertEqual(result.label, "Neutral")
            self.assertEqual(result.per_index, {})
            self.assertFalse(result.has_signal)

    def test_weighted_blend(self) -> None:
        result = self.aggregator.aggregate(
            {"sp500": _reading(60.0), "nasdaq": _reading(-20.0), "dow": _reading(10.0)}
        )
        self.assertAlmostEqual(result.score, 60 * 0.40 - 20 * 0.35 + 10 * 0.25)
        self.assertEqual(result.label, "Neutral")

    def test_effective_weights_sum_to_one_for_any_subset(self) -> None:
        keys = list(DEFAULT_WEIGHTS)
        for size in (1, 2, 3):
            for subset in combinations(keys, size):
                weights = self.aggregator.effective_weights({k: _reading(0.0) for k in subset})
                self.assertEqual(set(weights), set(subset))
                self.assertAlmostEqual(sum(weights.values()), 1.0)

    def test_per_index_display_values_carried_through(self) -> None:
        result = self.aggregator.aggregate(
            {"sp500": _reading(30.0, price=4783.83, daily_change=1.274), "dow": _reading(-25.0, price=37689.54)}
        )
        entry = result.per_index["sp500"]
        self.assertEqual(entry.current, 4783.83)
        self.assertAlmostEqual(entry.change, 1.274)
        self.assertEqual(entry.score, 30.0)
        self.assertEqual(entry.label, "Bullish")
        self.assertEqual(result.per_index["dow"].label, "Bearish")
        self.assertNotIn("nasdaq", result.per_index)

    def test_untracked_keys_are_ignored(self) -> None:
        result = self.aggregator.aggregate({"ftse": _reading(90.0), "dow": _reading(10.0)})
        self.assertAlmostEqual(result.score, 10.0)
        self.assertNotIn("ftse", result.per_index)

    def test_custom_weights(self) -> None:
        aggregator = CompositeAggregator({"a": 3.0, "b": 1.0})
        result = aggregator.aggregate({"a": _reading(40.0), "b": _reading(0.0)})
        self.assertAlmostEqual(result.score, 30.0)

    def test_rejects_non_positive_weight(self) -> None:
        with self.assertRaises(ValueError):
            CompositeAggregator({"a": 0.0})

    def test_score_bounded_and_labelled(self) -> None:
        result = self.aggregator.aggregate(
            {"sp500": _reading(100.0), "nasdaq": _reading(100.0), "dow": _reading(100.0)}
        )
        self.assertLessEqual(result.score, 100.0)
        self.assertEqual(result.label, label_for(result.score))


if __name__ == "__main__":
    unittest.main()
