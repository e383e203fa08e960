import unittest

from sentiment_index.models.datatypes import (
    CompositeSentiment,
    HistoricalPoint,
    IndexSentiment,
    IndexSeries,
    MalformedSeriesError,
    PriceBar,
)
from tests.factories import make_series


def _bar(date: str, close: float = 100.0, volume: int = 1000) -> PriceBar:
    return PriceBar(date=date, open=close, high=close, low=close, close=close, volume=volume)


class TestIndexSeries(unittest.TestCase):
    def test_accepts_ordered_trading_days(self) -> None:
        series = make_series("sp500", [100.0, 101.0, 102.0])
        self.assertEqual(len(series), 3)
        self.assertEqual(series.dates, ["2024-01-01", "2024-01-02", "2024-01-03"])
        self.assertEqual(series.last.close, 102.0)
        self.assertFalse(series.empty)

    def test_empty_series(self) -> None:
        series = IndexSeries(symbol="dow")
        self.assertTrue(series.empty)
        self.assertIsNone(series.last)

    def test_rejects_unsorted_dates(self) -> None:
        with self.assertRaises(MalformedSeriesError):
            IndexSeries("sp500", (_bar("2024-01-03"), _bar("2024-01-02")))

    def test_rejects_duplicate_dates(self) -> None:
        with self.assertRaises(MalformedSeriesError):
            IndexSeries("sp500", (_bar("2024-01-02"), _bar("2024-01-02")))

    def test_rejects_non_positive_close(self) -> None:
        with self.assertRaises(MalformedSeriesError):
            IndexSeries("sp500", (_bar("2024-01-02", close=0.0),))
        with self.assertRaises(MalformedSeriesError):
            IndexSeries("sp500", (_bar("2024-01-02", close=float("nan")),))

    def test_rejects_non_numeric_close(self) -> None:
        with self.assertRaises(MalformedSeriesError):
            IndexSeries("sp500", (_bar("2024-01-02", close="abc"),))

    def test_rejects_negative_volume(self) -> None:
        with self.assertRaises(MalformedSeriesError):
            IndexSeries("sp500", (_bar("2024-01-02", volume=-1),))

    def test_rejects_weekend_bar(self) -> None:
        with self.assertRaises(MalformedSeriesError):
            IndexSeries("sp500", (_bar("2024-01-06"),))

    def test_malformed_series_error_is_value_error(self) -> None:
        self.assertTrue(issubclass(MalformedSeriesError, ValueError))

    def test_lookup_helpers(self) -> None:
        series = make_series("sp500", [1.0, 2.0, 3.0], dates=["2024-01-02", "2024-01-04", "2024-01-08"])
        self.assertEqual(series.index_of("2024-01-04"), 1)
        self.assertIsNone(series.index_of("2024-01-05"))

    def test_appended_returns_new_series(self) -> None:
        series = make_series("sp500", [1.0, 2.0])
        longer = series.appended(_bar("2024-01-03", close=3.0))
        self.assertEqual(len(series), 2)
        self.assertEqual(len(longer), 3)
        with self.assertRaises(MalformedSeriesError):
            series.appended(_bar("2024-01-01"))

    def test_from_records_defaults_ohlc_to_close(self) -> None:
        series = IndexSeries.from_records("nasdaq", [{"date": "2024-01-02", "close": 50.0}])
        bar = series.bars[0]
        self.assertEqual((bar.open, bar.high, bar.low, bar.volume), (50.0, 50.0, 50.0, 0))


class TestSerialisation(unittest.TestCase):
    def test_composite_to_dict(self) -> None:
        composite = CompositeSentiment(
            score=25.5,
            label="Bullish",
            per_index={"sp500": IndexSentiment(score=25.5, label="Bullish", current=4700.0, change=1.23456)},
        )
        out = composite.to_dict()
        self.assertEqual(out["score"], 25.5)
        self.assertEqual(out["indices"]["sp500"]["change"], 1.23)
        self.assertTrue(composite.has_signal)
        self.assertFalse(CompositeSentiment(score=0.0, label="Neutral").has_signal)

    def test_historical_point_to_dict(self) -> None:
        point = HistoricalPoint(
            date="2024-01-02",
            closes={"sp500": 4700.0, "dow": None},
            score=12.346,
            label="Neutral",
            changes={"sp500": 0.456, "dow": 0.0},
            headline="h",
            summary="s",
        )
        out = point.to_dict()
        self.assertEqual(out["timestamp"], "2024-01-02T00:00:00Z")
        self.assertEqual(out["sp500"], 4700.0)
        self.assertIsNone(out["dow"])
        self.assertEqual(out["sentiment"], 12.35)
        self.assertEqual(out["sentimentLabel"], "Neutral")
        self.assertEqual(out["changes"], {"sp500": 0.46, "dow": 0.0})


if __name__ == "__main__":
    unittest.main()
