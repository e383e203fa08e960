import datetime as dt
import unittest

from sentiment_index.core.calendar import TradingCalendar, is_trading_day, trading_days


class TestTradingCalendar(unittest.TestCase):
    def test_weekdays_are_trading_days(self) -> None:
        self.assertTrue(is_trading_day("2024-01-05"))   # Friday
        self.assertFalse(is_trading_day("2024-01-06"))  # Saturday
        self.assertFalse(is_trading_day(dt.date(2024, 1, 7)))
        self.assertTrue(is_trading_day(dt.datetime(2024, 1, 8, 15, 30)))

    def test_holidays_are_not_excluded(self) -> None:
        self.assertTrue(is_trading_day("2024-12-25"))  # Wednesday

    def test_trading_days_skips_weekend(self) -> None:
        self.assertEqual(
            trading_days("2024-01-05", "2024-01-09"),
            ["2024-01-05", "2024-01-08", "2024-01-09"],
        )
        self.assertEqual(trading_days("2024-01-06", "2024-01-07"), [])

    def test_navigation_helpers(self) -> None:
        cal = TradingCalendar()
        self.assertEqual(cal.previous_trading_day("2024-01-08"), "2024-01-05")
        self.assertEqual(cal.previous_trading_day("2024-01-10"), "2024-01-09")
        self.assertEqual(cal.latest_trading_day("2024-01-06"), "2024-01-05")
        self.assertEqual(cal.latest_trading_day("2024-01-09"), "2024-01-09")


if __name__ == "__main__":
    unittest.main()
