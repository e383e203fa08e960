"""Abstract base class for index price providers."""

from abc import ABC, abstractmethod

from sentiment_index.models.datatypes import IndexSeries


class MarketDataProvider(ABC):
    """Abstract interface for fetching daily bars for one market index."""

    name: str = "base"

    @abstractmethod
    def fetch_series(self, key: str, ticker: str, start_date: str, end_date: str) -> IndexSeries:
        """
        Fetch daily bars for an index over a date range.

        Args:
            key (str): Index key the returned series is labelled with (e.g. ``"sp500"``).
            ticker (str): Provider ticker symbol (e.g. ``"^GSPC"``).
            start_date (str): Start date in YYYY-MM-DD format, inclusive.
            end_date (str): End date in YYYY-MM-DD format, inclusive.

        Returns:
            IndexSeries: Trading-day bars in ascending date order; empty when
            the provider has nothing for the range.
        """
        pass
