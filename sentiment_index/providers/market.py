"""Index price retrieval via yfinance, with the raw Yahoo chart endpoint as a fallback."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd
import requests
import yfinance as yf

from sentiment_index.core.logger import logger
from sentiment_index.core.retry import with_retries
from sentiment_index.models.datatypes import IndexSeries
from sentiment_index.providers.base import MarketDataProvider

_CHART_URL = "https://query1.finance.yahoo.com/v8/finance/chart/{ticker}"
_CHART_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    "Accept": "application/json",
    "Accept-Language": "en-US,en;q=0.9",
    "Referer": "https://finance.yahoo.com/",
}
_OHLCV = ["Open", "High", "Low", "Close", "Volume"]


def series_from_frame(key: str, frame: pd.DataFrame) -> IndexSeries:
    """Clean a Date/Open/High/Low/Close/Volume frame into an IndexSeries.

    Rows with a missing or non-positive close and weekend rows are dropped,
    missing open/high/low fall back to the close, missing volume to 0, and
    duplicate dates keep the last row.
    """
    if frame is None or frame.empty:
        return IndexSeries(symbol=key)

    df = frame.copy()
    if "Date" not in df.columns:
        df = df.reset_index()
        first = df.columns[0]
        if first != "Date":
            df = df.rename(columns={first: "Date"})

    raw = df["Date"]
    if pd.api.types.is_datetime64_any_dtype(raw):
        # yfinance stamps index bars at exchange-local midnight; keep that calendar day
        df["Date"] = raw.dt.tz_localize(None) if raw.dt.tz is not None else raw
    else:
        df["Date"] = pd.to_datetime(raw, errors="coerce")

    for col in _OHLCV:
        if col not in df.columns:
            df[col] = float("nan")
        df[col] = pd.to_numeric(df[col], errors="coerce")

    df = df.dropna(subset=["Date", "Close"])
    df = df[df["Close"] > 0]
    df = df[df["Date"].dt.weekday < 5]
    for col in ("Open", "High", "Low"):
        df[col] = df[col].fillna(df["Close"])
    df["Volume"] = df["Volume"].fillna(0).clip(lower=0).astype("int64")
    df["Date"] = df["Date"].dt.strftime("%Y-%m-%d")
    df = df.sort_values("Date").drop_duplicates(subset="Date", keep="last")

    records = [
        {
            "date": row.Date,
            "open": float(row.Open),
            "high": float(row.High),
            "low": float(row.Low),
            "close": float(row.Close),
            "volume": int(row.Volume),
        }
        for row in df.itertuples(index=False)
    ]
    return IndexSeries.from_records(key, records)


def parse_chart_payload(payload: Dict[str, Any]) -> pd.DataFrame:
    """Turn a v8 chart JSON response into a Date/OHLCV frame (empty if unusable)."""
    result = ((payload or {}).get("chart") or {}).get("result") or []
    if not result:
        return pd.DataFrame()
    first = result[0] or {}
    timestamps: List[int] = first.get("timestamp") or []
    quotes = ((first.get("indicators") or {}).get("quote") or [{}])[0] or {}
    if not timestamps or not quotes:
        return pd.DataFrame()

    def column(name: str) -> List[Optional[float]]:
        values = quotes.get(name) or []
        return list(values) + [None] * (len(timestamps) - len(values))

    return pd.DataFrame({
        "Date": [datetime.fromtimestamp(ts, tz=timezone.utc).strftime("%Y-%m-%d") for ts in timestamps],
        "Open": column("open"),
        "High": column("high"),
        "Low": column("low"),
        "Close": column("close"),
        "Volume": column("volume"),
    })


class YFinanceProvider(MarketDataProvider):
    """Yahoo Finance daily history through the ``yfinance`` package."""

    name = "yfinance"

    def __init__(self, max_retries: int = 3, initial_delay: float = 2) -> None:
        self.max_retries = max_retries
        self.initial_delay = initial_delay

    def fetch_series(self, key: str, ticker: str, start_date: str, end_date: str) -> IndexSeries:
        logger.info(f"YFinanceProvider: fetching {ticker} ({key}) from {start_date} to {end_date}")
        download = with_retries(self.max_retries, self.initial_delay)(self._history)
        hist = download(ticker, start_date, end_date)
        if hist is None or hist.empty:
            logger.warning(f"YFinanceProvider: no bars returned for {ticker}")
            return IndexSeries(symbol=key)
        series = series_from_frame(key, hist[[c for c in _OHLCV if c in hist.columns]])
        logger.info(f"YFinanceProvider: {len(series)} trading days for {ticker}")
        return series

    def _history(self, ticker: str, start_date: str, end_date: str) -> pd.DataFrame:
        # yfinance `end` is exclusive
        end_exclusive = (pd.to_datetime(end_date) + pd.Timedelta(days=1)).strftime("%Y-%m-%d")
        return yf.Ticker(ticker).history(start=start_date, end=end_exclusive, interval="1d", auto_adjust=False)


class YahooChartProvider(MarketDataProvider):
    """Direct call to Yahoo's v8 chart endpoint with ``requests``."""

    name = "yahoo_chart"

    def __init__(self, timeout: float = 60, max_retries: int = 3, initial_delay: float = 2,
                 session: Optional[requests.Session] = None) -> None:
        self.timeout = timeout
        self.max_retries = max_retries
        self.initial_delay = initial_delay
        self.session = session or requests.Session()

    def fetch_series(self, key: str, ticker: str, start_date: str, end_date: str) -> IndexSeries:
        logger.info(f"YahooChartProvider: fetching {ticker} ({key}) from {start_date} to {end_date}")
        call = with_retries(self.max_retries, self.initial_delay, retry_on=(requests.RequestException,))(
            self._call_api
        )
        payload = call(ticker, start_date, end_date)
        series = series_from_frame(key, parse_chart_payload(payload))
        if series.empty:
            logger.warning(f"YahooChartProvider: chart response for {ticker} had no usable bars")
        return series

    def _call_api(self, ticker: str, start_date: str, end_date: str) -> Dict[str, Any]:
        start_ts = int(pd.Timestamp(start_date, tz="UTC").timestamp())
        end_ts = int((pd.Timestamp(end_date, tz="UTC") + pd.Timedelta(days=1)).timestamp())
        params = {"period1": start_ts, "period2": end_ts, "interval": "1d", "events": "history"}
        resp = self.session.get(
            _CHART_URL.format(ticker=ticker), params=params, headers=_CHART_HEADERS, timeout=self.timeout
        )
        resp.raise_for_status()
        return resp.json()


class FallbackProvider(MarketDataProvider):
    """Try each provider in order; the first non-empty series wins.

    Raises the last error only when every provider failed outright.
    """

    name = "fallback"

    def __init__(self, providers: Sequence[MarketDataProvider]) -> None:
        if not providers:
            raise ValueError("FallbackProvider needs at least one provider")
        self.providers = list(providers)

    def fetch_series(self, key: str, ticker: str, start_date: str, end_date: str) -> IndexSeries:
        last_error: Optional[Exception] = None
        failures = 0
        for provider in self.providers:
            try:
                series = provider.fetch_series(key, ticker, start_date, end_date)
            except Exception as exc:
                logger.error(f"FallbackProvider: {provider.name} failed for {ticker}: {exc}")
                last_error = exc
                failures += 1
                continue
            if not series.empty:
                return series
            logger.warning(f"FallbackProvider: {provider.name} returned nothing for {ticker}, trying next")
        if last_error is not None and failures == len(self.providers):
            raise last_error
        return IndexSeries(symbol=key)


_PROVIDERS = {
    YFinanceProvider.name: YFinanceProvider,
    YahooChartProvider.name: YahooChartProvider,
}


def build_provider(names: Sequence[str], fetch_cfg: Optional[Dict[str, Any]] = None) -> MarketDataProvider:
    """Build the configured provider chain from names like ``["yfinance", "yahoo_chart"]``."""
    fetch_cfg = fetch_cfg or {}
    max_retries = int(fetch_cfg.get("max_retries", 3))
    chain: List[MarketDataProvider] = []
    for name in names:
        if name not in _PROVIDERS:
            raise ValueError(f"Unknown provider '{name}'. Choose from {sorted(_PROVIDERS)}")
        if name == YahooChartProvider.name:
            chain.append(YahooChartProvider(
                timeout=float(fetch_cfg.get("timeout_seconds", 60)), max_retries=max_retries,
            ))
        else:
            chain.append(YFinanceProvider(max_retries=max_retries))
    return chain[0] if len(chain) == 1 else FallbackProvider(chain)
