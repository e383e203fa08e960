"""Pipeline engine — fetches the tracked indices and produces both artifacts.

Flow:
  1. Market    — fetch every configured index concurrently (provider chain)
  2. Snapshot  — score the latest trading day, aggregate, add price changes
  3. History   — causal backfill over the union of trading days
  4. Persist   — atomically replace market-data.json and historical-data.json

A failed or empty index is logged and left out; the aggregator renormalises
over the rest. Only when every index comes back empty does the run fail, in
which case the existing artifacts are left untouched.
"""

import os
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from sentiment_index.core.artifacts import write_json_atomic
from sentiment_index.core.calendar import TradingCalendar
from sentiment_index.core.logger import logger
from sentiment_index.models.datatypes import (
    CompositeSentiment,
    HistoricalPoint,
    IndexReading,
    IndexSeries,
    IndexSpec,
)
from sentiment_index.providers.base import MarketDataProvider
from sentiment_index.providers.market import build_provider
from sentiment_index.scoring.composite import CompositeAggregator
from sentiment_index.scoring.history import HistoricalReconstructor
from sentiment_index.scoring.sentiment import SentimentScorer
from sentiment_index.scoring.summaries import SummaryFormatter


IndexQuote = Dict[str, Optional[float]]


def score_latest_day(
    series_by_key: Mapping[str, Optional[IndexSeries]],
    aggregator: CompositeAggregator,
    scorer: SentimentScorer,
) -> Tuple[Optional[str], CompositeSentiment, Dict[str, IndexQuote]]:
    """Score the latest date any index has a bar on.

    An index without a bar on that date is missing for it, exactly as in the
    historical backfill, so the snapshot equals the last history point.

    Returns:
        ``(date, composite, quotes)``; ``date`` is None when no index has data.
    """
    present = {
        key: series for key, series in series_by_key.items()
        if key in aggregator.weights and series is not None and not series.empty
    }
    day = max((series.last.date for series in present.values()), default=None)

    readings: Dict[str, Optional[IndexReading]] = {}
    quotes: Dict[str, IndexQuote] = {}
    for key in aggregator.weights:
        series = present.get(key)
        pos = series.index_of(day) if series is not None else None
        if pos is None:
            if series is not None:
                logger.warning(
                    f"score_latest_day: {key} has no bar on {day} (last {series.last.date}), left out"
                )
            readings[key] = None
            quotes[key] = {"current": None, "change": None, "changePercent": None}
            continue
        bar = series.bars[pos]
        sentiment = scorer.score_series(series, pos)
        readings[key] = IndexReading(sentiment=sentiment, current_price=bar.close)
        previous_close = series.bars[pos - 1].close if pos > 0 else bar.close
        quotes[key] = {
            "current": bar.close,
            "change": round(bar.close - previous_close, 2),
            "changePercent": round(sentiment.factors.daily_change, 2),
        }

    return day, aggregator.aggregate(readings), quotes


def snapshot_document(
    day: Optional[str],
    composite: CompositeSentiment,
    quotes: Mapping[str, IndexQuote],
    timestamp: Optional[str] = None,
) -> Dict[str, Any]:
    now = timestamp or datetime.now(timezone.utc).isoformat()
    return {
        "timestamp": now,
        "date": day or TradingCalendar().latest_trading_day(now[:10]),
        "sentiment": composite.to_dict(),
        "indices": dict(quotes),
    }


def build_snapshot(
    series_by_key: Mapping[str, Optional[IndexSeries]],
    aggregator: CompositeAggregator,
    scorer: SentimentScorer,
    timestamp: Optional[str] = None,
) -> Dict[str, Any]:
    """Score the latest trading day and assemble the snapshot document."""
    day, composite, quotes = score_latest_day(series_by_key, aggregator, scorer)
    return snapshot_document(day, composite, quotes, timestamp)


class PipelineEngine:
    """Orchestrates retrieval, scoring and persistence for one refresh.

    Args:
        config: Parsed config dict (see ``sentiment_index.core.config``).
        output_dir: Directory receiving the two JSON artifacts.
        provider: Market data provider; built from ``config["providers"]`` when omitted.
    """

    def __init__(
        self,
        config: dict,
        output_dir: str = "data",
        provider: Optional[MarketDataProvider] = None,
    ) -> None:
        self.config = config
        self.output_dir = output_dir
        self.specs: List[IndexSpec] = [IndexSpec.from_config(e) for e in config["indices"]]

        fetch_cfg = config.get("fetch", {})
        self.max_workers = int(fetch_cfg.get("max_workers", len(self.specs))) or 1
        self.provider = provider or build_provider(config.get("providers", ["yfinance"]), fetch_cfg)

        self.scorer = SentimentScorer()
        self.aggregator = CompositeAggregator({spec.key: spec.weight for spec in self.specs})
        self.reconstructor = HistoricalReconstructor(
            aggregator=self.aggregator,
            scorer=self.scorer,
            formatter=SummaryFormatter([spec.name for spec in self.specs]),
        )

    # ── public ────────────────────────────────────────────────────────────────

    def run(self) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
        """Fetch, score and persist. Returns ``(snapshot, history)`` as written."""
        start, end = self._date_range()
        logger.info(
            f"PipelineEngine: {len(self.specs)} indices from {start} to {end} "
            f"via {self.provider.name}"
        )

        series_by_key = self.fetch_all(start, end)
        day, composite, quotes = score_latest_day(series_by_key, self.aggregator, self.scorer)
        if not composite.has_signal:
            raise RuntimeError(
                "No market data was fetched. Check the network connection and provider settings."
            )

        snapshot = snapshot_document(day, composite, quotes)
        points: List[HistoricalPoint] = self.reconstructor.reconstruct(series_by_key)
        history = [point.to_dict() for point in points]
        logger.info(
            f"PipelineEngine: composite {snapshot['sentiment']['score']} "
            f"({snapshot['sentiment']['label']}) on {snapshot['date']}, "
            f"{len(history)} historical trading days"
        )

        self._write_artifacts(snapshot, history)
        if self.config.get("artifacts", {}).get("audit_csv"):
            self._write_market_data(series_by_key)
        return snapshot, history

    def fetch_all(self, start: str, end: str) -> Dict[str, Optional[IndexSeries]]:
        """Fetch all indices concurrently; a failing index maps to None."""
        results: Dict[str, Optional[IndexSeries]] = {}
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {
                spec.key: pool.submit(self.provider.fetch_series, spec.key, spec.ticker, start, end)
                for spec in self.specs
            }
            for spec in self.specs:
                try:
                    series = futures[spec.key].result()
                except Exception as exc:
                    logger.error(f"PipelineEngine: fetch failed for {spec.name} ({spec.ticker}): {exc}")
                    results[spec.key] = None
                    continue
                if series.empty:
                    logger.warning(f"PipelineEngine: no bars for {spec.name} ({spec.ticker})")
                else:
                    logger.info(f"PipelineEngine: fetched {len(series)} trading days for {spec.name}")
                results[spec.key] = series
        return results

    # ── internal ──────────────────────────────────────────────────────────────

    def _date_range(self) -> Tuple[str, str]:
        history_cfg = self.config.get("history", {})
        start = str(history_cfg.get("start") or "2022-01-03")
        end = history_cfg.get("end") or datetime.now().strftime("%Y-%m-%d")
        return start, str(end)

    def _artifact_path(self, name: str) -> str:
        defaults = {"snapshot": "market-data.json", "history": "historical-data.json"}
        filename = self.config.get("artifacts", {}).get(name) or defaults[name]
        return os.path.join(self.output_dir, filename)

    def _write_artifacts(self, snapshot: Dict[str, Any], history: Sequence[Dict[str, Any]]) -> None:
        write_json_atomic(self._artifact_path("snapshot"), snapshot)
        write_json_atomic(self._artifact_path("history"), list(history))

    def _write_market_data(self, series_by_key: Mapping[str, Optional[IndexSeries]]) -> None:
        """Persist raw bars to ``ohlcv_<key>.csv`` for audit and inspection."""
        os.makedirs(self.output_dir, exist_ok=True)
        for key, series in series_by_key.items():
            if series is None or series.empty:
                continue
            path = os.path.join(self.output_dir, f"ohlcv_{key}.csv")
            frame = pd.DataFrame([
                {"Date": b.date, "Open": b.open, "High": b.high, "Low": b.low,
                 "Close": b.close, "Volume": b.volume}
                for b in series.bars
            ])
            frame["Pct_Change"] = frame["Close"].pct_change().fillna(0.0) * 100.0
            frame.to_csv(path, index=False)
            logger.info(f"PipelineEngine: saved OHLCV for {key} → {path}")
