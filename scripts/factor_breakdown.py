"""
Factor breakdown — fetches every configured index and prints the five raw
factors, their sub-scores and the blended score for the latest trading day,
followed by the composite.

Run with:
    PYTHONPATH=. python scripts/factor_breakdown.py [config.yaml]
"""

import logging
import sys
from datetime import datetime, timedelta

from dotenv import load_dotenv

load_dotenv()

# Show INFO logs on console for verification
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(message)s",
    datefmt="%H:%M:%S",
)

from sentiment_index.core.config import load_config
from sentiment_index.models.datatypes import IndexSpec
from sentiment_index.pipeline.engine import PipelineEngine, build_snapshot
from sentiment_index.scoring.factors import FactorScorer

DIVIDER = "=" * 70
LOOKBACK_DAYS = 60


def main():
    config = load_config(sys.argv[1] if len(sys.argv) > 1 else "config.yaml")
    engine = PipelineEngine(config=config, output_dir=config.get("output_dir", "data"))
    end = datetime.now()
    start = end - timedelta(days=LOOKBACK_DAYS)
    series_by_key = engine.fetch_all(start.strftime("%Y-%m-%d"), end.strftime("%Y-%m-%d"))

    print(f"\n{DIVIDER}")
    print(f"  Factor breakdown  |  {start:%Y-%m-%d} → {end:%Y-%m-%d}")
    print(DIVIDER)

    for spec in (IndexSpec.from_config(e) for e in config["indices"]):
        series = series_by_key.get(spec.key)
        print(f"\n{'─'*70}")
        print(f"  {spec.name}  |  {spec.ticker}  |  weight {spec.weight:.2f}")
        print(f"{'─'*70}")
        if series is None or series.empty:
            print("  (no data)")
            continue
        factors = engine.scorer.factor_scorer.score(series, len(series) - 1)
        subs = FactorScorer.sub_scores(factors)
        sentiment = engine.scorer.score(subs, factors)
        print(f"  DATE     : {series.last.date}   CLOSE {series.last.close:,.2f}")
        print(f"  DAILY    : {factors.daily_change:+7.2f}%  → {subs.daily:+7.2f}")
        print(f"  WEEKLY   : {factors.weekly_trend:+7.2f}%  → {subs.weekly:+7.2f}")
        print(f"  MONTHLY  : {factors.monthly_trend:+7.2f}%  → {subs.monthly:+7.2f}")
        print(f"  VOLUME   : {factors.volume_ratio:7.2f}x  → {subs.volume:+7.2f}")
        print(f"  VOLATIL. : {factors.volatility:7.2f}%  → {subs.volatility:+7.2f}")
        print(f"  SCORE    : {sentiment.score:+7.2f}  [{sentiment.label}]")

    snapshot = build_snapshot(series_by_key, engine.aggregator, engine.scorer)
    print(f"\n{DIVIDER}")
    print(f"  COMPOSITE  {snapshot['sentiment']['score']:+.2f}  [{snapshot['sentiment']['label']}]"
          f"  on {snapshot['date']}")
    print(DIVIDER)
    print()


if __name__ == "__main__":
    main()
