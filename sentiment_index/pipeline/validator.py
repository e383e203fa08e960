"""Output validator — checks the snapshot and history artifacts for consistency.

Checks:
  1. Both artifacts exist and parse
  2. History dates are trading days in strictly increasing order
  3. Every score lies in [-100, 100]
  4. Every label matches the threshold function of its score
  5. Snapshot date, score and label equal the last history point

Usage:
    python -m sentiment_index.pipeline.validator data/
"""

import os
import sys
from typing import Any, Iterable, List, Tuple

from sentiment_index.core.artifacts import read_json
from sentiment_index.core.calendar import is_trading_day
from sentiment_index.scoring.sentiment import label_for


def _scored_entries(snapshot: dict, history: List[dict]) -> Iterable[Tuple[str, Any, Any]]:
    """Yield ``(where, score, label)`` for every score-bearing entry."""
    sentiment = snapshot.get("sentiment", {})
    yield "snapshot", sentiment.get("score"), sentiment.get("label")
    for key, entry in (sentiment.get("indices") or {}).items():
        yield f"snapshot.{key}", entry.get("score"), entry.get("label")
    for row in history:
        yield f"history[{row.get('date')}]", row.get("sentiment"), row.get("sentimentLabel")


def validate(
    output_dir: str,
    snapshot_name: str = "market-data.json",
    history_name: str = "historical-data.json",
) -> Tuple[bool, List[str]]:
    """Run all validation checks against the artifacts in ``output_dir``.

    Returns:
        Tuple of ``(passed: bool, messages: list[str])``.
    """
    messages: List[str] = []
    passed = True

    # ── load ──────────────────────────────────────────────────────────────────
    try:
        snapshot = read_json(os.path.join(output_dir, snapshot_name))
        history = read_json(os.path.join(output_dir, history_name))
    except FileNotFoundError as exc:
        return False, [f"FAIL  file not found: {exc.filename}"]
    except ValueError as exc:
        return False, [f"FAIL  could not parse artifact: {exc}"]

    if not isinstance(history, list) or not history:
        return False, ["FAIL  history is empty"]

    # ── check 1: date ordering ────────────────────────────────────────────────
    dates = [row.get("date") for row in history]
    unordered = [
        (prev, cur) for prev, cur in zip(dates, dates[1:])
        if not (isinstance(prev, str) and isinstance(cur, str) and prev < cur)
    ]
    non_trading = [d for d in dates if not isinstance(d, str) or not is_trading_day(d)]
    if not unordered and not non_trading:
        messages.append(f"PASS  {len(dates)} history dates strictly increasing trading days")
    else:
        messages.append(
            f"FAIL  history dates: {len(unordered)} out of order, "
            f"{len(non_trading)} non-trading: {(unordered + non_trading)[:3]}"
        )
        passed = False

    # ── check 2 + 3: score bounds and labels ──────────────────────────────────
    out_of_range = []
    mislabelled = []
    for where, score, label in _scored_entries(snapshot, history):
        try:
            value = float(score)
        except (TypeError, ValueError):
            out_of_range.append((where, score))
            continue
        if not -100.0 <= value <= 100.0:
            out_of_range.append((where, value))
        if label != label_for(value):
            mislabelled.append((where, value, label))

    if not out_of_range:
        messages.append("PASS  every score ∈ [-100, 100]")
    else:
        messages.append(f"FAIL  {len(out_of_range)} score(s) out of range: {out_of_range[:3]}")
        passed = False

    if not mislabelled:
        messages.append("PASS  every label matches its score")
    else:
        messages.append(f"FAIL  {len(mislabelled)} mislabelled score(s): {mislabelled[:3]}")
        passed = False

    # ── check 4: snapshot agrees with the last history point ──────────────────
    if snapshot.get("date") == dates[-1]:
        messages.append(f"PASS  snapshot date {snapshot.get('date')} = last history date")
    else:
        messages.append(f"FAIL  snapshot date {snapshot.get('date')} != last history date {dates[-1]}")
        passed = False

    sentiment = snapshot.get("sentiment") or {}
    last = history[-1]
    live = (sentiment.get("score"), sentiment.get("label"))
    backfilled = (last.get("sentiment"), last.get("sentimentLabel"))
    if live == backfilled:
        messages.append(f"PASS  snapshot composite {live[0]} ({live[1]}) = last history point")
    else:
        messages.append(f"FAIL  snapshot composite {live} != last history point {backfilled}")
        passed = False

    return passed, messages


def main() -> int:
    if len(sys.argv) < 2:
        print("Usage: python -m sentiment_index.pipeline.validator <output_dir>")
        return 1
    passed, messages = validate(sys.argv[1])
    for msg in messages:
        print(msg)
    if passed:
        print("\nVALIDATION PASSED ✓")
        return 0
    print("\nVALIDATION FAILED ✗")
    return 1


if __name__ == "__main__":
    sys.exit(main())
