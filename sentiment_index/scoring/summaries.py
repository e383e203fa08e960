"""Headline and summary text for a day of the sentiment history.

The reconstructor treats the returned strings as opaque; this module is the
default implementation of that ``(score, change_a, change_b, change_c, date)``
contract.
"""

from typing import Sequence, Tuple

FLAT_THRESHOLD = 0.3
LEADER_THRESHOLD = 1.0


def generate_headline(score: float, change_a: float, change_b: float, change_c: float, date: str) -> str:
    """Short headline from the average percent move of the three indices."""
    avg_change = (change_a + change_b + change_c) / 3

    if abs(avg_change) < FLAT_THRESHOLD:
        return "Markets Trade Flat Amid Mixed Signals"
    if avg_change > 1.5:
        return "Major Indices Surge on Strong Market Sentiment"
    if avg_change > 0.5:
        return "Markets Advance on Positive Trading Day"
    if avg_change > 0:
        return "Markets Edge Higher in Cautious Trading"
    if avg_change > -0.5:
        return "Markets Dip Slightly in Quiet Session"
    if avg_change > -1.5:
        return "Markets Decline on Negative Sentiment"
    return "Major Indices Fall Sharply Amid Concerns"


def _strength(score: float) -> str:
    magnitude = abs(score)
    if magnitude > 50:
        return "strong"
    if magnitude > 20:
        return "moderate"
    return "mild"


def generate_daily_summary(
    score: float,
    change_a: float,
    change_b: float,
    change_c: float,
    date: str,
    names: Sequence[str] = ("S&P 500", "NASDAQ", "Dow Jones"),
) -> str:
    """Two-sentence summary crossing sentiment strength with market direction."""
    positive = score > 0
    advancing = (change_a + change_b + change_c) / 3 > 0
    strength = _strength(score)

    if positive and advancing:
        summary = {
            "strong": "Strong bullish momentum with all major indices advancing. "
                      "Market sentiment reflects significant optimism.",
            "moderate": "Positive market sentiment with gains across major indices. "
                        "Investors show cautious optimism.",
            "mild": "Mildly positive sentiment with modest gains. Market shows steady upward trend.",
        }[strength]
    elif positive:
        summary = "Mixed signals: positive sentiment despite mixed index performance. Market shows resilience."
    elif not advancing:
        summary = {
            "strong": "Strong bearish sentiment with declines across major indices. "
                      "Market shows significant concern.",
            "moderate": "Negative sentiment with losses in major indices. Investors show caution.",
            "mild": "Mildly negative sentiment with modest declines. Market shows slight weakness.",
        }[strength]
    else:
        summary = "Mixed market signals: negative sentiment despite some index gains. Uncertainty prevails."

    changes = (change_a, change_b, change_c)
    best = max(changes)
    worst = min(changes)
    if abs(best) > LEADER_THRESHOLD or abs(worst) > LEADER_THRESHOLD:
        leader = names[changes.index(best)]
        sign = "+" if best > 0 else ""
        summary += f" {leader} led with {sign}{best:.2f}% change."

    return summary.strip()


class SummaryFormatter:
    """Callable formatter bound to the display names of the tracked indices.

    Fewer than three indices are padded with flat (0.0) changes.
    """

    def __init__(self, names: Sequence[str] = ("S&P 500", "NASDAQ", "Dow Jones")) -> None:
        padded = list(names)[:3]
        while len(padded) < 3:
            padded.append("")
        self.names = tuple(padded)

    def __call__(
        self, score: float, change_a: float, change_b: float, change_c: float, date: str
    ) -> Tuple[str, str]:
        headline = generate_headline(score, change_a, change_b, change_c, date)
        summary = generate_daily_summary(score, change_a, change_b, change_c, date, names=self.names)
        return headline, summary
