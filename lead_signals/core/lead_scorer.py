"""
Lead Scorer

Weighted buying-intent indicators over the message pair. Pure, total.
"""
from typing import List, Optional

from lead_signals.core.rules import RuleTable, get_rule_table
from lead_signals.models.scoring import HOT_LEAD_THRESHOLD, LeadScore

MAX_SCORE = 100

# (lower bound, label) checked top-down
REASONING_BANDS = (
    (80, "Very hot"),
    (60, "Hot"),
    (HOT_LEAD_THRESHOLD, "Warm"),
    (0, "Standard"),
)


def score_confidence(signals_matched: int) -> float:
    return round(min(0.5 + 0.1 * signals_matched, 1.0), 2)


def describe(score: int, signals_matched: List[str]) -> str:
    label = next(name for bound, name in REASONING_BANDS if score >= bound)
    indicators = ", ".join(signals_matched) if signals_matched else "no buying signals"
    return f"{label} lead ({score}/100): {indicators}"


def score(
    user_message: Optional[str],
    ai_response: Optional[str] = "",
    table: Optional[RuleTable] = None
) -> LeadScore:
    """
    Score buying intent on 0-100.

    Each indicator contributes its weight at most once. is_hot always uses
    the fixed HOT_LEAD_THRESHOLD; tenant overrides only apply to alerting.
    """
    if table is None:
        table = get_rule_table()
    texts = {"user": user_message or "", "response": ai_response or ""}

    total = 0
    matched: List[str] = []
    for indicator in table.indicators:
        text = texts[indicator.source]
        if text and indicator.search(text):
            total += indicator.weight
            matched.append(indicator.name)

    value = min(total, MAX_SCORE)
    return LeadScore(
        score=value,
        is_hot=value >= HOT_LEAD_THRESHOLD,
        signals_matched=matched,
        reasoning=describe(value, matched),
        confidence=score_confidence(len(matched))
    )
