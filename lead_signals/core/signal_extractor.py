"""
Signal Extractor

Pure interpreter over the rule table: every pattern group that matches the
message pair produces one BehaviorSignal, in table order. Never raises.
"""
import re
from typing import Any, Callable, Dict, List, Optional

from lead_signals.core.rules import RuleTable, compile_pattern, get_rule_table
from lead_signals.models.signals import BehaviorSignal, Channel, SignalKind

BASE_CONFIDENCE = 0.6
CONFIDENCE_PER_RULE = 0.1
MAX_EXCERPT_LENGTH = 200

_SENTENCE_SPLIT = re.compile(r"[.!?]+")

# (matched text, rule table, names of the group rules that matched)
AttributeExtractor = Callable[[str, RuleTable, List[str]], Dict[str, Any]]


def signal_confidence(matched_rules: int) -> float:
    """0.7 for one matching rule, +0.1 per additional rule, capped at 1.0."""
    return round(min(BASE_CONFIDENCE + CONFIDENCE_PER_RULE * matched_rules, 1.0), 2)


def relevant_excerpt(text: str, keyword: str) -> str:
    """First sentence mentioning the keyword, trimmed to MAX_EXCERPT_LENGTH; "" if none does."""
    keyword = keyword.lower()
    for sentence in _SENTENCE_SPLIT.split(text):
        if keyword in sentence.lower():
            return sentence.strip()[:MAX_EXCERPT_LENGTH]
    return ""


def quoted_price(text: str, table: RuleTable) -> Optional[str]:
    match = compile_pattern(table.quoted_price_pattern).search(text)
    return match.group(0) if match else None


def _phone_attributes(text: str, table: RuleTable, matched: List[str]) -> Dict[str, Any]:
    return {"response_excerpt": relevant_excerpt(text, table.excerpt_keyword)}


def _appointment_attributes(text: str, table: RuleTable, matched: List[str]) -> Dict[str, Any]:
    return {
        "urgency": table.bucket("appointment_urgency").first_match(text),
        "timeframe": table.bucket("appointment_timeframe").first_match(text),
    }


def _pricing_attributes(text: str, table: RuleTable, matched: List[str]) -> Dict[str, Any]:
    return {"quoted_price": quoted_price(text, table)}


def _cta_attributes(text: str, table: RuleTable, matched: List[str]) -> Dict[str, Any]:
    return {"cta_type": table.bucket("cta_type").first_match(text)}


def _advantage_attributes(text: str, table: RuleTable, matched: List[str]) -> Dict[str, Any]:
    return {"advantages": table.bucket("advantages").all_matches(text)}


def _followup_attributes(text: str, table: RuleTable, matched: List[str]) -> Dict[str, Any]:
    return {"timeframe": table.bucket("followup_timeframe").first_match(text)}


def _qualifying_attributes(text: str, table: RuleTable, matched: List[str]) -> Dict[str, Any]:
    # Distinct qualifying patterns, so it always agrees with the signal confidence
    return {"question_count": len(matched)}


ATTRIBUTE_EXTRACTORS: Dict[SignalKind, AttributeExtractor] = {
    SignalKind.PHONE_REQUESTED: _phone_attributes,
    SignalKind.APPOINTMENT_OFFERED: _appointment_attributes,
    SignalKind.PRICING_DISCUSSED: _pricing_attributes,
    SignalKind.CTA_INCLUDED: _cta_attributes,
    SignalKind.ADVANTAGES_HIGHLIGHTED: _advantage_attributes,
    SignalKind.FOLLOWUP_OFFERED: _followup_attributes,
    SignalKind.QUALIFYING_QUESTION_ASKED: _qualifying_attributes,
}


def extract(
    ai_response: Optional[str],
    user_message: Optional[str] = "",
    channel: Channel = Channel.EMAIL,
    table: Optional[RuleTable] = None
) -> List[BehaviorSignal]:
    """
    Detect behavioral signals in one (user_message, ai_response) pair.

    Args:
        ai_response: Text the AI sent to the lead (most groups match here)
        user_message: Text the lead sent
        channel: Channel the exchange happened on, copied into attributes
        table: Rule table override; defaults to the active table

    Returns:
        One signal per matching group, in table order. [] for empty input.
    """
    if table is None:
        table = get_rule_table()
    texts = {"response": ai_response or "", "user": user_message or ""}
    signals: List[BehaviorSignal] = []

    for group in table.groups:
        text = texts[group.source]
        if not text:
            continue

        matched = group.matched_rules(text)
        if not matched:
            continue

        attributes: Dict[str, Any] = {"channel": Channel(channel).value}
        extractor = ATTRIBUTE_EXTRACTORS.get(group.kind)
        if extractor:
            attributes.update(extractor(text, table, matched))

        signals.append(BehaviorSignal(
            kind=group.kind,
            confidence=signal_confidence(len(matched)),
            attributes=attributes
        ))

    return signals
