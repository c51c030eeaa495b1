"""
Signal Rule Tables

The extractor and scorer are interpreters over this data: pattern groups
per signal kind, ordered bucket tables for attribute extraction, and
weighted intent indicators. The built-in table can be replaced by a JSON
file (settings.signal_rules_path) with the same shape.
"""
import re
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from lead_signals.config import get_settings
from lead_signals.exceptions import RuleTableError
from lead_signals.models.signals import SignalKind
from lead_signals.utils.observability import logger

TextSource = Literal["response", "user"]


@lru_cache(maxsize=None)
def compile_pattern(pattern: str) -> re.Pattern:
    return re.compile(pattern, re.IGNORECASE)


class _CompiledPattern(BaseModel):
    model_config = ConfigDict(frozen=True)

    pattern: str

    @field_validator("pattern")
    @classmethod
    def must_compile(cls, value: str) -> str:
        try:
            compile_pattern(value)
        except re.error as e:
            raise ValueError(f"invalid regex {value!r}: {e}") from e
        return value

    def search(self, text: str) -> Optional[re.Match]:
        return compile_pattern(self.pattern).search(text)


class PatternRule(_CompiledPattern):
    name: str


class PatternGroup(BaseModel):
    """All rules that evidence one signal kind."""
    model_config = ConfigDict(frozen=True)

    kind: SignalKind
    source: TextSource = "response"
    rules: List[PatternRule]

    def matched_rules(self, text: str) -> List[str]:
        return [rule.name for rule in self.rules if rule.search(text)]


class Bucket(_CompiledPattern):
    label: str


class BucketTable(BaseModel):
    """Priority-ordered classification of a text into labels."""
    model_config = ConfigDict(frozen=True)

    buckets: List[Bucket]
    default: Optional[str] = None

    def first_match(self, text: str) -> Optional[str]:
        for bucket in self.buckets:
            if bucket.search(text):
                return bucket.label
        return self.default

    def all_matches(self, text: str) -> List[str]:
        return [bucket.label for bucket in self.buckets if bucket.search(text)]


class Indicator(_CompiledPattern):
    """Weighted buying-intent indicator."""
    name: str
    weight: int = Field(..., ge=0, le=100)
    source: TextSource


class RuleTable(BaseModel):
    model_config = ConfigDict(frozen=True)

    version: str = "builtin"
    groups: List[PatternGroup]
    buckets: Dict[str, BucketTable] = Field(default_factory=dict)
    indicators: List[Indicator] = Field(default_factory=list)
    quoted_price_pattern: str = r"\$\d[\d,]*(?:\.\d{2})?"
    excerpt_keyword: str = "phone"

    @field_validator("indicators")
    @classmethod
    def user_indicators_first(cls, value: List[Indicator]) -> List[Indicator]:
        # signals_matched lists user indicators before response indicators
        return [i for i in value if i.source == "user"] + [i for i in value if i.source == "response"]

    def bucket(self, name: str) -> BucketTable:
        return self.buckets.get(name, BucketTable(buckets=[]))

    @classmethod
    def from_file(cls, path: str | Path) -> "RuleTable":
        try:
            raw = Path(path).read_text(encoding="utf-8")
            return cls.model_validate_json(raw)
        except (OSError, ValidationError) as e:
            raise RuleTableError(f"Cannot load rule table from {path}: {e}") from e


def _rules(**patterns: str) -> List[PatternRule]:
    return [PatternRule(name=name, pattern=pattern) for name, pattern in patterns.items()]


def _buckets(**patterns: str) -> List[Bucket]:
    return [Bucket(label=label, pattern=pattern) for label, pattern in patterns.items()]


DEFAULT_RULE_TABLE = RuleTable(
    groups=[
        PatternGroup(kind=SignalKind.PHONE_REQUESTED, rules=_rules(
            phone_number=r"\bphone number",
            call_you=r"\bcall you\b",
            best_number=r"\bbest number to reach",
            contact_number=r"\bcontact number",
            phone_to_discuss=r"\bphone to discuss",
            number_to_call=r"\bnumber to call",
            reach_by_phone=r"\breach you by phone",
            give_me_a_call=r"\bgive me a call",
            phone_consultation=r"\bphone consultation",
        )),
        PatternGroup(kind=SignalKind.APPOINTMENT_OFFERED, rules=_rules(
            schedule_appointment=r"\bschedule\b.*\bappointment",
            book_meeting=r"\bbook\b.*\bmeeting",
            available_time=r"\bavailable\b.*\btimes?\b",
            calendar_availability=r"\bcalendar\b.*\bavailability",
            within_24_hours=r"\bwithin\b.*\b24\b.*\bhours?\b",
            tomorrow_available=r"\btomorrow\b.*\bavailable",
            today_available=r"\btoday\b.*\bavailable",
            meet_this_week=r"\bthis week\b.*\bmeet",
            consultation_time=r"\bconsultation\b.*\btime",
            schedule_demo=r"\bdemo\b.*\bschedul",
            callback_slot=r"\b(call|meet|see|visit) you (today|tomorrow|this week|next week)\b",
        )),
        PatternGroup(kind=SignalKind.PRICING_DISCUSSED, rules=_rules(
            price_terms=r"\b(price|pricing|cost|quote|estimate|budget|investment|fee)s?\b",
            charge_terms=r"\bhow much\b|\bwhat\b.*\bcharge|\brates?\b|\bpackages?\b",
        )),
        PatternGroup(kind=SignalKind.CTA_INCLUDED, rules=_rules(
            visit_or_start=r"\bclick\b.*\bhere\b|\bvisit\b.*\bwebsite\b|\bcheck out\b|\blearn more\b|\bget started\b",
            signup=r"\b(sign up|register|join|subscribe|download)\b",
            contact=r"\bcontact us\b|\breach out\b|\blet\b.*\bknow\b|\breply\b",
            reserve=r"\bbook now\b|\breserve\b|\bclaim\b|\bsecure your\b",
        )),
        PatternGroup(kind=SignalKind.ADVANTAGES_HIGHLIGHTED, rules=_rules(
            comparison=r"\bbetter than\b|\bunlike\b.*\bcompetitors?\b|\badvantages?\b|\bsuperior\b",
            differentiation=r"\bwhy choose us\b|\bwhat sets us apart\b|\bdifference\b",
            exclusivity=r"\bunique\b|\bexclusive\b|\bonly\b.*\boffer|\bspecial\b",
        )),
        PatternGroup(kind=SignalKind.EMAIL_REQUESTED, rules=_rules(
            email_address=r"\bemail\b.*\baddress\b",
            email_me=r"\bemail me\b",
            send_email=r"\bsend\b.*\bemail\b",
        )),
        PatternGroup(kind=SignalKind.FOLLOWUP_OFFERED, rules=_rules(
            follow_up=r"\bfollow[- ]?up\b",
            check_in=r"\bcheck in\b",
            circle_back=r"\bcircle back\b",
            touch_base=r"\btouch base\b",
            reach_out_again=r"\breach out again\b",
        )),
        PatternGroup(kind=SignalKind.QUALIFYING_QUESTION_ASKED, rules=_rules(
            needs=r"\bwhat\b.*\blooking for\b|\bwhat\b.*\bneed|\bwhat\b.*\bgoals?\b",
            clarify=r"\btell\b.*\bmore about\b|\bhelp\b.*\bunderstand\b|\bclarify\b",
            volume_and_timing=r"\bhow many\b|\bhow often\b|\bwhen\b.*\bneed|\btimeline\b",
            budget_range=r"\bbudget\b.*\bmind\b|\bprice range\b|\binvestment level\b",
        )),
        PatternGroup(kind=SignalKind.URGENCY_CREATED, rules=_rules(
            limited_time=r"\blimited time\b",
            act_now=r"\bact now\b",
            expires=r"\bexpires?\b",
            ending_soon=r"\bending soon\b",
            last_chance=r"\blast chance\b",
            today_only=r"\btoday only\b",
        )),
    ],
    buckets={
        "appointment_urgency": BucketTable(
            buckets=_buckets(high=r"\btoday\b|\btomorrow\b|\b24\s*-?\s*hours?\b|\basap\b|\burgent"),
            default="normal",
        ),
        "appointment_timeframe": BucketTable(
            buckets=_buckets(
                today=r"\btoday\b",
                tomorrow=r"\btomorrow\b",
                **{"24_hours": r"\b24\s*-?\s*hours?\b"},
                this_week=r"\bthis week\b",
                next_week=r"\bnext week\b",
            ),
            default="flexible",
        ),
        "cta_type": BucketTable(
            buckets=_buckets(
                booking=r"\b(book|schedul|appointment)",
                call=r"\b(call|phone)",
                contact=r"\b(email|contact)",
                website=r"\bvisit\b|\bwebsite\b|\blearn more\b",
                signup=r"\b(sign up|register|join)\b",
            ),
            default="general",
        ),
        "advantages": BucketTable(
            buckets=_buckets(
                speed=r"\bfaster\b|\bquicker\b",
                price=r"\bcheaper\b|\baffordable\b|\bsave\b|\bsavings\b",
                quality=r"\bquality\b|\bpremium\b|\bbest\b",
                experience=r"\bexperienced?\b|\byears\b|\btrusted\b",
                local=r"\blocal\b|\bnearby\b|\bcommunity\b",
            ),
        ),
        "followup_timeframe": BucketTable(
            buckets=_buckets(
                tomorrow=r"\btomorrow\b",
                few_days=r"\bfew days\b",
                next_week=r"\bnext week\b",
                couple_days=r"\bcouple\b.*\bdays\b",
            ),
            default="unspecified",
        ),
    },
    indicators=[
        Indicator(name="urgency", weight=25, source="user",
                  pattern=r"\b(urgent(ly)?|asap|immediately|right away|today|now)\b"),
        Indicator(name="budget", weight=20, source="user",
                  pattern=r"\b(budget|pay|afford|invest|spend|cost)"),
        Indicator(name="timeline", weight=15, source="user",
                  pattern=r"\b(this week|next week|this month|soon|when can)\b"),
        Indicator(name="readiness", weight=20, source="user",
                  pattern=r"\b(ready|prepared|decided|want to start|need this)\b"),
        Indicator(name="comparison", weight=10, source="user",
                  pattern=r"\b(compare|comparing|comparison|versus|vs|other options|alternatives?)\b"),
        Indicator(name="specific", weight=10, source="user",
                  pattern=r"\b(specific(ally)?|exactly|particular(ly)?|precise(ly)?)\b"),
        Indicator(name="immediate_action_offered", weight=15, source="response",
                  pattern=r"\bschedule\b.*\bimmediately\b|\bavailable\b.*\btoday\b|\bcall\b.*\bnow\b"),
        Indicator(name="strong_match_identified", weight=10, source="response",
                  pattern=r"\bperfect\b.*\bfit\b|\bexactly\b.*\bneed|\bideal\b.*\bsolution\b"),
    ],
)


@lru_cache()
def get_rule_table() -> RuleTable:
    """
    Active rule table: the JSON file from settings if configured, else the built-in one.
    Cached; call get_rule_table.cache_clear() after changing settings.
    """
    path = get_settings().signal_rules_path
    if not path:
        return DEFAULT_RULE_TABLE

    table = RuleTable.from_file(path)
    logger.info(
        f"Loaded signal rule table {table.version} from {path}",
        extra={"groups": len(table.groups), "indicators": len(table.indicators)}
    )
    return table
