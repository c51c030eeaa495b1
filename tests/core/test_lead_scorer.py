"""
Lead Scorer Tests
Indicator weights, bounds, threshold consistency and reasoning bands.
"""
import pytest

from lead_signals.core.lead_scorer import describe, score
from lead_signals.core.rules import Indicator, RuleTable
from lead_signals.models.scoring import HOT_LEAD_THRESHOLD


class TestExampleScenarios:

    def test_urgent_budget_ready_message(self):
        """urgency 25 + budget 20 + readiness 20."""
        result = score("I need this ASAP, my budget is $5000, ready to start now", "")

        assert result.score >= 65
        assert result.score == 65
        assert result.is_hot is True
        assert result.signals_matched == ["urgency", "budget", "readiness"]

    def test_empty_strings(self):
        result = score("", "")

        assert result.score == 0
        assert result.is_hot is False
        assert result.signals_matched == []

    def test_none_inputs(self):
        result = score(None, None)
        assert result.score == 0


class TestWeights:

    def test_each_indicator_counted_once(self):
        """Repeating a keyword does not add its weight twice."""
        result = score("urgent urgent urgent, asap, right now", "")
        assert result.score == 25

    def test_response_indicators(self):
        result = score("", "I'm available today, and this is the perfect fit for you.")
        assert result.signals_matched == ["immediate_action_offered", "strong_match_identified"]
        assert result.score == 25

    def test_user_indicators_listed_before_response_indicators(self):
        result = score("I'm ready", "That sounds like a perfect fit.")
        assert result.signals_matched == ["readiness", "strong_match_identified"]

    def test_score_capped_at_100(self):
        result = score(
            "I need this urgently, the budget is set, this week please, I'm ready, "
            "comparing alternatives, specifically this one",
            "We can schedule you immediately, it's the perfect fit."
        )
        assert result.score == 100
        assert len(result.signals_matched) == 8
        assert result.confidence == 1.0

    def test_keywords_inside_words_do_not_match(self):
        """'now' in 'know'/'snow' is not urgency."""
        assert score("I know the snow is bad", "").score == 0


class TestThreshold:

    def test_exactly_forty_is_hot(self):
        result = score("Can you come today? Soon would be great.", "")
        assert result.score == HOT_LEAD_THRESHOLD
        assert result.is_hot is True
        assert result.reasoning.startswith("Warm lead (40/100)")

    def test_below_forty_is_not_hot(self):
        result = score("What would it cost to do it soon?", "")
        assert result.score == 35
        assert result.is_hot is False
        assert result.reasoning == "Standard lead (35/100): budget, timeline"

    @pytest.mark.parametrize("user_message, ai_response", [
        ("", ""),
        ("hello", "hi there"),
        ("asap", ""),
        ("ready to decide, what's the cost, need it this week", "available today"),
        ("compare specific options, budget ready now", "perfect fit, call you now"),
    ])
    def test_bounds_and_consistency(self, user_message, ai_response):
        result = score(user_message, ai_response)
        assert 0 <= result.score <= 100
        assert result.is_hot == (result.score >= HOT_LEAD_THRESHOLD)


class TestReasoning:

    @pytest.mark.parametrize("value, label", [
        (95, "Very hot lead"),
        (80, "Very hot lead"),
        (79, "Hot lead"),
        (60, "Hot lead"),
        (40, "Warm lead"),
        (0, "Standard lead"),
    ])
    def test_bands(self, value, label):
        assert describe(value, ["urgency"]).startswith(f"{label} ({value}/100)")

    def test_no_indicators(self):
        assert describe(0, []) == "Standard lead (0/100): no buying signals"


class TestDeterminism:

    def test_repeated_calls_identical(self):
        text = "I need this ASAP, my budget is $5000, ready to start now"
        assert score(text, "ok").model_dump() == score(text, "ok").model_dump()


class TestCustomTable:

    def test_custom_weights(self):
        table = RuleTable(groups=[], indicators=[
            Indicator(name="emergency", pattern=r"\bemergency\b", weight=50, source="user"),
        ])

        result = score("This is an emergency", "", table=table)

        assert result.score == 50
        assert result.is_hot is True
        assert result.signals_matched == ["emergency"]
