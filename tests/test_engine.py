"""
Test Response Engine Module
===========================

Unit tests for first-match rule selection, template choice and
placeholder substitution.
"""

import logging
import random
import pytest
from pathlib import Path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.exceptions import PatternCompileFailure
from rules import engine as engine_module
from rules.engine import ResponseEngine, generate, match_rule
from rules.patterns import TextPattern
from rules.table import Rule, RuleTable
from rules.defaults import CLASSIC_TABLE, KEYWORD_TABLE


FALLBACK = "Please tell me more about that."


class FixedRandom:
    """Random source that returns a fixed sequence of indexes."""

    def __init__(self, *indexes):
        self.indexes = list(indexes) or [0]
        self.calls = 0

    def randrange(self, stop):
        value = self.indexes[self.calls % len(self.indexes)]
        self.calls += 1
        return value


class ExplodingPattern(TextPattern):
    """Pattern whose evaluation always fails."""

    source = "<exploding>"

    def match(self, text):
        raise RuntimeError("matcher crashed")


def need_table():
    return RuleTable.of(
        Rule.from_regex(r"^\s*I need ([^.!?]*)", ["Why do you need $1?"], name="need"),
        Rule.from_regex(r"^.*$", ["Go on."], name="catch-all"),
    )


class TestGenerate:
    """Tests for generate()."""

    @pytest.mark.parametrize("text", [
        "",
        "   ",
        "I need help",
        "?!?!",
        "Ünïcödé ☃ text",
        "x" * 5000,
        "line one\nline two",
    ])
    def test_always_returns_text(self, text):
        """Test that every input gets a non-empty reply."""
        for table in (CLASSIC_TABLE, KEYWORD_TABLE, RuleTable()):
            reply = generate(text, table, random.Random(3))
            assert isinstance(reply, str)
            assert reply.strip()

    def test_none_input(self):
        """Test that None is treated as empty text."""
        assert generate(None, need_table(), FixedRandom()) == "Go on."

    def test_order_precedence(self):
        """Test that the earlier rule wins over the catch-all."""
        table = need_table()
        for seed in range(20):
            assert generate("I need help", table, random.Random(seed)) == "Why do you need help?"

    def test_first_match_is_final(self):
        """Test that a later, more specific rule is never consulted."""
        table = RuleTable.of(
            Rule.from_regex(r"family", ["General family reply."]),
            Rule.from_regex(r"my family is (\w+)", ["Your family is $1?"]),
        )
        assert generate("My family is large", table, FixedRandom()) == "General family reply."

    def test_substitution(self):
        """Test captured text is substituted exactly."""
        table = RuleTable.of(
            Rule.from_regex(r"^\s*(?:I am|I'm) ([^.!?]*)", ["How long have you been feeling $1?"]),
        )
        assert generate("I am tired", table, FixedRandom()) == "How long have you been feeling tired?"

    def test_capture_is_trimmed(self):
        """Test surrounding whitespace in a capture is dropped."""
        reply = generate("Are you   real?", CLASSIC_TABLE, FixedRandom(0))
        assert reply == "Would it change things if I were real?"

    def test_fixed_rng_is_deterministic(self):
        """Test template choice follows the random source."""
        table = RuleTable.of(Rule.from_regex(r".*", ["first", "second", "third"]))

        replies = {generate("anything", table, FixedRandom(0)) for _ in range(10)}
        assert replies == {"first"}

        rng = FixedRandom(2, 1)
        assert generate("anything", table, rng) == "third"
        assert generate("anything", table, rng) == "second"

    def test_seeded_rng_is_repeatable(self):
        """Test that equal seeds give equal replies."""
        first = [generate("hello", CLASSIC_TABLE, random.Random(7)) for _ in range(5)]
        second = [generate("hello", CLASSIC_TABLE, random.Random(7)) for _ in range(5)]
        assert first == second

    def test_absent_group_becomes_empty(self):
        """Test an optional group that did not match renders as nothing."""
        table = RuleTable.of(Rule.from_regex(r"^hello( there)?", ["Hi$1!"]))
        assert generate("hello", table, FixedRandom()) == "Hi!"
        assert generate("hello there", table, FixedRandom()) == "Hithere!"

    def test_out_of_range_placeholder(self):
        """Test placeholders beyond the group count render as nothing."""
        table = RuleTable.of(Rule.from_regex(r"^I like (\w+)", ["You like $1$2$9 and $0."]))
        assert generate("I like tea", table, FixedRandom()) == "You like tea and ."

    def test_case_insensitive(self):
        """Test input casing does not change which rule matches."""
        upper = match_rule("I AM EXCITED", CLASSIC_TABLE)
        lower = match_rule("i am excited", CLASSIC_TABLE)

        assert upper.rule is lower.rule
        assert upper.rule.name == "i-am"
        assert generate("I AM EXCITED", CLASSIC_TABLE, FixedRandom(0)) == \
            generate("i am excited", CLASSIC_TABLE, FixedRandom(0))

    def test_captures_come_from_normalized_text(self):
        """Test captures are lowercased while templates keep their case."""
        reply = generate("I need A Holiday", CLASSIC_TABLE, FixedRandom(0))
        assert reply == "What makes you feel that you need a holiday?"

    def test_fallback_without_catch_all(self):
        """Test the fallback reply when nothing matches."""
        table = RuleTable.of(Rule.from_regex(r"^never$", ["nope"]))
        assert generate("something else", table, FixedRandom()) == FALLBACK
        assert generate("something else", table, FixedRandom(), fallback="Go on.") == "Go on."

    def test_blank_render_uses_fallback(self):
        """Test a reply that renders empty is replaced by the fallback."""
        table = RuleTable.of(Rule.from_regex(r"^\s*(x)?\s*$", ["$1"]))
        assert generate("  ", table, FixedRandom()) == FALLBACK

    def test_keyword_table_falls_back(self):
        """Test the keyword table has no catch-all and uses the fallback."""
        assert generate("zzz", KEYWORD_TABLE, FixedRandom()) == FALLBACK
        assert generate("My MOTHER called", KEYWORD_TABLE, FixedRandom(0)) == "Tell me more about your mother."


class TestBrokenRules:
    """Tests for rules whose patterns cannot be evaluated."""

    def make_table(self):
        return RuleTable.of(
            Rule.from_regex(r"^abc", ["before"], name="before"),
            Rule.from_regex(r"(unclosed", ["broken"], name="broken"),
            Rule.from_regex(r"^x(\w*)", ["after $1"], name="after"),
            Rule.from_regex(r"^.*$", ["catch-all"], name="catch-all"),
        )

    def test_rules_around_invalid_pattern_still_match(self):
        """Test rules before and after a broken rule keep working."""
        errors = []
        table = self.make_table()

        def hook(rule, error):
            errors.append((rule, error))

        assert generate("abc", table, FixedRandom(), on_pattern_error=hook) == "before"
        assert errors == []

        assert generate("xyz", table, FixedRandom(), on_pattern_error=hook) == "after yz"
        assert len(errors) == 1
        assert errors[0][0].name == "broken"
        assert isinstance(errors[0][1], PatternCompileFailure)
        assert errors[0][1].pattern == "(unclosed"

    def test_input_for_broken_rule_falls_through(self):
        """Test input aimed at the broken rule reaches the catch-all."""
        reply = generate("(unclosed", self.make_table(), FixedRandom(), on_pattern_error=lambda r, e: None)
        assert reply == "catch-all"

    def test_crashing_matcher_is_skipped(self):
        """Test arbitrary matcher errors are reported, not raised."""
        errors = []
        table = RuleTable.of(
            Rule(pattern=ExplodingPattern(), templates=("never",)),
            Rule.from_regex(r".*", ["survived"]),
        )

        reply = generate("hi", table, FixedRandom(), on_pattern_error=lambda r, e: errors.append(e))

        assert reply == "survived"
        assert isinstance(errors[0], PatternCompileFailure)

    def test_default_hook_logs_warning(self, caplog, monkeypatch):
        """Test the default hook reports through logging."""
        monkeypatch.setattr(engine_module, "_reported_patterns", set())

        with caplog.at_level(logging.WARNING, logger="eliza"):
            generate("xyz", self.make_table(), FixedRandom())

        assert "Skipping rule 'broken'" in caplog.text

    def test_default_hook_warns_once_per_rule(self, caplog, monkeypatch):
        """Test repeated failures of one rule produce a single warning."""
        monkeypatch.setattr(engine_module, "_reported_patterns", set())
        table = self.make_table()

        with caplog.at_level(logging.WARNING, logger="eliza"):
            for _ in range(5):
                assert generate("xyz", table, FixedRandom()) == "after yz"

        warnings = [r for r in caplog.records if "Skipping rule 'broken'" in r.getMessage()]
        assert len(warnings) == 1


class TestResponseEngine:
    """Tests for the ResponseEngine wrapper."""

    def test_generate_uses_bound_settings(self):
        """Test rng, fallback and hook are taken from the engine."""
        errors = []
        engine = ResponseEngine(rng=FixedRandom(1), fallback="Hmm.", on_pattern_error=lambda r, e: errors.append(r))
        table = RuleTable.of(
            Rule.from_regex(r"[", ["broken"]),
            Rule.from_regex(r"^hi", ["zero", "one"]),
        )

        assert engine.generate("hi", table) == "one"
        assert engine.generate("bye", table) == "Hmm."
        assert len(errors) == 2

    def test_match(self):
        """Test match returns the rule and its captures."""
        engine = ResponseEngine()
        match = engine.match("Why do I feel sad?", CLASSIC_TABLE)

        assert match.rule.name == "why-feel"
        assert match.groups == ("sad",)
        assert match.message == "why do i feel sad?"

    def test_stateless_across_calls(self):
        """Test earlier turns do not affect later ones."""
        engine = ResponseEngine(rng=FixedRandom(0))
        first = engine.generate("I need sleep", CLASSIC_TABLE)
        engine.generate("My family is big", CLASSIC_TABLE)
        assert engine.generate("I need sleep", CLASSIC_TABLE) == first


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
