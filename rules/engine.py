"""
Response Engine - Pattern matching and template-based responses
===============================================================

This module implements the core engine that matches user text against
an ordered rule table and renders a reply from the winning rule.

The engine holds no conversation state. Every call is a pure function
of its arguments plus one draw from the injected random source.
"""

import random
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol, Set, Tuple

from core.config import DEFAULT_FALLBACK
from core.exceptions import PatternCompileFailure
from core.logging import get_logger
from .table import Rule, RuleTable
from .templates import render

logger = get_logger("rules.engine")


class RandomSource(Protocol):
    """Anything with ``randrange``; ``random.Random`` qualifies."""

    def randrange(self, stop: int) -> int:
        ...


PatternErrorHook = Callable[[Rule, Exception], None]


@dataclass
class RuleMatch:
    """
    Result of a rule matching a message.

    Attributes:
        rule (Rule): The matching rule
        message (str): The normalized text that was matched
        groups (tuple): Captures for groups 1..N, None where a group
            did not participate
    """
    rule: Rule
    message: str
    groups: Tuple[Optional[str], ...] = field(default_factory=tuple)

    def render(self, rng: RandomSource) -> str:
        """Pick one of the rule's templates and fill in the captures."""
        templates = self.rule.templates
        template = templates[rng.randrange(len(templates))]
        return render(template, self.groups)


_reported_patterns: Set[Tuple[str, str]] = set()


def log_pattern_error(rule: Rule, error: Exception) -> None:
    """
    Default hook: report a failing rule and carry on.

    Each (rule, pattern) pair is logged as a warning once per process;
    repeats go to debug so a busy table does not flood the log.
    """
    key = (rule.label, rule.pattern.source)
    if key in _reported_patterns:
        logger.debug(f"Skipping rule {rule.label!r} again: {error}")
        return

    _reported_patterns.add(key)
    logger.warning(
        f"Skipping rule {rule.label!r}: {error}",
        extra={"pattern": rule.pattern.source},
    )


def normalize(text: str) -> str:
    """Normalize user text for matching."""
    return (text or "").lower()


def match_rule(
    user_text: str,
    table: RuleTable,
    on_pattern_error: Optional[PatternErrorHook] = None,
) -> Optional[RuleMatch]:
    """
    Find the first rule in the table that matches.

    Rules are tried in table order and the first match is final; later
    rules are never consulted even if they would capture more. A rule
    whose pattern fails to compile or evaluate is reported through
    ``on_pattern_error`` and skipped.

    Args:
        user_text: Raw user input
        table: Rule table to search
        on_pattern_error: Called with (rule, error) for failing rules

    Returns:
        RuleMatch if found, None otherwise
    """
    hook = on_pattern_error or log_pattern_error
    message = normalize(user_text)

    for rule in table:
        try:
            groups = rule.pattern.match(message)
        except PatternCompileFailure as e:
            hook(rule, e)
            continue
        except Exception as e:
            hook(rule, PatternCompileFailure(f"Pattern evaluation failed: {e}", pattern=rule.pattern.source))
            continue

        if groups is not None:
            return RuleMatch(rule=rule, message=message, groups=tuple(groups))

    return None


def generate(
    user_text: str,
    table: RuleTable,
    rng: Optional[RandomSource] = None,
    *,
    fallback: str = DEFAULT_FALLBACK,
    on_pattern_error: Optional[PatternErrorHook] = None,
) -> str:
    """
    Produce a reply for user text.

    Never raises for bad rules: failing patterns are skipped, and when no
    rule matches (only possible without a catch-all) or the rendered
    reply is blank the fallback string is returned.

    Args:
        user_text: Raw user input
        table: Rule table to match against
        rng: Random source used to pick a template
        fallback: Reply used when nothing usable matched
        on_pattern_error: Called with (rule, error) for failing rules

    Returns:
        Non-empty reply string

    Example:
        reply = generate("I am tired", CLASSIC_TABLE, random.Random(7))
    """
    match = match_rule(user_text, table, on_pattern_error)
    if match is None:
        logger.debug("No rule matched, using fallback response")
        return fallback

    response = match.render(rng if rng is not None else random.Random())
    if not response.strip():
        logger.debug(f"Rule {match.rule.label!r} rendered an empty reply, using fallback response")
        return fallback

    return response


class ResponseEngine:
    """
    Engine bound to a random source, fallback string and error hook.

    The table is passed per call so that callers holding a swappable
    table always answer from the table current at call time.

    Example:
        engine = ResponseEngine(rng=random.Random(42))
        reply = engine.generate("Hello there", CLASSIC_TABLE)
    """

    def __init__(
        self,
        rng: Optional[RandomSource] = None,
        fallback: str = DEFAULT_FALLBACK,
        on_pattern_error: Optional[PatternErrorHook] = None,
    ):
        self.rng = rng if rng is not None else random.Random()
        self.fallback = fallback
        self.on_pattern_error = on_pattern_error or log_pattern_error

    def match(self, user_text: str, table: RuleTable) -> Optional[RuleMatch]:
        return match_rule(user_text, table, self.on_pattern_error)

    def generate(self, user_text: str, table: RuleTable) -> str:
        return generate(
            user_text,
            table,
            self.rng,
            fallback=self.fallback,
            on_pattern_error=self.on_pattern_error,
        )
