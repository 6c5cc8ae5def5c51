"""
Rule Table - Immutable ordered collection of rules
==================================================

Order is significant: the engine commits to the first rule whose
pattern matches, so specific rules go first and a catch-all goes last.
Tables are never mutated; a reload builds a new table.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, Optional, Sequence, Tuple

from core.exceptions import PatternCompileFailure
from .patterns import TextPattern, MatchType, make_pattern


# Normalized inputs a catch-all rule must accept besides the empty string
CATCH_ALL_SAMPLES = ("x", "i am not sure. why?")


@dataclass(frozen=True)
class Rule:
    """
    A pattern paired with its candidate response templates.

    Attributes:
        pattern (TextPattern): Matcher for user text
        templates (tuple): Response templates, never empty
        name (str): Optional label used in logs and listings
    """
    pattern: TextPattern
    templates: Tuple[str, ...]
    name: str = ""

    def __post_init__(self):
        # Accept any sequence but store a tuple so the rule stays hashable
        object.__setattr__(self, "templates", tuple(self.templates))
        if not self.templates:
            raise ValueError(f"Rule {self.label!r} has no response templates")

    @property
    def label(self) -> str:
        return self.name or self.pattern.source

    @classmethod
    def from_regex(cls, source: str, templates: Sequence[str], name: str = "") -> "Rule":
        """Create a rule with a regular expression pattern."""
        return cls(pattern=make_pattern(source, MatchType.REGEX), templates=tuple(templates), name=name)

    @classmethod
    def from_keyword(cls, keyword: str, templates: Sequence[str], name: str = "") -> "Rule":
        """Create a rule with a substring pattern."""
        return cls(pattern=make_pattern(keyword, MatchType.KEYWORD), templates=tuple(templates), name=name)

    def to_dict(self) -> Dict[str, Any]:
        """Convert rule to dictionary."""
        data = {
            "pattern": self.pattern.source,
            "match_type": self.pattern.match_type.value,
            "responses": list(self.templates),
        }
        if self.name:
            data = {"name": self.name, **data}
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Rule":
        """
        Create rule from dictionary.

        Raises:
            KeyError: If the pattern is missing
            ValueError: If the match type is unknown or responses is not
                a non-empty list
        """
        responses = data.get("responses") or ()
        if not isinstance(responses, (list, tuple)):
            raise ValueError(f"responses must be a list, not {type(responses).__name__}")

        return cls(
            pattern=make_pattern(str(data["pattern"]), data.get("match_type", "regex")),
            templates=tuple(str(t) for t in responses),
            name=str(data.get("name") or ""),
        )


@dataclass(frozen=True)
class RuleTable:
    """
    Ordered, immutable sequence of rules.

    Example:
        table = RuleTable.of(
            Rule.from_regex(r"^\\s*I need ([^.!?]*)", ["Why do you need $1?"]),
            Rule.from_regex(r"^.*$", ["Please go on."]),
        )
    """
    rules: Tuple[Rule, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "rules", tuple(self.rules))

    @classmethod
    def of(cls, *rules: Rule) -> "RuleTable":
        return cls(rules=rules)

    @classmethod
    def from_rules(cls, rules: Iterable[Rule]) -> "RuleTable":
        return cls(rules=tuple(rules))

    def __iter__(self) -> Iterator[Rule]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def __getitem__(self, index: int) -> Rule:
        return self.rules[index]

    def has_catch_all(self) -> bool:
        """
        Whether the last rule accepts any input.

        A rule counts as a catch-all when its pattern matches the empty
        string and every sample in CATCH_ALL_SAMPLES. A last rule whose
        pattern does not compile is not one.
        """
        if not self.rules:
            return False
        pattern = self.rules[-1].pattern
        try:
            return all(pattern.match(sample) is not None for sample in ("",) + CATCH_ALL_SAMPLES)
        except PatternCompileFailure:
            return False

    def find(self, name: str) -> Optional[Rule]:
        """Get a rule by name."""
        for rule in self.rules:
            if rule.name == name:
                return rule
        return None
