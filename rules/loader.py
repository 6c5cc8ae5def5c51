"""
Rule Table Loader - Reading and writing external rule sources
=============================================================

Two formats are understood.

Line format (any file not ending in .yaml/.yml)::

    # comment
    (?i)^\\s*I need ([^.!?]*)
    What makes you feel that you need $1?
    Why do you believe $1 would help you?

    (?i)^.*$
    Please tell me more about that.

Blank lines and ``#`` comments are ignored, a ``(?i)`` line starts a
new rule (the prefix is not part of the pattern) and every other line
is a template of the most recent rule.

YAML format::

    rules:
      - name: need
        pattern: "^\\\\s*I need ([^.!?]*)"
        match_type: regex
        responses:
          - "What makes you feel that you need $1?"

Grammar violations (a template before the first pattern, a pattern
with no templates) are dropped with a warning by default and raise
MalformedRuleTable when ``strict`` is set.
"""

from pathlib import Path
from typing import Any, List, Optional, Tuple

import httpx
import yaml

from core.exceptions import MalformedRuleTable, ResourceUnavailable
from core.logging import get_logger
from .patterns import MatchType
from .table import Rule, RuleTable

logger = get_logger("rules.loader")

PATTERN_PREFIX = "(?i)"
COMMENT_PREFIX = "#"
YAML_SUFFIXES = (".yaml", ".yml")


def _violation(message: str, line: int, strict: bool) -> None:
    if strict:
        raise MalformedRuleTable(message, line=line)
    logger.warning(f"{message} (line {line}), dropped")


def _is_single_line(text: str) -> bool:
    # Same line boundaries as str.splitlines(), which the parser uses
    return text.splitlines() == [text]


def parse_rule_table(text: str, strict: bool = False) -> RuleTable:
    """
    Parse the line format into a rule table.

    Args:
        text: Raw rule source
        strict: Raise on grammar violations instead of dropping lines

    Returns:
        RuleTable in source order

    Raises:
        MalformedRuleTable: On a grammar violation when strict
    """
    rules: List[Rule] = []
    pattern: Optional[str] = None
    pattern_line = 0
    templates: List[str] = []

    def close_rule() -> None:
        if pattern is None:
            return
        if templates:
            rules.append(Rule.from_regex(pattern, templates))
        else:
            _violation(f"Pattern {pattern!r} has no templates", pattern_line, strict)

    for number, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith(COMMENT_PREFIX):
            continue

        if line.startswith(PATTERN_PREFIX):
            close_rule()
            pattern = line[len(PATTERN_PREFIX):].strip()
            pattern_line = number
            templates = []
        elif pattern is None:
            _violation("Template line before any pattern line", number, strict)
        else:
            templates.append(line)

    close_rule()
    return RuleTable.from_rules(rules)


def serialize_rule_table(table: RuleTable) -> str:
    """
    Write a rule table in the line format.

    Raises:
        MalformedRuleTable: If a rule cannot be expressed in the line format
    """
    blocks = []
    for index, rule in enumerate(table, start=1):
        if rule.pattern.match_type != MatchType.REGEX:
            raise MalformedRuleTable(
                f"Rule {rule.label!r} uses a {rule.pattern.match_type.value} pattern; "
                "the line format only holds regular expressions",
                details={"rule": index},
            )
        source = rule.pattern.source
        if source != source.strip() or (source and not _is_single_line(source)):
            raise MalformedRuleTable(f"Pattern of rule {rule.label!r} cannot be written as a plain line",
                                     details={"rule": index})

        lines = [PATTERN_PREFIX + source]
        for template in rule.templates:
            stripped = template.strip()
            if (not stripped or stripped != template or stripped.startswith(COMMENT_PREFIX)
                    or stripped.startswith(PATTERN_PREFIX) or not _is_single_line(template)):
                raise MalformedRuleTable(
                    f"Template {template!r} of rule {rule.label!r} cannot be written as a plain line",
                    details={"rule": index},
                )
            lines.append(template)
        blocks.append("\n".join(lines))

    return "\n\n".join(blocks) + "\n" if blocks else ""


def parse_yaml_rule_table(text: str, strict: bool = False) -> RuleTable:
    """
    Parse a YAML rule document into a rule table.

    Args:
        text: YAML source with a top-level ``rules`` list
        strict: Raise on invalid entries instead of dropping them

    Returns:
        RuleTable in document order

    Raises:
        MalformedRuleTable: If the document is not valid YAML or has no
            rule list, or on an invalid entry when strict
    """
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        line = 0
        mark = getattr(e, "problem_mark", None)
        if mark is not None:
            line = mark.line + 1
        raise MalformedRuleTable(f"Invalid YAML: {e}", line=line)

    if not isinstance(data, dict) or not isinstance(data.get("rules", []), list):
        raise MalformedRuleTable("Rule document must be a mapping with a 'rules' list")

    rules: List[Rule] = []
    for index, entry in enumerate(data.get("rules", []), start=1):
        rule, problem = _rule_from_entry(entry)
        if rule is not None:
            rules.append(rule)
        elif strict:
            raise MalformedRuleTable(problem, details={"rule": index})
        else:
            logger.warning(f"{problem} (rule {index}), dropped")

    return RuleTable.from_rules(rules)


def _rule_from_entry(entry: Any) -> Tuple[Optional[Rule], str]:
    if not isinstance(entry, dict):
        return None, "Rule entry is not a mapping"
    if not entry.get("pattern"):
        return None, "Rule entry has no pattern"
    if not entry.get("responses"):
        return None, f"Pattern {entry['pattern']!r} has no templates"
    if not isinstance(entry["responses"], list):
        return None, f"Responses of pattern {entry['pattern']!r} must be a list"
    try:
        return Rule.from_dict(entry), ""
    except ValueError as e:
        return None, f"Invalid rule entry: {e}"


def serialize_yaml_rule_table(table: RuleTable) -> str:
    """Write a rule table as a YAML document."""
    data = {"rules": [rule.to_dict() for rule in table]}
    return yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def is_yaml_source(source: str) -> bool:
    path = httpx.URL(source).path if is_url(source) else source
    return path.lower().endswith(YAML_SUFFIXES)


def read_source(source: str, timeout: float = 10.0) -> str:
    """
    Fetch the raw text of a rule source.

    Args:
        source: Filesystem path or http(s) URL
        timeout: Request timeout for URLs (seconds)

    Raises:
        ResourceUnavailable: If the source cannot be fetched or read
    """
    if is_url(source):
        try:
            response = httpx.get(source, timeout=timeout, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ResourceUnavailable(
                f"Rule source returned HTTP {e.response.status_code}", source=source
            )
        except httpx.HTTPError as e:
            raise ResourceUnavailable(f"Failed to fetch rule source: {e}", source=source)
        return response.text

    try:
        return Path(source).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ResourceUnavailable(f"Failed to read rule source: {e}", source=source)


def load_rule_table(source: str, strict: bool = False, timeout: float = 10.0) -> RuleTable:
    """
    Load a rule table from a file or URL.

    The format follows the source's suffix: .yaml/.yml is YAML, anything
    else is the line format.

    Args:
        source: Filesystem path or http(s) URL
        strict: Raise on grammar violations instead of dropping lines
        timeout: Request timeout for URLs (seconds)

    Returns:
        RuleTable

    Raises:
        ResourceUnavailable: If the source cannot be fetched or read
        MalformedRuleTable: If the source cannot be parsed
    """
    text = read_source(source, timeout=timeout)

    if is_yaml_source(source):
        table = parse_yaml_rule_table(text, strict=strict)
    else:
        table = parse_rule_table(text, strict=strict)

    source_logger = logger.bind(source=source)
    source_logger.info(f"Loaded {len(table)} rules from {source}")
    if not table.has_catch_all():
        source_logger.warning(f"Rule table from {source} has no catch-all rule; unmatched input gets the fallback reply")

    return table


def save_rule_table(table: RuleTable, path: str) -> None:
    """
    Write a rule table to a file, choosing the format by suffix.

    Raises:
        MalformedRuleTable: If the table cannot be written in that format
        ResourceUnavailable: If the file cannot be written
    """
    if is_yaml_source(path):
        text = serialize_yaml_rule_table(table)
    else:
        text = serialize_rule_table(table)

    try:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
    except OSError as e:
        raise ResourceUnavailable(f"Failed to write rule table: {e}", source=path)
