"""
Rules Module - Pattern-based response engine
============================================

This module provides the ELIZA-style responder core:
- Text patterns (regular expressions, keywords)
- Immutable, ordered rule tables
- First-match response generation with $k placeholder substitution
- Loading and saving rule tables in line and YAML formats
"""

from .patterns import TextPattern, RegexPattern, KeywordPattern, MatchType
from .table import Rule, RuleTable
from .engine import ResponseEngine, RuleMatch, generate, match_rule
from .loader import (
    load_rule_table,
    parse_rule_table,
    parse_yaml_rule_table,
    serialize_rule_table,
    serialize_yaml_rule_table,
    save_rule_table,
)
from .defaults import CLASSIC_TABLE, KEYWORD_TABLE, builtin_table

__all__ = [
    "TextPattern",
    "RegexPattern",
    "KeywordPattern",
    "MatchType",
    "Rule",
    "RuleTable",
    "ResponseEngine",
    "RuleMatch",
    "generate",
    "match_rule",
    "load_rule_table",
    "parse_rule_table",
    "parse_yaml_rule_table",
    "serialize_rule_table",
    "serialize_yaml_rule_table",
    "save_rule_table",
    "CLASSIC_TABLE",
    "KEYWORD_TABLE",
    "builtin_table",
]
