"""
Services Module - Core services for the ELIZA responder
=======================================================

This module provides the main services:
- Responder: engine plus swappable rule table for the front ends
- RuleTableStore: atomic holder for the active rule table
"""

from .responder import Responder, RuleTableStore, build_rule_table, create_responder

__all__ = [
    "Responder",
    "RuleTableStore",
    "build_rule_table",
    "create_responder",
]
