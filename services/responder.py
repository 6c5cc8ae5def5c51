"""
Responder - Conversation-facing service around the response engine
==================================================================

This module wires configuration, the active rule table and the
response engine together for the front ends (CLI, terminal UI, web).

The active table lives in a RuleTableStore. Reloads build a complete
new table first and then replace the old one in a single swap, so a
caller either sees the old table or the new one, never a mix.
"""

import random
import threading
from typing import Optional

from core.config import Config
from core.exceptions import ElizaError, ResourceUnavailable
from core.logging import get_logger
from rules.defaults import builtin_table
from rules.engine import RandomSource, ResponseEngine
from rules.loader import load_rule_table
from rules.table import RuleTable

logger = get_logger("services.responder")


class RuleTableStore:
    """
    Holder for the active rule table.

    Readers call get() once per reply and keep using that table for the
    whole call. swap() replaces the reference under a lock.
    """

    def __init__(self, table: RuleTable):
        self._table = table
        self._lock = threading.Lock()
        self.generation = 0

    def get(self) -> RuleTable:
        return self._table

    def swap(self, table: RuleTable) -> RuleTable:
        """
        Install a new table.

        Returns:
            The table that was replaced
        """
        with self._lock:
            previous = self._table
            self._table = table
            self.generation += 1
        logger.info(f"Rule table swapped: {len(previous)} -> {len(table)} rules")
        return previous


def build_rule_table(config: Config) -> RuleTable:
    """
    Build the rule table selected by configuration.

    When the external source is unavailable and
    ``rules.fallback_to_builtin`` is set, the configured built-in table
    is returned instead.

    Args:
        config: Application configuration

    Returns:
        RuleTable

    Raises:
        ResourceUnavailable: If the source cannot be read and there is
            no fallback
        MalformedRuleTable: If the source cannot be parsed
        ConfigError: If the built-in table name is unknown
    """
    rules_cfg = config.rules

    if rules_cfg.source == "builtin":
        return builtin_table(rules_cfg.builtin)

    try:
        return load_rule_table(
            rules_cfg.location,
            strict=rules_cfg.strict_parsing,
            timeout=rules_cfg.timeout,
        )
    except ResourceUnavailable as e:
        if not rules_cfg.fallback_to_builtin:
            raise
        logger.warning(f"{e}; using built-in '{rules_cfg.builtin}' rules")
        return builtin_table(rules_cfg.builtin)


class Responder:
    """
    Rule-based responder used by the front ends.

    Example:
        responder = Responder(load_config())
        print(responder.respond("I need a holiday"))

        # Pick up edits to the rule file without blocking replies
        responder.reload_in_background()
    """

    def __init__(
        self,
        config: Config,
        rng: Optional[RandomSource] = None,
        table: Optional[RuleTable] = None,
    ):
        """
        Initialize the responder.

        Args:
            config: Application configuration
            rng: Random source for template selection; seeded from
                ``engine.seed`` when not given
            table: Initial rule table; built from configuration when
                not given
        """
        self.config = config

        if rng is None:
            rng = random.Random(config.engine.seed)

        self.engine = ResponseEngine(
            rng=rng,
            fallback=config.engine.fallback_response,
        )
        self.store = RuleTableStore(table if table is not None else build_rule_table(config))

    @property
    def table(self) -> RuleTable:
        return self.store.get()

    def respond(self, text: str) -> str:
        """
        Reply to one line of user text.

        Args:
            text: User input

        Returns:
            Non-empty reply
        """
        return self.engine.generate(text, self.store.get())

    def reload(self) -> RuleTable:
        """
        Rebuild the rule table from configuration and install it.

        The current table stays in service if the rebuild fails.

        Returns:
            The newly installed table

        Raises:
            ResourceUnavailable: If the source cannot be read
            MalformedRuleTable: If the source cannot be parsed
            ConfigError: If the built-in table name is unknown
        """
        try:
            table = build_rule_table(self.config)
        except ElizaError as e:
            logger.error(f"Rule reload failed, keeping current table: {e}")
            raise

        self.store.swap(table)
        return table

    def reload_in_background(self) -> threading.Thread:
        """
        Reload the rule table on a daemon thread.

        Replies keep using the current table until the swap. Failures
        are logged.

        Returns:
            The started thread
        """
        def run():
            try:
                self.reload()
            except ElizaError:
                # Already logged by reload()
                pass

        thread = threading.Thread(target=run, name="rule-reload", daemon=True)
        thread.start()
        return thread


def create_responder(config: Config, rng: Optional[RandomSource] = None) -> Responder:
    """
    Create a responder ready to answer immediately.

    File and built-in tables are loaded before returning. A URL source
    may be slow, so the responder starts on the built-in table and the
    fetched table is swapped in when the background load completes.
    """
    if config.rules.source != "url":
        return Responder(config, rng=rng)

    responder = Responder(config, rng=rng, table=builtin_table(config.rules.builtin))
    responder.reload_in_background()
    return responder
