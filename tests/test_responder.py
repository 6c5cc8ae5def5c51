"""
Test Responder Service Module
=============================

Unit tests for the responder, rule table building and atomic
table swaps.
"""

import threading
import time
import pytest
import httpx
from pathlib import Path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import Config
from core.exceptions import MalformedRuleTable, ResourceUnavailable
from rules import loader
from rules.defaults import CLASSIC_TABLE, KEYWORD_TABLE
from rules.table import Rule, RuleTable
from services.responder import Responder, RuleTableStore, build_rule_table, create_responder


class FirstTemplate:
    """Random source that always picks the first template."""

    def randrange(self, stop):
        return 0


def file_config(path, **rules):
    config = Config()
    config.rules.source = "file"
    config.rules.path = str(path)
    for key, value in rules.items():
        setattr(config.rules, key, value)
    return config


class TestRuleTableStore:
    """Tests for RuleTableStore."""

    def test_swap(self):
        """Test swap installs the new table and returns the old one."""
        store = RuleTableStore(CLASSIC_TABLE)

        previous = store.swap(KEYWORD_TABLE)

        assert previous is CLASSIC_TABLE
        assert store.get() is KEYWORD_TABLE
        assert store.generation == 1

    def test_readers_see_whole_tables(self):
        """Test concurrent readers only ever see complete tables."""
        store = RuleTableStore(CLASSIC_TABLE)
        seen = set()
        stop = threading.Event()

        def read():
            while not stop.is_set():
                seen.add(len(store.get()))

        readers = [threading.Thread(target=read) for _ in range(4)]
        for reader in readers:
            reader.start()
        for i in range(200):
            store.swap(KEYWORD_TABLE if i % 2 == 0 else CLASSIC_TABLE)
        stop.set()
        for reader in readers:
            reader.join()

        assert seen <= {len(CLASSIC_TABLE), len(KEYWORD_TABLE)}


class TestBuildRuleTable:
    """Tests for build_rule_table()."""

    def test_builtin(self):
        """Test built-in tables by name."""
        config = Config()
        assert build_rule_table(config) is CLASSIC_TABLE

        config.rules.builtin = "keyword"
        assert build_rule_table(config) is KEYWORD_TABLE

    def test_file(self, tmp_path):
        """Test file sources are loaded."""
        path = tmp_path / "rules.txt"
        path.write_text("(?i)^.*$\nCustom reply.\n", encoding="utf-8")

        table = build_rule_table(file_config(path))
        assert table[0].templates == ("Custom reply.",)

    def test_missing_file_falls_back(self, tmp_path):
        """Test an unavailable source falls back to the built-in table."""
        config = file_config(tmp_path / "absent.txt", builtin="keyword")
        assert build_rule_table(config) is KEYWORD_TABLE

    def test_missing_file_without_fallback(self, tmp_path):
        """Test an unavailable source raises when fallback is off."""
        config = file_config(tmp_path / "absent.txt", fallback_to_builtin=False)
        with pytest.raises(ResourceUnavailable):
            build_rule_table(config)

    def test_malformed_file_is_not_masked(self, tmp_path):
        """Test strict parse errors are not replaced by the fallback."""
        path = tmp_path / "rules.txt"
        path.write_text("orphan template\n(?i).*\nok\n", encoding="utf-8")

        with pytest.raises(MalformedRuleTable):
            build_rule_table(file_config(path, strict_parsing=True))


class TestResponder:
    """Tests for Responder."""

    def test_respond(self):
        """Test replies come from the configured table."""
        responder = Responder(Config(), rng=FirstTemplate())
        assert responder.respond("I am tired") == "How long have you been feeling tired?"

    def test_fallback_from_config(self):
        """Test the configured fallback reply is used."""
        config = Config()
        config.rules.builtin = "keyword"
        config.engine.fallback_response = "Go on."

        responder = Responder(config, rng=FirstTemplate())
        assert responder.respond("zzz") == "Go on."

    def test_seed_from_config(self):
        """Test equal seeds give equal conversations."""
        config = Config()
        config.engine.seed = 11

        first = Responder(config)
        second = Responder(config)
        lines = ["hello", "I need rest", "how are you", "whatever"]
        assert [first.respond(l) for l in lines] == [second.respond(l) for l in lines]

    def test_explicit_table(self):
        """Test an injected table is used as is."""
        table = RuleTable.of(Rule.from_regex(r".*", ["injected"]))
        responder = Responder(Config(), table=table)
        assert responder.table is table
        assert responder.respond("anything") == "injected"

    def test_reload(self, tmp_path):
        """Test reload picks up changes to the rule file."""
        path = tmp_path / "rules.txt"
        path.write_text("(?i).*\nfirst\n", encoding="utf-8")
        responder = Responder(file_config(path))
        assert responder.respond("x") == "first"

        path.write_text("(?i).*\nsecond\n", encoding="utf-8")
        responder.reload()

        assert responder.respond("x") == "second"
        assert responder.store.generation == 1

    def test_failed_reload_keeps_table(self, tmp_path):
        """Test a failed reload leaves the current table in service."""
        path = tmp_path / "rules.txt"
        path.write_text("(?i).*\nfirst\n", encoding="utf-8")
        responder = Responder(file_config(path, fallback_to_builtin=False))
        before = responder.table

        path.unlink()
        with pytest.raises(ResourceUnavailable):
            responder.reload()

        assert responder.table is before
        assert responder.respond("x") == "first"

    def test_reload_in_background(self, tmp_path):
        """Test background reload swaps the table."""
        path = tmp_path / "rules.txt"
        path.write_text("(?i).*\nfirst\n", encoding="utf-8")
        responder = Responder(file_config(path))

        path.write_text("(?i).*\nsecond\n", encoding="utf-8")
        thread = responder.reload_in_background()
        thread.join(timeout=5)

        assert not thread.is_alive()
        assert responder.respond("x") == "second"

    def test_reload_in_background_failure(self, tmp_path):
        """Test background reload failures are not raised."""
        path = tmp_path / "rules.txt"
        path.write_text("(?i).*\nfirst\n", encoding="utf-8")
        responder = Responder(file_config(path, fallback_to_builtin=False))

        path.unlink()
        thread = responder.reload_in_background()
        thread.join(timeout=5)

        assert responder.respond("x") == "first"
        assert responder.store.generation == 0


class TestCreateResponder:
    """Tests for create_responder()."""

    def test_builtin_is_immediate(self):
        """Test built-in sources are ready at once."""
        responder = create_responder(Config())
        assert responder.table is CLASSIC_TABLE

    def test_url_loads_in_background(self, monkeypatch):
        """Test URL sources start on the built-in table and swap later."""
        release = threading.Event()

        def fake_get(url, **kwargs):
            release.wait(timeout=5)
            return httpx.Response(200, text="(?i).*\nFrom the network.\n", request=httpx.Request("GET", url))

        monkeypatch.setattr(loader.httpx, "get", fake_get)

        config = Config()
        config.rules.source = "url"
        config.rules.url = "https://example.com/rules.txt"

        responder = create_responder(config, rng=FirstTemplate())
        assert responder.table is CLASSIC_TABLE
        assert responder.respond("hello") == "Hi there! How can I assist you today?"

        release.set()
        deadline = time.monotonic() + 5
        while responder.store.generation == 0 and time.monotonic() < deadline:
            time.sleep(0.01)

        assert responder.respond("hello") == "From the network."


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
