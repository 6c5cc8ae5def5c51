"""
Test Web Interface Module
=========================

Tests for the FastAPI routes using the test client.
"""

import pytest
from pathlib import Path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from fastapi.testclient import TestClient

from core.config import Config
from rules.defaults import KEYWORD_TABLE
from services.responder import Responder
from ui.web.app import create_app


class FirstTemplate:
    def randrange(self, stop):
        return 0


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def client(config):
    responder = Responder(config, rng=FirstTemplate())
    return TestClient(create_app(config=config, responder=responder))


class TestPages:
    """Tests for HTML pages."""

    def test_chat_page(self, client):
        """Test the chat page renders."""
        response = client.get("/")
        assert response.status_code == 200
        assert "ELIZA Responder" in response.text
        assert "/api/respond" in response.text


class TestAPI:
    """Tests for JSON endpoints."""

    def test_health(self, client):
        """Test the health endpoint reports the active table."""
        data = client.get("/health").json()
        assert data == {"status": "ok", "rules": 12, "catch_all": True}

    def test_respond(self, client):
        """Test a reply is generated."""
        response = client.post("/api/respond", json={"message": "  I need help  "})

        assert response.status_code == 200
        assert response.json() == {
            "message": "I need help",
            "response": "What makes you feel that you need help?",
        }

    @pytest.mark.parametrize("payload", [{"message": "   "}, {}, {"text": "hi"}])
    def test_respond_rejects_bad_payload(self, client, payload):
        """Test blank or missing messages are rejected."""
        assert client.post("/api/respond", json=payload).status_code == 422

    def test_list_rules(self, client):
        """Test rules are listed in match order."""
        rules = client.get("/api/rules").json()["rules"]

        assert rules[0]["position"] == 1
        assert rules[0]["name"] == "need"
        assert rules[0]["match_type"] == "regex"
        assert rules[0]["templates"] == 3
        assert rules[-1]["pattern"] == "^.*$"

    def test_reload(self, config, client):
        """Test reloading swaps in the configured table."""
        config.rules.builtin = "keyword"

        response = client.post("/api/rules/reload")

        assert response.status_code == 200
        assert response.json() == {"success": True, "rules": len(KEYWORD_TABLE), "catch_all": False}
        assert client.get("/health").json()["rules"] == len(KEYWORD_TABLE)

    def test_reload_failure(self, config, client, tmp_path):
        """Test an unavailable source gives 503 and keeps the table."""
        config.rules.source = "file"
        config.rules.path = str(tmp_path / "absent.txt")
        config.rules.fallback_to_builtin = False

        response = client.post("/api/rules/reload")

        assert response.status_code == 503
        assert "absent.txt" in response.json()["detail"]
        assert client.get("/health").json()["rules"] == 12


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
