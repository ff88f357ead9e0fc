"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import pytest

# Modules live at the repository root
root_path = Path(__file__).parent.parent
sys.path.insert(0, str(root_path))

import auth  # noqa: E402
import cache  # noqa: E402


@pytest.fixture(autouse=True)
def no_client_credentials(monkeypatch):
    """Keep tests on the plain API key path and off the OAuth endpoint."""
    monkeypatch.delenv("BLIZZARD_CLIENT_ID", raising=False)
    monkeypatch.delenv("BLIZZARD_CLIENT_SECRET", raising=False)
    auth.clear_token_cache()
    yield
    auth.clear_token_cache()


@pytest.fixture
def store_path(tmp_path, monkeypatch):
    """Point the character store at a temp file and start from an empty list."""
    path = tmp_path / "data" / "characters.json"
    monkeypatch.setattr(cache, "CHARACTERS_FILE", str(path))
    cache.reset()
    yield path
    cache.reset()


def make_rep(faction_id, standing, value, name="Faction", max_value=3000):
    return {"id": faction_id, "name": name, "standing": standing, "value": value, "max": max_value}
