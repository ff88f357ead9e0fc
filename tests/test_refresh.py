"""Tests for the staleness-driven background refresh."""

import threading
from unittest.mock import MagicMock, patch

import api
import auth
import cache
import refresh
from conftest import make_rep

REMOTE_MS = 1_700_000_000_000


def seed(*chars):
    characters = []
    for realm, name, last_modified in chars:
        char = cache.new_character(realm, name)
        char["lastModified"] = last_modified
        characters.append(char)
    cache.reset(characters)
    cache.save_characters(characters)
    return characters


def summary_for(realm, name, api_key=None, timeout=30):
    return {"realm": realm, "name": name, "lastModified": REMOTE_MS}


def join_all(threads):
    for t in threads:
        t.join(timeout=5)
        assert not t.is_alive()


def test_is_stale_threshold():
    assert refresh.is_stale(0, 301_000)
    assert not refresh.is_stale(0, 300_000)
    assert not refresh.is_stale(REMOTE_MS, REMOTE_MS - 1_000_000)


def test_stale_character_is_refreshed_and_persisted(store_path):
    seed(("Area-52", "Thrall", REMOTE_MS - 301_000))
    reps = [make_rep(1828, 3, 0), make_rep(1859, 5, 400)]

    with patch.object(api, "get_character_summary", side_effect=summary_for), \
         patch.object(api, "get_character_reputations", return_value=reps) as get_reps:
        threads = refresh.refresh_stale_characters(api_key="key", timeout=7)
        join_all(threads)

    assert len(threads) == 1
    get_reps.assert_called_once_with("Area-52", "Thrall", api_key="key", timeout=7)
    char = cache.get_characters()[0]
    assert char["lastModified"] == REMOTE_MS
    assert [r["id"] for r in char["reputation"]] == [1859]

    on_disk = cache.load_characters()
    assert on_disk[0]["lastModified"] == REMOTE_MS
    assert on_disk[0]["reputation"] == char["reputation"]


def test_fresh_character_is_left_alone(store_path):
    seed(("Area-52", "Thrall", REMOTE_MS - 100_000))

    with patch.object(api, "get_character_summary", side_effect=summary_for), \
         patch.object(api, "get_character_reputations") as get_reps:
        threads = refresh.refresh_stale_characters()

    assert threads == []
    get_reps.assert_not_called()
    assert cache.get_characters()[0]["lastModified"] == REMOTE_MS - 100_000


def test_summary_failure_skips_character(store_path):
    seed(("Area-52", "Thrall", 0), ("Stormrage", "Jaina", 0))

    def summary(realm, name, api_key=None, timeout=30):
        if name == "Thrall":
            raise api.BlizzardAPIError("boom", status_code=503)
        return summary_for(realm, name)

    with patch.object(api, "get_character_summary", side_effect=summary), \
         patch.object(api, "get_character_reputations", return_value=[make_rep(1900, 4, 1)]):
        join_all(refresh.refresh_stale_characters())

    thrall, jaina = cache.get_characters()
    assert thrall["lastModified"] == 0
    assert thrall["reputation"] == []
    assert jaina["lastModified"] == REMOTE_MS


def test_reputation_failure_leaves_entry_untouched(store_path):
    seed(("Area-52", "Thrall", 0))
    before = store_path.read_text()

    with patch.object(api, "get_character_summary", side_effect=summary_for), \
         patch.object(api, "get_character_reputations", side_effect=api.BlizzardAPIError("down")):
        join_all(refresh.refresh_stale_characters())

    assert cache.get_characters()[0]["lastModified"] == 0
    assert store_path.read_text() == before


def test_deleted_character_update_is_dropped(store_path):
    seed(("Area-52", "Thrall", 0))
    cache.reset([])

    with patch.object(api, "get_character_reputations", return_value=[make_rep(1900, 4, 1)]):
        assert refresh.update_reputation("Area-52", "Thrall", REMOTE_MS) is False

    assert cache.get_characters() == []


def test_concurrent_refreshes_all_land(store_path):
    names = [f"Alt{i}" for i in range(8)]
    seed(*[("Area-52", n, 0) for n in names])
    release = threading.Event()

    def reps(realm, name, api_key=None, timeout=30):
        release.wait(5)
        return [make_rep(1900, 4, len(name))]

    with patch.object(api, "get_character_summary", side_effect=summary_for), \
         patch.object(api, "get_character_reputations", side_effect=reps):
        threads = refresh.refresh_stale_characters()
        release.set()
        join_all(threads)

    assert len(threads) == len(names)
    for char in cache.load_characters():
        assert char["lastModified"] == REMOTE_MS
        assert char["reputation"][0]["id"] == 1900


def test_init_uses_config(store_path, tmp_path, monkeypatch):
    monkeypatch.delenv("BLIZZARD_API_KEY", raising=False)
    config_path = tmp_path / "config.json"
    config_path.write_text('{"apiKey": "secret", "updateTimeout": 12}')
    seed(("Area-52", "Thrall", REMOTE_MS))

    with patch.object(refresh, "setup_logging"), \
         patch.object(api, "get_character_summary", side_effect=summary_for) as get_summary:
        threads = refresh.init(str(config_path))

    assert threads == []
    get_summary.assert_called_once_with("Area-52", "Thrall", api_key="secret", timeout=12)


def test_failed_save_restores_previous_entry(store_path, monkeypatch):
    seed(("Area-52", "Thrall", 0))
    cache.get_characters()[0]["reputation"] = [make_rep(1948, 5, 10)]
    before = store_path.read_text()

    def fail(characters, path=None):
        raise OSError("disk full")

    monkeypatch.setattr(cache, "save_characters", fail)
    with patch.object(api, "get_character_reputations", return_value=[make_rep(1900, 6, 1)]):
        assert refresh.update_reputation("Area-52", "Thrall", 123) is False

    char = cache.get_characters()[0]
    assert char["lastModified"] == 0
    assert [r["id"] for r in char["reputation"]] == [1948]
    assert store_path.read_text() == before


def test_summary_error_does_not_stop_other_characters(store_path, monkeypatch):
    monkeypatch.setenv("BLIZZARD_CLIENT_ID", "id")
    monkeypatch.setenv("BLIZZARD_CLIENT_SECRET", "secret")
    seed(("Area-52", "Thrall", 0), ("Stormrage", "Jaina", 0))
    bad_token = MagicMock()
    bad_token.json.return_value = {}

    with patch.object(auth.requests, "post", return_value=bad_token) as post:
        threads = refresh.refresh_stale_characters()

    assert threads == []
    assert post.call_count == 2
