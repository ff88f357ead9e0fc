#!/usr/bin/env python3
"""
Staleness-driven reputation refresh.

On start, every tracked character's profile summary is fetched. When the
remote lastModified is more than STALE_THRESHOLD seconds newer than the cached
one, a background thread pulls the full reputation set and merges it into the
store under cache.store_lock.
"""
import logging
import threading

import api
import cache
from config import load_config
from reputations import filter_reputation
from utils import setup_logging

logger = logging.getLogger(__name__)

# seconds
STALE_THRESHOLD = 300


def is_stale(cached_ms, remote_ms):
    return (remote_ms / 1000) - (cached_ms / 1000) > STALE_THRESHOLD


def update_reputation(realm, name, last_modified, api_key=None, timeout=30):
    """
    Fetch the reputations for one character and store them.
    Failures are logged and leave the cached entry untouched.
    """
    try:
        entries = api.get_character_reputations(realm, name, api_key=api_key, timeout=timeout)
    except api.BlizzardAPIError as e:
        logger.warning("Reputation fetch failed for %s-%s: %s", name, realm, e)
        return False

    with cache.store_lock:
        characters = cache.get_characters()
        char = cache.find_character(characters, realm, name)
        if char is None:
            logger.info("%s-%s was removed before its refresh finished", name, realm)
            return False
        previous = char.get("reputation", []), char.get("lastModified", 0)
        char["reputation"]   = filter_reputation(entries)
        char["lastModified"] = last_modified
        try:
            cache.save_characters(characters)
        except OSError as e:
            char["reputation"], char["lastModified"] = previous
            logger.warning("Could not save character store after refreshing %s-%s: %s", name, realm, e)
            return False
    logger.info("Refreshed %d reputations for %s-%s", len(char["reputation"]), name, realm)
    return True


def refresh_stale_characters(api_key=None, timeout=30):
    """
    Check every stored character and start a refresh thread for each stale one.
    Returns the started threads.
    """
    threads = []
    for char in cache.snapshot():
        realm, name = char["realm"], char["name"]
        try:
            summary = api.get_character_summary(realm, name, api_key=api_key, timeout=timeout)
        except api.BlizzardAPIError as e:
            logger.warning("Summary fetch failed for %s-%s: %s", name, realm, e)
            continue

        remote_ms = summary["lastModified"]
        if not is_stale(char.get("lastModified", 0), remote_ms):
            logger.debug("%s-%s is up to date", name, realm)
            continue

        t = threading.Thread(
            target=update_reputation,
            args=(realm, name, remote_ms),
            kwargs={"api_key": api_key, "timeout": timeout},
            daemon=True,
        )
        t.start()
        threads.append(t)
    return threads


def init(config_path=None):
    """Process-start hook: load config and store, then refresh stale characters."""
    setup_logging()
    cfg = load_config(config_path)
    characters = cache.get_characters()
    logger.info("Loaded %d tracked characters", len(characters))
    return refresh_stale_characters(api_key=cfg["apiKey"], timeout=cfg["updateTimeout"])
