#!/usr/bin/env python3
"""
Config for the reputation tracker.

The file lives at config/config.json:
  {"wowInstall": "...", "apiKey": "...", "updateTimeout": 30}

BLIZZARD_API_KEY (environment or .env) overrides apiKey.
"""
import os
import json
import logging
from dotenv import load_dotenv

from utils import resource_path

logger = logging.getLogger(__name__)

CONFIG_FILE  = resource_path(os.path.join("config", "config.json"))
API_KEY_ENV  = "BLIZZARD_API_KEY"

DEFAULT_CONFIG = {
    "wowInstall":    "",
    "apiKey":        "",
    # seconds, applied to every remote call
    "updateTimeout": 30,
}


def load_config(path=None):
    """
    Read the whole config file and return a dict with every default key filled.
    A missing or unreadable file falls back to the defaults.
    """
    path = path or CONFIG_FILE
    cfg = dict(DEFAULT_CONFIG)
    try:
        with open(path, encoding="utf-8") as f:
            stored = json.load(f)
    except FileNotFoundError:
        logger.info("No config at %s, using defaults", path)
        stored = {}
    except (OSError, ValueError) as e:
        logger.warning("Could not read config %s: %s", path, e)
        stored = {}

    if isinstance(stored, dict):
        cfg.update({k: v for k, v in stored.items() if k in DEFAULT_CONFIG})

    load_dotenv(resource_path(".env"))
    env_key = os.getenv(API_KEY_ENV)
    if env_key:
        cfg["apiKey"] = env_key
    return cfg


def save_config(cfg, path=None):
    """Write the whole config back to disk."""
    path = path or CONFIG_FILE
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(cfg, f, indent=2)
