#!/usr/bin/env python3
import os
import copy
import json
import logging
import threading

from utils import resource_path

logger = logging.getLogger(__name__)

# Path to the character store
CHARACTERS_FILE = resource_path(os.path.join("data", "characters.json"))

# Process-wide character list and the lock guarding it and the file
_characters = None
store_lock  = threading.Lock()


def new_character(realm, name):
    return {
        "realm":        realm,
        "name":         name,
        "lastModified": 0,
        "notes":        [],
        "items":        [],
        "reputation":   [],
    }


def load_characters(path=None):
    """
    Read the whole store file. A missing or corrupt file yields an empty list.
    """
    path = path or CHARACTERS_FILE
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return []
    except (OSError, ValueError) as e:
        logger.warning("Could not read character store %s: %s", path, e)
        return []
    if not isinstance(data, list):
        logger.warning("Character store %s is not a list, ignoring it", path)
        return []
    return data


def save_characters(characters, path=None):
    """Serialize the whole list and rewrite the store file."""
    path = path or CHARACTERS_FILE
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    payload = json.dumps(characters, indent=2)
    with open(path, "w", encoding="utf-8") as f:
        f.write(payload)


def get_characters():
    """Return the process-wide list, loading it from disk on first use."""
    global _characters
    if _characters is None:
        _characters = load_characters()
    return _characters


def reset(characters=None):
    """Replace the in-memory list; None forces a reload on next use."""
    global _characters
    _characters = characters


def find_character(characters, realm, name):
    for char in characters:
        if char.get("realm") == realm and char.get("name") == name:
            return char
    return None


def snapshot():
    """Deep copy of the store taken under the lock."""
    with store_lock:
        return copy.deepcopy(get_characters())
