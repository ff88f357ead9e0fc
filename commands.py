#!/usr/bin/env python3
"""
String command dispatcher.

dispatch(["addchar", "Area-52", "Thrall"]) -> b'{"data": "character added"}'

Every response is JSON bytes holding either "data" or "error".
"""
import json
import logging

import cache
from reputations import LEGION_FACTIONS, filter_reputation, standing_name
from utils import title_case

logger = logging.getLogger(__name__)


class CommandError(Exception):
    """A user-facing failure, returned as {"error": ...}."""


def _data(payload):
    return json.dumps({"data": payload}).encode("utf-8")


def _error(message):
    return json.dumps({"error": message}).encode("utf-8")


def _expect(params, count, usage):
    if len(params) != count:
        raise CommandError(f"usage: {usage}")


def _save(characters):
    try:
        cache.save_characters(characters)
    except OSError as e:
        logger.error("Could not write character store: %s", e)
        raise CommandError(f"could not save characters: {e}") from e


def add_character(params):
    _expect(params, 2, "addchar <realm> <name>")
    realm, name = title_case(params[0]), title_case(params[1])
    with cache.store_lock:
        characters = cache.get_characters()
        if cache.find_character(characters, realm, name) is not None:
            raise CommandError("character already exists")
        characters.append(cache.new_character(realm, name))
        try:
            _save(characters)
        except CommandError:
            characters.pop()
            raise
    logger.info("Added %s-%s", name, realm)
    return "character added"


def delete_character(params):
    _expect(params, 2, "delchar <realm> <name>")
    realm, name = title_case(params[0]), title_case(params[1])
    with cache.store_lock:
        characters = cache.get_characters()
        char = cache.find_character(characters, realm, name)
        if char is None:
            raise CommandError("character not found")
        index = characters.index(char)
        characters.pop(index)
        try:
            _save(characters)
        except CommandError:
            characters.insert(index, char)
            raise
    logger.info("Deleted %s-%s", name, realm)
    return "character deleted"


def list_characters(params):
    _expect(params, 0, "listchars")
    return [{"realm": c["realm"], "name": c["name"]} for c in cache.snapshot()]


def get_reputation(params):
    if len(params) not in (2, 3) or (len(params) == 3 and params[2].lower() != "legion"):
        raise CommandError("usage: getrep <realm> <name> [legion]")
    realm, name = title_case(params[0]), title_case(params[1])
    char = cache.find_character(cache.snapshot(), realm, name)
    if char is None:
        raise CommandError("character not found")
    faction_ids = set(LEGION_FACTIONS) if len(params) == 3 else None
    return filter_reputation(char.get("reputation", []), faction_ids)


def add_note(params):
    if len(params) < 3:
        raise CommandError("usage: addnote <realm> <name> <note...>")
    realm, name = title_case(params[0]), title_case(params[1])
    note = " ".join(params[2:])
    with cache.store_lock:
        characters = cache.get_characters()
        char = cache.find_character(characters, realm, name)
        if char is None:
            raise CommandError("character not found")
        char.setdefault("notes", []).append(note)
        try:
            _save(characters)
        except CommandError:
            char["notes"].pop()
            raise
    return "note added"


def get_datastore(params):
    _expect(params, 0, "getdatastore")
    return cache.snapshot()


def find_reputation(params):
    """Every character on a realm that has a standing with the given faction."""
    _expect(params, 2, "findrep <realm> <factionId>")
    realm = title_case(params[0])
    try:
        faction_id = int(params[1])
    except ValueError:
        raise CommandError(f"invalid faction id: {params[1]}") from None

    found = []
    for char in cache.snapshot():
        if char.get("realm") != realm:
            continue
        for entry in char.get("reputation", []):
            if entry.get("id") == faction_id:
                found.append({
                    "name":         char["name"],
                    "standing":     entry.get("standing"),
                    "standingName": standing_name(entry.get("standing")),
                    "value":        entry.get("value"),
                    "max":          entry.get("max"),
                })
                break
    return found


COMMANDS = {
    "addchar":      add_character,
    "delchar":      delete_character,
    "listchars":    list_characters,
    "getrep":       get_reputation,
    "addnote":      add_note,
    "getdatastore": get_datastore,
    "findrep":      find_reputation,
}


def dispatch(args):
    """Run the command named by args[0] and return a JSON envelope as bytes."""
    if not args:
        return _error("no command given")
    command, params = args[0], list(args[1:])
    handler = COMMANDS.get(command.lower())
    if handler is None:
        return _error(f"unknown command: {command}")
    try:
        return _data(handler(params))
    except CommandError as e:
        return _error(str(e))
