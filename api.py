#!/usr/bin/env python3
import os
import logging
import requests
from auth import BLIZZ_TOKEN_URL, get_blizzard_token

logger = logging.getLogger(__name__)

# === Constants ===
REGION        = os.getenv("BLIZZARD_REGION", "us")
PROFILE_NS    = f"profile-{REGION}"
LOCALE        = "en_US"
CHARACTER_URL = f"https://{REGION}.api.blizzard.com/profile/wow/character/{{realm}}/{{name}}"


class BlizzardAPIError(Exception):
    """A profile API call failed or returned something unusable."""

    def __init__(self, message, url=None, status_code=None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


def realm_slug(realm):
    """'Kel'Thuzad' -> 'kelthuzad', 'Area 52' -> 'area-52'."""
    return realm.strip().lower().replace("'", "").replace(" ", "-")


def _get_profile(url, api_key, timeout):
    try:
        token = get_blizzard_token(api_key, timeout=timeout)
        resp = requests.get(
            url,
            headers={"Authorization": f"Bearer {token}"},
            params={"namespace": PROFILE_NS, "locale": LOCALE},
            timeout=timeout,
        )
        resp.raise_for_status()
        return resp.json()
    except requests.exceptions.HTTPError as e:
        status = e.response.status_code if e.response is not None else None
        raise BlizzardAPIError(f"request failed: {e}", url=url, status_code=status) from e
    except requests.exceptions.RequestException as e:
        raise BlizzardAPIError(f"request failed: {e}", url=url) from e
    except KeyError as e:
        raise BlizzardAPIError(f"token response has no {e}", url=BLIZZ_TOKEN_URL) from e
    except ValueError as e:
        raise BlizzardAPIError(f"invalid JSON from {url}", url=url) from e


def get_character_summary(realm, name, api_key=None, timeout=30):
    """
    Fetch the lightweight profile summary for a character.
    Returns {"realm", "name", "lastModified"} with lastModified in milliseconds.
    """
    url = CHARACTER_URL.format(realm=realm_slug(realm), name=name.lower())
    data = _get_profile(url, api_key, timeout)
    try:
        last_modified = int(data["last_login_timestamp"])
    except (KeyError, TypeError, ValueError) as e:
        raise BlizzardAPIError("summary has no last_login_timestamp", url=url) from e
    return {"realm": realm, "name": name, "lastModified": last_modified}


def get_character_reputations(realm, name, api_key=None, timeout=30):
    """
    Fetch every reputation of a character, flattened to
    {"id", "name", "standing", "value", "max"} where standing is the tier.
    Renown factions have no tier; their standing is None.
    """
    url = CHARACTER_URL.format(realm=realm_slug(realm), name=name.lower()) + "/reputations"
    data = _get_profile(url, api_key, timeout)
    entries = []
    if not isinstance(data, dict):
        raise BlizzardAPIError("reputations payload is not an object", url=url)
    for rep in data.get("reputations") or []:
        if not isinstance(rep, dict):
            continue
        faction  = rep.get("faction")
        standing = rep.get("standing")
        if not isinstance(faction, dict):
            continue
        if not isinstance(standing, dict):
            standing = {}
        if faction.get("id") is None:
            continue
        entries.append({
            "id":       faction["id"],
            "name":     faction.get("name", ""),
            "standing": standing.get("tier"),
            "value":    standing.get("value", 0),
            "max":      standing.get("max", 0),
        })
    logger.debug("Fetched %d reputations for %s-%s", len(entries), name, realm)
    return entries
