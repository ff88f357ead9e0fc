import os
import time
import logging
import requests
from dotenv import load_dotenv

from utils import resource_path

# Load environment variables from .env
load_dotenv(resource_path(".env"))

logger = logging.getLogger(__name__)

BLIZZ_TOKEN_URL = "https://oauth.battle.net/token"

# Cache for the client-credentials token
_cached_blizz = None
_blizz_expiry = 0


def has_client_credentials():
    return bool(os.getenv("BLIZZARD_CLIENT_ID") and os.getenv("BLIZZARD_CLIENT_SECRET"))


def get_blizzard_token(api_key=None, timeout=30):
    """
    Return a bearer token for the Blizzard API.

    With BLIZZARD_CLIENT_ID/BLIZZARD_CLIENT_SECRET set, a client-credentials
    token is fetched and cached until shortly before it expires. Otherwise the
    configured API key is used as-is.
    """
    global _cached_blizz, _blizz_expiry
    if not has_client_credentials():
        return api_key

    now = time.time()
    if _cached_blizz and now < _blizz_expiry:
        return _cached_blizz
    resp = requests.post(
        BLIZZ_TOKEN_URL,
        data={"grant_type": "client_credentials"},
        auth=(os.getenv("BLIZZARD_CLIENT_ID"), os.getenv("BLIZZARD_CLIENT_SECRET")),
        timeout=timeout,
    )
    resp.raise_for_status()
    data = resp.json()
    _cached_blizz = data["access_token"]
    _blizz_expiry = now + data.get("expires_in", 1800) - 60
    logger.debug("Fetched new Blizzard token, expires in %ss", data.get("expires_in", 1800))
    return _cached_blizz


def clear_token_cache():
    global _cached_blizz, _blizz_expiry
    _cached_blizz = None
    _blizz_expiry = 0
