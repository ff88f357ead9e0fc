"""Reputation filtering and the Legion faction allow-list."""

NEUTRAL = 3

STANDING_NAMES = {
    0: "Hated",
    1: "Hostile",
    2: "Unfriendly",
    3: "Neutral",
    4: "Friendly",
    5: "Honored",
    6: "Revered",
    7: "Exalted",
}

# Broken Isles and Argus factions
LEGION_FACTIONS = {
    1828: "Highmountain Tribe",
    1859: "The Nightfallen",
    1883: "Dreamweavers",
    1894: "The Wardens",
    1900: "Court of Farondis",
    1948: "Valarjar",
    2045: "Armies of Legionfall",
    2165: "Army of the Light",
    2170: "Argussian Reach",
}


def is_untouched(entry):
    return entry.get("standing") == NEUTRAL and entry.get("value") == 0


def filter_reputation(entries, faction_ids=None):
    """Drop neutral/0 entries and, with faction_ids, anything outside that set."""
    kept = []
    for entry in entries:
        if is_untouched(entry):
            continue
        if faction_ids is not None and entry.get("id") not in faction_ids:
            continue
        kept.append(entry)
    return kept


def standing_name(standing):
    return STANDING_NAMES.get(standing, "Unknown")
