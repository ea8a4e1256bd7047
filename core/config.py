"""Game configuration constants"""
from data.loader import load_data

# Load data from JSON files (with fallback to hardcoded CONFIG)
_loaded_data = load_data()

_eggs_data = _loaded_data.get("eggs", {})
_pets_data = _loaded_data.get("pets", {})
_world_data = _loaded_data.get("world_points", {})

# Convert stat range arrays to tuples
_stat_ranges = {
    stat: tuple(stat_range)
    for stat, stat_range in _pets_data.get("stat_ranges", {}).items()
}

CONFIG = {
    # Incubation timings (milliseconds)
    "INCUBATION_DURATION_MS": 180_000,
    "HATCH_GRACE_MS": 3_000,
    # UI-driven poll cadence (seconds)
    "POLL_INTERVAL_S": 1.0,
    # Anti-cheat maxima (inclusive)
    "ACTION_BOUNDS": {
        "xenocoins_gain": 10_000,
        "cash_gain": 100,
        "pet_stat_change": 10,
        "item_quantity": 100,
    },
    # Base stat ranges rolled at hatch time (inclusive), before egg bonuses
    "STAT_RANGES": _stat_ranges if _stat_ranges else {
        "happiness": (7, 9),
        "health": (6, 8),
        "hunger": (6, 8),
        "strength": (4, 6),
        "dexterity": (4, 6),
        "intelligence": (4, 6),
        "speed": (4, 6),
        "attack": (2, 4),
        "defense": (2, 4),
        "precision": (2, 4),
        "evasion": (2, 4),
        "luck": (2, 4),
    },
    "PET_DEFAULTS": _pets_data.get("defaults") or {
        "style": "Default",
        "personality": "Sanguine",
        "level": 1,
    },
    "PET_NAMES": _pets_data.get("names") or [
        "Buddy", "Luna", "Max", "Bella", "Charlie", "Ruby", "Oliver", "Stella",
    ],
    "EGGS": _eggs_data.get("eggs", []),
    "WORLD_POINTS": _world_data.get("points", []),
    # Local save file for incubation records and the selected world point
    "SAVE_FILE": "xenopets_session.json",
}
