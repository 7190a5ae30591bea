from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class DifficultyModifier:
    hp_bonus: int
    supplies_bonus: int
    # Added to every risk percentage before rolling.
    risk_modifier: int
    # Multiplies the raw threat score (<1 escalates slower).
    threat_modifier: float


BASE_HP = 10
BASE_SUPPLIES = 5
MAX_SUPPLIES = 10
MAX_INVENTORY = 8

DEFAULT_GENRE = "fantasy"
DEFAULT_TONE = "light"
DEFAULT_LENGTH = "medium"
DEFAULT_DIFFICULTY = "normal"
DEFAULT_FORMAT = "quest"

GENRES: tuple[str, ...] = ("fantasy", "sci-fi", "mystery", "horror-lite")

DIFFICULTY_MODIFIERS: dict[str, DifficultyModifier] = {
    "easy": DifficultyModifier(hp_bonus=2, supplies_bonus=2, risk_modifier=10, threat_modifier=0.7),
    "normal": DifficultyModifier(hp_bonus=0, supplies_bonus=0, risk_modifier=0, threat_modifier=1.0),
    "hard": DifficultyModifier(hp_bonus=-2, supplies_bonus=-1, risk_modifier=-10, threat_modifier=1.3),
}

FULL_SUCCESS_PROGRESS = 5
PARTIAL_SUCCESS_PROGRESS = 2
MAX_PROGRESS = 100

# (min score, stars, title), highest band first.
RATING_BANDS: tuple[tuple[int, int, str], ...] = (
    (80, 5, "Legendary Hero"),
    (60, 4, "Veteran Explorer"),
    (40, 3, "Adventurer"),
    (20, 2, "Apprentice"),
    (0, 1, "Novice"),
)

THREAT_ORDER: tuple[str, ...] = ("low", "medium", "high")

SEED_PREFIX = "GF"
SEED_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"  # no I, O, 0, 1

GENRE_CODES: dict[str, str] = {
    "fantasy": "FAN",
    "sci-fi": "SCI",
    "mystery": "MYS",
    "horror-lite": "HOR",
}
TONE_CODES: dict[str, str] = {"serious": "S", "light": "L"}
LENGTH_CODES: dict[str, str] = {"short": "S", "medium": "M", "long": "L"}

WORLD_NAMES: dict[str, str] = {
    "fantasy": "The Ancient Realm",
    "sci-fi": "Abandoned Station",
    "mystery": "Thornwood Manor",
    "horror-lite": "The Forsaken Cabin",
}
