"""13+ content rules applied to narrative before it leaves the engine."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Protocol

from gamefactory import oracle

FORBIDDEN_KEYWORDS: tuple[str, ...] = (
    # occult
    "demon", "satan", "lucifer", "devil", "ouija", "seance", "séance",
    "pentagram", "ritual sacrifice", "dark ritual", "summoning circle",
    "necromancy", "possession", "exorcism", "cult", "occult",
    # graphic violence
    "gore", "gory", "dismember", "decapitate", "mutilate", "torture",
    "disembowel", "eviscerate", "bloodbath", "entrails", "intestines",
    # sexual content
    "sexual", "erotic", "nude", "naked", "seduce", "intercourse",
    "orgasm", "genitals", "breasts", "pornographic",
    # self-harm
    "suicide", "suicidal", "self-harm", "cut myself", "kill myself",
    "end my life", "hang myself",
    # drugs
    "cocaine", "heroin", "meth", "crack", "inject drugs", "overdose",
    "drug dealer", "drug use",
    # gambling framing
    "bet", "wager", "gamble", "gambling", "jackpot", "casino",
    "slot machine", "poker chips", "blackjack table",
    # hate
    "racial slur", "hate crime", "nazi", "white supremacy", "white supremacist", "ethnic cleansing",
    # real-world weapons
    "ar-15", "ak-47", "assault rifle", "school shooting", "mass shooting",
)

# Applied in order; multi-word phrases are matched as plain substrings.
SAFE_ALTERNATIVES: dict[str, str] = {
    "killed": "defeated",
    "died": "fell",
    "blood": "shadow",
    "corpse": "remains",
    "dead body": "fallen figure",
    "terrifying": "unsettling",
    "horrifying": "disturbing",
    "nightmare": "bad dream",
    "you die": "you collapse",
    "you are killed": "you are overcome",
}

DEATH_NARRATIVES: dict[str, tuple[str, ...]] = {
    "fade": (
        "Your vision fades to black...",
        "Exhaustion overtakes you as everything goes dark...",
        "The world grows distant and quiet...",
        "You slip into unconsciousness...",
    ),
    "reset": (
        "You wake up, somehow back where you started...",
        "Time seems to rewind as you find yourself at the beginning...",
        "A strange feeling washes over you as reality shifts...",
    ),
}

# Whole words only, so "difficulty" doesn't trip "cult".
_FORBIDDEN_PATTERNS = tuple((kw, re.compile(rf"\b{re.escape(kw)}\b", re.IGNORECASE)) for kw in FORBIDDEN_KEYWORDS)


class SafetyFilter(Protocol):
    def soften(self, text: str) -> str: ...


@dataclass(frozen=True, slots=True)
class ValidationResult:
    valid: bool
    reason: str | None = None
    flagged_keyword: str | None = None


def validate_content(content: str) -> ValidationResult:
    for keyword, pattern in _FORBIDDEN_PATTERNS:
        if pattern.search(content):
            return ValidationResult(valid=False, reason="Contains forbidden keyword", flagged_keyword=keyword)
    return ValidationResult(valid=True)


class KeywordSafetyFilter:
    """Default filter: case-insensitive substitution of unsafe wording."""

    def __init__(self, alternatives: dict[str, str] | None = None) -> None:
        table = alternatives if alternatives is not None else SAFE_ALTERNATIVES
        self._rules = [(re.compile(re.escape(unsafe), re.IGNORECASE), safe) for unsafe, safe in table.items()]

    def soften(self, text: str) -> str:
        for pattern, safe in self._rules:
            text = pattern.sub(safe, text)
        return text


def death_narrative(*, seed: str, turn: int, tone: str) -> str:
    style = "reset" if tone == "light" else "fade"
    return oracle.select_from(seed, turn, f"death:{style}", DEATH_NARRATIVES[style])
