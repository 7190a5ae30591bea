"""Shareable seed codes: GF-{GENRE}-{TONE}-{LENGTH}-{RANDOM}, e.g. GF-SCI-L-M-7K9X."""

from __future__ import annotations

import random
import re
from typing import Any
from uuid import uuid4

from gamefactory.api.models import SessionSettings
from gamefactory.constants import (
    GENRE_CODES,
    LENGTH_CODES,
    SEED_ALPHABET,
    SEED_PREFIX,
    TONE_CODES,
    WORLD_NAMES,
)

_SEED_RE = re.compile(r"^GF-[A-Z]{3}-[SL]-[SML]-[A-Z0-9]{4}$")


def _random_code(length: int = 4) -> str:
    # Creation-time entropy only; everything after the seed exists goes through the oracle.
    sysrand = random.SystemRandom()
    return "".join(sysrand.choice(SEED_ALPHABET) for _ in range(length))


def encode_seed(settings: SessionSettings) -> str:
    genre_code = GENRE_CODES.get(settings.genre, "UNK")
    tone_code = TONE_CODES.get(settings.tone, "L")
    length_code = LENGTH_CODES.get(settings.length, "M")
    return f"{SEED_PREFIX}-{genre_code}-{tone_code}-{length_code}-{_random_code()}"


def decode_seed(seed: str) -> dict[str, Any] | None:
    """Recover the settings encoded in a seed, or None if it isn't one of ours."""

    parts = seed.split("-")
    if len(parts) != 5 or parts[0] != SEED_PREFIX:
        return None

    _, genre_code, tone_code, length_code, _ = parts
    genre = next((g for g, code in GENRE_CODES.items() if code == genre_code), None)
    if genre is None:
        return None
    tone = next((t for t, code in TONE_CODES.items() if code == tone_code), "light")
    length = next((n for n, code in LENGTH_CODES.items() if code == length_code), "medium")
    return {"genre": genre, "tone": tone, "length": length}


def is_valid_seed(seed: str) -> bool:
    return _SEED_RE.match(seed) is not None


def generate_session_ref() -> str:
    return f"run-{uuid4().hex[:16]}"


def world_name(genre: str, template_id: str | None = None) -> str:
    if template_id:
        return " ".join(w.capitalize() for w in template_id.split("-"))
    return WORLD_NAMES.get(genre, "Unknown World")


def format_share_text(seed: str, world: str, turns_survived: int) -> str:
    return "\n".join(
        [
            "Game Factory Challenge!",
            f'I survived {turns_survived} turns in "{world}"',
            "Can you beat me?",
            f"Seed: {seed}",
            "Rules: 13+ safe",
        ]
    )
