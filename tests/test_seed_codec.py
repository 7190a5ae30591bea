from __future__ import annotations

import re

from gamefactory.api.models import SessionSettings
from gamefactory.seed_codec import (
    decode_seed,
    encode_seed,
    format_share_text,
    generate_session_ref,
    is_valid_seed,
    world_name,
)


def test_encode_seed_layout() -> None:
    seed = encode_seed(SessionSettings(genre="sci-fi", tone="serious", length="long"))
    assert re.match(r"^GF-SCI-S-L-[A-HJ-NP-Z2-9]{4}$", seed)
    assert is_valid_seed(seed)


def test_encode_seed_suffix_varies() -> None:
    seeds = {encode_seed(SessionSettings()) for _ in range(20)}
    assert all(s.startswith("GF-FAN-L-M-") for s in seeds)
    assert len(seeds) > 1


def test_decode_seed_recovers_settings() -> None:
    seed = encode_seed(SessionSettings(genre="horror-lite", tone="light", length="short"))
    assert decode_seed(seed) == {"genre": "horror-lite", "tone": "light", "length": "short"}


def test_decode_seed_rejects_foreign_strings() -> None:
    assert decode_seed("not-a-seed") is None
    assert decode_seed("XX-FAN-L-M-ABCD") is None
    assert decode_seed("GF-ZZZ-L-M-ABCD") is None


def test_is_valid_seed() -> None:
    assert is_valid_seed("GF-MYS-L-S-7K9X")
    assert not is_valid_seed("GF-MYS-Q-S-7K9X")
    assert not is_valid_seed("GF-MYS-L-S-7K9")
    assert not is_valid_seed("gf-mys-l-s-7k9x")


def test_generate_session_ref_is_unique() -> None:
    refs = {generate_session_ref() for _ in range(50)}
    assert len(refs) == 50
    assert all(re.match(r"^run-[0-9a-f]{16}$", r) for r in refs)


def test_world_name() -> None:
    assert world_name("fantasy") == "The Ancient Realm"
    assert world_name("mystery", "lantern-street") == "Lantern Street"


def test_format_share_text() -> None:
    text = format_share_text("GF-FAN-L-M-7K9X", "The Ancient Realm", 12)
    assert 'I survived 12 turns in "The Ancient Realm"' in text
    assert text.splitlines()[-2] == "Seed: GF-FAN-L-M-7K9X"
