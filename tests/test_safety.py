from __future__ import annotations

from gamefactory.safety import (
    DEATH_NARRATIVES,
    KeywordSafetyFilter,
    death_narrative,
    validate_content,
)


def test_soften_replaces_case_insensitively() -> None:
    f = KeywordSafetyFilter()
    out = f.soften("A Nightmare of BLOOD. The guard was killed.")
    assert out == "A bad dream of shadow. The guard was defeated."


def test_soften_leaves_clean_text_alone() -> None:
    text = "A quiet road winds through the hills."
    assert KeywordSafetyFilter().soften(text) == text


def test_soften_with_custom_table() -> None:
    f = KeywordSafetyFilter({"goblin": "gnome"})
    assert f.soften("A goblin appears. A nightmare.") == "A gnome appears. A nightmare."


def test_validate_content_flags_keyword() -> None:
    result = validate_content("They found an old Ouija board.")
    assert result.valid is False
    assert result.flagged_keyword == "ouija"

    assert validate_content("They found an old map.").valid is True


def test_validate_content_matches_whole_words_only() -> None:
    assert validate_content("Sit between the difficult cult members.").flagged_keyword == "cult"
    assert validate_content("Something sits between the difficulty markers.").valid is True
    assert validate_content("A White Supremacist banner").flagged_keyword == "white supremacist"


def test_death_narrative_pool_follows_tone() -> None:
    light = death_narrative(seed="GF-FAN-L-M-7K9X", turn=6, tone="light")
    serious = death_narrative(seed="GF-FAN-S-M-7K9X", turn=6, tone="serious")
    assert light in DEATH_NARRATIVES["reset"]
    assert serious in DEATH_NARRATIVES["fade"]


def test_death_narrative_is_deterministic() -> None:
    a = death_narrative(seed="GF-FAN-S-M-7K9X", turn=9, tone="serious")
    b = death_narrative(seed="GF-FAN-S-M-7K9X", turn=9, tone="serious")
    assert a == b
