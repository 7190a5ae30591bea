from __future__ import annotations

from typing import Protocol

from gamefactory import oracle
from gamefactory.api.models import Choice, Cost, Scene, Session, SessionSettings
from gamefactory.templates import TemplateRegistry


class ScenarioProvider(Protocol):
    """Supplies scenes to the engine. Must not do network I/O on the turn path."""

    def initial_scene(self, settings: SessionSettings, seed: str) -> Scene: ...

    def next_scene(self, session: Session, previous_choice: Choice | None) -> Scene: ...


_OPENING_SCENES: dict[str, Scene] = {
    "fantasy": Scene(
        chapter_id=1,
        title="The Awakening",
        narrative=(
            "You wake in a dimly lit stone chamber. Ancient runes glow faintly on the walls. "
            "A wooden door stands before you, and a narrow passage leads into darkness to your left. "
            "Your pack lies nearby with basic supplies."
        ),
        choices=[
            Choice(id="c1", label="Examine the glowing runes"),
            Choice(id="c2", label="Try the wooden door", risk=70),
            Choice(id="c3", label="Explore the dark passage", risk=60),
        ],
    ),
    "sci-fi": Scene(
        chapter_id=1,
        title="Emergency Wake",
        narrative=(
            "Emergency lights pulse red as you emerge from cryo-sleep. The station is silent except "
            "for the hum of failing life support. Your heads-up display flickers, showing critical "
            "system alerts. A sealed bulkhead blocks the main corridor."
        ),
        choices=[
            Choice(id="c1", label="Check the terminal for status"),
            Choice(id="c2", label="Override the bulkhead seal", risk=70),
            Choice(id="c3", label="Search for an alternate route", cost=Cost(kind="turn", amount=1)),
        ],
    ),
    "mystery": Scene(
        chapter_id=1,
        title="The Study",
        narrative=(
            "The old manor's study is exactly as described in the letter. Dusty bookshelves line "
            "the walls, and a large desk dominates the center. Something feels wrong. The grandfather "
            "clock has stopped at midnight, and papers are scattered as if someone left in a hurry."
        ),
        choices=[
            Choice(id="c1", label="Examine the scattered papers"),
            Choice(id="c2", label="Check behind the bookshelf", risk=70),
            Choice(id="c3", label="Investigate the stopped clock"),
        ],
    ),
    "horror-lite": Scene(
        chapter_id=1,
        title="The Cabin",
        narrative=(
            "The cabin looked abandoned from outside, but inside shows signs of recent occupation. "
            "A fire still smolders in the hearth. Through the grimy window, fog rolls through the "
            "trees. You hear a sound from the basement - rhythmic, like breathing."
        ),
        choices=[
            Choice(id="c1", label="Investigate the basement carefully", risk=60),
            Choice(id="c2", label="Search the main floor first"),
            Choice(id="c3", label="Barricade the basement door", cost=Cost(kind="supplies", amount=1)),
        ],
    ),
}

_BASE_RISK = {"low": 80, "medium": 70, "high": 60}
_MOOD = {"low": "quiet", "medium": "tense", "high": "dangerous"}


class TemplateScenarioProvider:
    """Static scenes: curated template openings, built-in genre openings as fallback.

    Continuation scenes are derived from session state; when the session came
    from a template, one encounter line is picked through the oracle so
    replays from the same seed read the same.
    """

    def __init__(self, templates: TemplateRegistry) -> None:
        self._templates = templates

    def initial_scene(self, settings: SessionSettings, seed: str) -> Scene:
        if settings.template_id:
            template = self._templates.get(settings.template_id)
            if template is not None:
                return template.initial_scene.model_copy(deep=True)
        opening = _OPENING_SCENES.get(settings.genre, _OPENING_SCENES["fantasy"])
        return opening.model_copy(deep=True)

    def next_scene(self, session: Session, previous_choice: Choice | None) -> Scene:
        turn = session.turn
        base_risk = _BASE_RISK[session.threat_level]
        place = "station" if session.settings.genre == "sci-fi" else "area"
        supplies = "adequate" if session.supplies > 3 else "running low"

        parts = [
            f"You continue your journey. The {place} feels {_MOOD[session.threat_level]}.",
            f"Your supplies are {supplies}.",
        ]
        if previous_choice is not None:
            parts.insert(0, f"{previous_choice.label}: done.")
        encounter = self._encounter_line(session)
        if encounter:
            parts.append(encounter)

        return Scene(
            chapter_id=turn // 5 + 1,
            title=f"Scene {turn}",
            narrative=" ".join(parts),
            choices=[
                Choice(id=f"c{turn}-1", label="Proceed cautiously", risk=base_risk),
                Choice(id=f"c{turn}-2", label="Take the quick route", risk=base_risk - 20),
                Choice(
                    id=f"c{turn}-3",
                    label="Rest and recover",
                    cost=Cost(kind="turn", amount=1, effect="Recover 1 HP"),
                ),
            ],
        )

    def _encounter_line(self, session: Session) -> str | None:
        template_id = session.settings.template_id
        template = self._templates.get(template_id) if template_id else None
        if template is None:
            return None

        # Threats once things heat up, discoveries while it's calm.
        pool = template.encounters.threats if session.threat_level != "low" else template.encounters.discoveries
        if not pool:
            return None
        return oracle.select_from(session.seed, session.turn, "encounter", pool)
