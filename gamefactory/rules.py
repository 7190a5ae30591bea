"""Scoring and cost rules.

The threat and rating formulas are tuning functions whose exact constants are
observable (and shared through seeds), so they are kept verbatim.
"""

from __future__ import annotations

from gamefactory.api.models import Consequence, Cost, Rating, Session, ThreatLevel
from gamefactory.constants import DIFFICULTY_MODIFIERS, RATING_BANDS, THREAT_ORDER

FREE_ESCAPE = Consequence(
    id="escape-free",
    label="Barely escape (this time)",
    cost=Cost(kind="turn", amount=0, effect="Lucky escape"),
)


def calculate_threat_level(session: Session) -> ThreatLevel:
    score = 2 * session.turn + (10 - session.hp) + (5 - session.supplies)
    adjusted = score * DIFFICULTY_MODIFIERS[session.settings.difficulty].threat_modifier
    if adjusted < 15:
        return "low"
    if adjusted < 30:
        return "medium"
    return "high"


def calculate_rating(session: Session) -> Rating:
    score = 2 * session.turn + session.progress + 5 * len(session.items_found) + 3 * session.threats_defeated
    for min_score, stars, title in RATING_BANDS:
        if score >= min_score:
            return Rating(stars=stars, title=title)
    # Scores are never negative, but keep the floor explicit.
    return Rating(stars=1, title="Novice")


def escalate_threat(level: ThreatLevel) -> ThreatLevel:
    idx = THREAT_ORDER.index(level)
    return THREAT_ORDER[min(idx + 1, len(THREAT_ORDER) - 1)]  # type: ignore[return-value]


def can_pay_cost(session: Session, cost: Cost) -> bool:
    if cost.kind == "hp":
        # Strictly more: a consequence may never be an exact death.
        return session.hp > cost.amount
    if cost.kind == "supplies":
        return session.supplies >= cost.amount
    if cost.kind == "item":
        return len(session.inventory) > 0
    return True


def apply_cost(session: Session, cost: Cost) -> None:
    if cost.kind == "hp":
        session.hp = max(0, session.hp - cost.amount)
    elif cost.kind == "supplies":
        session.supplies = max(0, session.supplies - cost.amount)
    elif cost.kind == "threat":
        session.threat_level = escalate_threat(session.threat_level)
    elif cost.kind == "item":
        if session.inventory:
            session.inventory.pop()
    # "turn" has no numeric effect; it is absorbed by the regular turn advance.


def default_consequences() -> list[Consequence]:
    return [
        Consequence(id="f1", label="Push through (lose 2 HP)", cost=Cost(kind="hp", amount=2)),
        Consequence(id="f2", label="Find another way (lose 1 turn)", cost=Cost(kind="turn", amount=1)),
        Consequence(id="f3", label="Use supplies to help (lose 1 supply)", cost=Cost(kind="supplies", amount=1)),
    ]


def is_defeated(session: Session) -> bool:
    return session.hp == 0 or (session.supplies == 0 and session.threat_level == "high")
