from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, Field

Genre = Literal["fantasy", "sci-fi", "mystery", "horror-lite"]
Tone = Literal["serious", "light"]
Length = Literal["short", "medium", "long"]
Difficulty = Literal["easy", "normal", "hard"]
GameFormat = Literal["quest", "arcade", "puzzle"]
ThreatLevel = Literal["low", "medium", "high"]
CostKind = Literal["hp", "supplies", "turn", "threat", "item"]


class EndReason(StrEnum):
    victory = "victory"
    defeat = "defeat"
    escape = "escape"
    abandon = "abandon"


class SessionPhase(StrEnum):
    awaiting_choice = "awaiting_choice"
    awaiting_consequence = "awaiting_consequence"
    ended = "ended"


class Cost(BaseModel):
    kind: CostKind
    amount: int = Field(0, ge=0)
    effect: str | None = None


class Choice(BaseModel):
    id: str
    label: str
    # Success percentage; None means the choice always succeeds.
    risk: int | None = Field(None, ge=0, le=100)
    cost: Cost | None = None


class Consequence(BaseModel):
    id: str
    label: str
    cost: Cost


class ConsequenceState(BaseModel):
    failed_choice_id: str
    consequences: list[Consequence]
    failure_narrative: str


class Scene(BaseModel):
    chapter_id: int = 1
    title: str
    narrative: str
    choices: list[Choice] = Field(default_factory=list)


class InventoryItem(BaseModel):
    id: str
    name: str
    description: str = ""
    usable: bool = False


class SessionSettings(BaseModel):
    genre: Genre = "fantasy"
    tone: Tone = "light"
    length: Length = "medium"
    difficulty: Difficulty = "normal"
    format: GameFormat = "quest"
    template_id: str | None = None


class Session(BaseModel):
    session_ref: str
    # Immutable; the only source of randomness once the session exists.
    seed: str

    turn: int = Field(1, ge=1)
    hp: int = Field(..., ge=0)
    max_hp: int
    supplies: int = Field(..., ge=0)
    max_supplies: int
    inventory: list[InventoryItem] = Field(default_factory=list)
    max_inventory: int

    chapter: int = 1
    progress: int = Field(0, ge=0, le=100)
    threat_level: ThreatLevel = "low"

    phase: SessionPhase = SessionPhase.awaiting_choice
    end_reason: EndReason | None = None

    scene: Scene
    pending_consequence: ConsequenceState | None = None

    # Summary-only history.
    events_log: list[str] = Field(default_factory=list)
    items_found: list[str] = Field(default_factory=list)
    threats_defeated: int = 0

    settings: SessionSettings

    created_at: datetime
    last_turn_at: datetime


class Rating(BaseModel):
    stars: int
    title: str


class SessionCreateRequest(BaseModel):
    template_id: str | None = None
    # Replay a shared challenge: genre, tone and length come from the seed.
    seed: str | None = None
    surprise: bool = False
    genre: Genre | None = None
    tone: Tone | None = None
    length: Length | None = None
    difficulty: Difficulty | None = None
    format: GameFormat | None = None


class ActRequest(BaseModel):
    action_id: str = Field(..., min_length=1)
    client_turn: int = Field(..., ge=1)


class EndSessionRequest(BaseModel):
    reason: EndReason


class SuccessPayload(BaseModel):
    outcome: Literal["success"] = "success"
    turn: int
    hp: int
    supplies: int
    threat: ThreatLevel
    inv_count: int
    changes: str
    scene: Scene


class PendingConsequencePayload(BaseModel):
    outcome: Literal["pending_consequence"] = "pending_consequence"
    turn: int
    consequences: list[Consequence]
    failure_narrative: str


class EndedPayload(BaseModel):
    outcome: Literal["run_ended"] = "run_ended"
    reason: EndReason
    narrative: str
    rating: Rating


class OutOfSyncPayload(BaseModel):
    outcome: Literal["out_of_sync"] = "out_of_sync"
    current_turn: int
    hp: int
    supplies: int
    message: str = "Action already applied, refreshing state"


ActResponse = SuccessPayload | PendingConsequencePayload | EndedPayload | OutOfSyncPayload


class SummaryResponse(BaseModel):
    turns_survived: int
    items_found: int
    threats_defeated: int
    progress_reached: int
    rating: Rating
    seed: str
    narrative: str
    items_list: list[str]
    share_text: str


class ChallengeResponse(BaseModel):
    seed: str
    share_text: str


class TemplateInfo(BaseModel):
    id: str
    name: str
    genre: Genre
    difficulty: Difficulty
    featured: bool = False
    description: str = ""
    tags: list[str] = Field(default_factory=list)


class TemplateListResponse(BaseModel):
    templates: list[TemplateInfo]
    total: int
