from __future__ import annotations

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass

from gamefactory import oracle
from gamefactory.api.models import (
    Choice,
    Consequence,
    ConsequenceState,
    EndReason,
    Rating,
    Scene,
    Session,
    SessionCreateRequest,
    SessionPhase,
    SessionSettings,
)
from gamefactory.constants import (
    BASE_HP,
    BASE_SUPPLIES,
    DEFAULT_DIFFICULTY,
    DEFAULT_FORMAT,
    DEFAULT_GENRE,
    DEFAULT_LENGTH,
    DEFAULT_TONE,
    DIFFICULTY_MODIFIERS,
    FULL_SUCCESS_PROGRESS,
    GENRES,
    MAX_INVENTORY,
    MAX_PROGRESS,
    MAX_SUPPLIES,
    PARTIAL_SUCCESS_PROGRESS,
)
from gamefactory.errors import (
    InvalidChoice,
    InvalidConsequence,
    NoPendingConsequence,
    SessionEnded,
    SessionNotFound,
)
from gamefactory.fsm import SessionFSM
from gamefactory.rules import (
    FREE_ESCAPE,
    apply_cost,
    calculate_rating,
    calculate_threat_level,
    can_pay_cost,
    default_consequences,
    is_defeated,
)
from gamefactory.safety import KeywordSafetyFilter, SafetyFilter, death_narrative
from gamefactory.scenarios import ScenarioProvider
from gamefactory.seed_codec import (
    decode_seed,
    encode_seed,
    format_share_text,
    generate_session_ref,
    is_valid_seed,
    world_name,
)
from gamefactory.session_store import SessionStore
from gamefactory.templates import TemplateRegistry

logger = logging.getLogger(__name__)

ConsequenceBuilder = Callable[[Session, Choice], list[Consequence]]

_ENDING_LINES: dict[EndReason, str] = {
    EndReason.victory: "Against all odds, you succeeded. Your journey reaches its triumphant conclusion.",
    EndReason.escape: "You managed to escape, though the adventure remains unfinished.",
    EndReason.abandon: "You chose to abandon this path. Perhaps another time.",
}


@dataclass(frozen=True, slots=True)
class Success:
    session: Session
    narrative: str
    # Last events-log line, for a one-line "what happened" summary.
    changes: str


@dataclass(frozen=True, slots=True)
class PendingConsequence:
    session: Session
    consequences: list[Consequence]
    failure_narrative: str


@dataclass(frozen=True, slots=True)
class Ended:
    session: Session
    reason: EndReason
    narrative: str
    rating: Rating


@dataclass(frozen=True, slots=True)
class OutOfSync:
    """Not an error: the client's turn is stale, most likely a retried call."""

    session: Session
    current_turn: int


Outcome = Success | PendingConsequence | Ended | OutOfSync


@dataclass(frozen=True, slots=True)
class Summary:
    turns_survived: int
    items_found: int
    threats_defeated: int
    progress_reached: int
    rating: Rating
    seed: str
    narrative: str
    items_list: list[str]
    share_text: str


def _default_consequence_builder(_session: Session, _choice: Choice) -> list[Consequence]:
    return default_consequences()


class TurnEngine:
    """Advances sessions one action at a time.

    Each ``submit_action`` runs load -> validate -> compute -> store under the
    session's lock and works on a private copy, so a rejected call never leaves
    a partial write behind.
    """

    def __init__(
        self,
        *,
        store: SessionStore,
        scenarios: ScenarioProvider,
        safety: SafetyFilter | None = None,
        templates: TemplateRegistry | None = None,
        protected_turns: int = 3,
        consequence_builder: ConsequenceBuilder = _default_consequence_builder,
    ) -> None:
        self._store = store
        self._scenarios = scenarios
        self._safety = safety if safety is not None else KeywordSafetyFilter()
        self._templates = templates if templates is not None else TemplateRegistry()
        self._protected_turns = protected_turns
        self._consequence_builder = consequence_builder

    @property
    def store(self) -> SessionStore:
        return self._store

    @property
    def templates(self) -> TemplateRegistry:
        return self._templates

    def create_session(self, request: SessionCreateRequest | None = None) -> Session:
        request = request or SessionCreateRequest()
        settings = self._resolve_settings(request)
        modifier = DIFFICULTY_MODIFIERS[settings.difficulty]
        hp = BASE_HP + modifier.hp_bonus
        supplies = min(MAX_SUPPLIES, BASE_SUPPLIES + modifier.supplies_bonus)

        seed = request.seed or encode_seed(settings)
        scene = self._soften_scene(self._scenarios.initial_scene(settings, seed))
        now = self._store.now()

        session = Session(
            session_ref=generate_session_ref(),
            seed=seed,
            turn=1,
            hp=hp,
            max_hp=hp,
            supplies=supplies,
            max_supplies=MAX_SUPPLIES,
            max_inventory=MAX_INVENTORY,
            chapter=scene.chapter_id,
            scene=scene,
            settings=settings,
            created_at=now,
            last_turn_at=now,
        )
        stored = self._store.create(session)
        logger.info("session created ref=%s seed=%s difficulty=%s", stored.session_ref, seed, settings.difficulty)
        return stored

    def get_session(self, session_ref: str) -> Session:
        session = self._store.get(session_ref)
        if session is None:
            raise SessionNotFound(session_ref)
        return session

    def delete_session(self, session_ref: str) -> None:
        with self._store.lock(session_ref):
            if not self._store.delete(session_ref):
                raise SessionNotFound(session_ref)

    def submit_action(self, session_ref: str, action_id: str, client_turn: int) -> Outcome:
        with self._store.lock(session_ref):
            session = self.get_session(session_ref)

            if session.phase == SessionPhase.ended:
                raise SessionEnded(session_ref, session.end_reason)

            if session.phase == SessionPhase.awaiting_choice and client_turn != session.turn:
                logger.info(
                    "out of sync ref=%s client_turn=%s current_turn=%s", session_ref, client_turn, session.turn
                )
                return OutOfSync(session=session, current_turn=session.turn)

            fsm = SessionFSM(session)

            if session.phase == SessionPhase.awaiting_consequence:
                return self._resolve_consequence(session, fsm, action_id)

            choice = next((c for c in session.scene.choices if c.id == action_id), None)
            if choice is None:
                raise InvalidChoice(action_id)
            return self._resolve_choice(session, fsm, choice)

    def end_session(self, session_ref: str, reason: EndReason) -> Summary:
        """Summarize a run. Only a victory touches the stored session (progress -> 100)."""

        with self._store.lock(session_ref):
            session = self.get_session(session_ref)
            if reason == EndReason.victory and session.progress != MAX_PROGRESS:
                session = self._store.update(session_ref, progress=MAX_PROGRESS) or session

            rating = calculate_rating(session)
            narrative = self._ending_narrative(session, reason)
            world = world_name(session.settings.genre, session.settings.template_id)
            logger.info("session summarized ref=%s reason=%s stars=%s", session_ref, reason.value, rating.stars)

            return Summary(
                turns_survived=session.turn,
                items_found=len(session.items_found),
                threats_defeated=session.threats_defeated,
                progress_reached=session.progress,
                rating=rating,
                seed=session.seed,
                narrative=narrative,
                items_list=list(session.items_found),
                share_text=format_share_text(session.seed, world, session.turn),
            )

    def export_challenge(self, session_ref: str) -> tuple[str, str]:
        """Return (seed, share_text) for a current or completed run."""

        session = self.get_session(session_ref)
        world = world_name(session.settings.genre, session.settings.template_id)
        return session.seed, format_share_text(session.seed, world, session.turn)

    def _resolve_choice(self, session: Session, fsm: SessionFSM, choice: Choice) -> Outcome:
        if choice.risk is not None:
            result = oracle.resolve_risk(
                session.seed,
                session.turn,
                choice.id,
                choice.risk,
                session.settings.difficulty,
            )
            if not result.success:
                return self._handle_failure(session, fsm, choice)

        if choice.cost is not None:
            apply_cost(session, choice.cost)
        return self._advance(session, fsm, choice, full_success=True)

    def _handle_failure(self, session: Session, fsm: SessionFSM, choice: Choice) -> Outcome:
        affordable = [c for c in self._consequence_builder(session, choice) if can_pay_cost(session, c.cost)]

        if not affordable:
            if session.turn > self._protected_turns:
                return self._conclude(session, fsm, EndReason.defeat)
            affordable = [FREE_ESCAPE.model_copy(deep=True)]

        pending = ConsequenceState(
            failed_choice_id=choice.id,
            consequences=affordable,
            failure_narrative=self._safety.soften(
                f'Your attempt to "{choice.label}" didn\'t go as planned. You must decide how to proceed.'
            ),
        )
        session.pending_consequence = pending
        fsm.fail()
        fsm.sync_phase_to_model()

        saved = self._store.save(session) or session
        return PendingConsequence(
            session=saved,
            consequences=pending.consequences,
            failure_narrative=pending.failure_narrative,
        )

    def _resolve_consequence(self, session: Session, fsm: SessionFSM, consequence_id: str) -> Outcome:
        pending = session.pending_consequence
        if pending is None:
            raise NoPendingConsequence()

        consequence = next((c for c in pending.consequences if c.id == consequence_id), None)
        if consequence is None:
            raise InvalidConsequence(consequence_id)

        apply_cost(session, consequence.cost)
        failed_choice = next((c for c in session.scene.choices if c.id == pending.failed_choice_id), None)
        session.pending_consequence = None

        if is_defeated(session):
            return self._conclude(session, fsm, EndReason.defeat)
        return self._advance(session, fsm, failed_choice, full_success=False)

    def _advance(self, session: Session, fsm: SessionFSM, choice: Choice | None, *, full_success: bool) -> Outcome:
        session.turn += 1
        gain = FULL_SUCCESS_PROGRESS if full_success else PARTIAL_SUCCESS_PROGRESS
        session.progress = min(MAX_PROGRESS, session.progress + gain)

        if session.progress >= MAX_PROGRESS:
            return self._conclude(session, fsm, EndReason.victory)

        session.threat_level = calculate_threat_level(session)
        session.scene = self._soften_scene(self._scenarios.next_scene(session, choice))
        session.chapter = session.scene.chapter_id
        session.pending_consequence = None
        if choice is not None:
            session.events_log.append(f"Turn {session.turn - 1}: {choice.label}")

        fsm.advance()
        fsm.sync_phase_to_model()

        saved = self._store.save(session) or session
        return Success(
            session=saved,
            narrative=saved.scene.narrative,
            changes=saved.events_log[-1] if saved.events_log else "Progressed",
        )

    def _conclude(self, session: Session, fsm: SessionFSM, reason: EndReason) -> Ended:
        if reason == EndReason.victory:
            session.progress = MAX_PROGRESS
        session.pending_consequence = None
        session.end_reason = reason
        fsm.conclude()
        fsm.sync_phase_to_model()

        saved = self._store.save(session) or session
        logger.info("session ended ref=%s reason=%s turn=%s", saved.session_ref, reason.value, saved.turn)
        return Ended(
            session=saved,
            reason=reason,
            narrative=self._ending_narrative(saved, reason),
            rating=calculate_rating(saved),
        )

    def _ending_narrative(self, session: Session, reason: EndReason) -> str:
        if reason == EndReason.defeat:
            text = death_narrative(seed=session.seed, turn=session.turn, tone=session.settings.tone)
        else:
            text = _ENDING_LINES[reason]
        return self._safety.soften(text)

    def _soften_scene(self, scene: Scene) -> Scene:
        return scene.model_copy(update={"narrative": self._safety.soften(scene.narrative)})

    def _resolve_settings(self, request: SessionCreateRequest) -> SessionSettings:
        template = None
        if request.template_id:
            template = self._templates.get(request.template_id)
            if template is None:
                raise ValueError(f"Unknown template: {request.template_id}")

        replay: dict[str, str] = {}
        if request.seed is not None:
            decoded = decode_seed(request.seed) if is_valid_seed(request.seed) else None
            if decoded is None:
                raise ValueError(f"Invalid seed: {request.seed}")
            replay = decoded

        genre = replay.get("genre") or request.genre or (template.genre if template is not None else None)
        if genre is None and request.surprise:
            # Pre-seed entropy is fine here; nothing after this point may use it.
            genre = random.SystemRandom().choice(GENRES)

        return SessionSettings(
            genre=genre or DEFAULT_GENRE,
            tone=replay.get("tone") or request.tone or DEFAULT_TONE,
            length=replay.get("length") or request.length or DEFAULT_LENGTH,
            difficulty=request.difficulty or (template.difficulty if template is not None else DEFAULT_DIFFICULTY),
            format=request.format or DEFAULT_FORMAT,
            template_id=request.template_id,
        )
