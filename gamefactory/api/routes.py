from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from gamefactory.api.deps import get_engine
from gamefactory.api.models import (
    ActRequest,
    ActResponse,
    ChallengeResponse,
    EndedPayload,
    EndSessionRequest,
    Genre,
    OutOfSyncPayload,
    PendingConsequencePayload,
    Session,
    SessionCreateRequest,
    SuccessPayload,
    SummaryResponse,
    TemplateListResponse,
)
from gamefactory.engine import Ended, OutOfSync, Outcome, PendingConsequence, Success, TurnEngine
from gamefactory.errors import SessionEnded, SessionNotFound

logger = logging.getLogger(__name__)

router = APIRouter()


def _http_error(e: ValueError) -> HTTPException:
    if isinstance(e, SessionNotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, SessionEnded):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


def _outcome_payload(outcome: Outcome) -> ActResponse:
    if isinstance(outcome, Success):
        s = outcome.session
        return SuccessPayload(
            turn=s.turn,
            hp=s.hp,
            supplies=s.supplies,
            threat=s.threat_level,
            inv_count=len(s.inventory),
            changes=outcome.changes,
            scene=s.scene,
        )
    if isinstance(outcome, PendingConsequence):
        return PendingConsequencePayload(
            turn=outcome.session.turn,
            consequences=outcome.consequences,
            failure_narrative=outcome.failure_narrative,
        )
    if isinstance(outcome, Ended):
        return EndedPayload(reason=outcome.reason, narrative=outcome.narrative, rating=outcome.rating)
    if isinstance(outcome, OutOfSync):
        return OutOfSyncPayload(
            current_turn=outcome.current_turn,
            hp=outcome.session.hp,
            supplies=outcome.session.supplies,
        )
    raise TypeError(f"Unknown outcome: {type(outcome).__name__}")


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/templates", response_model=TemplateListResponse)
async def list_templates_route(
    genre: Genre | None = None,
    featured: bool = False,
    limit: int = Query(20, ge=1, le=50),
    engine: TurnEngine = Depends(get_engine),
) -> TemplateListResponse:
    templates, total = engine.templates.list_templates(genre=genre, featured=featured, limit=limit)
    return TemplateListResponse(templates=[t.info() for t in templates], total=total)


@router.post("/sessions", response_model=Session, status_code=status.HTTP_201_CREATED)
async def create_session_route(payload: SessionCreateRequest, engine: TurnEngine = Depends(get_engine)) -> Session:
    try:
        return engine.create_session(payload)
    except ValueError as e:
        raise _http_error(e) from e


@router.get("/sessions/{session_ref}", response_model=Session)
async def get_session_route(session_ref: str, engine: TurnEngine = Depends(get_engine)) -> Session:
    try:
        return engine.get_session(session_ref)
    except ValueError as e:
        raise _http_error(e) from e


@router.delete("/sessions/{session_ref}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session_route(session_ref: str, engine: TurnEngine = Depends(get_engine)) -> Response:
    try:
        engine.delete_session(session_ref)
    except ValueError as e:
        raise _http_error(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/sessions/{session_ref}/actions", response_model=ActResponse)
async def act_route(
    session_ref: str,
    payload: ActRequest,
    engine: TurnEngine = Depends(get_engine),
) -> ActResponse:
    try:
        outcome = engine.submit_action(session_ref, payload.action_id, payload.client_turn)
    except ValueError as e:
        logger.info("action rejected ref=%s action=%s: %s", session_ref, payload.action_id, e)
        raise _http_error(e) from e
    return _outcome_payload(outcome)


@router.post("/sessions/{session_ref}/end", response_model=SummaryResponse)
async def end_session_route(
    session_ref: str,
    payload: EndSessionRequest,
    engine: TurnEngine = Depends(get_engine),
) -> SummaryResponse:
    try:
        summary = engine.end_session(session_ref, payload.reason)
    except ValueError as e:
        raise _http_error(e) from e
    return SummaryResponse(
        turns_survived=summary.turns_survived,
        items_found=summary.items_found,
        threats_defeated=summary.threats_defeated,
        progress_reached=summary.progress_reached,
        rating=summary.rating,
        seed=summary.seed,
        narrative=summary.narrative,
        items_list=summary.items_list,
        share_text=summary.share_text,
    )


@router.get("/sessions/{session_ref}/challenge", response_model=ChallengeResponse)
async def export_challenge_route(session_ref: str, engine: TurnEngine = Depends(get_engine)) -> ChallengeResponse:
    try:
        seed, share_text = engine.export_challenge(session_ref)
    except ValueError as e:
        raise _http_error(e) from e
    return ChallengeResponse(seed=seed, share_text=share_text)
