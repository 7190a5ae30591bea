from __future__ import annotations

from statemachine import State, StateMachine

from gamefactory.api.models import SessionPhase, Session


class SessionFSM(StateMachine):
    """FSM wrapper around Session.

    - awaiting_choice -> awaiting_consequence (risk check failed)
    - awaiting_choice / awaiting_consequence -> awaiting_choice (turn advanced)
    - awaiting_choice / awaiting_consequence -> ended

    The engine mutates the session; the FSM only guards which moves are legal
    from the phase the session is in.
    """

    awaiting_choice = State(
        SessionPhase.awaiting_choice.value,
        value=SessionPhase.awaiting_choice.value,
        initial=True,
    )
    awaiting_consequence = State(
        SessionPhase.awaiting_consequence.value,
        value=SessionPhase.awaiting_consequence.value,
    )
    ended = State(SessionPhase.ended.value, value=SessionPhase.ended.value, final=True)

    fail = awaiting_choice.to(awaiting_consequence)
    advance = awaiting_choice.to.itself() | awaiting_consequence.to(awaiting_choice)
    conclude = awaiting_choice.to(ended) | awaiting_consequence.to(ended)

    def __init__(self, session: Session):
        self.session = session
        super().__init__(start_value=session.phase.value)

    def sync_phase_to_model(self) -> None:
        self.session.phase = SessionPhase(str(self.current_state.value))
