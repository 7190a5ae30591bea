from __future__ import annotations


class EngineError(ValueError):
    """Base class for domain failures surfaced to callers.

    Subclasses ValueError so routes can keep translating domain errors the same
    way regardless of which layer raised them.
    """


class SessionNotFound(EngineError):
    def __init__(self, session_ref: str) -> None:
        super().__init__("Session not found")
        self.session_ref = session_ref


class SessionEnded(EngineError):
    def __init__(self, session_ref: str, reason: str | None) -> None:
        super().__init__(f"Session has ended ({reason or 'unknown'})")
        self.session_ref = session_ref
        self.reason = reason


class InvalidChoice(EngineError):
    def __init__(self, action_id: str) -> None:
        super().__init__(f"Invalid choice: {action_id}")
        self.action_id = action_id


class InvalidConsequence(EngineError):
    def __init__(self, action_id: str) -> None:
        super().__init__(f"Invalid consequence: {action_id}")
        self.action_id = action_id


class NoPendingConsequence(EngineError):
    def __init__(self) -> None:
        super().__init__("No pending consequence")


class EmptySelection(EngineError):
    """A selection helper was asked to pick from nothing (content authoring bug)."""

    def __init__(self, context: str) -> None:
        super().__init__(f"Cannot select from empty sequence (context={context})")
        self.context = context


class TemplateLoadError(RuntimeError):
    pass
