from __future__ import annotations

from gamefactory.config import EngineConfig
from gamefactory.engine import TurnEngine
from gamefactory.scenarios import TemplateScenarioProvider
from gamefactory.session_store import SessionStore
from gamefactory.templates import init_templates

_ENGINE: TurnEngine | None = None


def build_engine(*, config: EngineConfig) -> TurnEngine:
    templates = init_templates(root=config.templates_dir)
    store = SessionStore(ttl=config.session_ttl, sweep_interval=config.sweep_interval)
    return TurnEngine(
        store=store,
        scenarios=TemplateScenarioProvider(templates),
        templates=templates,
        protected_turns=config.protected_turns,
    )


def init_engine(*, config: EngineConfig) -> TurnEngine:
    """Build the process-wide engine once; later calls return the same instance."""

    global _ENGINE
    if _ENGINE is None:
        _ENGINE = build_engine(config=config)
    return _ENGINE


def shutdown_engine() -> None:
    global _ENGINE
    if _ENGINE is not None:
        _ENGINE.store.stop()
    _ENGINE = None


def get_engine() -> TurnEngine:
    if _ENGINE is None:
        raise RuntimeError("Engine not initialized. Call init_engine() at startup.")
    return _ENGINE
