from __future__ import annotations

import os
from collections.abc import Callable, Generator
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from gamefactory.api.models import Scene, Session, SessionSettings
from gamefactory.engine import TurnEngine
from gamefactory.scenarios import TemplateScenarioProvider
from gamefactory.session_store import SessionStore
from gamefactory.templates import TemplateRegistry, get_templates

TEST_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
T0 = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


@pytest.fixture(scope="session", autouse=True)
def _load_dotenv_for_tests() -> None:
    """Load repo .env for local runs (PyCharm/CLI).

    Handy for overriding GAMEFACTORY_* settings locally. In CI we don't
    auto-load `.env` unless explicitly opted-in.
    """

    # Opt-in in CI with: GAMEFACTORY_LOAD_DOTENV_FOR_TESTS=1
    if os.environ.get("CI") and os.environ.get("GAMEFACTORY_LOAD_DOTENV_FOR_TESTS") != "1":
        return

    env_path = Path(__file__).resolve().parents[1] / ".env"
    if env_path.exists():
        from dotenv import load_dotenv

        load_dotenv(dotenv_path=env_path, override=False)


@pytest.fixture(scope="session", autouse=True)
def _init_templates_from_test_fixtures() -> None:
    """Initialize templates from `tests/templates` instead of the repo's curated set.

    This keeps tests hermetic: the app's startup hook reuses this registry.
    """

    from gamefactory.templates import init_templates, reset_templates_for_tests

    reset_templates_for_tests()
    init_templates(root=TEST_TEMPLATES_DIR)


class FakeClock:
    def __init__(self, start: datetime = T0) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(clock: FakeClock) -> SessionStore:
    return SessionStore(ttl=timedelta(hours=4), sweep_interval=timedelta(minutes=30), clock=clock)


@pytest.fixture()
def registry() -> TemplateRegistry:
    return get_templates()


@pytest.fixture()
def engine(store: SessionStore, registry: TemplateRegistry) -> TurnEngine:
    return TurnEngine(store=store, scenarios=TemplateScenarioProvider(registry), templates=registry)


@pytest.fixture()
def session_factory() -> Callable[..., Session]:
    """Build a Session with sensible normal-difficulty defaults; keyword overrides win."""

    def _make(**overrides: Any) -> Session:
        data: dict[str, Any] = {
            "session_ref": "run-test",
            "seed": "GF-FAN-L-M-TEST",
            "hp": 10,
            "max_hp": 10,
            "supplies": 5,
            "max_supplies": 10,
            "max_inventory": 8,
            "scene": Scene(title="Start", narrative="A quiet road."),
            "settings": SessionSettings(),
            "created_at": T0,
            "last_turn_at": T0,
        }
        data.update(overrides)
        return Session(**data)

    return _make


@pytest.fixture()
def client(engine: TurnEngine) -> Generator[TestClient, None, None]:
    from gamefactory.api.deps import get_engine
    from gamefactory.main import app

    app.dependency_overrides[get_engine] = lambda: engine
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
