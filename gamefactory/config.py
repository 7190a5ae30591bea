from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path


def project_root() -> Path:
    # gamefactory/config.py -> gamefactory/ -> project root
    return Path(__file__).resolve().parents[1]


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


@dataclass(frozen=True, slots=True)
class EngineConfig:
    session_ttl: timedelta = timedelta(hours=4)
    sweep_interval: timedelta = timedelta(minutes=30)
    # A session cannot be defeated outright while turn <= protected_turns.
    protected_turns: int = 3
    templates_dir: Path = project_root() / "templates"


def load_config() -> EngineConfig:
    """Build the engine config from GAMEFACTORY_* environment variables."""

    defaults = EngineConfig()
    templates_dir = os.environ.get("GAMEFACTORY_TEMPLATES_DIR", "").strip()
    return EngineConfig(
        session_ttl=timedelta(
            seconds=_env_int("GAMEFACTORY_SESSION_TTL_SECONDS", int(defaults.session_ttl.total_seconds()))
        ),
        sweep_interval=timedelta(
            seconds=_env_int("GAMEFACTORY_SWEEP_INTERVAL_SECONDS", int(defaults.sweep_interval.total_seconds()))
        ),
        protected_turns=_env_int("GAMEFACTORY_PROTECTED_TURNS", defaults.protected_turns),
        templates_dir=Path(templates_dir) if templates_dir else defaults.templates_dir,
    )
