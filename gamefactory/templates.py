from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from gamefactory.api.models import Difficulty, Genre, Scene, TemplateInfo
from gamefactory.errors import TemplateLoadError
from gamefactory.safety import validate_content

logger = logging.getLogger(__name__)


class TemplateWorld(BaseModel):
    setting: str = ""
    era: str = ""
    atmosphere: str = ""
    tags: list[str] = Field(default_factory=list)


class TemplateEncounters(BaseModel):
    threats: list[str] = Field(default_factory=list)
    discoveries: list[str] = Field(default_factory=list)
    puzzles: list[str] = Field(default_factory=list)


class GameTemplate(BaseModel):
    id: str
    name: str
    description: str = ""
    genre: Genre
    difficulty: Difficulty = "normal"
    featured: bool = False
    world: TemplateWorld = Field(default_factory=TemplateWorld)
    initial_scene: Scene
    encounters: TemplateEncounters = Field(default_factory=TemplateEncounters)

    def texts(self) -> list[str]:
        """Every player-visible string the template carries."""

        scene = self.initial_scene
        return [
            self.name,
            self.description,
            scene.title,
            scene.narrative,
            *(c.label for c in scene.choices),
            *self.encounters.threats,
            *self.encounters.discoveries,
            *self.encounters.puzzles,
        ]

    def info(self) -> TemplateInfo:
        return TemplateInfo(
            id=self.id,
            name=self.name,
            genre=self.genre,
            difficulty=self.difficulty,
            featured=self.featured,
            description=self.description,
            tags=list(self.world.tags),
        )


@dataclass(frozen=True, slots=True)
class TemplateRegistry:
    """Curated templates keyed by id, in stable (sorted path) load order."""

    by_id: dict[str, GameTemplate] = field(default_factory=dict)

    def get(self, template_id: str) -> GameTemplate | None:
        return self.by_id.get(template_id)

    def all(self) -> list[GameTemplate]:
        return list(self.by_id.values())

    def list_templates(
        self,
        *,
        genre: str | None = None,
        featured: bool | None = None,
        limit: int = 20,
    ) -> tuple[list[GameTemplate], int]:
        """Filter templates; returns (first `limit` matches, total matches)."""

        matches = self.all()
        if genre:
            matches = [t for t in matches if t.genre == genre]
        if featured:
            matches = [t for t in matches if t.featured]
        return matches[: max(0, limit)], len(matches)


def load_templates(*, root: Path) -> TemplateRegistry:
    """Load every ``*.json`` under ``root`` (recursively).

    Malformed files are logged and skipped. Set GAMEFACTORY_STRICT_TEMPLATES=1
    to make them fatal instead.
    """

    strict = os.getenv("GAMEFACTORY_STRICT_TEMPLATES", "").strip().lower() in {"1", "true", "yes"}

    if not root.exists():
        logger.warning("templates root not found: %s", root)
        return TemplateRegistry()

    by_id: dict[str, GameTemplate] = {}
    for path in sorted(root.rglob("*.json")):
        try:
            template = GameTemplate.model_validate(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            if strict:
                raise TemplateLoadError(f"Failed to load template {path}: {e}") from e
            logger.warning("skipping template %s: %s", path, e)
            continue
        flagged = next((r for r in map(validate_content, template.texts()) if not r.valid), None)
        if flagged is not None:
            if strict:
                raise TemplateLoadError(f"Template {path} contains forbidden content: {flagged.flagged_keyword}")
            logger.warning("skipping template %s: forbidden content (%s)", path, flagged.flagged_keyword)
            continue
        if template.id in by_id:
            raise TemplateLoadError(f"Duplicate template id: {template.id}")
        by_id[template.id] = template

    logger.info("loaded %d templates from %s", len(by_id), root)
    return TemplateRegistry(by_id=by_id)


_TEMPLATES: TemplateRegistry | None = None


def init_templates(*, root: Path) -> TemplateRegistry:
    """Load templates once and cache them.

    Safe to call multiple times; subsequent calls return the already loaded registry.
    """

    global _TEMPLATES
    if _TEMPLATES is None:
        _TEMPLATES = load_templates(root=root)
    return _TEMPLATES


def reset_templates_for_tests() -> None:
    global _TEMPLATES
    _TEMPLATES = None


def get_templates() -> TemplateRegistry:
    if _TEMPLATES is None:
        raise RuntimeError("Templates not initialized. Call init_templates() at startup.")
    return _TEMPLATES
