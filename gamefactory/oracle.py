"""Deterministic random oracle.

Every helper derives a fresh ``random.Random`` from a composite string key, so
the same (seed, turn, context) always produces the same outcome, across
processes too. Nothing here touches the module-level RNG or keeps state between
calls.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TypeVar

from gamefactory.constants import DIFFICULTY_MODIFIERS
from gamefactory.errors import EmptySelection

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class RiskResult:
    success: bool
    # 0..99
    roll: int
    # Risk after the difficulty modifier, clamped to 0..100.
    threshold: int
    original_risk: int
    modifier: int


def _rng(key: str) -> random.Random:
    # str seeds are hashed with sha512 by random.Random, independent of PYTHONHASHSEED.
    return random.Random(key)


def _draw(key: str, n: int) -> int:
    return int(_rng(key).random() * n)


def roll(seed: str, turn: int, context: str) -> int:
    """Return a reproducible integer in [0, 99]."""

    return _draw(f"{seed}:{turn}:{context}", 100)


def resolve_risk(seed: str, turn: int, action_id: str, risk_percent: int, difficulty: str = "normal") -> RiskResult:
    modifier = DIFFICULTY_MODIFIERS[difficulty].risk_modifier
    threshold = min(100, max(0, risk_percent + modifier))
    r = roll(seed, turn, action_id)
    return RiskResult(
        success=r < threshold,
        roll=r,
        threshold=threshold,
        original_risk=risk_percent,
        modifier=modifier,
    )


def select_from(seed: str, turn: int, context: str, items: Sequence[T]) -> T:
    if not items:
        logger.error("empty selection requested seed=%s turn=%s context=%s", seed, turn, context)
        raise EmptySelection(context)
    return items[roll(seed, turn, f"select:{context}") % len(items)]


def shuffle(seed: str, turn: int, context: str, items: Sequence[T]) -> list[T]:
    """Fisher-Yates over a copy of ``items``; one swap draw per position, high to low."""

    out = list(items)
    rng = _rng(f"{seed}:{turn}:shuffle:{context}")
    for i in range(len(out) - 1, 0, -1):
        j = int(rng.random() * (i + 1))
        out[i], out[j] = out[j], out[i]
    return out


def in_range(seed: str, turn: int, context: str, lo: int, hi: int) -> int:
    if hi < lo:
        raise ValueError(f"in_range requires lo <= hi (got {lo}..{hi})")
    return _draw(f"{seed}:{turn}:range:{context}", hi - lo + 1) + lo


def should_occur(seed: str, turn: int, context: str, probability: int) -> bool:
    return roll(seed, turn, context) < probability
