"""Rule constants for a battle, overridable from the environment."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

_ENV_PREFIX = "POCKET_TCG_"
_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class RuleConfig:
    """Numeric rules of the Pocket format.

    The defaults are the official values. ``enforce_turn_limits`` switches on
    the optional one-energy-attachment-per-turn limit; it is off by default so
    that the calling driver owns turn structure.
    """

    deck_size: int = 20
    prize_count: int = 3
    opening_hand_size: int = 5
    bench_limit: int = 3
    max_copies: int = 2
    poison_damage: int = 10
    poison_bonus: int = 30
    weakness_multiplier: int = 2
    wake_up_chance: float = 0.5
    enforce_turn_limits: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RuleConfig":
        """Build a config from ``POCKET_TCG_*`` environment variables.

        Reads the following variables, falling back to the defaults:
        - POCKET_TCG_DECK_SIZE (default: 20)
        - POCKET_TCG_PRIZE_COUNT (default: 3)
        - POCKET_TCG_OPENING_HAND_SIZE (default: 5)
        - POCKET_TCG_BENCH_LIMIT (default: 3)
        - POCKET_TCG_MAX_COPIES (default: 2)
        - POCKET_TCG_POISON_DAMAGE (default: 10)
        - POCKET_TCG_POISON_BONUS (default: 30)
        - POCKET_TCG_WEAKNESS_MULTIPLIER (default: 2)
        - POCKET_TCG_WAKE_UP_CHANCE (default: 0.5)
        - POCKET_TCG_ENFORCE_TURN_LIMITS (default: false)
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        def _int(name: str, default: int) -> int:
            return int(env.get(f"{_ENV_PREFIX}{name}", default))

        return cls(
            deck_size=_int("DECK_SIZE", defaults.deck_size),
            prize_count=_int("PRIZE_COUNT", defaults.prize_count),
            opening_hand_size=_int("OPENING_HAND_SIZE", defaults.opening_hand_size),
            bench_limit=_int("BENCH_LIMIT", defaults.bench_limit),
            max_copies=_int("MAX_COPIES", defaults.max_copies),
            poison_damage=_int("POISON_DAMAGE", defaults.poison_damage),
            poison_bonus=_int("POISON_BONUS", defaults.poison_bonus),
            weakness_multiplier=_int("WEAKNESS_MULTIPLIER", defaults.weakness_multiplier),
            wake_up_chance=float(env.get(f"{_ENV_PREFIX}WAKE_UP_CHANCE", defaults.wake_up_chance)),
            enforce_turn_limits=env.get(f"{_ENV_PREFIX}ENFORCE_TURN_LIMITS", "").strip().lower() in _TRUTHY,
        )


DEFAULT_CONFIG = RuleConfig()


__all__ = ["RuleConfig", "DEFAULT_CONFIG"]
