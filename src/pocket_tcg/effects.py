"""Attack damage modifiers and trainer effect resolution."""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from .config import DEFAULT_CONFIG, RuleConfig
from .game_tools import GameTools
from .models import AttackDefinition, AttackEffect, CardInstance, StatusCondition, Zone
from .player import Player

logger = logging.getLogger(__name__)


@dataclass
class EffectContext:
    """Context for executing card effects."""

    tools: GameTools
    player: Player
    opponent: Player
    card_instance: CardInstance
    rng: random.Random = field(default_factory=random.Random, repr=False)
    config: RuleConfig = DEFAULT_CONFIG


# ----------------------------------------------------------------------
# attack damage
# ----------------------------------------------------------------------
DamageModifier = Callable[[int, Player, CardInstance, RuleConfig], int]


def _multiply_by_bench(damage: int, attacker_owner: Player, defender: CardInstance, config: RuleConfig) -> int:
    return damage * len(attacker_owner.bench)


def _bonus_if_defender_poisoned(damage: int, attacker_owner: Player, defender: CardInstance, config: RuleConfig) -> int:
    if defender.status is StatusCondition.POISONED:
        return damage + config.poison_bonus
    return damage


DAMAGE_MODIFIERS: Dict[AttackEffect, DamageModifier] = {
    AttackEffect.MULTIPLY_BY_BENCH: _multiply_by_bench,
    AttackEffect.BONUS_IF_DEFENDER_POISONED: _bonus_if_defender_poisoned,
}


def calculate_damage(
    attacker: CardInstance,
    attacker_owner: Player,
    defender: CardInstance,
    attack: AttackDefinition,
    config: RuleConfig = DEFAULT_CONFIG,
) -> int:
    """Damage ``attack`` deals to ``defender``.

    The effect modifier applies first, weakness last.
    """
    damage = attack.base_damage
    modifier = DAMAGE_MODIFIERS.get(attack.effect)
    if modifier is not None:
        damage = modifier(damage, attacker_owner, defender, config)
    weakness = defender.definition.weakness
    if weakness is not None and weakness == attacker.definition.card_type:
        damage *= config.weakness_multiplier
    return damage


# ----------------------------------------------------------------------
# trainer effects
# ----------------------------------------------------------------------
TrainerEffect = Callable[[EffectContext], Dict[str, object]]


class TrainerEffectRegistry:
    """Trainer effects keyed by card name.

    Cards with no registered effect resolve as a no-op so that unrecognised
    card data never stops a game.
    """

    def __init__(self, effects: Optional[Dict[str, TrainerEffect]] = None) -> None:
        self._effects: Dict[str, TrainerEffect] = dict(effects or {})

    def register(self, name: str) -> Callable[[TrainerEffect], TrainerEffect]:
        def decorator(func: TrainerEffect) -> TrainerEffect:
            self._effects[name] = func
            return func

        return decorator

    def __contains__(self, name: str) -> bool:
        return name in self._effects

    def copy(self) -> "TrainerEffectRegistry":
        return TrainerEffectRegistry(self._effects)

    def resolve(self, context: EffectContext) -> Dict[str, object]:
        name = context.card_instance.name
        effect = self._effects.get(name)
        if effect is None:
            logger.warning("No trainer effect registered for %s; treating as no-op", name)
            return {"success": True, "message": f"{name} has no effect"}
        return effect(context)


DEFAULT_TRAINER_EFFECTS = TrainerEffectRegistry()


@DEFAULT_TRAINER_EFFECTS.register("Professor's Research")
def _professors_research(context: EffectContext) -> Dict[str, object]:
    drawn = context.tools.draw(context.player, 2)
    return {
        "success": True,
        "message": f"Drew {len(drawn)} card(s)",
        "drawn": [c.uid for c in drawn],
    }


@DEFAULT_TRAINER_EFFECTS.register("Poké Ball")
def _poke_ball(context: EffectContext) -> Dict[str, object]:
    """Put a random Basic Pokémon from the deck into the hand."""
    candidates = [c for c in context.player.deck if c.definition.is_basic_pokemon]
    if not candidates:
        return {"success": True, "message": "No Basic Pokémon in deck"}
    selected = context.rng.choice(candidates)
    context.tools.move_card(context.player, Zone.DECK, Zone.HAND, selected)
    context.tools.shuffle(context.player)
    return {"success": True, "message": f"Put {selected.name} into hand", "selected": selected.uid}


__all__ = [
    "EffectContext",
    "DAMAGE_MODIFIERS",
    "calculate_damage",
    "TrainerEffectRegistry",
    "DEFAULT_TRAINER_EFFECTS",
]
