from __future__ import annotations

from typing import Callable, List

import pytest

from pocket_tcg.battle import Battle
from pocket_tcg.models import (
    AttackDefinition,
    AttackEffect,
    CardCategory,
    CardDefinition,
    CardInstance,
)

PIKACHU = CardDefinition(
    name="Pikachu",
    card_type="Lightning",
    hp=60,
    stage="Basic",
    attacks=(
        AttackDefinition(
            name="Circle Circuit",
            cost={"L": 1},
            base_damage=10,
            effect=AttackEffect.MULTIPLY_BY_BENCH,
            text="This attack does 10 damage for each of your Benched [L] Pokémon.",
        ),
    ),
    weakness="Fighting",
    retreat_cost=1,
)

MACHOP = CardDefinition(
    name="Machop",
    card_type="Fighting",
    hp=70,
    stage="Basic",
    attacks=(AttackDefinition(name="Low Kick", cost={"F": 1}, base_damage=20),),
    weakness="Psychic",
    retreat_cost=1,
)

RAICHU = CardDefinition(
    name="Raichu",
    card_type="Lightning",
    hp=100,
    stage="Stage 1",
    evolves_from="Pikachu",
    attacks=(AttackDefinition(name="Thunderbolt", cost={"L": 3}, base_damage=140),),
    weakness="Fighting",
    retreat_cost=1,
)

PROFESSORS_RESEARCH = CardDefinition(name="Professor's Research", category=CardCategory.TRAINER)


@pytest.fixture
def make_cards() -> Callable[..., List[CardInstance]]:
    def _make(definition: CardDefinition, count: int, owner: str = "p1", prefix: str = "card") -> List[CardInstance]:
        return [
            CardInstance(uid=f"{owner}-{prefix}-{i:03d}", owner_id=owner, definition=definition)
            for i in range(count)
        ]

    return _make


@pytest.fixture
def battle(make_cards) -> Battle:
    """A battle with 20 Pikachu against 20 Machop, not yet set up."""
    return Battle.create(
        make_cards(PIKACHU, 20, owner="p1"),
        make_cards(MACHOP, 20, owner="p2"),
        seed=1234,
    )


@pytest.fixture
def started(battle: Battle) -> Battle:
    """The default battle after setup, with both actives in play."""
    battle.setup()
    for player in (battle.player1, battle.player2):
        assert battle.play_card(player.hand[0], player)
    return battle
