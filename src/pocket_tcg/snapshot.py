"""Read-only, serialisable views of a battle for observers."""
from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from .models import CardInstance
from .player import Player

if TYPE_CHECKING:  # pragma: no cover
    from .battle import Battle


class AttackSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    cost: Dict[str, int]
    base_damage: int
    effect: str


class CardSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    card_type: Optional[str]
    hp: int
    damage: int
    category: str
    is_ex: bool
    status: str
    attacks: Tuple[AttackSnapshot, ...]


class PlayerSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    active: Optional[CardSnapshot]
    bench: Tuple[CardSnapshot, ...]
    deck_size: int
    hand_size: int
    prize_count: int
    discard_count: int


class BattleSnapshot(BaseModel):
    """State of a battle at one point in time.

    ``players`` is always ordered player 1, player 2, independent of whose
    turn it is; ``current_player`` names the player in turn.
    """

    model_config = ConfigDict(frozen=True)

    match_id: str
    turn: int
    first_turn: bool
    current_player: str
    players: Tuple[PlayerSnapshot, PlayerSnapshot]


def card_snapshot(card: CardInstance) -> CardSnapshot:
    definition = card.definition
    return CardSnapshot(
        name=definition.name,
        card_type=definition.card_type,
        hp=definition.hp,
        damage=card.damage,
        category=definition.category.value,
        is_ex=definition.is_ex,
        status=card.status.value,
        attacks=tuple(
            AttackSnapshot(
                name=attack.name,
                cost=dict(attack.cost),
                base_damage=attack.base_damage,
                effect=attack.effect.value,
            )
            for attack in definition.attacks
        ),
    )


def player_snapshot(player: Player) -> PlayerSnapshot:
    return PlayerSnapshot(
        name=player.name,
        active=card_snapshot(player.active) if player.active is not None else None,
        bench=tuple(card_snapshot(card) for card in player.bench),
        deck_size=len(player.deck),
        hand_size=len(player.hand),
        prize_count=len(player.prize_cards),
        discard_count=len(player.discard_pile),
    )


def battle_snapshot(battle: "Battle") -> BattleSnapshot:
    return BattleSnapshot(
        match_id=battle.match_id,
        turn=battle.turn,
        first_turn=battle.first_turn,
        current_player=battle.current_player.name,
        players=(player_snapshot(battle.player1), player_snapshot(battle.player2)),
    )


__all__ = [
    "AttackSnapshot",
    "CardSnapshot",
    "PlayerSnapshot",
    "BattleSnapshot",
    "card_snapshot",
    "player_snapshot",
    "battle_snapshot",
]
