"""Atomic operations available to the battle engine."""
from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import List, Optional

from .journal import MatchJournal
from .models import CardInstance, GameLogEntry, StatusCondition, Zone
from .player import Player


@dataclass
class ToolCallContext:
    """Context object injected into every tool call."""

    match_id: str
    actor: str
    journal: MatchJournal


@dataclass
class GameTools:
    """Collection of stateful atomic operations.

    The tools never perform rule validation. They simply manipulate player
    zones as instructed by the battle while journaling every change.
    """

    context: ToolCallContext
    rng: random.Random = field(default_factory=random.Random, repr=False)

    # ------------------------------------------------------------------
    # deck operations
    # ------------------------------------------------------------------
    def shuffle(self, player: Player) -> None:
        seed = f"{self.rng.getrandbits(64):016x}"
        player.shuffle(random.Random(int(seed, 16)))
        self._log(action="shuffle", payload={"player": player.name, "zone": Zone.DECK.value}, random_seed=seed)

    def draw(self, player: Player, count: int = 1) -> List[CardInstance]:
        drawn: List[CardInstance] = []
        for _ in range(count):
            card = player.draw_card()
            if card is None:
                break
            drawn.append(card)
        self._log(
            action="draw",
            payload={"player": player.name, "count": count, "cards": [card.uid for card in drawn]},
        )
        return drawn

    def deal_prizes(self, player: Player, count: int) -> List[CardInstance]:
        """Move up to ``count`` cards from the top of the deck into the prize pile."""
        dealt = [player.deck.pop() for _ in range(min(count, len(player.deck)))]
        player.prize_cards.extend(dealt)
        self._log(action="deal_prizes", payload={"player": player.name, "count": len(dealt)})
        self.context.journal.record_zone(self.context.match_id, player.name, Zone.PRIZE, player.prize_cards)
        return dealt

    # ------------------------------------------------------------------
    # card movement
    # ------------------------------------------------------------------
    def move_card(self, player: Player, source: Zone, target: Zone, card: CardInstance) -> None:
        if source is Zone.ACTIVE:
            if player.active is not card:
                raise ValueError(f"Card {card.uid} is not {player.name}'s active Pokémon")
            player.active = None
        else:
            source_cards = player.zone(source)
            if not any(c is card for c in source_cards):
                raise ValueError(f"Card {card.uid} not found in {source.value}")
            source_cards.remove(card)
        if target is Zone.ACTIVE:
            if player.active is not None:
                raise ValueError(f"{player.name} already has an active Pokémon")
            player.active = card
        else:
            player.zone(target).append(card)
        self._log(
            action="move_card",
            payload={"player": player.name, "card": card.uid, "source": source.value, "target": target.value},
        )

    def take_prizes(self, claimant: Player, loser: Player, count: int) -> List[CardInstance]:
        """Move ``count`` prize cards from ``loser``'s pile into ``claimant``'s hand."""
        taken = loser.prize_cards[:count]
        del loser.prize_cards[:count]
        claimant.hand.extend(taken)
        self._log(
            action="take_prize",
            payload={
                "claimant": claimant.name,
                "from": loser.name,
                "cards": [card.uid for card in taken],
                "remaining": len(loser.prize_cards),
            },
        )
        return taken

    # ------------------------------------------------------------------
    # damage, status and energy
    # ------------------------------------------------------------------
    def add_damage(self, card: CardInstance, amount: int) -> None:
        if amount < 0:
            raise ValueError("Damage can only accumulate")
        old_damage = card.damage
        card.damage += amount
        self._log(
            action="add_damage",
            payload={"card": card.uid, "amount": amount, "old_damage": old_damage, "new_damage": card.damage},
        )

    def set_status(self, card: CardInstance, status: StatusCondition) -> None:
        previous = card.status
        card.status = status
        self._log(
            action="set_status",
            payload={"card": card.uid, "previous": previous.value, "status": status.value},
        )

    def attach_energy(self, card: CardInstance, symbol: str) -> None:
        card.attached_energy.append(symbol)
        self._log(action="attach_energy", payload={"card": card.uid, "energy": symbol})

    def record(self, action: str, payload: dict) -> None:
        """Journal an operation the battle performed through a player directly."""
        self._log(action=action, payload=payload)

    def _log(self, action: str, payload: dict, random_seed: Optional[str] = None) -> None:
        entry = GameLogEntry(
            match_id=self.context.match_id,
            actor=self.context.actor,
            action=action,
            payload=payload,
            random_seed=random_seed,
        )
        self.context.journal.append_log(entry)


__all__ = ["GameTools", "ToolCallContext"]
