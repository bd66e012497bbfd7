"""Player zones and the operations a player performs on them."""
from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .config import DEFAULT_CONFIG, RuleConfig
from .errors import InvalidDeckSize, InvalidRetreat
from .models import ENERGY_SYMBOLS, CardInstance, StatusCondition, Zone


@dataclass(eq=False)
class Player:
    """Mutable view of a player's zones.

    The top of the deck is the end of ``deck``. ``active`` holds zero or one
    Pokémon; ``bench`` is capped by ``config.bench_limit`` (enforced by the
    battle when cards are played).
    """

    name: str
    deck: List[CardInstance]
    config: RuleConfig = DEFAULT_CONFIG
    rng: random.Random = field(default_factory=random.Random, repr=False)
    hand: List[CardInstance] = field(default_factory=list)
    active: Optional[CardInstance] = None
    bench: List[CardInstance] = field(default_factory=list)
    discard_pile: List[CardInstance] = field(default_factory=list)
    prize_cards: List[CardInstance] = field(default_factory=list)
    energy_zone: Tuple[str, ...] = ENERGY_SYMBOLS
    usage_trackers: Dict[str, Dict[str, int]] = field(default_factory=dict)  # {entity_id: {"scope:counter": count}}

    def __post_init__(self) -> None:
        self.deck = list(self.deck)
        if len(self.deck) != self.config.deck_size:
            raise InvalidDeckSize(
                f"Deck for {self.name} must contain exactly {self.config.deck_size} cards, "
                f"received {len(self.deck)}"
            )

    # ------------------------------------------------------------------
    # zones
    # ------------------------------------------------------------------
    def zone(self, zone: Zone) -> List[CardInstance]:
        """Return the list backing ``zone`` (the active slot as a 0/1 list copy)."""
        if zone is Zone.ACTIVE:
            return [self.active] if self.active is not None else []
        return {
            Zone.DECK: self.deck,
            Zone.HAND: self.hand,
            Zone.BENCH: self.bench,
            Zone.DISCARD: self.discard_pile,
            Zone.PRIZE: self.prize_cards,
        }[zone]

    @property
    def in_play(self) -> List[CardInstance]:
        return self.zone(Zone.ACTIVE) + list(self.bench)

    @property
    def has_pokemon_in_play(self) -> bool:
        return self.active is not None or bool(self.bench)

    @property
    def bench_full(self) -> bool:
        return len(self.bench) >= self.config.bench_limit

    def find_in_play(self, card: CardInstance) -> Optional[Zone]:
        if card is self.active:
            return Zone.ACTIVE
        if any(benched is card for benched in self.bench):
            return Zone.BENCH
        return None

    # ------------------------------------------------------------------
    # deck operations
    # ------------------------------------------------------------------
    def shuffle(self, rng: Optional[random.Random] = None) -> None:
        """Shuffle the deck in place; ``random.shuffle`` is a Fisher-Yates pass."""
        (rng or self.rng).shuffle(self.deck)

    def draw_card(self) -> Optional[CardInstance]:
        """Move the top card of the deck into the hand.

        Returns ``None`` when the deck is empty; the battle decides whether
        that means a deck-out loss.
        """
        if not self.deck:
            return None
        card = self.deck.pop()
        self.hand.append(card)
        return card

    # ------------------------------------------------------------------
    # retreat
    # ------------------------------------------------------------------
    def can_retreat(self) -> bool:
        if self.active is None:
            return False
        if self.active.status is StatusCondition.PARALYZED:
            return False
        return len(self.active.attached_energy) >= self.active.definition.retreat_cost

    def retreat(self, bench_index: int) -> Sequence[str]:
        """Pay the retreat cost and swap the active with ``bench[bench_index]``.

        Returns the discarded energy symbols, most recently attached first.
        """
        if not self.can_retreat():
            raise InvalidRetreat(f"{self.name} cannot retreat right now")
        if bench_index < 0 or bench_index >= len(self.bench):
            raise InvalidRetreat(f"No benched Pokémon at index {bench_index}")
        assert self.active is not None
        paid = [self.active.attached_energy.pop() for _ in range(self.active.definition.retreat_cost)]
        self.active, self.bench[bench_index] = self.bench[bench_index], self.active
        return paid

    # ------------------------------------------------------------------
    # usage tracking
    # ------------------------------------------------------------------
    def track_usage(self, entity_id: str, counter_type: str, scope: str = "turn") -> None:
        """Track usage of an action. Scope can be 'turn' or 'game'."""
        key = f"{scope}:{counter_type}"
        counters = self.usage_trackers.setdefault(entity_id, {})
        counters[key] = counters.get(key, 0) + 1

    def get_usage_count(self, entity_id: str, counter_type: str, scope: str = "turn") -> int:
        return self.usage_trackers.get(entity_id, {}).get(f"{scope}:{counter_type}", 0)

    def reset_turn_usage(self) -> None:
        """Reset all turn-scoped usage trackers (called at end of turn)."""
        for entity_id in list(self.usage_trackers.keys()):
            counters = self.usage_trackers[entity_id]
            for key in [k for k in counters if k.startswith("turn:")]:
                del counters[key]
            if not counters:
                del self.usage_trackers[entity_id]


__all__ = ["Player"]
