"""Core datamodels for the Pocket battle engine."""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .config import DEFAULT_CONFIG, RuleConfig
from .errors import DeckConstructionError, InvalidCardDefinition, InvalidDeckSize

ENERGY_SYMBOLS: Tuple[str, ...] = ("G", "R", "W", "L", "P", "F", "D", "M", "C")


class Zone(str, Enum):
    """Enumeration of card zones recognised by the engine."""

    DECK = "deck"
    HAND = "hand"
    ACTIVE = "active"
    BENCH = "bench"
    DISCARD = "discard"
    PRIZE = "prize"


class CardCategory(str, Enum):
    POKEMON = "Pokemon"
    TRAINER = "Trainer"
    ENERGY = "Energy"


class StatusCondition(str, Enum):
    """Special condition currently affecting a Pokémon in play."""

    NONE = "none"
    ASLEEP = "asleep"
    PARALYZED = "paralyzed"
    POISONED = "poisoned"


class AttackEffect(str, Enum):
    """Damage modifier attached to an attack."""

    NONE = "none"
    MULTIPLY_BY_BENCH = "multiply-by-bench-count"
    BONUS_IF_DEFENDER_POISONED = "bonus-if-defender-status"


class StatusEffect(str, Enum):
    """Special condition an attack inflicts on the defending Pokémon."""

    NONE = "none"
    SLEEP = "sleep"
    PARALYZE = "paralyze"
    POISON = "poison"

    @property
    def condition(self) -> StatusCondition:
        return _EFFECT_TO_CONDITION[self]


_EFFECT_TO_CONDITION = {
    StatusEffect.NONE: StatusCondition.NONE,
    StatusEffect.SLEEP: StatusCondition.ASLEEP,
    StatusEffect.PARALYZE: StatusCondition.PARALYZED,
    StatusEffect.POISON: StatusCondition.POISONED,
}

# Checked in order, first hit wins.
_STATUS_PHRASES: Tuple[Tuple[str, StatusEffect], ...] = (
    ("now Asleep", StatusEffect.SLEEP),
    ("now Paralyzed", StatusEffect.PARALYZE),
    ("now Poisoned", StatusEffect.POISON),
)


def status_effect_from_text(text: str) -> StatusEffect:
    """Derive the inflicted condition from an attack description."""

    for phrase, effect in _STATUS_PHRASES:
        if phrase in text:
            return effect
    return StatusEffect.NONE


@dataclass(frozen=True)
class AttackDefinition:
    """Static attack information.

    ``status_effect`` may be left as ``None`` for card data that only carries
    text; it is then derived from ``text``.
    """

    name: str
    cost: Mapping[str, int] = field(default_factory=dict)
    base_damage: int = 0
    effect: AttackEffect = AttackEffect.NONE
    text: str = ""
    status_effect: Optional[StatusEffect] = None

    def __post_init__(self) -> None:
        if self.base_damage < 0:
            raise InvalidCardDefinition(f"Attack {self.name} has negative damage {self.base_damage}")
        for symbol, count in self.cost.items():
            if count < 0:
                raise InvalidCardDefinition(f"Attack {self.name} has negative {symbol} cost")
        object.__setattr__(self, "cost", dict(self.cost))
        if self.status_effect is None:
            object.__setattr__(self, "status_effect", status_effect_from_text(self.text))

    @property
    def total_cost(self) -> int:
        return sum(self.cost.values())


@dataclass(frozen=True)
class AbilityDefinition:
    name: str
    text: str = ""


@dataclass(frozen=True)
class CardDefinition:
    """Static card information shared by all instances."""

    name: str
    card_type: Optional[str] = None
    hp: int = 0
    category: CardCategory = CardCategory.POKEMON
    is_ex: bool = False
    stage: Optional[str] = None
    evolves_from: Optional[str] = None
    attacks: Tuple[AttackDefinition, ...] = ()
    abilities: Tuple[AbilityDefinition, ...] = ()
    weakness: Optional[str] = None
    retreat_cost: int = 0

    def __post_init__(self) -> None:
        if self.hp < 0:
            raise InvalidCardDefinition(f"Card {self.name} has negative HP {self.hp}")
        if self.retreat_cost < 0:
            raise InvalidCardDefinition(f"Card {self.name} has negative retreat cost {self.retreat_cost}")
        object.__setattr__(self, "attacks", tuple(self.attacks))
        object.__setattr__(self, "abilities", tuple(self.abilities))

    @property
    def is_pokemon(self) -> bool:
        return self.category is CardCategory.POKEMON

    @property
    def is_basic_pokemon(self) -> bool:
        return self.is_pokemon and self.evolves_from is None

    @property
    def is_basic_energy(self) -> bool:
        return self.category is CardCategory.ENERGY and (self.stage in (None, "Basic"))


@dataclass(eq=False)
class CardInstance:
    """Runtime representation of a specific physical card."""

    uid: str
    owner_id: str
    definition: CardDefinition
    damage: int = 0
    status: StatusCondition = StatusCondition.NONE
    attached_energy: List[str] = field(default_factory=list)  # last attached is removed first

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def hp(self) -> int:
        return self.definition.hp

    @property
    def is_knocked_out(self) -> bool:
        return self.definition.is_pokemon and self.damage >= self.hp

    def energy_count(self, symbol: Optional[str] = None) -> int:
        if symbol is None:
            return len(self.attached_energy)
        return self.attached_energy.count(symbol)

    def can_use_attack(self, attack_index: int) -> bool:
        """Check status and attached energy against the attack cost.

        Symbols are matched exactly; ``C`` is only satisfied by ``C`` energy.
        """
        if self.status is StatusCondition.PARALYZED:
            return False
        attacks = self.definition.attacks
        if attack_index < 0 or attack_index >= len(attacks):
            return False
        attached = Counter(self.attached_energy)
        return all(attached[symbol] >= count for symbol, count in attacks[attack_index].cost.items())


@dataclass
class Deck:
    """Full deck for a player."""

    player_id: str
    cards: Sequence[CardInstance]

    def validate(self, config: RuleConfig = DEFAULT_CONFIG) -> None:
        """Ensure the deck is legal according to the construction rules."""

        if len(self.cards) != config.deck_size:
            raise InvalidDeckSize(
                f"Deck for {self.player_id} must contain exactly {config.deck_size} cards, "
                f"received {len(self.cards)}"
            )
        uids = {card.uid for card in self.cards}
        if len(uids) != len(self.cards):
            raise DeckConstructionError("Every card in the deck must have a unique uid")
        copies = Counter(card.name for card in self.cards if not card.definition.is_basic_energy)
        over = sorted(name for name, count in copies.items() if count > config.max_copies)
        if over:
            raise DeckConstructionError(
                f"Deck for {self.player_id} has more than {config.max_copies} copies of: {', '.join(over)}"
            )


@dataclass(slots=True)
class GameLogEntry:
    """Structured log entry recorded for every atomic operation."""

    match_id: str
    actor: str
    action: str
    payload: Dict[str, object]
    random_seed: Optional[str] = None


__all__ = [
    "ENERGY_SYMBOLS",
    "Zone",
    "CardCategory",
    "StatusCondition",
    "AttackEffect",
    "StatusEffect",
    "status_effect_from_text",
    "AttackDefinition",
    "AbilityDefinition",
    "CardDefinition",
    "CardInstance",
    "Deck",
    "GameLogEntry",
]
