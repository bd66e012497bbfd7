"""Rules engine for two-player Pocket-style Pokémon card battles."""

from .models import (
    ENERGY_SYMBOLS,
    AbilityDefinition,
    AttackDefinition,
    AttackEffect,
    CardCategory,
    CardDefinition,
    CardInstance,
    Deck,
    StatusCondition,
    StatusEffect,
    Zone,
)
from .errors import (
    DeckConstructionError,
    InvalidCardDefinition,
    InvalidDeckSize,
    InvalidRetreat,
    PocketTCGError,
)
from .config import RuleConfig
from .player import Player
from .battle import Battle, OperationRequest, OperationResult, SetupResult
from .effects import TrainerEffectRegistry
from .snapshot import BattleSnapshot
from .card_library import CardLibrary, parse_energy_cost
from .journal import MatchJournal

__all__ = [
    "ENERGY_SYMBOLS",
    "AbilityDefinition",
    "AttackDefinition",
    "AttackEffect",
    "CardCategory",
    "CardDefinition",
    "CardInstance",
    "Deck",
    "StatusCondition",
    "StatusEffect",
    "Zone",
    "DeckConstructionError",
    "InvalidCardDefinition",
    "InvalidDeckSize",
    "InvalidRetreat",
    "PocketTCGError",
    "RuleConfig",
    "Player",
    "Battle",
    "OperationRequest",
    "OperationResult",
    "SetupResult",
    "TrainerEffectRegistry",
    "BattleSnapshot",
    "CardLibrary",
    "parse_energy_cost",
    "MatchJournal",
]
