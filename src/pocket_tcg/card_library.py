"""Utilities to turn structured card records into card definitions and decks."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

from .config import DEFAULT_CONFIG, RuleConfig
from .errors import InvalidCardDefinition
from .models import (
    ENERGY_SYMBOLS,
    AbilityDefinition,
    AttackDefinition,
    AttackEffect,
    CardCategory,
    CardDefinition,
    CardInstance,
    Deck,
    StatusEffect,
)

logger = logging.getLogger(__name__)

_EFFECT_ALIASES: Dict[str, AttackEffect] = {
    "none": AttackEffect.NONE,
    "multiply": AttackEffect.MULTIPLY_BY_BENCH,
    "multiply-by-bench-count": AttackEffect.MULTIPLY_BY_BENCH,
    "plus": AttackEffect.BONUS_IF_DEFENDER_POISONED,
    "bonus": AttackEffect.BONUS_IF_DEFENDER_POISONED,
    "bonus-if-defender-status": AttackEffect.BONUS_IF_DEFENDER_POISONED,
}

# Older card dumps tag attacks whose text mentions a condition.
_STATUS_TAGS: Dict[str, StatusEffect] = {
    "sleep": StatusEffect.SLEEP,
    "paralyze": StatusEffect.PARALYZE,
    "poison": StatusEffect.POISON,
}


def parse_energy_cost(cost: str) -> Dict[str, int]:
    """Parse a cost string such as ``"LLC"`` into ``{"L": 2, "C": 1}``.

    Characters that are not energy symbols are ignored.
    """
    counts: Dict[str, int] = {}
    for char in cost:
        if char in ENERGY_SYMBOLS:
            counts[char] = counts.get(char, 0) + 1
    return counts


class AttackRecord(BaseModel):
    """Attack as supplied by an external card source."""

    name: str
    cost: Dict[str, int] = Field(default_factory=dict)
    base_damage: int = Field(default=0, ge=0, validation_alias=AliasChoices("base_damage", "baseDamage", "damage"))
    effect: Optional[str] = None
    text: str = ""
    status_effect: Optional[StatusEffect] = None

    @field_validator("cost", mode="before")
    @classmethod
    def _parse_cost(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, str):
            return parse_energy_cost(value)
        return value

    @field_validator("cost")
    @classmethod
    def _non_negative_cost(cls, value: Dict[str, int]) -> Dict[str, int]:
        for symbol, count in value.items():
            if count < 0:
                raise ValueError(f"negative cost for {symbol}")
        return {symbol: count for symbol, count in value.items() if count > 0}


class AbilityRecord(BaseModel):
    name: str
    text: str = Field(default="", validation_alias=AliasChoices("text", "effect"))


class EvolutionRecord(BaseModel):
    stage: Optional[str] = "Basic"
    evolves_from: Optional[str] = Field(default=None, validation_alias=AliasChoices("evolves_from", "evolvesFrom"))


class CardRecord(BaseModel):
    """Card as supplied by an external card source."""

    name: str
    card_type: Optional[str] = Field(default=None, validation_alias=AliasChoices("card_type", "type"))
    hp: int = Field(default=0, ge=0)
    category: str = "Pokémon"
    is_ex: Optional[bool] = Field(default=None, validation_alias=AliasChoices("is_ex", "isEx"))
    evolution: Optional[EvolutionRecord] = None
    attacks: List[AttackRecord] = Field(default_factory=list)
    abilities: List[AbilityRecord] = Field(default_factory=list)
    weakness: Optional[str] = None
    retreat_cost: int = Field(default=0, ge=0, validation_alias=AliasChoices("retreat_cost", "retreatCost"))


def _map_category(category: str) -> CardCategory:
    """Map a category label ("Pokémon - Basic", "Trainer - Item", ...) to the enum."""
    head = category.split(" - ", 1)[0].strip().lower()
    if head.startswith("trainer"):
        return CardCategory.TRAINER
    if head.startswith("energy"):
        return CardCategory.ENERGY
    return CardCategory.POKEMON


def _detect_ex(record: CardRecord) -> bool:
    if record.is_ex is not None:
        return record.is_ex
    words = record.category.replace("-", " ").split()
    return "ex" in words or record.name.lower().endswith(" ex")


def _map_attack(record: AttackRecord) -> AttackDefinition:
    tag = (record.effect or "none").strip().lower()
    status_effect = record.status_effect
    if tag in _STATUS_TAGS:
        effect = AttackEffect.NONE
        # Text, when present, decides the condition; the tag only marks a mention.
        if status_effect is None and not record.text:
            status_effect = _STATUS_TAGS[tag]
    elif tag in _EFFECT_ALIASES:
        effect = _EFFECT_ALIASES[tag]
    else:
        logger.warning("Unknown effect tag %r on attack %s; applying no bonus", record.effect, record.name)
        effect = AttackEffect.NONE
    return AttackDefinition(
        name=record.name,
        cost=record.cost,
        base_damage=record.base_damage,
        effect=effect,
        text=record.text,
        status_effect=status_effect,
    )


def _map_card_fields(record: CardRecord) -> CardDefinition:
    """Map a validated record to a :class:`CardDefinition`."""
    category = _map_category(record.category)
    evolution = record.evolution or EvolutionRecord()
    stage = evolution.stage if category is CardCategory.POKEMON else None
    return CardDefinition(
        name=record.name,
        card_type=record.card_type,
        hp=record.hp,
        category=category,
        is_ex=_detect_ex(record),
        stage=stage,
        evolves_from=evolution.evolves_from,
        attacks=tuple(_map_attack(attack) for attack in record.attacks),
        abilities=tuple(AbilityDefinition(name=a.name, text=a.text) for a in record.abilities),
        weakness=record.weakness,
        retreat_cost=record.retreat_cost,
    )


def card_from_record(data: Mapping[str, Any]) -> CardDefinition:
    """Validate one raw mapping and build its definition.

    Raises :class:`~pocket_tcg.errors.InvalidCardDefinition` on bad data.
    """
    try:
        record = CardRecord.model_validate(dict(data))
    except ValidationError as exc:
        raise InvalidCardDefinition(f"Invalid card record {data.get('name', '?')!r}: {exc}") from exc
    return _map_card_fields(record)


@dataclass
class CardLibrary:
    """Collection of card definitions indexed by name."""

    definitions: Dict[str, CardDefinition]

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> "CardLibrary":
        definitions: Dict[str, CardDefinition] = {}
        for data in records:
            definition = card_from_record(data)
            definitions[definition.name] = definition
        return cls(definitions)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "CardLibrary":
        """Load definitions from a JSON file holding a list of records, or a
        mapping of keys to records."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        records = data.values() if isinstance(data, dict) else data
        return cls.from_records(records)

    def get(self, name: str) -> CardDefinition:
        try:
            return self.definitions[name]
        except KeyError as exc:
            raise ValueError(f"Card {name} not found in library") from exc

    def __contains__(self, name: str) -> bool:
        return name in self.definitions

    def instantiate(self, owner_id: str, entries: Iterable[Union[str, Tuple[str, int]]]) -> List[CardInstance]:
        """Create card instances from names or ``(name, count)`` pairs.

        Each instance gets a uid of the form ``<owner>-deck-NNN``.
        """
        instances: List[CardInstance] = []
        for entry in entries:
            name, count = (entry, 1) if isinstance(entry, str) else entry
            definition = self.get(name)
            for _ in range(count):
                uid = f"{owner_id}-deck-{len(instances) + 1:03d}"
                instances.append(CardInstance(uid=uid, owner_id=owner_id, definition=definition))
        return instances

    def build_deck(
        self,
        owner_id: str,
        entries: Iterable[Union[str, Tuple[str, int]]],
        config: RuleConfig = DEFAULT_CONFIG,
    ) -> Deck:
        """Instantiate and validate a deck for ``owner_id``."""
        deck = Deck(player_id=owner_id, cards=self.instantiate(owner_id, entries))
        deck.validate(config)
        return deck


__all__ = [
    "AttackRecord",
    "AbilityRecord",
    "CardRecord",
    "CardLibrary",
    "card_from_record",
    "parse_energy_cost",
]
