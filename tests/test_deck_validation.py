from __future__ import annotations

import pytest

from pocket_tcg.config import RuleConfig
from pocket_tcg.errors import DeckConstructionError, InvalidDeckSize
from pocket_tcg.models import CardCategory, CardDefinition, CardInstance, Deck


def _build_cards(count: int) -> list[CardInstance]:
    cards = []
    for i in range(count):
        definition = CardDefinition(name=f"Test {i // 2}", card_type="Colorless", hp=50, stage="Basic")
        cards.append(CardInstance(uid=f"player-deck-{i:03d}", owner_id="player", definition=definition))
    return cards


def test_valid_deck_passes_validation() -> None:
    deck = Deck(player_id="player", cards=_build_cards(20))
    deck.validate()


def test_invalid_size_raises() -> None:
    deck = Deck(player_id="player", cards=_build_cards(19))
    with pytest.raises(InvalidDeckSize):
        deck.validate()


def test_invalid_size_is_a_value_error() -> None:
    deck = Deck(player_id="player", cards=_build_cards(21))
    with pytest.raises(ValueError):
        deck.validate()


def test_duplicate_uid_raises() -> None:
    cards = _build_cards(20)
    cards[0] = CardInstance(uid="duplicate", owner_id="player", definition=cards[0].definition)
    cards[1] = CardInstance(uid="duplicate", owner_id="player", definition=cards[1].definition)
    deck = Deck(player_id="player", cards=cards)
    with pytest.raises(DeckConstructionError):
        deck.validate()


def test_third_copy_of_a_card_raises() -> None:
    cards = _build_cards(20)
    cards[2] = CardInstance(uid="extra", owner_id="player", definition=cards[0].definition)
    deck = Deck(player_id="player", cards=cards)
    with pytest.raises(DeckConstructionError, match="Test 0"):
        deck.validate()


def test_basic_energy_is_exempt_from_copy_limit() -> None:
    energy = CardDefinition(name="Lightning Energy", category=CardCategory.ENERGY)
    cards = _build_cards(14) + [
        CardInstance(uid=f"player-energy-{i}", owner_id="player", definition=energy) for i in range(6)
    ]
    Deck(player_id="player", cards=cards).validate()


def test_custom_config_deck_size() -> None:
    deck = Deck(player_id="player", cards=_build_cards(8))
    deck.validate(RuleConfig(deck_size=8))
