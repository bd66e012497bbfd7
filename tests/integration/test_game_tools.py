"""Integration tests for the atomic game tools and their journal."""
import random

import pytest

from pocket_tcg.game_tools import GameTools, ToolCallContext
from pocket_tcg.journal import MatchJournal
from pocket_tcg.models import CardDefinition, CardInstance, StatusCondition, Zone
from pocket_tcg.player import Player


@pytest.fixture
def journal():
    """Create an empty journal."""
    return MatchJournal()


@pytest.fixture
def tools(journal):
    return GameTools(
        context=ToolCallContext(match_id="test-match", actor="battle", journal=journal),
        rng=random.Random(42),
    )


@pytest.fixture
def player():
    card_def = CardDefinition(name="Test Card", card_type="Colorless", hp=100, stage="Basic")
    cards = [CardInstance(uid=f"card-{i}", owner_id="playerA", definition=card_def) for i in range(20)]
    return Player(name="playerA", deck=cards)


def test_game_tools_draw(tools, player, journal):
    """Test drawing cards."""
    drawn = tools.draw(player, 3)

    assert len(drawn) == 3
    assert len(player.deck) == 17
    assert len(player.hand) == 3
    entry = journal.get_logs("test-match", action="draw")[0]
    assert entry.payload["cards"] == [card.uid for card in drawn]


def test_game_tools_draw_stops_at_empty_deck(tools, player):
    del player.deck[2:]
    drawn = tools.draw(player, 5)
    assert len(drawn) == 2
    assert player.deck == []


def test_game_tools_shuffle(tools, player, journal):
    """Test shuffling deck."""
    original_order = [c.uid for c in player.deck]

    tools.shuffle(player)

    new_order = [c.uid for c in player.deck]
    assert sorted(new_order) == sorted(original_order)
    assert new_order != original_order

    logs = journal.get_logs("test-match", action="shuffle")
    assert len(logs) == 1
    assert logs[0].random_seed is not None


def test_shuffle_replays_from_journaled_seed(tools, player, journal):
    original = list(player.deck)
    tools.shuffle(player)
    seed = journal.get_logs("test-match", action="shuffle")[0].random_seed

    replay = list(original)
    random.Random(int(seed, 16)).shuffle(replay)

    assert [c.uid for c in replay] == [c.uid for c in player.deck]


def test_deal_prizes_records_zone(tools, player, journal):
    top_three = player.deck[-3:]

    dealt = tools.deal_prizes(player, 3)

    assert dealt == list(reversed(top_three))
    assert player.prize_cards == dealt
    snapshot = journal.get_logs("test-match", action="zone_snapshot")[0]
    assert snapshot.actor == "system"
    assert snapshot.payload["cards"] == [card.uid for card in dealt]


def test_move_card_between_zones(tools, player):
    tools.draw(player, 2)
    first, second = player.hand

    tools.move_card(player, Zone.HAND, Zone.ACTIVE, first)
    tools.move_card(player, Zone.HAND, Zone.BENCH, second)

    assert player.active is first
    assert player.bench == [second]
    with pytest.raises(ValueError):
        tools.move_card(player, Zone.BENCH, Zone.ACTIVE, second)
    with pytest.raises(ValueError):
        tools.move_card(player, Zone.HAND, Zone.DISCARD, second)


def test_take_prizes_from_front(tools, player):
    other_cards = [CardInstance(uid=f"b-{i}", owner_id="playerB", definition=player.deck[0].definition) for i in range(20)]
    opponent = Player(name="playerB", deck=other_cards)
    tools.deal_prizes(opponent, 3)
    front = opponent.prize_cards[0]

    taken = tools.take_prizes(player, opponent, 1)

    assert taken == [front]
    assert player.hand == [front]
    assert len(opponent.prize_cards) == 2


def test_damage_only_accumulates(tools, player):
    card = player.deck[0]
    tools.add_damage(card, 30)
    tools.add_damage(card, 0)
    assert card.damage == 30
    with pytest.raises(ValueError):
        tools.add_damage(card, -10)


def test_status_and_energy(tools, player, journal):
    card = player.deck[0]
    tools.set_status(card, StatusCondition.POISONED)
    tools.attach_energy(card, "G")

    assert card.status is StatusCondition.POISONED
    assert card.attached_energy == ["G"]
    actions = [entry.action for entry in journal.get_logs("test-match")]
    assert actions == ["set_status", "attach_energy"]
