"""Tests for the serialisable battle snapshot."""
from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from pocket_tcg.battle import Battle


def test_snapshot_reflects_state(started: Battle) -> None:
    started.attach_energy("L", started.player1.active, started.player1)
    started.player2.active.damage = 20

    state = started.snapshot()

    assert state.match_id == "match"
    assert state.turn == 0
    assert state.first_turn
    assert state.current_player == "Player 1"
    p1, p2 = state.players
    assert p1.name == "Player 1"
    assert p1.active.name == "Pikachu"
    assert p1.active.attacks[0].effect == "multiply-by-bench-count"
    assert p1.hand_size == 4
    assert p1.deck_size == 12
    assert p1.prize_count == 3
    assert p1.discard_count == 0
    assert p2.active.damage == 20
    assert p2.bench == ()


def test_snapshot_is_json_serialisable(started: Battle) -> None:
    payload = json.dumps(started.snapshot().model_dump())
    assert '"current_player": "Player 1"' in payload


def test_snapshot_is_detached_from_battle(started: Battle) -> None:
    state = started.snapshot()
    started.end_turn()
    assert state.turn == 0
    assert started.snapshot().turn == 1


def test_snapshot_is_frozen(started: Battle) -> None:
    state = started.snapshot()
    with pytest.raises(ValidationError):
        state.turn = 5


def test_snapshot_collections_are_immutable(started: Battle) -> None:
    state = started.snapshot()
    with pytest.raises(AttributeError):
        state.players.append(state.players[0])
    with pytest.raises(AttributeError):
        state.players[0].bench.append(state.players[0].active)
    assert isinstance(state.players[0].active.attacks, tuple)
