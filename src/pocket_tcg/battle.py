"""Turn and rules engine orchestrating a two-player battle."""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Union

from .config import DEFAULT_CONFIG, RuleConfig
from .effects import DEFAULT_TRAINER_EFFECTS, EffectContext, TrainerEffectRegistry, calculate_damage
from .errors import InvalidRetreat
from .game_tools import GameTools, ToolCallContext
from .journal import MatchJournal
from .models import CardCategory, CardInstance, Deck, StatusCondition, StatusEffect, Zone
from .player import Player
from .snapshot import BattleSnapshot, battle_snapshot

logger = logging.getLogger(__name__)

TurnObserver = Callable[[BattleSnapshot], None]


@dataclass
class OperationRequest:
    """Structured request emitted by a driver."""

    actor_id: str
    action: str
    payload: Dict[str, object] = field(default_factory=dict)


@dataclass
class OperationResult:
    success: bool
    message: str
    data: Optional[Dict[str, object]] = None


@dataclass(frozen=True)
class SetupResult:
    player1_mulligan: bool
    player2_mulligan: bool

    def as_dict(self) -> Dict[str, bool]:
        return {"player1Mulligan": self.player1_mulligan, "player2Mulligan": self.player2_mulligan}


@dataclass(eq=False)
class Battle:
    """Owns both players and enforces the rules between them.

    Actions are independent primitives: the engine does not impose a phase
    order, leaving turn structure to the driver. The only draw a turn gets is
    made by :meth:`end_turn` for the incoming player, so the opening turn of
    the game never draws.
    """

    player1: Player
    player2: Player
    match_id: str = "match"
    config: RuleConfig = DEFAULT_CONFIG
    rng: random.Random = field(default_factory=random.Random, repr=False)
    journal: MatchJournal = field(default_factory=MatchJournal, repr=False)
    trainer_effects: TrainerEffectRegistry = field(default_factory=DEFAULT_TRAINER_EFFECTS.copy, repr=False)
    turn: int = 0
    first_turn: bool = True
    log: List[str] = field(default_factory=list)
    current_player: Player = field(init=False)
    opponent_player: Player = field(init=False)
    tools: GameTools = field(init=False, repr=False)
    _observers: List[TurnObserver] = field(default_factory=list, init=False, repr=False)
    _declared_winner: Optional[Player] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.current_player = self.player1
        self.opponent_player = self.player2
        for player in (self.player1, self.player2):
            player.rng = self.rng
        self.tools = GameTools(
            context=ToolCallContext(match_id=self.match_id, actor="battle", journal=self.journal),
            rng=self.rng,
        )

    # ------------------------------------------------------------------
    # match setup
    # ------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        player1_deck: Union[Deck, Sequence[CardInstance]],
        player2_deck: Union[Deck, Sequence[CardInstance]],
        *,
        player1_name: str = "Player 1",
        player2_name: str = "Player 2",
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
        config: Optional[RuleConfig] = None,
        match_id: str = "match",
        trainer_effects: Optional[TrainerEffectRegistry] = None,
    ) -> "Battle":
        """Build a battle from two decks.

        Raises :class:`~pocket_tcg.errors.InvalidDeckSize` if either deck is
        not exactly ``config.deck_size`` cards.
        """
        cfg = config or DEFAULT_CONFIG
        source = rng or random.Random(seed)
        player1 = Player(name=player1_name, deck=_deck_cards(player1_deck), config=cfg)
        player2 = Player(name=player2_name, deck=_deck_cards(player2_deck), config=cfg)
        return cls(
            player1=player1,
            player2=player2,
            match_id=match_id,
            config=cfg,
            rng=source,
            trainer_effects=trainer_effects or DEFAULT_TRAINER_EFFECTS.copy(),
        )

    def setup(self) -> SetupResult:
        """Shuffle, deal prizes and opening hands, and flag mulligans."""
        for player in (self.player1, self.player2):
            self.tools.shuffle(player)
        for player in (self.player1, self.player2):
            self.tools.deal_prizes(player, self.config.prize_count)
        for player in (self.player1, self.player2):
            self.tools.draw(player, self.config.opening_hand_size)

        mulligans = []
        for player in (self.player1, self.player2):
            has_basic = any(card.definition.is_basic_pokemon for card in player.hand)
            if not has_basic:
                self.log.append(f"{player.name} must mulligan!")
                logger.info("%s has no Basic Pokémon in the opening hand", player.name)
            mulligans.append(not has_basic)
        return SetupResult(player1_mulligan=mulligans[0], player2_mulligan=mulligans[1])

    # ------------------------------------------------------------------
    # turn actions
    # ------------------------------------------------------------------
    def play_card(self, card: CardInstance, player: Player) -> bool:
        """Play ``card`` from ``player``'s hand.

        Basic Pokémon go to the active slot if it is empty, otherwise to the
        bench. Trainers resolve through :attr:`trainer_effects` and are
        discarded.
        """
        if not self._is_participant(player) or not _contains(player.hand, card):
            logger.debug("Rejected play of %s: not in %s's hand", card.uid, player.name)
            return False
        definition = card.definition

        if definition.category is CardCategory.TRAINER:
            self.tools.move_card(player, Zone.HAND, Zone.DISCARD, card)
            context = EffectContext(
                tools=self.tools,
                player=player,
                opponent=self.opponent_of(player),
                card_instance=card,
                rng=self.rng,
                config=self.config,
            )
            result = self.trainer_effects.resolve(context)
            self.log.append(f"{player.name} played {card.name}.")
            logger.debug("Trainer %s resolved: %s", card.name, result.get("message"))
            return True

        if not definition.is_basic_pokemon:
            logger.debug("Rejected play of %s: only Basic Pokémon can be put into play", card.name)
            return False
        if player.active is None:
            self.tools.move_card(player, Zone.HAND, Zone.ACTIVE, card)
            self.log.append(f"{player.name} played {card.name} as the active Pokémon.")
            return True
        if player.bench_full:
            logger.debug("Rejected play of %s: %s's bench is full", card.name, player.name)
            return False
        self.tools.move_card(player, Zone.HAND, Zone.BENCH, card)
        self.log.append(f"{player.name} benched {card.name}.")
        return True

    def attach_energy(self, symbol: str, target: CardInstance, player: Player) -> bool:
        """Attach one ``symbol`` energy to a Pokémon ``player`` has in play."""
        if not self._is_participant(player) or symbol not in player.energy_zone:
            logger.debug("Rejected energy %r: unknown symbol or player", symbol)
            return False
        if player.find_in_play(target) is None:
            logger.debug("Rejected energy: %s is not in play for %s", target.uid, player.name)
            return False
        if self.config.enforce_turn_limits and player.get_usage_count(player.name, "energy") > 0:
            logger.debug("Rejected energy: %s already attached this turn", player.name)
            return False
        self.tools.attach_energy(target, symbol)
        player.track_usage(player.name, "energy")
        self.log.append(f"{player.name} attached {symbol} energy to {target.name}.")
        return True

    def retreat(self, bench_index: int) -> bool:
        """Retreat the in-turn player's active Pokémon; False if the move is illegal."""
        player = self.current_player
        outgoing = player.active
        try:
            paid = player.retreat(bench_index)
        except InvalidRetreat as exc:
            logger.debug("Rejected retreat: %s", exc)
            return False
        assert outgoing is not None and player.active is not None
        self.tools.record(
            action="retreat",
            payload={"player": player.name, "card": outgoing.uid, "replacement": player.active.uid, "paid": list(paid)},
        )
        self.log.append(f"{player.name} retreated {outgoing.name} for {player.active.name}.")
        return True

    def promote(self, bench_index: int, player: Player) -> bool:
        """Move a benched Pokémon into an empty active slot after a knockout."""
        if not self._is_participant(player) or player.active is not None:
            return False
        if bench_index < 0 or bench_index >= len(player.bench):
            return False
        card = player.bench[bench_index]
        self.tools.move_card(player, Zone.BENCH, Zone.ACTIVE, card)
        self.log.append(f"{player.name} sent out {card.name}.")
        return True

    def draw_card(self, player: Optional[Player] = None) -> Optional[CardInstance]:
        """Draw one card for ``player`` (default: the player in turn); None on an empty deck."""
        target = player or self.current_player
        drawn = self.tools.draw(target, 1)
        if not drawn:
            self.log.append(f"{target.name} cannot draw a card!")
            return None
        return drawn[0]

    def perform_attack(self, attack_index: int) -> bool:
        """Resolve the in-turn active Pokémon's attack against the opposing active.

        Returns False, without changing state, when either active is missing,
        the attacker is paralyzed or lacks the energy for the attack.
        """
        attacker = self.current_player.active
        defender = self.opponent_player.active
        if attacker is None or defender is None:
            return False
        if not attacker.can_use_attack(attack_index):
            return False

        attack = attacker.definition.attacks[attack_index]
        damage = calculate_damage(attacker, self.current_player, defender, attack, self.config)
        self.tools.add_damage(defender, damage)
        self.log.append(f"{attacker.name} used {attack.name} for {damage} damage!")

        if defender.is_knocked_out:
            self.handle_knockout(self.opponent_player, claimant=self.current_player)

        effect = attack.status_effect or StatusEffect.NONE
        if effect is not StatusEffect.NONE and self.opponent_player.active is defender:
            self.tools.set_status(defender, effect.condition)
            self.log.append(f"{defender.name} is now {effect.condition.value}!")
        return True

    def end_turn(self) -> None:
        """Resolve statuses, advance the turn, swap roles and draw for the new player."""
        self.resolve_status_effects()
        self.current_player.reset_turn_usage()
        self.first_turn = False
        self.turn += 1
        self._notify_observers()

        self.current_player, self.opponent_player = self.opponent_player, self.current_player
        self.draw_card(self.current_player)

    # ------------------------------------------------------------------
    # resolution
    # ------------------------------------------------------------------
    def resolve_status_effects(self) -> None:
        """Apply the in-turn active Pokémon's special condition once."""
        active = self.current_player.active
        if active is None:
            return

        if active.status is StatusCondition.ASLEEP:
            if self.rng.random() < self.config.wake_up_chance:
                self.tools.set_status(active, StatusCondition.NONE)
                self.log.append(f"{active.name} woke up!")
        elif active.status is StatusCondition.PARALYZED:
            self.tools.set_status(active, StatusCondition.NONE)
            self.log.append(f"{active.name} is no longer paralyzed!")
        elif active.status is StatusCondition.POISONED:
            self.tools.add_damage(active, self.config.poison_damage)
            self.log.append(f"{active.name} took {self.config.poison_damage} damage from poison!")
            if active.is_knocked_out:
                self.handle_knockout(self.current_player, claimant=self.opponent_player)

    def handle_knockout(self, player: Player, claimant: Player) -> None:
        """Discard ``player``'s active Pokémon and award prizes to ``claimant``."""
        knocked_out = player.active
        if knocked_out is None:
            return
        self.tools.move_card(player, Zone.ACTIVE, Zone.DISCARD, knocked_out)
        self.log.append(f"{knocked_out.name} was knocked out!")

        remaining = len(player.prize_cards)
        if knocked_out.definition.is_ex and remaining >= 2:
            count = 2
        elif remaining >= 1:
            count = 1
        else:
            return
        taken = self.tools.take_prizes(claimant, player, count)
        self.log.append(f"{claimant.name} took {len(taken)} prize card(s).")

    # ------------------------------------------------------------------
    # win condition
    # ------------------------------------------------------------------
    def check_win_condition(self) -> Optional[Player]:
        """Return the winner, or None while the game continues.

        Prize piles are checked before decks, decks before Pokémon in play.
        """
        p1, p2 = self.player1, self.player2
        if not p1.prize_cards:
            return self._declare(p1, f"{p1.name} wins by taking all prize cards!")
        if not p2.prize_cards:
            return self._declare(p2, f"{p2.name} wins by taking all prize cards!")
        if not p1.deck:
            return self._declare(p2, f"{p2.name} wins by deck out!")
        if not p2.deck:
            return self._declare(p1, f"{p1.name} wins by deck out!")
        if not p1.has_pokemon_in_play:
            return self._declare(p2, f"{p2.name} wins - {p1.name} has no Pokémon in play!")
        if not p2.has_pokemon_in_play:
            return self._declare(p1, f"{p1.name} wins - {p2.name} has no Pokémon in play!")
        return None

    def _declare(self, winner: Player, message: str) -> Player:
        if self._declared_winner is not winner:
            self._declared_winner = winner
            self.log.append(message)
            logger.info(message)
        return winner

    # ------------------------------------------------------------------
    # observation
    # ------------------------------------------------------------------
    def snapshot(self) -> BattleSnapshot:
        return battle_snapshot(self)

    def subscribe(self, observer: TurnObserver) -> None:
        """Call ``observer`` with a snapshot each time a turn completes."""
        self._observers.append(observer)

    def unsubscribe(self, observer: TurnObserver) -> None:
        self._observers.remove(observer)

    def _notify_observers(self) -> None:
        if not self._observers:
            return
        state = self.snapshot()
        for observer in list(self._observers):
            observer(state)

    # ------------------------------------------------------------------
    # request dispatch
    # ------------------------------------------------------------------
    def handle_request(self, request: OperationRequest) -> OperationResult:
        handler = getattr(self, f"_handle_{request.action}", None)
        if handler is None:
            return OperationResult(False, f"Unknown action: {request.action}")
        try:
            player = self._player_named(request.actor_id)
            result = handler(player, **request.payload)
        except (ValueError, TypeError, RuntimeError) as exc:
            return OperationResult(False, str(exc))
        return OperationResult(True, "ok", data=result)

    def _handle_play_card(self, player: Player, card_id: str) -> Dict[str, object]:
        self._ensure_turn(player)
        card = _locate(player.hand, card_id, Zone.HAND)
        self._require(self.play_card(card, player), f"Cannot play {card.name}")
        return {"played": card.uid}

    def _handle_attach_energy(self, player: Player, symbol: str, target_id: str) -> Dict[str, object]:
        self._ensure_turn(player)
        target = _locate(player.in_play, target_id, Zone.ACTIVE)
        self._require(self.attach_energy(symbol, target, player), f"Cannot attach {symbol} to {target.name}")
        return {"target": target.uid, "energy": list(target.attached_energy)}

    def _handle_retreat(self, player: Player, bench_index: int) -> Dict[str, object]:
        self._ensure_turn(player)
        self._require(self.retreat(bench_index), "Invalid retreat")
        assert player.active is not None
        return {"active": player.active.uid}

    def _handle_promote(self, player: Player, bench_index: int) -> Dict[str, object]:
        self._require(self.promote(bench_index, player), "Cannot promote")
        assert player.active is not None
        return {"active": player.active.uid}

    def _handle_attack(self, player: Player, attack_index: int = 0) -> Dict[str, object]:
        self._ensure_turn(player)
        self._require(self.perform_attack(attack_index), f"Cannot use attack {attack_index}")
        return {"winner": _name_or_none(self.check_win_condition())}

    def _handle_draw(self, player: Player) -> Dict[str, object]:
        self._ensure_turn(player)
        card = self.draw_card(player)
        return {"card": card.uid if card is not None else None}

    def _handle_end_turn(self, player: Player) -> Dict[str, object]:
        self._ensure_turn(player)
        self.end_turn()
        return {"next_player": self.current_player.name, "turn": self.turn}

    # ------------------------------------------------------------------
    # helper functions
    # ------------------------------------------------------------------
    def opponent_of(self, player: Player) -> Player:
        return self.player2 if player is self.player1 else self.player1

    def _is_participant(self, player: Player) -> bool:
        return player is self.player1 or player is self.player2

    def _player_named(self, name: str) -> Player:
        for player in (self.player1, self.player2):
            if player.name == name:
                return player
        raise ValueError(f"Unknown player: {name}")

    def _ensure_turn(self, player: Player) -> None:
        if player is not self.current_player:
            raise RuntimeError(f"It is not {player.name}'s turn (current turn: {self.current_player.name})")

    @staticmethod
    def _require(accepted: bool, message: str) -> None:
        if not accepted:
            raise ValueError(message)


def _deck_cards(deck: Union[Deck, Sequence[CardInstance]]) -> List[CardInstance]:
    if isinstance(deck, Deck):
        return list(deck.cards)
    return list(deck)


def _contains(cards: Iterable[CardInstance], card: CardInstance) -> bool:
    return any(c is card for c in cards)


def _locate(cards: Iterable[CardInstance], card_id: str, zone: Zone) -> CardInstance:
    for card in cards:
        if card.uid == card_id:
            return card
    raise ValueError(f"Card {card_id} not present in {zone.value}")


def _name_or_none(player: Optional[Player]) -> Optional[str]:
    return player.name if player is not None else None


__all__ = ["Battle", "OperationRequest", "OperationResult", "SetupResult", "TurnObserver"]
