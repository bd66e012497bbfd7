"""In-memory journal of atomic operations performed during a battle."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .models import CardInstance, GameLogEntry, Zone


@dataclass
class MatchJournal:
    """Append-only store of :class:`GameLogEntry` records, grouped by match.

    Every entry written by :class:`~pocket_tcg.game_tools.GameTools` lands
    here, so a match can be audited or replayed from its shuffle seeds.
    """

    logs: Dict[str, List[GameLogEntry]] = field(default_factory=dict)

    def append_log(self, entry: GameLogEntry) -> None:
        self.logs.setdefault(entry.match_id, []).append(entry)

    def iter_logs(self, match_id: str, action: Optional[str] = None) -> Iterable[GameLogEntry]:
        for entry in self.logs.get(match_id, []):
            if action is None or entry.action == action:
                yield entry

    def get_logs(self, match_id: str, action: Optional[str] = None) -> List[GameLogEntry]:
        return list(self.iter_logs(match_id, action))

    def record_zone(self, match_id: str, player_id: str, zone: Zone, cards: Iterable[CardInstance]) -> None:
        """Record the content of a zone for auditing purposes."""

        payload = {
            "player_id": player_id,
            "zone": zone.value,
            "cards": [card.uid for card in cards],
        }
        self.append_log(
            GameLogEntry(
                match_id=match_id,
                actor="system",
                action="zone_snapshot",
                payload=payload,
            )
        )


__all__ = ["MatchJournal"]
