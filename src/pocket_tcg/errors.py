"""Exception taxonomy for the battle engine."""
from __future__ import annotations


class PocketTCGError(Exception):
    """Base class for every error raised by the engine."""


class InvalidCardDefinition(PocketTCGError, ValueError):
    """A card definition carries negative HP, damage or costs."""


class InvalidDeckSize(PocketTCGError, ValueError):
    """A deck does not contain the exact number of cards required."""


class DeckConstructionError(PocketTCGError, ValueError):
    """A deck breaks a construction rule other than its size."""


class InvalidRetreat(PocketTCGError):
    """Retreat attempted without meeting its preconditions.

    Recoverable: the caller should treat the move as rejected.
    """


__all__ = [
    "PocketTCGError",
    "InvalidCardDefinition",
    "InvalidDeckSize",
    "DeckConstructionError",
    "InvalidRetreat",
]
