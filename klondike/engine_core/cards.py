"""
Cards - The 52-card universe and shuffling.

A card is an immutable value. Identity for the card-universe invariant is
(suit, rank); face_up is presentation state that changes as cards move.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
import random


class Suit(Enum):
    """The four suits, in deck order."""
    SPADES = "spades"
    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"

    @property
    def is_red(self) -> bool:
        return self in (Suit.HEARTS, Suit.DIAMONDS)

    @property
    def symbol(self) -> str:
        return SUIT_SYMBOLS[self]


ACE = 1
KING = 13
RANKS = range(ACE, KING + 1)
SUIT_SIZE = len(RANKS)

RANK_LABELS: dict[int, str] = {
    1: "A",
    2: "2",
    3: "3",
    4: "4",
    5: "5",
    6: "6",
    7: "7",
    8: "8",
    9: "9",
    10: "10",
    11: "J",
    12: "Q",
    13: "K",
}

SUIT_SYMBOLS: dict[Suit, str] = {
    Suit.SPADES: "♠",
    Suit.HEARTS: "♥",
    Suit.DIAMONDS: "♦",
    Suit.CLUBS: "♣",
}


@dataclass(frozen=True)
class Card:
    """
    A playing card.

    Cards are values: moving a card between piles never mutates it,
    flipping one produces a new Card.
    """
    suit: Suit
    rank: int  # 1 = Ace ... 13 = King
    face_up: bool = False

    @property
    def key(self) -> tuple[Suit, int]:
        """Identity of the card regardless of orientation."""
        return (self.suit, self.rank)

    @property
    def is_red(self) -> bool:
        return self.suit.is_red

    @property
    def label(self) -> str:
        """Short label like 'Q♥'."""
        return f"{RANK_LABELS[self.rank]}{self.suit.symbol}"

    def flipped(self, face_up: bool = True) -> Card:
        """Return the same card with the given orientation."""
        if self.face_up == face_up:
            return self
        return replace(self, face_up=face_up)


def is_red(suit: Suit) -> bool:
    """Hearts and diamonds are red; spades and clubs are black."""
    return suit.is_red


def create_deck() -> list[Card]:
    """Create the 52 canonical cards, face down, suit-major and rank ascending."""
    return [Card(suit=suit, rank=rank) for suit in Suit for rank in RANKS]


def shuffle(deck: list[Card] | tuple[Card, ...], rng: random.Random | None = None) -> list[Card]:
    """
    Return a new, uniformly shuffled list of the given cards.

    Fisher-Yates over a copy; the input is never mutated.
    """
    rng = rng or random.Random()
    cards = list(deck)
    for i in range(len(cards) - 1, 0, -1):
        j = rng.randint(0, i)
        cards[i], cards[j] = cards[j], cards[i]
    return cards
