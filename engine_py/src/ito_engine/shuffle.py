"""
Card deck creation, shuffling and dealing utilities.
"""

import random
from typing import Dict, List, Optional

from .constants import CARD_MAX, CARD_MIN, INITIAL_HAND_SIZE
from .models import Player


def create_deck(card_min: int = CARD_MIN, card_max: int = CARD_MAX) -> List[int]:
    """Create a deck holding every number from card_min to card_max once."""
    return list(range(card_min, card_max + 1))


def shuffle_deck(deck: List[int], seed: Optional[int] = None) -> List[int]:
    """
    Shuffle a deck deterministically if seed is provided.

    Args:
        deck: List of card values to shuffle
        seed: Optional seed for deterministic shuffling

    Returns:
        Shuffled copy of the deck
    """
    deck_copy = deck.copy()

    if seed is not None:
        rng = random.Random(seed)
        rng.shuffle(deck_copy)
    else:
        random.shuffle(deck_copy)

    return deck_copy


def deal_hands(deck: List[int], players: List[Player], hand_size: int = INITIAL_HAND_SIZE) -> Dict[str, List[int]]:
    """
    Deal hand_size cards to each player by popping from the tail of the deck.

    The deck is mutated in place. Once the deck runs dry the remaining players
    get whatever is left (possibly nothing).

    Args:
        deck: Shuffled deck of cards
        players: Players to deal to, in seat order
        hand_size: Number of cards each player should receive

    Returns:
        Dictionary mapping player_id to their sorted hand
    """
    hands = {}
    for player in players:
        hand = []
        for _ in range(hand_size):
            if deck:
                hand.append(deck.pop())
        hand.sort()
        hands[player.id] = hand
    return hands
