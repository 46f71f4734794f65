"""
Klondike - Solitaire Rules Engine

A deterministic, action-driven engine for Klondike solitaire.
The engine takes a game state and a player action and returns the next state:
- Card and deck modeling
- Move legality rules
- Selection ("picked up" cards) handling
- Stock/waste draw cycles, automatic flips and win detection
"""

__version__ = "0.1.0"
