"""
SuperTTT - Super Tic-Tac-Toe Engine

A deterministic engine for the board-of-boards game: an N×N meta-board of
N×N local boards. Winning a local board claims a meta cell; winning the
meta-board wins the game. The package provides:
- Immutable game state and a pure move reducer
- Forced-board derivation and legal move queries
- Tolerant persistence (coercion of corrupt or legacy saves)
- A multi-game store, a local HTTP bridge and a text CLI
"""

__version__ = "0.1.0"
