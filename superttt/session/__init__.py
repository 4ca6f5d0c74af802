"""
Session Module - Everything around the engine that keeps games alive.

- manager: the store of open games (tabs) and preferences
- storage: local JSON persistence of the store
- coercion: tolerant loading of saved and legacy records
- feedback: transition classification, cues and status text
"""

from .manager import GameStore, GameEntry, GameNotFoundError
from .storage import JsonFileStorage, InMemoryStorage
from .coercion import coerce_game_state, game_state_to_record, migrate_store_record
from .feedback import (
    TransitionKind,
    FeedbackCue,
    GameStatus,
    classify_transition,
    feedback_cues,
    describe_game_status,
    turn_prompt,
)

__all__ = [
    "GameStore",
    "GameEntry",
    "GameNotFoundError",
    "JsonFileStorage",
    "InMemoryStorage",
    "coerce_game_state",
    "game_state_to_record",
    "migrate_store_record",
    "TransitionKind",
    "FeedbackCue",
    "GameStatus",
    "classify_transition",
    "feedback_cues",
    "describe_game_status",
    "turn_prompt",
]
