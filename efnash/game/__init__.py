"""Game representation module."""

from .tree import CHANCE, Action, ExtensiveGame, GameNode, Infoset, NodeType, Player
from .subgames import (
    child_subgames,
    extract_subgame,
    is_legal_subgame,
    mark_subgame,
    mark_subgames,
    marked_subgame_roots,
    unmark_subgames,
)

__all__ = [
    "CHANCE",
    "Action",
    "ExtensiveGame",
    "GameNode",
    "Infoset",
    "NodeType",
    "Player",
    "child_subgames",
    "extract_subgame",
    "is_legal_subgame",
    "mark_subgame",
    "mark_subgames",
    "marked_subgame_roots",
    "unmark_subgames",
]
