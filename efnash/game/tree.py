"""Game tree representation for extensive-form games."""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterator, Optional

import numpy as np


CHANCE = -1  # Player number of the chance player


class NodeType(Enum):
    """Types of nodes in a game tree."""
    PLAYER = auto()       # Player decision node
    CHANCE = auto()       # Chance move
    TERMINAL = auto()     # Leaf with payoffs


@dataclass(eq=False)
class Action:
    """An action available at an information set."""
    label: str
    infoset: "Infoset" = field(repr=False)
    index: int = 0  # Position within the infoset

    def __str__(self) -> str:
        return self.label or f"a{self.index + 1}"


@dataclass(eq=False)
class Infoset:
    """
    An information set.

    A set of decision nodes the acting player cannot tell apart.
    All members share the same ordered list of actions.
    """
    player: "Player" = field(repr=False)
    index: int
    label: str = ""
    actions: list[Action] = field(default_factory=list)
    members: list["GameNode"] = field(default_factory=list, repr=False)

    # Only set for chance infosets
    probs: Optional[np.ndarray] = None

    @property
    def is_chance(self) -> bool:
        return self.player.is_chance

    @property
    def num_actions(self) -> int:
        return len(self.actions)


@dataclass(eq=False)
class Player:
    """A player (or the chance player) and its information sets."""
    number: int
    label: str = ""
    infosets: list[Infoset] = field(default_factory=list, repr=False)

    @property
    def is_chance(self) -> bool:
        return self.number == CHANCE

    @property
    def num_infosets(self) -> int:
        return len(self.infosets)


@dataclass(eq=False)
class GameNode:
    """
    A node in the game tree.

    Represents a point in play where either:
    - A player must choose an action (PLAYER)
    - Nature chooses an action with fixed probabilities (CHANCE)
    - Play ends and payoffs are paid (TERMINAL)
    """
    node_type: NodeType = NodeType.TERMINAL
    label: str = ""

    # Tree structure
    parent: Optional["GameNode"] = field(default=None, repr=False)
    children: list["GameNode"] = field(default_factory=list, repr=False)
    infoset: Optional[Infoset] = field(default=None, repr=False)

    # For terminal nodes
    payoffs: Optional[np.ndarray] = None

    # Subgame marking
    marked: bool = False
    subgame_root: Optional["GameNode"] = field(default=None, repr=False)

    @property
    def is_terminal(self) -> bool:
        return self.node_type == NodeType.TERMINAL

    @property
    def is_chance(self) -> bool:
        return self.node_type == NodeType.CHANCE

    @property
    def is_player(self) -> bool:
        return self.node_type == NodeType.PLAYER

    @property
    def player(self) -> Optional[Player]:
        return self.infoset.player if self.infoset is not None else None

    @property
    def prior_action(self) -> Optional[Action]:
        """Action leading from the parent to this node."""
        if self.parent is None:
            return None
        idx = self.parent.children.index(self)
        return self.parent.infoset.actions[idx]

    def child(self, action: Action) -> "GameNode":
        """Get the child reached by taking an action."""
        if action.infoset is not self.infoset:
            raise ValueError(f"Action {action} is not available at this node")
        return self.children[action.index]

    def descendants(self) -> Iterator["GameNode"]:
        """Iterate over this node and everything below it, preorder."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


class ExtensiveGame:
    """
    A finite extensive-form game.

    Built top-down: start from a terminal root, create information sets,
    and turn terminal nodes into moves with append_move().
    """

    def __init__(self, players: list[str], title: str = ""):
        """
        Initialize game.

        Args:
            players: Labels of the (personal) players
            title: Optional game title
        """
        if not players:
            raise ValueError("A game needs at least one player")

        self.title = title
        self.players = [Player(number=i, label=lbl) for i, lbl in enumerate(players)]
        self.chance = Player(number=CHANCE, label="Chance")
        self.root = GameNode()
        self.root.marked = True
        self.root.subgame_root = self.root

    @property
    def num_players(self) -> int:
        return len(self.players)

    @property
    def infosets(self) -> list[Infoset]:
        """All personal-player infosets in canonical order."""
        return [iset for player in self.players for iset in player.infosets]

    def get_player(self, number: int) -> Player:
        if number == CHANCE:
            return self.chance
        if not 0 <= number < self.num_players:
            raise ValueError(f"Unknown player: {number}")
        return self.players[number]

    def new_infoset(
        self,
        player: int,
        actions: list[str],
        label: str = "",
    ) -> Infoset:
        """
        Create a new information set for a personal player.

        Args:
            player: Player number (0-based)
            actions: Action labels, in order
            label: Optional infoset label

        Returns:
            The new Infoset (without members)
        """
        if player == CHANCE:
            raise ValueError("Use new_chance_infoset() for chance moves")
        return self._add_infoset(self.get_player(player), actions, label)

    def new_chance_infoset(
        self,
        actions: list[str],
        probs: list[float],
        label: str = "",
    ) -> Infoset:
        """Create a chance information set with fixed action probabilities."""
        if len(actions) != len(probs):
            raise ValueError(
                f"Chance move has {len(actions)} actions but {len(probs)} probabilities"
            )
        probs = np.asarray(probs, dtype=float)
        if np.any(probs < 0) or not np.isclose(probs.sum(), 1.0):
            raise ValueError("Chance probabilities must be a distribution")

        infoset = self._add_infoset(self.chance, actions, label)
        infoset.probs = probs
        return infoset

    def _add_infoset(self, player: Player, actions: list[str], label: str) -> Infoset:
        if not actions:
            raise ValueError("An infoset needs at least one action")

        infoset = Infoset(player=player, index=player.num_infosets, label=label)
        infoset.actions = [
            Action(label=a, infoset=infoset, index=i) for i, a in enumerate(actions)
        ]
        player.infosets.append(infoset)
        return infoset

    def append_move(self, node: GameNode, infoset: Infoset) -> list[GameNode]:
        """
        Turn a terminal node into a move at the given infoset.

        Returns:
            The new child nodes, one per action
        """
        if not node.is_terminal:
            raise ValueError("Moves can only be appended at terminal nodes")

        node.node_type = NodeType.CHANCE if infoset.is_chance else NodeType.PLAYER
        node.infoset = infoset
        node.payoffs = None
        infoset.members.append(node)

        node.children = [
            GameNode(parent=node, subgame_root=node.subgame_root)
            for _ in infoset.actions
        ]
        return node.children

    def set_payoffs(self, node: GameNode, payoffs: list[float]) -> None:
        """Set the payoff vector at a terminal node."""
        if not node.is_terminal:
            raise ValueError("Payoffs can only be attached to terminal nodes")
        if len(payoffs) != self.num_players:
            raise ValueError(
                f"Expected {self.num_players} payoffs, got {len(payoffs)}"
            )
        node.payoffs = np.asarray(payoffs, dtype=float)

    def nodes(self) -> Iterator[GameNode]:
        """Iterate over all nodes, preorder."""
        return self.root.descendants()

    def terminal_nodes(self) -> list[GameNode]:
        """Get all terminal nodes in the tree."""
        return [node for node in self.nodes() if node.is_terminal]

    def dimensionality(self) -> list[list[int]]:
        """Number of actions at each infoset, per player."""
        return [
            [iset.num_actions for iset in player.infosets]
            for player in self.players
        ]

    def count_nodes(self) -> dict[str, int]:
        """Count nodes by type."""
        counts = {
            "total": 0,
            "player": 0,
            "chance": 0,
            "terminal": 0,
        }

        for node in self.nodes():
            counts["total"] += 1
            if node.is_player:
                counts["player"] += 1
            elif node.is_chance:
                counts["chance"] += 1
            elif node.is_terminal:
                counts["terminal"] += 1

        return counts

    def __repr__(self) -> str:
        return f"ExtensiveGame({self.title!r}, players={self.num_players})"
