"""Behavior supports and behavior profiles."""

from typing import Optional

import numpy as np

from efnash.game.tree import Action, ExtensiveGame, GameNode, Infoset


class BehaviorSupport:
    """
    Active actions at every personal-player information set.

    Starts out with every action active. The order of active actions
    follows the order of actions in the infoset.
    """

    def __init__(self, game: ExtensiveGame):
        self.game = game
        self._actions: dict[Infoset, list[Action]] = {
            iset: list(iset.actions) for iset in game.infosets
        }

    def copy(self) -> "BehaviorSupport":
        support = BehaviorSupport.__new__(BehaviorSupport)
        support.game = self.game
        support._actions = {iset: list(acts) for iset, acts in self._actions.items()}
        return support

    def actions(self, player: int, infoset: int) -> list[Action]:
        """Active actions at an infoset."""
        return self._actions[self.get_infoset(player, infoset)]

    def infoset_actions(self, infoset: Infoset) -> list[Action]:
        return self._actions[infoset]

    def num_actions(self, player: int, infoset: int) -> int:
        return len(self.actions(player, infoset))

    def contains(self, action: Action) -> bool:
        return action in self._actions.get(action.infoset, ())

    def remove_action(self, action: Action) -> None:
        """
        Deactivate an action.

        Raises:
            ValueError: If the action is not active or is the last active
                action at its infoset
        """
        active = self._actions.get(action.infoset)
        if active is None or action not in active:
            raise ValueError(f"Action {action} is not in the support")
        if len(active) == 1:
            raise ValueError("Cannot remove the last action of an infoset")
        active.remove(action)

    @property
    def lengths(self) -> list[list[int]]:
        """Number of active actions at each infoset, per player."""
        return [
            [len(self._actions[iset]) for iset in player.infosets]
            for player in self.game.players
        ]

    def get_infoset(self, player: int, infoset: int) -> Infoset:
        players = self.game.players
        if not 0 <= player < len(players):
            raise IndexError(f"Player index out of range: {player}")
        if not 0 <= infoset < players[player].num_infosets:
            raise IndexError(f"Infoset index out of range: ({player}, {infoset})")
        return players[player].infosets[infoset]


class BehaviorProfile:
    """
    Probabilities for the active actions at every information set.

    Stored as a flat vector in canonical order: players, then their
    infosets, then the active actions of each infoset. Entries are not
    constrained; during a Liapunov search they may go negative or fail to
    sum to one at an infoset.
    """

    def __init__(
        self,
        game: ExtensiveGame,
        support: Optional[BehaviorSupport] = None,
    ):
        """
        Initialize profile at the centroid of the support.

        Args:
            game: Game the profile belongs to
            support: Active actions (defaults to the full support); copied,
                so later changes to it do not affect the profile
        """
        self.game = game
        self.support = support.copy() if support is not None else BehaviorSupport(game)

        self._offsets: dict[Infoset, int] = {}
        offset = 0
        for iset in game.infosets:
            self._offsets[iset] = offset
            offset += len(self.support.infoset_actions(iset))

        self.vector = np.zeros(offset)
        self.centroid()

    def belongs_to(self) -> ExtensiveGame:
        return self.game

    def __len__(self) -> int:
        return len(self.vector)

    @property
    def lengths(self) -> list[list[int]]:
        return self.support.lengths

    @property
    def infoset_lengths(self) -> list[int]:
        """Number of active actions at each infoset, flattened."""
        return [n for player in self.lengths for n in player]

    def centroid(self) -> None:
        """Set every infoset to the uniform distribution over its support."""
        for iset in self.game.infosets:
            n = len(self.support.infoset_actions(iset))
            self.infoset_probs(iset)[:] = 1.0 / n

    def copy(self) -> "BehaviorProfile":
        # The support is private to the profile and never mutated, so
        # copies share it along with the offsets
        profile = BehaviorProfile.__new__(BehaviorProfile)
        profile.game = self.game
        profile.support = self.support
        profile._offsets = self._offsets
        profile.vector = self.vector.copy()
        return profile

    def set_vector(self, values: np.ndarray) -> None:
        """Overwrite all probabilities from a flat vector."""
        values = np.asarray(values, dtype=float)
        if values.shape != self.vector.shape:
            raise ValueError(
                f"Expected vector of length {len(self.vector)}, got shape {values.shape}"
            )
        self.vector[:] = values

    def _index(self, key: tuple[int, int, int]) -> int:
        player, infoset, action = key
        iset = self.support.get_infoset(player, infoset)
        n = len(self.support.infoset_actions(iset))
        if not 0 <= action < n:
            raise IndexError(f"Action index out of range: {key}")
        return self._offsets[iset] + action

    def __getitem__(self, key: tuple[int, int, int]) -> float:
        return float(self.vector[self._index(key)])

    def __setitem__(self, key: tuple[int, int, int], value: float) -> None:
        self.vector[self._index(key)] = value

    def infoset_probs(self, infoset: Infoset) -> np.ndarray:
        """View of the probabilities of the active actions at an infoset."""
        start = self._offsets[infoset]
        return self.vector[start:start + len(self.support.infoset_actions(infoset))]

    def action_prob(self, action: Action) -> float:
        """Probability of an action; chance actions use their fixed probability."""
        iset = action.infoset
        if iset.is_chance:
            return float(iset.probs[action.index])
        active = self.support.infoset_actions(iset)
        if action not in active:
            return 0.0
        return float(self.vector[self._offsets[iset] + active.index(action)])

    def realization_probs(self) -> dict[GameNode, float]:
        """Probability of reaching each node, root to leaves."""
        probs = {self.game.root: 1.0}
        for node in self.game.nodes():
            if node.is_terminal:
                continue
            for action, child in zip(node.infoset.actions, node.children):
                probs[child] = probs[node] * self.action_prob(action)
        return probs

    def node_values(self) -> dict[GameNode, np.ndarray]:
        """Expected payoff vector from each node onward."""
        values: dict[GameNode, np.ndarray] = {}
        zero = np.zeros(self.game.num_players)

        # Reversed preorder visits every child before its parent
        for node in reversed(list(self.game.nodes())):
            if node.is_terminal:
                value = node.payoffs if node.payoffs is not None else zero
            else:
                value = zero.copy()
                for action, child in zip(node.infoset.actions, node.children):
                    prob = self.action_prob(action)
                    if prob != 0.0:
                        value = value + prob * values[child]
            values[node] = value
        return values

    def expected_payoffs(self) -> np.ndarray:
        """Expected payoff to each player."""
        return self.node_values()[self.game.root]

    def beliefs(
        self,
        infoset: Infoset,
        realization: Optional[dict[GameNode, float]] = None,
    ) -> np.ndarray:
        """
        Conditional probability of each member of an infoset.

        Falls back to uniform beliefs when the infoset is reached with
        non-positive total probability.
        """
        realization = realization or self.realization_probs()
        weights = np.array([realization[m] for m in infoset.members])
        total = weights.sum()
        if total > 0.0:
            return weights / total
        return np.full(len(weights), 1.0 / len(weights))

    def conditional_payoffs(self) -> np.ndarray:
        """
        Conditional payoff of every active action.

        The payoff to the acting player of taking the action, conditional
        on reaching its infoset, with the rest of the profile held fixed.
        Aligned with self.vector.
        """
        realization = self.realization_probs()
        values = self.node_values()
        cpay = np.zeros(len(self.vector))

        for player in self.game.players:
            for iset in player.infosets:
                if not iset.members:
                    continue
                beliefs = self.beliefs(iset, realization)
                start = self._offsets[iset]
                for k, action in enumerate(self.support.infoset_actions(iset)):
                    cpay[start + k] = sum(
                        b * values[member.children[action.index]][player.number]
                        for b, member in zip(beliefs, iset.members)
                    )
        return cpay

    def to_dict(self) -> dict[str, dict[str, float]]:
        """Probabilities keyed by infoset and action labels."""
        data = {}
        for player in self.game.players:
            for iset in player.infosets:
                key = iset.label or f"P{player.number}:{iset.index}"
                data[key] = {
                    str(a): p
                    for a, p in zip(
                        self.support.infoset_actions(iset),
                        self.infoset_probs(iset).tolist(),
                    )
                }
        return data

    def __repr__(self) -> str:
        return f"BehaviorProfile({np.array2string(self.vector, precision=4)})"
