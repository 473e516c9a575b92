"""
Solving games subgame by subgame.

SubgameSolver walks the marked subgames of a game from the innermost
outwards. Each subgame is extracted as a reduced game in which the nested
subgames already solved are replaced by terminal nodes paying their
equilibrium values. The reduced game is handed to solve_subgame(), and the
equilibria found are written back, infoset by infoset, into a profile over
the full game.
"""

import numpy as np

from efnash.errors import SubgameMarkingError
from efnash.game.subgames import extract_subgame, marked_subgame_roots
from efnash.game.tree import ExtensiveGame, GameNode, Infoset
from .liap import LiapParams, liap, liap_value
from .profile import BehaviorProfile
from .solution import BehaviorSolution


class SubgameSolver:
    """
    Base class for algorithms that solve one subgame at a time.

    Subgames are visited in marked_subgame_roots() order, so every nested
    subgame is solved before the subgame containing it and the game root
    is solved last. A nested subgame contributes its first equilibrium;
    the root subgame contributes up to max_solutions composed solutions.
    """

    def __init__(self, game: ExtensiveGame, max_solutions: int = 0):
        """
        Initialize solver.

        Args:
            game: Game to solve, with its subgame roots marked
            max_solutions: Cap on composed solutions (0 = no limit)
        """
        self.game = game
        self.max_solutions = max_solutions

    def solve_subgame(
        self,
        subgame: ExtensiveGame,
        solutions: list[BehaviorSolution],
    ) -> bool:
        """
        Solve one reduced subgame, appending equilibria to solutions.

        Returns:
            True if the solve was cancelled
        """
        raise NotImplementedError

    def solve(self) -> list[BehaviorSolution]:
        """
        Solve the game.

        Returns:
            Composed full-game solutions; empty if some subgame had no
            equilibrium or the solve was cancelled
        """
        composed = BehaviorProfile(self.game)
        values: dict[GameNode, np.ndarray] = {}

        for root in marked_subgame_roots(self.game):
            subgame, infoset_map = extract_subgame(self.game, root, values)

            sub_solutions: list[BehaviorSolution] = []
            if self.solve_subgame(subgame, sub_solutions):
                return []
            if not sub_solutions:
                return []

            if root is not self.game.root:
                chosen = sub_solutions[0]
                self._merge(composed, chosen.profile, infoset_map)
                values[root] = chosen.profile.expected_payoffs()
                continue

            results = []
            for solution in sub_solutions:
                profile = composed.copy()
                self._merge(profile, solution.profile, infoset_map)
                results.append(
                    BehaviorSolution.create(profile, solution.method, liap_value(profile))
                )
                if self.max_solutions and len(results) >= self.max_solutions:
                    break
            return results

        return []

    @staticmethod
    def _merge(
        profile: BehaviorProfile,
        sub_profile: BehaviorProfile,
        infoset_map: dict[Infoset, Infoset],
    ) -> None:
        for sub_iset, iset in infoset_map.items():
            profile.infoset_probs(iset)[:] = sub_profile.infoset_probs(sub_iset)


class LiapBySubgame(SubgameSolver):
    """
    Liapunov search run separately on every marked subgame.

    Keeps a running subgame counter: the n-th call to solve_subgame()
    handles the n-th marked subgame root, and starting probabilities for
    its infosets are taken from the full-game starting profile.
    """

    def __init__(
        self,
        game: ExtensiveGame,
        params: LiapParams,
        start: BehaviorProfile,
        max_solutions: int = 0,
    ):
        """
        Initialize solver.

        Args:
            game: Game to solve, with its subgame roots marked
            params: Liapunov search configuration, shared by all subgames
            start: Starting profile over the full game
            max_solutions: Cap on composed solutions (0 = no limit)

        Raises:
            SubgameMarkingError: If an infoset is not dominated by any
                marked subgame root
        """
        super().__init__(game, max_solutions)
        self.params = params
        self.start = start

        self.num_evals = 0
        self.subgame_number = 0
        self.subgame_evals: list[int] = []

        roots = marked_subgame_roots(game)
        self.infoset_subgames: list[list[int]] = []
        for player in game.players:
            indices = []
            for iset in player.infosets:
                indices.append(self._find_subgame(iset, roots))
            self.infoset_subgames.append(indices)

    @staticmethod
    def _find_subgame(iset: Infoset, roots: list[GameNode]) -> int:
        if iset.members:
            member = iset.members[0]
            for index, root in enumerate(roots):
                if member.subgame_root is root:
                    return index
        raise SubgameMarkingError(
            f"Infoset {iset.label or iset.index} of player {iset.player.number} "
            f"is not in any marked subgame"
        )

    def solve(self) -> list[BehaviorSolution]:
        """Solve the game; counters start over on every call."""
        self.num_evals = 0
        self.subgame_number = 0
        self.subgame_evals = []
        return super().solve()

    def solve_subgame(
        self,
        subgame: ExtensiveGame,
        solutions: list[BehaviorSolution],
    ) -> bool:
        current = self.subgame_number
        self.subgame_number += 1

        bp = BehaviorProfile(subgame)

        # Infosets of the subgame keep the relative order they have in the
        # full game, so the n-th infoset of this subgame for a player is the
        # n-th of that player's full-game infosets mapped to this subgame.
        for pl, player in enumerate(self.game.players):
            niset = 0
            for iset, index in zip(player.infosets, self.infoset_subgames[pl]):
                if index != current:
                    continue
                sub_iset = subgame.players[pl].infosets[niset]
                bp.infoset_probs(sub_iset)[:] = [
                    self.start.action_prob(iset.actions[a.index])
                    for a in bp.support.infoset_actions(sub_iset)
                ]
                niset += 1

        if self.params.trace >= 1:
            self.params.tracefile.print(
                f"[bold]subgame {current + 1}[/bold]: {len(bp)} free probabilities"
            )

        result = liap(subgame, self.params, bp, solutions)

        self.num_evals += result.num_evals
        self.subgame_evals.append(result.num_evals)
        return self.params.status.get()
