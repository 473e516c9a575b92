"""
Liapunov-function equilibrium search.

The Liapunov function of a behavior profile penalizes negative
probabilities, probabilities that do not sum to one at an infoset, and
actions whose conditional payoff beats the infoset average. It is
non-negative and vanishes exactly at profiles that play a best response
at every infoset, so equilibria are found by minimizing it from a number
of random starting points.
"""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from rich.console import Console

from efnash.game.tree import ExtensiveGame
from efnash.viz.profile import ProfileDisplay
from .minimize import init_directions, powell
from .profile import BehaviorProfile
from .solution import BehaviorSolution, SolverMethod
from .status import Status


NEG_PENALTY = 10000.0   # Weight on squared negative probabilities
SUM_PENALTY = 100.0     # Weight on squared deviation of infoset sums from 1


@dataclass
class LiapParams:
    """Configuration for the Liapunov search."""
    trace: int = 0              # Trace level (0 = silent)
    n_tries: int = 10           # Restart attempts
    stop_after: int = 1         # Solutions to collect (0 = no limit)
    maxits1: int = 100          # Line search iteration cap
    maxitsN: int = 20           # Powell outer iteration cap
    tol1: float = 2.0e-10       # Line search tolerance
    tolN: float = 1.0e-10       # Powell convergence tolerance
    seed: Optional[int] = None  # Seed for random restarts

    tracefile: Console = field(default_factory=lambda: Console(quiet=True))
    status: Status = field(default_factory=Status)
    rng: Optional[np.random.Generator] = None

    def __post_init__(self):
        if self.rng is None:
            self.rng = np.random.default_rng(self.seed)


def liap_value(profile: BehaviorProfile) -> float:
    """Liapunov function value of a profile."""
    cpay = profile.conditional_payoffs()
    result = 0.0

    start = 0
    for n in profile.infoset_lengths:
        probs = profile.vector[start:start + n]
        payoffs = cpay[start:start + n]
        start += n

        avg = float(np.dot(probs, payoffs))

        # Negative probabilities
        neg = np.minimum(probs, 0.0)
        result += NEG_PENALTY * float(np.dot(neg, neg))

        # Actions doing better than the infoset average
        gain = np.maximum(payoffs - avg, 0.0)
        result += float(np.dot(gain, gain))

        # Infoset probabilities not summing to one
        x = float(probs.sum()) - 1.0
        result += SUM_PENALTY * x * x

    return result


class LiapFunction:
    """
    Liapunov objective over the free probabilities of a profile.

    Counts its evaluations. The wrapped profile is scratch space,
    overwritten on every call.
    """

    def __init__(self, game: ExtensiveGame, start: BehaviorProfile):
        if start.game is not game:
            raise ValueError("Starting profile belongs to a different game")
        self.profile = start.copy()
        self._num_evals = 0

    @property
    def num_evals(self) -> int:
        return self._num_evals

    def __call__(self, v: np.ndarray) -> float:
        self._num_evals += 1
        self.profile.set_vector(v)
        return liap_value(self.profile)


def random_profile(profile: BehaviorProfile, rng: np.random.Generator) -> None:
    """
    Overwrite a profile with a random point of the simplex at every infoset.

    Each active action but the last draws from U[0, 1), redrawing while the
    running sum would exceed one; the last action takes what remains.
    """
    start = 0
    for n in profile.infoset_lengths:
        total = 0.0
        for act in range(start, start + n - 1):
            tmp = rng.random()
            while tmp + total > 1.0:
                tmp = rng.random()
            profile.vector[act] = tmp
            total += tmp

        profile.vector[start + n - 1] = 1.0 - total
        start += n


@dataclass
class LiapResult:
    """Outcome of a Liapunov search."""
    solutions: list[BehaviorSolution]
    num_evals: int = 0
    num_iters: int = 0  # Not tracked; always 0

    @property
    def found(self) -> bool:
        return len(self.solutions) > 0


def liap(
    game: ExtensiveGame,
    params: LiapParams,
    start: BehaviorProfile,
    solutions: Optional[list[BehaviorSolution]] = None,
) -> LiapResult:
    """
    Search for equilibria by minimizing the Liapunov function.

    The first attempt starts from the given profile, later attempts from
    random profiles. Stops after params.n_tries attempts, once
    params.stop_after solutions are collected, or when params.status is set
    at the start of an attempt. A cancellation that arrives during an
    attempt aborts that attempt and is then reset.

    Args:
        game: Game to solve
        params: Search configuration
        start: Starting profile (not modified)
        solutions: List to append solutions to

    Returns:
        LiapResult holding the solution list and evaluation count
    """
    if solutions is None:
        solutions = []

    func = LiapFunction(game, start)
    p = start.copy()
    console = params.tracefile

    for attempt in range(1, params.n_tries + 1):
        if params.status.get():
            break
        if params.stop_after > 0 and len(solutions) >= params.stop_after:
            break

        if attempt > 1:
            random_profile(p, params.rng)

        xi = init_directions(p.infoset_lengths)

        result = powell(
            p.vector, xi, func,
            maxits1=params.maxits1, tol1=params.tol1,
            maxitsN=params.maxitsN, tolN=params.tolN,
            tracefile=console, trace=params.trace,
            status=params.status,
        )

        if params.trace >= 1:
            console.print(
                f"attempt {attempt}: "
                f"{'converged' if result.found else 'no convergence'} "
                f"after {result.iterations} iterations, value {result.value:.6e}"
            )

        if result.found:
            solution = BehaviorSolution.create(p, SolverMethod.LIAP, result.value)
            solutions.append(solution)
            if params.trace >= 2:
                console.print(ProfileDisplay(solution.profile).render_table(
                    title=f"Solution {len(solutions)}"
                ))

        if params.status.get():
            params.status.reset()

    return LiapResult(solutions=solutions, num_evals=func.num_evals, num_iters=0)
