"""Equilibrium solutions."""

from dataclasses import dataclass
from enum import Enum, auto

from .profile import BehaviorProfile


class SolverMethod(Enum):
    """Algorithm that produced a solution."""
    LIAP = auto()


@dataclass(frozen=True)
class BehaviorSolution:
    """
    A candidate equilibrium found by a solver.

    The profile is a read-only snapshot taken when the solution is created.
    """
    profile: BehaviorProfile
    method: SolverMethod
    liap_value: float = 0.0

    @classmethod
    def create(
        cls,
        profile: BehaviorProfile,
        method: SolverMethod,
        liap_value: float,
    ) -> "BehaviorSolution":
        """Snapshot a profile into a new solution."""
        snapshot = profile.copy()
        snapshot.vector.setflags(write=False)
        return cls(profile=snapshot, method=method, liap_value=float(liap_value))

    def __repr__(self) -> str:
        return (
            f"BehaviorSolution({self.method.name}, liap={self.liap_value:.3g}, "
            f"{self.profile.vector.round(4).tolist()})"
        )
