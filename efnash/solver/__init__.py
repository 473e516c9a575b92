"""Solver engine module."""

from .profile import BehaviorProfile, BehaviorSupport
from .solution import BehaviorSolution, SolverMethod
from .status import Status
from .minimize import PowellResult, init_directions, powell, project
from .liap import LiapFunction, LiapParams, LiapResult, liap, liap_value, random_profile
from .subgame import LiapBySubgame, SubgameSolver

__all__ = [
    "BehaviorProfile",
    "BehaviorSupport",
    "BehaviorSolution",
    "SolverMethod",
    "Status",
    "PowellResult",
    "init_directions",
    "powell",
    "project",
    "LiapFunction",
    "LiapParams",
    "LiapResult",
    "liap",
    "liap_value",
    "random_profile",
    "LiapBySubgame",
    "SubgameSolver",
]
