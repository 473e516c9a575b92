"""
Derivative-free minimization by Powell's direction-set method.

The outer loop follows Powell's method with the usual heuristic for
discarding the direction of largest decrease. Line searches along each
direction are delegated to Brent's method in scipy.optimize.
"""

from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np
from rich.console import Console
from scipy.optimize import minimize_scalar

from .status import Status


TINY = 1.0e-20  # Absolute slack in the convergence test for values near zero


@dataclass
class PowellResult:
    """Outcome of a Powell minimization."""
    found: bool         # Converged within the iteration cap
    value: float        # Function value at the final point
    iterations: int     # Outer iterations performed


def project(v: np.ndarray, lengths: list[int]) -> None:
    """
    Project a vector onto the sum-zero subspace of each block, in place.

    Args:
        v: Vector partitioned into consecutive blocks
        lengths: Block sizes (one block per infoset)
    """
    if sum(lengths) != len(v):
        raise ValueError(
            f"Block sizes sum to {sum(lengths)} but vector has length {len(v)}"
        )

    start = 0
    for n in lengths:
        block = v[start:start + n]
        block -= block.mean()
        start += n


def init_directions(lengths: list[int]) -> np.ndarray:
    """
    Initial direction set for a Powell search over behavior probabilities.

    The identity matrix with every row projected so that moving along it
    keeps the probabilities at each infoset summing to the same value.
    """
    n = sum(lengths)
    xi = np.eye(n)
    for row in xi:
        project(row, lengths)
    return xi


def _line_minimize(
    p: np.ndarray,
    xit: np.ndarray,
    func: Callable[[np.ndarray], float],
    fret: float,
    maxits: int,
    tol: float,
) -> float:
    """
    Minimize func along the line p + t * xit.

    On improvement moves p to the minimum and scales xit to the step taken.
    Both are updated in place.

    Returns:
        Function value at the (possibly unchanged) point
    """
    if not np.any(xit):
        return fret

    res = minimize_scalar(
        lambda t: func(p + t * xit),
        bracket=(0.0, 1.0),
        method="brent",
        tol=tol,
        options={"maxiter": maxits},
    )

    fmin = float(res.fun)
    if not fmin < fret:
        return fret

    xit *= float(res.x)
    p += xit
    return fmin


def powell(
    p: np.ndarray,
    xi: np.ndarray,
    func: Callable[[np.ndarray], float],
    maxits1: int = 100,
    tol1: float = 2.0e-10,
    maxitsN: int = 20,
    tolN: float = 1.0e-10,
    tracefile: Optional[Console] = None,
    trace: int = 0,
    status: Optional[Status] = None,
) -> PowellResult:
    """
    Minimize a function of n variables by Powell's method.

    The outer loop is written out rather than delegated to
    scipy.optimize.minimize(method="powell"), which offers no hook to poll
    a cancellation flag between iterations and keeps its direction set
    internal; here the caller supplies xi (projected onto the probability
    constraints) and it is updated in place. Only the line searches go
    through scipy.

    Args:
        p: Starting point, overwritten with the final point
        xi: Initial directions as rows of an (n, n) array, updated in place
        func: Objective function
        maxits1: Iteration cap for each line search
        tol1: Tolerance for each line search
        maxitsN: Cap on outer iterations
        tolN: Relative tolerance on the decrease per outer iteration
        tracefile: Console receiving trace output
        trace: Trace level (0 = silent)
        status: Checked before every outer iteration; aborts when set

    Returns:
        PowellResult; found is False if cancelled or maxitsN was exhausted
    """
    n = len(p)
    if xi.shape != (n, n):
        raise ValueError(f"Direction set must have shape ({n}, {n}), got {xi.shape}")

    fret = func(p)
    pt = p.copy()

    for iteration in range(1, maxitsN + 1):
        if status is not None and status.get():
            return PowellResult(found=False, value=fret, iterations=iteration - 1)

        fp = fret
        ibig = 0
        delta = 0.0

        for i in range(n):
            xit = xi[i].copy()
            fptt = fret
            fret = _line_minimize(p, xit, func, fret, maxits1, tol1)
            if fptt - fret > delta:
                delta = fptt - fret
                ibig = i

        if trace >= 1 and tracefile is not None:
            tracefile.print(f"  powell iteration {iteration}: f = {fret:.6e}")

        if 2.0 * abs(fp - fret) <= tolN * (abs(fp) + abs(fret)) + TINY:
            return PowellResult(found=True, value=fret, iterations=iteration)

        # Extrapolated point and average direction moved
        ptt = 2.0 * p - pt
        xit = p - pt
        pt = p.copy()

        fptt = func(ptt)
        if fptt < fp:
            t = (2.0 * (fp - 2.0 * fret + fptt) * (fp - fret - delta) ** 2
                 - delta * (fp - fptt) ** 2)
            if t < 0.0:
                fret = _line_minimize(p, xit, func, fret, maxits1, tol1)
                xi[ibig] = xi[n - 1]
                xi[n - 1] = xit

    return PowellResult(found=False, value=fret, iterations=maxitsN)
