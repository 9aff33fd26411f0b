"""Reduced-system factorization, mechanism detection and back-substitution."""

import logging
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np
import scipy.linalg

logger = logging.getLogger(__name__)


class MechanismError(RuntimeError):
    """
    Raised when the reduced stiffness matrix is singular or nearly so.

    `degenerate_dofs` holds the FREE indices whose pivots vanished during a
    symmetric elimination; callers map them back to joints.
    """

    def __init__(self, message: str, degenerate_dofs: List[int]):
        super().__init__(message)
        self.degenerate_dofs = list(degenerate_dofs)


def degenerate_dofs(Kff: np.ndarray, pivot_tolerance: float) -> List[int]:
    """
    Rank-revealing symmetric elimination without reordering.

    Eliminates DOFs in index order. A DOF whose pivot falls below
    pivot_tolerance × (its original diagonal) is degenerate: its row has
    reduced to (numerically) zero. It is recorded, dropped from the
    remaining system and elimination continues, so every independent
    mechanism reports one DOF.

    Deterministic: fixed order, no pivot search.
    """
    A = np.array(Kff, dtype=float, copy=True)
    n = A.shape[0]
    diag = np.diag(A).copy()
    scale_floor = pivot_tolerance * (np.max(np.abs(diag)) if n else 0.0)
    found = []
    for i in range(n):
        pivot = A[i, i]
        scale = max(abs(diag[i]), scale_floor)
        if scale <= 0.0 or pivot <= pivot_tolerance * scale:
            found.append(i)
            A[i, :] = 0.0
            A[:, i] = 0.0
            continue
        if i + 1 < n:
            col = A[i + 1:, i].copy()
            A[i + 1:, i + 1:] -= np.outer(col, A[i, i + 1:]) / pivot
            A[i + 1:, i] = 0.0
            A[i, i + 1:] = 0.0
    return found


@dataclass(frozen=True)
class Factorization:
    """Cholesky factor of K_ff, reused for every load case of one analysis."""
    cho: Tuple[np.ndarray, bool]
    n: int

    def solve(self, Ff: np.ndarray) -> np.ndarray:
        if self.n == 0:
            return np.zeros_like(Ff, dtype=float)
        return scipy.linalg.cho_solve(self.cho, Ff, check_finite=False)


def factorize(Kff: np.ndarray, pivot_tolerance: float = 1e-9) -> Factorization:
    """
    Factor the reduced stiffness matrix K_ff = L·Lᵀ.

    Args:
        Kff: Reduced (free-DOF) stiffness matrix, symmetric
        pivot_tolerance: Relative threshold; a pivot L[i,i]² smaller than
            pivot_tolerance × K_ff[i,i] is treated as zero

    Returns:
        Factorization usable for any number of right-hand sides

    Raises:
        MechanismError: If the truss is unstable or too ill-conditioned to
            trust. No approximate solution is attempted.
    """
    n = Kff.shape[0]
    if n == 0:
        return Factorization(cho=(np.zeros((0, 0)), True), n=0)

    if not np.all(np.isfinite(Kff)):
        raise MechanismError("Stiffness matrix contains non-finite entries.", list(range(n)))

    diag = np.diag(Kff)
    try:
        c, lower = scipy.linalg.cho_factor(Kff, lower=True, check_finite=False)
        pivots = np.diag(c) ** 2
        ok = bool(np.all(diag > 0.0)) and bool(np.all(pivots > pivot_tolerance * diag))
    except np.linalg.LinAlgError:
        ok = False

    if not ok:
        bad = degenerate_dofs(Kff, pivot_tolerance)
        if not bad:
            # Cholesky rejected the matrix but elimination found no zero
            # pivot; the last DOF is as good a culprit as any.
            bad = [n - 1]
        logger.debug("Mechanism detected: %d degenerate DOF(s) %s", len(bad), bad)
        raise MechanismError(
            f"Unstable truss: {len(bad)} degenerate DOF(s). Check supports/bracing.",
            bad,
        )

    return Factorization(cho=(c, lower), n=n)


def solve_linear(
    K: np.ndarray,
    F: np.ndarray,
    free: np.ndarray,
    pivot_tolerance: float = 1e-9,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Solve K·d = F with restrained DOFs removed by partitioning.

    Args:
        K: Full stiffness matrix (ndof × ndof)
        F: Full load vector (ndof,)
        free: Full indices of the unrestrained DOFs
        pivot_tolerance: See factorize()

    Returns:
        d: Full displacement vector (zeros at restrained DOFs)
        R: Reaction vector R = K·d - F (nonzero only at restrained DOFs)

    Raises:
        MechanismError: If the structure is unstable
    """
    Kff = K[np.ix_(free, free)]
    fact = factorize(Kff, pivot_tolerance)
    return back_substitute(K, F, free, fact)


def back_substitute(
    K: np.ndarray,
    F: np.ndarray,
    free: np.ndarray,
    fact: Factorization,
) -> Tuple[np.ndarray, np.ndarray]:
    """Displacements and reactions for one load vector from an existing factorization."""
    d = np.zeros(K.shape[0], dtype=float)
    d[free] = fact.solve(F[free])
    R = K @ d - F
    R[free] = 0.0
    return d, R
