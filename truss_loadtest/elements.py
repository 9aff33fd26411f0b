# Planar truss element: geometry, 4x4 global stiffness, axial force recovery

import numpy as np
from typing import Tuple

from .kernel.dof import DOF_PER_JOINT


def element_geometry(xa: float, ya: float, xb: float, yb: float) -> Tuple[float, float, float]:
    """
    Length and direction cosines of the bar from joint A to joint B.

    Returns:
        (L, c, s) with c = dx/L, s = dy/L

    Raises:
        ValueError: If the bar has zero length
    """
    dx = xb - xa
    dy = yb - ya
    L = float(np.sqrt(dx * dx + dy * dy))
    if L <= 0.0:
        raise ValueError(f"Bar from ({xa}, {ya}) to ({xb}, {yb}) has zero length.")
    return L, dx / L, dy / L


def truss2d_global_stiffness(EA_L: float, c: float, s: float) -> np.ndarray:
    """
    4×4 global stiffness of a planar truss bar.

    DOF order: [ux_a, uy_a, ux_b, uy_b]

        ke = (EA/L) × [  B  -B ]      B = [ c²  cs ]
                      [ -B   B ]          [ cs  s² ]

    Rank 1: the only deformation a bar resists is stretching along its axis.
    """
    B = np.array([
        [c * c, c * s],
        [c * s, s * s],
    ], dtype=float)

    ke = np.zeros((4, 4), dtype=float)
    ke[0:2, 0:2] = B
    ke[0:2, 2:4] = -B
    ke[2:4, 0:2] = -B
    ke[2:4, 2:4] = B
    ke *= EA_L
    return ke


def truss2d_axial_force(
    EA_L: float,
    c: float,
    s: float,
    ia: int,
    ib: int,
    d_global: np.ndarray,
) -> float:
    """
    Axial force from global displacements.

    N = (EA/L) × (c·(ux_b - ux_a) + s·(uy_b - uy_a))

    Positive = tension (bar elongated), negative = compression.
    """
    a = DOF_PER_JOINT * ia
    b = DOF_PER_JOINT * ib
    elongation = c * (d_global[b] - d_global[a]) + s * (d_global[b + 1] - d_global[a + 1])
    return float(EA_L * elongation)
