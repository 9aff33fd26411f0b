# truss_loadtest/kernel/assemble.py
"""
ASSEMBLY: Global Stiffness Matrix and Load Vector
=================================================

Scatter-add of element contributions into a dense buffer owned by a single
analysis run. Each truss member touches four DOFs (ux, uy at both ends) and
contributes a symmetric 4×4 block, so the assembled K is symmetric by
construction.

After assembly the reduced system is extracted by omitting restrained rows
and columns (see DOFManager); nothing is added to the diagonal to "hold"
supports.
"""

from typing import List, Sequence, Tuple

import numpy as np


def assemble_global_K(
    ndof: int,
    contributions: Sequence[Tuple[List[int], np.ndarray]]
) -> np.ndarray:
    """
    Assemble the global stiffness matrix from element contributions.

    ALGORITHM:
    ----------
    K = zeros(ndof × ndof)
    for each element:
        K[np.ix_(dof_map, dof_map)] += ke

    Parameters:
    -----------
    ndof : int
        Size of the full system (2 × n_joints for a planar truss)
    contributions : Sequence[Tuple[List[int], np.ndarray]]
        (dof_map, ke) per element; ke is (len(dof_map), len(dof_map))
        in global coordinates

    Returns:
    --------
    np.ndarray
        Global stiffness matrix K, shape (ndof, ndof), symmetric positive
        semi-definite (definite on the free DOFs only if the truss is stable)
    """
    K = np.zeros((ndof, ndof), dtype=float)

    for dof_map, ke in contributions:
        n_element_dofs = len(dof_map)
        assert ke.shape == (n_element_dofs, n_element_dofs), \
            f"Element ke shape {ke.shape} doesn't match dof_map length {n_element_dofs}"

        # Loop form keeps the accumulation order fixed (bit-stable results)
        for a in range(n_element_dofs):
            ia = dof_map[a]
            for b in range(n_element_dofs):
                K[ia, dof_map[b]] += ke[a, b]

    return K


def add_nodal_load(F: np.ndarray, joint_index: int, load_vector: Sequence[float]) -> None:
    """
    Add a joint load [Fx, Fy] to the full load vector (in-place).

    >>> F = np.zeros(6)
    >>> add_nodal_load(F, 1, (0.0, -10.0))
    >>> float(F[3])
    -10.0
    """
    base = 2 * joint_index
    for i, val in enumerate(load_vector):
        F[base + i] += val

