# truss_loadtest/kernel/dof.py
"""
DOF MANAGER: Degree of Freedom Numbering for Planar Trusses
===========================================================

PURPOSE:
--------
A planar truss joint has two translations (ux, uy) and nothing else: pins
carry no moment, so there is no rotation DOF. This module maps
(joint_index, axis) to two different numberings:

    FULL numbering:  2 * joint_index + axis, for every joint.
                     Used for assembly, load vectors and reactions.

    FREE numbering:  consecutive indices handed out only to translations a
                     support does not restrain. Used by the solver, which
                     sees the reduced system K_ff · u_f = F_f.

Constrained DOFs never receive a free index. That is static condensation by
omission: the rows and columns of restrained translations are simply not part
of the reduced matrix, so a mechanism leaves it exactly singular instead of
being hidden by a penalty stiffness.

USAGE:
------
    dof = DOFManager.from_restraints([(True, True), (False, False), (False, True)])
    dof.idx(1, 0)         # → 2   (full index of joint 1, ux)
    dof.free_index(1, 0)  # → 0   (first unrestrained translation)
    dof.free_index(0, 1)  # → -1  (restrained)
"""

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import numpy as np

DOF_PER_JOINT = 2  # ux, uy


@dataclass
class DOFManager:
    """
    Degree-of-freedom indexing for a planar truss with supports.

    Attributes:
    -----------
    n_joints : int
        Number of joints in the model
    restrained : np.ndarray
        Boolean array (2 * n_joints,), True where the translation is held
    """
    n_joints: int
    restrained: np.ndarray
    _free_map: np.ndarray = field(init=False, repr=False)

    def __post_init__(self):
        self.restrained = np.asarray(self.restrained, dtype=bool)
        if self.restrained.shape != (DOF_PER_JOINT * self.n_joints,):
            raise ValueError(
                f"restrained must have length {DOF_PER_JOINT * self.n_joints}, "
                f"got {self.restrained.shape}"
            )
        free_map = np.full(self.ndof, -1, dtype=int)
        free_map[~self.restrained] = np.arange(int((~self.restrained).sum()))
        self._free_map = free_map

    @classmethod
    def from_restraints(cls, restraints: Sequence[Tuple[bool, bool]]) -> "DOFManager":
        """Build from per-joint (x_restrained, y_restrained) pairs."""
        flags = [flag for pair in restraints for flag in pair]
        return cls(n_joints=len(restraints), restrained=np.array(flags, dtype=bool))

    @property
    def ndof(self) -> int:
        """Total DOFs in the full numbering (size of the assembled K)."""
        return DOF_PER_JOINT * self.n_joints

    @property
    def n_free(self) -> int:
        return int((~self.restrained).sum())

    def idx(self, joint_index: int, axis: int) -> int:
        """Full index of a joint translation (axis 0 = x, 1 = y)."""
        return DOF_PER_JOINT * joint_index + axis

    def free_index(self, joint_index: int, axis: int) -> int:
        """Reduced index of a joint translation, or -1 when restrained."""
        return int(self._free_map[self.idx(joint_index, axis)])

    def free_dofs(self) -> np.ndarray:
        """Full indices of the unrestrained DOFs, in free-index order."""
        return np.flatnonzero(~self.restrained)

    def fixed_dofs(self) -> np.ndarray:
        return np.flatnonzero(self.restrained)

    def joint_dofs(self, joint_index: int) -> List[int]:
        base = DOF_PER_JOINT * joint_index
        return [base, base + 1]

    def element_dof_map(self, joint_indices: Sequence[int]) -> List[int]:
        """
        Full DOF map for an element connecting the given joints.

        >>> dof = DOFManager.from_restraints([(True, True), (False, False), (False, True)])
        >>> dof.element_dof_map([0, 2])
        [0, 1, 4, 5]
        """
        result = []
        for j in joint_indices:
            result.extend(self.joint_dofs(j))
        return result

    def joint_of(self, full_index: int) -> Tuple[int, int]:
        """(joint_index, axis) for a full DOF index."""
        return divmod(int(full_index), DOF_PER_JOINT)
