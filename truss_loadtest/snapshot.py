# truss_loadtest/snapshot.py
"""
MODEL SNAPSHOT: An Analysis-Ready, Immutable View of a TrussDesign
==================================================================

The editor owns a mutable TrussDesign. Analysis never works on it directly:
at the start of every run the design is copied into a ModelSnapshot, which

- validates the structure (ModelError on dangling references, zero-length
  or duplicate members, missing deck joints, size limits),
- numbers the joints 0..n-1 and the free DOFs (DOFManager),
- precomputes per-member constants: length, direction cosines, EA/L,
  slenderness.

Nothing in a snapshot changes after it is built, so one snapshot can be
shared by every load case and by every reader of the results.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

import numpy as np

from .conditions import DesignConditions
from .config import CONFIG, AnalysisConfig
from .elements import element_geometry
from .kernel.dof import DOFManager
from .model import Joint, Member, ModelError, TrussDesign

logger = logging.getLogger(__name__)

POSITION_TOLERANCE = 1e-6  # m


def _frozen(a: np.ndarray) -> np.ndarray:
    a.setflags(write=False)
    return a


@dataclass(frozen=True)
class ModelSnapshot:
    conditions: DesignConditions
    version: int
    joints: Tuple[Joint, ...]
    members: Tuple[Member, ...]
    index_of: Dict[int, int]          # joint id → joint index
    positions: np.ndarray             # (n_joints, 2)
    member_ends: np.ndarray           # (n_members, 2) joint indices (a, b)
    lengths: np.ndarray               # (n_members,)
    cos: np.ndarray                   # (n_members,)
    sin: np.ndarray                   # (n_members,)
    EA_L: np.ndarray                  # (n_members,) axial rigidity over length
    slenderness: np.ndarray           # (n_members,) L / r
    loaded_joints: Tuple[int, ...]    # deck joint indices, left to right
    dof: DOFManager
    degraded: Tuple[int, ...] = ()    # member ids with reduced stiffness

    @property
    def n_joints(self) -> int:
        return len(self.joints)

    @property
    def n_members(self) -> int:
        return len(self.members)

    @property
    def allowable_slenderness(self) -> float:
        return self.conditions.allowable_slenderness

    def member_index(self, member_id: int) -> int:
        for i, m in enumerate(self.members):
            if m.id == member_id:
                return i
        raise KeyError(member_id)

    def joint_ids_for_dofs(self, free_dofs: Iterable[int]) -> Tuple[int, ...]:
        """Distinct joint ids owning the given FREE DOF indices, sorted."""
        full = self.dof.free_dofs()
        ids = {self.joints[self.dof.joint_of(full[f])[0]].id for f in free_dofs}
        return tuple(sorted(ids))


def find_loaded_joints(conditions: DesignConditions, joints: Tuple[Joint, ...]) -> Tuple[int, ...]:
    """Indices of the joints sitting on the deck panel points, left to right."""
    loaded = []
    for k, (x, y) in enumerate(conditions.deck_joint_positions()):
        match = None
        for i, j in enumerate(joints):
            if abs(j.x - x) <= POSITION_TOLERANCE and abs(j.y - y) <= POSITION_TOLERANCE:
                match = i
                break
        if match is None:
            raise ModelError(f"Deck joint {k} at ({x:g}, {y:g}) is missing.")
        loaded.append(match)
    return tuple(loaded)


def build_snapshot(
    design: TrussDesign,
    config: AnalysisConfig = CONFIG,
    degraded: Optional[Iterable[int]] = None,
) -> ModelSnapshot:
    """
    Validate a design and freeze it into a ModelSnapshot.

    Args:
        design: Editable truss to copy
        config: Model limits and the degradation factor
        degraded: Member ids whose stiffness is scaled by
            config.failed_member_degradation (failure animation)

    Raises:
        ModelError: If the structure is malformed. Never repaired here.
    """
    joints = design.joints
    members = design.members
    degraded_ids = tuple(sorted(set(degraded or ())))

    if len(joints) > config.max_joints:
        raise ModelError(f"Too many joints: {len(joints)} > {config.max_joints}.")
    if len(members) > config.max_members:
        raise ModelError(f"Too many members: {len(members)} > {config.max_members}.")

    index_of: Dict[int, int] = {}
    for i, j in enumerate(joints):
        if j.id in index_of:
            raise ModelError(f"Duplicate joint id {j.id}.")
        index_of[j.id] = i

    positions = np.array([[j.x, j.y] for j in joints], dtype=float).reshape(len(joints), 2)

    n_members = len(members)
    member_ends = np.zeros((n_members, 2), dtype=int)
    lengths = np.zeros(n_members)
    cos = np.zeros(n_members)
    sin = np.zeros(n_members)
    EA_L = np.zeros(n_members)
    slenderness = np.zeros(n_members)

    seen_pairs = {}
    seen_ids = set()
    for k, m in enumerate(members):
        if m.id in seen_ids:
            raise ModelError(f"Duplicate member id {m.id}.")
        seen_ids.add(m.id)
        if m.a not in index_of or m.b not in index_of:
            missing = m.a if m.a not in index_of else m.b
            raise ModelError(f"Member {m.id} references missing joint {missing}.")
        if m.a == m.b:
            raise ModelError(f"Member {m.id} connects joint {m.a} to itself.")
        pair = m.joint_pair()
        if pair in seen_pairs:
            raise ModelError(
                f"Member {m.id} duplicates member {seen_pairs[pair]} (joints {pair[0]}-{pair[1]})."
            )
        seen_pairs[pair] = m.id

        ia, ib = index_of[m.a], index_of[m.b]
        try:
            L, c, s = element_geometry(positions[ia, 0], positions[ia, 1], positions[ib, 0], positions[ib, 1])
        except ValueError:
            raise ModelError(f"Member {m.id} has zero length.") from None

        E = m.material.E
        if m.id in degraded_ids:
            E *= config.failed_member_degradation

        member_ends[k] = (ia, ib)
        lengths[k] = L
        cos[k] = c
        sin[k] = s
        EA_L[k] = E * m.shape.A / L
        slenderness[k] = config.effective_length_factor * L / m.shape.r

    loaded = find_loaded_joints(design.conditions, joints)

    dof = DOFManager.from_restraints([(j.support.restrains_x, j.support.restrains_y) for j in joints])

    logger.debug(
        "Snapshot v%d: %d joints, %d members, %d free DOFs",
        design.version, len(joints), n_members, dof.n_free,
    )

    return ModelSnapshot(
        conditions=design.conditions,
        version=design.version,
        joints=joints,
        members=members,
        index_of=index_of,
        positions=_frozen(positions),
        member_ends=_frozen(member_ends),
        lengths=_frozen(lengths),
        cos=_frozen(cos),
        sin=_frozen(sin),
        EA_L=_frozen(EA_L),
        slenderness=_frozen(slenderness),
        loaded_joints=loaded,
        dof=dof,
        degraded=degraded_ids,
    )
