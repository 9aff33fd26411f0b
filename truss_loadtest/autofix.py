# truss_loadtest/autofix.py
"""
AUTOFIX: Greedy Bracing for Unstable Trusses
============================================

When the solver reports a mechanism it also reports which DOFs lost their
pivot. Each of those belongs to a joint that is kinematically
under-constrained. For every such joint, in ascending id order, we try
bracing members to the nearest joints it is not yet connected to, and keep
the first one that lowers the number of degenerate DOFs. Passes repeat until
the truss is stable or the pass limit is reached.

The heuristic restores solvability only. It does not look for the cheapest
or best-looking bracing, and it never removes a member.

Members are added to the live design through TrussDesign.add_member, so
an editor sees each one as an ordinary edit (undoable, change-notified).
Candidate members are tried on throwaway copies first.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .analysis import factorize_snapshot
from .catalog import Stock
from .config import CONFIG, AnalysisConfig
from .kernel.solve import MechanismError
from .model import Member, ModelError, TrussDesign
from .snapshot import build_snapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AutofixResult:
    success: bool
    members_added: int
    added_member_ids: Tuple[int, ...] = ()
    iterations: int = 0
    unstable_joints: Tuple[int, ...] = ()   # still degenerate when success is False


def degeneracy(design: TrussDesign, config: AnalysisConfig = CONFIG) -> Tuple[int, Tuple[int, ...]]:
    """
    (number of degenerate DOFs, joint ids owning them) for a design.

    Raises:
        ModelError: If the design is malformed
    """
    snapshot = build_snapshot(design, config)
    try:
        factorize_snapshot(snapshot, config)
    except MechanismError as e:
        return len(e.degenerate_dofs), snapshot.joint_ids_for_dofs(e.degenerate_dofs)
    return 0, ()


def _with_member(design: TrussDesign, a: int, b: int, stock: Stock) -> TrussDesign:
    next_id = max((m.id for m in design.members), default=-1) + 1
    extra = Member(next_id, a, b, stock.material, stock.shape)
    return TrussDesign(design.conditions, list(design.joints), list(design.members) + [extra])


def brace_candidates(design: TrussDesign, joint_id: int, limit: int) -> List[int]:
    """
    Joints a new member from joint_id could go to, nearest first.

    Excludes the joint itself and joints it is already connected to. Ties
    break on joint id so the order is deterministic.
    """
    origin = design.joint(joint_id)
    connected = set()
    for m in design.members:
        if m.a == joint_id:
            connected.add(m.b)
        elif m.b == joint_id:
            connected.add(m.a)
    others = [
        j for j in design.joints
        if j.id != joint_id and j.id not in connected
    ]
    others.sort(key=lambda j: ((j.x - origin.x) ** 2 + (j.y - origin.y) ** 2, j.id))
    return [j.id for j in others[:limit]]


def find_brace(
    design: TrussDesign,
    joint_id: int,
    n_degenerate: int,
    stock: Stock,
    config: AnalysisConfig = CONFIG,
) -> Optional[int]:
    """First candidate partner whose member lowers the degenerate DOF count."""
    for other in brace_candidates(design, joint_id, config.autofix_candidates_per_joint):
        trial = _with_member(design, joint_id, other, stock)
        try:
            count, _ = degeneracy(trial, config)
        except ModelError:
            continue
        if count < n_degenerate:
            return other
    return None


def autofix(design: TrussDesign, config: AnalysisConfig = CONFIG,
            stock: Optional[Stock] = None) -> AutofixResult:
    """
    Add bracing members until the design is stable.

    Args:
        design: Live design; modified only through add_member
        config: autofix_max_iterations bounds the number of passes
        stock: Material/shape for new members; defaults to the design's most
            common stock

    Returns:
        AutofixResult. On failure the members already added stay in the
        design and are counted, so the caller can keep or undo them.

    Raises:
        ModelError: If the design is malformed (autofix never repairs that)
    """
    stock = stock or design.most_common_stock()
    added: List[int] = []
    passes = 0

    n_bad, joints = degeneracy(design, config)
    if n_bad == 0:
        return AutofixResult(success=True, members_added=0)

    logger.info("Autofix: %d degenerate DOF(s) at joints %s", n_bad, list(joints))

    for _ in range(config.autofix_max_iterations):
        changed = False
        for joint_id in joints:
            if n_bad == 0:
                break
            other = find_brace(design, joint_id, n_bad, stock, config)
            if other is None:
                logger.debug("Autofix: no brace found for joint %d", joint_id)
                continue
            member = design.add_member(joint_id, other, stock)
            added.append(member.id)
            changed = True
            n_bad, _ = degeneracy(design, config)
            logger.info("Autofix: added member %d (%d-%d), %d degenerate DOF(s) left",
                        member.id, joint_id, other, n_bad)
        if changed:
            passes += 1
        n_bad, joints = degeneracy(design, config)
        if n_bad == 0 or not changed:
            break

    success = n_bad == 0
    if not success:
        logger.warning("Autofix gave up after %d pass(es), %d member(s) added, joints %s still unstable",
                       passes, len(added), list(joints))
    return AutofixResult(
        success=success,
        members_added=len(added),
        added_member_ids=tuple(added),
        iterations=passes,
        unstable_joints=() if success else joints,
    )
