# truss_loadtest/fixup.py
"""
Split members that pass straight through another joint.

A member drawn across an existing joint is not connected to it, which the
stiffness method would happily analyze as two bars crossing without
touching. The editor runs this before analysis: each such member is replaced
by consecutive members joint to joint, cut from the same stock.
"""

import logging
import math
from typing import List, Tuple

from .model import Joint, Member, TrussDesign

logger = logging.getLogger(__name__)

ON_SEGMENT_TOLERANCE = 1e-6  # m


def transected_joints(design: TrussDesign, member: Member, tol: float = ON_SEGMENT_TOLERANCE) -> List[Joint]:
    """Joints lying strictly inside the member, ordered from joint a to joint b."""
    a = design.joint(member.a)
    b = design.joint(member.b)
    dx, dy = b.x - a.x, b.y - a.y
    length = math.hypot(dx, dy)
    if length == 0.0:
        return []
    hits: List[Tuple[float, Joint]] = []
    for j in design.joints:
        if j.id in (member.a, member.b):
            continue
        along = ((j.x - a.x) * dx + (j.y - a.y) * dy) / length
        across = abs((j.x - a.x) * dy - (j.y - a.y) * dx) / length
        if across <= tol and tol < along < length - tol:
            hits.append((along, j))
    hits.sort(key=lambda h: h[0])
    return [j for _, j in hits]


def fixup_transected_members(design: TrussDesign) -> int:
    """
    Replace every transected member by its joint-to-joint pieces.

    Pieces that duplicate an existing member are skipped. Edits go through
    remove_member/add_member, so they are ordinary, undoable edits.

    Returns:
        Number of members that were split
    """
    plans = []
    for member in design.members:
        through = transected_joints(design, member)
        if through:
            plans.append((member, [member.a] + [j.id for j in through] + [member.b]))

    if not plans:
        return 0

    for member, chain in plans:
        design.remove_member(member.id)
        for a, b in zip(chain, chain[1:]):
            if design.member_between(a, b) is None:
                design.add_member(a, b, member.stock)

    logger.info("Split %d transected member(s): %s", len(plans), [m.id for m, _ in plans])
    return len(plans)
