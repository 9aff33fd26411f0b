# loads.py - Load case generation for the moving truck

"""
One static load case per truck position. A position p is measured in panel
lengths from the leftmost deck joint and locates the FRONT axle; the rear
axle trails by one axle spacing. Each axle on the deck is split between the
two deck joints bracketing it by the lever rule, which preserves both the
total load and its line of action. Axles off the deck contribute nothing.

Every case also carries the factored dead load (deck slab, wearing surface
and member self-weight), identical for all positions. dead_load_case() is the
same load with no truck on the deck, used for the fade-in before the sweep.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

import numpy as np

from .conditions import DeckType
from .config import CONFIG, AnalysisConfig
from .kernel.assemble import add_nodal_load
from .snapshot import ModelSnapshot


@dataclass(frozen=True)
class LoadCase:
    """
    One discrete load configuration.

    Parameters:
    -----------
    index : int
        Position in the ordered sweep
    position : float
        Front axle location in panel lengths (0..panel_count)
    loads : Tuple[Tuple[int, float, float], ...]
        (joint_index, Fx, Fy) triples in kN, sorted by joint index
    """
    index: int
    position: float
    loads: Tuple[Tuple[int, float, float], ...]

    def load_vector(self, ndof: int) -> np.ndarray:
        F = np.zeros(ndof, dtype=float)
        for joint_index, fx, fy in self.loads:
            add_nodal_load(F, joint_index, (fx, fy))
        return F

    def total_load(self) -> Tuple[float, float]:
        fx = sum(l[1] for l in self.loads)
        fy = sum(l[2] for l in self.loads)
        return fx, fy


def load_positions(panel_count: int, interior_fractions: Sequence[float] = (0.25, 0.75)) -> List[float]:
    """
    Sorted truck positions: every panel point plus the interior fractions
    between consecutive panel points.

    >>> load_positions(2, (0.5,))
    [0.0, 0.5, 1.0, 1.5, 2.0]
    """
    fractions = sorted({float(f) for f in interior_fractions if 0.0 < f < 1.0})
    positions = []
    for i in range(panel_count):
        positions.append(float(i))
        positions.extend(i + f for f in fractions)
    positions.append(float(panel_count))
    return positions


def apportion_axle(x_panels: float, load: float, panel_count: int) -> List[Tuple[int, float]]:
    """
    Split a point load at x_panels between the bracketing deck joints.

    Returns (deck_joint_number, share) pairs; shares sum to `load` and their
    centroid sits at x_panels.

    >>> apportion_axle(1.25, 100.0, 4)
    [(1, 75.0), (2, 25.0)]
    >>> apportion_axle(-0.5, 100.0, 4)
    []
    """
    if x_panels < 0.0 or x_panels > panel_count:
        return []
    i = min(int(math.floor(x_panels)), panel_count)
    t = x_panels - i
    if t == 0.0 or i == panel_count:
        return [(i, load)]
    return [(i, (1.0 - t) * load), (i + 1, t * load)]


def dead_load_vector(snapshot: ModelSnapshot, config: AnalysisConfig = CONFIG) -> np.ndarray:
    """Factored dead load (kN) in the full DOF numbering; y components only."""
    F = np.zeros(snapshot.dof.ndof, dtype=float)

    if config.include_self_weight:
        for k, m in enumerate(snapshot.members):
            weight = (config.dead_load_factor * m.shape.A * snapshot.lengths[k]
                      * m.material.density * config.gravity / 1000.0)
            ia, ib = snapshot.member_ends[k]
            add_nodal_load(F, ia, (0.0, -weight / 2.0))
            add_nodal_load(F, ib, (0.0, -weight / 2.0))

    if config.include_deck_load:
        slab = config.medium_deck_load if snapshot.conditions.deck_type == DeckType.MEDIUM_STRENGTH \
            else config.high_deck_load
        point_load = config.dead_load_factor * slab + config.wear_surface_load
        last = len(snapshot.loaded_joints) - 1
        for k, joint_index in enumerate(snapshot.loaded_joints):
            load = point_load / 2.0 if k in (0, last) else point_load
            add_nodal_load(F, joint_index, (0.0, -load))

    return F


def truck_loads(snapshot: ModelSnapshot, position: float, config: AnalysisConfig = CONFIG) -> Dict[int, float]:
    """Factored downward axle loads (kN, positive) per joint index for one position."""
    conditions = snapshot.conditions
    front, rear = config.live_axle_loads(conditions.is_permit)
    spacing = conditions.axle_spacing / conditions.panel_length
    result: Dict[int, float] = {}
    for x, load in ((position, front), (position - spacing, rear)):
        for k, share in apportion_axle(x, config.live_load_factor * load, conditions.panel_count):
            joint_index = snapshot.loaded_joints[k]
            result[joint_index] = result.get(joint_index, 0.0) + share
    return result


def _vector_to_loads(F: np.ndarray) -> Tuple[Tuple[int, float, float], ...]:
    loads = []
    for j in range(F.shape[0] // 2):
        fx, fy = F[2 * j], F[2 * j + 1]
        if fx != 0.0 or fy != 0.0:
            loads.append((j, float(fx), float(fy)))
    return tuple(loads)


def dead_load_case(snapshot: ModelSnapshot, config: AnalysisConfig = CONFIG) -> LoadCase:
    """
    Dead load alone, with the truck still one axle spacing short of the deck.

    Index -1 keeps it apart from the truck sweep.
    """
    spacing = snapshot.conditions.axle_spacing / snapshot.conditions.panel_length
    return LoadCase(index=-1, position=-spacing, loads=_vector_to_loads(dead_load_vector(snapshot, config)))


def generate_load_cases(snapshot: ModelSnapshot, config: AnalysisConfig = CONFIG) -> Tuple[LoadCase, ...]:
    """
    Build the ordered sweep of load cases for a snapshot.

    One case per entry of load_positions(); each holds dead load plus the
    apportioned, factored truck axles.
    """
    dead = dead_load_vector(snapshot, config)
    cases = []
    for i, p in enumerate(load_positions(snapshot.conditions.panel_count, config.interior_fractions)):
        F = dead.copy()
        for joint_index, load in sorted(truck_loads(snapshot, p, config).items()):
            add_nodal_load(F, joint_index, (0.0, -load))
        cases.append(LoadCase(index=i, position=p, loads=_vector_to_loads(F)))
    return tuple(cases)
