# truss_loadtest/interpolate.py
"""
INTERPOLATE: Continuous Truss State Between Solved Load Cases
=============================================================

PURPOSE:
--------
The load test solves the truss at a handful of truck positions. An animation
needs the state at EVERY frame, i.e. at any continuous position p. Because a
truss is linear, axial forces and displacements vary piecewise-linearly
with the load position between panel points, so blending the two
bracketing solutions is accurate, not just cosmetic.

    positions:   0.0   0.25   0.75   1.0   1.25 ...
                  │      │  p   │      │
                  └──────┴──●───┴──────┘
                        i      i+1         t = (p - p_i) / (p_{i+1} - p_i)

WHAT A FRAME CONTAINS:
----------------------
- joint displacements (optionally exaggerated for display)
- axial force and SIGNED force ratio per member (-1 = full compression
  capacity, +1 = full tension capacity)
- per-member status. A member is shown failing at p when its blended ratio
  exceeds 1 in magnitude OR it already failed at the left bracket, so a
  failure that peaks strictly between two samples is never stepped over.
- the truck pose: front axle on the displaced deck (plus wearing surface),
  rear axle found on the deflected deck or approach road one axle spacing
  behind, and the orientation recomputed from those two contact points.
  Orientation is never interpolated as an angle.

At a sampled position t is 0 and the frame carries that load case's arrays
exactly. Before the first sample the truck is still on the approach and the
frame is the separately solved dead-load state. Past the last sample the
last case is held.

THREADING:
----------
An Interpolator only reads arrays it stacked at construction and holds its
own reference to the summary it was built from. A new analysis replaces the
interpolator instead of mutating it, so a render loop can keep querying the
old one until it swaps.
"""

import bisect
import logging
import math
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

import numpy as np

from .checks.steel import MemberStatus
from .config import CONFIG, AnalysisConfig
from .results import AnalysisSummary

logger = logging.getLogger(__name__)

RoadElevation = Callable[[float], float]
Point = Tuple[float, float]

ORIENTATION_EPS = 1e-6
_STATUS_RANK = {MemberStatus.OK: 0, MemberStatus.FAILS_STRENGTH: 1, MemberStatus.FAILS_SLENDERNESS: 2}


class InterpolationError(ValueError):
    """The summary has nothing to interpolate (unstable or empty)."""
    pass


@dataclass(frozen=True)
class LoadPose:
    """Truck contact points in world coordinates and its unit direction rear → front."""
    front: Point
    rear: Point
    orientation: Point = (1.0, 0.0)

    @property
    def angle(self) -> float:
        """Rotation from horizontal, radians."""
        return math.atan2(self.orientation[1], self.orientation[0])


@dataclass(frozen=True)
class FrameState:
    """
    Structural and load state at one continuous position.

    Attributes:
    -----------
    position : float
        Query position in panel lengths
    bracket : (int, int)
        Indices of the bracketing results (equal at and beyond the ends,
        (0, 0) for dead-load frames)
    t : float
        Blend factor in [0, 1]
    joint_displacements : (n_joints, 2) array, exaggerated
    member_forces : (n_members,) array, kN, + tension
    force_ratios : (n_members,) signed ratios
    member_statuses : per-member MemberStatus
    load_pose : LoadPose
    """
    position: float
    bracket: Tuple[int, int]
    t: float
    joint_displacements: np.ndarray
    member_forces: np.ndarray
    force_ratios: np.ndarray
    member_statuses: Tuple[MemberStatus, ...]
    load_pose: LoadPose

    @property
    def failing(self) -> np.ndarray:
        return np.array([s != MemberStatus.OK for s in self.member_statuses], dtype=bool)

    @property
    def n_failures(self) -> int:
        return int(self.failing.sum())

    @property
    def is_failure(self) -> bool:
        return self.n_failures > 0


def _readonly(a: np.ndarray) -> np.ndarray:
    a.setflags(write=False)
    return a


def _unit(dx: float, dy: float) -> Point:
    length = math.hypot(dx, dy)
    if length <= ORIENTATION_EPS:
        return (1.0, 0.0)
    return (dx / length, dy / length)


def find_rear_contact(front: Point, path: Sequence[Point], distance: float) -> Optional[Point]:
    """
    First point of a polyline at exactly `distance` from front.

    The path runs away from the front axle (right to left). Each segment is
    skipped while its far end is still inside the circle; the first one that
    leaves it is intersected with the circle exactly.
    """
    fx, fy = front
    for (x0, y0), (x1, y1) in zip(path, path[1:]):
        if math.hypot(x1 - fx, y1 - fy) < distance:
            continue
        dx, dy = x1 - x0, y1 - y0
        wx, wy = x0 - fx, y0 - fy
        a = dx * dx + dy * dy
        if a == 0.0:
            continue
        b = 2.0 * (dx * wx + dy * wy)
        c = wx * wx + wy * wy - distance * distance
        disc = b * b - 4.0 * a * c
        if disc < 0.0:
            continue
        t = (-b + math.sqrt(disc)) / (2.0 * a)
        t = min(max(t, 0.0), 1.0)
        return (x0 + t * dx, y0 + t * dy)
    return None


def blend_frames(base: FrameState, target: FrameState, s: float) -> FrameState:
    """
    Blend two frames, s = 0 giving base and s = 1 giving target.

    Used to animate a collapse: base is the last intact frame, target the
    same position analyzed with the failed members degraded. In between, each
    member shows the worse of its two statuses.
    """
    s = min(max(float(s), 0.0), 1.0)
    if s == 0.0:
        return base
    if s == 1.0:
        return target
    r = 1.0 - s
    statuses = tuple(
        a if _STATUS_RANK[a] >= _STATUS_RANK[b] else b
        for a, b in zip(base.member_statuses, target.member_statuses)
    )
    bp, tp = base.load_pose, target.load_pose
    front = (r * bp.front[0] + s * tp.front[0], r * bp.front[1] + s * tp.front[1])
    rear = (r * bp.rear[0] + s * tp.rear[0], r * bp.rear[1] + s * tp.rear[1])
    return FrameState(
        position=r * base.position + s * target.position,
        bracket=target.bracket,
        t=target.t,
        joint_displacements=_readonly(r * base.joint_displacements + s * target.joint_displacements),
        member_forces=_readonly(r * base.member_forces + s * target.member_forces),
        force_ratios=_readonly(r * base.force_ratios + s * target.force_ratios),
        member_statuses=statuses,
        load_pose=LoadPose(front, rear, _unit(front[0] - rear[0], front[1] - rear[1])),
    )


class Interpolator:
    """
    Answers "what does the truss look like with the truck at p?".

    Built once per AnalysisSummary; every query is a pure function of p.

    Parameters:
    -----------
    summary : AnalysisSummary
        A stable summary (PASSING, FAILING or FAILS_SLENDERNESS)
    config : AnalysisConfig
        Wearing surface height
    road_elevation : callable, optional
        x → road surface y on the approaches. Defaults to a flat road at
        deck elevation plus the wearing surface.
    exaggeration : float
        Scale applied to displacements for display

    Raises:
    -------
    InterpolationError
        If the summary is unstable, has no results or lacks the dead-load state
    """

    def __init__(
        self,
        summary: AnalysisSummary,
        config: AnalysisConfig = CONFIG,
        road_elevation: Optional[RoadElevation] = None,
        exaggeration: float = 1.0,
    ):
        if not summary.is_stable:
            raise InterpolationError("Cannot interpolate an unstable analysis.")
        if not summary.results:
            raise InterpolationError("Analysis has no load cases.")
        if summary.dead_load_result is None:
            raise InterpolationError("Analysis has no dead-load state.")

        self.summary = summary
        self.config = config
        self.exaggeration = float(exaggeration)
        conditions = summary.snapshot.conditions
        if road_elevation is None:
            road_y = conditions.deck_elevation + config.wear_surface_height
            road_elevation = lambda x: road_y
        self.road_elevation = road_elevation

        snapshot = summary.snapshot
        results = summary.results
        n_members = snapshot.n_members
        self._positions = [r.position for r in results]
        self._displacements = _readonly(np.stack([r.displacements for r in results]))
        self._forces = _readonly(np.array([r.member_forces for r in results], dtype=float).reshape(len(results), n_members))
        self._left_fails = _readonly(np.array(
            [[s == MemberStatus.FAILS_STRENGTH for s in r.member_statuses] for r in results],
            dtype=bool,
        ).reshape(len(results), n_members))
        self._compressive = _readonly(np.array([r.compressive_strength for r in summary.ratings], dtype=float))
        self._tensile = _readonly(np.array([r.tensile_strength for r in summary.ratings], dtype=float))
        self._too_slender = _readonly(snapshot.slenderness > snapshot.allowable_slenderness)
        dead = summary.dead_load_result
        self._dead_displacements = _readonly(np.array(dead.displacements, dtype=float))
        self._dead_forces = _readonly(np.array(dead.member_forces, dtype=float).reshape(n_members))
        self._dead_position = dead.position

        self._deck = _readonly(snapshot.positions[list(snapshot.loaded_joints)].copy())
        self._deck_indices = list(snapshot.loaded_joints)
        self._panel_length = conditions.panel_length
        self._axle_spacing = conditions.axle_spacing

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def positions(self) -> Tuple[float, ...]:
        return tuple(self._positions)

    def bracket(self, position: float) -> Tuple[int, int, float]:
        """
        (i, j, t) with positions[i] <= p <= positions[j].

        Outside the sampled range the nearest end is used with t = 0.
        """
        last = len(self._positions) - 1
        if position <= self._positions[0]:
            return 0, 0, 0.0
        if position >= self._positions[last]:
            return last, last, 0.0
        i = bisect.bisect_right(self._positions, position) - 1
        p0, p1 = self._positions[i], self._positions[i + 1]
        if position == p0:
            return i, i, 0.0
        t = (position - p0) / (p1 - p0)
        return i, i + 1, min(max(t, 0.0), 1.0)

    def signed_ratios(self, forces: np.ndarray) -> np.ndarray:
        return np.where(forces > 0.0, forces / self._tensile, forces / self._compressive)

    def _statuses(self, ratios: np.ndarray, left_fails: np.ndarray) -> Tuple[MemberStatus, ...]:
        statuses = []
        for k in range(ratios.shape[0]):
            if self._too_slender[k]:
                statuses.append(MemberStatus.FAILS_SLENDERNESS)
            elif left_fails[k] or abs(ratios[k]) > 1.0:
                statuses.append(MemberStatus.FAILS_STRENGTH)
            else:
                statuses.append(MemberStatus.OK)
        return tuple(statuses)

    def interpolate(self, position: float) -> FrameState:
        """
        State with the front axle at `position` (panel lengths).

        Before the first sample the truck has not reached the deck, so the
        frame is the dead-load state.
        """
        position = float(position)
        if position < self._positions[0]:
            return self.dead_load_state(1.0, position)
        i, j, t = self.bracket(position)
        if t == 0.0:
            disp = self._displacements[i] * self.exaggeration
            forces = self._forces[i].copy()
        else:
            disp = ((1.0 - t) * self._displacements[i] + t * self._displacements[j]) * self.exaggeration
            forces = (1.0 - t) * self._forces[i] + t * self._forces[j]
        ratios = self.signed_ratios(forces)
        return FrameState(
            position=position,
            bracket=(i, j),
            t=t,
            joint_displacements=_readonly(disp),
            member_forces=_readonly(forces),
            force_ratios=_readonly(ratios),
            member_statuses=self._statuses(ratios, self._left_fails[i]),
            load_pose=self.load_pose(position, disp),
        )

    __call__ = interpolate

    def dead_load_state(self, fraction: float, position: float) -> FrameState:
        """
        Fade-in frame: a fraction of the dead load, truck waiting at `position`.

        Scales the dead-load-only solution, which carries no truck load even
        when the deck end joints are not supports. A truck drawn at or past
        the deck start is pulled back to where the dead-load case puts it.
        """
        fraction = min(max(float(fraction), 0.0), 1.0)
        position = float(position)
        disp = self._dead_displacements * (fraction * self.exaggeration)
        forces = self._dead_forces * fraction
        ratios = self.signed_ratios(forces)
        no_prior_failures = np.zeros(forces.shape[0], dtype=bool)
        return FrameState(
            position=position,
            bracket=(0, 0),
            t=0.0,
            joint_displacements=_readonly(disp),
            member_forces=_readonly(forces),
            force_ratios=_readonly(ratios),
            member_statuses=self._statuses(ratios, no_prior_failures),
            load_pose=self.load_pose(position if position < 0.0 else self._dead_position, disp),
        )

    # ------------------------------------------------------------------
    # Truck pose
    # ------------------------------------------------------------------

    def _deck_surface(self, displacements: np.ndarray) -> np.ndarray:
        """Displaced deck joints, left to right, raised to the wearing surface."""
        deck = self._deck + displacements[self._deck_indices]
        deck[:, 1] += self.config.wear_surface_height
        return deck

    def _road_point(self, x: float) -> Point:
        return (x, float(self.road_elevation(x)))

    def load_pose(self, position: float, displacements: np.ndarray) -> LoadPose:
        """
        Front axle at `position`; rear axle one axle spacing behind it along
        the deflected deck, continuing onto the left approach.
        """
        deck = self._deck_surface(displacements)
        n_panels = deck.shape[0] - 1
        L = self._panel_length

        if position < 0.0:
            front = self._road_point(float(deck[0, 0]) + position * L)
            behind = []
        elif position > n_panels:
            front = self._road_point(float(deck[n_panels, 0]) + (position - n_panels) * L)
            behind = [tuple(p) for p in deck[::-1]]
        else:
            k = min(int(math.floor(position)), n_panels - 1)
            s = position - k
            p = (1.0 - s) * deck[k] + s * deck[k + 1]
            front = (float(p[0]), float(p[1]))
            behind = [tuple(p) for p in deck[k::-1] if p[0] < front[0]]

        far_x = min(front[0], float(deck[0, 0])) - 2.0 * self._axle_spacing
        path = [front] + [(float(x), float(y)) for x, y in behind] + [self._road_point(far_x)]
        rear = find_rear_contact(front, path, self._axle_spacing)
        if rear is None:
            logger.debug("No rear contact found at position %.3f; keeping the truck level", position)
            return LoadPose(front, (front[0] - self._axle_spacing, front[1]))
        return LoadPose(front, rear, _unit(front[0] - rear[0], front[1] - rear[1]))
