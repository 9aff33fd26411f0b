# truss_loadtest/results.py
"""
Analysis result containers.

AnalysisResult is one solved load case; AnalysisSummary is the whole sweep
plus per-member governing ratings. Both are immutable values: callers hold
on to the summary they were given and compare its `version` with the
design's to know whether it is still current.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

import numpy as np
import pandas as pd

from .checks.steel import MemberStatus
from .loads import LoadCase
from .snapshot import ModelSnapshot


class AnalysisStatus(Enum):
    """Outcome of a single load case."""
    STABLE_AND_PASSING = "stable_and_passing"
    STABLE_BUT_FAILING = "stable_but_failing"
    UNSTABLE = "unstable"
    FAILS_SLENDERNESS = "fails_slenderness"


class SummaryStatus(Enum):
    """Outcome of the whole load test."""
    PASSING = "passing"
    FAILING = "failing"
    UNSTABLE = "unstable"
    FAILS_SLENDERNESS = "fails_slenderness"


@dataclass(frozen=True)
class AnalysisResult:
    """
    Solved state for one load case.

    Arrays are None only for UNSTABLE cases; a stable case always carries
    every array, fully populated.

    Attributes:
    -----------
    displacements : (n_joints, 2) joint displacements (m)
    reactions : (n_joints, 2) support reactions (kN), zero at free DOFs
    applied : (n_joints, 2) applied joint loads (kN)
    member_forces : (n_members,) axial force (kN), + tension
    compression_ratios, tension_ratios : (n_members,) force / strength
    slenderness : (n_members,) L / r
    member_statuses : per-member status for this case
    """
    load_case: LoadCase
    status: AnalysisStatus
    displacements: Optional[np.ndarray] = None
    reactions: Optional[np.ndarray] = None
    applied: Optional[np.ndarray] = None
    member_forces: Optional[np.ndarray] = None
    compression_ratios: Optional[np.ndarray] = None
    tension_ratios: Optional[np.ndarray] = None
    slenderness: Optional[np.ndarray] = None
    member_statuses: Tuple[MemberStatus, ...] = ()

    @property
    def position(self) -> float:
        return self.load_case.position

    @property
    def is_stable(self) -> bool:
        return self.status != AnalysisStatus.UNSTABLE

    @classmethod
    def unstable(cls, load_case: LoadCase) -> "AnalysisResult":
        return cls(load_case=load_case, status=AnalysisStatus.UNSTABLE)

    def support_reactions(self, snapshot: ModelSnapshot) -> Dict[int, Tuple[float, float]]:
        """Reactions keyed by joint id, for supported joints only."""
        if self.reactions is None:
            return {}
        return {
            j.id: (float(self.reactions[i, 0]), float(self.reactions[i, 1]))
            for i, j in enumerate(snapshot.joints)
            if j.is_support
        }

    def equilibrium_residual(self) -> np.ndarray:
        """ΣF_applied + ΣR as (x, y); zero for a correct solution."""
        if self.applied is None or self.reactions is None:
            raise ValueError("No equilibrium for an unstable load case.")
        return self.applied.sum(axis=0) + self.reactions.sum(axis=0)


@dataclass(frozen=True)
class MemberRating:
    """Governing values for one member over the whole sweep."""
    member_id: int
    max_compression: float   # kN, magnitude
    max_tension: float       # kN
    compressive_strength: float
    tensile_strength: float
    compression_ratio: float
    tension_ratio: float
    slenderness: float
    status: MemberStatus

    @property
    def governing_ratio(self) -> float:
        return max(self.compression_ratio, self.tension_ratio)


@dataclass(frozen=True)
class AnalysisSummary:
    status: SummaryStatus
    version: int
    snapshot: ModelSnapshot
    results: Tuple[AnalysisResult, ...]
    ratings: Tuple[MemberRating, ...] = ()
    unstable_joints: Tuple[int, ...] = ()
    dead_load_result: Optional[AnalysisResult] = None  # no truck on the deck

    @property
    def passed(self) -> bool:
        return self.status == SummaryStatus.PASSING

    @property
    def is_stable(self) -> bool:
        return self.status != SummaryStatus.UNSTABLE

    @property
    def positions(self) -> Tuple[float, ...]:
        return tuple(r.position for r in self.results)

    def rating(self, member_id: int) -> MemberRating:
        for r in self.ratings:
            if r.member_id == member_id:
                return r
        raise KeyError(member_id)

    def failing_members(self) -> Tuple[int, ...]:
        return tuple(r.member_id for r in self.ratings if r.status != MemberStatus.OK)

    def to_frame(self, decimals: Optional[int] = None) -> pd.DataFrame:
        """
        Per-member table of the governing ratings.

        Pass decimals=2 to get the precision used when ratios are saved with
        a design; such rounded ratios are for display only and must not be
        used to decide pass/fail.
        """
        rows = []
        for m, r in zip(self.snapshot.members, self.ratings):
            rows.append({
                'member': m.id,
                'joint_a': m.a,
                'joint_b': m.b,
                'material': m.material.short_name,
                'shape': m.shape.name,
                'length': float(self.snapshot.lengths[self.snapshot.member_index(m.id)]),
                'slenderness': r.slenderness,
                'max_compression': r.max_compression,
                'compressive_strength': r.compressive_strength,
                'compression_ratio': r.compression_ratio,
                'max_tension': r.max_tension,
                'tensile_strength': r.tensile_strength,
                'tension_ratio': r.tension_ratio,
                'governing_ratio': r.governing_ratio,
                'status': r.status.value,
            })
        df = pd.DataFrame(rows)
        if decimals is not None and not df.empty:
            df = df.round(decimals)
        return df
