# truss_loadtest/analysis.py
"""
ANALYSIS: The Load Test Pipeline
================================

    TrussDesign ──build_snapshot──► ModelSnapshot
                                         │
                     generate_load_cases │  assemble_stiffness
                                         ▼
                      LoadCase × N   K (full), K_ff factorized once
                                         │
                     per case: back-substitute → forces → ratios
                                         ▼
                                  AnalysisSummary

The stiffness matrix does not depend on the truck position, so it is
assembled and factorized once per run; each load case is only a
back-substitution. Instability is therefore all-or-nothing: if K_ff is
singular, every case is UNSTABLE.

Everything here is synchronous and side-effect free. A run may be cancelled
cooperatively between load cases.
"""

import logging
import threading
from typing import Callable, Optional, Tuple, Union

import numpy as np

from .checks.steel import MemberStatus, MemberStrength, force_ratios, member_status, member_strengths
from .config import CONFIG, AnalysisConfig
from .elements import truss2d_axial_force, truss2d_global_stiffness
from .kernel.assemble import assemble_global_K
from .kernel.solve import Factorization, MechanismError, back_substitute, factorize
from .loads import LoadCase, dead_load_case, generate_load_cases
from .model import TrussDesign
from .results import AnalysisResult, AnalysisStatus, AnalysisSummary, MemberRating, SummaryStatus
from .snapshot import ModelSnapshot, build_snapshot

logger = logging.getLogger(__name__)

CancelToken = Union[threading.Event, Callable[[], bool], None]
ProgressCallback = Optional[Callable[[int, int], None]]


class AnalysisCancelled(RuntimeError):
    """Raised at a load case boundary when the caller cancelled the run."""
    pass


def _is_cancelled(cancel: CancelToken) -> bool:
    if cancel is None:
        return False
    if isinstance(cancel, threading.Event):
        return cancel.is_set()
    return bool(cancel())


def assemble_stiffness(snapshot: ModelSnapshot) -> np.ndarray:
    """Full 2n × 2n stiffness matrix of a snapshot."""
    dof = snapshot.dof
    contributions = []
    for k in range(snapshot.n_members):
        ia, ib = snapshot.member_ends[k]
        ke = truss2d_global_stiffness(snapshot.EA_L[k], snapshot.cos[k], snapshot.sin[k])
        contributions.append((dof.element_dof_map([ia, ib]), ke))
    return assemble_global_K(dof.ndof, contributions)


def factorize_snapshot(
    snapshot: ModelSnapshot,
    config: AnalysisConfig = CONFIG,
) -> Tuple[np.ndarray, Factorization]:
    """
    Assemble and factorize.

    Raises:
        MechanismError: If the snapshot is unstable
    """
    K = assemble_stiffness(snapshot)
    free = snapshot.dof.free_dofs()
    fact = factorize(K[np.ix_(free, free)], config.pivot_tolerance)
    return K, fact


def unstable_joints(snapshot: ModelSnapshot, config: AnalysisConfig = CONFIG) -> Tuple[int, ...]:
    """Joint ids owning degenerate DOFs, ascending; empty when the truss is stable."""
    try:
        factorize_snapshot(snapshot, config)
    except MechanismError as e:
        return snapshot.joint_ids_for_dofs(e.degenerate_dofs)
    return ()


def evaluate_load_case(
    snapshot: ModelSnapshot,
    K: np.ndarray,
    fact: Factorization,
    load_case: LoadCase,
    strengths: Tuple[MemberStrength, ...],
) -> AnalysisResult:
    """
    Solve one load case and rate every member.

    A non-finite solution is reported as an UNSTABLE case in full rather
    than exposing partial numbers.
    """
    free = snapshot.dof.free_dofs()
    F = load_case.load_vector(snapshot.dof.ndof)
    d, R = back_substitute(K, F, free, fact)
    if not (np.all(np.isfinite(d)) and np.all(np.isfinite(R))):
        logger.warning("Non-finite solution at position %.3f; reporting unstable", load_case.position)
        return AnalysisResult.unstable(load_case)

    n = snapshot.n_members
    forces = np.zeros(n)
    c_ratios = np.zeros(n)
    t_ratios = np.zeros(n)
    statuses = []
    allowable = snapshot.allowable_slenderness
    for k in range(n):
        ia, ib = snapshot.member_ends[k]
        forces[k] = truss2d_axial_force(snapshot.EA_L[k], snapshot.cos[k], snapshot.sin[k], ia, ib, d)
        c_ratios[k], t_ratios[k] = force_ratios(forces[k], strengths[k].compressive, strengths[k].tensile)
        statuses.append(member_status(c_ratios[k], t_ratios[k], snapshot.slenderness[k], allowable))

    if MemberStatus.FAILS_SLENDERNESS in statuses:
        status = AnalysisStatus.FAILS_SLENDERNESS
    elif MemberStatus.FAILS_STRENGTH in statuses:
        status = AnalysisStatus.STABLE_BUT_FAILING
    else:
        status = AnalysisStatus.STABLE_AND_PASSING

    return AnalysisResult(
        load_case=load_case,
        status=status,
        displacements=d.reshape(-1, 2),
        reactions=R.reshape(-1, 2),
        applied=F.reshape(-1, 2),
        member_forces=forces,
        compression_ratios=c_ratios,
        tension_ratios=t_ratios,
        slenderness=np.array(snapshot.slenderness),
        member_statuses=tuple(statuses),
    )


def rate_members(
    snapshot: ModelSnapshot,
    results: Tuple[AnalysisResult, ...],
    strengths: Tuple[MemberStrength, ...],
) -> Tuple[MemberRating, ...]:
    """Governing (maximum over all cases) compression and tension per member."""
    forces = np.array([r.member_forces for r in results]).reshape(len(results), snapshot.n_members)
    ratings = []
    for k, m in enumerate(snapshot.members):
        column = forces[:, k]
        max_compression = float(max(0.0, -column.min())) if column.size else 0.0
        max_tension = float(max(0.0, column.max())) if column.size else 0.0
        c_ratio = max_compression / strengths[k].compressive
        t_ratio = max_tension / strengths[k].tensile
        slenderness = float(snapshot.slenderness[k])
        ratings.append(MemberRating(
            member_id=m.id,
            max_compression=max_compression,
            max_tension=max_tension,
            compressive_strength=strengths[k].compressive,
            tensile_strength=strengths[k].tensile,
            compression_ratio=c_ratio,
            tension_ratio=t_ratio,
            slenderness=slenderness,
            status=member_status(c_ratio, t_ratio, slenderness, snapshot.allowable_slenderness),
        ))
    return tuple(ratings)


def run_analysis(
    snapshot: ModelSnapshot,
    load_cases: Optional[Tuple[LoadCase, ...]] = None,
    config: AnalysisConfig = CONFIG,
    cancel: CancelToken = None,
    progress: ProgressCallback = None,
) -> AnalysisSummary:
    """
    Analyze a snapshot under an ordered sweep of load cases.

    Args:
        snapshot: Validated model
        load_cases: Cases to run; defaults to generate_load_cases(snapshot)
        config: Solver tolerance, strength factors
        cancel: threading.Event or callable, checked before each case
        progress: Called as progress(done, total) after each case

    Returns:
        AnalysisSummary; UNSTABLE is a status, not an exception. A stable
        summary also carries the dead load solved on its own.

    Raises:
        AnalysisCancelled: If cancel was signalled
    """
    if load_cases is None:
        load_cases = generate_load_cases(snapshot, config)
    load_cases = tuple(load_cases)

    try:
        K, fact = factorize_snapshot(snapshot, config)
    except MechanismError as e:
        joints = snapshot.joint_ids_for_dofs(e.degenerate_dofs)
        logger.info("Truss v%d is unstable at joint(s) %s", snapshot.version, list(joints))
        return AnalysisSummary(
            status=SummaryStatus.UNSTABLE,
            version=snapshot.version,
            snapshot=snapshot,
            results=tuple(AnalysisResult.unstable(lc) for lc in load_cases),
            unstable_joints=joints,
        )

    strengths = member_strengths(snapshot, config)
    results = []
    total = len(load_cases)
    for done, load_case in enumerate(load_cases, start=1):
        if _is_cancelled(cancel):
            raise AnalysisCancelled(f"Analysis cancelled after {done - 1} of {total} load cases.")
        result = evaluate_load_case(snapshot, K, fact, load_case, strengths)
        if not result.is_stable:
            # One non-finite case poisons the whole sweep
            return AnalysisSummary(
                status=SummaryStatus.UNSTABLE,
                version=snapshot.version,
                snapshot=snapshot,
                results=tuple(AnalysisResult.unstable(lc) for lc in load_cases),
            )
        results.append(result)
        if progress is not None:
            progress(done, total)

    dead_result = evaluate_load_case(snapshot, K, fact, dead_load_case(snapshot, config), strengths)
    if not dead_result.is_stable:
        return AnalysisSummary(
            status=SummaryStatus.UNSTABLE,
            version=snapshot.version,
            snapshot=snapshot,
            results=tuple(AnalysisResult.unstable(lc) for lc in load_cases),
        )

    results = tuple(results)
    ratings = rate_members(snapshot, results, strengths)
    statuses = {r.status for r in ratings}
    if MemberStatus.FAILS_SLENDERNESS in statuses:
        status = SummaryStatus.FAILS_SLENDERNESS
    elif MemberStatus.FAILS_STRENGTH in statuses:
        status = SummaryStatus.FAILING
    else:
        status = SummaryStatus.PASSING

    logger.info(
        "Truss v%d analyzed: %d load cases, %d members, status %s",
        snapshot.version, total, snapshot.n_members, status.value,
    )
    return AnalysisSummary(
        status=status,
        version=snapshot.version,
        snapshot=snapshot,
        results=results,
        ratings=ratings,
        dead_load_result=dead_result,
    )


def analyze_design(
    design: TrussDesign,
    config: AnalysisConfig = CONFIG,
    cancel: CancelToken = None,
    progress: ProgressCallback = None,
    degraded=None,
) -> AnalysisSummary:
    """
    Snapshot a design and run the full load test.

    Raises:
        ModelError: If the design is malformed
        AnalysisCancelled: If cancel was signalled
    """
    snapshot = build_snapshot(design, config, degraded=degraded)
    return run_analysis(snapshot, config=config, cancel=cancel, progress=progress)
