# tests/test_determinate.py
"""
DETERMINATE TRUSS TESTS: Stiffness Method vs. Statics
=====================================================

For a statically determinate truss the member forces follow from
equilibrium alone, whatever the member stiffnesses. So we can check the
stiffness pipeline against an independent calculation:

    method of joints, written as one linear system
    ──────────────────────────────────────────────
    At every joint, Σ member forces + reactions + applied loads = 0.
    Unknowns: one axial force per member plus one reaction per restrained
    DOF. With M + R = 2J the equilibrium matrix is square.

No stiffness, no displacements: if both methods agree, assembly, solve and
force recovery are all right.
"""

import numpy as np
import pytest

from truss_loadtest.analysis import run_analysis
from truss_loadtest.loads import LoadCase
from truss_loadtest.model import Support
from truss_loadtest.results import AnalysisStatus
from truss_loadtest.snapshot import build_snapshot

from truss_builders import STRONG, UNIT_CONFIG, WEAK, pratt_truss, triangle


def method_of_joints(snapshot, F):
    """(member forces, full reaction vector) from equilibrium only."""
    n_dof = snapshot.dof.ndof
    fixed = snapshot.dof.fixed_dofs()
    A = np.zeros((n_dof, snapshot.n_members + len(fixed)))
    for k in range(snapshot.n_members):
        ia, ib = snapshot.member_ends[k]
        c, s = snapshot.cos[k], snapshot.sin[k]
        # Tension pulls joint a towards b and b towards a
        A[2 * ia:2 * ia + 2, k] = (c, s)
        A[2 * ib:2 * ib + 2, k] = (-c, -s)
    for r, dof in enumerate(fixed):
        A[dof, snapshot.n_members + r] = 1.0
    x = np.linalg.solve(A, -F)
    R = np.zeros(n_dof)
    R[fixed] = x[snapshot.n_members:]
    return x[:snapshot.n_members], R


class TestConcreteScenario:
    """
    Symmetric two-panel truss, unit load at midspan:

              2  (2.0, 1.5)
             ╱ ╲
            ╱   ╲        sin θ = 0.6, cos θ = 0.8
           0     1
          pin   roller/pin
    """

    LOAD = LoadCase(index=0, position=0.0, loads=((2, 0.0, -1.0),))

    def _solve(self, design):
        summary = run_analysis(build_snapshot(design, UNIT_CONFIG), [self.LOAD], UNIT_CONFIG)
        result = summary.results[0]
        assert result.status != AnalysisStatus.UNSTABLE
        return summary, result

    def test_two_bars_between_pins(self):
        """3 joints, 2 supports, 2 members."""
        design = triangle(right_support=Support.PIN, with_chord=False)
        summary, result = self._solve(design)

        reactions = result.support_reactions(summary.snapshot)
        assert reactions[0] == pytest.approx((2.0 / 3.0, 0.5), abs=1e-9)
        assert reactions[1] == pytest.approx((-2.0 / 3.0, 0.5), abs=1e-9)
        np.testing.assert_allclose(result.member_forces, [-0.5 / 0.6, -0.5 / 0.6], atol=1e-9)

    def test_triangle_on_pin_and_roller(self):
        design = triangle()
        summary, result = self._solve(design)

        reactions = result.support_reactions(summary.snapshot)
        assert reactions[0] == pytest.approx((0.0, 0.5), abs=1e-9)
        assert reactions[1] == pytest.approx((0.0, 0.5), abs=1e-9)
        # Diagonals in compression, tie in tension
        np.testing.assert_allclose(
            result.member_forces,
            [-0.5 / 0.6, -0.5 / 0.6, 0.5 * 0.8 / 0.6],
            atol=1e-9,
        )

    def test_pin_and_roller_without_tie_is_unstable(self):
        design = triangle(with_chord=False)
        summary = run_analysis(build_snapshot(design, UNIT_CONFIG), [self.LOAD], UNIT_CONFIG)
        assert summary.results[0].status == AnalysisStatus.UNSTABLE
        assert summary.results[0].member_forces is None
        assert set(summary.unstable_joints) <= {1, 2}
        assert summary.unstable_joints


class TestPrattCrossCheck:
    """Every truck position on a Pratt truss, stiffness vs. statics."""

    @pytest.mark.parametrize("panel_count", [2, 4, 6])
    def test_forces_match_method_of_joints(self, panel_count):
        snapshot = build_snapshot(pratt_truss(panel_count, stock=WEAK))
        summary = run_analysis(snapshot)
        assert summary.is_stable
        for result in summary.results:
            F = result.load_case.load_vector(snapshot.dof.ndof)
            forces, R = method_of_joints(snapshot, F)
            scale = np.max(np.abs(forces))
            np.testing.assert_allclose(result.member_forces, forces, rtol=1e-6, atol=1e-6 * scale)
            np.testing.assert_allclose(result.reactions.ravel(), R, rtol=1e-6, atol=1e-6 * scale)

    def test_independent_of_member_stiffness(self):
        """Member sizes do not change the forces of a determinate truss (self-weight off)."""
        weak = build_snapshot(pratt_truss(4, stock=WEAK), UNIT_CONFIG)
        strong = build_snapshot(pratt_truss(4, stock=STRONG), UNIT_CONFIG)
        a = run_analysis(weak, config=UNIT_CONFIG)
        b = run_analysis(strong, config=UNIT_CONFIG)
        for ra, rb in zip(a.results, b.results):
            np.testing.assert_allclose(ra.member_forces, rb.member_forces, rtol=1e-9, atol=1e-9)
