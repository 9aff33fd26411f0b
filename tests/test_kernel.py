# tests/test_kernel.py
"""
KERNEL TESTS: Assembly, Factorization and Mechanism Detection
=============================================================

The kernel works on plain arrays, so these tests build tiny trusses by hand:
joint coordinates, a restraint list and bars between joint indices.
"""

import numpy as np
import pytest

from truss_loadtest.elements import element_geometry, truss2d_axial_force, truss2d_global_stiffness
from truss_loadtest.kernel.assemble import add_nodal_load, assemble_global_K
from truss_loadtest.kernel.dof import DOFManager
from truss_loadtest.kernel.solve import MechanismError, degenerate_dofs, factorize, solve_linear

EA = 200e6 * 0.0025  # kN


def build(coords, restraints, bars):
    """Full K and the DOF manager for bars between joint indices."""
    dof = DOFManager.from_restraints(restraints)
    contributions = []
    for a, b in bars:
        L, c, s = element_geometry(*coords[a], *coords[b])
        contributions.append((dof.element_dof_map([a, b]), truss2d_global_stiffness(EA / L, c, s)))
    return assemble_global_K(dof.ndof, contributions), dof


class TestStiffness:

    def test_element_matrix_symmetric_and_singular(self):
        ke = truss2d_global_stiffness(1000.0, 0.6, 0.8)
        np.testing.assert_allclose(ke, ke.T)
        # A bar resists stretching only: rigid translations produce no force
        np.testing.assert_allclose(ke @ np.array([1.0, 0.0, 1.0, 0.0]), 0.0, atol=1e-12)
        np.testing.assert_allclose(ke @ np.array([0.0, 1.0, 0.0, 1.0]), 0.0, atol=1e-12)

    def test_global_matrix_symmetric(self):
        coords = [(0.0, 0.0), (4.0, 0.0), (2.0, 1.5)]
        K, _ = build(coords, [(True, True), (False, True), (False, False)], [(0, 1), (0, 2), (1, 2)])
        np.testing.assert_allclose(K, K.T, rtol=1e-12, atol=0.0)

    def test_zero_length_rejected(self):
        with pytest.raises(ValueError):
            element_geometry(1.0, 1.0, 1.0, 1.0)

    def test_axial_force_sign(self):
        """Pulling joint b away from joint a along the bar is tension."""
        d = np.array([0.0, 0.0, 0.001, 0.0])
        assert truss2d_axial_force(1000.0, 1.0, 0.0, 0, 1, d) == pytest.approx(1.0)
        assert truss2d_axial_force(1000.0, 1.0, 0.0, 0, 1, -d) == pytest.approx(-1.0)


class TestInstability:
    """
    A bar hanging from a pin with its far joint free can swing: unstable.
    A second bar from another support triangulates it: stable.
    """

    COORDS = [(0.0, 0.0), (4.0, 0.0), (0.0, 3.0)]
    RESTRAINTS = [(True, True), (False, False), (True, True)]

    def test_chain_is_unstable(self):
        K, dof = build(self.COORDS, self.RESTRAINTS, [(0, 1)])
        free = dof.free_dofs()
        with pytest.raises(MechanismError) as info:
            factorize(K[np.ix_(free, free)])
        # The swinging direction is the free y translation of joint 1
        assert info.value.degenerate_dofs == [1]

    def test_brace_makes_it_stable(self):
        K, dof = build(self.COORDS, self.RESTRAINTS, [(0, 1), (2, 1)])
        F = np.zeros(dof.ndof)
        add_nodal_load(F, 1, (0.0, -10.0))
        d, R = solve_linear(K, F, dof.free_dofs())
        assert np.all(np.isfinite(d))
        np.testing.assert_allclose(R.reshape(-1, 2).sum(axis=0), [0.0, 10.0], atol=1e-9)

    def test_unsupported_structure_has_rigid_body_modes(self):
        coords = [(0.0, 0.0), (4.0, 0.0), (2.0, 1.5)]
        K, dof = build(coords, [(False, False)] * 3, [(0, 1), (0, 2), (1, 2)])
        assert len(degenerate_dofs(K, 1e-9)) == 3

    def test_roller_only_truss_slides(self):
        coords = [(0.0, 0.0), (4.0, 0.0), (2.0, 1.5)]
        K, dof = build(coords, [(False, True), (False, True), (False, False)], [(0, 1), (0, 2), (1, 2)])
        free = dof.free_dofs()
        with pytest.raises(MechanismError) as info:
            factorize(K[np.ix_(free, free)])
        assert len(info.value.degenerate_dofs) == 1

    def test_near_singular_is_unstable(self):
        """A vanishingly soft brace is treated as no brace at all."""
        Kff = np.array([[1.0, 1.0], [1.0, 1.0 + 1e-13]])
        with pytest.raises(MechanismError):
            factorize(Kff, pivot_tolerance=1e-9)


class TestDeterminism:

    def test_repeated_solves_are_bit_identical(self):
        coords = [(0.0, 0.0), (4.0, 0.0), (2.0, 1.5)]
        restraints = [(True, True), (False, True), (False, False)]
        bars = [(0, 1), (0, 2), (1, 2)]
        F = np.zeros(6)
        add_nodal_load(F, 2, (3.0, -7.0))
        runs = []
        for _ in range(3):
            K, dof = build(coords, restraints, bars)
            runs.append(solve_linear(K, F, dof.free_dofs()))
        for d, R in runs[1:]:
            assert np.array_equal(d, runs[0][0])
            assert np.array_equal(R, runs[0][1])

    def test_factorization_reused_for_many_loads(self):
        coords = [(0.0, 0.0), (4.0, 0.0), (2.0, 1.5)]
        K, dof = build(coords, [(True, True), (False, True), (False, False)], [(0, 1), (0, 2), (1, 2)])
        free = dof.free_dofs()
        fact = factorize(K[np.ix_(free, free)])
        Kff = K[np.ix_(free, free)]
        for Ff in (np.array([0.0, 0.0, -1.0]), np.array([2.0, 1.0, 0.0])):
            np.testing.assert_allclose(Kff @ fact.solve(Ff), Ff, rtol=1e-9, atol=1e-12)
