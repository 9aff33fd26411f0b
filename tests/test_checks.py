# tests/test_checks.py
"""
MEMBER CHECK TESTS: Strength Curves, Ratios and Status
======================================================
"""

import numpy as np
import pytest

from truss_loadtest.analysis import analyze_design
from truss_loadtest.catalog import CARBON_STEEL, HSLA_STEEL, SHAPES, SectionKind
from truss_loadtest.checks import (
    MemberStatus,
    column_slenderness_parameter,
    compressive_strength,
    force_ratios,
    member_status,
    signed_force_ratio,
    tensile_strength,
)
from truss_loadtest.results import SummaryStatus

from truss_builders import SLENDER, STRONG, UNIT_CONFIG, pratt_truss, triangle

BAR_160 = SHAPES[SectionKind.BAR][16]


class TestStrength:

    def test_tensile_is_phi_fy_a(self):
        assert tensile_strength(CARBON_STEEL, BAR_160) == pytest.approx(0.95 * 250000.0 * 0.0256)

    def test_short_column_inelastic_curve(self):
        L = 2.0
        lam = column_slenderness_parameter(CARBON_STEEL, BAR_160, L)
        assert lam < 2.25
        expected = 0.90 * 0.66 ** lam * 250000.0 * BAR_160.A
        assert compressive_strength(CARBON_STEEL, BAR_160, L) == pytest.approx(expected)

    def test_long_column_elastic_curve(self):
        L = 12.0
        lam = column_slenderness_parameter(CARBON_STEEL, BAR_160, L)
        assert lam > 2.25
        expected = 0.90 * 0.88 * 250000.0 * BAR_160.A / lam
        assert compressive_strength(CARBON_STEEL, BAR_160, L) == pytest.approx(expected)

    def test_curve_continuous_at_transition(self):
        # λ = 2.25 exactly: 0.66^2.25 ≈ 0.3925 and 0.88/2.25 ≈ 0.3911
        L = np.sqrt(2.25 * np.pi ** 2 * CARBON_STEEL.E * BAR_160.I / (CARBON_STEEL.Fy * BAR_160.A))
        below = compressive_strength(CARBON_STEEL, BAR_160, L * (1 - 1e-9))
        above = compressive_strength(CARBON_STEEL, BAR_160, L * (1 + 1e-9))
        assert below == pytest.approx(above, rel=0.01)

    def test_stronger_steel_is_stronger(self):
        assert tensile_strength(HSLA_STEEL, BAR_160) > tensile_strength(CARBON_STEEL, BAR_160)


class TestRatios:

    def test_tension_only(self):
        assert force_ratios(50.0, 200.0, 100.0) == (0.0, 0.5)

    def test_compression_only(self):
        assert force_ratios(-50.0, 200.0, 100.0) == (0.25, 0.0)

    def test_signed_ratio(self):
        assert signed_force_ratio(100.0, 200.0, 100.0) == 1.0
        assert signed_force_ratio(-200.0, 200.0, 100.0) == -1.0
        assert signed_force_ratio(0.0, 200.0, 100.0) == 0.0


class TestStatus:

    def test_ok(self):
        assert member_status(0.99, 0.0, 100.0, 300.0) == MemberStatus.OK

    def test_strength(self):
        assert member_status(0.0, 1.01, 100.0, 300.0) == MemberStatus.FAILS_STRENGTH

    def test_slenderness_wins_over_strength(self):
        assert member_status(5.0, 0.0, 301.0, 300.0) == MemberStatus.FAILS_SLENDERNESS

    def test_slenderness_fails_zero_force(self):
        assert member_status(0.0, 0.0, 301.0, 300.0) == MemberStatus.FAILS_SLENDERNESS


class TestSlendernessGate:
    """An over-slender member fails even when it carries nothing."""

    def test_zero_force_member_fails_slenderness(self):
        design = pratt_truss(4)
        # Unloaded joint with two non-collinear members: both carry nothing
        joint = design.add_joint(6.0, 6.0)
        design.add_member(5, joint.id, SLENDER)
        design.add_member(6, joint.id, SLENDER)
        idle = [design.member_between(5, joint.id).id, design.member_between(6, joint.id).id]

        summary = analyze_design(design, UNIT_CONFIG)
        assert summary.status == SummaryStatus.FAILS_SLENDERNESS
        for member_id in idle:
            assert summary.rating(member_id).status == MemberStatus.FAILS_SLENDERNESS
            k = summary.snapshot.member_index(member_id)
            for result in summary.results:
                assert abs(result.member_forces[k]) < 1e-6
                assert result.member_statuses[k] == MemberStatus.FAILS_SLENDERNESS

    def test_strong_truss_passes(self):
        summary = analyze_design(pratt_truss(4, stock=STRONG))
        assert summary.status == SummaryStatus.PASSING
        assert summary.passed
        assert summary.failing_members() == ()

    def test_only_long_member_fails_slenderness(self):
        design = triangle(stock=SLENDER)
        summary = analyze_design(design)
        # 30 mm bar, r = 8.66 mm: the 2.5 m diagonals sit at L/r ≈ 289, the 4 m chord at ≈ 462
        statuses = {r.member_id: r.status for r in summary.ratings}
        assert statuses[2] == MemberStatus.FAILS_SLENDERNESS
        assert statuses[0] != MemberStatus.FAILS_SLENDERNESS
        assert statuses[1] != MemberStatus.FAILS_SLENDERNESS
