# tests/test_loads.py
"""
LOAD CASE TESTS: Moving Truck and Dead Load
===========================================

The lever rule must preserve both the total axle load and its line of
action; dead load must be identical in every case.
"""

import numpy as np
import pytest

from truss_loadtest.conditions import LoadType
from truss_loadtest.config import CONFIG
from truss_loadtest.loads import (
    apportion_axle,
    dead_load_vector,
    generate_load_cases,
    load_positions,
    truck_loads,
)
from truss_loadtest.snapshot import build_snapshot

from truss_builders import STRONG, pratt_truss


class TestApportion:

    def test_at_panel_point(self):
        assert apportion_axle(2.0, 100.0, 4) == [(2, 100.0)]

    def test_between_panel_points_keeps_line_of_action(self):
        shares = apportion_axle(2.3, 100.0, 4)
        total = sum(s for _, s in shares)
        centroid = sum(k * s for k, s in shares) / total
        assert total == pytest.approx(100.0)
        assert centroid == pytest.approx(2.3)

    def test_last_panel_point(self):
        assert apportion_axle(4.0, 50.0, 4) == [(4, 50.0)]

    @pytest.mark.parametrize("x", [-0.01, -1.0, 4.5])
    def test_off_deck(self, x):
        assert apportion_axle(x, 50.0, 4) == []


class TestPositions:

    def test_default_quarter_points(self):
        assert load_positions(2) == [0.0, 0.25, 0.75, 1.0, 1.25, 1.75, 2.0]

    def test_sorted_and_unique(self):
        positions = load_positions(5, (0.75, 0.25, 0.25))
        assert positions == sorted(positions)
        assert len(positions) == len(set(positions)) == 5 * 3 + 1

    def test_panel_points_only(self):
        assert load_positions(3, ()) == [0.0, 1.0, 2.0, 3.0]


class TestTruck:

    def test_both_axles_on_deck(self):
        snap = build_snapshot(pratt_truss(4))
        loads = truck_loads(snap, 2.0)
        factor = CONFIG.live_load_factor
        assert loads == pytest.approx({2: 44.0 * factor, 1: 181.0 * factor})

    def test_rear_axle_off_deck(self):
        snap = build_snapshot(pratt_truss(4))
        loads = truck_loads(snap, 0.5)
        assert sum(loads.values()) == pytest.approx(44.0 * CONFIG.live_load_factor)

    def test_permit_truck(self):
        snap = build_snapshot(pratt_truss(4, load_type=LoadType.PERMIT_TRUCK))
        loads = truck_loads(snap, 3.0)
        assert sum(loads.values()) == pytest.approx(2 * 124.0 * CONFIG.live_load_factor)


class TestDeadLoad:

    def test_deck_and_self_weight_total(self):
        design = pratt_truss(4)
        snap = build_snapshot(design)
        F = dead_load_vector(snap)
        assert np.all(F[0::2] == 0.0)

        deck_point = CONFIG.dead_load_factor * CONFIG.medium_deck_load + CONFIG.wear_surface_load
        self_weight = sum(
            CONFIG.dead_load_factor * STRONG.shape.A * snap.lengths[k] * STRONG.material.density
            * CONFIG.gravity / 1000.0
            for k in range(snap.n_members)
        )
        assert -F.sum() == pytest.approx(4 * deck_point + self_weight)

    def test_end_deck_joints_take_half(self):
        from dataclasses import replace
        snap = build_snapshot(pratt_truss(4))
        F = dead_load_vector(snap, replace(CONFIG, include_self_weight=False))
        fy = F[1::2]
        assert fy[0] == pytest.approx(fy[2] / 2.0)
        assert fy[4] == pytest.approx(fy[2] / 2.0)
        assert np.all(fy[5:] == 0.0)  # top chord carries no deck load


class TestLoadCases:

    def test_one_case_per_position(self):
        snap = build_snapshot(pratt_truss(4))
        cases = generate_load_cases(snap)
        assert [c.position for c in cases] == load_positions(4)
        assert [c.index for c in cases] == list(range(len(cases)))

    def test_live_load_total_per_case(self):
        snap = build_snapshot(pratt_truss(4))
        dead = dead_load_vector(snap).sum()
        factor = CONFIG.live_load_factor
        for case in generate_load_cases(snap):
            front = 44.0 if 0.0 <= case.position <= 4.0 else 0.0
            rear = 181.0 if 0.0 <= case.position - 1.0 <= 4.0 else 0.0
            fx, fy = case.total_load()
            assert fx == 0.0
            assert fy == pytest.approx(dead - factor * (front + rear))
