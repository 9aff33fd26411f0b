# truss_loadtest/config.py
"""
Analysis configuration and defaults.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class AnalysisConfig:
    """Tunable constants for the load test pipeline."""

    # Load factors (steel code)
    dead_load_factor: float = 1.35
    live_load_factor: float = 1.75 * 1.33
    gravity: float = 9.8066  # m/s^2

    # Deck dead load per loaded joint (kN, before factoring the slab part)
    medium_deck_load: float = 120.265
    high_deck_load: float = 82.608
    wear_surface_load: float = 33.097

    # Trucks (kN)
    standard_front_axle: float = 44.0
    standard_rear_axle: float = 181.0
    permit_front_axle: float = 124.0
    permit_rear_axle: float = 124.0

    # Switches for pure live-load studies
    include_self_weight: bool = True
    include_deck_load: bool = True

    # Resistance factors
    compression_resistance_factor: float = 0.90
    tension_resistance_factor: float = 0.95
    effective_length_factor: float = 1.0

    # Model limits
    max_joints: int = 100
    max_members: int = 200

    # Solver
    pivot_tolerance: float = 1e-9

    # Load positions sampled between consecutive panel points
    interior_fractions: Tuple[float, ...] = (0.25, 0.75)

    # Autofix
    autofix_max_iterations: int = 4
    autofix_candidates_per_joint: int = 8

    # Failure animation
    failed_member_degradation: float = 1.0 / 50.0

    # Rendering geometry
    wear_surface_height: float = 0.80  # m

    def live_axle_loads(self, permit: bool) -> Tuple[float, float]:
        """Unfactored (front, rear) axle loads for the chosen truck."""
        if permit:
            return self.permit_front_axle, self.permit_rear_axle
        return self.standard_front_axle, self.standard_rear_axle


# Global config instance
CONFIG = AnalysisConfig()
