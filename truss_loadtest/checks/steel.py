# truss_loadtest/checks/steel.py
"""Member strength, slenderness and status for steel truss bars."""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

import numpy as np

from ..catalog import Material, Shape
from ..config import CONFIG, AnalysisConfig

PI_SQUARED = np.pi ** 2


class MemberStatus(Enum):
    OK = "ok"
    FAILS_STRENGTH = "fails_strength"
    FAILS_SLENDERNESS = "fails_slenderness"


def column_slenderness_parameter(material: Material, shape: Shape, length: float) -> float:
    """
    λ = L² Fy A / (π² E I), the squared ratio of slenderness to the
    slenderness at which Euler stress reaches yield.
    """
    return length * length * material.Fy * shape.A / (PI_SQUARED * material.E * shape.I)


def compressive_strength(
    material: Material,
    shape: Shape,
    length: float,
    config: AnalysisConfig = CONFIG,
) -> float:
    """
    Factored compressive strength (kN) from the column buckling curve.

        λ <= 2.25:  φc · 0.66^λ · Fy · A      (inelastic buckling)
        λ >  2.25:  φc · 0.88 · Fy · A / λ    (elastic buckling)

    Slenderness failures are gated separately; this is the strength only.
    """
    kl = config.effective_length_factor * length
    lam = column_slenderness_parameter(material, shape, kl)
    phi = config.compression_resistance_factor
    if lam <= 2.25:
        return phi * (0.66 ** lam) * material.Fy * shape.A
    return phi * 0.88 * material.Fy * shape.A / lam


def tensile_strength(material: Material, shape: Shape, config: AnalysisConfig = CONFIG) -> float:
    """Factored tensile strength (kN): yielding of the gross section, φt · Fy · A."""
    return config.tension_resistance_factor * material.Fy * shape.A


def force_ratios(force: float, compressive: float, tensile: float) -> Tuple[float, float]:
    """
    (compression_ratio, tension_ratio) for one axial force.

    Only one of the two is nonzero: a bar is either in tension or in
    compression for a given load case.
    """
    if force < 0.0:
        return -force / compressive, 0.0
    return 0.0, force / tensile


def signed_force_ratio(force: float, compressive: float, tensile: float) -> float:
    """-1 at full compression capacity, +1 at full tension capacity."""
    return force / tensile if force > 0.0 else force / compressive


def member_status(
    compression_ratio: float,
    tension_ratio: float,
    slenderness: float,
    allowable_slenderness: float,
) -> MemberStatus:
    """
    Slenderness is checked first and wins: an over-slender bar fails even
    with zero force.
    """
    if slenderness > allowable_slenderness:
        return MemberStatus.FAILS_SLENDERNESS
    if compression_ratio > 1.0 or tension_ratio > 1.0:
        return MemberStatus.FAILS_STRENGTH
    return MemberStatus.OK


@dataclass(frozen=True)
class MemberStrength:
    compressive: float
    tensile: float


def member_strengths(snapshot, config: AnalysisConfig = CONFIG) -> Tuple[MemberStrength, ...]:
    """Compressive/tensile strength for every member of a snapshot."""
    return tuple(
        MemberStrength(
            compressive=compressive_strength(m.material, m.shape, float(snapshot.lengths[k]), config),
            tensile=tensile_strength(m.material, m.shape, config),
        )
        for k, m in enumerate(snapshot.members)
    )
