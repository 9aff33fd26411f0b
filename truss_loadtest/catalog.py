"""
CATALOG: MATERIAL AND SHAPE INVENTORY
=====================================

PURPOSE:
--------
Every member of a load-tested truss is cut from stock: a MATERIAL (which
steel) and a SHAPE (which cross-section kind and which size). This module is
the inventory those choices are drawn from, referenced by index the same way
the editor's stock selector references them.

ENGINEERING CONTEXT:
--------------------
- **Material**: E governs stiffness (axial rigidity EA/L), Fy governs strength,
  density feeds member self-weight.
- **Shape**: A governs stiffness and strength, I governs buckling, and the
  radius of gyration r = sqrt(I/A) turns member length into slenderness L/r.

Units follow the rest of the package: E and Fy in kPa (kN/m²), density in
kg/m³, widths in mm, area in m², moment of inertia in m⁴.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple

import numpy as np


class SectionKind(Enum):
    """Cross-section family."""
    BAR = 0    # solid square bar
    TUBE = 1   # hollow square tube


@dataclass(frozen=True)
class Material:
    """
    Steel grade properties.

    Parameters:
    -----------
    index : int
        Position in the inventory (stable, used by stock descriptors)
    name, short_name : str
        Display names ("Carbon Steel" / "CS")
    E : float
        Young's modulus (kPa)
    Fy : float
        Yield stress (kPa)
    density : float
        kg/m³, used for self-weight
    cost : Tuple[float, float]
        Cost per unit volume-weight for (bar, tube); carried for the
        external cost accounting, unused by the analysis
    """
    index: int
    name: str
    short_name: str
    E: float
    Fy: float
    density: float
    cost: Tuple[float, float] = (0.0, 0.0)


@dataclass(frozen=True)
class Shape:
    """
    One size of one cross-section kind.

    A, I and r are stored rather than recomputed because the analysis reads
    them once per member per run.
    """
    kind: SectionKind
    size_index: int
    name: str
    width: float      # mm
    thickness: float  # mm (equal to width for solid bars)
    A: float          # m²
    I: float          # m⁴

    @property
    def r(self) -> float:
        """Radius of gyration (m)."""
        return float(np.sqrt(self.I / self.A))


@dataclass(frozen=True)
class Stock:
    """Material and shape chosen together for a member."""
    material: Material
    shape: Shape


# ============================================================================
# MATERIALS
# ============================================================================

CARBON_STEEL = Material(0, "Carbon Steel", "CS", 200e6, 250000.0, 7850.0, (4.30, 6.30))
HSLA_STEEL = Material(1, "High-Strength Low-Alloy Steel", "HSS", 200e6, 345000.0, 7850.0, (5.60, 7.00))
QT_STEEL = Material(2, "Quenched & Tempered Steel", "QTS", 200e6, 485000.0, 7850.0, (6.00, 7.70))

MATERIALS: List[Material] = [CARBON_STEEL, HSLA_STEEL, QT_STEEL]


# ============================================================================
# SHAPES
# ============================================================================

# Nominal widths (mm) shared by both section kinds
WIDTHS = [
    30, 35, 40, 45, 50, 55, 60, 65, 70, 75, 80,
    90, 100, 110, 120, 130, 140, 150, 160, 170, 180, 190, 200,
    220, 240, 260, 280, 300,
    320, 340, 360, 400, 500,
]


def bar_shape(size_index: int) -> Shape:
    w = WIDTHS[size_index]
    area = w * w * 1e-6
    moment = w ** 4 / 12.0 * 1e-12
    return Shape(SectionKind.BAR, size_index, f"{w}x{w}", float(w), float(w), area, moment)


def tube_shape(size_index: int) -> Shape:
    w = WIDTHS[size_index]
    t = max(w // 20, 2)
    inner = w - 2 * t
    area = (w * w - inner * inner) * 1e-6
    moment = (w ** 4 - inner ** 4) / 12.0 * 1e-12
    return Shape(SectionKind.TUBE, size_index, f"{w}x{w}x{t}", float(w), float(t), area, moment)


SHAPES = {
    SectionKind.BAR: [bar_shape(i) for i in range(len(WIDTHS))],
    SectionKind.TUBE: [tube_shape(i) for i in range(len(WIDTHS))],
}

DEFAULT_STOCK = Stock(CARBON_STEEL, SHAPES[SectionKind.BAR][16])


def get_shape(kind: SectionKind, size_index: int) -> Shape:
    shapes = SHAPES[kind]
    if not 0 <= size_index < len(shapes):
        raise ValueError(f"size_index {size_index} out of range [0, {len(shapes) - 1}] for {kind.name}")
    return shapes[size_index]


def most_common_stock(stocks: Iterable[Stock], default: Optional[Stock] = None) -> Stock:
    """
    Return the stock used most often, ties broken by first appearance.

    Used to pick material and size for members the analysis adds on its own.
    """
    counts = {}
    order = []
    for stock in stocks:
        if stock not in counts:
            counts[stock] = 0
            order.append(stock)
        counts[stock] += 1
    if not order:
        return default if default is not None else DEFAULT_STOCK
    return max(order, key=lambda s: counts[s])
