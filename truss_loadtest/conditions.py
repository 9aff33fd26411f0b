# truss_loadtest/conditions.py
"""
Design conditions: span, panels, deck and the truck that crosses it.

Validated with pydantic because these values arrive from outside the core
(setup wizard, saved designs, API payloads).
"""

from enum import Enum
from typing import List, Tuple

from pydantic import BaseModel, Field


class LoadType(str, Enum):
    STANDARD_TRUCK = "standard"
    PERMIT_TRUCK = "permit"


class DeckType(str, Enum):
    MEDIUM_STRENGTH = "medium"
    HIGH_STRENGTH = "high"


class DesignConditions(BaseModel):
    """Site and loading conditions the truss is designed for."""

    model_config = {"frozen": True}

    panel_count: int = Field(5, ge=1, le=20, description="Number of deck panels")
    panel_length: float = Field(4.0, gt=0.0, description="Horizontal panel length (m)")
    load_type: LoadType = Field(LoadType.STANDARD_TRUCK, description="Truck crossing the deck")
    deck_type: DeckType = Field(DeckType.MEDIUM_STRENGTH, description="Concrete deck strength")
    deck_elevation: float = Field(0.0, description="y-coordinate of the deck joints (m)")
    x_left: float = Field(0.0, description="x-coordinate of the leftmost deck joint (m)")
    allowable_slenderness: float = Field(300.0, gt=0.0, description="Max member L/r")

    @property
    def span_length(self) -> float:
        return self.panel_count * self.panel_length

    @property
    def n_loaded_joints(self) -> int:
        return self.panel_count + 1

    @property
    def axle_spacing(self) -> float:
        """Distance between front and rear axle (m); one panel."""
        return self.panel_length

    @property
    def is_permit(self) -> bool:
        return self.load_type == LoadType.PERMIT_TRUCK

    def deck_joint_positions(self) -> List[Tuple[float, float]]:
        """World positions of the loaded (deck) joints, left to right."""
        return [
            (self.x_left + i * self.panel_length, self.deck_elevation)
            for i in range(self.n_loaded_joints)
        ]
