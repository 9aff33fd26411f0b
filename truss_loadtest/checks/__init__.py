# truss_loadtest/checks - Member design checks
"""Strength and slenderness checks for steel truss members."""

from .steel import (
    MemberStatus,
    MemberStrength,
    column_slenderness_parameter,
    compressive_strength,
    tensile_strength,
    force_ratios,
    signed_force_ratio,
    member_status,
    member_strengths,
)

__all__ = [
    'MemberStatus',
    'MemberStrength',
    'column_slenderness_parameter',
    'compressive_strength',
    'tensile_strength',
    'force_ratios',
    'signed_force_ratio',
    'member_status',
    'member_strengths',
]
