# truss_loadtest - Planar truss load testing
"""
TRUSS-LOADTEST: Moving-Load Analysis for Planar Steel Trusses
=============================================================

This package provides:
- Linear stiffness analysis of pin-jointed planar trusses
- A moving truck load test over the deck panel points
- Member strength and slenderness ratings with a pass/fail verdict
- A bounded bracing heuristic for unstable designs
- Continuous interpolation of the solved states for animation

ARCHITECTURE:
-------------
    kernel/         DOF numbering, assembly, factorization
    catalog.py      Materials and cross-section inventory
    conditions.py   Design conditions (span, panels, truck, deck)
    model.py        Editable TrussDesign, Joint, Member, Support
    snapshot.py     Immutable, validated analysis view of a design
    elements.py     Planar truss bar stiffness and force recovery
    loads.py        Dead load and moving-truck load cases
    checks/         Member strength, slenderness, status
    analysis.py     The load test pipeline
    results.py      AnalysisResult / AnalysisSummary
    autofix.py      Bracing heuristic for mechanisms
    fixup.py        Splitting members that pass through joints
    interpolate.py  Frame states between solved load cases
    engine.py       AnalysisEngine facade
"""

from .analysis import AnalysisCancelled, analyze_design, run_analysis
from .autofix import AutofixResult, autofix
from .catalog import DEFAULT_STOCK, MATERIALS, SHAPES, SectionKind, Stock, get_shape
from .conditions import DeckType, DesignConditions, LoadType
from .config import CONFIG, AnalysisConfig
from .engine import AnalysisEngine
from .fixup import fixup_transected_members
from .interpolate import FrameState, InterpolationError, Interpolator, LoadPose, blend_frames
from .kernel import DOFManager, MechanismError
from .model import Joint, Member, ModelError, Support, TrussDesign
from .results import AnalysisResult, AnalysisStatus, AnalysisSummary, MemberRating, SummaryStatus
from .snapshot import ModelSnapshot, build_snapshot

__version__ = "0.1.0"
