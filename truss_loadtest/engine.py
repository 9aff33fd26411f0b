# truss_loadtest/engine.py
"""
ENGINE: The Facade an Editor or Renderer Talks To
=================================================

    engine = AnalysisEngine(design)
    summary = engine.analyze()          # immutable, tagged with design.version
    frame = engine.interpolate(2.4)     # per animation frame

    design.add_member(...)              # structure change
    engine.is_current(summary)          # → False; analyze() again

The engine subscribes to the design's structure-change notifications. A
change does not touch any summary or interpolator already handed out; the
engine just forgets its cached references, so readers holding the old ones
keep a consistent (if stale) view.
"""

import logging
from typing import Iterable, Optional

from .analysis import CancelToken, ProgressCallback, analyze_design
from .autofix import AutofixResult, autofix
from .config import CONFIG, AnalysisConfig
from .interpolate import FrameState, InterpolationError, Interpolator, RoadElevation
from .model import TrussDesign
from .results import AnalysisSummary, SummaryStatus

logger = logging.getLogger(__name__)


class AnalysisEngine:
    """
    Runs load tests on one TrussDesign and caches the latest result.

    Parameters:
    -----------
    design : TrussDesign
        Editable design; read through snapshots, modified only by autofix
    config : AnalysisConfig
    auto_repair : bool
        If True, an UNSTABLE analysis triggers autofix and one re-run
    road_elevation : callable, optional
        Approach road surface for the truck pose (see Interpolator)
    exaggeration : float
        Displacement scale for interpolated frames
    """

    def __init__(
        self,
        design: TrussDesign,
        config: AnalysisConfig = CONFIG,
        auto_repair: bool = False,
        road_elevation: Optional[RoadElevation] = None,
        exaggeration: float = 1.0,
    ):
        self.design = design
        self.config = config
        self.auto_repair = auto_repair
        self.road_elevation = road_elevation
        self.exaggeration = exaggeration
        self.last_autofix: Optional[AutofixResult] = None
        self._summary: Optional[AnalysisSummary] = None
        self._interpolator: Optional[Interpolator] = None
        design.add_listener(self._structure_changed)

    def _structure_changed(self, design: TrussDesign) -> None:
        # Drop references only; handed-out objects stay valid
        self._summary = None
        self._interpolator = None

    def close(self) -> None:
        """Stop listening to the design."""
        self.design.remove_listener(self._structure_changed)

    @property
    def summary(self) -> Optional[AnalysisSummary]:
        """Latest summary if it still matches the design, else None."""
        return self._summary if self.is_current(self._summary) else None

    def is_current(self, summary: Optional[AnalysisSummary]) -> bool:
        return summary is not None and summary.version == self.design.version

    def analyze(self, cancel: CancelToken = None, progress: ProgressCallback = None) -> AnalysisSummary:
        """
        Run the load test on the current design.

        Raises:
            ModelError: If the design is malformed
            AnalysisCancelled: If cancel was signalled
        """
        summary = analyze_design(self.design, self.config, cancel=cancel, progress=progress)
        if summary.status == SummaryStatus.UNSTABLE and self.auto_repair:
            result = self.autofix()
            if result.members_added:
                summary = analyze_design(self.design, self.config, cancel=cancel, progress=progress)

        if self.is_current(summary):
            self._summary = summary
            self._interpolator = None
        else:
            logger.info("Design changed during analysis (v%d → v%d); result not cached",
                        summary.version, self.design.version)
        return summary

    def analyze_degraded(self, failed_member_ids: Iterable[int]) -> AnalysisSummary:
        """
        Re-analyze with the given members softened, for collapse animation.

        The result is returned but never cached.
        """
        return analyze_design(self.design, self.config, degraded=failed_member_ids)

    def autofix(self) -> AutofixResult:
        """Brace an unstable design in place; see autofix.autofix."""
        result = autofix(self.design, self.config)
        self.last_autofix = result
        return result

    def interpolator(self) -> Interpolator:
        """
        Interpolator for the current summary, built on first use.

        Raises:
            InterpolationError: If there is no current, stable summary
        """
        interp = self._interpolator
        if interp is not None and self.is_current(interp.summary):
            return interp
        summary = self.summary
        if summary is None:
            raise InterpolationError("No current analysis; call analyze() first.")
        interp = Interpolator(summary, self.config, self.road_elevation, self.exaggeration)
        self._interpolator = interp
        return interp

    def interpolate(self, position: float) -> FrameState:
        return self.interpolator().interpolate(position)
