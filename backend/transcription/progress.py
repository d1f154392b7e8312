"""
Progress Channel

Per-call progress reporting. Maps adapter-reported phases into the
router's window, keeps progress non-decreasing and guarantees a single
terminal event per call.
"""

import logging
from typing import Callable, List, Optional

from .models import ProgressEvent, ProgressPhase

logger = logging.getLogger(__name__)

ProgressSink = Callable[[ProgressEvent], None]

PREPARING_PROGRESS = 5.0
ADAPTER_WINDOW_START = 10.0
ADAPTER_WINDOW_END = 95.0
COMPLETED_PROGRESS = 100.0


class ProgressReporter:
    """
    Delivers ProgressEvents for one transcription call.

    Every event goes to each registered sink. A sink that raises is logged
    and otherwise ignored; it never changes the outcome of the call.
    """

    def __init__(self, sinks: Optional[List[ProgressSink]] = None):
        self._sinks = [sink for sink in (sinks or []) if sink is not None]
        self._progress = 0.0
        self._finished = False

    @property
    def progress(self) -> float:
        return self._progress

    @property
    def finished(self) -> bool:
        return self._finished

    def preparing(self, message: str = "Preparing audio...") -> None:
        self._emit(ProgressPhase.PREPARING, PREPARING_PROGRESS, message)

    def adapter_phase(self, phase: ProgressPhase, progress: float, message: str) -> None:
        """
        Forward a phase reported by an adapter on its own 0-100 scale.

        Terminal phases belong to the router and are dropped here.
        """
        if phase.is_terminal:
            logger.debug(f"Ignoring terminal phase from adapter: {phase.value}")
            return

        fraction = min(max(float(progress), 0.0), 100.0) / 100.0
        mapped = ADAPTER_WINDOW_START + fraction * (ADAPTER_WINDOW_END - ADAPTER_WINDOW_START)
        self._emit(phase, mapped, message)

    def completed(self, message: str = "Transcription complete") -> None:
        self._emit(ProgressPhase.COMPLETED, COMPLETED_PROGRESS, message)

    def error(self, message: str) -> None:
        self._emit(ProgressPhase.ERROR, self._progress, message)

    def _emit(self, phase: ProgressPhase, progress: float, message: str) -> None:
        if self._finished:
            logger.debug(f"Dropping {phase.value} event after terminal event")
            return

        self._progress = max(self._progress, progress)
        if phase.is_terminal:
            self._finished = True

        event = ProgressEvent(phase=phase, progress=self._progress, message=message)
        for sink in self._sinks:
            try:
                sink(event)
            except Exception as e:
                logger.warning(f"Progress sink raised on {phase.value}: {e}")
