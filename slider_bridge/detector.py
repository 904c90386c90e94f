from __future__ import annotations
import logging
from typing import List, Optional, Sequence

from .models import SliderMoveEvent
from .normalize import MAX_RAW_VALUE, UNOBSERVED, evaluate_reading

logger = logging.getLogger(__name__)


class ChangeDetector:
    """
    Turns reading vectors into slider move events.

    Keeps the last reported value per slider. Not thread safe: a single
    owner (the connection's poll thread) must drive it.
    """

    def __init__(self, verbose: bool = False) -> None:
        self.known_slider_count = 0
        self._current: List[Optional[float]] = []
        self._verbose = verbose

    def reset_slider_count(self) -> None:
        """Force the next vector to be treated as a slider count change."""
        self.known_slider_count = 0

    def values(self) -> List[Optional[float]]:
        return list(self._current)

    def process(
        self,
        vector: Sequence[int],
        invert: bool = False,
        noise_reduction_level: float = 0.025,
    ) -> List[SliderMoveEvent]:
        # the first reading sometimes comes out garbled (e.g. 4558 instead of 558)
        if vector and vector[0] > MAX_RAW_VALUE:
            logger.debug(f"Got malformed reading vector, ignoring: {list(vector)}")
            return []

        if len(vector) != self.known_slider_count:
            logger.info(f"Detected sliders: {len(vector)}")
            self.known_slider_count = len(vector)
            self._current = [UNOBSERVED] * len(vector)

        events: List[SliderMoveEvent] = []
        for idx, raw in enumerate(vector):
            changed, scalar = evaluate_reading(
                raw, self._current[idx], noise_reduction_level, invert
            )
            if not changed:
                continue

            self._current[idx] = scalar
            event = SliderMoveEvent(slider_id=idx, percent_value=scalar)
            events.append(event)
            if self._verbose:
                logger.debug(f"Slider moved: {event}")

        return events
