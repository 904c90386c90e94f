from __future__ import annotations
import random
import time
from typing import Dict, List, Optional

from .config import ConfigStore
from .normalize import MAX_RAW_VALUE
from .sensors.interface import SliderSource


class SimulatedSliderSource(SliderSource):
    """
    Stands in for an ESPHome device when running in sim mode.

    Each slider does a slow random walk; most polls leave a slider where it
    was, and the occasional poll nudges it. Positions are kept per slider
    name, so renaming or reordering sliders in the config behaves like
    plugging a different fader into the same device.
    """

    def __init__(
        self,
        config_store: ConfigStore,
        interval_s: float = 0.05,
        move_chance: float = 0.1,
        max_step: int = 80,
        seed: Optional[int] = None,
    ) -> None:
        self._config_store = config_store
        self._interval_s = interval_s
        self._move_chance = move_chance
        self._max_step = max_step
        self._rng = random.Random(seed)
        self._positions: Dict[str, int] = {}

    def _position(self, name: str) -> int:
        if name not in self._positions:
            self._positions[name] = self._rng.randint(0, MAX_RAW_VALUE)
        return self._positions[name]

    def poll(self) -> List[int]:
        # no network latency to throttle us, so do it here
        if self._interval_s > 0:
            time.sleep(self._interval_s)

        results: List[int] = []
        for name in self._config_store.current.esphome_slider_names:
            value = self._position(name)
            if self._rng.random() < self._move_chance:
                value += self._rng.randint(-self._max_step, self._max_step)
                value = min(MAX_RAW_VALUE, max(0, value))
                self._positions[name] = value
            results.append(value)
        return results
