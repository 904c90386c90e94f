from __future__ import annotations
from typing import List, Optional, Tuple

from .broadcast import SliderMoveSink
from .config import MODE, SLIDERS_CONFIG_FILE, VERBOSE, ConfigStore
from .connection import AlreadyConnectedError, ESPHomeConnection
from .models import SliderMoveEvent, SliderValue
from .sensors.esphome_client import ESPHomeSensorClient
from .sensors.interface import SliderSource
from .simulator import SimulatedSliderSource


class SliderService:
    def __init__(
        self,
        config_store: Optional[ConfigStore] = None,
        source: Optional[SliderSource] = None,
        mode: str = MODE,
        verbose: bool = VERBOSE,
    ) -> None:
        self.mode = mode
        self.config_store = config_store or ConfigStore(SLIDERS_CONFIG_FILE)
        if source is None:
            if self.mode == "real":
                source = ESPHomeSensorClient(self.config_store, verbose=verbose)
            else:
                source = SimulatedSliderSource(self.config_store)
        self.connection = ESPHomeConnection(self.config_store, source, verbose=verbose)
        # our own subscriber, drained by the events endpoint
        self._events: SliderMoveSink = self.connection.subscribe_to_slider_move_events()

    # lifecycle
    def start(self) -> Tuple[bool, str]:
        try:
            self.connection.start()
        except AlreadyConnectedError as e:
            return False, str(e)
        self.config_store.start_watching()
        return True, "connection started"

    def stop(self) -> Tuple[bool, str]:
        if not self.connection.connected:
            return True, "not connected"
        self.connection.stop()
        return True, "connection stopped"

    def shutdown(self) -> None:
        self.config_store.stop_watching()
        self.connection.shutdown()

    def reload_config(self) -> bool:
        return self.config_store.reload()

    # read
    @property
    def connected(self) -> bool:
        return self.connection.connected

    def list_sliders(self) -> List[SliderValue]:
        names = self.config_store.current.esphome_slider_names
        values = self.connection.slider_values()
        count = max(len(names), len(values))
        return [
            SliderValue(
                slider_id=idx,
                name=names[idx] if idx < len(names) else None,
                percent_value=values[idx] if idx < len(values) else None,
            )
            for idx in range(count)
        ]

    def recent_events(self, limit: Optional[int] = None) -> List[SliderMoveEvent]:
        return self._events.drain(limit)
