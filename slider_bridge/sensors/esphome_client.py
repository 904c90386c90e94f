from __future__ import annotations
import logging
from typing import List, Optional

import requests

from ..config import ConfigStore, REQUEST_TIMEOUT_SECONDS
from ..models import SensorReading
from .interface import FetchError, SliderSource

logger = logging.getLogger(__name__)


def sensor_url(address: str, sensor_id: str) -> str:
    return f"http://{address}/sensor/{sensor_id}"


class ESPHomeSensorClient(SliderSource):
    """
    Reads slider positions from an ESPHome device's REST API.

    Each configured slider is a sensor entity; one cycle issues one
    `GET /sensor/<id>` per slider, in configured order. Device address and
    slider names are read from the config store on every cycle so reloads
    take effect immediately.
    """

    def __init__(
        self,
        config_store: ConfigStore,
        session: Optional[requests.Session] = None,
        timeout_s: float = REQUEST_TIMEOUT_SECONDS,
        verbose: bool = False,
    ) -> None:
        self._config_store = config_store
        self._session = session or requests.Session()
        self._timeout_s = timeout_s
        self._verbose = verbose
        self.last_good_vector: List[int] = []

    def fetch_reading(self, address: str, sensor_id: str) -> SensorReading:
        url = sensor_url(address, sensor_id)
        try:
            response = self._session.get(url, timeout=self._timeout_s)
            response.raise_for_status()
            return SensorReading.model_validate(response.json())
        except requests.exceptions.RequestException as e:
            raise FetchError(f"request to {url} failed: {e}") from e
        except ValueError as e:
            # JSON decode errors and pydantic validation errors
            raise FetchError(f"bad sensor data from {url}: {e}") from e

    def fetch_vector(self) -> List[int]:
        """
        Read all sliders once. The first failure aborts the whole cycle.
        """
        config = self._config_store.current
        results: List[int] = []
        for sensor_id in config.esphome_slider_names:
            reading = self.fetch_reading(config.esphome_ip_addr, sensor_id)
            results.append(reading.value)

        self.last_good_vector = results
        return results

    def poll(self) -> List[int]:
        try:
            results = self.fetch_vector()
        except FetchError as e:
            if self._verbose:
                logger.warning(f"ESPHome[{self._config_store.current.esphome_ip_addr}] failed to read sliders: {e}")
            return list(self.last_good_vector)

        if self._verbose:
            logger.debug(f"ESPHome[{self._config_store.current.esphome_ip_addr}] read new results: {results}")
        return list(results)
