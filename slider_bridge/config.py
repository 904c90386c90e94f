from __future__ import annotations
import json
import logging
import os
import queue
import threading
from typing import List, Optional

from pydantic import ValidationError

from .models import SliderConfig

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# Service mode: "sim" for the built in simulator or "real" for an ESPHome device
MODE = os.getenv("SLIDERS_MODE", "sim").lower()

# Log every read cycle and every move when set
VERBOSE = _env_flag("SLIDERS_VERBOSE")

# Start polling as soon as the web app starts
AUTOSTART = _env_flag("SLIDERS_AUTOSTART")

# Path to slider config file; relative paths resolve against the project root
_ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DATA_DIR = os.getenv("SLIDERS_DATA_DIR", "data")
SLIDERS_CONFIG_FILE = os.getenv(
    "SLIDERS_CONFIG_FILE",
    os.path.join(_ROOT_DIR, DATA_DIR, "sliders_config.json"),
)

REQUEST_TIMEOUT_SECONDS = float(os.getenv("SLIDERS_REQUEST_TIMEOUT_SECONDS", "5"))
SUBSCRIBER_BUFFER = int(os.getenv("SLIDERS_SUBSCRIBER_BUFFER", "64"))
CONFIG_POLL_SECONDS = float(os.getenv("SLIDERS_CONFIG_POLL_SECONDS", "1.0"))

# Delay between a config reload and the slider reset it triggers, so consumers
# rebuilding on the same reload are ready before the full snapshot arrives
RELOAD_RESET_DELAY_SECONDS = 0.05


def load_slider_config(path: str) -> SliderConfig:
    """
    Read and validate the slider config file.

    A missing file yields an empty config. Unreadable or invalid content
    raises ValueError.
    """
    if not os.path.exists(path):
        logger.warning(f"No slider config found at {path}")
        return SliderConfig()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ValueError(f"Cannot read slider config {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Slider config {path} must be a JSON object")

    try:
        return SliderConfig.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid slider config {path}: {e}") from e


class ConfigStore:
    """
    Holds the current slider config and tells subscribers when it changes.

    The config object is immutable; reloads swap the reference, so readers
    always see a consistent snapshot without locking.
    """

    def __init__(self, path: Optional[str] = None, config: Optional[SliderConfig] = None) -> None:
        self.path = path
        if config is None:
            config = load_slider_config(path) if path else SliderConfig()
        self._config = config
        self._subscribers: List["queue.Queue[SliderConfig]"] = []
        self._lock = threading.Lock()
        self._watch_thread: Optional[threading.Thread] = None
        self._watch_stop = threading.Event()
        self._last_mtime = self._mtime()

    @property
    def current(self) -> SliderConfig:
        return self._config

    def subscribe_to_changes(self) -> "queue.Queue[SliderConfig]":
        """Return a queue that receives the new config after every change."""
        q: "queue.Queue[SliderConfig]" = queue.Queue()
        with self._lock:
            self._subscribers.append(q)
        return q

    def update(self, config: SliderConfig) -> None:
        self._config = config
        with self._lock:
            subscribers = list(self._subscribers)
        for q in subscribers:
            q.put(config)
        logger.info(f"Slider config updated: {config.slider_count} slider(s) on {config.esphome_ip_addr or '<unset>'}")

    def reload(self) -> bool:
        """Re-read the config file. When the file is missing or invalid the previous config is kept."""
        if not self.path:
            return False
        self._last_mtime = self._mtime()
        if not os.path.exists(self.path):
            logger.error(f"Keeping previous slider config: {self.path} is missing")
            return False
        try:
            config = load_slider_config(self.path)
        except ValueError as e:
            logger.error(f"Keeping previous slider config: {e}")
            return False
        self.update(config)
        return True

    def _mtime(self) -> Optional[float]:
        if not self.path:
            return None
        try:
            return os.path.getmtime(self.path)
        except OSError:
            return None

    # --- file watching -----------------------------------------------------

    def start_watching(self, interval_s: float = CONFIG_POLL_SECONDS) -> None:
        if self._watch_thread is not None or not self.path:
            return
        self._watch_stop.clear()
        self._watch_thread = threading.Thread(
            target=self._watch_loop,
            args=(interval_s,),
            name="slider-config-watcher",
            daemon=True,
        )
        self._watch_thread.start()
        logger.info(f"Watching slider config {self.path} every {interval_s}s")

    def stop_watching(self) -> None:
        if self._watch_thread is None:
            return
        self._watch_stop.set()
        self._watch_thread.join(timeout=2.0)
        self._watch_thread = None

    def _watch_loop(self, interval_s: float) -> None:
        while not self._watch_stop.wait(interval_s):
            mtime = self._mtime()
            if mtime != self._last_mtime:
                logger.info(f"Slider config {self.path} changed, reloading")
                self.reload()
