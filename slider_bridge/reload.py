from __future__ import annotations
import logging
import queue
import threading
from typing import Callable, Optional

from .config import ConfigStore

logger = logging.getLogger(__name__)


class ConfigReloadWatcher:
    """
    Calls `on_reload` for every config change notification.

    Runs on its own daemon thread; the callback should only hand the
    notification off (the connection turns it into a delayed reset command).
    """

    def __init__(self, config_store: ConfigStore, on_reload: Callable[[], None]) -> None:
        self._changes = config_store.subscribe_to_changes()
        self._on_reload = on_reload
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._loop,
            name="slider-config-reload",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        if self._thread is None:
            return
        self._stop.set()
        self._thread.join(timeout=2.0)
        self._thread = None

    def _loop(self) -> None:
        while not self._stop.is_set():
            try:
                self._changes.get(timeout=0.2)
            except queue.Empty:
                continue
            logger.debug("Config reloaded, scheduling slider reset")
            self._on_reload()
