from __future__ import annotations
import enum
import logging
import queue
import threading
import time
from typing import List, Optional

from .broadcast import EventBroadcaster, SliderMoveSink
from .config import ConfigStore, RELOAD_RESET_DELAY_SECONDS
from .detector import ChangeDetector
from .reload import ConfigReloadWatcher
from .sensors.interface import SliderSource

logger = logging.getLogger(__name__)


class AlreadyConnectedError(RuntimeError):
    pass


class _Command(enum.Enum):
    STOP = "stop"
    RESET = "reset"


class ESPHomeConnection:
    """
    Connection lifecycle for a slider device.

    `start()` launches one poll thread which owns all slider state: it reads
    a vector from the source, runs it through the change detector and
    publishes the resulting move events, over and over. Other threads talk
    to it only through its command queue (stop, reset).
    """

    def __init__(
        self,
        config_store: ConfigStore,
        source: SliderSource,
        broadcaster: Optional[EventBroadcaster] = None,
        verbose: bool = False,
        reload_delay_s: float = RELOAD_RESET_DELAY_SECONDS,
    ) -> None:
        self._config_store = config_store
        self._source = source
        self._broadcaster = broadcaster or EventBroadcaster()
        self._detector = ChangeDetector(verbose=verbose)
        self._verbose = verbose
        self._reload_delay_s = reload_delay_s

        self._commands: "queue.Queue[_Command]" = queue.Queue()
        self._lifecycle_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._connected = False
        self._reset_deadline: Optional[float] = None
        self._values: List[Optional[float]] = []

        # respond to config changes
        self._reload_watcher = ConfigReloadWatcher(config_store, self.request_slider_reset)
        self._reload_watcher.start()

        logger.debug("Created ESPHome connection")

    @property
    def connected(self) -> bool:
        return self._connected

    def start(self) -> None:
        with self._lifecycle_lock:
            # don't allow multiple concurrent connections
            if self._connected:
                logger.warning("Already connected, can't start another without closing first")
                raise AlreadyConnectedError("ESPHome: connection already active")

            self._discard_stale_stops()
            self._connected = True
            self._thread = threading.Thread(
                target=self._run,
                name="esphome-slider-poll",
                daemon=True,
            )
            self._thread.start()
        logger.info(f"ESPHome connection started for {self._config_store.current.esphome_ip_addr or '<unset>'}")

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop polling and wait for the poll thread to finish. No-op when idle."""
        with self._lifecycle_lock:
            if not self._connected or self._thread is None:
                return
            thread = self._thread
            self._commands.put(_Command.STOP)
            thread.join(timeout=timeout)
            if thread.is_alive():
                logger.warning(f"Poll thread did not stop within {timeout}s")
                return
            self._thread = None

    def shutdown(self) -> None:
        """Stop polling and stop listening for config changes."""
        self.stop()
        self._reload_watcher.stop()

    def subscribe_to_slider_move_events(self, maxsize: Optional[int] = None) -> SliderMoveSink:
        """Return a sink that receives a SliderMoveEvent every time a slider moves."""
        return self._broadcaster.subscribe(maxsize)

    def request_slider_reset(self) -> None:
        """
        Make the poll thread forget slider state shortly from now, so the next
        cycle re-emits a move event for every slider.
        """
        self._commands.put(_Command.RESET)

    def slider_values(self) -> List[Optional[float]]:
        """Last reported value per slider, None for sliders not yet observed."""
        return list(self._values)

    # --- poll thread -------------------------------------------------------

    def _run(self) -> None:
        try:
            while not self._handle_commands():
                self._apply_due_reset()
                vector = self._source.poll()
                config = self._config_store.current
                events = self._detector.process(
                    vector,
                    invert=config.invert_sliders,
                    noise_reduction_level=config.noise_reduction_level,
                )
                self._values = self._detector.values()
                # deliver move events, if there are any, towards all consumers
                self._broadcaster.publish(events)
        except Exception:
            logger.exception("Slider poll loop crashed")
            raise
        finally:
            self._close()

    def _handle_commands(self) -> bool:
        """Drain pending commands. Returns True when asked to stop."""
        while True:
            try:
                command = self._commands.get_nowait()
            except queue.Empty:
                return False
            if command is _Command.STOP:
                return True
            if command is _Command.RESET:
                # a newer reload restarts the delay instead of racing the older one
                self._reset_deadline = time.monotonic() + self._reload_delay_s

    def _discard_stale_stops(self) -> None:
        # a poll thread that died on an error never consumed its STOP
        pending: List[_Command] = []
        while True:
            try:
                pending.append(self._commands.get_nowait())
            except queue.Empty:
                break
        for command in pending:
            if command is not _Command.STOP:
                self._commands.put(command)

    def _apply_due_reset(self) -> None:
        if self._reset_deadline is None or time.monotonic() < self._reset_deadline:
            return
        self._reset_deadline = None
        self._detector.reset_slider_count()
        if self._verbose:
            logger.debug("Slider count reset after config reload")

    def _close(self) -> None:
        logger.info("ESPHome connection closed")
        self._connected = False
