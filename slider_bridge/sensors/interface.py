# slider_bridge/sensors/interface.py
from __future__ import annotations
from typing import List, Protocol


class FetchError(RuntimeError):
    """A read cycle could not be completed (transport, status or decode failure)."""


class SliderSource(Protocol):
    """
    Minimal interface all slider sources must implement.
    One instance represents one device exposing every configured slider.
    """

    def poll(self) -> List[int]:
        """
        Read every configured slider once and return the raw values, in slider order.

        Never raises for device failures: a failed cycle returns the last
        good vector instead (empty if there never was one).
        """
        ...
