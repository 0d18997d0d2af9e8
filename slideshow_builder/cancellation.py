"""Cooperative cancellation shared by the synthesizer, its workers and the encoder."""

from __future__ import annotations

import threading
from enum import Enum


class EmitStatus(Enum):
    """Outcome of a unit of emission work."""

    CONTINUE = "continue"
    STOP = "stop"


class CancellationToken:
    """Thread-safe flag checked at every image boundary and emission point."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_canceled(self) -> bool:
        return self._event.is_set()


__all__ = ["CancellationToken", "EmitStatus"]
