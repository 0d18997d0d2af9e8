"""Progress reporting with ETA estimates for long frame runs."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from time import perf_counter


def _format_duration(seconds: float) -> str:
    total_seconds = int(round(seconds))
    if total_seconds <= 0:
        return "<1s"
    minutes, secs = divmod(total_seconds, 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h{minutes:02d}m{secs:02d}s"
    if minutes:
        return f"{minutes}m{secs:02d}s"
    return f"{secs}s"


def eta_string(elapsed: float, completed: int, total: int) -> str:
    """Format an ETA from elapsed seconds and progress counters."""
    if completed <= 0 or total <= 0 or completed > total or elapsed <= 0.0:
        return "ETA estimating"

    remaining = max(0.0, elapsed * (total - completed) / completed)
    finish_time = datetime.now() + timedelta(seconds=remaining)
    return f"ETA {_format_duration(remaining)} (finish {finish_time.strftime('%H:%M:%S')})"


class ProgressReporter:
    """Log ``completed/total`` lines roughly every five percent."""

    def __init__(self, logger: logging.Logger, label: str, total: int) -> None:
        self.logger = logger
        self.label = label
        self.total = max(0, total)
        self.interval = max(1, self.total // 20)
        self.completed = 0
        self._started = perf_counter()

    def advance(self, steps: int = 1) -> None:
        previous = self.completed
        self.completed += steps
        if self.total <= 0:
            return
        crossed = self.completed // self.interval != previous // self.interval
        if crossed or self.completed == self.total:
            elapsed = perf_counter() - self._started
            self.logger.info(
                "%s progress: %s/%s (%0.1f%%, %s)",
                self.label,
                self.completed,
                self.total,
                min(100.0, self.completed / self.total * 100.0),
                eta_string(elapsed, self.completed, self.total),
            )


__all__ = ["ProgressReporter", "eta_string"]
