import logging
import time
from contextlib import contextmanager
from typing import Dict, Iterator, List, Set

from settings import SETTINGS

log = logging.getLogger(__name__)


class TimeLogger:
    """Named wall-clock timers summed over a run.

    Everything is a no-op unless ``SETTINGS.log_timing`` is on. Percentages in
    the report are relative to the timer named ``"Total"``.
    """

    def __init__(self, careful: bool = False) -> None:
        self.careful = careful
        self._totals: Dict[str, int] = {}
        self._last: Dict[str, int] = {}
        self._running: Set[str] = set()
        self._overhead = 0

    def start(self, name: str) -> None:
        if not SETTINGS.log_timing:
            return
        now = time.perf_counter_ns()
        self._last[name] = now
        if self.careful:
            if name in self._running:
                log.warning(f"Trying to start timer, but already started: {name}")
            self._running.add(name)
        self._overhead += time.perf_counter_ns() - now

    def stop(self, name: str) -> None:
        if not SETTINGS.log_timing:
            return
        now = time.perf_counter_ns()
        if name not in self._last:
            raise KeyError(f"Timer was never started: {name}")
        self._totals[name] = self._totals.get(name, 0) + now - self._last[name]
        if self.careful:
            if name not in self._running:
                log.warning(f"Trying to stop timer, but isn't running: {name}")
            self._running.discard(name)
        self._overhead += time.perf_counter_ns() - now

    @contextmanager
    def timer(self, name: str) -> Iterator[None]:
        self.start(name)
        try:
            yield
        finally:
            self.stop(name)

    def totals(self) -> Dict[str, float]:
        """Seconds spent per timer"""
        return {name: ns / 1.0e9 for name, ns in self._totals.items()}

    def report(self) -> List[str]:
        if not SETTINGS.log_timing:
            return []
        totals = dict(self._totals)
        totals["TimeLogger"] = self._overhead
        reference = totals.get("Total") or max(totals.values()) or 1
        lines = []
        for name in sorted(totals, key=totals.get, reverse=True):
            lines.append(f"{totals[name] / 1.0e9:9.2f} sec, {100.0 * totals[name] / reference:5.1f}%: {name}")
        return lines

    def print_log(self) -> None:
        lines = self.report()
        if not lines:
            return
        print("------------------------------\n\nTiming breakdown:\n")
        for line in lines:
            print(line)

    def reset(self) -> None:
        self._totals = {}
        self._last = {}
        self._running = set()
        self._overhead = 0


TIME_LOGGER = TimeLogger()
