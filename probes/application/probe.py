"""
Probe handle - Registration of a prober with its scheduling hints.

A scheduler keeps one Probe per prober and calls run_once() every interval.
The handle tracks badness and a bounded in-memory history of results, and
calls the prober's alert function when a check fails.
"""

import logging
import threading
from collections import deque
from dataclasses import dataclass, replace
from datetime import timedelta
from typing import Callable, List

from probes.core.entities import ProbeResult, Record
from probes.core.errors import AlertError
from probes.core.ports import Prober

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = timedelta(minutes=1)
DEFAULT_FAILURE_PENALTY = 1
DEFAULT_MAX_RECORDS = 100


@dataclass(frozen=True)
class ProbeOptions:
    """Scheduling hints for a Probe."""

    interval: timedelta = DEFAULT_INTERVAL
    failure_penalty: int = DEFAULT_FAILURE_PENALTY
    max_records: int = DEFAULT_MAX_RECORDS


Option = Callable[[ProbeOptions], ProbeOptions]


def interval(value: timedelta) -> Option:
    """Set how often the scheduler should run the probe."""
    return lambda opts: replace(opts, interval=value)


def failure_penalty(value: int) -> Option:
    """Set how much badness one failed check adds."""
    return lambda opts: replace(opts, failure_penalty=value)


def max_records(value: int) -> Option:
    """Set how many historical records the probe keeps."""
    return lambda opts: replace(opts, max_records=value)


class Probe:
    """
    Handle the scheduler drives for one prober.

    Attributes:
        prober: The wrapped Prober
        name: Display name used in alerts
        desc: Description used in alerts
        options: Scheduling hints
    """

    def __init__(self, prober: Prober, name: str, desc: str, *options: Option):
        opts = ProbeOptions()
        for opt in options:
            opts = opt(opts)
        self.prober = prober
        self.name = name
        self.desc = desc
        self.options = opts
        self._badness = 0
        self._records: deque = deque(maxlen=opts.max_records)
        self._lock = threading.Lock()

    @property
    def interval(self) -> timedelta:
        return self.options.interval

    @property
    def badness(self) -> int:
        with self._lock:
            return self._badness

    @property
    def records(self) -> List[Record]:
        with self._lock:
            return list(self._records)

    def run_once(self) -> ProbeResult:
        """
        Run one check and alert if it failed.

        A failing alert is logged and not retried.

        Returns:
            ProbeResult of the check
        """
        result = self.prober.check()

        with self._lock:
            self._records.append(Record.from_result(result))
            if result.passed:
                self._badness = max(0, self._badness - 1)
            else:
                self._badness += self.options.failure_penalty
            badness = self._badness
            records = list(self._records)

        if result.passed:
            logger.debug("[%s] passed", self.name)
            return result

        logger.warning("[%s] failed (badness %d): %s", self.name, badness, result.message)
        try:
            self.prober.alert(self.name, self.desc, badness, records)
        except AlertError as e:
            logger.error("[%s] failed to send alert: %s", self.name, e)
        return result

    def __repr__(self) -> str:
        return f"<Probe {self.name!r} interval={self.options.interval}>"
