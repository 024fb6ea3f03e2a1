"""
Core entities - Values produced and consumed by probers.

ProbeResult is the outcome of a single check; Record is one entry in the
history a Probe handle keeps and forwards to alert functions.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Sequence

from probes.core.errors import ProbeError


@dataclass(frozen=True)
class ProbeResult:
    """
    Outcome of one check invocation.

    A failed result carries the error that explains it; a passed result may
    carry a free-form description and the probed target.
    """

    passed: bool
    error: Optional[ProbeError] = None
    info: str = ""
    target: str = ""

    @classmethod
    def passed_result(cls) -> "ProbeResult":
        return cls(passed=True)

    @classmethod
    def passed_with(cls, info: str, target: str) -> "ProbeResult":
        return cls(passed=True, info=info, target=target)

    @classmethod
    def failed_with(cls, error: ProbeError) -> "ProbeResult":
        return cls(passed=False, error=error)

    @property
    def message(self) -> str:
        """Diagnostic text suitable for logs; empty for passed results."""
        if self.passed or self.error is None:
            return ""
        return str(self.error)


@dataclass(frozen=True)
class Record:
    """A single historical outcome kept by a Probe handle."""

    passed: bool
    message: str = ""
    timestamp: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @classmethod
    def from_result(cls, result: ProbeResult) -> "Record":
        return cls(passed=result.passed, message=result.message or result.info)


# Ordered history forwarded to alert functions; not interpreted by them.
Records = Sequence[Record]
