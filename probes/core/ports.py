"""
Core ports - Interfaces implemented by concrete probers.

New kinds of probe are added by implementing Prober; nothing else needs to
know about them.
"""

from abc import ABC, abstractmethod
from typing import Callable

from probes.core.entities import ProbeResult, Records

# name, description, badness, records. Raises AlertError on failure.
AlertFn = Callable[[str, str, int, Records], None]


class Prober(ABC):
    """
    Port for one external health check.

    Implementations must be safe to check repeatedly and concurrently, which
    in practice means they hold no mutable state after construction.
    """

    @abstractmethod
    def check(self) -> ProbeResult:
        """
        Perform the check once.

        Returns:
            ProbeResult: passed, or failed with the diagnostic error
        """

    @abstractmethod
    def alert(self, name: str, desc: str, badness: int, records: Records) -> None:
        """
        Send a notification that the probe is failing.

        Args:
            name: Display name of the failing probe
            desc: Description of what the probe checks
            badness: Severity score supplied by the scheduler
            records: Historical outcomes, forwarded untouched

        Raises:
            AlertError: If the notification could not be sent
        """

    @abstractmethod
    def __str__(self) -> str:
        """Human-readable description of the prober."""
