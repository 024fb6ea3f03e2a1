"""
probes - Pluggable health probers with email alerting.

Concrete probers live in probes.adapters.probers; the alerting helpers that
send the failure emails live in probes.alerting.
"""

from probes.core.entities import ProbeResult, Record
from probes.core.ports import Prober

__all__ = ["ProbeResult", "Prober", "Record"]
