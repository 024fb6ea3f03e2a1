"""
Probers module - Prober implementations.

webprobe checks HTTP responses, varsprobe checks process variables exposed
on a /vars page.
"""

from probes.adapters.probers.varsprobe import VarsProber
from probes.adapters.probers.webprobe import WebProber

__all__ = ["VarsProber", "WebProber"]
