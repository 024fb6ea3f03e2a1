"""
Alerting module - Email notifications for failing probes.

Call configure() once at startup, before the first probe fails.
"""

from probes.alerting.config import AlertConfig, configure, get_config
from probes.alerting.email import EmailAlerter, send_alert_email

__all__ = [
    "AlertConfig",
    "EmailAlerter",
    "configure",
    "get_config",
    "send_alert_email",
]
