"""
Alert configuration - Settings for alert emails.

The process-wide AlertConfig is installed once at startup with configure()
and is read-only afterwards. Secrets come from the environment, everything
else from the "alert" section of the probe-set config file.
"""

import logging
import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from jinja2 import Environment, FileSystemLoader, select_autoescape

from probes.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"
DEFAULT_TEMPLATE_NAME = "email.html"
DEFAULT_SMTP_HOST = "smtp.sendgrid.net"
DEFAULT_SMTP_PORT = 587
DEFAULT_SMTP_TIMEOUT = 10.0


def default_environment(template_dir: Optional[str] = None) -> Environment:
    """
    Build the Jinja2 environment alert emails are rendered from.

    Args:
        template_dir: Directory holding templates (default: bundled templates)

    Returns:
        Environment with HTML autoescaping enabled
    """
    directory = Path(template_dir) if template_dir else TEMPLATE_DIR
    return Environment(
        loader=FileSystemLoader(str(directory)),
        autoescape=select_autoescape(["html", "htm", "xml"]),
    )


@dataclass(frozen=True)
class AlertConfig:
    """
    Settings used by the email alerter.

    user and password are the mail provider's SMTP credentials. recipient is
    the sole To: address; ccs are copied verbatim onto the message.
    """

    template: Optional[Environment] = field(default_factory=default_environment)
    template_name: str = DEFAULT_TEMPLATE_NAME
    sender: str = ""
    recipient: str = ""
    ccs: Tuple[str, ...] = ()
    user: str = ""
    password: str = ""
    smtp_host: str = DEFAULT_SMTP_HOST
    smtp_port: int = DEFAULT_SMTP_PORT
    timeout: float = DEFAULT_SMTP_TIMEOUT


_lock = threading.Lock()
_config: Optional[AlertConfig] = None


def configure(config: AlertConfig) -> AlertConfig:
    """
    Install the process-wide alert configuration.

    Must be called once, before the first alert is sent.

    Raises:
        ConfigurationError: If alerting was already configured
    """
    global _config
    with _lock:
        if _config is not None:
            raise ConfigurationError("alerting is already configured")
        _config = config
    logger.info(
        "Configured alert emails: %s -> %s (cc: %d)",
        config.sender,
        config.recipient,
        len(config.ccs),
    )
    return config


def get_config() -> AlertConfig:
    """
    Return the installed configuration.

    An unconfigured process gets an empty AlertConfig, so alerts fail on
    addressing before any mail transport is contacted.
    """
    if _config is None:
        return AlertConfig()
    return _config


def from_settings(
    settings: Dict[str, Any], environ: Optional[Mapping[str, str]] = None
) -> AlertConfig:
    """
    Build an AlertConfig from a config-file section and the environment.

    Args:
        settings: "alert" section of the config file
        environ: Environment mapping (default: os.environ)

    Returns:
        AlertConfig

    Raises:
        ValueError: If a field has the wrong type
    """
    if environ is None:
        environ = os.environ

    if not isinstance(settings, dict):
        raise ValueError("Field 'alert' must be a dict")

    ccs = settings.get("ccs", [])
    if not isinstance(ccs, list):
        raise ValueError("Field 'alert.ccs' must be a list")

    for key in ("sender", "recipient", "template_dir", "template_name"):
        value = settings.get(key)
        if value is not None and not isinstance(value, str):
            raise ValueError(f"Field 'alert.{key}' must be a string")

    port = environ.get("SMTP_PORT", str(DEFAULT_SMTP_PORT))
    try:
        smtp_port = int(port)
    except ValueError:
        raise ValueError(f"SMTP_PORT must be an integer, got {port!r}")

    return AlertConfig(
        template=default_environment(settings.get("template_dir")),
        template_name=settings.get("template_name") or DEFAULT_TEMPLATE_NAME,
        sender=settings.get("sender", ""),
        recipient=settings.get("recipient", ""),
        ccs=tuple(ccs),
        user=environ.get("SMTP_USER", ""),
        password=environ.get("SMTP_PASSWORD", ""),
        smtp_host=environ.get("SMTP_HOST", DEFAULT_SMTP_HOST),
        smtp_port=smtp_port,
    )
