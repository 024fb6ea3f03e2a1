"""
Alert emails - Render and send HTML alert emails for failing probes.

The message is rendered from a Jinja2 template and handed to the mail
provider's SMTP relay. Each stage fails with its own AlertError subclass so
template, addressing, credential and transport problems can be told apart.
"""

import logging
import smtplib
from email.message import EmailMessage
from email.utils import getaddresses
from typing import Iterable

from probes.alerting.config import AlertConfig, get_config
from probes.core.entities import Records
from probes.core.errors import (
    AddressValidationError,
    CredentialMissingError,
    MessageBuildError,
    SendTransportError,
    TemplateRenderError,
)

logger = logging.getLogger(__name__)


class MailClient:
    """Authenticated SMTP connection details; connects only in send()."""

    def __init__(
        self, host: str, port: int, user: str, password: str, timeout: float
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.timeout = timeout

    def send(self, message: EmailMessage) -> None:
        """
        Deliver the message to every To: and Cc: address.

        Raises:
            smtplib.SMTPException: On protocol or authentication errors
            OSError: On connection errors
        """
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            server.starttls()
            server.login(self.user, self.password)
            server.send_message(message)


def get_client(config: AlertConfig) -> MailClient:
    """
    Create a mail client from the configured credentials.

    Raises:
        CredentialMissingError: If the user or password is empty
    """
    if not config.user:
        raise CredentialMissingError("user", "SMTP_USER")
    if not config.password:
        raise CredentialMissingError("password", "SMTP_PASSWORD")
    return MailClient(
        config.smtp_host,
        config.smtp_port,
        config.user,
        config.password,
        config.timeout,
    )


def validate_address(field: str, address: str) -> str:
    """
    Check that address holds exactly one well-formed mailbox.

    Accepts both "user@example.com" and "Name <user@example.com>".

    Raises:
        AddressValidationError: If the address is malformed
    """
    if "\r" in address or "\n" in address:
        raise AddressValidationError(field, address)
    parsed = getaddresses([address]) if address else []
    if len(parsed) != 1:
        raise AddressValidationError(field, address)
    addr = parsed[0][1]
    local, sep, domain = addr.partition("@")
    if not sep or not local or not domain or "@" in domain or " " in addr:
        raise AddressValidationError(field, address)
    return address


def render_alert(
    config: AlertConfig, name: str, desc: str, badness: int, records: Records
) -> str:
    """
    Render the alert body.

    Raises:
        TemplateRenderError: If no template is configured or rendering fails
    """
    if config.template is None:
        raise TemplateRenderError(
            "failed to construct email from template: no template configured"
        )
    try:
        template = config.template.get_template(config.template_name)
        return template.render(
            name=name, desc=desc, badness=badness, records=records
        )
    except Exception as e:
        raise TemplateRenderError(
            f"failed to construct email from template: {e}"
        ) from e


def build_message(
    config: AlertConfig, name: str, badness: int, html: str
) -> EmailMessage:
    """
    Build the outbound alert message.

    Raises:
        AddressValidationError: If the recipient, a CC or the sender is malformed
        MessageBuildError: If a header value such as the subject is rejected
    """
    validate_address("recipient", config.recipient)
    _validate_ccs(config.ccs)
    validate_address("sender", config.sender)

    message = EmailMessage()
    try:
        message["Subject"] = f"{name} failed (badness {badness})"
        message["From"] = config.sender
        message["To"] = config.recipient
        if config.ccs:
            message["Cc"] = ", ".join(config.ccs)
    except ValueError as e:
        raise MessageBuildError(f"failed to build alert message: {e}") from e
    message.set_content(html, subtype="html")
    return message


def _validate_ccs(ccs: Iterable[str]) -> None:
    for cc in ccs:
        validate_address("cc", cc)


class EmailAlerter:
    """
    Alert function that sends an HTML email per failing probe.

    Instances are callable with the AlertFn signature. The mail client is
    created for every alert and never cached.
    """

    def __init__(self, config: AlertConfig):
        self.config = config

    def send(self, name: str, desc: str, badness: int, records: Records) -> None:
        """
        Send an alert email.

        Args:
            name: Display name of the failing probe
            desc: Description of the probe
            badness: Severity score
            records: Historical outcomes for the template

        Raises:
            TemplateRenderError: If the body cannot be rendered
            AddressValidationError: If an address is malformed
            MessageBuildError: If the message headers cannot be built
            CredentialMissingError: If SMTP credentials are missing
            SendTransportError: If the mail transport fails
        """
        logger.debug("Sending alert email for %s", name)
        html = render_alert(self.config, name, desc, badness, records)
        message = build_message(self.config, name, badness, html)

        try:
            client = get_client(self.config)
        except CredentialMissingError as e:
            logger.error("Failed to create mail client: %s", e)
            raise

        try:
            client.send(message)
        except (smtplib.SMTPException, OSError) as e:
            raise SendTransportError(f"failed to send mail: {e}") from e

        logger.info("Sent alert email to %s", self.config.recipient)

    __call__ = send


def send_alert_email(name: str, desc: str, badness: int, records: Records) -> None:
    """
    Send an alert email using the process-wide configuration.

    This is the default alert function of every prober.
    """
    EmailAlerter(get_config()).send(name, desc, badness, records)
