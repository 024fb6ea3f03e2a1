"""
Probe errors - Exception taxonomy for checks and alerts.

Check failures subclass ProbeError and are reported through a failed
ProbeResult rather than raised to the caller. Alert failures subclass
AlertError and are raised by the alert functions.
"""

from typing import Optional


class ProbeError(Exception):
    """Base class for every reason a check can fail."""


class RequestBuildError(ProbeError):
    """The outbound request could not be constructed."""


class TransportError(ProbeError):
    """The request could not be sent or no response arrived."""


class StatusMismatchError(ProbeError):
    """The response status code differs from the expected one."""

    def __init__(self, want: int, got: int):
        super().__init__(f"bad HTTP response status; want {want}, got {got}")
        self.want = want
        self.got = got


class ContentMismatchError(ProbeError):
    """The response body lacks the expected substring."""

    def __init__(self, want: str, body: str):
        super().__init__(f"response doesn't contain {want!r}: \n{body}\n")
        self.want = want
        self.body = body


class ReadLimitError(ProbeError):
    """The response body could not be read within the byte cap."""


class PayloadParseError(ProbeError):
    """The vars payload is not a JSON object."""


class ValueMismatchError(ProbeError):
    """A vars key is missing or holds an unexpected value."""

    def __init__(self, key: str, want: str, got: Optional[str]):
        if got is None:
            message = f"key {key!r} not found in vars payload"
        else:
            message = f"bad value for key {key!r}; want {want!r}, got {got!r}"
        super().__init__(message)
        self.key = key
        self.want = want
        self.got = got


class AlertError(Exception):
    """Base class for every reason an alert notification can fail."""


class TemplateRenderError(AlertError):
    """The alert body could not be rendered from its template."""


class AddressValidationError(AlertError):
    """A sender, recipient or CC address is malformed."""

    def __init__(self, field: str, address: str):
        super().__init__(f"invalid {field} address {address!r}")
        self.field = field
        self.address = address


class MessageBuildError(AlertError):
    """The alert message headers could not be constructed."""


class CredentialMissingError(AlertError):
    """A mail-provider credential was not configured."""

    def __init__(self, credential: str, setting: str):
        super().__init__(
            f"no mail provider {credential} specified - set {setting}"
        )
        self.credential = credential
        self.setting = setting


class SendTransportError(AlertError):
    """The mail transport rejected or failed to deliver the message."""


class ConfigurationError(Exception):
    """Alerting was configured more than once."""
