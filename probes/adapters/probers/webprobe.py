"""
Web prober - Checks a target's HTTP status code and response body.

Build probes with new() and the option functions of this module:

    probe = webprobe.new(
        "https://example.com/healthz", "GET", 200,
        webprobe.in_response("ok"),
        webprobe.timeout(5),
    )
"""

import logging
from dataclasses import dataclass, field, replace
from typing import IO, Callable, List, Optional, Union

import requests

from probes.adapters.probers.fetch import (
    DEFAULT_TIMEOUT,
    MAX_RESPONSE_BYTES,
    read_limited,
)
from probes.alerting.email import send_alert_email
from probes.application.probe import Option as ProbeOption
from probes.application.probe import Probe
from probes.core.entities import ProbeResult, Records
from probes.core.errors import (
    ContentMismatchError,
    ProbeError,
    RequestBuildError,
    StatusMismatchError,
    TransportError,
)
from probes.core.ports import AlertFn, Prober

logger = logging.getLogger(__name__)

DEFAULT_NAME = "WebProber"

Body = Union[bytes, str, IO]


@dataclass(frozen=True)
class WebProber(Prober):
    """
    Probes a target's HTTP response.

    A file-like body is consumed by the first check; pass bytes or str for a
    body that is sent on every check.
    """

    target: str
    method: str = "GET"
    want_code: int = 200
    want_in_response: str = ""
    body: Optional[Body] = field(default=None, compare=False)
    name: str = ""
    desc: str = ""
    timeout: float = DEFAULT_TIMEOUT
    alert_fn: AlertFn = field(default=send_alert_email, compare=False)

    def check(self) -> ProbeResult:
        """Verify that the target's HTTP response is as expected."""
        try:
            self._check()
        except ProbeError as e:
            logger.debug("%s: check failed: %s", self.name, e)
            return ProbeResult.failed_with(e)
        return ProbeResult.passed_result()

    def _check(self) -> None:
        # A fresh session per check: no connection is reused across probes.
        with requests.Session() as session:
            request = requests.Request(
                self.method,
                self.target,
                data=self.body,
                headers={"Connection": "close"},
            )
            try:
                prepared = session.prepare_request(request)
            except (requests.RequestException, ValueError) as e:
                raise RequestBuildError(f"failed to create HTTP request: {e}") from e

            try:
                response = session.send(prepared, stream=True, timeout=self.timeout)
            except requests.RequestException as e:
                raise TransportError(f"failed to send HTTP request: {e}") from e
            except ValueError as e:
                # http.client validates the method and headers only when sending
                raise RequestBuildError(f"failed to create HTTP request: {e}") from e

            with response:
                if response.status_code != self.want_code:
                    raise StatusMismatchError(self.want_code, response.status_code)
                content = read_limited(response, MAX_RESPONSE_BYTES)

        text = content.decode("utf-8", errors="replace")
        if self.want_in_response not in text:
            raise ContentMismatchError(self.want_in_response, text)

    def alert(self, name: str, desc: str, badness: int, records: Records) -> None:
        """Send an alert notification, by default via email."""
        self.alert_fn(name, desc, badness, records)

    def __str__(self) -> str:
        return f"{self.name}: {self.desc} ({self.method} {self.target} -> {self.want_code})"


WebOption = Callable[[WebProber], WebProber]


def name(value: str) -> WebOption:
    """Set the name of the prober."""
    return lambda p: replace(p, name=value)


def desc(value: str) -> WebOption:
    """Set the description of the prober."""
    return lambda p: replace(p, desc=value)


def body(value: Body) -> WebOption:
    """Set the HTTP request body."""
    return lambda p: replace(p, body=value)


def in_response(value: str) -> WebOption:
    """Require the given string in the HTTP response body."""
    return lambda p: replace(p, want_in_response=value)


def timeout(seconds: float) -> WebOption:
    """Set the per-request timeout in seconds."""
    return lambda p: replace(p, timeout=seconds)


def alert(fn: AlertFn) -> WebOption:
    """Set a custom alert function (default: send_alert_email)."""
    return lambda p: replace(p, alert_fn=fn)


def build(target: str, method: str, code: int, *options: WebOption) -> WebProber:
    """
    Build a WebProber, applying options left to right.

    Defaults are filled in for name and description when no option set them.
    """
    p = WebProber(target=target, method=method, want_code=code)
    for opt in options:
        p = opt(p)
    if not p.name:
        p = replace(p, name=f"{DEFAULT_NAME}_{target}")
    if not p.desc:
        p = replace(p, desc=f"Probes HTTP response of {target}")
    return p


def new(target: str, method: str, code: int, *options: WebOption) -> Probe:
    """Return a new web probe with the specified options."""
    return new_with_generic(target, method, code, [], *options)


def new_with_generic(
    target: str,
    method: str,
    code: int,
    generic_opts: List[ProbeOption],
    *options: WebOption,
) -> Probe:
    """
    Return a new web probe with the specified options.

    generic_opts are passed through to the Probe handle.
    """
    p = build(target, method, code, *options)
    return Probe(p, p.name, p.desc, *generic_opts)
