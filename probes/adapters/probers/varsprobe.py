"""
Vars prober - Checks a variable on a target's /vars page.

The page is expected to be a JSON object of process variables, as served by
expvar-style debug endpoints. Nested variables are addressed with dotted
keys, e.g. "memstats.NumGC".

A response outside the 2xx range fails the check before its body is read.
"""

import json
import logging
from dataclasses import dataclass, field, replace
from datetime import timedelta
from typing import Any, Callable, Dict, List
from urllib.parse import urlencode

import requests

from probes.adapters.probers.fetch import DEFAULT_TIMEOUT, read_limited
from probes.alerting.email import send_alert_email
from probes.application import probe as generic
from probes.application.probe import Probe
from probes.core.entities import ProbeResult, Records
from probes.core.errors import (
    PayloadParseError,
    ProbeError,
    StatusMismatchError,
    TransportError,
    ValueMismatchError,
)
from probes.core.ports import AlertFn, Prober

logger = logging.getLogger(__name__)

DEFAULT_NAME = "VarsProber"
DEFAULT_INTERVAL = timedelta(minutes=5)
DEFAULT_FAILURE_PENALTY = 5

_MISSING = object()


@dataclass(frozen=True)
class VarsProber(Prober):
    """Probes a target host's /vars page."""

    target: str
    key: str = ""
    want_value: str = ""
    name: str = ""
    desc: str = ""
    timeout: float = DEFAULT_TIMEOUT
    alert_fn: AlertFn = field(default=send_alert_email, compare=False)

    def check(self) -> ProbeResult:
        """Verify that the target's /vars page is as expected."""
        try:
            self._check()
        except ProbeError as e:
            logger.debug("%s: check failed: %s", self.name, e)
            return ProbeResult.failed_with(e)
        return ProbeResult.passed_with(str(self), self.target)

    def _check(self) -> None:
        try:
            response = requests.get(self.target, timeout=self.timeout, stream=True)
        except requests.RequestException as e:
            raise TransportError(f"failed to fetch {self.target}: {e}") from e
        with response:
            if not 200 <= response.status_code < 300:
                raise StatusMismatchError(200, response.status_code)
            content = read_limited(response)
        logger.debug("%s got response %r", self.target, content)

        variables = parse_vars(content)
        if not self.key:
            return
        got = lookup(variables, self.key)
        if got is _MISSING:
            raise ValueMismatchError(self.key, self.want_value, None)
        rendered = render_value(got)
        if rendered != self.want_value:
            raise ValueMismatchError(self.key, self.want_value, rendered)

    def alert(self, name: str, desc: str, badness: int, records: Records) -> None:
        """
        Call the alert function of the prober.

        send_alert_email is used unless the alert() option set another one.
        """
        self.alert_fn(name, desc, badness, records)

    def __str__(self) -> str:
        return f"{self.name}: {self.desc} ({self.key}={self.want_value})"


def parse_vars(content: bytes) -> Dict[str, Any]:
    """
    Parse a /vars payload.

    Raises:
        PayloadParseError: If the payload is not a JSON object
    """
    try:
        data = json.loads(content.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise PayloadParseError(f"failed to parse vars payload: {e}") from e
    if not isinstance(data, dict):
        raise PayloadParseError(
            f"vars payload must be a JSON object, got {type(data).__name__}"
        )
    return data


def lookup(variables: Dict[str, Any], key: str) -> Any:
    """Find a variable by exact or dotted key; _MISSING if absent."""
    if key in variables:
        return variables[key]
    value: Any = variables
    for part in key.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def render_value(value: Any) -> str:
    """Strings compare as-is, everything else as its JSON encoding."""
    if isinstance(value, str):
        return value
    return json.dumps(value, sort_keys=True)


VarsOption = Callable[[VarsProber], VarsProber]


def name(value: str) -> VarsOption:
    """Set the name of the prober."""
    return lambda p: replace(p, name=value)


def desc(value: str) -> VarsOption:
    """Set the description of the prober."""
    return lambda p: replace(p, desc=value)


def key(value: str) -> VarsOption:
    """Set the variable key to check."""
    return lambda p: replace(p, key=value)


def want_value(value: str) -> VarsOption:
    """Set the value the key is expected to have."""
    return lambda p: replace(p, want_value=value)


def timeout(seconds: float) -> VarsOption:
    """Set the per-request timeout in seconds."""
    return lambda p: replace(p, timeout=seconds)


def alert(fn: AlertFn) -> VarsOption:
    """Set a custom alert function (default: send_alert_email)."""
    return lambda p: replace(p, alert_fn=fn)


def default_name(target: str, key_: str, want: str) -> str:
    # The query part is URL-encoded, so the last "?" always separates it
    # from the target and distinct configurations get distinct names.
    return f"{DEFAULT_NAME}_{target}?{urlencode({'key': key_, 'want': want})}"


def build(target: str, *options: VarsOption) -> VarsProber:
    """
    Build a VarsProber, applying options left to right.

    Defaults are filled in for name and description when no option set them.
    """
    p = VarsProber(target=target)
    for opt in options:
        p = opt(p)
    if not p.name:
        p = replace(p, name=default_name(target, p.key, p.want_value))
    if not p.desc:
        p = replace(
            p,
            desc=f"Probes vars page of {target} for key {p.key}, value {p.want_value}",
        )
    return p


def new(target: str, *options: VarsOption) -> Probe:
    """Return a new vars probe with the specified options."""
    return new_with_generic(target, [], *options)


def new_with_generic(
    target: str, generic_opts: List[generic.Option], *options: VarsOption
) -> Probe:
    """
    Return a new vars probe with the specified options.

    The vars probe runs every five minutes with a failure penalty of five
    unless generic_opts say otherwise.
    """
    p = build(target, *options)
    defaults = [
        generic.interval(DEFAULT_INTERVAL),
        generic.failure_penalty(DEFAULT_FAILURE_PENALTY),
    ]
    return Probe(p, p.name, p.desc, *defaults, *generic_opts)
