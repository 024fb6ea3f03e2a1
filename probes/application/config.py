"""
Probe-set configuration - Loads and validates the probes to run.

This module loads a JSON file defining the alert settings and the probes to
run, and builds Probe handles from it.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from probes.adapters.probers import varsprobe, webprobe
from probes.application.probe import Probe
from probes.core.ports import AlertFn

logger = logging.getLogger(__name__)


# Configuration schema structure
# {
#   "alert": {
#     "sender": str,
#     "recipient": str,
#     "ccs": Optional[List[str]],
#     "template_dir": Optional[str],
#     "template_name": Optional[str]
#   },
#   "probes": {
#     "probe_id": {
#       "type": str,  # "web", "vars"
#       "url": str,
#       "name": Optional[str],
#       "desc": Optional[str],
#       "timeout": Optional[float],
#       # web
#       "method": Optional[str],
#       "code": Optional[int],
#       "in_response": Optional[str],
#       "body": Optional[str],
#       # vars
#       "key": Optional[str],
#       "want_value": Optional[str]
#     }
#   }
# }

VALID_TYPES = ("web", "vars")


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load probe-set configuration from a JSON file.

    Args:
        config_path: Path to config file

    Returns:
        Dict with "alert" settings and "probes" as probe_id -> config

    Raises:
        FileNotFoundError: If the config file does not exist
        ValueError: If the config is invalid
    """
    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file: {e}")

    if not isinstance(data, dict):
        raise ValueError("Config file must contain a JSON object")

    alert = data.get("alert", {})
    if not isinstance(alert, dict):
        raise ValueError("Field 'alert' must be a dict")

    raw_probes = data.get("probes", {})
    if not isinstance(raw_probes, dict):
        raise ValueError("Field 'probes' must be a dict")

    # Invalid probes are logged and skipped
    validated: Dict[str, Dict[str, Any]] = {}
    for probe_id, probe_config in raw_probes.items():
        try:
            validated[probe_id] = _validate_probe_config(probe_id, probe_config)
        except ValueError as e:
            logger.error("Invalid config for probe %s: %s", probe_id, e)
            continue

    logger.info(
        "Loaded probe config: %d probes configured from %s",
        len(validated),
        config_path,
    )

    return {"alert": alert, "probes": validated}


def _validate_probe_config(probe_id: str, config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate a single probe's configuration.

    Args:
        probe_id: Probe identifier
        config: Raw configuration dict

    Returns:
        Validated configuration dict with defaults filled in

    Raises:
        ValueError: If config is invalid
    """
    if not isinstance(config, dict):
        raise ValueError(f"Config must be a dict for probe: {probe_id}")

    if "url" not in config:
        raise ValueError(f"Missing required field 'url' for probe: {probe_id}")
    if not isinstance(config["url"], str):
        raise ValueError(f"Field 'url' must be a string for probe: {probe_id}")

    probe_type = config.get("type")
    if probe_type not in VALID_TYPES:
        raise ValueError(
            f"Field 'type' must be one of {VALID_TYPES} for probe: {probe_id}"
        )

    validated = {
        "type": probe_type,
        "url": config["url"],
        "name": config.get("name", ""),
        "desc": config.get("desc", ""),
        "timeout": config.get("timeout", webprobe.DEFAULT_TIMEOUT),
    }
    if probe_type == "web":
        validated.update(
            {
                "method": config.get("method", "GET"),
                "code": config.get("code", 200),
                "in_response": config.get("in_response", ""),
                "body": config.get("body"),
            }
        )
    else:
        validated.update(
            {
                "key": config.get("key", ""),
                "want_value": config.get("want_value", ""),
            }
        )

    for field in ("name", "desc", "method", "in_response", "key", "want_value"):
        if field in validated and not isinstance(validated[field], str):
            raise ValueError(f"Field '{field}' must be a string for probe: {probe_id}")
    if validated.get("body") is not None and not isinstance(validated["body"], str):
        raise ValueError(f"Field 'body' must be a string for probe: {probe_id}")
    if "code" in validated and (
        isinstance(validated["code"], bool) or not isinstance(validated["code"], int)
    ):
        raise ValueError(f"Field 'code' must be an int for probe: {probe_id}")
    if isinstance(validated["timeout"], bool) or not isinstance(
        validated["timeout"], (int, float)
    ):
        raise ValueError(f"Field 'timeout' must be a number for probe: {probe_id}")
    if validated["timeout"] <= 0:
        raise ValueError(f"Field 'timeout' must be positive for probe: {probe_id}")

    return validated


def build_probes(
    probe_configs: Dict[str, Dict[str, Any]],
    alert_fn: Optional[AlertFn] = None,
    only: Optional[List[str]] = None,
) -> Dict[str, Probe]:
    """
    Build Probe handles from validated probe configs.

    Args:
        probe_configs: probe_id -> validated config, as returned by load_config
        alert_fn: Alert function for every prober (default: alert emails)
        only: Probe ids to build (default: all)

    Returns:
        Dict with probe_id -> Probe

    Raises:
        KeyError: If a probe id in only is not configured
    """
    selected = only if only else list(probe_configs)
    built: Dict[str, Probe] = {}
    for probe_id in selected:
        config = probe_configs[probe_id]
        if config["type"] == "web":
            built[probe_id] = _build_web(config, alert_fn)
        else:
            built[probe_id] = _build_vars(config, alert_fn)
    return built


def _build_web(config: Dict[str, Any], alert_fn: Optional[AlertFn]) -> Probe:
    options = [
        webprobe.in_response(config["in_response"]),
        webprobe.timeout(config["timeout"]),
    ]
    if config["name"]:
        options.append(webprobe.name(config["name"]))
    if config["desc"]:
        options.append(webprobe.desc(config["desc"]))
    if config["body"] is not None:
        options.append(webprobe.body(config["body"]))
    if alert_fn is not None:
        options.append(webprobe.alert(alert_fn))
    return webprobe.new(config["url"], config["method"], config["code"], *options)


def _build_vars(config: Dict[str, Any], alert_fn: Optional[AlertFn]) -> Probe:
    options = [
        varsprobe.key(config["key"]),
        varsprobe.want_value(config["want_value"]),
        varsprobe.timeout(config["timeout"]),
    ]
    if config["name"]:
        options.append(varsprobe.name(config["name"]))
    if config["desc"]:
        options.append(varsprobe.desc(config["desc"]))
    if alert_fn is not None:
        options.append(varsprobe.alert(alert_fn))
    return varsprobe.new(config["url"], *options)
