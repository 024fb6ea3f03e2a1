#!/usr/bin/env python3
"""
Probes CLI - Run every configured probe once.

Usage:
    probes-run <config.json> [--only PROBE_ID ...] [--dry-run] [-v]

Exit codes:
    0: All probes passed
    3: At least one probe failed, or the config is unusable
"""

import argparse
import logging
import sys
from typing import List, Optional

from probes.alerting import config as alert_config
from probes.application.config import build_probes, load_config
from probes.core.entities import Records

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAIL = 3
EXIT_INTERRUPTED = 130


def setup_logging(verbose: bool = False) -> None:
    """
    Setup logging configuration.

    Args:
        verbose: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def log_alert(name: str, desc: str, badness: int, records: Records) -> None:
    """Alert function used in dry-run mode: logs instead of emailing."""
    logger.warning(
        "[dry-run] would alert: %s failed (badness %d) - %s [%d records]",
        name,
        badness,
        desc,
        len(records),
    )


def run(
    config_path: str, only: Optional[List[str]] = None, dry_run: bool = False
) -> int:
    """
    Run the configured probes once.

    Args:
        config_path: Path to the probe-set config file
        only: Probe ids to run (default: all)
        dry_run: If True, log alerts instead of sending them

    Returns:
        Exit code: 0 if every probe passed, 3 otherwise
    """
    try:
        config = load_config(config_path)
        if dry_run:
            probes = build_probes(config["probes"], alert_fn=log_alert, only=only)
        else:
            alert_config.configure(alert_config.from_settings(config["alert"]))
            probes = build_probes(config["probes"], only=only)
    except KeyError as e:
        logger.error("Probe not found in config: %s", e)
        return EXIT_FAIL
    except (OSError, ValueError) as e:
        logger.error("Unusable config %s: %s", config_path, e)
        return EXIT_FAIL

    if not probes:
        logger.warning("No probes configured in %s", config_path)
        return EXIT_OK

    failed = 0
    for probe_id, probe in probes.items():
        result = probe.run_once()
        if result.passed:
            print(f"PASS {probe_id}")
        else:
            failed += 1
            print(f"FAIL {probe_id}: {result.message}")

    logger.info("%d of %d probes failed", failed, len(probes))
    return EXIT_FAIL if failed else EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Exit code: 0 (all passed), 3 (failures), 130 (interrupted)
    """
    parser = argparse.ArgumentParser(
        description="Run HTTP and /vars probes once, emailing alerts on failure",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit codes:
  0  - All probes passed
  3  - At least one probe failed

Environment:
  SMTP_USER, SMTP_PASSWORD  - mail provider credentials (required for alerts)
  SMTP_HOST, SMTP_PORT      - mail relay (default: smtp.sendgrid.net:587)

Examples:
  probes-run configs/probes.json
  probes-run configs/probes.json --only homepage
  probes-run configs/probes.json --dry-run
        """,
    )

    parser.add_argument("config", help="Path to the probe-set JSON config")

    parser.add_argument(
        "--only",
        action="append",
        default=None,
        metavar="PROBE_ID",
        help="Run only this probe (repeatable)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Don't send alert emails, just log them",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging (DEBUG level)",
    )

    args = parser.parse_args(argv)

    setup_logging(verbose=args.verbose)

    if args.dry_run:
        logger.info("Dry-run mode: No alert emails will be sent")

    try:
        return run(args.config, only=args.only, dry_run=args.dry_run)
    except KeyboardInterrupt:
        logger.error("Probe run interrupted by user")
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
