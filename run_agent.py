#!/usr/bin/env python3
"""Entry point to run one Naukri auto-apply session.

Usage:
    python run_agent.py                        # config/profile.yaml, credentials from .env
    python run_agent.py --pages 3 --headed
    python run_agent.py --profile other.yaml --json
"""
from __future__ import annotations

import argparse
import json
import os
import signal
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from naukri_agent.agent import RunController  # noqa: E402
from naukri_agent.config import PROFILE_PATH, ensure_dirs, load_run_config  # noqa: E402
from naukri_agent.errors import ConfigError  # noqa: E402
from naukri_agent.log import get_logger  # noqa: E402

log = get_logger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Apply to matching Naukri jobs and answer recruiter chatbots.")
    p.add_argument("--profile", type=Path, default=PROFILE_PATH, help="profile YAML (default: %(default)s)")
    p.add_argument("--pages", type=int, default=None, help="override max_pages from the profile")
    p.add_argument("--email", default=None, help="override NAUKRI_EMAIL")
    p.add_argument("--headed", action="store_true", help="show the browser window")
    p.add_argument("--json", action="store_true", help="print the run summary as JSON")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    if args.headed:
        os.environ["RUN_HEADLESS"] = "false"

    if not args.profile.exists():
        print()
        print(f"  No profile found at {args.profile}.")
        print("  Copy config/profile.example.yaml to config/profile.yaml and fill it in.")
        print()
        return 1

    try:
        config = load_run_config(args.profile, email=args.email, max_pages=args.pages)
    except ConfigError as exc:
        log.error("%s", exc)
        return 1

    ensure_dirs()
    controller = RunController()

    def _on_sigint(signum, frame) -> None:
        if not controller.stop():
            raise KeyboardInterrupt
        log.warning("Ctrl+C received, stopping after the current step (press again to abort)")
        signal.signal(signal.SIGINT, signal.default_int_handler)

    signal.signal(signal.SIGINT, _on_sigint)
    summary = controller.start(config)

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2, default=str))
    log.info("Run complete.")
    log.info("  Processed: %d", summary.total_processed)
    log.info("  Applied:   %d", summary.jobs_applied)
    log.info("  Skipped:   %d", summary.jobs_skipped)
    for reason, count in summary.skip_reasons.items():
        log.info("    %s: %d", reason, count)
    if controller.last_report:
        log.info("  Report: %s", controller.last_report)
    if summary.error:
        log.error("  Error: %s", summary.error)
    return 0 if summary.success else 2


if __name__ == "__main__":
    sys.exit(main())
