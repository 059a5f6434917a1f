"""CLI entrypoint: label the pull request of the current CI event."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from pr_state_labeler import __version__
from pr_state_labeler.labeler.config import LabelerSettings
from pr_state_labeler.labeler.errors import ConfigurationMissing
from pr_state_labeler.labeler.event import load_event_payload
from pr_state_labeler.labeler.github.client import GitHubClient
from pr_state_labeler.labeler.logging import configure_logging
from pr_state_labeler.labeler.rules import load_config
from pr_state_labeler.labeler.runner import RunOutcome, log_done, run

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pr-state-labeler",
        description="Assign and remove pull request labels based on PR and review state",
    )
    parser.add_argument("--version", action="version", version=f"pr-state-labeler {__version__}")
    parser.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to the YAML label rule file (overrides CONFIG_PATH)",
    )
    parser.add_argument(
        "--event-path",
        default=None,
        help="Path to the webhook event payload JSON (overrides GITHUB_EVENT_PATH)",
    )
    return parser


def report_failure(message: str) -> None:
    """Surface a run failure as a GitHub Actions error annotation."""

    # Workflow commands are single-line; newlines must be escaped.
    escaped = message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
    print(f"::error::{escaped}", flush=True)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = LabelerSettings()
    except ValidationError as e:
        # Settings are unusable; report on stderr, then log the marker at INFO.
        print("Configuration error (check your environment or .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        configure_logging("INFO")
        log_done(RunOutcome.FAILED)
        return 2

    configure_logging(settings.log_level)

    config_path = Path(args.config_path) if args.config_path else settings.config_path
    event_path = Path(args.event_path) if args.event_path else settings.event_path

    try:
        config = load_config(config_path)
    except ConfigurationMissing as e:
        logger.error(str(e), extra={"path": str(config_path)})
        report_failure(str(e))
        log_done(RunOutcome.FAILED)
        return 2

    def client_factory(repository: str) -> GitHubClient:
        return GitHubClient(
            token=settings.github_token,
            repository=repository,
            base_url=settings.github_api_url,
        )

    try:
        result = run(
            payload=load_event_payload(event_path),
            config=config,
            client_factory=client_factory,
            provision_workers=settings.provision_workers,
        )
    except Exception:
        logger.exception("Command failed")
        log_done(RunOutcome.FAILED)
        return 1

    if result.outcome is RunOutcome.FAILED:
        report_failure(result.message)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
