"""One labeling run for one webhook event.

Start -> extract -> fetch labels -> provision (re-fetch if anything was created)
-> classify -> resolve -> remove -> add -> done. Every branch is terminal.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pr_state_labeler.labeler.classifier import classify
from pr_state_labeler.labeler.errors import LabelerError
from pr_state_labeler.labeler.event import extract_pull_request
from pr_state_labeler.labeler.github.client import GitHubClient
from pr_state_labeler.labeler.labels import ensure_labels, fetch_label_directory
from pr_state_labeler.labeler.mutations import LabelMutationPlan, resolve_and_mutate
from pr_state_labeler.labeler.rules import LabelerConfig

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], GitHubClient]


class RunOutcome(str, Enum):
    APPLIED = "applied"
    NOT_APPLICABLE = "not_applicable"
    NO_MATCH = "no_match"
    NO_ASSIGN_TARGETS = "no_assign_targets"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class RunResult:
    outcome: RunOutcome
    message: str = ""
    trigger: str | None = None
    plan: LabelMutationPlan | None = None
    created_labels: tuple[str, ...] = ()

    @property
    def failed(self) -> bool:
        return self.outcome is RunOutcome.FAILED


def run(
    *,
    payload: dict[str, Any],
    config: LabelerConfig,
    client_factory: ClientFactory,
    provision_workers: int = 8,
) -> RunResult:
    """Apply the configured label rule for one event payload.

    `client_factory` is called with the repository full name once the event is
    known to be a pull request event.
    """

    try:
        result = _run(
            payload=payload,
            config=config,
            client_factory=client_factory,
            provision_workers=provision_workers,
        )
    except LabelerError as e:
        logger.error(str(e), extra={"error_type": type(e).__name__})
        result = RunResult(outcome=RunOutcome.FAILED, message=str(e))
    except Exception as e:
        logger.exception("Run failed")
        result = RunResult(outcome=RunOutcome.FAILED, message=str(e))

    log_done(result.outcome)
    return result


def log_done(outcome: RunOutcome) -> None:
    """Log the completion marker that ends every run, including aborted ones."""

    logger.info(
        "Done",
        extra={"outcome": outcome.value, "finished_at": datetime.now(tz=UTC).isoformat()},
    )


def _run(
    *,
    payload: dict[str, Any],
    config: LabelerConfig,
    client_factory: ClientFactory,
    provision_workers: int,
) -> RunResult:
    logger.debug("Event payload", extra={"payload": payload})

    descriptor = extract_pull_request(payload)
    if descriptor is None:
        logger.info("Event has no pull request context; nothing to do")
        return RunResult(
            outcome=RunOutcome.NOT_APPLICABLE,
            message="Event has no pull request context",
        )

    logger.info(
        "Pull request context",
        extra={
            "repo": descriptor.repository,
            "number": descriptor.number,
            "action": descriptor.action,
            "state": descriptor.state,
            "merged": descriptor.merged,
            "review_state": descriptor.review_state,
            "labels": descriptor.labels,
            "assignees": descriptor.assignees,
            "requested_reviewers": descriptor.requested_reviewers,
        },
    )

    github = client_factory(descriptor.repository)
    try:
        directory = fetch_label_directory(github)

        created = ensure_labels(
            github, config.create_labels, directory, max_workers=provision_workers
        )
        if created:
            # The old snapshot lacks the IDs of the labels just created.
            directory = fetch_label_directory(github)

        selected = classify(descriptor, config)
        if selected is None:
            logger.info("There is no configuration match for this pull request state")
            return RunResult(
                outcome=RunOutcome.NO_MATCH,
                message="No configured trigger matches",
                created_labels=tuple(created),
            )

        if not descriptor.node_id:
            raise LabelerError("Pull request payload has no node_id to label")

        plan = resolve_and_mutate(github, selected.rule, descriptor.node_id, directory)
        if plan is None:
            return RunResult(
                outcome=RunOutcome.NO_ASSIGN_TARGETS,
                message="No labels to assign",
                trigger=selected.trigger,
                created_labels=tuple(created),
            )

        return RunResult(
            outcome=RunOutcome.APPLIED,
            trigger=selected.trigger,
            plan=plan,
            created_labels=tuple(created),
        )
    finally:
        github.close()
