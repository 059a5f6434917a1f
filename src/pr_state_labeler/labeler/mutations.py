"""Resolve a rule to label IDs and apply it to the pull request."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from github import GithubException
from requests import RequestException

from pr_state_labeler.labeler.errors import MutationFailure
from pr_state_labeler.labeler.github.client import GitHubClient
from pr_state_labeler.labeler.labels import LabelDirectory
from pr_state_labeler.labeler.rules import ActionRule

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LabelMutationPlan:
    assign_ids: list[str]
    remove_ids: list[str]


def plan_mutation(rule: ActionRule, directory: LabelDirectory) -> LabelMutationPlan:
    return LabelMutationPlan(
        assign_ids=directory.resolve(rule.assign),
        remove_ids=directory.resolve(rule.remove),
    )


def resolve_and_mutate(
    github: GitHubClient,
    rule: ActionRule,
    labelable_id: str,
    directory: LabelDirectory,
) -> LabelMutationPlan | None:
    """Remove then add the rule's labels on `labelable_id`.

    Returns None without touching the pull request when nothing resolves to
    assign, even if there are labels to remove.

    Raises:
        MutationFailure: if either remote mutation fails.
    """

    plan = plan_mutation(rule, directory)
    if not plan.assign_ids:
        logger.info(
            "No labels to assign",
            extra={"assign": rule.assign, "remove_ids": plan.remove_ids},
        )
        return None

    try:
        # Remove first so a label listed in both ends up assigned.
        if plan.remove_ids:
            logger.info("Removing labels", extra={"label_ids": plan.remove_ids})
            github.remove_labels_from_labelable(
                labelable_id=labelable_id, label_ids=plan.remove_ids
            )

        logger.info("Assigning labels", extra={"label_ids": plan.assign_ids})
        github.add_labels_to_labelable(labelable_id=labelable_id, label_ids=plan.assign_ids)
    except (RuntimeError, ValueError, RequestException, GithubException) as e:
        raise MutationFailure(str(e)) from e

    return plan
