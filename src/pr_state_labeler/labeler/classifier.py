"""Map pull request state to the configured label rule.

Predicates are evaluated independently in `TRIGGER_ORDER`; when several match,
the last match wins. Rules are never merged.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from pr_state_labeler.labeler.event import PullRequestDescriptor
from pr_state_labeler.labeler.rules import TRIGGER_ORDER, ActionRule, LabelerConfig

logger = logging.getLogger(__name__)

TriggerPredicate = Callable[[PullRequestDescriptor], bool]

TRIGGER_PREDICATES: dict[str, TriggerPredicate] = {
    "onOpen": lambda pr: pr.state == "open",
    "onReviewPending": lambda pr: pr.review_state == "pending",
    "onComment": lambda pr: pr.review_state == "commented",
    "onMerge": lambda pr: pr.merged is True,
    "onClose": lambda pr: pr.merged is not True and pr.state == "closed",
    "onApprove": lambda pr: pr.review_state == "approved",
    "onChangeRequest": lambda pr: pr.review_state == "changes_requested",
}


@dataclass(frozen=True, slots=True)
class SelectedAction:
    trigger: str
    rule: ActionRule


def matching_triggers(descriptor: PullRequestDescriptor, config: LabelerConfig) -> list[str]:
    """Configured triggers whose predicate holds, in evaluation order."""

    return [
        trigger
        for trigger in TRIGGER_ORDER
        if config.rule_for(trigger) is not None and TRIGGER_PREDICATES[trigger](descriptor)
    ]


def classify(descriptor: PullRequestDescriptor, config: LabelerConfig) -> SelectedAction | None:
    selected: SelectedAction | None = None
    for trigger in matching_triggers(descriptor, config):
        rule = config.rule_for(trigger)
        assert rule is not None
        logger.info(
            "Trigger matched",
            extra={"trigger": trigger, "assign": rule.assign, "remove": rule.remove},
        )
        selected = SelectedAction(trigger=trigger, rule=rule)
    return selected
