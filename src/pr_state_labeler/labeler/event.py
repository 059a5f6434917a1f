"""Pull request context extracted from a webhook event payload."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

REVIEW_STATES: frozenset[str] = frozenset(
    {"pending", "commented", "approved", "changes_requested", "dismissed"}
)


@dataclass(frozen=True, slots=True)
class PullRequestDescriptor:
    """Normalized pull request state for one event.

    `node_id` is the GraphQL identifier used as the labelable target.
    """

    node_id: str
    state: str
    merged: bool
    review_state: str | None
    repository: str

    number: int | None = None
    action: str | None = None
    labels: list[str] = field(default_factory=list)
    assignees: list[str] = field(default_factory=list)
    requested_reviewers: list[str] = field(default_factory=list)


def _logins(raw: object) -> list[str]:
    if not isinstance(raw, list):
        return []
    logins: list[str] = []
    for item in raw:
        if isinstance(item, dict):
            login = item.get("login")
            if isinstance(login, str) and login.strip():
                logins.append(login)
    return logins


def _label_names(raw: object) -> list[str]:
    if not isinstance(raw, list):
        return []
    names: list[str] = []
    for item in raw:
        if isinstance(item, dict):
            name = item.get("name")
            if isinstance(name, str) and name:
                names.append(name)
    return names


def _pull_request_state(pr: dict[str, Any]) -> str:
    state = pr.get("state")
    if not isinstance(state, str):
        return ""
    return state.lower()


def _review_state(review: object) -> str | None:
    if not isinstance(review, dict):
        return None
    state = review.get("state")
    if not isinstance(state, str) or not state.strip():
        return None
    normalized = state.strip().lower()
    if normalized not in REVIEW_STATES:
        logger.warning("Unrecognized review state", extra={"review_state": state})
    return normalized


def extract_pull_request(payload: dict[str, Any]) -> PullRequestDescriptor | None:
    """Build a descriptor from a webhook payload.

    Returns None when the payload has no pull request, no repository, or no
    repository full name; such events are not relevant to labeling.
    """

    pr = payload.get("pull_request")
    repo = payload.get("repository")
    if not isinstance(pr, dict) or not isinstance(repo, dict):
        return None

    full_name = repo.get("full_name")
    if not isinstance(full_name, str) or not full_name.strip():
        return None

    node_id = pr.get("node_id")
    number = pr.get("number")
    action = payload.get("action")

    return PullRequestDescriptor(
        node_id=node_id if isinstance(node_id, str) else "",
        state=_pull_request_state(pr),
        merged=pr.get("merged") is True,
        review_state=_review_state(payload.get("review")),
        repository=full_name.strip(),
        number=number if isinstance(number, int) else None,
        action=action if isinstance(action, str) else None,
        labels=_label_names(pr.get("labels")),
        assignees=_logins(pr.get("assignees")),
        requested_reviewers=_logins(pr.get("requested_reviewers")),
    )


def load_event_payload(event_path: Path | None) -> dict[str, Any]:
    """Read the webhook payload written by the CI runner.

    A missing file or an unreadable payload yields an empty dict, which extracts
    as "not applicable".
    """

    if event_path is None:
        return {}
    if not event_path.exists():
        logger.warning("Event payload file not found", extra={"path": str(event_path)})
        return {}
    try:
        payload = json.loads(event_path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        logger.warning(
            "Event payload is not valid JSON; treating as empty",
            extra={"path": str(event_path)},
        )
        return {}
    if not isinstance(payload, dict):
        logger.warning(
            "Event payload has unexpected shape; treating as empty",
            extra={"path": str(event_path)},
        )
        return {}
    return payload
