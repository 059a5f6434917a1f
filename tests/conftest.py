"""Test configuration and fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import Mock

import pytest

from pr_state_labeler.labeler.github.client import GitHubClient, Label


@pytest.fixture
def pr_payload() -> dict[str, Any]:
    """A minimal `pull_request` webhook payload for an open PR."""
    return {
        "action": "opened",
        "pull_request": {
            "node_id": "PR_kwDOAAAB",
            "number": 7,
            "state": "open",
            "merged": False,
            "labels": [{"name": "wip"}],
            "assignees": [{"login": "alice"}],
            "requested_reviewers": [{"login": "bob"}],
        },
        "repository": {"full_name": "octo-org/octo-repo"},
    }


@pytest.fixture
def mock_github() -> Mock:
    """A GitHub client double that never touches the network."""
    github = Mock(spec=GitHubClient)
    github.repository = "octo-org/octo-repo"
    github.fetch_labels.return_value = [
        Label(node_id="L1", name="needs-review"),
        Label(node_id="L2", name="shipped"),
    ]
    return github


@pytest.fixture
def write_config(tmp_path: Path):
    """Write a YAML rule file and return its path."""

    def _write(text: str) -> Path:
        path = tmp_path / "pr-labels.yml"
        path.write_text(text, encoding="utf-8")
        return path

    return _write
