"""GitHub API client wrapper.

Label lookups and label mutations go through GraphQL (they need node IDs);
label creation goes through PyGithub's REST binding.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse, urlunparse

import requests
from github import Auth, Github
from github.Repository import Repository

from pr_state_labeler.labeler.rules import LabelDefinition

logger = logging.getLogger(__name__)

# Labels beyond the first page are not visible to a run.
LABEL_PAGE_SIZE = 90

# GitHub's own default when a label is created without a color.
DEFAULT_LABEL_COLOR = "ededed"

_LABELS_QUERY = """
query Labels($owner: String!, $name: String!, $first: Int!) {
  repository(owner: $owner, name: $name) {
    labels(first: $first) {
      nodes {
        id
        name
        color
        isDefault
      }
    }
  }
}
"""

_ADD_LABELS_MUTATION = """
mutation AddLabels($input: AddLabelsToLabelableInput!) {
  addLabelsToLabelable(input: $input) {
    clientMutationId
  }
}
"""

_REMOVE_LABELS_MUTATION = """
mutation RemoveLabels($input: RemoveLabelsFromLabelableInput!) {
  removeLabelsFromLabelable(input: $input) {
    clientMutationId
  }
}
"""


@dataclass(frozen=True, slots=True)
class Label:
    """A repository label as seen by GraphQL."""

    node_id: str
    name: str
    color: str = ""
    is_default: bool = False


class GitHubClient:
    """Small wrapper around the GitHub APIs needed to label one pull request."""

    def __init__(
        self,
        *,
        token: str,
        repository: str,
        base_url: str = "https://api.github.com",
        repo: Repository | None = None,
        github_api: Github | None = None,
    ) -> None:
        if not token:
            raise ValueError("GitHub token is required")
        if not repository:
            raise ValueError("GitHub repository is required")

        self._repository_name = repository.strip().strip("/")
        self._rest_base_url = base_url.rstrip("/")
        self._session = requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "pr-state-labeler",
            }
        )

        if repo is not None:
            self._repo = repo
            self._github = None
            logger.debug("Using injected Repository instance")
            return

        auth = Auth.Token(token)
        self._github = github_api or Github(auth=auth, base_url=self._rest_base_url)

        self._repo = self._github.get_repo(self._repository_name)
        logger.info(
            "Authenticated with GitHub and connected to repository",
            extra={"repo": self._repository_name},
        )

    @property
    def repository(self) -> str:
        """Return the configured repository name ("owner/repo")."""

        return self._repository_name

    def _graphql_url(self) -> str:
        """Derive the GitHub GraphQL endpoint from the configured REST base URL.

        GitHub.com:
            REST: https://api.github.com
            GQL:  https://api.github.com/graphql

        GitHub Enterprise typically exposes REST as:
            https://github.example.com/api/v3
        and GraphQL as:
            https://github.example.com/api/graphql
        """

        parsed = urlparse(self._rest_base_url)
        path = parsed.path.rstrip("/")

        if path.endswith("/api/v3"):
            path = path[: -len("/api/v3")] + "/api/graphql"
        elif path.endswith("/api"):
            path = path[: -len("/api")] + "/api/graphql"
        elif path == "":
            path = "/graphql"
        else:
            path = path + "/graphql"

        return urlunparse(parsed._replace(path=path))

    def _repo_owner_and_name(self) -> tuple[str, str]:
        try:
            owner, name = self._repository_name.split("/", 1)
        except ValueError as e:
            raise ValueError(
                "repository must be in the form 'owner/repo' to use GraphQL queries"
            ) from e
        if not owner.strip() or not name.strip():
            raise ValueError("repository must be in the form 'owner/repo'")
        return owner, name

    def _graphql(self, *, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        url = self._graphql_url()
        resp = self._session.post(url, json={"query": query, "variables": variables}, timeout=30)
        resp.raise_for_status()
        payload: dict[str, Any] = resp.json()
        errors = payload.get("errors")
        if errors:
            # Keep only the messages; the full response can be large.
            messages = []
            if isinstance(errors, list):
                for item in errors:
                    if isinstance(item, dict):
                        msg = item.get("message")
                        if isinstance(msg, str):
                            messages.append(msg)
            message = "; ".join(messages) if messages else "Unknown GraphQL error"
            raise RuntimeError(f"GitHub GraphQL error: {message}")
        return payload

    @staticmethod
    def _parse_label_node(node: object) -> Label | None:
        if not isinstance(node, dict):
            return None
        node_id = node.get("id")
        name = node.get("name")
        if not isinstance(node_id, str) or not node_id.strip():
            return None
        if not isinstance(name, str):
            return None
        color = node.get("color")
        return Label(
            node_id=node_id,
            name=name,
            color=color if isinstance(color, str) else "",
            is_default=node.get("isDefault") is True,
        )

    def fetch_labels(self) -> list[Label]:
        """Return up to LABEL_PAGE_SIZE labels defined on the repository."""

        owner, name = self._repo_owner_and_name()
        payload = self._graphql(
            query=_LABELS_QUERY,
            variables={"owner": owner, "name": name, "first": LABEL_PAGE_SIZE},
        )

        data = payload.get("data")
        repo = data.get("repository") if isinstance(data, dict) else None
        labels_conn = repo.get("labels") if isinstance(repo, dict) else None
        nodes = labels_conn.get("nodes") if isinstance(labels_conn, dict) else None
        if not isinstance(nodes, list):
            return []

        labels: list[Label] = []
        for node in nodes:
            label = self._parse_label_node(node)
            if label is not None:
                labels.append(label)

        logger.info(
            "Repository labels fetched",
            extra={"repo": self._repository_name, "count": len(labels)},
        )
        return labels

    def create_label(self, definition: LabelDefinition) -> None:
        fields = definition.creation_fields()
        name = fields.pop("name")
        color = fields.pop("color", DEFAULT_LABEL_COLOR)
        self._repo.create_label(name=name, color=color, **fields)
        logger.info("Label created", extra={"repo": self._repository_name, "label": name})

    def add_labels_to_labelable(self, *, labelable_id: str, label_ids: list[str]) -> None:
        if not labelable_id.strip():
            raise ValueError("labelable_id is required")
        self._graphql(
            query=_ADD_LABELS_MUTATION,
            variables={"input": {"labelableId": labelable_id, "labelIds": label_ids}},
        )
        logger.info(
            "Labels added",
            extra={
                "repo": self._repository_name,
                "labelable_id": labelable_id,
                "label_ids": label_ids,
            },
        )

    def remove_labels_from_labelable(self, *, labelable_id: str, label_ids: list[str]) -> None:
        if not labelable_id.strip():
            raise ValueError("labelable_id is required")
        self._graphql(
            query=_REMOVE_LABELS_MUTATION,
            variables={"input": {"labelableId": labelable_id, "labelIds": label_ids}},
        )
        logger.info(
            "Labels removed",
            extra={
                "repo": self._repository_name,
                "labelable_id": labelable_id,
                "label_ids": label_ids,
            },
        )

    def close(self) -> None:
        self._session.close()
        if self._github is not None:
            self._github.close()
