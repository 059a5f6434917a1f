"""Repository label directory and label provisioning."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, wait

from pr_state_labeler.labeler.errors import EmptyLabelDirectory, ProvisioningFailure
from pr_state_labeler.labeler.github.client import GitHubClient, Label
from pr_state_labeler.labeler.rules import LabelDefinition

logger = logging.getLogger(__name__)


class LabelDirectory:
    """Snapshot of the labels defined on a repository.

    Names are matched case-sensitively. Duplicate names are kept: resolving a
    duplicated name yields every matching identifier.
    """

    def __init__(self, labels: Iterable[Label]) -> None:
        self._labels: tuple[Label, ...] = tuple(labels)

    def __len__(self) -> int:
        return len(self._labels)

    def __iter__(self) -> Iterator[Label]:
        return iter(self._labels)

    def names(self) -> set[str]:
        return {label.name for label in self._labels}

    def resolve(self, names: Iterable[str]) -> list[str]:
        """Return node IDs of labels whose name is in `names`, in directory order."""

        wanted = set(names)
        if not wanted:
            return []
        return [label.node_id for label in self._labels if label.name in wanted]


def fetch_label_directory(github: GitHubClient) -> LabelDirectory:
    """Fetch the label directory.

    Raises:
        EmptyLabelDirectory: if the repository has no labels.
    """

    directory = LabelDirectory(github.fetch_labels())
    if not len(directory):
        raise EmptyLabelDirectory(github.repository)
    return directory


def missing_labels(
    definitions: Sequence[LabelDefinition], directory: LabelDirectory
) -> list[LabelDefinition]:
    existing = directory.names()
    missing: dict[str, LabelDefinition] = {}
    for definition in definitions:
        # A repeated name is created once, from its first definition.
        if definition.name not in existing:
            missing.setdefault(definition.name, definition)
    return list(missing.values())


def ensure_labels(
    github: GitHubClient,
    definitions: Sequence[LabelDefinition],
    directory: LabelDirectory,
    *,
    max_workers: int = 8,
) -> list[str]:
    """Create every configured label missing from `directory`.

    All creations are submitted together and awaited together; a failing
    creation does not cancel its siblings. Returns the names created. The
    directory is not refreshed here.

    Raises:
        ProvisioningFailure: once all creations finished, if any of them failed.
    """

    to_create = missing_labels(definitions, directory)
    if not to_create:
        return []

    logger.info(
        "Creating missing labels",
        extra={"repo": github.repository, "labels": [d.name for d in to_create]},
    )

    futures: dict[Future[None], LabelDefinition] = {}
    with ThreadPoolExecutor(
        max_workers=max(1, min(max_workers, len(to_create))),
        thread_name_prefix="create-label",
    ) as pool:
        for definition in to_create:
            futures[pool.submit(github.create_label, definition)] = definition
        wait(futures)

    created: list[str] = []
    failed: list[str] = []
    first_error: BaseException | None = None
    # Report in configuration order, not completion order.
    for future, definition in futures.items():
        error = future.exception()
        if error is None:
            created.append(definition.name)
            continue
        logger.error(
            "Failed to create label",
            extra={"repo": github.repository, "label": definition.name, "error": str(error)},
        )
        failed.append(definition.name)
        if first_error is None:
            first_error = error

    if failed:
        raise ProvisioningFailure(failed=failed, message=str(first_error))
    return created
