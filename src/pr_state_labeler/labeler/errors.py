"""Run-level failures.

Quiet endings (irrelevant event, no matching trigger, nothing to assign) are not
errors; they are reported through `RunOutcome` in the runner.
"""

from __future__ import annotations

from dataclasses import dataclass, field


class LabelerError(Exception):
    """Base class for failures that end a run with a non-zero outcome."""


class ConfigurationMissing(LabelerError):
    pass


class EmptyLabelDirectory(LabelerError):
    def __init__(self, repository: str) -> None:
        super().__init__(f"There are no labels in repository {repository}")
        self.repository = repository


@dataclass(slots=True, eq=False)
class ProvisioningFailure(LabelerError):
    """Raised after every label creation has finished and at least one failed.

    Labels created by sibling calls are left in place.
    """

    failed: list[str] = field(default_factory=list)
    message: str = ""

    def __str__(self) -> str:
        return self.message or f"Failed to create labels: {', '.join(self.failed)}"


class MutationFailure(LabelerError):
    pass
