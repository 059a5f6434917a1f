"""Label rule configuration.

The configuration file is YAML and looks like:

    createLabels:
      - name: needs-review
        color: fbca04
        description: Waiting for a reviewer
    onOpen:
      assign: [needs-review]
    onApprove:
      assign: [approved]
      remove: [needs-review]

Trigger rules use the `assign`/`remove` schema. The older `set` key is rejected
instead of being merged into `assign`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from pr_state_labeler.labeler.errors import ConfigurationMissing

logger = logging.getLogger(__name__)

# Evaluation order matters: when several triggers match, the last one wins.
TRIGGER_ORDER: tuple[str, ...] = (
    "onOpen",
    "onReviewPending",
    "onComment",
    "onMerge",
    "onClose",
    "onApprove",
    "onChangeRequest",
)


class LabelDefinition(BaseModel):
    """A label that must exist on the repository before rules are applied."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(min_length=1)
    color: str | None = Field(default=None, description="Hex color, with or without '#'")
    description: str | None = Field(default=None)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("label name must be non-empty")
        return value

    @field_validator("color")
    @classmethod
    def _normalize_color(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip().lstrip("#")
        if len(normalized) != 6 or any(c not in "0123456789abcdefABCDEF" for c in normalized):
            raise ValueError(f"color must be a 6-digit hex code, got {value!r}")
        return normalized

    def creation_fields(self) -> dict[str, str]:
        """Fields sent to the remote label-creation call (unset ones omitted)."""

        return self.model_dump(exclude_none=True)


class ActionRule(BaseModel):
    """Label names to assign and/or remove when a trigger matches."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    assign: list[str] = Field(default_factory=list)
    remove: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _reject_set_schema(cls, data: Any) -> Any:
        if isinstance(data, dict) and "set" in data:
            raise ValueError("'set' is not supported; use 'assign' to list labels to add")
        return data

    @field_validator("assign", "remove")
    @classmethod
    def _names_not_blank(cls, names: list[str]) -> list[str]:
        if any(not name.strip() for name in names):
            raise ValueError("label names must be non-empty")
        return names


class LabelerConfig(BaseModel):
    """Parsed label rules for one repository."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    create_labels: list[LabelDefinition] = Field(default_factory=list, alias="createLabels")

    on_open: ActionRule | None = Field(default=None, alias="onOpen")
    on_close: ActionRule | None = Field(default=None, alias="onClose")
    on_merge: ActionRule | None = Field(default=None, alias="onMerge")
    on_review_pending: ActionRule | None = Field(default=None, alias="onReviewPending")
    on_comment: ActionRule | None = Field(default=None, alias="onComment")
    on_approve: ActionRule | None = Field(default=None, alias="onApprove")
    on_change_request: ActionRule | None = Field(default=None, alias="onChangeRequest")

    def rule_for(self, trigger: str) -> ActionRule | None:
        """Return the rule bound to a trigger name such as 'onApprove'."""

        for name, field in type(self).model_fields.items():
            if field.alias == trigger:
                value = getattr(self, name)
                return value if isinstance(value, ActionRule) else None
        raise KeyError(f"Unknown trigger: {trigger}")

    def configured_triggers(self) -> list[str]:
        return [t for t in TRIGGER_ORDER if self.rule_for(t) is not None]


def load_config(path: Path) -> LabelerConfig:
    """Load and validate the YAML rule file.

    Raises:
        ConfigurationMissing: if the file can't be read, is empty, or is invalid.
    """

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationMissing(f"Cannot read configuration file {path}: {e}") from e

    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigurationMissing(f"Configuration file {path} is not valid YAML: {e}") from e

    if not raw:
        raise ConfigurationMissing("There is no configuration to set the labels")
    if not isinstance(raw, dict):
        raise ConfigurationMissing(
            f"Configuration file {path} must contain a mapping at the top level"
        )

    try:
        config = LabelerConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationMissing(f"Invalid configuration in {path}: {e}") from e

    logger.debug(
        "Configuration loaded",
        extra={
            "path": str(path),
            "create_labels": [d.name for d in config.create_labels],
            "triggers": config.configured_triggers(),
        },
    )
    return config
