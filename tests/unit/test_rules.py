"""Unit tests for rule file loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from pr_state_labeler.labeler.errors import ConfigurationMissing
from pr_state_labeler.labeler.rules import (
    TRIGGER_ORDER,
    ActionRule,
    LabelDefinition,
    LabelerConfig,
    load_config,
)


def test_load_config_parses_labels_and_triggers(write_config) -> None:
    path = write_config(
        """
createLabels:
  - name: needs-review
    color: "#FBCA04"
    description: Waiting for a reviewer
  - name: triage
onOpen:
  assign: [needs-review]
onApprove:
  assign: [approved]
  remove: [needs-review]
"""
    )

    config = load_config(path)

    assert [d.name for d in config.create_labels] == ["needs-review", "triage"]
    assert config.create_labels[0].color == "FBCA04"
    assert config.create_labels[1].creation_fields() == {"name": "triage"}
    assert config.on_open == ActionRule(assign=["needs-review"])
    assert config.rule_for("onApprove") == ActionRule(assign=["approved"], remove=["needs-review"])
    assert config.rule_for("onClose") is None
    assert config.configured_triggers() == ["onOpen", "onApprove"]


def test_missing_file_is_configuration_missing(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationMissing):
        load_config(tmp_path / "nope.yml")


@pytest.mark.parametrize("text", ["", "# only a comment\n", "null\n"])
def test_empty_document_is_configuration_missing(write_config, text: str) -> None:
    with pytest.raises(ConfigurationMissing, match="no configuration"):
        load_config(write_config(text))


def test_invalid_yaml_is_configuration_missing(write_config) -> None:
    with pytest.raises(ConfigurationMissing, match="not valid YAML"):
        load_config(write_config("onOpen: [unclosed\n"))


def test_non_mapping_document_is_rejected(write_config) -> None:
    with pytest.raises(ConfigurationMissing, match="mapping"):
        load_config(write_config("- onOpen\n- onClose\n"))


def test_unknown_trigger_is_rejected(write_config) -> None:
    with pytest.raises(ConfigurationMissing, match="onReopen"):
        load_config(write_config("onReopen:\n  assign: [x]\n"))


def test_set_schema_is_rejected_not_merged() -> None:
    with pytest.raises(ValueError, match="use 'assign'"):
        ActionRule.model_validate({"set": ["approved"], "remove": ["wip"]})


def test_blank_label_names_are_rejected() -> None:
    with pytest.raises(ValueError):
        ActionRule.model_validate({"assign": ["  "]})
    with pytest.raises(ValueError):
        LabelDefinition.model_validate({"name": " "})


def test_label_definition_rejects_unknown_fields_and_bad_colors() -> None:
    with pytest.raises(ValueError):
        LabelDefinition.model_validate({"name": "x", "colour": "ffffff"})
    with pytest.raises(ValueError):
        LabelDefinition.model_validate({"name": "x", "color": "red"})


def test_trigger_with_null_rule_is_treated_as_absent() -> None:
    config = LabelerConfig.model_validate({"onOpen": None, "onMerge": {"assign": ["shipped"]}})
    assert config.rule_for("onOpen") is None
    assert config.configured_triggers() == ["onMerge"]


def test_snake_case_keys_are_rejected() -> None:
    with pytest.raises(ValueError):
        LabelerConfig.model_validate({"on_open": {"assign": ["x"]}})
    with pytest.raises(ValueError):
        LabelerConfig.model_validate({"create_labels": [{"name": "y"}]})


def test_rule_for_unknown_trigger_raises() -> None:
    with pytest.raises(KeyError):
        LabelerConfig().rule_for("onReopen")


def test_trigger_order_is_fixed() -> None:
    assert TRIGGER_ORDER == (
        "onOpen",
        "onReviewPending",
        "onComment",
        "onMerge",
        "onClose",
        "onApprove",
        "onChangeRequest",
    )


def test_example_rule_file_is_valid() -> None:
    example = Path(__file__).resolve().parents[2] / "examples" / "pr-labels.yml"

    config = load_config(example)

    assert config.configured_triggers() == ["onOpen", "onMerge", "onApprove", "onChangeRequest"]
    assert [d.name for d in config.create_labels] == [
        "needs-review",
        "changes-requested",
        "approved",
        "shipped",
    ]
