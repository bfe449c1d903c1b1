import pytest

from app.demo_data import standard_board_config
from app.services.errors import ConfigError
from app.services.workflow import WorkflowConfig, parse_workflow_config, validate_workflow_config


def codes(problems):
    return sorted(p.code for p in problems)


def test_standard_board_is_clean():
    result = validate_workflow_config(WorkflowConfig.model_validate(standard_board_config()))

    assert result.is_valid
    assert result.errors == []
    assert result.warnings == []


def test_camel_case_document_round_trips():
    config = WorkflowConfig.model_validate(standard_board_config())

    document = config.to_document()

    assert document["columns"][1]["statusIds"] == ["accepted", "in-progress"]
    assert document["statusTransitions"]["pending"] == ["accepted", "rejected"]
    assert WorkflowConfig.model_validate(document) == config


def test_duplicate_ids_are_errors():
    data = standard_board_config()
    data["statuses"].append({"id": "pending", "label": "Again"})
    data["rejectionReasons"].append({"id": "reason-1", "message": "Dup"})
    data["columns"].append({"id": "col-1", "title": "Dup", "statusIds": []})

    result = validate_workflow_config(WorkflowConfig.model_validate(data))

    assert not result.is_valid
    assert codes(result.errors) == ["duplicate_column", "duplicate_rejection_reason", "duplicate_status"]


def test_transition_table_must_reference_statuses():
    data = standard_board_config()
    data["statusTransitions"]["ghost"] = ["pending"]
    data["statusTransitions"]["pending"].append("teleported")

    result = validate_workflow_config(WorkflowConfig.model_validate(data))

    assert codes(result.errors) == ["unknown_status", "unknown_status"]
    paths = {p.path for p in result.errors}
    assert "statusTransitions.ghost" in paths
    assert "statusTransitions.pending[2]" in paths


def test_column_members_must_exist():
    data = standard_board_config()
    data["columns"][2]["statusIds"].append("out-for-delivery")

    result = validate_workflow_config(WorkflowConfig.model_validate(data))

    assert codes(result.errors) == ["unknown_status"]
    assert result.errors[0].path == "columns[2].statusIds[1]"


def test_status_in_two_columns_is_only_a_warning():
    data = standard_board_config()
    data["columns"][2]["statusIds"].append("in-progress")

    result = validate_workflow_config(WorkflowConfig.model_validate(data))

    assert result.is_valid
    assert codes(result.warnings) == ["status_in_multiple_columns"]


def test_status_missing_from_board_is_a_warning():
    data = standard_board_config()
    data["statuses"].append({"id": "on-hold", "label": "On Hold"})

    result = validate_workflow_config(WorkflowConfig.model_validate(data))

    assert result.is_valid
    assert codes(result.warnings) == ["status_not_on_board"]


def test_board_without_pending_warns():
    config = WorkflowConfig.model_validate({
        "statuses": [{"id": "accepted"}],
        "columns": [{"id": "col-1", "statusIds": ["accepted"]}],
    })

    result = validate_workflow_config(config)

    assert result.is_valid
    assert codes(result.warnings) == ["missing_initial_status"]


def test_every_problem_is_reported_at_once():
    data = standard_board_config()
    data["statuses"].append({"id": "accepted"})
    data["statusTransitions"]["accepted"].append("nowhere")
    data["columns"][0]["statusIds"].append("nothing")

    result = validate_workflow_config(WorkflowConfig.model_validate(data))

    assert len(result.errors) == 3
    assert result.to_dict()["valid"] is False


def test_parse_rejects_integrity_errors():
    data = standard_board_config()
    data["statusTransitions"]["pending"].append("teleported")

    with pytest.raises(ConfigError) as exc_info:
        parse_workflow_config(data)

    assert codes(exc_info.value.problems) == ["unknown_status"]


def test_parse_rejects_malformed_documents():
    with pytest.raises(ConfigError) as exc_info:
        parse_workflow_config({"statuses": [{"label": "No id"}]})

    assert {p.code for p in exc_info.value.problems} == {"invalid_structure"}


def test_parse_returns_config():
    config = parse_workflow_config(standard_board_config())

    assert config.status_ids()[0] == "pending"
    assert config.get_column("col-2").status_ids == ["accepted", "in-progress"]
