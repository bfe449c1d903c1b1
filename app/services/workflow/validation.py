"""
Board Config Validation

Pure checks run before a board template is saved. Every problem is
collected so the admin UI can show them all at once:

    result = validate_workflow_config(config)
    if not result.is_valid:
        raise ConfigError(result.errors)

Errors block the save; warnings describe configs the board tolerates
(a status shown in two columns, a status not shown at all).
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Union

from pydantic import ValidationError

from app.services.errors import ConfigError, ConfigProblem
from app.services.workflow.workflow_schemas import (
    BUILTIN_FINAL_STATUSES,
    PENDING,
    WorkflowConfig,
)


@dataclass
class ValidationResult:
    """Outcome of validating one config."""
    errors: list[ConfigProblem] = field(default_factory=list)
    warnings: list[ConfigProblem] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {
            "valid": self.is_valid,
            "errors": [p.to_dict() for p in self.errors],
            "warnings": [p.to_dict() for p in self.warnings],
        }


def _duplicates(values: list[str]) -> list[str]:
    return [value for value, count in Counter(values).items() if count > 1]


def validate_workflow_config(config: WorkflowConfig) -> ValidationResult:
    """Check referential integrity and uniqueness of a board config."""
    result = ValidationResult()
    known = set(config.status_ids())

    for status_id in _duplicates(config.status_ids()):
        result.errors.append(ConfigProblem(
            code="duplicate_status",
            message=f"Status id '{status_id}' is defined more than once",
            path="statuses",
        ))

    for reason_id in _duplicates([r.id for r in config.rejection_reasons]):
        result.errors.append(ConfigProblem(
            code="duplicate_rejection_reason",
            message=f"Rejection reason id '{reason_id}' is defined more than once",
            path="rejectionReasons",
        ))

    for column_id in _duplicates([c.id for c in config.columns]):
        result.errors.append(ConfigProblem(
            code="duplicate_column",
            message=f"Column id '{column_id}' is defined more than once",
            path="columns",
        ))

    # Transition table: keys and destinations must be real statuses
    for source, targets in config.status_transitions.items():
        if source not in known:
            result.errors.append(ConfigProblem(
                code="unknown_status",
                message=f"Transition source '{source}' is not a defined status",
                path=f"statusTransitions.{source}",
            ))
        for index, target in enumerate(targets):
            if target not in known:
                result.errors.append(ConfigProblem(
                    code="unknown_status",
                    message=f"Transition '{source}' -> '{target}' targets an undefined status",
                    path=f"statusTransitions.{source}[{index}]",
                ))

    # Columns: members must exist; a status belongs on at most one column
    placed: dict[str, str] = {}
    for col_index, column in enumerate(config.columns):
        for index, status_id in enumerate(column.status_ids):
            if status_id not in known:
                result.errors.append(ConfigProblem(
                    code="unknown_status",
                    message=f"Column '{column.title or column.id}' lists undefined status '{status_id}'",
                    path=f"columns[{col_index}].statusIds[{index}]",
                ))
                continue
            if status_id in placed:
                result.warnings.append(ConfigProblem(
                    code="status_in_multiple_columns",
                    message=(
                        f"Status '{status_id}' appears in columns "
                        f"'{placed[status_id]}' and '{column.id}'; the first one is used"
                    ),
                    path=f"columns[{col_index}].statusIds[{index}]",
                ))
            else:
                placed[status_id] = column.id

    # completed / rejected have their own toggled columns
    for status_id in config.status_ids():
        if status_id not in placed and status_id not in BUILTIN_FINAL_STATUSES:
            result.warnings.append(ConfigProblem(
                code="status_not_on_board",
                message=f"Status '{status_id}' is not in any column; its orders are not shown",
                path="columns",
            ))

    if PENDING not in known:
        result.warnings.append(ConfigProblem(
            code="missing_initial_status",
            message=f"New orders start in '{PENDING}', which this board does not define",
            path="statuses",
        ))

    return result


def parse_workflow_config(data: Union[WorkflowConfig, dict[str, Any]]) -> WorkflowConfig:
    """
    Parse and validate a raw config document.

    Raises:
        ConfigError: On structural (pydantic) or integrity errors
    """
    if isinstance(data, WorkflowConfig):
        config = data
    else:
        try:
            config = WorkflowConfig.model_validate(data)
        except ValidationError as exc:
            raise ConfigError([
                ConfigProblem(
                    code="invalid_structure",
                    message=err["msg"],
                    path=".".join(str(part) for part in err["loc"]),
                )
                for err in exc.errors()
            ])

    result = validate_workflow_config(config)
    if not result.is_valid:
        raise ConfigError(result.errors)
    return config
