"""Disclosure rule models."""

from __future__ import annotations

from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from progressiveforms.typing.enums import ConditionLogic, ConditionOperator, RuleAction


class TriggerCondition(BaseModel):
    """Predicate evaluated against a trigger field value."""

    model_config = ConfigDict(extra="forbid")

    operator: ConditionOperator
    value: Any = None
    logic: ConditionLogic | None = None


class DisclosureRule(BaseModel):
    """Conditional visibility instruction for a set of fields.

    Rules accept both snake_case and camelCase keys so that exports from
    the admin tooling load without conversion.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True, alias_generator=to_camel)

    id: str = Field(default_factory=lambda: str(uuid4()))
    grant_scheme_id: str | None = None
    rule_name: str = Field(min_length=1)
    trigger_field: str
    trigger_condition: TriggerCondition
    target_fields: list[str] = Field(min_length=1)
    action: RuleAction
    priority: int = 0
    is_active: bool = True
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("trigger_field")
    @classmethod
    def _validate_trigger_field(cls, value: str) -> str:
        """Reject blank or malformed dot paths.

        Args:
            value (str): Raw trigger path.

        Raises:
            ValueError: If the path is blank or has an empty segment.

        Returns:
            str: Stripped trigger path.
        """
        stripped = value.strip()
        if not stripped or any(not part for part in stripped.split(".")):
            raise ValueError("trigger_field must be a non-empty dot path")  # noqa: TRY003
        return stripped

    @field_validator("target_fields")
    @classmethod
    def _validate_target_fields(cls, value: list[str]) -> list[str]:
        """Strip target names and reject blanks.

        Args:
            value (list[str]): Raw target field names.

        Raises:
            ValueError: If a target name is blank.

        Returns:
            list[str]: Stripped target field names.
        """
        cleaned = [name.strip() for name in value]
        if any(not name for name in cleaned):
            raise ValueError("target_fields must not contain blank names")  # noqa: TRY003
        return cleaned
