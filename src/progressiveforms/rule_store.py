"""Disclosure rule files and the built-in rule set."""

from __future__ import annotations

import json
from pathlib import Path
from typing import cast

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError

from progressiveforms import logger
from progressiveforms.disclosure import select_active_rules
from progressiveforms.exceptions import RuleLoadError
from progressiveforms.typing.enums import ConditionOperator, RuleAction
from progressiveforms.typing.models import DisclosureRule, TriggerCondition

_RULES_FILE_VERSION = 1


class RuleFileStore(BaseModel):
    """JSON file holding disclosure rules, with a read-through cache.

    The parsed rules are kept in memory and re-read only when the file's
    modification time changes.
    """

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    path: Path = Field(description="Rules file path.")

    _cached_rules: list[DisclosureRule] | None = PrivateAttr(default=None)
    _cached_mtime_ns: int | None = PrivateAttr(default=None)

    def load(self) -> list[DisclosureRule]:
        """Return all rules in the file.

        Raises:
            RuleLoadError: If the file is missing, unreadable or invalid.

        Returns:
            list[DisclosureRule]: Rules in file order.
        """
        try:
            mtime_ns = self.path.stat().st_mtime_ns
        except OSError as exc:
            raise RuleLoadError(message=f"Cannot read rules file {self.path}: {exc}") from exc

        if self._cached_rules is not None and self._cached_mtime_ns == mtime_ns:
            return list(self._cached_rules)

        rules = parse_rules_payload(_read_json(self.path))
        self._cached_rules = rules
        self._cached_mtime_ns = mtime_ns
        logger.info("Disclosure rules loaded", extra={"rules_path": str(self.path), "rules": len(rules)})
        return list(rules)

    def active_rules(self, scheme_id: str | None = None) -> list[DisclosureRule]:
        """Return active global and scheme rules by descending priority."""
        return select_active_rules(self.load(), scheme_id)

    def save(self, rules: list[DisclosureRule]) -> Path:
        """Write rules to the file in the versioned envelope.

        Args:
            rules (list[DisclosureRule]): Rules to persist.

        Returns:
            Path: Written file path.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(dump_rules(rules), encoding="utf-8")
        self.invalidate()
        logger.info("Disclosure rules saved", extra={"rules_path": str(self.path), "rules": len(rules)})
        return self.path

    def invalidate(self) -> None:
        """Drop the cached rules."""
        self._cached_rules = None
        self._cached_mtime_ns = None


def dump_rules(rules: list[DisclosureRule]) -> str:
    """Serialize rules to the versioned JSON envelope read by `parse_rules_payload`."""
    envelope = {
        "rules_file_version": _RULES_FILE_VERSION,
        "rules": [rule.model_dump(mode="json") for rule in rules],
    }
    return json.dumps(envelope, indent=2, sort_keys=True)


def parse_rules_payload(payload: object) -> list[DisclosureRule]:
    """Validate a decoded rules document.

    A bare JSON list of rules is accepted as well as the versioned envelope.

    Args:
        payload (object): Decoded JSON.

    Raises:
        RuleLoadError: If the payload shape or any rule is invalid.

    Returns:
        list[DisclosureRule]: Validated rules.
    """
    raw_rules: object = payload
    if isinstance(payload, dict):
        envelope = cast("dict[str, object]", payload)
        version = envelope.get("rules_file_version", _RULES_FILE_VERSION)
        if version != _RULES_FILE_VERSION:
            raise RuleLoadError(message=f"Unsupported rules_file_version: {version!r}")
        raw_rules = envelope.get("rules")
    if not isinstance(raw_rules, list):
        raise RuleLoadError(message="Rules payload must be a JSON list or an object with a 'rules' list")

    rules: list[DisclosureRule] = []
    for index, raw_rule in enumerate(raw_rules):
        try:
            rules.append(DisclosureRule.model_validate(raw_rule))
        except ValidationError as exc:
            raise RuleLoadError(message=f"Invalid disclosure rule at index {index}: {exc}") from exc
    return rules


def _read_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise RuleLoadError(message=f"Cannot parse rules file {path}: {exc}") from exc


def _seed_rule(
    name: str,
    trigger_field: str,
    operator: ConditionOperator,
    value: object,
    targets: list[str],
    priority: int,
    description: str,
) -> DisclosureRule:
    return DisclosureRule(
        id=name.lower().replace(" ", "-"),
        rule_name=name,
        trigger_field=trigger_field,
        trigger_condition=TriggerCondition(operator=operator, value=value),
        target_fields=targets,
        action=RuleAction.SHOW,
        priority=priority,
        metadata={"description": description},
    )


def default_rules() -> list[DisclosureRule]:
    """Return the global rules shipped with the package."""
    return [
        _seed_rule(
            "Research Project Fields",
            "project_type",
            ConditionOperator.EQUALS,
            "research",
            ["methodology", "research_team", "publications_plan"],
            100,
            "Show research-specific fields when project type is research",
        ),
        _seed_rule(
            "Commercial Project Fields",
            "project_type",
            ConditionOperator.EQUALS,
            "commercial",
            ["market_analysis", "revenue_model", "competitive_advantage"],
            100,
            "Show commercial fields for business projects",
        ),
        _seed_rule(
            "Large Budget Fields",
            "requested_amount",
            ConditionOperator.GREATER_THAN,
            100000,
            ["detailed_budget", "financial_management", "audit_requirements"],
            90,
            "Show detailed financial fields for large budget requests",
        ),
        _seed_rule(
            "Partnership Fields",
            "has_partners",
            ConditionOperator.EQUALS,
            True,  # noqa: FBT003
            ["partner_details", "collaboration_agreement", "ip_management"],
            95,
            "Show partnership fields when collaboration is involved",
        ),
        _seed_rule(
            "Environmental Impact",
            "project_category",
            ConditionOperator.CONTAINS,
            "environment",
            ["environmental_impact", "sustainability_metrics", "carbon_footprint"],
            85,
            "Show environmental fields for green projects",
        ),
    ]
