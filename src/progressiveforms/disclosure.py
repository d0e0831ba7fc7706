"""Disclosure rule engine.

Rules are applied in the order they are given. Every matching rule
overwrites the entries of its target fields, so for a given field the last
matching rule wins. Stores hand rules over sorted by descending priority,
which means the lowest-priority match processed last decides the outcome.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from progressiveforms.conditions import evaluate, resolve_path
from progressiveforms.typing.enums import RuleAction, VisibilityReason
from progressiveforms.typing.models import DisclosureRule, FieldVisibility, VisibilityMap

_VISIBLE_ACTIONS = frozenset({RuleAction.SHOW, RuleAction.REQUIRE})


def order_rules_by_priority(rules: Iterable[DisclosureRule]) -> list[DisclosureRule]:
    """Sort rules by descending priority, keeping input order on ties.

    Args:
        rules (Iterable[DisclosureRule]): Rules to order.

    Returns:
        list[DisclosureRule]: Ordered rules.
    """
    return sorted(rules, key=lambda rule: rule.priority, reverse=True)


def applies_to_scheme(rule: DisclosureRule, scheme_id: str | None) -> bool:
    """Return whether a rule is active for a grant scheme.

    Args:
        rule (DisclosureRule): Candidate rule.
        scheme_id (str | None): Requested scheme, None for global rules only.

    Returns:
        bool: True for active global rules and active rules of the scheme.
    """
    if not rule.is_active:
        return False
    return rule.grant_scheme_id is None or rule.grant_scheme_id == scheme_id


def select_active_rules(rules: Iterable[DisclosureRule], scheme_id: str | None = None) -> list[DisclosureRule]:
    """Filter rules for a scheme and order them by descending priority.

    Args:
        rules (Iterable[DisclosureRule]): All known rules.
        scheme_id (str | None): Requested scheme.

    Returns:
        list[DisclosureRule]: Active global and scheme rules, highest priority first.
    """
    return order_rules_by_priority(rule for rule in rules if applies_to_scheme(rule, scheme_id))


def default_visibility(default_fields: Iterable[str]) -> VisibilityMap:
    """Build the seed visibility map.

    Args:
        default_fields (Iterable[str]): Always-present field names.

    Returns:
        VisibilityMap: Every default field visible and required.
    """
    return {
        name: FieldVisibility(
            field_name=name,
            is_visible=True,
            is_required=True,
            visibility_reason=VisibilityReason.DEFAULT,
        )
        for name in default_fields
    }


def rule_matches(rule: DisclosureRule, form_data: Mapping[str, Any]) -> bool:
    """Return whether a rule's trigger condition holds for the form data."""
    return evaluate(resolve_path(form_data, rule.trigger_field), rule.trigger_condition)


def compute_visibility(
    form_data: Mapping[str, Any],
    rules: Iterable[DisclosureRule],
    default_fields: Iterable[str],
    *,
    scheme_id: str | None = None,
) -> VisibilityMap:
    """Derive the visibility of every known field.

    Args:
        form_data (Mapping[str, Any]): Current form values.
        rules (Iterable[DisclosureRule]): Rules in evaluation order.
        default_fields (Iterable[str]): Fields shown and required by default.
        scheme_id (str | None): Grant scheme whose rules apply besides global ones.

    Returns:
        VisibilityMap: Field name to visibility.
    """
    visibility = default_visibility(default_fields)

    for rule in rules:
        if not applies_to_scheme(rule, scheme_id) or not rule_matches(rule, form_data):
            continue
        for field_name in rule.target_fields:
            visibility[field_name] = FieldVisibility(
                field_name=field_name,
                is_visible=rule.action in _VISIBLE_ACTIONS,
                is_required=rule.action == RuleAction.REQUIRE,
                visibility_reason=VisibilityReason.RULE_TRIGGERED,
                rule_id=rule.id,
            )

    return visibility


def partition_visible_fields(visibility: VisibilityMap) -> tuple[list[str], list[str]]:
    """Split visible fields into required and optional names.

    Args:
        visibility (VisibilityMap): Computed visibility.

    Returns:
        tuple[list[str], list[str]]: Required field names, optional field names.
    """
    required = [name for name, entry in visibility.items() if entry.is_visible and entry.is_required]
    optional = [name for name, entry in visibility.items() if entry.is_visible and not entry.is_required]
    return required, optional
