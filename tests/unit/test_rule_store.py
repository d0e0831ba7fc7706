from __future__ import annotations

import json
import os
from typing import TYPE_CHECKING

import pytest

from progressiveforms import rule_store
from progressiveforms.exceptions import RuleLoadError
from progressiveforms.rule_store import RuleFileStore, default_rules, dump_rules, parse_rules_payload
from progressiveforms.typing.enums import ConditionOperator, RuleAction

if TYPE_CHECKING:
    from pathlib import Path


_CAMEL_RULE = {
    "id": "r-camel",
    "grantSchemeId": "horizon",
    "ruleName": "Camel",
    "triggerField": "project_type",
    "triggerCondition": {"operator": "equals", "value": "research"},
    "targetFields": ["methodology"],
    "action": "require",
    "priority": 3,
    "isActive": True,
}


def test_parse_rules_payload_accepts_bare_list_with_camel_case_keys() -> None:
    rules = parse_rules_payload([_CAMEL_RULE])

    assert rules[0].grant_scheme_id == "horizon"
    assert rules[0].action == RuleAction.REQUIRE
    assert rules[0].trigger_condition.operator == ConditionOperator.EQUALS


def test_parse_rules_payload_accepts_envelope() -> None:
    rules = parse_rules_payload({"rules_file_version": 1, "rules": [_CAMEL_RULE]})
    assert [rule.id for rule in rules] == ["r-camel"]


def test_dump_rules_writes_the_envelope_parse_accepts() -> None:
    payload = json.loads(dump_rules(default_rules()))

    assert payload["rules_file_version"] == 1
    assert [rule.id for rule in parse_rules_payload(payload)] == [rule.id for rule in default_rules()]


def test_parse_rules_payload_rejects_unknown_version() -> None:
    with pytest.raises(RuleLoadError, match="rules_file_version"):
        parse_rules_payload({"rules_file_version": 2, "rules": []})


def test_parse_rules_payload_rejects_non_list() -> None:
    with pytest.raises(RuleLoadError, match="JSON list"):
        parse_rules_payload({"rules": "nope"})


@pytest.mark.parametrize(
    "override",
    [
        {"triggerCondition": {"operator": "matches", "value": 1}},
        {"triggerField": " "},
        {"triggerField": "budget..total"},
        {"targetFields": []},
        {"targetFields": ["ok", "  "]},
        {"action": "explode"},
    ],
)
def test_invalid_rules_fail_at_load_time(override: dict[str, object]) -> None:
    with pytest.raises(RuleLoadError, match="index 0"):
        parse_rules_payload([{**_CAMEL_RULE, **override}])


def test_save_then_load_round_trip(tmp_path: Path) -> None:
    store = RuleFileStore(path=tmp_path / "rules" / "disclosure_rules.json")

    store.save(default_rules())
    payload = json.loads(store.path.read_text(encoding="utf-8"))
    loaded = store.load()

    assert payload["rules_file_version"] == 1
    assert [rule.id for rule in loaded] == [rule.id for rule in default_rules()]


def test_load_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(RuleLoadError, match="Cannot read rules file"):
        RuleFileStore(path=tmp_path / "absent.json").load()


def test_load_invalid_json_raises(tmp_path: Path) -> None:
    path = tmp_path / "rules.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(RuleLoadError, match="Cannot parse rules file"):
        RuleFileStore(path=path).load()


def test_load_is_cached_until_file_changes(tmp_path: Path, mocker) -> None:
    path = tmp_path / "rules.json"
    path.write_text(json.dumps([_CAMEL_RULE]), encoding="utf-8")
    store = RuleFileStore(path=path)
    spy = mocker.spy(rule_store, "_read_json")

    store.load()
    store.load()
    assert spy.call_count == 1

    path.write_text(json.dumps([{**_CAMEL_RULE, "id": "changed"}]), encoding="utf-8")
    stat = path.stat()
    os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000_000))

    assert [rule.id for rule in store.load()] == ["changed"]
    assert spy.call_count == 2


def test_active_rules_filters_and_orders(tmp_path: Path) -> None:
    store = RuleFileStore(path=tmp_path / "rules.json")
    store.save(default_rules())

    ordered = store.active_rules()

    assert [rule.priority for rule in ordered] == sorted((rule.priority for rule in ordered), reverse=True)
    assert store.active_rules("horizon") == ordered


def test_default_rules_seed_the_known_sections() -> None:
    rules = {rule.id: rule for rule in default_rules()}

    assert set(rules) == {
        "research-project-fields",
        "commercial-project-fields",
        "large-budget-fields",
        "partnership-fields",
        "environmental-impact",
    }
    assert rules["large-budget-fields"].trigger_condition.value == 100000
    assert rules["partnership-fields"].trigger_condition.value is True
    assert all(rule.action == RuleAction.SHOW for rule in rules.values())
