from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from progressiveforms.exceptions import RecommendationNotFoundError, SessionNotFoundError
from progressiveforms.store import InMemoryFormStore
from progressiveforms.typing.enums import (
    AIInteractionStatus,
    ConditionOperator,
    InteractionType,
    RecommendationAction,
    RecommendationType,
    RuleAction,
)
from progressiveforms.typing.models import (
    AIInteractionRecord,
    DisclosureRule,
    FieldInteraction,
    FieldRecommendation,
    FieldVisibility,
    FormSession,
    TriggerCondition,
)
from progressiveforms.typing.protocol import FormStore


def _recommendation(rec_id: str, session_id: str = "s1", *, minutes_ago: int = 0) -> FieldRecommendation:
    return FieldRecommendation(
        id=rec_id,
        session_id=session_id,
        field_name="methodology",
        recommendation_type=RecommendationType.SHOW_NEXT,
        confidence_score=0.8,
        ai_model_used="gpt-4o-mini",
        shown_at=datetime(2026, 1, 1, tzinfo=UTC) - timedelta(minutes=minutes_ago),
    )


def _rule(rule_id: str, priority: int, scheme: str | None = None) -> DisclosureRule:
    return DisclosureRule(
        id=rule_id,
        rule_name=rule_id,
        grant_scheme_id=scheme,
        trigger_field="project_type",
        trigger_condition=TriggerCondition(operator=ConditionOperator.EQUALS, value="research"),
        target_fields=["methodology"],
        action=RuleAction.SHOW,
        priority=priority,
    )


def test_in_memory_store_satisfies_protocol() -> None:
    store: FormStore = InMemoryFormStore()
    assert callable(store.create_session)


def test_session_round_trip_returns_copies() -> None:
    store = InMemoryFormStore()
    store.create_session(FormSession(id="s1", user_id="u1"))

    session = store.get_session("s1")
    assert session is not None
    session.metadata["mutated"] = True

    again = store.get_session("s1")
    assert again is not None
    assert again.metadata == {}
    assert store.get_session("unknown") is None


def test_patch_session_updates_only_supplied_fields() -> None:
    store = InMemoryFormStore()
    store.create_session(FormSession(id="s1", user_id="u1", fields_total=10))

    patched = store.patch_session("s1", {"completion_percentage": 40})

    assert patched.completion_percentage == 40
    assert patched.fields_total == 10
    assert patched.user_id == "u1"


def test_patch_session_unknown_id_raises() -> None:
    with pytest.raises(SessionNotFoundError, match="missing"):
        InMemoryFormStore().patch_session("missing", {"completion_percentage": 1})


def test_interactions_are_appended_in_order_with_generated_ids() -> None:
    store = InMemoryFormStore()
    first = FieldInteraction(session_id="s1", field_name="a", interaction_type=InteractionType.FOCUS)
    second = FieldInteraction(id="given", session_id="s1", field_name="b", interaction_type=InteractionType.BLUR)

    first_id = store.insert_interaction(first)
    second_id = store.insert_interaction(second)

    listed = store.list_interactions("s1")
    assert [item.field_name for item in listed] == ["a", "b"]
    assert listed[0].id == first_id
    assert second_id == "given"
    assert store.list_interactions("other") == []


def test_active_rules_filter_scheme_and_sort_by_priority() -> None:
    store = InMemoryFormStore(rules=[_rule("low", 1), _rule("scheme", 50, scheme="s"), _rule("high", 100)])
    store.add_rule(_rule("other", 75, scheme="t"))

    assert [rule.id for rule in store.get_active_rules()] == ["high", "low"]
    assert [rule.id for rule in store.get_active_rules("s")] == ["high", "scheme", "low"]

    store.replace_rules([_rule("only", 0)])
    assert [rule.id for rule in store.get_active_rules("s")] == ["only"]


def test_visibility_snapshot_is_replaced_not_merged() -> None:
    store = InMemoryFormStore()
    store.replace_visibility_snapshot(
        "s1",
        {"a": FieldVisibility(field_name="a", is_visible=True, is_required=True)},
    )
    store.replace_visibility_snapshot(
        "s1",
        {"b": FieldVisibility(field_name="b", is_visible=True, is_required=False)},
    )

    assert list(store.get_visibility_snapshot("s1")) == ["b"]
    assert store.get_visibility_snapshot("unknown") == {}


def test_pending_recommendations_newest_first_and_exclude_acted() -> None:
    store = InMemoryFormStore()
    store.insert_recommendation(_recommendation("old", minutes_ago=10))
    store.insert_recommendation(_recommendation("new", minutes_ago=1))
    store.insert_recommendation(_recommendation("foreign", session_id="s2"))

    assert [rec.id for rec in store.get_pending_recommendations("s1")] == ["new", "old"]

    previous = store.set_recommendation_action("new", RecommendationAction.ACCEPTED)

    assert previous.user_action is None
    assert [rec.id for rec in store.get_pending_recommendations("s1")] == ["old"]
    stored = store.get_recommendation("new")
    assert stored is not None
    assert stored.user_action == RecommendationAction.ACCEPTED
    assert stored.acted_at is not None


def test_set_recommendation_action_returns_previous_state_on_overwrite() -> None:
    store = InMemoryFormStore()
    store.insert_recommendation(_recommendation("r1"))
    store.set_recommendation_action("r1", RecommendationAction.ACCEPTED)

    previous = store.set_recommendation_action("r1", RecommendationAction.REJECTED)

    assert previous.user_action == RecommendationAction.ACCEPTED
    stored = store.get_recommendation("r1")
    assert stored is not None
    assert stored.user_action == RecommendationAction.REJECTED


def test_set_recommendation_action_unknown_id_raises() -> None:
    with pytest.raises(RecommendationNotFoundError):
        InMemoryFormStore().set_recommendation_action("nope", RecommendationAction.IGNORED)


def test_ai_interactions_are_upserted_by_id() -> None:
    store = InMemoryFormStore()
    record = AIInteractionRecord(id="ai1", session_id="s1", prompt_text="p", model_used="m")
    store.save_ai_interaction(record)
    store.save_ai_interaction(record.model_copy(update={"status": AIInteractionStatus.COMPLETED}))

    records = store.list_ai_interactions("s1")
    assert len(records) == 1
    assert records[0].status == AIInteractionStatus.COMPLETED
