import pytest

from dealscope.core.deal_model import DealModel
from dealscope.core.entities import ROW_ID_KEY, Deal
from dealscope.core.row_store import RowStore
from dealscope.errors import DuplicateRowId
from dealscope.layers.data_ingestion.event_schema import EventCategory, EventStore
from dealscope.layers.intelligence.schemas import CreationSuggestion, UpdateSuggestion
from dealscope.layers.orchestration.reconciliation import DecisionStatus, ReconciliationEngine
from dealscope.layers.orchestration.suggestion_set import SuggestionSet


@pytest.fixture
def rows():
    return RowStore.ingest([
        {"Name": "Acme", "Stage": "Negotiation"},
        {"Name": "Globex", "Stage": "Prospecting"},
    ])


@pytest.fixture
def deals():
    return DealModel([
        Deal(row_id=0, deal_name="Acme", amount="$15,000", stage="Negotiation"),
        Deal(row_id=1, deal_name="Globex", amount="$800", stage="Prospecting"),
    ])


@pytest.fixture
def suggestions():
    suggestion_set = SuggestionSet()
    suggestion_set.initialize(
        [UpdateSuggestion.model_validate({
            "rowId": 0,
            "dealName": "Acme",
            "changes": {"stage": {"oldValue": "Negotiation", "newValue": "Closed Won"}},
            "reasoning": "signed"
        })],
        [CreationSuggestion.model_validate({
            "deal": {"dealName": "Umbrella", "amount": "$5,000", "stage": "Qualification",
                     "description": "Analytics add-on"},
            "reasoning": "not in CRM"
        })]
    )
    return suggestion_set


@pytest.fixture
def events():
    return EventStore()


@pytest.fixture
def engine(deals, rows, suggestions, events):
    return ReconciliationEngine(deals, rows, suggestions, events)


def test_accept_update_patches_deal_only(engine, deals, rows, suggestions):
    outcome = engine.accept(suggestions.get_update(0))

    assert outcome.status == DecisionStatus.ACCEPTED
    assert outcome.applied
    assert deals.get(0).stage == "Closed Won"
    assert rows.lookup(0)["Stage"] == "Negotiation"
    assert not suggestions.has_update(0)


def test_accept_update_twice_is_noop(engine, deals, suggestions):
    update = suggestions.get_update(0)
    engine.accept(update)
    deals.get(0).stage = "Edited"

    outcome = engine.accept(update)

    assert outcome.skipped
    assert deals.get(0).stage == "Edited"


def test_accept_update_for_missing_deal_removes_suggestion(rows, suggestions, events):
    engine = ReconciliationEngine(DealModel([]), rows, suggestions, events)

    outcome = engine.accept(suggestions.get_update(0))

    assert outcome.status == DecisionStatus.ACCEPTED
    assert not outcome.applied
    assert not suggestions.has_update(0)


def test_accept_creation_inserts_deal_and_row(engine, deals, rows, suggestions):
    creation = suggestions.get_creation("sugg-1")

    outcome = engine.accept(creation)

    assert outcome.status == DecisionStatus.ACCEPTED
    assert outcome.row_id == -1
    new_deal = deals[0]
    assert new_deal.row_id == -1
    assert new_deal.deal_name == "Umbrella"
    assert new_deal.insight == "Newly created from transcript analysis."
    assert rows[0] == {
        "dealName": "Umbrella",
        "amount": "$5,000",
        "stage": "Qualification",
        "insight": "Newly created from transcript analysis.",
        "description": "Analytics add-on",
        "source": "Created from Transcript",
        ROW_ID_KEY: "-1"
    }
    assert suggestions.creations == []


def test_accept_creation_twice_creates_one_deal(engine, deals, suggestions):
    creation = suggestions.get_creation("sugg-1")

    engine.accept(creation)
    outcome = engine.accept(creation)

    assert outcome.skipped
    assert len(deals) == 3


def test_created_ids_avoid_row_store_ids(deals, rows, suggestions, events):
    rows.insert_front({"Name": "legacy"}, -1)
    engine = ReconciliationEngine(deals, rows, suggestions, events)

    outcome = engine.accept(suggestions.get_creation("sugg-1"))

    assert outcome.row_id == -2
    assert rows.lookup(-2)["dealName"] == "Umbrella"


def test_failed_creation_changes_nothing(deals, rows, suggestions, events, monkeypatch):
    def refuse(row, row_id):
        raise DuplicateRowId("taken")

    monkeypatch.setattr(rows, "insert_front", refuse)
    engine = ReconciliationEngine(deals, rows, suggestions, events)

    with pytest.raises(DuplicateRowId):
        engine.accept(suggestions.get_creation("sugg-1"))

    assert len(deals) == 2
    assert suggestions.has_creation("sugg-1")


def test_reject_removes_without_applying(engine, deals, rows, suggestions):
    engine.reject(suggestions.get_update(0))
    outcome = engine.reject(suggestions.get_creation("sugg-1"))

    assert outcome.status == DecisionStatus.REJECTED
    assert deals.get(0).stage == "Negotiation"
    assert len(deals) == 2
    assert len(rows) == 2
    assert suggestions.is_empty()


def test_reject_twice_is_skipped(engine, suggestions):
    update = suggestions.get_update(0)

    engine.reject(update)

    assert engine.reject(update).skipped


def test_decisions_are_audited(engine, suggestions, events):
    engine.accept(suggestions.get_update(0), user_id="dana")
    engine.reject(suggestions.get_creation("sugg-1"), user_id="dana")

    governance = events.query(category=EventCategory.GOVERNANCE)
    assert [e.event_type for e in governance] == ["create_rejected", "update_accepted"]
    assert all(e.actor_type == "user" and e.actor_id == "dana" for e in governance)
    assert events.get_by_type("update_accepted")[0].row_id == 0
    assert events.get_by_type("create_rejected")[0].suggestion_id == "sugg-1"
