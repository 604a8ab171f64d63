"""
Reconciliation Engine - Human-in-the-Loop CRM Changes

Accepting a suggestion is the only way AI output changes the deal model after
the dashboard analysis. The engine:
- Applies accepted updates to the deal model (raw rows are left as ingested)
- Creates accepted deals in the deal model and the row store together,
  under one fresh negative id
- Removes every decided suggestion from the suggestion set
- Records each decision in the session audit log

Decisions on suggestions that are no longer pending are no-ops, which makes
accept and reject idempotent. An update only counts as pending while its
changes match the stored suggestion for that deal, so a copy kept from an
earlier analysis is skipped, and the stored, intake-filtered changes are the
ones applied.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ...core.deal_model import DealModel
from ...core.entities import (
    CREATED_FROM_TRANSCRIPT_INSIGHT,
    CREATED_FROM_TRANSCRIPT_SOURCE,
    SOURCE_KEY,
    Deal,
    DealField,
)
from ...core.log import get_logger
from ...core.row_store import RowStore
from ..data_ingestion.event_schema import EventBuilder, EventStore
from ..intelligence.schemas import CreationSuggestion, Suggestion, UpdateSuggestion
from .suggestion_set import SuggestionSet

logger = get_logger(__name__)


class DecisionStatus(Enum):
    """What happened to a suggestion."""
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    SKIPPED = "skipped"     # no longer pending


@dataclass(frozen=True)
class ReconciliationOutcome:
    """Informational result of an accept or reject call."""
    status: DecisionStatus
    kind: str                       # "update" or "create"
    row_id: Optional[int] = None
    suggestion_id: Optional[str] = None
    applied: bool = False           # deal model changed

    @property
    def skipped(self) -> bool:
        return self.status == DecisionStatus.SKIPPED


class ReconciliationEngine:
    """Merges user-accepted suggestions into the deal model and row store."""

    def __init__(
        self,
        deals: DealModel,
        rows: RowStore,
        suggestions: SuggestionSet,
        events: EventStore = None
    ):
        self._deals = deals
        self._rows = rows
        self._suggestions = suggestions
        self._events = events if events is not None else EventStore()

    def accept(self, suggestion: Suggestion, user_id: str = None) -> ReconciliationOutcome:
        if isinstance(suggestion, UpdateSuggestion):
            outcome = self._accept_update(suggestion)
        else:
            outcome = self._accept_creation(suggestion)
        self._record(outcome, user_id)
        return outcome

    def reject(self, suggestion: Suggestion, user_id: str = None) -> ReconciliationOutcome:
        if isinstance(suggestion, UpdateSuggestion):
            removed = (
                self._is_pending_update(suggestion)
                and self._suggestions.remove_update(suggestion.row_id)
            )
            outcome = ReconciliationOutcome(
                status=DecisionStatus.REJECTED if removed else DecisionStatus.SKIPPED,
                kind="update",
                row_id=suggestion.row_id
            )
        else:
            removed = self._suggestions.remove_creation(suggestion.suggestion_id)
            outcome = ReconciliationOutcome(
                status=DecisionStatus.REJECTED if removed else DecisionStatus.SKIPPED,
                kind="create",
                suggestion_id=suggestion.suggestion_id
            )
        self._record(outcome, user_id)
        return outcome

    def _accept_update(self, suggestion: UpdateSuggestion) -> ReconciliationOutcome:
        if not self._is_pending_update(suggestion):
            return ReconciliationOutcome(DecisionStatus.SKIPPED, "update", row_id=suggestion.row_id)

        # Pending changes were filtered at intake; a missing deal is a no-op
        pending = self._suggestions.get_update(suggestion.row_id)
        applied = self._deals.apply_update(pending.row_id, pending.new_values())
        self._suggestions.remove_update(suggestion.row_id)
        return ReconciliationOutcome(
            DecisionStatus.ACCEPTED, "update", row_id=suggestion.row_id, applied=applied
        )

    def _is_pending_update(self, suggestion: UpdateSuggestion) -> bool:
        """False for decided updates and for copies from an earlier analysis."""
        pending = self._suggestions.get_update(suggestion.row_id)
        return pending is not None and pending.changes == suggestion.changes

    def _accept_creation(self, suggestion: CreationSuggestion) -> ReconciliationOutcome:
        suggestion_id = suggestion.suggestion_id
        pending = self._suggestions.get_creation(suggestion_id)
        if pending is None:
            return ReconciliationOutcome(DecisionStatus.SKIPPED, "create", suggestion_id=suggestion_id)

        draft = pending.deal
        deal = self._deals.new_deal(
            deal_name=draft.deal_name,
            amount=draft.amount,
            stage=draft.stage,
            description=draft.description,
            insight=CREATED_FROM_TRANSCRIPT_INSIGHT,
            taken=self._rows.ids()
        )
        row = self._row_for(deal)

        # Row first: it is the only insert that can refuse the id
        self._rows.insert_front(row, deal.row_id)
        self._deals.insert_front(deal)
        self._suggestions.remove_creation(suggestion_id)
        return ReconciliationOutcome(
            DecisionStatus.ACCEPTED, "create",
            row_id=deal.row_id, suggestion_id=suggestion_id, applied=True
        )

    @staticmethod
    def _row_for(deal: Deal) -> dict[str, str]:
        row = {deal_field.wire_name: deal.get_field(deal_field) for deal_field in DealField}
        row[SOURCE_KEY] = CREATED_FROM_TRANSCRIPT_SOURCE
        return row

    def _record(self, outcome: ReconciliationOutcome, user_id: Optional[str]) -> None:
        logger.info(
            "suggestion_decided",
            kind=outcome.kind,
            status=outcome.status.value,
            row_id=outcome.row_id,
            suggestion_id=outcome.suggestion_id,
            applied=outcome.applied
        )
        builder = (
            EventBuilder()
            .governance(f"{outcome.kind}_{outcome.status.value}")
            .with_payload({"applied": outcome.applied})
            .by_user(user_id)
        )
        if outcome.row_id is not None:
            builder.for_row(outcome.row_id)
        if outcome.suggestion_id is not None:
            builder.for_suggestion(outcome.suggestion_id)
        self._events.append(builder.build())
