"""
Suggestion Set - Pending CRM Changes

Holds the update and creation suggestions of the latest transcript analysis
until the user accepts or rejects them. The set is replaced by every new
analysis and afterwards only shrinks.

Identity:
- Update suggestions are keyed by the row_id of their target deal; at most
  one pending update per deal (later duplicates are dropped on intake)
- Creation suggestions get a suggestion_id from a per-set counter, unique
  for the lifetime of the set instance
"""

from itertools import count
from typing import Iterable, Optional

from ...core.entities import DealField
from ...core.log import get_logger
from ...errors import UnknownDealField
from ..intelligence.schemas import CreationSuggestion, UpdateSuggestion

logger = get_logger(__name__)


class SuggestionSet:
    """Pending update and creation suggestions, in model order."""

    def __init__(self):
        self._updates: dict[int, UpdateSuggestion] = {}
        self._creations: dict[str, CreationSuggestion] = {}
        self._ids = count(1)

    def initialize(
        self,
        updates: Iterable[UpdateSuggestion],
        creations: Iterable[CreationSuggestion]
    ) -> None:
        """Replace the content with the suggestions of a new analysis."""
        self._updates = {}
        for update in updates:
            update = self._known_fields_only(update)
            if update is None:
                continue
            if update.row_id in self._updates:
                logger.warning("duplicate_update_dropped", row_id=update.row_id)
                continue
            self._updates[update.row_id] = update

        self._creations = {}
        for creation in creations:
            suggestion_id = f"sugg-{next(self._ids)}"
            self._creations[suggestion_id] = creation.model_copy(
                update={"suggestion_id": suggestion_id}
            )

    def _known_fields_only(self, update: UpdateSuggestion) -> Optional[UpdateSuggestion]:
        """Drop changes to fields deals do not have; None if nothing is left."""
        changes = {}
        for name, change in update.changes.items():
            try:
                DealField.parse(name)
            except UnknownDealField:
                logger.warning("unknown_field_dropped", row_id=update.row_id, field=name)
                continue
            changes[name] = change
        if not changes:
            return None
        if len(changes) == len(update.changes):
            return update
        return update.model_copy(update={"changes": changes})

    @property
    def updates(self) -> list[UpdateSuggestion]:
        return list(self._updates.values())

    @property
    def creations(self) -> list[CreationSuggestion]:
        return list(self._creations.values())

    def get_update(self, row_id: int) -> Optional[UpdateSuggestion]:
        return self._updates.get(row_id)

    def get_creation(self, suggestion_id: str) -> Optional[CreationSuggestion]:
        return self._creations.get(suggestion_id)

    def has_update(self, row_id: int) -> bool:
        return row_id in self._updates

    def has_creation(self, suggestion_id: Optional[str]) -> bool:
        return suggestion_id in self._creations

    def remove_update(self, row_id: int) -> bool:
        """Remove the pending update for row_id. Absent ids are a no-op."""
        return self._updates.pop(row_id, None) is not None

    def remove_creation(self, suggestion_id: Optional[str]) -> bool:
        """Remove a pending creation. Absent ids are a no-op."""
        return self._creations.pop(suggestion_id, None) is not None

    def is_empty(self) -> bool:
        return not self._updates and not self._creations

    def __len__(self) -> int:
        return len(self._updates) + len(self._creations)
