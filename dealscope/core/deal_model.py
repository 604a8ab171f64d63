"""
Deal Model - Normalized Deal Collection

The mutable, AI-populated list of deals behind the dashboard. It is set once
from a dashboard analysis and afterwards only patched by accepted suggestions.

Identity:
- Deals are unique by row_id within the model
- Ingested deals carry the non-negative id of their source row
- Deals created from transcripts get negative ids from a per-model counter
  (-1, -2, ...), so they can never collide with ingestion ids
"""

from typing import Collection, Iterable, Iterator, Mapping, Optional

from .entities import Deal, DealField, NOT_AVAILABLE
from .log import get_logger

logger = get_logger(__name__)


class DealModel:
    """Ordered deal collection keyed by row_id. Order is display order."""

    def __init__(self, deals: Iterable[Deal] = ()):
        self._deals: list[Deal] = []
        self._next_created_id = -1
        self.initialize(deals)

    def initialize(self, deals: Iterable[Deal]) -> None:
        """Replace the collection. Later duplicates of a row_id are dropped."""
        self._deals = []
        seen: set[int] = set()
        for deal in deals:
            if deal.row_id in seen:
                logger.warning("duplicate_deal_dropped", row_id=deal.row_id)
                continue
            seen.add(deal.row_id)
            self._deals.append(deal)

    def get(self, row_id: int) -> Optional[Deal]:
        return next((deal for deal in self._deals if deal.row_id == row_id), None)

    def apply_update(self, row_id: int, changes: Mapping[str, str]) -> bool:
        """
        Overwrite the named fields of the deal with the given row_id.

        Field names are resolved against DealField before anything is
        touched; an unknown name raises UnknownDealField and leaves the deal
        unchanged. A missing deal is a no-op and returns False.
        """
        resolved = [(DealField.parse(name), value) for name, value in changes.items()]

        deal = self.get(row_id)
        if deal is None:
            logger.info("update_target_missing", row_id=row_id)
            return False

        for deal_field, value in resolved:
            deal.set_field(deal_field, value)
        return True

    def allocate_row_id(self, taken: Collection[int] = ()) -> int:
        """Next negative id not used by this model or listed in taken."""
        in_use = {deal.row_id for deal in self._deals}
        row_id = self._next_created_id
        while row_id in in_use or row_id in taken:
            row_id -= 1
        self._next_created_id = row_id - 1
        return row_id

    def new_deal(
        self,
        deal_name: str = NOT_AVAILABLE,
        amount: str = NOT_AVAILABLE,
        stage: str = NOT_AVAILABLE,
        description: str = "",
        insight: str = "",
        taken: Collection[int] = ()
    ) -> Deal:
        """Build a deal under a freshly allocated id without inserting it."""
        return Deal(
            row_id=self.allocate_row_id(taken),
            deal_name=deal_name,
            amount=amount,
            stage=stage,
            insight=insight,
            description=description
        )

    def insert_front(self, deal: Deal) -> None:
        if self.get(deal.row_id) is not None:
            raise ValueError(f"Deal with row_id {deal.row_id} already exists")
        self._deals.insert(0, deal)

    def apply_creation(self, insight: str = "", **fields: str) -> Deal:
        """Create a deal under a new negative id and put it first."""
        deal = self.new_deal(insight=insight, **fields)
        self.insert_front(deal)
        return deal

    def row_ids(self) -> list[int]:
        return [deal.row_id for deal in self._deals]

    def snapshot(self) -> list[dict]:
        """Wire representation of all deals, as sent to the model."""
        return [deal.to_dict() for deal in self._deals]

    def __len__(self) -> int:
        return len(self._deals)

    def __iter__(self) -> Iterator[Deal]:
        return iter(self._deals)

    def __getitem__(self, position: int) -> Deal:
        return self._deals[position]
