"""
Core Deal Entities

The normalized side of the dashboard state. Deals are derived from the raw
CRM rows by inference and then patched in place by accepted suggestions.

Entities:
- Deal: A sales opportunity linked back to its source row by row_id
- DealField: The closed set of deal fields a suggestion may change
- Row: One raw CRM record (column name -> string value)
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict

from ..errors import UnknownDealField


# Reserved column carrying the stringified row id of every raw record
ROW_ID_KEY = "__AI_ROW_ID__"

# Marker placed in the insight of deals created from transcripts
CREATED_FROM_TRANSCRIPT_INSIGHT = "Newly created from transcript analysis."

# Provenance column added to raw rows created from transcripts
SOURCE_KEY = "source"
CREATED_FROM_TRANSCRIPT_SOURCE = "Created from Transcript"

NOT_AVAILABLE = "N/A"

Row = Dict[str, str]


class DealField(str, Enum):
    """Deal fields that can be changed by an update suggestion."""
    DEAL_NAME = "deal_name"
    AMOUNT = "amount"
    STAGE = "stage"
    INSIGHT = "insight"
    DESCRIPTION = "description"

    @property
    def wire_name(self) -> str:
        """camelCase name used by the model and the raw row columns."""
        head, *rest = self.value.split("_")
        return head + "".join(part.capitalize() for part in rest)

    @classmethod
    def parse(cls, name: str) -> "DealField":
        """Resolve a snake_case or camelCase field name.

        Raises UnknownDealField for anything outside the enum, including
        row_id, which is identity and never patchable.
        """
        for member in cls:
            if name == member.value or name == member.wire_name:
                return member
        raise UnknownDealField(name)


@dataclass
class Deal:
    """
    A sales opportunity shown on the dashboard.

    row_id is a non-owning reference to the raw row the deal was derived from.
    Ingested rows have ids >= 0; deals created from transcripts get negative ids.
    """
    row_id: int
    deal_name: str = NOT_AVAILABLE
    amount: str = NOT_AVAILABLE
    stage: str = NOT_AVAILABLE
    insight: str = ""
    description: str = ""

    def set_field(self, deal_field: DealField, value: str) -> None:
        setattr(self, deal_field.value, value)

    def get_field(self, deal_field: DealField) -> str:
        return getattr(self, deal_field.value)

    def to_dict(self) -> dict:
        """Wire (camelCase) representation, as sent back to the model."""
        data = asdict(self)
        return {
            "rowId": data.pop("row_id"),
            **{DealField(key).wire_name: value for key, value in data.items()}
        }
