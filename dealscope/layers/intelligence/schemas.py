"""
Pydantic Schemas for Structured LLM Outputs

These schemas define the expected output structure of each inference task.
The model speaks camelCase JSON; attributes are snake_case with camelCase
aliases, and both spellings are accepted on input. The JSON schema generated
from each top-level model is embedded in the prompt.
"""

from enum import Enum
from typing import ClassVar, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from pydantic.json_schema import SkipJsonSchema

from ...core.entities import Deal, NOT_AVAILABLE


class WireModel(BaseModel):
    """Base for all model-facing payloads."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True
    )

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


# =============================================================================
# Dashboard Schemas
# =============================================================================

class Kpi(WireModel):
    """A key performance indicator derived from the data."""
    model_config = ConfigDict(frozen=True)

    title: str = Field(
        description='The name of the metric, e.g. "Total Revenue", "Average Deal Size"'
    )
    value: str = Field(
        description="The calculated value, formatted as currency, percentage or number"
    )
    insight: str = Field(
        description="A brief insight or comparison for the metric. May be empty",
        default=""
    )


class ChartDataItem(WireModel):
    """One labelled data point of a chart."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(description="The label for a data point, e.g. a category name")
    value: float = Field(description="The numerical value for that data point")


class Chart(WireModel):
    """Data for a bar or pie chart."""
    model_config = ConfigDict(frozen=True)

    chart_type: Literal["bar", "pie"] = Field(
        description='The type of chart. Must be either "bar" or "pie"'
    )
    title: str = Field(
        description='The title of the chart, e.g. "Opportunities by Stage"'
    )
    data: Tuple[ChartDataItem, ...] = Field(
        description="The data points for the chart",
        default=()
    )


class DealRecord(WireModel):
    """A single deal extracted from the CRM data."""
    row_id: int = Field(
        description="The unique '__AI_ROW_ID__' of the CSV row this deal comes from. This MUST be included"
    )
    deal_name: str = Field(description="The name or title of the opportunity")
    amount: str = Field(
        description="The monetary value as a currency string, e.g. '$15,000'. Use 'N/A' if not available"
    )
    stage: str = Field(
        description="The current sales stage, e.g. 'Prospecting', 'Negotiation', 'Closed Won'"
    )
    insight: str = Field(
        description="A one-sentence insight about this specific deal"
    )
    description: str = Field(
        description=(
            "The deal's description. Use the CSV description column when present and non-empty, "
            "otherwise a multi-sentence description generated from the deal's other data"
        )
    )

    def to_deal(self) -> Deal:
        return Deal(
            row_id=self.row_id,
            deal_name=self.deal_name,
            amount=self.amount,
            stage=self.stage,
            insight=self.insight,
            description=self.description
        )


class DashboardAnalysis(WireModel):
    """Structured output for the CRM export analysis."""
    REQUIRED_FIELDS: ClassVar[Tuple[str, ...]] = ("analysisTitle", "kpis", "charts", "deals")

    analysis_title: str = Field(
        description='A concise title for the dashboard, e.g. "Q3 Sales Pipeline Analysis"'
    )
    summary: str = Field(
        description="A 2-3 sentence summary of the key findings and trends in the data",
        default=""
    )
    kpis: List[Kpi] = Field(
        description="3-5 KPIs derived from the data, or an empty list if the data does not allow any"
    )
    charts: List[Chart] = Field(
        description="2-4 bar or pie charts, or an empty list if the data does not allow any"
    )
    deals: List[DealRecord] = Field(
        description="Every individual sales opportunity found in the data"
    )


# =============================================================================
# Transcript Schemas
# =============================================================================

class Sentiment(str, Enum):
    """Client sentiment during a meeting."""
    POSITIVE = "Positive"
    NEUTRAL = "Neutral"
    NEGATIVE = "Negative"
    MIXED = "Mixed"
    UNKNOWN = "Unknown"


class MeetingAnalysis(WireModel):
    """Analysis of one meeting transcript."""
    meeting_title: str = Field(
        description="A descriptive title, e.g. 'Follow-up with Acme Corp' or 'Meeting Transcript 1'"
    )
    summary: str = Field(
        description="A short paragraph on the key discussion points and outcomes"
    )
    sentiment: Sentiment = Field(
        description="The overall sentiment of the client or prospect"
    )
    action_items: List[str] = Field(
        description="Clear, concise action items for the sales team",
        default_factory=list
    )
    risks: List[str] = Field(
        description="Risks, objections or concerns raised by the client",
        default_factory=list
    )
    suggested_follow_up_email: str = Field(
        description="A ready-to-send follow-up email from the salesperson's perspective",
        default=""
    )


class FieldChange(WireModel):
    """Old and new value of one deal field."""
    old_value: str = Field(default="")
    new_value: str


class UpdateSuggestion(WireModel):
    """A proposed change to an existing deal."""
    type: Literal["update"] = Field(
        description="Must be the string 'update'",
        default="update"
    )
    row_id: int = Field(
        description="The 'rowId' of the deal in the provided CRM data that should be updated"
    )
    deal_name: str = Field(
        description="The name of the deal being updated, for user reference"
    )
    changes: Dict[str, FieldChange] = Field(
        description=(
            "Keys are the deal fields to change (dealName, amount, stage, insight, description), "
            "values hold the old and new value"
        )
    )
    reasoning: str = Field(
        description="Why this change is suggested, referencing the transcript"
    )

    def new_values(self) -> Dict[str, str]:
        return {name: change.new_value for name, change in self.changes.items()}


class DealDraft(WireModel):
    """Fields of a deal proposed for creation."""
    deal_name: str = Field(description="The name of the new opportunity")
    amount: str = Field(
        description="The estimated value as a currency string. Use 'N/A' if not mentioned",
        default=NOT_AVAILABLE
    )
    stage: str = Field(
        description="The suggested initial stage, e.g. 'Qualification', 'Prospecting'",
        default=NOT_AVAILABLE
    )
    description: str = Field(
        description="A detailed description of the opportunity, synthesized from the transcript",
        default=""
    )


class CreationSuggestion(WireModel):
    """A proposed new deal. suggestion_id is assigned client-side."""
    type: Literal["create"] = Field(
        description="Must be the string 'create'",
        default="create"
    )
    suggestion_id: SkipJsonSchema[Optional[str]] = None
    deal: DealDraft = Field(description="The details of the new deal to be created")
    reasoning: str = Field(
        description="Why this is a new deal, referencing the transcript"
    )


Suggestion = Union[UpdateSuggestion, CreationSuggestion]


class TranscriptAnalysis(WireModel):
    """Structured output for meeting transcript analysis."""
    REQUIRED_FIELDS: ClassVar[Tuple[str, ...]] = ("meetings", "updates", "creations")

    analysis_title: str = Field(
        description="A concise title for the whole analysis, e.g. 'Analysis of 3 Customer Meetings'",
        default=""
    )
    overall_summary: str = Field(
        description="A 2-3 sentence summary combining the key takeaways of all transcripts",
        default=""
    )
    meetings: List[MeetingAnalysis] = Field(
        description="One analysis per meeting transcript found in the input"
    )
    updates: List[UpdateSuggestion] = Field(
        description="Suggested updates for existing deals. Only deals that require changes"
    )
    creations: List[CreationSuggestion] = Field(
        description="New deals found in the transcripts that are not in the CRM data"
    )
