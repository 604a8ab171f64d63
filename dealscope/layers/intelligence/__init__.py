"""
Layer 2: Intelligence Layer

LLM inference:
- CRM export analysis (summary, KPIs, charts, deals)
- Meeting transcript analysis (per-meeting summary, sentiment, action items,
  risks, follow-up email) and CRM change suggestions

Structured outputs:
- Pydantic schemas for every payload, embedded in the prompt as JSON Schema
- Explicit required-field checks and schema validation of every response
"""

from .schemas import (
    Kpi,
    Chart,
    ChartDataItem,
    DealRecord,
    DashboardAnalysis,
    Sentiment,
    MeetingAnalysis,
    FieldChange,
    UpdateSuggestion,
    DealDraft,
    CreationSuggestion,
    Suggestion,
    TranscriptAnalysis
)
from .gateway import InferenceClient, InferenceGateway, LangChainInferenceClient

__all__ = [
    "Kpi",
    "Chart",
    "ChartDataItem",
    "DealRecord",
    "DashboardAnalysis",
    "Sentiment",
    "MeetingAnalysis",
    "FieldChange",
    "UpdateSuggestion",
    "DealDraft",
    "CreationSuggestion",
    "Suggestion",
    "TranscriptAnalysis",
    "InferenceClient",
    "InferenceGateway",
    "LangChainInferenceClient"
]
