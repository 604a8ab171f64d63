"""
Use Case Implementations

Deal assistant: CRM export to dashboard, meeting transcripts to reviewed
CRM changes. Deal queries: filtering, sorting and paging of the deal list.
"""

from .deal_assistant import DashboardView, DealAssistantSession, DealDetail, TranscriptView
from .deal_queries import SIZE_BUCKETS, paginate, parse_amount, query_deals, unique_stages

__all__ = [
    "DealAssistantSession",
    "DashboardView",
    "TranscriptView",
    "DealDetail",
    "SIZE_BUCKETS",
    "parse_amount",
    "query_deals",
    "unique_stages",
    "paginate"
]
