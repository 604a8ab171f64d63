"""
Layer 3: Orchestration and Human Review

- Suggestion set: CRM changes proposed by transcript analysis, pending review
- Reconciliation: accept/reject decisions merged into the deal model and
  row store, recorded in the audit log
"""

from .suggestion_set import SuggestionSet
from .reconciliation import DecisionStatus, ReconciliationEngine, ReconciliationOutcome

__all__ = [
    "SuggestionSet",
    "DecisionStatus",
    "ReconciliationEngine",
    "ReconciliationOutcome"
]
