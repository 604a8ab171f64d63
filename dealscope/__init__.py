"""
DealScope

AI-assisted CRM dashboarding: infer KPIs, charts and deals from a CRM export,
analyze meeting transcripts, and reconcile the suggested CRM changes with the
in-memory deal model after human review.
"""

__version__ = "0.1.0"
