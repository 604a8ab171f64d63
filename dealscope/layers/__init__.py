"""
Architecture layers:
- data_ingestion: CRM exports, transcripts and the session audit log
- intelligence: model prompts, output schemas and the inference gateway
- orchestration: pending suggestions and their reconciliation into state
"""
