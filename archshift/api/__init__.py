"""
HTTP API for archshift.

Provides FastAPI endpoints for:
- Session identity (anonymous or caller-supplied)
- Migration scope (application name, source environment, target region)
- Architecture editing across the source and target diagrams
- Migration kickoff and job listing
"""
