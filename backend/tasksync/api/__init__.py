"""API Layer - FastAPI routes, dependencies and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return structured JSON responses; the stream speaks JSON frames

Design Decisions:
    - Thin routes delegate to services
"""
