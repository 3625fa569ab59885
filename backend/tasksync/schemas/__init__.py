"""Pydantic Schemas - request/response contracts for the HTTP API.

Invariants:
    - Schemas shape the wire (camelCase aliases); business validation stays in
      core/task_rules.py so every caller gets the same rules

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
