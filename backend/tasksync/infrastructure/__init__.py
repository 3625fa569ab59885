"""Infrastructure Layer - persistence, live connections and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from services/
    - Storage failures surface as DatabaseError; delivery failures are logged, never raised

Design Decisions:
    - Repositories and the connection registry implement core/repository_protocols.py
"""
