"""Services Layer - imperative shell around the pure core.

Invariants:
    - Services receive repositories and the broadcast router by injection
    - Services raise TaskSyncError subclasses; translating them is the API layer's job
"""
