"""TaskSync Application Package - real-time, owner-scoped task board backend.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
