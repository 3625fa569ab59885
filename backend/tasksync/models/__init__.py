"""ORM Models - SQLAlchemy declarative models for users and tasks.

Invariants:
    - All models inherit from Base (db/base.py)
    - User is the owner aggregate; every Task is scoped by owner_id

Design Decisions:
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from tasksync.models.user import User  # noqa: F401
from tasksync.models.task import Task  # noqa: F401
