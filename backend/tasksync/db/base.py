"""SQLAlchemy Declarative Base - metadata root for the users and tasks tables.

Invariants:
    - Every ORM model inherits from Base; Alembic and test fixtures read Base.metadata

Design Decisions:
    - Kept apart from models/ so model modules can import it without cycles
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all TaskSync ORM models."""
    pass
