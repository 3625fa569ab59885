"""Database Package - declarative Base shared by every ORM model.

Invariants:
    - Engines and sessions live in infrastructure/database.py, never here
"""
