"""
Persistence adapters.

User and role stores, plus the to-do list/item repositories. Services depend
on these instead of touching SQLAlchemy sessions directly.
"""
