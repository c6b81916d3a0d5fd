"""
High-level use cases for the to-do API.

Each service module orchestrates repositories/adapters to implement business
rules (register, sign in, reset password, share a list, etc.).

Routers (FastAPI endpoints) call these services instead of manipulating the
stores directly.
"""
