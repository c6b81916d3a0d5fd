"""
Core utilities shared across the to-do API.

This package hosts:
- configuration helpers (env vars, token information, identity policy)
- cross-cutting adapters such as the email sender and password hashing

Routers and services depend on these primitives instead of reading
os.environ or talking to SMTP directly.
"""
