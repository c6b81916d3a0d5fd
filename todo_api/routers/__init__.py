"""
FastAPI routers grouped by domain (account, to-do lists/items).

Each module exposes APIRouter objects included by ``create_app()``.
Routers translate service exceptions into status codes and JSON bodies.
"""
