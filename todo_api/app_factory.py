"""Entry point for uvicorn/gunicorn: ``uvicorn todo_api.app_factory:app``."""
from todo_api.app import create_app

app = create_app()

__all__ = ["app", "create_app"]
