"""Entry point for ASGI servers: ``uvicorn workinfo.app_factory:app``."""
from workinfo.app import create_app

app = create_app()

__all__ = ["app", "create_app"]
