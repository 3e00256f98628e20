"""API package: provides FastAPI dependencies and route definitions for the application."""

from .dependencies import Services, build_services  # noqa: F401
from .routes import router  # noqa: F401
