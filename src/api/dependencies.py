"""Request-scoped accessors for application state."""

from fastapi import Request

from src.config import Settings, get_settings
from src.services.admission_pipeline import AdmissionPipeline


def get_app_settings(request: Request) -> Settings:
    """Settings the application was built with, falling back to the environment."""
    settings = getattr(request.app.state, "settings", None)
    return settings or get_settings()


def get_admission_pipeline(request: Request) -> AdmissionPipeline:
    """Pipeline assembled at startup from settings, engine and database handle."""
    return request.app.state.admission_pipeline
