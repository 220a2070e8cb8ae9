"""
FastAPI dependency exposing the application settings.
"""

from authcore.core.config import AppSettings, get_settings


def get_app_settings() -> AppSettings:
    """Settings as a dependency so routes can be given a test configuration."""
    return get_settings()


__all__ = ["get_app_settings"]
