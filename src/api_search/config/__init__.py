"""Configuration and factory functions."""

from api_search.config.settings import Settings
from api_search.config.factory import (
    create_browser,
    create_components,
    create_search_engine,
)

__all__ = ["Settings", "create_browser", "create_components", "create_search_engine"]
