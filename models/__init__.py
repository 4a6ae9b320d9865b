"""Data models and configuration.

Pydantic models and configuration:
- models: Episode and anime page data models
- config: Centralized configuration (Pydantic Settings)
"""

from models.models import AnimePage, Episode
from models.config import Workspace, get_data_path, settings

__all__ = [
    "AnimePage",
    "Episode",
    "Workspace",
    "settings",
    "get_data_path",
]
