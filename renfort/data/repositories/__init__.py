"""
Database repositories for Renfort data access.

This module provides repository classes for all database collections,
implementing the repository pattern for clean data access.
"""

# Base repository
from .base import BaseRepository

# Entity repositories
from .mission_repository import MissionRepository, get_mission_repository
from .talent_repository import TalentRepository, get_talent_repository
from .application_repository import ApplicationRepository, get_application_repository

__all__ = [
    # Base
    "BaseRepository",
    # Mission
    "MissionRepository",
    "get_mission_repository",
    # Talent
    "TalentRepository",
    "get_talent_repository",
    # Application
    "ApplicationRepository",
    "get_application_repository",
]
