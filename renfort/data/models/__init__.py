"""
Pydantic data models and schemas for Renfort.

This module provides all data models used throughout the application,
including database documents, embedded models, and request/response schemas.
"""

# Base models
from .base import BaseDocument, EmbeddedModel, PyObjectId, TimestampMixin

# Mission models
from .mission import Mission, MissionCreate

# User / profile models
from .talent import AvailabilitySlot, CandidateProfile, Diploma, User

# Application models
from .application import MissionApplication, MissionWithApplications

# Matching schemas
from .match import FindCandidatesOptions, MatchingResult, MatchResult

__all__ = [
    # Base
    "BaseDocument",
    "EmbeddedModel",
    "PyObjectId",
    "TimestampMixin",
    # Mission
    "Mission",
    "MissionCreate",
    # User
    "AvailabilitySlot",
    "CandidateProfile",
    "Diploma",
    "User",
    # Application
    "MissionApplication",
    "MissionWithApplications",
    # Matching
    "FindCandidatesOptions",
    "MatchingResult",
    "MatchResult",
]
