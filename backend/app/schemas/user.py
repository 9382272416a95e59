"""
Linkhub Backend: User Schemas
================================

What:  Pydantic models for user profiles and the projections of users that
       appear inside other payloads (post authors, connection lists,
       suggestions).

Projection ladder:
    UserSummary     {id, name, profile_picture}      authors, mutual previews
    ConnectionItem  + headline                       connection lists
    SuggestionItem  + location, skills               "people you may know"
    UserProfile     every profile field              profile pages
"""

import uuid
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Projections
# ══════════════════════════════════════════════════════════════════════════


class UserSummary(BaseModel):
    id: uuid.UUID
    name: str
    profile_picture: str = ""

    model_config = {"from_attributes": True}


class ConnectionItem(UserSummary):
    headline: str = ""


class SuggestionItem(ConnectionItem):
    location: str = ""
    skills: List[str] = Field(default_factory=list)


# ══════════════════════════════════════════════════════════════════════════
# Profile sections
# ══════════════════════════════════════════════════════════════════════════


class ExperienceEntry(BaseModel):
    title: str
    company: str
    start_date: date
    end_date: Optional[date] = None
    description: str = ""


class EducationEntry(BaseModel):
    school: str
    degree: str
    field_of_study: str = ""
    start_date: date
    end_date: Optional[date] = None


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class UserCreate(BaseModel):
    """
    What:  Body of POST /api/users.
    How:   Blank name or email is rejected by UserService with a 400, not by
           Pydantic, so every business rule reports through the same envelope.
    """
    name: str = Field(description="Display name used in notifications")
    email: str = Field(description="Unique email, stored lowercased")
    profile_picture: str = ""
    headline: str = ""
    location: str = ""
    about: str = ""
    skills: List[str] = Field(default_factory=list)
    experience: List[ExperienceEntry] = Field(default_factory=list)
    education: List[EducationEntry] = Field(default_factory=list)


class UserUpdate(BaseModel):
    """Body of PUT /api/users/me; only the fields sent are changed."""
    name: Optional[str] = None
    profile_picture: Optional[str] = None
    headline: Optional[str] = None
    location: Optional[str] = None
    about: Optional[str] = None
    skills: Optional[List[str]] = None
    experience: Optional[List[ExperienceEntry]] = None
    education: Optional[List[EducationEntry]] = None


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class UserProfile(BaseModel):
    """Full profile, returned by the /api/users endpoints."""
    id: uuid.UUID
    name: str
    email: str
    profile_picture: str
    headline: str
    location: str
    about: str
    skills: List[str]
    experience: List[ExperienceEntry]
    education: List[EducationEntry]
    connections_count: int = Field(description="Number of users this user follows")
    created_at: datetime
    updated_at: datetime
