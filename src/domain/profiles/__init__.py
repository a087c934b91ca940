"""Profile entity and persistence."""

from src.domain.profiles.models import Profile
from src.domain.profiles.repository import ProfileRepository, get_profile_repository

__all__ = ["Profile", "ProfileRepository", "get_profile_repository"]
