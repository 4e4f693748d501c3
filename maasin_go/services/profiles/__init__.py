from maasin_go.services.profiles.repository import ProfileRepository
from maasin_go.services.profiles.service import ProfileService

__all__ = ["ProfileRepository", "ProfileService"]
