"""
Services package for the User Directory API.

Holds the business contracts the API exposes ("exists or fail" lookups,
paginated search) on top of the repository layer.
"""

from app.services.user_service import UserService

__all__ = ["UserService"]
