"""
Pydantic schemas for API request/response validation.
"""

# Re-export schemas for convenient imports.
from .pagination import PaginatedResponse as PaginatedResponse
from .user import UserCreate as UserCreate
from .user import UserResponse as UserResponse
from .user import UserUpdate as UserUpdate
