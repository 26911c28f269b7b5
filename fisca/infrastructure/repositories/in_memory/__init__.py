"""
In-Memory Repository Implementations.

For testing and local development. NOT FOR PRODUCTION.
Data is lost on process restart.
"""

from .affiliates import InMemoryAffiliateRepository
from .grants import InMemoryGrantRepository
from .territory import InMemoryHierarchyRepository
from .users import InMemoryRoleRepository, InMemoryUserRepository

__all__ = [
    "InMemoryAffiliateRepository",
    "InMemoryGrantRepository",
    "InMemoryHierarchyRepository",
    "InMemoryRoleRepository",
    "InMemoryUserRepository",
]
