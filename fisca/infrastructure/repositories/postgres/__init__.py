"""
PostgreSQL Repository Implementations.

Raw parametrised SQL over psycopg_pool.
"""

from .affiliates import PostgresAffiliateRepository
from .grants import PostgresGrantRepository
from .territory import PostgresHierarchyRepository
from .users import PostgresRoleRepository, PostgresUserRepository

__all__ = [
    "PostgresAffiliateRepository",
    "PostgresGrantRepository",
    "PostgresHierarchyRepository",
    "PostgresRoleRepository",
    "PostgresUserRepository",
]
