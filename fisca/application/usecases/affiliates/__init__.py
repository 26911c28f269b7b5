"""
===============================================================================
AFFILIATE USE CASES PACKAGE (Public API / Exports)
===============================================================================
"""

from __future__ import annotations

from .add_affiliate_member import AddAffiliateMemberUseCase
from .affiliate_results import (
    AffiliateEdgeResult,
    AffiliateListResult,
    AffiliateRemoveResult,
)
from .list_visible_affiliates import ListVisibleAffiliatesUseCase
from .remove_affiliate_member import RemoveAffiliateMemberUseCase

__all__ = [
    "AddAffiliateMemberUseCase",
    "RemoveAffiliateMemberUseCase",
    "ListVisibleAffiliatesUseCase",
    "AffiliateEdgeResult",
    "AffiliateRemoveResult",
    "AffiliateListResult",
]
