"""
===============================================================================
AFFILIATE USE CASE RESULTS
===============================================================================

Resultados tipados de los casos de uso del grafo de afiliados.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from ....domain.entities import Affiliate, AffiliateEdge
from ..access.access_results import AccessError


@dataclass
class AffiliateEdgeResult:
    edge: AffiliateEdge | None = None
    error: AccessError | None = None


@dataclass
class AffiliateRemoveResult:
    removed: bool = False
    error: AccessError | None = None


@dataclass
class AffiliateListResult:
    affiliates: List[Affiliate] = field(default_factory=list)
    error: AccessError | None = None
