"""
Name: Territorial Team Rules Tests

Responsibilities:
  - Validate level computation from scope roots
  - Validate roots whose ancestors are missing are skipped, not fatal
"""

import pytest

from fisca.domain.entities import ScopeRef, TerritorialLevel, TerritorialNode
from fisca.domain.territorial_team import (
    TerritorialMember,
    build_territorial_team,
    territorial_level,
)
from fisca.domain.territory import HierarchySnapshot

pytestmark = pytest.mark.unit

L = TerritorialLevel


@pytest.mark.parametrize(
    "roots, expected",
    [
        ([], 0),
        ([ScopeRef(L.MESA, 1000)], 1),
        ([ScopeRef(L.ESCUELA, 100)], 2),
        ([ScopeRef(L.MESA, 1000), ScopeRef(L.CIRCUITO, 10)], 3),
        ([ScopeRef(L.LOCALIDAD, 1)], 4),
    ],
)
def test_territorial_level(roots, expected):
    assert territorial_level(roots) == expected


def test_no_roots_is_empty_team(hierarchy):
    team = build_territorial_team(7, [], [], hierarchy)
    assert team.total == 0
    assert team.level == 0


def test_orphan_root_skips_missing_areas():
    # R: escuela 100 cuelga de un circuito que ya no existe.
    snapshot = HierarchySnapshot(
        [
            TerritorialNode(L.LOCALIDAD, 1, None),
            TerritorialNode(L.ESCUELA, 100, 10),
            TerritorialNode(L.MESA, 1000, 100),
        ]
    )
    members = [
        TerritorialMember(2, "fiscal_general", frozenset({ScopeRef(L.ESCUELA, 100)})),
        TerritorialMember(3, "responsable_circuito", frozenset({ScopeRef(L.LOCALIDAD, 1)})),
    ]

    team = build_territorial_team(9, [ScopeRef(L.MESA, 1000)], members, snapshot)

    assert team.superiors == (2,)
    assert team.level == 1
