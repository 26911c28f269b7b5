"""
Name: Territorial Hierarchy Snapshot Tests

Responsibilities:
  - Validate ParentOf / ancestors / descendants over the 4-level forest
  - Validate orphan detection and bounded walks
"""

import pytest

from fisca.domain.entities import ScopeRef, TerritorialLevel, TerritorialNode
from fisca.domain.territory import HierarchySnapshot

pytestmark = pytest.mark.unit

L = TerritorialLevel


def test_level_order_and_neighbours():
    assert [lvl.depth for lvl in L] == [0, 1, 2, 3]
    assert L.LOCALIDAD.parent_level is None
    assert L.CIRCUITO.parent_level == L.LOCALIDAD
    assert L.ESCUELA.child_level == L.MESA
    assert L.MESA.child_level is None


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("circuito", L.CIRCUITO),
        (" Mesa ", L.MESA),
        (L.ESCUELA, L.ESCUELA),
        ("seccion", None),
        (None, None),
        (3, None),
    ],
)
def test_level_parse(raw, expected):
    assert L.parse(raw) == expected


def test_parent_of(hierarchy):
    assert hierarchy.parent_of(L.MESA, 1000) == ScopeRef(L.ESCUELA, 100)
    assert hierarchy.parent_of(L.CIRCUITO, 10) == ScopeRef(L.LOCALIDAD, 1)
    # R: raíz y nodo inexistente -> None
    assert hierarchy.parent_of(L.LOCALIDAD, 1) is None
    assert hierarchy.parent_of(L.MESA, 9999) is None


def test_ancestors_walks_up_to_root(hierarchy):
    chain = list(hierarchy.ancestors(ScopeRef(L.MESA, 1000)))
    assert chain == [
        ScopeRef(L.MESA, 1000),
        ScopeRef(L.ESCUELA, 100),
        ScopeRef(L.CIRCUITO, 10),
        ScopeRef(L.LOCALIDAD, 1),
    ]


def test_ancestors_of_missing_node_yields_only_itself(hierarchy):
    ref = ScopeRef(L.MESA, 424242)
    assert list(hierarchy.ancestors(ref)) == [ref]


def test_descendants_filtered_by_level(hierarchy):
    mesas = hierarchy.descendants(ScopeRef(L.LOCALIDAD, 1), L.MESA)
    assert mesas == frozenset({ScopeRef(L.MESA, 1000), ScopeRef(L.MESA, 2000)})

    below_c1 = hierarchy.descendants(ScopeRef(L.CIRCUITO, 10))
    assert below_c1 == frozenset({ScopeRef(L.ESCUELA, 100), ScopeRef(L.MESA, 1000)})


def test_subtree_includes_root_and_is_empty_for_unknown(hierarchy):
    root = ScopeRef(L.ESCUELA, 200)
    assert hierarchy.subtree(root) == frozenset({root, ScopeRef(L.MESA, 2000)})
    assert hierarchy.subtree(ScopeRef(L.ESCUELA, 999)) == frozenset()


def test_children_are_sorted(hierarchy):
    assert hierarchy.children(ScopeRef(L.LOCALIDAD, 1)) == (
        ScopeRef(L.CIRCUITO, 10),
        ScopeRef(L.CIRCUITO, 20),
    )


def test_from_rows_builds_same_forest():
    snapshot = HierarchySnapshot.from_rows(
        localidades=[(1, "Capital")],
        circuitos=[(10, 1, "C1")],
        escuelas=[(100, 10, "E1")],
        mesas=[(1000, 100, "1")],
    )
    assert len(snapshot) == 4
    assert snapshot.get(L.MESA, 1000).name == "1"
    assert ScopeRef(L.ESCUELA, 100) in snapshot


def test_find_orphans_reports_nodes_with_missing_parent():
    snapshot = HierarchySnapshot(
        [
            TerritorialNode(L.LOCALIDAD, 1, None),
            TerritorialNode(L.CIRCUITO, 10, 1),
            TerritorialNode(L.MESA, 5000, 777),
            TerritorialNode(L.ESCUELA, 300, 99),
        ]
    )
    orphans = snapshot.find_orphans()
    assert [(n.level, n.id) for n in orphans] == [(L.ESCUELA, 300), (L.MESA, 5000)]
    # R: el huérfano no tiene ParentOf pero su cadena termina igual.
    assert list(snapshot.ancestors(ScopeRef(L.MESA, 5000))) == [ScopeRef(L.MESA, 5000)]


def test_nodes_by_level(hierarchy):
    ids = sorted(n.id for n in hierarchy.nodes(L.CIRCUITO))
    assert ids == [10, 20, 30]
