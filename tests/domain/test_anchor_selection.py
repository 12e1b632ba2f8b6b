from __future__ import annotations

import pytest

from adapters.scene.memory_graph import InMemorySceneGraph
from domain.errors import NoParent, UnsupportedContainer
from domain.models import Point, StackMode
from domain.services.anchor_selection import select_anchor
from domain.services.stacking_order import StackingOrder
from domain.services.z_order import ZOrderComparator
from tests.helpers.scene_fixtures import build_graph


def _order(graph: InMemorySceneGraph, nodes: list[str]) -> StackingOrder:
    return StackingOrder.build(nodes, ZOrderComparator(graph))


def test_anchor_on_top_picks_front_node(cousins_graph: InMemorySceneGraph) -> None:
    anchor = select_anchor(
        cousins_graph, _order(cousins_graph, ["a1", "b0"]), StackMode.ANCHOR_ON_TOP
    )

    assert anchor.node_id == "b0"
    assert anchor.container_id == "B"
    assert anchor.position == Point(500, 5)


def test_anchor_on_bottom_picks_back_node(cousins_graph: InMemorySceneGraph) -> None:
    anchor = select_anchor(
        cousins_graph, _order(cousins_graph, ["a1", "b0"]), StackMode.ANCHOR_ON_BOTTOM
    )

    assert anchor.node_id == "a1"
    assert anchor.container_id == "A"
    assert anchor.position == Point(50, 60)


def test_anchor_without_parent_fails(cousins_graph: InMemorySceneGraph) -> None:
    order = _order(cousins_graph, ["a1", "b0"])
    cousins_graph.detach("b0")

    with pytest.raises(NoParent):
        select_anchor(cousins_graph, order, StackMode.ANCHOR_ON_TOP)


def test_leaf_only_parent_is_unsupported() -> None:
    graph = build_graph(
        {
            "loose": {},
            "card": {"type": "INSTANCE", "children": {"face": {}}},
        }
    )

    with pytest.raises(UnsupportedContainer):
        select_anchor(graph, _order(graph, ["loose", "face"]), StackMode.ANCHOR_ON_TOP)


def test_container_inside_participant_is_unsupported(cousins_graph: InMemorySceneGraph) -> None:
    # The anchor b1 lives in B, which is itself selected.
    with pytest.raises(UnsupportedContainer, match="B"):
        select_anchor(cousins_graph, _order(cousins_graph, ["B", "b1"]), StackMode.ANCHOR_ON_TOP)
