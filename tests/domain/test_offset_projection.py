from __future__ import annotations

import pytest

from adapters.scene.memory_graph import InMemorySceneGraph
from domain.errors import ConcurrentModification
from domain.models import OffsetSpec, Point, StackMode
from domain.services.offset_projection import apply_stack_plan, plan_stack


class VanishingGraph(InMemorySceneGraph):
    """Deletes ``victim`` the first time any node is repositioned."""

    victim = ""

    def move_to(self, node_id: str, position: Point) -> None:
        super().move_to(node_id, position)
        if self.victim and self.exists(self.victim):
            self.remove(self.victim)


def test_plan_for_anchor_on_top(shared_parent_graph: InMemorySceneGraph) -> None:
    plan = plan_stack(
        shared_parent_graph,
        "P",
        ("X", "Y"),
        StackMode.ANCHOR_ON_TOP,
        Point(10, 20),
        OffsetSpec(8, 8),
    )

    assert plan.children == ("Z", "Y", "X")
    assert plan.placements == {"Y": Point(18, 28)}
    assert plan.participants() == ["Y"]


def test_plan_for_anchor_on_bottom(shared_parent_graph: InMemorySceneGraph) -> None:
    plan = plan_stack(
        shared_parent_graph,
        "P",
        ("Y", "Z", "X"),
        StackMode.ANCHOR_ON_BOTTOM,
        Point(100, 300),
        OffsetSpec(-4, 16),
    )

    assert plan.children == ("Y", "Z", "X")
    assert plan.placements == {"Z": Point(96, 316), "X": Point(92, 332)}


def test_plan_keeps_block_at_anchor_slot(shared_parent_graph: InMemorySceneGraph) -> None:
    shared_parent_graph.add("P", "W")  # P: Y, Z, X, W

    plan = plan_stack(
        shared_parent_graph,
        "P",
        ("Z", "W"),
        StackMode.ANCHOR_ON_TOP,
        Point(0, 0),
        OffsetSpec(1, 1),
    )

    assert plan.children == ("Y", "W", "Z", "X")


def test_plan_without_anchor_in_container_fails(shared_parent_graph: InMemorySceneGraph) -> None:
    shared_parent_graph.detach("X")

    with pytest.raises(ConcurrentModification):
        plan_stack(
            shared_parent_graph,
            "P",
            ("X", "Y"),
            StackMode.ANCHOR_ON_TOP,
            Point(0, 0),
            OffsetSpec(8, 8),
        )


def test_apply_moves_order_and_geometry(shared_parent_graph: InMemorySceneGraph) -> None:
    plan = plan_stack(
        shared_parent_graph,
        "P",
        ("X", "Y"),
        StackMode.ANCHOR_ON_TOP,
        Point(10, 20),
        OffsetSpec(8, 8),
    )

    apply_stack_plan(shared_parent_graph, plan)

    assert shared_parent_graph.children_of("P") == ("Z", "Y", "X")
    assert shared_parent_graph.position_of("Y") == Point(18, 28)
    assert shared_parent_graph.position_of("X") == Point(10, 20)
    assert shared_parent_graph.position_of("Z") == Point(0, 0)


def test_apply_of_settled_plan_only_writes_positions(
    shared_parent_graph: InMemorySceneGraph,
) -> None:
    plan = plan_stack(
        shared_parent_graph,
        "P",
        ("X", "Z", "Y"),
        StackMode.ANCHOR_ON_TOP,
        Point(10, 20),
        OffsetSpec(0, 0),
    )

    assert apply_stack_plan(shared_parent_graph, plan) == 2
    assert shared_parent_graph.children_of("P") == ("Y", "Z", "X")


def test_apply_stops_when_participant_disappears() -> None:
    graph = VanishingGraph("page")
    graph.add("page", "P", "FRAME")
    for node_id in ("a", "b", "c"):
        graph.add("P", node_id)
    graph.victim = "c"
    plan = plan_stack(
        graph, "P", ("a", "b", "c"), StackMode.ANCHOR_ON_BOTTOM, Point(0, 0), OffsetSpec(8, 8)
    )

    with pytest.raises(ConcurrentModification) as excinfo:
        apply_stack_plan(graph, plan)

    assert excinfo.value.partial
    # b got its slot and its position together; c got neither.
    assert graph.position_of("b") == Point(8, 8)
    assert not graph.exists("c")
