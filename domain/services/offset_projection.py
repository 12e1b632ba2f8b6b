from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Dict, List, Tuple

from domain.errors import ConcurrentModification
from domain.models import NodeId, OffsetSpec, Point, StackMode
from domain.ports.scene_graph import SceneGraph


@dataclass(frozen=True)
class StackPlan:
    container_id: NodeId
    children: Tuple[NodeId, ...]
    placements: Dict[NodeId, Point]

    def participants(self) -> List[NodeId]:
        return [node_id for node_id in self.children if node_id in self.placements]


def plan_stack(
    graph: SceneGraph,
    container_id: NodeId,
    ranked: Sequence[NodeId],
    mode: StackMode,
    anchor_position: Point,
    offset: OffsetSpec,
) -> StackPlan:
    """Compute the final child order of ``container_id`` and participant positions.

    ``ranked`` starts with the anchor and moves outward along the z-order. The block of
    participants replaces the anchor's slot among the remaining siblings, back-to-front:
    reversed ranks when the anchor is on top, ranks as given when it is at the bottom.
    """
    anchor_id = ranked[0]
    participants = set(ranked)
    live = list(graph.children_of(container_id))
    if anchor_id not in live:
        raise ConcurrentModification(f"Layer {anchor_id} left {container_id} while stacking.")

    anchor_index = live.index(anchor_id)
    slot = sum(1 for node_id in live[:anchor_index] if node_id not in participants)
    others = [node_id for node_id in live if node_id not in participants]
    block = list(ranked[::-1]) if mode is StackMode.ANCHOR_ON_TOP else list(ranked)

    placements = {
        node_id: offset.at_rank(anchor_position, rank)
        for rank, node_id in enumerate(ranked)
        if rank > 0
    }
    return StackPlan(
        container_id=container_id,
        children=tuple(others[:slot] + block + others[slot:]),
        placements=placements,
    )


def apply_stack_plan(graph: SceneGraph, plan: StackPlan) -> int:
    """Bring the container in line with ``plan``; returns the number of writes made.

    Slots are filled in ascending order, so every move leaves the already-filled prefix
    intact. A participant gets its slot and its position in the same step.
    """
    container_id = plan.container_id
    updated = 0
    for index, node_id in enumerate(plan.children):
        if not graph.exists(container_id) or not graph.exists(node_id):
            raise ConcurrentModification(
                f"Layer {node_id} was removed while stacking.", partial=updated > 0
            )
        live = graph.children_of(container_id)
        if graph.parent_of(node_id) != container_id or len(live) != len(plan.children):
            raise ConcurrentModification(
                f"Layers in {container_id} changed while stacking.", partial=updated > 0
            )
        if live[index] != node_id:
            graph.insert_child(container_id, index, node_id)
            updated += 1
        position = plan.placements.get(node_id)
        if position is not None:
            graph.move_to(node_id, position)
            updated += 1
    return updated
