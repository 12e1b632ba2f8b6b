from __future__ import annotations

from collections.abc import Sequence
from typing import List

from domain.errors import ConcurrentModification
from domain.models import NodeId
from domain.ports.scene_graph import SceneGraph


def merge_into_container(
    graph: SceneGraph,
    node_ids: Sequence[NodeId],
    anchor_id: NodeId,
    container_id: NodeId,
) -> List[NodeId]:
    """Append every participant living elsewhere to ``container_id``.

    Participants already in the container are left where they are. Coordinates are not
    adjusted; offset projection sets them afterwards.
    """
    moved: List[NodeId] = []
    for node_id in node_ids:
        if node_id == anchor_id:
            continue
        if not graph.exists(node_id) or graph.parent_of(node_id) is None:
            raise ConcurrentModification(
                f"Layer {node_id} was removed while stacking.", partial=bool(moved)
            )
        if graph.parent_of(node_id) == container_id:
            continue
        if not graph.exists(container_id):
            raise ConcurrentModification(
                f"Container {container_id} was removed while stacking.", partial=bool(moved)
            )
        graph.insert_child(container_id, len(graph.children_of(container_id)), node_id)
        moved.append(node_id)
    return moved
