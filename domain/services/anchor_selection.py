from __future__ import annotations

from dataclasses import dataclass

from domain.errors import NoParent, UnsupportedContainer
from domain.models import NodeId, Point, StackMode
from domain.ports.scene_graph import SceneGraph
from domain.services.ancestor_paths import AncestorPathResolver
from domain.services.stacking_order import StackingOrder


@dataclass(frozen=True)
class AnchorSelection:
    node_id: NodeId
    position: Point
    container_id: NodeId


def select_anchor(
    graph: SceneGraph,
    order: StackingOrder,
    mode: StackMode,
    resolver: AncestorPathResolver | None = None,
) -> AnchorSelection:
    anchor = order.anchor(mode)
    container = graph.parent_of(anchor) if graph.exists(anchor) else None
    if container is None:
        raise NoParent(f"Layer {anchor} has no parent to stack into.")
    if not graph.can_have_children(container):
        raise UnsupportedContainer(f"Layer {container} cannot hold other layers.")

    # A participant that contains the target container cannot move into it.
    resolver = resolver or AncestorPathResolver(graph)
    above_container = set(resolver.chain(anchor)[:-1])
    for node_id in order.ascending:
        if node_id != anchor and node_id in above_container:
            raise UnsupportedContainer(f"Layer {node_id} cannot be moved inside itself.")

    return AnchorSelection(
        node_id=anchor,
        position=graph.position_of(anchor),
        container_id=container,
    )
