from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from domain.models import NodeId, Point


class SceneGraph(Protocol):
    """Host tree seen through parent pointers and ordered children.

    Sibling index 0 is the back-most child of a container.
    """

    def exists(self, node_id: NodeId) -> bool: ...

    def is_root(self, node_id: NodeId) -> bool: ...

    def parent_of(self, node_id: NodeId) -> NodeId | None: ...

    def children_of(self, container_id: NodeId) -> Sequence[NodeId]: ...

    def index_of(self, node_id: NodeId) -> int: ...

    def can_have_children(self, node_id: NodeId) -> bool: ...

    def position_of(self, node_id: NodeId) -> Point: ...

    def move_to(self, node_id: NodeId, position: Point) -> None: ...

    def insert_child(self, container_id: NodeId, index: int, node_id: NodeId) -> None:
        """Detach ``node_id`` from its parent and insert it at ``index`` of the rest."""
        ...

    def name_of(self, node_id: NodeId) -> str | None: ...
