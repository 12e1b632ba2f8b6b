from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from domain.models import CONTAINER_TYPES, NodeId, Point, SceneDocument, SceneNode
from domain.ports.scene_graph import SceneGraph


@dataclass
class NodeRecord:
    node_type: str
    name: Optional[str]
    x: float
    y: float


class InMemorySceneGraph(SceneGraph):
    """Parent-pointer tree with ordered children, built from a :class:`SceneDocument`."""

    def __init__(
        self, root_id: NodeId, root_type: str = "PAGE", root_name: str | None = None
    ) -> None:
        self.root_id = root_id
        self._records: Dict[NodeId, NodeRecord] = {
            root_id: NodeRecord(node_type=root_type, name=root_name, x=0.0, y=0.0)
        }
        self._parents: Dict[NodeId, Optional[NodeId]] = {root_id: None}
        self._children: Dict[NodeId, List[NodeId]] = {root_id: []}
        self._document_meta: Tuple[str, int] | None = None

    @classmethod
    def from_document(cls, document: SceneDocument) -> InMemorySceneGraph:
        root = document.root
        graph = cls(root.id, root.type, root.name)
        graph.move_to(root.id, Point(root.x, root.y))
        graph._document_meta = (document.type, document.version)
        pending: deque[Tuple[NodeId, SceneNode]] = deque(
            (root.id, child) for child in root.children
        )
        while pending:
            parent_id, node = pending.popleft()
            graph.add(parent_id, node.id, node.type, name=node.name, x=node.x, y=node.y)
            pending.extend((node.id, child) for child in node.children)
        return graph

    def to_document(self) -> SceneDocument:
        def build(node_id: NodeId) -> SceneNode:
            record = self._records[node_id]
            return SceneNode(
                id=node_id,
                type=record.node_type,
                name=record.name,
                x=record.x,
                y=record.y,
                children=[build(child) for child in self._children.get(node_id, [])],
            )

        if self._document_meta is None:
            return SceneDocument(root=build(self.root_id))
        doc_type, version = self._document_meta
        return SceneDocument(type=doc_type, version=version, root=build(self.root_id))

    def add(
        self,
        parent_id: NodeId,
        node_id: NodeId,
        node_type: str = "RECTANGLE",
        *,
        name: str | None = None,
        x: float = 0.0,
        y: float = 0.0,
    ) -> NodeId:
        if node_id in self._records:
            raise ValueError(f"Duplicate node id: {node_id}")
        if parent_id not in self._records:
            raise KeyError(parent_id)
        self._records[node_id] = NodeRecord(node_type.upper(), name, float(x), float(y))
        self._parents[node_id] = parent_id
        self._children[node_id] = []
        self._children[parent_id].append(node_id)
        return node_id

    def remove(self, node_id: NodeId) -> None:
        """Delete a node and its subtree."""
        self.detach(node_id)
        for descendant in self._subtree(node_id):
            self._records.pop(descendant, None)
            self._parents.pop(descendant, None)
            self._children.pop(descendant, None)

    def detach(self, node_id: NodeId) -> None:
        """Unlink a node from its parent while keeping it alive."""
        parent_id = self._parents.get(node_id)
        if parent_id is not None:
            self._children[parent_id].remove(node_id)
        if node_id in self._parents:
            self._parents[node_id] = None

    def exists(self, node_id: NodeId) -> bool:
        return node_id in self._records

    def is_root(self, node_id: NodeId) -> bool:
        return node_id == self.root_id

    def parent_of(self, node_id: NodeId) -> NodeId | None:
        return self._parents.get(node_id)

    def children_of(self, container_id: NodeId) -> Tuple[NodeId, ...]:
        return tuple(self._children.get(container_id, ()))

    def index_of(self, node_id: NodeId) -> int:
        parent_id = self._parents.get(node_id)
        if parent_id is None:
            raise KeyError(f"Node {node_id} has no parent")
        return self._children[parent_id].index(node_id)

    def can_have_children(self, node_id: NodeId) -> bool:
        record = self._records.get(node_id)
        return record is not None and record.node_type in CONTAINER_TYPES

    def position_of(self, node_id: NodeId) -> Point:
        record = self._records[node_id]
        return Point(record.x, record.y)

    def move_to(self, node_id: NodeId, position: Point) -> None:
        record = self._records[node_id]
        record.x = position.x
        record.y = position.y

    def insert_child(self, container_id: NodeId, index: int, node_id: NodeId) -> None:
        if node_id not in self._records or container_id not in self._records:
            raise KeyError(node_id if node_id not in self._records else container_id)
        if node_id == container_id or container_id in self._subtree(node_id):
            raise ValueError(f"Cannot insert {node_id} into its own subtree")
        self.detach(node_id)
        siblings = self._children[container_id]
        siblings.insert(max(0, min(index, len(siblings))), node_id)
        self._parents[node_id] = container_id

    def name_of(self, node_id: NodeId) -> str | None:
        record = self._records.get(node_id)
        return record.name if record else None

    def node_ids(self) -> Iterable[NodeId]:
        return self._subtree(self.root_id)

    def _subtree(self, node_id: NodeId) -> List[NodeId]:
        collected: List[NodeId] = []
        stack = [node_id]
        while stack:
            current = stack.pop()
            collected.append(current)
            stack.extend(reversed(self._children.get(current, [])))
        return collected
