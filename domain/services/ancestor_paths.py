from __future__ import annotations

from typing import Dict, List

from domain.errors import BrokenHierarchy
from domain.models import AncestorPath, AncestorStep, NodeId
from domain.ports.scene_graph import SceneGraph


class AncestorPathResolver:
    """Resolves the chain of non-root ancestors above a node.

    Results are cached by node id for the lifetime of one operation only; call
    :meth:`clear` after any tree mutation.
    """

    def __init__(self, graph: SceneGraph) -> None:
        self.graph = graph
        self._cache: Dict[NodeId, AncestorPath] = {}

    def resolve(self, node_id: NodeId) -> AncestorPath:
        cached = self._cache.get(node_id)
        if cached is not None:
            return cached

        if not self.graph.exists(node_id):
            raise BrokenHierarchy(f"Layer {node_id} is no longer in the scene.")

        ancestors: List[NodeId] = []
        seen = {node_id}
        current = self.graph.parent_of(node_id)
        while True:
            if current is None:
                last = ancestors[-1] if ancestors else node_id
                raise BrokenHierarchy(f"Layer {last} has no parent above {node_id}.")
            if self.graph.is_root(current):
                break
            if current in seen:
                raise BrokenHierarchy(f"Parent links of {node_id} form a cycle at {current}.")
            seen.add(current)
            ancestors.append(current)
            current = self.graph.parent_of(current)

        ancestors.reverse()
        path = tuple(
            AncestorStep(node_id=ancestor, depth=depth) for depth, ancestor in enumerate(ancestors)
        )
        self._cache[node_id] = path
        return path

    def chain(self, node_id: NodeId) -> List[NodeId]:
        """Ancestors from the top level down, followed by the node itself."""
        return [step.node_id for step in self.resolve(node_id)] + [node_id]

    def clear(self) -> None:
        self._cache.clear()
