from __future__ import annotations

from enum import IntEnum

from domain.models import NodeId
from domain.ports.scene_graph import SceneGraph
from domain.services.ancestor_paths import AncestorPathResolver


class ZOrder(IntEnum):
    BEFORE = -1
    EQUAL = 0
    AFTER = 1


def _by_index(a_index: int, b_index: int) -> ZOrder:
    if a_index < b_index:
        return ZOrder.BEFORE
    if a_index > b_index:
        return ZOrder.AFTER
    return ZOrder.EQUAL


class ZOrderComparator:
    """Orders nodes back-to-front across parents.

    Nodes under one parent compare by sibling index. Otherwise both ancestor chains
    are walked from the top level down to the branch point, the first level where
    they differ; the two entries there share a parent and compare by sibling index.
    An ancestor sorts before its own descendants. Chains whose top-level entries
    hang off different roots compare EQUAL.
    """

    def __init__(self, graph: SceneGraph, resolver: AncestorPathResolver | None = None) -> None:
        self.graph = graph
        self.resolver = resolver or AncestorPathResolver(graph)

    def compare(self, a: NodeId, b: NodeId) -> ZOrder:
        if a == b:
            return ZOrder.EQUAL

        a_parent = self.graph.parent_of(a)
        if a_parent is not None and a_parent == self.graph.parent_of(b):
            return _by_index(self.graph.index_of(a), self.graph.index_of(b))

        a_chain = self.resolver.chain(a)
        b_chain = self.resolver.chain(b)
        for level, (a_entry, b_entry) in enumerate(zip(a_chain, b_chain)):
            if a_entry == b_entry:
                continue
            if level == 0 and self.graph.parent_of(a_entry) != self.graph.parent_of(b_entry):
                return ZOrder.EQUAL
            return _by_index(self.graph.index_of(a_entry), self.graph.index_of(b_entry))

        # One chain is a prefix of the other.
        return _by_index(len(a_chain), len(b_chain))

    def __call__(self, a: NodeId, b: NodeId) -> int:
        return int(self.compare(a, b))
