from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import List

from domain.errors import ConcurrentModification, InsufficientSelection, StackError
from domain.models import NodeId, OffsetSpec, StackMode, StackResult
from domain.ports.scene_graph import SceneGraph
from domain.services.ancestor_paths import AncestorPathResolver
from domain.services.anchor_selection import select_anchor
from domain.services.offset_projection import apply_stack_plan, plan_stack
from domain.services.reparent import merge_into_container
from domain.services.stacking_order import StackingOrder
from domain.services.z_order import ZOrderComparator

logger = logging.getLogger(__name__)

MIN_SELECTION = 2


def normalize_selection(graph: SceneGraph, selection: Iterable[NodeId]) -> List[NodeId]:
    """Drop duplicates and page-level handles, keeping first occurrences in order."""
    normalized: List[NodeId] = []
    seen: set[NodeId] = set()
    for node_id in selection:
        if node_id in seen:
            continue
        seen.add(node_id)
        if graph.exists(node_id) and graph.is_root(node_id):
            continue
        normalized.append(node_id)
    return normalized


def describe(graph: SceneGraph, node_id: NodeId) -> str:
    name = graph.name_of(node_id) if graph.exists(node_id) else None
    return name or node_id


class OffsetStackService:
    def __init__(self, graph: SceneGraph) -> None:
        self.graph = graph

    def resolve_order(self, selection: Iterable[NodeId]) -> StackingOrder:
        nodes = normalize_selection(self.graph, selection)
        if len(nodes) < MIN_SELECTION:
            raise InsufficientSelection(
                f"Select at least {MIN_SELECTION} layers to stack (got {len(nodes)})."
            )
        comparator = ZOrderComparator(self.graph, AncestorPathResolver(self.graph))
        return StackingOrder.build(nodes, comparator)

    def run(
        self,
        selection: Iterable[NodeId],
        mode: StackMode,
        offset: OffsetSpec,
    ) -> StackResult:
        order = self.resolve_order(selection)
        resolver = AncestorPathResolver(self.graph)
        anchor = select_anchor(self.graph, order, mode, resolver)
        ranked = order.from_anchor(mode)
        logger.debug("Resolved z-order (back to front): %s", ", ".join(order.ascending))

        moved: List[NodeId] = []
        try:
            moved = merge_into_container(
                self.graph, ranked, anchor.node_id, anchor.container_id
            )
            resolver.clear()

            container = self.graph.parent_of(anchor.node_id)
            if container != anchor.container_id:
                raise ConcurrentModification(
                    f"Layer {anchor.node_id} moved out of {anchor.container_id} while stacking."
                )
            anchor_position = self.graph.position_of(anchor.node_id)
            plan = plan_stack(self.graph, container, ranked, mode, anchor_position, offset)
            apply_stack_plan(self.graph, plan)
        except StackError as exc:
            if moved:
                exc.mark_partial()
            raise

        top_id = ranked[0] if mode is StackMode.ANCHOR_ON_TOP else ranked[-1]
        summary = f"Stacked {len(ranked)} layers. Top layer: {describe(self.graph, top_id)}."
        logger.info(
            "Stacked %d layers into %s around anchor %s (moved: %s)",
            len(ranked),
            anchor.container_id,
            anchor.node_id,
            ", ".join(moved) or "none",
        )
        return StackResult(
            anchor_id=anchor.node_id,
            container_id=anchor.container_id,
            ranked_ids=ranked,
            top_id=top_id,
            reparented_ids=tuple(moved),
            summary=summary,
        )
