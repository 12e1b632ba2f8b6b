from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from functools import cmp_to_key
from typing import List, Literal, Tuple

from domain.models import NodeId, StackMode
from domain.services.z_order import ZOrder, ZOrderComparator

StackEnd = Literal["top", "bottom"]


def sort_by_z_order(nodes: Sequence[NodeId], comparator: ZOrderComparator) -> List[NodeId]:
    """Back-to-front order; ties keep their input order."""
    return sorted(nodes, key=cmp_to_key(comparator))


def extremum(nodes: Sequence[NodeId], comparator: ZOrderComparator, end: StackEnd) -> NodeId:
    # Tie-breaking mirrors the stable sort: the first of the bottom-most tie class and
    # the last of the top-most tie class win.
    if not nodes:
        raise ValueError("extremum() of an empty selection")
    best = nodes[0]
    for candidate in nodes[1:]:
        order = comparator.compare(candidate, best)
        if end == "top" and order != ZOrder.BEFORE:
            best = candidate
        elif end == "bottom" and order == ZOrder.BEFORE:
            best = candidate
    return best


@dataclass(frozen=True)
class StackingOrder:
    ascending: Tuple[NodeId, ...]
    top: NodeId
    bottom: NodeId

    @classmethod
    def build(cls, nodes: Sequence[NodeId], comparator: ZOrderComparator) -> StackingOrder:
        return cls(
            ascending=tuple(sort_by_z_order(nodes, comparator)),
            top=extremum(nodes, comparator, "top"),
            bottom=extremum(nodes, comparator, "bottom"),
        )

    def anchor(self, mode: StackMode) -> NodeId:
        return self.top if mode is StackMode.ANCHOR_ON_TOP else self.bottom

    def from_anchor(self, mode: StackMode) -> Tuple[NodeId, ...]:
        """Participants by rank: the anchor first, then outward along the z-order."""
        anchor = self.anchor(mode)
        ordered = self.ascending if mode is StackMode.ANCHOR_ON_BOTTOM else self.ascending[::-1]
        return (anchor,) + tuple(node for node in ordered if node != anchor)
