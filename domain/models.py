from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Set, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

SCENE_DOCUMENT_TYPE = "offset-stack/scene"
SCENE_SCHEMA_VERSION = 1

CONTAINER_TYPES = frozenset(
    {
        "PAGE",
        "FRAME",
        "GROUP",
        "SECTION",
        "COMPONENT",
        "COMPONENT_SET",
        "BOOLEAN_OPERATION",
    }
)

NodeId = str


class StackMode(str, Enum):
    ANCHOR_ON_TOP = "anchor_on_top"
    ANCHOR_ON_BOTTOM = "anchor_on_bottom"

    @classmethod
    def parse(cls, value: object) -> StackMode:
        if isinstance(value, cls):
            return value
        raw = str(value or "").strip().lower().replace("-", "_")
        aliases = {"top": cls.ANCHOR_ON_TOP, "bottom": cls.ANCHOR_ON_BOTTOM}
        if raw in aliases:
            return aliases[raw]
        return cls(raw)


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class OffsetSpec:
    dx: float = 0.0
    dy: float = 0.0

    def at_rank(self, origin: Point, rank: int) -> Point:
        return Point(origin.x + self.dx * rank, origin.y + self.dy * rank)


@dataclass(frozen=True)
class AncestorStep:
    node_id: NodeId
    depth: int


AncestorPath = Tuple[AncestorStep, ...]


@dataclass(frozen=True)
class StackResult:
    anchor_id: NodeId
    container_id: NodeId
    ranked_ids: Tuple[NodeId, ...]
    top_id: NodeId
    reparented_ids: Tuple[NodeId, ...]
    summary: str

    def to_dict(self) -> dict:
        return {
            "anchor_id": self.anchor_id,
            "container_id": self.container_id,
            "ranked_ids": list(self.ranked_ids),
            "top_id": self.top_id,
            "reparented_ids": list(self.reparented_ids),
            "summary": self.summary,
        }


class SceneNode(BaseModel):
    id: str = Field(..., min_length=1)
    type: str = "RECTANGLE"
    name: Optional[str] = None
    x: float = 0.0
    y: float = 0.0
    children: List[SceneNode] = Field(default_factory=list)

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, value: object) -> str:
        return str(value or "RECTANGLE").strip().upper()

    @property
    def is_container(self) -> bool:
        return self.type in CONTAINER_TYPES

    def walk(self) -> List[SceneNode]:
        nodes: List[SceneNode] = []
        stack = [self]
        while stack:
            node = stack.pop()
            nodes.append(node)
            stack.extend(reversed(node.children))
        return nodes


class SceneDocument(BaseModel):
    type: str = SCENE_DOCUMENT_TYPE
    version: int = SCENE_SCHEMA_VERSION
    root: SceneNode

    @model_validator(mode="after")
    def ensure_unique_node_ids(self) -> SceneDocument:
        seen: Set[str] = set()
        for node in self.root.walk():
            if node.id in seen:
                msg = f"Duplicate node id found: {node.id}"
                raise ValueError(msg)
            seen.add(node.id)
        return self
