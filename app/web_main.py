from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, cast

from fastapi import Depends, FastAPI, Request
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel, Field, field_validator

from adapters.scene.memory_graph import InMemorySceneGraph
from app.config import AppSettings
from domain.errors import StackError
from domain.models import OffsetSpec, SceneDocument, StackMode
from domain.services.offset_stack import OffsetStackService

logger = logging.getLogger(__name__)


class StackRequest(BaseModel):
    scene: SceneDocument
    selection: List[str] = Field(default_factory=list)
    mode: Optional[StackMode] = None
    offset_x: Optional[float] = None
    offset_y: Optional[float] = None

    @field_validator("mode", mode="before")
    @classmethod
    def normalize_mode(cls, value: object) -> StackMode | None:
        if value is None or value == "":
            return None
        return StackMode.parse(value)


@dataclass(frozen=True)
class StackContext:
    settings: AppSettings


def get_context(request: Request) -> StackContext:
    return cast(StackContext, request.app.state.context)


def create_app(settings: AppSettings) -> FastAPI:
    app = FastAPI(title=settings.title)
    app.state.context = StackContext(settings=settings)

    @app.get("/api/health")
    def api_health() -> ORJSONResponse:
        return ORJSONResponse({"status": "ok"})

    @app.get("/api/settings")
    def api_settings(context: StackContext = Depends(get_context)) -> ORJSONResponse:
        stack = context.settings.stack
        return ORJSONResponse(
            {
                "mode": stack.mode.value,
                "offset_x": stack.offset_x,
                "offset_y": stack.offset_y,
                "suggested_offsets": list(stack.suggested_offsets),
            }
        )

    @app.post("/api/stack")
    def api_stack(
        payload: StackRequest,
        context: StackContext = Depends(get_context),
    ) -> ORJSONResponse:
        defaults = context.settings.stack
        mode = payload.mode or defaults.mode
        offset = OffsetSpec(
            dx=defaults.offset_x if payload.offset_x is None else payload.offset_x,
            dy=defaults.offset_y if payload.offset_y is None else payload.offset_y,
        )
        graph = InMemorySceneGraph.from_document(payload.scene)
        try:
            result = OffsetStackService(graph).run(payload.selection, mode, offset)
        except StackError as exc:
            logger.warning("Stack request failed (%s): %s", exc.code, exc.message)
            body = {"error": exc.code, "message": exc.user_message(), "partial": exc.partial}
            if exc.partial:
                body["scene"] = graph.to_document().model_dump(mode="json")
            return ORJSONResponse(body, status_code=409)
        return ORJSONResponse(
            {
                "scene": graph.to_document().model_dump(mode="json"),
                "result": result.to_dict(),
            }
        )

    return app
