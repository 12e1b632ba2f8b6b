from __future__ import annotations

import os
from collections.abc import Callable, Generator

import pytest

from adapters.scene.memory_graph import InMemorySceneGraph
from app.config import AppSettings, StackSettings
from tests.helpers.scene_fixtures import build_graph


def _clear_offset_stack_env() -> None:
    for key in list(os.environ):
        if key.startswith("OFFSET_STACK_"):
            os.environ.pop(key, None)


_clear_offset_stack_env()


@pytest.fixture(autouse=True)
def clear_offset_stack_env() -> Generator[None, None, None]:
    _clear_offset_stack_env()
    yield
    _clear_offset_stack_env()


@pytest.fixture
def stack_settings() -> StackSettings:
    return StackSettings(
        offset_x=8,
        offset_y=8,
        mode="anchor_on_top",
        suggested_offsets=[0, 8, 16, 24, 32, 48],
    )


@pytest.fixture
def app_settings_factory(stack_settings: StackSettings) -> Callable[..., AppSettings]:
    def _factory(**overrides: object) -> AppSettings:
        stack = StackSettings.model_validate({**stack_settings.model_dump(), **overrides})
        return AppSettings(stack=stack)

    return _factory


@pytest.fixture
def app_settings(app_settings_factory: Callable[..., AppSettings]) -> AppSettings:
    return app_settings_factory()


@pytest.fixture
def shared_parent_graph() -> InMemorySceneGraph:
    # P holds Y (index 0), Z (index 1), X (index 2).
    return build_graph(
        {
            "P": {
                "type": "FRAME",
                "children": {
                    "Y": {"x": 100, "y": 300},
                    "Z": {"x": 0, "y": 0},
                    "X": {"x": 10, "y": 20},
                },
            }
        }
    )


@pytest.fixture
def cousins_graph() -> InMemorySceneGraph:
    # G holds A (frame: a0, a1) and B (frame: b0, b1); an unrelated frame U sits on top.
    return build_graph(
        {
            "G": {
                "type": "FRAME",
                "children": {
                    "A": {
                        "type": "FRAME",
                        "children": {"a0": {"x": 5, "y": 5}, "a1": {"x": 50, "y": 60}},
                    },
                    "B": {
                        "type": "FRAME",
                        "children": {"b0": {"x": 500, "y": 5}, "b1": {"x": 600, "y": 70}},
                    },
                },
            },
            "U": {"type": "FRAME", "children": {"u0": {}}},
        }
    )
