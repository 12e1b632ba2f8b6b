from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson
from filelock import FileLock

from domain.models import SceneDocument
from domain.ports.repositories import SceneDocumentRepository

_DUMP_OPTIONS = orjson.OPT_INDENT_2 | orjson.OPT_APPEND_NEWLINE


def read_scene_payload(path: Path) -> dict[str, Any]:
    data = orjson.loads(path.read_bytes())
    if not isinstance(data, dict):
        msg = f"Scene file must contain a JSON object: {path}"
        raise ValueError(msg)
    return data


def write_scene_payload(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(f"{path.suffix}.tmp")
    tmp_path.write_bytes(orjson.dumps(payload, option=_DUMP_OPTIONS))
    tmp_path.replace(path)


class FileSystemSceneRepository(SceneDocumentRepository):
    def load(self, path: Path) -> SceneDocument:
        return SceneDocument.model_validate(read_scene_payload(path))

    def save(self, document: SceneDocument, path: Path) -> None:
        lock_path = path.with_suffix(f"{path.suffix}.lock")
        with FileLock(str(lock_path)):
            write_scene_payload(path, document.model_dump(mode="json"))
