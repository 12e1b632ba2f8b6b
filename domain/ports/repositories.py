from __future__ import annotations

from pathlib import Path
from typing import Protocol

from domain.models import SceneDocument


class SceneDocumentRepository(Protocol):
    def load(self, path: Path) -> SceneDocument: ...

    def save(self, document: SceneDocument, path: Path) -> None: ...
