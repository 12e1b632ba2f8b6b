from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Annotated, ClassVar

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, YamlConfigSettingsSource

from domain.models import OffsetSpec, StackMode

DEFAULT_CONFIG_PATH = Path("config/offset_stack.yaml")
DEFAULT_SUGGESTED_OFFSETS = [0, 8, 16, 24, 32, 48]


def _split_offsets_value(raw_value: str) -> list[str]:
    raw = raw_value.strip()
    if raw.startswith("[") and raw.endswith("]"):
        raw = raw[1:-1].strip()
    return [token for token in (part.strip() for part in raw.split(",")) if token]


class StackSettings(BaseModel):
    offset_x: float = 8.0
    offset_y: float = 8.0
    mode: StackMode = StackMode.ANCHOR_ON_TOP
    suggested_offsets: Annotated[list[float], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_SUGGESTED_OFFSETS)
    )

    @field_validator("mode", mode="before")
    @classmethod
    def normalize_mode(cls, value: object) -> StackMode:
        if value is None or value == "":
            return StackMode.ANCHOR_ON_TOP
        try:
            return StackMode.parse(value)
        except ValueError as exc:
            msg = "stack.mode must be one of: top, bottom, anchor_on_top, anchor_on_bottom"
            raise ValueError(msg) from exc

    @field_validator("suggested_offsets", mode="before")
    @classmethod
    def normalize_offsets(cls, value: object) -> list[float]:
        if value is None or value == "":
            return list(DEFAULT_SUGGESTED_OFFSETS)
        items: list[object] = []
        if isinstance(value, (list, tuple)):
            for item in value:
                if isinstance(item, str):
                    items.extend(_split_offsets_value(item))
                else:
                    items.append(item)
        elif isinstance(value, str):
            items.extend(_split_offsets_value(value))
        else:
            items.append(value)
        try:
            return sorted({float(item) for item in items})  # type: ignore[arg-type]
        except (TypeError, ValueError) as exc:
            msg = "stack.suggested_offsets must be a list of numbers"
            raise ValueError(msg) from exc

    def offset(self) -> OffsetSpec:
        return OffsetSpec(dx=self.offset_x, dy=self.offset_y)


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="OFFSET_STACK_", env_nested_delimiter="__")

    title: str = "Offset Stack"
    log_level: str = "INFO"
    stack: StackSettings = StackSettings()

    _yaml_path: ClassVar[Path | None] = None

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: object) -> str:
        level = str(value or "INFO").strip().upper()
        if level not in logging.getLevelNamesMapping():
            msg = f"Unknown log level: {value}"
            raise ValueError(msg)
        return level

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
        ]
        if cls._yaml_path:
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=cls._yaml_path))
        return tuple(sources)


def load_settings(config_path: Path | None = None) -> AppSettings:
    env_path = os.getenv("OFFSET_STACK_CONFIG_PATH")
    resolved_path: Path | None = None

    if config_path is not None:
        resolved_path = config_path
    elif env_path:
        resolved_path = Path(env_path)
    elif DEFAULT_CONFIG_PATH.exists():
        resolved_path = DEFAULT_CONFIG_PATH

    previous = AppSettings._yaml_path
    try:
        if resolved_path is not None:
            if not resolved_path.exists():
                msg = f"Config file not found: {resolved_path}"
                raise FileNotFoundError(msg)
            AppSettings._yaml_path = resolved_path
        return AppSettings()
    finally:
        AppSettings._yaml_path = previous
