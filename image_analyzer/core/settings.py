from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from image_analyzer.core.intake import ACCEPTED_TYPES
from image_analyzer.core.session_config import MODEL_LABELS
from image_analyzer.core.workflow import DEFAULT_DELAY_S


class ModelOption(BaseModel):
    id: str = Field(min_length=1)
    label: str = Field(min_length=1)


def _default_models() -> List[ModelOption]:
    return [ModelOption(id=k, label=v) for k, v in MODEL_LABELS.items()]


class AppSettings(BaseModel):
    analysis_delay_s: float = Field(default=DEFAULT_DELAY_S, ge=0.0)
    default_model: str = "gpt-4o-mini"
    models: List[ModelOption] = Field(default_factory=_default_models)
    log_level: str = "INFO"
    accepted_types: List[str] = Field(default_factory=lambda: list(ACCEPTED_TYPES))

    @model_validator(mode="after")
    def _check_models(self) -> "AppSettings":
        ids = [m.id for m in self.models]
        unknown = [m for m in ids if m not in MODEL_LABELS]
        if unknown:
            raise ValueError(f"unsupported model ids: {', '.join(unknown)}")
        if self.default_model not in ids:
            raise ValueError(f"default_model '{self.default_model}' is not in models")
        return self

    def model_labels(self) -> Dict[str, str]:
        return {m.id: m.label for m in self.models}


@dataclass(frozen=True)
class LoadedSettings:
    settings: AppSettings
    source_path: Optional[Path]


class SettingsError(RuntimeError):
    pass


def _project_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _resolve_settings_path(path: Optional[Path]) -> Optional[Path]:
    if path is not None:
        return path
    if override := os.getenv("APP_SETTINGS_PATH"):
        resolved = Path(override).expanduser().resolve()
        if not resolved.exists():
            raise SettingsError(f"APP_SETTINGS_PATH points to missing file: {resolved}")
        return resolved
    candidate = _project_root() / "config" / "app.yaml"
    return candidate if candidate.exists() else None


def _load_yaml(path: Path) -> Dict:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise SettingsError(f"Invalid YAML in {path}: {exc}") from exc
    except OSError as exc:
        raise SettingsError(f"Unable to read settings file {path}: {exc}") from exc

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise SettingsError(f"Settings root in {path} must be a mapping")
    return raw


def _env_overrides() -> Dict[str, object]:
    overrides: Dict[str, object] = {}
    if delay := os.getenv("APP_ANALYSIS_DELAY_S"):
        overrides["analysis_delay_s"] = delay
    if model := os.getenv("APP_DEFAULT_MODEL"):
        overrides["default_model"] = model.strip()
    if level := os.getenv("APP_LOG_LEVEL"):
        overrides["log_level"] = level.strip().upper()
    return overrides


def load_settings(path: Optional[Path] = None) -> LoadedSettings:
    resolved = _resolve_settings_path(path)
    data = _load_yaml(resolved) if resolved is not None else {}
    data.update(_env_overrides())
    try:
        settings = AppSettings.model_validate(data)
    except ValidationError as exc:
        raise SettingsError(f"Invalid settings: {exc}") from exc
    return LoadedSettings(settings=settings, source_path=resolved)
