from __future__ import annotations

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field

from focusly import ARGS_DIR
from focusly.logging_config import get_logger

logger = get_logger(__name__)


# =============================================================================
# FocuslyConfig (args/focusly.yaml)
# =============================================================================

class UserConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    # IANA name; None means the system local timezone
    timezone: Optional[str] = None


class StreaksConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    grace_days: int = Field(default=1, ge=0)
    include_incomplete: bool = Field(default=False)


class TasksConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    default_recurrence_interval: int = Field(default=1, ge=1)


class FocuslyConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    user: UserConfig = Field(default_factory=UserConfig)
    streaks: StreaksConfig = Field(default_factory=StreaksConfig)
    tasks: TasksConfig = Field(default_factory=TasksConfig)


# =============================================================================
# load_and_validate
# =============================================================================

_CONFIG_MAP: dict[str, type[BaseModel]] = {
    "focusly": FocuslyConfig,
}


def _load_yaml(path: Path, model_class: type[BaseModel]) -> BaseModel:
    try:
        if path.exists():
            with open(path) as f:
                raw = yaml.safe_load(f) or {}
        else:
            raw = {}

        return model_class.model_validate(raw)
    except Exception as e:
        logger.warning("config_validation_failed", path=str(path), error=str(e))
        return model_class()


def load_and_validate(config_name: str, model_class: type[BaseModel] | None = None) -> BaseModel:
    if model_class is None:
        model_class = _CONFIG_MAP.get(config_name)
        if model_class is None:
            raise ValueError(f"Unknown config: {config_name}. Available: {list(_CONFIG_MAP.keys())}")

    return _load_yaml(ARGS_DIR / f"{config_name}.yaml", model_class)


def load_config(path: str | Path | None = None) -> FocuslyConfig:
    """Load the focusly config from *path*, or from ``args/focusly.yaml``.

    Missing or invalid files fall back to defaults.
    """
    if path is None:
        return load_and_validate("focusly")
    return _load_yaml(Path(path), FocuslyConfig)
