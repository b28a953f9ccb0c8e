from __future__ import annotations

"""Runtime configuration, read from the environment (and a `.env` file if present)."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigError

DEFAULT_MODEL = "HasModel.model"
DEFAULT_SCHEMA = "baseModelFile.arff"
STRATEGIES = ("fitness", "model")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from None


def _bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    if raw.lower() in _TRUE:
        return True
    if raw.lower() in _FALSE:
        return False
    raise ConfigError(f"{key} must be a boolean, got {raw!r}")


@dataclass
class ExplorerConfig:
    model_path: str = DEFAULT_MODEL
    schema_path: str = DEFAULT_SCHEMA
    vocabulary_path: Optional[str] = None
    random_seed: int = 0
    trials: int = 10
    use_class_membership_probability: bool = True
    strategy: str = "fitness"

    def __post_init__(self) -> None:
        if self.trials < 1:
            raise ConfigError(f"trials must be >= 1, got {self.trials}")
        if self.strategy not in STRATEGIES:
            raise ConfigError(f"strategy must be one of {STRATEGIES}, got {self.strategy!r}")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "ExplorerConfig":
        """Build a config from `env` (defaults to `os.environ` after loading `.env`)."""
        if env is None:
            load_dotenv()
            env = os.environ
        return cls(
            model_path=env.get("UI_EXPLORER_MODEL") or DEFAULT_MODEL,
            schema_path=env.get("UI_EXPLORER_SCHEMA") or DEFAULT_SCHEMA,
            vocabulary_path=env.get("UI_EXPLORER_VOCABULARY") or None,
            random_seed=_int(env, "UI_EXPLORER_SEED", 0),
            trials=_int(env, "UI_EXPLORER_TRIALS", 10),
            use_class_membership_probability=_bool(env, "UI_EXPLORER_CLASS_MEMBERSHIP", True),
            strategy=(env.get("UI_EXPLORER_STRATEGY") or "fitness").lower(),
        )
