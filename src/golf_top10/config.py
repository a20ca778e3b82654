import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import yaml

from .exceptions import ConfigurationError

# Environment variables allowed to override the random seeds, keyed by
# (config section, key).
SEED_ENV_VARS = {
    "GOLF_TOP10_SPLIT_SEED": ("split", "split_seed"),
    "GOLF_TOP10_CV_SEED": ("split", "cv_seed"),
    "GOLF_TOP10_RF_SEED": ("models", "rf_seed"),
}


@dataclass
class Config:
    """Configuration object loaded from YAML."""
    data: Dict[str, Any]
    correlation: Dict[str, Any] = field(default_factory=dict)
    split: Dict[str, Any] = field(default_factory=dict)
    models: Dict[str, Any] = field(default_factory=dict)
    output: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_yaml(cls, path: str, env: Optional[Dict[str, str]] = None) -> "Config":
        with open(path, "r") as f:
            cfg = yaml.safe_load(f) or {}
        unknown = set(cfg) - {"data", "correlation", "split", "models", "output"}
        if unknown:
            raise ConfigurationError(f"Unknown config sections: {sorted(unknown)}")
        if "data" not in cfg:
            raise ConfigurationError("Config is missing the 'data' section")
        config = cls(**cfg)
        config.apply_seed_overrides(os.environ if env is None else env)
        return config

    def apply_seed_overrides(self, env: Dict[str, str]) -> None:
        """Replace seeds with integer values from the environment, if set."""
        for var, (section, key) in SEED_ENV_VARS.items():
            raw = env.get(var)
            if raw is None or raw == "":
                continue
            try:
                value = int(raw)
            except ValueError:
                raise ConfigurationError(f"{var} must be an integer, got {raw!r}") from None
            getattr(self, section)[key] = value
