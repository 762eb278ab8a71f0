"""
Engine configuration for the MMR.

Defines which hasher and variant to build, the position limit, logging
and optional persistence. Values come from defaults, then a ``.env`` file
and ``MMR_*`` environment variables, then an optional JSON file.
"""

import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from mmr.crypto.hasher import DEFAULT_HASHER, HASHERS

VARIANTS = ("eager", "lazy")


@dataclass
class MMRConfig:
    """Engine configuration parameters"""

    # Engine
    hasher: str = DEFAULT_HASHER  # sha256 | keccak256 | poseidon
    variant: str = "eager"  # eager | lazy
    max_positions: int = 2**64  # Node positions are u64 on the wire

    # Logging
    log_level: str = "INFO"
    log_dir: Optional[Path] = None
    log_to_file: bool = False

    # Persistence (in-memory only when unset)
    db_path: Optional[Path] = None

    def __post_init__(self):
        """Normalize and validate values"""
        self.hasher = self.hasher.lower()
        self.variant = self.variant.lower()
        self.log_level = self.log_level.upper()
        if self.log_dir is not None:
            self.log_dir = Path(self.log_dir)
        if self.db_path is not None:
            self.db_path = Path(self.db_path)

        if self.hasher not in HASHERS:
            raise ValueError(f"Unknown hasher '{self.hasher}', expected one of {sorted(HASHERS)}")
        if self.variant not in VARIANTS:
            raise ValueError(f"Unknown variant '{self.variant}', expected one of {VARIANTS}")
        if self.max_positions < 1:
            raise ValueError(f"max_positions must be >= 1, got {self.max_positions}")
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ValueError(f"Unknown log level '{self.log_level}'")

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level)


# Environment variable -> field name
ENV_VARS = {
    "MMR_HASHER": "hasher",
    "MMR_VARIANT": "variant",
    "MMR_MAX_POSITIONS": "max_positions",
    "MMR_LOG_LEVEL": "log_level",
    "MMR_LOG_DIR": "log_dir",
    "MMR_LOG_TO_FILE": "log_to_file",
    "MMR_DB_PATH": "db_path",
}


def _coerce(name: str, value):
    if name == "max_positions":
        return int(value)
    if name == "log_to_file" and isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return value


def load_config(config_path: Optional[str] = None, env_file: Optional[str] = None) -> MMRConfig:
    """
    Load configuration from the environment and an optional JSON file.

    Args:
        config_path: Optional path to a JSON file whose keys are MMRConfig fields
        env_file: Optional .env file (python-dotenv searches upward if None)

    Returns:
        MMRConfig instance

    Raises:
        ValueError: On unknown keys or invalid values
    """
    load_dotenv(dotenv_path=env_file, override=False)

    values = {}
    for env_name, field_name in ENV_VARS.items():
        raw = os.getenv(env_name)
        if raw is not None and raw != "":
            values[field_name] = _coerce(field_name, raw)

    if config_path:
        data = json.loads(Path(config_path).read_text())
        known = {f.name for f in fields(MMRConfig)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        values.update({k: _coerce(k, v) for k, v in data.items()})

    return MMRConfig(**values)
