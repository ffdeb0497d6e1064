from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .errors import ConfigError

logger = logging.getLogger(__name__)

# Increment when the document layout changes; see codec.migrate_document
FORMAT_VERSION = 2

ENV_MAX_OBJECTS = "PACKSTORE_MAX_OBJECTS"
ENV_TIME_BUDGET = "PACKSTORE_TIME_BUDGET"
ENV_VALIDATE = "PACKSTORE_VALIDATE"


@dataclass
class StoreConfig:
    """Settings shared by ObjectStore and the document codec.

    - format_version: value written to a packed document's ``version``.
    - max_objects: upper bound on objects packed in one pass (None = unbounded).
    - time_budget: wall-clock seconds allowed for one pack (None = unbounded).
    - validate_documents: whether the codec checks documents against the schema.
    """

    format_version: int = FORMAT_VERSION
    max_objects: Optional[int] = None
    time_budget: Optional[float] = None
    validate_documents: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.format_version, int) or self.format_version < 1:
            raise ConfigError("format_version must be a positive integer")
        if self.max_objects is not None and (not isinstance(self.max_objects, int) or self.max_objects < 1):
            raise ConfigError("max_objects must be a positive integer or None")
        if self.time_budget is not None:
            if not isinstance(self.time_budget, (int, float)) or self.time_budget <= 0:
                raise ConfigError("time_budget must be a positive number of seconds or None")
        if not isinstance(self.validate_documents, bool):
            raise ConfigError("validate_documents must be a boolean")

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "StoreConfig":
        kwargs: Dict[str, Any] = {}
        try:
            if "format_version" in raw:
                kwargs["format_version"] = int(raw["format_version"])
            if raw.get("max_objects") is not None:
                kwargs["max_objects"] = int(raw["max_objects"])
            if raw.get("time_budget") is not None:
                kwargs["time_budget"] = float(raw["time_budget"])
            if "validate_documents" in raw:
                kwargs["validate_documents"] = bool(raw["validate_documents"])
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid store configuration: {e}") from e
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "StoreConfig":
        """Build a config from ``PACKSTORE_*`` environment variables; unset ones keep defaults."""
        env = os.environ if environ is None else environ
        raw: Dict[str, Any] = {}
        if env.get(ENV_MAX_OBJECTS):
            raw["max_objects"] = env[ENV_MAX_OBJECTS]
        if env.get(ENV_TIME_BUDGET):
            raw["time_budget"] = env[ENV_TIME_BUDGET]
        if env.get(ENV_VALIDATE):
            raw["validate_documents"] = env[ENV_VALIDATE].strip().lower() not in ("0", "false", "no", "off")
        return cls.from_dict(raw)

    @classmethod
    def from_json(cls, path: Path) -> "StoreConfig":
        """Load configuration from a JSON file. Missing fields fall back to defaults."""
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with path.open("r", encoding="utf-8") as f:
            try:
                raw = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigError(f"Invalid JSON in {path}: {e}") from e
        if not isinstance(raw, Mapping):
            raise ConfigError(f"Config file {path} must contain a JSON object")
        return cls.from_dict(raw)

    def to_json(self, path: Path) -> None:
        with path.open("w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, sort_keys=True)
        logger.debug("Wrote store config to %s", path)
