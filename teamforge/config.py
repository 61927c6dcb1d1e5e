"""Engine settings with environment variable overrides.

All settings can be overridden via TEAMFORGE_* environment variables; the CLI
loads a ``.env`` file first.
"""

from __future__ import annotations

import logging
import os
from typing import Literal

from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


_ENV_FIELDS: dict[str, str] = {
    "TEAMFORGE_MAX_WORKERS": "max_workers",
    "TEAMFORGE_TASK_TIMEOUT": "task_timeout_seconds",
    "TEAMFORGE_PRECOMPUTE_TIMEOUT": "precompute_timeout_seconds",
    "TEAMFORGE_SHUTDOWN_GRACE": "shutdown_grace_seconds",
    "TEAMFORGE_LOCK_SCOPE": "lock_scope",
    "TEAMFORGE_PAIR_BATCH_SIZE": "pair_batch_size",
}


def _default_workers() -> int:
    return os.cpu_count() or 1


class EngineSettings(BaseModel):
    """Worker pool, timeout and locking configuration for a formation run."""

    max_workers: int = Field(default_factory=_default_workers, ge=1)
    task_timeout_seconds: float = Field(default=30.0, gt=0)
    precompute_timeout_seconds: float = Field(default=30.0, gt=0)
    shutdown_grace_seconds: float = Field(default=60.0, ge=0)
    # "team": one critical section per team formation; "pick": guarded claim of a drafted roster.
    lock_scope: Literal["team", "pick"] = "team"
    pair_batch_size: int = Field(default=256, ge=1)

    @classmethod
    def from_env(cls, **overrides) -> EngineSettings:
        """Build settings from TEAMFORGE_* variables, then apply *overrides*.

        Raises:
            pydantic.ValidationError: If a variable holds an invalid value.
        """
        values: dict = {}
        for env_name, field_name in _ENV_FIELDS.items():
            raw = os.getenv(env_name, "")
            if raw:
                values[field_name] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        settings = cls(**values)
        logger.debug("Engine settings: %s", settings.model_dump())
        return settings
