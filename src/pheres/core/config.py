# src/pheres/core/config.py
"""
Runtime limits and switches, overridable from the environment.

  PHERES_MAX_DEPTH     rule resolution depth (default 200)
  PHERES_MAX_STEPS     statements one intention may execute (default 10000)
  PHERES_OCCURS_CHECK  "1" to enable the occurs check
  PHERES_LOG_LEVEL     logging level name (default WARNING)
  PHERES_CORS_ORIGINS  comma-separated origins the API accepts browser calls from
"""

import os
from dataclasses import dataclass, field


@dataclass
class RuntimeConfig:
    max_depth: int = 200
    max_steps: int = 10_000
    occurs_check: bool = False
    log_level: str = "WARNING"
    cors_origins: list[str] = field(default_factory=list)

    @classmethod
    def from_env(cls, environ=None) -> "RuntimeConfig":
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            max_depth=int(env.get("PHERES_MAX_DEPTH", defaults.max_depth)),
            max_steps=int(env.get("PHERES_MAX_STEPS", defaults.max_steps)),
            occurs_check=env.get("PHERES_OCCURS_CHECK", "0").lower() in ("1", "true", "yes"),
            log_level=env.get("PHERES_LOG_LEVEL", defaults.log_level).upper(),
            cors_origins=[o.strip() for o in env.get("PHERES_CORS_ORIGINS", "").split(",") if o.strip()],
        )
