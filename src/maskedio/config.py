"""YAML/dict config loader for maskedio.

Supports loading from a YAML file or a plain dict (for embedding in a
larger application config).

Example YAML:

    maskedio:
      enabled: true
      mask_token: "[REDACTED]"
      keywords:
        - hunter2
        - sk-live-0123456789
      auto_flush: true
      flush_delay: 0.0001      # seconds

Keywords may also be supplied through the environment as a
comma-separated list in MASKEDIO_KEYWORDS (pass env=os.environ).
"""

from __future__ import annotations
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError
from .rule import Rule
from .types import DEFAULT_FLUSH_DELAY, DEFAULT_MASK_TOKEN
from .writer import MaskedWriter

logger = logging.getLogger(__name__)

ENV_KEYWORDS = "MASKEDIO_KEYWORDS"


def _keywords(raw: Any) -> list[str | bytes]:
    if raw is None:
        return []
    if isinstance(raw, (str, bytes)):
        raw = [raw]
    if not isinstance(raw, (list, tuple, set)):
        raise ConfigError("keywords must be a list", got=type(raw).__name__)
    for item in raw:
        if not isinstance(item, (str, bytes)):
            # the value itself is never echoed
            raise ConfigError("keywords must be strings", got=type(item).__name__)
    return list(raw)


def load_config(
    data: Mapping[str, Any] | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Normalize a config dict (from YAML or inline)."""
    if data is None:
        data = {}
    # Support nested under "maskedio" key or flat
    if isinstance(data, Mapping) and "maskedio" in data:
        data = data["maskedio"] or {}
    if not isinstance(data, Mapping):
        raise ConfigError("config must be a mapping", got=type(data).__name__)

    keywords = _keywords(data.get("keywords"))
    if env is not None:
        extra = env.get(ENV_KEYWORDS, "")
        keywords.extend(k.strip() for k in extra.split(",") if k.strip())

    mask_token = data.get("mask_token", DEFAULT_MASK_TOKEN)
    if not isinstance(mask_token, (str, bytes)):
        raise ConfigError("mask_token must be a string", got=type(mask_token).__name__)

    flush_delay = data.get("flush_delay", DEFAULT_FLUSH_DELAY)
    if isinstance(flush_delay, bool) or not isinstance(flush_delay, (int, float)) or flush_delay < 0:
        raise ConfigError("flush_delay must be a non-negative number", got=flush_delay)

    return {
        "enabled": bool(data.get("enabled", True)),
        "keywords": keywords,
        "mask_token": mask_token,
        "auto_flush": bool(data.get("auto_flush", True)),
        "flush_delay": float(flush_delay),
    }


def load_from_yaml(path: str | Path, *, env: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Load config from a YAML file."""
    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError("cannot read config file", path=str(path), reason=e.strerror) from e
    except yaml.YAMLError as e:
        raise ConfigError("invalid YAML in config file", path=str(path)) from e
    logger.debug("loaded config from %s", path)
    return load_config(raw, env=env)


def create_rule(config: Mapping[str, Any]) -> Rule:
    """Build a Rule from a config dict.  A disabled config yields an empty rule."""
    cfg = load_config(config)
    if not cfg["enabled"]:
        return Rule(mask_token=cfg["mask_token"])
    return Rule(cfg["keywords"], cfg["mask_token"])


def create_writer(sink: Any, config: Mapping[str, Any]) -> MaskedWriter:
    """Create a fully configured writer on *sink* from a config dict.

    When masking is disabled the writer passes data through unchanged.
    """
    cfg = load_config(config)
    return MaskedWriter(
        sink,
        rule=create_rule(cfg),
        auto_flush=cfg["auto_flush"],
        flush_delay=cfg["flush_delay"],
    )
