"""Runtime configuration for scriptnav - centralized configuration management."""

import copy
import json
import os
from pathlib import Path
from typing import Any

from scriptnav.utils.constants import (
    CONFIG_FILE_NAME,
    DEFAULT_CACHE_CAPACITY,
    DEFAULT_EXTENSIONS,
    DEFAULT_SEARCH_LIMIT,
    DEPENDENCY_DIR,
    ENV_PREFIX,
    MANIFEST_NAME,
    STATE_DIR,
)
from scriptnav.utils.logging import component_logger

DEFAULTS = {
    "cache": {
        "capacity": DEFAULT_CACHE_CAPACITY,
        "persist": True,
        "dir": str(STATE_DIR),
    },
    "resolve": {
        "extensions": list(DEFAULT_EXTENSIONS),
        "prefer_nearest_dependency": True,
        "search_limit": DEFAULT_SEARCH_LIMIT,
    },
    "paths": {
        "dependency_dir": DEPENDENCY_DIR,
        "manifest_name": MANIFEST_NAME,
    },
}

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _coerce(raw: str, default: Any) -> Any:
    """Convert an environment string to the type of ``default``."""
    if isinstance(default, bool):
        lowered = raw.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ValueError("expected a boolean")
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, float):
        return float(raw)
    if isinstance(default, list):
        return [v.strip() for v in raw.split(",") if v.strip()]
    return raw


def load_runtime_config(root: str | Path = ".", log=None) -> dict[str, Any]:
    """
    Load runtime configuration from .scriptnav/config.json and environment variables.

    Config priority (highest to lowest):
    1. Environment variables (SCRIPTNAV_<SECTION>_<KEY>, e.g. SCRIPTNAV_CACHE_CAPACITY)
    2. <root>/.scriptnav/config.json
    3. Built-in defaults

    Values of the wrong type are ignored with a warning. A relative
    ``cache.dir`` is resolved against ``root``.

    Args:
        root: Workspace root holding the config file

    Returns:
        Configuration dictionary with merged values
    """
    log = log or component_logger("config")
    cfg = copy.deepcopy(DEFAULTS)

    path = Path(root) / STATE_DIR.name / CONFIG_FILE_NAME
    try:
        if path.exists():
            with open(path, encoding="utf-8") as f:
                user = json.load(f)

            if isinstance(user, dict):
                for section in cfg:
                    if section in user and isinstance(user[section], dict):
                        for key, value in user[section].items():
                            if key in cfg[section] and type(value) is type(cfg[section][key]):
                                cfg[section][key] = value
                            elif key in cfg[section]:
                                log.warning(
                                    "Ignoring {section}.{key} in {path}: wrong type",
                                    section=section,
                                    key=key,
                                    path=path,
                                )
    except (json.JSONDecodeError, OSError) as e:
        log.warning("Could not load config file from {path}: {err}", path=path, err=e)

    for section in cfg:
        for key in cfg[section]:
            env_var = f"{ENV_PREFIX}_{section.upper()}_{key.upper()}"
            if env_var in os.environ:
                value = os.environ[env_var]
                try:
                    cfg[section][key] = _coerce(value, cfg[section][key])
                except (ValueError, AttributeError) as e:
                    log.warning(
                        "Invalid value for {var}: {value!r} ({err}); keeping {default!r}",
                        var=env_var,
                        value=value,
                        err=e,
                        default=cfg[section][key],
                    )

    cache_dir = Path(cfg["cache"]["dir"])
    if not cache_dir.is_absolute():
        cfg["cache"]["dir"] = str((Path(root) / cache_dir).resolve())

    if cfg["cache"]["capacity"] < 1:
        log.warning("cache.capacity must be positive; using {default}", default=DEFAULT_CACHE_CAPACITY)
        cfg["cache"]["capacity"] = DEFAULT_CACHE_CAPACITY

    if cfg["resolve"]["search_limit"] < 1:
        log.warning("resolve.search_limit must be positive; using {default}", default=DEFAULT_SEARCH_LIMIT)
        cfg["resolve"]["search_limit"] = DEFAULT_SEARCH_LIMIT

    extensions = cfg["resolve"]["extensions"]
    if not extensions or not all(isinstance(ext, str) and ext for ext in extensions):
        log.warning(
            "resolve.extensions must be a non-empty list of strings, got {value!r}; using defaults",
            value=extensions,
        )
        cfg["resolve"]["extensions"] = list(DEFAULT_EXTENSIONS)

    return cfg
