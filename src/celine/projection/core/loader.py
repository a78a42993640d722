# celine/projection/core/loader.py
"""
Shared utilities for dynamic imports and YAML configuration files.
"""
from __future__ import annotations

import importlib
import logging
import os
import re
from glob import glob
from pathlib import Path
from typing import Any, Iterable

import yaml

logger = logging.getLogger(__name__)

# ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


def import_attr(path: str) -> Any:
    """
    Import an attribute given as 'module.path:attribute'.

    Dotted attributes ('module:Class.method') are followed one step at a
    time.

    Raises:
        ValueError: If path format is invalid
        ImportError: If module cannot be imported
        AttributeError: If attribute doesn't exist
    """
    if ":" not in path:
        raise ValueError(f"Invalid import path '{path}', expected 'module:attr'")

    mod_name, attr_path = path.split(":", 1)

    try:
        obj: Any = importlib.import_module(mod_name)
    except ImportError as exc:
        logger.error("Failed to import module '%s'", mod_name)
        raise ImportError(f"Cannot import module '{mod_name}'") from exc

    for attr in attr_path.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError as exc:
            logger.error("'%s' has no attribute '%s'", path, attr)
            raise AttributeError(f"Module '{mod_name}' has no attribute '{attr_path}'") from exc

    return obj


def substitute_env_vars(value: Any, *, where: str = "") -> Any:
    """
    Recursively substitute environment variables in configuration values.

    Supports ``${VAR}`` (must be set) and ``${VAR:-default}``.

    Args:
        value: Parsed YAML value
        where: Dotted location of ``value`` in its document, reported
            when a variable is missing (e.g. ``views.item.root``)

    Raises:
        ValueError: If a required variable is not set
    """
    if isinstance(value, str):
        return ENV_VAR_PATTERN.sub(lambda m: _env_value(m, where), value)
    if isinstance(value, dict):
        return {
            k: substitute_env_vars(v, where=f"{where}.{k}" if where else str(k))
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [
            substitute_env_vars(item, where=f"{where}[{i}]")
            for i, item in enumerate(value)
        ]
    return value


def _env_value(match: re.Match, where: str) -> str:
    var_name, default = match.group(1), match.group(2)

    env_value = os.environ.get(var_name)
    if env_value is not None:
        return env_value
    if default is not None:
        return default

    location = f" (at '{where}')" if where else ""
    raise ValueError(
        f"Environment variable '{var_name}' is not set and has no default{location}"
    )


def load_yaml_files(patterns: Iterable[str]) -> list[dict[str, Any]]:
    """
    Load every YAML file matching the glob patterns, in sorted path order.

    Later documents are meant to override earlier ones when the caller
    merges them.

    Raises:
        ValueError: If a document is not a mapping
    """
    patterns = list(patterns)
    files = sorted({Path(m).resolve() for pattern in patterns for m in glob(pattern)})

    if not files:
        logger.warning("No config files found matching patterns: %s", patterns)
        return []

    logger.info("Loading config files: %s", [str(f) for f in files])

    out: list[dict[str, Any]] = []
    for f in files:
        try:
            with f.open("r", encoding="utf-8") as fh:
                content = yaml.safe_load(fh) or {}
        except (OSError, yaml.YAMLError) as exc:
            logger.error("Failed to load YAML file '%s': %s", f, exc)
            raise

        if not isinstance(content, dict):
            raise ValueError(f"Config file '{f}' must contain a mapping at top level")
        out.append(content)

    return out
