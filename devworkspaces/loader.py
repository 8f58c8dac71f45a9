"""Config file loading.

Reads ``workspaces.yaml`` from disk, decodes it with PyYAML and hands the
resulting mapping to :func:`devworkspaces.engine.tree.build_tree`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from devworkspaces.engine.tree import ConfigError, ConfigTree, build_tree


class ConfigFileError(ConfigError):
    """The config file is missing, unreadable, or not valid YAML."""


def read_document(path: Path) -> dict[str, Any]:
    """Read and decode the config file into a mapping."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Cannot read config file {path}: {exc.strerror or exc}"
        raise ConfigFileError(msg) from None

    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        msg = f"Invalid YAML in {path}: {exc}"
        raise ConfigFileError(msg) from None

    if not isinstance(document, dict):
        msg = f"Config file {path} must contain a mapping at the top level"
        raise ConfigFileError(msg)
    return document


def load_tree(path: Path) -> ConfigTree:
    """Load *path* and build the config tree.  Raises ``ConfigError`` subclasses."""
    logger.debug("Loading config from {}", path)
    return build_tree(read_document(path))
