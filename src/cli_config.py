"""Configuration loading for the CLI.

Extracted from provisioner.py to keep the entrypoint slim. The container
configuration is YAML; the bundled ``tomcat.yml`` is used unless a file is
named on the command line or in ``PROVISIONER_CONFIG``.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import yaml

from common.errors import ConfigurationError
from util.resource_utils import resource_path

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = resource_path("config", "tomcat.yml")


def load_configuration(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load the container configuration mapping.

    Args:
        config_path: Path to a YAML file, or None for the bundled default.

    Raises:
        ConfigurationError: The file is missing, unreadable or not a mapping.
    """
    path = config_path or os.fspath(DEFAULT_CONFIG)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigurationError(f"cannot read configuration {path}: {exc.strerror or exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"malformed configuration {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"configuration {path} must be a mapping")
    logger.debug("Loaded configuration from %s", path)
    return data

