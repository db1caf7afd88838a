"""YAML configuration loading.

Used by [RelayHandler.from_yaml()][content_manager.services.handler.RelayHandler.from_yaml]
and the CLI ``--config`` option. Only ``yaml.safe_load`` is used, so YAML
tags cannot instantiate Python objects.

Examples:
    ```python
    from content_manager.core.yaml import load_yaml

    config = load_yaml("config/handler.yaml")
    ```
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigurationError


def load_yaml(config_path: str | Path) -> dict[str, Any]:
    """Load and parse a YAML configuration file into a dictionary.

    Args:
        config_path: Path to the YAML file.

    Returns:
        The parsed mapping, or ``{}`` for an empty file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigurationError: If the file is not valid YAML or its top level
            is not a mapping.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with path.open(encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config file {config_path} must contain a mapping, got {type(data).__name__}"
        )
    return data
