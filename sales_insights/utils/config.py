"""
Pipeline configuration loading.

The YAML file lives next to the package so the DAG and the command line
entry point read the same settings.
"""

from pathlib import Path
from typing import Any, Optional, Union

import yaml

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config.yaml"


def load_config(path: Optional[Union[str, Path]] = None) -> dict[str, Any]:
    """
    Load the pipeline configuration from YAML.

    Falls back to the packaged config.yaml when no path is given. Missing
    sections come back as empty dicts so callers can use ``.get`` freely.
    """
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        config = yaml.safe_load(f) or {}

    if not isinstance(config, dict):
        raise ValueError(f"Config file {config_path} must contain a YAML mapping")

    for section in ("source", "cleaning", "report"):
        config.setdefault(section, {})
        if config[section] is None:
            config[section] = {}

    return config
