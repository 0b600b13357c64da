import copy
import json
import pathlib
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

from dmi_sprites.errors import ConfigError

DEFAULT_DMI_CONFIG: Dict[str, Any] = {
    "strict_extraction": True,
    "default_size": {
        "width": 32,
        "height": 32
    }
}


@dataclass
class DmiConfig:
    strict_extraction: bool
    default_size: Tuple[int, int]


def deep_merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def load_config(path: pathlib.Path) -> Dict[str, Any]:
    if not path.exists() or path.stat().st_size == 0:
        raise ConfigError(f"Config file {path} does not exist or is empty.")
    try:
        with path.open("r", encoding="utf-8") as handle:
            overrides = json.load(handle)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Config file {path} is not valid JSON: {exc}") from exc
    if not isinstance(overrides, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object.")
    return overrides


def build_config(overrides: Optional[Dict[str, Any]] = None) -> DmiConfig:
    config_json = copy.deepcopy(DEFAULT_DMI_CONFIG)
    if overrides:
        config_json = deep_merge(config_json, overrides)

    size_json = config_json.get("default_size")
    if not isinstance(size_json, dict):
        raise ConfigError("'default_size' must be an object with 'width' and 'height'.")
    try:
        default_size = (int(size_json.get("width")), int(size_json.get("height")))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid numeric config value: {exc}") from exc

    if default_size[0] <= 0 or default_size[1] <= 0:
        raise ConfigError("default_size must be greater than zero.")

    return DmiConfig(
        strict_extraction=bool(config_json.get("strict_extraction")),
        default_size=default_size,
    )


def load_dmi_config(path: Optional[Union[str, pathlib.Path]] = None) -> DmiConfig:
    """Build a DmiConfig from the defaults, merged with a JSON file when given."""
    if path is None:
        return build_config()
    return build_config(load_config(pathlib.Path(path)))


DEFAULT_CONFIG = build_config()
