"""
Run configuration for ndkfetch.

Settings are layered: built-in defaults, then an optional YAML file
(./ndkfetch.yaml or --config), then command-line flags.

Example ndkfetch.yaml:

    install_root: ~/android/ndk
    download_dir: ~/android/downloads
    platform: all
    keep_archives: true
    versions: [25, 28]
"""

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ndkfetch.core.directory import (
    get_base_dir,
    get_default_download_dir,
    get_default_install_root,
)
from ndkfetch.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "ndkfetch.yaml"


@dataclass
class RunConfig:
    """Settings for one ndkfetch run."""

    install_root: Path = field(default_factory=get_default_install_root)
    download_dir: Path = field(default_factory=get_default_download_dir)
    platform: Optional[str] = None
    """Platform tag, 'all', or None/'auto' for host detection"""

    keep_archives: bool = False
    skip_extract: bool = False
    """Only download and verify; implies keeping archives"""

    versions: List[int] = field(default_factory=list)

    @property
    def lock_dir(self) -> Path:
        return get_base_dir() / "lock"

    @property
    def retain_archives(self) -> bool:
        return self.keep_archives or self.skip_extract


def load_yaml_config(config_file: Path, required: bool = False) -> Dict[str, Any]:
    """
    Load and parse a YAML configuration file.

    Args:
        config_file: Path to YAML configuration file
        required: If True, raise error if file doesn't exist

    Returns:
        Configuration dictionary (empty dict if file doesn't exist and not required)

    Raises:
        ConfigError: If the file is required and missing, or is not a YAML mapping
    """
    config_file = Path(config_file)
    if not config_file.exists():
        if required:
            raise ConfigError(f"Configuration file not found: {config_file}")
        logger.debug(f"Config file not found (optional): {config_file}")
        return {}

    logger.debug(f"Loading configuration from {config_file}")
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_file}: {e}") from e

    config = config or {}
    if not isinstance(config, dict):
        raise ConfigError(f"Configuration in {config_file} must be a mapping")
    return config


def _parse_versions(value: Any) -> List[int]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        value = [value]
    return [parse_version(v) for v in value]


def parse_version(value: Any) -> int:
    """
    Parse a release number such as 28, "28" or "r28c".

    Raises:
        ConfigError: If value is not a positive release number
    """
    text = str(value).strip().lower()
    if text.startswith("r"):
        text = text[1:].rstrip("abcdefghijklmnopqrstuvwxyz")
    try:
        number = int(text)
    except ValueError:
        raise ConfigError(f"Invalid NDK version: {value!r}")
    if number <= 0:
        raise ConfigError(f"NDK version must be positive: {value!r}")
    return number


def config_from_mapping(data: Dict[str, Any]) -> RunConfig:
    """
    Build a RunConfig from a parsed configuration mapping.

    Raises:
        ConfigError: If a key is unknown or a value has the wrong type
    """
    known = {f.name for f in fields(RunConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    config = RunConfig()
    for key in ("install_root", "download_dir"):
        if data.get(key):
            setattr(config, key, Path(str(data[key])).expanduser())
    for key in ("keep_archives", "skip_extract"):
        if key in data:
            if not isinstance(data[key], bool):
                raise ConfigError(f"'{key}' must be true or false")
            setattr(config, key, data[key])
    if data.get("platform") is not None:
        config.platform = str(data["platform"])
    config.versions = _parse_versions(data.get("versions"))
    return config


def load_config(config_file: Optional[Path] = None) -> RunConfig:
    """
    Load configuration from config_file, or ./ndkfetch.yaml if present.

    An explicitly given file must exist.
    """
    if config_file is not None:
        data = load_yaml_config(Path(config_file), required=True)
    else:
        data = load_yaml_config(Path.cwd() / DEFAULT_CONFIG_FILE)
    return config_from_mapping(data)


def apply_cli_overrides(config: RunConfig, args) -> RunConfig:
    """Apply command-line flags on top of file configuration."""
    if getattr(args, "install_root", None):
        config.install_root = Path(args.install_root).expanduser()
    if getattr(args, "download_dir", None):
        config.download_dir = Path(args.download_dir).expanduser()
    if getattr(args, "platform", None):
        config.platform = args.platform
    if getattr(args, "keep_archives", False):
        config.keep_archives = True
    if getattr(args, "skip_extract", False):
        config.skip_extract = True
    if getattr(args, "versions", None):
        config.versions = [parse_version(v) for v in args.versions]
    return config


__all__ = [
    "RunConfig",
    "DEFAULT_CONFIG_FILE",
    "load_yaml_config",
    "load_config",
    "config_from_mapping",
    "apply_cli_overrides",
    "parse_version",
]
