"""Configuration management for wtt."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import tomli
import tomli_w

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_KEYS = ("bare_clone_dir", "worktree_dir")


def _get_data_base() -> Path:
    """Get the base data directory, honoring XDG_DATA_HOME."""
    xdg_data = os.environ.get("XDG_DATA_HOME")
    if xdg_data:
        return Path(xdg_data) / "wtt"
    return Path.home() / ".local" / "share" / "wtt"


def _default_bare_clone_dir() -> Path:
    return _get_data_base() / "bare"


def _default_worktree_dir() -> Path:
    return Path.home() / "devel"


@dataclass(frozen=True)
class Settings:
    """Effective settings for one wtt invocation."""

    bare_clone_dir: Union[Path, str] = field(default_factory=_default_bare_clone_dir)
    worktree_dir: Union[Path, str] = field(default_factory=_default_worktree_dir)

    def __post_init__(self):
        """Ensure paths are absolute Path objects with the user expanded.

        Relative values are anchored at the current directory, since git
        runs with the bare clone as its working directory.
        """
        object.__setattr__(
            self, "bare_clone_dir", Path(self.bare_clone_dir).expanduser().absolute()
        )
        object.__setattr__(self, "worktree_dir", Path(self.worktree_dir).expanduser().absolute())

    def to_dict(self) -> Dict[str, str]:
        """Convert to dictionary for TOML serialization."""
        return {
            "bare_clone_dir": str(self.bare_clone_dir),
            "worktree_dir": str(self.worktree_dir),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        """Create from a decoded config file; missing keys use the defaults."""
        return cls(
            bare_clone_dir=data.get("bare_clone_dir", _default_bare_clone_dir()),
            worktree_dir=data.get("worktree_dir", _default_worktree_dir()),
        )


def get_config_path() -> Path:
    """Get the path to the default config file."""
    config_dir = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return config_dir / "wtt" / "config.toml"


def load_config(config_path: Path) -> Dict[str, Any]:
    """Load and validate a config file.

    Raises ConfigError when the file cannot be read, is not valid TOML, or
    holds keys or values wtt does not understand.
    """
    try:
        with open(config_path, "rb") as f:
            data = tomli.load(f)
    except tomli.TOMLDecodeError as e:
        raise ConfigError(config_path, str(e)) from e
    except OSError as e:
        raise ConfigError(config_path, e.strerror or str(e)) from e

    for key, value in data.items():
        if key not in CONFIG_KEYS:
            raise ConfigError(config_path, f"unknown key '{key}'")
        if not isinstance(value, str):
            raise ConfigError(
                config_path, f"'{key}' must be a string, got {type(value).__name__}"
            )
        if not value.strip():
            raise ConfigError(config_path, f"'{key}' cannot be empty")

    return data


def resolve_settings(
    config_file: Optional[Path] = None,
    no_config_file: bool = False,
    overrides: Optional[Dict[str, Any]] = None,
) -> Settings:
    """Merge defaults, the config file and command line overrides.

    Args:
        config_file: Explicit config file; it must exist.
        no_config_file: Skip loading any config file.
        overrides: Values from the command line; None entries are ignored.

    Returns:
        The effective Settings.
    """
    data: Dict[str, Any] = {}

    if no_config_file:
        logger.debug("Config file loading disabled")
    elif config_file is not None:
        if not config_file.is_file():
            raise ConfigError(config_file, "file does not exist")
        data = load_config(config_file)
        logger.debug(f"Loaded config from {config_file}")
    else:
        default_path = get_config_path()
        if default_path.exists():
            data = load_config(default_path)
            logger.debug(f"Loaded config from {default_path}")
        else:
            logger.debug(f"No config file at {default_path}, using defaults")

    for key, value in (overrides or {}).items():
        if value is not None:
            data[key] = value

    return Settings.from_dict(data)


def dump_settings(settings: Settings) -> str:
    """Render settings in config file format."""
    return tomli_w.dumps(settings.to_dict())
