"""TOML configuration loader with deep merge support."""

import os
import tomllib
from pathlib import Path
from typing import Any


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Overridable with TASTYCHAT_CONFIG_DIR; otherwise the first `config/`
    directory found walking up from the working directory.
    """
    config_dir_env = os.environ.get("TASTYCHAT_CONFIG_DIR")
    if config_dir_env:
        path = Path(config_dir_env)
        if not path.exists():
            raise FileNotFoundError(f"Config directory not found: {config_dir_env}")
        return path

    current = Path.cwd()
    for _ in range(5):
        config_path = current / "config"
        if (config_path / "default.toml").exists():
            return config_path
        current = current.parent

    return Path("config")


def get_environment() -> str:
    """Current environment name from TASTYCHAT_ENV (default 'development')."""
    return os.environ.get("TASTYCHAT_ENV", "development")


def load_toml(file_path: Path) -> dict[str, Any]:
    """Load a TOML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the TOML syntax is invalid
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    with file_path.open("rb") as f:
        return tomllib.load(f)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge two dictionaries, override wins on conflicts."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_config() -> dict[str, Any]:
    """Load config/default.toml merged with config/{env}.toml when present.

    A missing default.toml yields an empty dict so the service still starts
    on code defaults.
    """
    config_dir = get_config_dir()

    default_path = config_dir / "default.toml"
    config = load_toml(default_path) if default_path.exists() else {}

    env_path = config_dir / f"{get_environment()}.toml"
    if env_path.exists():
        config = deep_merge(config, load_toml(env_path))

    return config
