"""Config loading for wtf.toml (and the legacy JSON layout).

A config file only overrides what it names; everything else keeps the
built-in defaults::

    [int]
    min = -10
    max = 10

    [string]
    charset = "abc"
    length = { min = 3, max = 8 }
"""

from __future__ import annotations

import json
import string
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

CONFIG_FILENAME = "wtf.toml"

DEFAULT_CHARSET = string.ascii_lowercase + string.ascii_uppercase + string.digits


class ConfigError(Exception):
    """A config file that cannot be read or breaks a bound rule."""


@dataclass
class Bounds:
    min: float
    max: float


@dataclass
class StringConfig:
    charset: str = DEFAULT_CHARSET
    length: Bounds = field(default_factory=lambda: Bounds(10, 10))


@dataclass
class Config:
    int: Bounds = field(default_factory=lambda: Bounds(-1000, 1000))
    uint: Bounds = field(default_factory=lambda: Bounds(0, 2000))
    float: Bounds = field(default_factory=lambda: Bounds(-1000.0, 1000.0))
    unofloat: Bounds = field(default_factory=lambda: Bounds(0.0, 1.0))
    string: StringConfig = field(default_factory=StringConfig)


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find wtf.toml. Raises FileNotFoundError."""
    path = (start_path or Path.cwd()).resolve()
    if path.is_file():
        path = path.parent
    while True:
        candidate = path / CONFIG_FILENAME
        if candidate.exists():
            return candidate
        parent = path.parent
        if parent == path:
            raise FileNotFoundError(f"No {CONFIG_FILENAME} found in any parent directory")
        path = parent


def load_config(path: Path) -> Config:
    """Parse a TOML (or ``.json``) config file into a validated Config."""
    try:
        if path.suffix == ".json":
            data = json.loads(path.read_text())
        else:
            with open(path, "rb") as f:
                data = tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"failed to read config file: {e}") from e
    except (json.JSONDecodeError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"failed to parse config file {path}: {e}") from e

    config = config_from_dict(data)
    validate_config(config)
    return config


def config_from_dict(data: dict[str, Any]) -> Config:
    if not isinstance(data, dict):
        raise ConfigError("config must be a table of settings")
    config = Config()

    for name, integral in (("int", True), ("uint", True), ("float", False), ("unofloat", False)):
        if name in data:
            current = getattr(config, name)
            setattr(config, name, _bounds(name, data[name], current, integral))

    # TOML nests string settings in [string]; the JSON layout keeps them top level.
    section = data.get("string", data)
    if not isinstance(section, dict):
        raise ConfigError("string must be a table")
    if "charset" in section:
        if not isinstance(section["charset"], str):
            raise ConfigError("charset must be a string")
        config.string.charset = section["charset"]
    if "length" in section:
        config.string.length = _bounds("length", section["length"], config.string.length, True)

    return config


def _bounds(name: str, raw: Any, current: Bounds, integral: bool) -> Bounds:
    if not isinstance(raw, dict):
        raise ConfigError(f"{name} must be a table with min and max")
    result = Bounds(current.min, current.max)
    for key in ("min", "max"):
        if key not in raw:
            continue
        value = raw[key]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(f"{name}.{key} must be a number")
        if integral and not isinstance(value, int):
            raise ConfigError(f"{name}.{key} must be an integer")
        setattr(result, key, value if integral else float(value))
    return result


def validate_config(config: Config) -> None:
    """Raise ConfigError unless every range is ordered and in bounds."""
    for name in ("int", "uint", "float"):
        bounds: Bounds = getattr(config, name)
        if bounds.min >= bounds.max:
            raise ConfigError(
                f"{name}.min ({bounds.min}) must be less than {name}.max ({bounds.max})"
            )

    if config.uint.min < 0:
        raise ConfigError(f"uint.min ({config.uint.min}) must not be negative")

    for key in ("min", "max"):
        value = getattr(config.unofloat, key)
        if not 0.0 <= value <= 1.0:
            raise ConfigError(f"unofloat.{key} ({value}) must be between 0.0 and 1.0")
    if config.unofloat.min >= config.unofloat.max:
        raise ConfigError(
            f"unofloat.min ({config.unofloat.min}) must be less than "
            f"unofloat.max ({config.unofloat.max})"
        )

    if not config.string.charset:
        raise ConfigError("charset cannot be empty")
    length = config.string.length
    if not 0 <= length.min <= length.max:
        raise ConfigError(
            f"length.min ({length.min}) must be between 0 and length.max ({length.max})"
        )
