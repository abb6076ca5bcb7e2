"""Configuration module for mediasort."""

import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from mediasort.errors import ConfigError, InvalidPolicyError

DEFAULT_TARGET_DIR_NAME = "mediasorted"
DEFAULT_ONEOFFS_DIR_NAME = "Miscellaneous"
UNKNOWN_DEVICE_DIR_NAME = "Unknown"
DATE_DIR_FORMAT = "%Y.%m.%d"

DATE_DIR_PATTERN = re.compile(r"^\d{4}\.\d{2}\.\d{2}$")
CUSTOM_EXTENSION_CATEGORIES = ("image", "video", "audio")


@dataclass
class FoldersConfig:
    source_dirs: list[Path] = field(default_factory=list)
    target_dir: Path = field(default_factory=lambda: Path.cwd() / DEFAULT_TARGET_DIR_NAME)

    # A date needs strictly more files than this to get its own folder,
    # unless it holds files from at least two devices
    min_files_per_dir: int = 1

    # Consecutive preview lines with the same status beyond this are elided; 0 disables
    compacting_threshold: int = 0

    oneoffs_dir_name: str = DEFAULT_ONEOFFS_DIR_NAME


@dataclass
class OptionsConfig:
    verbose: bool = False
    align_file_output: bool = True
    always_create_device_subdirs: bool = False
    source_recursive: bool = True
    include_device_make: bool = True
    copy_not_move: bool = True


@dataclass
class CustomConfig:
    # Exact-match replacements for device names read from metadata
    device_names: dict[str, str] = field(default_factory=dict)

    # Extra extensions per media category, without the dot and lower-cased
    extensions: dict[str, list[str]] = field(
        default_factory=lambda: {category: [] for category in CUSTOM_EXTENSION_CATEGORIES}
    )


@dataclass
class AdvancedConfig:
    max_threads: int = 4


@dataclass
class Config:
    folders: FoldersConfig = field(default_factory=FoldersConfig)
    options: OptionsConfig = field(default_factory=OptionsConfig)
    custom: CustomConfig = field(default_factory=CustomConfig)
    advanced: AdvancedConfig = field(default_factory=AdvancedConfig)


def validate_config(config: Config) -> None:
    """Reject values outside their valid domain before any work starts.

    Raises:
        InvalidPolicyError: If any value is invalid.
    """
    if config.advanced.max_threads < 1:
        raise InvalidPolicyError(
            f"max_threads must be at least 1, got {config.advanced.max_threads}"
        )
    if config.folders.min_files_per_dir < 0:
        raise InvalidPolicyError(
            f"min_files_per_dir must not be negative, got {config.folders.min_files_per_dir}"
        )
    if config.folders.compacting_threshold < 0:
        raise InvalidPolicyError(
            "min_files_before_compacting_output must not be negative, "
            f"got {config.folders.compacting_threshold}"
        )
    if not config.folders.source_dirs:
        raise InvalidPolicyError("At least one source folder is required")

    oneoffs = config.folders.oneoffs_dir_name
    if not oneoffs.strip():
        raise InvalidPolicyError("target_oneoffs_subdir_name must not be empty")
    if "/" in oneoffs or "\\" in oneoffs:
        raise InvalidPolicyError(
            f"target_oneoffs_subdir_name must be a single folder name, got {oneoffs!r}"
        )
    if DATE_DIR_PATTERN.match(oneoffs):
        raise InvalidPolicyError(
            f"target_oneoffs_subdir_name {oneoffs!r} would collide with a date folder"
        )


def load_config(path: Path) -> Config:
    """Load a TOML configuration file.

    Missing keys keep their defaults. Unknown keys are ignored.

    Raises:
        ConfigError: If the file cannot be read, parsed, or has wrongly typed values.
    """
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise ConfigError(f"Could not read config file {path}: {e}") from e
    try:
        data = tomllib.loads(raw.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise ConfigError(f"Config is not valid UTF-8: {path}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"TOML parse error in {path}: {e}") from e

    return config_from_dict(data, base_dir=path.parent)


def config_from_dict(data: dict[str, Any], base_dir: Path | None = None) -> Config:
    """Build a Config from already-parsed TOML data."""
    config = Config()
    base_dir = base_dir or Path.cwd()

    folders = _table(data, "folders")
    source_dirs = _expect(folders, "folders.source_dirs", list)
    if source_dirs is not None:
        config.folders.source_dirs = [
            _resolve(base_dir, _as_str(item, "folders.source_dirs")) for item in source_dirs
        ]
    target_dir = _expect(folders, "folders.target_dir", str)
    if target_dir:
        config.folders.target_dir = _resolve(base_dir, target_dir)
    _set_int(config.folders, "min_files_per_dir", folders, "folders.min_files_per_dir")
    _set_int(
        config.folders,
        "compacting_threshold",
        folders,
        "folders.min_files_before_compacting_output",
    )
    oneoffs = _expect(folders, "folders.target_oneoffs_subdir_name", str)
    if oneoffs:
        config.folders.oneoffs_dir_name = oneoffs

    options = _table(data, "options")
    for name in (
        "verbose",
        "align_file_output",
        "always_create_device_subdirs",
        "source_recursive",
        "include_device_make",
        "copy_not_move",
    ):
        value = _expect(options, f"options.{name}", bool)
        if value is not None:
            setattr(config.options, name, value)

    custom = _table(data, "custom")
    devices = _expect(custom, "custom.devices", dict)
    if devices is not None:
        config.custom.device_names = {
            str(key): _as_str(value, f"custom.devices.{key}") for key, value in devices.items()
        }
    extensions = _expect(custom, "custom.extensions", dict)
    if extensions is not None:
        for category in CUSTOM_EXTENSION_CATEGORIES:
            values = _expect(extensions, f"custom.extensions.{category}", list)
            if values is not None:
                config.custom.extensions[category] = [
                    _as_str(v, f"custom.extensions.{category}").lower().lstrip(".")
                    for v in values
                ]

    advanced = _table(data, "advanced")
    _set_int(config.advanced, "max_threads", advanced, "advanced.max_threads")

    return config


def _table(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name, {})
    if not isinstance(value, dict):
        raise ConfigError(f"Expected a table for [{name}], got: {type(value).__name__}")
    return value


def _expect(table: dict[str, Any], dotted: str, typ: type) -> Any:
    key = dotted.rsplit(".", 1)[-1]
    value = table.get(key)
    if value is None:
        return None
    # bool is a subclass of int; keep the two apart
    if typ is int and isinstance(value, bool):
        raise ConfigError(f"Expected int for '{dotted}', got: bool")
    if not isinstance(value, typ):
        raise ConfigError(f"Expected {typ.__name__} for '{dotted}', got: {type(value).__name__}")
    return value


def _set_int(target: object, attr: str, table: dict[str, Any], dotted: str) -> None:
    value = _expect(table, dotted, int)
    if value is not None:
        setattr(target, attr, value)


def _as_str(value: Any, dotted: str) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"Expected str for '{dotted}', got: {type(value).__name__}")
    return value


def _resolve(base_dir: Path, value: str) -> Path:
    path = Path(value).expanduser()
    return path if path.is_absolute() else base_dir / path
