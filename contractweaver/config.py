"""Configuration loading for contractweaver (.contractweaver.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".contractweaver.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class RuntimeConfig:
    """Names of the PHP runtime pieces referenced by generated code."""

    context_class: str = "\\ContractWeaver\\ContractContext"
    context_variable: str = "$contractContext"
    result_variable: str = "$contractResult"
    exception_class: str = "\\Exception"


@dataclass
class WeavingConfig:
    """Settings controlling how method bodies are rewritten."""

    original_suffix: str = "__orig"
    accessor_hooks: List[str] = field(default_factory=lambda: ["__get", "__set"])
    dir_constant: str = "CONTRACTWEAVER_DIR_SUBSTITUTE"
    file_constant: str = "CONTRACTWEAVER_FILE_SUBSTITUTE"
    chunk_size: Optional[int] = None


@dataclass
class WeaverConfig:
    """Represents the settings defined in .contractweaver.yml."""

    root: Path
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    weaving: WeavingConfig = field(default_factory=WeavingConfig)


def default_config() -> WeaverConfig:
    """Return a configuration rooted at the current directory with default settings."""
    return WeaverConfig(root=Path.cwd())


def load_config(config_path: Path) -> WeaverConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return WeaverConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    runtime = RuntimeConfig()
    runtime_data = _as_dict(data.get("runtime"))
    if runtime_data:
        runtime.context_class = _as_str(runtime_data.get("context_class")) or runtime.context_class
        runtime.context_variable = _as_variable(
            runtime_data.get("context_variable"), runtime.context_variable
        )
        runtime.result_variable = _as_variable(
            runtime_data.get("result_variable"), runtime.result_variable
        )
        runtime.exception_class = (
            _as_str(runtime_data.get("exception_class")) or runtime.exception_class
        )

    weaving = WeavingConfig()
    weaving_data = _as_dict(data.get("weaving"))
    if weaving_data:
        weaving.original_suffix = (
            _as_str(weaving_data.get("original_suffix")) or weaving.original_suffix
        )
        if "accessor_hooks" in weaving_data:
            weaving.accessor_hooks = _as_str_list(weaving_data.get("accessor_hooks"))
        weaving.dir_constant = _as_str(weaving_data.get("dir_constant")) or weaving.dir_constant
        weaving.file_constant = (
            _as_str(weaving_data.get("file_constant")) or weaving.file_constant
        )
        chunk_size = _as_int(weaving_data.get("chunk_size"))
        if chunk_size is not None and chunk_size <= 0:
            chunk_size = None
        weaving.chunk_size = chunk_size

    if weaving.dir_constant == weaving.file_constant:
        raise ConfigError("weaving.dir_constant and weaving.file_constant must differ")

    return WeaverConfig(root=root, runtime=runtime, weaving=weaving)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.suffix not in (".yml", ".yaml"):
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_variable(value: Any, default: str) -> str:
    name = _as_str(value)
    if not name:
        return default
    return name if name.startswith("$") else f"${name}"


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "RuntimeConfig",
    "WeaverConfig",
    "WeavingConfig",
    "default_config",
    "load_config",
]
