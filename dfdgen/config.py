"""Configuration loading for dfdgen (.dfdgen.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .classification.oracle import DEFAULT_ORACLE_TIMEOUT

CONFIG_FILENAME = ".dfdgen.yml"
OUTPUT_FORMATS = ("json", "yaml")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ClassifierConfig:
    """Type oracle budget and extra naming-heuristic patterns."""

    oracle_timeout: float = DEFAULT_ORACLE_TIMEOUT
    function_prefixes: List[str] = field(default_factory=list)
    function_names: List[str] = field(default_factory=list)


@dataclass
class ProcessorConfig:
    """Processor enablement."""

    enabled: List[str] = field(default_factory=list)
    disabled: List[str] = field(default_factory=list)


@dataclass
class OutputConfig:
    format: str = "json"
    indent: int = 2


@dataclass
class DFDGenConfig:
    """Represents the settings defined in .dfdgen.yml."""

    root: Path
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    processors: ProcessorConfig = field(default_factory=ProcessorConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def load_config(config_path: Path) -> DFDGenConfig:
    """Load configuration from disk; a missing file yields the defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return DFDGenConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    classifier = ClassifierConfig()
    classifier_data = _as_dict(data.get("classifier"))
    if classifier_data:
        timeout = _as_float(classifier_data.get("oracle_timeout"))
        if timeout is not None:
            if timeout <= 0:
                raise ConfigError("classifier.oracle_timeout must be positive")
            classifier.oracle_timeout = timeout
        classifier.function_prefixes = _as_str_list(classifier_data.get("function_prefixes"))
        classifier.function_names = _as_str_list(classifier_data.get("function_names"))

    processors = ProcessorConfig()
    processor_data = _as_dict(data.get("processors"))
    if processor_data:
        processors.enabled = _as_str_list(processor_data.get("enabled"))
        processors.disabled = _as_str_list(processor_data.get("disabled"))

    output = OutputConfig()
    output_data = _as_dict(data.get("output"))
    if output_data:
        fmt = _as_str(output_data.get("format"))
        if fmt is not None:
            fmt = fmt.lower()
            if fmt not in OUTPUT_FORMATS:
                raise ConfigError(
                    f"output.format must be one of {', '.join(OUTPUT_FORMATS)}, got '{fmt}'"
                )
            output.format = fmt
        indent = _as_int(output_data.get("indent"))
        if indent is not None:
            output.indent = max(indent, 0)

    return DFDGenConfig(root=root, classifier=classifier, processors=processors, output=output)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read {path}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


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
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ClassifierConfig",
    "ConfigError",
    "DFDGenConfig",
    "OutputConfig",
    "ProcessorConfig",
    "load_config",
]
