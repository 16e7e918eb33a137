"""Configuration loading for srcverify (.srcverify.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".srcverify.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""

    exit_code = 7


@dataclass
class ToolConfig:
    """External OpenPGP executables."""

    gpg: str = "gpg"
    gpgv: str = "gpgv"


@dataclass
class ClassifierConfig:
    """Filename and content heuristics used to label declared sources."""

    signature_extensions: List[str] = field(default_factory=lambda: [".sig", ".sign"])
    keyring_extensions: List[str] = field(default_factory=lambda: [".gpg"])
    excluded_names: List[str] = field(default_factory=lambda: ["macros.gpg"])
    sniff_lines: int = 10


@dataclass
class VerifyConfig:
    """Execution settings for verification runs."""

    tmpdir: Optional[Path] = None
    require_signatures: bool = False


@dataclass
class SrcVerifyConfig:
    """Represents the settings defined in .srcverify.yml."""

    root: Path
    tools: ToolConfig = field(default_factory=ToolConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    verify: VerifyConfig = field(default_factory=VerifyConfig)


def load_config(config_path: Path) -> SrcVerifyConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return SrcVerifyConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    tools = ToolConfig()
    tools_data = _as_dict(data.get("tools"))
    if tools_data:
        tools.gpg = _as_str(tools_data.get("gpg")) or tools.gpg
        tools.gpgv = _as_str(tools_data.get("gpgv")) or tools.gpgv

    classifier = ClassifierConfig()
    classifier_data = _as_dict(data.get("classifier"))
    if classifier_data:
        if "signature_extensions" in classifier_data:
            classifier.signature_extensions = _as_extensions(
                classifier_data.get("signature_extensions")
            )
        if "keyring_extensions" in classifier_data:
            classifier.keyring_extensions = _as_extensions(
                classifier_data.get("keyring_extensions")
            )
        if "excluded_names" in classifier_data:
            classifier.excluded_names = _as_str_list(classifier_data.get("excluded_names"))
        sniff_lines = _as_int(classifier_data.get("sniff_lines"))
        if sniff_lines is not None:
            if sniff_lines < 1:
                raise ConfigError("classifier.sniff_lines must be a positive integer")
            classifier.sniff_lines = sniff_lines

    verify = VerifyConfig()
    verify_data = _as_dict(data.get("verify"))
    if verify_data:
        tmpdir = _as_str(verify_data.get("tmpdir"))
        if tmpdir:
            verify.tmpdir = (root / tmpdir).resolve()
        verify.require_signatures = _as_bool(verify_data.get("require_signatures")) or False

    return SrcVerifyConfig(root=root, tools=tools, classifier=classifier, verify=verify)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
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
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


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


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


def _as_extensions(value: Any) -> List[str]:
    # Accept "sig" as well as ".sig".
    return [item if item.startswith(".") else f".{item}" for item in _as_str_list(value) if item]


__all__ = [
    "CONFIG_FILENAME",
    "ClassifierConfig",
    "ConfigError",
    "SrcVerifyConfig",
    "ToolConfig",
    "VerifyConfig",
    "load_config",
]
