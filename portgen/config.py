"""Configuration loading for portgen (.portgen.yml)."""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .assembler import DeclarationNames
from .errors import ConfigError

CONFIG_FILENAME = ".portgen.yml"
DEFAULT_SOURCE_ROOT = "src"
DEFAULT_OUTPUT_NAME = "index.d.ts"
DEFAULT_EXTRACTOR_TIMEOUT = 120.0


@dataclass
class ExtractorConfig:
    """How to run the type extractor that emits the module descriptor."""

    command: List[str] = field(default_factory=list)
    cwd: Optional[Path] = None
    timeout: float = DEFAULT_EXTRACTOR_TIMEOUT


@dataclass
class NamesConfig:
    """Identifier overrides for the generated declaration file."""

    message: Optional[str] = None
    flags: Optional[str] = None
    app: Optional[str] = None
    root: Optional[str] = None

    def to_declaration_names(self) -> DeclarationNames:
        defaults = DeclarationNames()
        return DeclarationNames(
            message=self.message or defaults.message,
            flags=self.flags or defaults.flags,
            app=self.app or defaults.app,
            root=self.root or defaults.root,
        )


@dataclass
class PortgenConfig:
    """Represents the settings defined in .portgen.yml."""

    root: Path
    source_root: Path = Path(DEFAULT_SOURCE_ROOT)
    module: Optional[str] = None
    output_name: str = DEFAULT_OUTPUT_NAME
    descriptor: Optional[Path] = None
    extractor: ExtractorConfig = field(default_factory=ExtractorConfig)
    names: NamesConfig = field(default_factory=NamesConfig)
    templates_dir: Optional[Path] = None

    def output_path(self, module_path: Sequence[str]) -> Path:
        """Return `<source_root>/<Module/Path>/index.d.ts` for a module's path segments."""
        base = self.source_root if self.source_root.is_absolute() else self.root / self.source_root
        return base.joinpath(*module_path) / self.output_name


def load_config(config_path: Path) -> PortgenConfig:
    """Load configuration from disk, returning defaults when the file is missing."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return PortgenConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    source_root = _as_str(data.get("source_root")) or DEFAULT_SOURCE_ROOT
    output_name = _as_str(data.get("output_name")) or DEFAULT_OUTPUT_NAME
    if "/" in output_name or "\\" in output_name:
        raise ConfigError("output_name must be a file name, not a path")

    descriptor_str = _as_str(data.get("descriptor"))
    templates_dir_str = _as_str(data.get("templates_dir"))

    extractor = ExtractorConfig()
    extractor_data = _as_dict(data.get("extractor"))
    if extractor_data:
        extractor.command = _as_command(extractor_data.get("command"))
        cwd_str = _as_str(extractor_data.get("cwd"))
        extractor.cwd = root / cwd_str if cwd_str else None
        timeout = _as_float(extractor_data.get("timeout"))
        if timeout is not None:
            if timeout <= 0:
                raise ConfigError("extractor.timeout must be positive")
            extractor.timeout = timeout

    names = NamesConfig()
    names_data = _as_dict(data.get("names"))
    if names_data:
        names.message = _as_str(names_data.get("message"))
        names.flags = _as_str(names_data.get("flags"))
        names.app = _as_str(names_data.get("app"))
        names.root = _as_str(names_data.get("root"))
        # Fail at load time rather than mid-run.
        names.to_declaration_names()

    return PortgenConfig(
        root=root,
        source_root=Path(source_root),
        module=_as_str(data.get("module")),
        output_name=output_name,
        descriptor=root / descriptor_str if descriptor_str else None,
        extractor=extractor,
        names=names,
        templates_dir=root / templates_dir_str if templates_dir_str else None,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
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


def _as_command(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return shlex.split(value)
    if isinstance(value, list) and all(isinstance(item, (str, int, float)) for item in value):
        return [str(item) for item in value]
    raise ConfigError("extractor.command must be a string or a list of strings")


__all__ = [
    "CONFIG_FILENAME",
    "ExtractorConfig",
    "NamesConfig",
    "PortgenConfig",
    "load_config",
]
