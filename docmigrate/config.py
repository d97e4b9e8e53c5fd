"""Configuration loading for docmigrate (.docmigrate.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".docmigrate.yml"

DEFAULT_INCLUDE = ["*.md", "*.mdx"]
DEFAULT_IMAGE_EXTENSIONS = [".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp"]
DEFAULT_KNOWN_PRODUCTS = ["sdk", "ibc", "evm", "hub", "cometbft"]
DEFAULT_CALLOUTS: Dict[str, str] = {
    "note": "Note",
    "tip": "Tip",
    "info": "Info",
    "warning": "Warning",
    "danger": "Warning",
    "caution": "Warning",
}


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class NavigationConfig:
    """Locations of the navigation collaborator files."""

    docs_json: Optional[Path] = None
    versions_json: Optional[Path] = None


@dataclass
class MigrationConfig:
    """Represents the settings defined in .docmigrate.yml."""

    root: Path
    include: List[str] = field(default_factory=lambda: list(DEFAULT_INCLUDE))
    exclude_paths: List[str] = field(default_factory=list)
    target_extension: str = ".mdx"
    image_extensions: List[str] = field(default_factory=lambda: list(DEFAULT_IMAGE_EXTENSIONS))
    assets_root: Optional[Path] = None
    assets_url: str = "/assets"
    staging_dir: Optional[Path] = None
    rewrite_front_matter: bool = False
    known_products: List[str] = field(default_factory=lambda: list(DEFAULT_KNOWN_PRODUCTS))
    callouts: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_CALLOUTS))
    navigation: NavigationConfig = field(default_factory=NavigationConfig)

    @property
    def source_extensions(self) -> List[str]:
        suffixes = []
        for pattern in self.include:
            suffix = Path(pattern).suffix.lower()
            if suffix and suffix not in suffixes:
                suffixes.append(suffix)
        return suffixes or [".md", ".mdx"]


def load_config(config_path: Path) -> MigrationConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return MigrationConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = MigrationConfig(root=root)

    include = _as_str_list(data.get("include"))
    if include:
        config.include = include
    config.exclude_paths = _as_str_list(data.get("exclude_paths"))

    target_extension = _as_str(data.get("target_extension"))
    if target_extension:
        config.target_extension = _normalise_extension(target_extension)

    image_extensions = _as_str_list(data.get("image_extensions"))
    if image_extensions:
        config.image_extensions = [_normalise_extension(ext) for ext in image_extensions]

    assets_root = _as_str(data.get("assets_root"))
    if assets_root:
        config.assets_root = root / assets_root
    assets_url = _as_str(data.get("assets_url"))
    if assets_url:
        config.assets_url = "/" + assets_url.strip("/")

    staging_dir = _as_str(data.get("staging_dir"))
    if staging_dir:
        config.staging_dir = root / staging_dir

    rewrite = _as_bool(data.get("rewrite_front_matter"))
    if rewrite is not None:
        config.rewrite_front_matter = rewrite

    if "known_products" in data:
        config.known_products = _as_str_list(data.get("known_products"))

    callouts = _as_dict(data.get("callouts"))
    for kind, tag in callouts.items():
        tag_name = _as_str(tag)
        if not tag_name or not tag_name[:1].isupper():
            raise ConfigError(f"Callout tag for '{kind}' must be a capitalised component name")
        config.callouts[str(kind).lower()] = tag_name

    navigation = _as_dict(data.get("navigation"))
    if navigation:
        docs_json = _as_str(navigation.get("docs_json"))
        versions_json = _as_str(navigation.get("versions_json"))
        config.navigation = NavigationConfig(
            docs_json=root / docs_json if docs_json else None,
            versions_json=root / versions_json if versions_json else None,
        )

    return config


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
    return loaded or {}


def _normalise_extension(value: str) -> str:
    value = value.strip().lower()
    return value if value.startswith(".") else f".{value}"


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


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
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DEFAULT_CALLOUTS",
    "MigrationConfig",
    "NavigationConfig",
    "load_config",
]
