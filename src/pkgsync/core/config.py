"""
pkgsync configuration management (YAML layers + environment overrides).

Configuration sources (highest to lowest priority):
1. Environment variables: PKGSYNC_<section>__<key>
2. Project config: <repo-root>/.pkgsync/config.yaml
3. Bundled defaults: pkgsync.data/config/defaults.yaml

The merged result is validated against the bundled JSON Schema before the
typed :class:`SyncConfig` view is built.
"""
from __future__ import annotations

import copy
import json
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from jsonschema import Draft202012Validator

from pkgsync.core.exceptions import ConfigError
from pkgsync.core.file_io.utils import read_yaml
from pkgsync.data import read_yaml as read_bundled_yaml

logger = logging.getLogger(__name__)

ENV_PREFIX = "PKGSYNC_"
PROJECT_CONFIG_DIR = ".pkgsync"
PROJECT_CONFIG_FILE = "config.yaml"


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge dictionaries without mutating inputs.

    Lists are replaced, not concatenated.

    Example:
        >>> deep_merge({"a": 1, "b": {"c": 2}}, {"b": {"d": 3}})
        {'a': 1, 'b': {'c': 2, 'd': 3}}
    """
    result: Dict[str, Any] = dict(base)
    for key, value in (override or {}).items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


@dataclass(frozen=True, slots=True)
class RebuildCommands:
    """Argv lists for one external rebuilder. Empty lists are no-ops."""

    clear: tuple[str, ...] = ()
    build: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class SyncConfig:
    """Typed view over the merged configuration.

    Attributes:
        installer_name: Installer identity that scopes reconciliation
        vendor_dir: Vendor directory (relative paths are against the working dir)
        registry_path: Registry file (relative paths are against the working dir)
        factory_class: Generated factory class name
        factory_file: Generated factory file path
        factory_constant: Name of the constant holding the factory class
        autoload_manifest: Constant-definition manifest, relative to vendor_dir
        classmap_manifest: Class-map manifest, relative to vendor_dir
        constant_template: Jinja2 template for the constant fragment
        classmap_template: Jinja2 template for the class-map entry fragment
        repository_rebuild: Commands for the repository rebuilder
        discovery_rebuild: Commands for the discovery rebuilder
        log_level: Logging level name
        log_file: Optional log file path
    """

    installer_name: str
    vendor_dir: str
    registry_path: str
    factory_class: str
    factory_file: str
    factory_constant: str
    autoload_manifest: str
    classmap_manifest: str
    constant_template: str
    classmap_template: str
    repository_rebuild: RebuildCommands
    discovery_rebuild: RebuildCommands
    log_level: str = "INFO"
    log_file: str | None = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SyncConfig:
        """Build from a merged, schema-validated configuration mapping."""
        manifests = data["manifests"]
        rebuild = data.get("rebuild") or {}
        logging_cfg = data.get("logging") or {}

        def _commands(section: str) -> RebuildCommands:
            raw = rebuild.get(section) or {}
            return RebuildCommands(
                clear=tuple(str(p) for p in raw.get("clear") or ()),
                build=tuple(str(p) for p in raw.get("build") or ()),
            )

        return cls(
            installer_name=data["installer"]["name"],
            vendor_dir=data["paths"]["vendorDir"],
            registry_path=data["paths"]["registry"],
            factory_class=data["factory"]["class"],
            factory_file=data["factory"]["file"],
            factory_constant=data["factory"]["constant"],
            autoload_manifest=manifests["autoload"],
            classmap_manifest=manifests["classmap"],
            constant_template=manifests["constant"]["template"],
            classmap_template=manifests["classmap_entry"]["template"],
            repository_rebuild=_commands("repository"),
            discovery_rebuild=_commands("discovery"),
            log_level=str(logging_cfg.get("level") or "INFO"),
            log_file=logging_cfg.get("file"),
        )


class ConfigManager:
    """Load, merge, and validate pkgsync configuration."""

    def __init__(self, repo_root: Path) -> None:
        self.repo_root = Path(repo_root)

    @property
    def project_config_path(self) -> Path:
        """Path to the project's config.yaml."""
        return self.repo_root / PROJECT_CONFIG_DIR / PROJECT_CONFIG_FILE

    # ---------- Environment overrides ----------

    def _coerce_type(self, value: str) -> Any:
        s = value.strip()
        low = s.lower()
        if low in {"true", "false"}:
            return low == "true"
        if low in {"null", "none"}:
            return None
        if re.fullmatch(r"[-+]?\d+", s):
            return int(s)
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            return float(s)
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except ValueError:
                return s
        return s

    def _iter_env_overrides(self) -> Iterator[Tuple[List[str], Any]]:
        for key in sorted(os.environ.keys()):
            if not key.startswith(ENV_PREFIX):
                continue
            raw = key[len(ENV_PREFIX):]
            # Only sectioned keys are config overrides (PKGSYNC_PROJECT_ROOT is not).
            if "__" not in raw:
                continue
            segs = raw.split("__")
            if any(seg == "" for seg in segs):
                raise ConfigError(f"Malformed {ENV_PREFIX}* key: empty segment in '{key}'.")
            yield segs, self._coerce_type(os.environ[key])

    def _set_nested(self, root: Dict[str, Any], path: List[str], value: Any) -> None:
        cur: Dict[str, Any] = root
        for i, part in enumerate(path):
            # Case-insensitive match so PKGSYNC_paths__vendordir hits vendorDir.
            existing = {k.lower(): k for k in cur.keys() if isinstance(k, str)}
            key = existing.get(part.lower(), part)
            if i == len(path) - 1:
                cur[key] = value
                return
            nxt = cur.get(key)
            if not isinstance(nxt, dict):
                if nxt is not None:
                    raise ConfigError(f"Cannot override '{'.'.join(path)}': '{key}' is not a section.")
                nxt = {}
                cur[key] = nxt
            cur = nxt

    def apply_env_overrides(self, cfg: Dict[str, Any]) -> None:
        for path, value in self._iter_env_overrides():
            logger.debug("Config override from environment: %s", ".".join(path))
            self._set_nested(cfg, path, value)

    # ---------- Loading ----------

    def load_yaml(self, path: Path) -> Dict[str, Any]:
        # Fail closed: configuration must never silently ignore invalid YAML.
        try:
            data = read_yaml(path, default={})
        except Exception as exc:
            raise ConfigError(f"Invalid configuration file {path}: {exc}", context={"path": str(path)}) from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration file {path} must contain a mapping", context={"path": str(path)})
        return data

    def validate_schema(self, cfg: Dict[str, Any]) -> None:
        schema = read_bundled_yaml("schemas", "config.schema.yaml")
        validator = Draft202012Validator(schema)
        errors = sorted(validator.iter_errors(cfg), key=lambda e: list(e.path))
        if errors:
            first = errors[0]
            where = ".".join(str(p) for p in first.path) or "<root>"
            raise ConfigError(
                f"Invalid configuration at {where}: {first.message}",
                context={"path": where, "errors": len(errors)},
            )

    def get_config(self, *, validate: bool = True) -> Dict[str, Any]:
        """Return the merged configuration mapping."""
        cfg = copy.deepcopy(read_bundled_yaml("config", "defaults.yaml"))
        cfg = deep_merge(cfg, self.load_yaml(self.project_config_path))
        self.apply_env_overrides(cfg)
        if validate:
            self.validate_schema(cfg)
        return cfg

    def load(self) -> SyncConfig:
        """Load, validate and return the typed configuration."""
        return SyncConfig.from_dict(self.get_config())


def load_config(repo_root: Path, overrides: Optional[Dict[str, Any]] = None) -> SyncConfig:
    """Convenience loader with optional in-process overrides (highest priority)."""
    manager = ConfigManager(repo_root)
    cfg = manager.get_config(validate=False)
    if overrides:
        cfg = deep_merge(cfg, overrides)
    manager.validate_schema(cfg)
    return SyncConfig.from_dict(cfg)


__all__ = [
    "ConfigManager",
    "SyncConfig",
    "RebuildCommands",
    "load_config",
    "deep_merge",
]
