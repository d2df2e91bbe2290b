"""
Configuration management for apipush.

Handles loading, merging, and discovery of registry configuration files
and the per-API merged view used while pushing a single definition.
"""
import copy
import importlib.resources as importlib_resources
import json
import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import yaml


logger = logging.getLogger(__name__)

CONFIG_FILENAMES = ["redocly.yaml", ".redocly.yaml"]

DECORATOR_OFF = "off"


@dataclass
class Styleguide:
    """Rules and decorators that apply to one definition"""
    rules: Dict = field(default_factory=dict)
    decorators: Dict = field(default_factory=dict)

    def skip_decorators(self, names: Optional[Iterable[str]]) -> None:
        """Turn the named decorators off"""
        if not names:
            return
        for name in names:
            self.decorators[name] = DECORATOR_OFF

    @property
    def active_decorators(self) -> List[str]:
        return [name for name, setting in self.decorators.items() if setting != DECORATOR_OFF]


@dataclass
class ResolvedConfig:
    """Configuration merged for a single API entry"""
    styleguide: Styleguide
    config_file: Optional[str] = None
    skip_refs: List[str] = field(default_factory=list)
    files: List[str] = field(default_factory=list)


@dataclass
class RegistryConfig:
    """Loaded registry configuration"""
    region: str = "us"
    organization: Optional[str] = None
    apis: Dict[str, Dict] = field(default_factory=dict)
    styleguide: Dict = field(default_factory=dict)
    resolve: Dict = field(default_factory=dict)
    files: List[str] = field(default_factory=list)
    config_file: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[dict], config_file: Optional[str] = None) -> "RegistryConfig":
        data = data or {}
        styleguide = dict(data.get("styleguide") or {})
        for key in ("rules", "decorators"):
            if key in data:
                styleguide[key] = ConfigManager.deep_merge(styleguide.get(key) or {}, data[key] or {})

        return cls(
            region=data.get("region") or "us",
            organization=data.get("organization"),
            apis=dict(data.get("apis") or {}),
            styleguide=styleguide,
            resolve=dict(data.get("resolve") or {}),
            files=list(data.get("files") or []),
            config_file=config_file,
        )

    def merged_for(self, api_key: str) -> ResolvedConfig:
        """Root styleguide with the API-specific overrides merged on top"""
        base = copy.deepcopy(self.styleguide)
        api = self.apis.get(api_key) or {}
        overrides = dict(api.get("styleguide") or {})
        for key in ("rules", "decorators"):
            if key in api:
                overrides[key] = ConfigManager.deep_merge(overrides.get(key) or {}, api[key] or {})

        merged = ConfigManager.deep_merge(base, overrides)
        skip_refs = (self.resolve.get("skip_refs") or []) + ((api.get("resolve") or {}).get("skip_refs") or [])

        return ResolvedConfig(
            styleguide=Styleguide(
                rules=dict(merged.get("rules") or {}),
                decorators=dict(merged.get("decorators") or {}),
            ),
            config_file=self.config_file,
            skip_refs=list(skip_refs),
            files=list(self.files),
        )


class ConfigManager:
    """Manages apipush configuration loading and merging operations."""

    def load_config(self, path: str) -> dict:
        """Load configuration from YAML file."""
        with open(path, "r") as f:
            return yaml.safe_load(f) or {}

    @staticmethod
    def deep_merge(default: dict, user: dict) -> dict:
        """Deep merge user config into default config."""
        result = default.copy()
        for key, value in user.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = ConfigManager.deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    def load_package_default_config(self) -> dict:
        """Load default config from package."""
        import apipush.config
        default_config_path = importlib_resources.files(apipush.config) / 'default.yaml'
        with default_config_path.open('r') as f:
            return yaml.safe_load(f) or {}

    def load_and_merge_config(self, user_config_path: str) -> RegistryConfig:
        """Load user config and merge with package default."""
        default_config = self.load_package_default_config()
        user_config = self.load_config(user_config_path)
        logger.debug(f"Loaded configuration from {user_config_path}")
        return RegistryConfig.from_dict(
            self.deep_merge(default_config, user_config),
            config_file=os.path.abspath(user_config_path),
        )

    def load_json_config(self, payload: str) -> RegistryConfig:
        """Load an already merged configuration passed as JSON."""
        data = json.loads(payload) if payload else {}
        return RegistryConfig.from_dict(self.deep_merge(self.load_package_default_config(), data or {}))

    def discover_and_load_config(self, config_arg: Optional[str]) -> RegistryConfig:
        """Discover config file with priority order."""

        # Priority 1: --config argument
        if config_arg:
            if os.path.exists(config_arg):
                return self.load_and_merge_config(config_arg)
            else:
                raise FileNotFoundError(f"Config file not found: {config_arg}")

        # Priority 2: redocly.yaml in current directory
        for filename in CONFIG_FILENAMES:
            if os.path.exists(filename):
                return self.load_and_merge_config(filename)

        # Priority 3: Package default config
        return RegistryConfig.from_dict(self.load_package_default_config())
