"""
Configuration management for ProDoc.

Handles loading and managing configuration from files and environment
variables.
"""

from __future__ import annotations

import logging
import os
import yaml
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from .core.document_model import DEFAULT_TITLE


logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "prodoc_document"


@dataclass
class AutoSaveConfig:
    """Timing of the background save."""

    enabled: bool = True
    debounce_seconds: float = 2.5
    interval_seconds: float = 15.0


@dataclass
class ZoomConfig:
    """Bounds of the page zoom, in percent."""

    minimum: int = 50
    maximum: int = 200
    step: int = 10


@dataclass
class ProDocConfig:
    """Main configuration for ProDoc."""

    # Persistence
    storage_dir: Path = field(default_factory=lambda: Path.home() / '.prodoc' / 'storage')
    storage_key: str = DEFAULT_STORAGE_KEY

    # Editing
    history_limit: int = 50
    default_title: str = DEFAULT_TITLE

    # Background save
    autosave: AutoSaveConfig = field(default_factory=AutoSaveConfig)

    # View
    zoom: ZoomConfig = field(default_factory=ZoomConfig)

    # File paths
    export_dir: Optional[Path] = None


class ConfigManager:
    """Manages ProDoc configuration from multiple sources."""

    def __init__(self, config_dir: Optional[Path] = None):
        env_dir = os.getenv('PRODOC_CONFIG_DIR')
        self.config_dir = Path(config_dir or env_dir or Path.home() / '.prodoc')
        self.config_file = self.config_dir / 'config.yaml'
        self._config: Optional[ProDocConfig] = None

    def load_config(self) -> ProDocConfig:
        """Load configuration from all sources."""
        if self._config:
            return self._config

        # Start with defaults
        config = ProDocConfig()

        # Load from file if it exists
        if self.config_file.exists():
            file_config = self._load_from_file()
            config = self._merge_configs(config, file_config)

        # Override with environment variables
        env_config = self._load_from_env()
        config = self._merge_configs(config, env_config)

        self._config = config
        return config

    def _load_from_file(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        try:
            with open(self.config_file, 'r') as f:
                return yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Could not load config file {self.config_file}: {e}")
            return {}

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        env_config: Dict[str, Any] = {}

        storage_dir = os.getenv('PRODOC_STORAGE_DIR')
        if storage_dir:
            env_config['storage_dir'] = storage_dir

        storage_key = os.getenv('PRODOC_STORAGE_KEY')
        if storage_key:
            env_config['storage_key'] = storage_key

        export_dir = os.getenv('PRODOC_EXPORT_DIR')
        if export_dir:
            env_config['export_dir'] = export_dir

        default_title = os.getenv('PRODOC_DEFAULT_TITLE')
        if default_title:
            env_config['default_title'] = default_title

        history_limit = os.getenv('PRODOC_HISTORY_LIMIT')
        if history_limit:
            try:
                env_config['history_limit'] = int(history_limit)
            except ValueError:
                logger.warning(f"Ignoring non-integer PRODOC_HISTORY_LIMIT: {history_limit}")

        # Auto-save
        enabled = os.getenv('PRODOC_AUTOSAVE')
        if enabled:
            env_config.setdefault('autosave', {})['enabled'] = enabled.lower() in ('true', '1', 'yes', 'on')

        for key, env_var in (('debounce_seconds', 'PRODOC_AUTOSAVE_DEBOUNCE'),
                             ('interval_seconds', 'PRODOC_AUTOSAVE_INTERVAL')):
            value = os.getenv(env_var)
            if value:
                try:
                    env_config.setdefault('autosave', {})[key] = float(value)
                except ValueError:
                    logger.warning(f"Ignoring non-numeric {env_var}: {value}")

        return env_config

    def _merge_configs(self, base: ProDocConfig, override: Dict[str, Any]) -> ProDocConfig:
        """Merge a configuration dictionary into a config object."""
        if 'storage_dir' in override:
            base.storage_dir = Path(override['storage_dir']).expanduser()
        if 'storage_key' in override:
            base.storage_key = str(override['storage_key'])
        if 'export_dir' in override and override['export_dir']:
            base.export_dir = Path(override['export_dir']).expanduser()
        if 'default_title' in override:
            base.default_title = str(override['default_title'])
        if 'history_limit' in override:
            base.history_limit = max(1, int(override['history_limit']))

        # Auto-save config
        if 'autosave' in override:
            autosave_overrides = override['autosave'] or {}
            if 'enabled' in autosave_overrides:
                base.autosave.enabled = bool(autosave_overrides['enabled'])
            if 'debounce_seconds' in autosave_overrides:
                base.autosave.debounce_seconds = float(autosave_overrides['debounce_seconds'])
            if 'interval_seconds' in autosave_overrides:
                base.autosave.interval_seconds = float(autosave_overrides['interval_seconds'])

        # Zoom config
        if 'zoom' in override:
            zoom_overrides = override['zoom'] or {}
            if 'minimum' in zoom_overrides:
                base.zoom.minimum = int(zoom_overrides['minimum'])
            if 'maximum' in zoom_overrides:
                base.zoom.maximum = int(zoom_overrides['maximum'])
            if 'step' in zoom_overrides:
                base.zoom.step = int(zoom_overrides['step'])

        return base

    def save_config(self, config: ProDocConfig) -> None:
        """Save configuration to file."""
        self.config_dir.mkdir(parents=True, exist_ok=True)

        config_dict = {
            'storage_dir': str(config.storage_dir),
            'storage_key': config.storage_key,
            'history_limit': config.history_limit,
            'default_title': config.default_title,
            'autosave': {
                'enabled': config.autosave.enabled,
                'debounce_seconds': config.autosave.debounce_seconds,
                'interval_seconds': config.autosave.interval_seconds,
            },
            'zoom': {
                'minimum': config.zoom.minimum,
                'maximum': config.zoom.maximum,
                'step': config.zoom.step,
            },
        }

        if config.export_dir:
            config_dict['export_dir'] = str(config.export_dir)

        try:
            with open(self.config_file, 'w') as f:
                yaml.dump(config_dict, f, default_flow_style=False, indent=2)
        except OSError as e:
            logger.warning(f"Could not save config file {self.config_file}: {e}")

    def create_default_config(self) -> Path:
        """Create a default configuration file."""
        self.save_config(ProDocConfig())
        logger.info(f"Created default configuration at {self.config_file}")
        return self.config_file

    def get_config_info(self) -> Dict[str, Any]:
        """Get information about current configuration."""
        config = self.load_config()

        return {
            'config_file': str(self.config_file),
            'config_exists': self.config_file.exists(),
            'storage_dir': str(config.storage_dir),
            'storage_key': config.storage_key,
            'history_limit': config.history_limit,
            'autosave_enabled': config.autosave.enabled,
            'export_dir': str(config.export_dir) if config.export_dir else None,
        }
