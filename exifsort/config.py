"""
Configuration management for exifsort.
"""

from pathlib import Path
from typing import Dict, Optional

import yaml

from .constants import PROGRAM, get_logger


class Config:
    """Manages the YAML file storing user preferences between runs."""

    def __init__(self, config_path: Optional[Path] = None):
        # Default config location: ~/.<PROGRAM>/config.yml
        if config_path:
            self.config_path = Path(config_path)
        else:
            self.config_path = Path.home() / f".{PROGRAM}" / "config.yml"
        self.program_root = self.config_path.parent
        self.data = self._load_config()

    def _load_config(self) -> Dict:
        if not self.config_path.exists():
            return {}

        try:
            with open(self.config_path, 'r') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            get_logger().warning(f"Could not load config: {e}")
            return {}

        if not isinstance(data, dict):
            get_logger().warning(f"Ignoring malformed config file: {self.config_path}")
            return {}
        return data

    def save_config(self) -> None:
        """Save current configuration to file."""
        try:
            self.program_root.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, 'w') as f:
                yaml.safe_dump(self.data, f, default_flow_style=False)
        except OSError as e:
            get_logger().error(f"Could not save config: {e}")

    def get_last_source(self) -> Optional[str]:
        return self.data.get('last_source')

    def get_last_dest(self) -> Optional[str]:
        return self.data.get('last_dest')

    def get_copy_mode(self) -> bool:
        """Whether files are copied rather than moved by default (default: False)."""
        return bool(self.data.get('copy', False))

    def get_timezone(self) -> Optional[str]:
        """Zone that offset-aware capture dates are converted to, if any."""
        return self.data.get('timezone')

    def update_paths(self, source: str, dest: str) -> None:
        """Update and save the last used paths."""
        self.data['last_source'] = source
        self.data['last_dest'] = dest
        self.save_config()

    def update_timezone(self, timezone: str) -> None:
        self.data['timezone'] = timezone
        self.save_config()
