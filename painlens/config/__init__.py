"""
PAINLENS Configuration Presets

Loads engine configuration overrides from YAML.
Named presets ship inside this package (e.g. conservative.yaml);
arbitrary files can be loaded by path.

The analysis engine itself never reads files: callers load a preset here and
pass the resulting mapping to analyze().

Usage:
    from painlens.config import ConfigLoader, load_profile

    overrides = load_profile("conservative")
    result = analyze(records, overrides)

    loader = ConfigLoader()
    loader.list_configs()             # ['conservative', ...]
    loader.load_file("my_settings.yaml")
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import logging
import yaml

logger = logging.getLogger(__name__)

# Bundled presets live next to this module
CONFIG_DIR = Path(__file__).resolve().parent


class ConfigLoader:
    """
    YAML configuration loader.

    Caches loaded presets per instance.

    Usage:
        loader = ConfigLoader()

        # Get an entire preset
        conservative = loader.load("conservative")

        # Get a specific value with default
        min_support = loader.get("conservative", "min_support_for_correlation", default=5)
    """

    def __init__(self, config_dir: Optional[Union[str, Path]] = None):
        self._config_dir = Path(config_dir) if config_dir else CONFIG_DIR
        self._cache: Dict[str, Dict[str, Any]] = {}

    @property
    def config_dir(self) -> Path:
        """Return the config directory path."""
        return self._config_dir

    def exists(self, name: str) -> bool:
        """Check if a preset exists."""
        return (self.config_dir / f"{name}.yaml").exists()

    def load(self, name: str, reload: bool = False) -> Dict[str, Any]:
        """
        Load a preset by name.

        Args:
            name: Preset name without extension (e.g., "conservative")
            reload: Force reload from disk even if cached

        Returns:
            Configuration dictionary

        Raises:
            FileNotFoundError: If the preset doesn't exist
            ValueError: If the YAML is invalid or not a mapping
        """
        if not reload and name in self._cache:
            return dict(self._cache[name])

        path = self.config_dir / f"{name}.yaml"
        if not path.exists():
            raise FileNotFoundError(f"Config preset not found: {path}")

        config = self.load_file(path)
        self._cache[name] = config
        return dict(config)

    def load_file(self, path: Union[str, Path]) -> Dict[str, Any]:
        """
        Load configuration overrides from an arbitrary YAML file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the YAML is invalid or not a mapping
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        try:
            with open(path, encoding="utf-8") as f:
                config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse config {path}: {e}")
            raise ValueError(f"Invalid YAML in {path}: {e}")

        if not isinstance(config, dict):
            raise ValueError(f"Config in {path} must be a mapping, got {type(config).__name__}")

        logger.debug(f"Loaded config: {path.name} ({len(config)} keys)")
        return config

    def get(
        self,
        config_name: str,
        key: str,
        default: Any = None,
        required: bool = False
    ) -> Any:
        """
        Get a specific value from a preset.

        Args:
            config_name: Preset name
            key: Key to retrieve
            default: Default value if key not found
            required: If True, raise KeyError when key not found
        """
        try:
            config = self.load(config_name)
        except FileNotFoundError:
            if required:
                raise
            logger.warning(f"Config {config_name} not found, using default for {key}")
            return default

        if key in config:
            return config[key]

        if required:
            raise KeyError(f"Required key '{key}' not found in config '{config_name}'")

        return default

    def clear_cache(self, name: Optional[str] = None) -> None:
        if name is None:
            self._cache.clear()
        else:
            self._cache.pop(name, None)

    def list_configs(self) -> List[str]:
        """List all available presets."""
        if not self.config_dir.exists():
            return []
        return sorted(p.stem for p in self.config_dir.glob("*.yaml"))


def load_profile(name: str) -> Dict[str, Any]:
    """Load a bundled preset by name."""
    return ConfigLoader().load(name)


def list_profiles() -> List[str]:
    """Names of the bundled presets."""
    return ConfigLoader().list_configs()


__all__ = [
    "ConfigLoader",
    "CONFIG_DIR",
    "load_profile",
    "list_profiles",
]
