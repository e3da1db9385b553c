"""Configuration management for PixelScope."""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, Field, ValidationError

from .logging import get_logger

logger = get_logger(__name__)


class ConfigError(ValueError):
    """Raised when a configuration file or value cannot be used."""


class InsightThresholds(BaseModel):
    """Cut-off values for the insight rule table."""

    dark_below: int = Field(35, ge=0, le=100)
    bright_above: int = Field(75, ge=0, le=100)
    low_contrast_below: int = Field(15, ge=0, le=100)
    high_contrast_above: int = Field(60, ge=0, le=100)
    high_entropy_above: float = Field(7.0, ge=0.0, le=8.0)
    low_entropy_below: float = Field(2.0, ge=0.0, le=8.0)
    uniform_share_above: float = Field(80.0, ge=0.0, le=100.0)
    colorful_palette_min: int = Field(5, ge=1)
    panoramic_ratio: float = Field(2.0, gt=1.0)


class AnalysisConfig(BaseModel):
    """Tunable constants of the analysis engine."""

    levels: int = Field(8, ge=2, le=64, description="Quantization levels per channel")
    palette_size: int = Field(5, ge=1, le=32, description="Maximum palette entries")
    min_share: float = Field(1.0, ge=0.0, le=100.0, description="Minimum palette share (%)")
    merge_distance: float = Field(10.0, ge=0.0, description="Delta E for merging buckets")
    max_samples: int = Field(250_000, ge=1, description="Sample budget before striding")
    thresholds: InsightThresholds = Field(default_factory=InsightThresholds)

    model_config = {"frozen": True}


class ConfigManager:
    """Manage configuration settings for PixelScope."""

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """Initialize configuration manager.

        Args:
            config_path: Path to configuration file
        """
        self.config_path = Path(config_path) if config_path else None
        self._config = self.get_default_config()

        if self.config_path and self.config_path.exists():
            self.load_config()

    def get_default_config(self) -> Dict[str, Any]:
        """Get default configuration."""
        defaults = AnalysisConfig()
        return {
            "sampling": {
                "max_samples": defaults.max_samples,
            },
            "palette": {
                "levels": defaults.levels,
                "size": defaults.palette_size,
                "min_share": defaults.min_share,
                "merge_distance": defaults.merge_distance,
            },
            "insights": defaults.thresholds.model_dump(),
            "logging": {
                "level": "INFO",
                "file": None,
                "colors": True,
            },
        }

    def load_config(self) -> None:
        """Load configuration from file."""
        if not self.config_path or not self.config_path.exists():
            return

        try:
            with open(self.config_path, "r") as f:
                if self.config_path.suffix.lower() in (".yaml", ".yml"):
                    loaded_config = yaml.safe_load(f) or {}
                else:
                    loaded_config = json.load(f)
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigError(
                f"Failed to load configuration from {self.config_path}: {e}"
            ) from e

        if not isinstance(loaded_config, dict):
            raise ConfigError(
                f"Configuration in {self.config_path} must be a mapping"
            )

        self._config = self._deep_merge(self._config, loaded_config)
        logger.debug(f"Loaded configuration from {self.config_path}")

    def save_config(self, output_path: Optional[Union[str, Path]] = None) -> None:
        """Save current configuration to file.

        Args:
            output_path: Optional output path, defaults to current config_path
        """
        save_path = Path(output_path) if output_path else self.config_path

        if not save_path:
            raise ConfigError("No output path specified")

        save_path.parent.mkdir(parents=True, exist_ok=True)

        with open(save_path, "w") as f:
            if save_path.suffix.lower() in (".yaml", ".yml"):
                yaml.dump(self._config, f, default_flow_style=False, indent=2)
            else:
                json.dump(self._config, f, indent=2)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key.

        Args:
            key: Configuration key (supports dot notation)
            default: Default value if key not found

        Returns:
            Configuration value
        """
        value = self._config

        try:
            for k in key.split("."):
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any) -> None:
        """Set configuration value.

        Args:
            key: Configuration key (supports dot notation)
            value: Value to set
        """
        keys = key.split(".")
        config = self._config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def update(self, updates: Dict[str, Any]) -> None:
        """Update configuration with dictionary of changes.

        Args:
            updates: Dictionary of configuration updates
        """
        self._config = self._deep_merge(self._config, updates)

    def _deep_merge(self, base: Dict, update: Dict) -> Dict:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in update.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def get_analysis_config(self) -> AnalysisConfig:
        """Build the validated engine configuration."""
        palette = self.get("palette", {})

        try:
            return AnalysisConfig(
                levels=palette.get("levels", 8),
                palette_size=palette.get("size", 5),
                min_share=palette.get("min_share", 1.0),
                merge_distance=palette.get("merge_distance", 10.0),
                max_samples=self.get("sampling.max_samples", 250_000),
                thresholds=InsightThresholds(**self.get("insights", {})),
            )
        except ValidationError as e:
            raise ConfigError(f"Invalid analysis configuration: {e}") from e

    @classmethod
    def from_env(cls, config_path: Optional[Union[str, Path]] = None) -> "ConfigManager":
        """Create configuration manager from environment variables."""
        config_manager = cls(config_path)

        env_mappings = {
            "PIXELSCOPE_MAX_SAMPLES": "sampling.max_samples",
            "PIXELSCOPE_LEVELS": "palette.levels",
            "PIXELSCOPE_PALETTE_SIZE": "palette.size",
            "PIXELSCOPE_MIN_SHARE": "palette.min_share",
            "PIXELSCOPE_MERGE_DISTANCE": "palette.merge_distance",
            "PIXELSCOPE_LOG_LEVEL": "logging.level",
        }

        for env_var, config_key in env_mappings.items():
            value = os.getenv(env_var)
            if value is None:
                continue

            converted: Any = value
            if value.isdigit():
                converted = int(value)
            elif value.lower() in ("true", "false"):
                converted = value.lower() == "true"
            else:
                try:
                    converted = float(value)
                except ValueError:
                    pass  # Keep as string

            config_manager.set(config_key, converted)

        return config_manager

    def validate_config(self) -> Tuple[bool, List[str]]:
        """Validate current configuration.

        Returns:
            Tuple of (is_valid, list_of_errors)
        """
        errors = []

        try:
            self.get_analysis_config()
        except ConfigError as e:
            cause = e.__cause__
            if isinstance(cause, ValidationError):
                for err in cause.errors():
                    location = ".".join(str(part) for part in err["loc"])
                    errors.append(f"{location}: {err['msg']}")
            else:
                errors.append(str(e))

        level = self.get("logging.level", "INFO")
        if str(level).upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            errors.append(f"logging.level must be a standard level name, got {level}")

        return len(errors) == 0, errors

    def get_profile_configs(self) -> Dict[str, Dict]:
        """Get predefined configuration profiles."""
        return {
            "fast": {
                "sampling": {"max_samples": 40_000},
                "palette": {"levels": 4, "size": 3},
            },
            "balanced": {
                "sampling": {"max_samples": 250_000},
                "palette": {"levels": 8, "size": 5},
            },
            "detailed": {
                "sampling": {"max_samples": 2_000_000},
                "palette": {
                    "levels": 16,
                    "size": 8,
                    "min_share": 0.5,
                    "merge_distance": 6.0,
                },
            },
        }

    def apply_profile(self, profile_name: str) -> None:
        """Apply a predefined configuration profile.

        Args:
            profile_name: Name of profile to apply
        """
        profiles = self.get_profile_configs()

        if profile_name not in profiles:
            raise ConfigError(
                f"Unknown profile: {profile_name}. Available: {list(profiles.keys())}"
            )

        self.update(profiles[profile_name])
