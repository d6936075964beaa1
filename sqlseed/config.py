"""
Configuration Management Module

Handles loading, validation, and merging of configuration files
with support for presets and user-defined overrides.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional, Union
from dataclasses import dataclass, field, asdict
from copy import deepcopy
import logging

logger = logging.getLogger(__name__)

PRESETS_DIR = Path(__file__).parent / "presets"

SUPPORTED_DIALECTS = ["ansi", "postgres", "mysql", "sqlite"]
SUPPORTED_COMPRESSION = ["deflate", "stored"]


@dataclass
class GenerationConfig:
    """Configuration for row synthesis"""
    seed: Optional[int] = None
    null_probability: float = 0.05
    max_unique_attempts: int = 1000
    default_rows: int = 10
    validate_output: bool = True


@dataclass
class NumericConfig:
    """Default ranges for numeric columns without declared bounds"""
    int_min: int = 0
    int_max: int = 100
    decimal_min: float = 0.0
    decimal_max: float = 100.0
    decimal_scale: int = 2


@dataclass
class TextConfig:
    """Configuration for text generation"""
    locale: str = "en_US"
    max_length: int = 255
    lorem_max_words: int = 10


@dataclass
class TemporalConfig:
    """Configuration for date and time generation"""
    window_years: int = 10
    anchor: Optional[str] = None  # ISO date/datetime closing the window; None = today


@dataclass
class SQLConfig:
    """Configuration for SQL rendering"""
    dialect: str = "ansi"
    rows_per_statement: Optional[int] = None  # None = one statement per table
    quote_identifiers: bool = False
    include_header: bool = True


@dataclass
class ArchiveConfig:
    """Configuration for the output archive"""
    filename: str = "generated-sql.zip"
    compression: str = "deflate"
    include_manifest: bool = True


@dataclass
class Config:
    """Main configuration class combining all sub-configurations"""
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    numeric: NumericConfig = field(default_factory=NumericConfig)
    text: TextConfig = field(default_factory=TextConfig)
    temporal: TemporalConfig = field(default_factory=TemporalConfig)
    sql: SQLConfig = field(default_factory=SQLConfig)
    archive: ArchiveConfig = field(default_factory=ArchiveConfig)

    # Per-table row count overrides
    row_counts: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary"""
        return asdict(self)

    def merge(self, other: 'Config') -> 'Config':
        """Merge another configuration into this one (other takes precedence)"""
        merged = deepcopy(self)

        for key in ['generation', 'numeric', 'text', 'temporal', 'sql', 'archive']:
            other_config = getattr(other, key)
            merged_config = getattr(merged, key)

            # Update non-None values
            for field_name, field_value in asdict(other_config).items():
                if field_value is not None:
                    setattr(merged_config, field_name, field_value)

        merged.row_counts.update(other.row_counts)

        return merged


class ConfigLoader:
    """Loads and manages configuration from various sources"""

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize the configuration loader

        Args:
            config_dir: Directory containing preset files
        """
        self.config_dir = PRESETS_DIR if config_dir is None else Path(config_dir)
        self.presets = self._load_presets()

    def _load_presets(self) -> Dict[str, Config]:
        """Load all available preset configurations"""
        presets = {}

        if not self.config_dir.exists():
            logger.warning(f"Config directory not found: {self.config_dir}")
            return presets

        for preset_file in sorted(self.config_dir.glob("*.yaml")):
            preset_name = preset_file.stem
            presets[preset_name] = self.load_from_file(preset_file)
            logger.debug(f"Loaded preset: {preset_name}")

        return presets

    def load_from_file(self, filepath: Union[str, Path]) -> Config:
        """
        Load configuration from a YAML file

        Args:
            filepath: Path to the YAML configuration file

        Returns:
            Config object
        """
        filepath = Path(filepath)

        if not filepath.exists():
            raise FileNotFoundError(f"Configuration file not found: {filepath}")

        with open(filepath, 'r', encoding='utf-8') as f:
            config_dict = yaml.safe_load(f) or {}

        return self._dict_to_config(config_dict)

    def load_from_dict(self, config_dict: Dict[str, Any]) -> Config:
        """
        Load configuration from a dictionary

        Args:
            config_dict: Configuration dictionary

        Returns:
            Config object
        """
        return self._dict_to_config(config_dict)

    def load_preset(self, preset_name: str) -> Config:
        """
        Load a preset configuration by name

        Args:
            preset_name: Name of the preset (e.g., 'default', 'postgres')

        Returns:
            Config object
        """
        if preset_name not in self.presets:
            available = ", ".join(self.presets.keys())
            raise ValueError(f"Preset '{preset_name}' not found. Available: {available}")

        return deepcopy(self.presets[preset_name])

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> Config:
        """Convert dictionary to Config object"""
        if not isinstance(config_dict, dict):
            raise ValueError("Configuration must be a mapping")

        config = Config()

        config_mapping = {
            'generation': GenerationConfig,
            'numeric': NumericConfig,
            'text': TextConfig,
            'temporal': TemporalConfig,
            'sql': SQLConfig,
            'archive': ArchiveConfig,
        }

        unknown = set(config_dict) - set(config_mapping) - {'row_counts'}
        if unknown:
            raise ValueError(f"Unknown configuration section(s): {', '.join(sorted(unknown))}")

        for key, config_class in config_mapping.items():
            if key in config_dict:
                try:
                    setattr(config, key, config_class(**(config_dict[key] or {})))
                except TypeError as e:
                    raise ValueError(f"Invalid '{key}' configuration: {e}") from e

        if 'row_counts' in config_dict:
            config.row_counts = dict(config_dict['row_counts'] or {})

        return config

    def merge_configs(self, base: Config, override: Union[Config, Dict[str, Any], str]) -> Config:
        """
        Merge configurations with override taking precedence

        Args:
            base: Base configuration
            override: Override configuration (Config object, dict, or preset name)

        Returns:
            Merged Config object
        """
        if isinstance(override, str):
            override = self.load_preset(override)
        elif isinstance(override, dict):
            override = self.load_from_dict(override)

        return base.merge(override)

    def save_config(self, config: Config, filepath: Union[str, Path]):
        """
        Save configuration to a YAML file

        Args:
            config: Configuration to save
            filepath: Path to save the file
        """
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, 'w', encoding='utf-8') as f:
            yaml.safe_dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)

        logger.info(f"Configuration saved to: {filepath}")

    def list_presets(self) -> List[str]:
        """Get list of available preset names"""
        return list(self.presets.keys())


class ConfigValidator:
    """Validates configuration parameters"""

    @staticmethod
    def validate(config: Config) -> tuple[bool, List[str]]:
        """
        Validate configuration parameters

        Args:
            config: Configuration to validate

        Returns:
            Tuple of (is_valid, list_of_errors)
        """
        errors = []

        # Generation
        if not 0 <= config.generation.null_probability <= 1:
            errors.append("generation.null_probability must be between 0 and 1")

        if config.generation.max_unique_attempts <= 0:
            errors.append("generation.max_unique_attempts must be positive")

        if config.generation.default_rows < 0:
            errors.append("generation.default_rows cannot be negative")

        if config.generation.seed is not None and config.generation.seed < 0:
            errors.append("generation.seed cannot be negative")

        # Numeric
        if config.numeric.int_min > config.numeric.int_max:
            errors.append("numeric.int_min must not exceed numeric.int_max")

        if config.numeric.decimal_min > config.numeric.decimal_max:
            errors.append("numeric.decimal_min must not exceed numeric.decimal_max")

        if config.numeric.decimal_scale < 0:
            errors.append("numeric.decimal_scale cannot be negative")

        # Text
        if config.text.max_length <= 0:
            errors.append("text.max_length must be positive")

        if config.text.lorem_max_words <= 0:
            errors.append("text.lorem_max_words must be positive")

        # Temporal
        if config.temporal.window_years <= 0:
            errors.append("temporal.window_years must be positive")

        # SQL
        if config.sql.dialect not in SUPPORTED_DIALECTS:
            errors.append(f"sql.dialect must be one of {SUPPORTED_DIALECTS}")

        if config.sql.rows_per_statement is not None and config.sql.rows_per_statement < 0:
            errors.append("sql.rows_per_statement cannot be negative")

        # Archive
        if config.archive.compression not in SUPPORTED_COMPRESSION:
            errors.append(f"archive.compression must be one of {SUPPORTED_COMPRESSION}")

        if not config.archive.filename:
            errors.append("archive.filename cannot be empty")

        for table_name, rows in config.row_counts.items():
            if not isinstance(rows, int) or isinstance(rows, bool) or rows < 0:
                errors.append(f"row_counts.{table_name} must be a non-negative integer")

        return len(errors) == 0, errors


def get_default_config() -> Config:
    """Get the default configuration"""
    return Config()
