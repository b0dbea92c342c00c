"""
YAML configuration loading for important.

A configuration file is optional. It is either named with ``--config`` or
discovered under one of DEFAULT_CONFIG_NAMES in the working directory, the
home directory or ``~/.config/important``, first match wins.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List, Tuple, Union
import logging
from dataclasses import dataclass

from ..models.config import ImportantConfig, validate_config_dict


logger = logging.getLogger(__name__)


@dataclass
class ConfigParseResult:
    """
    Outcome of loading the configuration.

    Attributes:
        config: The validated configuration
        warnings: Non-fatal remarks about the configuration
        config_path: File the configuration came from, None for defaults
        is_default: Whether no file was found
    """
    config: ImportantConfig
    warnings: List[str]
    config_path: Optional[Path]
    is_default: bool


class ConfigurationError(Exception):
    """Raised when a configuration file cannot be read or is invalid."""
    pass


class ConfigParser:
    """Locates, reads and validates the configuration of one invocation."""

    DEFAULT_CONFIG_NAMES = [
        '.important.yaml',
        '.important.yml',
        'important.yaml',
        'important.yml'
    ]

    def __init__(self, working_directory: Optional[Union[str, Path]] = None):
        """
        Args:
            working_directory: Directory searched first and used as the default
                working directory (process cwd when None)
        """
        self.working_directory = Path(working_directory) if working_directory else Path.cwd()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def load_config(self, config_path: Optional[Union[str, Path]] = None) -> ConfigParseResult:
        """
        Load the configuration from ``config_path`` or the default locations.

        Args:
            config_path: Explicit file; relative paths are taken from the
                working directory

        Raises:
            ConfigurationError: If the file is missing, unreadable or invalid
        """
        if config_path:
            source = Path(config_path)
            if not source.is_absolute():
                source = self.working_directory / source
            if not source.is_file():
                raise ConfigurationError(f"Configuration file not found: {source}")
            data = self._load_yaml_file(source)
        else:
            source, data = self._find_and_load_config()

        is_default = source is None
        config = ImportantConfig.from_dict(self._validate_config_data(data or {}))

        warnings = config.validate_configuration()
        if is_default:
            warnings.append("No configuration file found, using default settings")

        self.logger.debug(f"Configuration loaded from {source or 'defaults'}")
        return ConfigParseResult(config=config, warnings=warnings,
                                 config_path=source, is_default=is_default)

    def _search_paths(self) -> List[Path]:
        home = Path.home()
        return [self.working_directory, home, home / '.config' / 'important']

    def _find_and_load_config(self) -> Tuple[Optional[Path], Optional[Dict[str, Any]]]:
        """Return the first configuration file found and its data, or (None, None)."""
        for directory in self._search_paths():
            for name in self.DEFAULT_CONFIG_NAMES:
                candidate = directory / name
                if candidate.is_file():
                    self.logger.debug(f"Found configuration file: {candidate}")
                    return candidate, self._load_yaml_file(candidate)
        return None, None

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """
        Read a YAML mapping; an empty file is an empty mapping.

        Raises:
            ConfigurationError: If the file cannot be read or is not a mapping
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {file_path}: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigurationError(f"Cannot read configuration file {file_path}: {e}") from e

        if data is None:
            self.logger.info(f"Configuration file is empty: {file_path}")
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file must contain a YAML object, got {type(data).__name__}")
        return data

    def _validate_config_data(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate raw configuration data.

        A relative ``working_directory`` is anchored at the parser's working
        directory; a missing one defaults to it.

        Raises:
            ConfigurationError: If keys or values are invalid
        """
        data = dict(config_data)
        working_dir = data.get('working_directory')
        if working_dir and not Path(str(working_dir)).expanduser().is_absolute():
            data['working_directory'] = str(self.working_directory / str(working_dir))

        try:
            return validate_config_dict(data, working_directory=str(self.working_directory))
        except ValueError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e
