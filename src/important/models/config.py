"""
Configuration data models for important.

This module defines the configuration consumed by the marking backends and the
find pipeline: the working directory that anchors the catalog file and the
default search root, extended attribute settings, catalog file settings and
logging options.
"""

from typing import Dict, List, Optional, Any
from pathlib import Path
import codecs
import logging
from pydantic import BaseModel, Field, field_validator


# Practical per-attribute ceiling on common filesystems.
MAX_ATTRIBUTE_BYTES = 65536


class MetadataConfig(BaseModel):
    """
    Configuration for the extended attribute backend.

    Attributes:
        enabled: Whether extended attributes are tried at all
        attribute_name: Name of the mark attribute
        namespace: Attribute namespace prefix (``user`` on Linux)
        sentinel: Single ASCII character stored when a file is marked
        max_read_bytes: Upper bound on the attribute payload read back
    """

    enabled: bool = Field(True, description="Whether extended attributes are tried at all")
    attribute_name: str = Field("imp", min_length=1, description="Name of the mark attribute")
    namespace: str = Field("user", description="Attribute namespace prefix")
    sentinel: str = Field("y", min_length=1, max_length=1, description="Value stored when marked")
    max_read_bytes: int = Field(MAX_ATTRIBUTE_BYTES, gt=0, le=MAX_ATTRIBUTE_BYTES,
                                description="Upper bound on the attribute payload read back")

    @field_validator('attribute_name')
    @classmethod
    def validate_attribute_name(cls, v: str) -> str:
        """Attribute names cannot contain separators or NUL bytes."""
        if '\x00' in v or '/' in v:
            raise ValueError(f"Invalid attribute name: {v!r}")
        return v

    @field_validator('namespace')
    @classmethod
    def validate_namespace(cls, v: str) -> str:
        """Normalize the namespace, dropping a trailing dot."""
        return v.strip().rstrip('.')

    @field_validator('sentinel')
    @classmethod
    def validate_sentinel(cls, v: str) -> str:
        """The sentinel must be a single ASCII byte."""
        if not v.isascii():
            raise ValueError(f"Sentinel must be ASCII: {v!r}")
        return v

    def get_full_name(self) -> str:
        """Get the attribute name including its namespace prefix."""
        if not self.namespace:
            return self.attribute_name
        return f"{self.namespace}.{self.attribute_name}"

    def get_sentinel_bytes(self) -> bytes:
        """Get the sentinel as the bytes written to the attribute."""
        return self.sentinel.encode('ascii')

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return self.model_dump()


class CatalogConfig(BaseModel):
    """
    Configuration for the fallback catalog file.

    Attributes:
        file_name: Name of the catalog file inside the working directory
        encoding: Text encoding of the catalog file
    """

    file_name: str = Field(".important", min_length=1, description="Catalog file name")
    encoding: str = Field("utf-8", description="Catalog file encoding")

    @field_validator('file_name')
    @classmethod
    def validate_file_name(cls, v: str) -> str:
        """The catalog always lives directly in the working directory."""
        if Path(v).name != v or v in ('.', '..'):
            raise ValueError(f"Catalog file name must be a bare file name: {v!r}")
        return v

    @field_validator('encoding')
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        """Ensure the encoding is known to Python."""
        try:
            return codecs.lookup(v).name
        except LookupError:
            raise ValueError(f"Unknown catalog encoding: {v}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return self.model_dump()


class LoggingConfig(BaseModel):
    """
    Configuration for diagnostic output.

    Attributes:
        level: Logging level name for diagnostics on standard error
        format: Log record format
    """

    level: str = Field("WARNING", description="Logging level name")
    format: str = Field("important: %(levelname)s: %(message)s", description="Log record format")

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Normalize and validate the level name."""
        level = str(v).upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Invalid logging level: {v}")
        return level

    def get_level(self) -> int:
        """Get the numeric logging level."""
        return logging.getLevelName(self.level)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return self.model_dump()


class ImportantConfig(BaseModel):
    """
    Main configuration class for important.

    The working directory is carried explicitly so the catalog location and the
    default search root never depend on ambient process state.

    Attributes:
        working_directory: Directory holding the catalog; default search root
        metadata: Extended attribute backend configuration
        catalog: Catalog file configuration
        logging: Diagnostic output configuration
    """

    working_directory: str = Field(default_factory=lambda: str(Path.cwd()),
                                   description="Directory holding the catalog file")
    metadata: MetadataConfig = Field(default_factory=MetadataConfig, description="Extended attribute settings")
    catalog: CatalogConfig = Field(default_factory=CatalogConfig, description="Catalog file settings")
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Diagnostic output settings")

    @field_validator('working_directory')
    @classmethod
    def validate_working_directory(cls, v: str) -> str:
        """Expand and absolutize the working directory."""
        if not v or not str(v).strip():
            raise ValueError("Working directory cannot be empty")
        return str(Path(v).expanduser().absolute())

    @property
    def catalog_path(self) -> Path:
        """Absolute path of the catalog file."""
        return Path(self.working_directory) / self.catalog.file_name

    def resolve_path(self, path: str) -> Path:
        """Resolve a user-supplied path against the working directory."""
        candidate = Path(path).expanduser()
        if not candidate.is_absolute():
            candidate = Path(self.working_directory) / candidate
        return candidate

    def validate_configuration(self) -> List[str]:
        """Validate the complete configuration and return any warnings."""
        warnings = []

        working_dir = Path(self.working_directory)
        if not working_dir.is_dir():
            warnings.append(f"Working directory does not exist: {working_dir}")

        if not self.metadata.enabled:
            warnings.append("Extended attributes disabled, all marks go to the catalog file")

        if self.catalog_path.exists() and not self.catalog_path.is_file():
            warnings.append(f"Catalog path is not a regular file: {self.catalog_path}")

        return warnings

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary representation."""
        data = self.model_dump()
        data['metadata'] = self.metadata.to_dict()
        data['catalog'] = self.catalog.to_dict()
        data['logging'] = self.logging.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ImportantConfig':
        """Create configuration from dictionary representation."""
        return cls.model_validate(data)

    def __str__(self) -> str:
        """String representation of the configuration."""
        parts = [f"Working directory: {self.working_directory}"]
        parts.append(f"Attribute: {self.metadata.get_full_name() if self.metadata.enabled else 'disabled'}")
        parts.append(f"Catalog: {self.catalog.file_name}")
        parts.append(f"Log level: {self.logging.level}")

        return " | ".join(parts)


def validate_config_dict(config_data: Dict[str, Any], working_directory: Optional[str] = None) -> Dict[str, Any]:
    """
    Validate a configuration dictionary using Pydantic.

    Args:
        config_data: Dictionary containing configuration data
        working_directory: Working directory used when the data does not set one

    Returns:
        Validated and normalized configuration dictionary

    Raises:
        ValueError: If configuration is invalid
    """
    known_sections = {'working_directory', 'metadata', 'catalog', 'logging'}
    unknown = sorted(set(config_data) - known_sections)
    if unknown:
        raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")

    data = dict(config_data)
    if working_directory and not data.get('working_directory'):
        data['working_directory'] = working_directory

    try:
        return ImportantConfig.model_validate(data).to_dict()
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}") from e
