"""
Find query data model for important.

This module defines the immutable description of one ``find`` invocation:
where to search, which name and extension filters apply, and whether the
filter text is taken literally or as a regular expression.
"""

import re
from typing import Optional, Tuple
from pathlib import Path
from pydantic import BaseModel, ConfigDict, Field, field_validator


MATCH_ALL = ".*"


class FindQuery(BaseModel):
    """
    Represents a find query with all of its filters.

    In literal mode the name filter matches any file name containing the text,
    and the extension filter matches names ending in ``.<text>``. In regular
    expression mode the name filter is anchored at the start of the name and
    may only be followed by an extension (``<text>(\\..*)?``), while the
    extension filter becomes ``.*\\.<text>``. The two name modes therefore
    differ in more than escaping; both behaviours are kept as they are.

    Attributes:
        directory: Directory to search (working directory when None)
        name_contains: Optional name filter text
        extension: Optional extension filter text
        verbose: Whether to log the search parameters
        use_regexp: Whether filter texts are raw regular expressions
    """

    model_config = ConfigDict(frozen=True)

    directory: Optional[str] = Field(None, description="Directory to search")
    name_contains: Optional[str] = Field(None, description="Name filter text")
    extension: Optional[str] = Field(None, description="Extension filter text")
    verbose: bool = Field(False, description="Whether to log the search parameters")
    use_regexp: bool = Field(False, description="Whether filter texts are regular expressions")

    @field_validator('directory')
    @classmethod
    def validate_directory(cls, v: Optional[str]) -> Optional[str]:
        """Reject blank directories."""
        if v is not None and not v.strip():
            raise ValueError("Search directory cannot be empty")
        return v

    def name_regexp(self) -> str:
        """Get the regular expression matched against the whole file name."""
        if self.name_contains is None:
            return MATCH_ALL
        if self.use_regexp:
            return self.name_contains + r"(\..*)?"
        return MATCH_ALL + re.escape(self.name_contains) + MATCH_ALL

    def extension_regexp(self) -> str:
        """Get the regular expression matched against the whole file name."""
        if self.extension is None:
            return MATCH_ALL
        if self.use_regexp:
            return r".*\." + self.extension
        return r".*\." + re.escape(self.extension)

    def compile_patterns(self) -> Tuple[re.Pattern, re.Pattern]:
        """
        Compile the name and extension patterns.

        Returns:
            Tuple of (name_pattern, extension_pattern)

        Raises:
            re.error: If a pattern is malformed
        """
        return re.compile(self.name_regexp()), re.compile(self.extension_regexp())

    def resolve_directory(self, working_directory: str) -> Path:
        """Get the absolute search root, relative paths anchored at the working directory."""
        if self.directory is None:
            return Path(working_directory)
        directory = Path(self.directory).expanduser()
        if not directory.is_absolute():
            directory = Path(working_directory) / directory
        return directory

    def __str__(self) -> str:
        """String representation of the find query."""
        parts = [f"Directory: {self.directory or '<working directory>'}"]

        if self.name_contains is not None:
            parts.append(f"Name: '{self.name_contains}'")

        if self.extension is not None:
            parts.append(f"Extension: '{self.extension}'")

        parts.append("Mode: regexp" if self.use_regexp else "Mode: literal")

        return " | ".join(parts)
