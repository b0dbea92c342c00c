"""
Status codes for mark, unmark and find operations.

A StatusCode is an immutable set of outcome flags. Codes produced for the
individual files of a batch are combined with ``|`` so the final value
records every failure class that occurred, and is turned into the process
exit code once at the end.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List


class StatusFlag(Enum):
    """Independent outcome flags, each a distinct power of two."""
    INVALID_SYNTAX = 1
    PERMISSION_ERROR = 2
    NOT_FOUND = 4
    IO_ERROR = 8
    UNCERTAIN = 16


# Exit code reported whenever INVALID_SYNTAX is part of a status.
INVALID_SYNTAX_EXIT_CODE = -1

_DESCRIPTIONS = {
    StatusFlag.INVALID_SYNTAX: "invalid syntax",
    StatusFlag.PERMISSION_ERROR: "permission error",
    StatusFlag.NOT_FOUND: "file not found",
    StatusFlag.IO_ERROR: "system I/O error",
    StatusFlag.UNCERTAIN: "uncertain, double check manually",
}


@dataclass(frozen=True)
class StatusCode:
    """
    Composite outcome of one or more operations.

    Attributes:
        bits: Bitwise OR of the StatusFlag values that are set (0 means OK)
    """

    bits: int = 0

    def __post_init__(self) -> None:
        known = 0
        for flag in StatusFlag:
            known |= flag.value
        if self.bits < 0 or self.bits & ~known:
            raise ValueError(f"Unknown status bits: {self.bits}")

    @classmethod
    def of(cls, *flags: StatusFlag) -> 'StatusCode':
        """Build a status from individual flags."""
        bits = 0
        for flag in flags:
            bits |= flag.value
        return cls(bits)

    def combine(self, other: 'StatusCode') -> 'StatusCode':
        """Return the union of both flag sets."""
        return StatusCode(self.bits | other.bits)

    def __or__(self, other: 'StatusCode') -> 'StatusCode':
        if not isinstance(other, StatusCode):
            return NotImplemented
        return self.combine(other)

    @property
    def is_ok(self) -> bool:
        return self.bits == 0

    def has(self, flag: StatusFlag) -> bool:
        """Check whether a flag is part of this status."""
        return bool(self.bits & flag.value)

    def flags(self) -> List[StatusFlag]:
        """Get the set flags in ascending bit order."""
        return [flag for flag in StatusFlag if self.has(flag)]

    @property
    def exit_code(self) -> int:
        """
        Process exit code for this status.

        Invalid syntax is reported as -1 regardless of other flags; otherwise
        the exit code is the bitmask itself (e.g. 10 = permission + I/O).
        """
        if self.has(StatusFlag.INVALID_SYNTAX):
            return INVALID_SYNTAX_EXIT_CODE
        return self.bits

    def describe(self) -> str:
        """Human-readable summary of the set flags."""
        if self.is_ok:
            return "ok"
        return ", ".join(_DESCRIPTIONS[flag] for flag in self.flags())

    def __str__(self) -> str:
        return f"StatusCode({self.exit_code}: {self.describe()})"


OK = StatusCode()
INVALID_SYNTAX = StatusCode.of(StatusFlag.INVALID_SYNTAX)
PERMISSION_ERROR = StatusCode.of(StatusFlag.PERMISSION_ERROR)
NOT_FOUND = StatusCode.of(StatusFlag.NOT_FOUND)
IO_ERROR = StatusCode.of(StatusFlag.IO_ERROR)
UNCERTAIN = StatusCode.of(StatusFlag.UNCERTAIN)


def combine_all(*codes: StatusCode) -> StatusCode:
    """Fold any number of status codes into one."""
    result = OK
    for code in codes:
        result = result | code
    return result
