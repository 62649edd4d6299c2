"""Selectable debug messages, switched on by single-character flags."""

from __future__ import annotations

import sys
from enum import Enum


class DebugFlag(str, Enum):
    """The predefined debug flags."""

    ALL = "+"
    THREAD = "t"
    SYNCH = "s"
    INTERRUPT = "i"
    MACHINE = "m"
    DISK = "d"
    FILE = "f"
    ADDRESS = "a"
    NETWORK = "n"
    SYSCALL = "u"


class Debug:
    """Decides which debug messages are printed, from a string of flag characters."""

    def __init__(self, flags: str | None) -> None:
        self.flags = flags

    def is_enabled(self, flag: DebugFlag | str) -> bool:
        """Return whether messages for ``flag`` are printed.

        The flag ``+`` in the enabled set turns every message on.
        """
        char = flag.value if isinstance(flag, DebugFlag) else flag
        if len(char) != 1:
            raise ValueError(f"a debug flag is a single character, got {char!r}")
        if self.flags is None:
            return False
        return char in self.flags or DebugFlag.ALL.value in self.flags

    def log(self, flag: DebugFlag | str, message: object) -> None:
        """Write ``message`` to standard error if ``flag`` is enabled."""
        if self.is_enabled(flag):
            print(message, file=sys.stderr)