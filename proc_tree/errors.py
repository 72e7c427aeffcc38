# proc_tree/errors.py

"""
Exceptions raised by a process tree session.

ProcTreeError
 ├── EnumerationError      the process listing call failed
 ├── ConfigError
 │    └── RootNotFoundError a configured root pid is not running
 └── StopWalk              raised by a walk handler to end the walk early
"""


class ProcTreeError(Exception):
    """Base exception for all process tree operations."""

    pass


class EnumerationError(ProcTreeError):
    """Raised when the operating system process list cannot be read."""

    pass


class ConfigError(ProcTreeError):
    """Raised when the session configuration cannot be applied."""

    pass


class RootNotFoundError(ConfigError):
    """Raised when a configured root pid does not exist at resolution time."""

    def __init__(self, pid):
        self.pid = pid
        super().__init__(f"Configured root pid {pid} does not exist")


class StopWalk(ProcTreeError):
    """
    Raise this from a walk handler to stop the walk.
    The walk returns False instead of propagating it.
    """

    pass
