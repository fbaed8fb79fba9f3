"""
Exceptions raised by fx-runner.

Only failures that happen before a child process exists are raised from
``run_firefox``. Spawn-time failures are carried by the returned process
handle instead.
"""

from typing import Optional


class FxRunnerError(Exception):
    """Base class for fx-runner errors."""
    pass


class LaunchError(FxRunnerError):
    """The launch was aborted before any process was spawned."""
    pass


class RedirectError(LaunchError):
    """A stdout/stderr redirect file could not be opened."""

    def __init__(self, stream: str, path: str, reason: Optional[str] = None):
        self.stream = stream
        self.path = path
        message = f"Cannot open {stream} redirect file {path!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class BinaryNotFoundError(LaunchError):
    """No Firefox executable could be resolved."""

    def __init__(self, binary: str):
        self.binary = binary
        super().__init__(f"Firefox executable not found: {binary}")


class BinaryArgsError(LaunchError):
    """A free-form binary argument string could not be tokenized."""

    def __init__(self, text: str, reason: str):
        self.text = text
        super().__init__(f"Cannot parse binary args {text!r}: {reason}")
