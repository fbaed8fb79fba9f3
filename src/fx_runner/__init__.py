"""
fx-runner: launch Firefox with a configurable set of startup arguments.

Builds the command line from structured options, routes Firefox's output
streams, and terminates Firefox when the launching process exits unless it
was started detached.
"""

from .args import build_args, is_profile_name, parse_binary_args
from .errors import (
    BinaryArgsError,
    BinaryNotFoundError,
    FxRunnerError,
    LaunchError,
    RedirectError,
)
from .options import LaunchOptions, Raw, Tokenized
from .process import FirefoxProcess
from .runner import LaunchResult, run_firefox

__version__ = "0.1.0"
__all__ = [
    "build_args",
    "is_profile_name",
    "parse_binary_args",
    "run_firefox",
    "LaunchOptions",
    "LaunchResult",
    "FirefoxProcess",
    "Raw",
    "Tokenized",
    "FxRunnerError",
    "LaunchError",
    "RedirectError",
    "BinaryArgsError",
    "BinaryNotFoundError",
]
