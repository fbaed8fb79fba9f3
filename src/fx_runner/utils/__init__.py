"""
Utility modules for fx-runner.
"""

from .platform import (
    find_firefox_executable,
    find_profiles_dir,
    is_profile_locked,
    normalize_binary,
    resolve_binary,
)

__all__ = [
    "find_firefox_executable",
    "find_profiles_dir",
    "is_profile_locked",
    "normalize_binary",
    "resolve_binary",
]
