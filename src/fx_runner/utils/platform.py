"""
Platform utilities for Firefox detection.

Handles cross-platform detection of:
- Firefox executable paths per release channel
- Binary locator normalization (names, paths, macOS app bundles)
- Default profile directories and profile locks
"""

import asyncio
import os
import shutil
import sys
from pathlib import Path
from typing import Optional

from ..errors import BinaryNotFoundError

# Environment variable holding the default binary locator
BINARY_ENV = "FX_RUNNER_BINARY"

DEFAULT_BINARY = "firefox"

# Locator names that select a release channel instead of a PATH lookup
CHANNEL_ALIASES = {
    "firefox": "release",
    "release": "release",
    "beta": "beta",
    "developer": "developer",
    "firefoxdeveloperedition": "developer",
    "aurora": "developer",
    "nightly": "nightly",
}

_PATH_NAMES = {
    "release": ["firefox"],
    "beta": ["firefox-beta", "firefox"],
    "developer": ["firefox-developer-edition", "firefox-aurora"],
    "nightly": ["firefox-nightly", "firefox-trunk"],
}


def get_platform() -> str:
    """Return the current operating system: 'mac', 'linux', or 'windows'."""
    if sys.platform.startswith("darwin"):
        return "mac"
    elif sys.platform.startswith("win"):
        return "windows"
    return "linux"


def _candidate_paths(channel: str) -> list[str]:
    plat = get_platform()

    if plat == "mac":
        apps = {
            "release": ["Firefox.app"],
            "beta": ["Firefox Beta.app", "FirefoxBeta.app"],
            "developer": [
                "Firefox Developer Edition.app",
                "FirefoxDeveloperEdition.app",
                "FirefoxAurora.app",
            ],
            "nightly": ["Firefox Nightly.app", "FirefoxNightly.app"],
        }[channel]
        return [f"/Applications/{app}/Contents/MacOS/firefox" for app in apps]
    elif plat == "windows":
        dirs = {
            "release": ["Mozilla Firefox"],
            "beta": ["Mozilla Firefox Beta", "Mozilla Firefox"],
            "developer": ["Firefox Developer Edition"],
            "nightly": ["Firefox Nightly"],
        }[channel]
        # Expand environment variables for Windows paths
        return [
            os.path.expandvars(rf"{root}\{name}\firefox.exe")
            for name in dirs
            for root in ("%ProgramFiles%", "%ProgramFiles(x86)%", "%LocalAppData%")
        ]
    else:  # linux
        return {
            "release": [
                "/usr/bin/firefox",
                "/usr/lib/firefox/firefox",
                "/snap/bin/firefox",
                "/opt/firefox/firefox",
            ],
            "beta": ["/usr/bin/firefox-beta", "/opt/firefox-beta/firefox"],
            "developer": [
                "/usr/bin/firefox-developer-edition",
                "/opt/firefox-developer-edition/firefox",
            ],
            "nightly": ["/usr/bin/firefox-nightly", "/opt/firefox-nightly/firefox"],
        }[channel]


def find_firefox_executable(channel: str = "firefox") -> Optional[str]:
    """
    Find the Firefox executable for a release channel.

    Checks common installation paths before falling back to PATH lookup.

    Args:
        channel: A channel name from CHANNEL_ALIASES ("firefox", "beta",
            "developer", "aurora", "nightly", ...), case-insensitive

    Returns:
        The first executable found, or None

    Raises:
        ValueError: If the channel is unknown
    """
    key = CHANNEL_ALIASES.get(channel.lower())
    if key is None:
        raise ValueError(f"Unknown Firefox channel: {channel}")

    for path in _candidate_paths(key):
        if os.path.isfile(path) and os.access(path, os.X_OK):
            return path

    for name in _PATH_NAMES[key]:
        path = shutil.which(name)
        if path:
            return path

    return None


def _is_path(binary: str) -> bool:
    return os.path.isabs(binary) or os.sep in binary or "/" in binary or binary.startswith("~")


def resolve_binary(binary: Optional[str] = None) -> str:
    """
    Resolve a binary locator to an absolute executable path (blocking).

    See ``normalize_binary``.
    """
    binary = binary or os.environ.get(BINARY_ENV) or DEFAULT_BINARY

    if _is_path(binary):
        path = os.path.expanduser(binary)
        # macOS app bundles hold the real executable inside
        if path.rstrip("/\\").endswith(".app") and os.path.isdir(path):
            path = os.path.join(path, "Contents", "MacOS", "firefox")
        if os.path.isfile(path):
            return os.path.abspath(path)
        raise BinaryNotFoundError(binary)

    if binary.lower() in CHANNEL_ALIASES:
        found = find_firefox_executable(binary)
    else:
        found = shutil.which(binary)
    if found:
        return os.path.abspath(found)

    raise BinaryNotFoundError(binary)


async def normalize_binary(binary: Optional[str] = None) -> str:
    """
    Resolve a binary path or name to an absolute Firefox executable path.

    Resolution order:
    1. ``binary``, else ``$FX_RUNNER_BINARY``, else "firefox"
    2. Paths (containing a separator or ``~``) must exist; ``.app`` bundles
       are resolved to their executable
    3. Channel names ("firefox", "beta", "developer", "aurora", "nightly")
       use the platform's install locations
    4. Any other name is looked up on PATH

    Raises:
        BinaryNotFoundError: If nothing could be resolved
    """
    return await asyncio.to_thread(resolve_binary, binary)


def find_profiles_dir() -> Optional[str]:
    """
    Find the directory holding Firefox profiles.

    Returns None if the directory doesn't exist.
    """
    plat = get_platform()
    home = Path.home()

    if plat == "mac":
        candidates = [home / "Library/Application Support/Firefox/Profiles"]
    elif plat == "windows":
        app_data = os.environ.get("APPDATA")
        if app_data:
            candidates = [Path(app_data) / "Mozilla" / "Firefox" / "Profiles"]
        else:
            return None
    else:  # linux
        candidates = [
            home / ".mozilla" / "firefox",
            home / "snap" / "firefox" / "common" / ".mozilla" / "firefox",
        ]

    for path in candidates:
        if path.exists():
            return str(path)

    return None


def is_profile_locked(profile_dir: str) -> bool:
    """
    Check if a Firefox profile is in use by a running Firefox.

    Firefox keeps a 'lock' symlink (Linux), a '.parentlock' file (macOS) or a
    'parent.lock' file (Windows) in the profile while running. The symlink
    dangles, so lexists is used.
    """
    profile_path = Path(profile_dir)

    for name in ("lock", ".parentlock", "parent.lock"):
        if os.path.lexists(profile_path / name):
            return True

    return False
