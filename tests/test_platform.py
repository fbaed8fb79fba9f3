"""Tests for platform utilities - Firefox detection and binary normalization.

These tests run without needing Firefox and verify the resolution logic.
"""

import os
import sys
from pathlib import Path

import pytest

from fx_runner.errors import BinaryNotFoundError
from fx_runner.utils import platform
from fx_runner.utils.platform import (
    CHANNEL_ALIASES,
    find_firefox_executable,
    find_profiles_dir,
    get_platform,
    is_profile_locked,
    normalize_binary,
    resolve_binary,
)


def make_executable(path: Path) -> str:
    path.write_text("#!/bin/sh\n")
    path.chmod(0o755)
    return str(path)


class TestGetPlatform:
    """Test platform detection."""

    def test_known_value(self):
        assert get_platform() in ("mac", "linux", "windows")


class TestFindFirefoxExecutable:
    """Test Firefox executable detection."""

    @pytest.mark.parametrize("channel", list(CHANNEL_ALIASES))
    def test_returns_string_or_none(self, channel):
        """Should return a string path or None."""
        result = find_firefox_executable(channel)
        assert result is None or isinstance(result, str)

    def test_executable_exists_if_found(self):
        """If a path is returned, it should exist."""
        result = find_firefox_executable()
        if result:
            assert os.path.exists(result), f"Firefox path doesn't exist: {result}"

    def test_path_fallback(self, tmp_path, monkeypatch):
        """Falls back to PATH when no install location matches."""
        monkeypatch.setattr(platform, "_candidate_paths", lambda channel: [])
        monkeypatch.setenv("PATH", str(tmp_path))
        expected = make_executable(tmp_path / "firefox-nightly")
        assert find_firefox_executable("nightly") == expected

    @pytest.mark.parametrize("alias,channel", sorted(CHANNEL_ALIASES.items()))
    def test_alias_selects_channel(self, alias, channel, tmp_path, monkeypatch):
        """Every documented name maps to its release channel."""
        seen = []
        binary = make_executable(tmp_path / "firefox")

        def candidates(key):
            seen.append(key)
            return [binary]

        monkeypatch.setattr(platform, "_candidate_paths", candidates)
        assert find_firefox_executable(alias.upper()) == binary
        assert seen == [channel]

    def test_default_is_release(self, monkeypatch):
        seen = []
        monkeypatch.setattr(platform, "_candidate_paths", lambda key: seen.append(key) or [])
        find_firefox_executable()
        assert seen == ["release"]

    def test_unknown_channel(self):
        with pytest.raises(ValueError, match="Unknown Firefox channel"):
            find_firefox_executable("esr-nightly")


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX paths")
class TestResolveBinary:
    """Test binary locator normalization."""

    def test_existing_path(self, tmp_path):
        binary = make_executable(tmp_path / "firefox")
        assert resolve_binary(binary) == binary

    def test_relative_path_made_absolute(self, tmp_path, monkeypatch):
        make_executable(tmp_path / "firefox")
        monkeypatch.chdir(tmp_path)
        assert resolve_binary("./firefox") == str(tmp_path / "firefox")

    def test_home_expanded(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        binary = make_executable(tmp_path / "firefox")
        assert resolve_binary("~/firefox") == binary

    def test_app_bundle(self, tmp_path):
        """A macOS .app bundle resolves to the executable inside it."""
        macos = tmp_path / "Firefox.app" / "Contents" / "MacOS"
        macos.mkdir(parents=True)
        binary = make_executable(macos / "firefox")
        assert resolve_binary(str(tmp_path / "Firefox.app")) == binary

    def test_missing_path(self, tmp_path):
        with pytest.raises(BinaryNotFoundError):
            resolve_binary(str(tmp_path / "nope" / "firefox"))

    def test_channel_alias(self, tmp_path, monkeypatch):
        """Channel names resolve through the install locations."""
        binary = make_executable(tmp_path / "firefox")
        monkeypatch.setattr(platform, "_candidate_paths", lambda channel: [binary])
        assert resolve_binary("Nightly") == binary

    def test_name_on_path(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PATH", str(tmp_path))
        binary = make_executable(tmp_path / "librewolf")
        assert resolve_binary("librewolf") == binary

    def test_unknown_name(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PATH", str(tmp_path))
        with pytest.raises(BinaryNotFoundError) as exc_info:
            resolve_binary("no-such-browser")
        assert exc_info.value.binary == "no-such-browser"

    def test_env_default(self, tmp_path, monkeypatch):
        """FX_RUNNER_BINARY is used when no binary is given."""
        binary = make_executable(tmp_path / "firefox")
        monkeypatch.setenv("FX_RUNNER_BINARY", binary)
        assert resolve_binary(None) == binary

    @pytest.mark.asyncio
    async def test_normalize_binary_async(self, tmp_path):
        binary = make_executable(tmp_path / "firefox")
        assert await normalize_binary(binary) == binary

    @pytest.mark.asyncio
    async def test_normalize_binary_not_found(self, tmp_path):
        with pytest.raises(BinaryNotFoundError):
            await normalize_binary(str(tmp_path / "missing"))


class TestFindProfilesDir:
    """Test Firefox profiles directory detection."""

    def test_returns_string_or_none(self):
        result = find_profiles_dir()
        assert result is None or isinstance(result, str)

    def test_is_directory_if_exists(self):
        result = find_profiles_dir()
        if result and os.path.exists(result):
            assert os.path.isdir(result), f"Profiles path is not a directory: {result}"


class TestIsProfileLocked:
    """Test Firefox profile lock detection."""

    def test_nonexistent_dir_not_locked(self):
        assert is_profile_locked("/nonexistent/path/that/does/not/exist") is False

    def test_empty_dir_not_locked(self, tmp_path):
        assert is_profile_locked(str(tmp_path)) is False

    def test_parent_lock_file(self, tmp_path):
        (tmp_path / "parent.lock").touch()
        assert is_profile_locked(str(tmp_path)) is True

    def test_parentlock_dotfile(self, tmp_path):
        """macOS Firefox keeps a .parentlock file."""
        (tmp_path / ".parentlock").touch()
        assert is_profile_locked(str(tmp_path)) is True

    @pytest.mark.skipif(sys.platform == "win32", reason="symlinks")
    def test_dangling_lock_symlink(self, tmp_path):
        """Firefox's lock symlink points nowhere but still counts."""
        os.symlink("127.0.0.1:+12345", tmp_path / "lock")
        assert is_profile_locked(str(tmp_path)) is True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
