"""
Tests for the fx-runner CLI.

Runs ``fx-runner start`` against the stub binary and checks what it was
started with.
"""

import json
import sys

import pytest
from typer.testing import CliRunner

from fx_runner import lifecycle
from fx_runner.cli import app

runner = CliRunner()

pytestmark = pytest.mark.skipif(
    sys.platform == "win32",
    reason="stub binaries are shell scripts"
)


def start(fake_binary, *args, env=None):
    return runner.invoke(app, ["start", "-b", fake_binary, *args], env=env)


def report_from(result) -> dict:
    """Find the stub's JSON line; stderr may be interleaved with stdout."""
    for line in result.stdout.splitlines():
        if line.startswith("{"):
            return json.loads(line)
    raise AssertionError(f"No report in output: {result.output!r}")


class TestStartCommand:
    """Test the start command."""

    def test_profile_name(self, fake_binary, no_binary_env):
        """-p <name> reaches Firefox with the default debugger port."""
        result = start(fake_binary, "-p", "foo")

        assert result.exit_code == 0, result.output
        report = report_from(result)
        assert report["profile"] == "foo"
        assert report["new-instance"] is False
        assert report["foreground"] is False
        assert report["no-remote"] is False
        assert report["binary-args"] == ""
        assert report["listen"] == 6000

    def test_profile_path(self, fake_binary, no_binary_env):
        result = start(fake_binary, "-p", "./")

        assert result.exit_code == 0, result.output
        report = report_from(result)
        assert report["profile"] == "./"
        assert report["args"][-2:] == ["-profile", "./"]

    def test_binary_args(self, fake_binary, no_binary_env):
        result = start(fake_binary, "--binary-args", "-test")

        assert result.exit_code == 0, result.output
        assert report_from(result)["binary-args"] == "-test"

    @pytest.mark.parametrize(
        "flag,key",
        [
            ("--foreground", "foreground"),
            ("--no-remote", "no-remote"),
            ("--new-instance", "new-instance"),
        ],
    )
    def test_boolean_flags(self, fake_binary, no_binary_env, flag, key):
        result = start(fake_binary, flag)

        assert result.exit_code == 0, result.output
        report = report_from(result)
        assert report[key] is True
        for other in {"foreground", "no-remote", "new-instance"} - {key}:
            assert report[other] is False

    def test_listen(self, fake_binary, no_binary_env):
        result = start(fake_binary, "--listen", "6666")

        assert result.exit_code == 0, result.output
        assert report_from(result)["listen"] == 6666

    def test_listen_from_env(self, fake_binary, no_binary_env):
        result = start(fake_binary, env={"FX_RUNNER_LISTEN": "7000"})

        assert result.exit_code == 0, result.output
        assert report_from(result)["listen"] == 7000

    def test_verbose_prints_options(self, fake_binary, no_binary_env, tmp_path):
        """-v prints the launch options before Firefox runs."""
        out_path = tmp_path / "out.log"
        result = start(
            fake_binary, "-v", "-p", "foo", "--stdout-file-path", str(out_path)
        )

        assert result.exit_code == 0, result.output
        assert '"profile": "foo"' in result.stdout
        assert '"listen": 6000' in result.stdout
        assert json.loads(out_path.read_text())["profile"] == "foo"

    def test_unclosed_quote_in_binary_args(self, fake_binary, no_binary_env, tmp_path):
        """A malformed --binary-args string is reported without a traceback."""
        out_path = tmp_path / "out.log"
        result = start(
            fake_binary, "--binary-args", '-url "it', "--stdout-file-path", str(out_path)
        )

        assert result.exit_code == 1
        assert "Cannot parse binary args" in result.output
        assert result.exception is None or isinstance(result.exception, SystemExit)
        assert out_path.read_text() == ""

    def test_missing_binary(self, tmp_path, no_binary_env):
        result = runner.invoke(app, ["start", "-b", str(tmp_path / "missing")])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_detached(self, fake_binary, no_binary_env, tmp_path):
        out_path = tmp_path / "out.log"
        result = start(fake_binary, "--detached", "--stdout-file-path", str(out_path))

        assert result.exit_code == 0, result.output
        assert "detached" in result.output
        assert lifecycle.active() == []


class TestInfoCommand:
    """Test the info command."""

    def test_info(self, fake_binary):
        result = runner.invoke(app, ["info", "-b", fake_binary])

        assert result.exit_code == 0, result.output
        assert f"Binary: {fake_binary}" in result.output
        assert "Profiles:" in result.output

    def test_info_missing_binary(self, tmp_path):
        result = runner.invoke(app, ["info", "-b", str(tmp_path / "missing")])

        assert result.exit_code == 1
        assert "not found" in result.output


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
