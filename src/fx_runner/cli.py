"""
fx-runner CLI - Main application entry point.

Commands:
- ``fx-runner start``: launch Firefox and stream its output
- ``fx-runner info``: show the resolved Firefox binary and profiles directory
"""

import asyncio
import json
import logging
import os
import sys
from typing import Optional

import typer
from rich.console import Console

from .errors import BinaryNotFoundError, LaunchError
from .options import LaunchOptions
from .runner import run_firefox
from .utils.platform import find_profiles_dir, normalize_binary

# Environment variable holding the default debugger server port
LISTEN_ENV = "FX_RUNNER_LISTEN"
DEFAULT_LISTEN = "6000"

app = typer.Typer(
    name="fx-runner",
    help="Launch Firefox with a configurable set of startup arguments",
    no_args_is_help=True,
    add_completion=False,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def _listen_value(listen: Optional[str]):
    """Ports are passed on as numbers, host:port pairs as strings."""
    if listen is None:
        listen = os.environ.get(LISTEN_ENV, DEFAULT_LISTEN)
    if listen.isdigit():
        return int(listen)
    return listen or None


def _exit_code(returncode: int) -> int:
    # POSIX reports signals as negative codes; shells use 128 + signal
    if returncode < 0:
        return 128 - returncode
    return returncode


def _writer(stream):
    def write(line: bytes) -> None:
        stream.write(line)
        stream.flush()
    return write


async def _start(options: LaunchOptions) -> int:
    result = await run_firefox(options)
    process = result.process
    if process.error is not None:
        raise process.error

    if options.detached:
        err_console.print(f"Firefox started detached (pid {process.pid})")
        return 0

    readers = process.forward_output(
        _writer(sys.stdout.buffer), _writer(sys.stderr.buffer)
    )
    returncode = await process.wait()
    for reader in readers:
        # Firefox's own children may keep the pipe open after it exits
        await asyncio.to_thread(reader.join, 1.0)
    return returncode


@app.command()
def start(
    binary: Optional[str] = typer.Option(
        None, "--binary", "-b", help="Path or channel name of the Firefox binary to use"
    ),
    profile: Optional[str] = typer.Option(
        None, "--profile", "-p", help="Path or name of the Firefox profile to use"
    ),
    new_instance: bool = typer.Option(
        False, "--new-instance", help="Create a new instance of Firefox"
    ),
    no_remote: bool = typer.Option(
        False, "--no-remote", help="Do not allow remote connections"
    ),
    foreground: bool = typer.Option(
        False, "--foreground", help="Bring Firefox to the foreground"
    ),
    binary_args: Optional[str] = typer.Option(
        None, "--binary-args", help="Additional arguments passed to Firefox"
    ),
    binary_args_first: bool = typer.Option(
        False, "--binary-args-first", help="Put --binary-args before the generated flags"
    ),
    listen: Optional[str] = typer.Option(
        None,
        "--listen",
        "-l",
        help=f"Start the debugger server on this port (default ${LISTEN_ENV} or {DEFAULT_LISTEN})",
    ),
    stdout_file_path: Optional[str] = typer.Option(
        None, "--stdout-file-path", help="Append Firefox stdout to this file"
    ),
    stderr_file_path: Optional[str] = typer.Option(
        None, "--stderr-file-path", help="Append Firefox stderr to this file"
    ),
    detached: bool = typer.Option(
        False, "--detached", help="Leave Firefox running after fx-runner exits"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Print the launch options and debug logs"
    ),
) -> None:
    """
    Start Firefox.

    Streams Firefox's output and exits with its exit code. With --detached,
    returns as soon as Firefox has been started.

    Examples:
        fx-runner start -b nightly -p dev
        fx-runner start --binary-args "-url https://example.com" --foreground
    """
    _configure_logging(verbose)

    options = LaunchOptions(
        binary=binary,
        profile=profile,
        new_instance=new_instance,
        no_remote=no_remote,
        foreground=foreground,
        binary_args=binary_args,
        binary_args_first=binary_args_first,
        listen=_listen_value(listen),
        stdout_file_path=stdout_file_path,
        stderr_file_path=stderr_file_path,
        detached=detached,
    )

    if verbose:
        shown = options.as_mapping()
        del shown["env"]
        typer.echo(json.dumps(shown, indent=2))

    try:
        returncode = asyncio.run(_start(options))
    except LaunchError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    except OSError as e:
        err_console.print(f"[red]Error: Failed to start Firefox: {e}[/red]")
        raise typer.Exit(1)

    raise typer.Exit(_exit_code(returncode))


@app.command()
def info(
    binary: Optional[str] = typer.Option(
        None, "--binary", "-b", help="Path or channel name of the Firefox binary"
    ),
) -> None:
    """Show the Firefox binary that would be launched and the profiles directory."""
    try:
        path = asyncio.run(normalize_binary(binary))
    except BinaryNotFoundError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"Binary: {path}", highlight=False)
    profiles = find_profiles_dir()
    console.print(f"Profiles: {profiles or 'not found'}", highlight=False)


def main() -> None:
    """Entry point for the fx-runner command."""
    app()


if __name__ == "__main__":
    main()
