"""
Process launcher - start Firefox from launch options.

Handles:
- Resolving stdout/stderr destinations (pipe, discard, or appended file)
- Resolving the Firefox binary through an async normalizer
- Spawning the child with the built arguments and merged environment
- Tying the child's lifetime to the host process unless detached
"""

import asyncio
import io
import logging
import os
import subprocess
from contextlib import ExitStack
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from . import lifecycle
from .args import build_args, is_profile_name
from .errors import RedirectError
from .options import LaunchOptions, Scalar
from .process import FirefoxProcess, StdioTarget
from .utils.platform import is_profile_locked, normalize_binary as default_normalize_binary

logger = logging.getLogger(__name__)

Normalizer = Callable[[Optional[str]], Awaitable[str]]


@dataclass(frozen=True)
class LaunchResult:
    """A spawned Firefox: the process handle, resolved binary and final args."""

    process: FirefoxProcess
    binary: str
    args: tuple[Scalar, ...]


def merge_env(extra: Mapping[str, Any]) -> dict[str, str]:
    """Overlay *extra* on a copy of the current environment. Values become strings."""
    env = dict(os.environ)
    env.update({str(key): str(value) for key, value in extra.items()})
    return env


async def resolve_stdio(stream: str, path: Optional[str], detached: bool) -> StdioTarget:
    """
    Pick the destination for one child output stream.

    A redirect path wins over ``detached``: the file is opened for binary
    append. Without a path, detached children discard output and attached
    ones pipe it to the caller.

    Raises:
        RedirectError: If the redirect file cannot be opened
    """
    if path:
        try:
            return await asyncio.to_thread(open, path, "ab")
        except OSError as e:
            raise RedirectError(stream, path, e.strerror or str(e)) from e
    return subprocess.DEVNULL if detached else subprocess.PIPE


async def run_firefox(
    options: Union[LaunchOptions, Mapping[str, Any], None] = None,
    *,
    normalize_binary: Normalizer = default_normalize_binary,
) -> LaunchResult:
    """
    Launch Firefox.

    Redirect files and the binary path are resolved concurrently; the child
    is only spawned once all three succeeded.

    Args:
        options: LaunchOptions, or a mapping of option keys
        normalize_binary: Coroutine function resolving ``options.binary`` to
            an absolute executable path

    Returns:
        LaunchResult with the live process handle

    Raises:
        RedirectError: If a redirect file cannot be opened
        BinaryNotFoundError: If the default normalizer finds no executable
            (a custom normalizer's errors propagate unchanged)
        BinaryArgsError: If a Raw binary_args string cannot be tokenized

    Spawn failures (e.g. the file is not executable) are not raised here:
    check ``result.process.error``, listen for its "error" event, or await
    ``result.process.wait()``.
    """
    if options is None:
        options = LaunchOptions()
    elif not isinstance(options, LaunchOptions):
        options = LaunchOptions.from_mapping(options)

    env = merge_env(options.env)

    results = await asyncio.gather(
        resolve_stdio("stdout", options.stdout_file_path, options.detached),
        resolve_stdio("stderr", options.stderr_file_path, options.detached),
        normalize_binary(options.binary),
        return_exceptions=True,
    )
    stdout, stderr, binary = results

    # The parent's copies of redirect files are closed once the child has
    # them, or right away if the launch is aborted.
    with ExitStack() as opened:
        for target in (stdout, stderr):
            if isinstance(target, io.IOBase):
                opened.enter_context(target)

        for result in results:
            if isinstance(result, BaseException):
                logger.debug(f"Launch aborted: {result}")
                raise result

        if (
            options.profile
            and not is_profile_name(options.profile)
            and is_profile_locked(options.profile)
        ):
            logger.warning(
                f"Profile {options.profile} is locked. "
                "Another Firefox may be using it."
            )

        args = tuple(build_args(options))

        logger.info(f"Launching Firefox: {binary}")
        logger.debug(f"Firefox args: {' '.join(str(arg) for arg in args)}")

        process = FirefoxProcess.spawn(
            binary,
            args,
            env=env,
            stdout=stdout,
            stderr=stderr,
            detached=options.detached,
        )

    if not options.detached and process.popen is not None:
        # Kill child process when main process exits
        lifecycle.register(process)
        process.on("close", lambda code: lifecycle.unregister(process))

    return LaunchResult(process=process, binary=binary, args=args)
