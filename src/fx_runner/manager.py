"""
Firefox Manager - one managed Firefox instance for long-running hosts.

Handles:
- Starting Firefox (reusing the running instance if there is one)
- Draining piped output into the log
- Graceful stop with a kill fallback
"""

import asyncio
import logging
from typing import Any, Mapping, Optional, Union

from .options import LaunchOptions
from .runner import LaunchResult, run_firefox

logger = logging.getLogger(__name__)


class FirefoxManager:
    """
    Owns at most one Firefox process.

    Starting while an instance is running returns the running instance
    unchanged; stop it first to relaunch with different options.
    """

    def __init__(self):
        self.result: Optional[LaunchResult] = None

    @property
    def running(self) -> bool:
        return self.result is not None and self.result.process.running

    async def start(
        self, options: Union[LaunchOptions, Mapping[str, Any], None] = None
    ) -> LaunchResult:
        """
        Launch Firefox unless one is already running.

        Raises:
            LaunchError: If the launch was aborted before spawning
        """
        if self.running:
            logger.debug("Firefox already running, reusing existing instance")
            return self.result

        self.result = await run_firefox(options)
        process = self.result.process
        if process.error is None:
            process.forward_output(self._log_stdout, self._log_stderr)
        return self.result

    async def stop(self, timeout: float = 5.0) -> Optional[int]:
        """
        Stop the managed Firefox.

        Sends a termination signal and waits up to *timeout* seconds before
        killing it.

        Returns:
            The exit code, or None if nothing was running
        """
        if self.result is None:
            return None

        process = self.result.process
        self.result = None
        if process.error is not None:
            return None

        process.terminate()
        try:
            code = await asyncio.wait_for(process.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Firefox did not exit after {timeout}s, killing it")
            process.kill()
            code = await process.wait()

        logger.info(f"Firefox stopped (exit code {code})")
        return code

    def shutdown(self) -> None:
        """
        Terminate the managed Firefox without waiting for it.

        Needs no event loop, so signal handlers and atexit hooks can call it.
        """
        if self.result is None:
            return

        process = self.result.process
        self.result = None
        if process.error is None:
            process.terminate()

    def status(self) -> dict:
        """Describe the managed instance."""
        if self.result is None:
            return {"running": False}

        process = self.result.process
        return {
            "running": process.running,
            "pid": process.pid,
            "returncode": process.returncode,
            "binary": self.result.binary,
            "args": [str(arg) for arg in self.result.args],
            "error": str(process.error) if process.error else None,
        }

    @staticmethod
    def _log_stdout(line: bytes) -> None:
        logger.debug(f"firefox: {line.decode(errors='replace').rstrip()}")

    @staticmethod
    def _log_stderr(line: bytes) -> None:
        logger.debug(f"firefox stderr: {line.decode(errors='replace').rstrip()}")


# Singleton instance for use across tools
firefox_manager = FirefoxManager()
