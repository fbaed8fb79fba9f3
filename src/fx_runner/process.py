"""
Handle for a spawned Firefox process.

Wraps ``subprocess.Popen`` with:
- "close" and "error" event subscriptions
- An async ``wait()`` usable from the event loop
- Spawn failures reported on the handle instead of raised
"""

import asyncio
import logging
import subprocess
import sys
import threading
from typing import IO, Any, Callable, Optional, Sequence, Union

logger = logging.getLogger(__name__)

# What a stream may be connected to: PIPE, DEVNULL, or an open file
StdioTarget = Union[int, IO[Any]]

EVENTS = ("close", "error")


def _set_result(future: asyncio.Future, value: Any) -> None:
    if not future.done():
        future.set_result(value)


class FirefoxProcess:
    """
    A launched (or failed-to-launch) Firefox child process.

    Events:
    - ``"close"``: the child exited; handlers get the exit code. Fired once
      from a watcher thread. Handlers registered after the child exited are
      called immediately.
    - ``"error"``: the spawn call failed; handlers get the ``OSError``.
      Fired on the next event loop iteration after ``spawn`` returns.
    """

    def __init__(
        self,
        popen: Optional[subprocess.Popen] = None,
        error: Optional[OSError] = None,
    ):
        self.popen = popen
        self.error = error
        self._handlers: dict[str, list[Callable[..., None]]] = {}
        self._lock = threading.Lock()
        self._closed = False
        self._watcher: Optional[threading.Thread] = None

    @classmethod
    def spawn(
        cls,
        binary: str,
        args: Sequence[Any],
        *,
        env: dict[str, str],
        stdout: StdioTarget,
        stderr: StdioTarget,
        detached: bool = False,
    ) -> "FirefoxProcess":
        """
        Start the child process.

        stdin is always closed. A detached child gets its own session (or
        process group on Windows) so it outlives the parent's terminal.

        Returns:
            The process handle. If the OS refused to start the executable,
            the handle has ``error`` set and emits ``"error"``.
        """
        kwargs: dict[str, Any] = {}
        if detached:
            if sys.platform == "win32":
                kwargs["creationflags"] = (
                    subprocess.DETACHED_PROCESS | subprocess.CREATE_NEW_PROCESS_GROUP
                )
            else:
                kwargs["start_new_session"] = True

        command = [binary, *(str(arg) for arg in args)]
        try:
            popen = subprocess.Popen(
                command,
                env=env,
                stdin=subprocess.DEVNULL,
                stdout=stdout,
                stderr=stderr,
                **kwargs,
            )
        except OSError as e:
            logger.error(f"Failed to spawn Firefox: {e}")
            process = cls(error=e)
            process._emit_error_soon(e)
            return process

        process = cls(popen)
        process._start_watcher()
        logger.info(f"Firefox started (pid {popen.pid})")
        return process

    @property
    def pid(self) -> Optional[int]:
        return self.popen.pid if self.popen else None

    @property
    def returncode(self) -> Optional[int]:
        return self.popen.returncode if self.popen else None

    @property
    def stdout(self) -> Optional[IO[bytes]]:
        """Child stdout when it is piped, else None."""
        return self.popen.stdout if self.popen else None

    @property
    def stderr(self) -> Optional[IO[bytes]]:
        """Child stderr when it is piped, else None."""
        return self.popen.stderr if self.popen else None

    @property
    def running(self) -> bool:
        return self.popen is not None and not self._closed

    def on(self, event: str, handler: Callable[..., None]) -> None:
        """
        Register an event handler.

        Args:
            event: "close" or "error"
            handler: Plain callable. Close handlers may run on the watcher thread.
        """
        if event not in EVENTS:
            raise ValueError(f"Unknown event: {event}")
        with self._lock:
            self._handlers.setdefault(event, []).append(handler)
            fire_now = event == "close" and self._closed
        if fire_now:
            self._call(event, handler, self.returncode)

    def off(self, event: str, handler: Optional[Callable[..., None]] = None) -> None:
        """
        Remove an event handler.

        Args:
            event: Event name
            handler: Specific handler to remove, or None to remove all
        """
        with self._lock:
            if event not in self._handlers:
                return
            if handler is None:
                del self._handlers[event]
            else:
                self._handlers[event] = [
                    h for h in self._handlers[event] if h != handler
                ]

    def terminate(self) -> None:
        """Send SIGTERM (TerminateProcess on Windows). No-op once exited."""
        if self.popen is not None and self.popen.poll() is None:
            self.popen.terminate()

    def kill(self) -> None:
        """Send SIGKILL. No-op once exited."""
        if self.popen is not None and self.popen.poll() is None:
            self.popen.kill()

    def forward_output(
        self,
        on_stdout: Callable[[bytes], None],
        on_stderr: Callable[[bytes], None],
    ) -> list[threading.Thread]:
        """
        Feed piped output, line by line, to callbacks.

        Each piped stream is read on its own daemon thread, so a reader
        blocked on a pipe never holds up interpreter shutdown (the exit
        guard runs after non-daemon threads are joined).

        Returns:
            The reader threads, finished once their stream hits EOF
        """
        threads = []
        for name, stream, callback in (
            ("stdout", self.stdout, on_stdout),
            ("stderr", self.stderr, on_stderr),
        ):
            if stream is None:
                continue
            thread = threading.Thread(
                target=self._forward,
                args=(name, stream, callback),
                name=f"fx-runner-{name}-{self.pid}",
                daemon=True,
            )
            thread.start()
            threads.append(thread)
        return threads

    def _forward(self, name: str, stream: IO[bytes], callback: Callable[[bytes], None]) -> None:
        with stream:
            for line in iter(stream.readline, b""):
                self._call(name, callback, line)

    async def wait(self) -> int:
        """
        Wait for the child to exit.

        Returns:
            The exit code (negative signal number on POSIX when killed)

        Raises:
            OSError: If the process never started
        """
        if self.error is not None:
            raise self.error

        loop = asyncio.get_running_loop()
        future: asyncio.Future[int] = loop.create_future()

        def on_close(code: int) -> None:
            if not loop.is_closed():
                loop.call_soon_threadsafe(_set_result, future, code)

        self.on("close", on_close)
        try:
            return await future
        finally:
            self.off("close", on_close)

    def _start_watcher(self) -> None:
        self._watcher = threading.Thread(
            target=self._watch,
            name=f"fx-runner-watch-{self.pid}",
            daemon=True,
        )
        self._watcher.start()

    def _watch(self) -> None:
        code = self.popen.wait()
        with self._lock:
            self._closed = True
            handlers = list(self._handlers.get("close", []))
        logger.info(f"Firefox (pid {self.pid}) exited with code {code}")
        for handler in handlers:
            self._call("close", handler, code)

    def _emit_error_soon(self, error: OSError) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop: callers observe the failure through .error / wait()
            return
        loop.call_soon(self._emit, "error", error)

    def _emit(self, event: str, *args: Any) -> None:
        with self._lock:
            handlers = list(self._handlers.get(event, []))
        for handler in handlers:
            self._call(event, handler, *args)

    def _call(self, event: str, handler: Callable[..., None], *args: Any) -> None:
        try:
            handler(*args)
        except Exception as e:
            logger.error(f"Event handler error for {event}: {e}")
