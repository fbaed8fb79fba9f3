"""
Parent-exit lifecycle guard.

Keeps a process-wide registry of running, non-detached Firefox children.
A single ``atexit`` hook, installed on first use, terminates every child
still registered when the host interpreter exits. Children remove
themselves from the registry when they close, so long-running hosts with
many sequential launches do not accumulate hooks.
"""

import atexit
import logging
import threading
from typing import Protocol

logger = logging.getLogger(__name__)


class Terminable(Protocol):
    pid: int

    def terminate(self) -> None: ...


_lock = threading.Lock()
_active: dict[int, Terminable] = {}
_hook_installed = False


def register(child: Terminable) -> None:
    """Terminate *child* when the host process exits, unless unregistered first."""
    global _hook_installed
    with _lock:
        _active[id(child)] = child
        if not _hook_installed:
            atexit.register(run_exit_hooks)
            _hook_installed = True
    logger.debug(f"Registered exit guard for pid {child.pid}")


def unregister(child: Terminable) -> None:
    """Remove *child* from the registry. Unknown children are ignored."""
    with _lock:
        removed = _active.pop(id(child), None)
    if removed is not None:
        logger.debug(f"Removed exit guard for pid {child.pid}")


def active() -> list[Terminable]:
    """Snapshot of the children currently guarded."""
    with _lock:
        return list(_active.values())


def run_exit_hooks() -> None:
    """
    Terminate every registered child.

    Runs once at interpreter exit, but may be called directly. Never raises:
    a child that cannot be signalled is logged and skipped.
    """
    with _lock:
        children = list(_active.values())
        _active.clear()

    for child in children:
        try:
            child.terminate()
            logger.debug(f"Sent termination signal to pid {child.pid}")
        except Exception as e:
            logger.debug(f"Failed to terminate pid {child.pid}: {e}")
