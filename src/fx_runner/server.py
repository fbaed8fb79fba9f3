"""
fx-runner MCP Server

Start and stop a local Firefox with custom startup arguments.
"""

import atexit
import logging
import signal
from typing import Optional

from fastmcp import FastMCP

from .errors import LaunchError
from .manager import firefox_manager
from .options import LaunchOptions

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Create MCP server
mcp = FastMCP(
    "fx-runner",
    instructions="Launch a local Firefox with custom startup arguments and stop it again.",
)


# =============================================================================
# Lifecycle Tools
# =============================================================================

@mcp.tool()
async def firefox_start(
    binary: Optional[str] = None,
    profile: Optional[str] = None,
    new_instance: bool = False,
    no_remote: bool = False,
    foreground: bool = False,
    binary_args: Optional[str] = None,
    binary_args_first: bool = False,
    listen: Optional[str] = None,
    stdout_file_path: Optional[str] = None,
    stderr_file_path: Optional[str] = None,
    env: Optional[dict[str, str]] = None,
) -> dict:
    """
    Launch Firefox.

    If Firefox is already running it is reused; call firefox_stop first to
    relaunch with other options.

    Args:
        binary: Firefox path or channel name ("firefox", "beta", "nightly", ...)
        profile: Profile name, or a path to a profile directory
        new_instance: Pass -new-instance
        no_remote: Pass -no-remote
        foreground: Pass -foreground
        binary_args: Extra Firefox arguments, shell-quoted
        binary_args_first: Put binary_args before the generated flags
        listen: Port (or host:port) for the remote debugger server
        stdout_file_path: Append Firefox stdout to this file
        stderr_file_path: Append Firefox stderr to this file
        env: Extra environment variables
    """
    options = LaunchOptions(
        binary=binary,
        profile=profile,
        new_instance=new_instance,
        no_remote=no_remote,
        foreground=foreground,
        binary_args=binary_args,
        binary_args_first=binary_args_first,
        listen=listen,
        stdout_file_path=stdout_file_path,
        stderr_file_path=stderr_file_path,
        env=env or {},
    )
    try:
        await firefox_manager.start(options)
    except LaunchError as e:
        return {"success": False, "error": str(e)}

    status = firefox_manager.status()
    if status["error"]:
        return {"success": False, **status}
    return {"success": True, **status}


@mcp.tool()
async def firefox_stop() -> dict:
    """Stop the running Firefox."""
    if not firefox_manager.running:
        await firefox_manager.stop()
        return {"success": False, "error": "Firefox is not running"}

    code = await firefox_manager.stop()
    return {"success": True, "returncode": code}


@mcp.tool()
async def firefox_status() -> dict:
    """Report whether Firefox is running, with its pid, binary and arguments."""
    return firefox_manager.status()


# =============================================================================
# Server Lifecycle
# =============================================================================

def cleanup():
    """Cleanup on shutdown."""
    logger.info("Shutting down fx-runner...")
    firefox_manager.shutdown()


def main():
    """Entry point for the MCP server."""
    # Register cleanup
    atexit.register(cleanup)

    # Handle signals (the handler interrupts the running event loop)
    def signal_handler(sig, frame):
        cleanup()
        raise SystemExit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    # Run MCP server
    logger.info("Starting fx-runner MCP server...")
    mcp.run()


if __name__ == "__main__":
    main()
