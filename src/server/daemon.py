"""Run the lookup server detached from the terminal as a Linux service."""

import asyncio
import atexit
import signal
import sys
from pathlib import Path
from typing import Any

import daemon
from daemon.pidfile import PIDLockFile

from run_server import CERT_NAME, KEY_NAME, build_parser, resolve_bind_ip

from .logger import stop_logging_listener
from .server import Server

# Path to the PID file for the daemon process
PID_FILE = "/tmp/lookup_server_daemon.pid"
# Paths to log files for stdout and stderr
STDOUT_LOG = "/tmp/lookup_server_stdout.log"
STDERR_LOG = "/tmp/lookup_server_stderr.log"
# Working directory for the daemon process
WORKDIR = Path("/tmp/")
# File creation mask for the daemon process
UMASK = 0o027
# The configuration settings file of the server
CONFIG_PATH = Path(__file__).parent.parent.parent / "config.txt"


def cleanup() -> None:
    """Cleanup function to be called on exit."""
    try:
        stop_logging_listener()
    except Exception as e:
        print(f"Error during cleanup: {e}", file=sys.stderr)


def resolve_dictionary_path(config_path: Path) -> Path:
    """Rewrite a relative `dictionarypath` against the config's directory.

    The daemon changes its working directory, so a relative dictionary
    path in the config file would otherwise point somewhere else. The
    rewritten copy is stored in the daemon's working directory.

    Args:
        config_path (Path): The original configuration file.

    Returns:
        Path: The configuration file the daemon should load.

    """
    lines = config_path.read_text(encoding="utf-8").splitlines(keepends=True)

    updated_lines = []
    for line in lines:
        key, sep, value = line.partition("=")
        if sep and key.strip().lower() == "dictionarypath":
            dictionary_path = Path(value.strip())
            if not dictionary_path.is_absolute():
                dictionary_path = (
                    config_path.parent / dictionary_path
                ).resolve()
            updated_lines.append(f"dictionarypath={dictionary_path}\n")
        else:
            updated_lines.append(line)

    daemon_config_path = WORKDIR / config_path.name
    daemon_config_path.write_text("".join(updated_lines), encoding="utf-8")
    return daemon_config_path


async def main(args: Any) -> None:
    """Run the server."""
    config_path = Path(args.config_path) if args.config_path else CONFIG_PATH

    server_instance = Server(
        resolve_bind_ip(args.ip),
        resolve_dictionary_path(config_path),
        args.workers,
    )

    await server_instance.start(
        generation_path=WORKDIR,
        certfile_path=CERT_NAME,
        key_file_path=KEY_NAME,
        log_details=not args.quiet,
    )


def handle_sigterm(signum: int, frame: Any) -> None:
    """Handle SIGTERM or SIGINT signals to perform a graceful shutdown of
    the application.

    Args:
        signum (int): The signal number received.
        frame (FrameType): The current stack frame (unused).

    """
    cleanup()
    sys.exit(0)


if __name__ == "__main__":
    # Parse before detaching so bad arguments still reach the terminal
    cli_args = build_parser().parse_args()

    atexit.register(cleanup)

    with (
        open(STDOUT_LOG, "a", encoding="utf-8") as stdout_log,
        open(STDERR_LOG, "a", encoding="utf-8") as stderr_log,
        daemon.DaemonContext(
            working_directory=str(WORKDIR),
            umask=UMASK,
            pidfile=PIDLockFile(PID_FILE),
            stdout=stdout_log,
            stderr=stderr_log,
            detach_process=True,
            signal_map={
                signal.SIGTERM: handle_sigterm,
                signal.SIGINT: handle_sigterm,
            },
        ),
    ):
        asyncio.run(main(cli_args))
