"""Command line entry point of the dictionary lookup server.

Example:
    python run_server.py --ip local --workers 4

"""

import argparse
import asyncio
import os
import signal
import socket
import subprocess
import sys
from pathlib import Path
from typing import Any

from src.server.server import Server
from src.server.ssl_utils import generate_certificate_and_key

WORKDIR = Path("/tmp/")
PROJECT_ROOT = Path(__file__).parent
CERT_NAME = Path("cert.pem")
KEY_NAME = Path("key.pem")


def get_local_ip() -> Any:
    """Return the address of the interface that routes to the internet."""
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
        s.connect(("8.8.8.8", 80))
        return s.getsockname()[0]


def resolve_bind_ip(choice: str) -> str:
    """Map the `--ip` choice to the address the server binds to."""
    return "0.0.0.0" if choice == "public" else get_local_ip()


def non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError("must be zero or greater")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser shared with the daemon entry point."""
    parser = argparse.ArgumentParser(
        description="Serve dictionary lookups with spelling suggestions.",
    )
    parser.add_argument(
        "--ip",
        choices=["local", "public"],
        default="public",
        help="Serve on the local interface only or on all interfaces",
    )
    parser.add_argument(
        "--mode",
        default="normal",
        choices=["normal", "daemon"],
        help="Run mode: 'normal' or 'daemon' (default: normal)",
    )
    parser.add_argument(
        "--config_path",
        type=str,
        default=str(PROJECT_ROOT / "config.txt"),
        help="Path to the server configuration file.",
    )
    parser.add_argument(
        "--workers",
        type=non_negative_int,
        default=os.cpu_count() or 1,
        help="Number of lookup worker processes; 0 answers lookups in the "
        "event loop (default: number of CPUs).",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only log failed queries instead of every query.",
    )
    return parser


def launch_daemon(args: argparse.Namespace) -> int:
    """Start `src.server.daemon` in a child interpreter.

    Returns:
        int: The exit code of the launcher process.

    """
    env = os.environ.copy()
    env["PYTHONPATH"] = str(PROJECT_ROOT)
    command = [
        sys.executable,
        "-m",
        "src.server.daemon",
        "--ip",
        args.ip,
        "--config_path",
        str(Path(args.config_path).resolve()),
        "--workers",
        str(args.workers),
    ]
    if args.quiet:
        command.append("--quiet")
    return subprocess.run(command, check=False, env=env).returncode


async def main() -> None:
    """Run the server in the foreground, or hand it over to the daemon."""
    args = build_parser().parse_args()

    generate_certificate_and_key(WORKDIR)
    if args.mode == "daemon":
        launch_daemon(args)
        return

    # Config and dictionary errors propagate: never serve an empty dictionary
    server_instance = Server(
        resolve_bind_ip(args.ip),
        Path(args.config_path),
        args.workers,
    )

    signal.signal(signal.SIGTERM, handle_sigterm)

    await server_instance.start(
        generation_path=WORKDIR,
        certfile_path=CERT_NAME,
        key_file_path=KEY_NAME,
        log_details=not args.quiet,
    )


def handle_sigterm(signum: int, frame: Any) -> None:
    """Exit on SIGTERM so the server's shutdown path runs.

    Args:
        signum (int): The signal number received.
        frame (FrameType): The current stack frame (unused).

    """
    sys.exit(0)


if __name__ == "__main__":
    asyncio.run(main())
