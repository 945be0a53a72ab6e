"""TLS variant of the lookup client."""

import asyncio
import ssl
import sys
from pathlib import Path

from .client import RESPONSE_LINE_LIMIT, Client


def build_client_context(cafile_path: Path) -> ssl.SSLContext:
    """Return a context that trusts the server's self-signed certificate.

    Loading problems are reported but not raised; the handshake then fails
    with a verification error instead.

    Args:
        cafile_path (Path): The CA file. For the server's self-signed pair
            this is the server certificate itself.

    Returns:
        ssl.SSLContext: A client context requiring a verified peer.

    """
    context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
    # The generated certificate is issued for localhost only
    context.check_hostname = False
    context.verify_mode = ssl.CERT_REQUIRED

    try:
        context.load_verify_locations(cafile=str(cafile_path))
    except FileNotFoundError:
        print(
            f"Error: CA certificate file not found at {cafile_path}. "
            "SSL verification will fail.",
        )
    except ssl.SSLError as e:
        print(
            f"Error loading CA certificate from {cafile_path}: {e}",
            file=sys.stderr,
        )
    return context


class SslClient(Client):
    """Client for a lookup server running with `use_ssl` enabled."""

    def __init__(self, ip: str, port: int, cafile_path: Path):
        super().__init__(ip, port)
        self.cafile_path = cafile_path
        self.ssl_context = build_client_context(cafile_path)

    async def _open(self) -> None:
        self.reader, self.writer = await asyncio.open_connection(
            self.ip,
            self.port,
            limit=RESPONSE_LINE_LIMIT,
            ssl=self.ssl_context,
            server_hostname=self.ip,
        )

    async def connect(self) -> None:
        """Open the connection and complete the TLS handshake.

        Raises:
            ConnectionRefusedError: If nothing listens on the address.
            ssl.SSLError: If the handshake or certificate check fails.
            Exception: For other connection-related errors.

        """
        try:
            await self._open()
        except ConnectionRefusedError:
            print(
                f"Connection refused by the server at {self.address}. "
                "Is the server running?",
            )
            raise
        except ssl.SSLError as e:
            print(f"SSL/TLS error during connection to {self.address}: {e}")
            raise
        except Exception as e:
            print(
                f"Unexpected error connecting to server at {self.address}: "
                f"{e}",
            )
            raise

        host, port = self.writer.get_extra_info("peername")[:2]
        print(f"Connected securely to server at {host}:{port}")
