"""Asynchronous client for the dictionary lookup server."""

import asyncio
import time
from typing import Iterable, Optional

# Longest reply line the client buffers; a full suggestion list fits
RESPONSE_LINE_LIMIT = 1024 * 1024


class Client:
    """Send words to a lookup server over one persistent TCP connection.

    The server answers every word with a single line, so the client keeps
    one query in flight at a time.

    Example:
        async with Client("127.0.0.1", 5050) as client:
            print(await client.lookup("recieve"))

    """

    def __init__(self, ip: str, port: int):
        """Initialize a client that is not yet connected.

        Args:
            ip (str): The IP address of the lookup server.
            port (int): The port the lookup server listens on.

        """
        self.ip = ip
        self.port = port
        self.reader: Optional[asyncio.StreamReader] = None
        self.writer: Optional[asyncio.StreamWriter] = None

    @property
    def address(self) -> str:
        return f"{self.ip}:{self.port}"

    @property
    def is_connected(self) -> bool:
        return self.reader is not None and self.writer is not None

    async def __aenter__(self) -> "Client":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _open(self) -> None:
        self.reader, self.writer = await asyncio.open_connection(
            self.ip,
            self.port,
            limit=RESPONSE_LINE_LIMIT,
        )

    async def connect(self) -> None:
        """Open the connection to the server.

        Raises:
            ConnectionRefusedError: If nothing listens on the address.
            Exception: For other connection-related errors.

        """
        try:
            await self._open()
        except ConnectionRefusedError:
            print(f"Connection refused by the server at {self.address}.")
            raise
        except Exception as e:
            print(f"Error connecting to server at {self.address}: {e}")
            raise

        host, port = self.writer.get_extra_info("peername")[:2]
        print(f"Connected to server at {host}:{port}")

    async def lookup(self, word: str) -> Optional[str]:
        """Ask the server about one word.

        Args:
            word (str): The word to check. The server trims and lowercases
                it before the lookup.

        Returns:
            str: The server's answer line, without the newline.
            None: If the client is not connected or the server hung up.

        Raises:
            ConnectionResetError: If the server dropped the connection.
            OSError: On other socket failures.

        """
        if not self.is_connected:
            print("Client not connected. Call .connect() first.")
            return None

        try:
            self.writer.write(word.encode("utf-8"))
            await self.writer.drain()
            answer = await self.reader.readuntil(b"\n")
        except asyncio.IncompleteReadError:
            # EOF before the newline: the server hung up mid-reply
            print("Server closed the connection unexpectedly or sent no data.")
            return None
        except asyncio.LimitOverrunError:
            print(f"Reply to '{word}' exceeds {RESPONSE_LINE_LIMIT} bytes.")
            raise
        except (ConnectionResetError, BrokenPipeError):
            print("Server closed the connection unexpectedly or sent no data.")
            raise
        except OSError as e:
            print(f"OS Error during lookup of '{word}': {e}")
            raise
        except Exception as e:
            print(f"An unexpected error occurred during lookup: {e}")
            raise

        return answer.decode("utf-8").strip()

    async def lookup_many(self, words: Iterable[str]) -> list[Optional[str]]:
        """Look several words up one after the other on this connection."""
        return [await self.lookup(word) for word in words]

    async def send_message(self, query_string: str) -> Optional[float]:
        """Look a word up, print the answer and return the round trip time.

        Args:
            query_string (str): The word to look up.

        Returns:
            float: The round trip time in milliseconds.
            None: If the lookup produced no answer.

        """
        start = time.perf_counter()
        response = await self.lookup(query_string)
        if response is None:
            return None
        elapsed_ms = (time.perf_counter() - start) * 1000

        print(f"Time: {elapsed_ms:.2f} ms")
        print("Response from server:", response)
        return elapsed_ms

    async def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        print("Closing connection...")
        writer = self.writer
        self.reader = None
        self.writer = None

        if writer is None:
            print("No active connection to close.")
            return

        already_closing = writer.is_closing()
        if not already_closing:
            writer.close()
        try:
            await writer.wait_closed()
        except (ConnectionResetError, BrokenPipeError, OSError) as e:
            print(f"Error during close cleanup: {e}")
            raise

        if already_closing:
            print("Connection already closing, waited for it.")
        else:
            print("Connection closed.")
