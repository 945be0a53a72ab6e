import asyncio
import concurrent.futures
import gc
import multiprocessing
import socket
import ssl
import sys
import time
import weakref
from datetime import datetime
from pathlib import Path
from typing import Optional

from .client_handler import (
    initialize_worker_process,
    lookup_word,
    perform_lookup_sync,
)
from .config import load_config_file
from .dictionary_service import (
    DictionaryService,
    LookupResult,
    render_lookup_result,
)
from .logger import (
    get_log_queue,
    log,
    setup_logging_queue,
    setup_worker_process_logging,
    start_logging_listener,
    stop_logging_listener,
)
from .ssl_utils import generate_certificate_and_key
from .word_loader import load_dictionary, normalize_word

MAX_CHUNK_SIZE = 1024  # Maximum payload
MAX_QUERY_LENGTH = 100  # Longest word the suggestion search will accept
ERROR_STATUS = "ERROR"


def _describe_peer(writer: asyncio.StreamWriter) -> tuple[str, str]:
    """Return the printable address and the IP of the connected client."""
    peername = writer.get_extra_info("peername")
    if not peername:
        return "UNKNOWN", "N/A"
    return f"{peername[0]}:{peername[1]}", peername[0]


def decode_query(data: bytes) -> str:
    """Turn one received chunk into the word to look up."""
    text = data.decode("utf-8", errors="replace").replace("\x00", "")
    return normalize_word(text)


class Server:
    """Asyncio TCP server answering dictionary lookups.

    The dictionary is loaded once, before the first connection is
    accepted, and never changes afterwards. Lookups run in a
    ProcessPoolExecutor when `workers` is positive and inline on the
    event loop otherwise.
    """

    def __init__(self, ip: str, config_file_path: Path, workers: int):
        self.ip = ip
        self.configuration_settings = load_config_file(config_file_path)
        self.process_executor: Optional[
            concurrent.futures.ProcessPoolExecutor
        ] = None
        self.is_running = True
        self.ssl_context: Optional[ssl.SSLContext] = None
        self.server_instance: Optional[asyncio.Server] = None
        self.log_details: bool = False
        self._active_connections: weakref.WeakSet[asyncio.StreamWriter] = (
            weakref.WeakSet()
        )
        self._workers: int = workers
        self.service: DictionaryService = self._build_service()

    def _build_service(self) -> DictionaryService:
        """Load the configured dictionary and wrap it in a lookup service.

        Raises:
            FileNotFoundError: If the dictionary file does not exist.
            DictionaryLoadError: If the dictionary could not be read.

        Returns:
            DictionaryService: The service over the fully built trie.

        """
        dictionary_path = self.configuration_settings.dictionary_path
        store = load_dictionary(dictionary_path)
        print(f"[SERVER] Loaded {len(store)} words from {dictionary_path}")
        return DictionaryService(
            store,
            self.configuration_settings.max_distance,
        )

    async def _setup_ssl_context(
        self,
        cert_path: Path,
        key_path: Path,
        gen_path: Path,
    ) -> None:
        """Load the server certificate, generating it first if needed.

        Any failure leaves `ssl_context` unset and the server keeps
        serving plain TCP.

        Args:
            cert_path (Path): Certificate file, relative to `gen_path`.
            key_path (Path): Key file, relative to `gen_path`.
            gen_path (Path): Directory holding the pair.

        """
        self.ssl_context = None
        if not self.configuration_settings.use_ssl:
            print("[SERVER] SSL is disabled by configuration.")
            return

        try:
            generate_certificate_and_key(
                gen_path,
                str(cert_path.name),
                str(key_path.name),
            )
            context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
            context.load_cert_chain(
                certfile=str(gen_path / cert_path),
                keyfile=str(gen_path / key_path),
            )
        except Exception as e:
            print(
                f"[SERVER ERROR] Failed to load SSL cert/key: {e}. "
                "Running without SSL.",
                file=sys.stderr,
            )
            return

        self.ssl_context = context
        print(f"[SERVER] SSL context loaded from {cert_path} and {key_path}")

    async def _lookup(self, query: str) -> LookupResult:
        """Dispatch a lookup to the process pool, or run it inline.

        Args:
            query (str): The normalized query word.

        Returns:
            LookupResult: The lookup outcome.

        """
        if self.process_executor is None:
            return lookup_word(self.service, query)

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self.process_executor,
            perform_lookup_sync,
            query,
        )

    async def _answer(self, query: str) -> tuple[str, str]:
        """Build the reply line for one query.

        Returns:
            tuple[str, str]: The reply text and the status that is logged,
            which is a `LookupStatus` name or "ERROR".

        """
        if len(query) > MAX_QUERY_LENGTH:
            return "ERROR: Query exceeds maximum allowed length.", ERROR_STATUS

        try:
            result = await self._lookup(query)
        except Exception as e:
            return f"ERROR: Lookup failed: {e}", ERROR_STATUS
        return render_lookup_result(result), result.status.name

    async def _handle_client(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        """Serve one connection until the client hangs up.

        Every chunk received from the client is one query word. The
        answer is a single newline-terminated line per query.

        Args:
            reader (asyncio.StreamReader): Reads the client's queries.
            writer (asyncio.StreamWriter): Sends the answers back.

        """
        client_address_str, client_ip = _describe_peer(writer)
        print(f"[SERVER] Accepted connection from {client_address_str}")
        self._active_connections.add(writer)

        try:
            while self.is_running:
                started = time.perf_counter()

                data = await reader.read(MAX_CHUNK_SIZE)
                if not data:
                    print(
                        f"[SERVER] Client {client_address_str} disconnected.",
                    )
                    break

                query = decode_query(data)
                reply, status = await self._answer(query)
                writer.write(f"{reply}\n".encode("utf-8"))
                await writer.drain()

                elapsed_ms = (time.perf_counter() - started) * 1000
                if self.log_details or status == ERROR_STATUS:
                    log(
                        datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
                        client_ip,
                        query,
                        status,
                        elapsed_ms,
                    )
                print(
                    f"[SERVER] Handled {client_address_str}: '{query}' -> "
                    f"'{reply[:50]}...' in {elapsed_ms:.2f} ms",
                )

        except ConnectionResetError:
            print(
                f"[SERVER] Client {client_address_str} forcefully "
                "disconnected.",
            )
        except asyncio.IncompleteReadError:
            print(
                f"[SERVER] Client {client_address_str} connection closed "
                "unexpectedly.",
            )
        except Exception as e:
            print(
                f"[SERVER ERROR] Error handling client "
                f"{client_address_str}: {e}",
                file=sys.stderr,
            )
        finally:
            self._active_connections.discard(writer)
            await self._close_writer(writer, client_address_str)
            print(f"[SERVER] Connection with {client_address_str} closed.")

    @staticmethod
    async def _close_writer(writer: asyncio.StreamWriter, label: str) -> None:
        try:
            writer.close()
            await writer.wait_closed()
        except Exception as e:
            print(f"[SERVER] Error closing connection to {label}: {e}")

    def _start_process_pool(self) -> None:
        """Start the worker pool and publish the dictionary to it once."""
        if multiprocessing.get_start_method(allow_none=True) != "spawn":
            multiprocessing.set_start_method("spawn", force=True)
            print("[SERVER] Set multiprocessing start method to 'spawn'.")

        # Each worker unpickles its own copy of the finished trie
        self.process_executor = concurrent.futures.ProcessPoolExecutor(
            max_workers=self._workers,
            initializer=initialize_worker_process,
            initargs=(self.service, get_log_queue()),
        )
        print(f"[SERVER] Started {self._workers} lookup worker processes.")

    def _bind_socket(self) -> socket.socket:
        raw_socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        raw_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        server_address = (self.ip, self.configuration_settings.port)
        raw_socket.bind(server_address)
        print(f"[SERVER] Bound raw socket to {server_address}")
        return raw_socket

    async def start(
        self,
        generation_path: Path,
        certfile_path: Path,
        key_file_path: Path,
        log_details: bool,
    ) -> None:
        """Serve lookups until cancelled, then shut down cleanly.

        Args:
            generation_path (Path): Directory for the TLS certificate pair.
            certfile_path (Path): Certificate file name.
            key_file_path (Path): Key file name.
            log_details (bool): Whether to log every query, not only
                the failed ones.

        """
        self.log_details = log_details

        try:
            setup_logging_queue()
            start_logging_listener()
            setup_worker_process_logging()

            if self._workers > 0:
                self._start_process_pool()
            else:
                print("[SERVER] Answering lookups in the event loop.")

            await self._setup_ssl_context(
                certfile_path,
                key_file_path,
                generation_path,
            )

            self.server_instance = await asyncio.start_server(
                self._handle_client,
                ssl=self.ssl_context,
                sock=self._bind_socket(),
            )

            addrs = ", ".join(
                str(sock.getsockname())
                for sock in self.server_instance.sockets
            )
            transport = "SSL" if self.ssl_context else "no SSL"
            print(f"[SERVER] Server is serving on {addrs} with {transport}.")
            print("[SERVER] Press Ctrl+C to shut down.")

            await self.server_instance.serve_forever()

        except asyncio.CancelledError:
            print("[SERVER] Asyncio server task cancelled.")
        except KeyboardInterrupt:
            print("\n[SERVER] Shutting down due to KeyboardInterrupt...")
        except Exception as e:
            print(
                "[SERVER ERROR] An unhandled error occurred in main server "
                f"loop: {e}",
                file=sys.stderr,
            )
        finally:
            await self.stop()

    def _shutdown_pool(self) -> None:
        if self.process_executor is None:
            return
        try:
            self.process_executor.shutdown(wait=True, cancel_futures=True)
            print("[SERVER] Lookup workers shut down.")
        except Exception as e:
            print(f"[SERVER] Error shutting down lookup workers: {e}")
        finally:
            self.process_executor = None

    async def stop(self) -> None:
        """Stop accepting queries and release every resource.

        Open connections are closed, the worker pool is shut down, the
        log listener is flushed and the listening socket is released.
        """
        print("[SERVER] Initiating graceful shutdown...")
        self.is_running = False

        for writer in list(self._active_connections):
            await self._close_writer(writer, "client during shutdown")
        self._active_connections.clear()

        self._shutdown_pool()

        try:
            stop_logging_listener()
        except Exception as e:
            print(f"[SERVER] Error stopping logging listener: {e}")

        if self.server_instance is not None:
            try:
                self.server_instance.close()
                await self.server_instance.wait_closed()
                print("[SERVER] Listening socket closed.")
            except Exception as e:
                print(f"[SERVER] Error closing asyncio server: {e}")
            finally:
                self.server_instance = None

        self.ssl_context = None
        gc.collect()
        print("[SERVER] Server shutdown complete.")
