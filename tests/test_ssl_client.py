"""Tests for the SSL-enabled lookup client."""

import contextlib
import ssl
import string
from itertools import product
from unittest.mock import patch

import pytest
import pytest_asyncio

from src.client.ssl_client import SslClient
from tests.lookup_servers import (
    SERVER_IP,
    answer_lookups,
    answer_lookups_from,
    hang_up,
    running_server,
    unused_port,
)
from tests.ssl_constants import CERTS_DIR, SERVER_CRT, SERVER_KEY


@pytest.fixture
def server_ssl_context():
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    context.load_cert_chain(certfile=SERVER_CRT, keyfile=SERVER_KEY)
    return context


@pytest_asyncio.fixture
async def secure_lookup_server(server_ssl_context):
    async with running_server(answer_lookups, server_ssl_context) as address:
        yield address


@pytest_asyncio.fixture
async def secure_silent_server(server_ssl_context):
    async with running_server(hang_up, server_ssl_context) as address:
        yield address


class TestSslClientSetup:
    def test_context_trusts_given_certificate(self):
        client = SslClient(SERVER_IP, 5050, SERVER_CRT)

        assert client.cafile_path == SERVER_CRT
        assert client.ssl_context.check_hostname is False
        assert client.ssl_context.verify_mode == ssl.CERT_REQUIRED

    def test_missing_ca_file_is_reported(self, capfd):
        missing = CERTS_DIR / "missing_ca.pem"

        SslClient(SERVER_IP, 5050, missing)

        out, _ = capfd.readouterr()
        assert f"Error: CA certificate file not found at {missing}" in out

    def test_unreadable_ca_file_is_reported(self, tmp_path, capfd):
        bogus = tmp_path / "bogus.pem"
        bogus.write_text("not a certificate")

        SslClient(SERVER_IP, 5050, bogus)

        _, err = capfd.readouterr()
        assert f"Error loading CA certificate from {bogus}" in err


class TestSslClientConnection:
    async def test_connect_success(self, secure_lookup_server, capfd):
        host, port = secure_lookup_server
        client = SslClient(host, port, SERVER_CRT)

        await client.connect()

        assert client.writer.get_extra_info("ssl_object") is not None
        out, _ = capfd.readouterr()
        assert f"Connected securely to server at {host}:{port}" in out
        await client.close()

    async def test_connect_refused(self, capfd):
        port = unused_port()
        client = SslClient(SERVER_IP, port, SERVER_CRT)

        with pytest.raises(ConnectionRefusedError):
            await client.connect()

        assert client.reader is None
        out, _ = capfd.readouterr()
        assert (
            f"Connection refused by the server at {SERVER_IP}:{port}. "
            "Is the server running?" in out
        )

    async def test_untrusted_certificate_fails_handshake(
        self,
        secure_lookup_server,
        capfd,
    ):
        host, port = secure_lookup_server
        client = SslClient(host, port, CERTS_DIR / "missing_ca.pem")

        with pytest.raises(ssl.SSLError):
            await client.connect()

        out, _ = capfd.readouterr()
        assert f"SSL/TLS error during connection to {host}:{port}" in out

    @patch("asyncio.open_connection")
    async def test_connect_other_error(self, mock_open_connection, capfd):
        mock_open_connection.side_effect = OSError("no route to host")
        client = SslClient("10.255.255.1", 5050, SERVER_CRT)

        with pytest.raises(OSError, match="no route to host"):
            await client.connect()

        out, _ = capfd.readouterr()
        assert (
            "Unexpected error connecting to server at 10.255.255.1:5050: "
            "no route to host" in out
        )


class TestSslClientLookup:
    async def test_lookup_over_tls(self, secure_lookup_server):
        client = SslClient(*secure_lookup_server, SERVER_CRT)
        await client.connect()

        assert await client.lookup("cat") == "'cat' found in dictionary."
        assert await client.lookup("dgo") == (
            "'dgo' not found. Did you mean: dog?"
        )
        await client.close()

    async def test_long_reply_over_tls(self, server_ssl_context):
        letters = string.ascii_lowercase
        words = ["".join(pair) for pair in product(letters, repeat=2)]
        words.append("dog")
        handler = answer_lookups_from(words)

        async with running_server(handler, server_ssl_context) as address:
            async with SslClient(*address, SERVER_CRT) as client:
                answer = await client.lookup("x")
                assert len(answer) > 1024
                assert answer.endswith("zz?")

                assert await client.lookup("dog") == (
                    "'dog' found in dictionary."
                )

    @patch("time.perf_counter")
    async def test_send_message_over_tls(
        self,
        mock_perf_counter,
        secure_lookup_server,
        capfd,
    ):
        client = SslClient(*secure_lookup_server, SERVER_CRT)
        await client.connect()
        capfd.readouterr()
        mock_perf_counter.side_effect = [5.0, 5.002]

        elapsed = await client.send_message("zzz")

        assert elapsed == pytest.approx(2.0)
        out, _ = capfd.readouterr()
        assert "Time: 2.00 ms" in out
        assert (
            "Response from server: 'zzz' not found and no suggestions "
            "available." in out
        )
        await client.close()

    async def test_lookup_server_sends_no_data(
        self,
        secure_silent_server,
        capfd,
    ):
        client = SslClient(*secure_silent_server, SERVER_CRT)
        await client.connect()
        capfd.readouterr()

        try:
            response = await client.lookup("cat")
        except (ConnectionResetError, ssl.SSLError):
            # TLS shutdown may surface as a reset instead of EOF
            response = None

        assert response is None
        out, _ = capfd.readouterr()
        assert "Server closed the connection unexpectedly" in out or (
            "OS Error during lookup of 'cat'" in out
        )
        with contextlib.suppress(OSError):
            await client.close()

    async def test_close_secure_connection(self, secure_lookup_server, capfd):
        client = SslClient(*secure_lookup_server, SERVER_CRT)
        await client.connect()
        capfd.readouterr()

        await client.close()

        out, _ = capfd.readouterr()
        assert "Closing connection..." in out
        assert "Connection closed." in out
        assert client.writer is None
