"""Create the self-signed certificate used by the lookup server's TLS mode."""

import subprocess
import sys
from pathlib import Path
from typing import Optional

CERT_SUBJECT = "/C=US/ST=State/L=City/O=Spellcheck/OU=Lookup/CN=localhost"
RSA_KEY_BITS = 2048


def _openssl_commands(
    cert_path: Path,
    key_path: Path,
    valid_days: int,
) -> list[list[str]]:
    """Return the key command followed by the certificate command."""
    create_key = [
        "openssl",
        "genrsa",
        "-out",
        str(key_path),
        str(RSA_KEY_BITS),
    ]
    self_sign = [
        "openssl",
        "req",
        "-new",
        "-x509",
        "-key",
        str(key_path),
        "-out",
        str(cert_path),
        "-days",
        str(valid_days),
        "-nodes",
        "-subj",
        CERT_SUBJECT,
    ]
    return [create_key, self_sign]


def _discard(*paths: Path) -> None:
    for path in paths:
        path.unlink(missing_ok=True)


def _report(message: str) -> None:
    print(f"[SSL_UTILS ERROR] {message}", file=sys.stderr)


def generate_certificate_and_key(
    gen_path: Path,
    cert_name: str = "cert.pem",
    key_name: str = "key.pem",
    valid_days: int = 365,
) -> Optional[tuple[Path, Path]]:
    """Make sure `gen_path` holds a self-signed certificate and its key.

    An existing pair is reused as is. A lone key or certificate is
    regenerated together with its partner. When openssl is missing or
    fails, the problem is reported on stderr and the half-written files
    are removed, so the server falls back to plain TCP instead of
    loading a broken pair.

    Args:
        gen_path (Path): Directory that receives both files.
        cert_name (str, optional): File name of the certificate.
            Defaults to "cert.pem".
        key_name (str, optional): File name of the private key.
            Defaults to "key.pem".
        valid_days (int, optional): Validity of the certificate.
            Defaults to 365.

    Returns:
        tuple[Path, Path]: The certificate and key paths.
        None: If the pair could not be generated.

    """
    cert_path = gen_path / cert_name
    key_path = gen_path / key_name

    if cert_path.exists() and key_path.exists():
        print(
            f"[SSL_UTILS] SSL cert and key already exist: "
            f"{cert_path}, {key_path}",
        )
        return cert_path, key_path

    print(f"[SSL_UTILS] Generating self-signed certificate in {gen_path}...")
    try:
        for command in _openssl_commands(cert_path, key_path, valid_days):
            subprocess.run(command, check=True, capture_output=True, text=True)
    except FileNotFoundError:
        _report("OpenSSL not found. Please install OpenSSL.")
    except subprocess.CalledProcessError as e:
        _report(f"OpenSSL command failed: {e}")
        print(f"Stdout: {e.stdout}", file=sys.stderr)
        print(f"Stderr: {e.stderr}", file=sys.stderr)
    except Exception as e:
        _report(f"An unexpected error occurred during SSL generation: {e}")
    else:
        print(f"[SSL_UTILS] Successfully generated {cert_path} and {key_path}")
        return cert_path, key_path

    _discard(cert_path, key_path)
    return None
