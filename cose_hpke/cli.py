"""Command line interface for COSE-HPKE encryption."""

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer

from cose_hpke.api import encrypt, decrypt
from cose_hpke.config import DEFAULT_SUITE_ID
from cose_hpke.cose.key import generate_key_pair, to_diagnostic, from_jwk
from cose_hpke.errors import CoseError, UrlTooLargeError
from cose_hpke.url import create_shareable_url, parse_shareable_url, is_url

logger = logging.getLogger(__name__)

app = typer.Typer(help="COSE-HPKE encryption CLI: hybrid public key encryption with CBOR serialization")

STDIN = '-'


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")) -> None:
    """COSE-HPKE CLI entry point."""

    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO,
                        format='%(levelname)s %(name)s: %(message)s')


def _fail(message: str, hint: str = None):
    typer.secho(f"Error: {message}", fg=typer.colors.RED, err=True)
    if hint is not None:
        typer.echo(hint, err=True)
    raise typer.Exit(code=1)


def _read_input(source: str) -> bytes:
    """Read a file, or stdin for "-"."""

    if source == STDIN:
        return typer.get_binary_stream('stdin').read()

    return Path(source).read_bytes()


def _read_key(path: Path) -> bytes:
    data = path.read_bytes()

    # JWK files are accepted as well as CBOR COSE_Keys
    if data.lstrip().startswith(b'{'):
        return from_jwk(json.loads(data))

    return data


def _read_optional(source: Optional[str]) -> bytes:
    return _read_input(source) if source is not None else b''


def _check_stdin(*sources: Optional[str]) -> None:
    """stdin can only be read once, so at most one input may be "-"."""

    if sum(1 for source in sources if source == STDIN) > 1:
        _fail("Only one input can be read from stdin (\"-\")")


def _format_key(encoded: bytes, label: str) -> str:
    return f"{label}:\n  {to_diagnostic(encoded)}\n\n  CBOR (hex): {encoded.hex()}"


@app.command("keygen")
def keygen(
    suite: str = typer.Option(DEFAULT_SUITE_ID, "--suite", "-s", help="HPKE suite: HPKE-4 (X25519) or HPKE-7 (P-256)"),
    output_public: Optional[Path] = typer.Option(None, "--output-public", help="Save public key CBOR to file"),
    output_private: Optional[Path] = typer.Option(None, "--output-private", help="Save private key CBOR to file"),
) -> None:
    """
    Generate a COSE-HPKE key pair.

    Without an output path both keys are printed in CBOR diagnostic notation.

    Example:
        cose-hpke keygen --output-public alice.pub --output-private alice.key
    """

    try:
        public_key, private_key = generate_key_pair(suite)
    except CoseError as err:
        _fail(str(err))

    if output_public is not None:
        output_public.write_bytes(public_key)
        typer.echo(f"Public key saved to: {output_public}")

    if output_private is not None:
        output_private.write_bytes(private_key)
        typer.echo(f"Private key saved to: {output_private}")

    if output_public is None and output_private is None:
        typer.echo(_format_key(public_key, "Public Key"))
        typer.echo("")
        typer.echo(_format_key(private_key, "Private Key"))


@app.command("encrypt")
def encrypt_command(
    message: str = typer.Argument(..., help='Message to encrypt, or "-" for stdin'),
    recipient: List[Path] = typer.Option(..., "--recipient", "-r",
                                         help="Recipient public key file (repeat for multiple recipients)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the message to a file instead of a URL"),
    suite: Optional[str] = typer.Option(None, "--suite", "-s", help="HPKE suite: HPKE-4 or HPKE-7 (default)"),
    aad: Optional[str] = typer.Option(None, "--aad", help='External AAD file, or "-" for stdin'),
    info: Optional[str] = typer.Option(None, "--info", help='External info file (1 recipient), or "-" for stdin'),
    recipient_info: Optional[str] = typer.Option(None, "--recipient-info",
                                                 help='Recipient extra info file (2+ recipients), or "-" for stdin'),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Base URL of the shareable link"),
) -> None:
    """
    Encrypt a message for one or more recipients.

    One recipient uses integrated encryption (COSE_Encrypt0), more use key
    encryption (COSE_Encrypt). Prints a shareable URL unless --output is given.

    Example:
        cose-hpke encrypt "hello" -r alice.pub -r bob.pub
    """

    if info is not None and len(recipient) != 1:
        _fail("--info is only valid for integrated encryption (1 recipient)")

    if recipient_info is not None and len(recipient) < 2:
        _fail("--recipient-info is only valid for key encryption (2+ recipients)")

    _check_stdin(message, aad, info, recipient_info)

    try:
        plaintext = _read_input(message) if message == STDIN else message.encode('utf-8')
        keys = [_read_key(path) for path in recipient]

        ciphertext = encrypt(plaintext, keys,
                             suite_id=suite,
                             external_aad=_read_optional(aad),
                             external_info=_read_optional(info),
                             recipient_extra_info=_read_optional(recipient_info))
    except (CoseError, OSError, ValueError) as err:
        _fail(str(err))

    logger.debug("Encrypted message is %d bytes", len(ciphertext))

    if output is not None:
        output.write_bytes(ciphertext)
        typer.echo(f"Encrypted message saved to: {output}")
        return

    try:
        typer.echo(create_shareable_url(ciphertext, base_url=base_url))
    except UrlTooLargeError as err:
        _fail(str(err), hint="Use --output flag to save to file instead.")


@app.command("decrypt")
def decrypt_command(
    source: str = typer.Argument(..., metavar="INPUT", help='URL, file path, or "-" for stdin'),
    key: Path = typer.Option(..., "--key", "-k", help="Private key file"),
    suite: Optional[str] = typer.Option(None, "--suite", "-s", help="Force an HPKE suite instead of the message's alg"),
    aad: Optional[str] = typer.Option(None, "--aad", help='External AAD file, or "-" for stdin'),
    info: Optional[str] = typer.Option(None, "--info", help='External info file, or "-" for stdin'),
    recipient_info: Optional[str] = typer.Option(None, "--recipient-info",
                                                 help='Recipient extra info file, or "-" for stdin'),
) -> None:
    """
    Decrypt a COSE-HPKE message and print the plaintext.

    Example:
        cose-hpke decrypt "https://cose-hpke.github.io/decrypt#AdCD..." -k alice.key
    """

    _check_stdin(source, aad, info, recipient_info)

    try:
        private_key = _read_key(key)

        if is_url(source):
            ciphertext = parse_shareable_url(source)
        else:
            ciphertext = _read_input(source)

        plaintext = decrypt(ciphertext, private_key,
                            suite_id=suite,
                            external_aad=_read_optional(aad),
                            external_info=_read_optional(info),
                            recipient_extra_info=_read_optional(recipient_info))
    except (CoseError, OSError, ValueError) as err:
        _fail(str(err))

    typer.echo(plaintext.decode('utf-8', errors='replace'))


if __name__ == "__main__":
    app()
