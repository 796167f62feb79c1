"""Command-line interface for pkpass.

This module provides CLI commands to inspect and build pass archives and
to prepare signing material.

Example:
    >>> # From terminal:
    >>> # pkpass --version
    >>> # pkpass read ticket.pkpass --skip-verify
    >>> # pkpass create ticket.pkpass --metadata pass.json --assets ./assets --p12 signer.p12
    >>> # pkpass crypto key --output signer.key
    >>> # pkpass crypto request --private-key signer.key --output signer.csr --common-name "Acme"
    >>> # pkpass crypto bundle --private-key signer.key --certificate signer.cer --output signer.p12
"""

import json
import zipfile
from io import BytesIO
from pathlib import Path
from typing import Annotated, Optional

import typer
from cryptography.hazmat.primitives.serialization import Encoding

from pkpass import __version__
from pkpass.archive.paths import SIGNATURE_ENTRY, canonicalize, resolve
from pkpass.archive.reader import read_pass
from pkpass.archive.writer import write_pass_to_path
from pkpass.crypto.identity import SigningIdentity
from pkpass.crypto.keys import (
    build_pkcs12_bundle,
    build_signing_request,
    generate_private_key,
    load_certificate,
    load_certificates,
    load_private_key_from_file_sync,
    write_private_key_file,
)
from pkpass.crypto.trust import ENV_TRUST_ANCHORS, Pkcs7Verifier, TrustStore, Verifier
from pkpass.errors import PkPassError
from pkpass.models.assets import AssetTable
from pkpass.models.entities import Pass
from pkpass.models.enums import VerifyMode
from pkpass.models.wire import load_metadata, metadata_to_wire
from pkpass.observability import configure_logging, log_context
from pkpass.observability.logging import ENV_LOG_FORMAT, ENV_LOG_LEVEL

app = typer.Typer(help="pkpass CLI.")

crypto_app = typer.Typer(help="Signing key, certificate request and PKCS#12 bundle tooling.")
app.add_typer(crypto_app, name="crypto")

ENV_P12_PASSWORD = "PKPASS_P12_PASSWORD"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("console", "json")


def _version_callback(value: bool) -> None:
    """Print the version and exit when requested."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


VERSION_OPTION = typer.Option(
    False,
    "--version",
    help="Show pkpass version and exit.",
    callback=_version_callback,
    is_eager=True,
)


@app.callback()
def cli(
    version: bool = VERSION_OPTION,
    log_level: Annotated[
        Optional[str],
        typer.Option(
            "--log-level",
            help=f"Minimum log level on stderr. Defaults to ${ENV_LOG_LEVEL} or INFO.",
        ),
    ] = None,
    log_format: Annotated[
        Optional[str],
        typer.Option(
            "--log-format",
            help=f"console or json. Defaults to ${ENV_LOG_FORMAT} or console.",
        ),
    ] = None,
) -> None:
    """pkpass CLI entrypoint."""
    if log_level is not None and log_level.upper() not in LOG_LEVELS:
        raise typer.BadParameter(f"unknown log level {log_level!r}", param_hint="--log-level")
    if log_format is not None and log_format.lower() not in LOG_FORMATS:
        raise typer.BadParameter(f"unknown log format {log_format!r}", param_hint="--log-format")
    if log_level is not None or log_format is not None:
        configure_logging(log_format=log_format, log_level=log_level, force=True)
    else:
        configure_logging()


def _fail(message: str) -> typer.Exit:
    typer.echo(f"Error: {message}", err=True)
    return typer.Exit(1)


def _require_file(path: Path, what: str) -> None:
    if not path.exists():
        raise typer.BadParameter(f"{what} not found: {path}")
    if not path.is_file():
        raise typer.BadParameter(f"{what} is not a file: {path}")


@app.command("read")
def read_command(
    file: Annotated[Path, typer.Argument(help="Path to the .pkpass archive.")],
    verify: Annotated[
        bool,
        typer.Option("--verify/--skip-verify", help="Check the signature over manifest.json."),
    ] = True,
    trust_anchors: Annotated[
        Optional[list[Path]],
        typer.Option(
            "--trust-anchors",
            help=f"PEM/DER anchor certificate file (repeatable). Defaults to ${ENV_TRUST_ANCHORS}.",
        ),
    ] = None,
    require_signature: Annotated[
        bool,
        typer.Option("--require-signature", help="Fail when the archive is unsigned."),
    ] = False,
) -> None:
    """Read an archive and print a JSON summary."""
    _require_file(file, "Archive")
    for anchor in trust_anchors or []:
        _require_file(anchor, "Trust anchor")
    data = file.read_bytes()
    policy = VerifyMode.VERIFY if verify else VerifyMode.SKIP
    verifier: Optional[Verifier] = None
    if verify and trust_anchors:
        try:
            verifier = Pkcs7Verifier(TrustStore.from_paths(trust_anchors))
        except ValueError as exc:
            raise _fail(f"invalid trust anchor: {exc}") from exc
    try:
        with log_context(archive=str(file)):
            pass_ = read_pass(data, policy, verifier=verifier, require_signature=require_signature)
    except PkPassError as exc:
        raise _fail(exc.message) from exc
    except ValueError as exc:
        raise _fail(f"invalid archive content: {exc}") from exc

    with zipfile.ZipFile(BytesIO(data)) as archive:
        signed = SIGNATURE_ENTRY in archive.namelist()
    summary = {
        "metadata": metadata_to_wire(pass_.metadata),
        "assets": [canonicalize(slot) for slot, _ in pass_.assets.items()],
        "signed": signed,
    }
    typer.echo(json.dumps(summary, indent=2, ensure_ascii=False))


def _collect_assets(root: Path) -> AssetTable:
    assets = AssetTable()
    for path in sorted(root.rglob("*")):
        if not path.is_file() or path.name.startswith("."):
            continue
        assets[resolve(path.relative_to(root).as_posix())] = path.read_bytes()
    return assets


def _load_identity(
    p12: Optional[Path],
    p12_password: Optional[str],
    cert: Optional[Path],
    key: Optional[Path],
    chain: Optional[Path],
) -> SigningIdentity:
    if p12 is not None and (cert is not None or key is not None):
        raise typer.BadParameter("Use either --p12 or --cert/--key, not both.")
    if p12 is not None:
        _require_file(p12, "PKCS#12 bundle")
        return SigningIdentity.from_pkcs12(p12.read_bytes(), p12_password)
    if cert is None and key is None:
        return SigningIdentity.no_signature()
    if cert is None or key is None:
        raise typer.BadParameter("--cert and --key must be given together.")
    _require_file(cert, "Certificate")
    _require_file(key, "Private key")
    chain_certs = []
    if chain is not None:
        _require_file(chain, "Chain")
        chain_certs = load_certificates(chain.read_bytes())
    return SigningIdentity.from_parts(
        load_private_key_from_file_sync(key), load_certificate(cert.read_bytes()), chain_certs
    )


@app.command("create")
def create_command(
    output: Annotated[Path, typer.Argument(help="Output path for the .pkpass archive.")],
    metadata: Annotated[
        Path, typer.Option(..., "--metadata", "-m", help="pass.json document to package.")
    ],
    assets: Annotated[
        Optional[Path],
        typer.Option("--assets", "-a", help="Directory laid out like the archive (icon.png, fr.lproj/...)."),
    ] = None,
    p12: Annotated[
        Optional[Path], typer.Option("--p12", help="PKCS#12 bundle with key, certificate and chain.")
    ] = None,
    p12_password: Annotated[
        Optional[str],
        typer.Option("--p12-password", envvar=ENV_P12_PASSWORD, help="Password of the PKCS#12 bundle."),
    ] = None,
    cert: Annotated[Optional[Path], typer.Option("--cert", help="Signer certificate (PEM or DER).")] = None,
    key: Annotated[Optional[Path], typer.Option("--key", help="Signer private key (PEM).")] = None,
    chain: Annotated[
        Optional[Path], typer.Option("--chain", help="Intermediate certificates (PEM bundle).")
    ] = None,
) -> None:
    """Build a pass archive, signed when key material is given."""
    _require_file(metadata, "Metadata file")
    if assets is not None and not assets.is_dir():
        raise typer.BadParameter(f"Assets path is not a directory: {assets}")
    try:
        identity = _load_identity(p12, p12_password, cert, key, chain)
        pass_ = Pass(metadata=load_metadata(metadata.read_bytes()))
        if assets is not None:
            pass_.assets = _collect_assets(assets)
        with log_context(archive=str(output)):
            written = write_pass_to_path(pass_, identity, output)
    except PkPassError as exc:
        raise _fail(exc.message) from exc
    except ValueError as exc:
        raise _fail(str(exc)) from exc
    state = "signed" if identity.has_key else "unsigned"
    typer.echo(f"Pass written to {written} ({state}, {len(pass_.assets)} assets)")


@crypto_app.command("key")
def crypto_key(
    output: Annotated[
        Path, typer.Option(..., "--output", "-o", help="Output path for the private key PEM file.")
    ],
) -> None:
    """Write a new RSA signing key to a PEM file (mode 0600)."""
    if output.exists() and output.is_dir():
        raise typer.BadParameter(f"Output path is a directory: {output}")
    write_private_key_file(output, generate_private_key())
    typer.echo(f"Private key written to {output}")


@crypto_app.command("request")
def crypto_request(
    private_key: Annotated[Path, typer.Option(..., "--private-key", "-k", help="Private key PEM file.")],
    output: Annotated[Path, typer.Option(..., "--output", "-o", help="Output path for the CSR (PEM).")],
    common_name: Annotated[
        Optional[str], typer.Option("--common-name", help="Subject common name.")
    ] = None,
) -> None:
    """Create a certificate signing request for the pass type certificate."""
    _require_file(private_key, "Private key")
    try:
        request = build_signing_request(load_private_key_from_file_sync(private_key), common_name)
    except ValueError as exc:
        raise _fail(str(exc)) from exc
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(request.public_bytes(Encoding.PEM))
    typer.echo(f"Certificate request written to {output}")


@crypto_app.command("bundle")
def crypto_bundle(
    private_key: Annotated[Path, typer.Option(..., "--private-key", "-k", help="Private key PEM file.")],
    certificate: Annotated[
        Path, typer.Option(..., "--certificate", "-c", help="Signer certificate (PEM or DER).")
    ],
    output: Annotated[Path, typer.Option(..., "--output", "-o", help="Output path for the .p12 bundle.")],
    chain: Annotated[
        Optional[Path], typer.Option("--chain", help="Intermediate certificates (PEM bundle).")
    ] = None,
    password: Annotated[
        Optional[str], typer.Option("--password", help="Bundle password (unencrypted if omitted).")
    ] = None,
) -> None:
    """Package key, certificate and chain as a PKCS#12 bundle."""
    _require_file(private_key, "Private key")
    _require_file(certificate, "Certificate")
    try:
        chain_certs = []
        if chain is not None:
            _require_file(chain, "Chain")
            chain_certs = load_certificates(chain.read_bytes())
        bundle = build_pkcs12_bundle(
            load_private_key_from_file_sync(private_key),
            load_certificate(certificate.read_bytes()),
            chain_certs,
            password=password.encode("utf-8") if password else None,
        )
    except ValueError as exc:
        raise _fail(str(exc)) from exc
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(bundle)
    typer.echo(f"PKCS#12 bundle written to {output}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
