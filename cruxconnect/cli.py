"""Command line interface for cruxconnect keys, certificates and messaging."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Optional

import typer

from cruxconnect import (
    BasicKeyManager,
    Certificate,
    CertificateAuthority,
    CruxConnectError,
    CruxGatewayRepository,
    CruxId,
    InMemoryDirectory,
    InvalidIdentity,
    PubSubClientFactory,
    SecureCruxIdMessenger,
    get_directory,
    get_transport,
)
from cruxconnect.contracts import new_correlation_id
from cruxconnect.transports import BaseTransport

app = typer.Typer(help="CLI for cruxconnect identity-authenticated messaging")

keys_app = typer.Typer(help="Commands for managing signing keys")
certificate_app = typer.Typer(help="Commands for issuing and checking certificates")
protocols_app = typer.Typer(help="Commands for inspecting gateway protocols")
message_app = typer.Typer(help="Commands for sending and receiving messages")

app.add_typer(keys_app, name="keys")
app.add_typer(certificate_app, name="certificate")
app.add_typer(protocols_app, name="protocols")
app.add_typer(message_app, name="message")


@app.callback()
def main(
    log_level: str = typer.Option("WARNING", help="Logging level for cruxconnect"),
) -> None:
    """cruxconnect CLI entry point."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _fail(message: str) -> None:
    typer.secho(message, fg=typer.colors.RED)
    raise typer.Exit(code=1)


@keys_app.command("generate")
def keys_generate() -> None:
    """Generate a secp256k1 key pair and print it as hex."""
    key_manager = BasicKeyManager.generate()
    typer.echo(f"private: {key_manager.private_key_hex}")
    typer.echo(f"public: {asyncio.run(key_manager.get_public_key())}")


@keys_app.command("public")
def keys_public(private_key: str) -> None:
    """Print the public key for a hex or PEM private key."""
    key_manager = _load_key_manager(private_key)
    typer.echo(asyncio.run(key_manager.get_public_key()))


@protocols_app.command("list")
def protocols_list() -> None:
    """List protocols a gateway repository can open, in registry order."""
    repository = CruxGatewayRepository()
    for name in repository.registry.names:
        typer.echo(name)


@certificate_app.command("make")
def certificate_make(
    identity: str,
    private_key: str,
    correlation_id: Optional[str] = typer.Option(
        None, help="Correlation id to bind (default: a fresh UUID)"
    ),
) -> None:
    """
    Issue a certificate for IDENTITY signed with PRIVATE_KEY.

    Prints the correlation id and the certificate JSON.

    Example:
        cruxconnect certificate make foo@wallet.crux <hex> --correlation-id abc
    """
    self_id = _parse_identity(identity)
    key_manager = _load_key_manager(private_key)
    correlation_id = correlation_id or new_correlation_id()
    certificate = asyncio.run(
        CertificateAuthority.make(self_id, key_manager, correlation_id)
    )
    typer.echo(f"correlation_id: {correlation_id}")
    typer.echo(certificate.to_json())


@certificate_app.command("verify")
def certificate_verify(
    certificate_json: str,
    correlation_id: str,
    public_key: str,
    identity: str,
) -> None:
    """
    Verify a certificate issued to IDENTITY, whose directory key is PUBLIC_KEY.

    Exits with code 1 when verification fails.
    """
    expected = _parse_identity(identity)
    try:
        certificate = Certificate.from_json(certificate_json)
    except ValueError as exc:
        _fail(f"Invalid certificate JSON: {exc}")
    if certificate.claim != str(expected):
        _fail(
            f"CertificateInvalid: certificate claims {certificate.claim}, expected {expected}"
        )
    directory = InMemoryDirectory({str(expected): public_key})
    try:
        sender = asyncio.run(
            CertificateAuthority.verify(certificate, correlation_id, directory)
        )
    except CruxConnectError as exc:
        _fail(f"{type(exc).__name__}: {exc}")
    typer.echo(f"Certificate valid for {sender}")


def _parse_identity(identity: str) -> CruxId:
    try:
        return CruxId.from_string(identity)
    except InvalidIdentity as exc:
        _fail(str(exc))


def _load_key_manager(private_key: str) -> BasicKeyManager:
    try:
        return BasicKeyManager(private_key)
    except ValueError as exc:
        _fail(f"Invalid private key: {exc}")


def _messenger(
    identity: CruxId, key_manager: BasicKeyManager, transport: BaseTransport
) -> SecureCruxIdMessenger:
    return SecureCruxIdMessenger(
        get_directory(), PubSubClientFactory(transport), identity, key_manager
    )


def _display(payload) -> str:
    if isinstance(payload, bytes):
        return f"0x{payload.hex()}"
    return json.dumps(payload)


@message_app.command("send")
def message_send(
    sender: str,
    recipient: str,
    message: str,
    private_key: str = typer.Option(..., help="Sender's private key (hex or PEM)"),
) -> None:
    """Send MESSAGE (JSON or plain text) from SENDER to RECIPIENT."""
    self_id = _parse_identity(sender)
    key_manager = _load_key_manager(private_key)
    try:
        payload = json.loads(message)
    except json.JSONDecodeError:
        payload = message

    async def _send() -> str:
        transport = get_transport()
        try:
            return await _messenger(self_id, key_manager, transport).send(
                payload, recipient
            )
        finally:
            await transport.disconnect()

    try:
        correlation_id = asyncio.run(_send())
    except CruxConnectError as exc:
        _fail(f"{type(exc).__name__}: {exc}")
    typer.echo(f"Sent with correlation id {correlation_id}")


@message_app.command("listen")
def message_listen(
    identity: str,
    private_key: str = typer.Option(..., help="Listener's private key (hex or PEM)"),
    lifespan: Optional[float] = typer.Option(
        None, help="Stop after this many seconds (default: run indefinitely)"
    ),
) -> None:
    """Print authenticated messages received by IDENTITY."""
    self_id = _parse_identity(identity)
    key_manager = _load_key_manager(private_key)

    def on_message(payload, sender) -> None:
        typer.echo(f"{sender}: {_display(payload)}")

    def on_error(error) -> None:
        typer.secho(f"{type(error).__name__}: {error}", fg=typer.colors.RED)

    async def _listen() -> None:
        transport = get_transport()
        messenger = _messenger(self_id, key_manager, transport)
        messenger.listen(on_message, on_error, lifespan=lifespan)
        try:
            await messenger.wait()
        finally:
            await transport.disconnect()

    typer.echo(f"Listening as {self_id}")
    asyncio.run(_listen())


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    app()
