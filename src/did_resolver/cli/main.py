"""CLI entry point for did-resolver.

Invoked as::

    did-resolver [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m did_resolver.cli.main

Commands
--------
version    Show version information
methods    List the DID methods the configured registry resolves
parse      Parse a DID URL into its components
resolve    Resolve a DID URL to its verification document
find-key   Look up a key in a resolved document by curve
replay     Replay a key-event log file and show the current key state
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from click.core import ParameterSource
from rich.console import Console
from rich.markup import escape
from rich.table import Table

console = Console()

_config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="JSON settings file (methods, document stores, signature checks).",
)


def _load_registry(config_path: Path | None):
    from did_resolver.config import ResolverSettings, build_registry, load_settings
    from did_resolver.errors import ConfigurationError

    try:
        settings = load_settings(config_path) if config_path else ResolverSettings()
        if config_path:
            _apply_config_log_level(settings.log_level)
        return build_registry(settings)
    except ConfigurationError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(2)


def _apply_config_log_level(level: str) -> None:
    # An explicit --log-level on the command line wins over the settings file.
    root_context = click.get_current_context().find_root()
    if root_context.get_parameter_source("log_level") is ParameterSource.DEFAULT:
        logging.getLogger().setLevel(level)


# ------------------------------------------------------------------
# Root group
# ------------------------------------------------------------------


@click.group()
@click.version_option(package_name="did-resolver")
@click.option(
    "--log-level",
    type=click.Choice(["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging verbosity.",
)
def cli(log_level: str) -> None:
    """Resolve DID URLs to verification documents"""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from did_resolver import __version__

    console.print(f"[bold]did-resolver[/bold] v{__version__}")


@cli.command(name="methods")
@_config_option
def methods_command(config_path: Path | None) -> None:
    """List the DID methods the configured registry resolves."""
    registry = _load_registry(config_path)
    console.print("[bold]Supported DID methods:[/bold]")
    for method in registry.methods():
        console.print(f"  did:{escape(method)}")


# ------------------------------------------------------------------
# parse
# ------------------------------------------------------------------


@cli.command(name="parse")
@click.argument("url")
def parse_command(url: str) -> None:
    """Parse URL and show its components."""
    from did_resolver.errors import NotADIDError
    from did_resolver.url import parse

    try:
        parsed = parse(url)
    except NotADIDError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)

    table = Table(title="DID URL", show_header=True)
    table.add_column("Component", style="cyan")
    table.add_column("Value", overflow="fold")
    table.add_row("did", escape(parsed.did))
    table.add_row("method", escape(parsed.method))
    table.add_row("identifier", escape(parsed.identifier))
    table.add_row("path", escape(parsed.path or "-"))
    for key, value in parsed.query.items():
        shown = value if len(value) <= 40 else f"{value[:37]}..."
        table.add_row(escape(f"query[{key}]"), escape(shown))
    table.add_row("fragment", escape(parsed.fragment or "-"))
    console.print(table)


# ------------------------------------------------------------------
# resolve
# ------------------------------------------------------------------


@cli.command(name="resolve")
@click.argument("url")
@_config_option
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the document as JSON.")
def resolve_command(url: str, config_path: Path | None, as_json: bool) -> None:
    """Resolve URL to its verification document."""
    from did_resolver.errors import ResolverError

    registry = _load_registry(config_path)
    try:
        document = registry.resolve(url)
    except ResolverError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)

    if as_json:
        click.echo(document.to_json())
        return

    console.print(f"[bold]{escape(document.id)}[/bold]")
    table = Table(title="Verification methods", show_header=True)
    table.add_column("Id", overflow="fold")
    table.add_column("Type", style="cyan")
    table.add_column("Controller", overflow="fold")
    for method in document.verification_method:
        table.add_row(escape(method.id), escape(method.key_type), escape(method.controller))
    console.print(table)
    if not document.verification_method:
        console.print("  (no verification methods)")


# ------------------------------------------------------------------
# find-key
# ------------------------------------------------------------------


@cli.command(name="find-key")
@click.argument("url")
@click.option("--curve", required=True, help="Key type substring, e.g. Ed25519 or X25519.")
@click.option(
    "--controller",
    "field",
    flag_value="controller",
    help="Print the controller of the matching key instead of its bytes.",
)
@click.option(
    "--key-id",
    "field",
    flag_value="key_id",
    help="Print the JWK key id of the matching key instead of its bytes.",
)
@_config_option
def find_key_command(url: str, curve: str, field: str | None, config_path: Path | None) -> None:
    """Find the first key in URL's document whose type contains CURVE."""
    from did_resolver.encoding import b58_encode
    from did_resolver.errors import ResolverError

    registry = _load_registry(config_path)
    try:
        document = registry.resolve(url)
    except ResolverError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)

    if field == "controller":
        result = document.find_public_key_controller_for_curve(curve)
    elif field == "key_id":
        result = document.find_public_key_id_for_curve(curve)
    else:
        key_bytes = document.find_public_key_for_curve(curve)
        result = b58_encode(key_bytes) if key_bytes is not None else None

    if result is None:
        console.print(f"[yellow]No {escape(curve)} key found.[/yellow]")
        sys.exit(1)
    click.echo(result)


# ------------------------------------------------------------------
# replay
# ------------------------------------------------------------------


@cli.command(name="replay")
@click.argument("kerl_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--verify-signatures",
    is_flag=True,
    default=False,
    help="Require valid Ed25519 signatures on every event.",
)
def replay_command(kerl_file: Path, verify_signatures: bool) -> None:
    """Replay the key-event log in KERL_FILE and show the current key state."""
    from did_resolver.errors import ReplayRejectedError, ResolverError
    from did_resolver.keri import EventLogReplayer, EventSignatureCheck, parse_event_stream

    replayer = EventLogReplayer(pre_apply=EventSignatureCheck() if verify_signatures else None)
    try:
        state = replayer.replay(parse_event_stream(kerl_file.read_bytes()))
    except ReplayRejectedError as exc:
        console.print(f"[red]Rejected[/red] event {exc.sequence_number}: {escape(exc.reason)}")
        console.print(f"  Last accepted sequence number: {exc.state.sequence_number}")
        sys.exit(1)
    except ResolverError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)

    if not state.is_incepted:
        console.print("[yellow]The log contains no events.[/yellow]")
        return

    console.print(f"  Prefix:          {escape(state.prefix or '')}")
    console.print(f"  Sequence number: {state.sequence_number}")
    console.print(f"  Last digest:     {escape(state.last_digest or '')}")
    console.print(f"  Threshold:       {state.threshold}")
    table = Table(title="Current keys", show_header=True)
    table.add_column("Key", overflow="fold")
    table.add_column("Type", style="cyan")
    for key in state.current_keys:
        table.add_row(key.qb64, key.key_type)
    console.print(table)


if __name__ == "__main__":
    cli()
