"""CLI for frame-wallet - drive a local Frame wallet from the terminal."""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path

import httpx
import typer
import yaml
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from web3 import Web3

app = typer.Typer(
    name="frame-wallet",
    help="Switch networks, list accounts and send transfers through a Frame wallet.",
    no_args_is_help=True,
)
console = Console()

_selected_host: str | None = None
_config_path: Path | None = None
# Routes the raw switch request; None means a real HTTP connection.
_transport: httpx.AsyncBaseTransport | None = None


def _version_callback(value: bool):
    if value:
        from importlib.metadata import version
        console.print(f"frame-wallet {version('frame-wallet')}")
        raise typer.Exit()


@app.callback()
def main(
    host: str = typer.Option(
        None,
        "--host",
        "-H",
        help="Host running Frame (port 1248 is fixed)",
        envvar="FRAME_HOST",
    ),
    config: Path = typer.Option(
        None,
        "--config",
        help="YAML settings file",
        envvar="FRAME_WALLET_CONFIG",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log RPC activity"),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
):
    """Switch networks, list accounts and send transfers through a Frame wallet."""
    global _selected_host, _config_path
    _selected_host = host
    _config_path = config
    if verbose:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
        )


def _run(coro):
    """Run an async function synchronously."""
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    import concurrent.futures
    with concurrent.futures.ThreadPoolExecutor() as pool:
        return pool.submit(asyncio.run, coro).result()


def _settings():
    """Load the ``--config`` file, or defaults when none was given."""
    from pydantic import ValidationError

    from frame_wallet.config import FrameConfig, load_config

    if _config_path is None:
        return FrameConfig()
    try:
        return load_config(_config_path)
    except (OSError, yaml.YAMLError, ValidationError) as e:
        console.print(f"[red]Cannot load config {escape(str(_config_path))}:[/red]")
        _fail(e)


async def _connect(chain_id: int | None = None):
    """Open a session, switching networks first when *chain_id* is given."""
    from frame_wallet.session import FrameSession

    config = _settings()
    host = _selected_host or config.host
    if chain_id is None:
        return FrameSession.attach(host, config=config, transport=_transport)
    return await FrameSession.open(chain_id, host, config=config, transport=_transport)


def _parse_chain(value: str) -> int:
    from frame_wallet.chains import resolve_chain_id
    from frame_wallet.session import UINT256_MAX

    try:
        chain_id = resolve_chain_id(value)
    except ValueError as e:
        raise typer.BadParameter(str(e))
    if chain_id > UINT256_MAX:
        raise typer.BadParameter(f"Chain id {value} does not fit in 256 bits")
    return chain_id


def _chain_label(chain_id: int) -> str:
    from frame_wallet.chains import find_chain

    known = find_chain(chain_id)
    return f"{chain_id} ({known.name})" if known else str(chain_id)


def _fail(e: Exception) -> None:
    from frame_wallet.errors import FrameError

    message = f"[red]{escape(str(e))}[/red]"
    if isinstance(e, FrameError) and e.detail and e.detail not in str(e):
        message += f"\n[dim]{escape(e.detail)}[/dim]"
    console.print(message)
    raise typer.Exit(1)


# ------------------------------------------------------------------
# network commands
# ------------------------------------------------------------------


@app.command("chain")
def chain_cmd():
    """Show the network Frame is currently on."""
    from frame_wallet.errors import FrameError

    async def _chain():
        session = await _connect()
        return await session.current_chain_id()

    try:
        chain_id = _run(_chain())
    except FrameError as e:
        _fail(e)

    console.print(f"[bold]Active chain:[/bold] [cyan]{_chain_label(chain_id)}[/cyan]")


@app.command("switch")
def switch_cmd(
    chain: str = typer.Argument(help="Chain name or id (e.g. arbitrum, 42161, 0xa4b1)"),
):
    """Ask Frame to switch networks, then report where it landed."""
    from frame_wallet.errors import FrameError

    chain_id = _parse_chain(chain)

    async def _switch():
        session = await _connect(chain_id)
        return await session.current_chain_id()

    try:
        active = _run(_switch())
    except FrameError as e:
        _fail(e)

    if active != chain_id:
        console.print(
            f"[yellow]Switch requested to {_chain_label(chain_id)}, "
            f"but Frame reports {_chain_label(active)}.[/yellow]"
        )
        raise typer.Exit(1)
    console.print(f"[green]Frame is on chain {_chain_label(active)}.[/green]")


@app.command("chains")
def chains_cmd():
    """List the networks known by name."""
    from frame_wallet.chains import get_chain, list_chain_names

    table = Table(title="Known Chains")
    table.add_column("Name", style="cyan")
    table.add_column("Chain ID", justify="right")
    table.add_column("Symbol")
    table.add_column("Explorer", style="dim")
    for name in list_chain_names():
        info = get_chain(name)
        table.add_row(info.name, str(info.chain_id), info.native_symbol, info.explorer_url)
    console.print(table)


# ------------------------------------------------------------------
# account commands
# ------------------------------------------------------------------


@app.command("accounts")
def accounts_cmd():
    """List the accounts Frame exposes."""
    from frame_wallet.errors import FrameError

    async def _accounts():
        session = await _connect()
        return await session.accounts()

    try:
        accounts = _run(_accounts())
    except FrameError as e:
        _fail(e)

    if not accounts:
        console.print("[dim]No unlocked accounts in Frame.[/dim]")
        return

    table = Table(title="Frame Accounts")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Address", style="cyan")
    for i, addr in enumerate(accounts):
        table.add_row(str(i), addr)
    console.print(table)


def _parse_amount(amount: str, in_wei: bool) -> int:
    from frame_wallet.session import UINT256_MAX

    try:
        value = int(amount) if in_wei else Web3.to_wei(Decimal(amount), "ether")
    except (ValueError, InvalidOperation):
        raise typer.BadParameter(f"Invalid amount '{amount}'")
    if not 0 <= value <= UINT256_MAX:
        raise typer.BadParameter(f"Amount '{amount}' is out of range")
    return value


@app.command("send")
def send_cmd(
    amount: str = typer.Argument(help="Amount to send in ether (e.g. 0.01), or wei with --wei"),
    to: str = typer.Option(..., "--to", "-t", help="Recipient address (0x...)"),
    from_address: str = typer.Option(
        None, "--from", "-f", help="Sender address (defaults to Frame's first account)"
    ),
    chain: str = typer.Option("ethereum", "--chain", "-c", help="Chain name or id to send on"),
    in_wei: bool = typer.Option(False, "--wei", help="Treat AMOUNT as wei"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
):
    """Send native currency through Frame. Frame asks you to approve it."""
    from frame_wallet.chains import find_chain
    from frame_wallet.errors import FrameError

    chain_id = _parse_chain(chain)
    value = _parse_amount(amount, in_wei)
    known = find_chain(chain_id)
    symbol = known.native_symbol if known else "native units"

    console.print(f"\n[bold]Send {Web3.from_wei(value, 'ether')} {symbol} on {_chain_label(chain_id)}[/bold]")
    console.print(f"  To: {to}")
    if from_address:
        console.print(f"  From: {from_address}")
    console.print()

    if not yes:
        typer.confirm("Confirm this transaction?", abort=True)

    async def _send():
        session = await _connect(chain_id)
        sender = from_address
        if not sender:
            accounts = await session.accounts()
            if not accounts:
                raise ValueError("Frame exposes no accounts to send from.")
            sender = accounts[0]
        return await session.send(sender, to, value)

    try:
        tx_hash = _run(_send())
    except (FrameError, ValueError) as e:
        _fail(e)

    body = f"[bold green]Transaction confirmed![/bold green]\n\nTx: [cyan]{tx_hash}[/cyan]"
    if known:
        body += f"\nExplorer: {known.explorer_url}/tx/{tx_hash}"
    console.print(Panel(body, title="Transaction Sent"))


if __name__ == "__main__":
    app()
