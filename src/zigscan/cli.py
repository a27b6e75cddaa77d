import asyncio
import json
from collections.abc import Sequence
from dataclasses import replace
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from zigscan.core.config import ExplorerConfig
from zigscan.core.errors import ZigscanError
from zigscan.core.logging_utils import setup_logging
from zigscan.core.models import Encoding, RawTransaction, TransactionRecord
from zigscan.core.use_cases.assemble import assemble_record
from zigscan.orchestration.orchestrator import RetrievalOrchestrator

console = Console()


def _short(value: str, width: int = 16) -> str:
    if len(value) <= width:
        return value
    half = (width - 3) // 2
    return f"{value[:half]}...{value[-half:]}"


def _print_json(data: Any) -> None:
    console.print_json(json.dumps(data))


def _records_table(records: Sequence[TransactionRecord], title: str) -> Table:
    table = Table(title=title, expand=True)
    table.add_column("Hash", no_wrap=True)
    table.add_column("Height", justify="right")
    table.add_column("Type")
    table.add_column("From")
    table.add_column("To")
    table.add_column("Amount", justify="right")
    table.add_column("Status")
    for r in records:
        status = "[green]success[/]" if r.status == "success" else "[red]failed[/]"
        table.add_row(
            _short(r.hash),
            str(r.height),
            r.type,
            _short(r.sender_summary, 20),
            _short(r.recipient_summary, 20),
            r.amount_summary,
            status,
        )
    return table


def _print_record(record: TransactionRecord) -> None:
    table = Table(show_header=False, box=None)
    table.add_column(style="bold")
    table.add_column()
    for key, value in record.to_dict().items():
        if key in ("messages", "raw_encoded"):
            continue
        table.add_row(key, "" if value is None else str(value))
    for i, msg in enumerate(record.messages):
        table.add_row(f"message[{i}]", json.dumps(msg.to_dict()))
    console.print(table)


@click.group()
@click.option("--indexed-api", default=None, help="Primary indexed API base URL")
@click.option("--chain-rest", default=None, help="Chain REST (LCD) base URL")
@click.option("--rpc", default=None, help="Node RPC (proxy) base URL")
@click.option("--timeout", type=float, default=None, help="Per-call timeout in seconds")
@click.option("--max-blocks", type=int, default=None, help="Node RPC scan depth")
@click.option("-v", "--verbose", count=True, help="-v for INFO, -vv for DEBUG logs")
@click.pass_context
def cli(
    ctx: click.Context,
    indexed_api: str | None,
    chain_rest: str | None,
    rpc: str | None,
    timeout: float | None,
    max_blocks: int | None,
    verbose: int,
) -> None:
    """zigscan: ZigChain transaction decoding and retrieval."""
    setup_logging("DEBUG" if verbose > 1 else "INFO" if verbose else "WARNING")

    overrides: dict[str, Any] = {
        "indexed_api_url": indexed_api,
        "chain_rest_url": chain_rest,
        "rpc_proxy_url": rpc,
        "timeout_s": timeout,
        "max_blocks_to_scan": max_blocks,
    }
    try:
        config = replace(ExplorerConfig.from_env(), **{k: v for k, v in overrides.items() if v is not None})
    except ValueError as e:
        raise click.UsageError(str(e)) from e
    ctx.obj = config


def _run(config: ExplorerConfig, action: Any) -> Any:
    """Run `action(orchestrator)` on a fresh event loop and close the clients."""

    async def run() -> Any:
        async with RetrievalOrchestrator.from_config(config) as orchestrator:
            return await action(orchestrator)

    try:
        return asyncio.run(run())
    except ZigscanError as e:
        raise click.ClickException(str(e)) from e


@cli.command("decode")
@click.argument("payload")
@click.option(
    "--encoding",
    type=click.Choice([e.value for e in Encoding]),
    default=Encoding.BASE64.value,
    show_default=True,
    help="How PAYLOAD is encoded",
)
@click.option("--json", "as_json", is_flag=True, help="Print the record as JSON")
@click.pass_obj
def decode_cmd(config: ExplorerConfig, payload: str, encoding: str, as_json: bool) -> None:
    """Decode an encoded transaction or message offline."""
    raw = RawTransaction(payload=payload, encoding=Encoding(encoding))
    record = assemble_record(raw=raw, prefix=config.address_prefix)
    if as_json:
        _print_json(record.to_dict())
    else:
        _print_record(record)


@cli.command("tx")
@click.argument("tx_hash")
@click.option("--json", "as_json", is_flag=True, help="Print the record as JSON")
@click.pass_obj
def tx_cmd(config: ExplorerConfig, tx_hash: str, as_json: bool) -> None:
    """Look up one transaction by hash."""
    record = _run(config, lambda o: o.get_transaction(tx_hash))
    if as_json:
        _print_json(record.to_dict())
    else:
        _print_record(record)


@cli.command("history")
@click.argument("address")
@click.option("--page", type=int, default=1, show_default=True)
@click.option("--page-size", type=int, default=10, show_default=True)
@click.option("--json", "as_json", is_flag=True, help="Print the page as JSON")
@click.pass_obj
def history_cmd(config: ExplorerConfig, address: str, page: int, page_size: int, as_json: bool) -> None:
    """Show one page of an address's transaction history."""
    result = _run(config, lambda o: o.get_address_transactions(address, page=page, page_size=page_size))
    if as_json:
        _print_json(
            {"records": [r.to_dict() for r in result.records], "pagination": result.pagination.to_dict()}
        )
        return
    console.print(_records_table(result.records, f"History of {address}"))
    p = result.pagination
    source = result.source.value if result.source else "none"
    console.print(f"[bold]page[/] {p.page}/{p.pages} • total≈{p.total} • source={source}")


@cli.command("latest")
@click.option("--limit", type=int, default=10, show_default=True)
@click.option("--json", "as_json", is_flag=True, help="Print the records as JSON")
@click.pass_obj
def latest_cmd(config: ExplorerConfig, limit: int, as_json: bool) -> None:
    """Show the most recent transactions."""
    records = _run(config, lambda o: o.get_latest_transactions(limit))
    if as_json:
        _print_json([r.to_dict() for r in records])
        return
    console.print(_records_table(records, "Latest transactions"))


@cli.command("block")
@click.argument("height", type=click.IntRange(min=1))
@click.option("--json", "as_json", is_flag=True, help="Print the records as JSON")
@click.pass_obj
def block_cmd(config: ExplorerConfig, height: int, as_json: bool) -> None:
    """List the transactions of one block."""
    records = _run(config, lambda o: o.get_block_transactions(height))
    if as_json:
        _print_json([r.to_dict() for r in records])
        return
    console.print(_records_table(records, f"Block {height}"))


@cli.command("probe")
@click.pass_obj
def probe_cmd(config: ExplorerConfig) -> None:
    """Probe the upstream tiers and report the preferred one."""
    tier = _run(config, lambda o: o.probe())
    console.print(f"[bold]preferred tier[/]: {tier.value}")


if __name__ == "__main__":
    cli()
