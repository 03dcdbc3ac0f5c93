"""
CLI Entry Point for RedBot Ledger.

Commands:
  history   - Show the bet history, one page at a time
  stats     - Wins, losses and net result
  clear     - Wipe the bet history
  feed      - Replay a chat transcript through the ledger
  bet       - Build the chat command for a bet
  config    - Show current configuration
"""

import logging

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from redbot_ledger import __version__
from redbot_ledger.commands import WAGER_COMMANDS, BALANCE_COMMAND, CommandDispatcher
from redbot_ledger.config import RedBotConfig
from redbot_ledger.ledger.models import WagerRecord, WagerStatus, parse_kind
from redbot_ledger.ledger.storage import JsonFileStore, StakeMemory
from redbot_ledger.session import RedBotSession

console = Console()

_COMMAND_KINDS = {command: kind for kind, command in WAGER_COMMANDS.items()}


def setup_logging(level: int = logging.WARNING):
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )


def format_result(record: WagerRecord) -> str:
    if record.status == WagerStatus.NOT_PLACED:
        return "[dim]N/A[/dim]"
    if record.status == WagerStatus.PENDING:
        return "[yellow]Pending...[/yellow]"
    if record.status == WagerStatus.WON:
        return f"[green]+{record.settlement:g} bits[/green]"
    return f"[red]{record.settlement:g} bits[/red]"


def render_history(page) -> Table:
    table = Table(title="Bet History", show_header=True)
    table.add_column("Placed", style="dim")
    table.add_column("Bet Amount", justify="right")
    table.add_column("Bet Type", style="cyan")
    table.add_column("Win/Loss", justify="right")

    if not page.items:
        table.add_row("", "No bet history available", "", "")
    for record in page.items:
        table.add_row(
            record.created_at[:19].replace("T", " "),
            f"{record.amount} bits",
            record.kind.value.upper(),
            format_result(record),
        )
    return table


@click.group()
@click.version_option(version=__version__, prog_name="RedBot Ledger")
@click.option("-v", "--verbose", is_flag=True, help="Show ledger activity logs")
def cli(verbose):
    """RedBot Ledger - track every bet RedBot takes."""
    setup_logging(logging.INFO if verbose else logging.WARNING)


@cli.command()
@click.option("--page", default=1, help="Page number, starting at 1")
@click.option("--page-size", default=None, type=int, help="Bets per page")
def history(page, page_size):
    """Show the bet history, newest first."""
    config = RedBotConfig()
    with RedBotSession(config) as session:
        info = session.paginate(page - 1, page_size)

    console.print(render_history(info))
    footer = f"Page {info.current_page + 1} of {info.total_pages or 1}"
    if info.has_next:
        footer += f"  (next: --page {page + 1})"
    console.print(f"[dim]{footer}[/dim]")
    console.print(f"[dim]Total bets: {info.total_items}[/dim]")


@cli.command()
def stats():
    """Show wins, losses and net result across the history."""
    config = RedBotConfig()
    with RedBotSession(config) as session:
        summary = session.history.summary()

    net_style = "green" if summary["net"] >= 0 else "red"
    console.print(Panel(
        f"Total Bets: {summary['total']}\n"
        f"Won: [green]{summary['won']}[/green]\n"
        f"Lost: [red]{summary['lost']}[/red]\n"
        f"Not Placed: {summary['not_placed']}\n"
        f"Win Rate: {summary['win_rate']:.1%}\n"
        f"Net: [{net_style}]{summary['net']:+g} bits[/{net_style}]",
        title="[bold]RedBot Stats[/bold]",
    ))


@cli.command()
@click.confirmation_option(prompt="Are you sure you want to clear all bet history?")
def clear():
    """Clear the whole bet history. There is no undo."""
    config = RedBotConfig()
    with RedBotSession(config) as session:
        session.clear_history()
    console.print("[green]Bet history cleared.[/green]")


@cli.command()
@click.argument("transcript", type=click.File("r"))
@click.option("--channel", default=None, help="Chat channel the commands go to")
def feed(transcript, channel):
    """Replay a chat transcript through the ledger.

    Lines look like "sender: message". Lines starting with "$" are your own
    commands ($bet 10, $lo 5, $ut 3, $bal) and open a wager.
    """
    config = RedBotConfig()
    dispatcher = CommandDispatcher(
        config,
        transport=lambda text: console.print(f"[dim]> {text}[/dim]"),
        channel=channel,
    )

    with RedBotSession(config, dispatcher=dispatcher) as session:
        def on_change(event):
            if event == "append":
                record = session.history.records[0]
                console.print(f"  {record.amount} bits on {record.kind.value.upper()}: "
                              f"{format_result(record)}")

        session.subscribe(on_change)

        for lineno, raw in enumerate(transcript, start=1):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue

            if line.startswith("$"):
                parts = line.split()
                command = parts[0]
                kind = _COMMAND_KINDS.get(command)
                if command == BALANCE_COMMAND:
                    session.check_balance()
                elif kind is None:
                    console.print(f"[yellow]Line {lineno}: unknown command {escape(command)}[/yellow]")
                elif kind.value not in config.wager_kinds:
                    console.print(f"[yellow]Line {lineno}: {kind.value.upper()} bets are disabled[/yellow]")
                else:
                    amount = parts[1] if len(parts) > 1 else session.last_stake
                    session.open_wager(amount, kind)
                continue

            if ":" not in line:
                console.print(f"[yellow]Line {lineno}: expected 'sender: message'[/yellow]")
                continue

            sender, text = line.split(":", 1)
            session.on_message(sender, text)

        session.unsubscribe(on_change)
        if session.pending is not None:
            console.print("[yellow]Transcript ended with a bet still pending.[/yellow]")

        summary = session.history.summary()

    console.print(f"[dim]Total bets: {summary['total']}[/dim]")


@cli.command()
@click.argument("amount", required=False)
@click.option("--kind", default="red", type=click.Choice(["red", "lo", "ut"]),
              help="Which bet to place")
def bet(amount, kind):
    """Build the chat command for a bet and remember the stake."""
    config = RedBotConfig()
    if kind not in config.wager_kinds:
        console.print(f"[red]{kind.upper()} bets are disabled. Set REDBOT_ENABLE_UT=true.[/red]")
        return

    stake = StakeMemory(JsonFileStore(config.storage_path), config.storage.last_bet_key,
                        config.betting.default_bet)
    amount = stake.save(amount if amount is not None else stake.load())

    dispatcher = CommandDispatcher(config, transport=console.print)
    dispatcher.place_wager(parse_kind(kind), amount)


@cli.command()
def config():
    """Show current configuration."""
    cfg = RedBotConfig()

    console.print(Panel(
        f"Bot Sender: [bold magenta]{cfg.chat.bot_sender}[/bold magenta]\n"
        f"Valid Chats: {', '.join(cfg.chat.valid_chats)}\n"
        f"Default Bet: {cfg.betting.default_bet} bits\n"
        f"Page Size: {cfg.betting.history_page_size}\n"
        f"Bet Kinds: {', '.join(k.upper() for k in cfg.wager_kinds)}\n"
        f"Storage: {cfg.storage_path}",
        title="[bold]RedBot Configuration[/bold]",
    ))


def main():
    cli()


if __name__ == "__main__":
    main()
