"""Command line interface for operating labelbot."""

from __future__ import annotations

import csv
import json
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table
from typing_extensions import Annotated

from labelbot.adapters.worker import start_worker
from labelbot.config import ConfigLoaderException, get_config
from labelbot.container import get_container, override_config
from labelbot.core.exceptions import AccountError, LabelBotException, ValidationError
from labelbot.core.models import LabelJob, utcnow, validate_shipment
from labelbot.core.services import bootstrap_accounts, make_label_id
from labelbot.infrastructure.logging import configure_logging, get_logger

app = typer.Typer(
    name="labelbot",
    help="Carrier portal session pool and label generation workers.",
    add_completion=False,
    rich_markup_mode="rich",
)
accounts_app = typer.Typer(name="accounts", help="Manage the account pool.")
sessions_app = typer.Typer(name="sessions", help="Inspect and reset portal sessions.")
label_app = typer.Typer(name="label", help="Queue label generation jobs.")
app.add_typer(accounts_app, no_args_is_help=True)
app.add_typer(sessions_app, no_args_is_help=True)
app.add_typer(label_app, no_args_is_help=True)

console = Console()


def _abort(error: Exception) -> None:
    get_logger().error("Command failed", error=str(error))
    if isinstance(error, ValidationError):
        console.print(f"[bold red]{error.describe()}[/bold red]")
    elif isinstance(error, LabelBotException):
        console.print(f"[bold red]{error.message}[/bold red]")
    else:
        console.print(f"[bold red]{error}[/bold red]")
    raise typer.Exit(code=1)


def _format_age(moment: datetime) -> str:
    minutes = int((utcnow() - moment).total_seconds() // 60)
    return f"{minutes} min ago"


@app.callback()
def main(
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to config.yaml."),
    ] = None,
) -> None:
    """Load configuration and logging before any command runs."""
    try:
        config = get_config(reload=True, config_path=str(config_path) if config_path else None)
    except ConfigLoaderException as e:
        _abort(e)
    override_config(config)
    configure_logging(config.logging)


# --- Processes ---

@app.command(help="Run a queue worker for session and label jobs.")
def worker(
    queues: Annotated[
        Optional[List[str]],
        typer.Option("--queue", "-q", help="Queue to listen on (repeatable). Defaults to both."),
    ] = None,
    name: Annotated[Optional[str], typer.Option(help="Worker name.")] = None,
    burst: Annotated[bool, typer.Option(help="Exit once the queues are empty.")] = False,
) -> None:
    try:
        start_worker(queues, name=name, burst=burst)
    except ValueError as e:
        _abort(e)


@app.command(help="Load the accounts file into the account pool.")
def bootstrap(
    accounts_file: Annotated[
        Optional[Path],
        typer.Option("--file", "-f", help="Accounts JSON file. Defaults to the configured path."),
    ] = None,
) -> None:
    container = get_container()
    path = accounts_file or container.config().accounts_file
    try:
        loaded = bootstrap_accounts(container.account_store(), path, logger=container.logger())
    except LabelBotException as e:
        _abort(e)
    console.print(f"[bold green]Loaded {len(loaded)} accounts from {path}.[/bold green]")


@app.command(help="Run the session refresh and balance top-up triggers.")
def scheduler(
    skip_bootstrap: Annotated[
        bool,
        typer.Option("--skip-bootstrap", help="Keep the stored account pool instead of reloading the file."),
    ] = False,
) -> None:
    container = get_container()
    if not skip_bootstrap:
        try:
            bootstrap_accounts(container.account_store(), container.config().accounts_file, logger=container.logger())
        except LabelBotException as e:
            _abort(e)
    console.print("[bold cyan]Scheduler running, press Ctrl+C to stop.[/bold cyan]")
    container.scheduler().run_forever()


@app.command(help="Run the balance top-up sweep once.")
def topup() -> None:
    report = get_container().balance_top_up().run()
    if not report.triggered:
        console.print(f"[green]Pooled balance {report.total_balance} is above the floor, nothing to do.[/green]")
        return
    console.print(f"Funded: {', '.join(report.funded) or '-'}")
    for username, reason in report.failed.items():
        console.print(f"[red]{username}: {reason}[/red]")


@app.command(help="Label usage statistics from a day until now.")
def stats(
    since: Annotated[
        Optional[datetime],
        typer.Option("--since", formats=["%Y-%m-%d"], help="First day to include (default: today)."),
    ] = None,
) -> None:
    day: date = since.date() if since else utcnow().date()
    result = get_container().ledger().stats(day)
    table = Table(title=f"Labels since {day.isoformat()}", show_header=True, header_style="bold magenta")
    table.add_column("Shipments")
    table.add_column("Accounts used")
    table.add_column("Balance used")
    table.add_column("Shipment types")
    table.add_row(
        str(result.number_of_shipments),
        str(result.accounts_used),
        str(result.balance_used),
        str(result.shipment_types),
    )
    console.print(table)


# --- Accounts ---

@accounts_app.command("list", help="List accounts with their status.")
def list_accounts() -> None:
    container = get_container()
    accounts = container.account_store().list()
    if not accounts:
        console.print("[yellow]No accounts found.[/yellow]")
        raise typer.Exit(code=1)

    active = container.session_store().get_active()
    table = Table(title="Accounts", show_header=True, header_style="bold magenta")
    table.add_column("Username")
    table.add_column("Status")
    for account in accounts:
        if active is not None and active.username == account.username:
            status = "[bold green]Active[/bold green]"
        elif account.enabled:
            status = "Enabled"
        else:
            status = "[dim]Disabled[/dim]"
        table.add_row(account.username, status)
    console.print(table)


@accounts_app.command("add", help="Add an account (replaces one with the same username).")
def add_account(
    username: Annotated[str, typer.Argument(help="Portal username.")],
    password: Annotated[str, typer.Option(prompt=True, hide_input=True, help="Portal password.")],
) -> None:
    try:
        get_container().account_store().add(username, password)
    except (AccountError, ValueError) as e:
        _abort(e)
    console.print(f"[green]Account {username} added.[/green]")


@accounts_app.command("delete", help="Delete an account and its session.")
def delete_account(username: Annotated[str, typer.Argument(help="Portal username.")]) -> None:
    container = get_container()
    try:
        removed = container.account_store().delete(username)
    except AccountError as e:
        _abort(e)
    container.session_store().delete(username)
    if not removed:
        console.print(f"[yellow]No account named {username}.[/yellow]")
        raise typer.Exit(code=1)
    console.print(f"[green]Account {username} deleted.[/green]")


@accounts_app.command("disable", help="Disable an account.")
def disable_account(username: Annotated[str, typer.Argument(help="Portal username.")]) -> None:
    try:
        account = get_container().account_store().disable(username)
    except AccountError as e:
        _abort(e)
    if account is None:
        console.print(f"[yellow]No account named {username}.[/yellow]")
        raise typer.Exit(code=1)
    console.print(f"[green]Account {username} disabled.[/green]")


@accounts_app.command("rotate", help="Disable an account and show the next enabled one.")
def rotate_account(username: Annotated[str, typer.Argument(help="Portal username.")]) -> None:
    try:
        replacement = get_container().account_store().rotate(username)
    except AccountError as e:
        _abort(e)
    console.print(f"[green]{username} disabled, next account: {replacement.username}[/green]")


# --- Sessions ---

@sessions_app.command("list", help="List stored sessions.")
def list_sessions() -> None:
    store = get_container().session_store()
    sessions = store.list()
    if not sessions:
        console.print("[yellow]No sessions stored.[/yellow]")
        return

    active = store.get_active()
    table = Table(title="Sessions", show_header=True, header_style="bold magenta")
    table.add_column("Username")
    table.add_column("User id")
    table.add_column("Balance")
    table.add_column("Created")
    table.add_column("State")
    for session in sorted(sessions, key=lambda s: s.created_at, reverse=True):
        if active is not None and session.username == active.username:
            state = "[bold green]Active[/bold green]"
        elif session.is_fresh(window=store.fresh_for):
            state = "Fresh"
        else:
            state = "[dim]Stale[/dim]"
        table.add_row(
            session.username,
            session.user_id or "-",
            str(session.balance) if session.balance is not None else "-",
            _format_age(session.created_at),
            state,
        )
    console.print(table)


@sessions_app.command("clear", help="Remove every stored session.")
def clear_sessions() -> None:
    get_container().session_store().clear()
    console.print("[green]Sessions cleared.[/green]")


@sessions_app.command("refresh", help="Clear sessions and queue a refresh for every enabled account.")
def refresh_sessions() -> None:
    job_ids = get_container().session_refresher().schedule_refresh()
    console.print(f"[green]Queued {len(job_ids)} session jobs.[/green]")


# --- Labels ---

@label_app.command("submit", help="Validate a shipment JSON file and queue it.")
def submit_label(
    shipment_file: Annotated[Path, typer.Argument(exists=True, dir_okay=False, help="Shipment JSON file.")],
    requester: Annotated[str, typer.Option("--requester", "-r", help="Chat id that receives the label.")],
    label_id: Annotated[Optional[str], typer.Option(help="Label id, generated when omitted.")] = None,
) -> None:
    try:
        shipment = validate_shipment(json.loads(shipment_file.read_text(encoding="utf-8")))
    except (ValidationError, json.JSONDecodeError) as e:
        _abort(e)
    job = LabelJob(shipment=shipment, label_id=label_id or make_label_id(shipment), requester_ref=requester)
    job_id = get_container().dispatcher().enqueue_label_job(job)
    console.print(f"[green]Process queued for label {job.label_id}\nJob ID: {job_id}[/green]")


@label_app.command("from-csv", help="Extract one shipment per CSV row and queue them.")
def labels_from_csv(
    csv_file: Annotated[Path, typer.Argument(exists=True, dir_okay=False, help="CSV export with a header row.")],
    requester: Annotated[str, typer.Option("--requester", "-r", help="Chat id that receives the labels.")],
) -> None:
    container = get_container()
    extractor = container.assistant()
    if extractor is None:
        _abort(ValueError("Shipment extraction needs an OpenAI key (LABELBOT_OPENAI_KEY)."))

    with open(csv_file, newline="", encoding="utf-8-sig") as handle:
        rows = [row for row in csv.reader(handle) if any(cell.strip() for cell in row)]
    if len(rows) < 2:
        _abort(ValueError("The CSV file has no data rows."))

    header, records = rows[0], rows[1:]
    dispatcher = container.dispatcher()
    queued = 0
    for index, record in enumerate(records, start=1):
        try:
            shipment = extractor.extract(header, record)
        except ValidationError as e:
            console.print(f"[red]Row {index}: {e.describe()}[/red]")
            continue
        job = LabelJob(shipment=shipment, label_id=make_label_id(shipment), requester_ref=requester)
        job_id = dispatcher.enqueue_label_job(job)
        queued += 1
        console.print(f"Row {index}: queued label {job.label_id} (job {job_id})")
    console.print(f"[bold green]Queued {queued} of {len(records)} rows.[/bold green]")


if __name__ == "__main__":
    app()
