"""Fetch command: harvest recent messages from an IMAP account."""

import imaplib
import json
import sys

import click
import humanize
from click import argument, echo, option, style
from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

from ..config import get_root, load_config
from ..harvest import HarvestedMessage, candidate_uids, harvest_uid
from ..imap import SearchFilter, get_imap_client

from .utils import err, get_store, lookup_account, require_init


def print_message(console: Console, msg: HarvestedMessage, verbose: bool) -> None:
    """Print one harvested message and its attachments."""
    subj = (msg.subject or "(no subject)")[:60]
    console.print(f"  [green]✓[/] {subj}")
    if not verbose:
        return
    for att in msg.attachments:
        if att.local_path == msg.summary_path:
            console.print(f"      [cyan]+ {att.name}[/] [dim](summary)[/]")
        elif att.skipped:
            console.print(f"      [dim]· {att.name} (already exists)[/]")
        else:
            size = att.local_path.stat().st_size if att.local_path.exists() else 0
            console.print(f"      + {att.name} [dim]({humanize.naturalsize(size, binary=True)})[/]")
    for link in msg.links:
        console.print(f"      [blue]{link}[/]")


@click.command(no_args_is_help=True)
@require_init
@option('-d', '--days', type=int, help="Only messages newer than N days (default from config)")
@option('-e', '--max-errors', default=5, help="Abort after N consecutive errors")
@option('-j', '--json', 'as_json', is_flag=True, help="Print harvested messages as JSON")
@option('-l', '--limit', type=int, help="Max messages to harvest (default from config)")
@option('-n', '--dry-run', is_flag=True, help="Show what would be saved")
@option('-o', '--output', 'out_dir', type=click.Path(file_okay=False), help="Attachments directory (overrides config)")
@option('-p', '--password', envvar="MAILHARVEST_PASSWORD", help="IMAP password (overrides account)")
@option('-s', '--sender', envvar="MAILHARVEST_SENDER", help="Sender address (overrides config)")
@option('-v', '--verbose', is_flag=True, help="Show attachments and links per message")
@argument('account')
def fetch(
    days: int | None,
    max_errors: int,
    as_json: bool,
    limit: int | None,
    dry_run: bool,
    out_dir: str | None,
    password: str | None,
    sender: str | None,
    verbose: bool,
    account: str,
):
    """Harvest recent messages with attachments from a sender.

    Attachments are saved under the attachments directory using the
    project layout; existing files are left alone. Messages whose body
    carries video links also get a <subject>_summary.docx.

    \b
    Examples:
      mailharvest fetch gmail                     # Sender/window from config
      mailharvest fetch gmail -s prof@uni.edu -d 14
      mailharvest fetch gmail -n -v               # Dry run
    """
    root = get_root()
    config = load_config(root)

    acct = lookup_account(account, root)
    if not acct:
        err(f"Account '{account}' not found.")
        err("  mailharvest account add gmail me@gmail.com")
        sys.exit(1)

    search = SearchFilter(
        sender=sender or config.sender,
        newer_than_days=days if days is not None else config.newer_than_days,
        has_attachment=True,
    )
    if not search.sender:
        err("No sender configured. Pass -s or set 'sender' in config.yaml.")
        sys.exit(1)
    limit = limit if limit is not None else config.max_results
    store = get_store(config, root, out_dir)

    try:
        client = get_imap_client(acct)
    except ValueError as e:
        err(str(e))
        sys.exit(1)

    echo(f"Source: {acct.type} ({acct.user})", err=as_json)
    echo(f"Query: {search.gmail_query() if client.filters_attachments else search.imap_criteria()}", err=as_json)
    echo(f"Attachments: {store.root} ({store.template.template_str})", err=as_json)
    if dry_run:
        echo(style("DRY RUN - no files will be written", fg="yellow"), err=as_json)
    echo(err=as_json)

    console = Console(stderr=as_json)
    harvested: list[HarvestedMessage] = []
    failed = 0
    consecutive_errors = 0

    with client:
        try:
            client.connect(acct.user, password or acct.password)
            uids = candidate_uids(client, search, limit)
        except (imaplib.IMAP4.error, RuntimeError, OSError) as e:
            err(f"IMAP error: {e}")
            sys.exit(1)
        echo(f"Found {len(uids)} candidate messages", err=as_json)

        with Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]Fetching"),
            BarColumn(),
            TaskProgressColumn(),
            TextColumn("{task.completed}/{task.total}"),
            TimeElapsedColumn(),
            console=console,
        ) as progress:
            task = progress.add_task("fetch", total=len(uids))
            for uid in uids:
                try:
                    msg = harvest_uid(
                        client, uid, store, search,
                        locales=config.locales, dry_run=dry_run,
                    )
                except (imaplib.IMAP4.error, RuntimeError, OSError) as e:
                    failed += 1
                    consecutive_errors += 1
                    console.print(f"  [red]✗[/] UID {uid.decode()}" + (f" [dim red]: {str(e)[:60]}[/]" if verbose else ""))
                    progress.advance(task)
                    if consecutive_errors >= max_errors:
                        console.print(f"\n[bold red]Aborting: {consecutive_errors} consecutive errors[/]")
                        break
                    continue

                consecutive_errors = 0
                progress.advance(task)
                if msg is None:
                    continue
                harvested.append(msg)
                print_message(console, msg, verbose)

    saved = sum(1 for m in harvested for a in m.attachments if not a.skipped and a.local_path != m.summary_path)
    skipped = sum(1 for m in harvested for a in m.attachments if a.skipped)
    summaries = sum(1 for m in harvested if m.summary_path)

    if as_json:
        print(json.dumps([m.to_dict() for m in harvested], indent=2, ensure_ascii=False))

    echo(err=as_json)
    verb = "Would save" if dry_run else "Saved"
    echo(
        f"{len(harvested)} messages: {verb} {saved} attachments, "
        f"{skipped} already present, {summaries} summaries",
        err=as_json,
    )
    if failed:
        echo(style(f"{failed} messages failed", fg="red"), err=as_json)
        sys.exit(1)
