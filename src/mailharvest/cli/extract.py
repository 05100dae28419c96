"""Offline extraction commands for saved messages and text."""

import email
import json
import sys
from email.policy import default as email_policy
from pathlib import Path

import click
from click import argument, echo, option

from ..config import find_root, load_config
from ..extract import DEFAULT_LOCALES, extract_links, extract_message, extract_payload

from .utils import err


def _locales():
    root = find_root()
    return load_config(root).locales if root else DEFAULT_LOCALES


@click.command(no_args_is_help=True)
@option('-j', '--json', 'as_json', is_flag=True, help="Output as JSON")
@option('-b', '--body-only', is_flag=True, help="Print only the body")
@argument('path', type=click.Path(exists=True, dir_okay=False))
def extract(as_json: bool, body_only: bool, path: str):
    """Extract body and media links from a saved message.

    PATH is an .eml file, or a .json file holding a Gmail API message
    (or just its "payload").

    \b
    Examples:
      mailharvest extract message.eml
      mailharvest x payload.json -j
    """
    p = Path(path)
    locales = _locales()
    if p.suffix.lower() == ".json":
        try:
            data = json.loads(p.read_text())
        except json.JSONDecodeError as e:
            err(f"Invalid JSON in {p}: {e}")
            sys.exit(1)
        payload = data.get("payload", data) if isinstance(data, dict) else {}
        result = extract_payload(payload, locales)
    else:
        with open(p, "rb") as f:
            msg = email.message_from_binary_file(f, policy=email_policy)
        result = extract_message(msg, locales)

    if as_json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return
    if body_only:
        echo(result.body)
        return

    if not result.body:
        echo("No body found")
    else:
        echo(result.body)
    echo()
    if result.links:
        echo(f"Links ({len(result.links)}):")
        for link in result.links:
            echo(f"  {link}")
    else:
        echo("No links found")


@click.command()
@argument('file', type=click.File('r'), default='-')
def links(file):
    """Print media links found in a text file (or stdin)."""
    for link in extract_links(file.read()):
        echo(link)
