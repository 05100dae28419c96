"""CLI package for mailharvest.

This package organizes CLI commands into modules:
- account.py: Account management (add, ls, rm)
- fetch.py: Harvest messages, attachments and summaries from IMAP
- extract.py: Offline extraction from saved messages and text
- misc.py: init
- utils.py: Shared utilities and helpers
"""

import click
from dotenv import load_dotenv

from .utils import AliasGroup

from .account import account
from .extract import extract, links
from .fetch import fetch
from .misc import init


@click.group(cls=AliasGroup, aliases={
    'a': 'account',
    'f': 'fetch',
    'i': 'init',
    'l': 'links',
    'x': 'extract',
})
def main():
    """Harvest attachments and video links from mail."""
    load_dotenv()


main.add_command(account)
main.add_command(extract)
main.add_command(fetch)
main.add_command(init)
main.add_command(links)


__all__ = [
    'main',
    'account',
    'extract',
    'fetch',
    'init',
    'links',
]
