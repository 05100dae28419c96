"""Account management commands."""

import sys

import click
from click import argument, echo, option

from ..config import AccountConfig, get_root, load_config, save_config

from .utils import AliasGroup, err, get_password, require_init


@click.group(cls=AliasGroup, aliases={
    'a': 'add',
    'l': 'ls',
})
def account():
    """Manage IMAP accounts."""
    pass


@account.command("add", no_args_is_help=True)
@option('-H', '--host', help="IMAP host (for generic imap type)")
@option('-p', '--password', 'password_opt', help="Password (prompts if not provided)")
@option('-P', '--port', type=int, default=993, help="IMAP port")
@option('-t', '--type', 'acct_type', help="Account type (gmail, imap)")
@argument('name')
@argument('user')
@require_init
def account_add(
    host: str | None,
    password_opt: str | None,
    port: int,
    acct_type: str | None,
    name: str,
    user: str,
):
    """Add or update an account.

    \b
    Examples:
      mailharvest account add gmail me@gmail.com
      mailharvest account add -t imap -H imap.example.com work me@example.com
      echo "$PASS" | mailharvest a a gmail me@gmail.com
    """
    password = get_password(password_opt)

    # Infer type from name/host if not specified
    if not acct_type:
        if "gmail" in name.lower() or "gmail" in user.lower():
            acct_type = "gmail"
        elif host:
            acct_type = "imap"
        else:
            err(f"Cannot infer account type from '{name}'. Use -t to specify.")
            sys.exit(1)

    if acct_type != "gmail" and not host:
        err(f"Account type '{acct_type}' needs an IMAP host (-H).")
        sys.exit(1)

    root = get_root()
    config = load_config(root)
    config.accounts[name] = AccountConfig(
        name=name,
        type=acct_type,
        user=user,
        password=password,
        host=host,
        port=port,
    )
    save_config(config, root)
    echo(f"Account '{name}' saved ({acct_type}: {user}) [config.yaml]")


@account.command("ls")
@require_init
def account_ls():
    """List accounts."""
    root = get_root()
    config = load_config(root)
    if not config.accounts:
        echo("No accounts configured.")
        echo("  mailharvest account add gmail me@gmail.com")
        return
    echo("Accounts:\n")
    for name, acct in sorted(config.accounts.items()):
        host_info = f" ({acct.host})" if acct.host else ""
        echo(f"  {name:20} {acct.type:10} {acct.user}{host_info}")


@account.command("rm", no_args_is_help=True)
@argument('name')
@require_init
def account_rm(name: str):
    """Remove an account."""
    root = get_root()
    config = load_config(root)
    if name not in config.accounts:
        echo(f"Account '{name}' not found.")
        sys.exit(1)
    del config.accounts[name]
    save_config(config, root)
    echo(f"Account '{name}' removed.")
