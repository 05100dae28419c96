"""Shared CLI utilities and helpers."""

import sys
from functools import wraps
from pathlib import Path

import click
from click import prompt

from ..attachments import AttachmentStore
from ..config import (
    CONFIG_FILE,
    PROJECT_DIR,
    AccountConfig,
    HarvestConfig,
    find_root,
    get_account,
)
from ..layouts import PRESETS, is_valid_layout


def err(*args, **kwargs):
    """Print to stderr."""
    print(*args, file=sys.stderr, **kwargs)


def has_config(root: Path | None = None) -> bool:
    """Check if project has config.yaml."""
    root = root or find_root()
    if not root:
        return False
    return (root / PROJECT_DIR / CONFIG_FILE).exists()


def get_store(config: HarvestConfig, root: Path, out_dir: str | None = None) -> AttachmentStore:
    """Attachment store for the project (or an explicit output directory)."""
    target = Path(out_dir) if out_dir else config.attachments_path(root)
    return AttachmentStore(target, layout=config.layout)


def lookup_account(name: str, root: Path | None) -> AccountConfig | None:
    if not root or not has_config(root):
        return None
    return get_account(name, root)


def get_password(password_opt: str | None) -> str:
    """Get password from option, stdin (if piped), or prompt."""
    if password_opt:
        return password_opt
    elif not sys.stdin.isatty():
        return sys.stdin.readline().rstrip("\n")
    else:
        return prompt("Password", hide_input=True)


# =============================================================================
# Decorators and Click helpers
# =============================================================================


def require_init(f):
    """Decorator that requires .mailharvest directory to exist."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        if not has_config():
            err("Not in a mailharvest project. Run 'mailharvest init' first.")
            sys.exit(1)
        return f(*args, **kwargs)
    return wrapper


def validate_layout(ctx, param, value):
    """Validate layout is a preset name or valid template."""
    if value is not None and not is_valid_layout(value):
        raise click.BadParameter(
            f"Invalid layout. Use a preset ({', '.join(PRESETS.keys())}) "
            "or a template containing $filename"
        )
    return value


class AliasGroup(click.Group):
    """Click Group that supports command aliases."""

    def __init__(self, *args, aliases: dict[str, str] | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.aliases = aliases or {}
        # Build reverse mapping: command -> list of aliases
        self._cmd_aliases: dict[str, list[str]] = {}
        for alias, cmd in self.aliases.items():
            self._cmd_aliases.setdefault(cmd, []).append(alias)

    def get_command(self, ctx, cmd_name):
        cmd_name = self.aliases.get(cmd_name, cmd_name)
        return super().get_command(ctx, cmd_name)

    def resolve_command(self, ctx, args):
        _, cmd_name, args = super().resolve_command(ctx, args)
        cmd_name = self.aliases.get(cmd_name, cmd_name)
        return _, cmd_name, args

    def format_commands(self, ctx, formatter):
        """Write all commands with their aliases to the formatter."""
        commands = []
        for subcommand in self.list_commands(ctx):
            cmd = self.get_command(ctx, subcommand)
            if cmd is None or cmd.hidden:
                continue
            aliases = self._cmd_aliases.get(subcommand, [])
            if aliases:
                name = f"{subcommand} ({', '.join(sorted(aliases))})"
            else:
                name = subcommand
            help_text = cmd.get_short_help_str(limit=formatter.width)
            commands.append((name, help_text))

        if commands:
            with formatter.section("Commands"):
                formatter.write_dl(commands)
