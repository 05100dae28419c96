"""Project setup command."""

from pathlib import Path

import click
from click import echo, option

from ..config import PROJECT_DIR, HarvestConfig, get_config_path, save_config
from ..layouts import DEFAULT_LAYOUT, PRESETS

from .utils import validate_layout


@click.command()
@option('-d', '--attachments-dir', default="data/attachments", help="Where attachments are saved (relative to project root)")
@option('-L', '--layout', default=DEFAULT_LAYOUT, callback=validate_layout, help="Layout preset or path template")
@option('-s', '--sender', default="", help="Only harvest mail from this address")
def init(attachments_dir: str, layout: str, sender: str):
    """Initialize a mailharvest project in the current directory.

    \b
    Layout presets:
      daily    $yyyy-$mm-$dd/$filename   (default)
      monthly  $yyyy/$mm/$filename
      sender   $from/$yyyy-$mm-$dd/$filename
      flat     $filename

    \b
    Or use a custom template:
      mailharvest init -L '$yyyy/$mm/$dd/$subj20/$filename'
    """
    root = Path.cwd()
    config_path = get_config_path(root)

    if config_path.exists():
        echo(f"Already initialized: {root / PROJECT_DIR}")
        return

    config = HarvestConfig(layout=layout, attachments_dir=attachments_dir, sender=sender)
    save_config(config, root)

    echo(f"Initialized mailharvest project: {root / PROJECT_DIR}")
    template = PRESETS.get(layout, layout)
    echo(f"Layout: {layout}" + (f" ({template})" if template != layout else ""))
    echo(f"Attachments: {config.attachments_path(root)}")
