"""Project configuration via YAML files."""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .extract.quotes import DEFAULT_LOCALES, QuoteLocale
from .layouts import DEFAULT_LAYOUT

PROJECT_DIR = ".mailharvest"
CONFIG_FILE = "config.yaml"
ROOT_ENV = "MAILHARVEST_ROOT"

DEFAULT_ATTACHMENTS_DIR = "data/attachments"
DEFAULT_NEWER_THAN_DAYS = 7
DEFAULT_MAX_RESULTS = 10


@dataclass
class AccountConfig:
    """An IMAP account configuration."""
    name: str
    type: str  # "gmail", "imap"
    user: str
    password: str
    host: str | None = None
    port: int = 993


@dataclass
class HarvestConfig:
    """Top-level mailharvest project configuration."""
    layout: str = DEFAULT_LAYOUT  # Preset name or template string
    attachments_dir: str = DEFAULT_ATTACHMENTS_DIR
    sender: str = ""
    newer_than_days: int = DEFAULT_NEWER_THAN_DAYS
    max_results: int = DEFAULT_MAX_RESULTS
    accounts: dict[str, AccountConfig] = field(default_factory=dict)
    quote_locales: list[QuoteLocale] = field(default_factory=list)

    @property
    def locales(self) -> tuple[QuoteLocale, ...]:
        """Built-in quote locales followed by configured extras."""
        return DEFAULT_LOCALES + tuple(self.quote_locales)

    def attachments_path(self, root: Path) -> Path:
        path = Path(self.attachments_dir).expanduser()
        return path if path.is_absolute() else root / path


def find_root(start: Path | None = None) -> Path | None:
    """Find project root (directory containing .mailharvest/).

    First checks MAILHARVEST_ROOT environment variable, then walks up from
    start/cwd.
    """
    env_root = os.environ.get(ROOT_ENV)
    if env_root:
        env_path = Path(env_root).resolve()
        if (env_path / PROJECT_DIR).is_dir():
            return env_path

    path = (start or Path.cwd()).resolve()
    while path != path.parent:
        if (path / PROJECT_DIR).is_dir():
            return path
        path = path.parent
    return None


def get_root(require: bool = True) -> Path:
    """Get project root, raising if not found and require=True."""
    root = find_root()
    if not root and require:
        raise FileNotFoundError(
            "Not in a mailharvest project. Run 'mailharvest init' first."
        )
    return root or Path.cwd()


def get_config_path(root: Path | None = None) -> Path:
    """Get path to config.yaml."""
    root = root or get_root()
    return root / PROJECT_DIR / CONFIG_FILE


def _load_locale(data: dict) -> QuoteLocale:
    return QuoteLocale(
        name=str(data.get("name", "custom")),
        markers=tuple(str(m) for m in data.get("markers") or ()),
        headers=tuple(str(h) for h in data.get("headers") or ()),
    )


def load_config(root: Path | None = None) -> HarvestConfig:
    """Load config from config.yaml."""
    config_path = get_config_path(root)
    if not config_path.exists():
        return HarvestConfig()

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    accounts = {}
    for name, acct_data in (data.get("accounts") or {}).items():
        accounts[name] = AccountConfig(
            name=name,
            type=acct_data.get("type", "imap"),
            user=acct_data.get("user", ""),
            password=acct_data.get("password", ""),
            host=acct_data.get("host"),
            port=acct_data.get("port", 993),
        )

    return HarvestConfig(
        layout=data.get("layout", DEFAULT_LAYOUT),
        attachments_dir=data.get("attachments_dir", DEFAULT_ATTACHMENTS_DIR),
        sender=data.get("sender", ""),
        newer_than_days=data.get("newer_than_days", DEFAULT_NEWER_THAN_DAYS),
        max_results=data.get("max_results", DEFAULT_MAX_RESULTS),
        accounts=accounts,
        quote_locales=[_load_locale(d) for d in data.get("quote_locales") or []],
    )


def save_config(config: HarvestConfig, root: Path | None = None) -> None:
    """Save config to config.yaml."""
    config_path = get_config_path(root)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "layout": config.layout,
        "attachments_dir": config.attachments_dir,
        "newer_than_days": config.newer_than_days,
        "max_results": config.max_results,
    }
    if config.sender:
        data["sender"] = config.sender
    if config.accounts:
        data["accounts"] = {}
        for name, acct in config.accounts.items():
            acct_data = {
                "type": acct.type,
                "user": acct.user,
                "password": acct.password,
            }
            if acct.host:
                acct_data["host"] = acct.host
            if acct.port != 993:
                acct_data["port"] = acct.port
            data["accounts"][name] = acct_data
    if config.quote_locales:
        data["quote_locales"] = [
            {"name": loc.name, "markers": list(loc.markers), "headers": list(loc.headers)}
            for loc in config.quote_locales
        ]

    with open(config_path, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)


def get_account(name: str, root: Path | None = None) -> AccountConfig | None:
    """Get account by name from config."""
    config = load_config(root)
    return config.accounts.get(name)
