"""Harvest attachments and video links from mail."""

from .attachments import AttachmentInfo, AttachmentStore
from .config import AccountConfig, HarvestConfig, load_config
from .extract import ExtractionResult, PartNode, extract_links, extract_parts, select_body, strip_quoted
from .harvest import HarvestedMessage, harvest, harvest_raw
from .imap import GmailClient, IMAPClient, SearchFilter

__all__ = [
    "AccountConfig",
    "AttachmentInfo",
    "AttachmentStore",
    "ExtractionResult",
    "GmailClient",
    "HarvestConfig",
    "HarvestedMessage",
    "IMAPClient",
    "PartNode",
    "SearchFilter",
    "extract_links",
    "extract_parts",
    "harvest",
    "harvest_raw",
    "load_config",
    "select_body",
    "strip_quoted",
]
