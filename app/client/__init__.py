"""Headless journal client: session, live collection, draft form, widgets."""

from app.client.backend import HttpJournalBackend, JournalBackend, LocalJournalBackend
from app.client.config import ClientSettings
from app.client.journal_app import JournalApp, JournalView

__all__ = [
    "ClientSettings",
    "HttpJournalBackend",
    "JournalApp",
    "JournalBackend",
    "JournalView",
    "LocalJournalBackend",
]
