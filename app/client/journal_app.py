"""Journal app: wires identity, live collection, draft form and export together.

Lifecycle::

    app = JournalApp(backend, ClientSettings())
    await app.start()        # resolve identity, open the live subscription
    app.form.update_field("symbol", "EURUSD")
    await app.submit()
    view = app.view()        # what a renderer should draw right now
    await app.close()        # release the subscription
"""

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from app.client.backend import JournalBackend
from app.client.collection import TradeCollection
from app.client.config import ClientSettings
from app.client.export import save_csv
from app.client.form import DraftForm
from app.client.session import SessionProvider
from app.client.widgets import (
    FieldInput,
    SectionHeader,
    StarRating,
    Toggle,
    direction_badge,
    pnl_tone,
    stars,
)
from app.services.journal.export import EmptyExportError
from app.services.journal.records import TradeRecord

logger = logging.getLogger(__name__)

EMPTY_EXPORT_NOTICE = "No trade records to export."

# (section title, [(label, field, multiline)])
FORM_LAYOUT = [
    ("Trade", [
        ("Date", "date", False),
        ("Symbol", "symbol", False),
        ("Position", "position", False),
        ("Time", "time", False),
        ("Lot Size", "lot_size", False),
        ("Order Type", "order_type", False),
    ]),
    ("Plan", [
        ("Strategy", "strategy", False),
        ("Chart Analysis", "chart_analysis", True),
    ]),
    ("Prices", [
        ("Entry", "entry", False),
        ("Stop Loss", "stop_loss", False),
        ("Exit", "exit", False),
        ("Take Profit", "take_profit", False),
        ("Risk/Reward", "risk_reward", False),
        ("P/L", "profit_loss", False),
    ]),
    ("Review", [
        ("Reason", "reason", True),
        ("Assumptions", "assumptions", True),
    ]),
]


@dataclass
class TradeRow:
    """One rendered list row."""

    id: str
    date: str
    symbol: str
    badge: str
    profit_loss: str
    pnl_tone: str
    stars: str
    record: TradeRecord


@dataclass
class JournalView:
    state: str  # resolving, signed_out, loading, empty, ready
    rows: list[TradeRow] = field(default_factory=list)
    submitting: bool = False
    notice: str = ""
    link_copied: bool = False


def _row(record: TradeRecord) -> TradeRow:
    return TradeRow(
        id=record.id,
        date=record.date,
        symbol=record.symbol,
        badge=direction_badge(record.direction),
        profit_loss=record.profit_loss,
        pnl_tone=pnl_tone(record.profit_loss),
        stars=stars(record.rating),
        record=record,
    )


class JournalApp:
    """Root of the client. Owns the subscription handle and releases it."""

    def __init__(
        self,
        backend: JournalBackend,
        config: ClientSettings,
        clipboard: Callable[[str], None] | None = None,
    ) -> None:
        self._config = config
        self._clipboard = clipboard
        self._ack_handle: asyncio.TimerHandle | None = None
        self.session = SessionProvider(backend, config.initial_auth_token)
        self.collection = TradeCollection(backend)
        self.form = DraftForm()
        self.notice: str = ""
        self.link_copied: bool = False

    async def start(self) -> None:
        identity = await self.session.start()
        await self.collection.attach(identity)

    async def switch_identity(self, token: str) -> None:
        """Sign in with another token; the old subscription is released first."""
        await self.collection.detach()
        identity = await self.session.sign_in_with_token(token)
        await self.collection.attach(identity)

    async def sign_out(self) -> None:
        await self.collection.detach()
        self.session.sign_out()

    def view(self) -> JournalView:
        if self.session.resolving:
            state = "resolving"
        elif self.session.identity is None:
            state = "signed_out"
        elif self.collection.loading:
            state = "loading"
        elif not self.collection.records:
            state = "empty"
        else:
            state = "ready"
        return JournalView(
            state=state,
            rows=[_row(r) for r in self.collection.records],
            submitting=self.form.submitting,
            notice=self.notice,
            link_copied=self.link_copied,
        )

    def form_widgets(self) -> list:
        """Widgets for the current draft, in display order."""
        draft = self.form.draft
        widgets: list = []
        for title, fields in FORM_LAYOUT:
            widgets.append(SectionHeader(title))
            for label, name, multiline in fields:
                widgets.append(
                    FieldInput(label, name, getattr(draft, name), self.form.update_field, multiline)
                )
        widgets.append(SectionHeader("Self-assessment"))
        widgets.append(Toggle("Disciplined", "discipline", draft.discipline, self.form.set_ternary_flag))
        widgets.append(
            Toggle("Followed rules", "followed_rules", draft.followed_rules, self.form.set_ternary_flag)
        )
        widgets.append(StarRating(draft.rating, self.form.set_rating))
        return widgets

    async def submit(self) -> bool:
        self.notice = ""
        return await self.form.submit(self.collection.create)

    async def delete(self, record_id: str, confirmed: bool) -> bool:
        return await self.collection.delete(record_id, confirmed)

    def export(self, directory: Path | None = None) -> Path | None:
        """Save the current list as CSV. An empty list only sets a notice."""
        try:
            path = save_csv(self.collection.records, directory or self._config.download_dir)
        except EmptyExportError:
            self.notice = EMPTY_EXPORT_NOTICE
            return None
        self.notice = ""
        return path

    def copy_share_link(self, url: str) -> bool:
        """Copy ``url`` and show the acknowledgement for a short while."""
        if self._clipboard is None:
            logger.warning("No clipboard available")
            return False
        try:
            self._clipboard(url)
        except Exception as e:
            logger.error("Copy to clipboard failed: %s", e)
            return False
        self.link_copied = True
        if self._ack_handle is not None:
            self._ack_handle.cancel()
        self._ack_handle = asyncio.get_running_loop().call_later(
            self._config.copy_ack_seconds, self._clear_link_copied
        )
        return True

    def _clear_link_copied(self) -> None:
        self.link_copied = False
        self._ack_handle = None

    async def close(self) -> None:
        if self._ack_handle is not None:
            self._ack_handle.cancel()
            self._ack_handle = None
        await self.collection.close()
