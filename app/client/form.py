"""Draft form state: one editable trade entry."""

import logging
from datetime import date
from typing import Awaitable, Callable

from app.services.journal.records import (
    DRAFT_FIELDS,
    Direction,
    Rating,
    TernaryFlag,
    TradeDraft,
    empty_draft,
)

logger = logging.getLogger(__name__)

TERNARY_FIELDS = ("discipline", "followed_rules")


class DraftForm:
    """Holds exactly one draft and the in-flight submission gate."""

    def __init__(self, today: Callable[[], date] = date.today) -> None:
        self._today = today
        self.draft: TradeDraft = empty_draft(self._today())
        self.submitting: bool = False

    def update_field(self, name: str, value) -> None:
        """Replace one field, keeping every other field as it is."""
        if name not in DRAFT_FIELDS:
            raise KeyError(f"Unknown draft field: {name}")
        setattr(self.draft, name, value)

    def set_direction(self, direction: Direction | str) -> None:
        self.update_field("direction", Direction(direction))

    def set_ternary_flag(self, name: str, flag: TernaryFlag | str) -> None:
        if name not in TERNARY_FIELDS:
            raise KeyError(f"Not a yes/no field: {name}")
        self.update_field(name, TernaryFlag(flag))

    def set_rating(self, rating: Rating | int) -> None:
        self.update_field("rating", Rating(rating))

    def reset(self) -> None:
        self.draft = empty_draft(self._today())

    async def submit(self, create: Callable[[TradeDraft], Awaitable[bool]]) -> bool:
        """Hand the draft to ``create``. A fresh draft replaces it only on success."""
        if self.submitting:
            return False
        self.submitting = True
        try:
            ok = await create(self.draft.model_copy())
        finally:
            self.submitting = False
        if ok:
            self.reset()
        else:
            logger.info("Submission failed, draft kept")
        return ok
