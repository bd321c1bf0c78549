"""Presentational widgets. Each renders a value and forwards changes to a callback.

No widget keeps state of its own; the draft form is the single owner.
"""

from dataclasses import dataclass
from typing import Callable

from app.services.journal.records import Direction, Rating, TernaryFlag

FILLED_STAR = "★"
EMPTY_STAR = "☆"


def stars(rating: Rating | int) -> str:
    """Five-character star strip, e.g. 3 -> ★★★☆☆."""
    filled = int(Rating(rating))
    return FILLED_STAR * filled + EMPTY_STAR * (len(Rating) - 1 - filled)


def pnl_tone(profit_loss: str) -> str:
    """Display tone for a free-text P/L value.

    Heuristic only: any "-" means a loss. The value is never parsed.
    """
    if not profit_loss.strip():
        return "neutral"
    if "-" in profit_loss:
        return "negative"
    return "positive"


def direction_badge(direction: Direction | str) -> str:
    return Direction(direction).value


@dataclass
class SectionHeader:
    title: str
    subtitle: str = ""

    def render(self) -> str:
        line = f"== {self.title} =="
        return f"{line}\n{self.subtitle}" if self.subtitle else line


@dataclass
class FieldInput:
    """Labelled text input bound to one draft field."""

    label: str
    name: str
    value: str
    on_change: Callable[[str, str], None]
    multiline: bool = False

    def render(self) -> str:
        return f"{self.label}: {self.value}"

    def change(self, value: str) -> None:
        self.on_change(self.name, value)


@dataclass
class Toggle:
    """Y / N choice. Choosing the active option again clears it back to unset."""

    label: str
    name: str
    value: TernaryFlag
    on_change: Callable[[str, TernaryFlag], None]

    def render(self) -> str:
        marks = " ".join(
            f"[{flag.value}]" if flag == self.value else f" {flag.value} "
            for flag in (TernaryFlag.YES, TernaryFlag.NO)
        )
        return f"{self.label}: {marks}"

    def choose(self, flag: TernaryFlag | str) -> None:
        flag = TernaryFlag(flag)
        self.on_change(self.name, TernaryFlag.UNSET if flag == self.value else flag)


@dataclass
class StarRating:
    value: Rating
    on_change: Callable[[Rating], None]

    def render(self) -> str:
        return stars(self.value)

    def click(self, star: int) -> None:
        self.on_change(Rating(star))
