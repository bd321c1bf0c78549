"""Save the journal list as trade_records.csv."""

import logging
from pathlib import Path

from app.services.journal.export import CSV_FILENAME, build_csv
from app.services.journal.records import TradeRecord

logger = logging.getLogger(__name__)


def save_csv(records: list[TradeRecord], directory: Path) -> Path:
    """Write the CSV into ``directory``. Raises EmptyExportError when there is nothing to write."""
    content = build_csv(records)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / CSV_FILENAME
    path.write_text(content, encoding="utf-8", newline="")
    logger.info("Exported %d trade records to %s", len(records), path)
    return path
