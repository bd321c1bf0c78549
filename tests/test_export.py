"""Tests for CSV export."""

from datetime import datetime, timezone

import pytest

from app.client.export import save_csv
from app.services.journal.export import CSV_FILENAME, EmptyExportError, build_csv
from app.services.journal.records import TradeRecord

HEADER = "Date,Symbol,Type,Long/Short,Entry,Exit,P/L,Rating"


def make_record(**kwargs) -> TradeRecord:
    defaults = {
        "id": "r1",
        "owner_id": "u1",
        "created_at": datetime(2024, 1, 5, tzinfo=timezone.utc),
        "date": "2024-01-05",
        "symbol": "EURUSD",
        "direction": "Short",
        "entry": "1.0950",
        "exit": "1.0900",
        "profit_loss": "-50",
        "rating": 3,
    }
    defaults.update(kwargs)
    return TradeRecord(**defaults)


class TestBuildCsv:
    def test_worked_example(self):
        text = build_csv([make_record()])
        assert text == f"{HEADER}\n2024-01-05,EURUSD,,Short,1.0950,1.0900,-50,3\n"

    def test_n_records_give_n_plus_one_lines(self):
        records = [make_record(id=f"r{i}", symbol=f"SYM{i}") for i in range(7)]
        lines = build_csv(records).splitlines()
        assert len(lines) == 8
        assert lines[0] == HEADER

    def test_rows_follow_list_order(self):
        records = [make_record(id="b", symbol="GBPUSD"), make_record(id="a", symbol="USDJPY")]
        lines = build_csv(records).splitlines()
        assert lines[1].split(",")[1] == "GBPUSD"
        assert lines[2].split(",")[1] == "USDJPY"

    def test_order_type_fills_type_column(self):
        line = build_csv([make_record(order_type="Limit")]).splitlines()[1]
        assert line.split(",")[2] == "Limit"

    def test_fields_are_not_escaped(self):
        line = build_csv([make_record(symbol='EUR,"USD"')]).splitlines()[1]
        assert line.startswith('2024-01-05,EUR,"USD",')

    def test_unrated_exports_zero(self):
        line = build_csv([make_record(rating=0)]).splitlines()[1]
        assert line.endswith(",0")

    def test_empty_list_refused(self):
        with pytest.raises(EmptyExportError):
            build_csv([])


class TestSaveCsv:
    def test_writes_trade_records_csv(self, tmp_path):
        path = save_csv([make_record()], tmp_path)
        assert path == tmp_path / CSV_FILENAME
        assert path.read_text(encoding="utf-8").splitlines()[0] == HEADER

    def test_empty_writes_nothing(self, tmp_path):
        with pytest.raises(EmptyExportError):
            save_csv([], tmp_path)
        assert not (tmp_path / CSV_FILENAME).exists()
