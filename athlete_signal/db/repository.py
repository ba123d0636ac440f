"""Daily record storage and CSV import."""

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional

import pandas as pd

from ..analysis.records import DailyRecord, materialize_range
from .database import Database, get_db
from .models import DailyRecordRow

logger = logging.getLogger(__name__)

RECORD_COLUMNS = [
    "distance",
    "sleep_seconds",
    "light_sleep_seconds",
    "rem_sleep_seconds",
    "deep_sleep_seconds",
    "sleep_score",
    "readiness_score",
    "pace",
    "heart_rate_avg",
    "heart_rate_max",
    "cadence",
]


def _csv_value(value):
    """Convert a pandas cell to a plain Python value (NaN becomes None)."""
    if pd.isna(value):
        return None
    if hasattr(value, "item"):
        return value.item()
    return value


def _row_to_record(row: DailyRecordRow) -> DailyRecord:
    return DailyRecord(date=row.date, **{column: getattr(row, column) for column in RECORD_COLUMNS})


class DailyRecordRepository:
    """Read and write merged daily records."""

    def __init__(self, db: Optional[Database] = None):
        self.db = db or get_db()

    def upsert(self, records: Iterable[DailyRecord]) -> Dict[str, int]:
        """Insert new days and overwrite existing ones."""
        results = {"inserted": 0, "updated": 0}
        with self.db.get_session() as session:
            for record in records:
                values = {column: getattr(record, column) for column in RECORD_COLUMNS}
                row = session.query(DailyRecordRow).filter_by(date=record.date).first()
                if row is None:
                    session.add(DailyRecordRow(date=record.date, **values))
                    session.flush()
                    results["inserted"] += 1
                else:
                    for column, value in values.items():
                        setattr(row, column, value)
                    results["updated"] += 1
        return results

    def fetch(self, start: Optional[date] = None, end: Optional[date] = None) -> List[DailyRecord]:
        """Records for [start, end] with every calendar day present.

        Padding starts at the first stored record, so an empty table yields an
        empty list.
        """
        with self.db.get_session() as session:
            query = session.query(DailyRecordRow)
            if start is not None:
                query = query.filter(DailyRecordRow.date >= start)
            if end is not None:
                query = query.filter(DailyRecordRow.date <= end)
            records = [_row_to_record(row) for row in query.order_by(DailyRecordRow.date).all()]

        if not records:
            return []
        # Never pad days before the first stored record.
        start = max(start, records[0].date) if start is not None else None
        return materialize_range(records, start, end)

    def latest_date(self) -> Optional[date]:
        with self.db.get_session() as session:
            row = session.query(DailyRecordRow).order_by(DailyRecordRow.date.desc()).first()
            return row.date if row else None

    def import_csv(self, csv_path: str) -> Dict[str, int]:
        """Import daily records from a CSV with a ``date`` column.

        Unknown columns are ignored; rows that fail to parse are skipped. When a
        date appears more than once the last row wins.
        """
        df = pd.read_csv(csv_path)
        df.columns = [column.strip() for column in df.columns]
        if "date" not in df.columns:
            raise ValueError(f"{csv_path} has no 'date' column")

        records = {}
        skipped = 0
        duplicates = 0
        for row in df.to_dict(orient="records"):
            values = {key: _csv_value(value) for key, value in row.items()}
            try:
                record = DailyRecord.from_dict(values)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping row {values.get('date')}: {e}")
                skipped += 1
                continue
            if record.date in records:
                logger.warning(f"Duplicate row for {record.date}, keeping the later one")
                duplicates += 1
            records[record.date] = record

        results = self.upsert(records.values())
        results["skipped"] = skipped
        results["duplicates"] = duplicates
        logger.info(f"Imported {len(records)} daily records from {csv_path}")
        return results
