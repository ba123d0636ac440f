"""Database models for daily records and the goal store."""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Float, Date, DateTime, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class DailyRecordRow(Base):
    """One merged day of run and wearable data."""

    __tablename__ = "daily_records"

    id = Column(Integer, primary_key=True)
    date = Column(Date, unique=True, nullable=False)
    distance = Column(Float, nullable=False, default=0.0)  # miles
    sleep_seconds = Column(Float)
    light_sleep_seconds = Column(Float)
    rem_sleep_seconds = Column(Float)
    deep_sleep_seconds = Column(Float)
    sleep_score = Column(Float)  # 0-100
    readiness_score = Column(Float)  # 0-100
    pace = Column(Float)  # min/mile
    heart_rate_avg = Column(Float)  # bpm
    heart_rate_max = Column(Float)  # bpm
    cadence = Column(Float)  # spm
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<DailyRecordRow(date={self.date}, distance={self.distance})>"


class StoreEntry(Base):
    """Opaque JSON blob stored under a key (goals, streaks, yearly plan)."""

    __tablename__ = "store_entries"

    id = Column(Integer, primary_key=True)
    key = Column(String(50), unique=True, nullable=False)
    value = Column(Text, nullable=False)  # JSON
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<StoreEntry(key={self.key}, updated_at={self.updated_at})>"
