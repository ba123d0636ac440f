"""Database module for AthleteSignal."""

from .database import Database, get_db
from .models import DailyRecordRow, StoreEntry
from .goal_store import GoalStore
from .repository import DailyRecordRepository

__all__ = ["Database", "get_db", "DailyRecordRow", "StoreEntry", "GoalStore", "DailyRecordRepository"]
