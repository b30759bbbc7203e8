"""Database module."""

from .database import get_db, init_db, make_engine, SessionLocal
from .models import Base, Golfer, Session, Solution, Points, Trophy

__all__ = [
    "get_db", "init_db", "make_engine", "SessionLocal",
    "Base", "Golfer", "Session", "Solution", "Points", "Trophy",
]
