"""SQLAlchemy models for Code Golf."""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Boolean, Index, UniqueConstraint
from sqlalchemy.orm import relationship, declarative_base

Base = declarative_base()


class Golfer(Base):
    """A golfer competing on the leaderboards."""
    
    __tablename__ = "golfers"
    
    id = Column(Integer, primary_key=True)
    name = Column(String(64), nullable=False, unique=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    
    solutions = relationship("Solution", back_populates="golfer")
    trophies = relationship("Trophy", back_populates="golfer")
    
    def __repr__(self):
        return f"<Golfer {self.name}>"


class Session(Base):
    """A logged-in browser session."""
    
    __tablename__ = "sessions"
    
    id = Column(String(36), primary_key=True)  # UUID, stored in the session cookie
    golfer_id = Column(Integer, ForeignKey("golfers.id"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    
    golfer = relationship("Golfer")


class Solution(Base):
    """A golfer's best solution for one hole, language and scoring."""
    
    __tablename__ = "solutions"
    
    id = Column(Integer, primary_key=True)
    golfer_id = Column(Integer, ForeignKey("golfers.id"), nullable=False)
    hole = Column(String(64), nullable=False)
    lang = Column(String(64), nullable=False)
    scoring = Column(String(8), nullable=False)  # bytes, chars
    
    code = Column(Text, nullable=False)
    strokes = Column(Integer, nullable=False)  # Lower is better
    failing = Column(Boolean, default=False, nullable=False)
    submitted = Column(DateTime, default=datetime.utcnow)
    
    golfer = relationship("Golfer", back_populates="solutions")
    
    __table_args__ = (
        UniqueConstraint("golfer_id", "hole", "lang", "scoring", name="uq_solutions_golfer_hole_lang_scoring"),
        Index("ix_solutions_hole_lang_scoring_strokes", "hole", "lang", "scoring", "strokes"),
    )
    
    def __repr__(self):
        return f"<Solution {self.hole}/{self.lang}/{self.scoring} strokes={self.strokes}>"


class Points(Base):
    """Precomputed points total per golfer and scoring."""
    
    __tablename__ = "points"
    
    golfer_id = Column(Integer, ForeignKey("golfers.id"), primary_key=True)
    scoring = Column(String(8), primary_key=True)
    points = Column(Integer, nullable=False, default=0)


class Trophy(Base):
    """A trophy earned by a golfer. Granted at most once per golfer."""
    
    __tablename__ = "trophies"
    
    id = Column(Integer, primary_key=True)
    golfer_id = Column(Integer, ForeignKey("golfers.id"), nullable=False)
    trophy = Column(String(64), nullable=False)
    earned = Column(DateTime, default=datetime.utcnow)
    
    golfer = relationship("Golfer", back_populates="trophies")
    
    __table_args__ = (
        UniqueConstraint("golfer_id", "trophy", name="uq_trophies_golfer_trophy"),
    )
    
    def __repr__(self):
        return f"<Trophy {self.trophy} golfer={self.golfer_id}>"
