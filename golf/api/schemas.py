"""Pydantic schemas for API.

Field aliases keep the wire format the site's JavaScript expects.
"""

from datetime import timedelta
from typing import List, Optional
from pydantic import BaseModel, Field

from ..pipeline import Outcome
from ..ranks import RankSnapshot, RankUpdate


# Solution schemas
class SolutionIn(BaseModel):
    code: str = Field(..., alias="Code")
    hole: str = Field(..., alias="Hole")
    lang: str = Field(..., alias="Lang")

    class Config:
        populate_by_name = True


class RankSnapshotOut(BaseModel):
    strokes: Optional[int] = Field(None, alias="Strokes")
    rank: Optional[int] = Field(None, alias="Rank")
    joint: Optional[bool] = Field(None, alias="Joint")

    class Config:
        populate_by_name = True

    @classmethod
    def from_snapshot(cls, snapshot: RankSnapshot) -> "RankSnapshotOut":
        return cls(strokes=snapshot.strokes, rank=snapshot.rank, joint=snapshot.joint)


class RankUpdateOut(BaseModel):
    scoring: str = Field(..., alias="Scoring")
    from_: RankSnapshotOut = Field(..., alias="From")
    to: RankSnapshotOut = Field(..., alias="To")
    beat: Optional[int] = Field(None, alias="Beat")

    class Config:
        populate_by_name = True

    @classmethod
    def from_update(cls, update: RankUpdate) -> "RankUpdateOut":
        return cls(
            scoring=update.scoring.value,
            from_=RankSnapshotOut.from_snapshot(update.from_),
            to=RankSnapshotOut.from_snapshot(update.to),
            beat=update.beat,
        )


class SolutionOut(BaseModel):
    argv: List[str] = Field(..., alias="Argv")
    diff: str = Field(..., alias="Diff")
    err: str = Field(..., alias="Err")
    exp: str = Field(..., alias="Exp")
    out: str = Field(..., alias="Out")
    passed: bool = Field(..., alias="Pass")
    logged_in: bool = Field(..., alias="LoggedIn")
    rank_updates: List[RankUpdateOut] = Field(..., alias="RankUpdates")
    took: int = Field(..., alias="Took")  # Nanoseconds
    trophies: List[str] = Field(default_factory=list, alias="Trophies")

    class Config:
        populate_by_name = True

    @classmethod
    def from_outcome(cls, outcome: Outcome) -> "SolutionOut":
        return cls(
            argv=outcome.argv,
            diff=outcome.diff,
            err=outcome.err,
            exp=outcome.exp,
            out=outcome.out,
            passed=outcome.passed,
            logged_in=outcome.logged_in,
            rank_updates=[RankUpdateOut.from_update(u) for u in outcome.rank_updates],
            took=outcome.took // timedelta(microseconds=1) * 1000,
            trophies=outcome.trophies,
        )


# Catalogue schemas
class HoleInfo(BaseModel):
    id: str
    name: str
    category: str
    experimental: bool = False

    class Config:
        from_attributes = True


class LangInfo(BaseModel):
    id: str
    name: str

    class Config:
        from_attributes = True
